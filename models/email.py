# models/email.py
from pydantic import BaseModel, Field
from typing import List, Optional, Union


class EmailSend(BaseModel):
    to: Union[str, List[str]]
    subject: str = Field(..., min_length=1)
    text: Optional[str] = None
    html: Optional[str] = None

    def recipients(self) -> List[str]:
        items = [self.to] if isinstance(self.to, str) else self.to
        return [r.strip() for r in items if r and r.strip()]
