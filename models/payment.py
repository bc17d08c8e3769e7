# models/payment.py
from enum import Enum
from pydantic import BaseModel, Field
from typing import Optional


class PaymentRecordStatus(str, Enum):
    pending = "pending"
    confirmed = "confirmed"


class IntentStatus(str, Enum):
    initiated = "initiated"
    cancelled = "cancelled"
    failed = "failed"
    completed = "completed"
    reconciliation_required = "reconciliation_required"


class ManualPaymentCreate(BaseModel):
    amount: int = Field(..., gt=0)
    reference: Optional[str] = None
    method: str = "bank_transfer"


class PaymentConfirm(BaseModel):
    booking_id: str
