# models/agency.py
from pydantic import BaseModel, Field
from typing import Optional

class AgencyCreate(BaseModel):
    agency_name: str = Field(..., min_length=1)
    email: str = Field(..., min_length=3)
    password: str = Field(..., min_length=6)
    phone_number: Optional[str] = None
    city_of_operation: Optional[str] = None
    country_of_operation: Optional[str] = None
    address: Optional[str] = None
    description: Optional[str] = None
    website: Optional[str] = None

class VerificationUpdate(BaseModel):
    verified: bool
