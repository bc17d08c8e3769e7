# models/user.py

from pydantic import BaseModel, Field
from typing import Optional

class UserCreate(BaseModel):
    name: str = Field(..., min_length=1)
    email: str = Field(..., min_length=3)
    password: str = Field(..., min_length=6)
    phone: Optional[str] = None
    passport_number: Optional[str] = None

class UserUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    password: Optional[str] = Field(None, min_length=6)
    phone: Optional[str] = None
    passport_number: Optional[str] = None

class UserLogin(BaseModel):
    email: str
    password: str

class UserOut(BaseModel):
    id: str
    name: str
    email: str
    role: str = "pilgrim"

class ProfileUpdate(BaseModel):
    # Self-service fields only; role, verified and deletion_state are never accepted
    name: Optional[str] = Field(None, min_length=1)
    password: Optional[str] = Field(None, min_length=6)
    phone: Optional[str] = None
    passport_number: Optional[str] = None
    agency_name: Optional[str] = Field(None, min_length=1)
    phone_number: Optional[str] = None
    city_of_operation: Optional[str] = None
    country_of_operation: Optional[str] = None
    address: Optional[str] = None
    description: Optional[str] = None
    website: Optional[str] = None

AGENCY_PROFILE_FIELDS = {"agency_name", "phone_number", "city_of_operation", "country_of_operation",
                         "address", "description", "website", "password"}
PILGRIM_PROFILE_FIELDS = {"name", "phone", "passport_number", "password"}
