# models/package.py
from datetime import datetime
from enum import Enum
from pydantic import BaseModel, Field
from typing import List, Optional


class PackageStatus(str, Enum):
    draft = "draft"
    active = "active"
    archived = "archived"


class ItineraryItem(BaseModel):
    day_range: str                      # e.g. "Day 1-3"
    title: str
    description: Optional[str] = None
    location: Optional[str] = None


class PackageCreate(BaseModel):
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    price: int = Field(..., ge=0)       # whole currency units (NGN)
    duration: int = Field(..., gt=0)    # days
    group_size: Optional[int] = Field(None, gt=0)
    package_type: str = "Umrah"         # Hajj / Umrah / Other
    status: PackageStatus = PackageStatus.draft
    inclusions: List[str] = []
    exclusions: List[str] = []
    itinerary: List[ItineraryItem] = []
    min_payment_percent: Optional[float] = Field(None, ge=0, le=100)
    image_url: Optional[str] = None
    location: Optional[str] = None
    departure_date: Optional[datetime] = None
    return_date: Optional[datetime] = None
    agency_id: Optional[str] = None     # admin only: assign to an agency

    class Config:
        use_enum_values = True


class PackageUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    price: Optional[int] = Field(None, ge=0)
    duration: Optional[int] = Field(None, gt=0)
    group_size: Optional[int] = Field(None, gt=0)
    package_type: Optional[str] = None
    status: Optional[PackageStatus] = None
    inclusions: Optional[List[str]] = None
    exclusions: Optional[List[str]] = None
    itinerary: Optional[List[ItineraryItem]] = None
    min_payment_percent: Optional[float] = Field(None, ge=0, le=100)
    image_url: Optional[str] = None
    location: Optional[str] = None
    departure_date: Optional[datetime] = None
    return_date: Optional[datetime] = None

    class Config:
        use_enum_values = True


class PackageStatusUpdate(BaseModel):
    status: PackageStatus

    class Config:
        use_enum_values = True
