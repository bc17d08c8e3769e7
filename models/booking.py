# models/booking.py
from datetime import datetime
from enum import Enum
from pydantic import BaseModel, Field
from typing import Dict, List, Optional


class BookingStatus(str, Enum):
    pending = "pending"
    confirmed = "confirmed"
    completed = "completed"
    cancelled = "cancelled"


class PaymentStatus(str, Enum):
    unpaid = "unpaid"
    partial = "partial payment"
    paid = "paid"
    complete = "complete"


class PaymentOption(str, Enum):
    full = "full"
    deposit = "deposit"


# Forward-only; completed and cancelled are terminal.
ALLOWED_TRANSITIONS = {
    BookingStatus.pending.value: {BookingStatus.confirmed.value, BookingStatus.cancelled.value},
    BookingStatus.confirmed.value: {BookingStatus.completed.value},
    BookingStatus.completed.value: set(),
    BookingStatus.cancelled.value: set(),
}

OPEN_STATUSES = [BookingStatus.pending.value, BookingStatus.confirmed.value]


def can_transition(current: str, new: str) -> bool:
    return new in ALLOWED_TRANSITIONS.get(current, set())


class Pilgrim(BaseModel):
    first_name: str
    last_name: str
    email: str
    phone: Optional[str] = None
    passport_number: Optional[str] = None
    gender: Optional[str] = None


class GroupMember(BaseModel):
    name: str
    email: str
    phone: Optional[str] = None


class PackageSnapshot(BaseModel):
    """Package fields frozen into a booking when payment starts."""
    package_id: str
    title: str
    price: int
    min_payment_percent: Optional[float] = None
    agency_id: Optional[str] = None
    agency_name: Optional[str] = None
    package_type: Optional[str] = None
    duration: Optional[int] = None
    location: Optional[str] = None
    departure_date: Optional[datetime] = None
    return_date: Optional[datetime] = None


class BookingDraft(BaseModel):
    package: PackageSnapshot
    payment_option: PaymentOption = PaymentOption.full
    user_id: str
    user_email: str
    user_name: str
    user_phone: Optional[str] = None
    passport_number: Optional[str] = None
    pilgrims: List[Pilgrim] = []
    group_members: List[GroupMember] = []

    class Config:
        use_enum_values = True


class CheckoutRequest(BaseModel):
    package_id: str
    payment_option: PaymentOption = PaymentOption.full
    user_name: str
    user_email: Optional[str] = None     # default: email of the logged-in user
    user_phone: Optional[str] = None
    passport_number: Optional[str] = None
    pilgrims: List[Pilgrim] = []
    group_members: List[GroupMember] = []

    class Config:
        use_enum_values = True


class ServiceRequest(BaseModel):
    """Custom itinerary intake; priced later by an agent."""
    package_type: str = "Umrah"
    selected_package: Optional[str] = None
    is_group_booking: bool = False
    pilgrims: List[Pilgrim]
    departure_city: Optional[str] = None
    departure_date: datetime
    return_date: Optional[datetime] = None
    preferred_itinerary: List[str] = []
    selected_services: Dict[str, str] = {}   # category -> tier
    is_creating_group: bool = False
    group_members: List[GroupMember] = []
    notes: Optional[str] = None


class BookingStatusUpdate(BaseModel):
    status: BookingStatus

    class Config:
        use_enum_values = True


class BookingPaymentUpdate(BaseModel):
    payment_status: PaymentStatus
    amount_paid: int = Field(..., ge=0)

    class Config:
        use_enum_values = True
