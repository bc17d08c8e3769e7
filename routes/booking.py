# routes/booking.py
from fastapi import APIRouter, Depends, Query
from pymongo.database import Database
from typing import List, Optional

from database import get_db
from models.booking import BookingPaymentUpdate, BookingStatusUpdate, CheckoutRequest, ServiceRequest
from services import booking_workflow
from utils.auth import get_current_staff, get_current_user, get_current_user_admin
from utils.errors import ForbiddenError
from utils.paystack import get_gateway

router = APIRouter()


# === POST: Start checkout for a package (pilgrim) ===
# Nothing is booked here; the booking is written by the payment callback.
@router.post("/checkout", response_model=dict)
def start_checkout(
    checkout_in: CheckoutRequest,
    current_user=Depends(get_current_user),
    gateway=Depends(get_gateway),
    db: Database = Depends(get_db),
):
    if current_user["role"] != "pilgrim":
        raise ForbiddenError("Only pilgrims can book packages")
    return booking_workflow.start_checkout(db, gateway, checkout_in, current_user)


# === POST: Custom services request (unpaid) ===
@router.post("/requests", response_model=dict, status_code=201)
def create_service_request(
    request_in: ServiceRequest,
    current_user=Depends(get_current_user),
    db: Database = Depends(get_db),
):
    return booking_workflow.create_unpaid_booking(db, request_in, current_user)


# === GET: Bookings visible to the caller ===
@router.get("/", response_model=List[dict])
def list_bookings(
    status: Optional[str] = Query(None, pattern="^(pending|confirmed|completed|cancelled)$"),
    payment_status: Optional[str] = Query(None),
    package_id: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    sort_by: str = Query("created_at"),
    order: str = Query("desc", pattern="^(asc|desc)$"),
    current_user=Depends(get_current_user),
    db: Database = Depends(get_db),
):
    return booking_workflow.list_bookings(db, current_user, status=status, payment_status=payment_status,
                                          package_id=package_id, search=search, sort_by=sort_by, order=order)


@router.get("/{booking_id}", response_model=dict)
def get_booking(booking_id: str, current_user=Depends(get_current_user), db: Database = Depends(get_db)):
    return booking_workflow.get_booking(db, booking_id, current_user)


# === PUT: Update booking status (agency for own bookings, admin) ===
@router.put("/{booking_id}/status", response_model=dict)
def update_booking_status(
    booking_id: str,
    body: BookingStatusUpdate,
    current_user=Depends(get_current_staff),
    db: Database = Depends(get_db),
):
    return booking_workflow.update_booking_status(db, booking_id, body.status, current_user)


# === PUT: Correct payment status / amount (ADMIN ONLY) ===
@router.put("/{booking_id}/payment", response_model=dict)
def update_booking_payment(
    booking_id: str,
    body: BookingPaymentUpdate,
    current_admin=Depends(get_current_user_admin),
    db: Database = Depends(get_db),
):
    return booking_workflow.update_booking_payment(db, booking_id, body.payment_status, body.amount_paid)


# === DELETE: Hard delete (ADMIN ONLY) ===
@router.delete("/{booking_id}")
def delete_booking(booking_id: str, current_admin=Depends(get_current_user_admin), db: Database = Depends(get_db)):
    booking_workflow.delete_booking(db, booking_id)
    return {"message": "Booking deleted"}
