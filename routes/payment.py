# routes/payment.py
from fastapi import APIRouter, Depends, Query
from pymongo.database import Database
from typing import List, Optional

from database import get_db
from models.payment import ManualPaymentCreate, PaymentConfirm
from services import booking_workflow
from utils.auth import get_current_user, get_current_user_admin
from utils.paystack import get_gateway

router = APIRouter()


# === GET: Gateway success callback ===
# Paystack redirects here with ?reference=...&trxref=...
@router.get("/callback", response_model=dict)
def payment_callback(
    reference: Optional[str] = Query(None),
    trxref: Optional[str] = Query(None),
    gateway=Depends(get_gateway),
    db: Database = Depends(get_db),
):
    booking = booking_workflow.complete_checkout(db, gateway, reference or trxref or "")
    if booking.get("cancel_reason") == "agency_deleted":
        return {"message": "Payment received but the agency is no longer active, a refund will follow",
                "booking": booking}
    return {"message": "Payment successful, booking created", "booking": booking}


# === POST: Checkout closed without paying ===
@router.post("/{reference}/cancel", response_model=dict)
def payment_cancelled(reference: str, current_user=Depends(get_current_user), db: Database = Depends(get_db)):
    return booking_workflow.on_payment_cancelled(db, reference, current_user)


# === POST: Report a bank transfer for a booking ===
@router.post("/manual/{booking_id}", response_model=dict, status_code=201)
def record_manual_payment(
    booking_id: str,
    payment_in: ManualPaymentCreate,
    current_user=Depends(get_current_user),
    db: Database = Depends(get_db),
):
    return booking_workflow.record_manual_payment(db, booking_id, payment_in, current_user)


# === PUT: Confirm a pending payment (ADMIN ONLY) ===
@router.put("/{payment_id}/confirm", response_model=dict)
def confirm_payment(
    payment_id: str,
    body: PaymentConfirm,
    current_admin=Depends(get_current_user_admin),
    db: Database = Depends(get_db),
):
    return booking_workflow.confirm_payment(db, payment_id, body.booking_id)


@router.get("/", response_model=List[dict])
def list_payments(
    status: Optional[str] = Query(None, pattern="^(pending|confirmed)$"),
    current_user=Depends(get_current_user),
    db: Database = Depends(get_db),
):
    return booking_workflow.list_payments(db, current_user, status=status)


# === GET: Checkout records, e.g. captures still waiting for a booking (ADMIN ONLY) ===
@router.get("/intents", response_model=List[dict])
def list_payment_intents(
    status: Optional[str] = Query(None),
    current_admin=Depends(get_current_user_admin),
    db: Database = Depends(get_db),
):
    return booking_workflow.list_intents(db, status=status)
