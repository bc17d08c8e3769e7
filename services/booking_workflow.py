# services/booking_workflow.py
"""Booking & payment workflow.

A booking that claims payment is only ever written after the gateway
reports a successful capture. To close the gap between "money captured" and
"booking written", every checkout first records a ``payment_intents``
document keyed by the gateway reference. The intent carries the booking
draft and the package snapshot that priced it, and its status tells an
operator which captures still need a booking (``reconciliation_required``).

Amounts are whole naira everywhere except at the gateway boundary, where
they are converted to kobo.
"""
import logging
from datetime import datetime, timedelta, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional

from bson import ObjectId
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError, PyMongoError

import config
from models.booking import (
    BookingDraft,
    BookingStatus,
    CheckoutRequest,
    OPEN_STATUSES,
    PackageSnapshot,
    PaymentOption,
    PaymentStatus,
    ServiceRequest,
    can_transition,
)
from models.package import PackageStatus
from models.payment import IntentStatus, ManualPaymentCreate, PaymentRecordStatus
from services.agency_lifecycle import DELETING
from services.catalog import get_package_doc
from utils import errors, mailer, notify
from utils.filters import build_booking_query, sort_spec
from utils.serialize import optional_object_id, serialize_doc, to_object_id

logger = logging.getLogger(__name__)

BOOKING_SORT_FIELDS = ("created_at", "total_price", "amount_paid", "departure_date", "travel_date")


# === Amounts ===

def compute_deposit(total_price: int, min_payment_percent) -> int:
    """round(total_price * pct / 100), ties rounded half-up."""
    value = Decimal(total_price) * Decimal(str(min_payment_percent)) / Decimal(100)
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def amount_due(price: int, min_payment_percent, payment_option: str) -> int:
    if PaymentOption(payment_option) == PaymentOption.full:
        return price
    if not min_payment_percent or min_payment_percent <= 0:
        raise errors.ValidationError("This package does not accept deposit payments")
    deposit = compute_deposit(price, min_payment_percent)
    if deposit <= 0:
        raise errors.ValidationError("Deposit for this package rounds to zero, pay in full instead")
    return deposit


def _naive_utc(value: datetime) -> datetime:
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.replace(tzinfo=None)


def to_minor_units(amount: int) -> int:
    return int(amount) * 100


def generate_reference() -> str:
    return f"MUT-{datetime.utcnow().strftime('%Y%m%d')}-{str(ObjectId())[-8:]}".upper()


def _validate_draft(draft: BookingDraft) -> None:
    if not draft.user_name or not draft.user_name.strip():
        raise errors.ValidationError("Traveler name is required")
    if not draft.user_email or not draft.user_email.strip():
        raise errors.ValidationError("Traveler email is required")
    if draft.package.price is None or draft.package.price <= 0:
        raise errors.ValidationError("Package price must be greater than zero")
    for pilgrim in draft.pilgrims:
        if not pilgrim.first_name.strip() or not pilgrim.last_name.strip():
            raise errors.ValidationError("Every pilgrim needs a first and last name")


def agency_gone(db: Database, agency_id) -> bool:
    """True when the owning agency was removed or is being deleted."""
    if not agency_id:
        return False
    oid = optional_object_id(agency_id, "agency_id")
    agency = db.users.find_one({"_id": oid, "role": "agency"}, {"deletion_state": 1})
    return agency is None or agency.get("deletion_state") == DELETING


def snapshot_package(pkg: dict) -> PackageSnapshot:
    return PackageSnapshot(
        package_id=str(pkg["_id"]),
        title=pkg.get("title") or "Hajj/Umrah Package",
        price=pkg.get("price") or 0,
        min_payment_percent=pkg.get("min_payment_percent"),
        agency_id=str(pkg["agency_id"]) if pkg.get("agency_id") else None,
        agency_name=pkg.get("agency_name"),
        package_type=pkg.get("package_type"),
        duration=pkg.get("duration"),
        location=pkg.get("location") or "Makkah & Madinah",
        departure_date=pkg.get("departure_date"),
        return_date=pkg.get("return_date"),
    )


# === Payment gateway ===

def initiate_payment(gateway, amount_minor_units: int, payer_email: str, metadata: dict,
                     reference: Optional[str] = None) -> dict:
    """Open a hosted checkout. Persists nothing; returns reference + checkout URL."""
    if isinstance(amount_minor_units, bool) or not isinstance(amount_minor_units, int) or amount_minor_units <= 0:
        raise errors.ValidationError("Payment amount must be a positive whole number of kobo")
    if not payer_email or not payer_email.strip():
        raise errors.ValidationError("Email is required for payment")

    data = gateway.initialize_transaction(
        email=payer_email.strip(),
        amount=amount_minor_units,
        reference=reference or generate_reference(),
        metadata=metadata,
        currency=config.PAYSTACK_CURRENCY,
        callback_url=config.PAYSTACK_CALLBACK_URL,
    )
    if not data.get("reference"):
        raise errors.PaymentInfrastructureError("Payment gateway returned no reference")
    return {
        "reference": data["reference"],
        "authorization_url": data.get("authorization_url"),
        "access_code": data.get("access_code"),
    }


def start_checkout(db: Database, gateway, request: CheckoutRequest, user: dict) -> dict:
    pkg = get_package_doc(db, request.package_id)
    if pkg.get("status") != PackageStatus.active.value or not pkg.get("price") or pkg["price"] <= 0:
        raise errors.ValidationError("This package is not available for booking")
    if agency_gone(db, pkg.get("agency_id")):
        raise errors.ValidationError("This agency is no longer accepting bookings")

    draft = BookingDraft(
        package=snapshot_package(pkg),
        payment_option=request.payment_option,
        user_id=str(user["_id"]),
        user_email=(request.user_email or user.get("email") or "").strip(),
        user_name=request.user_name,
        user_phone=request.user_phone or user.get("phone"),
        passport_number=request.passport_number or user.get("passport_number"),
        pilgrims=request.pilgrims,
        group_members=request.group_members,
    )
    _validate_draft(draft)
    amount = amount_due(draft.package.price, draft.package.min_payment_percent, draft.payment_option)

    # Reconciliation record first, gateway second
    reference = generate_reference()
    now = datetime.utcnow()
    db.payment_intents.insert_one({
        "reference": reference,
        "status": IntentStatus.initiated.value,
        "amount": amount,
        "amount_minor": to_minor_units(amount),
        "currency": config.PAYSTACK_CURRENCY,
        "draft": draft.model_dump(),
        "user_id": user["_id"],
        "created_at": now,
        "updated_at": now,
    })

    metadata = {
        "package_id": draft.package.package_id,
        "package_title": draft.package.title,
        "user_id": draft.user_id,
        "agency_id": draft.package.agency_id,
        "payment_option": PaymentOption(draft.payment_option).value,
    }
    try:
        checkout = initiate_payment(gateway, to_minor_units(amount), draft.user_email, metadata, reference)
    except errors.PaymentInfrastructureError as exc:
        db.payment_intents.update_one(
            {"reference": reference},
            {"$set": {"status": IntentStatus.failed.value, "error": exc.detail, "updated_at": datetime.utcnow()}},
        )
        raise

    db.payment_intents.update_one(
        {"reference": reference},
        {"$set": {
            "authorization_url": checkout["authorization_url"],
            "access_code": checkout["access_code"],
            "updated_at": datetime.utcnow(),
        }},
    )
    logger.info("Checkout %s started for package %s (%s, %s)",
                reference, draft.package.package_id, draft.payment_option, amount)
    return {**checkout, "amount": amount, "payment_option": PaymentOption(draft.payment_option).value}


def on_payment_success(db: Database, external_reference: str, draft: BookingDraft,
                       cancel_reason: Optional[str] = None) -> dict:
    """Write the booking for a captured payment.

    With ``cancel_reason`` the booking is recorded already cancelled, so the
    captured money stays visible for a refund.
    """
    if not external_reference or not external_reference.strip():
        raise errors.ValidationError("Payment reference is required")
    _validate_draft(draft)

    option = PaymentOption(draft.payment_option)
    total_price = draft.package.price
    amount_paid = amount_due(total_price, draft.package.min_payment_percent, option)
    is_deposit = option == PaymentOption.deposit
    if cancel_reason:
        status = BookingStatus.cancelled.value
    else:
        status = BookingStatus.pending.value if is_deposit else BookingStatus.confirmed.value

    existing = db.bookings.find_one({"payment_reference": external_reference}, {"_id": 1})
    if existing:
        raise errors.DuplicatePaymentError(external_reference, str(existing["_id"]))

    now = datetime.utcnow()
    pkg = draft.package
    doc = {
        "package_id": optional_object_id(pkg.package_id, "package_id"),
        "package_title": pkg.title,
        "package_type": pkg.package_type,
        "agency_id": optional_object_id(pkg.agency_id, "agency_id"),
        "agency_name": pkg.agency_name,
        "user_id": optional_object_id(draft.user_id, "user_id"),
        "user_email": draft.user_email,
        "user_name": draft.user_name.strip(),
        "user_phone": draft.user_phone,
        "passport_number": draft.passport_number,
        "total_price": total_price,
        "amount_paid": amount_paid,
        "deposit_amount": amount_paid if is_deposit else None,
        "min_payment_percent": pkg.min_payment_percent,
        "is_deposit": is_deposit,
        "payment_option": option.value,
        "status": status,
        "payment_status": PaymentStatus.partial.value if is_deposit else PaymentStatus.paid.value,
        "payment_reference": external_reference,
        "payment_date": now,
        "departure_date": pkg.departure_date,
        "return_date": pkg.return_date,
        "duration": pkg.duration,
        "location": pkg.location,
        "pilgrims": [p.model_dump() for p in draft.pilgrims],
        "group_members": [m.model_dump() for m in draft.group_members],
        "created_at": now,
        "updated_at": now,
    }
    if cancel_reason:
        doc["cancel_reason"] = cancel_reason
    try:
        result = db.bookings.insert_one(doc)
    except DuplicateKeyError:
        raise errors.DuplicatePaymentError(external_reference)
    except PyMongoError as exc:
        logger.error("Payment %s captured but booking write failed: %s", external_reference, exc)
        raise errors.BookingPersistenceError(external_reference) from exc
    doc["_id"] = result.inserted_id
    logger.info("Booking %s created from payment %s (%s)", result.inserted_id, external_reference, option.value)

    # Audit row; the booking is already the source of truth
    try:
        db.payments.insert_one({
            "reference": external_reference,
            "booking_id": result.inserted_id,
            "amount": amount_paid,
            "status": PaymentRecordStatus.confirmed.value,
            "method": "paystack",
            "pilgrim_name": doc["user_name"],
            "pilgrim_email": draft.user_email,
            "user_id": doc["user_id"],
            "agency_id": doc["agency_id"],
            "date": now,
            "confirmed_at": now,
        })
    except PyMongoError:
        logger.exception("Could not record payment row for %s", external_reference)

    notify.notify(
        "payment",
        "Payment Notification",
        f"A pilgrim paid for '{pkg.title}'.",
        notify.GREEN,
        [
            notify.field("Status", doc["payment_status"]),
            notify.field("User", doc["user_name"]),
            notify.field("Email", draft.user_email),
            notify.field("Package ID", pkg.package_id),
            notify.field("Package Title", pkg.title),
            notify.field("Amount", notify.format_naira(amount_paid)),
            notify.field("Reference", external_reference, inline=False),
        ],
    )
    mailer.send_payment_success(draft.user_email, doc["user_name"], str(result.inserted_id), amount_paid, pkg.title)
    if status == BookingStatus.confirmed.value:
        mailer.send_booking_confirmation(draft.user_email, doc["user_name"], pkg.title)
    return serialize_doc(doc)


def complete_checkout(db: Database, gateway, reference: str, verify: Optional[bool] = None) -> dict:
    """Success callback: verify the capture, then turn the intent into a booking."""
    if not reference or not reference.strip():
        raise errors.ValidationError("Payment reference is required")
    intent = db.payment_intents.find_one({"reference": reference})
    if not intent:
        raise errors.NotFoundError(f"Payment {reference} not found")
    if intent["status"] == IntentStatus.completed.value:
        raise errors.DuplicatePaymentError(reference, str(intent.get("booking_id")))

    if config.PAYSTACK_VERIFY_PAYMENTS if verify is None else verify:
        tx = gateway.verify_transaction(reference)
        if tx.get("status") != "success":
            raise errors.PaymentVerificationError(f"Payment {reference} has not been completed")
        if tx.get("amount") != intent["amount_minor"]:
            logger.error("Payment %s amount mismatch: captured %s, expected %s",
                         reference, tx.get("amount"), intent["amount_minor"])
            raise errors.PaymentVerificationError(f"Payment {reference} amount does not match the booking")

    draft = BookingDraft(**intent["draft"])
    cancel_reason = "agency_deleted" if agency_gone(db, draft.package.agency_id) else None
    try:
        booking = on_payment_success(db, reference, draft, cancel_reason=cancel_reason)
    except errors.BookingPersistenceError as exc:
        db.payment_intents.update_one(
            {"_id": intent["_id"]},
            {"$set": {"status": IntentStatus.reconciliation_required.value,
                      "error": exc.detail, "updated_at": datetime.utcnow()}},
        )
        raise

    # Deletion may have started while the booking was being written
    if not cancel_reason and agency_gone(db, draft.package.agency_id):
        cancel_reason = "agency_deleted"
        db.bookings.update_one(
            {"_id": ObjectId(booking["id"]), "status": {"$in": OPEN_STATUSES}},
            {"$set": {"status": BookingStatus.cancelled.value, "cancel_reason": cancel_reason,
                      "updated_at": datetime.utcnow()}},
        )
        booking.update({"status": BookingStatus.cancelled.value, "cancel_reason": cancel_reason})

    if cancel_reason:
        logger.warning("Payment %s captured for deleted agency %s, booking %s needs a refund",
                       reference, draft.package.agency_id, booking["id"])
        update = {"status": IntentStatus.reconciliation_required.value, "error": "Agency was deleted"}
    else:
        update = {"status": IntentStatus.completed.value}
    update.update({"booking_id": ObjectId(booking["id"]), "updated_at": datetime.utcnow()})
    db.payment_intents.update_one({"_id": intent["_id"]}, {"$set": update})
    return booking


def on_payment_cancelled(db: Database, reference: Optional[str] = None, user: Optional[dict] = None) -> dict:
    """Checkout closed by the pilgrim. Never writes a booking."""
    if reference:
        intent = db.payment_intents.find_one({"reference": reference}, {"user_id": 1})
        if intent and user and user["role"] != "admin" and intent.get("user_id") != user["_id"]:
            raise errors.ForbiddenError("You can only cancel your own checkout")
        db.payment_intents.update_one(
            {"reference": reference, "status": IntentStatus.initiated.value},
            {"$set": {"status": IntentStatus.cancelled.value, "updated_at": datetime.utcnow()}},
        )
        logger.info("Checkout %s cancelled by user", reference)
    return {"message": "Payment cancelled. No booking was created."}


# === Custom services intake ===

def create_unpaid_booking(db: Database, request: ServiceRequest, user: Optional[dict] = None) -> dict:
    if not request.pilgrims:
        raise errors.ValidationError("At least one pilgrim is required")
    main = request.pilgrims[0]
    for p in request.pilgrims:
        if not p.first_name.strip() or not p.last_name.strip() or not p.email.strip():
            raise errors.ValidationError("Every pilgrim needs a first name, last name and email")
    tomorrow = (datetime.utcnow() + timedelta(days=1)).replace(hour=0, minute=0, second=0, microsecond=0)
    departure = _naive_utc(request.departure_date)
    if departure < tomorrow:
        raise errors.ValidationError("Departure date must be tomorrow or later")
    if request.return_date and _naive_utc(request.return_date) < departure:
        raise errors.ValidationError("Return date must be after the departure date")

    package_id = None
    if request.selected_package and ObjectId.is_valid(request.selected_package):
        package_id = ObjectId(request.selected_package)

    now = datetime.utcnow()
    doc = {
        "package_id": package_id,
        "package_title": f"Custom {request.package_type} request",
        "package_type": request.package_type,
        "agency_id": None,
        "agency_name": None,
        "user_id": user["_id"] if user else None,
        "user_email": main.email,
        "user_name": f"{main.first_name} {main.last_name}".strip(),
        "user_phone": main.phone,
        "passport_number": main.passport_number,
        "total_price": 0,
        "amount_paid": 0,
        "is_deposit": False,
        "status": BookingStatus.pending.value,
        "payment_status": PaymentStatus.unpaid.value,
        "travel_date": departure,
        "departure_date": departure,
        "return_date": _naive_utc(request.return_date) if request.return_date else None,
        "departure_city": request.departure_city,
        "is_group_booking": request.is_group_booking,
        "is_creating_group": request.is_creating_group,
        "pilgrims": [p.model_dump() for p in request.pilgrims],
        "group_members": [m.model_dump() for m in request.group_members],
        "selected_services": request.selected_services,
        "preferred_itinerary": request.preferred_itinerary,
        "notes": request.notes or "",
        "created_at": now,
        "updated_at": now,
    }
    result = db.bookings.insert_one(doc)
    doc["_id"] = result.inserted_id
    logger.info("Service request %s received from %s", result.inserted_id, main.email)

    mailer.send_request_received(main.email, main.first_name)
    notify.notify(
        "booking",
        "New Custom Request",
        f"{doc['user_name']} submitted a custom {request.package_type} request.",
        notify.CYAN,
        [
            notify.field("Pilgrims", len(request.pilgrims)),
            notify.field("Departure", departure.date().isoformat()),
            notify.field("Services", ", ".join(f"{k}: {v}" for k, v in request.selected_services.items()) or "None",
                         inline=False),
        ],
    )
    return serialize_doc(doc)


# === Bookings ===

def get_booking_doc(db: Database, booking_id) -> dict:
    booking = db.bookings.find_one({"_id": to_object_id(booking_id, "booking_id")})
    if not booking:
        raise errors.NotFoundError(f"Booking {booking_id} not found")
    return booking


def _check_access(booking: dict, user: dict) -> None:
    role = user["role"]
    if role == "admin":
        return
    if role == "agency" and booking.get("agency_id") == user["_id"]:
        return
    if role == "pilgrim" and booking.get("user_id") == user["_id"]:
        return
    raise errors.ForbiddenError("You do not have access to this booking")


def get_booking(db: Database, booking_id, user: dict) -> dict:
    booking = get_booking_doc(db, booking_id)
    _check_access(booking, user)
    return serialize_doc(booking)


def list_bookings(db: Database, user: dict, status: str = None, payment_status: str = None,
                  package_id: str = None, search: str = None,
                  sort_by: str = "created_at", order: str = "desc") -> List[dict]:
    scope = {}
    if user["role"] == "agency":
        scope["agency_id"] = user["_id"]
    elif user["role"] == "pilgrim":
        scope["user_id"] = user["_id"]
    query = build_booking_query(status=status, payment_status=payment_status, package_id=package_id,
                                search=search, **scope)
    field, direction = sort_spec(sort_by, order, BOOKING_SORT_FIELDS)
    return [serialize_doc(b) for b in db.bookings.find(query).sort(field, direction)]


def update_booking_status(db: Database, booking_id, new_status: str, actor: dict) -> dict:
    booking = get_booking_doc(db, booking_id)
    if actor["role"] == "pilgrim":
        raise errors.ForbiddenError("Only agencies and admins can change booking status")
    _check_access(booking, actor)

    new_status = BookingStatus(new_status).value
    current = booking.get("status", BookingStatus.pending.value)
    if not can_transition(current, new_status):
        raise errors.InvalidTransitionError(current, new_status)

    # Conditional on the status we validated against
    result = db.bookings.update_one(
        {"_id": booking["_id"], "status": current},
        {"$set": {"status": new_status, "updated_at": datetime.utcnow()}},
    )
    if result.matched_count == 0:
        raise errors.ConflictError("Booking was modified by someone else, reload and try again")
    logger.info("Booking %s: %s -> %s by %s %s", booking["_id"], current, new_status, actor["role"], actor["_id"])
    booking["status"] = new_status
    return serialize_doc(booking)


def update_booking_payment(db: Database, booking_id, payment_status: str, amount_paid: int) -> dict:
    """Admin correction of payment status / amount."""
    booking = get_booking_doc(db, booking_id)
    total = booking.get("total_price") or 0
    if amount_paid < 0 or amount_paid > total:
        raise errors.ValidationError(f"Amount paid must be between 0 and the total price ({total})")

    update = {
        "payment_status": PaymentStatus(payment_status).value,
        "amount_paid": amount_paid,
        "is_deposit": bool(booking.get("is_deposit")) and amount_paid == booking.get("deposit_amount"),
        "updated_at": datetime.utcnow(),
    }
    db.bookings.update_one({"_id": booking["_id"]}, {"$set": update})
    booking.update(update)
    return serialize_doc(booking)


def delete_booking(db: Database, booking_id) -> None:
    result = db.bookings.delete_one({"_id": to_object_id(booking_id, "booking_id")})
    if result.deleted_count == 0:
        raise errors.NotFoundError(f"Booking {booking_id} not found")
    logger.info("Booking %s deleted by admin", booking_id)


# === Payments ===

def record_manual_payment(db: Database, booking_id, payload: ManualPaymentCreate, user: dict) -> dict:
    """Bank transfer claimed by the pilgrim, pending until an admin confirms it."""
    booking = get_booking_doc(db, booking_id)
    _check_access(booking, user)
    if booking.get("status") == BookingStatus.cancelled.value:
        raise errors.ValidationError("Cannot pay for a cancelled booking")

    balance = (booking.get("total_price") or 0) - (booking.get("amount_paid") or 0)
    if balance <= 0:
        raise errors.ValidationError("This booking has no outstanding balance")
    if payload.amount != balance:
        raise errors.ValidationError(f"Transfer amount must equal the outstanding balance ({balance})")

    now = datetime.utcnow()
    doc = {
        "reference": payload.reference or f"manual_{str(ObjectId())[-10:]}",
        "booking_id": booking["_id"],
        "amount": payload.amount,
        "status": PaymentRecordStatus.pending.value,
        "method": payload.method,
        "pilgrim_name": booking.get("user_name"),
        "pilgrim_email": booking.get("user_email"),
        "user_id": booking.get("user_id"),
        "agency_id": booking.get("agency_id"),
        "date": now,
    }
    try:
        result = db.payments.insert_one(doc)
    except DuplicateKeyError:
        raise errors.DuplicatePaymentError(doc["reference"])
    doc["_id"] = result.inserted_id

    notify.notify(
        "payment",
        "Manual Payment Initiated",
        "A pilgrim reported a bank transfer awaiting confirmation.",
        notify.ORANGE,
        [
            notify.field("Booking", str(booking["_id"])),
            notify.field("Amount", notify.format_naira(payload.amount)),
            notify.field("Reference", doc["reference"]),
        ],
    )
    return serialize_doc(doc)


def confirm_payment(db: Database, payment_id, booking_id) -> dict:
    payment_oid = to_object_id(payment_id, "payment_id")
    booking = get_booking_doc(db, booking_id)
    payment = db.payments.find_one({"_id": payment_oid})
    if not payment:
        raise errors.NotFoundError(f"Payment {payment_id} not found")
    if payment.get("booking_id") != booking["_id"]:
        raise errors.ValidationError("Payment does not belong to this booking")

    now = datetime.utcnow()
    result = db.payments.update_one(
        {"_id": payment_oid, "status": PaymentRecordStatus.pending.value},
        {"$set": {"status": PaymentRecordStatus.confirmed.value, "confirmed_at": now}},
    )
    if result.modified_count == 0:
        # Already confirmed: nothing to apply twice
        logger.info("Payment %s was already confirmed", payment_id)
        return {"payment": serialize_doc(payment), "booking": serialize_doc(booking), "already_confirmed": True}

    update = {
        "payment_status": PaymentStatus.paid.value,
        "amount_paid": booking.get("total_price") or 0,
        "is_deposit": False,
        "updated_at": now,
    }
    if payment.get("reference") and not booking.get("payment_reference"):
        update["payment_reference"] = payment["reference"]
    db.bookings.update_one({"_id": booking["_id"]}, {"$set": update})
    booking.update(update)
    payment.update({"status": PaymentRecordStatus.confirmed.value, "confirmed_at": now})
    logger.info("Payment %s confirmed for booking %s", payment_id, booking["_id"])

    notify.notify(
        "payment",
        "Payment Confirmed",
        "A payment has been confirmed by admin.",
        notify.GREEN,
        [
            notify.field("Payment ID", str(payment_oid)),
            notify.field("Amount", notify.format_naira(payment.get("amount"))),
            notify.field("Pilgrim", payment.get("pilgrim_name") or payment.get("pilgrim_email")),
            notify.field("Payment Method", payment.get("method") or "Bank Transfer"),
        ],
    )
    return {"payment": serialize_doc(payment), "booking": serialize_doc(booking), "already_confirmed": False}


def list_payments(db: Database, user: dict, status: str = None) -> List[dict]:
    query = {}
    if status:
        query["status"] = status
    if user["role"] == "agency":
        query["agency_id"] = user["_id"]
    elif user["role"] == "pilgrim":
        query["user_id"] = user["_id"]
    return [serialize_doc(p) for p in db.payments.find(query).sort("date", -1)]


def list_intents(db: Database, status: str = None) -> List[dict]:
    """Checkout records, e.g. ``reconciliation_required`` ones for an operator."""
    query = {"status": status} if status else {}
    return [serialize_doc(i) for i in db.payment_intents.find(query).sort("created_at", -1)]
