# services/dashboard.py
"""Read-only statistics for the admin, agency and pilgrim dashboards."""
from datetime import datetime
from typing import Dict, List, Optional

from pymongo.database import Database

from models.booking import BookingStatus, PaymentStatus
from models.package import PackageStatus
from models.payment import PaymentRecordStatus
from utils.serialize import serialize_doc

MONTHS = 6
DEFAULT_GROUP_SIZE = 20
PACKAGE_TYPES = ("Hajj", "Umrah")


def month_keys(now: datetime, months: int = MONTHS) -> List[str]:
    """'YYYY-MM' keys for the last ``months`` months, oldest first, current month last."""
    year, month = now.year, now.month
    keys = []
    for _ in range(months):
        keys.append(f"{year:04d}-{month:02d}")
        month -= 1
        if month == 0:
            year, month = year - 1, 12
    return list(reversed(keys))


def _window_start(keys: List[str]) -> datetime:
    year, month = keys[0].split("-")
    return datetime(int(year), int(month), 1)


def _bucket(docs, keys: List[str], date_field: str, value=None) -> Dict[str, int]:
    buckets = {k: 0 for k in keys}
    for doc in docs:
        ts = doc.get(date_field)
        if not isinstance(ts, datetime):
            continue
        key = ts.strftime("%Y-%m")
        if key in buckets:
            buckets[key] += value(doc) if value else 1
    return buckets


def _group_count(collection, field: str, match: Optional[dict] = None, default: str = "unknown") -> Dict[str, int]:
    pipeline = []
    if match:
        pipeline.append({"$match": match})
    pipeline.append({"$group": {"_id": f"${field}", "count": {"$sum": 1}}})
    return {(row["_id"] or default): row["count"] for row in collection.aggregate(pipeline)}


def _sum(collection, field: str, match: dict) -> int:
    rows = list(collection.aggregate([
        {"$match": match},
        {"$group": {"_id": None, "total": {"$sum": f"${field}"}}},
    ]))
    return int(rows[0]["total"]) if rows else 0


def admin_stats(db: Database, now: Optional[datetime] = None) -> dict:
    keys = month_keys(now or datetime.utcnow())
    since = _window_start(keys)

    recent_users = list(db.users.find({"created_at": {"$gte": since}}, {"role": 1, "created_at": 1}))
    recent_payments = list(db.payments.find(
        {"date": {"$gte": since}, "status": PaymentRecordStatus.confirmed.value}, {"amount": 1, "date": 1}
    ))
    recent_bookings = list(db.bookings.find({"created_at": {"$gte": since}}, {"created_at": 1}))

    package_types = {t: 0 for t in PACKAGE_TYPES}
    package_types["Other"] = 0
    for ptype, count in _group_count(db.packages, "package_type", default="Other").items():
        bucket = ptype if ptype in PACKAGE_TYPES else "Other"
        package_types[bucket] += count

    latest = db.bookings.find({}, {"total_price": 1, "payment_status": 1, "status": 1,
                                   "package_title": 1, "user_name": 1, "created_at": 1})
    return {
        "total_users": db.users.count_documents({}),
        "total_pilgrims": db.users.count_documents({"role": "pilgrim"}),
        "total_agencies": db.users.count_documents({"role": "agency"}),
        "verified_agencies": db.users.count_documents({"role": "agency", "verified": True}),
        "pending_verifications": db.users.count_documents({"role": "agency", "verified": {"$ne": True}}),
        "total_packages": db.packages.count_documents({}),
        "total_bookings": db.bookings.count_documents({}),
        "total_revenue": _sum(db.payments, "amount", {"status": PaymentRecordStatus.confirmed.value}),
        "recent_bookings": [serialize_doc(b) for b in latest.sort("created_at", -1).limit(5)],
        "monthly_summary": {
            "user_growth": {
                "total": _bucket(recent_users, keys, "created_at"),
                "pilgrims": _bucket([u for u in recent_users if u.get("role") == "pilgrim"], keys, "created_at"),
                "agencies": _bucket([u for u in recent_users if u.get("role") == "agency"], keys, "created_at"),
            },
            "revenue": _bucket(recent_payments, keys, "date", lambda p: p.get("amount") or 0),
            "bookings": _bucket(recent_bookings, keys, "created_at"),
        },
        "distributions": {
            "package_types": package_types,
            "booking_statuses": _group_count(db.bookings, "status", default=BookingStatus.pending.value),
            "payment_methods": _group_count(db.payments, "method", default="card"),
        },
    }


def package_performance(packages: List[dict], bookings: List[dict]) -> List[dict]:
    counts = {}
    for b in bookings:
        if b.get("status") == BookingStatus.cancelled.value:
            continue
        counts[b.get("package_id")] = counts.get(b.get("package_id"), 0) + 1

    result = []
    for pkg in packages:
        booked = counts.get(pkg["_id"], 0)
        capacity = pkg.get("group_size") or DEFAULT_GROUP_SIZE
        result.append({
            "id": str(pkg["_id"]),
            "title": pkg.get("title"),
            "status": pkg.get("status"),
            "booking_count": booked,
            "max_capacity": capacity,
            "fill_percentage": min(round(booked / capacity * 100), 100),
            "spots_left": max(capacity - booked, 0),
        })
    return sorted(result, key=lambda p: p["booking_count"], reverse=True)


def agency_stats(db: Database, agency_id, now: Optional[datetime] = None) -> dict:
    now = now or datetime.utcnow()
    keys = month_keys(now)
    packages = list(db.packages.find({"agency_id": agency_id}))
    bookings = list(db.bookings.find({"agency_id": agency_id}))

    statuses = _group_count(db.bookings, "status", {"agency_id": agency_id}, default=BookingStatus.pending.value)
    upcoming = sorted(
        (b for b in bookings
         if isinstance(b.get("departure_date"), datetime) and b["departure_date"] > now
         and b.get("status") != BookingStatus.cancelled.value),
        key=lambda b: b["departure_date"],
    )
    recent = sorted(bookings, key=lambda b: b.get("created_at") or datetime.min, reverse=True)

    return {
        "total_bookings": len(bookings),
        "pending_bookings": statuses.get(BookingStatus.pending.value, 0),
        "confirmed_bookings": statuses.get(BookingStatus.confirmed.value, 0),
        "completed_bookings": statuses.get(BookingStatus.completed.value, 0),
        "cancelled_bookings": statuses.get(BookingStatus.cancelled.value, 0),
        "total_revenue": sum(b.get("total_price") or 0 for b in bookings),
        "confirmed_revenue": sum(
            b.get("total_price") or 0 for b in bookings
            if b.get("status") in (BookingStatus.confirmed.value, BookingStatus.completed.value)
        ),
        "amount_collected": sum(b.get("amount_paid") or 0 for b in bookings),
        "total_packages": len(packages),
        "active_packages": sum(1 for p in packages if p.get("status") == PackageStatus.active.value),
        "draft_packages": sum(1 for p in packages if p.get("status") == PackageStatus.draft.value),
        "monthly_bookings": _bucket(bookings, keys, "created_at"),
        "upcoming_bookings": [serialize_doc(b) for b in upcoming[:5]],
        "recent_bookings": [serialize_doc(b) for b in recent[:5]],
        "package_performance": package_performance(packages, bookings),
    }


def pilgrim_stats(db: Database, user_id, now: Optional[datetime] = None) -> dict:
    now = now or datetime.utcnow()
    bookings = list(db.bookings.find({"user_id": user_id}).sort("created_at", -1))

    upcoming = sorted(
        (b for b in bookings
         if b.get("status") not in (BookingStatus.completed.value, BookingStatus.cancelled.value)
         and isinstance(b.get("departure_date"), datetime) and b["departure_date"] > now),
        key=lambda b: b["departure_date"],
    )
    return {
        "total_bookings": len(bookings),
        "upcoming_bookings": [serialize_doc(b) for b in upcoming],
        "completed_bookings": sum(1 for b in bookings if b.get("status") == BookingStatus.completed.value),
        "cancelled_bookings": sum(1 for b in bookings if b.get("status") == BookingStatus.cancelled.value),
        "total_paid": sum(b.get("amount_paid") or 0 for b in bookings),
        "outstanding_balance": sum(
            (b.get("total_price") or 0) - (b.get("amount_paid") or 0) for b in bookings
            if b.get("payment_status") == PaymentStatus.partial.value
            and b.get("status") != BookingStatus.cancelled.value
        ),
        "next_trip": serialize_doc(upcoming[0]) if upcoming else None,
        "recent_bookings": [serialize_doc(b) for b in bookings[:5]],
    }
