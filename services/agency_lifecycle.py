# services/agency_lifecycle.py
"""Agency registration, verification toggle and cascading deletion.

Deletion runs as a resumable saga. The agency is first flagged
``deletion_state="deleting"``; then its packages are archived, its open
bookings cancelled and finally the user document removed. Each step is
idempotent, so an interrupted deletion is finished by
``resume_agency_deletions`` on the next startup.
"""
import logging
from datetime import datetime
from typing import List, Optional

from passlib.context import CryptContext
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from models.agency import AgencyCreate
from models.booking import BookingStatus, OPEN_STATUSES
from models.package import PackageStatus
from services.catalog import PackageCountCache
from utils import errors, mailer, notify
from utils.filters import search_clause
from utils.serialize import serialize_doc, to_object_id

logger = logging.getLogger(__name__)
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

DELETING = "deleting"


def _agency_fields(agency: dict) -> list:
    return [
        notify.field("Agency Name", agency.get("agency_name")),
        notify.field("Email", agency.get("email")),
        notify.field(
            "Location",
            f"{agency.get('city_of_operation') or 'Unknown'}, {agency.get('country_of_operation') or 'Unknown'}",
            inline=False,
        ),
    ]


def get_agency_doc(db: Database, agency_id) -> dict:
    agency = db.users.find_one({"_id": to_object_id(agency_id, "agency_id"), "role": "agency"}, {"password": 0})
    if not agency:
        raise errors.NotFoundError(f"Agency {agency_id} not found")
    return agency


def get_agency(db: Database, agency_id) -> dict:
    return serialize_doc(get_agency_doc(db, agency_id))


def register_agency(db: Database, data: AgencyCreate, created_by_admin: bool = False) -> dict:
    email = data.email.strip().lower()
    if db.users.find_one({"email": email}):
        raise errors.ConflictError("Email is already registered")

    doc = data.model_dump()
    doc.update({
        "email": email,
        "password": pwd_context.hash(data.password),
        "role": "agency",
        "verified": False,          # only an admin can verify
        "verified_at": None,
        "created_at": datetime.utcnow(),
    })
    try:
        result = db.users.insert_one(doc)
    except DuplicateKeyError:
        raise errors.ConflictError("Email is already registered")
    doc["_id"] = result.inserted_id
    logger.info("Agency %s registered (%s)", result.inserted_id, email)

    description = "A new agency has been created by admin." if created_by_admin \
        else "A new agency has registered and is awaiting verification."
    notify.notify("agency_creation", "New Agency Created", description, notify.CYAN, _agency_fields(doc))
    mailer.send_agency_welcome(email, data.agency_name)
    return serialize_doc(doc)


def set_verification(db: Database, agency_id, verified: bool) -> dict:
    agency = get_agency_doc(db, agency_id)
    if agency.get("deletion_state") == DELETING:
        raise errors.ConflictError("Agency is being deleted")

    update = {"verified": verified, "verified_at": datetime.utcnow() if verified else None}
    db.users.update_one({"_id": agency["_id"]}, {"$set": update})
    agency.update(update)
    logger.info("Agency %s %s", agency["_id"], "verified" if verified else "unverified")

    label = "Verified" if verified else "Unverified"
    notify.notify(
        "agency",
        f"Agency {label}",
        f"An agency has been {label.lower()} by admin.",
        notify.GREEN if verified else notify.ORANGE,
        _agency_fields(agency) + [notify.field("Status", "Verified ✅" if verified else "Unverified ❌")],
    )
    return serialize_doc(agency)


def _finish_deletion(db: Database, agency: dict) -> dict:
    agency_id = agency["_id"]
    now = datetime.utcnow()

    archived = db.packages.update_many(
        {"agency_id": agency_id, "status": {"$ne": PackageStatus.archived.value}},
        {"$set": {"status": PackageStatus.archived.value, "updated_at": now}},
    )
    cancelled = db.bookings.update_many(
        {"agency_id": agency_id, "status": {"$in": OPEN_STATUSES}},
        {"$set": {"status": BookingStatus.cancelled.value, "cancel_reason": "agency_deleted", "updated_at": now}},
    )
    db.users.delete_one({"_id": agency_id})
    logger.info("Agency %s deleted: %d packages archived, %d bookings cancelled",
                agency_id, archived.modified_count, cancelled.modified_count)

    notify.notify(
        "agency",
        "Agency Deleted",
        "An agency has been deleted by admin.",
        notify.RED,
        _agency_fields(agency) + [
            notify.field("Packages Archived", archived.modified_count),
            notify.field("Bookings Cancelled", cancelled.modified_count),
        ],
    )
    return {
        "agency_id": str(agency_id),
        "packages_archived": archived.modified_count,
        "bookings_cancelled": cancelled.modified_count,
    }


def delete_agency(db: Database, agency_id) -> dict:
    agency = get_agency_doc(db, agency_id)
    db.users.update_one(
        {"_id": agency["_id"]},
        {"$set": {"deletion_state": DELETING, "deletion_started_at": datetime.utcnow()}},
    )
    return _finish_deletion(db, agency)


def resume_agency_deletions(db: Database) -> int:
    pending = list(db.users.find({"role": "agency", "deletion_state": DELETING}, {"password": 0}))
    for agency in pending:
        logger.warning("Resuming interrupted deletion of agency %s", agency["_id"])
        _finish_deletion(db, agency)
    return len(pending)


def list_agencies(db: Database, verified: Optional[bool] = None, search: Optional[str] = None) -> List[dict]:
    query = {"role": "agency", "deletion_state": {"$ne": DELETING}}
    if verified is not None:
        query["verified"] = verified
    if search:
        query.update(search_clause(search, ("agency_name", "email", "city_of_operation", "country_of_operation")))

    counts = PackageCountCache(db)
    result = []
    for agency in db.users.find(query, {"password": 0}).sort("created_at", -1):
        item = serialize_doc(agency)
        item["package_count"] = counts.get(agency["_id"])
        result.append(item)
    return result
