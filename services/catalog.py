# services/catalog.py
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from bson import ObjectId
from pymongo.database import Database

import config
from models.package import PackageCreate, PackageStatus, PackageUpdate
from utils import errors, notify
from utils.filters import build_package_query, filter_published, sort_spec
from utils.serialize import serialize_doc, to_object_id

logger = logging.getLogger(__name__)

PACKAGE_SORT_FIELDS = ("created_at", "price", "duration", "title", "updated_at")


@dataclass
class OwnerContext:
    role: str
    user_id: Optional[ObjectId] = None
    agency_name: Optional[str] = None

    @classmethod
    def from_user(cls, user: dict) -> "OwnerContext":
        return cls(
            role=user["role"],
            user_id=user["_id"],
            agency_name=user.get("agency_name") or user.get("name") or user.get("email"),
        )


class PackageCountCache:
    """Package counts per agency, memoized for the lifetime of one request."""

    def __init__(self, db: Database):
        self.db = db
        self._counts = {}

    def get(self, agency_id) -> int:
        if agency_id not in self._counts:
            self._counts[agency_id] = self.db.packages.count_documents({"agency_id": agency_id})
        return self._counts[agency_id]


def _check_publishable(status: str, price) -> None:
    if status == PackageStatus.active.value and (price is None or price <= 0):
        raise errors.ValidationError("An active package must have a price greater than zero")


def _check_owner(pkg: dict, owner: OwnerContext) -> None:
    if owner.role == "admin":
        return
    if owner.role != "agency" or pkg.get("agency_id") != owner.user_id:
        raise errors.ForbiddenError("You can only manage your own packages")


def _package_fields(pkg: dict) -> list:
    return [
        notify.field("Title", pkg.get("title")),
        notify.field("Agency", pkg.get("agency_name")),
        notify.field("Price", notify.format_naira(pkg.get("price"))),
        notify.field("Status", pkg.get("status")),
    ]


def get_package_doc(db: Database, package_id) -> dict:
    pkg = db.packages.find_one({"_id": to_object_id(package_id, "package_id")})
    if not pkg:
        raise errors.NotFoundError(f"Package {package_id} not found")
    return pkg


def get_package(db: Database, package_id) -> dict:
    return serialize_doc(get_package_doc(db, package_id))


def create_package(db: Database, data: PackageCreate, owner: OwnerContext) -> dict:
    doc = data.model_dump(exclude={"agency_id"})
    status = PackageStatus(doc["status"]).value
    _check_publishable(status, doc["price"])

    # Ownership: agency packages belong to the agency, admin packages to the platform
    if owner.role == "agency":
        agency_id, agency_name = owner.user_id, owner.agency_name
    elif data.agency_id:
        agency = db.users.find_one({"_id": to_object_id(data.agency_id, "agency_id"), "role": "agency"})
        if not agency:
            raise errors.NotFoundError(f"Agency {data.agency_id} not found")
        agency_id = agency["_id"]
        agency_name = agency.get("agency_name") or agency.get("email")
    else:
        agency_id, agency_name = None, config.PLATFORM_NAME

    now = datetime.utcnow()
    doc.update({
        "status": status,
        "agency_id": agency_id,
        "agency_name": agency_name,
        "is_admin_package": agency_id is None,
        "created_by": owner.user_id,
        "created_at": now,
        "updated_at": now,
    })
    result = db.packages.insert_one(doc)
    doc["_id"] = result.inserted_id
    logger.info("Package %s created by %s %s", result.inserted_id, owner.role, owner.user_id)

    notify.notify("package", "New Package Created", f"A new package was created by {agency_name}.",
                  notify.CYAN, _package_fields(doc))
    return serialize_doc(doc)


def update_package(db: Database, package_id, patch: PackageUpdate, owner: OwnerContext) -> dict:
    pkg = get_package_doc(db, package_id)
    _check_owner(pkg, owner)

    changes = patch.model_dump(exclude_unset=True)
    if not changes:
        raise errors.ValidationError("No fields to update")
    if "status" in changes:
        changes["status"] = PackageStatus(changes["status"]).value
    _check_publishable(changes.get("status", pkg.get("status")), changes.get("price", pkg.get("price")))

    changes["updated_at"] = datetime.utcnow()
    db.packages.update_one({"_id": pkg["_id"]}, {"$set": changes})
    updated = db.packages.find_one({"_id": pkg["_id"]})

    notify.notify("package", "Package Updated", f"Package '{updated.get('title')}' was updated.",
                  notify.BLUE, _package_fields(updated))
    return serialize_doc(updated)


def set_status(db: Database, package_id, status: str, owner: OwnerContext) -> dict:
    """Publish (active), unpublish (draft) or archive a package."""
    pkg = get_package_doc(db, package_id)
    _check_owner(pkg, owner)
    status = PackageStatus(status).value
    _check_publishable(status, pkg.get("price"))

    db.packages.update_one({"_id": pkg["_id"]}, {"$set": {"status": status, "updated_at": datetime.utcnow()}})
    pkg["status"] = status
    titles = {"active": "Package Published", "draft": "Package Unpublished", "archived": "Package Archived"}
    notify.notify("package", titles[status], f"Package '{pkg.get('title')}' is now {status}.",
                  notify.GREEN if status == "active" else notify.ORANGE, _package_fields(pkg))
    return serialize_doc(pkg)


def delete_package(db: Database, package_id, owner: OwnerContext) -> None:
    # Bookings keep their own snapshot of the package, nothing cascades
    pkg = get_package_doc(db, package_id)
    _check_owner(pkg, owner)
    db.packages.delete_one({"_id": pkg["_id"]})
    logger.info("Package %s deleted by %s %s", pkg["_id"], owner.role, owner.user_id)
    notify.notify("package", "Package Deleted", f"Package '{pkg.get('title')}' was deleted.",
                  notify.RED, _package_fields(pkg))


def list_by_agency(db: Database, agency_id) -> List[dict]:
    query = {"agency_id": to_object_id(agency_id, "agency_id")}
    return [serialize_doc(p) for p in db.packages.find(query).sort("created_at", -1)]


def list_all(db: Database, status: str = None, agency_id: str = None, search: str = None,
             package_type: str = None, platform_only: bool = False,
             sort_by: str = "created_at", order: str = "desc") -> List[dict]:
    query = build_package_query(status=status, agency_id=agency_id, search=search,
                                package_type=package_type, platform_only=platform_only)
    field, direction = sort_spec(sort_by, order, PACKAGE_SORT_FIELDS)
    return [serialize_doc(p) for p in db.packages.find(query).sort(field, direction)]


def list_published(db: Database, search: str = None, package_type: str = None) -> List[dict]:
    candidates = list(db.packages.find(
        build_package_query(status=PackageStatus.active.value, search=search, package_type=package_type)
    ))
    agency_ids = list({p["agency_id"] for p in candidates if p.get("agency_id")})
    verified = {
        u["_id"] for u in db.users.find(
            {"_id": {"$in": agency_ids}, "role": "agency", "verified": True}, {"_id": 1}
        )
    }
    return [serialize_doc(p) for p in filter_published(candidates, verified)]
