# utils/filters.py
import re
from datetime import datetime
from typing import Iterable, List, Optional, Set

import pymongo

from utils.serialize import optional_object_id

PACKAGE_SEARCH_FIELDS = ("title", "description", "agency_name", "location", "package_type")
BOOKING_SEARCH_FIELDS = ("package_title", "user_name", "user_email", "agency_name", "payment_reference")


def search_clause(term: Optional[str], fields: Iterable[str]) -> dict:
    if not term or not term.strip():
        return {}
    pattern = re.escape(term.strip())
    return {"$or": [{f: {"$regex": pattern, "$options": "i"}} for f in fields]}


def build_package_query(status: Optional[str] = None, agency_id: Optional[str] = None,
                        search: Optional[str] = None, package_type: Optional[str] = None,
                        platform_only: bool = False) -> dict:
    query = {}
    if status:
        query["status"] = status
    if platform_only:
        query["agency_id"] = None
    elif agency_id:
        query["agency_id"] = optional_object_id(agency_id, "agency_id")
    if package_type:
        query["package_type"] = {"$regex": f"^{re.escape(package_type)}$", "$options": "i"}
    query.update(search_clause(search, PACKAGE_SEARCH_FIELDS))
    return query


def build_booking_query(status: Optional[str] = None, payment_status: Optional[str] = None,
                        agency_id=None, user_id=None, package_id: Optional[str] = None,
                        search: Optional[str] = None) -> dict:
    query = {}
    if status:
        query["status"] = status
    if payment_status:
        query["payment_status"] = payment_status
    if agency_id:
        query["agency_id"] = optional_object_id(agency_id, "agency_id")
    if user_id:
        query["user_id"] = optional_object_id(user_id, "user_id")
    if package_id:
        query["package_id"] = optional_object_id(package_id, "package_id")
    query.update(search_clause(search, BOOKING_SEARCH_FIELDS))
    return query


def sort_spec(sort_by: str, order: str, allowed: Iterable[str], default: str = "created_at"):
    field = sort_by if sort_by in allowed else default
    return field, pymongo.ASCENDING if order == "asc" else pymongo.DESCENDING


def filter_published(packages: Iterable[dict], verified_agency_ids: Set) -> List[dict]:
    """Active packages pilgrims may see: platform-owned or from a verified agency."""
    visible = [
        p for p in packages
        if p.get("status") == "active"
        and (p.get("agency_id") is None or p.get("agency_id") in verified_agency_ids)
    ]
    return sorted(visible, key=lambda p: p.get("created_at") or datetime.min, reverse=True)
