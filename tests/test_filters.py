from datetime import datetime

import pymongo
from bson import ObjectId

from utils.filters import build_booking_query, build_package_query, filter_published, search_clause, sort_spec


def test_search_clause_escapes_regex():
    clause = search_clause("  Umrah (VIP)+ ", ["title", "agency_name"])

    assert clause == {"$or": [
        {"title": {"$regex": r"Umrah\ \(VIP\)\+", "$options": "i"}},
        {"agency_name": {"$regex": r"Umrah\ \(VIP\)\+", "$options": "i"}},
    ]}
    assert search_clause("   ", ["title"]) == {}


def test_build_package_query():
    agency_id = ObjectId()

    query = build_package_query(status="active", agency_id=str(agency_id), package_type="hajj")
    assert query["status"] == "active"
    assert query["agency_id"] == agency_id
    assert query["package_type"] == {"$regex": "^hajj$", "$options": "i"}

    assert build_package_query(agency_id=str(agency_id), platform_only=True) == {"agency_id": None}
    assert build_package_query() == {}


def test_build_booking_query():
    user_id = ObjectId()

    query = build_booking_query(status="pending", payment_status="partial payment", user_id=user_id, search="bello")
    assert query["status"] == "pending"
    assert query["payment_status"] == "partial payment"
    assert query["user_id"] == user_id
    assert len(query["$or"]) == 5


def test_sort_spec_falls_back_to_default():
    assert sort_spec("price", "asc", ["price"]) == ("price", pymongo.ASCENDING)
    assert sort_spec("password", "desc", ["price"]) == ("created_at", pymongo.DESCENDING)


def test_filter_published_is_pure():
    verified, unverified = ObjectId(), ObjectId()
    packages = [
        {"title": "old", "status": "active", "agency_id": verified, "created_at": datetime(2023, 1, 1)},
        {"title": "new", "status": "active", "agency_id": None, "created_at": datetime(2024, 1, 1)},
        {"title": "undated", "status": "active", "agency_id": verified},
        {"title": "hidden", "status": "active", "agency_id": unverified, "created_at": datetime(2024, 2, 1)},
        {"title": "draft", "status": "draft", "agency_id": None, "created_at": datetime(2024, 3, 1)},
    ]
    snapshot = [dict(p) for p in packages]

    result = filter_published(packages, {verified})

    assert [p["title"] for p in result] == ["new", "old", "undated"]
    assert packages == snapshot
