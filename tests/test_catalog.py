from datetime import datetime

import pytest

import config
from models.package import PackageCreate, PackageUpdate
from services import catalog
from services.catalog import OwnerContext, PackageCountCache
from utils import errors


def new_package(**fields):
    data = {"title": "Hajj Premium 2025", "price": 4500000, "duration": 21, "package_type": "Hajj"}
    data.update(fields)
    return PackageCreate(**data)


def test_agency_owns_created_package(db, agency):
    created = catalog.create_package(db, new_package(), OwnerContext.from_user(agency))

    assert created["agency_id"] == str(agency["_id"])
    assert created["agency_name"] == "Baraka Travels"
    assert created["status"] == "draft"
    assert created["is_admin_package"] is False


def test_admin_package_is_platform_owned(db, admin):
    created = catalog.create_package(db, new_package(status="active"), OwnerContext.from_user(admin))

    assert created["agency_id"] is None
    assert created["agency_name"] == config.PLATFORM_NAME
    assert created["is_admin_package"] is True


def test_admin_can_assign_package_to_agency(db, admin, agency):
    created = catalog.create_package(db, new_package(agency_id=str(agency["_id"])), OwnerContext.from_user(admin))

    assert created["agency_id"] == str(agency["_id"])
    assert created["is_admin_package"] is False


def test_active_package_needs_price(db, agency):
    owner = OwnerContext.from_user(agency)

    with pytest.raises(errors.ValidationError):
        catalog.create_package(db, new_package(price=0, status="active"), owner)

    draft = catalog.create_package(db, new_package(price=0), owner)
    with pytest.raises(errors.ValidationError):
        catalog.set_status(db, draft["id"], "active", owner)

    active = catalog.create_package(db, new_package(status="active"), owner)
    with pytest.raises(errors.ValidationError):
        catalog.update_package(db, active["id"], PackageUpdate(price=0), owner)

    for pkg in db.packages.find({"status": "active"}):
        assert pkg["price"] > 0


def test_agency_cannot_touch_other_agency_package(db, agency, make_agency, admin):
    other = make_agency(agency_name="Other Travels")
    pkg = catalog.create_package(db, new_package(), OwnerContext.from_user(other))

    with pytest.raises(errors.ForbiddenError):
        catalog.update_package(db, pkg["id"], PackageUpdate(title="Mine now"), OwnerContext.from_user(agency))
    with pytest.raises(errors.ForbiddenError):
        catalog.delete_package(db, pkg["id"], OwnerContext.from_user(agency))

    updated = catalog.update_package(db, pkg["id"], PackageUpdate(title="Fixed by admin"),
                                     OwnerContext.from_user(admin))
    assert updated["title"] == "Fixed by admin"


def test_update_requires_fields(db, agency):
    owner = OwnerContext.from_user(agency)
    pkg = catalog.create_package(db, new_package(), owner)

    with pytest.raises(errors.ValidationError):
        catalog.update_package(db, pkg["id"], PackageUpdate(), owner)


def test_delete_package_keeps_bookings(db, agency):
    owner = OwnerContext.from_user(agency)
    pkg = catalog.create_package(db, new_package(), owner)
    db.bookings.insert_one({"package_id": db.packages.find_one()["_id"], "status": "confirmed"})

    catalog.delete_package(db, pkg["id"], owner)

    assert db.packages.count_documents({}) == 0
    assert db.bookings.count_documents({}) == 1
    with pytest.raises(errors.NotFoundError):
        catalog.get_package(db, pkg["id"])


def test_published_catalog_visibility(db, agency, make_agency, make_package):
    unverified = make_agency(agency_name="New Agency", verified=False)
    make_package(agency, title="Verified active")
    make_package(agency, title="Verified draft", status="draft")
    make_package(unverified, title="Unverified active")
    make_package(title="Platform active")

    titles = {p["title"] for p in catalog.list_published(db)}
    assert titles == {"Verified active", "Platform active"}


def test_published_catalog_search_and_order(db, agency, make_package):
    make_package(agency, title="Umrah Ramadan", created_at=datetime(2024, 1, 1))
    make_package(agency, title="Umrah Economy", created_at=datetime(2024, 3, 1))
    make_package(agency, title="Hajj Deluxe", package_type="Hajj", created_at=datetime(2024, 2, 1))

    assert [p["title"] for p in catalog.list_published(db, search="umrah")] == ["Umrah Economy", "Umrah Ramadan"]
    assert [p["title"] for p in catalog.list_published(db, package_type="hajj")] == ["Hajj Deluxe"]


def test_list_all_filters(db, agency, make_package):
    make_package(agency, title="A", price=100)
    make_package(agency, title="B", price=300, status="draft")
    make_package(title="C", price=200)

    assert [p["title"] for p in catalog.list_all(db, sort_by="price", order="asc")] == ["A", "C", "B"]
    assert [p["title"] for p in catalog.list_all(db, platform_only=True)] == ["C"]
    assert [p["title"] for p in catalog.list_all(db, status="draft")] == ["B"]
    assert len(catalog.list_by_agency(db, str(agency["_id"]))) == 2


def test_package_count_cache(db, agency, make_package):
    make_package(agency)
    make_package(agency)
    cache = PackageCountCache(db)

    assert cache.get(agency["_id"]) == 2
    make_package(agency)
    assert cache.get(agency["_id"]) == 2
    assert PackageCountCache(db).get(agency["_id"]) == 3
