# routes/package.py
from fastapi import APIRouter, Depends, Query
from pymongo.database import Database
from typing import List, Optional

from database import get_db
from models.package import PackageCreate, PackageStatusUpdate, PackageUpdate
from services import catalog
from services.catalog import OwnerContext
from utils.auth import get_current_staff, get_current_user_admin

router = APIRouter()


# === GET: Public catalog (active, platform or verified agency) ===
@router.get("/", response_model=List[dict])
def list_published_packages(
    search: Optional[str] = Query(None),
    package_type: Optional[str] = Query(None),
    db: Database = Depends(get_db),
):
    return catalog.list_published(db, search=search, package_type=package_type)


# === GET: All packages (ADMIN ONLY) ===
@router.get("/all", response_model=List[dict])
def list_all_packages(
    status: Optional[str] = Query(None, pattern="^(draft|active|archived)$"),
    agency_id: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    package_type: Optional[str] = Query(None),
    platform_only: bool = Query(False),
    sort_by: str = Query("created_at"),
    order: str = Query("desc", pattern="^(asc|desc)$"),
    current_admin=Depends(get_current_user_admin),
    db: Database = Depends(get_db),
):
    return catalog.list_all(db, status=status, agency_id=agency_id, search=search,
                            package_type=package_type, platform_only=platform_only,
                            sort_by=sort_by, order=order)


# === GET: Packages of one agency ===
@router.get("/agency/{agency_id}", response_model=List[dict])
def list_agency_packages(agency_id: str, db: Database = Depends(get_db)):
    return catalog.list_by_agency(db, agency_id)


@router.get("/{package_id}", response_model=dict)
def get_package(package_id: str, db: Database = Depends(get_db)):
    return catalog.get_package(db, package_id)


# === POST: Create package (agency or admin) ===
@router.post("/", response_model=dict, status_code=201)
def create_package(
    package_in: PackageCreate,
    current_user=Depends(get_current_staff),
    db: Database = Depends(get_db),
):
    return catalog.create_package(db, package_in, OwnerContext.from_user(current_user))


@router.put("/{package_id}", response_model=dict)
def update_package(
    package_id: str,
    patch: PackageUpdate,
    current_user=Depends(get_current_staff),
    db: Database = Depends(get_db),
):
    return catalog.update_package(db, package_id, patch, OwnerContext.from_user(current_user))


# === PUT: Publish / unpublish / archive ===
@router.put("/{package_id}/status", response_model=dict)
def set_package_status(
    package_id: str,
    body: PackageStatusUpdate,
    current_user=Depends(get_current_staff),
    db: Database = Depends(get_db),
):
    return catalog.set_status(db, package_id, body.status, OwnerContext.from_user(current_user))


@router.delete("/{package_id}")
def delete_package(
    package_id: str,
    current_user=Depends(get_current_staff),
    db: Database = Depends(get_db),
):
    catalog.delete_package(db, package_id, OwnerContext.from_user(current_user))
    return {"message": "Package deleted"}
