# routes/agency.py
from fastapi import APIRouter, Depends, Query
from pymongo.database import Database
from typing import List, Optional

from database import get_db
from models.agency import AgencyCreate, VerificationUpdate
from services import agency_lifecycle, catalog
from utils.auth import get_current_user_admin

router = APIRouter()


# === POST: Self-registration (always unverified) ===
@router.post("/register", response_model=dict, status_code=201)
def register_agency(agency_in: AgencyCreate, db: Database = Depends(get_db)):
    agency = agency_lifecycle.register_agency(db, agency_in)
    return {"message": "Agency registered, awaiting verification", "agency": agency}


# === POST: Created by admin ===
@router.post("/", response_model=dict, status_code=201)
def create_agency(agency_in: AgencyCreate, current_admin=Depends(get_current_user_admin),
                  db: Database = Depends(get_db)):
    return agency_lifecycle.register_agency(db, agency_in, created_by_admin=True)


# === GET: Agency list with package counts (ADMIN ONLY) ===
@router.get("/", response_model=List[dict])
def list_agencies(
    verified: Optional[bool] = Query(None),
    search: Optional[str] = Query(None),
    current_admin=Depends(get_current_user_admin),
    db: Database = Depends(get_db),
):
    return agency_lifecycle.list_agencies(db, verified=verified, search=search)


# Public agency profile with its packages
@router.get("/{agency_id}", response_model=dict)
def get_agency(agency_id: str, db: Database = Depends(get_db)):
    agency = agency_lifecycle.get_agency(db, agency_id)
    agency["packages"] = [p for p in catalog.list_by_agency(db, agency_id) if p.get("status") == "active"]
    return agency


@router.put("/{agency_id}/verification", response_model=dict)
def set_verification(
    agency_id: str,
    body: VerificationUpdate,
    current_admin=Depends(get_current_user_admin),
    db: Database = Depends(get_db),
):
    return agency_lifecycle.set_verification(db, agency_id, body.verified)


# === DELETE: Agency + archive packages + cancel open bookings ===
@router.delete("/{agency_id}", response_model=dict)
def delete_agency(agency_id: str, current_admin=Depends(get_current_user_admin), db: Database = Depends(get_db)):
    result = agency_lifecycle.delete_agency(db, agency_id)
    return {"message": "Agency deleted", **result}
