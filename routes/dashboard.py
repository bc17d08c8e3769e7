# routes/dashboard.py
from fastapi import APIRouter, Depends
from pymongo.database import Database

from database import get_db
from services import dashboard
from utils.auth import get_current_agency, get_current_user, get_current_user_admin
from utils.errors import ForbiddenError

router = APIRouter()


@router.get("/admin", response_model=dict)
def admin_dashboard(current_admin=Depends(get_current_user_admin), db: Database = Depends(get_db)):
    return dashboard.admin_stats(db)


@router.get("/agency", response_model=dict)
def agency_dashboard(current_agency=Depends(get_current_agency), db: Database = Depends(get_db)):
    return dashboard.agency_stats(db, current_agency["_id"])


@router.get("/pilgrim", response_model=dict)
def pilgrim_dashboard(current_user=Depends(get_current_user), db: Database = Depends(get_db)):
    if current_user["role"] != "pilgrim":
        raise ForbiddenError("Pilgrim access only")
    return dashboard.pilgrim_stats(db, current_user["_id"])
