# utils/auth.py
from fastapi import Depends, Header, HTTPException
from pymongo.database import Database
from bson import ObjectId
from database import get_db

ROLES = ("pilgrim", "agency", "admin")


def get_current_user(
    x_user_id: str = Header(None, alias="X-User-ID"),
    x_user_role: str = Header(None, alias="X-User-Role"),
    db: Database = Depends(get_db),
):
    if not x_user_id or not x_user_role:
        raise HTTPException(401, "X-User-ID and X-User-Role headers are required")
    if x_user_role not in ROLES:
        raise HTTPException(403, "Unknown role")
    if not ObjectId.is_valid(x_user_id):
        raise HTTPException(400, "X-User-ID is not valid (must be a 24 character hex ObjectId)")

    # The user must exist and carry the claimed role
    user = db.users.find_one({"_id": ObjectId(x_user_id)}, {"password": 0})
    if not user or user.get("role") != x_user_role:
        raise HTTPException(403, "User is not valid for this role")
    return user


def get_current_user_admin(user=Depends(get_current_user)):
    if user["role"] != "admin":
        raise HTTPException(403, "Admin access only")
    return user


def get_current_agency(user=Depends(get_current_user)):
    if user["role"] != "agency":
        raise HTTPException(403, "Agency access only")
    return user


def get_current_staff(user=Depends(get_current_user)):
    """Agency or admin."""
    if user["role"] not in ("agency", "admin"):
        raise HTTPException(403, "Agency or admin access only")
    return user
