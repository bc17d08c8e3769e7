# routes/user.py
import logging
from datetime import datetime

from fastapi import APIRouter, HTTPException, Depends, Query
from models.user import (
    AGENCY_PROFILE_FIELDS,
    PILGRIM_PROFILE_FIELDS,
    ProfileUpdate,
    UserCreate,
    UserLogin,
    UserOut,
    UserUpdate,
)
from database import get_db
from passlib.context import CryptContext
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError
from typing import List, Optional
from utils.auth import get_current_user, get_current_user_admin
from utils.serialize import serialize_doc, to_object_id

logger = logging.getLogger(__name__)
router = APIRouter()
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def _create_user(db: Database, user_in: UserCreate, role: str) -> dict:
    email = user_in.email.strip().lower()
    if db.users.find_one({"email": email}):
        raise HTTPException(409, "Email is already registered")
    user_doc = user_in.model_dump()
    user_doc.update({
        "email": email,
        "password": pwd_context.hash(user_in.password),
        "role": role,
        "created_at": datetime.utcnow(),
    })
    try:
        result = db.users.insert_one(user_doc)
    except DuplicateKeyError:
        raise HTTPException(409, "Email is already registered")
    logger.info("%s %s registered", role.capitalize(), result.inserted_id)
    return UserOut(id=str(result.inserted_id), name=user_doc["name"], email=email, role=role).model_dump()


# Register pilgrim
@router.post("/register", status_code=201)
def register(user_in: UserCreate, db: Database = Depends(get_db)):
    return {"message": "User created", "user": _create_user(db, user_in, "pilgrim")}


# Register admin (ADMIN ONLY)
@router.post("/register_admin", status_code=201)
def register_admin(user_in: UserCreate, current_admin=Depends(get_current_user_admin),
                   db: Database = Depends(get_db)):
    return {"message": "Admin created", "user": _create_user(db, user_in, "admin")}


# Login (pilgrim, agency or admin)
@router.post("/login")
def login(user_in: UserLogin, db: Database = Depends(get_db)):
    user = db.users.find_one({"email": user_in.email.strip().lower()})
    if not user or not pwd_context.verify(user_in.password, user["password"]):
        raise HTTPException(401, "Invalid email or password")
    if user.get("deletion_state"):
        raise HTTPException(403, "Account is being deleted")
    return {
        "message": "Login successful",
        "user": UserOut(
            id=str(user["_id"]),
            name=user.get("name") or user.get("agency_name") or user["email"],
            email=user["email"],
            role=user.get("role", "pilgrim"),
        ).model_dump(),
    }


@router.get("/me", response_model=dict)
def get_me(current_user=Depends(get_current_user)):
    return serialize_doc(current_user)


# Update own profile; agencies edit their operating details
@router.put("/me", response_model=dict)
def update_me(profile_in: ProfileUpdate, current_user=Depends(get_current_user), db: Database = Depends(get_db)):
    update_data = profile_in.model_dump(exclude_unset=True)
    if not update_data:
        raise HTTPException(400, "No fields to update")
    allowed = AGENCY_PROFILE_FIELDS if current_user["role"] == "agency" else PILGRIM_PROFILE_FIELDS
    not_allowed = sorted(set(update_data) - allowed)
    if not_allowed:
        raise HTTPException(400, f"Cannot update {', '.join(not_allowed)} on this account")
    if "password" in update_data:
        update_data["password"] = pwd_context.hash(update_data["password"])
    update_data["updated_at"] = datetime.utcnow()
    db.users.update_one({"_id": current_user["_id"]}, {"$set": update_data})
    logger.info("User %s updated their profile", current_user["_id"])
    return serialize_doc(db.users.find_one({"_id": current_user["_id"]}, {"password": 0}))


# Get all users (ADMIN ONLY)
@router.get("/", response_model=List[dict])
def get_users(
    role: Optional[str] = Query(None, pattern="^(pilgrim|agency|admin)$"),
    current_admin=Depends(get_current_user_admin),
    db: Database = Depends(get_db),
):
    query = {"role": role} if role else {}
    return [serialize_doc(u) for u in db.users.find(query, {"password": 0}).sort("created_at", -1)]


# Get user by ID (ADMIN ONLY)
@router.get("/{user_id}", response_model=dict)
def get_user(user_id: str, current_admin=Depends(get_current_user_admin), db: Database = Depends(get_db)):
    user = db.users.find_one({"_id": to_object_id(user_id, "user_id")}, {"password": 0})
    if not user:
        raise HTTPException(404, "User not found")
    return serialize_doc(user)


# Update user (ADMIN ONLY)
@router.put("/{user_id}")
def update_user(user_id: str, user_in: UserUpdate, current_admin=Depends(get_current_user_admin),
                db: Database = Depends(get_db)):
    update_data = user_in.model_dump(exclude_unset=True)
    if not update_data:
        raise HTTPException(400, "No fields to update")
    if "password" in update_data:
        update_data["password"] = pwd_context.hash(update_data["password"])
    result = db.users.update_one({"_id": to_object_id(user_id, "user_id")}, {"$set": update_data})
    if result.matched_count == 0:
        raise HTTPException(404, "User not found")
    return {"message": "User updated"}


# Delete user (ADMIN ONLY); agencies go through /api/agencies so their data cascades
@router.delete("/{user_id}")
def delete_user(user_id: str, current_admin=Depends(get_current_user_admin), db: Database = Depends(get_db)):
    user_oid = to_object_id(user_id, "user_id")
    user = db.users.find_one({"_id": user_oid}, {"role": 1})
    if not user:
        raise HTTPException(404, "User not found")
    if user.get("role") == "agency":
        raise HTTPException(400, "Delete agencies through /api/agencies/{agency_id}")
    db.users.delete_one({"_id": user_oid})
    return {"message": "User deleted"}
