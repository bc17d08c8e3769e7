# utils/serialize.py
from bson import ObjectId

from utils import errors


def convert_obj_id(obj):
    if isinstance(obj, ObjectId):
        return str(obj)
    if isinstance(obj, dict):
        return {k: convert_obj_id(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [convert_obj_id(i) for i in obj]
    return obj


def serialize_doc(doc: dict, exclude=("password",)) -> dict:
    """Mongo document -> JSON-friendly dict with a string ``id``."""
    if doc is None:
        return None
    out = convert_obj_id({k: v for k, v in doc.items() if k not in exclude})
    if "_id" in out:
        out["id"] = out.pop("_id")
    return out


def to_object_id(value, label: str = "ID") -> ObjectId:
    if isinstance(value, ObjectId):
        return value
    if not value or not ObjectId.is_valid(value):
        raise errors.ValidationError(f"{label} is not valid")
    return ObjectId(value)


def optional_object_id(value, label: str = "ID"):
    if value in (None, ""):
        return None
    return to_object_id(value, label)
