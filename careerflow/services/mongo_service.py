"""
MongoDB Service - shared helpers for the component services.

- ObjectId parsing with a client-facing error
- Document -> JSON-friendly dict conversion
- Batched lookups of user summaries for author/owner projections
"""

from typing import Dict, Iterable, Optional

from bson import ObjectId
from bson.errors import InvalidId
from pymongo.database import Database

from careerflow.core.exceptions import ValidationFailed
from careerflow.db.mongodb import get_collection


# ============================================================
# HELPER: ObjectId parsing
# ============================================================

def parse_object_id(value, entity: str) -> ObjectId:
    """Parse an id from the URL/body, failing with 'Invalid <entity> id'."""
    if isinstance(value, ObjectId):
        return value
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        raise ValidationFailed(f"Invalid {entity} id")


# ============================================================
# HELPER: Convert ObjectId to string for JSON serialization
# ============================================================

def id_str(value) -> Optional[str]:
    return str(value) if value is not None else None


def serialize_doc(doc: dict) -> Optional[dict]:
    """Convert MongoDB document to JSON-serializable dict (`_id` -> `id`)."""
    if doc is None:
        return None
    result = {}
    for key, value in doc.items():
        if key == "_id":
            result["id"] = str(value)
        elif isinstance(value, ObjectId):
            result[key] = str(value)
        elif isinstance(value, list):
            result[key] = [str(v) if isinstance(v, ObjectId) else v for v in value]
        else:
            result[key] = value
    return result


# ============================================================
# USER SUMMARIES (poor man's populate)
# ============================================================

def load_users(db: Database, user_ids: Iterable[ObjectId], projection: dict) -> Dict[ObjectId, dict]:
    """Fetch many users at once, keyed by ObjectId."""
    ids = list({uid for uid in user_ids if uid is not None})
    if not ids:
        return {}
    cursor = get_collection(db, "users").find({"_id": {"$in": ids}}, projection)
    return {doc["_id"]: doc for doc in cursor}


def author_summary(user: Optional[dict], user_id: ObjectId) -> dict:
    """Public author card used by the forum."""
    if not user:
        return {"id": id_str(user_id), "full_name": "Unknown", "role": None, "profile_image_url": ""}
    return {
        "id": str(user["_id"]),
        "full_name": user.get("full_name", "Unknown"),
        "role": user.get("role"),
        "profile_image_url": (user.get("profile") or {}).get("profile_image_url", ""),
    }


AUTHOR_PROJECTION = {"full_name": 1, "role": 1, "profile.profile_image_url": 1}
