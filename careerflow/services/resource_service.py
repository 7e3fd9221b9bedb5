"""
Resource Library Service - shared articles, videos and templates.
"""

import re
from typing import List, Optional

from pymongo import DESCENDING
from pymongo.database import Database

from careerflow.core.exceptions import NotFound, PermissionDenied, ValidationFailed
from careerflow.core.logging_config import get_logger
from careerflow.db.mongodb import get_collection
from careerflow.schemas.schemas import ResourceCreate, ResourceSort
from careerflow.services.mongo_service import load_users, parse_object_id, serialize_doc
from careerflow.services.user_service import normalize_string_list
from careerflow.utils.timeutils import utcnow

logger = get_logger(__name__)

_SCHEME_RE = re.compile(r"^https?://", re.IGNORECASE)
_WWW_RE = re.compile(r"^www\.", re.IGNORECASE)


def normalize_external_url(value: str) -> Optional[str]:
    """
    Normalize a user-supplied link.

    ""                    -> ""
    "https://x.org/a"     -> unchanged
    "www.x.org", "x.org"  -> "https://..." prepended
    anything else         -> None (invalid)
    """
    trimmed = (value or "").strip()
    if not trimmed:
        return ""
    if _SCHEME_RE.match(trimmed):
        return trimmed
    if _WWW_RE.match(trimmed) or (" " not in trimmed and "." in trimmed):
        return f"https://{trimmed}"
    return None


def _resource_out(doc: dict, creator: Optional[dict]) -> dict:
    data = serialize_doc(doc)
    data["created_by"] = {
        "id": str(doc["created_by"]) if doc.get("created_by") else None,
        "full_name": creator.get("full_name", "Unknown") if creator else "Unknown",
    }
    return data


class ResourceService:
    """
    Handles the resources collection.
    """

    def __init__(self, db: Database):
        self.db = db
        self.collection = get_collection(db, "resources")

    def _with_creators(self, docs: List[dict]) -> List[dict]:
        creators = load_users(self.db, (d.get("created_by") for d in docs), {"full_name": 1})
        return [_resource_out(d, creators.get(d.get("created_by"))) for d in docs]

    def create_resource(self, user: dict, payload: ResourceCreate) -> dict:
        url = normalize_external_url(payload.url)
        if url is None:
            raise ValidationFailed.for_field("url", "Please provide a valid URL")

        now = utcnow()
        doc = {
            "title": payload.title,
            "description": payload.description,
            "type": payload.type.value,
            "category": payload.category.value,
            "url": url,
            "tags": normalize_string_list(payload.tags),
            "likes_count": 0,
            "created_by": user["_id"],
            "created_at": now,
            "updated_at": now,
        }
        result = self.collection.insert_one(doc)
        return self._with_creators([self.collection.find_one({"_id": result.inserted_id})])[0]

    def list_resources(self, search: Optional[str] = None, type: Optional[str] = None,
                       category: Optional[str] = None,
                       sort_by: ResourceSort = ResourceSort.newest) -> List[dict]:
        query = {}
        if type:
            query["type"] = type
        if category:
            query["category"] = category
        if search and search.strip():
            pattern = {"$regex": re.escape(search.strip()), "$options": "i"}
            query["$or"] = [
                {"title": pattern},
                {"description": pattern},
                {"tags": pattern},
            ]

        if sort_by == ResourceSort.popular:
            sort = [("likes_count", DESCENDING), ("created_at", DESCENDING)]
        else:
            sort = [("created_at", DESCENDING)]

        return self._with_creators(list(self.collection.find(query).sort(sort)))

    def delete_resource(self, user: dict, resource_id) -> None:
        oid = parse_object_id(resource_id, "resource")
        resource = self.collection.find_one({"_id": oid})
        if not resource:
            raise NotFound("Resource not found")
        if resource.get("created_by") != user["_id"]:
            raise PermissionDenied("You can only delete your own resources")

        self.collection.delete_one({"_id": oid})
        logger.info("Resource %s deleted by %s", oid, user["_id"])
