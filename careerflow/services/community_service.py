"""
Community Forum Service - posts and threaded replies.

Counter invariants:
- likes_count == len(liked_by) on every post and reply. Toggles are a single
  conditional update, so the counter and the set always move together.
- replies_count is recomputed from the replies collection whenever a reply
  is created or deleted, so it cannot drift.

Deleting a post removes its replies first, then the post: an interruption
leaves a post with fewer replies, never replies without a post.
"""

import re
from typing import List, Optional

from bson import ObjectId
from pymongo import ASCENDING, DESCENDING, ReturnDocument
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import PyMongoError

from careerflow.core.exceptions import NotFound, PermissionDenied
from careerflow.core.logging_config import get_logger
from careerflow.core.permissions import Capability, has_capability
from careerflow.db.mongodb import get_collection
from careerflow.schemas.schemas import PostCreate, ReplyCreate
from careerflow.services.mongo_service import (
    AUTHOR_PROJECTION,
    author_summary,
    load_users,
    parse_object_id,
    serialize_doc,
)
from careerflow.utils.timeutils import utcnow

logger = get_logger(__name__)


def toggle_like(collection: Collection, doc_id: ObjectId, user_id: ObjectId, not_found: str) -> dict:
    """
    Add or remove user_id from liked_by, moving likes_count in lockstep.

    Each branch is guarded on current membership, so a concurrent toggle
    makes the guard miss and we retry against the new state.
    """
    for _ in range(3):
        unliked = collection.find_one_and_update(
            {"_id": doc_id, "liked_by": user_id},
            {"$pull": {"liked_by": user_id}, "$inc": {"likes_count": -1}, "$set": {"updated_at": utcnow()}},
            return_document=ReturnDocument.AFTER
        )
        if unliked:
            return {"liked": False, "likes_count": unliked["likes_count"]}

        liked = collection.find_one_and_update(
            {"_id": doc_id, "liked_by": {"$ne": user_id}},
            {"$addToSet": {"liked_by": user_id}, "$inc": {"likes_count": 1}, "$set": {"updated_at": utcnow()}},
            return_document=ReturnDocument.AFTER
        )
        if liked:
            return {"liked": True, "likes_count": liked["likes_count"]}

        if collection.count_documents({"_id": doc_id}, limit=1) == 0:
            raise NotFound(not_found)

    # Only reachable under sustained contention on the same document
    doc = collection.find_one({"_id": doc_id}, {"liked_by": 1})
    return {"liked": user_id in doc.get("liked_by", []), "likes_count": len(doc.get("liked_by", []))}


def _can_moderate(user: dict, author_id: ObjectId) -> bool:
    return author_id == user["_id"] or has_capability(user.get("role", ""), Capability.moderate_community)


class CommunityService:
    """
    Handles the community_posts and community_replies collections.
    """

    def __init__(self, db: Database):
        self.db = db
        self.posts = get_collection(db, "posts")
        self.replies = get_collection(db, "replies")

    # ------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------

    def _get_post(self, post_id) -> dict:
        oid = parse_object_id(post_id, "post")
        post = self.posts.find_one({"_id": oid})
        if not post:
            raise NotFound("Post not found.")
        return post

    def _get_reply(self, reply_id) -> dict:
        oid = parse_object_id(reply_id, "reply")
        reply = self.replies.find_one({"_id": oid})
        if not reply:
            raise NotFound("Reply not found.")
        return reply

    def _with_authors(self, docs: List[dict]) -> List[dict]:
        authors = load_users(self.db, (d["author"] for d in docs), AUTHOR_PROJECTION)
        results = []
        for doc in docs:
            data = serialize_doc(doc)
            data["author"] = author_summary(authors.get(doc["author"]), doc["author"])
            results.append(data)
        return results

    def sync_replies_count(self, post_id: ObjectId) -> int:
        """Recompute a post's replies_count from the replies collection."""
        count = self.replies.count_documents({"post_id": post_id})
        self.posts.update_one({"_id": post_id}, {"$set": {"replies_count": count}})
        return count

    # ------------------------------------------------------------
    # Posts
    # ------------------------------------------------------------

    def create_post(self, user: dict, payload: PostCreate) -> dict:
        now = utcnow()
        doc = {
            "title": payload.title,
            "body": payload.body,
            "category": payload.category.value,
            "author": user["_id"],
            "likes_count": 0,
            "liked_by": [],
            "replies_count": 0,
            "views_count": 0,
            "created_at": now,
            "updated_at": now,
        }
        result = self.posts.insert_one(doc)
        return self._with_authors([self.posts.find_one({"_id": result.inserted_id})])[0]

    def list_posts(self, category: Optional[str] = None, search: Optional[str] = None) -> List[dict]:
        query = {}
        if category and category != "all":
            query["category"] = category
        if search and search.strip():
            pattern = {"$regex": re.escape(search.strip()), "$options": "i"}
            query["$or"] = [{"title": pattern}, {"body": pattern}]

        posts = list(self.posts.find(query).sort("created_at", DESCENDING))
        return self._with_authors(posts)

    def get_post(self, post_id) -> dict:
        """
        Read a post and bump its view count.
        The increment is fire-and-forget: a failure is logged, not raised.
        """
        post = self._get_post(post_id)
        try:
            self.posts.update_one({"_id": post["_id"]}, {"$inc": {"views_count": 1}})
            post["views_count"] = post.get("views_count", 0) + 1
        except PyMongoError as e:
            logger.warning("Could not increment views for post %s: %s", post["_id"], e)
        return self._with_authors([post])[0]

    def like_post(self, user: dict, post_id) -> dict:
        oid = parse_object_id(post_id, "post")
        return toggle_like(self.posts, oid, user["_id"], "Post not found.")

    def delete_post(self, user: dict, post_id) -> int:
        """Delete a post (author or admin). Returns number of replies removed."""
        post = self._get_post(post_id)
        if not _can_moderate(user, post["author"]):
            raise PermissionDenied("You can only delete your own posts.")

        removed = self.replies.delete_many({"post_id": post["_id"]}).deleted_count
        self.posts.delete_one({"_id": post["_id"]})
        # a reply created between the two deletes would be orphaned
        self.replies.delete_many({"post_id": post["_id"]})

        logger.info("Post %s deleted by %s (%d replies)", post["_id"], user["_id"], removed)
        return removed

    # ------------------------------------------------------------
    # Replies
    # ------------------------------------------------------------

    def create_reply(self, user: dict, post_id, payload: ReplyCreate) -> dict:
        post = self._get_post(post_id)
        now = utcnow()
        doc = {
            "post_id": post["_id"],
            "author": user["_id"],
            "body": payload.body,
            "likes_count": 0,
            "liked_by": [],
            "created_at": now,
            "updated_at": now,
        }
        result = self.replies.insert_one(doc)
        self.sync_replies_count(post["_id"])
        return self._with_authors([self.replies.find_one({"_id": result.inserted_id})])[0]

    def list_replies(self, post_id) -> List[dict]:
        oid = parse_object_id(post_id, "post")
        replies = list(self.replies.find({"post_id": oid}).sort("created_at", ASCENDING))
        return self._with_authors(replies)

    def like_reply(self, user: dict, reply_id) -> dict:
        oid = parse_object_id(reply_id, "reply")
        return toggle_like(self.replies, oid, user["_id"], "Reply not found.")

    def delete_reply(self, user: dict, reply_id) -> None:
        reply = self._get_reply(reply_id)
        if not _can_moderate(user, reply["author"]):
            raise PermissionDenied("You can only delete your own replies.")

        self.replies.delete_one({"_id": reply["_id"]})
        self.sync_replies_count(reply["post_id"])
