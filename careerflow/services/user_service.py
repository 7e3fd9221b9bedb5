"""
User Directory Service

Signup, login, own-profile read/update and the public counselor listing.

Profile completion score (recomputed on every profile save):
    base 10
    +10 image, +15 bio, +20 skills, +20 career interests,
    +15 education, +15 experience, +15 any social link
    capped at 100
"""

from typing import Iterable, List, Optional

from pymongo import ReturnDocument
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from careerflow.core.auth import create_access_token, hash_password, verify_password
from careerflow.core.exceptions import AuthenticationFailed, Conflict
from careerflow.core.logging_config import get_logger
from careerflow.core.permissions import Role
from careerflow.db.mongodb import get_collection
from careerflow.schemas.schemas import ProfileUpdate, SignupRequest
from careerflow.utils.timeutils import parse_optional_datetime, utcnow

logger = get_logger(__name__)

SOCIAL_LINK_KEYS = ("linkedin", "github", "portfolio", "website")

INVALID_CREDENTIALS = "Invalid email or password"


# ============================================================
# PURE HELPERS
# ============================================================

def empty_profile() -> dict:
    return {
        "bio": "",
        "profile_image_url": "",
        "location": "",
        "phone": "",
        "skills": [],
        "career_interests": [],
        "social_links": {key: "" for key in SOCIAL_LINK_KEYS},
        "education": [],
        "experience": [],
        "profile_completion_score": 0,
    }


def default_preferences() -> dict:
    return {
        "dark_mode_enabled": False,
        "email_notifications_enabled": True,
        "job_alerts_enabled": True,
    }


def normalize_string_list(values: Iterable[str]) -> List[str]:
    """Trim, drop empties and de-duplicate (case-sensitive, first one wins)."""
    seen = set()
    result = []
    for value in values:
        item = (value or "").strip()
        if item and item not in seen:
            seen.add(item)
            result.append(item)
    return result


def calculate_profile_completion_score(profile: dict) -> int:
    score = 10

    if (profile.get("profile_image_url") or "").strip():
        score += 10
    if (profile.get("bio") or "").strip():
        score += 15
    if profile.get("skills"):
        score += 20
    if profile.get("career_interests"):
        score += 20
    if profile.get("education"):
        score += 15
    if profile.get("experience"):
        score += 15

    links = profile.get("social_links") or {}
    if any(isinstance(v, str) and v.strip() for v in links.values()):
        score += 15

    return min(score, 100)


def _normalize_education(entries) -> List[dict]:
    normalized = []
    for item in entries:
        entry = {
            "degree": item.degree or "",
            "institution": item.institution or "",
            "field_of_study": item.field_of_study or "",
            "gpa": item.gpa or "",
            "start_date": parse_optional_datetime(item.start_date),
            "end_date": parse_optional_datetime(item.end_date),
        }
        if any(entry.values()):
            normalized.append(entry)
    return normalized


def _normalize_experience(entries) -> List[dict]:
    normalized = []
    for item in entries:
        entry = {
            "title": item.title or "",
            "company": item.company or "",
            "start_date": parse_optional_datetime(item.start_date),
            "end_date": parse_optional_datetime(item.end_date),
            "description": item.description or "",
        }
        if any(entry.values()):
            normalized.append(entry)
    return normalized


def build_profile(update: ProfileUpdate, current: Optional[dict] = None) -> dict:
    """Normalize a profile update into the stored profile sub-document."""
    current = current or empty_profile()
    profile = {
        "bio": update.bio or "",
        "profile_image_url": update.profile_image_url or "",
        # location/phone are optional in the payload; keep what we had
        "location": update.location if update.location is not None else current.get("location", ""),
        "phone": update.phone if update.phone is not None else current.get("phone", ""),
        "skills": normalize_string_list(update.skills),
        "career_interests": normalize_string_list(update.career_interests),
        "education": _normalize_education(update.education),
        "experience": _normalize_experience(update.experience),
        "social_links": {key: getattr(update.social_links, key) or "" for key in SOCIAL_LINK_KEYS},
    }
    profile["profile_completion_score"] = calculate_profile_completion_score(profile)
    return profile


def public_user(user: dict) -> dict:
    """Client-safe projection. Never includes the credential hash."""
    profile = {**empty_profile(), **(user.get("profile") or {})}
    return {
        "id": str(user["_id"]),
        "full_name": user.get("full_name", ""),
        "email": user.get("email", ""),
        "role": user.get("role", Role.job_seeker.value),
        "profile": profile,
        "preferences": {**default_preferences(), **(user.get("preferences") or {})},
        "created_at": user.get("created_at"),
    }


def issue_token(user: dict) -> str:
    return create_access_token(data={"sub": str(user["_id"]), "role": user["role"]})


# ============================================================
# SERVICE
# ============================================================

class UserService:
    """
    Handles the users collection.
    """

    def __init__(self, db: Database):
        self.collection = get_collection(db, "users")

    def register(self, payload: SignupRequest) -> dict:
        """
        Create a user and return {"token", "user"}.
        Only a bcrypt hash of the password is stored.
        """
        email = payload.email.strip().lower()
        if self.collection.find_one({"email": email}, {"_id": 1}):
            raise Conflict("Email already in use")

        now = utcnow()
        doc = {
            "full_name": payload.full_name,
            "email": email,
            "password_hash": hash_password(payload.password),
            "role": payload.role.value,
            "profile": empty_profile(),
            "preferences": default_preferences(),
            "is_active": True,
            "last_login_at": None,
            "created_at": now,
            "updated_at": now,
        }
        doc["profile"]["profile_completion_score"] = calculate_profile_completion_score(doc["profile"])

        try:
            result = self.collection.insert_one(doc)
        except DuplicateKeyError:
            # lost a race with a concurrent signup for the same email
            raise Conflict("Email already in use")

        user = self.collection.find_one({"_id": result.inserted_id})
        logger.info("Registered %s as %s", user["_id"], user["role"])
        return {"token": issue_token(user), "user": public_user(user)}

    def authenticate(self, email: str, password: str) -> dict:
        """
        Verify credentials and return {"token", "user"}.
        Unknown email, wrong password and inactive accounts fail identically.
        """
        user = self.collection.find_one({"email": email.strip().lower()})
        if not user or not user.get("is_active", True):
            raise AuthenticationFailed(INVALID_CREDENTIALS)
        if not verify_password(password, user["password_hash"]):
            raise AuthenticationFailed(INVALID_CREDENTIALS)

        user = self.collection.find_one_and_update(
            {"_id": user["_id"]},
            {"$set": {"last_login_at": utcnow()}},
            return_document=ReturnDocument.AFTER
        )
        return {"token": issue_token(user), "user": public_user(user)}

    def update_profile(self, user: dict, update: ProfileUpdate) -> dict:
        """Replace the caller's profile sections and recompute the completion score."""
        profile = build_profile(update, user.get("profile"))
        updated = self.collection.find_one_and_update(
            {"_id": user["_id"]},
            {"$set": {"profile": profile, "updated_at": utcnow()}},
            return_document=ReturnDocument.AFTER
        )
        return public_user(updated)

    def list_active_counselors(self) -> List[dict]:
        cursor = self.collection.find(
            {"role": Role.career_counselor.value, "is_active": True},
            {
                "full_name": 1,
                "email": 1,
                "profile.bio": 1,
                "profile.profile_image_url": 1,
                "profile.skills": 1,
                "profile.career_interests": 1,
            }
        ).sort("full_name", 1)

        counselors = []
        for doc in cursor:
            profile = doc.get("profile") or {}
            counselors.append({
                "id": str(doc["_id"]),
                "full_name": doc.get("full_name", ""),
                "email": doc.get("email", ""),
                "bio": profile.get("bio", ""),
                "profile_image_url": profile.get("profile_image_url", ""),
                "skills": profile.get("skills", []),
                "career_interests": profile.get("career_interests", []),
            })
        return counselors
