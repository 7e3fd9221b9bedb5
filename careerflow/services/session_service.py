"""
Counseling Session Scheduler

State machine between a job seeker and a counselor:

    request (seeker)      -> pending
    accept (counselor)    pending                      -> accepted
    reject (counselor)    pending                      -> rejected
    reschedule (counselor) pending | accepted          -> rescheduled  (+ rescheduled_at)
    confirm (seeker)      rescheduled                  -> confirmed    (scheduled_at <- rescheduled_at)
    cancel (seeker)       anything but cancelled/rejected -> cancelled

Every transition re-reads the session, checks the caller is the recorded
counterparty for that side, checks the current state, then writes with the
expected state in the filter. A session that changed underneath us fails
with the same state-conflict error.

Overlapping sessions for one counselor are not detected.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, FrozenSet, List, Optional

from pymongo import DESCENDING, ReturnDocument
from pymongo.database import Database

from careerflow.core.exceptions import NotFound, PermissionDenied, StateConflict, ValidationFailed
from careerflow.core.logging_config import get_logger
from careerflow.core.permissions import Role
from careerflow.db.mongodb import get_collection
from careerflow.schemas.schemas import SessionRequest, SessionStatus
from careerflow.services.mongo_service import load_users, parse_object_id
from careerflow.utils.timeutils import to_utc_naive, utcnow

logger = get_logger(__name__)

COUNSELOR_SIDE = "counselor_id"
SEEKER_SIDE = "job_seeker_id"

FUTURE_TIME_MESSAGE = "Please select a future date and time"


@dataclass(frozen=True)
class Transition:
    verb: str
    side: str
    allowed_from: FrozenSet[SessionStatus]
    target: SessionStatus
    message: str


ALL_STATES = frozenset(SessionStatus)

TRANSITIONS = {
    "accept": Transition(
        "accept", COUNSELOR_SIDE, frozenset({SessionStatus.pending}),
        SessionStatus.accepted, "Session accepted"
    ),
    "reject": Transition(
        "reject", COUNSELOR_SIDE, frozenset({SessionStatus.pending}),
        SessionStatus.rejected, "Session rejected"
    ),
    "reschedule": Transition(
        "reschedule", COUNSELOR_SIDE, frozenset({SessionStatus.pending, SessionStatus.accepted}),
        SessionStatus.rescheduled, "Session rescheduled"
    ),
    "confirm": Transition(
        "confirm", SEEKER_SIDE, frozenset({SessionStatus.rescheduled}),
        SessionStatus.confirmed, "Session confirmed"
    ),
    "cancel": Transition(
        "cancel", SEEKER_SIDE, ALL_STATES - {SessionStatus.cancelled, SessionStatus.rejected},
        SessionStatus.cancelled, "Session cancelled"
    ),
}


def _require_future(value: datetime, field: str) -> datetime:
    when = to_utc_naive(value)
    if when <= utcnow():
        raise ValidationFailed.for_field(field, FUTURE_TIME_MESSAGE)
    return when


def _participant(user: Optional[dict], user_id) -> dict:
    return {
        "id": str(user_id),
        "full_name": user.get("full_name", "Unknown") if user else "Unknown",
    }


class SessionService:
    """
    Handles the sessions collection.
    """

    def __init__(self, db: Database):
        self.db = db
        self.collection = get_collection(db, "sessions")
        self.users = get_collection(db, "users")

    def _out(self, sessions: List[dict]) -> List[dict]:
        people = load_users(
            self.db,
            [s[SEEKER_SIDE] for s in sessions] + [s[COUNSELOR_SIDE] for s in sessions],
            {"full_name": 1}
        )
        return [
            {
                "id": str(s["_id"]),
                "job_seeker": _participant(people.get(s[SEEKER_SIDE]), s[SEEKER_SIDE]),
                "counselor": _participant(people.get(s[COUNSELOR_SIDE]), s[COUNSELOR_SIDE]),
                "scheduled_at": s["scheduled_at"],
                "rescheduled_at": s.get("rescheduled_at"),
                "status": s["status"],
                "notes": s.get("notes", ""),
                "created_at": s.get("created_at"),
                "updated_at": s.get("updated_at"),
            }
            for s in sessions
        ]

    def _get(self, session_id) -> dict:
        oid = parse_object_id(session_id, "session")
        session = self.collection.find_one({"_id": oid})
        if not session:
            raise NotFound("Session not found")
        return session

    # ------------------------------------------------------------
    # Job seeker side
    # ------------------------------------------------------------

    def request_session(self, user: dict, payload: SessionRequest) -> dict:
        counselor_id = parse_object_id(payload.counselor_id, "counselor")
        counselor = self.users.find_one({
            "_id": counselor_id,
            "role": Role.career_counselor.value,
            "is_active": True,
        })
        if not counselor:
            raise NotFound("Counselor not found")

        scheduled_at = _require_future(payload.scheduled_at, "scheduled_at")

        now = utcnow()
        doc = {
            SEEKER_SIDE: user["_id"],
            COUNSELOR_SIDE: counselor["_id"],
            "scheduled_at": scheduled_at,
            "rescheduled_at": None,
            "status": SessionStatus.pending.value,
            "notes": payload.notes,
            "created_at": now,
            "updated_at": now,
        }
        result = self.collection.insert_one(doc)
        logger.info("Session %s requested by %s with %s", result.inserted_id, user["_id"], counselor["_id"])
        return self._out([self.collection.find_one({"_id": result.inserted_id})])[0]

    def confirm(self, user: dict, session_id) -> dict:
        return self._apply(user, session_id, TRANSITIONS["confirm"], lambda s: {
            "scheduled_at": s["rescheduled_at"],
            "rescheduled_at": None,
        })

    def cancel(self, user: dict, session_id) -> dict:
        return self._apply(user, session_id, TRANSITIONS["cancel"])

    # ------------------------------------------------------------
    # Counselor side
    # ------------------------------------------------------------

    def accept(self, user: dict, session_id) -> dict:
        return self._apply(user, session_id, TRANSITIONS["accept"])

    def reject(self, user: dict, session_id) -> dict:
        return self._apply(user, session_id, TRANSITIONS["reject"])

    def reschedule(self, user: dict, session_id, new_time: datetime) -> dict:
        def proposed(_session):
            return {"rescheduled_at": _require_future(new_time, "rescheduled_at")}
        return self._apply(user, session_id, TRANSITIONS["reschedule"], proposed)

    # ------------------------------------------------------------
    # Shared
    # ------------------------------------------------------------

    def list_sessions(self, user: dict) -> List[dict]:
        """Counselors see sessions they counsel; everyone else sees sessions they requested."""
        side = COUNSELOR_SIDE if user.get("role") == Role.career_counselor.value else SEEKER_SIDE
        sessions = list(self.collection.find({side: user["_id"]}).sort("created_at", DESCENDING))
        return self._out(sessions)

    def _apply(self, user: dict, session_id, transition: Transition,
               extra_fields: Optional[Callable[[dict], dict]] = None) -> dict:
        session = self._get(session_id)

        if session[transition.side] != user["_id"]:
            raise PermissionDenied("Not your session")

        current = SessionStatus(session["status"])
        if current not in transition.allowed_from:
            raise StateConflict(
                f"Cannot {transition.verb} a session that is {current.value}",
                current_state=current.value
            )

        fields = {"status": transition.target.value, "updated_at": utcnow()}
        if extra_fields:
            fields.update(extra_fields(session))

        updated = self.collection.find_one_and_update(
            {"_id": session["_id"], "status": current.value},
            {"$set": fields},
            return_document=ReturnDocument.AFTER
        )
        if updated is None:
            latest = self._get(session["_id"])
            raise StateConflict(
                f"Cannot {transition.verb} a session that is {latest['status']}",
                current_state=latest["status"]
            )

        logger.info(
            "Session %s: %s -> %s by %s",
            session["_id"], current.value, transition.target.value, user["_id"]
        )
        return self._out([updated])[0]
