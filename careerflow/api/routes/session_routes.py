"""
Counseling Session Routes

POST /sessions/request - Request a session (job seeker)
GET /sessions - Caller's sessions
PATCH /sessions/{session_id}/accept - Counselor accepts
PATCH /sessions/{session_id}/reject - Counselor rejects
PATCH /sessions/{session_id}/reschedule - Counselor proposes a new time
PATCH /sessions/{session_id}/confirm - Job seeker confirms the new time
PATCH /sessions/{session_id}/cancel - Job seeker cancels
"""

from fastapi import APIRouter, Depends
from pymongo.database import Database

from careerflow.core.auth import get_current_user
from careerflow.core.permissions import Capability, require_capability
from careerflow.db.mongodb import get_db
from careerflow.services.session_service import SessionService, TRANSITIONS
from careerflow.schemas.schemas import (
    SessionRequest, RescheduleRequest, SessionEnvelope, SessionListResponse
)

router = APIRouter(prefix="/sessions", tags=["Sessions"])

counselor = require_capability(Capability.respond_to_sessions)
job_seeker = require_capability(Capability.manage_session_requests)


def get_session_service(db: Database = Depends(get_db)) -> SessionService:
    return SessionService(db)


def _envelope(verb: str, session: dict) -> SessionEnvelope:
    return SessionEnvelope(message=TRANSITIONS[verb].message, session=session)


@router.post("/request", response_model=SessionEnvelope, status_code=201)
def request_session(
    request: SessionRequest,
    user: dict = Depends(require_capability(Capability.request_sessions)),
    service: SessionService = Depends(get_session_service)
):
    """Ask an active counselor for a session at a future time."""
    return SessionEnvelope(message="Session request sent", session=service.request_session(user, request))


@router.get("", response_model=SessionListResponse)
def list_sessions(
    user: dict = Depends(get_current_user),
    service: SessionService = Depends(get_session_service)
):
    """Counselors get the sessions they counsel, everyone else the ones they requested."""
    return SessionListResponse(sessions=service.list_sessions(user))


@router.patch("/{session_id}/accept", response_model=SessionEnvelope)
def accept_session(
    session_id: str,
    user: dict = Depends(counselor),
    service: SessionService = Depends(get_session_service)
):
    return _envelope("accept", service.accept(user, session_id))


@router.patch("/{session_id}/reject", response_model=SessionEnvelope)
def reject_session(
    session_id: str,
    user: dict = Depends(counselor),
    service: SessionService = Depends(get_session_service)
):
    return _envelope("reject", service.reject(user, session_id))


@router.patch("/{session_id}/reschedule", response_model=SessionEnvelope)
def reschedule_session(
    session_id: str,
    request: RescheduleRequest,
    user: dict = Depends(counselor),
    service: SessionService = Depends(get_session_service)
):
    return _envelope("reschedule", service.reschedule(user, session_id, request.rescheduled_at))


@router.patch("/{session_id}/confirm", response_model=SessionEnvelope)
def confirm_session(
    session_id: str,
    user: dict = Depends(job_seeker),
    service: SessionService = Depends(get_session_service)
):
    return _envelope("confirm", service.confirm(user, session_id))


@router.patch("/{session_id}/cancel", response_model=SessionEnvelope)
def cancel_session(
    session_id: str,
    user: dict = Depends(job_seeker),
    service: SessionService = Depends(get_session_service)
):
    return _envelope("cancel", service.cancel(user, session_id))
