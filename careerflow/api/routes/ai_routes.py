"""
AI Coach Routes

POST /ai/chat - Conversational coaching
GET /ai/career-paths - Three ranked career paths for the caller
POST /ai/resume-feedback - Resume critique (raw PDF / DOCX / text body)
POST /ai/fit-score - Fit against a pasted job description
POST /ai/career-path-tree - Step plan towards a goal role
"""

from fastapi import APIRouter, Depends, Request
from fastapi.concurrency import run_in_threadpool

from careerflow.core.auth import get_current_user
from careerflow.core.config import get_settings
from careerflow.core.exceptions import PayloadTooLarge
from careerflow.services.coach_client import CoachClient, get_coach_client
from careerflow.services.coach_service import CoachService
from careerflow.utils.file_upload import check_declared_size, extract_text_from_body, max_upload_bytes
from careerflow.schemas.schemas import (
    ChatRequest, ChatResponse, CareerPathsResponse, ResumeFeedbackResponse,
    FitScoreRequest, FitScoreResponse, PathTreeRequest, CareerPathTreeResponse
)

router = APIRouter(prefix="/ai", tags=["AI Coach"])


def get_coach_service(client: CoachClient = Depends(get_coach_client)) -> CoachService:
    return CoachService(client)


@router.post("/chat", response_model=ChatResponse)
def chat(
    request: ChatRequest,
    user: dict = Depends(get_current_user),
    coach: CoachService = Depends(get_coach_service)
):
    history = [turn.model_dump() for turn in request.history]
    return ChatResponse(reply=coach.chat(user, request.message, history, request.context))


@router.get("/career-paths", response_model=CareerPathsResponse)
def career_paths(
    user: dict = Depends(get_current_user),
    coach: CoachService = Depends(get_coach_service)
):
    """Exactly three paths, best fit first."""
    return coach.career_paths(user)


@router.post("/resume-feedback", response_model=ResumeFeedbackResponse)
async def resume_feedback(
    request: Request,
    user: dict = Depends(get_current_user),
    coach: CoachService = Depends(get_coach_service)
):
    """
    Send the document itself as the body, e.g.
    Content-Type: application/pdf
    """
    max_mb = get_settings().max_upload_mb
    check_declared_size(request.headers.get("content-length"), max_mb)

    # chunked uploads carry no Content-Length; stop reading once past the cap
    chunks, received = [], 0
    async for chunk in request.stream():
        received += len(chunk)
        if received > max_upload_bytes(max_mb):
            raise PayloadTooLarge(f"File too large. Maximum size: {max_mb}MB")
        chunks.append(chunk)

    text = await run_in_threadpool(
        extract_text_from_body,
        b"".join(chunks),
        request.headers.get("content-type", ""),
        max_mb
    )
    return await run_in_threadpool(coach.resume_feedback, user, text)


@router.post("/fit-score", response_model=FitScoreResponse)
def fit_score(
    request: FitScoreRequest,
    user: dict = Depends(get_current_user),
    coach: CoachService = Depends(get_coach_service)
):
    return coach.fit_score(user, request.job_description)


@router.post("/career-path-tree", response_model=CareerPathTreeResponse)
def career_path_tree(
    request: PathTreeRequest,
    user: dict = Depends(get_current_user),
    coach: CoachService = Depends(get_coach_service)
):
    """Four to six roles ordered by step."""
    return coach.career_path_tree(user, request.goal_role)
