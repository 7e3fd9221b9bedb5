"""
Counselor Directory Routes

GET /counselors - Active career counselors (public)
"""

from fastapi import APIRouter, Depends

from careerflow.api.routes.auth_routes import get_user_service
from careerflow.services.user_service import UserService
from careerflow.schemas.schemas import CounselorListResponse

router = APIRouter(prefix="/counselors", tags=["Counselors"])


@router.get("", response_model=CounselorListResponse)
def list_counselors(service: UserService = Depends(get_user_service)):
    return CounselorListResponse(counselors=service.list_active_counselors())
