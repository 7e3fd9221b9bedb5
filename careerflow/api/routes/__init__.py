"""
API Routes - Combines all route modules into single router.
"""

from fastapi import APIRouter

from careerflow.api.routes.auth_routes import router as auth_router
from careerflow.api.routes.counselor_routes import router as counselor_router
from careerflow.api.routes.job_routes import router as job_router
from careerflow.api.routes.application_routes import router as application_router
from careerflow.api.routes.community_routes import posts_router, replies_router
from careerflow.api.routes.resource_routes import router as resource_router
from careerflow.api.routes.session_routes import router as session_router
from careerflow.api.routes.ai_routes import router as ai_router
from careerflow.schemas.schemas import ErrorResponse

# Every AppError renders as ErrorResponse
ERROR_RESPONSES = {
    status: {"model": ErrorResponse} for status in (400, 401, 403, 404, 409, 413, 503)
}

# Main API router
api_router = APIRouter(responses=ERROR_RESPONSES)

# Include all sub-routers
api_router.include_router(auth_router)
api_router.include_router(counselor_router)
api_router.include_router(job_router)
api_router.include_router(application_router)
api_router.include_router(posts_router)
api_router.include_router(replies_router)
api_router.include_router(resource_router)
api_router.include_router(session_router)
api_router.include_router(ai_router)
