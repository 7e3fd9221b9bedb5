"""
Application Routes

POST /applications/{job_id}/apply - Apply to job (job seeker only)
GET /applications/mine - Caller's applications
GET /applications/{job_id}/check - Has the caller applied?
GET /applications/{job_id}/applicants - Applicants (posting counselor only)
GET /applications/{job_id}/applicants/download - Applicants as CSV
"""

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse

from careerflow.api.routes.job_routes import get_job_service
from careerflow.core.auth import get_current_user
from careerflow.core.permissions import Capability, require_capability
from careerflow.services.job_service import JobService
from careerflow.schemas.schemas import (
    ApplicationCreate, ApplicationEnvelope, ApplicationListResponse, ApplicationCheckResponse
)

router = APIRouter(prefix="/applications", tags=["Applications"])


@router.get("/mine", response_model=ApplicationListResponse)
def list_my_applications(
    user: dict = Depends(get_current_user),
    service: JobService = Depends(get_job_service)
):
    return ApplicationListResponse(applications=service.list_my_applications(user))


@router.post("/{job_id}/apply", response_model=ApplicationEnvelope, status_code=201)
def apply_to_job(
    job_id: str,
    application: ApplicationCreate,
    user: dict = Depends(require_capability(Capability.apply_to_jobs)),
    service: JobService = Depends(get_job_service)
):
    """Apply once per job, before its deadline."""
    return ApplicationEnvelope(
        message="Application submitted successfully.",
        application=service.apply(user, job_id, application)
    )


@router.get("/{job_id}/check", response_model=ApplicationCheckResponse)
def check_application(
    job_id: str,
    user: dict = Depends(get_current_user),
    service: JobService = Depends(get_job_service)
):
    return ApplicationCheckResponse(applied=service.has_applied(user, job_id))


@router.get("/{job_id}/applicants", response_model=ApplicationListResponse)
def list_applicants(
    job_id: str,
    user: dict = Depends(require_capability(Capability.review_applicants)),
    service: JobService = Depends(get_job_service)
):
    """Applicants with their profiles, for the counselor who posted the job."""
    return ApplicationListResponse(applications=service.list_applicants(user, job_id))


@router.get("/{job_id}/applicants/download")
def download_applicants(
    job_id: str,
    user: dict = Depends(require_capability(Capability.review_applicants)),
    service: JobService = Depends(get_job_service)
):
    """Applicant list as a CSV attachment."""
    filename, content = service.export_applicants_csv(user, job_id)
    return StreamingResponse(
        iter([content]),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'}
    )
