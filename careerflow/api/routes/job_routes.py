"""
Job Routes

POST /jobs - Create job posting (counselor only)
GET /jobs - List jobs with search / tag / mine filters
GET /jobs/{job_id} - Get job details
DELETE /jobs/{job_id} - Delete job and its applications (owner only)
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from pymongo.database import Database

from careerflow.core.auth import get_current_user
from careerflow.core.permissions import Capability, require_capability
from careerflow.db.mongodb import get_db
from careerflow.services.job_service import JobService
from careerflow.schemas.schemas import JobCreate, JobEnvelope, JobListResponse, MessageResponse

router = APIRouter(prefix="/jobs", tags=["Jobs"])


def get_job_service(db: Database = Depends(get_db)) -> JobService:
    return JobService(db)


@router.post("", response_model=JobEnvelope, status_code=201)
def create_job(
    job: JobCreate,
    user: dict = Depends(require_capability(Capability.post_jobs)),
    service: JobService = Depends(get_job_service)
):
    """Create a new job posting. Only career counselors can post jobs."""
    return JobEnvelope(message="Job posted successfully", job=service.create_job(user, job))


@router.get("", response_model=JobListResponse)
def list_jobs(
    search: Optional[str] = Query(None, description="Search title, company, location and tags"),
    tag: Optional[str] = Query(None, description="Exact tag, case-insensitive"),
    mine: bool = Query(False, description="Only jobs posted by the caller"),
    user: dict = Depends(get_current_user),
    service: JobService = Depends(get_job_service)
):
    """List job postings, newest first."""
    return JobListResponse(jobs=service.list_jobs(user, search=search, tag=tag, mine=mine))


@router.get("/{job_id}", response_model=JobEnvelope)
def get_job(
    job_id: str,
    user: dict = Depends(get_current_user),
    service: JobService = Depends(get_job_service)
):
    """Get details of a specific job."""
    return JobEnvelope(job=service.get_job(job_id))


@router.delete("/{job_id}", response_model=MessageResponse)
def delete_job(
    job_id: str,
    user: dict = Depends(get_current_user),
    service: JobService = Depends(get_job_service)
):
    """Delete a job posting. Its applications are removed with it."""
    service.delete_job(user, job_id)
    return MessageResponse(message="Job deleted successfully.")
