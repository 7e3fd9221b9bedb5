"""
Job Board Service - job postings and applications.

Rules:
- Only counselors post jobs; the deadline must be in the future at creation.
- Only the posting counselor deletes a job or sees its applicants.
- Job seekers apply once per job, and only until the deadline instant.
  The unique (job_id, applicant_id) index backs the "once" rule.
"""

import csv
import io
import re
from typing import List, Optional

from pymongo import DESCENDING
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from careerflow.core.exceptions import Conflict, NotFound, PermissionDenied, ValidationFailed
from careerflow.core.logging_config import get_logger
from careerflow.db.mongodb import get_collection
from careerflow.schemas.schemas import ApplicationCreate, ApplicationStatus, JobCreate
from careerflow.services.mongo_service import load_users, parse_object_id, serialize_doc
from careerflow.services.user_service import empty_profile, normalize_string_list
from careerflow.utils.timeutils import to_utc_naive, utcnow

logger = get_logger(__name__)

EXPORT_COLUMNS = [
    "Full Name",
    "Email Address",
    "Skills",
    "Education",
    "Work Experience",
    "Cover Letter",
    "Resume URL",
    "Applied At",
    "Status",
]


def _job_out(job: dict, poster: Optional[dict]) -> dict:
    data = serialize_doc(job)
    data.pop("posted_by", None)
    data["posted_by"] = (
        {"id": str(poster["_id"]), "full_name": poster.get("full_name", ""), "email": poster.get("email", "")}
        if poster else None
    )
    return data


def _application_out(app: dict, job: Optional[dict] = None, applicant: Optional[dict] = None) -> dict:
    data = {
        "id": str(app["_id"]),
        "job_id": str(app["job_id"]),
        "applicant_id": str(app["applicant_id"]),
        "cover_letter": app.get("cover_letter", ""),
        "resume_url": app.get("resume_url", ""),
        "status": app.get("status", ApplicationStatus.submitted.value),
        "created_at": app.get("created_at"),
        "updated_at": app.get("updated_at"),
        "job": None,
        "applicant": None,
    }
    if job:
        data["job"] = {
            "id": str(job["_id"]),
            "title": job["title"],
            "company": job["company"],
            "location": job["location"],
            "application_deadline": job["application_deadline"],
        }
    if applicant:
        data["applicant"] = {
            "id": str(applicant["_id"]),
            "full_name": applicant.get("full_name", ""),
            "email": applicant.get("email", ""),
            "profile": {**empty_profile(), **(applicant.get("profile") or {})},
        }
    return data


def safe_filename(title: str) -> str:
    return re.sub(r"[^a-zA-Z0-9]", "_", title)[:40]


class JobService:
    """
    Handles the jobs and applications collections.
    """

    def __init__(self, db: Database):
        self.db = db
        self.jobs = get_collection(db, "jobs")
        self.applications = get_collection(db, "applications")

    # ------------------------------------------------------------
    # Jobs
    # ------------------------------------------------------------

    def _get_job(self, job_id) -> dict:
        oid = parse_object_id(job_id, "job")
        job = self.jobs.find_one({"_id": oid})
        if not job:
            raise NotFound("Job not found.")
        return job

    def _with_posters(self, jobs: List[dict]) -> List[dict]:
        posters = load_users(self.db, (j["posted_by"] for j in jobs), {"full_name": 1, "email": 1})
        return [_job_out(j, posters.get(j["posted_by"])) for j in jobs]

    def create_job(self, user: dict, payload: JobCreate) -> dict:
        deadline = to_utc_naive(payload.application_deadline)
        if deadline <= utcnow():
            raise ValidationFailed.for_field(
                "application_deadline", "Application deadline must be in the future."
            )

        now = utcnow()
        doc = {
            "title": payload.title,
            "company": payload.company,
            "location": payload.location,
            "description": payload.description,
            "salary": payload.salary,
            "application_deadline": deadline,
            "tags": normalize_string_list(payload.tags),
            "posted_by": user["_id"],
            "created_at": now,
            "updated_at": now,
        }
        result = self.jobs.insert_one(doc)
        logger.info("Job %s posted by %s", result.inserted_id, user["_id"])
        return self.get_job(result.inserted_id)

    def list_jobs(self, user: Optional[dict] = None, search: Optional[str] = None,
                  tag: Optional[str] = None, mine: bool = False) -> List[dict]:
        """
        List jobs, newest first.

        search: case-insensitive substring over title, company, location and tags
        tag:    case-insensitive exact tag match
        mine:   only the caller's postings
        """
        query = {}
        if mine and user:
            query["posted_by"] = user["_id"]
        if search and search.strip():
            pattern = {"$regex": re.escape(search.strip()), "$options": "i"}
            query["$or"] = [
                {"title": pattern},
                {"company": pattern},
                {"location": pattern},
                {"tags": pattern},
            ]
        if tag and tag.strip():
            query["tags"] = {"$regex": f"^{re.escape(tag.strip())}$", "$options": "i"}

        jobs = list(self.jobs.find(query).sort("created_at", DESCENDING))
        return self._with_posters(jobs)

    def get_job(self, job_id) -> dict:
        return self._with_posters([self._get_job(job_id)])[0]

    def delete_job(self, user: dict, job_id) -> None:
        """Delete a job posting (owner only). Cascades to applications."""
        job = self._get_job(job_id)
        if job["posted_by"] != user["_id"]:
            raise PermissionDenied("You can only delete your own job postings.")

        self.applications.delete_many({"job_id": job["_id"]})
        self.jobs.delete_one({"_id": job["_id"]})
        logger.info("Job %s deleted by %s", job["_id"], user["_id"])

    # ------------------------------------------------------------
    # Applications
    # ------------------------------------------------------------

    def apply(self, user: dict, job_id, payload: ApplicationCreate) -> dict:
        job = self._get_job(job_id)

        if utcnow() > job["application_deadline"]:
            raise ValidationFailed("Application deadline has passed.")

        if self.applications.find_one({"job_id": job["_id"], "applicant_id": user["_id"]}, {"_id": 1}):
            raise Conflict("You have already applied for this job.")

        now = utcnow()
        doc = {
            "job_id": job["_id"],
            "applicant_id": user["_id"],
            "cover_letter": payload.cover_letter,
            "resume_url": payload.resume_url,
            "status": ApplicationStatus.submitted.value,
            "created_at": now,
            "updated_at": now,
        }
        try:
            result = self.applications.insert_one(doc)
        except DuplicateKeyError:
            raise Conflict("You have already applied for this job.")

        return _application_out(self.applications.find_one({"_id": result.inserted_id}))

    def has_applied(self, user: dict, job_id) -> bool:
        oid = parse_object_id(job_id, "job")
        return self.applications.find_one({"job_id": oid, "applicant_id": user["_id"]}, {"_id": 1}) is not None

    def list_my_applications(self, user: dict) -> List[dict]:
        apps = list(self.applications.find({"applicant_id": user["_id"]}).sort("created_at", DESCENDING))
        job_ids = list({a["job_id"] for a in apps})
        jobs = {j["_id"]: j for j in self.jobs.find({"_id": {"$in": job_ids}})} if job_ids else {}
        return [_application_out(a, job=jobs.get(a["job_id"])) for a in apps]

    def list_applicants(self, user: dict, job_id) -> List[dict]:
        """Applications for a job, visible only to the counselor who posted it."""
        job = self._get_job(job_id)
        if job["posted_by"] != user["_id"]:
            raise PermissionDenied("You can only view applicants for your own jobs.")

        apps = list(self.applications.find({"job_id": job["_id"]}).sort("created_at", DESCENDING))
        applicants = load_users(
            self.db,
            (a["applicant_id"] for a in apps),
            {"full_name": 1, "email": 1, "profile": 1}
        )
        return [_application_out(a, applicant=applicants.get(a["applicant_id"])) for a in apps]

    def export_applicants_csv(self, user: dict, job_id) -> tuple:
        """
        Materialize the applicant list as CSV.
        Returns (filename, csv_bytes).
        """
        job = self._get_job(job_id)
        applications = self.list_applicants(user, job["_id"])

        buffer = io.StringIO()
        writer = csv.DictWriter(buffer, fieldnames=EXPORT_COLUMNS)
        writer.writeheader()
        for app in applications:
            applicant = app["applicant"] or {}
            profile = applicant.get("profile") or {}
            writer.writerow({
                "Full Name": applicant.get("full_name", ""),
                "Email Address": applicant.get("email", ""),
                "Skills": ", ".join(profile.get("skills") or []),
                "Education": "; ".join(
                    " - ".join(filter(None, [e.get("degree"), e.get("institution"), e.get("field_of_study")]))
                    for e in profile.get("education") or []
                ),
                "Work Experience": "; ".join(
                    " at ".join(filter(None, [e.get("title"), e.get("company")]))
                    for e in profile.get("experience") or []
                ),
                "Cover Letter": app.get("cover_letter", ""),
                "Resume URL": app.get("resume_url", ""),
                "Applied At": app["created_at"].isoformat() if app.get("created_at") else "",
                "Status": app.get("status", ""),
            })

        filename = f"{safe_filename(job['title'])}_applicants.csv"
        return filename, buffer.getvalue().encode("utf-8")
