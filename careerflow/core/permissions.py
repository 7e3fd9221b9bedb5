"""
Roles and capabilities.

Every role-gated operation names a Capability; the table below is the only
place that says which roles hold it. Routes check it once through
require_capability(), services only check ownership.
"""

from enum import Enum
from typing import Callable, Dict, FrozenSet

from fastapi import Depends

from careerflow.core.auth import get_current_user
from careerflow.core.exceptions import PermissionDenied


class Role(str, Enum):
    job_seeker = "job_seeker"
    career_counselor = "career_counselor"
    admin = "admin"


class Capability(str, Enum):
    post_jobs = "post_jobs"
    apply_to_jobs = "apply_to_jobs"
    review_applicants = "review_applicants"
    request_sessions = "request_sessions"
    respond_to_sessions = "respond_to_sessions"      # accept / reject / reschedule
    manage_session_requests = "manage_session_requests"  # confirm / cancel
    share_resources = "share_resources"
    moderate_community = "moderate_community"


CAPABILITIES: Dict[Capability, FrozenSet[Role]] = {
    Capability.post_jobs: frozenset({Role.career_counselor}),
    Capability.apply_to_jobs: frozenset({Role.job_seeker}),
    Capability.review_applicants: frozenset({Role.career_counselor}),
    Capability.request_sessions: frozenset({Role.job_seeker}),
    Capability.respond_to_sessions: frozenset({Role.career_counselor}),
    Capability.manage_session_requests: frozenset({Role.job_seeker}),
    Capability.share_resources: frozenset(Role),
    Capability.moderate_community: frozenset({Role.admin}),
}

DENIED_MESSAGES: Dict[Capability, str] = {
    Capability.post_jobs: "Only career counselors can post jobs.",
    Capability.apply_to_jobs: "Only job seekers can apply for jobs.",
    Capability.review_applicants: "Only counselors can view applicants.",
    Capability.request_sessions: "Only job seekers can request sessions",
    Capability.respond_to_sessions: "Only career counselors can respond to session requests",
    Capability.manage_session_requests: "Only job seekers can confirm or cancel sessions",
    Capability.share_resources: "You cannot share resources",
    Capability.moderate_community: "Only admins can moderate the community",
}


def has_capability(role: str, capability: Capability) -> bool:
    try:
        return Role(role) in CAPABILITIES[capability]
    except ValueError:
        return False


def require_capability(capability: Capability) -> Callable[..., dict]:
    """
    FastAPI dependency factory.

    Usage:
        @router.post("")
        def create(user: dict = Depends(require_capability(Capability.post_jobs))):
            ...
    """
    def dependency(user: dict = Depends(get_current_user)) -> dict:
        if not has_capability(user.get("role", ""), capability):
            raise PermissionDenied(DENIED_MESSAGES[capability])
        return user

    return dependency
