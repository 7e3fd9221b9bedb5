"""
Pydantic Schemas - Request/Response Validation

All API request and response schemas in one file for simplicity.
Request models strip surrounding whitespace before length checks.
"""

from pydantic import BaseModel, ConfigDict, EmailStr, Field, StringConstraints, field_validator
from typing import Annotated, Optional, List, Literal
from datetime import datetime
from enum import Enum


# ============================================================
# ENUMS
# ============================================================

class SignupRole(str, Enum):
    job_seeker = "job_seeker"
    career_counselor = "career_counselor"


class ApplicationStatus(str, Enum):
    submitted = "submitted"
    reviewed = "reviewed"
    shortlisted = "shortlisted"
    rejected = "rejected"


class PostCategory(str, Enum):
    resume_interview = "resume_interview"
    industry_insights = "industry_insights"
    networking_tips = "networking_tips"
    general = "general"


class ResourceType(str, Enum):
    article = "article"
    video = "video"
    template = "template"


class ResourceCategory(str, Enum):
    resume = "resume"
    interview = "interview"
    job_search = "job_search"


class ResourceSort(str, Enum):
    newest = "newest"
    popular = "popular"


class SessionStatus(str, Enum):
    pending = "pending"
    accepted = "accepted"
    rejected = "rejected"
    rescheduled = "rescheduled"
    confirmed = "confirmed"
    cancelled = "cancelled"


class RequestModel(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)


Skill = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=60)]
Interest = Annotated[str, StringConstraints(strip_whitespace=True, min_length=2, max_length=80)]
Tag = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=40)]


# ============================================================
# AUTH SCHEMAS
# ============================================================

class SignupRequest(RequestModel):
    full_name: str = Field(..., min_length=2, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=128)
    confirm_password: str = Field(..., min_length=8, max_length=128)
    role: SignupRole = SignupRole.job_seeker

    @field_validator("confirm_password")
    @classmethod
    def passwords_match(cls, value: str, info) -> str:
        if "password" in info.data and value != info.data["password"]:
            raise ValueError("Passwords do not match")
        return value


class LoginRequest(RequestModel):
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=128)


# ============================================================
# PROFILE SCHEMAS
# ============================================================

class EducationEntry(RequestModel):
    degree: str = Field("", max_length=120)
    institution: str = Field("", max_length=120)
    field_of_study: str = Field("", max_length=120)
    gpa: str = Field("", max_length=30)
    start_date: Optional[str] = None
    end_date: Optional[str] = None


class ExperienceEntry(RequestModel):
    title: str = Field("", max_length=120)
    company: str = Field("", max_length=120)
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    description: str = Field("", max_length=500)


class SocialLinks(RequestModel):
    linkedin: str = Field("", max_length=300)
    github: str = Field("", max_length=300)
    portfolio: str = Field("", max_length=300)
    website: str = Field("", max_length=300)


class ProfileUpdate(RequestModel):
    bio: Optional[str] = Field(None, max_length=200)
    profile_image_url: Optional[str] = Field(None, max_length=500)
    location: Optional[str] = Field(None, max_length=200)
    phone: Optional[str] = Field(None, max_length=40)
    skills: List[Skill] = Field(default_factory=list, max_length=80)
    career_interests: List[Interest] = Field(default_factory=list, max_length=50)
    education: List[EducationEntry] = Field(default_factory=list, max_length=20)
    experience: List[ExperienceEntry] = Field(default_factory=list, max_length=20)
    social_links: SocialLinks = Field(default_factory=SocialLinks)


class EducationOut(BaseModel):
    degree: str = ""
    institution: str = ""
    field_of_study: str = ""
    gpa: str = ""
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None


class ExperienceOut(BaseModel):
    title: str = ""
    company: str = ""
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    description: str = ""


class ProfileOut(BaseModel):
    bio: str = ""
    profile_image_url: str = ""
    location: str = ""
    phone: str = ""
    skills: List[str] = []
    career_interests: List[str] = []
    social_links: SocialLinks = SocialLinks()
    education: List[EducationOut] = []
    experience: List[ExperienceOut] = []
    profile_completion_score: int = 0


class Preferences(BaseModel):
    dark_mode_enabled: bool = False
    email_notifications_enabled: bool = True
    job_alerts_enabled: bool = True


class UserResponse(BaseModel):
    id: str
    full_name: str
    email: str
    role: str
    profile: ProfileOut
    preferences: Preferences
    created_at: Optional[datetime] = None


class AuthResponse(BaseModel):
    message: str
    token: str
    user: UserResponse


class UserEnvelope(BaseModel):
    message: Optional[str] = None
    user: UserResponse


class CounselorResponse(BaseModel):
    id: str
    full_name: str
    email: str
    bio: str = ""
    profile_image_url: str = ""
    skills: List[str] = []
    career_interests: List[str] = []


class CounselorListResponse(BaseModel):
    counselors: List[CounselorResponse]


# ============================================================
# JOB SCHEMAS
# ============================================================

class JobCreate(RequestModel):
    title: str = Field(..., min_length=3, max_length=160)
    company: str = Field(..., min_length=2, max_length=160)
    location: str = Field(..., min_length=2, max_length=200)
    description: str = Field(..., min_length=10, max_length=2000)
    salary: str = Field("", max_length=100)
    application_deadline: datetime
    tags: List[Tag] = Field(default_factory=list, max_length=10)


class PosterSummary(BaseModel):
    id: str
    full_name: str
    email: str


class JobResponse(BaseModel):
    id: str
    title: str
    company: str
    location: str
    description: str
    salary: str = ""
    application_deadline: datetime
    tags: List[str] = []
    posted_by: Optional[PosterSummary] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class JobEnvelope(BaseModel):
    message: Optional[str] = None
    job: JobResponse


class JobListResponse(BaseModel):
    jobs: List[JobResponse]


# ============================================================
# APPLICATION SCHEMAS
# ============================================================

class ApplicationCreate(RequestModel):
    cover_letter: str = Field("", max_length=2000)
    resume_url: str = Field("", max_length=500)


class ApplicationJobSummary(BaseModel):
    id: str
    title: str
    company: str
    location: str
    application_deadline: datetime


class ApplicantSummary(BaseModel):
    id: str
    full_name: str
    email: str
    profile: ProfileOut


class ApplicationResponse(BaseModel):
    id: str
    job_id: str
    applicant_id: str
    job: Optional[ApplicationJobSummary] = None
    applicant: Optional[ApplicantSummary] = None
    cover_letter: str = ""
    resume_url: str = ""
    status: ApplicationStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ApplicationEnvelope(BaseModel):
    message: str
    application: ApplicationResponse


class ApplicationListResponse(BaseModel):
    applications: List[ApplicationResponse]


class ApplicationCheckResponse(BaseModel):
    applied: bool


# ============================================================
# COMMUNITY SCHEMAS
# ============================================================

class PostCreate(RequestModel):
    title: str = Field(..., min_length=3, max_length=200)
    body: str = Field(..., min_length=10, max_length=5000)
    category: PostCategory = PostCategory.general


class ReplyCreate(RequestModel):
    body: str = Field(..., min_length=1, max_length=3000)


class AuthorSummary(BaseModel):
    id: Optional[str] = None
    full_name: str
    role: Optional[str] = None
    profile_image_url: str = ""


class PostResponse(BaseModel):
    id: str
    title: str
    body: str
    category: PostCategory
    author: AuthorSummary
    likes_count: int
    liked_by: List[str] = []
    replies_count: int
    views_count: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class PostEnvelope(BaseModel):
    message: Optional[str] = None
    post: PostResponse


class PostListResponse(BaseModel):
    posts: List[PostResponse]


class ReplyResponse(BaseModel):
    id: str
    post_id: str
    author: AuthorSummary
    body: str
    likes_count: int
    liked_by: List[str] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ReplyEnvelope(BaseModel):
    message: str
    reply: ReplyResponse


class ReplyListResponse(BaseModel):
    replies: List[ReplyResponse]


class LikeResponse(BaseModel):
    liked: bool
    likes_count: int


# ============================================================
# RESOURCE SCHEMAS
# ============================================================

class ResourceCreate(RequestModel):
    title: str = Field(..., min_length=3, max_length=160)
    description: str = Field(..., min_length=10, max_length=500)
    type: ResourceType
    category: ResourceCategory
    url: str = Field("", max_length=500)
    tags: List[Tag] = Field(default_factory=list, max_length=12)


class CreatorSummary(BaseModel):
    id: Optional[str] = None
    full_name: str = "Unknown"


class ResourceResponse(BaseModel):
    id: str
    title: str
    description: str
    type: ResourceType
    category: ResourceCategory
    url: str = ""
    tags: List[str] = []
    likes_count: int = 0
    created_at: Optional[datetime] = None
    created_by: CreatorSummary


class ResourceEnvelope(BaseModel):
    message: str
    resource: ResourceResponse


class ResourceListResponse(BaseModel):
    resources: List[ResourceResponse]


# ============================================================
# SESSION SCHEMAS
# ============================================================

class SessionRequest(RequestModel):
    counselor_id: str = Field(..., min_length=1)
    scheduled_at: datetime
    notes: str = Field("", max_length=500)


class RescheduleRequest(RequestModel):
    rescheduled_at: datetime


class ParticipantSummary(BaseModel):
    id: str
    full_name: str


class SessionResponse(BaseModel):
    id: str
    job_seeker: ParticipantSummary
    counselor: ParticipantSummary
    scheduled_at: datetime
    rescheduled_at: Optional[datetime] = None
    status: SessionStatus
    notes: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class SessionEnvelope(BaseModel):
    message: str
    session: SessionResponse


class SessionListResponse(BaseModel):
    sessions: List[SessionResponse]


# ============================================================
# AI COACH SCHEMAS
# ============================================================

class ChatTurn(RequestModel):
    role: Literal["user", "model"]
    text: str = Field(..., max_length=5000)


class ChatRequest(RequestModel):
    message: str = Field(..., min_length=1, max_length=2000)
    history: List[ChatTurn] = Field(default_factory=list, max_length=50)
    context: str = Field("", max_length=5000)


class ChatResponse(BaseModel):
    reply: str


class FitScoreRequest(RequestModel):
    job_description: str = Field(..., min_length=10, max_length=5000)


class PathTreeRequest(RequestModel):
    goal_role: str = Field(..., min_length=2, max_length=200)


# Shapes the model is asked to return. Extra keys are ignored.

class RecommendedCourse(BaseModel):
    name: str
    reason: str = ""


class CareerPath(BaseModel):
    title: str
    fit_score: float = Field(..., ge=0, le=100)
    salary_range: str = ""
    description: str = ""
    skills_to_learn: List[str] = []
    recommended_course: Optional[RecommendedCourse] = None
    steps: List[str] = []


class CareerPathsResponse(BaseModel):
    paths: List[CareerPath]


class ResumeFeedbackResponse(BaseModel):
    score: float = Field(..., ge=0, le=100)
    strengths: List[str] = []
    improvements: List[str] = []
    keywords: List[str] = []


class FitScoreResponse(BaseModel):
    score: float = Field(..., ge=0, le=100)
    matched_skills: List[str] = []
    missing_skills: List[str] = []
    reason: str = ""
    tips: List[str] = []


class PathNode(BaseModel):
    step: int
    role: str
    avg_salary: str = ""
    years_in_role: str = ""
    key_skills: List[str] = []
    certifications: List[str] = []
    responsibilities: List[str] = []


class CareerPathTreeResponse(BaseModel):
    goal_role: str
    nodes: List[PathNode]
    estimated_total_years: str = ""
    advice: str = ""


# ============================================================
# GENERIC SCHEMAS
# ============================================================

class MessageResponse(BaseModel):
    message: str
    success: bool = True


class FieldIssue(BaseModel):
    field: str
    message: str


class ErrorResponse(BaseModel):
    message: str
    errors: List[FieldIssue] = []
