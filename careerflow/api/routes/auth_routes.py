"""
Authentication Routes

POST /auth/signup - Register new user, returns token
POST /auth/login - Login and get JWT token
GET /auth/profile - Get current user
PATCH /auth/profile - Replace profile sections
"""

from fastapi import APIRouter, Depends
from pymongo.database import Database

from careerflow.core.auth import get_current_user
from careerflow.db.mongodb import get_db
from careerflow.services.user_service import UserService, public_user
from careerflow.schemas.schemas import (
    SignupRequest, LoginRequest, ProfileUpdate, AuthResponse, UserEnvelope
)

router = APIRouter(prefix="/auth", tags=["Authentication"])


def get_user_service(db: Database = Depends(get_db)) -> UserService:
    return UserService(db)


@router.post("/signup", response_model=AuthResponse, status_code=201)
def signup(request: SignupRequest, service: UserService = Depends(get_user_service)):
    """
    Register a new account as job seeker or career counselor.

    The response already carries a token; no separate login is needed.
    """
    result = service.register(request)
    return AuthResponse(message="Signup successful", **result)


@router.post("/login", response_model=AuthResponse)
def login(request: LoginRequest, service: UserService = Depends(get_user_service)):
    """
    Login and receive JWT access token.

    Include token in requests: Authorization: Bearer <token>
    """
    result = service.authenticate(request.email, request.password)
    return AuthResponse(message="Login successful", **result)


@router.get("/profile", response_model=UserEnvelope)
def get_profile(user: dict = Depends(get_current_user)):
    """Get current authenticated user's info."""
    return UserEnvelope(user=public_user(user))


@router.patch("/profile", response_model=UserEnvelope)
def update_profile(
    update: ProfileUpdate,
    user: dict = Depends(get_current_user),
    service: UserService = Depends(get_user_service)
):
    """Replace the profile sections and recompute the completion score."""
    return UserEnvelope(message="Profile updated successfully", user=service.update_profile(user, update))
