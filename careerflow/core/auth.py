"""
Authentication Utility - JWT and Password handling.

Provides:
- Password hashing with bcrypt
- JWT token creation/verification
- FastAPI dependency for protected routes
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

from bson import ObjectId
from bson.errors import InvalidId
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, jwt
from passlib.context import CryptContext
from pymongo.database import Database

from careerflow.core.config import get_settings
from careerflow.core.exceptions import AuthenticationFailed
from careerflow.db.mongodb import COLLECTIONS, get_db

settings = get_settings()

# Password hashing
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.bcrypt_rounds,
)

# Bearer token extractor (errors are raised by us so they stay 401)
bearer_scheme = HTTPBearer(auto_error=False)


def hash_password(password: str) -> str:
    """Hash password with bcrypt."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify password against hash."""
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create JWT access token."""
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=settings.jwt_expire_minutes))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> Optional[dict]:
    """Decode and verify JWT token."""
    try:
        return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Database = Depends(get_db),
) -> dict:
    """
    FastAPI dependency - Get current authenticated user document.

    Usage:
        @app.get("/protected")
        def route(user: dict = Depends(get_current_user)):
            return user
    """
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise AuthenticationFailed("Missing or invalid authorization token")

    payload = decode_token(credentials.credentials)
    if not payload or not payload.get("sub"):
        raise AuthenticationFailed()

    try:
        user_id = ObjectId(payload["sub"])
    except (InvalidId, TypeError):
        raise AuthenticationFailed()

    user = db[COLLECTIONS["users"]].find_one({"_id": user_id})
    if not user or not user.get("is_active", True):
        raise AuthenticationFailed()

    return user
