"""
Pytest fixtures for CareerFlow API tests.
Uses an in-memory mongomock database, a fake AI client and signed-up users.
"""
import os

import mongomock
import pytest
from fastapi.testclient import TestClient

# Must be set before config/auth load
os.environ["JWT_SECRET_KEY"] = "test-secret-key"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["AI_API_KEY"] = ""

from careerflow.main import app
from careerflow.core.auth import create_access_token, hash_password
from careerflow.db.mongodb import COLLECTIONS, get_db, init_mongo_indexes
from careerflow.services.coach_client import extract_json, get_coach_client
from careerflow.utils.timeutils import utcnow

PASSWORD = "testpass123"

# every module that reads the clock through `from ... import utcnow`
CLOCK_TARGETS = [
    "careerflow.utils.timeutils.utcnow",
    "careerflow.services.user_service.utcnow",
    "careerflow.services.job_service.utcnow",
    "careerflow.services.community_service.utcnow",
    "careerflow.services.session_service.utcnow",
]


class FakeCoachClient:
    """Stands in for CoachClient. Returns canned text and records prompts."""

    def __init__(self):
        self.replies = []
        self.prompts = []
        self.histories = []

    def queue(self, *texts):
        self.replies.extend(texts)

    def _next(self):
        return self.replies.pop(0) if self.replies else ""

    def chat(self, prompt, history=None):
        self.prompts.append(prompt)
        self.histories.append(history or [])
        return self._next()

    def generate_json(self, prompt, max_tokens=2000):
        self.prompts.append(prompt)
        return extract_json(self._next())


@pytest.fixture
def db():
    """Fresh in-memory database with the production indexes."""
    database = mongomock.MongoClient()["careerflow_test"]
    init_mongo_indexes(database)
    return database


@pytest.fixture
def coach():
    return FakeCoachClient()


@pytest.fixture
def client(db, coach):
    """TestClient wired to the in-memory database and the fake AI client."""
    app.dependency_overrides[get_db] = lambda: db
    app.dependency_overrides[get_coach_client] = lambda: coach
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def clock(monkeypatch):
    """Freeze the service clock: clock(datetime) sets the current time."""
    def set_now(when):
        for target in CLOCK_TARGETS:
            monkeypatch.setattr(target, lambda: when)
        return when
    return set_now


def signup(client, email, role="job_seeker", full_name="Test User"):
    r = client.post("/api/auth/signup", json={
        "full_name": full_name,
        "email": email,
        "password": PASSWORD,
        "confirm_password": PASSWORD,
        "role": role,
    })
    assert r.status_code == 201, r.text
    data = r.json()
    return {
        "id": data["user"]["id"],
        "headers": {"Authorization": f"Bearer {data['token']}"},
        "user": data["user"],
    }


@pytest.fixture
def seeker(client):
    return signup(client, "seeker@example.com", full_name="Sam Seeker")


@pytest.fixture
def other_seeker(client):
    return signup(client, "other@example.com", full_name="Olive Other")


@pytest.fixture
def counselor(client):
    return signup(client, "counselor@example.com", role="career_counselor", full_name="Casey Counselor")


@pytest.fixture
def other_counselor(client):
    return signup(client, "counselor2@example.com", role="career_counselor", full_name="Chris Counselor")


@pytest.fixture
def admin(db):
    """Admins cannot sign up, so insert one directly."""
    now = utcnow()
    result = db[COLLECTIONS["users"]].insert_one({
        "full_name": "Ada Admin",
        "email": "admin@example.com",
        "password_hash": hash_password(PASSWORD),
        "role": "admin",
        "profile": {},
        "preferences": {},
        "is_active": True,
        "created_at": now,
        "updated_at": now,
    })
    token = create_access_token(data={"sub": str(result.inserted_id), "role": "admin"})
    return {"id": str(result.inserted_id), "headers": {"Authorization": f"Bearer {token}"}}


@pytest.fixture
def make_user(client):
    """Sign up an extra user: make_user(email, role=...)."""
    def _make(email, role="job_seeker", full_name="Test User"):
        return signup(client, email, role=role, full_name=full_name)
    return _make
