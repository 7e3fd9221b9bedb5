"""Tests for /api/auth and /api/counselors"""
from careerflow.db.mongodb import COLLECTIONS


def test_signup_returns_token_and_public_user(client):
    r = client.post("/api/auth/signup", json={
        "full_name": "Jane Doe",
        "email": "Jane@Example.com",
        "password": "supersecret",
        "confirm_password": "supersecret",
    })
    assert r.status_code == 201
    data = r.json()
    assert data["message"] == "Signup successful"
    assert data["token"]
    assert data["user"]["email"] == "jane@example.com"
    assert data["user"]["role"] == "job_seeker"
    assert data["user"]["profile"]["profile_completion_score"] == 10
    assert "password_hash" not in data["user"]


def test_signup_stores_only_a_hash(client, db, seeker):
    stored = db[COLLECTIONS["users"]].find_one({"email": "seeker@example.com"})
    assert stored["password_hash"] != "testpass123"
    assert stored["password_hash"].startswith("$2")


def test_signup_duplicate_email_conflicts(client, seeker):
    r = client.post("/api/auth/signup", json={
        "full_name": "Again",
        "email": "SEEKER@example.com",
        "password": "testpass123",
        "confirm_password": "testpass123",
    })
    assert r.status_code == 409
    assert r.json()["message"] == "Email already in use"


def test_signup_password_mismatch_is_field_error(client):
    r = client.post("/api/auth/signup", json={
        "full_name": "Jane Doe",
        "email": "jane@example.com",
        "password": "supersecret",
        "confirm_password": "different1",
    })
    assert r.status_code == 400
    body = r.json()
    assert body["message"] == "Passwords do not match"
    assert body["errors"][0]["field"] == "confirm_password"


def test_signup_cannot_choose_admin(client):
    r = client.post("/api/auth/signup", json={
        "full_name": "Mallory",
        "email": "mallory@example.com",
        "password": "supersecret",
        "confirm_password": "supersecret",
        "role": "admin",
    })
    assert r.status_code == 400


def test_login_success_stamps_last_login(client, db, seeker):
    r = client.post("/api/auth/login", json={"email": "seeker@example.com", "password": "testpass123"})
    assert r.status_code == 200
    assert r.json()["token"]
    stored = db[COLLECTIONS["users"]].find_one({"email": "seeker@example.com"})
    assert stored["last_login_at"] is not None


def test_login_failures_are_indistinguishable(client, db, seeker):
    wrong_password = client.post("/api/auth/login", json={"email": "seeker@example.com", "password": "nottheone1"})
    unknown_email = client.post("/api/auth/login", json={"email": "nobody@example.com", "password": "testpass123"})

    db[COLLECTIONS["users"]].update_one({"email": "seeker@example.com"}, {"$set": {"is_active": False}})
    inactive = client.post("/api/auth/login", json={"email": "seeker@example.com", "password": "testpass123"})

    for r in (wrong_password, unknown_email, inactive):
        assert r.status_code == 401
        assert r.json()["message"] == "Invalid email or password"


def test_profile_requires_auth(client):
    assert client.get("/api/auth/profile").status_code == 401
    r = client.get("/api/auth/profile", headers={"Authorization": "Bearer not-a-jwt"})
    assert r.status_code == 401


def test_profile_of_deactivated_user_is_unauthorized(client, db, seeker):
    db[COLLECTIONS["users"]].update_one({"email": "seeker@example.com"}, {"$set": {"is_active": False}})
    assert client.get("/api/auth/profile", headers=seeker["headers"]).status_code == 401


def test_get_profile(client, seeker):
    r = client.get("/api/auth/profile", headers=seeker["headers"])
    assert r.status_code == 200
    assert r.json()["user"]["id"] == seeker["id"]


def test_update_profile_normalizes_and_scores(client, seeker):
    r = client.patch("/api/auth/profile", headers=seeker["headers"], json={
        "bio": "Aspiring analyst",
        "skills": [" SQL ", "Python", "SQL", "python"],
        "career_interests": ["Data", " Data "],
        "education": [
            {"degree": "BSc", "institution": "State U", "start_date": "2019-09-01", "end_date": "not a date"},
            {"degree": "", "institution": ""},
        ],
        "experience": [],
        "social_links": {"github": "https://github.com/sam"},
    })
    assert r.status_code == 200
    profile = r.json()["user"]["profile"]
    assert profile["skills"] == ["SQL", "Python", "python"]
    assert profile["career_interests"] == ["Data"]
    assert len(profile["education"]) == 1
    assert profile["education"][0]["start_date"].startswith("2019-09-01")
    assert profile["education"][0]["end_date"] is None
    # 10 base + 15 bio + 20 skills + 20 interests + 15 education + 15 social
    assert profile["profile_completion_score"] == 95


def test_update_profile_keeps_location_when_omitted(client, seeker):
    client.patch("/api/auth/profile", headers=seeker["headers"], json={"location": "Berlin"})
    r = client.patch("/api/auth/profile", headers=seeker["headers"], json={"bio": "Hi"})
    assert r.json()["user"]["profile"]["location"] == "Berlin"


def test_completion_score_caps_at_100(client, seeker):
    r = client.patch("/api/auth/profile", headers=seeker["headers"], json={
        "bio": "Bio",
        "profile_image_url": "https://img.example.com/me.png",
        "skills": ["SQL"],
        "career_interests": ["Data"],
        "education": [{"degree": "BSc"}],
        "experience": [{"title": "Intern"}],
        "social_links": {"linkedin": "https://linkedin.com/in/sam"},
    })
    assert r.json()["user"]["profile"]["profile_completion_score"] == 100


def test_list_counselors_is_public_and_safe(client, seeker, counselor, db):
    db[COLLECTIONS["users"]].insert_one({
        "full_name": "Inactive Counselor",
        "email": "gone@example.com",
        "password_hash": "x",
        "role": "career_counselor",
        "is_active": False,
    })
    r = client.get("/api/counselors")
    assert r.status_code == 200
    counselors = r.json()["counselors"]
    assert [c["email"] for c in counselors] == ["counselor@example.com"]
    assert "password_hash" not in counselors[0]


def test_update_profile_accepts_month_dates(client, seeker):
    r = client.patch("/api/auth/profile", headers=seeker["headers"], json={
        "education": [{"degree": "BSc", "start_date": "2019-09", "end_date": "2023"}],
        "experience": [{"start_date": "2023-07"}],
    })
    assert r.status_code == 200
    profile = r.json()["user"]["profile"]
    assert profile["education"][0]["start_date"].startswith("2019-09-01")
    assert profile["education"][0]["end_date"].startswith("2023-01-01")
    assert len(profile["experience"]) == 1
    assert profile["experience"][0]["start_date"].startswith("2023-07-01")
    # 10 base + 15 education + 15 experience
    assert profile["profile_completion_score"] == 40
