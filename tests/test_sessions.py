"""Tests for /api/sessions"""
from datetime import datetime, timedelta

import pytest
from bson import ObjectId

from careerflow.db.mongodb import COLLECTIONS
from careerflow.utils.timeutils import utcnow


def in_days(days):
    return (utcnow() + timedelta(days=days)).replace(microsecond=0)


def request_session(client, user, counselor_id, when=None, notes="Career change advice"):
    when = when or in_days(1)
    return client.post("/api/sessions/request", json={
        "counselor_id": counselor_id,
        "scheduled_at": when.isoformat(),
        "notes": notes,
    }, headers=user["headers"])


def act(client, user, session_id, verb, **body):
    return client.patch(f"/api/sessions/{session_id}/{verb}", json=body or None, headers=user["headers"])


@pytest.fixture
def session(client, seeker, counselor):
    r = request_session(client, seeker, counselor["id"])
    assert r.status_code == 201, r.text
    return r.json()["session"]


def test_request_session(client, seeker, counselor, session):
    assert session["status"] == "pending"
    assert session["job_seeker"] == {"id": seeker["id"], "full_name": "Sam Seeker"}
    assert session["counselor"] == {"id": counselor["id"], "full_name": "Casey Counselor"}
    assert session["rescheduled_at"] is None


def test_request_session_in_the_past_fails(client, seeker, counselor):
    r = request_session(client, seeker, counselor["id"], when=in_days(-1))
    assert r.status_code == 400
    assert r.json()["message"] == "Please select a future date and time"


def test_request_session_needs_active_counselor(client, db, seeker, other_seeker, counselor):
    r = request_session(client, seeker, other_seeker["id"])
    assert r.status_code == 404
    assert r.json()["message"] == "Counselor not found"

    db[COLLECTIONS["users"]].update_one({"_id": ObjectId(counselor["id"])}, {"$set": {"is_active": False}})
    assert request_session(client, seeker, counselor["id"]).status_code == 404

    assert request_session(client, seeker, "nope").status_code == 400


def test_only_job_seekers_request(client, counselor, other_counselor):
    r = request_session(client, counselor, other_counselor["id"])
    assert r.status_code == 403
    assert r.json()["message"] == "Only job seekers can request sessions"


def test_list_sessions_by_side(client, seeker, other_seeker, counselor, other_counselor, session):
    request_session(client, other_seeker, other_counselor["id"])

    mine = client.get("/api/sessions", headers=seeker["headers"]).json()["sessions"]
    assert [s["id"] for s in mine] == [session["id"]]

    counseling = client.get("/api/sessions", headers=counselor["headers"]).json()["sessions"]
    assert [s["id"] for s in counseling] == [session["id"]]


def test_non_owning_counselor_is_denied_in_any_state(client, counselor, other_counselor, session):
    for verb, body in (("accept", {}), ("reject", {}), ("reschedule", {"rescheduled_at": in_days(3).isoformat()})):
        r = act(client, other_counselor, session["id"], verb, **body)
        assert r.status_code == 403
        assert r.json()["message"] == "Not your session"

    act(client, counselor, session["id"], "reject")
    r = act(client, other_counselor, session["id"], "accept")
    assert r.status_code == 403


def test_job_seeker_cannot_accept(client, seeker, session):
    assert act(client, seeker, session["id"], "accept").status_code == 403


def test_counselor_cannot_confirm_or_cancel(client, counselor, session):
    assert act(client, counselor, session["id"], "confirm").status_code == 403
    assert act(client, counselor, session["id"], "cancel").status_code == 403


def test_accept_non_pending_names_current_state(client, counselor, session):
    assert act(client, counselor, session["id"], "accept").status_code == 200
    r = act(client, counselor, session["id"], "accept")
    assert r.status_code == 409
    assert r.json()["message"] == "Cannot accept a session that is accepted"
    assert r.json()["current_status"] == "accepted"


def test_confirm_only_from_rescheduled(client, seeker, counselor, session):
    r = act(client, seeker, session["id"], "confirm")
    assert r.status_code == 409
    assert r.json()["current_status"] == "pending"


def test_reschedule_requires_future_time(client, counselor, session):
    r = act(client, counselor, session["id"], "reschedule", rescheduled_at=in_days(-1).isoformat())
    assert r.status_code == 400


def test_cancel(client, seeker, counselor, session):
    r = act(client, seeker, session["id"], "cancel")
    assert r.status_code == 200
    assert r.json()["message"] == "Session cancelled"
    assert r.json()["session"]["status"] == "cancelled"

    r = act(client, seeker, session["id"], "cancel")
    assert r.status_code == 409
    assert act(client, counselor, session["id"], "accept").status_code == 409


def test_cancel_after_confirmed_is_allowed(client, seeker, counselor, session):
    act(client, counselor, session["id"], "reschedule", rescheduled_at=in_days(2).isoformat())
    act(client, seeker, session["id"], "confirm")
    assert act(client, seeker, session["id"], "cancel").json()["session"]["status"] == "cancelled"


def test_unknown_session(client, counselor):
    r = act(client, counselor, str(ObjectId()), "accept")
    assert r.status_code == 404
    assert r.json()["message"] == "Session not found"


def test_scenario_request_then_reject(client, seeker, counselor):
    created = request_session(client, seeker, counselor["id"]).json()["session"]
    assert created["status"] == "pending"

    r = act(client, counselor, created["id"], "reject")
    assert r.json()["session"]["status"] == "rejected"

    assert act(client, counselor, created["id"], "accept").status_code == 409
    r = act(client, counselor, created["id"], "reschedule", rescheduled_at=in_days(2).isoformat())
    assert r.status_code == 409
    assert r.json()["current_status"] == "rejected"


def test_scenario_accept_reschedule_confirm(client, seeker, counselor, session):
    original = session["scheduled_at"]
    proposed = in_days(3)

    r = act(client, counselor, session["id"], "accept")
    assert r.json()["session"]["status"] == "accepted"

    r = act(client, counselor, session["id"], "reschedule", rescheduled_at=proposed.isoformat())
    rescheduled = r.json()["session"]
    assert rescheduled["status"] == "rescheduled"
    assert rescheduled["scheduled_at"] == original
    assert datetime.fromisoformat(rescheduled["rescheduled_at"]) == proposed

    r = act(client, seeker, session["id"], "confirm")
    confirmed = r.json()["session"]
    assert confirmed["status"] == "confirmed"
    assert datetime.fromisoformat(confirmed["scheduled_at"]) == proposed
    assert confirmed["rescheduled_at"] is None
