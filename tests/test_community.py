"""Tests for /api/community posts and replies"""
from datetime import timedelta

import pytest
from bson import ObjectId

from careerflow.db.mongodb import COLLECTIONS
from careerflow.utils.timeutils import utcnow


def create_post(client, user, **overrides):
    body = {
        "title": "How do I prepare for a data interview?",
        "body": "Looking for tips on SQL questions and case studies.",
        "category": "resume_interview",
    }
    body.update(overrides)
    r = client.post("/api/community/posts", json=body, headers=user["headers"])
    assert r.status_code == 201, r.text
    return r.json()["post"]


def reply(client, user, post_id, text="Practice window functions."):
    return client.post(f"/api/community/replies/{post_id}", json={"body": text}, headers=user["headers"])


@pytest.fixture
def post(client, seeker):
    return create_post(client, seeker)


def test_create_post(client, seeker, post):
    assert post["author"]["full_name"] == "Sam Seeker"
    assert post["author"]["role"] == "job_seeker"
    assert post["likes_count"] == 0
    assert post["replies_count"] == 0
    assert post["views_count"] == 0


def test_create_post_validates(client, seeker):
    r = client.post("/api/community/posts", json={"title": "Hi", "body": "short"}, headers=seeker["headers"])
    assert r.status_code == 400
    assert {e["field"] for e in r.json()["errors"]} == {"title", "body"}


def test_list_posts_filters(client, clock, seeker, post):
    clock(utcnow() + timedelta(minutes=1))
    create_post(client, seeker, title="Networking at meetups", body="What works for you at meetups?",
                category="networking_tips")

    everything = client.get("/api/community/posts", headers=seeker["headers"]).json()["posts"]
    assert [p["title"] for p in everything] == ["Networking at meetups", post["title"]]

    all_category = client.get("/api/community/posts", params={"category": "all"}, headers=seeker["headers"])
    assert len(all_category.json()["posts"]) == 2

    networking = client.get("/api/community/posts", params={"category": "networking_tips"},
                            headers=seeker["headers"]).json()["posts"]
    assert [p["title"] for p in networking] == ["Networking at meetups"]

    found = client.get("/api/community/posts", params={"search": "SQL"}, headers=seeker["headers"]).json()["posts"]
    assert [p["id"] for p in found] == [post["id"]]


def test_get_post_counts_views(client, db, seeker, post):
    r = client.get(f"/api/community/posts/{post['id']}", headers=seeker["headers"])
    assert r.status_code == 200
    assert r.json()["post"]["views_count"] == 1

    client.get(f"/api/community/posts/{post['id']}", headers=seeker["headers"])
    stored = db[COLLECTIONS["posts"]].find_one({"_id": ObjectId(post["id"])})
    assert stored["views_count"] == 2


def test_get_unknown_post(client, seeker):
    r = client.get(f"/api/community/posts/{ObjectId()}", headers=seeker["headers"])
    assert r.status_code == 404
    assert r.json()["message"] == "Post not found."


def test_like_toggle_keeps_count_equal_to_likers(client, db, seeker, other_seeker, post):
    url = f"/api/community/posts/{post['id']}/like"

    assert client.patch(url, headers=seeker["headers"]).json() == {"liked": True, "likes_count": 1}
    assert client.patch(url, headers=other_seeker["headers"]).json() == {"liked": True, "likes_count": 2}
    assert client.patch(url, headers=seeker["headers"]).json() == {"liked": False, "likes_count": 1}
    assert client.patch(url, headers=other_seeker["headers"]).json() == {"liked": False, "likes_count": 0}

    stored = db[COLLECTIONS["posts"]].find_one({"_id": ObjectId(post["id"])})
    assert stored["likes_count"] == len(stored["liked_by"]) == 0


def test_like_unknown_post(client, seeker):
    r = client.patch(f"/api/community/posts/{ObjectId()}/like", headers=seeker["headers"])
    assert r.status_code == 404


def test_delete_post_author_or_admin(client, seeker, other_seeker, admin):
    first = create_post(client, seeker)
    second = create_post(client, seeker)

    r = client.delete(f"/api/community/posts/{first['id']}", headers=other_seeker["headers"])
    assert r.status_code == 403
    assert r.json()["message"] == "You can only delete your own posts."

    assert client.delete(f"/api/community/posts/{first['id']}", headers=seeker["headers"]).status_code == 200
    assert client.delete(f"/api/community/posts/{second['id']}", headers=admin["headers"]).status_code == 200


def test_replies_oldest_first_and_counted(client, clock, db, seeker, other_seeker, post):
    assert reply(client, other_seeker, post["id"], "First!").status_code == 201
    clock(utcnow() + timedelta(minutes=1))
    r = reply(client, seeker, post["id"], "Second")
    assert r.status_code == 201
    assert r.json()["reply"]["post_id"] == post["id"]

    replies = client.get(f"/api/community/replies/{post['id']}", headers=seeker["headers"]).json()["replies"]
    assert [x["body"] for x in replies] == ["First!", "Second"]
    assert replies[0]["author"]["full_name"] == "Olive Other"

    stored = db[COLLECTIONS["posts"]].find_one({"_id": ObjectId(post["id"])})
    assert stored["replies_count"] == 2


def test_reply_to_unknown_post(client, seeker):
    r = reply(client, seeker, str(ObjectId()))
    assert r.status_code == 404


def test_create_reply_reports_body_field(client, seeker, post):
    r = client.post(f"/api/community/replies/{post['id']}", json={"body": ""}, headers=seeker["headers"])
    assert r.status_code == 400
    assert r.json()["errors"][0]["field"] == "body"


def test_like_reply_toggle(client, seeker, post):
    reply_id = reply(client, seeker, post["id"]).json()["reply"]["id"]
    url = f"/api/community/replies/{reply_id}/like"
    assert client.patch(url, headers=seeker["headers"]).json() == {"liked": True, "likes_count": 1}
    assert client.patch(url, headers=seeker["headers"]).json() == {"liked": False, "likes_count": 0}


def test_delete_reply_author_or_admin(client, seeker, other_seeker, admin, post):
    mine = reply(client, seeker, post["id"]).json()["reply"]["id"]
    theirs = reply(client, other_seeker, post["id"]).json()["reply"]["id"]

    r = client.delete(f"/api/community/replies/{theirs}", headers=seeker["headers"])
    assert r.status_code == 403

    assert client.delete(f"/api/community/replies/{mine}", headers=seeker["headers"]).status_code == 200
    assert client.delete(f"/api/community/replies/{theirs}", headers=admin["headers"]).status_code == 200


def test_scenario_post_replies_counts_and_cascade(client, db, seeker, other_seeker, post):
    first = reply(client, seeker, post["id"]).json()["reply"]
    reply(client, other_seeker, post["id"])

    post_url = f"/api/community/posts/{post['id']}"
    assert client.get(post_url, headers=seeker["headers"]).json()["post"]["replies_count"] == 2

    client.delete(f"/api/community/replies/{first['id']}", headers=seeker["headers"])
    assert client.get(post_url, headers=seeker["headers"]).json()["post"]["replies_count"] == 1

    assert client.delete(post_url, headers=seeker["headers"]).status_code == 200
    assert db[COLLECTIONS["replies"]].count_documents({"post_id": ObjectId(post["id"])}) == 0
    assert client.get(f"/api/community/replies/{post['id']}", headers=seeker["headers"]).json()["replies"] == []
    assert client.get(post_url, headers=seeker["headers"]).status_code == 404
