"""API tests for auth, catalog browsing and the personal schedule."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from confschedule.main import (
    activity_repo,
    app,
    schedule_repo,
    session_repo,
    user_repo,
)


@pytest.fixture(autouse=True)
def _clear_repos():
    """Reset in-memory repos before each test."""
    user_repo._store.clear()
    session_repo._store.clear()
    schedule_repo._entries.clear()
    activity_repo._entries.clear()
    yield
    user_repo._store.clear()
    session_repo._store.clear()
    schedule_repo._entries.clear()
    activity_repo._entries.clear()


@pytest.fixture()
def client():
    return TestClient(app)


@pytest.fixture()
def authed(client: TestClient) -> TestClient:
    resp = client.post(
        "/auth/signup",
        json={"name": "Ada", "email": "ada@example.com", "password": "correct-horse"},
    )
    assert resp.status_code == 201
    return client


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------


def test_signup_sets_session_cookie(client: TestClient):
    resp = client.post(
        "/auth/signup",
        json={"name": "Ada", "email": "ada@example.com", "password": "correct-horse"},
    )
    assert resp.status_code == 201
    body = resp.json()
    assert body["email"] == "ada@example.com"
    assert "password_hash" not in body
    assert "session" in resp.cookies

    me = client.get("/auth/me")
    assert me.status_code == 200
    assert me.json()["name"] == "Ada"


def test_signup_duplicate_email(authed: TestClient):
    resp = authed.post(
        "/auth/signup",
        json={"name": "Other", "email": "ADA@example.com", "password": "another-pass"},
    )
    assert resp.status_code == 409
    assert resp.json()["detail"] == "An account with this email already exists"


@pytest.mark.parametrize(
    "payload",
    [
        {"name": "A", "email": "a@example.com", "password": "long-enough"},
        {"name": "Ada", "email": "not-an-email", "password": "long-enough"},
        {"name": "Ada", "email": "a@example.com", "password": "short"},
    ],
)
def test_signup_validation(client: TestClient, payload):
    assert client.post("/auth/signup", json=payload).status_code == 422


def test_login_and_logout(authed: TestClient):
    authed.post("/auth/logout")
    assert authed.get("/auth/me").status_code == 401

    resp = authed.post(
        "/auth/login", json={"email": "ada@example.com", "password": "correct-horse"}
    )
    assert resp.status_code == 200
    assert authed.get("/auth/me").status_code == 200


@pytest.mark.parametrize(
    "email,password",
    [("ada@example.com", "wrong-password"), ("nobody@example.com", "correct-horse")],
)
def test_login_rejects_bad_credentials(authed: TestClient, email, password):
    authed.post("/auth/logout")
    resp = authed.post("/auth/login", json={"email": email, "password": password})
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Invalid email or password"


@pytest.mark.parametrize(
    "method,path",
    [
        ("get", "/schedule"),
        ("get", "/schedule/activity"),
        ("get", "/schedule/turbo-yet"),
        ("post", "/schedule/turbo-yet"),
        ("delete", "/schedule/turbo-yet"),
    ],
)
def test_protected_routes_require_session(client: TestClient, method, path):
    resp = getattr(client, method)(path)
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Not authenticated"


def test_conflict_check_requires_session(client: TestClient):
    resp = client.post("/schedule/conflicts", json={"talk_ids": []})
    assert resp.status_code == 401


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------


def test_list_talks_ordered_by_start(client: TestClient):
    talks = client.get("/talks").json()
    assert len(talks) == 17
    starts = [t["start_time"] for t in talks]
    assert starts == sorted(starts)
    assert talks[0]["id"] == "coding-future"
    assert talks[0]["speaker"]["name"] == "Swyx"
    assert talks[0]["track"]["color"] == "#8b5cf6"


def test_filter_talks(client: TestClient):
    workshops = client.get("/talks", params={"format": "workshop"}).json()
    assert {t["id"] for t in workshops} == {"aws-ai-workshop", "nextjs16-migration"}

    ai_beginner = client.get("/talks", params={"track": "ai", "level": "beginner"}).json()
    assert ai_beginner == []

    searched = client.get("/talks", params={"q": "TURBOPACK"}).json()
    assert [t["id"] for t in searched] == ["turbo-yet"]


def test_filter_rejects_unknown_level(client: TestClient):
    assert client.get("/talks", params={"level": "expert"}).status_code == 422


def test_time_slots_group_parallel_talks(client: TestClient):
    slots = client.get("/talks/slots").json()
    parallel = [s for s in slots if len(s["talks"]) > 1]
    assert len(parallel) == 2
    assert {t["id"] for t in parallel[0]["talks"]} == {"course-platform", "aws-ai-workshop"}


def test_talk_detail(client: TestClient):
    resp = client.get("/talks/turbo-yet")
    assert resp.status_code == 200
    body = resp.json()
    assert body["speaker"]["bio"].startswith("Software Engineer at Vercel")
    assert body["room"]["capacity"] == 500
    assert body["track"]["description"]


def test_talk_detail_404(client: TestClient):
    resp = client.get("/talks/missing")
    assert resp.status_code == 404
    assert resp.json()["detail"] == "Talk not found"


def test_tracks_and_speakers(client: TestClient):
    tracks = client.get("/tracks").json()
    assert [t["id"] for t in tracks] == ["ai", "perf", "fullstack", "dx", "platform"]

    speakers = client.get("/speakers").json()
    names = [s["name"] for s in speakers]
    assert names == sorted(names)

    speaker = client.get("/speakers/goncy").json()
    assert [t["id"] for t in speaker["talks"]] == ["nextjs16-migration"]
    assert speaker["talks"][0]["room"]["name"] == "Workshop Room"

    assert client.get("/speakers/nobody").status_code == 404


# ---------------------------------------------------------------------------
# Personal schedule
# ---------------------------------------------------------------------------


def test_add_list_and_remove(authed: TestClient):
    assert authed.post("/schedule/course-platform").status_code == 201
    assert authed.post("/schedule/aws-ai-workshop").status_code == 201
    assert authed.get("/schedule/aws-ai-workshop").json() == {"in_schedule": True}

    schedule = authed.get("/schedule").json()
    assert schedule["has_conflicts"] is True
    assert [s["talk"]["id"] for s in schedule["talks"]] == ["course-platform", "aws-ai-workshop"]
    assert schedule["talks"][0]["conflicts_with"] == ["aws-ai-workshop"]

    assert authed.delete("/schedule/aws-ai-workshop").json() == {"status": "removed"}
    schedule = authed.get("/schedule").json()
    assert schedule["has_conflicts"] is False
    assert authed.get("/schedule/aws-ai-workshop").json() == {"in_schedule": False}


def test_add_duplicate_and_unknown(authed: TestClient):
    authed.post("/schedule/turbo-yet")

    dup = authed.post("/schedule/turbo-yet")
    assert dup.status_code == 409
    assert dup.json()["detail"] == "Talk already in your schedule"

    missing = authed.post("/schedule/not-a-talk")
    assert missing.status_code == 404


def test_activity_feed(authed: TestClient):
    authed.post("/schedule/dx-ai-age")
    authed.post("/schedule/nextjs16-migration")

    types = [a["type"] for a in authed.get("/schedule/activity").json()]
    assert types == ["talk_added", "talk_added", "conflict_detected"]


def test_conflict_check_endpoint(authed: TestClient):
    resp = authed.post(
        "/schedule/conflicts",
        json={"talk_ids": ["dx-ai-age", "nextjs16-migration", "turbo-yet", "turbo-yet"]},
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["has_conflicts"] is True
    assert {(c["talk1"], c["talk2"]) for c in body["conflicts"]} == {
        ("dx-ai-age", "nextjs16-migration"),
        ("nextjs16-migration", "turbo-yet"),
    }
    assert len(body["talks"]) == 3


def test_conflict_check_empty_list(authed: TestClient):
    body = authed.post("/schedule/conflicts", json={"talk_ids": []}).json()
    assert body == {"conflicts": [], "talks": [], "has_conflicts": False}
