from datetime import timedelta

from src.education.domain.events import SessionRescheduled, StudentJoinedSession
from src.shared.utils import utcnow
from tests.helpers import register, session_payload


async def test_create_join_and_fill(app_client, tutor, student, teaching_session, published):
    sid = teaching_session["id"]
    assert teaching_session["tutor_id"] == tutor["user"]["id"]
    assert teaching_session["currency"] == "USD"
    assert teaching_session["duration"] == 60
    assert teaching_session["can_join"] is True

    r = await app_client.post(f"/api/sessions/{sid}/join", headers=student["headers"])
    assert r.status_code == 200, r.text
    assert r.json()["data"]["current_students"] == 1
    assert any(isinstance(e, StudentJoinedSession) for e in published)

    r = await app_client.post(f"/api/sessions/{sid}/join", headers=student["headers"])
    assert r.status_code == 409

    for name in ("amy", "bob"):
        other = await register(app_client, f"{name}@std.com")
        r = await app_client.post(f"/api/sessions/{sid}/join", headers=other["headers"])
        assert r.status_code == 200

    late = await register(app_client, "late@std.com")
    r = await app_client.post(f"/api/sessions/{sid}/join", headers=late["headers"])
    assert r.status_code == 409
    assert r.json()["code"] == "session_full"

    r = await app_client.get(f"/api/sessions/{sid}", headers=late["headers"])
    data = r.json()["data"]
    assert data["current_students"] == 3
    assert data["status"] == "scheduled"
    assert data["can_join"] is False


async def test_roster_is_for_the_tutor(app_client, tutor, student, teaching_session):
    sid = teaching_session["id"]
    await app_client.post(f"/api/sessions/{sid}/join", headers=student["headers"])

    r = await app_client.get(f"/api/sessions/{sid}/students", headers=tutor["headers"])
    assert r.status_code == 200
    assert [s["email"] for s in r.json()["data"]] == ["sam@std.com"]

    r = await app_client.get(f"/api/sessions/{sid}/students", headers=student["headers"])
    assert r.status_code == 403


async def test_other_tutor_cannot_cancel(app_client, teaching_session):
    other = await register(app_client, "otto@tut.com")
    r = await app_client.post(f"/api/sessions/{teaching_session['id']}/cancel", headers=other["headers"])
    assert r.status_code == 403


async def test_reschedule_then_start_and_complete(app_client, tutor, student, teaching_session, published):
    sid = teaching_session["id"]
    await app_client.post(f"/api/sessions/{sid}/join", headers=student["headers"])
    start = utcnow() + timedelta(days=5)

    r = await app_client.post(
        f"/api/sessions/{sid}/reschedule",
        json={"start_time": start.isoformat(), "end_time": (start + timedelta(minutes=45)).isoformat()},
        headers=tutor["headers"],
    )
    assert r.status_code == 200, r.text
    data = r.json()["data"]
    assert data["status"] == "scheduled"
    assert data["duration"] == 45
    assert data["metadata"]["reschedule_count"] == 1
    assert any(isinstance(e, SessionRescheduled) for e in published)

    other = await register(app_client, "una@std.com")
    r = await app_client.post(f"/api/sessions/{sid}/join", headers=other["headers"])
    assert r.status_code == 200, r.text
    assert r.json()["data"]["current_students"] == 2

    r = await app_client.post(f"/api/sessions/{sid}/start", headers=tutor["headers"])
    assert r.json()["data"]["status"] == "ongoing"
    r = await app_client.post(f"/api/sessions/{sid}/complete", headers=tutor["headers"])
    assert r.json()["data"]["status"] == "completed"
    r = await app_client.post(f"/api/sessions/{sid}/complete", headers=tutor["headers"])
    assert r.status_code == 409


async def test_my_sessions_by_role(app_client, tutor, student, teaching_session):
    await app_client.post(f"/api/sessions/{teaching_session['id']}/join", headers=student["headers"])
    for headers in (tutor["headers"], student["headers"]):
        r = await app_client.get("/api/sessions/mine", headers=headers)
        assert [s["id"] for s in r.json()["data"]] == [teaching_session["id"]]


async def test_update_session(app_client, tutor, teaching_session):
    r = await app_client.put(
        f"/api/sessions/{teaching_session['id']}",
        json={"title": "Algebra II", "max_students": 5},
        headers=tutor["headers"],
    )
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["title"] == "Algebra II"
    assert data["max_students"] == 5
    assert data["topic"] == "Linear equations"


async def test_list_filters_by_status(app_client, tutor, teaching_session):
    r = await app_client.post("/api/sessions", json=session_payload(title="Second one"), headers=tutor["headers"])
    second = r.json()["data"]["id"]
    await app_client.post(f"/api/sessions/{second}/cancel", json={"reason": "Clash"}, headers=tutor["headers"])

    r = await app_client.get("/api/sessions", params={"status": "cancelled"}, headers=tutor["headers"])
    assert [s["id"] for s in r.json()["data"]] == [second]
