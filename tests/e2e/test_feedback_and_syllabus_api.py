async def test_anonymous_feedback_hides_author(app_client, tutor, student, admin, teaching_session):
    sid = teaching_session["id"]
    await app_client.post(f"/api/sessions/{sid}/join", headers=student["headers"])
    await app_client.post(f"/api/sessions/{sid}/complete", headers=tutor["headers"])

    r = await app_client.post(
        "/api/feedback",
        json={"session_id": sid, "rating": 5, "comment": "Great", "is_anonymous": True},
        headers=student["headers"],
    )
    assert r.status_code == 201, r.text

    r = await app_client.get(f"/api/feedback/tutors/{tutor['user']['id']}", headers=tutor["headers"])
    data = r.json()["data"]
    assert data["average_rating"] == 5.0
    assert data["feedback"][0]["student_id"] is None

    r = await app_client.get(f"/api/feedback/sessions/{sid}", headers=admin["headers"])
    assert r.json()["data"][0]["student_id"] == student["user"]["id"]


async def test_rating_out_of_range(app_client, student, teaching_session):
    r = await app_client.post(
        "/api/feedback", json={"session_id": teaching_session["id"], "rating": 6}, headers=student["headers"]
    )
    assert r.status_code == 400


async def test_syllabus_crud(app_client, tutor, student):
    r = await app_client.post(
        "/api/syllabus",
        json={
            "title": "Intro to Statistics",
            "subject": "Maths",
            "topics": [{"name": "Mean", "duration": 2}, {"name": "Variance", "duration": 3}],
        },
        headers=tutor["headers"],
    )
    assert r.status_code == 201, r.text
    syllabus = r.json()["data"]
    assert syllabus["total_hours"] == 5

    r = await app_client.post(
        "/api/syllabus", json={"title": "Nope", "subject": "Maths", "topics": []}, headers=student["headers"]
    )
    assert r.status_code == 403

    r = await app_client.put(
        f"/api/syllabus/{syllabus['id']}", json={"is_active": False}, headers=tutor["headers"]
    )
    assert r.json()["data"]["is_active"] is False

    r = await app_client.get("/api/syllabus", params={"is_active": True}, headers=student["headers"])
    assert r.json()["data"] == []
