async def test_join_premarks_and_tutor_marks(app_client, tutor, student, teaching_session):
    sid = teaching_session["id"]
    await app_client.post(f"/api/sessions/{sid}/join", headers=student["headers"])

    r = await app_client.get(f"/api/attendance/sessions/{sid}", headers=tutor["headers"])
    (row,) = r.json()["data"]
    assert row["status"] == "pending"
    assert row["student"]["email"] == "sam@std.com"

    r = await app_client.patch(
        f"/api/attendance/{row['id']}/mark", json={"status": "late"}, headers=student["headers"]
    )
    assert r.status_code == 403

    r = await app_client.patch(f"/api/attendance/{row['id']}/mark", json={"status": "late"}, headers=tutor["headers"])
    assert r.status_code == 200
    marked = r.json()["data"]
    assert marked["status"] == "late"
    assert marked["marked_by"] == tutor["user"]["id"]
    assert marked["check_in_time"] is not None

    r = await app_client.post(f"/api/attendance/{row['id']}/check-out", headers=tutor["headers"])
    assert r.json()["data"]["check_out_time"] is not None

    r = await app_client.get(f"/api/attendance/students/{student['user']['id']}", headers=student["headers"])
    (mine,) = r.json()["data"]
    assert mine["session"]["title"] == "Algebra basics"


async def test_second_row_for_same_student_conflicts(app_client, tutor, student, teaching_session):
    sid = teaching_session["id"]
    await app_client.post(f"/api/sessions/{sid}/join", headers=student["headers"])
    r = await app_client.post(
        "/api/attendance",
        json={"session_id": sid, "student_id": student["user"]["id"], "status": "present"},
        headers=tutor["headers"],
    )
    assert r.status_code == 409
    assert r.json()["code"] == "duplicate"


async def test_pending_is_not_a_mark(app_client, tutor, student, teaching_session):
    sid = teaching_session["id"]
    await app_client.post(f"/api/sessions/{sid}/join", headers=student["headers"])
    r = await app_client.get(f"/api/attendance/sessions/{sid}", headers=tutor["headers"])
    row_id = r.json()["data"][0]["id"]
    r = await app_client.patch(f"/api/attendance/{row_id}/mark", json={"status": "pending"}, headers=tutor["headers"])
    assert r.status_code == 400
