async def test_join_leaves_an_in_app_notification(app_client, student, teaching_session):
    await app_client.post(f"/api/sessions/{teaching_session['id']}/join", headers=student["headers"])

    r = await app_client.get("/api/notifications/unread-count", headers=student["headers"])
    assert r.json()["data"] == {"count": 1}

    r = await app_client.get("/api/notifications", headers=student["headers"])
    (item,) = r.json()["data"]
    assert item["is_read"] is False

    r = await app_client.patch(f"/api/notifications/{item['id']}/read", headers=student["headers"])
    assert r.json()["data"]["is_read"] is True

    r = await app_client.get("/api/notifications", params={"unread_only": True}, headers=student["headers"])
    assert r.json()["data"] == []


async def test_cannot_read_someone_elses_notification(app_client, tutor, student, teaching_session):
    await app_client.post(f"/api/sessions/{teaching_session['id']}/join", headers=student["headers"])
    r = await app_client.get("/api/notifications", headers=student["headers"])
    nid = r.json()["data"][0]["id"]

    r = await app_client.patch(f"/api/notifications/{nid}/read", headers=tutor["headers"])
    assert r.status_code == 404


async def test_cancellation_notifies_everyone(app_client, tutor, student, teaching_session):
    sid = teaching_session["id"]
    await app_client.post(f"/api/sessions/{sid}/join", headers=student["headers"])
    await app_client.post(f"/api/sessions/{sid}/cancel", json={"reason": "Storm"}, headers=tutor["headers"])

    r = await app_client.patch("/api/notifications/read-all", headers=student["headers"])
    assert r.json()["data"] == {"updated": 2}
