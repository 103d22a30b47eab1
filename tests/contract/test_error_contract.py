from uuid import uuid4

from tests.helpers import session_payload


def assert_error(response, status, code):
    assert response.status_code == status, response.text
    body = response.json()
    assert body["success"] is False
    assert body["code"] == code
    assert body["message"]
    assert body["path"] == response.request.url.path
    return body


async def test_missing_token(app_client):
    assert_error(await app_client.get("/api/sessions"), 401, "unauthorized")


async def test_garbage_token(app_client):
    r = await app_client.get("/api/sessions", headers={"Authorization": "Bearer not-a-jwt"})
    assert r.status_code == 401
    assert r.json()["success"] is False


async def test_request_validation(app_client, tutor):
    r = await app_client.post("/api/sessions", json=session_payload(max_students=0), headers=tutor["headers"])
    body = assert_error(r, 400, "validation_error")
    assert any(e["field"] == "max_students" for e in body["errors"])


async def test_forbidden_role(app_client, student):
    r = await app_client.post("/api/sessions", json=session_payload(), headers=student["headers"])
    assert_error(r, 403, "forbidden")


async def test_unknown_session(app_client, student):
    r = await app_client.get(f"/api/sessions/{uuid4()}", headers=student["headers"])
    assert_error(r, 404, "not_found")


async def test_unknown_route(app_client):
    assert_error(await app_client.get("/api/nothing-here"), 404, "route_not_found")


async def test_duplicate_registration(app_client, student):
    r = await app_client.post(
        "/api/auth/register",
        json={"email": "sam@std.com", "password": "secret123", "first_name": "Sam", "last_name": "Again"},
    )
    assert_error(r, 409, "duplicate")


async def test_success_envelope(app_client, tutor):
    r = await app_client.post("/api/sessions", json=session_payload(), headers=tutor["headers"])
    assert r.status_code == 201
    body = r.json()
    assert body["success"] is True
    assert body["message"] == "Session created successfully"
    assert r.headers["location"] == f"/api/sessions/{body['data']['id']}"
