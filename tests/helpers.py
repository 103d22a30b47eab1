from datetime import timedelta

import httpx

from src.shared.utils import utcnow

PASSWORD = "secret123"


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


async def register(client: httpx.AsyncClient, email: str, role: str | None = None, **extra) -> dict:
    """Register an account and return ``{"user": ..., "headers": ...}``."""
    body = {"email": email, "password": PASSWORD, "first_name": "Test", "last_name": "User", **extra}
    if role:
        body["role"] = role
    r = await client.post("/api/auth/register", json=body)
    assert r.status_code == 201, r.text
    data = r.json()["data"]
    return {"user": data["user"], "headers": bearer(data["access_token"])}


def session_payload(**overrides) -> dict:
    start = utcnow() + timedelta(days=2)
    body = {
        "title": "Algebra basics",
        "topic": "Linear equations",
        "start_time": start.isoformat(),
        "end_time": (start + timedelta(hours=1)).isoformat(),
        "max_students": 3,
        "session_type": "group",
        "price": "25.00",
        "meeting_link": "https://meet.example.com/algebra",
    }
    body.update(overrides)
    return body
