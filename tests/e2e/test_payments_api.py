from datetime import timedelta

from src.education.domain.events import PaymentCompleted
from src.shared.utils import utcnow
from tests.helpers import register


async def test_invoice_settle_and_refund(app_client, admin, student, teaching_session, published):
    r = await app_client.post(
        "/api/payments",
        json={"amount": "25.00", "session_id": teaching_session["id"], "description": "Algebra"},
        headers=student["headers"],
    )
    assert r.status_code == 201, r.text
    payment = r.json()["data"]
    assert payment["status"] == "pending"
    assert payment["student_id"] == student["user"]["id"]
    assert payment["invoice_number"].startswith("INV-")
    pid = payment["id"]

    r = await app_client.post(f"/api/payments/{pid}/process", headers=student["headers"])
    assert r.json()["data"]["status"] == "processing"

    # Settlement is not something a student can trigger.
    r = await app_client.post(f"/api/payments/{pid}/callback", json={"success": True}, headers=student["headers"])
    assert r.status_code == 403

    r = await app_client.post(
        f"/api/payments/{pid}/callback",
        json={"success": True, "transaction_id": "ch_9"},
        headers=admin["headers"],
    )
    assert r.status_code == 200
    assert r.json()["data"]["status"] == "completed"
    assert any(isinstance(e, PaymentCompleted) for e in published)

    r = await app_client.post(f"/api/payments/{pid}/refund", json={"amount": "30.00"}, headers=admin["headers"])
    assert r.status_code == 400
    r = await app_client.post(
        f"/api/payments/{pid}/refund", json={"amount": "25.00", "reason": "Cancelled"}, headers=admin["headers"]
    )
    assert r.status_code == 200
    assert r.json()["data"]["status"] == "refunded"


async def test_students_see_only_their_payments(app_client, student):
    other = await register(app_client, "other@std.com")
    r = await app_client.post("/api/payments", json={"amount": "10.00"}, headers=student["headers"])
    pid = r.json()["data"]["id"]

    r = await app_client.get(f"/api/payments/{pid}", headers=other["headers"])
    assert r.status_code == 403
    r = await app_client.get(f"/api/payments/students/{student['user']['id']}", headers=other["headers"])
    assert r.status_code == 403

    r = await app_client.get(f"/api/payments/students/{student['user']['id']}", headers=student["headers"])
    assert [p["id"] for p in r.json()["data"]] == [pid]


async def test_overdue_listing_is_admin_only(app_client, admin, student):
    due = (utcnow() - timedelta(days=3)).isoformat()
    await app_client.post("/api/payments", json={"amount": "10.00", "due_date": due}, headers=student["headers"])

    r = await app_client.get("/api/payments/overdue", headers=student["headers"])
    assert r.status_code == 403

    r = await app_client.get("/api/payments/overdue", headers=admin["headers"])
    (item,) = r.json()["data"]
    assert item["is_overdue"] is True
    assert item["days_overdue"] >= 3
    assert item["student"]["email"] == "sam@std.com"

    r = await app_client.post("/api/payments/overdue/reminders", headers=admin["headers"])
    assert r.json()["data"] == {"queued": 1}


async def test_negative_amount_rejected(app_client, student):
    r = await app_client.post("/api/payments", json={"amount": "-5"}, headers=student["headers"])
    assert r.status_code == 400
    assert r.json()["code"] == "validation_error"


async def test_cancel_pending_payment(app_client, student):
    r = await app_client.post("/api/payments", json={"amount": "10.00"}, headers=student["headers"])
    pid = r.json()["data"]["id"]
    r = await app_client.post(f"/api/payments/{pid}/cancel", headers=student["headers"])
    assert r.json()["data"]["status"] == "cancelled"
    r = await app_client.post(f"/api/payments/{pid}/cancel", headers=student["headers"])
    assert r.status_code == 409
