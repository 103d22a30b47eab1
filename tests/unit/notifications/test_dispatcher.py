from dataclasses import replace
from datetime import datetime
from decimal import Decimal
from uuid import uuid4

import httpx
import pytest

from src.education.domain.events import PaymentCompleted, SessionCancelled
from src.notifications.application.dispatcher import NotificationDispatcher
from src.notifications.infrastructure.senders import WhatsAppSender
from src.shared.config import get_settings
from src.shared.domain.domain_event import Recipient
from src.shared.exceptions import ExternalServiceError


class RecordingEmail:
    def __init__(self, fail=False):
        self.sent = []
        self.fail = fail

    async def send(self, to, subject, html, text=None):
        if self.fail:
            raise ExternalServiceError("email", "SMTP down")
        self.sent.append((to, subject))
        return True


class RecordingWhatsApp:
    def __init__(self):
        self.sent = []

    async def send(self, to, body):
        self.sent.append((to, body))
        return {"sid": "SM1"}


def recipient(phone=None):
    return Recipient(user_id=uuid4(), first_name="Sam", email="sam@std.com", phone=phone)


async def test_cancellation_fans_out_to_every_student():
    email, whatsapp = RecordingEmail(), RecordingWhatsApp()
    dispatcher = NotificationDispatcher(email=email, whatsapp=whatsapp)
    event = SessionCancelled(
        recipients=(recipient("+15550001111"), recipient()),
        session_title="Algebra",
        start_time=datetime(2024, 6, 1, 10, 0),
        reason="Tutor ill",
    )
    await dispatcher.dispatch([event])
    assert len(email.sent) == 2
    assert all("Algebra" in subject for _, subject in email.sent)
    # Only recipients with a phone number get WhatsApp.
    assert [to for to, _ in whatsapp.sent] == ["+15550001111"]


async def test_sender_failure_is_swallowed():
    whatsapp = RecordingWhatsApp()
    dispatcher = NotificationDispatcher(email=RecordingEmail(fail=True), whatsapp=whatsapp)
    event = PaymentCompleted(
        recipient=recipient("+15550002222"),
        amount=Decimal("40.00"),
        currency="USD",
        invoice_number="INV-202406-0001",
    )
    await dispatcher.dispatch([event])
    # Email failed; WhatsApp still went out.
    assert len(whatsapp.sent) == 1
    assert "INV-202406-0001" in whatsapp.sent[0][1]


def test_unknown_events_render_nothing():
    from src.shared.domain.domain_event import DomainEvent

    dispatcher = NotificationDispatcher(email=RecordingEmail(), whatsapp=RecordingWhatsApp())
    assert dispatcher.render(DomainEvent()) == []


def twilio_settings():
    return replace(
        get_settings(),
        twilio_account_sid="AC123",
        twilio_auth_token="token-abc",
        twilio_whatsapp_from="+15559990000",
    )


async def test_whatsapp_sender_posts_to_twilio():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["body"] = request.content.decode()
        return httpx.Response(201, json={"sid": "SM42"})

    sender = WhatsAppSender(twilio_settings(), transport=httpx.MockTransport(handler))
    result = await sender.send("+15550001111", "Hello")
    assert result == {"sid": "SM42"}
    assert seen["url"].endswith("/Accounts/AC123/Messages.json")
    assert "whatsapp%3A%2B15550001111" in seen["body"]


async def test_whatsapp_sender_raises_on_error_status():
    sender = WhatsAppSender(
        twilio_settings(),
        transport=httpx.MockTransport(lambda request: httpx.Response(500, json={"message": "boom"})),
    )
    with pytest.raises(ExternalServiceError):
        await sender.send("+15550001111", "Hello")


async def test_unconfigured_whatsapp_is_a_no_op():
    assert await WhatsAppSender(get_settings()).send("+15550001111", "Hello") is None
