"""
Notification dispatcher.

Turns committed domain events into email and WhatsApp messages. Delivery is
best-effort and at-most-once: a sender failure is logged and dropped, never
retried and never surfaced to the request that caused it. The dispatcher
does not touch the database; events carry every contact detail it needs.
"""
from __future__ import annotations

from typing import Callable, Iterable, Optional

from src.education.domain.events import (
    PaymentCompleted,
    PaymentReminder,
    SessionCancelled,
    SessionReminder,
    SessionRescheduled,
    StudentJoinedSession,
)
from src.identity.domain.events.user_events import (
    PasswordResetCompleted,
    PasswordResetRequested,
    UserRegistered,
)
from src.notifications.application import templates
from src.notifications.application.templates import Message
from src.notifications.infrastructure.senders.email_sender import EmailSender, get_email_sender
from src.notifications.infrastructure.senders.whatsapp_sender import WhatsAppSender, get_whatsapp_sender
from src.shared.config import get_settings
from src.shared.domain.domain_event import DomainEvent, Recipient
from src.shared.exceptions import ExternalServiceError
from src.shared.logging import get_logger

logger = get_logger(__name__)

# (recipient, message, also via WhatsApp)
Delivery = tuple[Recipient, Message, bool]


class NotificationDispatcher:
    def __init__(
        self,
        email: Optional[EmailSender] = None,
        whatsapp: Optional[WhatsAppSender] = None,
    ) -> None:
        self.email = email or get_email_sender()
        self.whatsapp = whatsapp or get_whatsapp_sender()
        self._renderers: dict[type, Callable[[DomainEvent], list[Delivery]]] = {
            UserRegistered: self._user_registered,
            PasswordResetRequested: self._password_reset_requested,
            PasswordResetCompleted: self._password_reset_completed,
            StudentJoinedSession: self._student_joined,
            SessionCancelled: self._session_cancelled,
            SessionRescheduled: self._session_rescheduled,
            SessionReminder: self._session_reminder,
            PaymentCompleted: self._payment_completed,
            PaymentReminder: self._payment_reminder,
        }

    # ---- rendering ----------------------------------------------------------

    def render(self, event: DomainEvent) -> list[Delivery]:
        renderer = self._renderers.get(type(event))
        if renderer is None:
            logger.debug("No notification for event", event_type=event.event_type)
            return []
        return renderer(event)

    def _user_registered(self, event: UserRegistered) -> list[Delivery]:
        r = event.recipient
        return [(r, templates.welcome(r.first_name, event.role), True)]

    def _password_reset_requested(self, event: PasswordResetRequested) -> list[Delivery]:
        r = event.recipient
        minutes = get_settings().password_reset_exp_minutes
        return [(r, templates.password_reset(r.first_name, event.reset_url, minutes), False)]

    def _password_reset_completed(self, event: PasswordResetCompleted) -> list[Delivery]:
        return [(event.recipient, templates.password_changed(event.recipient.first_name), False)]

    def _student_joined(self, event: StudentJoinedSession) -> list[Delivery]:
        r = event.recipient
        message = templates.session_invitation(
            r.first_name, event.session_title, event.start_time, event.meeting_link, event.location
        )
        return [(r, message, True)]

    def _session_cancelled(self, event: SessionCancelled) -> list[Delivery]:
        return [
            (r, templates.session_cancelled(r.first_name, event.session_title, event.start_time, event.reason), True)
            for r in event.recipients
        ]

    def _session_rescheduled(self, event: SessionRescheduled) -> list[Delivery]:
        return [
            (r, templates.session_rescheduled(r.first_name, event.session_title, event.start_time, event.end_time), True)
            for r in event.recipients
        ]

    def _session_reminder(self, event: SessionReminder) -> list[Delivery]:
        return [
            (r, templates.session_reminder(r.first_name, event.session_title, event.start_time, event.meeting_link), True)
            for r in event.recipients
        ]

    def _payment_completed(self, event: PaymentCompleted) -> list[Delivery]:
        r = event.recipient
        return [(r, templates.payment_confirmation(r.first_name, event.amount, event.currency, event.invoice_number), True)]

    def _payment_reminder(self, event: PaymentReminder) -> list[Delivery]:
        r = event.recipient
        message = templates.payment_reminder(
            r.first_name, event.amount, event.currency, event.invoice_number, event.due_date, event.days_overdue
        )
        return [(r, message, True)]

    # ---- delivery -----------------------------------------------------------

    async def _deliver(self, recipient: Recipient, message: Message, whatsapp: bool, event_type: str) -> None:
        if recipient.email:
            try:
                await self.email.send(recipient.email, message.subject, message.html, message.text)
            except ExternalServiceError as exc:
                logger.error("Notification dropped", channel=exc.service, event_type=event_type, error=exc.message)
        if whatsapp and recipient.phone:
            try:
                await self.whatsapp.send(recipient.phone, message.text)
            except ExternalServiceError as exc:
                logger.error("Notification dropped", channel=exc.service, event_type=event_type, error=exc.message)

    async def dispatch(self, events: Iterable[DomainEvent]) -> None:
        for event in events:
            for recipient, message, whatsapp in self.render(event):
                await self._deliver(recipient, message, whatsapp, event.event_type)


_dispatcher: Optional[NotificationDispatcher] = None


def get_dispatcher() -> NotificationDispatcher:
    global _dispatcher
    if _dispatcher is None:
        _dispatcher = NotificationDispatcher()
    return _dispatcher
