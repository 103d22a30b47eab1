"""
Payment Service
Invoicing, gateway processing, settlement and refunds
"""
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, List, Optional
from uuid import UUID

from src.education.domain.entities.payment import Payment, PaymentMethod, PaymentStatus
from src.education.domain.events import PaymentCompleted, PaymentReminder
from src.education.domain.services.payment_gateway import PaymentGateway, build_gateway
from src.education.infrastructure.repositories import PaymentRepository, SessionRepository
from src.identity.domain.entities.user import User
from src.identity.infrastructure.persistence.repositories.user_repository import UserRepository
from src.notifications.domain.notification import Notification, NotificationType
from src.notifications.infrastructure.notification_repository import NotificationRepository
from src.shared.application.service import ApplicationService
from src.shared.config import get_settings
from src.shared.exceptions import NotFoundError, ValidationError
from src.shared.logging import get_logger
from src.shared.utils import utcnow

logger = get_logger(__name__)

_gateway: Optional[PaymentGateway] = None


def get_gateway() -> PaymentGateway:
    """Process-wide gateway, chosen from configuration on first use."""
    global _gateway
    if _gateway is None:
        _gateway = build_gateway()
    return _gateway


class PaymentService(ApplicationService):
    def __init__(self, *args, gateway: Optional[PaymentGateway] = None, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.gateway = gateway or get_gateway()
        self.payments = PaymentRepository(self.session)
        self.sessions = SessionRepository(self.session)
        self.users = UserRepository(self.session)
        self.notifications = NotificationRepository(self.session)

    async def _load(self, payment_id: UUID) -> Payment:
        payment = await self.payments.get_by_id(payment_id)
        if payment is None:
            raise NotFoundError("Payment not found")
        return payment

    async def _owners(self, payment: Payment) -> list[Optional[UUID]]:
        """The payer, plus the tutor of the paid session."""
        owners: list[Optional[UUID]] = [payment.student_id]
        if payment.session_id:
            session = await self.sessions.get_by_id(payment.session_id)
            if session is not None:
                owners.append(session.tutor_id)
        return owners

    async def _on_completed(self, payment: Payment) -> None:
        """In-app receipt inside the transaction; the confirmation event goes out after commit."""
        payer = await self.users.get_by_id(payment.student_id)
        if payer is None:
            return
        await self.notifications.add_many(
            [
                Notification(
                    user_id=payer.id,
                    title="Payment received",
                    message=f"We received {payment.amount} {payment.currency}"
                    + (f" for invoice {payment.invoice_number}." if payment.invoice_number else "."),
                    type=NotificationType.PAYMENT,
                    action_url=f"/payments/{payment.id}",
                    metadata={"payment_id": str(payment.id)},
                )
            ]
        )
        payment.raise_event(
            PaymentCompleted(
                recipient=payer.as_recipient(),
                amount=payment.amount,
                currency=payment.currency,
                invoice_number=payment.invoice_number,
            )
        )
        self.uow.track(payment)

    # -------- Invoicing ------------------------------------------------------

    async def create_payment(
        self,
        actor: User,
        amount: Decimal,
        student_id: Optional[UUID] = None,
        session_id: Optional[UUID] = None,
        currency: Optional[str] = None,
        payment_method: PaymentMethod = PaymentMethod.CREDIT_CARD,
        description: Optional[str] = None,
        due_date: Optional[datetime] = None,
        metadata: Optional[dict[str, Any]] = None,
    ) -> Payment:
        """
        Issue an invoice. Students may only invoice themselves.

        The gateway prepares the payment before it is stored; in development
        that settles it on the spot.
        """
        student_id = student_id or actor.id
        self.access.check(actor, "payment", "create", [student_id])

        async with self.uow:
            if await self.users.get_by_id(student_id) is None:
                raise ValidationError.for_field("student_id", "Student not found", str(student_id))
            if session_id is not None and await self.sessions.get_by_id(session_id) is None:
                raise ValidationError.for_field("session_id", "Session not found", str(session_id))

            payment = Payment.create(
                student_id=student_id,
                amount=amount,
                session_id=session_id,
                currency=currency or get_settings().default_currency,
                payment_method=payment_method,
                description=description,
                due_date=due_date,
                metadata=metadata,
            )
            self.gateway.prepare(payment)
            stored = await self.payments.add_with_invoice(payment)
            if stored.is_completed():
                await self._on_completed(stored)
            await self.uow.commit()

        logger.info(
            "payment.created",
            payment_id=str(stored.id),
            invoice_number=stored.invoice_number,
            status=stored.status.value,
            gateway=self.gateway.name,
        )
        self._publish_committed()
        return stored

    # -------- Settlement -----------------------------------------------------

    async def process(self, actor: User, payment_id: UUID) -> Payment:
        async with self.uow:
            payment = await self._load(payment_id)
            self.access.check(actor, "payment", "process", [payment.student_id])
            was_completed = payment.is_completed()
            self.gateway.process(payment)
            if payment.is_completed() and not was_completed:
                await self._on_completed(payment)
            payment = await self.payments.update(payment)
            await self.uow.commit()
        logger.info("payment.processing", payment_id=str(payment_id), status=payment.status.value)
        self._publish_committed()
        return payment

    async def handle_callback(
        self,
        actor: User,
        payment_id: UUID,
        success: bool,
        transaction_id: Optional[str] = None,
        gateway_response: Optional[dict[str, Any]] = None,
    ) -> Payment:
        """Provider settlement: completes or fails the payment."""
        self.access.check(actor, "payment", "settle")
        async with self.uow:
            payment = await self._load(payment_id)
            was_completed = payment.is_completed()
            self.gateway.settle(payment, success, transaction_id=transaction_id, gateway_response=gateway_response)
            if payment.is_completed() and not was_completed:
                await self._on_completed(payment)
            payment = await self.payments.update(payment)
            await self.uow.commit()
        logger.info("payment.settled", payment_id=str(payment_id), status=payment.status.value)
        self._publish_committed()
        return payment

    async def refund(self, actor: User, payment_id: UUID, amount: Decimal, reason: Optional[str] = None) -> Payment:
        self.access.check(actor, "payment", "refund")
        async with self.uow:
            payment = await self._load(payment_id)
            payment.refund(amount, reason)
            payment = await self.payments.update(payment)
            await self.uow.commit()
        logger.info("payment.refunded", payment_id=str(payment_id), refund_amount=str(payment.refund_amount))
        return payment

    async def cancel(self, actor: User, payment_id: UUID) -> Payment:
        async with self.uow:
            payment = await self._load(payment_id)
            self.access.check(actor, "payment", "cancel", [payment.student_id])
            payment.cancel()
            payment = await self.payments.update(payment)
            await self.uow.commit()
        logger.info("payment.cancelled", payment_id=str(payment_id))
        return payment

    # -------- Finders --------------------------------------------------------

    async def get_payment(self, actor: User, payment_id: UUID) -> Payment:
        payment = await self._load(payment_id)
        self.access.check(actor, "payment", "read", await self._owners(payment))
        return payment

    async def list_for_student(
        self,
        actor: User,
        student_id: UUID,
        status: Optional[PaymentStatus] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> List[tuple[Payment, Optional[dict[str, Any]]]]:
        self.access.check(actor, "payment", "read", [student_id])
        return await self.payments.find_by_student(student_id, status=status, start=start, end=end)

    async def overdue(self, actor: User) -> List[tuple[Payment, dict[str, Any]]]:
        self.access.check(actor, "payment", "overdue")
        return await self.payments.find_overdue()

    async def send_overdue_reminders(self, actor: User) -> int:
        """One reminder per overdue payment; returns the number of reminders queued."""
        self.access.check(actor, "payment", "remind")
        now = utcnow()
        overdue = await self.payments.find_overdue(now)
        payers = {u.id: u for u in await self.users.find_many(list({p.student_id for p, _ in overdue}))}
        reminders: list[PaymentReminder] = []
        for payment, _ in overdue:
            payer = payers.get(payment.student_id)
            if payer is None:
                continue
            reminders.append(
                PaymentReminder(
                    aggregate_id=payment.id,
                    aggregate_type="Payment",
                    recipient=payer.as_recipient(),
                    amount=payment.amount,
                    currency=payment.currency,
                    invoice_number=payment.invoice_number,
                    due_date=payment.due_date,
                    days_overdue=payment.days_overdue(now),
                )
            )
        self._record(*reminders)
        self._publish_committed()
        queued = len(reminders)
        logger.info("payment.reminders_queued", count=queued)
        return queued

    async def stats(self, actor: User, student_id: Optional[UUID] = None) -> dict[str, dict[str, Any]]:
        if student_id is None:
            self.access.check(actor, "payment", "stats")
        else:
            self.access.check(actor, "payment", "read", [student_id])
        return await self.payments.stats(student_id)
