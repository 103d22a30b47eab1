# src/education/infrastructure/repositories/payment_repository.py
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, List, Optional
from uuid import UUID

from sqlalchemy import exc as sa_exc
from sqlalchemy import func, select

from src.education.domain.entities.payment import (
    Payment,
    PaymentEnvironment,
    PaymentMethod,
    PaymentStatus,
    format_invoice_number,
    invoice_prefix,
    invoice_sequence,
)
from src.education.infrastructure.models import PaymentModel, SessionModel
from src.education.infrastructure.repositories.projections import session_view, student_view
from src.identity.infrastructure.persistence.models.user_model import UserModel
from src.shared.infrastructure.database.sqlalchemy_repository import SQLAlchemyRepository
from src.shared.logging import get_logger
from src.shared.utils import money, utcnow

logger = get_logger(__name__)

INVOICE_ATTEMPTS = 5


class PaymentRepository(SQLAlchemyRepository[Payment, PaymentModel]):
    """
    Payments and invoice numbering.

    Invoice numbers are computed inside the caller's transaction; each insert
    runs under a SAVEPOINT so a unique conflict on ``invoice_number`` only
    rolls back that attempt.
    """

    model_class = PaymentModel

    def _to_entity(self, model: PaymentModel) -> Payment:
        return Payment(
            id=model.id,
            student_id=model.student_id,
            session_id=model.session_id,
            amount=model.amount,
            currency=model.currency,
            payment_method=PaymentMethod(model.payment_method),
            status=PaymentStatus(model.status),
            transaction_id=model.transaction_id,
            gateway_response=model.gateway_response,
            description=model.description,
            due_date=model.due_date,
            paid_at=model.paid_at,
            refunded_at=model.refunded_at,
            refund_amount=model.refund_amount,
            refund_reason=model.refund_reason,
            invoice_number=model.invoice_number,
            receipt_url=model.receipt_url,
            environment=PaymentEnvironment(model.environment),
            metadata=dict(model.metadata_ or {}),
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    def _to_model(self, entity: Payment) -> PaymentModel:
        return PaymentModel(
            id=entity.id,
            student_id=entity.student_id,
            session_id=entity.session_id,
            amount=entity.amount,
            currency=entity.currency,
            payment_method=entity.payment_method.value,
            status=entity.status.value,
            transaction_id=entity.transaction_id,
            gateway_response=entity.gateway_response,
            description=entity.description,
            due_date=entity.due_date,
            paid_at=entity.paid_at,
            refunded_at=entity.refunded_at,
            refund_amount=entity.refund_amount,
            refund_reason=entity.refund_reason,
            invoice_number=entity.invoice_number,
            receipt_url=entity.receipt_url,
            environment=entity.environment.value,
            metadata_=dict(entity.metadata),
            created_at=entity.created_at,
            updated_at=entity.updated_at,
        )

    # -------- Invoice numbering ---------------------------------------------

    async def next_invoice_number(self, now: Optional[datetime] = None) -> str:
        now = now or utcnow()
        prefix = invoice_prefix(now)
        stmt = (
            select(PaymentModel.invoice_number)
            .where(PaymentModel.invoice_number.like(f"{prefix}%"))
            .order_by(func.length(PaymentModel.invoice_number).desc(), PaymentModel.invoice_number.desc())
            .limit(1)
        )
        result = await self._execute(stmt, "next_invoice_number")
        last = result.scalar_one_or_none()
        return format_invoice_number(now, invoice_sequence(last) + 1 if last else 1)

    async def add_with_invoice(self, payment: Payment, now: Optional[datetime] = None) -> Payment:
        """
        Insert ``payment``, numbering it when it has no invoice number yet.

        Raises:
            DuplicateConstraintError: Caller-supplied number taken, or still
                conflicting after ``INVOICE_ATTEMPTS`` generated numbers
        """
        generated = payment.invoice_number is None
        attempt = 0
        while True:
            attempt += 1
            if generated:
                payment.invoice_number = await self.next_invoice_number(now)
            model = self._to_model(payment)
            try:
                async with self.session.begin_nested():
                    self.session.add(model)
                    await self.session.flush()
            except sa_exc.IntegrityError as exc:
                conflict = "invoice_number" in str(exc.orig)
                if not (generated and conflict) or attempt == INVOICE_ATTEMPTS:
                    raise self._storage_error(exc, "add_with_invoice") from exc
                logger.warning(
                    "Invoice number taken, retrying",
                    invoice_number=payment.invoice_number,
                    attempt=attempt,
                )
                continue
            logger.debug("Payment added", payment_id=str(model.id), invoice_number=model.invoice_number)
            return self._to_entity(model)

    # -------- Finders --------------------------------------------------------

    async def find_by_student(
        self,
        student_id: UUID,
        status: Optional[PaymentStatus] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> List[tuple[Payment, Optional[dict[str, Any]]]]:
        """Newest first, each with a view of the paid session (if any)."""
        stmt = (
            select(PaymentModel, SessionModel)
            .outerjoin(SessionModel, SessionModel.id == PaymentModel.session_id)
            .where(PaymentModel.student_id == student_id)
        )
        if status is not None:
            stmt = stmt.where(PaymentModel.status == PaymentStatus(status).value)
        if start is not None:
            stmt = stmt.where(PaymentModel.created_at >= start)
        if end is not None:
            stmt = stmt.where(PaymentModel.created_at <= end)
        stmt = stmt.order_by(PaymentModel.created_at.desc())
        result = await self._execute(stmt, "find_by_student")
        return [(self._to_entity(p), session_view(s)) for p, s in result.all()]

    async def find_overdue(self, now: Optional[datetime] = None) -> List[tuple[Payment, dict[str, Any]]]:
        """Pending payments past their due date, oldest due first, with the payer."""
        stmt = (
            select(PaymentModel, UserModel)
            .join(UserModel, UserModel.id == PaymentModel.student_id)
            .where(
                PaymentModel.status == PaymentStatus.PENDING.value,
                PaymentModel.due_date.is_not(None),
                PaymentModel.due_date < (now or utcnow()),
            )
            .order_by(PaymentModel.due_date.asc())
        )
        result = await self._execute(stmt, "find_overdue")
        return [(self._to_entity(p), student_view(u)) for p, u in result.all()]

    async def stats(self, student_id: Optional[UUID] = None) -> dict[str, dict[str, Any]]:
        """``{status: {"count": n, "total": amount}}`` for every status."""
        stmt = select(PaymentModel.status, func.count(), func.sum(PaymentModel.amount)).group_by(PaymentModel.status)
        if student_id is not None:
            stmt = stmt.where(PaymentModel.student_id == student_id)
        result = await self._execute(stmt, "stats")
        stats = {s.value: {"count": 0, "total": Decimal("0.00")} for s in PaymentStatus}
        for status, count, total in result.all():
            stats[status] = {"count": int(count), "total": money(total or 0)}
        return stats
