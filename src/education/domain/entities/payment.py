"""
Payment Entity - monetary obligation and its lifecycle
"""
from __future__ import annotations

import math
import re
from datetime import datetime, timedelta
from decimal import Decimal
from enum import Enum
from typing import Any, Optional
from uuid import UUID

from src.education.domain.errors import InvalidTransitionError
from src.shared.domain.base_entity import BaseAggregateRoot
from src.shared.exceptions import ValidationError
from src.shared.utils import money, utcnow


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    REFUNDED = "refunded"
    CANCELLED = "cancelled"


class PaymentMethod(str, Enum):
    CREDIT_CARD = "credit_card"
    DEBIT_CARD = "debit_card"
    BANK_TRANSFER = "bank_transfer"
    PAYPAL = "paypal"
    STRIPE = "stripe"
    CASH = "cash"
    WAIVER = "waiver"
    DEV_MODE = "dev_mode"


class PaymentEnvironment(str, Enum):
    DEV = "dev"
    PROD = "prod"


INVOICE_PATTERN = re.compile(r"^INV-(\d{4})(\d{2})-(\d{4,})$")


def invoice_prefix(at: datetime) -> str:
    return f"INV-{at.year:04d}{at.month:02d}-"


def format_invoice_number(at: datetime, sequence: int) -> str:
    """``INV-YYYYMM-NNNN``; the sequence restarts every calendar month."""
    return f"{invoice_prefix(at)}{sequence:04d}"


def invoice_sequence(invoice_number: str) -> int:
    match = INVOICE_PATTERN.match(invoice_number or "")
    return int(match.group(3)) if match else 0


class Payment(BaseAggregateRoot):
    """
    Payment aggregate.

    Transitions:
        pending -> processing -> completed
        pending | processing -> failed
        completed -> refunded
        pending | processing | failed -> cancelled

    ``mark_completed`` may be repeated: status stays completed and
    ``paid_at`` moves to the latest call. A refunded payment only accepts
    metadata changes.
    """

    def __init__(
        self,
        student_id: UUID,
        amount: Decimal | int | str,
        currency: str = "USD",
        payment_method: PaymentMethod = PaymentMethod.CREDIT_CARD,
        status: PaymentStatus = PaymentStatus.PENDING,
        session_id: Optional[UUID] = None,
        transaction_id: Optional[str] = None,
        gateway_response: Optional[dict[str, Any]] = None,
        description: Optional[str] = None,
        due_date: Optional[datetime] = None,
        paid_at: Optional[datetime] = None,
        refunded_at: Optional[datetime] = None,
        refund_amount: Optional[Decimal] = None,
        refund_reason: Optional[str] = None,
        invoice_number: Optional[str] = None,
        receipt_url: Optional[str] = None,
        metadata: Optional[dict[str, Any]] = None,
        environment: PaymentEnvironment = PaymentEnvironment.PROD,
        id: Optional[UUID] = None,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None,
    ) -> None:
        super().__init__(id, created_at=created_at, updated_at=updated_at)
        self.student_id = student_id
        self.session_id = session_id
        self.amount = money(amount)
        self.currency = currency
        self.payment_method = PaymentMethod(payment_method)
        self.status = PaymentStatus(status)
        self.transaction_id = transaction_id
        self.gateway_response = gateway_response
        self.description = description
        self.due_date = due_date
        self.paid_at = paid_at
        self.refunded_at = refunded_at
        self.refund_amount = money(refund_amount) if refund_amount is not None else None
        self.refund_reason = refund_reason
        self.invoice_number = invoice_number
        self.receipt_url = receipt_url
        self.metadata = dict(metadata or {})
        self.environment = PaymentEnvironment(environment)

    @classmethod
    def create(cls, student_id: UUID, amount: Decimal | int | str, **fields: Any) -> Payment:
        payment = cls(student_id=student_id, amount=amount, status=PaymentStatus.PENDING, **fields)
        if payment.amount < 0:
            raise ValidationError.for_field("amount", "Amount cannot be negative", str(payment.amount))
        if not re.fullmatch(r"[A-Z]{3}", payment.currency or ""):
            raise ValidationError.for_field("currency", "Currency must be a 3-letter ISO code", payment.currency)
        return payment

    # ---- queries ------------------------------------------------------------

    def is_completed(self) -> bool:
        return self.status == PaymentStatus.COMPLETED

    def is_pending(self) -> bool:
        return self.status == PaymentStatus.PENDING

    def is_failed(self) -> bool:
        return self.status == PaymentStatus.FAILED

    def is_refunded(self) -> bool:
        return self.status == PaymentStatus.REFUNDED

    def is_overdue(self, now: Optional[datetime] = None) -> bool:
        """
        True once ``due_date`` has passed on any payment that is not completed,
        including cancelled, failed and refunded ones.

        Collection is narrower: ``PaymentRepository.find_overdue`` and the
        reminders only consider ``pending`` payments.
        """
        if self.due_date is None or self.is_completed():
            return False
        return (now or utcnow()) > self.due_date

    def days_overdue(self, now: Optional[datetime] = None) -> int:
        now = now or utcnow()
        if not self.is_overdue(now):
            return 0
        return math.ceil((now - self.due_date) / timedelta(days=1))

    # ---- lifecycle ----------------------------------------------------------

    def _require(self, operation: str, *allowed: PaymentStatus) -> None:
        if self.status not in allowed:
            raise InvalidTransitionError("payment", self.status.value, operation)

    def start_processing(self) -> None:
        self._require("process", PaymentStatus.PENDING)
        self.status = PaymentStatus.PROCESSING
        self._touch()

    def mark_completed(
        self,
        transaction_id: Optional[str] = None,
        gateway_response: Optional[dict[str, Any]] = None,
        now: Optional[datetime] = None,
    ) -> None:
        self._require("complete", PaymentStatus.PENDING, PaymentStatus.PROCESSING, PaymentStatus.COMPLETED)
        self.status = PaymentStatus.COMPLETED
        self.paid_at = now or utcnow()
        if transaction_id:
            self.transaction_id = transaction_id
        if gateway_response:
            self.gateway_response = gateway_response
        self._touch()

    def mark_failed(self, gateway_response: Optional[dict[str, Any]] = None) -> None:
        self._require("fail", PaymentStatus.PENDING, PaymentStatus.PROCESSING)
        self.status = PaymentStatus.FAILED
        if gateway_response:
            self.gateway_response = gateway_response
        self._touch()

    def refund(self, amount: Decimal | int | str, reason: Optional[str] = None, now: Optional[datetime] = None) -> None:
        """
        Raises:
            InvalidTransitionError: Payment is not completed
            ValidationError: Amount not in (0, amount]
        """
        self._require("refund", PaymentStatus.COMPLETED)
        value = money(amount)
        if value <= 0:
            raise ValidationError.for_field("amount", "Refund amount must be greater than zero", str(value))
        if value > self.amount:
            raise ValidationError.for_field(
                "amount", f"Refund amount cannot exceed the paid amount of {self.amount}", str(value)
            )
        self.status = PaymentStatus.REFUNDED
        self.refund_amount = value
        self.refund_reason = reason
        self.refunded_at = now or utcnow()
        self._touch()

    def cancel(self) -> None:
        self._require("cancel", PaymentStatus.PENDING, PaymentStatus.PROCESSING, PaymentStatus.FAILED)
        self.status = PaymentStatus.CANCELLED
        self._touch()

    def update_metadata(self, **entries: Any) -> None:
        self.metadata = {**self.metadata, **entries}
        self._touch()
