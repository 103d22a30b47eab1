"""
Payment API Schemas
"""
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from src.education.api.schemas.common import UtcDateTime
from src.education.domain.entities.payment import Payment, PaymentEnvironment, PaymentMethod, PaymentStatus


class CreatePaymentRequest(BaseModel):
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    amount: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    student_id: Optional[UUID] = Field(default=None, description="Defaults to the caller")
    session_id: Optional[UUID] = None
    currency: Optional[str] = Field(default=None, pattern=r"^[A-Z]{3}$")
    payment_method: PaymentMethod = PaymentMethod.CREDIT_CARD
    description: Optional[str] = None
    due_date: Optional[UtcDateTime] = None
    metadata: dict[str, Any] = Field(default_factory=dict)


class PaymentCallbackRequest(BaseModel):
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    success: bool
    transaction_id: Optional[str] = Field(default=None, max_length=255)
    gateway_response: Optional[dict[str, Any]] = None


class RefundRequest(BaseModel):
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    amount: Decimal = Field(..., max_digits=10, decimal_places=2)
    reason: Optional[str] = Field(default=None, max_length=500)


class PaymentResponse(BaseModel):
    id: UUID
    student_id: UUID
    session_id: Optional[UUID] = None
    amount: Decimal
    currency: str
    payment_method: PaymentMethod
    status: PaymentStatus
    environment: PaymentEnvironment
    transaction_id: Optional[str] = None
    description: Optional[str] = None
    due_date: Optional[datetime] = None
    paid_at: Optional[datetime] = None
    refunded_at: Optional[datetime] = None
    refund_amount: Optional[Decimal] = None
    refund_reason: Optional[str] = None
    invoice_number: Optional[str] = None
    receipt_url: Optional[str] = None
    is_overdue: bool
    days_overdue: int
    metadata: dict[str, Any] = {}
    created_at: datetime
    session: Optional[dict[str, Any]] = None
    student: Optional[dict[str, Any]] = None

    @classmethod
    def from_entity(
        cls,
        payment: Payment,
        session: Optional[dict[str, Any]] = None,
        student: Optional[dict[str, Any]] = None,
    ) -> "PaymentResponse":
        return cls(
            id=payment.id,
            student_id=payment.student_id,
            session_id=payment.session_id,
            amount=payment.amount,
            currency=payment.currency,
            payment_method=payment.payment_method,
            status=payment.status,
            environment=payment.environment,
            transaction_id=payment.transaction_id,
            description=payment.description,
            due_date=payment.due_date,
            paid_at=payment.paid_at,
            refunded_at=payment.refunded_at,
            refund_amount=payment.refund_amount,
            refund_reason=payment.refund_reason,
            invoice_number=payment.invoice_number,
            receipt_url=payment.receipt_url,
            is_overdue=payment.is_overdue(),
            days_overdue=payment.days_overdue(),
            metadata=payment.metadata,
            created_at=payment.created_at,
            session=session,
            student=student,
        )
