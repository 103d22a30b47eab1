# src/education/api/routes/payments.py

from typing import Annotated, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from src.education.api.dependencies import PaymentServiceDep
from src.education.api.schemas.common import UtcDateTime
from src.education.api.schemas.payment_schemas import (
    CreatePaymentRequest,
    PaymentCallbackRequest,
    PaymentResponse,
    RefundRequest,
)
from src.education.domain.entities.payment import PaymentStatus
from src.identity.api.dependencies.auth import CurrentUser, require_roles
from src.identity.domain.entities.user import User
from src.shared.http.responses import created, ok
from src.shared.roles import Role

router = APIRouter(prefix="/api/payments", tags=["Payments"])

AdminUser = Annotated[User, Depends(require_roles(Role.ADMIN, Role.SUPER_ADMIN))]


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_payment(payload: CreatePaymentRequest, current_user: CurrentUser, service: PaymentServiceDep):
    """Issue an invoice; numbered ``INV-YYYYMM-NNNN``."""
    payment = await service.create_payment(current_user, **payload.model_dump())
    return created(
        PaymentResponse.from_entity(payment),
        message="Payment created successfully",
        location=f"/api/payments/{payment.id}",
    )


@router.get("/overdue")
async def overdue_payments(admin: AdminUser, service: PaymentServiceDep):
    rows = await service.overdue(admin)
    return ok([PaymentResponse.from_entity(p, student=student) for p, student in rows])


@router.post("/overdue/reminders")
async def send_overdue_reminders(admin: AdminUser, service: PaymentServiceDep):
    return ok({"queued": await service.send_overdue_reminders(admin)}, message="Payment reminders queued")


@router.get("/stats")
async def payment_stats(current_user: CurrentUser, service: PaymentServiceDep, student_id: Optional[UUID] = None):
    return ok(await service.stats(current_user, student_id))


@router.get("/students/{student_id}")
async def student_payments(
    student_id: UUID,
    current_user: CurrentUser,
    service: PaymentServiceDep,
    status_: Optional[PaymentStatus] = Query(default=None, alias="status"),
    start_date: Optional[UtcDateTime] = None,
    end_date: Optional[UtcDateTime] = None,
):
    rows = await service.list_for_student(current_user, student_id, status=status_, start=start_date, end=end_date)
    return ok([PaymentResponse.from_entity(p, session=session) for p, session in rows])


@router.get("/{payment_id}")
async def get_payment(payment_id: UUID, current_user: CurrentUser, service: PaymentServiceDep):
    return ok(PaymentResponse.from_entity(await service.get_payment(current_user, payment_id)))


@router.post("/{payment_id}/process")
async def process_payment(payment_id: UUID, current_user: CurrentUser, service: PaymentServiceDep):
    payment = await service.process(current_user, payment_id)
    return ok(PaymentResponse.from_entity(payment), message="Payment submitted for processing")


@router.post("/{payment_id}/callback")
async def payment_callback(payment_id: UUID, payload: PaymentCallbackRequest, admin: AdminUser, service: PaymentServiceDep):
    """Gateway settlement. Restricted to admins until providers authenticate with their own credentials."""
    payment = await service.handle_callback(
        admin,
        payment_id,
        success=payload.success,
        transaction_id=payload.transaction_id,
        gateway_response=payload.gateway_response,
    )
    return ok(PaymentResponse.from_entity(payment), message=f"Payment {payment.status.value}")


@router.post("/{payment_id}/refund")
async def refund_payment(payment_id: UUID, payload: RefundRequest, admin: AdminUser, service: PaymentServiceDep):
    """
    Raises:
        400: Amount not greater than zero or above the paid amount
        409: Payment is not completed
    """
    payment = await service.refund(admin, payment_id, payload.amount, payload.reason)
    return ok(PaymentResponse.from_entity(payment), message="Payment refunded")


@router.post("/{payment_id}/cancel")
async def cancel_payment(payment_id: UUID, current_user: CurrentUser, service: PaymentServiceDep):
    payment = await service.cancel(current_user, payment_id)
    return ok(PaymentResponse.from_entity(payment), message="Payment cancelled")
