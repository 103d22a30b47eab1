from datetime import timedelta
from decimal import Decimal

import pytest

from src.education.application.services import PaymentService
from src.education.domain.entities import PaymentStatus
from src.education.domain.errors import InvalidTransitionError
from src.education.domain.events import PaymentCompleted, PaymentReminder
from src.education.domain.services import AutoCompleteGateway, RealGateway
from src.notifications.infrastructure.notification_repository import NotificationRepository
from src.shared.exceptions import AuthorizationError, ValidationError
from src.shared.roles import Role
from src.shared.utils import utcnow


async def test_real_gateway_flow(db_session, make_user):
    admin = await make_user("ada@adm.com", Role.ADMIN)
    student = await make_user("sam@std.com")
    events = []
    service = PaymentService(db_session, events.extend, gateway=RealGateway())

    payment = await service.create_payment(student, Decimal("40.00"), description="April tuition")
    assert payment.status == PaymentStatus.PENDING
    assert payment.invoice_number.startswith("INV-")
    assert events == []

    processing = await service.process(student, payment.id)
    assert processing.status == PaymentStatus.PROCESSING

    paid = await service.handle_callback(admin, payment.id, success=True, transaction_id="ch_1")
    assert paid.status == PaymentStatus.COMPLETED
    assert paid.paid_at is not None
    assert [type(e) for e in events] == [PaymentCompleted]
    assert await NotificationRepository(db_session).unread_count(student.id) == 1


async def test_dev_gateway_completes_on_creation(db_session, make_user):
    student = await make_user("sam@std.com")
    events = []
    service = PaymentService(db_session, events.extend, gateway=AutoCompleteGateway())

    payment = await service.create_payment(student, Decimal("75.00"))

    assert payment.status == PaymentStatus.COMPLETED
    assert payment.amount == Decimal("0.00")
    assert payment.transaction_id.startswith("DEV-")
    assert len(events) == 1


async def test_students_only_invoice_themselves(db_session, make_user):
    student = await make_user("sam@std.com")
    other = await make_user("other@std.com")
    service = PaymentService(db_session, gateway=RealGateway())
    with pytest.raises(AuthorizationError):
        await service.create_payment(student, Decimal("10.00"), student_id=other.id)


async def test_refund_rules(db_session, make_user):
    admin = await make_user("ada@adm.com", Role.ADMIN)
    student = await make_user("sam@std.com")
    service = PaymentService(db_session, gateway=RealGateway())
    payment = await service.create_payment(student, Decimal("50.00"))

    with pytest.raises(InvalidTransitionError):
        await service.refund(admin, payment.id, Decimal("10.00"))
    await service.handle_callback(admin, payment.id, success=True)
    with pytest.raises(ValidationError):
        await service.refund(admin, payment.id, Decimal("50.01"))
    with pytest.raises(AuthorizationError):
        await service.refund(student, payment.id, Decimal("10.00"))

    refunded = await service.refund(admin, payment.id, Decimal("20.00"), reason="Partial")
    assert refunded.status == PaymentStatus.REFUNDED
    assert refunded.refund_amount == Decimal("20.00")


async def test_overdue_reminders(db_session, make_user):
    admin = await make_user("ada@adm.com", Role.ADMIN)
    student = await make_user("sam@std.com")
    service = PaymentService(db_session, gateway=RealGateway())
    await service.create_payment(student, Decimal("30.00"), due_date=utcnow() - timedelta(days=1, hours=12))
    await service.create_payment(student, Decimal("30.00"), due_date=utcnow() + timedelta(days=2))

    events = []
    queued = await PaymentService(db_session, events.extend, gateway=RealGateway()).send_overdue_reminders(admin)

    assert queued == 1
    (reminder,) = events
    assert isinstance(reminder, PaymentReminder)
    assert reminder.days_overdue == 2


async def test_stats_group_by_status(db_session, make_user):
    admin = await make_user("ada@adm.com", Role.ADMIN)
    student = await make_user("sam@std.com")
    service = PaymentService(db_session, gateway=RealGateway())
    first = await service.create_payment(student, Decimal("10.00"))
    await service.create_payment(student, Decimal("15.00"))
    await service.cancel(student, first.id)

    stats = await service.stats(admin)
    assert stats["cancelled"]["count"] == 1
    assert stats["pending"]["count"] == 1
    assert Decimal(str(stats["pending"]["total"])) == Decimal("15.00")


async def test_repeated_success_callback_sends_one_receipt(db_session, make_user):
    admin = await make_user("ada@adm.com", Role.ADMIN)
    student = await make_user("sam@std.com")
    events = []
    service = PaymentService(db_session, events.extend, gateway=RealGateway())
    payment = await service.create_payment(student, Decimal("40.00"))

    await service.handle_callback(admin, payment.id, success=True, transaction_id="ch_1")
    again = await service.handle_callback(admin, payment.id, success=True, transaction_id="ch_1")

    assert again.status == PaymentStatus.COMPLETED
    assert [type(e) for e in events] == [PaymentCompleted]
    rows = await NotificationRepository(db_session).list_for_user(student.id)
    assert len(rows) == 1


async def test_processing_a_settled_dev_payment_sends_no_second_receipt(db_session, make_user):
    student = await make_user("sam@std.com")
    events = []
    service = PaymentService(db_session, events.extend, gateway=AutoCompleteGateway())
    payment = await service.create_payment(student, Decimal("75.00"))

    processed = await service.process(student, payment.id)

    assert processed.status == PaymentStatus.COMPLETED
    assert len(events) == 1
    assert await NotificationRepository(db_session).unread_count(student.id) == 1
