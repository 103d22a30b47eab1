from datetime import datetime

import pytest

from src.education.domain.entities import Payment
from src.education.infrastructure.repositories import PaymentRepository
from src.shared.exceptions import DuplicateConstraintError


async def test_invoice_numbers_increase_within_a_month(db_session, make_user):
    student = await make_user("pat@std.com")
    repo = PaymentRepository(db_session)
    at = datetime(2024, 2, 15)

    first = await repo.add_with_invoice(Payment.create(student_id=student.id, amount="10.00"), now=at)
    second = await repo.add_with_invoice(Payment.create(student_id=student.id, amount="20.00"), now=at)
    await db_session.commit()

    assert first.invoice_number == "INV-202402-0001"
    assert second.invoice_number == "INV-202402-0002"


async def test_sequence_restarts_each_month(db_session, make_user):
    student = await make_user("pat@std.com")
    repo = PaymentRepository(db_session)
    await repo.add_with_invoice(Payment.create(student_id=student.id, amount="10.00"), now=datetime(2024, 2, 28))
    march = await repo.add_with_invoice(Payment.create(student_id=student.id, amount="10.00"), now=datetime(2024, 3, 1))
    assert march.invoice_number == "INV-202403-0001"


async def test_sequence_orders_numerically_past_9999(db_session, make_user):
    student = await make_user("pat@std.com")
    repo = PaymentRepository(db_session)
    at = datetime(2024, 2, 15)
    for number in ("INV-202402-9999", "INV-202402-10000"):
        await repo.add_with_invoice(
            Payment.create(student_id=student.id, amount="1.00", invoice_number=number), now=at
        )
    assert await repo.next_invoice_number(at) == "INV-202402-10001"


async def test_taken_number_is_retried(db_session, make_user, monkeypatch):
    student = await make_user("pat@std.com")
    repo = PaymentRepository(db_session)
    at = datetime(2024, 2, 15)
    await repo.add_with_invoice(Payment.create(student_id=student.id, amount="10.00"), now=at)

    # The first computed number collides, as if another writer had just taken it.
    answers = iter(["INV-202402-0001", "INV-202402-0002"])

    async def racing_next_invoice_number(now=None):
        return next(answers)

    monkeypatch.setattr(repo, "next_invoice_number", racing_next_invoice_number)
    payment = await repo.add_with_invoice(Payment.create(student_id=student.id, amount="30.00"), now=at)
    await db_session.commit()

    assert payment.invoice_number == "INV-202402-0002"
    assert await repo.count() == 2


async def test_explicit_duplicate_number_is_not_retried(db_session, make_user):
    student = await make_user("pat@std.com")
    repo = PaymentRepository(db_session)
    await repo.add_with_invoice(Payment.create(student_id=student.id, amount="1.00", invoice_number="INV-202402-0007"))
    with pytest.raises(DuplicateConstraintError):
        await repo.add_with_invoice(
            Payment.create(student_id=student.id, amount="1.00", invoice_number="INV-202402-0007")
        )


async def test_overdue_lists_pending_payments_past_due(db_session, make_user):
    student = await make_user("pat@std.com")
    repo = PaymentRepository(db_session)
    late = Payment.create(student_id=student.id, amount="10.00", due_date=datetime(2020, 1, 1))
    paid = Payment.create(student_id=student.id, amount="10.00", due_date=datetime(2020, 1, 1))
    paid.mark_completed()
    future = Payment.create(student_id=student.id, amount="10.00", due_date=datetime(2999, 1, 1))
    cancelled = Payment.create(student_id=student.id, amount="10.00", due_date=datetime(2020, 1, 1))
    cancelled.cancel()
    assert cancelled.is_overdue()
    for payment in (late, paid, future, cancelled):
        await repo.add_with_invoice(payment)
    await db_session.commit()

    overdue = await repo.find_overdue()
    assert [p.id for p, _ in overdue] == [late.id]
    assert overdue[0][1]["email"] == "pat@std.com"
