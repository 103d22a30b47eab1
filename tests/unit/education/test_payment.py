from datetime import datetime, timedelta
from decimal import Decimal
from uuid import uuid4

import pytest

from src.education.domain.entities import Payment, PaymentStatus
from src.education.domain.entities.payment import format_invoice_number, invoice_sequence
from src.education.domain.errors import InvalidTransitionError
from src.shared.exceptions import ValidationError


def make_payment(**fields):
    return Payment.create(student_id=uuid4(), amount=Decimal("40.00"), **fields)


def test_create_rejects_negative_amount():
    with pytest.raises(ValidationError):
        Payment.create(student_id=uuid4(), amount="-1")


def test_amount_is_quantized():
    assert make_payment().amount == Decimal("40.00")
    assert Payment.create(student_id=uuid4(), amount="12.345").amount == Decimal("12.35")


def test_overdue_since_yesterday():
    now = datetime(2024, 5, 10, 12, 0)
    payment = make_payment(due_date=now - timedelta(days=1))
    assert payment.is_overdue(now)
    assert payment.days_overdue(now) == 1


def test_partial_day_counts_as_a_full_day():
    now = datetime(2024, 5, 10, 12, 0)
    payment = make_payment(due_date=now - timedelta(hours=25))
    assert payment.days_overdue(now) == 2


def test_completed_payment_is_never_overdue():
    now = datetime(2024, 5, 10, 12, 0)
    payment = make_payment(due_date=now - timedelta(days=3))
    payment.mark_completed(now=now)
    assert not payment.is_overdue(now)
    assert payment.days_overdue(now) == 0


def test_no_due_date_is_not_overdue():
    assert not make_payment().is_overdue()


def test_cancelled_payment_past_due_still_counts_as_overdue():
    now = datetime(2024, 5, 10, 12, 0)
    payment = make_payment(due_date=now - timedelta(days=2))
    payment.cancel()
    assert payment.is_overdue(now)
    assert payment.days_overdue(now) == 2


def test_mark_completed_twice_moves_paid_at():
    payment = make_payment()
    first = datetime(2024, 5, 1, 9, 0)
    second = datetime(2024, 5, 2, 9, 0)
    payment.mark_completed(transaction_id="tx-1", now=first)
    payment.mark_completed(now=second)
    assert payment.status == PaymentStatus.COMPLETED
    assert payment.paid_at == second
    assert payment.transaction_id == "tx-1"


def test_processing_then_failed():
    payment = make_payment()
    payment.start_processing()
    assert payment.status == PaymentStatus.PROCESSING
    payment.mark_failed({"error": "card_declined"})
    assert payment.is_failed()
    assert payment.gateway_response == {"error": "card_declined"}
    with pytest.raises(InvalidTransitionError):
        payment.mark_completed()


def test_refund_requires_completed():
    with pytest.raises(InvalidTransitionError):
        make_payment().refund("10.00")


@pytest.mark.parametrize("amount", ["0", "-5", "40.01"])
def test_refund_amount_bounds(amount):
    payment = make_payment()
    payment.mark_completed()
    with pytest.raises(ValidationError):
        payment.refund(amount)
    assert payment.is_completed()


def test_partial_refund():
    payment = make_payment()
    payment.mark_completed()
    payment.refund("15.50", reason="Left early")
    assert payment.is_refunded()
    assert payment.refund_amount == Decimal("15.50")
    assert payment.refund_reason == "Left early"
    assert payment.refunded_at is not None


def test_refunded_payment_only_takes_metadata():
    payment = make_payment()
    payment.mark_completed()
    payment.refund("40.00")
    with pytest.raises(InvalidTransitionError):
        payment.cancel()
    payment.update_metadata(note="audited")
    assert payment.metadata["note"] == "audited"


def test_invoice_number_format():
    at = datetime(2024, 3, 7)
    assert format_invoice_number(at, 1) == "INV-202403-0001"
    assert format_invoice_number(at, 12345) == "INV-202403-12345"
    assert invoice_sequence("INV-202403-0042") == 42
