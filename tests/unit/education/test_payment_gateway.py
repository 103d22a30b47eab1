from decimal import Decimal
from uuid import uuid4

from src.education.domain.entities import Payment, PaymentEnvironment, PaymentMethod, PaymentStatus
from src.education.domain.services import AutoCompleteGateway, RealGateway


def test_auto_complete_gateway_settles_for_free():
    payment = Payment.create(student_id=uuid4(), amount="99.00")
    AutoCompleteGateway().prepare(payment)
    assert payment.status == PaymentStatus.COMPLETED
    assert payment.amount == Decimal("0.00")
    assert payment.payment_method == PaymentMethod.DEV_MODE
    assert payment.environment == PaymentEnvironment.DEV
    assert payment.transaction_id.startswith("DEV-")
    assert payment.paid_at is not None


def test_real_gateway_waits_for_callback():
    payment = Payment.create(student_id=uuid4(), amount="99.00")
    gateway = RealGateway()
    gateway.prepare(payment)
    assert payment.is_pending()
    assert payment.environment == PaymentEnvironment.PROD
    gateway.process(payment)
    assert payment.status == PaymentStatus.PROCESSING
    gateway.settle(payment, success=True, transaction_id="ch_123")
    assert payment.is_completed()
    assert payment.transaction_id == "ch_123"


def test_failed_callback():
    payment = Payment.create(student_id=uuid4(), amount="10.00")
    RealGateway().settle(payment, success=False, gateway_response={"code": "declined"})
    assert payment.is_failed()
