"""
Payment gateway capability.

Chosen once from ``PAYMENT_GATEWAY``; payment code never branches on the
environment itself.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Any, Optional

from src.education.domain.entities.payment import Payment, PaymentEnvironment, PaymentMethod
from src.shared.config import Settings, get_settings
from src.shared.logging import get_logger
from src.shared.utils import utcnow

logger = get_logger(__name__)


class PaymentGateway(ABC):
    name: str
    environment: PaymentEnvironment

    @abstractmethod
    def prepare(self, payment: Payment) -> None:
        """Called on a freshly created payment before it is stored."""

    @abstractmethod
    def process(self, payment: Payment) -> None:
        """Hand a pending payment to the provider."""

    def settle(
        self,
        payment: Payment,
        success: bool,
        transaction_id: Optional[str] = None,
        gateway_response: Optional[dict[str, Any]] = None,
    ) -> None:
        """Apply a provider callback."""
        if success:
            payment.mark_completed(transaction_id=transaction_id, gateway_response=gateway_response)
        else:
            payment.mark_failed(gateway_response=gateway_response)


class AutoCompleteGateway(PaymentGateway):
    """Development bypass: every payment is free and settled on creation."""

    name = "auto_complete"
    environment = PaymentEnvironment.DEV

    def prepare(self, payment: Payment) -> None:
        payment.amount = Decimal("0.00")
        payment.payment_method = PaymentMethod.DEV_MODE
        payment.environment = self.environment
        payment.mark_completed(
            transaction_id=f"DEV-{payment.id.hex[:12].upper()}",
            gateway_response={"gateway": self.name, "settled_at": utcnow().isoformat()},
        )

    def process(self, payment: Payment) -> None:
        if not payment.is_completed():
            payment.mark_completed(gateway_response={"gateway": self.name})


class RealGateway(PaymentGateway):
    """Payments wait for the provider; settlement arrives through the callback endpoint."""

    name = "real"
    environment = PaymentEnvironment.PROD

    def prepare(self, payment: Payment) -> None:
        payment.environment = self.environment

    def process(self, payment: Payment) -> None:
        payment.start_processing()


def build_gateway(settings: Optional[Settings] = None) -> PaymentGateway:
    settings = settings or get_settings()
    gateway: PaymentGateway = AutoCompleteGateway() if settings.payment_gateway == "auto_complete" else RealGateway()
    logger.info("Payment gateway selected", gateway=gateway.name)
    return gateway
