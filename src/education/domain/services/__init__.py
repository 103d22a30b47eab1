from src.education.domain.services.payment_gateway import (
    AutoCompleteGateway,
    PaymentGateway,
    RealGateway,
    build_gateway,
)

__all__ = ["AutoCompleteGateway", "PaymentGateway", "RealGateway", "build_gateway"]
