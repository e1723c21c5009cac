"""Application services (use cases)."""

from .agreement_service import AgreementService
from .payment_service import PaymentService

__all__ = [
    "AgreementService",
    "PaymentService",
]
