"""Domain Exceptions - Business rule violations and domain errors."""

from .base import DomainException
from .agreement import AgreementNotFoundException, InvalidStateError
from .payment import PaymentConflictException, ValidationError

__all__ = [
    "DomainException",
    "AgreementNotFoundException",
    "InvalidStateError",
    "PaymentConflictException",
    "ValidationError",
]
