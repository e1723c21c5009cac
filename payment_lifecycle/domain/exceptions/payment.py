"""Payment-related domain exceptions."""

from .base import DomainException


class ValidationError(DomainException):
    """Raised when payment or agreement input is malformed."""

    def __init__(self, message: str, field: str | None = None):
        super().__init__(
            message=message,
            code="VALIDATION_ERROR",
        )
        self.field = field


class PaymentConflictException(DomainException):
    """Raised when another recording already claimed the payment number."""

    def __init__(self, agreement_id: str, payment_number: int):
        super().__init__(
            message=(
                f"Payment #{payment_number} for agreement {agreement_id} "
                "was already recorded"
            ),
            code="PAYMENT_CONFLICT",
        )
        self.agreement_id = agreement_id
        self.payment_number = payment_number
