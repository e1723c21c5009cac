"""Agreement-related domain exceptions."""

from .base import DomainException


class AgreementNotFoundException(DomainException):
    """Raised when an agreement cannot be found."""

    def __init__(self, agreement_id: str):
        super().__init__(
            message=f"Agreement not found: {agreement_id}",
            code="AGREEMENT_NOT_FOUND",
        )
        self.agreement_id = agreement_id


class InvalidStateError(DomainException):
    """Raised when the agreement's derived status forbids an operation."""

    def __init__(self, message: str):
        super().__init__(
            message=message,
            code="INVALID_STATE",
        )
