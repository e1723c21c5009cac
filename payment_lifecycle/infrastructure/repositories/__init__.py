"""Repository implementations."""

from .agreement_repository import PostgresAgreementRepository

__all__ = [
    "PostgresAgreementRepository",
]
