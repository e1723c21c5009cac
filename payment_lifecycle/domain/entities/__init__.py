"""Domain Entities - Core business objects."""

from .agreement import (
    Agreement,
    AgreementStatus,
    InstallmentAgreement,
    PaymentType,
    PropertyLot,
    SpotCashAgreement,
    build_agreement,
)
from .payment import (
    AgreementCounters,
    PaymentInput,
    PaymentMethod,
    PaymentRecord,
    ProgressSummary,
    ReceiptData,
    Transaction,
)
from .schedule import ScheduleEntry, ScheduleStatus

__all__ = [
    "Agreement",
    "AgreementStatus",
    "InstallmentAgreement",
    "PaymentType",
    "PropertyLot",
    "SpotCashAgreement",
    "build_agreement",
    "AgreementCounters",
    "PaymentInput",
    "PaymentMethod",
    "PaymentRecord",
    "ProgressSummary",
    "ReceiptData",
    "Transaction",
    "ScheduleEntry",
    "ScheduleStatus",
]
