"""Data Transfer Objects for application layer."""

from .agreement import (
    AgreementDetail,
    AgreementSummary,
    CreateAgreementRequest,
    LotSelection,
    SchedulePreview,
    SchedulePreviewRequest,
    UpdateAgreementRequest,
)
from .payment import PaymentReceipt, RecordPaymentRequest

__all__ = [
    "AgreementDetail",
    "AgreementSummary",
    "CreateAgreementRequest",
    "LotSelection",
    "SchedulePreview",
    "SchedulePreviewRequest",
    "UpdateAgreementRequest",
    "PaymentReceipt",
    "RecordPaymentRequest",
]
