"""Pydantic schemas for API request/response validation."""

from .agreement import (
    AgreementDetailSchema,
    AgreementListResponseSchema,
    AgreementSummarySchema,
    CreateAgreementSchema,
    LotSchema,
    LotSelectionSchema,
    ProgressSchema,
    ScheduleEntrySchema,
    SchedulePreviewResponseSchema,
    SchedulePreviewSchema,
    TransactionListResponseSchema,
    TransactionSchema,
    UpdateAgreementSchema,
)
from .payment import (
    CountersSchema,
    ReceiptDataSchema,
    RecordPaymentResponseSchema,
    RecordPaymentSchema,
)
from .error import ErrorResponseSchema

__all__ = [
    "AgreementDetailSchema",
    "AgreementListResponseSchema",
    "AgreementSummarySchema",
    "CreateAgreementSchema",
    "LotSchema",
    "LotSelectionSchema",
    "ProgressSchema",
    "ScheduleEntrySchema",
    "SchedulePreviewResponseSchema",
    "SchedulePreviewSchema",
    "TransactionListResponseSchema",
    "TransactionSchema",
    "UpdateAgreementSchema",
    "CountersSchema",
    "ReceiptDataSchema",
    "RecordPaymentResponseSchema",
    "RecordPaymentSchema",
    "ErrorResponseSchema",
]
