"""Agreement-related Pydantic schemas."""

from datetime import date, datetime
from decimal import Decimal
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from payment_lifecycle.service.engine import MAX_AMOUNT


class LotSelectionSchema(BaseModel):
    """A lot sold under the agreement, at the price agreed with the client."""

    lot_id: str = Field(
        ...,
        min_length=1,
        max_length=64,
        description="Identifier of the lot in the land inventory",
        examples=["12"],
    )
    property_name: str = Field(
        ...,
        min_length=1,
        max_length=255,
        description="Name of the land development",
        examples=["Evergreen Heights"],
    )
    block_lot_no: str = Field(
        ...,
        min_length=1,
        max_length=255,
        description="Block and lot designation",
        examples=["Block 3 Lot 7"],
    )
    price: int = Field(
        ...,
        ge=0,
        le=int(MAX_AMOUNT),
        description="Contract price of this lot in whole currency units",
        examples=[120000],
    )


class CreateAgreementSchema(BaseModel):
    """Schema for POST /v1/client-payments request body."""

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {
                    "client_name": "Juan Dela Cruz",
                    "contact_number": "09171234567",
                    "payment_type": "installment",
                    "installment_years": 1,
                    "start_date": "2025-01-15",
                    "completed_payments": 1,
                    "lots": [
                        {
                            "lot_id": "12",
                            "property_name": "Evergreen Heights",
                            "block_lot_no": "Block 3 Lot 7",
                            "price": 120000,
                        }
                    ],
                }
            ]
        }
    )

    client_name: str = Field(
        ...,
        min_length=1,
        max_length=255,
        description="Full name of the client",
        examples=["Juan Dela Cruz"],
    )
    contact_number: str = Field(
        "",
        max_length=20,
        description="Client contact number",
    )
    email: Optional[str] = Field(None, max_length=255)
    address: Optional[str] = Field(None)
    notes: Optional[str] = Field(None, description="Free-text payment notes")
    user_id: Optional[str] = Field(
        None,
        max_length=255,
        description="Client account that owns the agreement",
    )
    payment_type: Literal["spot_cash", "installment"] = Field(
        ...,
        description="How the contract price is settled",
    )
    installment_years: int = Field(
        1,
        ge=1,
        description="Installment period in years (ignored for spot cash)",
        examples=[5],
    )
    start_date: date = Field(
        ...,
        description="First due date (YYYY-MM-DD)",
        examples=["2025-01-15"],
    )
    completed_payments: int = Field(
        1,
        ge=0,
        description="Installments already paid at signing (at least the first)",
    )
    lots: list[LotSelectionSchema] = Field(
        ...,
        min_length=1,
        description="Lots covered by the agreement",
    )

    @field_validator("client_name")
    @classmethod
    def validate_client_name(cls, v: str) -> str:
        """Ensure client_name is not just whitespace."""
        if not v.strip():
            raise ValueError("client_name cannot be empty or whitespace")
        return v.strip()


class UpdateAgreementSchema(BaseModel):
    """Schema for PATCH /v1/client-payments/{id} request body. Omitted fields stay as they are."""

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {
                    "contact_number": "09179876543",
                    "completed_payments": 4,
                }
            ]
        }
    )

    client_name: Optional[str] = Field(None, min_length=1, max_length=255)
    contact_number: Optional[str] = Field(None, max_length=20)
    email: Optional[str] = Field(None, max_length=255)
    address: Optional[str] = Field(None)
    notes: Optional[str] = Field(None, description="Free-text payment notes")
    user_id: Optional[str] = Field(None, max_length=255)
    completed_payments: Optional[int] = Field(
        None,
        ge=0,
        description="Installments paid so far; capped at the number of installments",
    )


class SchedulePreviewSchema(BaseModel):
    """Schema for POST /v1/client-payments/schedule-preview request body."""

    payment_type: Literal["spot_cash", "installment"]
    total_amount: Decimal = Field(..., ge=0, le=MAX_AMOUNT, examples=[120000])
    start_date: date = Field(..., examples=["2025-01-15"])
    installment_years: int = Field(1, ge=1)
    completed_payments: int = Field(1, ge=0)


class LotSchema(BaseModel):
    lot_id: str
    property_name: str
    block_lot_no: str
    price: Decimal


class ScheduleEntrySchema(BaseModel):
    """One planned installment with its reconciled status."""

    payment_number: int = Field(..., ge=1, examples=[1])
    due_date: date = Field(..., examples=["2025-01-15"])
    amount: Decimal = Field(..., description="Amount due", examples=[10000])
    status: str = Field(
        ...,
        description="PAID, PENDING, LATE or SUPER_LATE",
        examples=["PAID"],
    )


class ProgressSchema(BaseModel):
    """Paid and remaining balances for an agreement."""

    total_amount: Decimal
    paid_amount: Decimal
    remaining_amount: Decimal
    completed: int = Field(..., ge=0, description="Installments paid")
    total: int = Field(..., ge=1, description="Installments in the agreement")
    percent: int = Field(..., ge=0, le=100, description="Share of installments paid")


class TransactionSchema(BaseModel):
    """A recorded payment."""

    transaction_id: str
    payment_number: int
    payment_date: date
    amount: Decimal
    payment_method: Optional[str] = Field(
        None,
        description="CASH, CHECK, BANK_TRANSFER or ONLINE; null for rows seeded at signing",
    )
    reference_number: Optional[str] = None
    notes: Optional[str] = None


class AgreementSummarySchema(BaseModel):
    """Row in GET /v1/client-payments."""

    id: str
    client_name: str
    payment_type: str
    total_amount: Decimal
    installment_years: int
    total_installments: int
    start_date: date
    completed_payments: int
    next_payment_date: Optional[date] = None
    status: str = Field(..., examples=["CURRENT"])
    progress: ProgressSchema


class AgreementListResponseSchema(BaseModel):
    """Schema for GET /v1/client-payments response."""

    agreements: list[AgreementSummarySchema]


class AgreementDetailSchema(AgreementSummarySchema):
    """Schema for GET /v1/client-payments/{id} response."""

    contact_number: str = ""
    email: Optional[str] = None
    address: Optional[str] = None
    notes: Optional[str] = None
    user_id: Optional[str] = None
    created_at: datetime
    as_of: date = Field(..., description="Date the status was evaluated for")
    expected_payment_amount: Decimal = Field(
        ...,
        description="Suggested amount for the next payment (0 when nothing is due)",
    )
    lots: list[LotSchema]
    schedule: list[ScheduleEntrySchema]
    transactions: list[TransactionSchema]


class TransactionListResponseSchema(BaseModel):
    """Schema for GET /v1/client-payments/{id}/transactions response."""

    agreement_id: str
    transactions: list[TransactionSchema]


class SchedulePreviewResponseSchema(BaseModel):
    """Schema for POST /v1/client-payments/schedule-preview response."""

    payment_type: str
    total_amount: Decimal
    total_installments: int
    schedule: list[ScheduleEntrySchema]
