"""Payment recording Pydantic schemas."""

from datetime import date
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from payment_lifecycle.service.engine import MAX_AMOUNT

from .agreement import TransactionSchema


class RecordPaymentSchema(BaseModel):
    """
    Schema for POST /v1/client-payments/{id}/record-payment request body.

    Amount, method and date are checked by the payment recorder so that the
    error order matches the recording rules.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {
                    "amount": 10000,
                    "payment_date": "2025-02-15",
                    "payment_method": "CASH",
                    "reference_number": None,
                    "notes": "February installment",
                }
            ]
        }
    )

    amount: Decimal = Field(
        ...,
        le=MAX_AMOUNT,
        description="Amount received; fractional amounts are rounded up",
        examples=[10000],
    )
    payment_date: Optional[date] = Field(
        None,
        description="Date the money was received (YYYY-MM-DD)",
    )
    payment_method: str = Field(
        "",
        description="CASH, CHECK, BANK_TRANSFER or ONLINE",
        examples=["CASH"],
    )
    reference_number: Optional[str] = Field(
        None,
        max_length=255,
        description="External reference; becomes the receipt number when given",
    )
    notes: Optional[str] = Field(None)


class ReceiptDataSchema(BaseModel):
    """Values printed on the acknowledgement receipt."""

    receipt_number: str = Field(..., examples=["AYCO-002"])
    client_name: str
    payment_date: date
    amount: Decimal
    payment_method: str
    reference_number: Optional[str] = None
    notes: Optional[str] = None
    property_name: str
    block_lot_no: str
    payment_number: int
    total_installments: int


class CountersSchema(BaseModel):
    """Agreement counters after the payment."""

    completed_payments: int
    next_payment_date: Optional[date] = None
    is_completed: bool


class RecordPaymentResponseSchema(BaseModel):
    """Schema for POST /v1/client-payments/{id}/record-payment response."""

    agreement_id: str
    transaction: TransactionSchema
    receipt_data: ReceiptDataSchema
    counters: CountersSchema
    receipt_text: str = Field(..., description="Plain-text acknowledgement receipt")
