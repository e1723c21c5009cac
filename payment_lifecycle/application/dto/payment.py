"""Data transfer objects for payment recording."""

from dataclasses import dataclass
from datetime import date
from typing import Optional

from payment_lifecycle.domain.entities import (
    AgreementCounters,
    ReceiptData,
    Transaction,
)


@dataclass(frozen=True)
class RecordPaymentRequest:
    """Input data for recording one payment against an agreement."""

    amount: object
    payment_date: Optional[date]
    payment_method: str
    reference_number: Optional[str] = None
    notes: Optional[str] = None


@dataclass(frozen=True)
class PaymentReceipt:
    """Outcome of a persisted payment, ready for the receipt renderer."""

    agreement_id: str
    transaction: Transaction
    receipt_data: ReceiptData
    counters: AgreementCounters
    receipt_text: str
