"""Payment ledger entities."""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4


class PaymentMethod(str, Enum):
    """Accepted ways of settling an installment."""

    CASH = "CASH"
    CHECK = "CHECK"
    BANK_TRANSFER = "BANK_TRANSFER"
    ONLINE = "ONLINE"


@dataclass(frozen=True)
class Transaction:
    """
    Immutable record of one payment against an agreement.

    Attributes:
        payment_number: Schedule entry this payment satisfies
        payment_date: Date the money was actually received
        amount: Amount received, in whole currency units
        payment_method: How it was paid; None for rows seeded at
            agreement creation
        reference_number: Optional external reference (OR/check number)
        notes: Optional free text
    """

    payment_number: int
    payment_date: date
    amount: Decimal
    payment_method: Optional[PaymentMethod] = None
    reference_number: Optional[str] = None
    notes: Optional[str] = None
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=datetime.utcnow)

    def to_dict(self) -> dict:
        return {
            "transaction_id": str(self.id),
            "payment_number": self.payment_number,
            "payment_date": self.payment_date.isoformat(),
            "amount": str(self.amount),
            "payment_method": self.payment_method.value if self.payment_method else None,
            "reference_number": self.reference_number,
            "notes": self.notes,
        }


@dataclass(frozen=True)
class PaymentInput:
    """Raw values entered for a single payment event."""

    amount: object
    payment_date: Optional[date]
    payment_method: object
    reference_number: Optional[str] = None
    notes: Optional[str] = None


@dataclass(frozen=True)
class ReceiptData:
    """Everything the acknowledgement receipt needs for one payment."""

    client_name: str
    payment_date: date
    amount: Decimal
    payment_method: PaymentMethod
    reference_number: Optional[str]
    notes: Optional[str]
    property_name: str
    block_lot_no: str
    payment_number: int
    total_installments: int
    receipt_number: str

    def to_dict(self) -> dict:
        return {
            "client_name": self.client_name,
            "payment_date": self.payment_date.isoformat(),
            "amount": str(self.amount),
            "payment_method": self.payment_method.value,
            "reference_number": self.reference_number,
            "notes": self.notes,
            "property_name": self.property_name,
            "block_lot_no": self.block_lot_no,
            "payment_number": self.payment_number,
            "total_installments": self.total_installments,
            "receipt_number": self.receipt_number,
        }


@dataclass(frozen=True)
class AgreementCounters:
    """Counter values the caller must persist after a payment succeeds."""

    completed_payments: int
    next_payment_date: Optional[date]
    is_completed: bool


@dataclass(frozen=True)
class PaymentRecord:
    """Result of recording one payment: nothing here is persisted yet."""

    transaction: Transaction
    receipt_data: ReceiptData
    updated_counters: AgreementCounters


@dataclass(frozen=True)
class ProgressSummary:
    """Paid/remaining totals and installment progress for an agreement."""

    total_amount: Decimal
    paid_amount: Decimal
    remaining_amount: Decimal
    completed: int
    total: int
    percent: int

    def to_dict(self) -> dict:
        return {
            "total_amount": str(self.total_amount),
            "paid_amount": str(self.paid_amount),
            "remaining_amount": str(self.remaining_amount),
            "completed": self.completed,
            "total": self.total,
            "percent": self.percent,
        }
