"""Data transfer objects for agreement operations."""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import List, Optional

from payment_lifecycle.domain.entities import (
    Agreement,
    AgreementStatus,
    ProgressSummary,
    ScheduleEntry,
    Transaction,
)
from payment_lifecycle.service.engine import MAX_AMOUNT, to_decimal


@dataclass(frozen=True)
class LotSelection:
    """A lot chosen for a new agreement, with an optional price override."""

    lot_id: str
    property_name: str
    block_lot_no: str
    price: Decimal


@dataclass(frozen=True)
class CreateAgreementRequest:
    """Input data for opening a new client payment agreement."""

    client_name: str
    payment_type: str
    start_date: date
    lots: List[LotSelection]
    installment_years: int = 1
    completed_payments: int = 1
    contact_number: str = ""
    email: Optional[str] = None
    address: Optional[str] = None
    notes: Optional[str] = None
    user_id: Optional[str] = None

    def validate(self, max_installment_years: int) -> List[str]:
        errors = []

        if not self.client_name or not self.client_name.strip():
            errors.append("client_name is required")

        if self.payment_type not in ("spot_cash", "installment"):
            errors.append("payment_type must be spot_cash or installment")

        if not 1 <= self.installment_years <= max_installment_years:
            errors.append(
                f"installment_years must be between 1 and {max_installment_years}"
            )

        if self.completed_payments < 0:
            errors.append("completed_payments cannot be negative")
        elif (
            self.payment_type == "installment"
            and self.completed_payments > self.installment_years * 12
        ):
            errors.append("completed_payments cannot exceed the number of installments")

        if not self.lots:
            errors.append("at least one lot is required")

        prices = [to_decimal(lot.price) for lot in self.lots]
        if any(price < 0 for price in prices):
            errors.append("lot prices cannot be negative")
        if any(price != price.to_integral_value() for price in prices):
            errors.append("lot prices must be whole currency units")
        if sum(prices, Decimal("0")) > MAX_AMOUNT:
            errors.append("total contract price is too large")

        return errors


@dataclass(frozen=True)
class UpdateAgreementRequest:
    """
    Edits to an existing agreement. None leaves a field unchanged.

    Raising ``completed_payments`` marks the installments up to that count
    as paid; it is clamped at the number of installments.
    """

    client_name: Optional[str] = None
    contact_number: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    notes: Optional[str] = None
    user_id: Optional[str] = None
    completed_payments: Optional[int] = None

    def validate(self) -> List[str]:
        errors = []

        if self.client_name is not None and not self.client_name.strip():
            errors.append("client_name cannot be empty")

        if self.completed_payments is not None and self.completed_payments < 0:
            errors.append("completed_payments cannot be negative")

        return errors

    def client_fields(self) -> dict:
        fields = {
            "client_name": self.client_name.strip() if self.client_name else None,
            "contact_number": self.contact_number,
            "email": self.email,
            "address": self.address,
            "notes": self.notes,
            "user_id": self.user_id,
        }
        return {name: value for name, value in fields.items() if value is not None}


@dataclass(frozen=True)
class AgreementDetail:
    """An agreement with everything derived from its terms and ledger."""

    agreement: Agreement
    status: AgreementStatus
    progress: ProgressSummary
    schedule: List[ScheduleEntry]
    transactions: List[Transaction]
    expected_payment_amount: Decimal
    as_of: date


@dataclass(frozen=True)
class AgreementSummary:
    """Row in the agreement list."""

    agreement: Agreement
    status: AgreementStatus
    progress: ProgressSummary


@dataclass(frozen=True)
class SchedulePreviewRequest:
    """Unsaved terms for which a schedule preview is wanted."""

    payment_type: str
    total_amount: Decimal
    start_date: date
    installment_years: int = 1
    completed_payments: int = 1


@dataclass(frozen=True)
class SchedulePreview:
    payment_type: str
    total_amount: Decimal
    total_installments: int
    schedule: List[ScheduleEntry] = field(default_factory=list)
