"""Client payment agreement entities."""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional, Tuple
from uuid import UUID, uuid4

from payment_lifecycle.domain.exceptions import ValidationError


MONTHS_PER_YEAR = 12


class PaymentType(str, Enum):
    """How the contract price is settled."""

    SPOT_CASH = "spot_cash"
    INSTALLMENT = "installment"


class AgreementStatus(str, Enum):
    """Lifecycle state derived from terms, counters and the ledger."""

    PENDING = "PENDING"
    CURRENT = "CURRENT"
    LATE = "LATE"
    SUPER_LATE = "SUPER_LATE"
    COMPLETED = "COMPLETED"


@dataclass(frozen=True)
class PropertyLot:
    """A lot attached to an agreement, carried through to receipts."""

    lot_id: str
    property_name: str
    block_lot_no: str
    price: Decimal = Decimal("0")


@dataclass(frozen=True)
class Agreement:
    """
    A client's land purchase contract.

    Agreements are immutable; counters are advanced by building a new
    instance with ``dataclasses.replace`` once a payment is persisted.
    Use ``SpotCashAgreement`` or ``InstallmentAgreement``; the base class
    only carries the fields both variants share.
    """

    client_name: str
    total_amount: Decimal
    start_date: date
    completed_payments: int = 0
    next_payment_date: Optional[date] = None
    lots: Tuple[PropertyLot, ...] = ()
    contact_number: str = ""
    email: Optional[str] = None
    address: Optional[str] = None
    notes: Optional[str] = None
    user_id: Optional[str] = None
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=datetime.utcnow)

    payment_type = None

    def __post_init__(self):
        if self.completed_payments < 0:
            raise ValidationError("completed_payments cannot be negative")
        if self.completed_payments > self.total_installments:
            raise ValidationError(
                f"completed_payments ({self.completed_payments}) exceeds "
                f"total installments ({self.total_installments})"
            )

    @property
    def installment_years(self) -> int:
        return 1

    @property
    def total_installments(self) -> int:
        raise NotImplementedError

    @property
    def installment_amount(self) -> Decimal:
        """Exact per-period share of the contract price."""
        return Decimal(self.total_amount) / self.total_installments

    @property
    def is_spot_cash(self) -> bool:
        return self.payment_type == PaymentType.SPOT_CASH

    @property
    def primary_lot(self) -> Optional[PropertyLot]:
        return self.lots[0] if self.lots else None

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "client_name": self.client_name,
            "payment_type": self.payment_type.value,
            "total_amount": str(self.total_amount),
            "installment_years": self.installment_years,
            "start_date": self.start_date.isoformat(),
            "completed_payments": self.completed_payments,
            "next_payment_date": (
                self.next_payment_date.isoformat() if self.next_payment_date else None
            ),
            "lots": [
                {
                    "lot_id": lot.lot_id,
                    "property_name": lot.property_name,
                    "block_lot_no": lot.block_lot_no,
                    "price": str(lot.price),
                }
                for lot in self.lots
            ],
        }


@dataclass(frozen=True)
class SpotCashAgreement(Agreement):
    """Paid in full in a single event at signing."""

    payment_type = PaymentType.SPOT_CASH

    @property
    def total_installments(self) -> int:
        return 1


@dataclass(frozen=True)
class InstallmentAgreement(Agreement):
    """Contract price spread over ``installment_years * 12`` monthly dues."""

    years: int = 1

    payment_type = PaymentType.INSTALLMENT

    def __post_init__(self):
        if self.years < 1:
            raise ValidationError("installment years must be at least 1")
        super().__post_init__()

    @property
    def installment_years(self) -> int:
        return self.years

    @property
    def total_installments(self) -> int:
        return self.years * MONTHS_PER_YEAR


def build_agreement(payment_type: PaymentType, installment_years: int = 1, **fields) -> Agreement:
    """Construct the agreement variant that matches ``payment_type``."""
    payment_type = PaymentType(payment_type)
    if payment_type == PaymentType.SPOT_CASH:
        return SpotCashAgreement(**fields)
    return InstallmentAgreement(years=installment_years, **fields)
