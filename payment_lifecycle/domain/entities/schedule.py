"""Schedule entities derived from agreement terms."""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum


class ScheduleStatus(str, Enum):
    PAID = "PAID"
    PENDING = "PENDING"
    LATE = "LATE"
    SUPER_LATE = "SUPER_LATE"


@dataclass(frozen=True)
class ScheduleEntry:
    """A single planned installment. Never persisted as the source of truth."""

    payment_number: int
    due_date: date
    amount: Decimal
    status: ScheduleStatus = ScheduleStatus.PENDING

    @property
    def is_paid(self) -> bool:
        return self.status == ScheduleStatus.PAID

    def to_dict(self) -> dict:
        return {
            "payment_number": self.payment_number,
            "due_date": self.due_date.isoformat(),
            "amount": str(self.amount),
            "status": self.status.value,
        }
