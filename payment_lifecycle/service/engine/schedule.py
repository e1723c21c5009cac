"""
Schedule Generator for installment payment agreements.

Produces the ordered list of planned dues for an agreement from its
contract terms. Schedules are derived data: they are recomputed on every
read and never stored as the source of truth.

Rules:
    - Spot cash: one entry for the full price, due (and paid) at signing.
    - Installment: ``years * 12`` monthly entries starting at the start
      date. Entry 1 is marked PAID because signing an installment contract
      collects the first due on the spot.

Rounding:
    Each entry is ``floor(total / n)`` whole units and the final entry
    absorbs the remainder, so the schedule always sums to the contract
    price exactly.
"""

from datetime import date
from decimal import ROUND_FLOOR
from typing import List, Optional

from payment_lifecycle.domain.entities import (
    PaymentType,
    ScheduleEntry,
    ScheduleStatus,
)
from payment_lifecycle.domain.entities.agreement import MONTHS_PER_YEAR
from payment_lifecycle.domain.exceptions import ValidationError

from .money import WHOLE, add_months, to_decimal


def total_installments_for(payment_type: PaymentType, installment_years: Optional[int]) -> int:
    """Number of scheduled dues for the given terms."""
    if PaymentType(payment_type) == PaymentType.SPOT_CASH:
        return 1
    return (installment_years or 0) * MONTHS_PER_YEAR


def generate_schedule(
    payment_type: PaymentType,
    total_amount,
    installment_years: Optional[int],
    start_date: date,
    paid_count: Optional[int] = None,
) -> List[ScheduleEntry]:
    """
    Generate the payment schedule for a set of contract terms.

    Args:
        payment_type: SPOT_CASH or INSTALLMENT
        total_amount: Contract price in whole currency units (>= 0)
        installment_years: Length of the installment period; ignored for
            spot cash
        start_date: Due date of the first payment
        paid_count: How many leading entries to seed as PAID. Defaults to 1
            (the down payment collected at signing); the agreement creation
            flow passes the number of payments already made for back-dated
            contracts.

    Returns:
        Schedule entries ordered by payment number (and due date)

    Raises:
        ValidationError: If the terms violate a precondition
    """
    try:
        payment_type = PaymentType(payment_type)
    except ValueError:
        raise ValidationError(f"invalid payment type: {payment_type!r}", field="payment_type")

    total = to_decimal(total_amount)
    if total < 0:
        raise ValidationError("total amount cannot be negative", field="total_amount")

    if not isinstance(start_date, date):
        raise ValidationError("start date is required", field="start_date")

    if payment_type == PaymentType.SPOT_CASH:
        return [
            ScheduleEntry(
                payment_number=1,
                due_date=start_date,
                amount=total,
                status=ScheduleStatus.PAID,
            )
        ]

    if not installment_years or installment_years < 1:
        raise ValidationError(
            "installment years must be at least 1", field="installment_years"
        )

    num_installments = total_installments_for(payment_type, installment_years)

    # Computed once for the whole schedule.
    base_amount = (total / num_installments).quantize(WHOLE, rounding=ROUND_FLOOR)
    final_amount = total - base_amount * (num_installments - 1)

    seeded = 1 if paid_count is None else max(1, min(paid_count, num_installments))

    schedule = []
    for index in range(num_installments):
        payment_number = index + 1
        schedule.append(
            ScheduleEntry(
                payment_number=payment_number,
                due_date=add_months(start_date, index),
                amount=final_amount if payment_number == num_installments else base_amount,
                status=ScheduleStatus.PAID if payment_number <= seeded else ScheduleStatus.PENDING,
            )
        )

    return schedule


def schedule_total(schedule: List[ScheduleEntry]):
    """Sum of all scheduled amounts."""
    return sum((entry.amount for entry in schedule), to_decimal(0))
