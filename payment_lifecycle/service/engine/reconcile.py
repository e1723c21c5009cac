"""
Ledger Reconciler for installment payment agreements.

Folds the recorded transactions of an agreement against its schedule to
produce:
- Paid / remaining totals and installment progress (``reconcile``)
- Per-period payment status for the schedule table (``reconcile_schedule``)
- The amount to pre-fill for the next payment (``expected_payment_amount``)

Paid amounts are always clamped to ``[0, total_amount]`` so a ledger that
over-collects never reports a negative remaining balance or more than
100% progress.
"""

from dataclasses import replace
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, List, Optional

from payment_lifecycle.domain.entities import (
    Agreement,
    ProgressSummary,
    ScheduleEntry,
    ScheduleStatus,
    Transaction,
)

from .money import WHOLE, as_date, days_between, quantize_cents, round_up_to_whole, to_decimal
from .settings import EngineSettings, engine_settings

ZERO = Decimal("0")


def sum_transactions(transactions: Iterable[Transaction]) -> Decimal:
    return sum((to_decimal(txn.amount) for txn in transactions), ZERO)


def has_full_payment(agreement: Agreement, transactions: Iterable[Transaction]) -> bool:
    """True when a single transaction covers the whole contract price."""
    total = to_decimal(agreement.total_amount)
    return any(to_decimal(txn.amount) >= total for txn in transactions)


def reconcile(
    agreement: Optional[Agreement],
    schedule: List[ScheduleEntry],
    transactions: List[Transaction],
) -> ProgressSummary:
    """
    Compute paid/remaining totals and installment progress.

    Algorithm:
        Spot cash:
            completed = 1 if any transaction covers the full price, else 0
            paid = sum of transactions
        Installment:
            completed = agreement.completed_payments
            paid = sum of transactions, or, with an empty ledger,
                   completed_payments * (total / total_installments)
        Both:
            paid is clamped to [0, total]; remaining = total - paid
            percent = round(completed / total_periods * 100)

    Args:
        agreement: The agreement (None yields an all-zero summary)
        schedule: Schedule generated from the agreement's terms
        transactions: The agreement's recorded ledger

    Returns:
        ProgressSummary for display and reporting
    """
    if agreement is None:
        return ProgressSummary(
            total_amount=ZERO,
            paid_amount=ZERO,
            remaining_amount=ZERO,
            completed=0,
            total=0,
            percent=0,
        )

    total_amount = to_decimal(agreement.total_amount)
    total = len(schedule) if schedule else agreement.total_installments

    if agreement.is_spot_cash:
        completed = 1 if has_full_payment(agreement, transactions) else 0
        paid_amount = sum_transactions(transactions)
    else:
        completed = agreement.completed_payments
        if transactions:
            paid_amount = sum_transactions(transactions)
        else:
            paid_amount = quantize_cents(
                agreement.completed_payments * agreement.installment_amount
            )

    paid_amount = min(max(paid_amount, ZERO), total_amount)
    remaining_amount = total_amount - paid_amount

    return ProgressSummary(
        total_amount=total_amount,
        paid_amount=paid_amount,
        remaining_amount=remaining_amount,
        completed=completed,
        total=total,
        percent=calculate_percent(completed, total),
    )


def calculate_percent(completed: int, total: int) -> int:
    """Whole-number progress percentage, rounding halves up."""
    if total <= 0:
        return 0
    ratio = Decimal(completed) / Decimal(total) * 100
    return int(ratio.quantize(WHOLE, rounding=ROUND_HALF_UP))


def reconcile_schedule(
    schedule: List[ScheduleEntry],
    transactions: List[Transaction],
    today: date,
    settings: EngineSettings = engine_settings,
) -> List[ScheduleEntry]:
    """
    Recompute each schedule entry's status against the real ledger.

    An entry is PAID when a transaction carries its payment number.
    Otherwise it is LATE once ``today`` is past its due date, SUPER_LATE
    once it is more than ``late_threshold_days`` overdue, and PENDING
    before that.

    Note that the PAID seed on entry 1 is replaced here: only actual
    transactions count once a ledger is available.
    """
    today = as_date(today)
    paid_numbers = {txn.payment_number for txn in transactions}

    reconciled = []
    for entry in schedule:
        if entry.payment_number in paid_numbers:
            status = ScheduleStatus.PAID
        elif today > entry.due_date:
            overdue = days_between(entry.due_date, today)
            status = (
                ScheduleStatus.SUPER_LATE
                if overdue > settings.late_threshold_days
                else ScheduleStatus.LATE
            )
        else:
            status = ScheduleStatus.PENDING
        reconciled.append(replace(entry, status=status))

    return reconciled


def expected_payment_amount(agreement: Agreement, schedule: List[ScheduleEntry]) -> Decimal:
    """
    Amount to suggest for the agreement's next payment.

    Uses the next schedule entry when one exists, falling back to the flat
    per-period share. Zero once every installment is paid, which includes
    spot cash. Always whole units.
    """
    if agreement.completed_payments >= agreement.total_installments:
        return Decimal("0")

    next_number = agreement.completed_payments + 1
    for entry in schedule:
        if entry.payment_number == next_number:
            return round_up_to_whole(entry.amount)

    return round_up_to_whole(agreement.installment_amount)
