"""
Agreement Status Classifier.

Derives a single lifecycle state for an agreement "as of now". Status is
never stored; it is re-evaluated on every read from the agreement's terms,
counters and ledger.

Precedence (first match wins):
    1. No agreement                               -> PENDING
    2. Spot cash: full-price transaction exists   -> COMPLETED, else PENDING
    3. completed_payments >= total_installments   -> COMPLETED
    4. No next_payment_date                       -> PENDING
    5. next_payment_date on or after today        -> CURRENT
    6. Overdue by more than the threshold         -> SUPER_LATE, else LATE
"""

from datetime import date
from typing import List, Optional

from payment_lifecycle.domain.entities import Agreement, AgreementStatus, Transaction

from .money import add_months, as_date, days_between
from .reconcile import has_full_payment
from .settings import EngineSettings, engine_settings


def classify(
    agreement: Optional[Agreement],
    transactions: List[Transaction],
    now,
    settings: EngineSettings = engine_settings,
) -> AgreementStatus:
    """
    Classify an agreement's current lifecycle state.

    Args:
        agreement: The agreement to classify (None is tolerated for display)
        transactions: The agreement's recorded ledger
        now: Reference date or datetime; only the calendar day is used
        settings: Engine settings (late threshold)

    Returns:
        The derived AgreementStatus
    """
    if agreement is None:
        return AgreementStatus.PENDING

    if agreement.is_spot_cash:
        if has_full_payment(agreement, transactions):
            return AgreementStatus.COMPLETED
        return AgreementStatus.PENDING

    if agreement.completed_payments >= agreement.total_installments:
        return AgreementStatus.COMPLETED

    if agreement.next_payment_date is None:
        return AgreementStatus.PENDING

    today = as_date(now)
    if agreement.next_payment_date >= today:
        return AgreementStatus.CURRENT

    overdue_days = days_between(agreement.next_payment_date, today)
    if overdue_days > settings.late_threshold_days:
        return AgreementStatus.SUPER_LATE
    return AgreementStatus.LATE


def next_payment_date_for(agreement: Agreement) -> Optional[date]:
    """
    Due date of the agreement's next unpaid installment.

    Returns None for spot cash and for agreements with nothing left to pay.
    """
    if agreement.is_spot_cash:
        return None
    if agreement.completed_payments >= agreement.total_installments:
        return None
    return add_months(agreement.start_date, agreement.completed_payments)
