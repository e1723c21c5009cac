"""
Installment Payment Lifecycle Engine
"""

from .settings import EngineSettings, engine_settings, get_engine_settings
from .money import (
    MAX_AMOUNT,
    add_months,
    amount_in_words,
    days_between,
    format_currency,
    round_up_to_whole,
    to_decimal,
)
from .schedule import generate_schedule, schedule_total, total_installments_for
from .reconcile import (
    calculate_percent,
    expected_payment_amount,
    reconcile,
    reconcile_schedule,
)
from .status import classify, next_payment_date_for
from .recorder import advance_counters, parse_payment_method, record_payment
from .receipt import format_receipt_date, render_acknowledgement_receipt

__all__ = [
    # Settings
    "EngineSettings",
    "engine_settings",
    "get_engine_settings",
    # Money / dates
    "MAX_AMOUNT",
    "add_months",
    "amount_in_words",
    "days_between",
    "format_currency",
    "round_up_to_whole",
    "to_decimal",
    # Schedule
    "generate_schedule",
    "schedule_total",
    "total_installments_for",
    # Reconciliation
    "calculate_percent",
    "expected_payment_amount",
    "reconcile",
    "reconcile_schedule",
    # Status
    "classify",
    "next_payment_date_for",
    # Recording
    "advance_counters",
    "parse_payment_method",
    "record_payment",
    # Receipts
    "format_receipt_date",
    "render_acknowledgement_receipt",
]
