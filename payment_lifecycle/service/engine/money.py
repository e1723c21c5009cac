"""
Money and date primitives for the payment engine.

Amounts are ``Decimal`` values in whole currency units. Amounts that are
charged or recorded round up to the next whole unit; formatting is
display-only and never feeds back into calculations.
"""

from datetime import date, datetime
from decimal import ROUND_CEILING, ROUND_FLOOR, ROUND_HALF_UP, Decimal, InvalidOperation

from dateutil.relativedelta import relativedelta
from num2words import num2words

from payment_lifecycle.domain.exceptions import ValidationError

WHOLE = Decimal("1")
CENTS = Decimal("0.01")

# Largest whole amount that fits the ledger's NUMERIC(14, 2) columns
MAX_AMOUNT = Decimal("999999999999")


def to_decimal(value) -> Decimal:
    """
    Coerce a user- or database-supplied amount into a Decimal.

    None and empty strings count as zero, matching how blank form fields
    were treated by the back office.

    Raises:
        ValidationError: If the value is not a finite number
    """
    if value is None or value == "":
        return Decimal("0")
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, float):
        result = Decimal(str(value))
    else:
        try:
            result = Decimal(str(value).strip().replace(",", ""))
        except InvalidOperation:
            raise ValidationError(f"invalid amount: {value!r}", field="amount")

    if not result.is_finite():
        raise ValidationError(f"invalid amount: {value!r}", field="amount")
    return result


def round_up_to_whole(value) -> Decimal:
    """Round an amount up to the next whole currency unit."""
    return to_decimal(value).quantize(WHOLE, rounding=ROUND_CEILING)


def quantize_cents(value) -> Decimal:
    return to_decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP)


def format_currency(value, show_decimals: bool = False) -> str:
    """
    Format an amount with thousands separators.

    Examples:
        format_currency(120000) -> "120,000"
        format_currency("1234.5", show_decimals=True) -> "1,234.50"
    """
    amount = to_decimal(value)
    if show_decimals:
        return f"{amount.quantize(CENTS, rounding=ROUND_HALF_UP):,.2f}"
    return f"{amount.quantize(WHOLE, rounding=ROUND_HALF_UP):,.0f}"


def add_months(start: date, months: int) -> date:
    """
    Add calendar months to a date.

    The day of month is clamped to the end of the target month, so
    Jan 31 + 1 month is Feb 28 (or 29), not Mar 3.
    """
    return start + relativedelta(months=months)


def days_between(earlier: date, later: date) -> int:
    """Whole days from ``earlier`` to ``later`` (negative if reversed)."""
    return (as_date(later) - as_date(earlier)).days


def as_date(value) -> date:
    """Accept a date or datetime and return the calendar date."""
    if isinstance(value, datetime):
        return value.date()
    return value


def amount_in_words(value) -> str:
    """
    Spell out the whole-unit part of an amount for receipts.

    Example:
        amount_in_words(10500) -> "TEN THOUSAND, FIVE HUNDRED"
    """
    whole = int(to_decimal(value).quantize(WHOLE, rounding=ROUND_FLOOR))
    words = num2words(whole, lang="en")
    return words.upper().replace("-", " ").replace(" AND ", " ")
