"""
Acknowledgement receipt rendering.

Turns the ``ReceiptData`` produced by the payment recorder into the plain
text acknowledgement handed to the client. Pure formatting: nothing here
feeds back into the engine.
"""

import textwrap
from datetime import date

from payment_lifecycle.domain.entities import ReceiptData

from .money import amount_in_words, format_currency
from .settings import EngineSettings, engine_settings

RECEIPT_WIDTH = 72


def ordinal(day: int) -> str:
    """1 -> "1st", 12 -> "12th", 22 -> "22nd"."""
    if 11 <= day % 100 <= 13:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(day % 10, "th")
    return f"{day}{suffix}"


def format_receipt_date(value: date) -> str:
    """Format a date the way receipts print it: "20th of March 2025"."""
    return f"{ordinal(value.day)} of {value.strftime('%B')} {value.year}"


def render_acknowledgement_receipt(
    receipt: ReceiptData,
    settings: EngineSettings = engine_settings,
) -> str:
    """
    Render an acknowledgement receipt as plain text.

    Args:
        receipt: Receipt data from ``record_payment``
        settings: Engine settings (company details, currency)

    Returns:
        The receipt text, one line per row, newline-terminated
    """
    amount_figures = format_currency(receipt.amount)
    body = (
        f"This is to acknowledge receipt the amount of "
        f"{amount_in_words(receipt.amount)} ({settings.currency_symbol}{amount_figures}) "
        f"{settings.currency_name} from {receipt.client_name.upper()}, tagged as "
        f"{receipt.payment_number} OF {receipt.total_installments} MONTHLY AMORTIZATION "
        f"for lot situated in {receipt.block_lot_no}, {receipt.property_name}. "
        f"This is non-refundable but deductible to the Total Contract Price."
    )

    rule = "=" * RECEIPT_WIDTH
    lines = [
        rule,
        settings.company_name.center(RECEIPT_WIDTH).rstrip(),
        settings.company_address.center(RECEIPT_WIDTH).rstrip(),
        "ACKNOWLEDGEMENT RECEIPT".center(RECEIPT_WIDTH).rstrip(),
        rule,
        "",
        "KNOW ALL MEN BY THESE PRESENTS:",
        "",
        *textwrap.wrap(body, RECEIPT_WIDTH),
        "",
        f"{format_receipt_date(receipt.payment_date)}.",
        "",
        f"Payment method: {receipt.payment_method.value.replace('_', ' ')}",
    ]
    if receipt.notes:
        lines.append(f"Notes: {receipt.notes}")
    lines.extend([
        f"AR No.: {receipt.receipt_number}",
        "",
        "-" * RECEIPT_WIDTH,
        *textwrap.wrap(
            "DISCLAIMER: This is electronically generated. Should verification be "
            "needed to determine the authenticity of the information stated in this "
            f"document, please contact {settings.company_email} or "
            f"{settings.company_contact}.",
            RECEIPT_WIDTH,
        ),
        rule,
    ])
    return "\n".join(lines) + "\n"
