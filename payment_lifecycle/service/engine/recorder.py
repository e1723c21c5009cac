"""
Payment Recorder.

Validates one payment event and builds everything the caller has to
persist: the ledger transaction, the receipt data and the advanced
agreement counters. The recorder never mutates its inputs and performs no
I/O; persisting the transaction and advancing ``completed_payments`` is the
caller's job, and only after the store confirms the write.
"""

from datetime import date
from typing import Optional

from payment_lifecycle.domain.entities import (
    Agreement,
    AgreementCounters,
    PaymentInput,
    PaymentMethod,
    PaymentRecord,
    ReceiptData,
    Transaction,
)
from payment_lifecycle.domain.exceptions import InvalidStateError, ValidationError

from .money import add_months, as_date, round_up_to_whole, to_decimal
from .settings import EngineSettings, engine_settings

NOT_AVAILABLE = "N/A"


def parse_payment_method(value) -> PaymentMethod:
    """
    Parse a payment method from an enum member or its name.

    Raises:
        ValidationError: If the value is missing or not a known method
    """
    if isinstance(value, PaymentMethod):
        return value
    if isinstance(value, str) and value.strip():
        try:
            return PaymentMethod(value.strip().upper())
        except ValueError:
            pass
    raise ValidationError("invalid payment method", field="payment_method")


def _clean_text(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def advance_counters(agreement: Agreement, payment_number: int) -> AgreementCounters:
    """Counters after ``payment_number`` has been paid."""
    is_completed = payment_number >= agreement.total_installments
    return AgreementCounters(
        completed_payments=payment_number,
        next_payment_date=(
            None if is_completed else add_months(agreement.start_date, payment_number)
        ),
        is_completed=is_completed,
    )


def record_payment(
    agreement: Agreement,
    payment: PaymentInput,
    settings: EngineSettings = engine_settings,
) -> PaymentRecord:
    """
    Build the transaction and receipt for one payment.

    Validation order:
        1. amount must be positive (then rounded up to whole units)
        2. payment_method must be one of CASH, CHECK, BANK_TRANSFER, ONLINE
        3. payment_date is required
        4. the agreement must have an unpaid installment left

    The payment number is ``completed_payments + 1``. When no reference
    number is given, the receipt number is synthesized from the payment
    number (``AYCO-007``).

    Args:
        agreement: Freshly loaded agreement the payment applies to
        payment: The entered payment values
        settings: Engine settings (receipt numbering)

    Returns:
        PaymentRecord with the transaction, receipt data and the counter
        values to persist

    Raises:
        ValidationError: If the payment input is malformed
        InvalidStateError: If the agreement has no installment left to pay
    """
    raw_amount = to_decimal(payment.amount)
    if raw_amount <= 0:
        raise ValidationError("amount must be positive", field="amount")
    amount = round_up_to_whole(raw_amount)

    method = parse_payment_method(payment.payment_method)

    if not isinstance(payment.payment_date, date):
        raise ValidationError("payment date is required", field="payment_date")
    payment_date = as_date(payment.payment_date)

    if agreement.completed_payments >= agreement.total_installments:
        raise InvalidStateError("agreement already completed")

    payment_number = agreement.completed_payments + 1
    reference_number = _clean_text(payment.reference_number)
    notes = _clean_text(payment.notes)

    transaction = Transaction(
        payment_number=payment_number,
        payment_date=payment_date,
        amount=amount,
        payment_method=method,
        reference_number=reference_number,
        notes=notes,
    )

    lot = agreement.primary_lot
    receipt_data = ReceiptData(
        client_name=agreement.client_name,
        payment_date=payment_date,
        amount=amount,
        payment_method=method,
        reference_number=reference_number,
        notes=notes,
        property_name=lot.property_name if lot else NOT_AVAILABLE,
        block_lot_no=lot.block_lot_no if lot else NOT_AVAILABLE,
        payment_number=payment_number,
        total_installments=agreement.total_installments,
        receipt_number=reference_number or settings.format_receipt_number(payment_number),
    )

    return PaymentRecord(
        transaction=transaction,
        receipt_data=receipt_data,
        updated_counters=advance_counters(agreement, payment_number),
    )
