"""Payment service - orchestrates the record-payment use case."""

from datetime import date
from typing import Optional
from uuid import UUID

import structlog

from payment_lifecycle.application.dto import PaymentReceipt, RecordPaymentRequest
from payment_lifecycle.domain.entities import AgreementStatus, PaymentInput
from payment_lifecycle.domain.exceptions import (
    AgreementNotFoundException,
    InvalidStateError,
    PaymentConflictException,
)
from payment_lifecycle.domain.interfaces import AgreementRepository
from payment_lifecycle.service.engine import (
    EngineSettings,
    classify,
    engine_settings,
    record_payment,
    render_acknowledgement_receipt,
)

logger = structlog.get_logger(__name__)


class PaymentService:
    """
    Application service for recording installment payments.
    """

    def __init__(
        self,
        agreement_repository: AgreementRepository,
        settings: EngineSettings = engine_settings,
    ):
        self._agreement_repo = agreement_repository
        self._settings = settings

    async def record_payment(
        self,
        agreement_id: UUID,
        request: RecordPaymentRequest,
        today: Optional[date] = None,
    ) -> PaymentReceipt:
        """
        Record the next installment payment for an agreement.

        The agreement is re-read, validated against the payment, and the
        transaction is appended together with the advanced counters in one
        unit of work. If another recording advanced the counter first, the
        write is rejected and nothing is persisted.

        Args:
            agreement_id: The agreement to pay against
            request: Entered payment values
            today: Reference date for status classification

        Returns:
            PaymentReceipt with the persisted transaction and the rendered
            acknowledgement receipt

        Raises:
            AgreementNotFoundException: If the agreement does not exist
            ValidationError: If the payment input is malformed
            InvalidStateError: If the agreement is spot cash or completed
            PaymentConflictException: If a concurrent recording won
        """
        log = logger.bind(agreement_id=str(agreement_id))

        agreement = await self._agreement_repo.get_by_id(agreement_id)
        if agreement is None:
            raise AgreementNotFoundException(str(agreement_id))

        if agreement.is_spot_cash:
            raise InvalidStateError("agreement already completed")

        transactions = await self._agreement_repo.get_transactions(agreement_id)
        status = classify(agreement, transactions, today or date.today(), self._settings)
        if status == AgreementStatus.COMPLETED:
            raise InvalidStateError("agreement already completed")

        record = record_payment(
            agreement,
            PaymentInput(
                amount=request.amount,
                payment_date=request.payment_date,
                payment_method=request.payment_method,
                reference_number=request.reference_number,
                notes=request.notes,
            ),
            self._settings,
        )

        try:
            await self._agreement_repo.append_transaction(
                agreement_id,
                record.transaction,
                record.updated_counters,
                expected_completed_payments=agreement.completed_payments,
            )
        except PaymentConflictException:
            log.warning(
                "payment_conflict",
                payment_number=record.transaction.payment_number,
            )
            raise

        log.info(
            "payment_recorded",
            payment_number=record.transaction.payment_number,
            total_installments=agreement.total_installments,
            amount=str(record.transaction.amount),
            method=record.transaction.payment_method.value,
            completed=record.updated_counters.is_completed,
        )

        return PaymentReceipt(
            agreement_id=str(agreement_id),
            transaction=record.transaction,
            receipt_data=record.receipt_data,
            counters=record.updated_counters,
            receipt_text=render_acknowledgement_receipt(record.receipt_data, self._settings),
        )
