"""Agreement service - opens agreements and serves their derived views."""

from dataclasses import replace
from datetime import date
from typing import List, Optional
from uuid import UUID

import structlog

from payment_lifecycle.application.dto import (
    AgreementDetail,
    AgreementSummary,
    CreateAgreementRequest,
    SchedulePreview,
    SchedulePreviewRequest,
    UpdateAgreementRequest,
)
from payment_lifecycle.domain.entities import (
    Agreement,
    PaymentType,
    PropertyLot,
    ScheduleEntry,
    Transaction,
    build_agreement,
)
from payment_lifecycle.domain.exceptions import AgreementNotFoundException, ValidationError
from payment_lifecycle.domain.interfaces import AgreementRepository
from payment_lifecycle.service.engine import (
    EngineSettings,
    classify,
    engine_settings,
    expected_payment_amount,
    generate_schedule,
    next_payment_date_for,
    reconcile,
    reconcile_schedule,
    to_decimal,
)

logger = structlog.get_logger(__name__)


class AgreementService:
    """
    Application service for client payment agreements.

    Agreements are stored as terms + counters + ledger; every read
    recomputes the schedule, progress and status from those.
    """

    def __init__(
        self,
        agreement_repository: AgreementRepository,
        settings: EngineSettings = engine_settings,
    ):
        self._agreement_repo = agreement_repository
        self._settings = settings

    async def create_agreement(
        self,
        request: CreateAgreementRequest,
        today: Optional[date] = None,
    ) -> AgreementDetail:
        """
        Open a new agreement and seed its ledger.

        Spot cash agreements are paid in full at signing. Installment
        agreements record one transaction for each payment already made
        (at least the first, collected at signing).

        Raises:
            ValidationError: If the request is invalid
        """
        errors = request.validate(self._settings.max_installment_years)
        if errors:
            raise ValidationError("; ".join(errors))

        payment_type = PaymentType(request.payment_type)
        total_amount = sum((to_decimal(lot.price) for lot in request.lots), to_decimal(0))
        lots = tuple(
            PropertyLot(
                lot_id=lot.lot_id,
                property_name=lot.property_name,
                block_lot_no=lot.block_lot_no,
                price=to_decimal(lot.price),
            )
            for lot in request.lots
        )

        if payment_type == PaymentType.SPOT_CASH:
            installment_years = 1
            completed_payments = 1
        else:
            installment_years = request.installment_years
            completed_payments = max(1, request.completed_payments)

        agreement = build_agreement(
            payment_type,
            installment_years=installment_years,
            client_name=request.client_name.strip(),
            contact_number=request.contact_number,
            email=request.email,
            address=request.address,
            notes=request.notes,
            user_id=request.user_id,
            total_amount=total_amount,
            start_date=request.start_date,
            completed_payments=completed_payments,
            lots=lots,
        )
        agreement = _with_next_payment_date(agreement)

        schedule = generate_schedule(
            payment_type,
            total_amount,
            installment_years,
            request.start_date,
            paid_count=completed_payments,
        )
        transactions = self._seed_transactions(agreement, schedule)

        await self._agreement_repo.save(agreement, transactions)

        logger.info(
            "agreement_created",
            agreement_id=str(agreement.id),
            payment_type=payment_type.value,
            total_amount=str(total_amount),
            total_installments=agreement.total_installments,
            completed_payments=completed_payments,
        )

        return self._build_detail(agreement, transactions, today or date.today())

    async def get_agreement(
        self,
        agreement_id: UUID,
        today: Optional[date] = None,
    ) -> AgreementDetail:
        """
        Retrieve an agreement with its schedule, progress and status.

        Raises:
            AgreementNotFoundException: If the agreement does not exist
        """
        agreement = await self._agreement_repo.get_by_id(agreement_id)
        if agreement is None:
            logger.warning("agreement_not_found", agreement_id=str(agreement_id))
            raise AgreementNotFoundException(str(agreement_id))

        transactions = await self._agreement_repo.get_transactions(agreement_id)
        return self._build_detail(agreement, transactions, today or date.today())

    async def list_agreements(
        self,
        user_id: Optional[str] = None,
        today: Optional[date] = None,
    ) -> List[AgreementSummary]:
        """List agreements (optionally for one client) with status and progress."""
        today = today or date.today()
        agreements = await self._agreement_repo.list_agreements(user_id)

        summaries = []
        for agreement in agreements:
            transactions = await self._agreement_repo.get_transactions(agreement.id)
            schedule = self._schedule_for(agreement)
            summaries.append(
                AgreementSummary(
                    agreement=agreement,
                    status=classify(agreement, transactions, today, self._settings),
                    progress=reconcile(agreement, schedule, transactions),
                )
            )

        logger.info("agreements_listed", user_id=user_id, count=len(summaries))
        return summaries

    async def update_agreement(
        self,
        agreement_id: UUID,
        request: UpdateAgreementRequest,
        today: Optional[date] = None,
    ) -> AgreementDetail:
        """
        Edit client details and mark installments as paid.

        Raising ``completed_payments`` (clamped at the number of
        installments) recomputes the next due date and backfills a ledger
        row for every newly paid installment. The counter never goes
        backwards, and spot cash agreements have no counter to edit.

        Raises:
            ValidationError: If the edit is invalid
            AgreementNotFoundException: If the agreement does not exist
            PaymentConflictException: If a payment was recorded meanwhile
        """
        errors = request.validate()
        if errors:
            raise ValidationError("; ".join(errors))

        today = today or date.today()
        log = logger.bind(agreement_id=str(agreement_id))

        agreement = await self._agreement_repo.get_by_id(agreement_id)
        if agreement is None:
            log.warning("agreement_not_found")
            raise AgreementNotFoundException(str(agreement_id))

        changes = request.client_fields()
        if request.completed_payments is not None:
            if agreement.is_spot_cash:
                raise ValidationError(
                    "completed_payments cannot be changed on a spot cash agreement",
                    field="completed_payments",
                )
            completed = min(request.completed_payments, agreement.total_installments)
            if completed < agreement.completed_payments:
                raise ValidationError(
                    "completed_payments cannot be lower than the payments already recorded",
                    field="completed_payments",
                )
            changes["completed_payments"] = completed

        updated = _with_next_payment_date(replace(agreement, **changes))

        transactions = await self._agreement_repo.get_transactions(agreement_id)
        backfill = self._backfill_transactions(updated, transactions, today)

        updated = await self._agreement_repo.update(
            updated,
            backfill,
            expected_completed_payments=agreement.completed_payments,
        )

        log.info(
            "agreement_updated",
            fields=sorted(changes),
            completed_payments=updated.completed_payments,
            backfilled=len(backfill),
        )

        return self._build_detail(updated, transactions + backfill, today)

    async def get_transactions(self, agreement_id: UUID) -> List[Transaction]:
        """
        Retrieve an agreement's ledger ordered by payment number.

        Raises:
            AgreementNotFoundException: If the agreement does not exist
        """
        agreement = await self._agreement_repo.get_by_id(agreement_id)
        if agreement is None:
            raise AgreementNotFoundException(str(agreement_id))
        return await self._agreement_repo.get_transactions(agreement_id)

    def preview_schedule(self, request: SchedulePreviewRequest) -> SchedulePreview:
        """Schedule for terms that have not been saved yet."""
        if request.installment_years > self._settings.max_installment_years:
            raise ValidationError(
                f"installment_years must be between 1 and {self._settings.max_installment_years}",
                field="installment_years",
            )

        schedule = generate_schedule(
            request.payment_type,
            request.total_amount,
            request.installment_years,
            request.start_date,
            paid_count=request.completed_payments,
        )
        return SchedulePreview(
            payment_type=PaymentType(request.payment_type).value,
            total_amount=to_decimal(request.total_amount),
            total_installments=len(schedule),
            schedule=schedule,
        )

    def _schedule_for(self, agreement: Agreement) -> List[ScheduleEntry]:
        return generate_schedule(
            agreement.payment_type,
            agreement.total_amount,
            agreement.installment_years,
            agreement.start_date,
        )

    def _build_detail(
        self,
        agreement: Agreement,
        transactions: List[Transaction],
        today: date,
    ) -> AgreementDetail:
        schedule = self._schedule_for(agreement)
        return AgreementDetail(
            agreement=agreement,
            status=classify(agreement, transactions, today, self._settings),
            progress=reconcile(agreement, schedule, transactions),
            schedule=reconcile_schedule(schedule, transactions, today, self._settings),
            transactions=transactions,
            expected_payment_amount=expected_payment_amount(agreement, schedule),
            as_of=today,
        )

    def _seed_transactions(
        self,
        agreement: Agreement,
        schedule: List[ScheduleEntry],
    ) -> List[Transaction]:
        """Ledger rows for the payments collected before or at signing."""
        if agreement.is_spot_cash:
            return [
                Transaction(
                    payment_number=1,
                    payment_date=agreement.start_date,
                    amount=agreement.total_amount,
                    notes="Full payment (spot cash)",
                )
            ]

        return [
            Transaction(
                payment_number=entry.payment_number,
                payment_date=entry.due_date,
                amount=entry.amount,
                notes=f"Monthly installment payment #{entry.payment_number}",
            )
            for entry in schedule
            if entry.payment_number <= agreement.completed_payments
        ]

    def _backfill_transactions(
        self,
        agreement: Agreement,
        transactions: List[Transaction],
        today: date,
    ) -> List[Transaction]:
        """Ledger rows for paid installments that have no recorded payment."""
        recorded = {txn.payment_number for txn in transactions}
        return [
            Transaction(
                payment_number=entry.payment_number,
                payment_date=today,
                amount=entry.amount,
                notes="Payment recorded",
            )
            for entry in self._schedule_for(agreement)
            if entry.payment_number <= agreement.completed_payments
            and entry.payment_number not in recorded
        ]


def _with_next_payment_date(agreement: Agreement) -> Agreement:
    return replace(agreement, next_payment_date=next_payment_date_for(agreement))
