"""PostgreSQL repository implementation for agreements and their ledgers."""

from decimal import Decimal
from typing import List, Optional
from uuid import UUID

import structlog
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from payment_lifecycle.domain.entities import (
    Agreement,
    AgreementCounters,
    PaymentMethod,
    PropertyLot,
    Transaction,
    build_agreement,
)
from payment_lifecycle.domain.exceptions import (
    AgreementNotFoundException,
    PaymentConflictException,
)
from payment_lifecycle.domain.interfaces import AgreementRepository
from payment_lifecycle.infrastructure.database.models import (
    AgreementLotModel,
    AgreementModel,
    PaymentTransactionModel,
)

logger = structlog.get_logger(__name__)


class PostgresAgreementRepository(AgreementRepository):
    """
    PostgreSQL-backed agreement store.

    Recording a payment is a compare-and-set on ``completed_payments``
    plus an insert guarded by a unique ``(client_payment_id,
    payment_number)`` constraint, so at most one of two concurrent
    recordings for the same agreement can succeed.
    """

    def __init__(self, session: AsyncSession):
        self._session = session

    async def save(
        self,
        agreement: Agreement,
        transactions: List[Transaction],
    ) -> Agreement:
        model = AgreementModel(
            id=str(agreement.id),
            user_id=agreement.user_id,
            client_name=agreement.client_name,
            contact_number=agreement.contact_number,
            email=agreement.email,
            address=agreement.address,
            payment_type=agreement.payment_type.value,
            installment_years=agreement.installment_years,
            total_amount=agreement.total_amount,
            start_date=agreement.start_date,
            completed_payments=agreement.completed_payments,
            next_payment_date=agreement.next_payment_date,
            payment_notes=agreement.notes,
            created_at=agreement.created_at,
        )

        for position, lot in enumerate(agreement.lots):
            model.lots.append(
                AgreementLotModel(
                    position=position,
                    lot_id=lot.lot_id,
                    property_name=lot.property_name,
                    block_lot_no=lot.block_lot_no,
                    custom_price=lot.price,
                )
            )

        for txn in transactions:
            model.transactions.append(self._to_transaction_model(agreement.id, txn))

        self._session.add(model)
        await self._session.flush()

        return agreement

    async def get_by_id(self, agreement_id: UUID) -> Optional[Agreement]:
        model = await self._load(agreement_id)
        if model is None:
            return None
        return self._to_entity(model)

    async def list_agreements(self, user_id: Optional[str] = None) -> List[Agreement]:
        stmt = select(AgreementModel).options(selectinload(AgreementModel.lots))
        if user_id is not None:
            stmt = stmt.where(AgreementModel.user_id == user_id)
        stmt = stmt.order_by(AgreementModel.created_at.desc()).execution_options(
            populate_existing=True
        )

        result = await self._session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars().all()]

    async def get_transactions(self, agreement_id: UUID) -> List[Transaction]:
        stmt = (
            select(PaymentTransactionModel)
            .where(PaymentTransactionModel.client_payment_id == str(agreement_id))
            .order_by(PaymentTransactionModel.payment_number)
        )
        result = await self._session.execute(stmt)
        return [self._to_transaction(model) for model in result.scalars().all()]

    async def append_transaction(
        self,
        agreement_id: UUID,
        transaction: Transaction,
        counters: AgreementCounters,
        expected_completed_payments: int,
    ) -> Agreement:
        await self._compare_and_set(
            agreement_id,
            expected_completed_payments,
            transaction.payment_number,
            completed_payments=counters.completed_payments,
            next_payment_date=counters.next_payment_date,
        )
        await self._add_transactions(agreement_id, [transaction])

        model = await self._load(agreement_id)
        return self._to_entity(model)

    async def update(
        self,
        agreement: Agreement,
        transactions: List[Transaction],
        expected_completed_payments: int,
    ) -> Agreement:
        await self._compare_and_set(
            agreement.id,
            expected_completed_payments,
            expected_completed_payments + 1,
            client_name=agreement.client_name,
            contact_number=agreement.contact_number,
            email=agreement.email,
            address=agreement.address,
            payment_notes=agreement.notes,
            user_id=agreement.user_id,
            completed_payments=agreement.completed_payments,
            next_payment_date=agreement.next_payment_date,
        )
        await self._add_transactions(agreement.id, transactions)

        model = await self._load(agreement.id)
        return self._to_entity(model)

    async def _compare_and_set(
        self,
        agreement_id: UUID,
        expected_completed_payments: int,
        payment_number: int,
        **values,
    ) -> None:
        """Update the agreement row only while its counter is unchanged."""
        stmt = (
            update(AgreementModel)
            .where(
                AgreementModel.id == str(agreement_id),
                AgreementModel.completed_payments == expected_completed_payments,
            )
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)

        if result.rowcount == 0:
            if await self._load(agreement_id) is None:
                raise AgreementNotFoundException(str(agreement_id))
            logger.warning(
                "payment_counter_mismatch",
                agreement_id=str(agreement_id),
                expected_completed_payments=expected_completed_payments,
            )
            raise PaymentConflictException(str(agreement_id), payment_number)

    async def _add_transactions(
        self,
        agreement_id: UUID,
        transactions: List[Transaction],
    ) -> None:
        for txn in transactions:
            self._session.add(self._to_transaction_model(agreement_id, txn))
        try:
            await self._session.flush()
        except IntegrityError:
            number = transactions[0].payment_number if transactions else 0
            raise PaymentConflictException(str(agreement_id), number)

    async def _load(self, agreement_id: UUID) -> Optional[AgreementModel]:
        stmt = (
            select(AgreementModel)
            .options(selectinload(AgreementModel.lots))
            .where(AgreementModel.id == str(agreement_id))
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    def _to_transaction_model(self, agreement_id: UUID, txn: Transaction) -> PaymentTransactionModel:
        return PaymentTransactionModel(
            id=str(txn.id),
            client_payment_id=str(agreement_id),
            payment_number=txn.payment_number,
            payment_date=txn.payment_date,
            amount=txn.amount,
            payment_method=txn.payment_method.value if txn.payment_method else None,
            reference_number=txn.reference_number,
            payment_notes=txn.notes,
            created_at=txn.created_at,
        )

    def _to_transaction(self, model: PaymentTransactionModel) -> Transaction:
        return Transaction(
            id=UUID(model.id),
            payment_number=model.payment_number,
            payment_date=model.payment_date,
            amount=Decimal(model.amount),
            payment_method=PaymentMethod(model.payment_method) if model.payment_method else None,
            reference_number=model.reference_number,
            notes=model.payment_notes,
            created_at=model.created_at,
        )

    def _to_entity(self, model: AgreementModel) -> Agreement:
        lots = tuple(
            PropertyLot(
                lot_id=lot.lot_id,
                property_name=lot.property_name,
                block_lot_no=lot.block_lot_no,
                price=Decimal(lot.custom_price),
            )
            for lot in model.lots
        )

        return build_agreement(
            model.payment_type,
            installment_years=model.installment_years,
            id=UUID(model.id),
            user_id=model.user_id,
            client_name=model.client_name,
            contact_number=model.contact_number,
            email=model.email,
            address=model.address,
            total_amount=Decimal(model.total_amount),
            start_date=model.start_date,
            completed_payments=model.completed_payments,
            next_payment_date=model.next_payment_date,
            lots=lots,
            notes=model.payment_notes,
            created_at=model.created_at,
        )
