"""Repository interfaces for data persistence."""

from abc import ABC, abstractmethod
from typing import List, Optional
from uuid import UUID

from payment_lifecycle.domain.entities import Agreement, AgreementCounters, Transaction


class AgreementRepository(ABC):
    """
    Abstract repository for agreements and their transaction ledgers.

    Only contract terms, counters and transactions are persisted.
    Schedules, progress and status are always recomputed from them.

    Implementations may use PostgreSQL, in-memory storage, etc.
    """

    @abstractmethod
    async def save(
        self,
        agreement: Agreement,
        transactions: List[Transaction],
    ) -> Agreement:
        """
        Persist a new agreement together with its seed transactions.

        Args:
            agreement: The agreement to save
            transactions: Transactions recorded at signing (may be empty)

        Returns:
            The saved agreement
        """
        ...

    @abstractmethod
    async def get_by_id(self, agreement_id: UUID) -> Optional[Agreement]:
        """
        Retrieve an agreement by ID.

        Args:
            agreement_id: The agreement's unique identifier

        Returns:
            The agreement if found, None otherwise
        """
        ...

    @abstractmethod
    async def list_agreements(self, user_id: Optional[str] = None) -> List[Agreement]:
        """
        Retrieve agreements, optionally only those owned by a client account.

        Args:
            user_id: Restrict to this client account when given

        Returns:
            Agreements ordered by created_at descending
        """
        ...

    @abstractmethod
    async def get_transactions(self, agreement_id: UUID) -> List[Transaction]:
        """
        Retrieve an agreement's ledger.

        Args:
            agreement_id: The agreement's unique identifier

        Returns:
            Transactions ordered by payment number
        """
        ...

    @abstractmethod
    async def append_transaction(
        self,
        agreement_id: UUID,
        transaction: Transaction,
        counters: AgreementCounters,
        expected_completed_payments: int,
    ) -> Agreement:
        """
        Append a payment and advance the agreement's counters atomically.

        Two concurrent recordings for the same agreement must not both
        succeed: the write only applies while the stored
        ``completed_payments`` still equals ``expected_completed_payments``.

        Args:
            agreement_id: The agreement being paid
            transaction: The transaction built by the payment recorder
            counters: Counter values to store alongside it
            expected_completed_payments: Counter value the caller read

        Returns:
            The agreement with its advanced counters

        Raises:
            AgreementNotFoundException: If the agreement does not exist
            PaymentConflictException: If another payment won the race
        """
        ...

    @abstractmethod
    async def update(
        self,
        agreement: Agreement,
        transactions: List[Transaction],
        expected_completed_payments: int,
    ) -> Agreement:
        """
        Store edited client fields and counters, adding backfilled payments.

        Applies under the same compare-and-set on ``completed_payments`` as
        ``append_transaction``.

        Args:
            agreement: The agreement with its edits applied
            transactions: Ledger rows for installments newly marked as paid
            expected_completed_payments: Counter value the caller read

        Returns:
            The stored agreement

        Raises:
            AgreementNotFoundException: If the agreement does not exist
            PaymentConflictException: If a payment was recorded meanwhile
        """
        ...
