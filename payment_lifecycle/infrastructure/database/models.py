"""SQLAlchemy ORM models for client payment agreements."""

from datetime import date, datetime
from decimal import Decimal
from uuid import uuid4

from sqlalchemy import (
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    pass


class AgreementModel(Base):
    """Persisted agreement terms and counters."""

    __tablename__ = "client_payments"

    id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False),
        primary_key=True,
        default=lambda: str(uuid4()),
    )
    user_id: Mapped[str | None] = mapped_column(String(255), nullable=True, index=True)
    client_name: Mapped[str] = mapped_column(String(255), nullable=False)
    contact_number: Mapped[str] = mapped_column(String(20), nullable=False, default="")
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    address: Mapped[str | None] = mapped_column(Text, nullable=True)
    payment_type: Mapped[str] = mapped_column(String(20), nullable=False)
    installment_years: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    total_amount: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    completed_payments: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    next_payment_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    payment_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=datetime.utcnow,
    )

    lots: Mapped[list["AgreementLotModel"]] = relationship(
        "AgreementLotModel",
        back_populates="agreement",
        cascade="all, delete-orphan",
        order_by="AgreementLotModel.position",
    )
    transactions: Mapped[list["PaymentTransactionModel"]] = relationship(
        "PaymentTransactionModel",
        back_populates="agreement",
        cascade="all, delete-orphan",
        order_by="PaymentTransactionModel.payment_number",
    )


class AgreementLotModel(Base):
    """A lot attached to an agreement, with the price it was sold at."""

    __tablename__ = "client_lots"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    client_payment_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False),
        ForeignKey("client_payments.id", ondelete="CASCADE"),
        nullable=False,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    lot_id: Mapped[str] = mapped_column(String(64), nullable=False)
    property_name: Mapped[str] = mapped_column(String(255), nullable=False)
    block_lot_no: Mapped[str] = mapped_column(String(255), nullable=False)
    custom_price: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)

    agreement: Mapped["AgreementModel"] = relationship(
        "AgreementModel",
        back_populates="lots",
    )


class PaymentTransactionModel(Base):
    """Append-only ledger row. One row per payment number per agreement."""

    __tablename__ = "payment_transactions"
    __table_args__ = (
        UniqueConstraint(
            "client_payment_id",
            "payment_number",
            name="uq_payment_transactions_payment_number",
        ),
    )

    id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False),
        primary_key=True,
        default=lambda: str(uuid4()),
    )
    client_payment_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False),
        ForeignKey("client_payments.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    payment_number: Mapped[int] = mapped_column(Integer, nullable=False)
    payment_date: Mapped[date] = mapped_column(Date, nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    payment_method: Mapped[str | None] = mapped_column(String(20), nullable=True)
    reference_number: Mapped[str | None] = mapped_column(String(255), nullable=True)
    payment_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=datetime.utcnow,
    )

    agreement: Mapped["AgreementModel"] = relationship(
        "AgreementModel",
        back_populates="transactions",
    )
