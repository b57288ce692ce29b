"""
Transaction model for the church ledger.

Entries (``tipo = "entrada"``) and expenses (``tipo = "saida"``) share one
table; variant-specific columns are nullable and checked by the decoder in
``services/decoding.py``.
"""
from typing import Optional
from datetime import datetime
from decimal import Decimal
from enum import Enum
from sqlalchemy import (
    String, Text, ForeignKey, Numeric, DateTime, Boolean, Integer,
    UniqueConstraint, Enum as SQLEnum,
)
from sqlalchemy.orm import Mapped, mapped_column
from churchledger.models.base import BaseModel


class TransactionKind(str, Enum):
    """Direction of a transaction."""
    ENTRY = "entrada"
    EXPENSE = "saida"


class Transaction(BaseModel):
    """
    Ledger transaction.

    ``version`` is maintained by the mapper: every UPDATE/DELETE is issued
    with ``WHERE version = <loaded>`` so a concurrent write surfaces as a
    StaleDataError at flush.
    """
    __tablename__ = "transactions"
    __table_args__ = (
        UniqueConstraint("church_id", "idempotency_key", name="uq_transactions_church_idempotency_key"),
    )

    church_id: Mapped[str] = mapped_column(
        String(15),
        ForeignKey("churches.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    tipo: Mapped[TransactionKind] = mapped_column(
        SQLEnum(
            TransactionKind,
            name="transactionkind",
            create_constraint=True,
            values_callable=lambda x: [e.value for e in x]
        ),
        nullable=False,
        index=True
    )

    amount: Mapped[Decimal] = mapped_column(
        Numeric(precision=15, scale=2),
        nullable=False
    )
    occurred_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    settled: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    # Free text on purpose: legacy rows carry non-canonical spellings
    category: Mapped[str] = mapped_column(String(200), nullable=False, index=True)

    # Entry only. No FK: references to removed members are kept as-is.
    member_id: Mapped[Optional[str]] = mapped_column(String(15), nullable=True, index=True)
    member_name: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    payment_method: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    # Expense only
    main_category: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    sub_category: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)

    idempotency_key: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    created_by_id: Mapped[Optional[str]] = mapped_column(
        String(15),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True
    )

    __mapper_args__ = {"version_id_col": version}

    def __repr__(self) -> str:
        return f"<Transaction {self.tipo.value} {self.amount} ({self.category})>"
