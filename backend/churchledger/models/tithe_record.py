"""
Tithe record model - one member's tithe sub-ledger.
"""
from typing import Optional
from datetime import datetime
from decimal import Decimal
from sqlalchemy import String, Text, ForeignKey, Numeric, DateTime
from sqlalchemy.orm import Mapped, mapped_column
from churchledger.models.base import BaseModel


class TitheRecord(BaseModel):
    """
    Tithe sub-ledger row.

    Mirrors a tithe entry in ``transactions``. ``transaction_id`` is a weak
    back-reference: the transaction store creates, updates and deletes these
    rows, never the database through cascades.
    """
    __tablename__ = "tithe_records"

    church_id: Mapped[str] = mapped_column(
        String(15),
        ForeignKey("churches.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    member_id: Mapped[str] = mapped_column(String(15), nullable=False, index=True)
    transaction_id: Mapped[str] = mapped_column(String(15), nullable=False, index=True)

    amount: Mapped[Decimal] = mapped_column(
        Numeric(precision=15, scale=2),
        nullable=False
    )
    occurred_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    payment_method: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<TitheRecord {self.member_id} {self.amount} ({self.transaction_id})>"
