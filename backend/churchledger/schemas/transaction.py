"""
Pydantic schemas for ledger transactions.

The ``*Record`` models double as the domain types handed around by the
services: rows are decoded into them at the persistence boundary.
"""
from typing import Annotated, Literal, Optional, Union
from datetime import datetime
from decimal import Decimal
from pydantic import BaseModel, ConfigDict, Field


class EntryCreate(BaseModel):
    """Record an incoming transaction (tithe, offering, ...)."""
    amount: Decimal = Field(..., ge=0, decimal_places=2)
    occurred_at: datetime
    description: Optional[str] = None
    category: str = Field(..., min_length=1, max_length=200)
    member_id: Optional[str] = None
    member_name: Optional[str] = Field(None, max_length=200)
    payment_method: str = Field(..., min_length=1, max_length=50)

    # Repeating a create with the same key returns the first transaction
    idempotency_key: Optional[str] = Field(None, max_length=100)


class ExpenseCreate(BaseModel):
    """Record an outgoing transaction."""
    amount: Decimal = Field(..., ge=0, decimal_places=2)
    occurred_at: datetime
    description: Optional[str] = None
    category: str = Field(..., min_length=1, max_length=200)
    main_category: Optional[str] = Field(None, max_length=200)
    sub_category: Optional[str] = Field(None, max_length=200)
    idempotency_key: Optional[str] = Field(None, max_length=100)


class EntryUpdate(BaseModel):
    """
    Patch an entry.

    Only fields present in the request are applied, so ``member_id: null``
    detaches the member. ``version`` must be the version the caller read.
    """
    version: int = Field(..., ge=1)
    amount: Optional[Decimal] = Field(None, ge=0, decimal_places=2)
    occurred_at: Optional[datetime] = None
    description: Optional[str] = None
    category: Optional[str] = Field(None, min_length=1, max_length=200)
    member_id: Optional[str] = None
    member_name: Optional[str] = Field(None, max_length=200)
    payment_method: Optional[str] = Field(None, min_length=1, max_length=50)


class ExpenseUpdate(BaseModel):
    """Patch an expense."""
    version: int = Field(..., ge=1)
    amount: Optional[Decimal] = Field(None, ge=0, decimal_places=2)
    occurred_at: Optional[datetime] = None
    description: Optional[str] = None
    category: Optional[str] = Field(None, min_length=1, max_length=200)
    main_category: Optional[str] = Field(None, max_length=200)
    sub_category: Optional[str] = Field(None, max_length=200)


class _TransactionRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    church_id: str
    amount: Decimal = Field(..., ge=0)
    occurred_at: datetime
    description: Optional[str] = None
    settled: bool
    category: str = Field(..., min_length=1)
    version: int
    created_by_id: Optional[str] = None
    created: datetime
    updated: datetime


class EntryRecord(_TransactionRecord):
    """Stored entry."""
    tipo: Literal["entrada"] = "entrada"
    member_id: Optional[str] = None
    # Display cache; not refreshed when the member is renamed
    member_name: Optional[str] = None
    payment_method: str = Field(..., min_length=1)


class ExpenseRecord(_TransactionRecord):
    """Stored expense."""
    tipo: Literal["saida"] = "saida"
    main_category: Optional[str] = None
    sub_category: Optional[str] = None


TransactionRecord = Annotated[
    Union[EntryRecord, ExpenseRecord],
    Field(discriminator="tipo"),
]


class TransactionListResponse(BaseModel):
    """Transactions of a period or of the whole history."""
    totalItems: int
    items: list[TransactionRecord]


class TitheRecordResponse(BaseModel):
    """One row of a member's tithe sub-ledger."""
    model_config = ConfigDict(frozen=True)

    id: str
    church_id: str
    member_id: str
    transaction_id: str
    amount: Decimal = Field(..., ge=0)
    occurred_at: datetime
    payment_method: Optional[str] = None
    description: Optional[str] = None
    created: datetime
    updated: datetime


class TitheRecordListResponse(BaseModel):
    totalItems: int
    total_amount: Decimal
    items: list[TitheRecordResponse]


class CategoriesResponse(BaseModel):
    """Canonical vocabulary offered to forms."""
    entry_categories: list[str]
    expense_categories: list[str]
    payment_methods: list[str]
