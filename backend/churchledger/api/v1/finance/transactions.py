"""
Transaction endpoints for the ChurchLedger Finance module.

Entries and expenses are created and edited through separate routes so the
stored variant can be checked against the operation; reads return both.
"""
import asyncio
from typing import Optional
from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession

from churchledger.core.permissions import get_tenant_session, get_writer_session
from churchledger.core.tenancy import TenantSession
from churchledger.db.base import get_db
from churchledger.schemas.transaction import (
    EntryCreate, EntryUpdate, EntryRecord,
    ExpenseCreate, ExpenseUpdate, ExpenseRecord,
    TransactionRecord, TransactionListResponse, CategoriesResponse,
)
from churchledger.services import categories
from churchledger.services.transaction_store import TransactionStore

router = APIRouter()

# Seconds between keep-alive lines on an idle stream
STREAM_KEEPALIVE = 15


async def get_store(
    session: TenantSession = Depends(get_tenant_session),
    db: AsyncSession = Depends(get_db)
) -> TransactionStore:
    return TransactionStore(db, session.church_id, session)


async def get_writer_store(
    session: TenantSession = Depends(get_writer_session),
    db: AsyncSession = Depends(get_db)
) -> TransactionStore:
    return TransactionStore(db, session.church_id, session)


@router.get("/categories", response_model=CategoriesResponse)
async def list_categories():
    """Canonical categories and payment methods for the entry forms."""
    return CategoriesResponse(
        entry_categories=list(categories.ENTRY_CATEGORIES),
        expense_categories=list(categories.EXPENSE_CATEGORIES),
        payment_methods=list(categories.PAYMENT_METHODS),
    )


@router.get("/transactions", response_model=TransactionListResponse)
async def list_transactions(
    year: Optional[int] = Query(None, ge=1900, le=9999),
    month: Optional[int] = Query(None, ge=1, le=12),
    store: TransactionStore = Depends(get_store)
):
    """
    List transactions, newest first.
    Pass both ``year`` and ``month`` to restrict to one calendar month.
    """
    if year is not None and month is not None:
        items = await store.list_by_period(year, month)
    else:
        items = await store.list_all()
    return TransactionListResponse(totalItems=len(items), items=items)


@router.get("/transactions/stream")
async def stream_transactions(
    request: Request,
    store: TransactionStore = Depends(get_store)
):
    """
    Live feed of the church's transactions as newline-delimited JSON.
    Each line is a full snapshot; blank lines are keep-alives.
    """
    queue: asyncio.Queue = asyncio.Queue()
    subscription = await store.subscribe(queue.put)

    async def snapshots():
        try:
            while not await request.is_disconnected():
                try:
                    snapshot = await asyncio.wait_for(queue.get(), timeout=STREAM_KEEPALIVE)
                except asyncio.TimeoutError:
                    yield "\n"
                    continue
                body = TransactionListResponse(totalItems=len(snapshot), items=list(snapshot))
                yield body.model_dump_json() + "\n"
        finally:
            subscription.unsubscribe()

    return StreamingResponse(snapshots(), media_type="application/x-ndjson")


@router.get("/transactions/{transaction_id}", response_model=TransactionRecord)
async def get_transaction(
    transaction_id: str,
    store: TransactionStore = Depends(get_store)
):
    return await store.get(transaction_id)


@router.post("/entries", response_model=EntryRecord, status_code=status.HTTP_201_CREATED)
async def create_entry(
    entry_data: EntryCreate,
    store: TransactionStore = Depends(get_writer_store)
):
    """
    Record an entry.
    Tithes naming a member are mirrored in the member's tithe records.
    """
    transaction_id = await store.add_entry(entry_data)
    return await store.get(transaction_id)


@router.patch("/entries/{transaction_id}", response_model=EntryRecord)
async def update_entry(
    transaction_id: str,
    entry_data: EntryUpdate,
    store: TransactionStore = Depends(get_writer_store)
):
    return await store.update_entry(transaction_id, entry_data)


@router.delete("/entries/{transaction_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_entry(
    transaction_id: str,
    version: Optional[int] = Query(None, ge=1),
    store: TransactionStore = Depends(get_writer_store)
):
    await store.delete_entry(transaction_id, version)
    return None


@router.post("/expenses", response_model=ExpenseRecord, status_code=status.HTTP_201_CREATED)
async def create_expense(
    expense_data: ExpenseCreate,
    store: TransactionStore = Depends(get_writer_store)
):
    transaction_id = await store.add_expense(expense_data)
    return await store.get(transaction_id)


@router.patch("/expenses/{transaction_id}", response_model=ExpenseRecord)
async def update_expense(
    transaction_id: str,
    expense_data: ExpenseUpdate,
    store: TransactionStore = Depends(get_writer_store)
):
    return await store.update_expense(transaction_id, expense_data)


@router.delete("/expenses/{transaction_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_expense(
    transaction_id: str,
    version: Optional[int] = Query(None, ge=1),
    store: TransactionStore = Depends(get_writer_store)
):
    await store.delete_expense(transaction_id, version)
    return None
