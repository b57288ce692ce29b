"""
Balance endpoints for the ChurchLedger Finance module.
"""
from datetime import datetime, timezone
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from churchledger.api.v1.finance.transactions import get_store
from churchledger.core.permissions import ensure_church_exists
from churchledger.db.base import get_db
from churchledger.schemas.balance import PeriodBalancesResponse
from churchledger.services.balances import BalanceCalculator
from churchledger.services.transaction_store import TransactionStore

router = APIRouter()


@router.get("/balances", response_model=PeriodBalancesResponse)
async def get_balances(
    year: Optional[int] = Query(None, ge=1900, le=9999),
    month: Optional[int] = Query(None, ge=1, le=12),
    store: TransactionStore = Depends(get_store),
    db: AsyncSession = Depends(get_db)
):
    """
    Period totals, income distribution and the running balance.
    Defaults to the current month (UTC).
    """
    today = datetime.now(timezone.utc)
    year = year or today.year
    month = month or today.month

    balances = await BalanceCalculator(store).for_period(year, month)
    church = await ensure_church_exists(db, store.church_id)

    return PeriodBalancesResponse(
        year=year,
        month=month,
        currency=church.currency,
        **balances.model_dump(),
    )
