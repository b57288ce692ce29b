"""
Finance module - church ledger.

This module handles:
- Entries (tithes, offerings, campaigns, donations)
- Expenses
- Balances and income distribution
- Live transaction feed
"""
from fastapi import APIRouter

from churchledger.api.v1.finance.transactions import router as transactions_router
from churchledger.api.v1.finance.balances import router as balances_router

finance_router = APIRouter(prefix="/finance", tags=["finance"])

# Routes will be: /api/v1/finance/transactions, /api/v1/finance/entries, /api/v1/finance/balances
finance_router.include_router(transactions_router)
finance_router.include_router(balances_router)

__all__ = [
    "finance_router",
]
