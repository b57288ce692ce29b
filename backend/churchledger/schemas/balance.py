"""
Pydantic schemas for derived balances.
"""
from decimal import Decimal
from pydantic import BaseModel


class IncomeShare(BaseModel):
    """Income of one category within the period."""
    category: str
    amount: Decimal
    percent: int


class Balances(BaseModel):
    """Period totals plus the running balance of the whole history."""
    period_income: Decimal
    period_expense: Decimal
    period_net: Decimal
    aggregate_balance: Decimal
    income_distribution: list[IncomeShare]


class PeriodBalancesResponse(Balances):
    year: int
    month: int
    currency: str
