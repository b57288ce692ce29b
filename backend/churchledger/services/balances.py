"""
Balance calculations for the finance dashboard.

Provides:
- Period totals (income, expense, net) for a working set of transactions
- The running balance over the church's whole history
- Income distribution by category within the period
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable

from churchledger.schemas.balance import Balances, IncomeShare
from churchledger.schemas.transaction import EntryRecord, ExpenseRecord, TransactionRecord
from churchledger.services.normalization import normalize

ZERO = Decimal("0")


def _percent(amount: Decimal, total: Decimal) -> int:
    """Share of ``total`` as a whole percentage, rounding halves up."""
    if total <= 0:
        return 0
    return int((amount * 100 / total).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def compute_balances(
    period_transactions: Iterable[TransactionRecord],
    all_transactions: Iterable[TransactionRecord],
) -> Balances:
    """
    Compute period and aggregate balances.

    ``all_transactions`` is expected to contain ``period_transactions``; this
    is not checked.

    Args:
        period_transactions: Transactions of the reporting period
        all_transactions: Every transaction of the church

    Returns:
        Balances with the income distribution sorted by amount, largest first
    """
    period_income = ZERO
    period_expense = ZERO
    by_category: dict[str, Decimal] = {}

    for t in period_transactions:
        if isinstance(t, EntryRecord):
            period_income += t.amount
            category = normalize(t.category)
            by_category[category] = by_category.get(category, ZERO) + t.amount
        elif isinstance(t, ExpenseRecord):
            period_expense += t.amount

    aggregate = ZERO
    for t in all_transactions:
        if isinstance(t, EntryRecord):
            aggregate += t.amount
        elif isinstance(t, ExpenseRecord):
            aggregate -= t.amount

    # sorted() is stable: equal amounts keep first-seen order
    distribution = sorted(
        (
            IncomeShare(category=category, amount=amount, percent=_percent(amount, period_income))
            for category, amount in by_category.items()
        ),
        key=lambda share: share.amount,
        reverse=True,
    )

    return Balances(
        period_income=period_income,
        period_expense=period_expense,
        period_net=period_income - period_expense,
        aggregate_balance=aggregate,
        income_distribution=distribution,
    )


class BalanceCalculator:
    """Loads a church's transactions through a store and computes balances."""

    def __init__(self, store):
        self.store = store

    async def for_period(self, year: int, month: int) -> Balances:
        period = await self.store.list_by_period(year, month)
        history = await self.store.list_all()
        return compute_balances(period, history)
