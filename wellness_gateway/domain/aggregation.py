"""Aggregator - income, expenses, balance and savings rate over a date window"""

import math
from collections import defaultdict
from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional

from wellness_gateway.domain.models import (
    AggregateMetrics,
    BudgetCategory,
    CategoryAmount,
    DailyExpense,
    DateWindow,
    Transaction,
    TransactionType,
)
from wellness_gateway.utils.date_utils import generate_date_range

UNCATEGORIZED = "uncategorized"


def safe_amount(value: float) -> float:
    """Non-finite amounts contribute nothing to a sum"""
    try:
        value = float(value)
    except (TypeError, ValueError):
        return 0.0
    return value if math.isfinite(value) else 0.0


def _total(transactions: Iterable[Transaction]) -> float:
    return sum(safe_amount(t.amount) for t in transactions)


def aggregate(
    transactions: List[Transaction],
    window: DateWindow,
    category_id: Optional[str] = None,
    include_hidden_fees: bool = True,
) -> AggregateMetrics:
    """
    Compute income, expenses, balance and savings rate inside a window.

    The category filter and the hidden-fee flag narrow the totals, but
    hidden_fees_total is always taken over every transaction in the window
    so the fee burden is visible even when fees are excluded from spending.
    """
    in_window = [t for t in transactions if window.contains(t.date)]

    selected = in_window
    if category_id is not None:
        selected = [t for t in selected if t.category_id == category_id]
    if not include_hidden_fees:
        selected = [t for t in selected if not t.is_hidden_fee]

    income = _total(t for t in selected if t.type == TransactionType.INCOME)
    expenses = _total(t for t in selected if t.type == TransactionType.EXPENSE)
    balance = income - expenses

    # Division by zero: no income means no meaningful savings rate
    savings_rate = balance / income * 100 if income > 0 else 0.0

    hidden_fees_total = _total(t for t in in_window if t.is_hidden_fee)

    return AggregateMetrics(
        income=income,
        expenses=expenses,
        balance=balance,
        savings_rate=savings_rate,
        hidden_fees_total=hidden_fees_total,
        transaction_count=len(selected),
    )


def spending_by_category(transactions: List[Transaction]) -> Dict[str, float]:
    """Expense totals keyed by category id"""
    totals: Dict[str, float] = defaultdict(float)
    for t in transactions:
        if t.type == TransactionType.EXPENSE:
            totals[t.category_id or UNCATEGORIZED] += safe_amount(t.amount)
    return dict(totals)


def category_breakdown(
    transactions: List[Transaction],
    categories: List[BudgetCategory],
) -> List[CategoryAmount]:
    """Spending per budget category, for categories that saw any spending"""
    totals = spending_by_category(transactions)
    breakdown = [
        CategoryAmount(
            category_id=c.category_id,
            name=c.name,
            amount=totals[c.category_id],
            color=c.color,
        )
        for c in categories
        if totals.get(c.category_id, 0) > 0
    ]
    return sorted(breakdown, key=lambda item: item.amount, reverse=True)


def daily_expenses(transactions: List[Transaction], end: date, days: int = 30) -> List[DailyExpense]:
    """Dense per-day expense series covering the last `days` days up to end"""
    start = end - timedelta(days=days - 1)
    by_day: Dict[date, float] = defaultdict(float)
    for t in transactions:
        if t.type == TransactionType.EXPENSE and start <= t.date <= end:
            by_day[t.date] += safe_amount(t.amount)

    return [DailyExpense(day=day, amount=by_day.get(day, 0.0)) for day in generate_date_range(start, end)]
