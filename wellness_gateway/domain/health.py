"""Health scorer - weighted 0-100 financial health score"""

import math
from typing import Dict, List

from wellness_gateway.domain.models import (
    AggregateMetrics,
    BudgetCategory,
    HealthLevel,
    HealthMetrics,
    HealthScore,
)

BUDGET_TOLERANCE = 1.10
MAX_BUDGET_POINTS = 20


def savings_points(savings_rate: float) -> int:
    """Savings rate in percent: >=20 -> 40, >=10 -> 20, >=0 -> 10"""
    if savings_rate >= 20:
        return 40
    elif savings_rate >= 10:
        return 20
    elif savings_rate >= 0:
        return 10
    return 0


def emergency_points(months_covered: float) -> int:
    if months_covered >= 6:
        return 20
    elif months_covered >= 3:
        return 15
    elif months_covered >= 1:
        return 10
    return 0


def budget_points(adherence: float) -> float:
    if not math.isfinite(adherence):
        return 0.0
    return max(min(adherence, 1.0), 0.0) * MAX_BUDGET_POINTS


def fee_points(hidden_fee_ratio: float) -> int:
    """Hidden fees as a fraction of income: <1% -> 20, <3% -> 15, <5% -> 10"""
    if hidden_fee_ratio < 0.01:
        return 20
    elif hidden_fee_ratio < 0.03:
        return 15
    elif hidden_fee_ratio < 0.05:
        return 10
    return 0


def health_level(score: int) -> HealthLevel:
    if score >= 80:
        return HealthLevel.EXCELLENT
    elif score >= 60:
        return HealthLevel.GOOD
    elif score >= 40:
        return HealthLevel.FAIR
    return HealthLevel.NEEDS_IMPROVEMENT


def score(metrics: HealthMetrics) -> HealthScore:
    """
    Sum the four component scores and clamp to [0, 100].

    Components:
    - savings: up to 40 points
    - emergency_fund: up to 20 points
    - budget_adherence: linear, up to 20 points
    - hidden_fees: up to 20 points

    The fractional budget component is rounded half up once, on the total.
    """
    components: Dict[str, float] = {
        "savings": savings_points(metrics.savings_rate),
        "emergency_fund": emergency_points(metrics.emergency_fund_months),
        "budget_adherence": round(budget_points(metrics.budget_adherence), 3),
        "hidden_fees": fee_points(metrics.hidden_fee_ratio),
    }

    total = (
        components["savings"]
        + components["emergency_fund"]
        + budget_points(metrics.budget_adherence)
        + components["hidden_fees"]
    )
    value = min(max(math.floor(total + 0.5), 0), 100)

    return HealthScore(score=value, components=components, level=health_level(value))


def budget_adherence(categories: List[BudgetCategory]) -> float:
    """Fraction of categories with a budget whose actual spend stays within 110% of it"""
    within = sum(
        1
        for c in categories
        if c.budgeted_amount > 0 and c.actual_amount <= c.budgeted_amount * BUDGET_TOLERANCE
    )
    return within / max(len(categories), 1)


def build_health_metrics(
    aggregate: AggregateMetrics,
    categories: List[BudgetCategory],
    emergency_fund: float = 0.0,
) -> HealthMetrics:
    """Derive scorer inputs from window totals, budgets and the emergency fund balance"""
    emergency_months = emergency_fund / aggregate.expenses if aggregate.expenses > 0 else 0.0
    fee_ratio = aggregate.hidden_fees_total / aggregate.income if aggregate.income > 0 else 0.0

    return HealthMetrics(
        savings_rate=aggregate.savings_rate,
        emergency_fund_months=emergency_months,
        budget_adherence=budget_adherence(categories),
        hidden_fee_ratio=fee_ratio,
    )
