"""Unit tests for the health scorer"""

import itertools
import pytest
from wellness_gateway.domain.health import (
    budget_adherence,
    build_health_metrics,
    health_level,
    score,
)
from wellness_gateway.domain.models import (
    AggregateMetrics,
    BudgetCategory,
    CategoryType,
    HealthLevel,
    HealthMetrics,
)


def test_perfect_score():
    result = score(HealthMetrics(savings_rate=20, emergency_fund_months=6, budget_adherence=1.0, hidden_fee_ratio=0.0))

    assert result.score == 100
    assert result.level == HealthLevel.EXCELLENT
    assert result.components == {"savings": 40, "emergency_fund": 20, "budget_adherence": 20.0, "hidden_fees": 20}


def test_just_below_every_threshold():
    result = score(HealthMetrics(savings_rate=19.99, emergency_fund_months=5.99, budget_adherence=0.5, hidden_fee_ratio=0.01))

    assert result.components == {"savings": 20, "emergency_fund": 15, "budget_adherence": 10.0, "hidden_fees": 15}
    assert result.score == 60
    assert result.level == HealthLevel.GOOD


def test_lowest_tiers():
    result = score(HealthMetrics(savings_rate=0, emergency_fund_months=1, budget_adherence=0, hidden_fee_ratio=0.049))

    assert result.score == 30
    assert result.level == HealthLevel.NEEDS_IMPROVEMENT


def test_zero_score():
    result = score(HealthMetrics(savings_rate=-5, emergency_fund_months=0.5, budget_adherence=0, hidden_fee_ratio=0.2))

    assert result.score == 0
    assert result.components == {"savings": 0, "emergency_fund": 0, "budget_adherence": 0.0, "hidden_fees": 0}


def test_fractional_budget_points_rounded_on_total():
    """1/3 adherence adds 6.67 points: 20 + 15 + 6.67 + 10 = 51.67 -> 52"""
    result = score(HealthMetrics(savings_rate=10, emergency_fund_months=3, budget_adherence=1 / 3, hidden_fee_ratio=0.03))

    assert result.score == 52
    assert result.components["budget_adherence"] == pytest.approx(6.667)


def test_half_point_rounds_up():
    result = score(HealthMetrics(savings_rate=0, emergency_fund_months=0, budget_adherence=0.025, hidden_fee_ratio=0.05))

    assert result.score == 11


def test_score_is_idempotent():
    metrics = HealthMetrics(savings_rate=12, emergency_fund_months=2, budget_adherence=0.4, hidden_fee_ratio=0.02)

    assert score(metrics) == score(metrics)


def test_score_bounds_over_grid():
    grid = itertools.product(
        [-50, -0.1, 0, 9.9, 10, 20, 300],
        [0, 0.9, 1, 3, 6, 100],
        [-1, 0, 0.33, 1, 2, float("nan")],
        [0, 0.009, 0.029, 0.049, 1, float("nan")],
    )
    for savings, emergency, adherence, fee_ratio in grid:
        result = score(HealthMetrics(savings, emergency, adherence, fee_ratio))
        assert 0 <= result.score <= 100
        assert isinstance(result.score, int)


@pytest.mark.parametrize(
    "value,level",
    [
        (100, HealthLevel.EXCELLENT),
        (80, HealthLevel.EXCELLENT),
        (79, HealthLevel.GOOD),
        (60, HealthLevel.GOOD),
        (59, HealthLevel.FAIR),
        (40, HealthLevel.FAIR),
        (39, HealthLevel.NEEDS_IMPROVEMENT),
        (0, HealthLevel.NEEDS_IMPROVEMENT),
    ],
)
def test_health_level(value, level):
    assert health_level(value) == level


def test_budget_adherence(sample_categories):
    """Housing on budget, food 25% over, leisure has no budget: 1 of 3"""
    assert budget_adherence(sample_categories) == pytest.approx(1 / 3)


def test_budget_adherence_tolerance_is_inclusive():
    categories = [
        BudgetCategory("a", "A", CategoryType.VARIABLE_EXPENSE, 100.0, 110.0),
        BudgetCategory("b", "B", CategoryType.VARIABLE_EXPENSE, 100.0, 110.01),
    ]

    assert budget_adherence(categories) == 0.5


def test_budget_adherence_no_categories():
    assert budget_adherence([]) == 0


def test_build_health_metrics(sample_categories):
    totals = AggregateMetrics(
        income=3000, expenses=1500, balance=1500, savings_rate=50, hidden_fees_total=15, transaction_count=10
    )
    metrics = build_health_metrics(totals, sample_categories, emergency_fund=6000)

    assert metrics.savings_rate == 50
    assert metrics.emergency_fund_months == 4
    assert metrics.budget_adherence == pytest.approx(1 / 3)
    assert metrics.hidden_fee_ratio == 0.005

    result = score(metrics)
    assert result.score == 82
    assert result.level == HealthLevel.EXCELLENT


def test_build_health_metrics_without_income_or_expenses():
    totals = AggregateMetrics(
        income=0, expenses=0, balance=0, savings_rate=0, hidden_fees_total=12, transaction_count=0
    )
    metrics = build_health_metrics(totals, [], emergency_fund=5000)

    assert metrics.emergency_fund_months == 0
    assert metrics.hidden_fee_ratio == 0
    assert metrics.budget_adherence == 0
