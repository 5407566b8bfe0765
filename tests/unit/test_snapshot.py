"""Unit tests for the per-request financial snapshot"""

import pytest
from wellness_gateway.domain.models import DateWindow, FeeType
from wellness_gateway.domain.snapshot import FinancialSnapshot

from conftest import TODAY

JUNE = DateWindow.preset("month", TODAY)


@pytest.fixture
def snapshot(sample_transactions, sample_categories) -> FinancialSnapshot:
    return FinancialSnapshot(
        user_id="user_1",
        window=JUNE,
        transactions=sample_transactions,
        categories=sample_categories,
        emergency_fund=6000.0,
        category_id="food",
    )


def test_snapshot_key(snapshot: FinancialSnapshot):
    assert snapshot.key == ("user_1", JUNE)
    assert snapshot.as_of == TODAY


def test_stages_are_memoized(snapshot: FinancialSnapshot):
    assert snapshot.aggregate is snapshot.aggregate
    assert snapshot.detected_fees is snapshot.detected_fees
    assert snapshot.health_score is snapshot.health_score


def test_category_filter_narrows_totals_only(snapshot: FinancialSnapshot):
    """Summary totals follow category_id; breakdown and health use the whole window"""
    assert snapshot.aggregate.expenses == 250
    assert snapshot.aggregate.income == 0
    assert [c.category_id for c in snapshot.category_breakdown] == ["housing", "food"]
    assert snapshot.health_metrics.savings_rate == pytest.approx(51.55)
    assert snapshot.health_score.score == 82


def test_detected_fees(snapshot: FinancialSnapshot):
    (fee,) = snapshot.detected_fees

    assert fee.source_transaction_id == "fee1"
    assert fee.fee_type == FeeType.BANK


def test_forecasts_horizon(snapshot: FinancialSnapshot):
    forecasts = snapshot.forecasts(3)
    balance = next(p for p in forecasts if p.kind == "balance")

    assert len(balance.data_points) == 3
