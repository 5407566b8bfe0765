"""Per-request computation object memoizing each stage over one user's records"""

from dataclasses import dataclass, field
from datetime import date
from functools import cached_property
from typing import List, Optional, Tuple

from wellness_gateway.domain import aggregation, fees, health, predictions
from wellness_gateway.domain.models import (
    AggregateMetrics,
    BudgetCategory,
    CategoryAmount,
    DailyExpense,
    DateWindow,
    DetectedFee,
    HealthMetrics,
    HealthScore,
    Prediction,
    Transaction,
)


@dataclass
class FinancialSnapshot:
    """
    Records fetched for one (user_id, window) request.

    Each stage runs at most once per snapshot. A snapshot lives for a single
    request; nothing is shared between requests.
    """

    user_id: str
    window: DateWindow
    transactions: List[Transaction]
    categories: List[BudgetCategory] = field(default_factory=list)
    emergency_fund: float = 0.0
    skipped_records: int = 0
    category_id: Optional[str] = None
    include_hidden_fees: bool = True

    @property
    def key(self) -> Tuple[str, DateWindow]:
        return (self.user_id, self.window)

    @property
    def as_of(self) -> date:
        return self.window.end

    @cached_property
    def aggregate(self) -> AggregateMetrics:
        return aggregation.aggregate(
            self.transactions,
            self.window,
            category_id=self.category_id,
            include_hidden_fees=self.include_hidden_fees,
        )

    @cached_property
    def window_transactions(self) -> List[Transaction]:
        return [t for t in self.transactions if self.window.contains(t.date)]

    @cached_property
    def category_breakdown(self) -> List[CategoryAmount]:
        return aggregation.category_breakdown(self.window_transactions, self.categories)

    @cached_property
    def daily_expenses(self) -> List[DailyExpense]:
        return aggregation.daily_expenses(self.transactions, self.as_of)

    @cached_property
    def detected_fees(self) -> List[DetectedFee]:
        return fees.detect(self.transactions)

    @cached_property
    def health_metrics(self) -> HealthMetrics:
        # Health is judged on the full window, not a single category's slice
        totals = aggregation.aggregate(self.transactions, self.window)
        return health.build_health_metrics(totals, self.categories, self.emergency_fund)

    @cached_property
    def health_score(self) -> HealthScore:
        return health.score(self.health_metrics)

    def forecasts(self, horizon: int = predictions.PROJECTION_MONTHS) -> List[Prediction]:
        return predictions.predict_all(self.transactions, self.categories, self.as_of, horizon)
