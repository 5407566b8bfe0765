"""Domain models - pure Python dataclasses representing business entities"""

import datetime
from dataclasses import dataclass, field
from datetime import date, timedelta
from enum import Enum
from typing import Dict, List, Optional

from wellness_gateway.utils.date_utils import add_months


class TransactionType(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"
    TRANSFER = "transfer"


class CategoryType(str, Enum):
    INCOME = "income"
    FIXED_EXPENSE = "fixed_expense"
    VARIABLE_EXPENSE = "variable_expense"
    DEBT = "debt"
    INVESTMENT = "investment"


class RiskTolerance(str, Enum):
    CONSERVATIVE = "conservative"
    MODERATE = "moderate"
    AGGRESSIVE = "aggressive"


class Severity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return list(Severity).index(self)


class FeeType(str, Enum):
    BANK = "bank"
    SUBSCRIPTION = "subscription"
    SERVICE = "service"
    FOREIGN_EXCHANGE = "foreign_exchange"
    PENALTY = "penalty"


class Feasibility(str, Enum):
    EXCELLENT = "excellent"
    GOOD = "good"
    CHALLENGING = "challenging"
    UNREALISTIC = "unrealistic"


class HealthLevel(str, Enum):
    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    NEEDS_IMPROVEMENT = "needs_improvement"


@dataclass(frozen=True)
class Transaction:
    """Ledger transaction from the storage collaborator (read-only)"""

    transaction_id: str
    amount: float  # non-negative magnitude; direction comes from type
    type: TransactionType
    date: date
    description: str = ""
    merchant_name: Optional[str] = None
    category_id: Optional[str] = None
    is_hidden_fee: bool = False
    is_recurring: bool = False
    confidence: Optional[float] = None


@dataclass(frozen=True)
class BudgetCategory:
    """User budget line with planned and realised amounts"""

    category_id: str
    name: str
    type: CategoryType
    budgeted_amount: float
    actual_amount: float = 0.0
    color: str = "#808080"
    icon: str = ""


@dataclass(frozen=True)
class DateWindow:
    """Inclusive [start, end] date range"""

    start: date
    end: date

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end

    @classmethod
    def preset(cls, name: str, as_of: date) -> "DateWindow":
        """
        Build a window ending at as_of.

        week: 7 days back, month: one calendar month back, year: twelve months back.
        """
        if name == "week":
            return cls(as_of - timedelta(days=7), as_of)
        if name == "month":
            return cls(add_months(as_of, -1), as_of)
        if name == "year":
            return cls(add_months(as_of, -12), as_of)
        raise ValueError(f"Unknown window preset: {name}")


@dataclass
class AggregateMetrics:
    """Totals over a date window"""

    income: float
    expenses: float
    balance: float
    savings_rate: float  # percent
    hidden_fees_total: float
    transaction_count: int


@dataclass
class SimulationParameters:
    target_amount: float
    time_horizon_years: int
    initial_amount: float = 5000.0
    monthly_contribution: float = 500.0
    expected_return_percent: float = 7.0
    inflation_rate_percent: float = 2.5
    risk_tolerance: RiskTolerance = RiskTolerance.MODERATE
    goal_type: str = "custom"


@dataclass
class ProjectionPoint:
    year: int
    nominal_value: float
    real_value: float
    cumulative_contributions: float
    cumulative_gains: float


@dataclass
class ScenarioResult:
    """Projection outcome under one named return/contribution modifier pair"""

    name: str
    return_modifier: float
    contribution_modifier: float
    final_amount: float
    real_final_amount: float
    achievement_percent: float
    feasibility: Feasibility
    projection: List[ProjectionPoint] = field(default_factory=list)


@dataclass
class GoalTemplate:
    template_id: str
    name: str
    target_amount: float
    time_horizon_years: int
    expected_return_percent: float
    inflation_rate_percent: float


@dataclass
class DetectedFee:
    """One (transaction, fee category) match produced by the detector"""

    source_transaction_id: str
    amount: float
    confidence: float
    severity: Severity
    fee_type: FeeType
    category: str
    recurring: bool
    estimated_annual_impact: float
    description: str = ""
    merchant_name: Optional[str] = None
    date: Optional[datetime.date] = None
    matched_categories: List[str] = field(default_factory=list)


@dataclass
class FeeSummary:
    total_amount: float
    annual_impact: float
    average_amount: float
    count: int
    critical_count: int
    by_category: Dict[str, float]


@dataclass
class FeeTimelinePoint:
    month: str  # YYYY-MM
    amount: float
    count: int


@dataclass
class HealthMetrics:
    """Inputs to the health scorer"""

    savings_rate: float  # percent
    emergency_fund_months: float
    budget_adherence: float  # fraction 0..1
    hidden_fee_ratio: float  # hidden fees / income, fraction


@dataclass
class HealthScore:
    score: int
    components: Dict[str, float]
    level: HealthLevel


@dataclass
class CategoryAmount:
    category_id: str
    name: str
    amount: float
    color: str = "#808080"


@dataclass
class DailyExpense:
    day: date
    amount: float


@dataclass
class Prediction:
    """Forward estimate for income, a spending category, or balance"""

    kind: str  # income | expense | balance
    category: str
    current_value: float
    predicted_value: float
    confidence: float
    impact: str  # positive | negative
    data_points: List[float] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)


@dataclass
class GoalStatus:
    progress_percent: float
    remaining_amount: float
    months_needed: Optional[int]
    months_until_deadline: Optional[int]
    on_track: Optional[bool]
