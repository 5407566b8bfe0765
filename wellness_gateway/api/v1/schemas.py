"""Pydantic schemas for API request/response validation"""

import datetime
from pydantic import BaseModel, ConfigDict, Field
from datetime import date
from typing import Dict, List, Optional

from wellness_gateway.domain.models import Feasibility, FeeType, HealthLevel, RiskTolerance, Severity


class DomainSchema(BaseModel):
    """Base for responses built straight from domain dataclasses"""

    model_config = ConfigDict(from_attributes=True)


# Summary


class AggregateSchema(DomainSchema):
    income: float
    expenses: float
    balance: float
    savings_rate: float
    hidden_fees_total: float
    transaction_count: int


class CategoryAmountSchema(DomainSchema):
    category_id: str
    name: str
    amount: float
    color: str


class DailyExpenseSchema(DomainSchema):
    day: date
    amount: float


class SummaryResponse(BaseModel):
    """Response for GET /v1/summary"""

    user_id: str
    start: date
    end: date
    metrics: AggregateSchema
    category_breakdown: List[CategoryAmountSchema]
    daily_expenses: List[DailyExpenseSchema]
    skipped_records: int = 0


# Fees


class DetectedFeeSchema(DomainSchema):
    source_transaction_id: str
    amount: float
    confidence: float
    severity: Severity
    fee_type: FeeType
    category: str
    recurring: bool
    estimated_annual_impact: float
    description: str
    merchant_name: Optional[str] = None
    date: Optional[datetime.date] = None
    matched_categories: List[str] = []


class FeeSummarySchema(DomainSchema):
    total_amount: float
    annual_impact: float
    average_amount: float
    count: int
    critical_count: int
    by_category: Dict[str, float]


class FeeTimelineSchema(DomainSchema):
    month: str
    amount: float
    count: int


class FeesResponse(BaseModel):
    """Response for GET /v1/fees"""

    user_id: str
    fees: List[DetectedFeeSchema]
    summary: FeeSummarySchema
    timeline: List[FeeTimelineSchema]
    skipped_records: int = 0


# Health


class HealthMetricsSchema(DomainSchema):
    savings_rate: float
    emergency_fund_months: float
    budget_adherence: float
    hidden_fee_ratio: float


class HealthScoreResponse(BaseModel):
    """Response for GET /v1/health-score"""

    user_id: str
    start: date
    end: date
    score: int
    level: HealthLevel
    components: Dict[str, float]
    metrics: HealthMetricsSchema
    skipped_records: int = 0


# Predictions


class PredictionSchema(DomainSchema):
    kind: str
    category: str
    current_value: float
    predicted_value: float
    confidence: float
    impact: str
    data_points: List[float]
    recommendations: List[str]


class PredictionsResponse(BaseModel):
    """Response for GET /v1/predictions"""

    user_id: str
    horizon_months: int
    predictions: List[PredictionSchema]
    skipped_records: int = 0


# Simulations


class SimulationParametersSchema(DomainSchema):
    target_amount: float = Field(100_000, description="Goal amount the scenarios are judged against")
    time_horizon_years: int = Field(10, le=100, description="Projection length in years")
    initial_amount: float = 5000.0
    monthly_contribution: float = 500.0
    expected_return_percent: float = Field(7.0, le=1000, description="Annual return in percent")
    inflation_rate_percent: float = Field(2.5, le=1000, description="Annual inflation in percent")
    risk_tolerance: RiskTolerance = RiskTolerance.MODERATE
    goal_type: str = "custom"


class SimulationRequest(BaseModel):
    """Request body for POST /v1/simulations"""

    user_id: Optional[str] = Field(None, min_length=1, description="Required when save is true")
    template_id: Optional[str] = Field(None, description="Goal template whose defaults override parameters")
    parameters: SimulationParametersSchema = SimulationParametersSchema()
    save: bool = False


class ProjectionPointSchema(DomainSchema):
    year: int
    nominal_value: float
    real_value: float
    cumulative_contributions: float
    cumulative_gains: float


class ScenarioSchema(DomainSchema):
    name: str
    return_modifier: float
    contribution_modifier: float
    final_amount: float
    real_final_amount: float
    achievement_percent: float
    feasibility: Feasibility


class SimulationResponse(BaseModel):
    """Response for POST /v1/simulations"""

    simulation_id: Optional[str] = None
    parameters: SimulationParametersSchema
    projection: List[ProjectionPointSchema]
    scenarios: List[ScenarioSchema]


class SavedSimulationResponse(BaseModel):
    """Response for GET /v1/simulations/{simulation_id}"""

    simulation_id: str
    user_id: str
    goal_type: str
    parameters: SimulationParametersSchema
    projection: List[ProjectionPointSchema]
    scenarios: List[dict]
    final_amount: float
    feasibility: Feasibility
    created_at: str


class SimulationHistoryItem(BaseModel):
    """Single saved run in history"""

    simulation_id: str
    goal_type: str
    target_amount: float
    time_horizon_years: int
    final_amount: float
    feasibility: Feasibility
    created_at: str


class SimulationHistoryResponse(BaseModel):
    """Response for GET /v1/simulations/history"""

    user_id: str
    simulations: List[SimulationHistoryItem]


class GoalTemplateSchema(DomainSchema):
    template_id: str
    name: str
    target_amount: float
    time_horizon_years: int
    expected_return_percent: float
    inflation_rate_percent: float


class TemplatesResponse(BaseModel):
    templates: List[GoalTemplateSchema]


# Goals


class GoalInput(BaseModel):
    goal_id: str = Field(..., min_length=1)
    current_amount: float = Field(..., ge=0)
    target_amount: float
    deadline: Optional[date] = None
    monthly_contribution: float = Field(300.0, gt=0)


class GoalsRequest(BaseModel):
    """Request body for POST /v1/goals/progress"""

    goals: List[GoalInput]


class GoalStatusSchema(BaseModel):
    goal_id: str
    progress_percent: float
    remaining_amount: float
    months_needed: Optional[int] = None
    months_until_deadline: Optional[int] = None
    on_track: Optional[bool] = None


class GoalsResponse(BaseModel):
    goals: List[GoalStatusSchema]
