"""Projection engine - compound-interest projections, scenarios and goal templates"""

import math
from dataclasses import replace
from typing import Dict, List

from wellness_gateway.domain.exceptions import InvalidSimulationParametersError
from wellness_gateway.domain.models import (
    Feasibility,
    GoalTemplate,
    ProjectionPoint,
    ScenarioResult,
    SimulationParameters,
)

# (name, return multiplier, contribution multiplier), best case first
SCENARIO_MODIFIERS = [
    ("optimistic", 1.2, 1.1),
    ("realistic", 1.0, 1.0),
    ("conservative", 0.8, 0.9),
    ("pessimistic", 0.6, 0.8),
]

MAX_HORIZON_YEARS = 100

# Lower bounds in percent of target, inclusive, checked top-down
FEASIBILITY_THRESHOLDS = [
    (100.0, Feasibility.EXCELLENT),
    (80.0, Feasibility.GOOD),
    (60.0, Feasibility.CHALLENGING),
]

GOAL_TEMPLATES: Dict[str, GoalTemplate] = {
    t.template_id: t
    for t in [
        GoalTemplate("retirement", "Retirement", 500_000, 30, 7.0, 2.5),
        GoalTemplate("house_purchase", "House purchase", 300_000, 10, 4.0, 2.0),
        GoalTemplate("education_fund", "Education fund", 50_000, 18, 5.0, 2.5),
        GoalTemplate("emergency_fund", "Emergency fund", 20_000, 2, 2.5, 2.0),
        GoalTemplate("car_purchase", "Car purchase", 25_000, 3, 3.0, 2.0),
        GoalTemplate("travel_fund", "Travel fund", 10_000, 2, 3.0, 2.0),
    ]
}


def validate_parameters(params: SimulationParameters) -> None:
    """
    Reject parameters that would make the compounding loop meaningless.

    Raises:
        InvalidSimulationParametersError: on a horizon outside 1..MAX_HORIZON_YEARS,
            a monthly rate at or below -100%, inflation at or below -100%,
            negative amounts, or non-finite values
    """
    numbers = [
        params.initial_amount,
        params.monthly_contribution,
        params.expected_return_percent,
        params.inflation_rate_percent,
    ]
    if not all(math.isfinite(n) for n in numbers):
        raise InvalidSimulationParametersError("Simulation parameters must be finite numbers")
    if not 0 < params.time_horizon_years <= MAX_HORIZON_YEARS:
        raise InvalidSimulationParametersError(
            f"Time horizon must be between 1 and {MAX_HORIZON_YEARS} years, got {params.time_horizon_years}"
        )
    if params.expected_return_percent / 100 / 12 <= -1:
        raise InvalidSimulationParametersError(
            f"Expected return of {params.expected_return_percent}% gives a monthly rate at or below -100%"
        )
    if params.inflation_rate_percent <= -100:
        raise InvalidSimulationParametersError(
            f"Inflation rate must be above -100%, got {params.inflation_rate_percent}"
        )
    if params.initial_amount < 0 or params.monthly_contribution < 0:
        raise InvalidSimulationParametersError("Initial amount and monthly contribution cannot be negative")


def project(params: SimulationParameters) -> List[ProjectionPoint]:
    """
    Compound monthly over the horizon and emit one point per year, year 0 included.

    Each month: amount = amount * (1 + r) + contribution, r = annual% / 100 / 12.
    Real value discounts the nominal value by yearly inflation. Gains are not
    clamped, so negative returns show up as negative gains.

    Raises:
        InvalidSimulationParametersError: if the parameters are out of range or
            the values overflow a float
    """
    validate_parameters(params)

    monthly_rate = params.expected_return_percent / 100 / 12
    inflation = params.inflation_rate_percent / 100
    months = params.time_horizon_years * 12

    amount = params.initial_amount
    points = []
    for month in range(months + 1):
        if month > 0:
            amount = amount * (1 + monthly_rate) + params.monthly_contribution

        if month % 12 == 0:
            year = month // 12
            try:
                real_value = amount / (1 + inflation) ** year
            except OverflowError as e:
                raise InvalidSimulationParametersError(
                    f"Inflation of {params.inflation_rate_percent}% overflows by year {year}"
                ) from e
            if not (math.isfinite(amount) and math.isfinite(real_value)):
                raise InvalidSimulationParametersError(
                    f"Projection overflows by year {year}; expected return or horizon is too large"
                )
            contributions = params.initial_amount + params.monthly_contribution * month
            points.append(
                ProjectionPoint(
                    year=year,
                    nominal_value=amount,
                    real_value=real_value,
                    cumulative_contributions=contributions,
                    cumulative_gains=amount - contributions,
                )
            )

    return points


def classify_feasibility(final_amount: float, target_amount: float) -> tuple[float, Feasibility]:
    """Map final/target percentage to a feasibility bucket. Returns (percent, bucket)"""
    achievement = final_amount / target_amount * 100
    for lower_bound, feasibility in FEASIBILITY_THRESHOLDS:
        if achievement >= lower_bound:
            return achievement, feasibility
    return achievement, Feasibility.UNREALISTIC


def scenarios(base: SimulationParameters) -> List[ScenarioResult]:
    """
    Rerun the projection under each fixed modifier pair, best case first.

    "Best case first" assumes a non-negative expected return. With a negative
    return the optimistic return multiplier deepens the loss, so the order of
    final amounts reverses when contributions are zero.
    """
    if not math.isfinite(base.target_amount) or base.target_amount <= 0:
        raise InvalidSimulationParametersError(
            f"Target amount must be positive, got {base.target_amount}"
        )

    results = []
    for name, return_modifier, contribution_modifier in SCENARIO_MODIFIERS:
        params = replace(
            base,
            expected_return_percent=base.expected_return_percent * return_modifier,
            monthly_contribution=base.monthly_contribution * contribution_modifier,
        )
        points = project(params)
        final = points[-1]
        achievement, feasibility = classify_feasibility(final.nominal_value, base.target_amount)
        results.append(
            ScenarioResult(
                name=name,
                return_modifier=return_modifier,
                contribution_modifier=contribution_modifier,
                final_amount=final.nominal_value,
                real_final_amount=final.real_value,
                achievement_percent=achievement,
                feasibility=feasibility,
                projection=points,
            )
        )

    return results


def apply_template(params: SimulationParameters, template_id: str) -> SimulationParameters:
    """Overlay a goal template's target, horizon, return and inflation on params"""
    template = GOAL_TEMPLATES.get(template_id)
    if template is None:
        raise InvalidSimulationParametersError(f"Unknown goal template: {template_id}")

    return replace(
        params,
        target_amount=template.target_amount,
        time_horizon_years=template.time_horizon_years,
        expected_return_percent=template.expected_return_percent,
        inflation_rate_percent=template.inflation_rate_percent,
        goal_type=template.template_id,
    )
