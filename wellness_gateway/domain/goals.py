"""Savings goal progress and time-to-goal estimates"""

import math
from datetime import date
from typing import Optional

from wellness_gateway.domain.exceptions import InvalidSimulationParametersError
from wellness_gateway.domain.models import GoalStatus

DEFAULT_MONTHLY_CONTRIBUTION = 300.0


def goal_progress(current: float, target: float) -> float:
    """Percent of target reached, capped at 100; a non-positive target counts as reached"""
    if target <= 0:
        return 100.0
    return min(current / target * 100, 100.0)


def time_to_goal(
    current: float,
    target: float,
    deadline: Optional[date],
    as_of: date,
    monthly_contribution: float = DEFAULT_MONTHLY_CONTRIBUTION,
) -> GoalStatus:
    """
    Months of contributions still needed versus months left before the deadline.

    Months until the deadline count 30-day blocks, rounded up. Without a
    deadline the on-track verdict is undefined (None).

    Raises:
        InvalidSimulationParametersError: if monthly_contribution is not positive
    """
    if monthly_contribution <= 0:
        raise InvalidSimulationParametersError(
            f"Monthly contribution must be positive, got {monthly_contribution}"
        )

    remaining = max(target - current, 0.0)
    months_needed = math.ceil(remaining / monthly_contribution)

    months_until_deadline = None
    on_track = None
    if deadline is not None:
        months_until_deadline = math.ceil((deadline - as_of).days / 30)
        on_track = months_needed <= months_until_deadline

    return GoalStatus(
        progress_percent=goal_progress(current, target),
        remaining_amount=remaining,
        months_needed=months_needed,
        months_until_deadline=months_until_deadline,
        on_track=on_track,
    )
