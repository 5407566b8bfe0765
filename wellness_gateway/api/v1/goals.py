"""POST /v1/goals/progress - Savings goal progress and time-to-goal"""

import logging
from datetime import date
from fastapi import APIRouter, Depends, HTTPException, Request

from wellness_gateway.api.v1.schemas import GoalsRequest, GoalsResponse, GoalStatusSchema
from wellness_gateway.api.dependencies import get_request_id, get_today
from wellness_gateway.domain.goals import time_to_goal
from wellness_gateway.domain.exceptions import InvalidSimulationParametersError
from wellness_gateway.infrastructure.observability.metrics import analysis_counter

router = APIRouter()


@router.post("/goals/progress", response_model=GoalsResponse)
def evaluate_goals(
    request_body: GoalsRequest,
    request: Request,
    today: date = Depends(get_today),
):
    """Progress percentage and on-track verdict for each goal"""
    request_id = get_request_id(request)

    try:
        statuses = []
        for goal in request_body.goals:
            status = time_to_goal(
                goal.current_amount,
                goal.target_amount,
                goal.deadline,
                today,
                monthly_contribution=goal.monthly_contribution,
            )
            statuses.append(
                GoalStatusSchema(
                    goal_id=goal.goal_id,
                    progress_percent=status.progress_percent,
                    remaining_amount=status.remaining_amount,
                    months_needed=status.months_needed,
                    months_until_deadline=status.months_until_deadline,
                    on_track=status.on_track,
                )
            )
    except InvalidSimulationParametersError as e:
        logging.warning(f"Invalid goal: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    analysis_counter.labels(kind="goals").inc()
    return GoalsResponse(goals=statuses)
