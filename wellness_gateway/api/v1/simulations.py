"""Simulator endpoints - projections, scenarios, goal templates and saved runs"""

import time
import uuid
import logging
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from wellness_gateway.api.v1.schemas import (
    GoalTemplateSchema,
    ProjectionPointSchema,
    SavedSimulationResponse,
    ScenarioSchema,
    SimulationHistoryItem,
    SimulationHistoryResponse,
    SimulationParametersSchema,
    SimulationRequest,
    SimulationResponse,
    TemplatesResponse,
)
from wellness_gateway.api.dependencies import get_request_id
from wellness_gateway.infrastructure.database.session import get_db
from wellness_gateway.infrastructure.database.repositories import SimulationRepository
from wellness_gateway.domain.models import SimulationParameters
from wellness_gateway.domain.projection import GOAL_TEMPLATES, apply_template, project, scenarios
from wellness_gateway.domain.exceptions import InvalidSimulationParametersError
from wellness_gateway.infrastructure.observability.metrics import analysis_counter, simulations_saved_counter
from wellness_gateway.infrastructure.observability.logging import log_analysis

router = APIRouter()


@router.get("/simulations/templates", response_model=TemplatesResponse)
def list_templates():
    """Goal templates with their default target, horizon, return and inflation"""
    return TemplatesResponse(templates=[GoalTemplateSchema.model_validate(t) for t in GOAL_TEMPLATES.values()])


@router.post("/simulations", response_model=SimulationResponse)
def run_simulation(
    request_body: SimulationRequest,
    request: Request,
    db: Session = Depends(get_db),
):
    """
    Project savings growth and evaluate the four fixed scenarios.

    Flow:
    1. Build parameters, overlaying the goal template if one is named
    2. Run the yearly projection and the scenario set
    3. Persist the run when save is requested
    """
    start_time = time.time()
    request_id = get_request_id(request)

    if request_body.save and not request_body.user_id:
        raise HTTPException(status_code=422, detail="user_id is required to save a simulation")

    try:
        params = SimulationParameters(**request_body.parameters.model_dump())
        if request_body.template_id:
            params = apply_template(params, request_body.template_id)

        points = project(params)
        results = scenarios(params)

        simulation_id = None
        if request_body.save:
            repo = SimulationRepository(db)
            db_run = repo.create_run(request_body.user_id, params, points, results)
            simulation_id = str(db_run.id)
            db.commit()
            simulations_saved_counter.inc()

        duration_ms = (time.time() - start_time) * 1000
        analysis_counter.labels(kind="simulation").inc()
        log_analysis(
            request_id,
            request_body.user_id or "anonymous",
            "simulation",
            duration_ms,
            goal_type=params.goal_type,
            final_amount=points[-1].nominal_value,
            saved=simulation_id is not None,
        )

        return SimulationResponse(
            simulation_id=simulation_id,
            parameters=SimulationParametersSchema.model_validate(params),
            projection=[ProjectionPointSchema.model_validate(p) for p in points],
            scenarios=[ScenarioSchema.model_validate(s) for s in results],
        )

    except InvalidSimulationParametersError as e:
        db.rollback()
        logging.warning(f"Invalid simulation parameters: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/simulations/history", response_model=SimulationHistoryResponse)
def get_simulation_history(
    user_id: str = Query(..., description="User identifier"),
    db: Session = Depends(get_db),
):
    """
    Retrieve recent saved simulator runs for a user.

    Returns:
        Runs with their headline (realistic scenario) outcome
    """
    repo = SimulationRepository(db)
    runs = repo.get_runs_by_user(user_id, limit=20)

    items = [
        SimulationHistoryItem(
            simulation_id=str(r.id),
            goal_type=r.goal_type,
            target_amount=r.target_amount,
            time_horizon_years=r.time_horizon_years,
            final_amount=r.final_amount,
            feasibility=r.feasibility,
            created_at=r.created_at.isoformat(),
        )
        for r in runs
    ]

    return SimulationHistoryResponse(user_id=user_id, simulations=items)


@router.get("/simulations/{simulation_id}", response_model=SavedSimulationResponse)
def get_simulation(simulation_id: str, db: Session = Depends(get_db)):
    """Retrieve one saved run with its full projection"""
    try:
        run_uuid = uuid.UUID(simulation_id)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid simulation ID format")

    repo = SimulationRepository(db)
    run = repo.get_run_by_id(run_uuid)

    if not run:
        raise HTTPException(status_code=404, detail="Simulation not found")

    return SavedSimulationResponse(
        simulation_id=str(run.id),
        user_id=run.user_id,
        goal_type=run.goal_type,
        parameters=SimulationParametersSchema(**run.parameters),
        projection=[ProjectionPointSchema(**p) for p in run.projection],
        scenarios=run.scenarios,
        final_amount=run.final_amount,
        feasibility=run.feasibility,
        created_at=run.created_at.isoformat(),
    )
