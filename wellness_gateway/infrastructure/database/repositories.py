"""Data access layer for saved simulation runs"""

import uuid
from dataclasses import asdict
from typing import List, Optional
from sqlalchemy.orm import Session
from wellness_gateway.infrastructure.database.models import SimulationRun
from wellness_gateway.domain.models import ProjectionPoint, ScenarioResult, SimulationParameters


def _scenario_row(result: ScenarioResult) -> dict:
    return {
        "name": result.name,
        "final_amount": result.final_amount,
        "real_final_amount": result.real_final_amount,
        "achievement_percent": result.achievement_percent,
        "feasibility": result.feasibility.value,
    }


class SimulationRepository:
    """Repository for simulator runs"""

    def __init__(self, db: Session):
        self.db = db

    def create_run(
        self,
        user_id: str,
        params: SimulationParameters,
        projection: List[ProjectionPoint],
        scenarios: List[ScenarioResult],
    ) -> SimulationRun:
        """Persist a run; the realistic scenario supplies the headline figures"""
        headline = next((s for s in scenarios if s.name == "realistic"), scenarios[0])
        parameters = asdict(params)
        parameters["risk_tolerance"] = params.risk_tolerance.value

        db_run = SimulationRun(
            user_id=user_id,
            goal_type=params.goal_type,
            time_horizon_years=params.time_horizon_years,
            target_amount=params.target_amount,
            parameters=parameters,
            projection=[asdict(point) for point in projection],
            scenarios=[_scenario_row(s) for s in scenarios],
            final_amount=headline.final_amount,
            feasibility=headline.feasibility.value,
        )
        self.db.add(db_run)
        self.db.flush()  # Get ID without committing
        return db_run

    def get_runs_by_user(self, user_id: str, limit: int = 20) -> List[SimulationRun]:
        """Fetch recent runs for a user"""
        return (
            self.db.query(SimulationRun)
            .filter(SimulationRun.user_id == user_id)
            .order_by(SimulationRun.created_at.desc())
            .limit(limit)
            .all()
        )

    def get_run_by_id(self, run_id: uuid.UUID) -> Optional[SimulationRun]:
        return (
            self.db.query(SimulationRun)
            .filter(SimulationRun.id == run_id)
            .first()
        )
