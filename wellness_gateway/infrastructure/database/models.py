"""SQLAlchemy ORM models for saved simulator runs"""

import uuid
from sqlalchemy import Column, DateTime, Float, Integer, JSON, Text, Uuid
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


class SimulationRun(Base):
    """One projection + scenario run saved from the simulator"""

    __tablename__ = "simulation_run"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Text, nullable=False, index=True)
    goal_type = Column(Text, nullable=False, default="custom")
    time_horizon_years = Column(Integer, nullable=False)
    target_amount = Column(Float, nullable=False)
    parameters = Column(JSON, nullable=False)
    projection = Column(JSON, nullable=False)
    scenarios = Column(JSON, nullable=False)
    final_amount = Column(Float, nullable=False)
    feasibility = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
