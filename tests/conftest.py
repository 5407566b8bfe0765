"""Pytest fixtures for testing"""

import os

# Point settings at SQLite before the app modules build their engine
os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")

import pytest
from datetime import date
from typing import Generator
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker, Session
from wellness_gateway.api.main import create_app
from wellness_gateway.api.dependencies import get_today
from wellness_gateway.infrastructure.database.models import Base
from wellness_gateway.infrastructure.database.session import build_engine, get_db, init_db
from wellness_gateway.domain.models import BudgetCategory, CategoryType, Transaction, TransactionType


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = build_engine(TEST_DATABASE_URL)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Fixed reference date so windows and timelines are reproducible
TODAY = date(2024, 6, 30)


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    init_db(engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def app(db: Session):
    """FastAPI app wired to the test database and a fixed 'today'"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_today] = lambda: TODAY
    return app


@pytest.fixture
def client(app) -> TestClient:
    """Create FastAPI test client with test database"""
    return TestClient(app)


def make_transaction(
    transaction_id: str,
    amount: float,
    type: TransactionType = TransactionType.EXPENSE,
    day: date = TODAY,
    description: str = "",
    merchant_name: str | None = None,
    category_id: str | None = None,
    is_hidden_fee: bool = False,
) -> Transaction:
    return Transaction(
        transaction_id=transaction_id,
        amount=amount,
        type=type,
        date=day,
        description=description,
        merchant_name=merchant_name,
        category_id=category_id,
        is_hidden_fee=is_hidden_fee,
    )


@pytest.fixture
def sample_transactions() -> list[Transaction]:
    """One month of salary, rent, groceries and a bank fee"""
    return [
        make_transaction("inc1", 3000.0, TransactionType.INCOME, date(2024, 6, 1), "Salary", category_id="income"),
        make_transaction("rent", 1200.0, day=date(2024, 6, 2), description="Rent", merchant_name="Landlord", category_id="housing"),
        make_transaction("food1", 150.0, day=date(2024, 6, 8), description="Groceries", merchant_name="Market", category_id="food"),
        make_transaction("food2", 100.0, day=date(2024, 6, 22), description="Groceries", merchant_name="Market", category_id="food"),
        make_transaction(
            "fee1",
            3.5,
            day=date(2024, 6, 15),
            description="frais de tenue de compte",
            merchant_name="Banque",
            category_id="bank",
            is_hidden_fee=True,
        ),
        make_transaction("save", 500.0, TransactionType.TRANSFER, date(2024, 6, 16), "To savings"),
    ]


@pytest.fixture
def sample_categories() -> list[BudgetCategory]:
    return [
        BudgetCategory("housing", "Housing", CategoryType.FIXED_EXPENSE, 1200.0, 1200.0, "#3B82F6"),
        BudgetCategory("food", "Food", CategoryType.VARIABLE_EXPENSE, 200.0, 250.0, "#10B981"),
        BudgetCategory("fun", "Leisure", CategoryType.VARIABLE_EXPENSE, 0.0, 40.0, "#F59E0B"),
    ]
