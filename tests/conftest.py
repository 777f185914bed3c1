"""Shared fixtures: a throwaway SQLite ledger per test."""

import pytest
from datetime import date

from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from app.core.config import Settings
from app.db.session import Database
from app.domain.accounting import code_service, fiscal_year_service


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Settings pointing at a file database inside the test's tmp dir."""
    return Settings(
        _env_file=None,
        database_url=f"sqlite:///{tmp_path / 'ledger.db'}",
        log_level="DEBUG",
    )


@pytest.fixture
def database(settings: Settings) -> Database:
    database = Database(settings)
    database.create_schema()
    yield database
    database.dispose()


@pytest.fixture
def db(database: Database) -> Session:
    """Provide database session for tests."""
    db = database.session()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def client(settings: Settings) -> TestClient:
    """API client; entering the context runs startup, which creates the schema."""
    from app.main import create_app

    with TestClient(create_app(settings)) as client:
        yield client


@pytest.fixture
def chart(db: Session) -> dict:
    """Three groups with one leaf general code each."""
    def create(**data):
        return code_service.create_or_update_code(db, data)

    assets = create(code="10", title="Assets", nature=0, category="asset")
    revenue = create(code="40", title="Revenue", nature=1, category="revenue")
    expenses = create(code="50", title="Expenses", nature=0, category="expense")

    return {
        "assets": assets,
        "revenue": revenue,
        "expenses": expenses,
        "cash": create(code="1000", title="Cash", parent_id=assets.id, nature=0),
        "sales": create(code="4000", title="Sales", parent_id=revenue.id, nature=1),
        "expense": create(code="5000", title="Expense", parent_id=expenses.id, nature=0),
    }


@pytest.fixture
def fiscal_year(db: Session):
    return fiscal_year_service.create_fiscal_year(
        db, "FY 2031", date(2031, 4, 1), date(2032, 3, 20)
    )
