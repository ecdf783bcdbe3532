"""
Shared test fixtures.

Every test runs against a fresh in-memory SQLite schema. Service
tests use db_session directly; API tests go through client, which
routes the app's get_db dependency to the same session.
"""

import os

# Read by general_ledger.config at import time
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from general_ledger.main import app
from general_ledger.models import Base
from general_ledger.models.base import get_db
from general_ledger.services.chart_service import ChartOfAccountsService


# One shared connection keeps the in-memory database alive across sessions
engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestSessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture(autouse=True)
def setup_database():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session():
    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def seeded_chart(db_session):
    """The standard chart of accounts, committed."""
    ChartOfAccountsService(db_session).seed_default_chart()
    db_session.commit()
    return db_session


@pytest.fixture
def client(db_session):
    """Test client whose requests share the test session."""
    app.dependency_overrides[get_db] = lambda: db_session
    yield TestClient(app)
    app.dependency_overrides.clear()
