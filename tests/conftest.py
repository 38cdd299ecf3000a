"""Pytest fixtures for testing"""

import pytest
from datetime import date
from decimal import Decimal
from typing import Generator
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from oik_projection.api.main import create_app
from oik_projection.api.dependencies import get_advisory_client
from oik_projection.infrastructure.database.models import Base, Family, FamilyMember
from oik_projection.infrastructure.database.session import get_db
from oik_projection.domain.models import RecurringDefinition, Transaction


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

TEST_USER_ID = "user-123"


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def app(db: Session):
    """FastAPI app bound to the test database, AI path disabled unless a test overrides it"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_advisory_client] = lambda: None
    return app


@pytest.fixture
def client(app) -> TestClient:
    """Create FastAPI test client with test database"""
    return TestClient(app)


@pytest.fixture
def family(db: Session) -> Family:
    """Family with one active member mapped to TEST_USER_ID"""
    family = Family(name="Silva", accounting_regime="cash_basis")
    db.add(family)
    db.flush()
    db.add(FamilyMember(family_id=family.id, user_id=TEST_USER_ID, display_name="Ana", status="ACTIVE"))
    db.commit()
    return family


@pytest.fixture
def today() -> date:
    """Fixed reference date for domain tests"""
    return date(2025, 1, 15)


@pytest.fixture
def salary_history() -> list[Transaction]:
    """One month of salary history: average income 5000, no expenses"""
    return [Transaction(type="income", amount=Decimal("5000.00"), category_id="salary", date=date(2024, 12, 5))]


@pytest.fixture
def rent() -> RecurringDefinition:
    """Open-ended recurring rent of 3000 that started in the past"""
    return RecurringDefinition(
        description="Aluguel",
        type="expense",
        amount=Decimal("3000.00"),
        category_id="housing",
        start_date=date(2024, 1, 10),
    )
