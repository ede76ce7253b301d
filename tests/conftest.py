"""Pytest fixtures for testing"""

import pytest
from datetime import date
from typing import Generator
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from credit_dashboard.api.main import create_app
from credit_dashboard.infrastructure.database.models import Base
from credit_dashboard.infrastructure.database.session import get_db
from credit_dashboard.domain.models import Account, CreditLiability, LinkedAccount


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

TEST_USER = "user_1"


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
def client(db: Session) -> TestClient:
    """Create FastAPI test client with test database, acting as TEST_USER"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    return TestClient(app, headers={"X-User-ID": TEST_USER})


@pytest.fixture
def today() -> date:
    return date(2024, 6, 10)


@pytest.fixture
def sample_accounts() -> list[Account]:
    """Three cards with different balances and due-date sources"""
    return [
        Account(
            id="acc_1",
            account_name="Sapphire",
            credit_limit=5000.0,
            amount_owed=1500.0,
            minimum_monthly_payment=40.0,
            position=0,
            account_number="4242",
            statement_cycle_day=25,
            rewards=120.0,
        ),
        Account(
            id="acc_2",
            account_name="freedom",
            credit_limit=3000.0,
            amount_owed=2400.0,
            minimum_monthly_payment=60.0,
            position=1,
            account_number="1111",
            next_payment_due_date=date(2024, 6, 15),
            rewards=30.0,
        ),
        Account(
            id="acc_3",
            account_name="Discover It",
            credit_limit=2000.0,
            amount_owed=0.0,
            minimum_monthly_payment=0.0,
            position=2,
            statement_cycle_day=12,
        ),
    ]


@pytest.fixture
def linked_accounts() -> list[LinkedAccount]:
    """Aggregator accounts on a single item"""
    return [
        LinkedAccount(
            account_id="plaid_sapphire",
            name="Sapphire Card",
            official_name="Chase Sapphire Preferred",
            type="credit",
            subtype="credit card",
            mask="4242",
            current_balance=1800.0,
            limit=6000.0,
        ),
        LinkedAccount(
            account_id="plaid_checking",
            name="Checking",
            type="depository",
            subtype="checking",
            mask="9999",
            current_balance=2500.0,
        ),
    ]


@pytest.fixture
def liabilities() -> list[CreditLiability]:
    return [
        CreditLiability(
            account_id="plaid_sapphire",
            minimum_payment_amount=55.0,
            next_payment_due_date=date(2024, 6, 28),
            last_statement_balance=1700.0,
            apr_percentages=[21.49, 25.0],
        )
    ]
