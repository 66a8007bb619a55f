"""Pytest fixtures for testing"""

import pytest
from typing import Any, Callable, Dict, Generator
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from credit_passport.api.main import create_app
from credit_passport.api.dependencies import get_narrative_augmenter
from credit_passport.infrastructure.database.models import Base
from credit_passport.infrastructure.database.session import get_db


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


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
    """FastAPI app wired to the test database, narrative provider disabled"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_narrative_augmenter] = lambda: None
    return app


@pytest.fixture
def client(app) -> TestClient:
    """Create FastAPI test client with test database"""
    return TestClient(app)


@pytest.fixture
def strong_sme_inputs() -> Dict[str, Any]:
    """Profitable, compliant, digitally mature SME"""
    return {
        "businessIdentity": {"name": "Kafue Agro Ltd", "sector": "Agriculture"},
        "financials": {"profitMargin": 25, "cashflowStability": 90},
        "banking": {"repaymentHistory": 95},
        "compliance": {
            "taxClearance": True,
            "taxRegistration": True,
            "annualReturns": True,
            "businessInsurance": True,
            "licenses": ["trade"],
        },
        "digitalOperational": {"digitalFootprint": 90, "erpUsage": 85},
    }


@pytest.fixture
def distressed_sme_inputs() -> Dict[str, Any]:
    """SME with loan rejections, overdrafts, bounced cheques and a long cash cycle"""
    return {
        "businessIdentity": {"name": "Lusaka Hardware"},
        "financials": {"cashConversionCycle": 120, "negativeBalanceFrequency": 9},
        "banking": {
            "repaymentHistory": 40,
            "rejectionHistory": 5,
            "overdraftFrequency": 4,
            "chequeBounceHistory": 3,
        },
    }


@pytest.fixture
def pay_and_generate(client: TestClient) -> Callable[..., Dict[str, Any]]:
    """Create a paid run and generate it; returns the generated run"""

    def _pay_and_generate(input_data: Dict[str, Any], user_id: str = "user_1", **generate_body) -> Dict[str, Any]:
        pay = client.post(
            "/v1/credit-passports/pay",
            json={
                "user_id": user_id,
                "company_id": "company_1",
                "payment_method": "mobile_money",
                "auto_confirm": True,
                "input_data": input_data,
            },
        )
        assert pay.status_code == 201
        run_id = pay.json()["run"]["id"]

        response = client.post(
            f"/v1/credit-passports/{run_id}/generate",
            json={"user_id": user_id, **generate_body},
        )
        assert response.status_code == 200
        return response.json()["run"]

    return _pay_and_generate
