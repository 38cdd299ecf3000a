"""Integration tests for API endpoints"""

import pytest
from unittest.mock import AsyncMock, patch
from datetime import date
from decimal import Decimal
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session
from oik_projection.api.dependencies import get_advisory_client
from oik_projection.domain.exceptions import AdvisoryGenerationError, AuthenticationError
from oik_projection.domain.models import AdvisoryNarrative
from oik_projection.infrastructure.database.models import Family, InstallmentRecord, RecurringTransaction, TransactionRecord
from oik_projection.utils.date_utils import add_months


IDENTITY = "oik_projection.infrastructure.clients.identity.IdentityClient.get_user_id"
TEST_USER_ID = "user-123"
AUTH_HEADERS = {"Authorization": "Bearer test-token"}


class StubGenerator:
    def __init__(self, narrative=None, error=None):
        self.narrative = narrative
        self.error = error
        self.calls = 0

    async def generate(self, stats):
        self.calls += 1
        if self.error:
            raise self.error
        return self.narrative


@pytest.fixture
def baseline_family(db: Session, family: Family) -> Family:
    """avgIncome 5000 from last month's salary and an open-ended 3000 rent"""
    this_month = date.today().replace(day=1)
    db.add(
        TransactionRecord(
            family_id=family.id,
            type="income",
            amount=Decimal("5000.00"),
            category_id="salary",
            date=add_months(this_month, -1),
        )
    )
    db.add(
        RecurringTransaction(
            family_id=family.id,
            description="Aluguel",
            type="expense",
            amount=Decimal("3000.00"),
            category_id="housing",
            start_date=date(2020, 1, 1),
        )
    )
    db.commit()
    return family


def test_health_endpoint(client: TestClient):
    """Test health check endpoint"""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_metrics_endpoint(client: TestClient):
    """Test Prometheus metrics endpoint"""
    response = client.get("/metrics")
    assert response.status_code == 200
    assert "oik_projection_requests_total" in response.text


def test_missing_token_is_401(client: TestClient):
    response = client.post("/v1/projection", json={})

    assert response.status_code == 401
    assert response.json() == {"error": "No authorization header"}


@patch(IDENTITY, new_callable=AsyncMock)
def test_rejected_token_is_401(mock_identity: AsyncMock, client: TestClient):
    mock_identity.side_effect = AuthenticationError("Invalid token")

    response = client.post("/v1/projection", json={}, headers=AUTH_HEADERS)

    assert response.status_code == 401
    assert response.json() == {"error": "Invalid token"}
    mock_identity.assert_awaited_once_with("test-token")


@patch(IDENTITY, new_callable=AsyncMock)
def test_user_without_family_is_404(mock_identity: AsyncMock, client: TestClient, family: Family):
    mock_identity.return_value = "someone-else"

    response = client.post("/v1/projection", json={}, headers=AUTH_HEADERS)

    assert response.status_code == 404
    assert response.json() == {"error": "No family found"}


@patch(IDENTITY, new_callable=AsyncMock)
def test_projection_baseline_scenario(mock_identity: AsyncMock, client: TestClient, baseline_family: Family):
    """Every month at 3000 fixed / 60% with a 2000 surplus; 60% is not above the warning line"""
    mock_identity.return_value = TEST_USER_ID

    response = client.post("/v1/projection", headers=AUTH_HEADERS)

    assert response.status_code == 200
    assert "X-Request-ID" in response.headers
    data = response.json()

    assert len(data["projections"]) == 12
    assert data["projections"][0]["month"] == date.today().strftime("%Y-%m")
    for month in data["projections"]:
        assert month["incomeProjected"] == 5000.0
        assert month["fixedCommitmentTotal"] == 3000.0
        assert month["fixedCommitmentPercentage"] == 60.0
        assert month["projectedSurplus"] == 2000.0
        assert month["variableExpenseEstimate"] == 0.0
        assert month["fixedExpenses"] == [
            {"type": "RECURRING", "label": "Aluguel", "amount": 3000.0, "category": "housing"}
        ]

    summary = data["currentMonthSummary"]
    assert summary["alertLevel"] == "healthy"
    assert summary["fixedCommitmentPercentage"] == 60.0

    assert data["metadata"]["monthsProjected"] == 12
    assert data["metadata"]["historicalMonths"] == 1
    assert data["metadata"]["accountingRegime"] == "cash_basis"
    assert data["metadata"]["generatedAt"]

    # AI disabled in tests: deterministic fallback, same shape
    assert len(data["aiTips"]["tips"]) == 3
    assert "alert" in data["aiTips"]
    assert data["aiTips"]["recommendation"]


@patch(IDENTITY, new_callable=AsyncMock)
def test_legacy_installment_months_turn_critical(
    mock_identity: AsyncMock, client: TestClient, db: Session, baseline_family: Family
):
    mock_identity.return_value = TEST_USER_ID
    db.add(
        InstallmentRecord(
            family_id=baseline_family.id,
            description="Celular",
            category_id="electronics",
            start_date=add_months(date.today(), 3),
            current_installment=1,
            total_installments=2,
            installment_amount=Decimal("1500.00"),
            total_amount=Decimal("3000.00"),
        )
    )
    db.commit()

    response = client.post("/v1/projection", json={"months": 12}, headers=AUTH_HEADERS)

    projections = response.json()["projections"]
    percentages = [p["fixedCommitmentPercentage"] for p in projections]
    assert percentages == [60.0, 60.0, 60.0, 90.0, 90.0] + [60.0] * 7
    assert projections[3]["fixedCommitmentTotal"] == 4500.0
    assert projections[3]["installmentDetails"][0]["label"] == "Celular (1/2)"
    assert projections[4]["installmentDetails"][0]["label"] == "Celular (2/2)"


@patch(IDENTITY, new_callable=AsyncMock)
def test_months_parameter(mock_identity: AsyncMock, client: TestClient, baseline_family: Family):
    mock_identity.return_value = TEST_USER_ID

    response = client.post("/v1/projection", json={"months": 3}, headers=AUTH_HEADERS)

    assert response.status_code == 200
    assert len(response.json()["projections"]) == 3
    assert response.json()["metadata"]["monthsProjected"] == 3


@patch(IDENTITY, new_callable=AsyncMock)
def test_zero_months_has_no_summary(mock_identity: AsyncMock, client: TestClient, baseline_family: Family):
    mock_identity.return_value = TEST_USER_ID

    response = client.post("/v1/projection", json={"months": 0}, headers=AUTH_HEADERS)

    data = response.json()
    assert data["projections"] == []
    assert data["currentMonthSummary"] is None
    assert data["aiTips"]["tips"]


@patch(IDENTITY, new_callable=AsyncMock)
def test_negative_months_rejected(mock_identity: AsyncMock, client: TestClient, baseline_family: Family):
    mock_identity.return_value = TEST_USER_ID

    response = client.post("/v1/projection", json={"months": -1}, headers=AUTH_HEADERS)

    assert response.status_code == 422


@patch(IDENTITY, new_callable=AsyncMock)
def test_ai_narrative_returned_when_available(mock_identity: AsyncMock, app, client: TestClient, baseline_family: Family):
    mock_identity.return_value = TEST_USER_ID
    generator = StubGenerator(AdvisoryNarrative(tips=["Reduza o aluguel"], alert=None, recommendation="Negocie"))
    app.dependency_overrides[get_advisory_client] = lambda: generator

    response = client.post("/v1/projection", json={}, headers=AUTH_HEADERS)

    assert response.json()["aiTips"] == {"tips": ["Reduza o aluguel"], "alert": None, "recommendation": "Negocie"}
    assert generator.calls == 1


@patch(IDENTITY, new_callable=AsyncMock)
def test_ai_failure_falls_back(mock_identity: AsyncMock, app, client: TestClient, baseline_family: Family):
    mock_identity.return_value = TEST_USER_ID
    generator = StubGenerator(error=AdvisoryGenerationError("gateway 502"))
    app.dependency_overrides[get_advisory_client] = lambda: generator

    response = client.post("/v1/projection", json={}, headers=AUTH_HEADERS)

    assert response.status_code == 200
    tips = response.json()["aiTips"]
    assert len(tips["tips"]) == 3
    assert tips["alert"] is None  # 60% is not above the warning threshold
    assert generator.calls == 1


@patch(IDENTITY, new_callable=AsyncMock)
def test_ai_tips_disabled_skips_generator(mock_identity: AsyncMock, app, client: TestClient, baseline_family: Family):
    mock_identity.return_value = TEST_USER_ID
    generator = StubGenerator(AdvisoryNarrative(tips=["x"], alert=None, recommendation="y"))
    app.dependency_overrides[get_advisory_client] = lambda: generator

    response = client.post("/v1/projection", json={"includeAiTips": False}, headers=AUTH_HEADERS)

    assert generator.calls == 0
    assert len(response.json()["aiTips"]["tips"]) == 3


@patch(IDENTITY, new_callable=AsyncMock)
@patch("oik_projection.api.v1.projection.generate_projection")
def test_computation_fault_is_500(mock_projection, mock_identity: AsyncMock, client: TestClient, baseline_family: Family):
    mock_identity.return_value = TEST_USER_ID
    mock_projection.side_effect = ZeroDivisionError("boom")

    response = client.post("/v1/projection", json={}, headers=AUTH_HEADERS)

    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error"}


@patch(IDENTITY, new_callable=AsyncMock)
@patch("oik_projection.infrastructure.database.repositories.FamilyRepository.resolve_context")
def test_family_lookup_failure_is_json_500(mock_resolve, mock_identity: AsyncMock, client: TestClient, family: Family):
    mock_identity.return_value = TEST_USER_ID
    mock_resolve.side_effect = RuntimeError("db down")

    response = client.post("/v1/projection", json={}, headers=AUTH_HEADERS)

    assert response.status_code == 500
    assert response.headers["content-type"].startswith("application/json")
    assert response.json() == {"error": "Internal server error"}


def test_unhandled_error_outside_projection_is_json_500(app):
    @app.get("/broken")
    def broken():
        raise RuntimeError("unexpected")

    client = TestClient(app, raise_server_exceptions=False)
    response = client.get("/broken")

    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error"}


def test_authentication_runs_before_body_validation(client: TestClient):
    response = client.post("/v1/projection", json={"months": -1})

    assert response.status_code == 401
    assert response.json() == {"error": "No authorization header"}


@patch(IDENTITY, new_callable=AsyncMock)
def test_rejected_token_with_invalid_body_is_401(mock_identity: AsyncMock, client: TestClient):
    mock_identity.side_effect = AuthenticationError("Invalid token")

    response = client.post("/v1/projection", json={"months": -1}, headers=AUTH_HEADERS)

    assert response.status_code == 401


def test_incoming_request_id_is_echoed(client: TestClient):
    response = client.get("/health", headers={"X-Request-ID": "req-42"})

    assert response.headers["X-Request-ID"] == "req-42"
