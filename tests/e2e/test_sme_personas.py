"""
E2E tests for SME personas through the full pay -> generate -> share/PDF flow.

The narrative persona runs the mock narrative server in-process, so no
external services are needed.

SME personas:
- strong: profitable, compliant, digitally mature; high fundability expected
- distressed: rejections, overdrafts, bounced cheques; low fundability, high risk
- minimal: nothing but a name; neutral scores
- seasonal_trader: growing monthly sales but heavy seasonal exposure
"""

import httpx
import pytest
from fastapi.testclient import TestClient

from credit_passport.api.dependencies import get_narrative_augmenter
from credit_passport.infrastructure.clients.narrative import OpenAINarrativeClient
from mock.narrative_server.main import app as narrative_app


@pytest.mark.integration
def test_strong_sme_passport(client: TestClient, pay_and_generate, strong_sme_inputs):
    """
    strong: every compliance flag, excellent repayment record
    Expected: High Fundability, low overall risk
    """
    run = pay_and_generate(strong_sme_inputs)
    output = run["output_data"]

    assert output["fundabilityScore"] >= 80
    assert output["interpretation"] == "High Fundability"
    assert output["riskProfile"]["financial_risk"] == "low"
    assert output["riskProfile"]["overall_risk_level"] == "low"
    assert output["narrative"]["weaknesses"] == []

    share = client.post(
        f"/v1/credit-passports/{run['id']}/share",
        json={"user_id": "user_1", "auto_confirm": True, "payment_gateway": "airtel_money"},
    )
    assert share.status_code == 200
    assert share.json()["run"]["share_count"] == 1

    pdf = client.post(f"/v1/credit-passports/{run['id']}/pdf", json={"user_id": "user_1", "auto_confirm": True})
    assert pdf.status_code == 200
    assert pdf.json()["run"]["pdf_url"] is not None


@pytest.mark.integration
def test_distressed_sme_passport(pay_and_generate, distressed_sme_inputs):
    """
    distressed: 12 adverse credit events, long cash conversion cycle
    Expected: below 50, high credit risk and liquidity concern
    """
    output = pay_and_generate(distressed_sme_inputs)["output_data"]

    assert output["fundabilityScore"] < 50
    assert output["riskProfile"]["credit_risk"] == "high"
    assert output["riskProfile"]["liquidity_concern"] == "high"
    assert output["riskProfile"]["overall_risk_level"] == "high"
    assert output["liquidityIndex"] < 5
    assert "credit behaviour needs improvement or deeper history" in output["narrative"]["weaknesses"]


@pytest.mark.integration
def test_minimal_sme_passport(pay_and_generate):
    """
    minimal: only the business name is known
    Expected: neutral score, medium overall risk, complete narrative
    """
    output = pay_and_generate({"businessIdentity": {"name": "Solwezi Spares"}})["output_data"]

    assert 50 <= output["fundabilityScore"] <= 60
    assert output["riskProfile"]["overall_risk_level"] == "medium"
    assert output["narrative"]["headline"].startswith("Solwezi Spares has a fundability score of")
    assert len(output["narrative"]["recommendations"]) == 3
    assert len(output["narrative"]["suggested_partners"]) == 3


@pytest.mark.integration
def test_seasonal_trader_passport(pay_and_generate):
    """
    seasonal_trader: rising monthly sales, strong seasonal swings
    Expected: full revenue momentum, seasonality flagged to lenders
    """
    output = pay_and_generate(
        {
            "financials": {"monthlyRevenue": [12000, 13500, 15000, 18000]},
            "operations": {"seasonality": 65},
        }
    )["output_data"]

    assert output["components"]["financialStrength"]["revenueScore"] == 100
    assert "seasonality may require structured repayment plans" in output["narrative"]["bank_concerns"]


@pytest.mark.integration
def test_narrative_enriched_by_provider(app, pay_and_generate, strong_sme_inputs):
    """
    strong SME with the narrative provider enabled
    Expected: provider narrative stored, extra recommendation appended
    """
    augmenter = OpenAINarrativeClient(
        api_key="sk-mock",
        base_url="http://narrative.mock/v1",
        model="mock-model",
        timeout=5,
        transport=httpx.ASGITransport(app=narrative_app),
    )
    app.dependency_overrides[get_narrative_augmenter] = lambda: augmenter

    run = pay_and_generate(strong_sme_inputs)
    narrative = run["output_data"]["narrative"]

    assert run["narrative_source"] == "llm"
    assert "Agriculture" in narrative["headline"]
    assert narrative["recommendations"][-1] == "share six months of mobile money statements with lenders"
