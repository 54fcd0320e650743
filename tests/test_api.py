"""
HTTP tests for main.py and config.py

Tests cover:
- Service metadata routes
- One POST route per operation
- Error status codes and error body shape
- Settings validation
"""
import pytest
from fastapi.testclient import TestClient
from pydantic import ValidationError

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config import Settings
from main import app

client = TestClient(app)

ASSESSMENT = {
    "aiSystemName": "Loan Screener",
    "description": "Pre-screens consumer loan applications for manual review",
    "sector": "finance",
    "deploymentContext": "retail lending",
    "estimatedRiskLevel": "high",
}


class TestMetaRoutes:
    """Service metadata routes"""

    def test_root(self):
        response = client.get("/")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    def test_health(self):
        body = client.get("/health").json()
        assert body["status"] == "healthy"
        assert "full_assessment" in body["operations"]
        assert body["tables_version"]

    def test_tiers(self):
        body = client.get("/tiers").json()
        assert [body[t]["minScore"] for t in ("T1", "T2", "T3", "T4")] == [40, 65, 80, 90]
        assert "Byzantine Council consensus (22/33)" in body["T4"]["keyRequirements"]


class TestOperationRoutes:
    """One POST route per operation"""

    def test_full_assessment(self):
        response = client.post("/full_assessment", json=ASSESSMENT)
        assert response.status_code == 200

        body = response.json()
        assert body["systemName"] == "Loan Screener"
        assert body["assessmentId"].startswith("CASA-")
        assert 0 <= body["complianceScore"] <= 100
        assert set(body["domainScores"]) == {"governance", "data", "model", "deployment", "monitoring"}

    def test_gap_analysis(self):
        response = client.post("/gap_analysis", json={"currentPractices": "", "targetTier": "T4"})
        assert response.status_code == 200
        gaps = response.json()
        assert len(gaps) == 17
        assert gaps[0]["area"] == "Prerequisites"

    def test_byzantine_simulate(self):
        response = client.post(
            "/byzantine_simulate",
            json={"assessmentData": {"complianceScore": 91}, "numJudges": 15},
        )
        assert response.status_code == 200
        body = response.json()
        assert body["approveCount"] + body["rejectCount"] + body["abstainCount"] == 15
        assert body["requiredSupermajority"] == 10

    def test_certification_roadmap(self):
        response = client.post("/certification_roadmap", json={
            "organizationSize": "enterprise",
            "sector": "government",
            "currentMaturityLevel": "optimized",
            "targetTier": "T4",
            "timelinePreference": "extended",
        })
        assert response.status_code == 200
        assert response.json()["totalWeeks"] == 48

    def test_audit_checklist(self):
        response = client.post("/audit_checklist", json={
            "tier": "T4",
            "sector": "healthcare",
            "aiSystemType": "LLM clinical assistant",
        })
        assert response.status_code == 200
        assert response.json()["totalItems"] == 19

    def test_quick_score(self):
        response = client.post("/quick_score", json={"answers": {"governance_board": True}})
        assert response.status_code == 200
        assert response.json()["score"] == 100


class TestErrorResponses:
    """Operation errors mapped to HTTP status codes"""

    def test_validation_error_is_422(self):
        response = client.post("/full_assessment", json=dict(ASSESSMENT, estimatedRiskLevel="extreme"))
        assert response.status_code == 422

        body = response.json()
        assert body["status_code"] == 422
        assert body["error"]["kind"] == "validation_error"
        assert "estimatedRiskLevel" in body["error"]["message"]

    def test_judge_count_out_of_range(self):
        response = client.post("/byzantine_simulate", json={"assessmentData": {}, "numJudges": 1})
        assert response.status_code == 422
        assert response.json()["error"]["kind"] == "validation_error"


class TestSettings:
    """Settings defaults, environment overrides and validation"""

    def test_defaults(self, monkeypatch):
        for key in ("DEFAULT_NUM_JUDGES", "COUNCIL_SEED", "LOG_LEVEL", "FRONTEND_ORIGIN"):
            monkeypatch.delenv(key, raising=False)
        s = Settings(_env_file=None)
        assert s.DEFAULT_NUM_JUDGES == 33
        assert s.COUNCIL_SEED is None
        assert s.council_reproducible is False

    def test_seed_from_env(self, monkeypatch):
        monkeypatch.setenv("COUNCIL_SEED", "99")
        s = Settings(_env_file=None)
        assert s.COUNCIL_SEED == 99
        assert s.council_reproducible is True

    def test_log_level_normalised(self):
        assert Settings(_env_file=None, LOG_LEVEL="debug").LOG_LEVEL == "DEBUG"

    def test_invalid_log_level(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, LOG_LEVEL="chatty")

    def test_wildcard_origin_rejected(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, FRONTEND_ORIGIN="*")

    def test_judge_count_bounds(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, DEFAULT_NUM_JUDGES=2)
