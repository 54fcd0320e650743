"""
Unit tests for core/casa/service.py

Tests cover:
- Successful operations return JSON-ready data
- Schema violations come back as validation_error with field details
- Unexpected failures, pydantic ones included, come back as internal_error
- Council seeding and judge-count handling
"""
import pytest

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import core.casa.service as service_module
from core.casa.ids import SequentialIdGenerator
from core.casa.models import Gap
from core.casa.service import CertificationService

ASSESSMENT = {
    "systemName": "Grid Balancer",
    "description": "Forecasts load and dispatches storage on a regional grid",
    "sector": "critical-infrastructure",
    "deploymentContext": "production control room",
    "estimatedRiskLevel": "critical",
}


@pytest.fixture
def service():
    return CertificationService(id_generator=SequentialIdGenerator(), council_seed=1234)


class TestOperations:
    """Successful operations return JSON-ready data"""

    def test_operations_listed(self, service):
        assert service.operations == [
            "full_assessment",
            "gap_analysis",
            "byzantine_simulate",
            "certification_roadmap",
            "audit_checklist",
            "quick_score",
        ]

    def test_full_assessment(self, service):
        result = service.full_assessment(ASSESSMENT)

        assert result.success is True
        assert result.error is None
        assert result.data["complianceScore"] == 97
        assert result.data["tierRecommendation"] == "T4"
        assert result.data["costRange"] == [337500, 825000]

    def test_gap_analysis_returns_list(self, service):
        result = service.gap_analysis({"currentPractices": "", "targetTier": "T1"})

        assert result.success is True
        assert isinstance(result.data, list)
        assert len(result.data) == 15

    def test_gap_analysis_practices_optional(self, service):
        result = service.gap_analysis({"targetTier": "T2"})
        assert result.success is True
        assert len(result.data) == 16

    def test_certification_roadmap(self, service):
        result = service.certification_roadmap({
            "organizationSize": "small",
            "sector": "education",
            "currentMaturityLevel": "initial",
            "targetTier": "T1",
            "timelinePreference": "standard",
        })
        assert result.success is True
        assert result.data["totalWeeks"] == 8

    def test_audit_checklist(self, service):
        result = service.audit_checklist({"tier": "T1", "sector": "other", "aiSystemType": "ranking model"})
        assert result.success is True
        assert result.data["totalItems"] == 1

    def test_quick_score(self, service):
        result = service.quick_score({"answers": {"governance_board": "yes"}})
        assert result.success is True
        assert result.data["score"] == 100


class TestCouncilOperation:
    """Council seeding and judge counts through the service"""

    def test_seeded_runs_repeat(self, service):
        payload = {"assessmentData": {"complianceScore": 86, "riskLevel": "high"}}
        assert service.byzantine_simulate(payload).data == service.byzantine_simulate(payload).data

    def test_default_judge_count(self, service):
        result = service.byzantine_simulate({"assessmentData": {"complianceScore": 90}})
        assert result.data["numJudges"] == 33

    def test_configured_default_judge_count(self):
        svc = CertificationService(council_seed=1, default_num_judges=9)
        result = svc.byzantine_simulate({"assessmentData": {}})
        assert result.data["numJudges"] == 9
        assert result.data["requiredSupermajority"] == 6

    def test_loose_assessment_data(self, service):
        result = service.byzantine_simulate({"assessmentData": {"complianceScore": "not a number"}})
        assert result.success is True
        assert result.data["consensusDecision"] == "REJECTED - REMEDIATION REQUIRED"

    @pytest.mark.parametrize("n", [2, 100])
    def test_judge_count_out_of_range(self, service, n):
        result = service.byzantine_simulate({"assessmentData": {}, "numJudges": n})
        assert result.success is False
        assert result.error.kind == "validation_error"
        assert "numJudges" in result.error.message


class TestErrors:
    """Validation and internal errors as typed results"""

    def test_unknown_sector(self, service):
        result = service.full_assessment(dict(ASSESSMENT, sector="space-mining"))

        assert result.success is False
        assert result.data is None
        assert result.error.kind == "validation_error"
        assert "sector" in result.error.message
        assert result.error.details[0]["loc"] == ("sector",)

    def test_missing_field(self, service):
        payload = dict(ASSESSMENT)
        del payload["estimatedRiskLevel"]
        result = service.full_assessment(payload)

        assert result.error.kind == "validation_error"
        assert "estimatedRiskLevel" in result.error.message

    def test_non_object_payload(self, service):
        result = service.gap_analysis(None)
        assert result.success is False
        assert result.error.kind == "validation_error"

    def test_unknown_operation(self, service):
        result = service.call("certify_everything", {})
        assert result.success is False
        assert result.error.kind == "validation_error"
        assert "certify_everything" in result.error.message

    def test_internal_error(self, service, monkeypatch):
        def boom(*args, **kwargs):
            raise RuntimeError("table missing")

        monkeypatch.setattr(service_module, "run_full_assessment", boom)
        result = service.full_assessment(ASSESSMENT)

        assert result.success is False
        assert result.error.kind == "internal_error"
        assert result.error.message == "full_assessment failed: table missing"

    def test_model_error_inside_operation_is_internal(self, service, monkeypatch):
        """A pydantic error raised after input validation is not the caller's fault"""
        def broken(*args, **kwargs):
            return Gap.model_validate({})

        monkeypatch.setattr(service_module, "run_full_assessment", broken)
        result = service.full_assessment(ASSESSMENT)

        assert result.success is False
        assert result.error.kind == "internal_error"
        assert result.error.message.startswith("full_assessment failed:")
