"""
Unit tests for core/casa/assessment.py

Tests cover:
- End-to-end full assessment for known sector / risk combinations
- Invariants across every sector and risk level
- Idempotence apart from identifiers
- Input validation (system name, aliases)
"""
from datetime import date

import pytest
from pydantic import ValidationError

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from core.casa.assessment import build_next_steps, run_full_assessment
from core.casa.ids import SequentialIdGenerator
from core.casa.models import AssessmentInput
from core.casa.scoring import classify_tier
from core.casa.tables import RISK_LEVELS, SECTORS

TODAY = date(2026, 1, 15)


def _input(sector="other", risk="moderate", name="Triage Assistant"):
    return AssessmentInput(
        systemName=name,
        description="Routes incoming support tickets to the right team",
        sector=sector,
        deploymentContext="internal helpdesk",
        estimatedRiskLevel=risk,
    )


def _assess(sector="other", risk="moderate", **kwargs):
    return run_full_assessment(
        _input(sector, risk),
        id_generator=SequentialIdGenerator(),
        today=TODAY,
        **kwargs,
    )


class TestKnownAssessments:
    """Full assessments with hand-computed expected values"""

    def test_critical_infrastructure_critical_risk(self):
        result = _assess("critical-infrastructure", "critical")

        assert result.complianceScore == 97
        assert result.tierRecommendation == "T4"
        assert result.confidenceLevel == "high"
        assert len(result.gaps) == 1
        assert result.gaps[0].area == "Risk Management"
        assert result.gaps[0].priority == 0
        assert result.gaps[0].severity == "critical"

    def test_critical_infrastructure_timeline_and_cost(self):
        """(24 + ceil(150/40)) * 1.5 = 42 weeks; (25k + 200k) * 1.5 .. (50k + 500k) * 1.5"""
        result = _assess("critical-infrastructure", "critical")

        assert result.estimatedTimeline == "42 weeks (approximately 11 months)"
        assert result.costRange == (337500, 825000)

    def test_critical_infrastructure_remediation_steps(self):
        result = _assess("critical-infrastructure", "critical")

        assert result.remediationSteps[0] == "PHASE 1 (Week 1-4): Address 1 critical gaps"
        assert result.remediationSteps[-1] == "PHASE 5: Submit to Council and await consensus decision"
        assert len(result.remediationSteps) == 6

    def test_other_sector_minimal_risk(self):
        result = _assess("other", "minimal")

        assert result.complianceScore == 34
        assert result.tierRecommendation == "T1"
        assert result.confidenceLevel == "low"
        assert len(result.gaps) == 9
        assert [g.severity for g in result.gaps].count("critical") == 1
        assert result.estimatedTimeline == "4 weeks (approximately 1 months)"
        assert result.costRange == (68000, 138400)

    def test_domain_scores_reported(self):
        result = _assess("healthcare", "moderate")
        assert result.domainScores.governance == pytest.approx(19)
        assert result.domainScores.deployment == pytest.approx(11.4)
        assert result.complianceScore == 78
        assert result.tierRecommendation == "T2"

    def test_metadata(self):
        result = _assess("finance", "high", scoring_version="casa-test")
        assert result.systemName == "Triage Assistant"
        assert result.completionDate == "2026-01-15"
        assert result.scoringVersion == "casa-test"
        assert result.assessmentId.startswith("CASA-run-")

    def test_key_findings(self):
        result = _assess("critical-infrastructure", "critical")
        assert result.keyFindings[0].startswith("COUNCIL READY: 97/100")
        assert "Critical risk level requires enhanced monitoring and continuous auditing" in result.keyFindings
        assert any("Byzantine Council" in f for f in result.keyFindings)
        assert "Estimated remediation effort: 150 hours" in result.keyFindings

    def test_next_steps_budget(self):
        result = _assess("critical-infrastructure", "critical")
        assert len(result.nextSteps) == 6
        assert "3. Estimate budget allocation of $337,500 - $825,000" in result.nextSteps

    def test_t1_next_steps_skip_auditor(self):
        steps = build_next_steps(gaps=[], tier="T1", timeline="4 weeks", cost=(5000, 15000))
        assert steps[4].startswith("5. Complete T1 self-assessment")


class TestAssessmentInvariants:
    """Properties that hold for every sector and risk level"""

    @pytest.mark.parametrize("sector", SECTORS)
    @pytest.mark.parametrize("risk", RISK_LEVELS)
    def test_invariants(self, sector, risk):
        result = _assess(sector, risk)

        assert 0 <= result.complianceScore <= 100
        assert result.tierRecommendation == classify_tier(result.complianceScore)
        priorities = [g.priority for g in result.gaps]
        assert priorities == sorted(set(priorities))
        assert len({g.id for g in result.gaps}) == len(result.gaps)
        assert result.costRange[0] <= result.costRange[1]
        for g in result.gaps:
            assert g.costRange[0] <= g.costRange[1]

        if risk == "critical":
            assert result.gaps[0].area == "Risk Management"
            assert result.gaps[0].severity == "critical"
        else:
            assert all(g.area != "Risk Management" for g in result.gaps)

    @pytest.mark.parametrize("sector", SECTORS)
    @pytest.mark.parametrize("risk", RISK_LEVELS)
    def test_priority_zero_only_for_risk_management(self, sector, risk):
        result = _assess(sector, risk)
        zero = [g for g in result.gaps if g.priority == 0]

        if risk == "critical":
            assert [g.area for g in zero] == ["Risk Management"]
        else:
            assert zero == []
            assert all(g.priority >= 1 for g in result.gaps)

    @pytest.mark.parametrize("sector", SECTORS)
    def test_idempotent_apart_from_ids(self, sector):
        a = _assess(sector, "high")
        b = _assess(sector, "high")
        exclude = {"assessmentId": True, "gaps": {"__all__": {"id"}}}
        assert a.model_dump(exclude=exclude) == b.model_dump(exclude=exclude)


class TestAssessmentInput:
    """Assessment input validation"""

    def test_ai_system_name_alias(self):
        req = AssessmentInput.model_validate({
            "aiSystemName": "  Claims Bot  ",
            "description": "Summarises insurance claims",
            "sector": "finance",
            "deploymentContext": "back office",
            "estimatedRiskLevel": "low",
        })
        assert req.systemName == "Claims Bot"

    def test_blank_name_rejected(self):
        with pytest.raises(ValidationError):
            _input(name="   ")

    def test_short_description_rejected(self):
        with pytest.raises(ValidationError):
            AssessmentInput(
                systemName="x",
                description="short",
                sector="other",
                deploymentContext="lab",
                estimatedRiskLevel="low",
            )

    def test_unknown_sector_rejected(self):
        with pytest.raises(ValidationError):
            _input(sector="space-mining")
