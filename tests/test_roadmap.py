"""
Unit tests for core/casa/roadmap.py

Tests cover:
- Phase selection by maturity and target tier
- Phase durations and cost shares
- Tier-specific risk and success factors
"""
import pytest

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from core.casa.models import CertificationRoadmapInput
from core.casa.roadmap import generate_certification_roadmap


def _roadmap(size="small", maturity="initial", tier="T1", timeline="standard", sector="education"):
    return generate_certification_roadmap(CertificationRoadmapInput(
        organizationSize=size,
        sector=sector,
        currentMaturityLevel=maturity,
        targetTier=tier,
        timelinePreference=timeline,
    ))


class TestRoadmapPhases:
    """Phase selection, durations and cost shares"""

    def test_small_initial_t1(self):
        roadmap = _roadmap()

        assert roadmap.totalWeeks == 8
        assert roadmap.totalDuration == "8 weeks (approximately 2 months)"
        assert roadmap.totalEstimatedCost == (5000, 15000)
        assert [p.phase for p in roadmap.phases] == [1, 2]

        foundation, core = roadmap.phases
        assert foundation.title.startswith("Foundation")
        assert foundation.durationWeeks == 2
        assert foundation.duration == "2 weeks"
        assert foundation.estimatedCost == (750, 2250)
        assert core.durationWeeks == 3
        assert core.estimatedCost == (1750, 5250)

    def test_mature_org_skips_foundation(self):
        roadmap = _roadmap(maturity="managed", tier="T2", timeline="accelerated", size="medium")

        assert roadmap.totalWeeks == 12
        assert [p.title for p in roadmap.phases] == [
            "Core Implementation (Data, Model, Deployment)",
            "Pre-Audit Preparation (T2 Audit Ready)",
        ]

    def test_enterprise_t4_extended(self):
        roadmap = _roadmap(size="enterprise", maturity="optimized", tier="T4", timeline="extended")

        assert roadmap.totalWeeks == 48
        assert roadmap.totalEstimatedCost == (600000, 1500000)
        assert [p.phase for p in roadmap.phases] == [1, 2, 3, 4]
        assert [p.durationWeeks for p in roadmap.phases] == [17, 12, 8, 8]

        council = roadmap.phases[-1]
        assert council.title == "Byzantine Council Review (33-Judge Consensus)"
        assert "22/33 supermajority achieved" in council.successCriteria

    def test_t3_includes_monitoring_not_council(self):
        roadmap = _roadmap(maturity="developing", tier="T3")
        titles = [p.title for p in roadmap.phases]

        assert len(titles) == 4
        assert titles[-1] == "Continuous Monitoring Infrastructure"
        assert not any("Byzantine" in t for t in titles)

    @pytest.mark.parametrize("tier", ["T1", "T2", "T3", "T4"])
    def test_phase_costs_within_total(self, tier):
        roadmap = _roadmap(size="large", maturity="initial", tier=tier)
        lo = sum(p.estimatedCost[0] for p in roadmap.phases)
        hi = sum(p.estimatedCost[1] for p in roadmap.phases)
        assert lo <= roadmap.totalEstimatedCost[0]
        assert hi <= roadmap.totalEstimatedCost[1]


class TestRoadmapProfile:
    """Organisation profile and tier-specific factors"""

    def test_profile_echoes_input(self):
        roadmap = _roadmap(size="large", maturity="developing", tier="T2", sector="finance")
        profile = roadmap.organizationProfile

        assert profile.size == "large"
        assert profile.sector == "finance"
        assert profile.currentMaturity == "developing"
        assert profile.targetTier == "T2"

    def test_t4_adds_council_factors(self):
        roadmap = _roadmap(tier="T4")
        assert "Byzantine Council consensus achievement" in roadmap.riskFactors
        assert "Demonstrated track record of zero critical incidents" in roadmap.criticalSuccessFactors

    def test_lower_tiers_have_base_factors(self):
        roadmap = _roadmap(tier="T2")
        assert len(roadmap.riskFactors) == 4
        assert len(roadmap.criticalSuccessFactors) == 5
