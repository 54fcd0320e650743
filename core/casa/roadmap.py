from __future__ import annotations

import math
from typing import List, Tuple

from core.casa.models import CertificationRoadmapInput, OrganizationProfile, Roadmap, RoadmapPhase


TIMELINE_WEEKS = {
    "accelerated": {"T1": 6, "T2": 12, "T3": 18, "T4": 28},
    "standard": {"T1": 8, "T2": 16, "T3": 24, "T4": 36},
    "extended": {"T1": 12, "T2": 24, "T3": 32, "T4": 48},
}

# thousands of USD
ORGANIZATION_COSTS = {
    "small": {"T1": (5, 15), "T2": (25, 75), "T3": (75, 200), "T4": (200, 500)},
    "medium": {"T1": (8, 20), "T2": (40, 100), "T3": (120, 280), "T4": (300, 700)},
    "large": {"T1": (12, 30), "T2": (60, 150), "T3": (180, 400), "T4": (450, 1000)},
    "enterprise": {"T1": (15, 40), "T2": (80, 200), "T3": (250, 600), "T4": (600, 1500)},
}

COUNCIL_REVIEW_WEEKS = 8

FOUNDATION_MATURITY = frozenset({"initial", "developing"})


def _share(total: Tuple[int, int], fraction: float) -> Tuple[int, int]:
    return round(total[0] * fraction), round(total[1] * fraction)


def _weeks(timeline: int, fraction: float) -> int:
    return math.ceil(round(timeline * fraction, 6))


def _phase(
    number: int,
    *,
    title: str,
    weeks: int,
    cost: Tuple[int, int],
    milestones: List[str],
    resources: List[str],
    activities: List[str],
    criteria: List[str],
) -> RoadmapPhase:
    return RoadmapPhase(
        phase=number,
        title=title,
        durationWeeks=weeks,
        duration=f"{weeks} weeks",
        milestones=milestones,
        resourceRequirements=resources,
        estimatedCost=cost,
        keyActivities=activities,
        successCriteria=criteria,
    )


def generate_certification_roadmap(payload: CertificationRoadmapInput) -> Roadmap:
    tier = payload.targetTier
    timeline = TIMELINE_WEEKS[payload.timelinePreference][tier]
    lo, hi = ORGANIZATION_COSTS[payload.organizationSize][tier]
    total_cost = (lo * 1000, hi * 1000)

    phases: List[RoadmapPhase] = []

    if payload.currentMaturityLevel in FOUNDATION_MATURITY:
        phases.append(_phase(
            len(phases) + 1,
            title="Foundation & Assessment (Governance & Processes)",
            weeks=_weeks(timeline, 0.2),
            cost=_share(total_cost, 0.15),
            milestones=[
                "Establish Safety Review Board",
                "Document current AI system inventory",
                "Create AI governance policy",
                "Define incident response procedures",
            ],
            resources=[
                "Safety Officer or Chief AI Officer",
                "Legal/Compliance team (20% FTE)",
                "Documentation tools",
                "Internal audit capability",
            ],
            activities=[
                "Stakeholder interviews",
                "Current state assessment",
                "Gap analysis workshop",
                "Policy development",
            ],
            criteria=[
                "Governance policies documented",
                "Roles and responsibilities defined",
                "Review board established and meeting monthly",
            ],
        ))

    phases.append(_phase(
        len(phases) + 1,
        title="Core Implementation (Data, Model, Deployment)",
        weeks=_weeks(timeline, 0.35),
        cost=_share(total_cost, 0.35),
        milestones=[
            "Data quality framework implemented",
            "Model evaluation pipeline established",
            "Safety testing suite created",
            "Deployment controls configured",
        ],
        resources=[
            "AI/ML Engineers (2-4 FTE)",
            "Data Scientists (1-2 FTE)",
            "DevOps/Infrastructure (1 FTE)",
            "QA/Testing resources (1-2 FTE)",
        ],
        activities=[
            "Data lineage mapping",
            "Bias detection implementation",
            "Safety test development",
            "Control system deployment",
        ],
        criteria=[
            "All systems instrumented for monitoring",
            "Safety tests passing 100%",
            "Zero unmonitored data pipelines",
        ],
    ))

    if tier != "T1":
        phases.append(_phase(
            len(phases) + 1,
            title=f"Pre-Audit Preparation ({tier} Audit Ready)",
            weeks=_weeks(timeline, 0.25),
            cost=_share(total_cost, 0.15),
            milestones=[
                "Audit readiness assessment",
                "Documentation package compiled",
                "Internal audit completed",
                "Auditor engagement",
            ],
            resources=[
                "Project Manager (1 FTE)",
                "Compliance Specialist (1 FTE)",
                "Audit Coordinator (0.5 FTE)",
            ],
            activities=[
                "Self-audit execution",
                "Evidence collection",
                "Remediation of findings",
                "Auditor kickoff meeting",
            ],
            criteria=[
                "All audit evidence compiled",
                "Self-audit completion with <5 major findings",
                "Auditor engagement letter signed",
            ],
        ))

    if tier in ("T3", "T4"):
        phases.append(_phase(
            len(phases) + 1,
            title="Continuous Monitoring Infrastructure",
            weeks=_weeks(timeline, 0.15),
            cost=_share(total_cost, 0.2),
            milestones=[
                "Monitoring platform deployment",
                "Alert rules configured",
                "Dashboard creation",
                "Escalation procedures established",
            ],
            resources=[
                "DevOps/Platform Engineer (1 FTE)",
                "Data Engineer (1 FTE)",
                "Monitoring Specialist (0.5 FTE)",
            ],
            activities=[
                "Platform selection and deployment",
                "Metric definition",
                "Alert threshold tuning",
                "Runbook creation",
            ],
            criteria=[
                "All systems monitored in real-time",
                "Dashboard updated every 5 minutes",
                "Alert SLA < 15 minutes",
            ],
        ))

    if tier == "T4":
        phases.append(_phase(
            len(phases) + 1,
            title="Byzantine Council Review (33-Judge Consensus)",
            weeks=COUNCIL_REVIEW_WEEKS,
            cost=_share(total_cost, 0.15),
            milestones=[
                "Dossier preparation complete",
                "Council panel assignment",
                "Individual evaluations completed",
                "Consensus deliberation",
                "Final decision announcement",
            ],
            resources=[
                "T4 Coordinator (1 FTE)",
                "Technical Writer (0.5 FTE)",
                "Chief AI Officer (20% time)",
            ],
            activities=[
                "Comprehensive dossier compilation",
                "Judge panel selection",
                "Independent evaluations",
                "Deliberation facilitation",
            ],
            criteria=[
                "22/33 supermajority achieved",
                "Consensus decision documented",
                "T4 certificate issued",
            ],
        ))

    risk_factors = [
        "Resource availability and skill gaps",
        "Legacy system integration challenges",
        "Third-party audit scheduling constraints",
        "Data complexity and volume",
    ]
    success_factors = [
        "Executive sponsorship and commitment",
        "Cross-functional team alignment",
        "Clear incident response procedures",
        "Adequate budget and resource allocation",
        "Regular status tracking and course correction",
    ]
    if tier == "T4":
        risk_factors.append("Byzantine Council consensus achievement")
        success_factors.append("Demonstrated track record of zero critical incidents")

    return Roadmap(
        organizationProfile=OrganizationProfile(
            size=payload.organizationSize,
            sector=payload.sector,
            currentMaturity=payload.currentMaturityLevel,
            targetTier=tier,
        ),
        totalWeeks=timeline,
        totalDuration=f"{timeline} weeks (approximately {math.ceil(timeline / 4)} months)",
        totalEstimatedCost=total_cost,
        phases=phases,
        riskFactors=risk_factors,
        criticalSuccessFactors=success_factors,
    )
