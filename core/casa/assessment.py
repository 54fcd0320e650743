from __future__ import annotations

from datetime import date, datetime, timezone
from typing import List, Optional

from core.casa.gaps import identify_gaps
from core.casa.ids import IdGenerator, RandomIdGenerator
from core.casa.models import AssessmentInput, AssessmentResult, DomainScores, Gap
from core.casa.planning import estimate_cost, estimate_timeline, remediation_steps
from core.casa.scoring import (
    classify_tier,
    compliance_score,
    confidence_level,
    interpret,
    select_strategy,
    weakest_domain,
)
from core.casa.tables import TIER_REQUIREMENTS


def build_key_findings(
    *,
    score: int,
    scores: DomainScores,
    gaps: List[Gap],
    tier: str,
    risk_level: str,
    remediation_hours: int = 0,
) -> List[str]:
    band = interpret(score)
    weakest = weakest_domain(scores)
    critical = sum(1 for g in gaps if g.severity == "critical")

    findings = [
        f"{band.label.upper()}: {score}/100 compliance score. {band.description}",
        f"Weakest domain: {weakest} ({scores.as_dict()[weakest]:.1f}/20)",
        f"{critical} critical and {len(gaps) - critical} other gaps identified",
    ]
    if remediation_hours:
        findings.append(f"Estimated remediation effort: {remediation_hours} hours")
    if risk_level == "critical":
        findings.append("Critical risk level requires enhanced monitoring and continuous auditing")
    if tier == "T4":
        findings.append("Byzantine Council review is required before T4 certification is issued")
    return findings


def build_next_steps(*, gaps: List[Gap], tier: str, timeline: str, cost: tuple) -> List[str]:
    critical = sum(1 for g in gaps if g.severity == "critical")
    return [
        "1. Review this assessment with your AI safety and compliance team",
        f"2. Prioritize remediation of {critical} critical gaps",
        f"3. Estimate budget allocation of ${cost[0]:,} - ${cost[1]:,}",
        f"4. Plan for {timeline} to reach {tier} certification",
        (
            f"5. Identify and engage CASA-accredited third-party auditor for {tier} audit"
            if tier != "T1"
            else "5. Complete T1 self-assessment and plan T2 audit timeline if needed"
        ),
        "6. Implement monitoring infrastructure throughout remediation process",
    ]


def run_full_assessment(
    payload: AssessmentInput,
    *,
    id_generator: Optional[IdGenerator] = None,
    today: Optional[date] = None,
    scoring_version: str = "casa-v1.0",
) -> AssessmentResult:
    ids = id_generator or RandomIdGenerator()
    risk = payload.estimatedRiskLevel

    scores = select_strategy(risk_level=risk, sector=payload.sector).score()
    score = compliance_score(scores)

    gaps = identify_gaps(scores, risk_level=risk, id_generator=ids)
    tier = classify_tier(score)

    estimate = estimate_timeline(gaps, tier, risk)
    timeline = estimate.describe()
    cost = estimate_cost(gaps, tier, risk)

    return AssessmentResult(
        assessmentId=ids.assessment_id(),
        systemName=payload.systemName,
        completionDate=(today or datetime.now(timezone.utc).date()).isoformat(),
        tierRecommendation=tier,
        tierDescription=TIER_REQUIREMENTS[tier].description,
        complianceScore=score,
        domainScores=scores,
        gaps=gaps,
        remediationSteps=remediation_steps(gaps, tier),
        estimatedTimeline=timeline,
        costRange=cost,
        confidenceLevel=confidence_level(scores),
        keyFindings=build_key_findings(
            score=score,
            scores=scores,
            gaps=gaps,
            tier=tier,
            risk_level=risk,
            remediation_hours=estimate.total_hours,
        ),
        nextSteps=build_next_steps(gaps=gaps, tier=tier, timeline=timeline, cost=cost),
        scoringVersion=scoring_version,
    )
