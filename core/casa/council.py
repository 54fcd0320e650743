"""
Byzantine Council simulation.

Weighted random voting with a two-thirds supermajority. Each judge has an
approval threshold set by its orientation; the further the effective score sits
above that threshold, the more likely an approve vote. Votes near the threshold
lean toward abstaining, votes far below it toward rejecting.

Nothing here models faulty nodes or networks. Randomness comes from a single
random.Random so a seed reproduces a whole council run.
"""

from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional, Tuple

from core.casa.models import ByzantineVote, ConsensusResult
from core.casa.tables import resolve_risk_level

logger = logging.getLogger(__name__)


DEFAULT_NUM_JUDGES = 33
MIN_JUDGES = 3
MAX_JUDGES = 99

JUDGE_NAMES: Tuple[str, ...] = (
    "Atlas", "Pythia", "Harmony", "Sentinel", "Veritas", "Meridian", "Compass",
    "Nexus", "Oracle", "Summit", "Beacon", "Pinnacle", "Clarity", "Resonance",
    "Zenith", "Sage", "Witness", "Guardian", "Arbiter", "Keeper", "Architect",
    "Auditor", "Custodian", "Overseer", "Watchdog", "Examiner", "Inspector",
    "Analyst", "Evaluator", "Assessor", "Reviewer", "Appraiser", "Judge",
)

SPECIALTIES: Tuple[str, ...] = (
    "AI Safety",
    "Ethics & Governance",
    "Data Science",
    "Security",
    "Compliance",
    "Risk Assessment",
    "Technical Evaluation",
    "Alignment Research",
    "Systems Safety",
    "Responsible AI",
)

ORIENTATIONS: Tuple[str, ...] = ("strict", "balanced", "pragmatic")

ORIENTATION_THRESHOLDS = {
    "strict": 92,
    "balanced": 80,
    "pragmatic": 70,
}

INCIDENT_PENALTIES = {"critical": 15, "serious": 8}
RISK_PENALTIES = {"critical": 10, "high": 5}

# logistic slope (points per e-fold) for approval odds
APPROVAL_SLOPE = 4.0
# abstentions only happen within this many points of a judge's threshold
ABSTAIN_BAND = 15.0
MAX_ABSTAIN_SHARE = 0.6

DISSENT_SAMPLE_SIZE = 5
DELIBERATION_SAMPLE_SIZE = 10


@dataclass(frozen=True)
class JudgeProfile:
    id: str
    name: str
    specialty: str
    orientation: str

    @property
    def threshold(self) -> int:
        return ORIENTATION_THRESHOLDS[self.orientation]


def generate_judge_panel(num_judges: int) -> List[JudgeProfile]:
    return [
        JudgeProfile(
            id=f"judge_{i + 1}",
            name=JUDGE_NAMES[i % len(JUDGE_NAMES)],
            specialty=SPECIALTIES[i % len(SPECIALTIES)],
            orientation=ORIENTATIONS[i % len(ORIENTATIONS)],
        )
        for i in range(num_judges)
    ]


def _coerce_score(v: Any) -> float:
    if isinstance(v, bool):
        return 0.0
    try:
        n = float(v)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(n):
        return 0.0
    return max(0.0, min(100.0, n))


@dataclass(frozen=True)
class AssessmentSummary:
    compliance_score: float
    risk_level: str = "moderate"
    incident_history: str = "clean"

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "AssessmentSummary":
        """
        Read the loose assessmentData object callers send.

        Missing or non-numeric score -> 0, unknown risk -> moderate, anything
        other than a known incident grade -> clean.
        """
        raw_risk = data.get("riskLevel", data.get("estimatedRiskLevel"))
        incidents = str(data.get("incidentHistory") or "clean").strip().lower()
        if incidents not in INCIDENT_PENALTIES:
            incidents = "clean"
        return cls(
            compliance_score=_coerce_score(data.get("complianceScore")),
            risk_level=resolve_risk_level(raw_risk if isinstance(raw_risk, str) else None),
            incident_history=incidents,
        )

    @property
    def effective_score(self) -> float:
        return (
            self.compliance_score
            - INCIDENT_PENALTIES.get(self.incident_history, 0)
            - RISK_PENALTIES.get(self.risk_level, 0)
        )


def verdict_probabilities(margin: float) -> Tuple[float, float, float]:
    """(approve, abstain, reject) for a judge whose threshold is `margin` points below the score."""
    p_approve = 1.0 / (1.0 + math.exp(-margin / APPROVAL_SLOPE))
    rest = 1.0 - p_approve
    nearness = max(0.0, 1.0 - abs(margin) / ABSTAIN_BAND)
    p_abstain = rest * MAX_ABSTAIN_SHARE * nearness
    return p_approve, p_abstain, rest - p_abstain


def _rationale(judge: JudgeProfile, verdict: str, score: float) -> str:
    who = f"{judge.name} ({judge.specialty})"
    if verdict == "approve":
        return (
            f"{who} approves certification. Score {score:.1f} meets {judge.orientation} threshold "
            f"of {judge.threshold}. System demonstrates adequate safety controls and compliance measures."
        )
    if verdict == "abstain":
        return (
            f"{who} abstains from decision. Score {score:.1f} is near the {judge.orientation} threshold "
            f"of {judge.threshold}. Recommends targeted remediation before resubmission."
        )
    return (
        f"{who} rejects certification. Score {score:.1f} falls short of {judge.orientation} threshold "
        f"of {judge.threshold}. Critical gaps in {judge.specialty.lower()} require remediation."
    )


def cast_vote(judge: JudgeProfile, summary: AssessmentSummary, rng: random.Random) -> ByzantineVote:
    score = summary.effective_score
    p_approve, p_abstain, p_reject = verdict_probabilities(score - judge.threshold)

    u = rng.random()
    if u < p_approve:
        verdict, confidence = "approve", p_approve
    elif u < p_approve + p_abstain:
        verdict, confidence = "abstain", p_abstain
    else:
        verdict, confidence = "reject", p_reject

    return ByzantineVote(
        judgeId=judge.id,
        judgeName=judge.name,
        specialty=judge.specialty,
        orientation=judge.orientation,
        verdict=verdict,
        confidence=round(max(0.0, min(1.0, confidence)), 3),
        rationale=_rationale(judge, verdict, score),
    )


def required_supermajority(num_judges: int) -> int:
    # integer form of ceil(2n/3)
    return (2 * num_judges + 2) // 3


def simulate_council(
    summary: AssessmentSummary,
    num_judges: int = DEFAULT_NUM_JUDGES,
    *,
    rng: Optional[random.Random] = None,
    seed: Optional[int] = None,
) -> ConsensusResult:
    if not MIN_JUDGES <= num_judges <= MAX_JUDGES:
        raise ValueError(f"numJudges must be between {MIN_JUDGES} and {MAX_JUDGES}")

    rng = rng or random.Random(seed)
    required = required_supermajority(num_judges)

    votes = [cast_vote(judge, summary, rng) for judge in generate_judge_panel(num_judges)]

    approve = sum(1 for v in votes if v.verdict == "approve")
    reject = sum(1 for v in votes if v.verdict == "reject")
    abstain = num_judges - approve - reject

    if approve >= required:
        decision = "APPROVED FOR T4 CERTIFICATION"
    elif reject >= required:
        decision = "REJECTED - REMEDIATION REQUIRED"
    else:
        decision = "CONSENSUS NOT ACHIEVED - RESUBMIT AFTER REMEDIATION"

    decisive = num_judges - abstain
    confidence = round(max(approve, reject) / decisive * 100) if decisive else 0

    dissent = [v.rationale for v in votes if v.verdict == "reject"]
    dissent += [v.rationale for v in votes if v.verdict == "abstain"]

    logger.debug(
        "Council run: judges=%s approve=%s reject=%s abstain=%s required=%s",
        num_judges, approve, reject, abstain, required,
    )

    return ConsensusResult(
        votes=votes,
        numJudges=num_judges,
        approveCount=approve,
        rejectCount=reject,
        abstainCount=abstain,
        requiredSupermajority=required,
        supermajorityReached=approve >= required,
        consensusDecision=decision,
        confidenceScore=confidence,
        sampleDissent=dissent[:DISSENT_SAMPLE_SIZE],
        deliberationNotes=[v.rationale for v in votes[:DELIBERATION_SAMPLE_SIZE]],
    )
