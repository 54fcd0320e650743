from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Sequence, Tuple

from core.casa.models import Gap
from core.casa.tables import (
    HOURS_PER_WEEK,
    TIER_BASE_WEEKS,
    TIER_COSTS,
    TIMELINE_RISK_MULTIPLIERS,
    TIERS,
    resolve_risk_level,
    resolve_tier,
)


# severity phases, in execution order
SEVERITY_PHASES: List[Tuple[str, str, str]] = [
    ("critical", "Week 1-4", "critical gaps"),
    ("high", "Week 5-12", "high-severity gaps"),
    ("medium", "Week 13+", "medium-severity gaps"),
    ("low", "Ongoing", "low-severity gaps"),
]


def _tier_at_least(tier: str, floor: str) -> bool:
    return TIERS.index(tier) >= TIERS.index(floor)


def remediation_steps(gaps: Sequence[Gap], tier: str) -> List[str]:
    tier = resolve_tier(tier)
    steps: List[str] = []
    phase = 0

    for severity, window, label in SEVERITY_PHASES:
        matching = [g for g in gaps if g.severity == severity]
        if not matching:
            continue
        phase += 1
        steps.append(f"PHASE {phase} ({window}): Address {len(matching)} {label}")
        for g in matching:
            steps.append(f"  - Remediate: {g.description} (Est. {g.estimatedHours} hours)")

    if _tier_at_least(tier, "T2"):
        phase += 1
        steps.append(f"PHASE {phase}: Engage third-party auditor for {tier} audit")
    if _tier_at_least(tier, "T3"):
        phase += 1
        steps.append(f"PHASE {phase}: Implement continuous monitoring infrastructure (dashboards, alerts)")
    if tier == "T4":
        phase += 1
        steps.append(f"PHASE {phase}: Prepare comprehensive dossier for Byzantine Council review")
        phase += 1
        steps.append(f"PHASE {phase}: Submit to Council and await consensus decision")

    return steps


# -----------------------------
# Timeline / cost
# -----------------------------

@dataclass(frozen=True)
class TimelineEstimate:
    total_hours: int
    weeks: int
    months: int

    def describe(self) -> str:
        return f"{self.weeks} weeks (approximately {self.months} months)"


def _ceil(x: float) -> int:
    # float noise from the 0.8 / 0.9 multipliers must not bump a whole number up
    return math.ceil(round(x, 6))


def risk_multiplier(risk_level: str) -> float:
    return TIMELINE_RISK_MULTIPLIERS[resolve_risk_level(risk_level)]


def estimate_timeline(gaps: Sequence[Gap], tier: str, risk_level: str) -> TimelineEstimate:
    tier = resolve_tier(tier)
    total_hours = sum(g.estimatedHours for g in gaps)
    remediation_weeks = math.ceil(total_hours / HOURS_PER_WEEK)

    base_weeks = TIER_BASE_WEEKS[tier]
    if tier != "T1":
        base_weeks += remediation_weeks

    weeks = _ceil(base_weeks * risk_multiplier(risk_level))
    return TimelineEstimate(total_hours=total_hours, weeks=weeks, months=math.ceil(weeks / 4))


def estimate_cost(gaps: Sequence[Gap], tier: str, risk_level: str) -> Tuple[int, int]:
    tier = resolve_tier(tier)
    lo = sum(g.costRange[0] for g in gaps)
    hi = sum(g.costRange[1] for g in gaps)

    tier_lo, tier_hi = TIER_COSTS[tier]
    mult = risk_multiplier(risk_level)
    return _ceil((lo + tier_lo) * mult), _ceil((hi + tier_hi) * mult)
