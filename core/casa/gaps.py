"""
Gap identification.

Turns domain scores into a ranked remediation list. Pinned gaps (critical risk,
T4 prerequisites) take the lowest priorities starting at 0, and priority 0 is
never given to anything else; domain gaps follow in domain order, most severe
first within a domain; tier add-ons come last. Content is a pure function of
the inputs, only the ids carry a per-run suffix.
"""

from __future__ import annotations

import math
from typing import List, Optional, Sequence

from core.casa.ids import IdGenerator, RandomIdGenerator
from core.casa.models import DomainScores, Gap
from core.casa.scoring import select_strategy
from core.casa.tables import (
    DOMAINS,
    GAP_CANDIDATES,
    GAP_POINTS_PER_ITEM,
    GAP_THRESHOLD,
    GAP_THRESHOLD_T4_BONUS,
    RISK_MANAGEMENT_GAP,
    SEVERITY_RANK,
    T4_PREREQUISITE_GAP,
    TIER_ADDON_GAPS,
    FixedGap,
    GapCandidate,
    resolve_tier,
)


def gap_threshold(target_tier: Optional[str] = None) -> int:
    if target_tier == "T4":
        return GAP_THRESHOLD + GAP_THRESHOLD_T4_BONUS
    return GAP_THRESHOLD


def gaps_needed(score: float, threshold: float, available: int) -> int:
    if score >= threshold:
        return 0
    return min(math.ceil((threshold - score) / GAP_POINTS_PER_ITEM), available)


def rank_candidates(candidates: Sequence[GapCandidate], score: float) -> List[GapCandidate]:
    """Most severe first at this score; ties keep table order."""
    return sorted(candidates, key=lambda c: SEVERITY_RANK[c.severity_for(score)])


class _GapBuilder:
    def __init__(self, suffix: str):
        self.suffix = suffix
        self.priority = 0
        self.gaps: List[Gap] = []

    def _next_priority(self) -> int:
        p = self.priority
        self.priority += 1
        return p

    def add_fixed(self, g: FixedGap) -> None:
        priority = self._next_priority()
        self.gaps.append(Gap(
            id=f"gap_{g.slug}_{priority}_{self.suffix}",
            area=g.area,
            description=g.description,
            severity=g.severity,
            remediationEffort=g.effort,
            priority=priority,
            estimatedHours=g.hours,
            costRange=g.cost,
        ))

    def add_candidate(self, domain: str, c: GapCandidate, score: float) -> None:
        priority = self._next_priority()
        self.gaps.append(Gap(
            id=f"gap_{domain}_{c.slug}_{priority}_{self.suffix}",
            area=domain.capitalize(),
            description=c.description,
            severity=c.severity_for(score),
            remediationEffort=c.effort,
            priority=priority,
            estimatedHours=c.hours,
            costRange=c.cost,
        ))


def identify_gaps(
    scores: DomainScores,
    *,
    risk_level: Optional[str] = None,
    target_tier: Optional[str] = None,
    include_tier_addons: bool = False,
    id_generator: Optional[IdGenerator] = None,
) -> List[Gap]:
    """
    Rank the remediation gaps implied by `scores`.

    `target_tier` raises the domain threshold for T4; tier-specific gaps are only
    appended when `include_tier_addons` is set (the gap-analysis path).
    """
    ids = id_generator or RandomIdGenerator()
    tier = resolve_tier(target_tier) if target_tier is not None else None
    builder = _GapBuilder(ids.run_suffix())

    if risk_level == "critical":
        builder.add_fixed(RISK_MANAGEMENT_GAP)
    if include_tier_addons and tier == "T4":
        builder.add_fixed(T4_PREREQUISITE_GAP)
    # priority 0 belongs to pinned gaps only
    builder.priority = max(builder.priority, 1)

    threshold = gap_threshold(tier)
    values = scores.as_dict()
    for domain in DOMAINS:
        score = values[domain]
        candidates = rank_candidates(GAP_CANDIDATES[domain], score)
        for c in candidates[:gaps_needed(score, threshold, len(candidates))]:
            builder.add_candidate(domain, c, score)

    if include_tier_addons and tier is not None:
        for g in TIER_ADDON_GAPS[tier]:
            builder.add_fixed(g)

    return sorted(builder.gaps, key=lambda g: g.priority)


def analyze_gaps(
    practices: str,
    target_tier: str,
    *,
    id_generator: Optional[IdGenerator] = None,
) -> List[Gap]:
    scores = select_strategy(practices=practices or "").score()
    return identify_gaps(
        scores,
        target_tier=target_tier,
        include_tier_addons=True,
        id_generator=id_generator,
    )
