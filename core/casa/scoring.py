from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Protocol, Tuple

from core.casa.models import DomainScores
from core.casa.tables import (
    CONFIDENCE_DOMAIN_FLOOR,
    DOMAIN_BASE_POINTS,
    DOMAIN_KEYWORDS,
    DOMAIN_MAX,
    DOMAINS,
    KEYWORD_POINTS,
    RISK_SCALED_DOMAINS,
    RISK_SCORE_MULTIPLIERS,
    SECTOR_MULTIPLIERS,
    resolve_risk_level,
    resolve_sector,
)


def clamp(x: float, lo: float = 0.0, hi: float = DOMAIN_MAX) -> float:
    return max(lo, min(hi, x))


class DomainScoringStrategy(Protocol):
    def score(self) -> DomainScores:
        ...


@dataclass(frozen=True)
class ParametricScoring:
    """
    Full-assessment scoring: domain base points scaled by sector, with the
    operational domains (deployment, monitoring) further scaled by risk level.
    """

    risk_level: str
    sector: str

    def score(self) -> DomainScores:
        sector_mult = SECTOR_MULTIPLIERS[resolve_sector(self.sector)]
        risk_mult = RISK_SCORE_MULTIPLIERS[resolve_risk_level(self.risk_level)]

        values: Dict[str, float] = {}
        for domain in DOMAINS:
            v = DOMAIN_BASE_POINTS[domain] * sector_mult
            if domain in RISK_SCALED_DOMAINS:
                v *= risk_mult
            values[domain] = clamp(v)
        return DomainScores(**values)


def _compile_keywords(keywords: Mapping[str, Tuple[str, ...]]) -> Dict[str, List[re.Pattern[str]]]:
    return {
        domain: [re.compile(rf"\b{re.escape(k)}\w*\b") for k in words]
        for domain, words in keywords.items()
    }


_KEYWORD_PATTERNS = _compile_keywords(DOMAIN_KEYWORDS)


def count_keyword_matches(text: str) -> Dict[str, int]:
    lowered = (text or "").lower()
    return {
        domain: sum(len(p.findall(lowered)) for p in patterns)
        for domain, patterns in _KEYWORD_PATTERNS.items()
    }


@dataclass(frozen=True)
class KeywordScoring:
    """Gap-analysis scoring: two points per keyword hit in the practices text."""

    practices: str

    def score(self) -> DomainScores:
        matches = count_keyword_matches(self.practices)
        return DomainScores(**{
            domain: clamp(float(matches.get(domain, 0) * KEYWORD_POINTS))
            for domain in DOMAINS
        })


def select_strategy(
    *,
    practices: Optional[str] = None,
    risk_level: Optional[str] = None,
    sector: Optional[str] = None,
) -> DomainScoringStrategy:
    if practices is not None:
        return KeywordScoring(practices=practices)
    if risk_level is None and sector is None:
        raise ValueError("either practices text or risk level/sector is required")
    return ParametricScoring(risk_level=risk_level or "", sector=sector or "")


# -----------------------------
# Aggregate score + tier
# -----------------------------

def compliance_score(scores: DomainScores) -> int:
    """Five 0..20 domains -> 0..100 points."""
    return int(max(0, min(100, round(scores.total()))))


def classify_tier(score: float) -> str:
    if score >= 90:
        return "T4"
    if score >= 80:
        return "T3"
    if score >= 65:
        return "T2"
    # T1 is the floor, including scores below the 40 point minimum
    return "T1"


def confidence_level(scores: DomainScores) -> str:
    values = scores.as_dict().values()
    strong = sum(1 for v in values if v >= CONFIDENCE_DOMAIN_FLOOR) / len(DOMAINS)
    if strong >= 0.8:
        return "high"
    if strong >= 0.5:
        return "medium"
    return "low"


def weakest_domain(scores: DomainScores) -> str:
    values = scores.as_dict()
    return min(DOMAINS, key=lambda d: values[d])


@dataclass(frozen=True)
class ScoreBand:
    label: str
    description: str


SCORE_BANDS = [
    (90, 100, ScoreBand(
        label="Council Ready",
        description="Governance evidence is strong enough for Byzantine Council review.",
    )),
    (80, 89, ScoreBand(
        label="Continuous Assurance",
        description="Mature controls; continuous monitoring is the remaining focus.",
    )),
    (65, 79, ScoreBand(
        label="Audit Ready",
        description="Controls are documented well enough for a third-party audit.",
    )),
    (40, 64, ScoreBand(
        label="Foundational",
        description="Basic controls exist but significant gaps remain.",
    )),
    (0, 39, ScoreBand(
        label="At Risk",
        description="Significant governance gaps must be addressed before deployment.",
    )),
]


def interpret(score: int) -> ScoreBand:
    for lo, hi, band in SCORE_BANDS:
        if lo <= score <= hi:
            return band
    return SCORE_BANDS[-1][2]
