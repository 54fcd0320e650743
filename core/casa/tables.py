"""
Static CASA lookup tables.

Everything here is read-only configuration loaded once per process. Mappings are
wrapped in MappingProxyType and records are frozen dataclasses.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Optional, Tuple

logger = logging.getLogger(__name__)


TABLES_VERSION = "casa-tables-2026.1"


SECTORS: Tuple[str, ...] = (
    "healthcare",
    "finance",
    "autonomous-systems",
    "content-generation",
    "education",
    "legal",
    "government",
    "critical-infrastructure",
    "other",
)

RISK_LEVELS: Tuple[str, ...] = ("minimal", "low", "moderate", "high", "critical")

TIERS: Tuple[str, ...] = ("T1", "T2", "T3", "T4")

DOMAINS: Tuple[str, ...] = ("governance", "data", "model", "deployment", "monitoring")

DEFAULT_SECTOR = "other"
DEFAULT_RISK_LEVEL = "moderate"
DEFAULT_TIER = "T2"

DOMAIN_MAX = 20.0


# -----------------------------
# Domain scoring
# -----------------------------

SECTOR_MULTIPLIERS: Mapping[str, float] = MappingProxyType({
    "critical-infrastructure": 1.0,
    "healthcare": 0.95,
    "finance": 0.9,
    "autonomous-systems": 0.85,
    "government": 0.85,
    "legal": 0.75,
    "education": 0.7,
    "content-generation": 0.6,
    "other": 0.5,
})

# scales deployment + monitoring in parametric scoring
RISK_SCORE_MULTIPLIERS: Mapping[str, float] = MappingProxyType({
    "minimal": 0.2,
    "low": 0.4,
    "moderate": 0.6,
    "high": 0.8,
    "critical": 1.0,
})

# monitoring carries 10/12 of the weight of the other domains
DOMAIN_BASE_POINTS: Mapping[str, float] = MappingProxyType({
    "governance": DOMAIN_MAX,
    "data": DOMAIN_MAX,
    "model": DOMAIN_MAX,
    "deployment": DOMAIN_MAX,
    "monitoring": DOMAIN_MAX * 10 / 12,
})

RISK_SCALED_DOMAINS = frozenset({"deployment", "monitoring"})

DOMAIN_KEYWORDS: Mapping[str, Tuple[str, ...]] = MappingProxyType({
    "governance": ("policy", "governance", "responsibility", "ethics", "committee", "procedure"),
    "data": ("data", "quality", "bias", "dataset", "logging", "audit trail", "privacy"),
    "model": ("model", "training", "testing", "evaluation", "red-team", "safety", "alignment"),
    "deployment": ("deploy", "monitor", "control", "access", "limit", "safeguard", "runtime"),
    "monitoring": ("monitor", "track", "alert", "metric", "dashboard", "anomaly", "incident"),
})

KEYWORD_POINTS = 2

# a domain counts toward "high" confidence once it reaches this many points
CONFIDENCE_DOMAIN_FLOOR = 12


# -----------------------------
# Tiers
# -----------------------------

@dataclass(frozen=True)
class TierRequirement:
    tier: str
    min_score: int
    title: str
    description: str
    domains: Tuple[str, ...]
    key_requirements: Tuple[str, ...]


TIER_REQUIREMENTS: Mapping[str, TierRequirement] = MappingProxyType({
    "T1": TierRequirement(
        tier="T1",
        min_score=40,
        title="Self-Assessment",
        description="Self-Assessment: Organization conducts internal assessment of AI governance practices.",
        domains=DOMAINS,
        key_requirements=(
            "Basic compliance documentation",
            "Incident reporting mechanism",
            "Safety controls in place",
            "Gap identification and planning",
        ),
    ),
    "T2": TierRequirement(
        tier="T2",
        min_score=65,
        title="Third-Party Audit",
        description="Third-Party Audit: External auditor verifies compliance with CASA standards and applicable frameworks.",
        domains=DOMAINS,
        key_requirements=(
            "Third-party audit completed",
            "Advanced compliance framework",
            "Detailed audit reports",
            "Quarterly self-audits",
            "Remediation plans for all gaps",
        ),
    ),
    "T3": TierRequirement(
        tier="T3",
        min_score=80,
        title="Continuous Monitoring",
        description="Continuous Monitoring: Ongoing automated and manual monitoring of system performance and safety metrics.",
        domains=DOMAINS,
        key_requirements=(
            "Continuous monitoring systems",
            "Real-time dashboards",
            "Quarterly reassessments",
            "Incident SLA < 24 hours",
            "Automated compliance tracking",
            "Monthly audit trail reviews",
        ),
    ),
    "T4": TierRequirement(
        tier="T4",
        min_score=90,
        title="Byzantine Council Review",
        description="Byzantine Council Review: Independent expert council reviews systemic risks and governance approach.",
        domains=DOMAINS,
        key_requirements=(
            "All T3 requirements maintained",
            "Byzantine Council consensus (22/33)",
            "Zero critical incidents in 12 months",
            "Continuous monitoring with < 4-hour incident response",
            "Community peer review completed",
        ),
    ),
})


# -----------------------------
# Gaps
# -----------------------------

GAP_THRESHOLD = 15
GAP_THRESHOLD_T4_BONUS = 5
GAP_POINTS_PER_ITEM = 5

SEVERITY_RANK: Mapping[str, int] = MappingProxyType({"critical": 0, "high": 1, "medium": 2, "low": 3})


@dataclass(frozen=True)
class GapCandidate:
    slug: str
    description: str
    # severity is `severe` while the domain score is below `cutoff`, else `mild`
    cutoff: float
    severe: str
    mild: str
    effort: str
    hours: int
    cost: Tuple[int, int]

    def severity_for(self, score: float) -> str:
        return self.severe if score < self.cutoff else self.mild


# table order breaks severity ties when a domain needs fewer gaps than it has candidates
GAP_CANDIDATES: Mapping[str, Tuple[GapCandidate, ...]] = MappingProxyType({
    "governance": (
        GapCandidate(
            slug="review_board",
            description="Establish executive-level board for AI safety decisions with documented charter and meeting minutes",
            cutoff=10, severe="critical", mild="high", effort="high", hours=80, cost=(8000, 15000),
        ),
        GapCandidate(
            slug="incident_plan",
            description="Create detailed incident response procedures with escalation paths and communication protocols",
            cutoff=8, severe="high", mild="medium", effort="high", hours=60, cost=(6000, 12000),
        ),
        GapCandidate(
            slug="compliance_tracking",
            description="Implement system to track compliance status across all AI systems and maintain audit logs",
            cutoff=10, severe="high", mild="medium", effort="medium", hours=40, cost=(5000, 10000),
        ),
    ),
    "data": (
        GapCandidate(
            slug="lineage",
            description="Document complete data provenance from collection through processing and model training",
            cutoff=10, severe="critical", mild="high", effort="high", hours=100, cost=(10000, 20000),
        ),
        GapCandidate(
            slug="bias_pipeline",
            description="Implement automated bias detection across training and evaluation datasets",
            cutoff=8, severe="high", mild="medium", effort="high", hours=120, cost=(15000, 30000),
        ),
        GapCandidate(
            slug="quality_metrics",
            description="Define and track data quality metrics with automated alerting for degradation",
            cutoff=10, severe="high", mild="medium", effort="medium", hours=50, cost=(5000, 10000),
        ),
    ),
    "model": (
        GapCandidate(
            slug="safety_testing",
            description="Develop comprehensive safety testing framework including adversarial examples and edge cases",
            cutoff=10, severe="critical", mild="high", effort="high", hours=120, cost=(15000, 30000),
        ),
        GapCandidate(
            slug="fmea",
            description="Conduct systematic FMEA to identify failure modes and mitigation strategies",
            cutoff=8, severe="high", mild="medium", effort="high", hours=100, cost=(12000, 25000),
        ),
        GapCandidate(
            slug="interpretability",
            description="Implement interpretability mechanisms (SHAP, attention visualization, etc.)",
            cutoff=10, severe="high", mild="medium", effort="medium", hours=80, cost=(8000, 16000),
        ),
    ),
    "deployment": (
        GapCandidate(
            slug="runtime_monitoring",
            description="Deploy real-time monitoring of model performance, latency, and anomalies",
            cutoff=10, severe="critical", mild="high", effort="high", hours=90, cost=(12000, 25000),
        ),
        GapCandidate(
            slug="access_control",
            description="Implement granular access controls with role-based permissions and audit logging",
            cutoff=8, severe="high", mild="medium", effort="medium", hours=60, cost=(6000, 12000),
        ),
        GapCandidate(
            slug="safeguards",
            description="Implement rate limiting, input validation, and automatic degradation mechanisms",
            cutoff=10, severe="high", mild="medium", effort="medium", hours=70, cost=(8000, 15000),
        ),
    ),
    "monitoring": (
        GapCandidate(
            slug="dashboard",
            description="Build real-time dashboards for system performance, safety metrics, and KPIs",
            cutoff=5, severe="high", mild="medium", effort="medium", hours=60, cost=(8000, 15000),
        ),
        GapCandidate(
            slug="anomaly_detection",
            description="Implement automated anomaly detection with alert escalation procedures",
            cutoff=8, severe="high", mild="medium", effort="medium", hours=80, cost=(10000, 20000),
        ),
        GapCandidate(
            slug="reassessment",
            description="Establish quarterly reassessment schedule with documented findings",
            cutoff=10, severe="medium", mild="low", effort="low", hours=30, cost=(3000, 6000),
        ),
    ),
})


@dataclass(frozen=True)
class FixedGap:
    slug: str
    area: str
    description: str
    severity: str
    effort: str
    hours: int
    cost: Tuple[int, int]


RISK_MANAGEMENT_GAP = FixedGap(
    slug="risk",
    area="Risk Management",
    description=(
        "Critical risk level requires enhanced monitoring and control. "
        "Implement Byzantine consensus protocols and continuous auditing."
    ),
    severity="critical",
    effort="high",
    hours=150,
    cost=(25000, 50000),
)

T4_PREREQUISITE_GAP = FixedGap(
    slug="tier_t3_prereq",
    area="Prerequisites",
    description="Complete and maintain all T3 requirements before Byzantine Council review",
    severity="critical",
    effort="high",
    hours=200,
    cost=(50000, 100000),
)

TIER_ADDON_GAPS: Mapping[str, Tuple[FixedGap, ...]] = MappingProxyType({
    "T1": (),
    "T2": (
        FixedGap(
            slug="tier_audit", area="Audit",
            description="Engage CASA-accredited third-party auditor for comprehensive T2 audit",
            severity="high", effort="high", hours=160, cost=(25000, 75000),
        ),
    ),
    "T3": (
        FixedGap(
            slug="tier_continuous", area="Monitoring",
            description="Establish continuous monitoring infrastructure with automated alerting",
            severity="high", effort="high", hours=120, cost=(20000, 50000),
        ),
        FixedGap(
            slug="tier_reassess", area="Assessment",
            description="Implement quarterly reassessment schedule with documented procedures",
            severity="high", effort="medium", hours=60, cost=(10000, 20000),
        ),
    ),
    "T4": (
        FixedGap(
            slug="tier_dossier", area="Council",
            description="Prepare comprehensive dossier for 33-LLM Byzantine Council review",
            severity="high", effort="high", hours=120, cost=(25000, 75000),
        ),
    ),
})


# -----------------------------
# Timeline / cost
# -----------------------------

HOURS_PER_WEEK = 40

# T1 is a flat baseline; other tiers add remediation weeks on top
TIER_BASE_WEEKS: Mapping[str, int] = MappingProxyType({"T1": 4, "T2": 12, "T3": 16, "T4": 24})

TIMELINE_RISK_MULTIPLIERS: Mapping[str, float] = MappingProxyType({
    "critical": 1.5,
    "high": 1.25,
    "moderate": 1.0,
    "low": 0.9,
    "minimal": 0.8,
})

TIER_COSTS: Mapping[str, Tuple[int, int]] = MappingProxyType({
    "T1": (5000, 15000),
    "T2": (25000, 75000),
    "T3": (75000, 200000),
    "T4": (200000, 500000),
})


# -----------------------------
# Lookup fallbacks
# -----------------------------

def _resolve(value: Optional[str], table: Mapping[str, object], default: str, kind: str) -> str:
    key = str(value or "").strip()
    for candidate in (key, key.lower(), key.upper()):
        if candidate in table:
            return candidate
    logger.debug("Unknown %s %r; falling back to %s", kind, value, default)
    return default


def resolve_sector(value: Optional[str]) -> str:
    return _resolve(value, SECTOR_MULTIPLIERS, DEFAULT_SECTOR, "sector")


def resolve_risk_level(value: Optional[str]) -> str:
    return _resolve(value, RISK_SCORE_MULTIPLIERS, DEFAULT_RISK_LEVEL, "risk level")


def resolve_tier(value: Optional[str]) -> str:
    return _resolve(value, TIER_REQUIREMENTS, DEFAULT_TIER, "tier")
