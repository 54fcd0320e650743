"""
Audit-preparation checklists and quick triage scoring.

Both are thin lookups over the same tier/sector enums as the full assessment.
The quick scorer maps a handful of yes/no style answers onto the five domains
and reuses the tier classifier and gap identifier.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Dict, List, Mapping, Optional, Tuple, Union

from core.casa.gaps import identify_gaps
from core.casa.ids import IdGenerator, SequentialIdGenerator
from core.casa.models import (
    AuditChecklist,
    AuditChecklistInput,
    ChecklistItem,
    DomainScores,
    QuickScoreGap,
    QuickScoreInput,
    QuickScoreResult,
)
from core.casa.scoring import classify_tier
from core.casa.tables import DOMAIN_MAX, DOMAINS


ALL_TIERS = ("T1", "T2", "T3", "T4")
T2_UP = ("T2", "T3", "T4")
T3_UP = ("T3", "T4")

HOURS_PER_ITEM = 5


@dataclass(frozen=True)
class ChecklistTemplate:
    id: str
    category: str
    item: str
    description: str
    evidence: Tuple[str, ...]
    tiers: Tuple[str, ...]

    def render(self) -> ChecklistItem:
        return ChecklistItem(
            id=self.id,
            category=self.category,
            item=self.item,
            description=self.description,
            evidence=list(self.evidence),
            tiers=list(self.tiers),
        )


DOMAIN_CHECKLIST: Mapping[str, Tuple[ChecklistTemplate, ...]] = {
    "governance": (
        ChecklistTemplate(
            "gov_001", "Governance", "AI Safety Review Board Established",
            "Executive-level board with documented charter, meeting minutes, and decision tracking",
            ("Board charter document", "Meeting minutes (last 6 months)", "Member list with roles", "Decision log"),
            ALL_TIERS,
        ),
        ChecklistTemplate(
            "gov_002", "Governance", "Incident Response Plan",
            "Documented procedures for AI-related incidents with clear escalation paths",
            ("Incident response plan (v2+)", "Escalation matrix", "Communication templates", "Incident drills conducted"),
            T2_UP,
        ),
        ChecklistTemplate(
            "gov_003", "Governance", "Compliance Tracking System",
            "System to track compliance status across all AI systems",
            ("System access log", "Compliance dashboard screenshots", "Audit trail reports"),
            T2_UP,
        ),
    ),
    "data": (
        ChecklistTemplate(
            "data_001", "Data", "Data Lineage Documentation",
            "Complete documentation of data provenance from source through model training",
            ("Data lineage diagrams", "Source system documentation", "Processing pipeline code", "Training data manifest"),
            T2_UP,
        ),
        ChecklistTemplate(
            "data_002", "Data", "Bias Detection Process",
            "Automated detection of biases in training and evaluation data",
            ("Bias detection tool documentation", "Monthly bias reports", "Remediation actions taken", "Benchmark test results"),
            T2_UP,
        ),
        ChecklistTemplate(
            "data_003", "Data", "Data Quality Metrics",
            "Defined metrics for data quality with monitoring and alerting",
            ("Quality metrics definition", "Monitoring dashboard", "Alert configuration", "Alert response logs"),
            T3_UP,
        ),
    ),
    "model": (
        ChecklistTemplate(
            "model_001", "Model", "Safety Testing Framework",
            "Comprehensive safety testing including adversarial examples and edge cases",
            ("Test suite documentation", "Test execution logs", "Failure analysis reports", "Test coverage metrics"),
            T2_UP,
        ),
        ChecklistTemplate(
            "model_002", "Model", "Failure Mode Analysis (FMEA)",
            "Systematic analysis of potential failure modes and mitigation strategies",
            ("FMEA document", "Risk assessment matrix", "Mitigation plan", "Mitigation verification"),
            T2_UP,
        ),
        ChecklistTemplate(
            "model_003", "Model", "Model Interpretability",
            "Mechanisms to explain model decisions and understand behavior",
            ("Interpretability method documentation", "Example explanations", "User testing results", "Limitation documentation"),
            T3_UP,
        ),
    ),
    "deployment": (
        ChecklistTemplate(
            "deploy_001", "Deployment", "Runtime Monitoring System",
            "Real-time monitoring of model performance and anomalies",
            ("Monitoring system documentation", "Dashboard screenshots", "Alert configuration", "Monthly reports"),
            T2_UP,
        ),
        ChecklistTemplate(
            "deploy_002", "Deployment", "Access Control Framework",
            "Granular access controls with role-based permissions and audit logging",
            ("Access control policy", "Role definitions", "User access list", "Audit logs (sample)"),
            T2_UP,
        ),
        ChecklistTemplate(
            "deploy_003", "Deployment", "Automated Safeguards",
            "Rate limiting, input validation, and automatic degradation",
            ("Safeguard implementation code", "Configuration parameters", "Test results", "Incident response logs"),
            T3_UP,
        ),
    ),
    "monitoring": (
        ChecklistTemplate(
            "mon_001", "Monitoring", "Performance Dashboard",
            "Real-time dashboard for system performance and safety metrics",
            ("Dashboard screenshots", "Metric definitions", "Update frequency logs", "User access logs"),
            T3_UP,
        ),
        ChecklistTemplate(
            "mon_002", "Monitoring", "Anomaly Detection",
            "Automated detection of anomalies with alert escalation",
            ("Algorithm documentation", "Threshold configuration", "Monthly alerts", "Alert response logs"),
            T3_UP,
        ),
        ChecklistTemplate(
            "mon_003", "Monitoring", "Quarterly Reassessment",
            "Scheduled reassessments with documented findings and actions",
            ("Reassessment schedule", "Completed assessments (3+)", "Finding summaries", "Remediation tracking"),
            T3_UP,
        ),
    ),
}

SECTOR_CHECKLIST: Mapping[str, Tuple[ChecklistTemplate, ...]] = {
    "healthcare": (
        ChecklistTemplate(
            "sector_hc_001", "Sector", "Protected Health Information Safeguards",
            "Controls covering PHI in training data, prompts, and model outputs",
            ("PHI data-flow map", "De-identification procedure", "Access review records"),
            ALL_TIERS,
        ),
        ChecklistTemplate(
            "sector_hc_002", "Sector", "Clinical Validation Evidence",
            "Validation of model performance against clinical ground truth and intended use",
            ("Clinical validation protocol", "Performance by patient subgroup", "Clinician sign-off"),
            T2_UP,
        ),
    ),
    "finance": (
        ChecklistTemplate(
            "sector_fin_001", "Sector", "Model Risk Management Inventory",
            "AI systems registered in the model risk inventory with tiering and owners",
            ("Model inventory extract", "Risk tiering rationale", "Independent validation report"),
            ALL_TIERS,
        ),
        ChecklistTemplate(
            "sector_fin_002", "Sector", "Adverse Action Explainability",
            "Reason codes or explanations available for decisions affecting customers",
            ("Reason code catalogue", "Sample adverse action notices", "Explanation accuracy tests"),
            T2_UP,
        ),
    ),
    "autonomous-systems": (
        ChecklistTemplate(
            "sector_auto_001", "Sector", "Safety Case and Operational Design Domain",
            "Structured safety argument bounded by a documented operational design domain",
            ("Safety case document", "ODD specification", "Hazard log"),
            ALL_TIERS,
        ),
        ChecklistTemplate(
            "sector_auto_002", "Sector", "Fallback Behaviour Testing",
            "Testing of minimal-risk fallback behaviour when the system leaves its ODD",
            ("Fallback test plan", "Simulation results", "Field test logs"),
            T3_UP,
        ),
    ),
    "content-generation": (
        ChecklistTemplate(
            "sector_cg_001", "Sector", "Content Provenance and Labelling",
            "Generated content carries provenance metadata or visible disclosure",
            ("Labelling policy", "Provenance implementation notes", "Sample labelled outputs"),
            ALL_TIERS,
        ),
    ),
    "education": (
        ChecklistTemplate(
            "sector_edu_001", "Sector", "Learner Data Protection",
            "Student data handling meets applicable education privacy obligations",
            ("Student data inventory", "Parental consent records", "Retention schedule"),
            ALL_TIERS,
        ),
    ),
    "legal": (
        ChecklistTemplate(
            "sector_legal_001", "Sector", "Human Review of Legal Outputs",
            "Qualified reviewers approve AI-generated legal content before use",
            ("Review procedure", "Reviewer qualification records", "Sampled review logs"),
            ALL_TIERS,
        ),
    ),
    "government": (
        ChecklistTemplate(
            "sector_gov_001", "Sector", "Algorithmic Impact Assessment",
            "Published impact assessment covering affected populations and redress",
            ("Impact assessment", "Public consultation record", "Redress procedure"),
            ALL_TIERS,
        ),
        ChecklistTemplate(
            "sector_gov_002", "Sector", "Public Transparency Record",
            "System listed in a public register with purpose and responsible body",
            ("Register entry", "Plain-language system description"),
            T2_UP,
        ),
    ),
    "critical-infrastructure": (
        ChecklistTemplate(
            "sector_ci_001", "Sector", "Fail-Safe and Manual Override Controls",
            "Operators can override or isolate the AI system without loss of essential service",
            ("Override procedure", "Override drill records", "Fail-safe design review"),
            ALL_TIERS,
        ),
        ChecklistTemplate(
            "sector_ci_002", "Sector", "Operational Technology Segmentation",
            "AI components are segmented from operational technology networks",
            ("Network segmentation diagram", "Firewall rule review", "Penetration test summary"),
            T2_UP,
        ),
    ),
    "other": (),
}

GENERATIVE_MARKERS = ("llm", "language model", "generative", "chatbot", "gpt", "assistant")

GENERATIVE_CHECKLIST: Tuple[ChecklistTemplate, ...] = (
    ChecklistTemplate(
        "sys_gen_001", "System Type", "Output Harm Filtering",
        "Filters and policies preventing harmful or disallowed generated output",
        ("Content policy", "Filter configuration", "Filter evaluation results"),
        ALL_TIERS,
    ),
    ChecklistTemplate(
        "sys_gen_002", "System Type", "Prompt Injection and Jailbreak Testing",
        "Adversarial testing against prompt injection and jailbreak techniques",
        ("Red-team report", "Attack catalogue", "Regression test results"),
        T2_UP,
    ),
)


def is_generative_system(system_type: str) -> bool:
    lowered = (system_type or "").lower()
    return any(m in lowered for m in GENERATIVE_MARKERS)


def _for_tier(templates: Tuple[ChecklistTemplate, ...], tier: str) -> List[ChecklistItem]:
    return [t.render() for t in templates if tier in t.tiers]


def generate_audit_checklist(payload: AuditChecklistInput, *, today: Optional[date] = None) -> AuditChecklist:
    tier = payload.tier
    sections: Dict[str, List[ChecklistItem]] = {
        domain: _for_tier(DOMAIN_CHECKLIST[domain], tier) for domain in DOMAINS
    }

    sector_items = _for_tier(SECTOR_CHECKLIST.get(payload.sector, ()), tier)
    if sector_items:
        sections["sector"] = sector_items
    if is_generative_system(payload.aiSystemType):
        sections["systemType"] = _for_tier(GENERATIVE_CHECKLIST, tier)

    total = sum(len(items) for items in sections.values())
    return AuditChecklist(
        tier=tier,
        sector=payload.sector,
        systemType=payload.aiSystemType,
        generatedDate=(today or datetime.now(timezone.utc).date()).isoformat(),
        sections=sections,
        totalItems=total,
        estimatedCompletionHours=total * HOURS_PER_ITEM,
    )


# -----------------------------
# Quick score
# -----------------------------

QUICK_SCORE_WEIGHTS: Mapping[str, int] = {
    "governance_board": 25,
    "data_lineage": 20,
    "safety_testing": 20,
    "deployment_monitoring": 20,
    "continuous_monitoring": 15,
}
DEFAULT_ANSWER_WEIGHT = 10

QUICK_SCORE_DOMAINS: Mapping[str, str] = {
    "governance": "governance_board",
    "data": "data_lineage",
    "model": "safety_testing",
    "deployment": "deployment_monitoring",
    "monitoring": "continuous_monitoring",
}

POSITIVE_ANSWERS = frozenset({"yes", "true", "documented", "implemented", "complete"})
PARTIAL_ANSWERS = frozenset({"partial", "in-progress", "in progress", "planned"})

TOP_GAP_COUNT = 3

TIER_RECOMMENDATIONS = {
    "T1": "Start with T1 self-assessment to establish baseline compliance",
    "T2": "Engage CASA-accredited auditor for T2 third-party audit",
    "T3": "Implement continuous monitoring systems and schedule quarterly reassessments",
    "T4": "Prepare comprehensive dossier and apply for Byzantine Council review",
}

Answer = Union[bool, int, float, str]


def answer_value(v: Answer) -> float:
    """Normalise one answer to 0..1."""
    if isinstance(v, bool):
        return 1.0 if v else 0.0
    if isinstance(v, (int, float)):
        return max(0.0, min(10.0, float(v))) / 10.0
    s = str(v).strip().lower()
    if s in POSITIVE_ANSWERS:
        return 1.0
    if s in PARTIAL_ANSWERS:
        return 0.5
    return 0.0


def quick_domain_scores(answers: Mapping[str, Answer]) -> DomainScores:
    return DomainScores(**{
        domain: DOMAIN_MAX * answer_value(answers[key]) if key in answers else 0.0
        for domain, key in QUICK_SCORE_DOMAINS.items()
    })


def quick_score_value(answers: Mapping[str, Answer]) -> int:
    if not answers:
        return 0
    earned = 0.0
    possible = 0
    for key, value in answers.items():
        weight = QUICK_SCORE_WEIGHTS.get(key, DEFAULT_ANSWER_WEIGHT)
        earned += weight * answer_value(value)
        possible += weight
    return int(round(earned / possible * 100))


def generate_quick_score(
    payload: QuickScoreInput,
    *,
    id_generator: Optional[IdGenerator] = None,
) -> QuickScoreResult:
    answers = payload.answers
    score = quick_score_value(answers)
    tier = classify_tier(score)
    scores = quick_domain_scores(answers)

    top: List[QuickScoreGap] = []
    seen = set()
    for g in identify_gaps(scores, id_generator=id_generator or SequentialIdGenerator("quick")):
        if g.area in seen:
            continue
        seen.add(g.area)
        top.append(QuickScoreGap(area=g.area, gap=g.description, severity=g.severity))
        if len(top) == TOP_GAP_COUNT:
            break

    recommendations = [
        TIER_RECOMMENDATIONS[tier],
        f"Prioritize remediating the {len(top)} identified gaps",
        "Establish monthly compliance review meetings with stakeholders",
    ]

    return QuickScoreResult(
        score=score,
        percentage=f"{score}%",
        tier=tier,
        domainScores=scores,
        topGaps=top,
        recommendations=recommendations,
    )
