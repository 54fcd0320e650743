from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional, Tuple, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator


Sector = Literal[
    "healthcare",
    "finance",
    "autonomous-systems",
    "content-generation",
    "education",
    "legal",
    "government",
    "critical-infrastructure",
    "other",
]
RiskLevel = Literal["minimal", "low", "moderate", "high", "critical"]
Tier = Literal["T1", "T2", "T3", "T4"]
Severity = Literal["critical", "high", "medium", "low"]
Effort = Literal["low", "medium", "high"]
ConfidenceLevel = Literal["low", "medium", "high"]
Verdict = Literal["approve", "reject", "abstain"]
Orientation = Literal["strict", "balanced", "pragmatic"]
OrganizationSize = Literal["small", "medium", "large", "enterprise"]
MaturityLevel = Literal["initial", "developing", "managed", "optimized"]
TimelinePreference = Literal["accelerated", "standard", "extended"]
ErrorKind = Literal["validation_error", "internal_error"]

CostRange = Tuple[int, int]


# -------------------------------------------------------------------
# Inputs
# -------------------------------------------------------------------

class AssessmentInput(BaseModel):
    model_config = ConfigDict(frozen=True)

    systemName: str = Field(validation_alias=AliasChoices("systemName", "aiSystemName"))
    description: str = Field(min_length=10)
    sector: Sector
    deploymentContext: str = Field(min_length=1)
    estimatedRiskLevel: RiskLevel

    @field_validator("systemName")
    @classmethod
    def validate_system_name(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("AI system name required")
        if len(v) > 200:
            raise ValueError("AI system name too long")
        return v


class GapAnalysisInput(BaseModel):
    model_config = ConfigDict(frozen=True)

    currentPractices: str = ""
    targetTier: Tier


class ByzantineSimulateInput(BaseModel):
    model_config = ConfigDict(frozen=True)

    assessmentData: Dict[str, Any]
    numJudges: Optional[int] = Field(default=None, ge=3, le=99)


class CertificationRoadmapInput(BaseModel):
    model_config = ConfigDict(frozen=True)

    organizationSize: OrganizationSize
    sector: Sector
    currentMaturityLevel: MaturityLevel
    targetTier: Tier
    timelinePreference: TimelinePreference


class AuditChecklistInput(BaseModel):
    model_config = ConfigDict(frozen=True)

    tier: Tier
    sector: Sector
    aiSystemType: str = Field(min_length=1)


class QuickScoreInput(BaseModel):
    model_config = ConfigDict(frozen=True)

    answers: Dict[str, Union[bool, int, float, str]]


# -------------------------------------------------------------------
# Scoring + gaps
# -------------------------------------------------------------------

class DomainScores(BaseModel):
    model_config = ConfigDict(frozen=True)

    governance: float = Field(ge=0, le=20)
    data: float = Field(ge=0, le=20)
    model: float = Field(ge=0, le=20)
    deployment: float = Field(ge=0, le=20)
    monitoring: float = Field(ge=0, le=20)

    def as_dict(self) -> Dict[str, float]:
        return {
            "governance": self.governance,
            "data": self.data,
            "model": self.model,
            "deployment": self.deployment,
            "monitoring": self.monitoring,
        }

    def total(self) -> float:
        return sum(self.as_dict().values())


class Gap(BaseModel):
    id: str
    area: str
    description: str
    severity: Severity
    remediationEffort: Effort
    priority: int = Field(ge=0)
    estimatedHours: int = Field(ge=0)
    costRange: CostRange

    @model_validator(mode="after")
    def validate_cost_range(self) -> "Gap":
        if self.costRange[0] > self.costRange[1]:
            raise ValueError("costRange minimum exceeds maximum")
        return self


class AssessmentResult(BaseModel):
    assessmentId: str
    systemName: str
    completionDate: str
    tierRecommendation: Tier
    tierDescription: str
    complianceScore: int = Field(ge=0, le=100)
    domainScores: DomainScores
    gaps: List[Gap] = Field(default_factory=list)
    remediationSteps: List[str] = Field(default_factory=list)
    estimatedTimeline: str
    costRange: CostRange
    confidenceLevel: ConfidenceLevel
    keyFindings: List[str] = Field(default_factory=list)
    nextSteps: List[str] = Field(default_factory=list)
    scoringVersion: str = "casa-v1.0"


# -------------------------------------------------------------------
# Council
# -------------------------------------------------------------------

class ByzantineVote(BaseModel):
    judgeId: str
    judgeName: str
    specialty: str
    orientation: Orientation
    verdict: Verdict
    confidence: float = Field(ge=0, le=1)
    rationale: str


class ConsensusResult(BaseModel):
    votes: List[ByzantineVote]
    numJudges: int
    approveCount: int
    rejectCount: int
    abstainCount: int
    requiredSupermajority: int
    supermajorityReached: bool
    consensusDecision: str
    # 0..100: leading side's share of decisive votes
    confidenceScore: int = Field(ge=0, le=100)
    sampleDissent: List[str] = Field(default_factory=list)
    deliberationNotes: List[str] = Field(default_factory=list)


# -------------------------------------------------------------------
# Roadmap / checklist / quick score
# -------------------------------------------------------------------

class RoadmapPhase(BaseModel):
    phase: int
    title: str
    durationWeeks: int
    duration: str
    milestones: List[str]
    resourceRequirements: List[str]
    estimatedCost: CostRange
    keyActivities: List[str]
    successCriteria: List[str]


class OrganizationProfile(BaseModel):
    size: OrganizationSize
    sector: Sector
    currentMaturity: MaturityLevel
    targetTier: Tier


class Roadmap(BaseModel):
    organizationProfile: OrganizationProfile
    totalWeeks: int
    totalDuration: str
    totalEstimatedCost: CostRange
    phases: List[RoadmapPhase]
    riskFactors: List[str]
    criticalSuccessFactors: List[str]


class ChecklistItem(BaseModel):
    id: str
    category: str
    item: str
    description: str
    evidence: List[str]
    tiers: List[Tier]


class AuditChecklist(BaseModel):
    tier: Tier
    sector: Sector
    systemType: str
    generatedDate: str
    sections: Dict[str, List[ChecklistItem]]
    totalItems: int
    estimatedCompletionHours: int


class QuickScoreGap(BaseModel):
    area: str
    gap: str
    severity: Severity


class QuickScoreResult(BaseModel):
    score: int = Field(ge=0, le=100)
    percentage: str
    tier: Tier
    domainScores: DomainScores
    topGaps: List[QuickScoreGap]
    recommendations: List[str]


# -------------------------------------------------------------------
# Operation boundary
# -------------------------------------------------------------------

class OperationError(BaseModel):
    kind: ErrorKind
    message: str
    details: List[Dict[str, Any]] = Field(default_factory=list)


class OperationResult(BaseModel):
    operation: str
    success: bool
    data: Optional[Any] = None
    error: Optional[OperationError] = None
