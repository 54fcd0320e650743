"""
Operation boundary for the CASA engine.

Every named operation takes a loose JSON-like payload, validates it with the
pydantic input model, runs the engine and returns an OperationResult. Nothing
raises past this layer: schema problems come back as `validation_error`, any
other failure is logged and comes back as `internal_error`.
"""

from __future__ import annotations

import logging
import random
from typing import Any, Callable, Dict, List, Optional, Tuple, Type

from pydantic import BaseModel, ValidationError

from core.casa.assessment import run_full_assessment
from core.casa.checklist import generate_audit_checklist, generate_quick_score
from core.casa.council import DEFAULT_NUM_JUDGES, AssessmentSummary, simulate_council
from core.casa.gaps import analyze_gaps
from core.casa.ids import IdGenerator, RandomIdGenerator
from core.casa.models import (
    AssessmentInput,
    AuditChecklistInput,
    ByzantineSimulateInput,
    CertificationRoadmapInput,
    GapAnalysisInput,
    OperationError,
    OperationResult,
    QuickScoreInput,
)
from core.casa.roadmap import generate_certification_roadmap

logger = logging.getLogger(__name__)


def _to_json(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, list):
        return [_to_json(v) for v in value]
    return value


def _validation_message(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors(include_url=False):
        loc = ".".join(str(p) for p in err.get("loc", ())) or "payload"
        parts.append(f"{loc}: {err.get('msg')}")
    return "; ".join(parts) or "Invalid input"


class CertificationService:
    """Named CASA operations with validation and typed error results."""

    def __init__(
        self,
        *,
        id_generator: Optional[IdGenerator] = None,
        council_seed: Optional[int] = None,
        default_num_judges: int = DEFAULT_NUM_JUDGES,
        scoring_version: str = "casa-v1.0",
    ):
        self.id_generator = id_generator or RandomIdGenerator()
        self.council_seed = council_seed
        self.default_num_judges = default_num_judges
        self.scoring_version = scoring_version
        self._operations: Dict[str, Tuple[Type[BaseModel], Callable[[Any], Any]]] = {
            "full_assessment": (AssessmentInput, self._full_assessment),
            "gap_analysis": (GapAnalysisInput, self._gap_analysis),
            "byzantine_simulate": (ByzantineSimulateInput, self._byzantine_simulate),
            "certification_roadmap": (CertificationRoadmapInput, generate_certification_roadmap),
            "audit_checklist": (AuditChecklistInput, generate_audit_checklist),
            "quick_score": (QuickScoreInput, generate_quick_score),
        }

    @property
    def operations(self) -> List[str]:
        return list(self._operations)

    # -------------------------------------------------------------------
    # Handlers (take validated input)
    # -------------------------------------------------------------------

    def _full_assessment(self, req: AssessmentInput):
        return run_full_assessment(req, id_generator=self.id_generator, scoring_version=self.scoring_version)

    def _gap_analysis(self, req: GapAnalysisInput):
        return analyze_gaps(req.currentPractices, req.targetTier, id_generator=self.id_generator)

    def _byzantine_simulate(self, req: ByzantineSimulateInput):
        summary = AssessmentSummary.from_mapping(req.assessmentData)
        rng = random.Random(self.council_seed)
        return simulate_council(summary, req.numJudges or self.default_num_judges, rng=rng)

    # -------------------------------------------------------------------
    # Boundary
    # -------------------------------------------------------------------

    def call(self, operation: str, payload: Any) -> OperationResult:
        entry = self._operations.get(operation)
        if entry is None:
            return OperationResult(
                operation=operation,
                success=False,
                error=OperationError(kind="validation_error", message=f"Unknown operation: {operation}"),
            )

        input_model, handler = entry

        logger.info("Operation started: %s", operation)
        try:
            req = input_model.model_validate(payload)
        except ValidationError as e:
            logger.info("Operation rejected: %s (%s errors)", operation, e.error_count())
            return OperationResult(
                operation=operation,
                success=False,
                error=OperationError(
                    kind="validation_error",
                    message=_validation_message(e),
                    details=e.errors(include_url=False, include_context=False, include_input=False),
                ),
            )

        # failures past this point, pydantic ones included, are internal
        try:
            data = handler(req)
        except Exception as e:
            logger.exception("Operation failed: %s", operation)
            return OperationResult(
                operation=operation,
                success=False,
                error=OperationError(kind="internal_error", message=f"{operation} failed: {e}"),
            )

        logger.info("Operation complete: %s", operation)
        return OperationResult(operation=operation, success=True, data=_to_json(data))

    def full_assessment(self, payload: Any) -> OperationResult:
        return self.call("full_assessment", payload)

    def gap_analysis(self, payload: Any) -> OperationResult:
        return self.call("gap_analysis", payload)

    def byzantine_simulate(self, payload: Any) -> OperationResult:
        return self.call("byzantine_simulate", payload)

    def certification_roadmap(self, payload: Any) -> OperationResult:
        return self.call("certification_roadmap", payload)

    def audit_checklist(self, payload: Any) -> OperationResult:
        return self.call("audit_checklist", payload)

    def quick_score(self, payload: Any) -> OperationResult:
        return self.call("quick_score", payload)
