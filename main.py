import logging
from datetime import datetime, timezone
from typing import Any, Dict, List

from fastapi import Body, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import settings
from core.casa.models import (
    AssessmentResult,
    AuditChecklist,
    ConsensusResult,
    Gap,
    OperationResult,
    QuickScoreResult,
    Roadmap,
)
from core.casa.service import CertificationService
from core.casa.tables import TABLES_VERSION, TIER_REQUIREMENTS

# -------------------------------------------------------------------
# Logging
# -------------------------------------------------------------------

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s - %(message)s",
)
logger = logging.getLogger("casa")

logger.info("Council seed: %s", "FIXED" if settings.council_reproducible else "RANDOM")

# -------------------------------------------------------------------
# FastAPI App
# -------------------------------------------------------------------

app = FastAPI(
    title="CASA Certification API",
    version="1.0.0",
    description="CASA: tiered AI-system certification scoring, gap analysis and council simulation.",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.FRONTEND_ORIGIN],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

service = CertificationService(
    council_seed=settings.COUNCIL_SEED,
    default_num_judges=settings.DEFAULT_NUM_JUDGES,
    scoring_version=settings.SCORING_VERSION,
)

_ERROR_STATUS = {
    "validation_error": 422,
    "internal_error": 500,
}


def _unwrap(result: OperationResult) -> Any:
    if result.success:
        return result.data
    err = result.error
    raise HTTPException(
        status_code=_ERROR_STATUS.get(err.kind, 500) if err else 500,
        detail=err.model_dump() if err else "Unknown error",
    )

# -------------------------------------------------------------------
# Routes
# -------------------------------------------------------------------

@app.get("/")
def root():
    return {"status": "ok", "service": "CASA Certification API", "version": "1.0.0"}


@app.get("/health")
def health():
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "scoring_version": settings.SCORING_VERSION,
        "tables_version": TABLES_VERSION,
        "operations": service.operations,
    }


@app.get("/tiers")
def tiers() -> Dict[str, Any]:
    return {
        tier: {
            "minScore": req.min_score,
            "title": req.title,
            "description": req.description,
            "domains": list(req.domains),
            "keyRequirements": list(req.key_requirements),
        }
        for tier, req in TIER_REQUIREMENTS.items()
    }


@app.post("/full_assessment", response_model=AssessmentResult)
def full_assessment(payload: Any = Body(...)):
    return _unwrap(service.full_assessment(payload))


@app.post("/gap_analysis", response_model=List[Gap])
def gap_analysis(payload: Any = Body(...)):
    return _unwrap(service.gap_analysis(payload))


@app.post("/byzantine_simulate", response_model=ConsensusResult)
def byzantine_simulate(payload: Any = Body(...)):
    return _unwrap(service.byzantine_simulate(payload))


@app.post("/certification_roadmap", response_model=Roadmap)
def certification_roadmap(payload: Any = Body(...)):
    return _unwrap(service.certification_roadmap(payload))


@app.post("/audit_checklist", response_model=AuditChecklist)
def audit_checklist(payload: Any = Body(...)):
    return _unwrap(service.audit_checklist(payload))


@app.post("/quick_score", response_model=QuickScoreResult)
def quick_score(payload: Any = Body(...)):
    return _unwrap(service.quick_score(payload))


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail, "status_code": exc.status_code, "path": str(request.url)},
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled exception: %s", exc)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})
