"""
readiness/routers/analyze_router.py
POST /analyze     full readiness audit: probes, score, feedback
POST /check-llms  stand-alone llms.txt probe with the three-state outcome and a B/C grade
"""
from fastapi import APIRouter
from starlette.concurrency import run_in_threadpool

from ..config import get_settings
from ..errors import AuditError
from ..logging import get_logger
from ..models import AnalyzeRequest, AnalyzeResponse, ErrorResponse, LlmsCheckResponse, ProbeStatus
from ..services.checks import CHECKS
from ..services.probe import (
    WELL_KNOWN_PATHS, check_llms, collect_signals, ensure_public_target, normalize_target,
)
from ..services.score_calculator import evaluate, generate_summary, score_rating

router = APIRouter(tags=["Audit"])
logger = get_logger("api")

_ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Missing, malformed or blocked URL"},
    500: {"model": ErrorResponse, "description": "The target page could not be fetched"},
}


async def _target(url) -> str:
    target = normalize_target(url)
    if get_settings().block_private_networks:
        await run_in_threadpool(ensure_public_target, target)
    return target


@router.post("/analyze", response_model=AnalyzeResponse, responses=_ERROR_RESPONSES)
async def analyze(payload: AnalyzeRequest):
    target = await _target(payload.url)
    logger.info("analyzing %s", target)
    try:
        report = await collect_signals(target)
        result = evaluate(report.signals)
    except AuditError:
        raise
    except Exception as e:
        logger.exception("unexpected error while analyzing %s", target)
        raise AuditError("Internal server error") from e

    logger.info("%s scored %d (%d issue(s))", target, result.score, len(result.issues))
    return AnalyzeResponse(
        **result.model_dump(),
        rating=score_rating(result.score),
        summary=generate_summary(result),
    )


@router.post("/check-llms", response_model=LlmsCheckResponse, responses=_ERROR_RESPONSES)
async def check_llms_txt(payload: AnalyzeRequest):
    target = await _target(payload.url)
    try:
        status = await check_llms(target)
    except Exception as e:
        logger.exception("unexpected error while checking llms.txt for %s", target)
        raise AuditError("Internal server error") from e

    # B when llms.txt is served, C otherwise; a failed probe is reported but graded as missing
    present = status == ProbeStatus.PRESENT
    llms_check = next(check for check in CHECKS if check.key == "llms_txt")
    return LlmsCheckResponse(
        url=target,
        llms_url=f"{target}{WELL_KNOWN_PATHS['llms_txt']}",
        status=status,
        grade="B" if present else "C",
        issues=[] if present else [llms_check.issue_title],
        suggestions=[] if present else [llms_check.improve_title],
    )
