"""Pattern analyzer endpoint: compare a snippet against matching GitHub code."""

import time

from fastapi import APIRouter, Depends

from models.errors import CodeSearchError
from orchestrator.core import CodeSearchOrchestrator
from orchestrator.pattern_comparator import PatternFilters
from server.dependencies import get_orchestrator
from server.schemas.requests import PatternAnalyzerRequest
from server.schemas.responses import ErrorResponseDTO, PatternAnalyzerResponseDTO
from server.utils import error_response
from utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/v1", tags=["Pattern Analyzer"])


@router.post(
    "/pattern-analyzer",
    response_model=PatternAnalyzerResponseDTO,
    responses={
        400: {"model": ErrorResponseDTO},
        429: {"model": ErrorResponseDTO},
        502: {"model": ErrorResponseDTO},
    },
)
async def pattern_analyzer(
    request: PatternAnalyzerRequest,
    orchestrator: CodeSearchOrchestrator = Depends(get_orchestrator),
):
    start = time.perf_counter()
    filters = PatternFilters(**request.filters.model_dump()) if request.filters else None

    try:
        report = await orchestrator.analyze_pattern(
            request.code_pattern,
            language=request.language,
            filters=filters,
            limit=request.limit,
        )
    except CodeSearchError as e:
        logger.warning(
            "Pattern analysis request failed",
            extra={
                "extra_fields": {
                    "error_type": type(e).__name__,
                    "error": e.message,
                    "transformed_query": e.query_string,
                }
            },
        )
        return error_response(e)

    logger.info(
        "Pattern analysis request completed",
        extra={
            "extra_fields": {
                "transformed_query": report.query_string,
                "result_count": len(report),
                "latency_ms": int((time.perf_counter() - start) * 1000),
            }
        },
    )
    return PatternAnalyzerResponseDTO.from_report(report)
