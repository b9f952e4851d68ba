"""Natural-language code and repository search endpoint."""

import time

from fastapi import APIRouter, Depends

from models.errors import CodeSearchError
from orchestrator.core import CodeSearchOrchestrator
from server.dependencies import get_orchestrator
from server.schemas.requests import SearchRequest
from server.schemas.responses import ErrorResponseDTO, SearchResponseDTO
from server.utils import error_response
from utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/v1", tags=["Search"])


@router.post(
    "/search",
    response_model=SearchResponseDTO,
    responses={
        400: {"model": ErrorResponseDTO},
        422: {"model": ErrorResponseDTO},
        429: {"model": ErrorResponseDTO},
        502: {"model": ErrorResponseDTO},
    },
)
async def search(
    request: SearchRequest,
    orchestrator: CodeSearchOrchestrator = Depends(get_orchestrator),
):
    start = time.perf_counter()
    try:
        outcome = await orchestrator.search(request.query, limit=request.limit)
    except CodeSearchError as e:
        logger.warning(
            "Search request failed",
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
        "Search request completed",
        extra={
            "extra_fields": {
                "target": outcome.target.value,
                "transformed_query": outcome.plan.query_string,
                "result_count": len(outcome.results) + len(outcome.repositories),
                "latency_ms": int((time.perf_counter() - start) * 1000),
            }
        },
    )
    return SearchResponseDTO.from_outcome(outcome)
