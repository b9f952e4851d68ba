"""Shared utilities for FastAPI routes."""

from fastapi import status
from fastapi.responses import JSONResponse

from models.errors import (
    CodeSearchError,
    PlanningServiceError,
    PlanParseError,
    QueryValidationError,
    RateLimited,
    UpstreamError,
)
from server.schemas.responses import ErrorResponseDTO

PLAN_PARSE_MESSAGE = "Could not interpret query"


def status_for_error(error: CodeSearchError) -> int:
    """Map a request-level pipeline error to an HTTP status code."""
    if isinstance(error, QueryValidationError):
        return status.HTTP_400_BAD_REQUEST
    if isinstance(error, PlanParseError):
        return status.HTTP_422_UNPROCESSABLE_ENTITY
    if isinstance(error, RateLimited):
        return status.HTTP_429_TOO_MANY_REQUESTS
    if isinstance(error, UpstreamError):
        if error.status_code is not None and 400 <= error.status_code < 600:
            return error.status_code
        return status.HTTP_502_BAD_GATEWAY
    if isinstance(error, PlanningServiceError):
        return status.HTTP_502_BAD_GATEWAY
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def error_response(error: CodeSearchError) -> JSONResponse:
    """Render a pipeline error as `{error, details, transformed_query}`."""
    status_code = status_for_error(error)
    details: dict = {"type": type(error).__name__}
    headers: dict[str, str] = {}
    message = error.message

    if isinstance(error, PlanParseError):
        message = PLAN_PARSE_MESSAGE
        details["reason"] = error.message
    elif isinstance(error, PlanningServiceError):
        details.update(code=error.code, provider=error.provider, status_code=error.status_code)
    elif isinstance(error, RateLimited):
        details["reset_at"] = error.reset_at.isoformat() if error.reset_at else None
        retry_after = error.retry_after_seconds()
        details["retry_after_seconds"] = retry_after
        if retry_after is not None:
            headers["Retry-After"] = str(retry_after)
    elif isinstance(error, UpstreamError):
        details["status_code"] = error.status_code

    body = ErrorResponseDTO(
        error=message, details=details, transformed_query=error.query_string
    )
    return JSONResponse(status_code=status_code, content=body.model_dump(), headers=headers or None)
