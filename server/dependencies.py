"""FastAPI dependencies for orchestrator access."""

from fastapi import HTTPException, Request, status

from orchestrator.core import CodeSearchOrchestrator
from utils.logger import get_logger

logger = get_logger(__name__)


def get_orchestrator(request: Request) -> CodeSearchOrchestrator:
    """Return the process-wide orchestrator created by the app lifespan."""
    orchestrator = getattr(request.app.state, "orchestrator", None)
    if orchestrator is None:
        logger.error("Search orchestrator not configured")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Search service not configured",
        )
    return orchestrator
