"""FastAPI application factory."""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config.config import Config
from orchestrator.core import CodeSearchOrchestrator
from server.routes import health, pattern_analyzer, search
from utils.logger import get_logger

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan event handler for startup/shutdown logic."""
    logger.info("FastAPI server starting up")

    # Tests may install their own orchestrator before startup
    owns_orchestrator = getattr(app.state, "orchestrator", None) is None
    if owns_orchestrator:
        config = Config()
        if not config.validate():
            logger.warning("Configuration incomplete; search endpoints will be unavailable")
            app.state.orchestrator = None
        else:
            app.state.orchestrator = CodeSearchOrchestrator.from_config(config)

    yield

    logger.info("FastAPI server shutting down")
    if owns_orchestrator and app.state.orchestrator is not None:
        await app.state.orchestrator.aclose()


def create_app(orchestrator: CodeSearchOrchestrator | None = None) -> FastAPI:
    """Factory function to create FastAPI application."""
    app = FastAPI(
        title="CodeLens Search API",
        description="Natural-language GitHub code search and pattern analysis",
        version=health.API_VERSION,
        lifespan=lifespan,
    )
    app.state.orchestrator = orchestrator

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health.router)
    app.include_router(search.router)
    app.include_router(pattern_analyzer.router)

    return app
