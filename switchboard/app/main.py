"""
Switchboard - Multi-provider AI orchestration service

FastAPI application entry point.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from switchboard import __version__
from switchboard.app.api import capabilities_router, register_exception_handlers, stream_router
from switchboard.app.dependencies import (
    get_registry,
    get_settings,
    initialize_services,
    shutdown_services,
)

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Handles startup and shutdown events.
    """
    # Startup
    logger.info("Starting Switchboard services...")
    try:
        await initialize_services()
        logger.info("Switchboard services initialized successfully")
    except Exception as e:
        logger.error(f"Failed to initialize services: {e}", exc_info=True)
        raise

    yield

    # Shutdown
    logger.info("Shutting down Switchboard services...")
    try:
        await shutdown_services()
        logger.info("Switchboard services shut down successfully")
    except Exception as e:
        logger.error(f"Error during shutdown: {e}", exc_info=True)


def create_app() -> FastAPI:
    app = FastAPI(
        title="Switchboard",
        description="Rewrite, transcription and AI-detection requests routed across interchangeable providers",
        version=__version__,
        lifespan=lifespan,
        debug=settings.debug,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)
    app.include_router(capabilities_router, prefix="/api")
    app.include_router(stream_router)

    @app.get("/", tags=["root"])
    async def root() -> dict[str, str]:
        """Root endpoint with service info."""
        return {
            "service": settings.service_name,
            "version": __version__,
            "status": "running",
        }

    @app.get("/health", tags=["health"])
    async def health_check() -> dict[str, Any]:
        """Service health with per-capability provider readiness."""
        registry = get_registry()
        return {
            "status": "healthy",
            "service": settings.service_name,
            "environment": settings.environment,
            "providers": registry.list_providers(),
        }

    return app


app = create_app()


def main() -> None:
    import uvicorn

    uvicorn.run(
        "switchboard.app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
    )


if __name__ == "__main__":
    main()
