"""FastAPI application entry point.

``create_app`` is an application factory; the ASGI server is left to the deployment.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request

from snowflake_worker.config import Settings, get_settings
from snowflake_worker.exceptions import SnowflakeWorkerError
from snowflake_worker.middleware.error_handler import snowflake_exception_handler
from snowflake_worker.middleware.request_id_middleware import RequestIDMiddleware
from snowflake_worker.services.id_generator import create_generator
from snowflake_worker.utils.logging_config import configure_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    # Startup
    # One generator per process, shared by every request
    app.state.id_generator = create_generator(app.state.settings)
    logger.info(f"{app.state.settings.app_name} started for node {app.state.id_generator.node_id}")
    yield
    # Shutdown
    logger.info(f"{app.state.settings.app_name} stopped")


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Settings to use, defaults to the cached environment settings
    """
    config = settings or get_settings()
    configure_logging(config)

    app = FastAPI(
        title=config.app_name,
        version="0.1.0",
        description="Snowflake ID worker",
        lifespan=lifespan,
        docs_url="/docs" if config.debug else None,
        redoc_url="/redoc" if config.debug else None,
    )
    app.state.settings = config

    app.add_exception_handler(SnowflakeWorkerError, snowflake_exception_handler)

    app.add_middleware(RequestIDMiddleware)

    @app.get("/health")
    async def health_check(request: Request) -> dict[str, str]:
        """Health check endpoint."""
        return {
            "status": "healthy",
            "node_id": str(request.app.state.id_generator.node_id),
            "request_id": request.state.request_id,
        }

    return app
