"""Error handlers mapping generator failures to HTTP responses."""

import logging

from fastapi import Request, status
from fastapi.responses import JSONResponse

from snowflake_worker.config import get_settings
from snowflake_worker.exceptions import ClockError, SnowflakeWorkerError

logger = logging.getLogger(__name__)

# Safe error messages that can be shown to users
SAFE_ERROR_MESSAGES = {
    500: "Internal server error",
    503: "Service temporarily unavailable",
}

# Seconds a client should wait before retrying after a clock anomaly
CLOCK_RETRY_AFTER_SECONDS = 1


def _is_debug(request: Request) -> bool:
    """Get the debug flag from the app's settings, falling back to the environment."""
    settings = getattr(request.app.state, "settings", None) or get_settings()
    return settings.debug


def snowflake_error_response(request: Request, exc: SnowflakeWorkerError) -> JSONResponse:
    """Build a problem response for a Snowflake worker error.

    Clock errors are transient and map to 503 with a Retry-After header.
    Anything else is a server fault and maps to 500.

    Args:
        request: The incoming request
        exc: The error raised while generating an ID

    Returns:
        JSONResponse with the error code and a sanitized message
    """
    if isinstance(exc, ClockError):
        status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        headers = {"Retry-After": str(CLOCK_RETRY_AFTER_SECONDS)}
        logger.warning(f"ID generation failed for {request.url.path}: {exc.message}")
    else:
        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
        headers = {}
        logger.error(f"ID generation failed for {request.url.path}: {exc.message}")

    content = {
        "title": SAFE_ERROR_MESSAGES[status_code],
        "status": status_code,
        "error_code": exc.code,
        "instance": request.url.path,
    }
    # In debug mode, return the full details
    if _is_debug(request):
        content["detail"] = exc.message
        content["details"] = exc.details

    return JSONResponse(
        status_code=status_code,
        content=content,
        headers={"Content-Type": "application/problem+json", **headers},
    )


async def snowflake_exception_handler(request: Request, exc: SnowflakeWorkerError) -> JSONResponse:
    """Handle Snowflake worker errors raised from route handlers."""
    return snowflake_error_response(request, exc)
