"""Request ID middleware."""

from collections.abc import Callable

from fastapi import Request, Response
from starlette.concurrency import run_in_threadpool
from starlette.middleware.base import BaseHTTPMiddleware

from snowflake_worker.exceptions import SnowflakeWorkerError
from snowflake_worker.middleware.error_handler import snowflake_error_response
from snowflake_worker.utils.request_id import generate_request_id

REQUEST_ID_HEADER = "X-Request-ID"


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Middleware that tags every request with a Snowflake ID.

    The generator is owned by the application and read from
    ``app.state.id_generator``; one instance serves every request.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Response],
    ) -> Response:
        """Process the request.

        Args:
            request: Incoming request
            call_next: Next middleware/handler

        Returns:
            Response from downstream handler, or a problem response if no ID
            could be generated
        """
        generator = request.app.state.id_generator

        # Registered exception handlers do not see errors raised in middleware
        try:
            # next_id() may sleep while holding its lock, keep it off the event loop
            request.state.request_id = await run_in_threadpool(generate_request_id, generator)
        except SnowflakeWorkerError as e:
            return snowflake_error_response(request, e)

        response = await call_next(request)

        # Add request ID to response headers
        response.headers[REQUEST_ID_HEADER] = request.state.request_id

        return response
