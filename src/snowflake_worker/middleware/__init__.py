"""Middleware package."""

from snowflake_worker.middleware.request_id_middleware import RequestIDMiddleware

__all__ = [
    "RequestIDMiddleware",
]
