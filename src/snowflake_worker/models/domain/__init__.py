"""Domain models package."""

from snowflake_worker.models.domain.snowflake import BitLayout, SnowflakeParts

__all__ = [
    "BitLayout",
    "SnowflakeParts",
]
