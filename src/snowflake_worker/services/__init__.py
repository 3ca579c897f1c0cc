"""Services package."""

from snowflake_worker.services.id_generator import (
    ClockBackwardsPolicy,
    IDGenerator,
    create_generator,
    new_generator,
)

__all__ = [
    "ClockBackwardsPolicy",
    "IDGenerator",
    "create_generator",
    "new_generator",
]
