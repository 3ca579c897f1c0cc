"""Domain-specific exceptions for the Snowflake worker.

Every exception carries a human readable message, a details dict for logs and
a stable ``code`` that consumers can put on the wire instead of matching on
message strings.
"""

from typing import Any


class SnowflakeWorkerError(Exception):
    """Base exception for all Snowflake worker errors."""

    code = "SNOWFLAKE_ERROR"

    def __init__(self, message: str = "An error occurred", details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


# =============================================================================
# Configuration Errors (construction time, not retryable)
# =============================================================================


class ConfigurationError(SnowflakeWorkerError, ValueError):
    """Base class for errors in how a generator is configured."""

    code = "CONFIGURATION_ERROR"


class InvalidNodeIDError(ConfigurationError):
    """Raised when a node ID is outside the range allowed by the bit layout."""

    code = "INVALID_NODE_ID"

    def __init__(self, node_id: Any, max_node_id: int) -> None:
        message = f"Node ID must be an integer between 0 and {max_node_id}"
        details = {"node_id": repr(node_id), "max_node_id": max_node_id}
        super().__init__(message, details)
        self.node_id = node_id
        self.max_node_id = max_node_id


class InvalidLayoutError(ConfigurationError):
    """Raised when bit widths do not describe a valid 63-bit partition."""

    code = "INVALID_LAYOUT"


# =============================================================================
# Clock Errors (runtime, retryable)
# =============================================================================


class ClockError(SnowflakeWorkerError):
    """Base class for wall clock anomalies detected during generation."""

    code = "CLOCK_ERROR"


class ClockMovedBackwardsError(ClockError):
    """Raised when the clock reports a time earlier than the last issued ID."""

    code = "CLOCK_MOVED_BACKWARDS"

    def __init__(self, last_millis: int, now_millis: int) -> None:
        drift_ms = last_millis - now_millis
        message = f"Clock moved backwards by {drift_ms} ms, refusing to generate ID"
        details = {
            "last_millis": last_millis,
            "now_millis": now_millis,
            "drift_ms": drift_ms,
        }
        super().__init__(message, details)
        self.last_millis = last_millis
        self.now_millis = now_millis
        self.drift_ms = drift_ms


class TimestampOutOfRangeError(ClockError):
    """Raised when the elapsed time since the epoch does not fit the layout."""

    code = "TIMESTAMP_OUT_OF_RANGE"

    def __init__(self, elapsed_ms: int, max_elapsed_ms: int) -> None:
        if elapsed_ms < 0:
            message = "Clock is earlier than the configured epoch"
        else:
            message = "Timestamp range of the bit layout is exhausted"
        details = {"elapsed_ms": elapsed_ms, "max_elapsed_ms": max_elapsed_ms}
        super().__init__(message, details)
        self.elapsed_ms = elapsed_ms
        self.max_elapsed_ms = max_elapsed_ms
