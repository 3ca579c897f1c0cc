"""Request ID generation utilities."""

from snowflake_worker.services.id_generator import IDGenerator


def generate_request_id(generator: IDGenerator) -> str:
    """Generate a unique request ID for tracing.

    Args:
        generator: The process-wide ID generator

    Returns:
        The decimal string of a fresh Snowflake ID, sortable by issue time
        when compared as an integer.
    """
    return str(generator.next_id())
