#!/usr/bin/env python
"""Print Snowflake IDs for a node."""

import sys
from pathlib import Path

# Add src directory to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from pydantic import ValidationError

from snowflake_worker.config import Settings
from snowflake_worker.exceptions import SnowflakeWorkerError
from snowflake_worker.services.id_generator import create_generator


def _format_errors(error: ValidationError) -> str:
    """Format settings validation errors as one line."""
    messages = []
    for err in error.errors():
        field = ".".join(str(part) for part in err["loc"])
        messages.append(f"{field}: {err['msg']}" if field else err["msg"])
    return "; ".join(messages)


def generate_ids(count: int, node_id: int | None = None, decode: bool = False) -> bool:
    """Generate and print count IDs, one per line.

    The node ID argument overrides NODE_ID; epoch, layout and rollback policy
    always come from the environment so the IDs match the running service.
    """
    try:
        settings = Settings() if node_id is None else Settings(node_id=node_id)
    except ValidationError as e:
        print(f"Invalid configuration: {_format_errors(e)}", file=sys.stderr)
        return False

    try:
        generator = create_generator(settings)
        for _ in range(count):
            snowflake_id = generator.next_id()
            if decode:
                parts = generator.decode(snowflake_id)
                print(
                    f"{snowflake_id}\tnode={parts.node_id}\tsequence={parts.sequence}"
                    f"\tissued_at={parts.issued_at.isoformat()}"
                )
            else:
                print(snowflake_id)
    except SnowflakeWorkerError as e:
        print(f"ID generation failed: {e.message}", file=sys.stderr)
        return False
    return True


if __name__ == "__main__":
    import argparse
    parser = argparse.ArgumentParser(description="Generate Snowflake IDs")
    parser.add_argument("--count", type=int, default=1, help="Number of IDs to print")
    parser.add_argument("--node-id", type=int, help="Node ID (defaults to NODE_ID from the environment)")
    parser.add_argument("--decode", action="store_true", help="Print the decoded segments too")
    args = parser.parse_args()

    sys.exit(0 if generate_ids(args.count, args.node_id, args.decode) else 1)
