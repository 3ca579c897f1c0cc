"""Snowflake bit layout and decoded ID domain models."""

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, model_validator

from snowflake_worker.constants.layout import (
    DEFAULT_NODE_BITS,
    DEFAULT_SEQUENCE_BITS,
    DEFAULT_TIMESTAMP_BITS,
    MILLIS_PER_YEAR,
    TOTAL_ID_BITS,
)
from snowflake_worker.exceptions import InvalidLayoutError


def _check_widths(widths: dict[str, Any]) -> None:
    """Raise InvalidLayoutError unless the widths are positive and fill 63 bits."""
    for name, width in widths.items():
        if not isinstance(width, int) or isinstance(width, bool) or width <= 0:
            raise InvalidLayoutError(f"{name} must be a positive integer", {name: repr(width)})
    total = sum(widths.values())
    if total != TOTAL_ID_BITS:
        raise InvalidLayoutError(f"Bit widths must sum to {TOTAL_ID_BITS}, got {total}", widths)


class SnowflakeParts(BaseModel):
    """Decoded segments of a Snowflake ID."""

    model_config = ConfigDict(frozen=True)

    id: int
    elapsed_ms: int
    epoch_ms: int
    node_id: int
    sequence: int

    @property
    def unix_ms(self) -> int:
        """Get the Unix timestamp in milliseconds at which the ID was issued."""
        return self.epoch_ms + self.elapsed_ms

    @property
    def issued_at(self) -> datetime:
        """Get the issue time as a timezone-aware UTC datetime."""
        return datetime.fromtimestamp(self.unix_ms / 1000, tz=UTC)


class BitLayout(BaseModel):
    """Partition of the 63 usable bits into timestamp, node and sequence.

    Wider node or sequence fields buy more nodes or more IDs per millisecond at
    the cost of a shorter timestamp range (see ``lifetime_years``).
    """

    model_config = ConfigDict(frozen=True)

    timestamp_bits: int = DEFAULT_TIMESTAMP_BITS
    node_bits: int = DEFAULT_NODE_BITS
    sequence_bits: int = DEFAULT_SEQUENCE_BITS

    def __init__(
        self,
        timestamp_bits: int = DEFAULT_TIMESTAMP_BITS,
        node_bits: int = DEFAULT_NODE_BITS,
        sequence_bits: int = DEFAULT_SEQUENCE_BITS,
    ) -> None:
        # Must raise InvalidLayoutError itself, not a pydantic ValidationError
        widths = {
            "timestamp_bits": timestamp_bits,
            "node_bits": node_bits,
            "sequence_bits": sequence_bits,
        }
        _check_widths(widths)
        super().__init__(**widths)

    @model_validator(mode="after")
    def validate_widths(self) -> "BitLayout":
        """Re-check widths for layouts built through model_validate."""
        _check_widths(self.model_dump())
        return self

    def model_copy(self, *, update: dict[str, Any] | None = None, deep: bool = False) -> "BitLayout":
        """Copy the layout, re-checking the widths after any update."""
        return type(self)(**{**self.model_dump(), **(update or {})})

    @classmethod
    def from_widths(cls, node_bits: int, sequence_bits: int) -> "BitLayout":
        """Build a layout giving the timestamp every bit left over."""
        return cls(
            timestamp_bits=TOTAL_ID_BITS - node_bits - sequence_bits,
            node_bits=node_bits,
            sequence_bits=sequence_bits,
        )

    @property
    def max_node_id(self) -> int:
        return (1 << self.node_bits) - 1

    @property
    def max_sequence(self) -> int:
        return (1 << self.sequence_bits) - 1

    @property
    def max_elapsed_ms(self) -> int:
        return (1 << self.timestamp_bits) - 1

    @property
    def node_shift(self) -> int:
        return self.sequence_bits

    @property
    def timestamp_shift(self) -> int:
        return self.node_bits + self.sequence_bits

    @property
    def ids_per_millisecond(self) -> int:
        """Get how many IDs one node can issue within a single millisecond."""
        return self.max_sequence + 1

    @property
    def lifetime_years(self) -> float:
        """Get how many years after the epoch the timestamp field can represent."""
        return (self.max_elapsed_ms + 1) / MILLIS_PER_YEAR

    def compose(self, elapsed_ms: int, node_id: int, sequence: int) -> int:
        """Pack the three segments into a single ID.

        Callers are responsible for range checking each segment.
        """
        return (elapsed_ms << self.timestamp_shift) | (node_id << self.node_shift) | sequence

    def decode(self, snowflake_id: int, epoch_ms: int) -> SnowflakeParts:
        """Split an ID back into its segments.

        Args:
            snowflake_id: ID produced with this layout
            epoch_ms: Epoch the ID was generated against, in Unix milliseconds

        Returns:
            The decoded segments

        Raises:
            ValueError: If the value is not an integer, is negative or is wider
                than 63 bits
        """
        if (
            not isinstance(snowflake_id, int)
            or isinstance(snowflake_id, bool)
            or snowflake_id < 0
            or snowflake_id.bit_length() > TOTAL_ID_BITS
        ):
            raise ValueError(f"Not a valid {TOTAL_ID_BITS}-bit Snowflake ID: {snowflake_id}")
        return SnowflakeParts(
            id=snowflake_id,
            elapsed_ms=snowflake_id >> self.timestamp_shift,
            epoch_ms=epoch_ms,
            node_id=(snowflake_id >> self.node_shift) & self.max_node_id,
            sequence=snowflake_id & self.max_sequence,
        )
