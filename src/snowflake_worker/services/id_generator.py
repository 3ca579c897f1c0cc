"""Snowflake ID generation service.

One ``IDGenerator`` is created per process for a node ID that is unique across
the fleet, then shared by every caller that needs IDs. IDs are 63-bit positive
integers laid out as::

    | 0 | elapsed ms since epoch | node id | sequence |

IDs from one generator strictly increase in call order, and IDs from
generators with distinct node IDs never collide.
"""

import logging
import threading
import time
from collections.abc import Callable
from enum import StrEnum
from typing import Any

from snowflake_worker.config import Settings, get_settings
from snowflake_worker.constants.layout import (
    DEFAULT_EPOCH_MS,
    DEFAULT_MAX_BACKWARDS_WAIT_MS,
    MAX_BACKWARDS_WAIT_LIMIT_MS,
    NEVER_MILLIS,
    SPIN_INTERVAL_SECONDS,
)
from snowflake_worker.exceptions import (
    ClockMovedBackwardsError,
    ConfigurationError,
    InvalidNodeIDError,
    TimestampOutOfRangeError,
)
from snowflake_worker.models.domain.snowflake import BitLayout, SnowflakeParts

logger = logging.getLogger(__name__)


class ClockBackwardsPolicy(StrEnum):
    """What to do when the clock reports a time before the last issued ID."""

    RAISE = "raise"  # Fail the call with ClockMovedBackwardsError
    WAIT = "wait"  # Block until the clock catches up, within max_backwards_wait_ms


def system_clock_ms() -> int:
    """Get the current wall clock time in Unix milliseconds."""
    return time.time_ns() // 1_000_000


class IDGenerator:
    """Thread-safe Snowflake ID generator for a single node.

    Generation state (last millisecond and sequence) is only read and written
    while holding the instance lock, so ``next_id`` is safe to call from any
    number of threads.
    """

    def __init__(
        self,
        node_id: int,
        *,
        epoch_ms: int = DEFAULT_EPOCH_MS,
        layout: BitLayout | None = None,
        clock_backwards_policy: ClockBackwardsPolicy | str = ClockBackwardsPolicy.RAISE,
        max_backwards_wait_ms: int = DEFAULT_MAX_BACKWARDS_WAIT_MS,
        clock: Callable[[], int] | None = None,
        sleep: Callable[[float], None] | None = None,
    ) -> None:
        """Initialize the generator.

        Args:
            node_id: Node ID, unique across the fleet
            epoch_ms: Custom epoch in Unix milliseconds
            layout: Bit layout, defaults to 41/10/12
            clock_backwards_policy: Rollback handling, "raise" or "wait"
            max_backwards_wait_ms: Largest rollback the "wait" policy sits out
            clock: Returns the current time in Unix milliseconds
            sleep: Sleeps for the given number of seconds

        Raises:
            InvalidNodeIDError: If node_id does not fit the layout
            ConfigurationError: If the epoch, policy or wait bound is invalid
        """
        self._layout = layout or BitLayout()

        if (
            not isinstance(node_id, int)
            or isinstance(node_id, bool)
            or not 0 <= node_id <= self._layout.max_node_id
        ):
            raise InvalidNodeIDError(node_id, self._layout.max_node_id)
        if not isinstance(epoch_ms, int) or epoch_ms < 0:
            raise ConfigurationError("Epoch must be a non-negative integer", {"epoch_ms": repr(epoch_ms)})
        if not 0 <= max_backwards_wait_ms <= MAX_BACKWARDS_WAIT_LIMIT_MS:
            raise ConfigurationError(
                f"max_backwards_wait_ms must be between 0 and {MAX_BACKWARDS_WAIT_LIMIT_MS}",
                {"max_backwards_wait_ms": max_backwards_wait_ms},
            )
        try:
            self._policy = ClockBackwardsPolicy(clock_backwards_policy)
        except ValueError as e:
            raise ConfigurationError(
                "Unknown clock backwards policy",
                {"clock_backwards_policy": str(clock_backwards_policy)},
            ) from e

        self._node_id = node_id
        self._epoch_ms = epoch_ms
        self._max_backwards_wait_ms = max_backwards_wait_ms
        self._clock = clock or system_clock_ms
        self._sleep = sleep or time.sleep

        self._lock = threading.Lock()
        self._last_millis = NEVER_MILLIS
        self._sequence = 0

        logger.info(
            f"ID generator ready for node {node_id} "
            f"(layout {self._layout.timestamp_bits}/{self._layout.node_bits}/"
            f"{self._layout.sequence_bits}, policy {self._policy})"
        )

    @property
    def node_id(self) -> int:
        return self._node_id

    @property
    def epoch_ms(self) -> int:
        return self._epoch_ms

    @property
    def layout(self) -> BitLayout:
        return self._layout

    @property
    def clock_backwards_policy(self) -> ClockBackwardsPolicy:
        return self._policy

    def next_id(self) -> int:
        """Generate a new unique ID.

        Returns:
            A positive integer, strictly greater than any ID previously
            returned by this generator

        Raises:
            ClockMovedBackwardsError: If the clock rolled back and the policy
                does not allow waiting it out
            TimestampOutOfRangeError: If the clock is before the epoch or past
                the range of the timestamp field
        """
        with self._lock:
            now = self._clock()

            if now < self._last_millis:
                now = self._handle_clock_backwards(now)

            if now == self._last_millis:
                sequence = self._sequence + 1
                if sequence > self._layout.max_sequence:
                    # Sequence space for this millisecond is used up
                    logger.debug(f"Sequence exhausted at {now}, waiting for next millisecond")
                    now = self._wait_until(self._last_millis + 1)
                    sequence = 0
            else:
                sequence = 0

            elapsed_ms = now - self._epoch_ms
            if elapsed_ms < 0 or elapsed_ms > self._layout.max_elapsed_ms:
                raise TimestampOutOfRangeError(elapsed_ms, self._layout.max_elapsed_ms)

            self._last_millis = now
            self._sequence = sequence
            return self._layout.compose(elapsed_ms, self._node_id, sequence)

    def decode(self, snowflake_id: int) -> SnowflakeParts:
        """Decode an ID using this generator's layout and epoch."""
        return self._layout.decode(snowflake_id, self._epoch_ms)

    def _handle_clock_backwards(self, now: int) -> int:
        """Apply the rollback policy. Must be called with the lock held."""
        drift_ms = self._last_millis - now
        if self._policy is ClockBackwardsPolicy.WAIT and drift_ms <= self._max_backwards_wait_ms:
            logger.warning(f"Clock moved backwards by {drift_ms} ms, waiting for it to catch up")
            return self._wait_until(self._last_millis)

        logger.warning(f"Clock moved backwards by {drift_ms} ms, refusing to generate ID")
        raise ClockMovedBackwardsError(self._last_millis, now)

    def _wait_until(self, target_millis: int) -> int:
        """Sleep in small increments until the clock reaches target_millis.

        Raises:
            ClockMovedBackwardsError: If the clock falls further behind
                last_millis than the policy tolerates while waiting
        """
        tolerance_ms = self._max_backwards_wait_ms if self._policy is ClockBackwardsPolicy.WAIT else 0
        now = self._clock()
        while now < target_millis:
            if self._last_millis - now > tolerance_ms:
                logger.warning(
                    f"Clock moved backwards by {self._last_millis - now} ms while waiting, "
                    "refusing to generate ID"
                )
                raise ClockMovedBackwardsError(self._last_millis, now)
            self._sleep(SPIN_INTERVAL_SECONDS)
            now = self._clock()
        return now

    def __repr__(self) -> str:
        return f"IDGenerator(node_id={self._node_id}, epoch_ms={self._epoch_ms})"


def new_generator(node_id: int, **kwargs: Any) -> IDGenerator:
    """Create a generator for node_id.

    Raises:
        InvalidNodeIDError: If node_id does not fit the layout
    """
    return IDGenerator(node_id, **kwargs)


def create_generator(settings: Settings | None = None) -> IDGenerator:
    """Create a generator configured from application settings.

    Args:
        settings: Settings to use, defaults to the cached environment settings

    Returns:
        A new IDGenerator for the configured node
    """
    settings = settings or get_settings()
    return IDGenerator(
        settings.node_id,
        epoch_ms=settings.epoch_ms,
        layout=BitLayout.from_widths(settings.node_bits, settings.sequence_bits),
        clock_backwards_policy=settings.clock_backwards_policy,
        max_backwards_wait_ms=settings.max_backwards_wait_ms,
    )
