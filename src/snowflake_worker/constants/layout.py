"""Bit layout and timing constants for Snowflake IDs.

Single source of truth for the default partition of the 63 usable bits of a
signed 64-bit integer, the default epoch and the generator wait intervals.
"""

from typing import Final

# =============================================================================
# Bit Layout
# =============================================================================

# Top bit of the signed 64-bit integer is reserved and always zero
TOTAL_ID_BITS: Final[int] = 63

DEFAULT_TIMESTAMP_BITS: Final[int] = 41  # ~69 years of milliseconds
DEFAULT_NODE_BITS: Final[int] = 10  # 1024 nodes
DEFAULT_SEQUENCE_BITS: Final[int] = 12  # 4096 IDs per node per millisecond

# =============================================================================
# Epoch
# =============================================================================

# 2020-01-01T00:00:00Z in Unix milliseconds
DEFAULT_EPOCH_MS: Final[int] = 1577836800000

# last_millis value before the first ID is issued
NEVER_MILLIS: Final[int] = -1

# =============================================================================
# Waiting
# =============================================================================

# Sleep increment while waiting for the wall clock to advance
SPIN_INTERVAL_SECONDS: Final[float] = 0.0001

DEFAULT_MAX_BACKWARDS_WAIT_MS: Final[int] = 5

# Upper limit for the rollback wait, which holds the generator lock
MAX_BACKWARDS_WAIT_LIMIT_MS: Final[int] = 1000

MILLIS_PER_YEAR: Final[float] = 365.25 * 24 * 60 * 60 * 1000
