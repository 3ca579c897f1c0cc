"""Shared fixtures for Snowflake worker tests."""

import pytest

from snowflake_worker.config import Settings, get_settings
from snowflake_worker.constants.layout import DEFAULT_EPOCH_MS
from snowflake_worker.services.id_generator import IDGenerator

# 2024-01-01T00:00:00Z in Unix milliseconds
FIXED_NOW_MS = 1704067200000


class FakeClock:
    """Deterministic millisecond clock.

    Time only moves when a test sets it or when the generator sleeps; every
    sleep advances the clock by one millisecond.
    """

    def __init__(self, now_ms: int = FIXED_NOW_MS) -> None:
        self.now_ms = now_ms
        self.sleep_calls = 0

    def __call__(self) -> int:
        return self.now_ms

    def advance(self, ms: int = 1) -> None:
        self.now_ms += ms

    def sleep(self, seconds: float) -> None:
        self.sleep_calls += 1
        self.now_ms += 1


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def make_generator(fake_clock: FakeClock):
    """Factory for generators driven by the shared fake clock."""

    def _make(node_id: int = 1, **kwargs) -> IDGenerator:
        kwargs.setdefault("epoch_ms", DEFAULT_EPOCH_MS)
        kwargs.setdefault("clock", fake_clock)
        kwargs.setdefault("sleep", fake_clock.sleep)
        return IDGenerator(node_id, **kwargs)

    return _make


@pytest.fixture
def settings() -> Settings:
    return Settings(node_id=5, _env_file=None)


@pytest.fixture(autouse=True)
def clear_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
