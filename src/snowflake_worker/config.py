"""Application configuration."""

import time
from functools import lru_cache
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from snowflake_worker.constants.layout import (
    DEFAULT_EPOCH_MS,
    DEFAULT_MAX_BACKWARDS_WAIT_MS,
    DEFAULT_NODE_BITS,
    DEFAULT_SEQUENCE_BITS,
    MAX_BACKWARDS_WAIT_LIMIT_MS,
    TOTAL_ID_BITS,
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Snowflake Worker"
    debug: bool = False
    environment: Literal["development", "staging", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"

    # Node identity (required - allocated outside this service, unique per fleet)
    node_id: int = Field(
        ge=0,
        description="Node ID of this process. Must be set via environment variable.",
    )

    # ID layout
    epoch_ms: int = Field(default=DEFAULT_EPOCH_MS, ge=0)  # Unix milliseconds
    node_bits: int = Field(default=DEFAULT_NODE_BITS, ge=1)
    sequence_bits: int = Field(default=DEFAULT_SEQUENCE_BITS, ge=1)

    # Clock rollback handling
    clock_backwards_policy: Literal["raise", "wait"] = "raise"
    max_backwards_wait_ms: int = Field(
        default=DEFAULT_MAX_BACKWARDS_WAIT_MS,
        ge=0,
        le=MAX_BACKWARDS_WAIT_LIMIT_MS,
    )

    @model_validator(mode="after")
    def validate_settings(self) -> "Settings":
        """Validate settings against the ID layout."""
        if self.environment == "production" and self.debug:
            raise ValueError("DEBUG mode cannot be enabled in production environment.")

        # At least one bit must be left for the timestamp
        if self.node_bits + self.sequence_bits >= TOTAL_ID_BITS:
            raise ValueError(
                f"NODE_BITS + SEQUENCE_BITS must be less than {TOTAL_ID_BITS}, "
                f"got {self.node_bits + self.sequence_bits}"
            )

        max_node_id = (1 << self.node_bits) - 1
        if self.node_id > max_node_id:
            raise ValueError(f"NODE_ID must be between 0 and {max_node_id} for {self.node_bits} node bits")

        if self.epoch_ms > time.time_ns() // 1_000_000:
            raise ValueError("EPOCH_MS cannot be in the future")

        return self

    @property
    def timestamp_bits(self) -> int:
        """Get the timestamp width left over by the node and sequence fields."""
        return TOTAL_ID_BITS - self.node_bits - self.sequence_bits


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
