"""Configuration management using Pydantic settings.

Two-layer configuration system:
1. Environment: Loads raw values from environment variables (UPPER_CASE)
2. Settings: Clean settings with lowercase fields, used to build sequences
"""

import logging

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from shutdown_sequence.core.builder import DEFAULT_TIMEOUT, SequenceBuilder, new_sequence

_DEFAULT_SIGNALS = ["SIGTERM", "SIGINT"]


class Environment(BaseSettings):
    """Raw environment variable loading."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    SHUTDOWN_DELAY: float = Field(default=0.0)
    SHUTDOWN_TIMEOUT: float = Field(default=DEFAULT_TIMEOUT)
    # Comma separated, e.g. "SIGTERM,SIGINT"; empty disables signal handling
    SHUTDOWN_SIGNALS: str = Field(default=",".join(_DEFAULT_SIGNALS))
    LOG_LEVEL: str = Field(default="INFO")
    LOG_DIRECTORY: str | None = Field(default=None)


class Settings(BaseModel):
    """Shutdown settings with lowercase fields."""

    shutdown_delay: float = 0.0
    shutdown_timeout: float = DEFAULT_TIMEOUT
    shutdown_signals: list[str] = Field(default_factory=lambda: list(_DEFAULT_SIGNALS))
    log_level: str = "INFO"
    log_directory: str | None = None

    @classmethod
    def load(cls, env: "Environment | None" = None) -> "Settings":
        if env is None:
            env = Environment()

        return cls(
            shutdown_delay=env.SHUTDOWN_DELAY,
            shutdown_timeout=env.SHUTDOWN_TIMEOUT,
            shutdown_signals=[s.strip() for s in env.SHUTDOWN_SIGNALS.split(",") if s.strip()],
            log_level=env.LOG_LEVEL,
            log_directory=env.LOG_DIRECTORY or None,
        )

    def to_builder(self, logger: logging.Logger) -> SequenceBuilder:
        """Create a builder configured from these settings.

        Steps and the exit action are left to the caller.
        """
        return (
            new_sequence()
            .logger(logger)
            .delay(self.shutdown_delay)
            .timeout(self.shutdown_timeout)
            .signals(*self.shutdown_signals)
        )
