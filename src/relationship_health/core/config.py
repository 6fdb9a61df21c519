"""Configuration management."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from dotenv import dotenv_values


def _as_bool(value: str | None) -> bool:
    """Interpret an environment flag."""
    return (value or "").strip().lower() in {"1", "true", "yes", "on"}


@dataclass
class Config:
    """Application configuration."""

    database_url: str
    # Recommendation lifetime before it is filtered out of listings
    recommendation_ttl_days: int = 7
    # Trailing window used for the weekly email frequency
    frequency_window_days: int = 365
    # Days of silence before a contact gets an outreach recommendation
    outreach_after_days: int = 14
    log_level: str = "INFO"
    log_json: bool = False

    @classmethod
    def from_env(cls, env_file: Path | None = None) -> Config:
        """Load configuration from environment and .env file.

        Args:
            env_file: Path to .env file. Environment variables take
                     precedence over values found in the file.

        Returns:
            Config instance with loaded values.

        Raises:
            ValueError: If required DATABASE_URL is not set, or a numeric
                setting is not an integer.
        """
        config: dict[str, Any] = {}
        if env_file and env_file.exists():
            config = dict(dotenv_values(env_file))

        def _get(name: str) -> str | None:
            return os.environ.get(name) or config.get(name)

        database_url = _get("DATABASE_URL")
        if not database_url:
            raise ValueError("DATABASE_URL is required")

        def _get_int(name: str, default: int) -> int:
            raw = _get(name)
            if raw is None or raw == "":
                return default
            try:
                return int(raw)
            except ValueError as e:
                raise ValueError(f"{name} must be an integer, got {raw!r}") from e

        return cls(
            database_url=database_url,
            recommendation_ttl_days=_get_int("RECOMMENDATION_TTL_DAYS", 7),
            frequency_window_days=_get_int("FREQUENCY_WINDOW_DAYS", 365),
            outreach_after_days=_get_int("OUTREACH_AFTER_DAYS", 14),
            log_level=(_get("LOG_LEVEL") or "INFO").upper(),
            log_json=_as_bool(_get("LOG_JSON")),
        )

    def validate(self) -> list[str]:
        """Validate configuration.

        Returns:
            List of missing or invalid field names.
        """
        problems = []
        if not self.database_url:
            problems.append("DATABASE_URL")
        if self.recommendation_ttl_days <= 0:
            problems.append("RECOMMENDATION_TTL_DAYS")
        if self.frequency_window_days <= 0:
            problems.append("FREQUENCY_WINDOW_DAYS")
        if self.outreach_after_days <= 0:
            problems.append("OUTREACH_AFTER_DAYS")
        return problems

    @property
    def async_database_url(self) -> str:
        """Database URL rewritten for the asyncpg driver."""
        if self.database_url.startswith("postgresql://"):
            return self.database_url.replace("postgresql://", "postgresql+asyncpg://", 1)
        return self.database_url
