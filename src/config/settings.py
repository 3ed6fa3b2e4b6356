# src/config/settings.py - v2
"""Typed configuration loaded from .env via pydantic-settings.

Single source of truth for deployment-specific settings: store backends,
fingerprinting, orchestration and logging. Tenant store connections live
in a separate registry file (see config/tenants.py) so they can rotate
without touching the process environment.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigurationError(Exception):
    """Raised when configuration is missing or internally inconsistent."""


class Settings(BaseSettings):
    """Application settings loaded from .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === Stores ===
    cache_backend: Literal["http", "json", "redis"] = "http"
    conversation_backend: Literal["http", "json"] = "http"
    cache_root: Path = Path("~/.convocache/store")
    cache_redis_url: str = ""
    store_timeout_s: float = 30.0

    # === Tenants ===
    tenants_file: Path = Path("~/.convocache/tenants.json")

    # === Fingerprinting ===
    fingerprint_algorithm: Literal["blake2b", "legacy"] = "blake2b"

    # === Orchestration ===
    analysis_concurrency: int = 1
    report_key: str = "consolidated_analysis"
    report_rollup_fields: str = "sentiment,lead_status,sales_stage,category"

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "json"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 30

    # --- Validators ---

    @field_validator("analysis_concurrency")
    @classmethod
    def validate_analysis_concurrency(cls, v: int) -> int:  # noqa: N805
        if v < 1:
            raise ValueError("analysis_concurrency must be >= 1")
        return v

    @field_validator("store_timeout_s")
    @classmethod
    def validate_store_timeout(cls, v: float) -> float:  # noqa: N805
        if v <= 0:
            raise ValueError("store_timeout_s must be > 0")
        return v

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        """Validate cross-field consistency rules."""
        errors: list[str] = []

        if self.cache_backend == "redis" and not self.cache_redis_url:
            errors.append("CACHE_REDIS_URL must be set when CACHE_BACKEND=redis")

        if not self.report_key.strip():
            errors.append("REPORT_KEY must not be empty")

        if errors:
            raise ConfigurationError("; ".join(errors))

        return self

    # --- Helpers ---

    @property
    def report_rollup_fields_list(self) -> list[str]:
        """Parse comma-separated report rollup fields."""
        return [f.strip() for f in self.report_rollup_fields.split(",") if f.strip()]


def load_settings(**overrides: object) -> Settings:
    """Load settings from .env with optional overrides.

    Args:
        **overrides: Field-level overrides (for testing or per-run config).

    Returns:
        Validated Settings instance.

    Raises:
        ConfigurationError: If configuration is internally inconsistent.
    """
    return Settings(**overrides)  # type: ignore[arg-type]
