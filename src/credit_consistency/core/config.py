"""Configuration management.

Loads from TOML config files + environment variables.
Uses pydantic-settings for validation and env var overriding.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings

from .errors import ConfigError


# ---------------------------------------------------------------------------
# Sub-configs
# ---------------------------------------------------------------------------

class CreditPolicyConfig(BaseModel):
    """Business constants enforced by the aggregates."""

    model_config = {"frozen": True}

    max_withdrawals_per_cycle: int = Field(default=45, ge=1)
    cycle_length_days: int = Field(default=30, ge=1)
    max_owners: int = Field(default=2, ge=1)
    default_currency: str = "USD"

    @field_validator("default_currency")
    @classmethod
    def _upper_currency(cls, v: str) -> str:
        return v.upper()


class ReconciliationConfig(BaseModel):
    # 0 means busy retry; the loop stays unbounded regardless
    backoff_seconds: float = Field(default=0.0, ge=0.0)


class ObservabilityConfig(BaseModel):
    log_level: str = "INFO"
    log_format: str = "json"  # "json" or "console"
    metrics_port: int = 9090


# ---------------------------------------------------------------------------
# Top-level settings
# ---------------------------------------------------------------------------

class Settings(BaseSettings):
    """Top-level settings.

    Loaded from TOML config files, overridden by environment variables.
    """

    policy: CreditPolicyConfig = Field(default_factory=CreditPolicyConfig)
    reconciliation: ReconciliationConfig = Field(default_factory=ReconciliationConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)

    model_config = {"env_prefix": "CONSISTENCY_", "env_nested_delimiter": "__"}


DEFAULT_POLICY = CreditPolicyConfig()


def load_settings(
    config_path: str | Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> Settings:
    """Load settings from TOML file + env vars.

    Args:
        config_path: Path to TOML config file (optional).
        overrides: Dict of overrides to apply on top.

    Raises:
        ConfigError: the file is missing or the merged values are invalid.
    """
    data: dict[str, Any] = {}

    if config_path:
        path = Path(config_path)
        if not path.exists():
            raise ConfigError(f"Config file not found: {path}")
        import tomli

        with open(path, "rb") as f:
            data = tomli.load(f)

    if overrides:
        data.update(overrides)

    try:
        return Settings(**data)
    except ValidationError as exc:
        raise ConfigError(str(exc)) from exc
