"""Configuration management for legacy system adapters.

This module centralizes environment-driven defaults for adapters: logging,
request timeouts and the retry policy applied when an adapter config does not
carry its own. It builds on ``pydantic_settings.BaseSettings`` so values can
be provided via environment variables, ``.env`` files, or defaults.

Usage
- ``settings = get_settings()``
- ``policy = settings.default_retry_policy()``
- ``config = load_adapter_config("adapters/billing.json")``
"""

import json
from pathlib import Path
from typing import Union

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..adapter.base import ConfigurationError
from ..adapter.types import AdapterConfig, RetryPolicy


class AdapterSettings(BaseSettings):
    """Process-wide adapter settings.

    Parameters are read from the process environment using the field names
    (case-insensitive), e.g. ``ADAPTER_LOG_LEVEL=DEBUG``.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # Environment
    adapter_env: str = Field(default="local")

    # Logging
    adapter_log_level: str = Field(default="INFO")
    adapter_log_format: str = Field(default="json")

    # Transport
    adapter_default_timeout_ms: int = Field(default=30000, gt=0)
    adapter_analyze_timeout_ms: int = Field(default=10000, gt=0)

    # Retry policy defaults
    adapter_retry_max_retries: int = Field(default=3, ge=0)
    adapter_retry_initial_delay_ms: float = Field(default=1000, gt=0)
    adapter_retry_max_delay_ms: float = Field(default=10000, gt=0)
    adapter_retry_backoff_multiplier: float = Field(default=2.0, ge=1)

    # Observability
    adapter_metrics_enabled: bool = Field(default=True)

    def default_retry_policy(self) -> RetryPolicy:
        """Build the retry policy described by these settings."""
        return RetryPolicy(
            max_retries=self.adapter_retry_max_retries,
            initial_delay_ms=self.adapter_retry_initial_delay_ms,
            max_delay_ms=self.adapter_retry_max_delay_ms,
            backoff_multiplier=self.adapter_retry_backoff_multiplier,
        )


def get_settings() -> AdapterSettings:
    """Read settings from the current environment."""
    return AdapterSettings()


def load_adapter_config(path: Union[str, Path]) -> AdapterConfig:
    """Load an ``AdapterConfig`` from a JSON file.

    Raises ``ConfigurationError`` when the file is missing or not valid JSON;
    schema violations surface as pydantic ``ValidationError``.
    """
    config_path = Path(path)
    if not config_path.exists():
        raise ConfigurationError(f"Adapter config not found: {config_path}")

    try:
        with open(config_path, "r") as f:
            raw = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Adapter config is not valid JSON: {config_path}: {e}") from e

    return AdapterConfig.model_validate(raw)
