"""Adapter factory helpers.

Centralizes construction of ``LegacySystemAdapter`` instances so callers do
not need to wire settings, metrics and transports by hand.
"""

from typing import Any, Dict, Optional
import structlog

from ..common.config import AdapterSettings, get_settings
from ..common.metrics import get_metrics_collector
from .engine import LegacySystemAdapter
from .types import AdapterConfig

logger = structlog.get_logger("adapter.factory")

METRICS_SERVICE_NAME = "legacy-adapter"


def create_adapter(
    config: Dict[str, Any],
    settings: Optional[AdapterSettings] = None,
    **kwargs: Any
) -> LegacySystemAdapter:
    """Create an adapter from a configuration mapping.

    Missing ``timeout_ms`` and ``retry_policy`` values are filled from
    ``settings``. Extra keyword arguments are forwarded to
    ``LegacySystemAdapter`` (e.g. ``transport``, ``custom_functions``).
    """
    settings = settings or get_settings()

    values = dict(config)
    values.setdefault("timeout_ms", settings.adapter_default_timeout_ms)
    if values.get("retry_policy") is None:
        values["retry_policy"] = settings.default_retry_policy()

    adapter_config = AdapterConfig.model_validate(values)

    if settings.adapter_metrics_enabled and "metrics_collector" not in kwargs:
        kwargs["metrics_collector"] = get_metrics_collector(METRICS_SERVICE_NAME)

    logger.info(
        "Adapter created",
        adapter=adapter_config.name,
        source_format=adapter_config.source_format.value,
        target_format=adapter_config.target_format.value
    )
    return LegacySystemAdapter(adapter_config, **kwargs)


def create_adapter_from_settings(
    name: str,
    source_format: str,
    target_format: str,
    settings: Optional[AdapterSettings] = None,
    **kwargs: Any
) -> LegacySystemAdapter:
    """Convenience wrapper taking the three required fields directly.

    Optional config fields (``endpoint``, ``schema_mapping``, ...) may be
    passed as keyword arguments; everything else goes to the adapter.
    """
    config_keys = {"endpoint", "schema_mapping", "timeout_ms", "retry_policy", "unwrap_soap_body"}
    config = {
        "name": name,
        "source_format": source_format,
        "target_format": target_format,
    }
    config.update({k: kwargs.pop(k) for k in list(kwargs) if k in config_keys})
    return create_adapter(config, settings=settings, **kwargs)
