"""Tests for common utilities."""

import json

import pytest
from prometheus_client import CollectorRegistry

from legacy_adapter.adapter.base import ConfigurationError
from legacy_adapter.adapter.types import SourceFormat, TargetFormat
from legacy_adapter.common.config import AdapterSettings, load_adapter_config
from legacy_adapter.common.logging import ServiceLogger, configure_logging
from legacy_adapter.common.metrics import MetricsCollector


def test_settings_defaults():
    """Test settings defaults."""
    settings = AdapterSettings()
    assert settings.adapter_env == "local"
    assert settings.adapter_default_timeout_ms == 30000
    assert settings.adapter_analyze_timeout_ms == 10000


def test_settings_from_environment(monkeypatch):
    """Test settings read from environment variables."""
    monkeypatch.setenv("ADAPTER_RETRY_MAX_RETRIES", "5")
    monkeypatch.setenv("ADAPTER_LOG_LEVEL", "DEBUG")

    settings = AdapterSettings()
    assert settings.adapter_retry_max_retries == 5
    assert settings.adapter_log_level == "DEBUG"


def test_default_retry_policy():
    """Test retry policy built from settings."""
    policy = AdapterSettings().default_retry_policy()
    assert policy.max_retries == 3
    assert policy.initial_delay_ms == 1000
    assert policy.max_delay_ms == 10000
    assert policy.backoff_multiplier == 2


def test_load_adapter_config(tmp_path):
    """Test loading an adapter config from JSON."""
    path = tmp_path / "adapter.json"
    path.write_text(json.dumps({
        "name": "billing",
        "source_format": "csv",
        "target_format": "json",
        "schema_mapping": {"source_fields": {"id": "invoice_id"}},
    }))

    config = load_adapter_config(path)
    assert config.name == "billing"
    assert config.source_format == SourceFormat.CSV
    assert config.target_format == TargetFormat.JSON
    assert config.schema_mapping.source_fields == {"id": "invoice_id"}


def test_load_adapter_config_missing_file(tmp_path):
    """Test missing config file."""
    with pytest.raises(ConfigurationError):
        load_adapter_config(tmp_path / "missing.json")


def test_load_adapter_config_invalid_json(tmp_path):
    """Test malformed config file."""
    path = tmp_path / "adapter.json"
    path.write_text("{not json")
    with pytest.raises(ConfigurationError):
        load_adapter_config(path)


def test_logging_configuration():
    """Test logging configuration."""
    # This should not raise an exception
    configure_logging("test-service", "INFO", "json")
    configure_logging("test-service", "DEBUG", "console")


def test_service_logger_bind():
    """Test bound context is merged, not shared."""
    base = ServiceLogger("test-service", adapter="billing")
    bound = base.bind(request_id="abc")

    assert base.context == {"adapter": "billing"}
    assert bound.context == {"adapter": "billing", "request_id": "abc"}
    bound.info("bound message")


def test_metrics_collector():
    """Test metrics collector."""
    collector = MetricsCollector("test-service", registry=CollectorRegistry())
    assert collector.service_name == "test-service"

    collector.record_request("billing", "GET", True, 0.1)
    collector.record_request("billing", "GET", False, 0.2)
    collector.record_retry("billing")
    collector.record_bytes("billing", 128)
    collector.record_transform("billing", 3)

    metrics = collector.get_metrics()
    assert isinstance(metrics, str)
    assert "adapter_requests_total" in metrics
    assert 'status="failure"' in metrics
    assert "adapter_retries_total" in metrics
    assert "adapter_bytes_processed_total" in metrics
