"""Common utilities shared across the adapter package.

Includes:
- ``config``: Pydantic-based settings read from environment variables.
- ``logging``: structured logging setup with structlog.
- ``metrics``: Prometheus metrics helpers for adapter traffic.

Import pattern:
- from legacy_adapter.common.config import AdapterSettings
- from legacy_adapter.common.logging import configure_logging
"""
