"""Legacy system adapters.

Bridges callers to remote endpoints speaking XML, CSV or SOAP, retrying
transient failures and re-expressing payloads as structured records.

Packages:
- ``legacy_adapter.adapter``: retry, codecs, mapping, pipeline, inference.
- ``legacy_adapter.common``: settings, structured logging, metrics.
"""

__version__ = "0.1.0"
