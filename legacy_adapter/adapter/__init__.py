"""Legacy system adapter components.

Primary components:
- ``base``: abstract ``Transport`` interface and adapter exceptions.
- ``codecs``: XML (defusedxml) and CSV decode/encode.
- ``retry``: ``RetryExecutor`` with deterministic exponential backoff.
- ``mapping``: ``SchemaMapper`` rename/select and value transforms.
- ``pipeline``: ``TransformationPipeline`` decode -> map -> encode.
- ``inference``: ``infer_schema`` from sample records.
- ``engine``: ``LegacySystemAdapter`` combining the above per request.
- ``factory``: helpers to construct adapters from dicts and settings.

Guidance:
- Prefer ``factory.create_adapter`` so settings defaults and metrics are
  wired consistently.
"""
