"""Utility scripts for operating legacy system adapters.

Scripts include:
- ``infer_schema.py``: infer a field-level schema from a local sample file.
- ``analyze_endpoint.py``: probe an endpoint and suggest an adapter config.
- ``transform_file.py``: run an adapter's transformation over a local file.
"""
