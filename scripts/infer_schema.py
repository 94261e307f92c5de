#!/usr/bin/env python3
"""Script to infer a schema from a local JSON, CSV or XML sample."""

import argparse
import json
import sys
from pathlib import Path
from typing import Any
import structlog

from legacy_adapter.adapter.base import AdapterError
from legacy_adapter.adapter.codecs import decode_csv, decode_xml
from legacy_adapter.adapter.inference import infer_schema
from legacy_adapter.common.logging import configure_logging

logger = structlog.get_logger("infer_schema")


def load_sample(path: Path) -> Any:
    """Decode a sample file according to its extension."""
    text = path.read_text(encoding="utf-8")
    suffix = path.suffix.lower()

    if suffix == ".csv":
        return decode_csv(text)
    if suffix in (".xml", ".soap"):
        return decode_xml(text)
    return json.loads(text)


def main():
    """Main function for CLI."""
    parser = argparse.ArgumentParser(description="Infer a schema from sample data")
    parser.add_argument("sample", help="Path to a .json, .csv or .xml sample file")
    parser.add_argument("--log-level", default="WARNING", help="Log level")

    args = parser.parse_args()

    configure_logging("infer_schema", args.log_level, "console")

    sample_path = Path(args.sample)
    try:
        sample = load_sample(sample_path)
    except (OSError, ValueError, AdapterError) as e:
        logger.error("Failed to load sample", path=str(sample_path), error=str(e))
        print(f"Could not read sample {sample_path}: {e}")
        sys.exit(1)

    schema = infer_schema(sample)
    print(json.dumps(schema.to_dict(), indent=2, default=str))


if __name__ == "__main__":
    main()
