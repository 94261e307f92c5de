#!/usr/bin/env python3
"""Script to run an adapter's transformation pipeline over a local file."""

import argparse
import json
import sys
from pathlib import Path
import structlog

from legacy_adapter.adapter.base import AdapterError
from legacy_adapter.adapter.pipeline import TransformationPipeline
from legacy_adapter.adapter.types import SourceFormat
from legacy_adapter.common.config import load_adapter_config
from legacy_adapter.common.logging import configure_logging

logger = structlog.get_logger("transform_file")

STRUCTURED_SOURCES = {SourceFormat.JSON, SourceFormat.REST, SourceFormat.GRAPHQL, SourceFormat.GRPC}


def main():
    """Main function for CLI."""
    parser = argparse.ArgumentParser(description="Transform a local payload with an adapter config")
    parser.add_argument("--config", required=True, help="Adapter config JSON file")
    parser.add_argument("--input", required=True, help="Payload file in the adapter's source format")
    parser.add_argument("--target-format", help="Override the configured target format")
    parser.add_argument("--output", help="Write the result here instead of stdout")

    args = parser.parse_args()

    configure_logging("transform_file", "WARNING", "console")

    try:
        config = load_adapter_config(args.config)
        raw = Path(args.input).read_text(encoding="utf-8")
        if config.source_format in STRUCTURED_SOURCES:
            raw = json.loads(raw)

        result = TransformationPipeline(config).transform(raw, args.target_format)
    except (OSError, ValueError, AdapterError) as e:
        logger.error("Transformation failed", config=args.config, input=args.input, error=str(e))
        print(f"Transformation failed: {e}")
        sys.exit(1)

    output = result.data if isinstance(result.data, str) else json.dumps(result.data, indent=2, default=str)

    if args.output:
        Path(args.output).write_text(output, encoding="utf-8")
        logger.info("Result written", path=args.output, **result.metadata.to_dict())
    else:
        print(output)


if __name__ == "__main__":
    main()
