#!/usr/bin/env python3
"""Script to probe an endpoint and suggest an adapter configuration."""

import argparse
import asyncio
import json
import sys
import structlog

from legacy_adapter.adapter.engine import LegacySystemAdapter
from legacy_adapter.common.config import get_settings
from legacy_adapter.common.logging import configure_logging

logger = structlog.get_logger("analyze_endpoint")


async def analyze(endpoint: str, name: str, timeout_ms: int) -> dict:
    """Run the endpoint analysis and build a suggested adapter config."""
    analysis = await LegacySystemAdapter.analyze_endpoint(
        endpoint,
        logger=logger,
        timeout_ms=timeout_ms
    )
    return {
        "config": {
            "name": name,
            "endpoint": endpoint,
            "source_format": analysis.source_format.value,
            "target_format": analysis.target_format.value,
            "schema_mapping": analysis.schema_mapping.model_dump(),
        },
        "schema": analysis.inferred_schema.to_dict(),
    }


def main():
    """Main function for CLI."""
    parser = argparse.ArgumentParser(description="Analyze a legacy endpoint")
    parser.add_argument("endpoint", help="URL to sample with a single GET")
    parser.add_argument("--name", default="analyzed-adapter", help="Name for the suggested adapter")
    parser.add_argument("--timeout-ms", type=int, help="Request timeout in milliseconds")

    args = parser.parse_args()

    settings = get_settings()
    configure_logging("analyze_endpoint", settings.adapter_log_level, settings.adapter_log_format)

    try:
        suggestion = asyncio.run(analyze(
            args.endpoint,
            args.name,
            args.timeout_ms or settings.adapter_analyze_timeout_ms
        ))
    except Exception as e:
        print(f"Endpoint analysis failed for {args.endpoint}: {e}")
        sys.exit(1)

    print(json.dumps(suggestion, indent=2, default=str))


if __name__ == "__main__":
    main()
