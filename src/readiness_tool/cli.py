"""CLI para calcular la preparación del día desde una exportación CSV."""

from __future__ import annotations

import argparse
import asyncio
import logging
from pathlib import Path

from readiness_tool.collector import MetricCollector
from readiness_tool.config import CollectorConfig
from readiness_tool.refresh import refresh
from readiness_tool.sources.csv_export import CsvExportPaths, CsvExportSource


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments.

    Returns:
        Parsed argparse namespace.
    """
    parser = argparse.ArgumentParser(
        description="Readiness score and suggestions from steps, heart rate and sleep."
    )
    parser.add_argument(
        "--samples",
        required=True,
        help="CSV sample export (columns: type, start, end, value, stage).",
    )
    parser.add_argument(
        "--tz",
        default=None,
        help="Time zone for day boundaries (default: system local zone).",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging.",
    )
    return parser.parse_args()


def main() -> int:
    """Run one refresh cycle and print the result.

    Returns:
        Exit code (0 on success).
    """
    ns = parse_args()
    logging.basicConfig(
        level=logging.DEBUG if ns.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    source = CsvExportSource(
        CsvExportPaths(root=Path(ns.samples).expanduser().resolve())
    )
    source.validate()

    collector = MetricCollector(source, CollectorConfig(tz_name=ns.tz))
    state = asyncio.run(refresh(collector))

    print(f"Steps: {state.steps}")
    print(f"Resting heart rate: {state.heart_rate_text}")
    print(f"Sleep: {state.sleep_text}")
    print(f"Readiness: {state.recovery_text}")
    for line in state.insights:
        print(f"- {line}")
    return 0
