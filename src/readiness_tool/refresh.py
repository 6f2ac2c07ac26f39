"""Ciclo de actualización y estado de presentación."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import datetime, timezone

from readiness_tool.collector import MetricCollector
from readiness_tool.config import InsightConfig, ScoringConfig
from readiness_tool.engine import evaluate
from readiness_tool.model import ReadinessReport

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DisplayState:
    """Last-known values shown to the user between refreshes."""

    steps: int = 0
    heart_rate_text: str = "-- bpm"
    sleep_text: str = "-- h"
    recovery_text: str = "--"
    score: int | None = None
    insights: tuple[str, ...] = ()
    refreshed_at: datetime | None = None


def apply_report(
    state: DisplayState, report: ReadinessReport, refreshed_at: datetime
) -> DisplayState:
    """Return a new state updated with ``report``.

    Metric fields absent from the report keep their previous value; score,
    recovery text and insights are always replaced.
    """
    m = report.measurements
    updated = state
    if m.steps is not None:
        updated = replace(updated, steps=m.steps)
    if m.resting_heart_rate is not None:
        updated = replace(updated, heart_rate_text=f"{m.resting_heart_rate:.0f} bpm")
    if m.sleep_hours is not None:
        updated = replace(updated, sleep_text=f"{m.sleep_hours:.1f} h")
    recovery = f"{report.score} / 100" if report.score is not None else "--"
    return replace(
        updated,
        recovery_text=recovery,
        score=report.score,
        insights=report.insights,
        refreshed_at=refreshed_at,
    )


async def refresh(
    collector: MetricCollector,
    state: DisplayState | None = None,
    scoring: ScoringConfig | None = None,
    insight_config: InsightConfig | None = None,
) -> DisplayState:
    """Run one refresh cycle: collect, evaluate, publish.

    If the caller cancels while the queries are pending, the cancellation
    propagates and no new state is produced.
    """
    triple = await collector.collect()
    report = evaluate(triple, scoring, insight_config)
    new_state = apply_report(
        state or DisplayState(), report, datetime.now(tz=timezone.utc)
    )
    logger.info(
        "Refresh complete: score=%s, insights=%d", report.score, len(report.insights)
    )
    return new_state
