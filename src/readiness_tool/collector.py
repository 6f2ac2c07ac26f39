"""Recolección concurrente de pasos, pulso en reposo y sueño.

The three queries run concurrently and are all awaited. Any failure of a single
query degrades to an absent field; cancellation of the caller propagates and
discards the whole cycle.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from datetime import datetime, timedelta, tzinfo
from typing import TypeVar

from readiness_tool.config import CollectorConfig
from readiness_tool.model import ASLEEP_STAGES, MeasurementTriple, SleepSample
from readiness_tool.sources.base import HealthDataSource

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class QueryWindow:
    """Inclusive time range of one query."""

    start: datetime
    end: datetime


@dataclass(frozen=True)
class QueryWindows:
    """Windows of the three queries of one refresh cycle."""

    steps: QueryWindow
    resting_heart_rate: QueryWindow
    sleep: QueryWindow


def start_of_day(moment: datetime, zone: tzinfo) -> datetime:
    """Local midnight of the day containing ``moment``."""
    local = moment.astimezone(zone)
    return datetime(local.year, local.month, local.day, tzinfo=zone)


def query_windows(
    now: datetime, zone: tzinfo, config: CollectorConfig | None = None
) -> QueryWindows:
    """Compute the query windows ending at ``now``.

    Steps cover today since local midnight, resting heart rate a trailing
    window of ``heart_rate_window_days`` and sleep everything since the
    start of the previous local day.
    """
    cfg = config or CollectorConfig()
    today = start_of_day(now, zone)
    previous = today.date() - timedelta(days=cfg.sleep_lookback_days)
    sleep_start = datetime(previous.year, previous.month, previous.day, tzinfo=zone)
    # Calendar days in local wall time, so a DST change does not shift the start.
    wall = now.astimezone(zone).replace(tzinfo=None)
    hr_start = (wall - timedelta(days=cfg.heart_rate_window_days)).replace(tzinfo=zone)
    return QueryWindows(
        steps=QueryWindow(start=today, end=now),
        resting_heart_rate=QueryWindow(start=hr_start, end=now),
        sleep=QueryWindow(start=sleep_start, end=now),
    )


def mean_or_none(values: Sequence[float]) -> float | None:
    """Arithmetic mean; None for an empty sequence."""
    if not values:
        return None
    return sum(values) / len(values)


def asleep_hours(samples: Sequence[SleepSample]) -> float | None:
    """Hours spent in REM, core or deep sleep; None unless the total is positive."""
    seconds = sum(s.duration_seconds for s in samples if s.stage in ASLEEP_STAGES)
    if seconds <= 0:
        return None
    return seconds / 3600


class MetricCollector:
    """Gather one ``MeasurementTriple`` from a health data source."""

    def __init__(
        self,
        source: HealthDataSource,
        config: CollectorConfig | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """Create a collector.

        Args:
            source: Data store to query.
            config: Query windows and time zone.
            clock: Returns the current aware datetime (defaults to now in the
                configured zone).
        """
        self._source = source
        self._config = config or CollectorConfig()
        self._zone = self._config.resolve_tz()
        self._clock = clock or (lambda: datetime.now(tz=self._zone))

    async def collect(self) -> MeasurementTriple:
        """Run the three queries concurrently and build the triple."""
        windows = query_windows(self._clock(), self._zone, self._config)
        steps, heart_rate, sleep = await asyncio.gather(
            self._guarded("steps", self._fetch_steps(windows.steps)),
            self._guarded(
                "resting_heart_rate",
                self._fetch_resting_heart_rate(windows.resting_heart_rate),
            ),
            self._guarded("sleep", self._fetch_sleep(windows.sleep)),
        )
        triple = MeasurementTriple(
            steps=steps, resting_heart_rate=heart_rate, sleep_hours=sleep
        )
        logger.debug("Collected %s", triple)
        return triple

    async def _guarded(self, name: str, query: Awaitable[T | None]) -> T | None:
        try:
            return await query
        except Exception as exc:
            logger.warning("Query %s failed, treating as no data: %s", name, exc)
            return None

    async def _fetch_steps(self, window: QueryWindow) -> int | None:
        total = await self._source.step_count(window.start, window.end)
        if total is None:
            return None
        return int(total)

    async def _fetch_resting_heart_rate(self, window: QueryWindow) -> float | None:
        samples = await self._source.resting_heart_rate_samples(
            window.start, window.end
        )
        return mean_or_none([s.value for s in samples])

    async def _fetch_sleep(self, window: QueryWindow) -> float | None:
        samples = await self._source.sleep_samples(window.start, window.end)
        return asleep_hours(samples)
