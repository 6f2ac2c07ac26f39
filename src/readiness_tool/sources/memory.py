"""Fuente en memoria para pruebas y datos fijos."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime

from readiness_tool.model import QuantitySample, SleepSample
from readiness_tool.sources.base import HealthDataSource, overlaps


class InMemorySource(HealthDataSource):
    """Serve queries from sample lists held in memory.

    ``failures`` maps a query name (``steps``, ``resting_heart_rate``,
    ``sleep``) to an exception raised by that query, to simulate an
    unavailable store.
    """

    def __init__(
        self,
        steps: Sequence[QuantitySample] = (),
        resting_heart_rate: Sequence[QuantitySample] = (),
        sleep: Sequence[SleepSample] = (),
        failures: dict[str, Exception] | None = None,
    ) -> None:
        self._steps = list(steps)
        self._resting_heart_rate = list(resting_heart_rate)
        self._sleep = list(sleep)
        self._failures = dict(failures or {})

    def _raise_if_failing(self, query: str) -> None:
        exc = self._failures.get(query)
        if exc is not None:
            raise exc

    async def step_count(self, start: datetime, end: datetime) -> float | None:
        self._raise_if_failing("steps")
        values = [
            s.value for s in self._steps if overlaps(s.start, s.end, start, end)
        ]
        if not values:
            return None
        return float(sum(values))

    async def resting_heart_rate_samples(
        self, start: datetime, end: datetime
    ) -> list[QuantitySample]:
        self._raise_if_failing("resting_heart_rate")
        return [
            s
            for s in self._resting_heart_rate
            if overlaps(s.start, s.end, start, end)
        ]

    async def sleep_samples(self, start: datetime, end: datetime) -> list[SleepSample]:
        self._raise_if_failing("sleep")
        return [s for s in self._sleep if overlaps(s.start, s.end, start, end)]
