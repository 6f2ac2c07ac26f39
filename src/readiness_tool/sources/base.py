"""Clases base para fuentes de datos."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from readiness_tool.model import QuantitySample, SleepSample


@dataclass(frozen=True)
class SourcePaths:
    """Container for source files."""

    root: Path


class HealthDataSource(ABC):
    """Abstract health data store with three read-only queries.

    Windows are inclusive ``[start, end]`` ranges of aware datetimes.
    """

    def validate(self) -> None:
        """Validate that the source is usable.

        Raises:
            FileNotFoundError: If required files are missing.
        """

    @abstractmethod
    async def step_count(self, start: datetime, end: datetime) -> float | None:
        """Return the cumulative step count, or None if there are no samples."""

    @abstractmethod
    async def resting_heart_rate_samples(
        self, start: datetime, end: datetime
    ) -> list[QuantitySample]:
        """Return resting heart rate samples in beats per minute."""

    @abstractmethod
    async def sleep_samples(self, start: datetime, end: datetime) -> list[SleepSample]:
        """Return sleep analysis samples of every stage."""


def overlaps(
    sample_start: datetime, sample_end: datetime, start: datetime, end: datetime
) -> bool:
    """True if a sample interval intersects the query window."""
    return sample_end >= start and sample_start <= end
