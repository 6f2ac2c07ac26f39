"""Modelos tipados para muestras de salud, mediciones y reportes."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class SleepStage(str, Enum):
    """Sleep analysis classification of a sample."""

    IN_BED = "in_bed"
    AWAKE = "awake"
    CORE = "core"
    DEEP = "deep"
    REM = "rem"


ASLEEP_STAGES: frozenset[SleepStage] = frozenset(
    {SleepStage.CORE, SleepStage.DEEP, SleepStage.REM}
)


@dataclass(frozen=True)
class QuantitySample:
    """One quantity sample (step count or beats per minute)."""

    start: datetime
    end: datetime
    value: float


@dataclass(frozen=True)
class SleepSample:
    """One sleep analysis interval."""

    start: datetime
    end: datetime
    stage: SleepStage

    @property
    def duration_seconds(self) -> float:
        return (self.end - self.start).total_seconds()


@dataclass(frozen=True)
class MeasurementTriple:
    """Steps today, 7-day resting heart rate and last night's sleep.

    A field set to None means the source had no usable sample in the window.
    """

    steps: int | None = None
    resting_heart_rate: float | None = None
    sleep_hours: float | None = None

    @classmethod
    def empty(cls) -> MeasurementTriple:
        return cls()

    @property
    def is_complete(self) -> bool:
        return (
            self.steps is not None
            and self.resting_heart_rate is not None
            and self.sleep_hours is not None
        )


@dataclass(frozen=True)
class ReadinessReport:
    """Score and insights computed from one measurement triple."""

    measurements: MeasurementTriple
    score: int | None
    insights: tuple[str, ...]
