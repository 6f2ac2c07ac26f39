"""Configuración de puntuación, reglas de sugerencias y recolección."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import tzinfo

from dateutil import tz


@dataclass(frozen=True)
class ScoringConfig:
    """Targets and weights of the composite readiness score."""

    steps_target: int = 10_000
    sleep_target_hours: float = 8.0
    resting_hr_ideal: float = 40.0
    resting_hr_floor: float = 80.0
    steps_weight: float = 0.35
    sleep_weight: float = 0.40
    resting_hr_weight: float = 0.25


@dataclass(frozen=True)
class InsightConfig:
    """Thresholds of the insight rules."""

    recovery_below: int = 50
    balanced_below: int = 75
    sleep_below_hours: float = 7.0
    resting_hr_above: float = 65.0
    steps_below: int = 6000


@dataclass(frozen=True)
class CollectorConfig:
    """Query windows of the metric collector.

    ``tz_name`` None means the system local zone.
    """

    heart_rate_window_days: int = 7
    sleep_lookback_days: int = 1
    tz_name: str | None = None

    def resolve_tz(self) -> tzinfo:
        """Return the zone used to align day boundaries.

        Raises:
            ValueError: If ``tz_name`` is not a known zone.
        """
        if self.tz_name is None:
            return tz.tzlocal()
        zone = tz.gettz(self.tz_name)
        if zone is None:
            raise ValueError(f"Unknown time zone: {self.tz_name}")
        return zone
