"""Motor de preparación: puntaje compuesto y sugerencias ordenadas."""

from __future__ import annotations

import math

from readiness_tool.config import InsightConfig, ScoringConfig
from readiness_tool.model import MeasurementTriple, ReadinessReport

RECOVERY_MESSAGE = (
    "Recovery day. Keep activity gentle and add stretching or light cardio."
)
BALANCED_MESSAGE = (
    "Balanced day. A walk or a moderate-intensity workout will keep you moving."
)
HIGH_INTENSITY_MESSAGE = (
    "You are in good shape today. A chance to push with intervals or "
    "strength training."
)
SLEEP_MESSAGE = (
    "Sleep was on the short side. Cut screen time before bed and build a "
    "relaxing routine to sleep better."
)
HEART_RATE_MESSAGE = (
    "Resting heart rate is elevated. Stay hydrated, manage stress and take "
    "deep breaths or short walks."
)
ACTIVITY_MESSAGE = (
    "Step count is low. Take the stairs instead of the elevator and walk "
    "whenever you can."
)
FALLBACK_MESSAGE = "Data retrieved. Have a healthy day!"


def _clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(value, high))


def _round_half_up(value: float) -> int:
    """Round to nearest integer, ties away from zero (value is non-negative)."""
    return int(math.floor(value + 0.5))


def score(
    triple: MeasurementTriple, config: ScoringConfig | None = None
) -> int | None:
    """Compute the 0-100 readiness score.

    Each sub-score is normalized to [0, 1] against its target before
    weighting.

    Args:
        triple: Measurements of the current cycle.
        config: Targets and weights (defaults to ``ScoringConfig()``).

    Returns:
        Score in [0, 100], or None unless all three measurements are present.
    """
    if (
        triple.steps is None
        or triple.resting_heart_rate is None
        or triple.sleep_hours is None
    ):
        return None
    cfg = config or ScoringConfig()

    steps_score = _clamp(triple.steps / cfg.steps_target)
    hr_span = cfg.resting_hr_floor - cfg.resting_hr_ideal
    resting_score = _clamp(
        (cfg.resting_hr_floor - triple.resting_heart_rate) / hr_span
    )
    sleep_score = _clamp(triple.sleep_hours / cfg.sleep_target_hours)

    composite = (
        cfg.steps_weight * steps_score
        + cfg.sleep_weight * sleep_score
        + cfg.resting_hr_weight * resting_score
    )
    return int(_clamp(_round_half_up(composite * 100), 0, 100))


def insights(
    triple: MeasurementTriple,
    readiness: int | None,
    config: InsightConfig | None = None,
) -> tuple[str, ...]:
    """Build the ordered coaching suggestions.

    Score band first, then sleep, heart rate and steps; the fallback message
    is returned alone when no rule fires.
    """
    cfg = config or InsightConfig()
    out: list[str] = []

    if readiness is not None:
        if readiness < cfg.recovery_below:
            out.append(RECOVERY_MESSAGE)
        elif readiness < cfg.balanced_below:
            out.append(BALANCED_MESSAGE)
        else:
            out.append(HIGH_INTENSITY_MESSAGE)

    if triple.sleep_hours is not None and triple.sleep_hours < cfg.sleep_below_hours:
        out.append(SLEEP_MESSAGE)
    if (
        triple.resting_heart_rate is not None
        and triple.resting_heart_rate > cfg.resting_hr_above
    ):
        out.append(HEART_RATE_MESSAGE)
    if triple.steps is not None and triple.steps < cfg.steps_below:
        out.append(ACTIVITY_MESSAGE)

    if not out:
        return (FALLBACK_MESSAGE,)
    return tuple(out)


def evaluate(
    triple: MeasurementTriple,
    scoring: ScoringConfig | None = None,
    insight_config: InsightConfig | None = None,
) -> ReadinessReport:
    """Score a triple and derive its insights."""
    readiness = score(triple, scoring)
    return ReadinessReport(
        measurements=triple,
        score=readiness,
        insights=insights(triple, readiness, insight_config),
    )
