"""
predictor.py — Short-horizon mention forecasts.

A least-squares line is fitted through the last three mention counts,
placed at x = 1, 2, 3, and extrapolated to x = 4 (next 24 h) and
x = 10 (next week). Confidence falls as the slope steepens; the weekly
horizon decays twice as fast and is capped lower because it reaches
further past the data.

Fewer than three observations produce the all-zero result rather than an
error.
"""

from __future__ import annotations

from collections.abc import Sequence

from hashtag_analytics.models.hashtag import Observation, Prediction, PredictionResult

MIN_PREDICTION_OBSERVATIONS = 3
FIT_POINTS = 3

NEXT_24H_INDEX  = FIT_POINTS + 1   # x = 4
NEXT_WEEK_INDEX = FIT_POINTS + 7   # x = 10

# ── Confidence decay ──────────────────────────────────────────────────────────

CONFIDENCE_24H_DIVISOR  = 100.0
CONFIDENCE_24H_FLOOR    = 0.1
CONFIDENCE_24H_CEILING  = 0.9

CONFIDENCE_WEEK_DIVISOR = 50.0
CONFIDENCE_WEEK_FLOOR   = 0.1
CONFIDENCE_WEEK_CEILING = 0.7


def _clamp(value: float, low: float, high: float) -> float:
    return min(high, max(low, value))


def fit_line(values: Sequence[float]) -> tuple[float, float]:
    """
    Ordinary least-squares fit of values against x = 1..n.

    Returns (slope, intercept). Needs at least two values.
    """
    n = len(values)
    sum_x  = n * (n + 1) / 2
    sum_y  = sum(values)
    sum_xy = sum((i + 1) * y for i, y in enumerate(values))
    sum_x2 = n * (n + 1) * (2 * n + 1) / 6

    slope = (n * sum_xy - sum_x * sum_y) / (n * sum_x2 - sum_x * sum_x)
    intercept = (sum_y - slope * sum_x) / n
    return slope, intercept


def _forecast(slope: float, intercept: float, index: int) -> int:
    return max(0, round(slope * index + intercept))


def generate_predictions(window: Sequence[Observation]) -> PredictionResult:
    """Forecast mentions for the next 24 hours and the next week."""
    if len(window) < MIN_PREDICTION_OBSERVATIONS:
        return PredictionResult()

    ordered = sorted(window, key=lambda obs: obs.timestamp)
    recent = [obs.mentions for obs in ordered[-FIT_POINTS:]]

    slope, intercept = fit_line(recent)

    confidence_24h = _clamp(
        1 - abs(slope) / CONFIDENCE_24H_DIVISOR,
        CONFIDENCE_24H_FLOOR,
        CONFIDENCE_24H_CEILING,
    )
    confidence_week = _clamp(
        1 - abs(slope) / CONFIDENCE_WEEK_DIVISOR,
        CONFIDENCE_WEEK_FLOOR,
        CONFIDENCE_WEEK_CEILING,
    )

    return PredictionResult(
        next_24h=Prediction(
            mentions_prediction=_forecast(slope, intercept, NEXT_24H_INDEX),
            confidence=round(confidence_24h, 2),
        ),
        next_week=Prediction(
            mentions_prediction=_forecast(slope, intercept, NEXT_WEEK_INDEX),
            confidence=round(confidence_week, 2),
        ),
    )
