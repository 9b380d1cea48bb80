"""
trend_metrics.py — Trend classification and window statistics.

USAGE
─────
    from hashtag_analytics.services.trend_metrics import calculate_trend_metrics

    analysis = calculate_trend_metrics(window)
    # analysis.trend       → "rising" | "falling" | "stable"
    # analysis.growthRate  → percent change first → last, 2 dp
    # analysis.volatility  → population std-dev of mentions, 2 dp

The growth-rate rule lives in calculate_growth_rate() so the growth ranker
applies exactly the same formula. A window whose first observation has zero
mentions yields a growth rate of 0 (no baseline to compare against).
"""

from __future__ import annotations

import math
from collections.abc import Sequence

from hashtag_analytics.models.hashtag import Observation, TrendAnalysis

# ── Classification thresholds (percent) ───────────────────────────────────────

RISING_THRESHOLD  = 10.0
FALLING_THRESHOLD = -10.0

MIN_TREND_OBSERVATIONS = 2


def _chronological(window: Sequence[Observation]) -> list[Observation]:
    return sorted(window, key=lambda obs: obs.timestamp)


def calculate_growth_rate(window: Sequence[Observation]) -> float:
    """
    Percent change in mentions between the first and last observation.

    Returns 0.0 for windows shorter than two points and when the first
    observation has zero mentions. The result is not rounded.
    """
    if len(window) < MIN_TREND_OBSERVATIONS:
        return 0.0

    ordered = _chronological(window)
    first = ordered[0].mentions
    last  = ordered[-1].mentions

    if first == 0:
        return 0.0

    return (last - first) / first * 100


def classify_trend(growth_rate: float) -> str:
    if growth_rate > RISING_THRESHOLD:
        return "rising"
    if growth_rate < FALLING_THRESHOLD:
        return "falling"
    return "stable"


def calculate_trend_metrics(window: Sequence[Observation]) -> TrendAnalysis:
    """
    Summarise an observation window.

    Fewer than two observations carry no signal and produce the stable
    all-zero default.
    """
    if len(window) < MIN_TREND_OBSERVATIONS:
        return TrendAnalysis()

    ordered  = _chronological(window)
    mentions = [obs.mentions for obs in ordered]

    growth_rate = calculate_growth_rate(ordered)

    mean = sum(mentions) / len(mentions)
    variance = sum((m - mean) ** 2 for m in mentions) / len(mentions)
    volatility = math.sqrt(variance)

    return TrendAnalysis(
        trend=classify_trend(growth_rate),
        growthRate=round(growth_rate, 2),
        volatility=round(volatility, 2),
        peak=max(mentions),
        average=round(mean, 2),
        totalMentions=sum(mentions),
        totalEngagement=sum(obs.engagement for obs in ordered),
    )
