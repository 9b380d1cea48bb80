"""
growth_ranker.py — Fastest-growing and declining hashtags.

Takes an explicit collection of (candidate, window) pairs so it can be
driven by the store in production and by synthetic data in tests. Each
growth rate is computed independently with the same first-vs-last rule as
the trend calculator.

Python's sort is stable, so equal growth rates keep their input order.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from hashtag_analytics.models.hashtag import (
    GrowthCandidate,
    GrowthEntry,
    GrowthRanking,
    Observation,
)
from hashtag_analytics.services.trend_metrics import calculate_growth_rate

TOP_N = 10


def growth_entry(candidate: GrowthCandidate, window: Sequence[Observation]) -> GrowthEntry:
    return GrowthEntry(
        hashtag=candidate.hashtag,
        platform=candidate.platform,
        category=candidate.category,
        currentMentions=candidate.current_mentions,
        growthRate=round(calculate_growth_rate(window), 2),
        trending_score=candidate.trending_score,
    )


def rank_growth(
    entries: Iterable[tuple[GrowthCandidate, Sequence[Observation]]],
    limit: int = TOP_N,
) -> GrowthRanking:
    """
    Split candidates into growing and declining lists, `limit` each.

    Growth rates of exactly zero appear in neither list.
    """
    scored = [growth_entry(candidate, window) for candidate, window in entries]

    growing   = [e for e in scored if e.growthRate > 0]
    declining = [e for e in scored if e.growthRate < 0]

    return GrowthRanking(
        fastestGrowing=sorted(growing, key=lambda e: e.growthRate, reverse=True)[:limit],
        declining=sorted(declining, key=lambda e: e.growthRate)[:limit],
    )
