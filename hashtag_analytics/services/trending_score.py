"""
trending_score.py — Composite ranking score for a hashtag.

    score = 0.3 * engagement_rate + 0.4 * mentions in the last 24 h + 0.3 * sentiment

The score is unbounded and only comparable between hashtags scored with the
same weights. The store recomputes it whenever metrics, sentiment or the
time series of a document change.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timedelta, timezone
from typing import Optional

from hashtag_analytics.models.hashtag import HashtagDocument, Observation

ENGAGEMENT_WEIGHT = 0.3
MENTIONS_WEIGHT   = 0.4
SENTIMENT_WEIGHT  = 0.3

RECENT_HOURS = 24


def compute_trending_score(
    engagement_rate: float,
    recent_mentions: float,
    overall_sentiment: float,
) -> float:
    return (
        ENGAGEMENT_WEIGHT * engagement_rate
        + MENTIONS_WEIGHT * recent_mentions
        + SENTIMENT_WEIGHT * overall_sentiment
    )


def recent_mentions(
    observations: Iterable[Observation],
    now: Optional[datetime] = None,
    hours: int = RECENT_HOURS,
) -> int:
    """Sum of mentions strictly newer than `now - hours`."""
    now = now or datetime.now(tz=timezone.utc)
    cutoff = now - timedelta(hours=hours)
    return sum(obs.mentions for obs in observations if obs.timestamp > cutoff)


def score_hashtag(document: HashtagDocument, now: Optional[datetime] = None) -> float:
    return compute_trending_score(
        document.metrics.engagement_rate,
        recent_mentions(document.time_series, now),
        document.sentiment.overall_score,
    )
