"""
aggregations.py — Cross-hashtag summaries computed in Python.

Each function is a pure reduction over a list of HashtagDocuments already
filtered by the caller (platform / category / recency). Groups come back
sorted the way the dashboard lists them; ties keep first-seen order.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Callable, Sequence

from hashtag_analytics.models.hashtag import HashtagDocument, sentiment_polarity
from hashtag_analytics.models.summary import (
    CategorySentiment,
    CategoryStats,
    ComparisonSummary,
    CrossPlatformComparison,
    GroupCount,
    PlatformSnapshot,
    PlatformStats,
    RankedHashtag,
    SentimentBreakdown,
    StatsOverviewResponse,
)

TOP_PER_CATEGORY = 5
TOP_PER_PLATFORM = 10


def _mean(values: Sequence[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def _group_by(
    docs: Sequence[HashtagDocument],
    key: Callable[[HashtagDocument], str],
) -> dict[str, list[HashtagDocument]]:
    groups: dict[str, list[HashtagDocument]] = defaultdict(list)
    for doc in docs:
        groups[key(doc)].append(doc)
    return groups


def _engagement(doc: HashtagDocument) -> int:
    return doc.metrics.likes + doc.metrics.shares + doc.metrics.comments


def top_by_trending_score(docs: Sequence[HashtagDocument], n: int) -> list[RankedHashtag]:
    ranked = sorted(docs, key=lambda d: d.trending_score, reverse=True)[:n]
    return [
        RankedHashtag(
            hashtag=d.hashtag,
            platform=d.platform,
            category=d.category,
            trending_score=d.trending_score,
            mentions=d.metrics.mentions,
        )
        for d in ranked
    ]


# ── Categories ────────────────────────────────────────────────────────────────

def category_breakdown(docs: Sequence[HashtagDocument]) -> list[CategoryStats]:
    stats = [
        CategoryStats(
            category=category,
            count=len(group),
            totalMentions=sum(d.metrics.mentions for d in group),
            avgTrendingScore=_mean([d.trending_score for d in group]),
            avgSentiment=_mean([d.sentiment.overall_score for d in group]),
            topHashtags=top_by_trending_score(group, TOP_PER_CATEGORY),
        )
        for category, group in _group_by(docs, lambda d: d.category).items()
    ]
    return sorted(stats, key=lambda s: s.totalMentions, reverse=True)


# ── Platforms ─────────────────────────────────────────────────────────────────

def platform_comparison(docs: Sequence[HashtagDocument]) -> list[PlatformStats]:
    stats = []
    for platform, group in _group_by(docs, lambda d: d.platform).items():
        categories = list(dict.fromkeys(d.category for d in group))
        stats.append(PlatformStats(
            platform=platform,
            hashtagCount=len(group),
            totalMentions=sum(d.metrics.mentions for d in group),
            totalEngagement=sum(_engagement(d) for d in group),
            avgTrendingScore=_mean([d.trending_score for d in group]),
            avgSentiment=_mean([d.sentiment.overall_score for d in group]),
            categories=categories,
            trendingHashtags=top_by_trending_score(group, TOP_PER_PLATFORM),
        ))
    return sorted(stats, key=lambda s: s.totalMentions, reverse=True)


# ── Sentiment ─────────────────────────────────────────────────────────────────

def _sentiment_totals(group: Sequence[HashtagDocument]) -> dict:
    avg = _mean([d.sentiment.overall_score for d in group])
    return {
        "positiveCount":     sum(d.sentiment.positive for d in group),
        "negativeCount":     sum(d.sentiment.negative for d in group),
        "neutralCount":      sum(d.sentiment.neutral for d in group),
        "avgSentimentScore": avg,
        "totalMentions":     sum(d.metrics.mentions for d in group),
        "polarity":          sentiment_polarity(avg),
    }


def sentiment_overview(
    docs: Sequence[HashtagDocument],
) -> tuple[SentimentBreakdown, list[CategorySentiment]]:
    """Overall sentiment totals plus a per-category breakdown, most positive first."""
    overall = SentimentBreakdown(**_sentiment_totals(docs))
    by_category = [
        CategorySentiment(category=category, **_sentiment_totals(group))
        for category, group in _group_by(docs, lambda d: d.category).items()
    ]
    by_category.sort(key=lambda c: c.avgSentimentScore, reverse=True)
    return overall, by_category


# ── Overview ──────────────────────────────────────────────────────────────────

def _group_counts(groups: dict[str, list[HashtagDocument]]) -> list[GroupCount]:
    counts = [
        GroupCount(
            name=name,
            count=len(group),
            totalMentions=sum(d.metrics.mentions for d in group),
            avgTrendingScore=_mean([d.trending_score for d in group]),
        )
        for name, group in groups.items()
    ]
    return sorted(counts, key=lambda g: g.count, reverse=True)


def stats_overview(docs: Sequence[HashtagDocument]) -> StatsOverviewResponse:
    categories = _group_counts(_group_by(docs, lambda d: d.category))
    return StatsOverviewResponse(
        totalHashtags=len(docs),
        totalMentions=sum(d.metrics.mentions for d in docs),
        avgTrendingScore=_mean([d.trending_score for d in docs]),
        topCategory=categories[0].name if categories else None,
        platforms=_group_counts(_group_by(docs, lambda d: d.platform)),
        categories=categories,
    )


# ── Single hashtag across platforms ───────────────────────────────────────────

def compare_across_platforms(hashtag: str, docs: Sequence[HashtagDocument]) -> CrossPlatformComparison:
    """
    Side-by-side metrics of one hashtag on every platform it is tracked on.

    The best performing platform is the one with the highest trending score;
    the first one seen wins a tie.
    """
    platforms: dict[str, PlatformSnapshot] = {}
    for doc in docs:
        platforms.setdefault(doc.platform, PlatformSnapshot(
            mentions=doc.metrics.mentions,
            engagement=_engagement(doc),
            sentiment=doc.sentiment.overall_score,
            trending_score=doc.trending_score,
            category=doc.category,
            last_updated=doc.metadata.last_updated,
        ))

    summary = ComparisonSummary()
    if platforms:
        snapshots = list(platforms.values())
        summary.totalMentions   = sum(s.mentions for s in snapshots)
        summary.totalEngagement = sum(s.engagement for s in snapshots)
        summary.avgSentiment    = _mean([s.sentiment for s in snapshots])

        best_platform, best = next(iter(platforms.items()))
        for platform, snap in platforms.items():
            if snap.trending_score > best.trending_score:
                best_platform, best = platform, snap
        summary.bestPerformingPlatform = best_platform

    return CrossPlatformComparison(
        hashtag=hashtag.strip().lower(),
        platforms=platforms,
        summary=summary,
    )
