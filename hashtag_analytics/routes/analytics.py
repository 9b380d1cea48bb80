"""
analytics.py — Trend, prediction, growth and summary routes.

Routes:
  GET /api/v1/analytics/trends/{hashtag}        — trend analysis over a lookback window
  GET /api/v1/analytics/predictions/{hashtag}   — 24 h / 1 week mention forecasts
  GET /api/v1/analytics/growth                  — fastest growing + declining hashtags
  GET /api/v1/analytics/categories              — per-category totals and top hashtags
  GET /api/v1/analytics/platforms/comparison    — per-platform totals and top hashtags
  GET /api/v1/analytics/sentiment               — sentiment totals, overall and by category

HOW THE DATA FLOWS
──────────────────
1. The route loads documents through ObservationStore (one consistent
   snapshot per hashtag).
2. select_window() cuts the requested lookback period out of the stored
   time series, oldest first.
3. The window goes to the pure services (trend_metrics, predictor,
   growth_ranker); nothing is cached between requests.

TESTING
───────
  pytest tests/test_analytics_routes.py -v

  curl "http://localhost:8000/api/v1/analytics/trends/worldcup?platform=twitter&days=7"
  curl "http://localhost:8000/api/v1/analytics/growth?category=sports"
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from hashtag_analytics.core.config import settings
from hashtag_analytics.core.database import get_db
from hashtag_analytics.models.hashtag import (
    GrowthCandidate,
    GrowthRankingResponse,
    PredictionResponse,
    TrendResponse,
)
from hashtag_analytics.models.summary import (
    CategoryBreakdownResponse,
    PlatformComparisonResponse,
    SentimentOverviewResponse,
)
from hashtag_analytics.services.aggregations import (
    category_breakdown,
    platform_comparison,
    sentiment_overview,
)
from hashtag_analytics.services.growth_ranker import rank_growth
from hashtag_analytics.services.observation_store import (
    HashtagNotFoundError,
    ObservationStore,
    select_window,
)
from hashtag_analytics.services.predictor import generate_predictions
from hashtag_analytics.services.trend_metrics import calculate_trend_metrics

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/analytics", tags=["analytics"])

_MAX_DAYS = 365


def _store(db) -> ObservationStore:
    if db is None:
        raise HTTPException(status_code=503, detail="Database unavailable")
    return ObservationStore(db)


def _period(days: int) -> str:
    return f"{days} days"


# ── Per-hashtag analysis ──────────────────────────────────────────────────────

@router.get("/trends/{hashtag}", response_model=TrendResponse)
async def get_trend_analysis(
    hashtag: str,
    platform: Optional[str] = Query(default=None, description="Restrict to one platform"),
    days: int = Query(default=settings.default_trend_days, ge=1, le=_MAX_DAYS),
    db=Depends(get_db),
):
    """Classify the trend of a hashtag over the last `days` days."""
    store = _store(db)
    try:
        doc = await store.get_hashtag(hashtag, platform)
    except HashtagNotFoundError:
        raise HTTPException(status_code=404, detail="Hashtag not found")

    window = select_window(doc.time_series, timedelta(days=days))
    return TrendResponse(
        hashtag=doc.hashtag,
        platform=doc.platform,
        timeSeries=window,
        analysis=calculate_trend_metrics(window),
    )


@router.get("/predictions/{hashtag}", response_model=PredictionResponse)
async def get_predictions(
    hashtag: str,
    platform: Optional[str] = Query(default=None, description="Restrict to one platform"),
    db=Depends(get_db),
):
    """Forecast mentions from the full stored history of a hashtag."""
    store = _store(db)
    try:
        doc = await store.get_hashtag(hashtag, platform)
    except HashtagNotFoundError:
        raise HTTPException(status_code=404, detail="Hashtag not found")

    return PredictionResponse(
        hashtag=doc.hashtag,
        platform=doc.platform,
        predictions=generate_predictions(doc.time_series),
    )


# ── Cross-hashtag analysis ────────────────────────────────────────────────────

@router.get("/growth", response_model=GrowthRankingResponse)
async def get_growth_ranking(
    platform: Optional[str] = Query(default=None),
    category: Optional[str] = Query(default=None),
    days: int = Query(default=settings.default_growth_days, ge=1, le=_MAX_DAYS),
    db=Depends(get_db),
):
    """
    Rank hashtags updated in the last `days` days by growth over that window.

    The store query snapshots the candidate set before ranking starts.
    """
    store = _store(db)
    now = datetime.now(tz=timezone.utc)
    period = timedelta(days=days)

    docs = await store.list_hashtags(platform=platform, category=category, updated_since=now - period)
    entries = [
        (
            GrowthCandidate(
                hashtag=doc.hashtag,
                platform=doc.platform,
                category=doc.category,
                current_mentions=doc.metrics.mentions,
                trending_score=doc.trending_score,
            ),
            select_window(doc.time_series, period, now),
        )
        for doc in docs
    ]
    ranking = rank_growth(entries)
    logger.debug("Ranked growth for %d hashtags (%s)", len(entries), _period(days))

    return GrowthRankingResponse(**ranking.model_dump(), period=_period(days))


@router.get("/categories", response_model=CategoryBreakdownResponse)
async def get_category_breakdown(
    platform: Optional[str] = Query(default=None),
    days: int = Query(default=settings.default_summary_days, ge=1, le=_MAX_DAYS),
    db=Depends(get_db),
):
    """Totals and top five hashtags per category."""
    store = _store(db)
    since = datetime.now(tz=timezone.utc) - timedelta(days=days)
    docs = await store.list_hashtags(platform=platform, updated_since=since)
    return CategoryBreakdownResponse(categories=category_breakdown(docs), period=_period(days))


@router.get("/platforms/comparison", response_model=PlatformComparisonResponse)
async def get_platform_comparison(
    days: int = Query(default=settings.default_summary_days, ge=1, le=_MAX_DAYS),
    db=Depends(get_db),
):
    """Totals and top ten trending hashtags per platform."""
    store = _store(db)
    since = datetime.now(tz=timezone.utc) - timedelta(days=days)
    docs = await store.list_hashtags(updated_since=since)
    return PlatformComparisonResponse(platformStats=platform_comparison(docs), period=_period(days))


@router.get("/sentiment", response_model=SentimentOverviewResponse)
async def get_sentiment_overview(
    platform: Optional[str] = Query(default=None),
    category: Optional[str] = Query(default=None),
    days: int = Query(default=settings.default_summary_days, ge=1, le=_MAX_DAYS),
    db=Depends(get_db),
):
    """Positive / negative / neutral totals overall and per category."""
    store = _store(db)
    since = datetime.now(tz=timezone.utc) - timedelta(days=days)
    docs = await store.list_hashtags(platform=platform, category=category, updated_since=since)
    overall, by_category = sentiment_overview(docs)
    return SentimentOverviewResponse(overall=overall, byCategory=by_category, period=_period(days))
