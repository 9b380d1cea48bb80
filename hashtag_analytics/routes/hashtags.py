"""
hashtags.py — Browsing, search and ingestion routes for tracked hashtags.

Routes:
  GET  /api/v1/hashtags                          — paginated list (filter + sort)
  GET  /api/v1/hashtags/trending                 — top hashtags by trending score
  GET  /api/v1/hashtags/category/{category}      — hashtags in one category
  GET  /api/v1/hashtags/search/{query}           — substring search on the name
  GET  /api/v1/hashtags/stats/overview           — global counts
  GET  /api/v1/hashtags/compare/{hashtag}        — one hashtag across platforms
  GET  /api/v1/hashtags/{hashtag}                — every platform document
  GET  /api/v1/hashtags/{hashtag}/timeseries     — windowed time series
  POST /api/v1/hashtags/{hashtag}/observations   — append an observation (rate limited)

The POST route is the hook platform fetchers call after each poll. It
appends the observation, overlays the aggregate metrics / sentiment they
computed and recomputes the trending score.
"""

import logging
from datetime import datetime, timedelta, timezone
from math import ceil
from typing import Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from hashtag_analytics.core.config import settings
from hashtag_analytics.core.database import get_db
from hashtag_analytics.core.rate_limit import limiter
from hashtag_analytics.models.hashtag import (
    HashtagDocument,
    HashtagListResponse,
    Observation,
    ObservationIngestRequest,
    Pagination,
    TimeSeriesResponse,
)
from hashtag_analytics.models.summary import CrossPlatformComparison, StatsOverviewResponse
from hashtag_analytics.services.aggregations import compare_across_platforms, stats_overview
from hashtag_analytics.services.observation_store import (
    HashtagNotFoundError,
    ObservationStore,
    select_window,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/hashtags", tags=["hashtags"])

SortField = Literal["trending_score", "mentions", "last_updated", "hashtag"]

_SORT_FIELDS = {
    "trending_score": "trending_score",
    "mentions":       "metrics.mentions",
    "last_updated":   "metadata.last_updated",
    "hashtag":        "hashtag",
}


def _store(db) -> ObservationStore:
    if db is None:
        raise HTTPException(status_code=503, detail="Database unavailable")
    return ObservationStore(db)


# ── Listing ───────────────────────────────────────────────────────────────────

@router.get("", response_model=HashtagListResponse)
async def list_hashtags(
    page:       int = Query(default=1, ge=1),
    limit:      int = Query(default=20, ge=1, le=100),
    platform:   Optional[str] = Query(default=None),
    category:   Optional[str] = Query(default=None),
    sort_by:    SortField = Query(default="trending_score", alias="sortBy"),
    sort_order: Literal["asc", "desc"] = Query(default="desc", alias="sortOrder"),
    db=Depends(get_db),
):
    """Return a page of hashtags, optionally filtered by platform and category."""
    store = _store(db)
    total = await store.count_hashtags(platform=platform, category=category)
    hashtags = await store.list_hashtags(
        platform=platform,
        category=category,
        sort_by=_SORT_FIELDS[sort_by],
        descending=sort_order == "desc",
        skip=(page - 1) * limit,
        limit=limit,
    )
    return HashtagListResponse(
        hashtags=hashtags,
        pagination=Pagination(
            current=page,
            total=ceil(total / limit) if total else 0,
            hasNext=page * limit < total,
            hasPrev=page > 1,
        ),
        total=total,
    )


@router.get("/trending", response_model=list[HashtagDocument])
async def get_trending(
    platform: Optional[str] = Query(default=None),
    limit: int = Query(default=20, ge=1, le=100),
    db=Depends(get_db),
):
    """Hashtags with the highest trending score."""
    return await _store(db).list_hashtags(platform=platform, sort_by="trending_score", limit=limit)


@router.get("/category/{category}", response_model=list[HashtagDocument])
async def get_by_category(
    category: str,
    platform: Optional[str] = Query(default=None),
    limit: int = Query(default=50, ge=1, le=100),
    db=Depends(get_db),
):
    return await _store(db).list_hashtags(
        platform=platform, category=category, sort_by="trending_score", limit=limit,
    )


@router.get("/search/{query}", response_model=list[HashtagDocument])
async def search_hashtags(
    query: str,
    platform: Optional[str] = Query(default=None),
    limit: int = Query(default=20, ge=1, le=100),
    db=Depends(get_db),
):
    return await _store(db).search_hashtags(query, platform=platform, limit=limit)


@router.get("/stats/overview", response_model=StatsOverviewResponse)
async def get_stats_overview(db=Depends(get_db)):
    """Global counts across every tracked hashtag."""
    docs = await _store(db).list_hashtags()
    return stats_overview(docs)


@router.get("/compare/{hashtag}", response_model=CrossPlatformComparison)
async def compare_hashtag(hashtag: str, db=Depends(get_db)):
    """Compare one hashtag across every platform it is tracked on."""
    docs = await _store(db).find_hashtags(hashtag)
    if not docs:
        raise HTTPException(status_code=404, detail="Hashtag not found")
    return compare_across_platforms(hashtag, docs)


# ── Single hashtag ────────────────────────────────────────────────────────────

@router.get("/{hashtag}", response_model=list[HashtagDocument])
async def get_hashtag(
    hashtag: str,
    platform: Optional[str] = Query(default=None),
    db=Depends(get_db),
):
    docs = await _store(db).find_hashtags(hashtag, platform=platform)
    if not docs:
        raise HTTPException(status_code=404, detail="Hashtag not found")
    return docs


@router.get("/{hashtag}/timeseries", response_model=TimeSeriesResponse)
async def get_time_series(
    hashtag: str,
    platform: Optional[str] = Query(default=None),
    days: int = Query(default=settings.default_timeseries_days, ge=1, le=365),
    db=Depends(get_db),
):
    store = _store(db)
    try:
        doc = await store.get_hashtag(hashtag, platform)
    except HashtagNotFoundError:
        raise HTTPException(status_code=404, detail="Hashtag not found")

    return TimeSeriesResponse(
        hashtag=doc.hashtag,
        platform=doc.platform,
        timeSeries=select_window(doc.time_series, timedelta(days=days)),
    )


# ── Ingestion ─────────────────────────────────────────────────────────────────

@router.post("/{hashtag}/observations", response_model=HashtagDocument, status_code=201)
@limiter.limit(settings.ingest_rate_limit)
async def ingest_observation(
    request: Request,
    hashtag: str,
    payload: ObservationIngestRequest,
    db=Depends(get_db),
):
    """Append one observation to a (hashtag, platform) history, creating it if new."""
    store = _store(db)
    incoming = payload.observation
    observation = Observation(
        timestamp=incoming.timestamp or datetime.now(tz=timezone.utc),
        mentions=incoming.mentions,
        engagement=incoming.engagement,
        sentiment_score=incoming.sentiment_score,
    )
    return await store.append_observation(
        hashtag,
        payload.platform,
        payload.category,
        observation,
        metrics=payload.metrics,
        sentiment=payload.sentiment,
    )
