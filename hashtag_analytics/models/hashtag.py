"""
hashtag.py — Pydantic models for stored hashtags and the analytics engine.

Stored entity
─────────────
One document per (hashtag, platform) pair lives in the `hashtags`
collection:

  {
    "hashtag": "worldcup",
    "platform": "twitter",
    "category": "sports",
    "metrics":   { "mentions": 120, "likes": 900, ..., "engagement_rate": 7.5 },
    "sentiment": { "positive": 70, "negative": 10, "neutral": 40, "overall_score": 0.42 },
    "trending_score": 51.3,
    "time_series": [
      { "timestamp": ISODate(...), "mentions": 120, "engagement": 900, "sentiment_score": 0.42 }
    ],
    "metadata": { "first_seen": ISODate(...), "last_updated": ISODate(...),
                  "total_mentions": 120, "peak_mentions": 120, "peak_date": ISODate(...) }
  }

Derived results
───────────────
TrendAnalysis, PredictionResult and GrowthRanking are recomputed on every
request from the observation window and never persisted. Their field names
are the JSON keys the dashboard reads (camelCase where it expects it).
"""

from datetime import datetime, timezone
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

Platform = Literal["twitter", "instagram", "youtube", "tiktok"]
Category = Literal[
    "politics",
    "sports",
    "entertainment",
    "technology",
    "business",
    "health",
    "education",
    "lifestyle",
    "news",
    "other",
]
TrendDirection = Literal["rising", "falling", "stable"]


def _as_utc(value: datetime) -> datetime:
    # MongoDB hands back naive datetimes that are already UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def sentiment_polarity(score: float) -> str:
    """Label the sign of a lexicon sentiment score."""
    if score > 0:
        return "positive"
    if score < 0:
        return "negative"
    return "neutral"


# ── Observations ──────────────────────────────────────────────────────────────

class Observation(BaseModel):
    """One timestamped measurement of a hashtag on a platform."""

    timestamp:       datetime
    mentions:        int   = Field(default=0, ge=0)
    engagement:      int   = Field(default=0, ge=0)
    sentiment_score: float = 0.0

    @field_validator("timestamp")
    @classmethod
    def _timestamp_utc(cls, value: datetime) -> datetime:
        return _as_utc(value)


# ── Aggregates owned by the ingestion side ────────────────────────────────────

class AggregateMetrics(BaseModel):
    """Running totals refreshed whenever platform data is fetched."""

    mentions:        int   = 0
    likes:           int   = 0
    shares:          int   = 0
    comments:        int   = 0
    views:           int   = 0
    engagement_rate: float = 0.0
    reach:           int   = 0


class SentimentSummary(BaseModel):
    """Counts of classified posts plus the mean (unnormalised) lexicon score."""

    positive:      int   = 0
    negative:      int   = 0
    neutral:       int   = 0
    overall_score: float = 0.0


class HashtagMetadata(BaseModel):
    first_seen:     Optional[datetime] = None
    last_updated:   Optional[datetime] = None
    total_mentions: int = 0
    peak_mentions:  int = 0
    peak_date:      Optional[datetime] = None


class HashtagDocument(BaseModel):
    """A tracked hashtag on one platform, as stored in MongoDB."""

    id:             Optional[str] = None    # stringified Mongo _id
    hashtag:        str
    platform:       Platform
    category:       Category = "other"
    metrics:        AggregateMetrics = Field(default_factory=AggregateMetrics)
    sentiment:      SentimentSummary = Field(default_factory=SentimentSummary)
    trending_score: float = 0.0
    time_series:    list[Observation] = Field(default_factory=list)
    metadata:       HashtagMetadata = Field(default_factory=HashtagMetadata)

    @field_validator("hashtag")
    @classmethod
    def _normalise_hashtag(cls, value: str) -> str:
        return value.strip().lower()


# ── Trend analysis ────────────────────────────────────────────────────────────

class TrendAnalysis(BaseModel):
    """Trend classification and summary statistics for one window."""

    trend:           TrendDirection = "stable"
    growthRate:      float = 0.0    # percent, 2 dp
    volatility:      float = 0.0    # population std-dev of mentions, 2 dp
    peak:            int   = 0
    average:         float = 0.0    # mean mentions, 2 dp
    totalMentions:   int   = 0
    totalEngagement: int   = 0


class TrendResponse(BaseModel):
    """Response body for GET /api/v1/analytics/trends/{hashtag}."""

    hashtag:    str
    platform:   str
    timeSeries: list[Observation]
    analysis:   TrendAnalysis


# ── Predictions ───────────────────────────────────────────────────────────────

class Prediction(BaseModel):
    mentions_prediction: int   = Field(default=0, ge=0)
    confidence:          float = Field(default=0.0, ge=0.0, le=1.0)


class PredictionResult(BaseModel):
    next_24h:  Prediction = Field(default_factory=Prediction)
    next_week: Prediction = Field(default_factory=Prediction)


class PredictionResponse(BaseModel):
    """Response body for GET /api/v1/analytics/predictions/{hashtag}."""

    hashtag:     str
    platform:    str
    predictions: PredictionResult


# ── Growth ranking ────────────────────────────────────────────────────────────

class GrowthCandidate(BaseModel):
    """Identity of one ranked entity; its window travels alongside it."""

    hashtag:          str
    platform:         str
    category:         str   = "other"
    current_mentions: int   = 0
    trending_score:   float = 0.0


class GrowthEntry(BaseModel):
    hashtag:         str
    platform:        str
    category:        str
    currentMentions: int
    growthRate:      float
    trending_score:  float


class GrowthRanking(BaseModel):
    fastestGrowing: list[GrowthEntry] = Field(default_factory=list)
    declining:      list[GrowthEntry] = Field(default_factory=list)


class GrowthRankingResponse(GrowthRanking):
    """Response body for GET /api/v1/analytics/growth."""

    period: str


# ── Ingestion ─────────────────────────────────────────────────────────────────

class ObservationIn(BaseModel):
    """An observation posted by a fetcher; timestamp defaults to now."""

    timestamp:       Optional[datetime] = None
    mentions:        int   = Field(..., ge=0)
    engagement:      int   = Field(default=0, ge=0)
    sentiment_score: float = 0.0


class ObservationIngestRequest(BaseModel):
    """Request body for POST /api/v1/hashtags/{hashtag}/observations."""

    platform:    Platform
    category:    Optional[Category] = None   # None keeps the stored category
    observation: ObservationIn
    metrics:     Optional[AggregateMetrics] = None
    sentiment:   Optional[SentimentSummary] = None


# ── Listing ───────────────────────────────────────────────────────────────────

class Pagination(BaseModel):
    current:  int
    total:    int
    hasNext:  bool
    hasPrev:  bool


class HashtagListResponse(BaseModel):
    hashtags:   list[HashtagDocument]
    pagination: Pagination
    total:      int


class TimeSeriesResponse(BaseModel):
    hashtag:    str
    platform:   str
    timeSeries: list[Observation]
