"""
summary.py — Pydantic schemas for the cross-hashtag summary endpoints.

CategoryBreakdownResponse   — GET /api/v1/analytics/categories
PlatformComparisonResponse  — GET /api/v1/analytics/platforms/comparison
SentimentOverviewResponse   — GET /api/v1/analytics/sentiment
StatsOverviewResponse       — GET /api/v1/hashtags/stats/overview
CrossPlatformComparison     — GET /api/v1/hashtags/compare/{hashtag}
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class RankedHashtag(BaseModel):
    hashtag:        str
    platform:       str
    category:       str
    trending_score: float
    mentions:       int


# ── Categories ────────────────────────────────────────────────────────────────

class CategoryStats(BaseModel):
    category:         str
    count:            int
    totalMentions:    int
    avgTrendingScore: float
    avgSentiment:     float
    topHashtags:      list[RankedHashtag] = Field(default_factory=list)


class CategoryBreakdownResponse(BaseModel):
    categories: list[CategoryStats]
    period:     str


# ── Platforms ─────────────────────────────────────────────────────────────────

class PlatformStats(BaseModel):
    platform:         str
    hashtagCount:     int
    totalMentions:    int
    totalEngagement:  int    # likes + shares + comments
    avgTrendingScore: float
    avgSentiment:     float
    categories:       list[str] = Field(default_factory=list)
    trendingHashtags: list[RankedHashtag] = Field(default_factory=list)


class PlatformComparisonResponse(BaseModel):
    platformStats: list[PlatformStats]
    period:        str


# ── Sentiment ─────────────────────────────────────────────────────────────────

class SentimentBreakdown(BaseModel):
    positiveCount:     int   = 0
    negativeCount:     int   = 0
    neutralCount:      int   = 0
    avgSentimentScore: float = 0.0
    totalMentions:     int   = 0
    polarity:          str   = "neutral"   # sign of avgSentimentScore


class CategorySentiment(SentimentBreakdown):
    category: str


class SentimentOverviewResponse(BaseModel):
    overall:    SentimentBreakdown
    byCategory: list[CategorySentiment]
    period:     str


# ── Stats overview ────────────────────────────────────────────────────────────

class GroupCount(BaseModel):
    name:             str
    count:            int
    totalMentions:    int
    avgTrendingScore: float


class StatsOverviewResponse(BaseModel):
    totalHashtags:    int
    totalMentions:    int
    avgTrendingScore: float
    topCategory:      Optional[str] = None
    platforms:        list[GroupCount]
    categories:       list[GroupCount]


# ── Cross-platform comparison of a single hashtag ─────────────────────────────

class PlatformSnapshot(BaseModel):
    mentions:       int
    engagement:     int
    sentiment:      float
    trending_score: float
    category:       str
    last_updated:   Optional[datetime] = None


class ComparisonSummary(BaseModel):
    totalMentions:          int   = 0
    totalEngagement:        int   = 0
    avgSentiment:           float = 0.0
    bestPerformingPlatform: Optional[str] = None


class CrossPlatformComparison(BaseModel):
    hashtag:   str
    platforms: dict[str, PlatformSnapshot]
    summary:   ComparisonSummary
