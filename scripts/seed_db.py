#!/usr/bin/env python3
"""
seed_db.py — Populate MongoDB with synthetic hashtag histories for local development.

Usage:
    python scripts/seed_db.py            # replace existing seed hashtags
    python scripts/seed_db.py --append   # keep existing documents, add missing ones
    python scripts/seed_db.py --days 45  # longer history (default 30)

Requires:
    pip install -e .
    MongoDB running locally (or MONGO_URI / MONGO_DB_NAME in env or .env)

Each seed hashtag gets one observation per day with a built-in drift
(rising, falling or flat) plus noise, so the trend, growth and prediction
endpoints have something to show. Trending scores are computed with the
same function the API uses on ingestion.
"""

import argparse
import asyncio
import os
import random
from datetime import datetime, timedelta, timezone

from dotenv import load_dotenv

load_dotenv()

from motor.motor_asyncio import AsyncIOMotorClient  # noqa: E402

from hashtag_analytics.core.database import HASHTAG_INDEXES, ensure_indexes  # noqa: E402
from hashtag_analytics.models.hashtag import (  # noqa: E402
    AggregateMetrics,
    HashtagDocument,
    HashtagMetadata,
    Observation,
    SentimentSummary,
)
from hashtag_analytics.services.trending_score import score_hashtag  # noqa: E402

MONGO_URI = os.getenv("MONGO_URI", "mongodb://localhost:27017/hashtag_analytics")
MONGO_DB_NAME = os.getenv("MONGO_DB_NAME", "hashtag_analytics")

# (hashtag, platform, category, base daily mentions, daily drift in percent)
SEED_HASHTAGS = [
    ("worldcup",      "twitter",   "sports",        800,  4.0),
    ("worldcup",      "youtube",   "sports",        300,  2.5),
    ("election2026",  "twitter",   "politics",      1200, 1.0),
    ("aiart",         "instagram", "technology",    450,  6.0),
    ("fintech",       "twitter",   "business",      220,  -0.2),
    ("vaccine",       "twitter",   "health",        600,  -3.0),
    ("studytok",      "tiktok",    "education",     350,  3.0),
    ("oscars",        "youtube",   "entertainment", 900,  -5.0),
    ("minimalism",    "instagram", "lifestyle",     150,  0.0),
    ("breakingnews",  "twitter",   "news",          1500, -1.5),
]


def build_history(base: int, drift: float, days: int, now: datetime) -> list[Observation]:
    history = []
    level = float(base)
    for offset in range(days, 0, -1):
        level = max(0.0, level * (1 + drift / 100))
        mentions = max(0, int(random.gauss(level, level * 0.08)))
        history.append(Observation(
            timestamp=now - timedelta(days=offset) + timedelta(hours=random.randint(0, 3)),
            mentions=mentions,
            engagement=mentions * random.randint(3, 12),
            sentiment_score=round(random.uniform(-1.5, 2.5), 2),
        ))
    return history


def build_document(hashtag, platform, category, base, drift, days, now) -> HashtagDocument:
    history = build_history(base, drift, days, now)
    latest = history[-1]
    peak = max(history, key=lambda obs: obs.mentions)
    positive = random.randint(20, 80)
    negative = random.randint(5, 40)

    doc = HashtagDocument(
        hashtag=hashtag,
        platform=platform,
        category=category,
        metrics=AggregateMetrics(
            mentions=latest.mentions,
            likes=latest.engagement // 2,
            shares=latest.engagement // 4,
            comments=latest.engagement // 4,
            views=latest.engagement * 20,
            engagement_rate=round(latest.engagement / latest.mentions, 2) if latest.mentions else 0.0,
            reach=latest.mentions * random.randint(50, 200),
        ),
        sentiment=SentimentSummary(
            positive=positive,
            negative=negative,
            neutral=random.randint(10, 60),
            overall_score=round(sum(o.sentiment_score for o in history) / len(history), 3),
        ),
        time_series=history,
        metadata=HashtagMetadata(
            first_seen=history[0].timestamp,
            last_updated=now,
            total_mentions=sum(o.mentions for o in history),
            peak_mentions=peak.mentions,
            peak_date=peak.timestamp,
        ),
    )
    doc.trending_score = score_hashtag(doc, now)
    return doc


async def seed(append: bool, days: int) -> None:
    print("Connecting to MongoDB...")
    client = AsyncIOMotorClient(MONGO_URI)
    db = client[MONGO_DB_NAME]

    try:
        await client.admin.command("ping")
        print("Connected.")

        seed_keys = [{"hashtag": h, "platform": p} for h, p, *_ in SEED_HASHTAGS]

        # ─── Clean up previous seed data ──────────────────────────────────────
        if not append:
            deleted = await db.hashtags.delete_many({"$or": seed_keys})
            print(f"Removed {deleted.deleted_count} existing seed hashtags.")

        # ─── Insert sample hashtags ───────────────────────────────────────────
        now = datetime.now(timezone.utc)
        inserted = 0
        for hashtag, platform, category, base, drift in SEED_HASHTAGS:
            key = {"hashtag": hashtag, "platform": platform}
            if append and await db.hashtags.find_one(key):
                continue
            doc = build_document(hashtag, platform, category, base, drift, days, now)
            await db.hashtags.insert_one(doc.model_dump(exclude={"id"}))
            inserted += 1
        print(f"Inserted {inserted} hashtags with {days} days of history.")

        # ─── Ensure indexes exist ─────────────────────────────────────────────
        await ensure_indexes(db)
        print(f"Indexes ensured ({len(HASHTAG_INDEXES)}).")

        print("\nSeed complete! Top trending:")
        cursor = db.hashtags.find({}).sort("trending_score", -1).limit(5)
        async for doc in cursor:
            print(f"  #{doc['hashtag']} ({doc['platform']}): {doc['trending_score']:.1f}")

    finally:
        client.close()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed synthetic hashtag histories")
    parser.add_argument("--append", action="store_true", help="keep existing documents")
    parser.add_argument("--days", type=int, default=30, help="days of history per hashtag")
    args = parser.parse_args()
    asyncio.run(seed(args.append, args.days))
