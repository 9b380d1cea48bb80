"""
observation_store.py — Motor wrapper around the `hashtags` collection.

The analytics engine never talks to MongoDB directly. Routes build an
ObservationStore from the injected database handle, fetch one document (a
consistent snapshot of that hashtag's history), cut a window out of it with
select_window() and hand the window to the pure services.

Writes are a single atomic upsert on the (hashtag, platform) document:
$push the observation, $inc total_mentions, $set last_updated plus any
category/metrics/sentiment sent, $setOnInsert the defaults of a new
document. The peak is raised by a guarded update ($lt) and the trending
score is recomputed from the post-update document. Concurrent appends all
land; the trending score reflects whichever writer stored it last.

INDEXES (core/database.py ensure_indexes, at startup and in seed_db.py)
──────────────────────────────────────────────────────────────────────
  { hashtag: 1, platform: 1 }  unique
  { category: 1 }
  { "metadata.last_updated": -1 }
  { trending_score: -1 }
  { "time_series.timestamp": -1 }
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from hashtag_analytics.models.hashtag import (
    AggregateMetrics,
    HashtagDocument,
    Observation,
    SentimentSummary,
)
from hashtag_analytics.services.trending_score import score_hashtag

logger = logging.getLogger(__name__)

COLLECTION = "hashtags"
LAST_UPDATED = "metadata.last_updated"


class HashtagNotFoundError(LookupError):
    """No stored document matches the requested hashtag (and platform)."""

    def __init__(self, hashtag: str, platform: Optional[str] = None):
        self.hashtag = hashtag
        self.platform = platform
        where = f" on {platform}" if platform else ""
        super().__init__(f"Hashtag '{hashtag}' not found{where}")


# ── Windowing ─────────────────────────────────────────────────────────────────

def select_window(
    observations: Iterable[Observation],
    period: timedelta,
    now: Optional[datetime] = None,
) -> list[Observation]:
    """Observations with timestamp >= now - period, oldest first."""
    now = now or datetime.now(tz=timezone.utc)
    cutoff = now - period
    window = [obs for obs in observations if obs.timestamp >= cutoff]
    return sorted(window, key=lambda obs: obs.timestamp)


def _doc_to_hashtag(doc: dict) -> HashtagDocument:
    data = {k: v for k, v in doc.items() if k != "_id"}
    if "_id" in doc:
        data["id"] = str(doc["_id"])
    return HashtagDocument.model_validate(data)


def _filter_query(
    platform: Optional[str] = None,
    category: Optional[str] = None,
    updated_since: Optional[datetime] = None,
) -> dict[str, Any]:
    query: dict[str, Any] = {}
    if platform:
        query["platform"] = platform
    if category:
        query["category"] = category
    if updated_since is not None:
        query["metadata.last_updated"] = {"$gte": updated_since}
    return query


class ObservationStore:
    """Read and append hashtag observation histories."""

    def __init__(self, db):
        self._collection = db[COLLECTION]

    # ── Reads ─────────────────────────────────────────────────────────────────

    async def get_hashtag(self, hashtag: str, platform: Optional[str] = None) -> HashtagDocument:
        """
        Return the most recently updated document for a hashtag.

        Raises HashtagNotFoundError when nothing matches.
        """
        query: dict[str, Any] = {"hashtag": hashtag.strip().lower()}
        if platform:
            query["platform"] = platform

        doc = await self._collection.find_one(query, sort=[("metadata.last_updated", -1)])
        if not doc:
            raise HashtagNotFoundError(hashtag, platform)
        return _doc_to_hashtag(doc)

    async def find_hashtags(self, hashtag: str, platform: Optional[str] = None) -> list[HashtagDocument]:
        """Every platform document for a hashtag, newest update first."""
        query: dict[str, Any] = {"hashtag": hashtag.strip().lower()}
        if platform:
            query["platform"] = platform
        cursor = self._collection.find(query).sort("metadata.last_updated", -1)
        return await self._collect(cursor)

    async def list_hashtags(
        self,
        platform: Optional[str] = None,
        category: Optional[str] = None,
        updated_since: Optional[datetime] = None,
        sort_by: str = "metadata.last_updated",
        descending: bool = True,
        skip: int = 0,
        limit: int = 0,
    ) -> list[HashtagDocument]:
        query = _filter_query(platform, category, updated_since)
        sort = [(sort_by, -1 if descending else 1)]
        if sort_by != LAST_UPDATED:
            # Equal values: most recently updated first.
            sort.append((LAST_UPDATED, -1))
        cursor = self._collection.find(query).sort(sort)
        if skip:
            cursor = cursor.skip(skip)
        if limit:
            cursor = cursor.limit(limit)
        return await self._collect(cursor)

    async def count_hashtags(
        self,
        platform: Optional[str] = None,
        category: Optional[str] = None,
        updated_since: Optional[datetime] = None,
    ) -> int:
        return await self._collection.count_documents(_filter_query(platform, category, updated_since))

    async def search_hashtags(
        self,
        text: str,
        platform: Optional[str] = None,
        limit: int = 20,
    ) -> list[HashtagDocument]:
        """Case-insensitive substring search on the hashtag name."""
        query: dict[str, Any] = {"hashtag": {"$regex": re.escape(text), "$options": "i"}}
        if platform:
            query["platform"] = platform
        cursor = (
            self._collection.find(query)
            .sort([("trending_score", -1), (LAST_UPDATED, -1)])
            .limit(limit)
        )
        return await self._collect(cursor)

    async def _collect(self, cursor) -> list[HashtagDocument]:
        results = []
        async for doc in cursor:
            try:
                results.append(_doc_to_hashtag(doc))
            except ValueError as exc:
                logger.warning("Skipping malformed hashtag doc %s: %s", doc.get("_id"), exc)
        return results

    # ── Writes ────────────────────────────────────────────────────────────────

    async def append_observation(
        self,
        hashtag: str,
        platform: str,
        category: Optional[str],
        observation: Observation,
        metrics: Optional[AggregateMetrics] = None,
        sentiment: Optional[SentimentSummary] = None,
        now: Optional[datetime] = None,
    ) -> HashtagDocument:
        """
        Append one observation and refresh the derived fields of the document.

        category, metrics and sentiment overwrite the stored values only when
        given; a new document starts as category "other" with empty metrics.
        """
        now = now or datetime.now(tz=timezone.utc)
        name = hashtag.strip().lower()
        key = {"hashtag": name, "platform": platform}
        mentions = observation.mentions

        changes: dict[str, Any] = {"metadata.last_updated": now}
        defaults: dict[str, Any] = {
            "metadata.first_seen": now,
            "metadata.peak_mentions": 0,
            "metadata.peak_date": None,
            "trending_score": 0.0,
        }
        for field, value, default in (
            ("category", category, "other"),
            ("metrics", metrics.model_dump() if metrics is not None else None, AggregateMetrics().model_dump()),
            ("sentiment", sentiment.model_dump() if sentiment is not None else None, SentimentSummary().model_dump()),
        ):
            if value is not None:
                changes[field] = value
            else:
                defaults[field] = default

        update = {
            "$push": {"time_series": observation.model_dump()},
            "$inc": {"metadata.total_mentions": mentions},
            "$set": changes,
            "$setOnInsert": defaults,
        }
        try:
            doc = await self._collection.find_one_and_update(
                key, update, upsert=True, return_document=ReturnDocument.AFTER,
            )
        except DuplicateKeyError:
            # Lost the insert race on the unique (hashtag, platform) index;
            # the document exists now, so the retry updates it.
            doc = await self._collection.find_one_and_update(
                key, update, upsert=True, return_document=ReturnDocument.AFTER,
            )

        meta = doc["metadata"]
        if mentions > meta.get("peak_mentions", 0):
            result = await self._collection.update_one(
                {"_id": doc["_id"], "metadata.peak_mentions": {"$lt": mentions}},
                {"$set": {"metadata.peak_mentions": mentions, "metadata.peak_date": observation.timestamp}},
            )
            if result.modified_count:
                meta["peak_mentions"] = mentions
                meta["peak_date"] = observation.timestamp

        current = _doc_to_hashtag(doc)
        current.trending_score = score_hashtag(current, now)
        await self._collection.update_one(
            {"_id": doc["_id"]}, {"$set": {"trending_score": current.trending_score}},
        )

        logger.info(
            "Recorded observation for #%s on %s (mentions=%d, score=%.2f)",
            name, platform, mentions, current.trending_score,
        )
        return current
