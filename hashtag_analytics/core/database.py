"""
database.py — Motor connection lifecycle and the `hashtags` indexes.

The app holds one Motor client for its whole lifetime. lifespan() in
main.py opens it with connect_to_mongo() and closes it with
close_mongo_connection(); route handlers receive the database through the
get_db() dependency and never touch the client themselves.

When MongoDB cannot be reached at startup the process stays up: get_db()
yields None, the data routes answer 503 and /health says "disconnected".
"""

import logging
import re

import certifi
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING
from pymongo.errors import PyMongoError

from hashtag_analytics.core.config import settings

logger = logging.getLogger(__name__)

# Query paths of ObservationStore: lookup by (hashtag, platform), category
# filters, recency filters, trending sorts and time-series range scans.
# (hashtag, platform) is unique so concurrent upserts cannot duplicate a pair.
HASHTAG_INDEXES = [
    ([("hashtag", ASCENDING), ("platform", ASCENDING)], {"unique": True}),
    ([("category", ASCENDING)], {}),
    ([("metadata.last_updated", DESCENDING)], {}),
    ([("trending_score", DESCENDING)], {}),
    ([("time_series.timestamp", DESCENDING)], {}),
]


class DatabaseClient:
    """Connection state shared by the app; tests swap .client / .db directly."""

    client: AsyncIOMotorClient | None = None
    db: AsyncIOMotorDatabase | None = None


db_client = DatabaseClient()


def _tls_options(uri: str) -> dict:
    # Atlas (mongodb+srv) needs certifi's CA bundle; a local mongod has no TLS.
    if uri.startswith("mongodb+srv://") or "tls=true" in uri.lower():
        return {"tlsCAFile": certifi.where()}
    return {}


def _redact_uri(uri: str) -> str:
    return re.sub(r"://[^:]+:[^@]+@", "://<redacted>@", uri)


async def ensure_indexes(db: AsyncIOMotorDatabase) -> None:
    """Create the `hashtags` indexes; a no-op for the ones that already exist."""
    for keys, options in HASHTAG_INDEXES:
        await db.hashtags.create_index(keys, **options)
    logger.debug("Ensured %d indexes on hashtags", len(HASHTAG_INDEXES))


async def connect_to_mongo() -> None:
    logger.info("Connecting to MongoDB at %s", _redact_uri(settings.mongo_uri))
    client = None
    try:
        client = AsyncIOMotorClient(
            settings.mongo_uri,
            serverSelectionTimeoutMS=5000,
            **_tls_options(settings.mongo_uri),
        )
        await client.admin.command("ping")
        db = client[settings.mongo_db_name]
        await ensure_indexes(db)
    except PyMongoError as exc:
        logger.warning("MongoDB unavailable at startup (%s); serving in degraded mode", exc)
        if client is not None:
            client.close()
        db_client.client = None
        db_client.db = None
        return

    db_client.client = client
    db_client.db = db
    logger.info("MongoDB connected (db: %s)", settings.mongo_db_name)


async def close_mongo_connection() -> None:
    if db_client.client is not None:
        db_client.client.close()
        db_client.client = None
        db_client.db = None
        logger.info("MongoDB connection closed")


def get_db() -> AsyncIOMotorDatabase | None:
    """FastAPI dependency: the selected database, or None while disconnected."""
    return db_client.db
