"""
pytest configuration and shared fixtures for the Hashtag Analytics API tests.

Tests must not require a live MongoDB. We achieve this by:
  1. Patching connect_to_mongo / close_mongo_connection to no-ops so
     FastAPI's lifespan doesn't try to reach a real database.
  2. Setting db_client.client = None (disconnected) so the health check
     reports "disconnected" — a valid test-mode state.
  3. Overriding get_db with an in-memory FakeDB for route tests.
"""

import copy
import os
import re
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from bson import ObjectId
from httpx import ASGITransport, AsyncClient

# Set env vars BEFORE importing the app so Settings picks them up correctly
os.environ.setdefault("ENVIRONMENT", "test")


# ── In-memory stand-in for the `hashtags` collection ──────────────────────────

def _lookup(doc, dotted_key):
    value = doc
    for part in dotted_key.split("."):
        if not isinstance(value, dict):
            return None
        value = value.get(part)
    return value


def _matches(doc, query):
    for key, expected in query.items():
        if key == "$or":
            if not any(_matches(doc, cond) for cond in expected):
                return False
            continue
        value = _lookup(doc, key)
        if isinstance(expected, dict):
            if "$gte" in expected and (value is None or value < expected["$gte"]):
                return False
            if "$lt" in expected and (value is None or value >= expected["$lt"]):
                return False
            if "$regex" in expected:
                flags = re.IGNORECASE if "i" in expected.get("$options", "") else 0
                if value is None or not re.search(expected["$regex"], value, flags):
                    return False
        elif value != expected:
            return False
    return True


def _sort_key(field):
    def key(doc):
        value = _lookup(doc, field)
        return (value is not None, value)
    return key


def _sorted(docs, spec):
    # Stable sorts applied last key first give a compound sort.
    for field, direction in reversed(spec):
        docs = sorted(docs, key=_sort_key(field), reverse=direction == -1)
    return docs


def _apply_update(doc, update, inserting):
    for op, fields in update.items():
        if op == "$setOnInsert" and not inserting:
            continue
        for path, value in fields.items():
            *parents, leaf = path.split(".")
            target = doc
            for part in parents:
                target = target.setdefault(part, {})
            if op in ("$set", "$setOnInsert"):
                target[leaf] = value
            elif op == "$inc":
                target[leaf] = target.get(leaf, 0) + value
            elif op == "$push":
                target.setdefault(leaf, []).append(value)
            else:
                raise NotImplementedError(op)


class FakeCursor:
    def __init__(self, docs):
        self._docs = docs
        self._skip_n = 0
        self._limit_n = 0

    def sort(self, key_or_list, direction=1):
        spec = key_or_list if isinstance(key_or_list, list) else [(key_or_list, direction)]
        self._docs = _sorted(self._docs, spec)
        return self

    def skip(self, n):
        self._skip_n = n
        return self

    def limit(self, n):
        self._limit_n = n
        return self

    async def __aiter__(self):
        docs = self._docs[self._skip_n:]
        if self._limit_n:
            docs = docs[: self._limit_n]
        for doc in docs:
            yield doc


class FakeCollection:
    """
    Dict-backed collection. Every async method runs without awaiting, so each
    call is atomic with respect to other tasks, like a single-document write
    on a real server.
    """

    def __init__(self):
        self._docs = {}

    def add(self, doc):
        """Synchronous insert used by tests to seed data."""
        oid = ObjectId()
        self._docs[str(oid)] = {**doc, "_id": oid}
        return oid

    def all(self):
        return list(self._docs.values())

    def _first(self, query):
        return next((d for d in self._docs.values() if _matches(d, query)), None)

    async def find_one(self, query, sort=None):
        docs = [d for d in self._docs.values() if _matches(d, query)]
        if sort:
            docs = _sorted(docs, sort)
        return docs[0] if docs else None

    def find(self, query=None):
        return FakeCursor([d for d in self._docs.values() if _matches(d, query or {})])

    async def count_documents(self, query):
        return sum(1 for d in self._docs.values() if _matches(d, query))

    async def find_one_and_update(self, query, update, upsert=False, return_document=False):
        doc = self._first(query)
        before = copy.deepcopy(doc)
        inserting = doc is None
        if inserting:
            if not upsert:
                return None
            oid = self.add({k: v for k, v in query.items() if not isinstance(v, dict)})
            doc = self._docs[str(oid)]
        _apply_update(doc, update, inserting)
        return copy.deepcopy(doc) if return_document else before

    async def update_one(self, query, update):
        doc = self._first(query)
        if doc is not None:
            _apply_update(doc, update, inserting=False)
        result = MagicMock()
        result.matched_count = result.modified_count = int(doc is not None)
        return result


class FakeDB:
    def __init__(self):
        self._cols = {}

    def __getitem__(self, name):
        if name not in self._cols:
            self._cols[name] = FakeCollection()
        return self._cols[name]


# ── Fixtures ──────────────────────────────────────────────────────────────────

@pytest.fixture(autouse=True)
async def mock_db():
    """
    Patch the MongoDB lifecycle for every test.

    - connect_to_mongo → no-op AsyncMock (startup doesn't attempt real connection)
    - close_mongo_connection → no-op AsyncMock
    - db_client.client / db_client.db → None
    """
    with (
        patch("hashtag_analytics.core.database.connect_to_mongo", new_callable=AsyncMock),
        patch("hashtag_analytics.core.database.close_mongo_connection", new_callable=AsyncMock),
    ):
        import hashtag_analytics.core.database as db_module

        original_client = db_module.db_client.client
        original_db = db_module.db_client.db

        db_module.db_client.client = None
        db_module.db_client.db = None

        yield

        db_module.db_client.client = original_client
        db_module.db_client.db = original_db


@pytest.fixture()
async def client(mock_db):  # noqa: ARG001 — mock_db must run first
    """HTTPX async test client wired to the FastAPI app (no database)."""
    from hashtag_analytics.main import app

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture()
def fake_db():
    return FakeDB()


@pytest.fixture()
async def api_client(fake_db):
    """HTTPX async test client with get_db overridden by the FakeDB."""
    from hashtag_analytics.core.database import get_db
    from hashtag_analytics.core.rate_limit import limiter
    from hashtag_analytics.main import app

    limiter.reset()
    app.dependency_overrides[get_db] = lambda: fake_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture()
def seed_hashtag(fake_db):
    """
    Insert a hashtag document with one observation per day ending today.

    Usage:
        seed_hashtag("worldcup", [100, 120, 150], platform="twitter")
    """
    from hashtag_analytics.models.hashtag import HashtagDocument, Observation

    def _seed(hashtag, mentions, platform="twitter", category="other",
              step=timedelta(days=1), updated=None, **fields):
        now = datetime.now(tz=timezone.utc)
        series = [
            Observation(
                timestamp=now - step * (len(mentions) - 1 - i) - timedelta(minutes=5),
                mentions=m,
                engagement=m * 10,
                sentiment_score=0.1,
            )
            for i, m in enumerate(mentions)
        ]
        doc = HashtagDocument(
            hashtag=hashtag,
            platform=platform,
            category=category,
            time_series=series,
            **fields,
        )
        doc.metadata.last_updated = updated or now
        fake_db["hashtags"].add(doc.model_dump(exclude={"id"}))
        return doc

    return _seed
