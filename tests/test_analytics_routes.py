"""
test_analytics_routes.py — Tests for /api/v1/analytics routes.

Every test seeds the in-memory FakeDB through the `seed_hashtag` fixture
(one observation per day, the last one five minutes ago) and calls the
app through `api_client`, which overrides get_db.
"""

from datetime import datetime, timedelta, timezone

import pytest

from hashtag_analytics.models.hashtag import AggregateMetrics, SentimentSummary

BASE = "/api/v1/analytics"


# ── Trends ────────────────────────────────────────────────────────────────────

class TestTrendAnalysis:

    async def test_returns_window_and_analysis(self, api_client, seed_hashtag):
        seed_hashtag("worldcup", [100, 150, 90], category="sports")

        r = await api_client.get(f"{BASE}/trends/worldcup", params={"platform": "twitter", "days": 7})
        assert r.status_code == 200
        data = r.json()
        assert data["hashtag"] == "worldcup"
        assert data["platform"] == "twitter"
        assert [p["mentions"] for p in data["timeSeries"]] == [100, 150, 90]

        analysis = data["analysis"]
        assert analysis["trend"] == "stable"
        assert analysis["growthRate"] == -10.0
        assert analysis["peak"] == 150
        assert analysis["average"] == 113.33
        assert analysis["totalMentions"] == 340
        assert analysis["totalEngagement"] == 3400

    async def test_window_respects_days(self, api_client, seed_hashtag):
        seed_hashtag("longrun", [10, 10, 10, 10, 100, 200])

        r = await api_client.get(f"{BASE}/trends/longrun", params={"days": 2})
        data = r.json()
        assert [p["mentions"] for p in data["timeSeries"]] == [100, 200]
        assert data["analysis"]["trend"] == "rising"
        assert data["analysis"]["growthRate"] == 100.0

    async def test_hashtag_name_is_case_insensitive(self, api_client, seed_hashtag):
        seed_hashtag("aiart", [5, 10])
        r = await api_client.get(f"{BASE}/trends/AIArt")
        assert r.status_code == 200
        assert r.json()["analysis"]["trend"] == "rising"

    async def test_single_point_window_is_degenerate(self, api_client, seed_hashtag):
        seed_hashtag("quiet", [50, 60], step=timedelta(days=20))
        r = await api_client.get(f"{BASE}/trends/quiet", params={"days": 1})
        data = r.json()
        assert r.status_code == 200
        assert len(data["timeSeries"]) == 1
        assert data["analysis"]["trend"] == "stable"
        assert data["analysis"]["growthRate"] == 0
        assert data["analysis"]["peak"] == 0

    async def test_unknown_hashtag_404(self, api_client):
        r = await api_client.get(f"{BASE}/trends/nothing")
        assert r.status_code == 404
        assert r.json()["detail"] == "Hashtag not found"

    async def test_unknown_platform_404(self, api_client, seed_hashtag):
        seed_hashtag("worldcup", [1, 2], platform="twitter")
        r = await api_client.get(f"{BASE}/trends/worldcup", params={"platform": "tiktok"})
        assert r.status_code == 404

    @pytest.mark.parametrize("days", [0, -3, 366])
    async def test_days_out_of_range_422(self, api_client, days):
        r = await api_client.get(f"{BASE}/trends/worldcup", params={"days": days})
        assert r.status_code == 422


# ── Predictions ───────────────────────────────────────────────────────────────

class TestPredictions:

    async def test_rising_series(self, api_client, seed_hashtag):
        seed_hashtag("ai", [10, 20, 40])

        r = await api_client.get(f"{BASE}/predictions/ai")
        assert r.status_code == 200
        preds = r.json()["predictions"]
        assert preds["next_24h"] == {"mentions_prediction": 53, "confidence": 0.85}
        assert preds["next_week"] == {"mentions_prediction": 143, "confidence": 0.7}

    async def test_uses_full_history(self, api_client, seed_hashtag):
        # Observations spread over 60 days are all still fitted.
        seed_hashtag("slow", [10, 20, 40], step=timedelta(days=30))
        r = await api_client.get(f"{BASE}/predictions/slow")
        assert r.json()["predictions"]["next_24h"]["mentions_prediction"] == 53

    async def test_insufficient_data_zeroes(self, api_client, seed_hashtag):
        seed_hashtag("new", [10, 20])
        r = await api_client.get(f"{BASE}/predictions/new")
        preds = r.json()["predictions"]
        assert preds["next_24h"] == {"mentions_prediction": 0, "confidence": 0.0}
        assert preds["next_week"] == {"mentions_prediction": 0, "confidence": 0.0}

    async def test_unknown_hashtag_404(self, api_client):
        r = await api_client.get(f"{BASE}/predictions/nothing")
        assert r.status_code == 404


# ── Growth ────────────────────────────────────────────────────────────────────

class TestGrowth:

    async def test_partitions_and_orders(self, api_client, seed_hashtag):
        seed_hashtag("rocket", [10, 50])
        seed_hashtag("climber", [100, 150])
        seed_hashtag("flat", [100, 100])
        seed_hashtag("fromzero", [0, 500])
        seed_hashtag("sinking", [100, 40])

        r = await api_client.get(f"{BASE}/growth")
        assert r.status_code == 200
        data = r.json()
        assert data["period"] == "30 days"
        assert [e["hashtag"] for e in data["fastestGrowing"]] == ["rocket", "climber"]
        assert [e["hashtag"] for e in data["declining"]] == ["sinking"]
        assert data["fastestGrowing"][0]["growthRate"] == 400.0
        assert data["declining"][0]["growthRate"] == -60.0

    async def test_entry_shape(self, api_client, seed_hashtag):
        seed_hashtag(
            "aiart", [100, 133], platform="instagram", category="technology",
            metrics=AggregateMetrics(mentions=233), trending_score=7.5,
        )
        r = await api_client.get(f"{BASE}/growth")
        entry = r.json()["fastestGrowing"][0]
        assert entry == {
            "hashtag": "aiart",
            "platform": "instagram",
            "category": "technology",
            "currentMentions": 233,
            "growthRate": 33.0,
            "trending_score": 7.5,
        }

    async def test_filters(self, api_client, seed_hashtag):
        seed_hashtag("match", [10, 20], category="sports")
        seed_hashtag("vote", [10, 20], category="politics")
        seed_hashtag("clip", [10, 20], platform="tiktok", category="sports")

        r = await api_client.get(f"{BASE}/growth", params={"category": "sports", "platform": "twitter"})
        assert [e["hashtag"] for e in r.json()["fastestGrowing"]] == ["match"]

    async def test_stale_hashtags_excluded(self, api_client, seed_hashtag):
        old = datetime.now(tz=timezone.utc) - timedelta(days=60)
        seed_hashtag("stale", [10, 90], updated=old)
        r = await api_client.get(f"{BASE}/growth", params={"days": 30})
        assert r.json()["fastestGrowing"] == []

    async def test_empty_database(self, api_client):
        r = await api_client.get(f"{BASE}/growth", params={"days": 7})
        assert r.json() == {"fastestGrowing": [], "declining": [], "period": "7 days"}


# ── Summaries ─────────────────────────────────────────────────────────────────

class TestSummaries:

    async def test_categories(self, api_client, seed_hashtag):
        seed_hashtag("goal", [1], category="sports", metrics=AggregateMetrics(mentions=30), trending_score=3)
        seed_hashtag("vote", [1], category="politics", metrics=AggregateMetrics(mentions=90), trending_score=1)

        r = await api_client.get(f"{BASE}/categories")
        assert r.status_code == 200
        data = r.json()
        assert data["period"] == "7 days"
        assert [c["category"] for c in data["categories"]] == ["politics", "sports"]
        assert data["categories"][1]["topHashtags"][0]["hashtag"] == "goal"

    async def test_platform_comparison(self, api_client, seed_hashtag):
        seed_hashtag("a", [1], platform="youtube", metrics=AggregateMetrics(mentions=10, likes=4))
        seed_hashtag("b", [1], platform="tiktok", metrics=AggregateMetrics(mentions=99))

        r = await api_client.get(f"{BASE}/platforms/comparison")
        stats = r.json()["platformStats"]
        assert [s["platform"] for s in stats] == ["tiktok", "youtube"]
        assert stats[1]["totalEngagement"] == 4

    async def test_sentiment(self, api_client, seed_hashtag):
        seed_hashtag("happy", [1], category="lifestyle",
                     sentiment=SentimentSummary(positive=8, negative=1, overall_score=0.5))
        seed_hashtag("angry", [1], category="politics",
                     sentiment=SentimentSummary(positive=0, negative=7, overall_score=-1.0))

        r = await api_client.get(f"{BASE}/sentiment", params={"days": 3})
        data = r.json()
        assert data["period"] == "3 days"
        assert data["overall"]["positiveCount"] == 8
        assert data["overall"]["negativeCount"] == 8
        assert data["overall"]["polarity"] == "negative"
        assert [c["category"] for c in data["byCategory"]] == ["lifestyle", "politics"]


# ── Database unavailable ──────────────────────────────────────────────────────

class TestDatabaseUnavailable:

    @pytest.mark.parametrize("path", [
        "/trends/worldcup",
        "/predictions/worldcup",
        "/growth",
        "/categories",
        "/platforms/comparison",
        "/sentiment",
    ])
    async def test_503_without_database(self, client, path):
        r = await client.get(f"{BASE}{path}")
        assert r.status_code == 503
