"""
rate_limit.py — Global rate limiter instance.

Uses slowapi (a Starlette-compatible wrapper around the `limits` library).
Requests are keyed by client IP address.

Usage in routes:
    from fastapi import Request
    from hashtag_analytics.core.rate_limit import limiter

    @router.post("/{hashtag}/observations")
    @limiter.limit(settings.ingest_rate_limit)
    async def ingest(request: Request, hashtag: str, payload: ObservationIngestRequest):
        ...

Wired into the app in main.py (app.state.limiter + RateLimitExceeded handler).
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

# Fetchers post from a handful of hosts, so IP keying is enough.
limiter = Limiter(key_func=get_remote_address)
