"""
Hashtag Analytics API — application entry point.

Wires settings, logging, the MongoDB lifecycle, CORS, the ingestion rate
limiter and the three routers (health, hashtags, analytics) into one
FastAPI app.

Run locally:
    uvicorn hashtag_analytics.main:app --reload
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from hashtag_analytics import __version__
from hashtag_analytics.core import database
from hashtag_analytics.core.config import settings
from hashtag_analytics.core.rate_limit import limiter
from hashtag_analytics.routes.analytics import router as analytics_router
from hashtag_analytics.routes.hashtags import router as hashtags_router
from hashtag_analytics.routes.health import router as health_router

APP_NAME = "Hashtag Analytics API"

# ─── Logging ───────────────────────────────────────────────────────────────────
logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)


# ─── Lifespan ──────────────────────────────────────────────────────────────────
@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting %s %s (env: %s)", APP_NAME, __version__, settings.environment)
    # Module attribute lookup; conftest patches these two.
    await database.connect_to_mongo()
    yield
    await database.close_mongo_connection()
    logger.info("%s stopped", APP_NAME)


_show_docs = settings.environment != "production"

app = FastAPI(
    title=APP_NAME,
    description=(
        "Hashtag activity tracking with trend classification, growth ranking "
        "and short-horizon mention forecasts."
    ),
    version=__version__,
    lifespan=lifespan,
    docs_url="/docs" if _show_docs else None,
    redoc_url="/redoc" if _show_docs else None,
)

# ─── Rate limiting ─────────────────────────────────────────────────────────────
# Only the ingestion route carries @limiter.limit; reads are unlimited.
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# ─── CORS (dashboard origins) ──────────────────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)

# ─── Routers ───────────────────────────────────────────────────────────────────
app.include_router(health_router, prefix="/health", tags=["health"])
app.include_router(hashtags_router)
app.include_router(analytics_router)


@app.get("/", tags=["root"])
async def root():
    return {
        "name": APP_NAME,
        "version": __version__,
        "status": "running",
        "environment": settings.environment,
        "docs": "/docs" if _show_docs else None,
    }
