"""
health.py — Liveness probe.

GET /health always answers 200 while the process is up. The `database`
field tells the dashboard and container checks whether analytics data can
actually be served ("connected") or whether the data routes are currently
answering 503 ("disconnected").
"""

import logging

from fastapi import APIRouter
from pymongo.errors import PyMongoError
from pydantic import BaseModel

from hashtag_analytics import __version__
from hashtag_analytics.core import database
from hashtag_analytics.core.config import settings

logger = logging.getLogger(__name__)
router = APIRouter()


class HealthResponse(BaseModel):
    status:      str    # "ok" whenever this handler runs
    version:     str
    database:    str    # "connected" | "disconnected"
    environment: str


async def _database_status() -> str:
    # Read through the module so tests can swap database.db_client.client.
    client = database.db_client.client
    if client is None:
        return "disconnected"
    try:
        await client.admin.command("ping")
    except PyMongoError as exc:
        logger.warning("MongoDB ping failed: %s", exc)
        return "disconnected"
    return "connected"


@router.get("", response_model=HealthResponse, summary="API health check")
async def health_check() -> HealthResponse:
    return HealthResponse(
        status="ok",
        version=__version__,
        database=await _database_status(),
        environment=settings.environment,
    )
