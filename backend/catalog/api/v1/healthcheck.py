"""Liveness endpoint."""

import asyncio
import logging
from typing import Any

from fastapi import APIRouter
from sqlalchemy import text

from catalog.config import settings
from catalog.db.session import engine

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/healthcheck")
async def healthcheck() -> dict[str, Any]:
    """Report availability, build info and whether the database answers."""
    result: dict[str, Any] = {
        "status": "available",
        "system_info": {
            "environment": settings.environment,
            "version": settings.app_version,
        },
    }

    try:
        async with engine.connect() as conn:
            await asyncio.wait_for(conn.execute(text("SELECT 1")), timeout=settings.query_timeout)
        result["database"] = "available"
    except Exception as exc:
        logger.warning("Database ping failed: %s", exc)
        result["database"] = "unavailable"
        result["status"] = "degraded"

    return result
