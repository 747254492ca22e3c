"""Health check router -- key presence, DB status, config summary."""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from biaslens.api.dependencies import DB, AppSettings

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("")
async def health(db: DB, settings: AppSettings):
    database = "ok"
    try:
        with db.get_session() as session:
            session.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error(f"Health check: database unavailable: {e}")
        database = "unavailable"

    return {
        "status": "healthy" if database == "ok" else "degraded",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "database": database,
        "keys": {
            "gnews": bool(settings.gnews_api_key),
            "google_ai": bool(settings.google_ai_key),
        },
        "config": {
            "mock_mode": settings.mock_mode,
            "scoring_model": settings.scoring_model,
            "full_content_scrape": settings.full_content_scrape,
            "enrich_concurrency": settings.enrich_concurrency,
            "scoring_concurrency": settings.scoring_concurrency,
            "max_articles_per_batch": settings.max_articles_per_batch,
        },
    }
