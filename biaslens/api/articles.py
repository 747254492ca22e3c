"""Articles API router -- search, ingest, ad-hoc analysis, re-score.

Route order matters: the static paths (/fetch, /analyze, /diagnostics/status)
are declared before /{article_id} so they are not captured by it.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Query

from biaslens.api.dependencies import DB, Pipeline
from biaslens.api.schemas import (
    AnalyzeRequest, ArticleListResponse, FetchRequest, FetchResponse, StatusSummaryResponse,
)
from biaslens.errors import ArticleNotFoundError
from biaslens.schemas import Article

logger = logging.getLogger(__name__)

router = APIRouter()

MAX_LIST_LIMIT = 50


@router.get("", response_model=ArticleListResponse)
async def list_articles(
    db: DB,
    topic: Optional[str] = None,
    source: Optional[str] = None,
    limit: int = Query(default=10, ge=1),
):
    articles = db.search(topic=topic, source=source, limit=min(limit, MAX_LIST_LIMIT))
    return ArticleListResponse(articles=articles, total=len(articles))


@router.get("/diagnostics/status", response_model=StatusSummaryResponse)
async def status_summary(db: DB):
    by_status = db.analysis_status_summary()
    return StatusSummaryResponse(total=sum(by_status.values()), by_status=by_status)


@router.post("/fetch", response_model=FetchResponse)
async def fetch_articles(body: FetchRequest, pipeline: Pipeline):
    result = await pipeline.ingest_topic(body.topic, body.sources)
    return FetchResponse(
        message=f"Fetched and analyzed {len(result.articles)} articles",
        articles=result.articles,
        enriched=result.enriched,
        status_counts=result.status_counts,
    )


@router.post("/analyze", response_model=Article)
async def analyze_article(body: AnalyzeRequest, pipeline: Pipeline):
    return await pipeline.analyze_adhoc(
        content=body.content, url=body.url, headline=body.headline, source=body.source,
    )


@router.get("/{article_id}", response_model=Article)
async def get_article(article_id: str, db: DB):
    article = db.get_by_id(article_id)
    if article is None:
        raise ArticleNotFoundError(article_id)
    return article


@router.post("/{article_id}/rescore", response_model=Article)
async def rescore_article(article_id: str, pipeline: Pipeline):
    return await pipeline.rescore(article_id)
