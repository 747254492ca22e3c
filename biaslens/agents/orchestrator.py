"""
LangGraph Orchestrator: topic ingestion pipeline.

Flow: search -> enrich -> score -> save -> END

Enrichment and scoring are separate graph nodes on purpose: every page
fetch has finished before the first scoring call starts, so no article is
ever scored on a half-enriched snippet.
"""

import logging
import time
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence, TypedDict

import httpx
from langgraph.graph import StateGraph, START, END
from pydantic import BaseModel, Field

from ..config import Settings, get_settings
from ..database import Database, get_database
from ..errors import (
    ArticleNotFoundError, InsufficientContentError, InvalidTopicError, NoArticlesFoundError,
)
from ..news.gnews import GNewsClient, MIN_TOPIC_CHARS
from ..news.scraper import enrich_articles, fetch_full_article
from ..schemas import AnalysisStatus, Article
from ..shared.helpers import to_base36
from ..tools.concurrency import map_with_concurrency
from .bias_agent import MIN_CONTENT_CHARS, BiasAgent, apply_scores

logger = logging.getLogger(__name__)

# Ad-hoc submissions below this are rejected outright
MIN_ADHOC_CHARS = 50
ADHOC_SOURCE = "user-submitted"
ADHOC_HEADLINE_CHARS = 80


class IngestionResult(BaseModel):
    """Outcome of one ingest_topic run."""
    topic: str
    articles: List[Article] = Field(default_factory=list)
    fetched: int = 0
    enriched: int = 0
    scored: int = 0
    status_counts: Dict[str, int] = Field(default_factory=dict)
    run_time_seconds: float = 0.0


# ── Graph State ──────────────────────────────────────────────────────────────

class IngestState(TypedDict):
    """LangGraph state shared across ingestion nodes."""
    pipeline: Any                # NarrativePipeline instance
    topic: str
    sources: List[str]
    articles: List[Article]
    enriched: int
    scored: int
    current_step: str


async def search_node(state: IngestState) -> dict:
    pipeline = state["pipeline"]
    articles = await pipeline.news_client.search(
        state["topic"], state["sources"] or None, page_size=pipeline.settings.fetch_page_size,
    )
    return {"articles": articles, "current_step": "search_complete"}


async def enrich_node(state: IngestState) -> dict:
    """Phase 1: replace truncated snippets with full page text."""
    pipeline = state["pipeline"]
    articles = state["articles"]
    enriched = 0
    if pipeline.settings.full_content_scrape and articles:
        async with pipeline.http_client() as client:
            enriched = await enrich_articles(
                articles,
                concurrency=pipeline.settings.enrich_concurrency,
                timeout=pipeline.settings.fetch_timeout,
                client=client,
            )
    elif not pipeline.settings.full_content_scrape:
        logger.info("FULL_CONTENT_SCRAPE disabled, scoring raw snippets")

    if not articles:
        raise NoArticlesFoundError("No articles found for the specified topic", topic=state["topic"])
    return {"enriched": enriched, "current_step": "enrich_complete"}


async def score_node(state: IngestState) -> dict:
    """Phase 2: score the capped batch through the bounded executor."""
    pipeline = state["pipeline"]
    batch = state["articles"][:pipeline.settings.max_articles_per_batch]
    if len(batch) < len(state["articles"]):
        logger.info(f"Scoring first {len(batch)} of {len(state['articles'])} articles (batch cap)")
    scored = await pipeline.score_articles(batch)
    return {"articles": batch, "scored": scored, "current_step": "score_complete"}


async def save_node(state: IngestState) -> dict:
    pipeline = state["pipeline"]
    pipeline.db.save_articles(state["articles"])
    return {"current_step": "save_complete"}


def create_ingest_graph():
    """Build and compile the linear ingestion graph."""
    workflow = StateGraph(IngestState)

    workflow.add_node("search", search_node)
    workflow.add_node("enrich", enrich_node)
    workflow.add_node("score", score_node)
    workflow.add_node("save", save_node)

    workflow.add_edge(START, "search")
    workflow.add_edge("search", "enrich")
    workflow.add_edge("enrich", "score")
    workflow.add_edge("score", "save")
    workflow.add_edge("save", END)

    return workflow.compile()


# ── Pipeline ─────────────────────────────────────────────────────────────────

class NarrativePipeline:
    """
    Entry point for ingestion, ad-hoc analysis and re-scoring.

    All collaborators are injectable; omitted ones are built from settings.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        db: Optional[Database] = None,
        news_client: Optional[GNewsClient] = None,
        bias_agent: Optional[BiasAgent] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings or get_settings()
        self.db = db or get_database()
        self.news_client = news_client or GNewsClient(self.settings)
        self.bias_agent = bias_agent or BiasAgent(settings=self.settings)
        self._transport = transport
        self._graph = None

    def http_client(self) -> httpx.AsyncClient:
        """Client for article page fetches (one per batch, pooled connections)."""
        return httpx.AsyncClient(
            follow_redirects=True,
            timeout=self.settings.fetch_timeout,
            transport=self._transport,
        )

    async def score_articles(self, articles: Sequence[Article]) -> int:
        """Score in place with bounded concurrency. Returns how many got scores."""
        async def _score_one(article: Article, idx: int):
            return await self.bias_agent.score(article)

        results = await map_with_concurrency(
            articles, self.settings.scoring_concurrency, _score_one, label="scoring",
        )
        scored = 0
        for article, scores in zip(articles, results):
            if scores is None:
                continue
            apply_scores(article, scores)
            scored += 1
        return scored

    async def ingest_topic(self, topic: str, sources: Optional[Sequence[str]] = None) -> IngestionResult:
        """
        Search, enrich, score and persist articles for a topic.

        Raises:
            InvalidTopicError: topic shorter than 3 characters
            NewsSearchError: news search failed
            NoArticlesFoundError: search returned no usable articles
        """
        query = (topic or "").strip()
        if len(query) < MIN_TOPIC_CHARS:
            raise InvalidTopicError("Topic must be at least 3 characters", topic=topic)

        start = time.time()
        logger.info(f"Ingesting topic {query!r} (sources={list(sources or [])})")

        if self._graph is None:
            self._graph = create_ingest_graph()

        initial_state: IngestState = {
            "pipeline": self,
            "topic": query,
            "sources": list(sources or []),
            "articles": [],
            "enriched": 0,
            "scored": 0,
            "current_step": "init",
        }
        final_state = await self._graph.ainvoke(initial_state)

        articles: List[Article] = final_state["articles"]
        counts: Dict[str, int] = {}
        for article in articles:
            status = article.bias_scores.analysis_status.value if article.bias_scores else "unanalyzed"
            counts[status] = counts.get(status, 0) + 1

        runtime = time.time() - start
        logger.info(
            f"Ingestion complete: {len(articles)} articles | enriched={final_state['enriched']} | "
            f"scored={final_state['scored']} | status={counts} | {runtime:.1f}s"
        )
        return IngestionResult(
            topic=query,
            articles=articles,
            fetched=len(articles),
            enriched=final_state["enriched"],
            scored=final_state["scored"],
            status_counts=counts,
            run_time_seconds=runtime,
        )

    async def analyze_adhoc(
        self,
        content: Optional[str] = None,
        url: Optional[str] = None,
        headline: Optional[str] = None,
        source: Optional[str] = None,
    ) -> Article:
        """
        Score user-submitted text (or a URL to scrape). Not persisted.

        Raises:
            InsufficientContentError: under 50 chars of usable text
        """
        text = (content or "").strip()
        if len(text) < MIN_CONTENT_CHARS and url:
            async with self.http_client() as client:
                scraped = await fetch_full_article(url, client, timeout=self.settings.fetch_timeout)
            if scraped and len(scraped) >= MIN_CONTENT_CHARS:
                text = scraped
            else:
                logger.warning(f"Ad-hoc scrape of {url} produced no usable text")

        if len(text) < MIN_ADHOC_CHARS:
            raise InsufficientContentError(
                "Insufficient content to analyze. Provide at least 50 characters or a valid URL."
            )

        if not headline:
            headline = text[:ADHOC_HEADLINE_CHARS] + ("..." if len(text) > ADHOC_HEADLINE_CHARS else "")

        article = Article(
            id=adhoc_article_id(),
            headline=headline,
            content=text,
            description=text[:200],
            source=source or ADHOC_SOURCE,
            url=url or "",
        )
        scores = await self.bias_agent.score(article)
        apply_scores(article, scores)
        return article

    async def rescore(self, article_id: str) -> Article:
        """
        Re-run scoring on a stored article and persist the new profile.

        Raises:
            ArticleNotFoundError: unknown id
            InsufficientContentError: stored article has no body text
        """
        article = self.db.get_by_id(article_id)
        if article is None:
            raise ArticleNotFoundError(article_id)
        if not article.content.strip():
            raise InsufficientContentError("Article has no content to analyze", article_id=article_id)

        await self.bias_agent.rescore(article)
        self.db.save_articles([article])
        status = article.bias_scores.analysis_status if article.bias_scores else AnalysisStatus.FALLBACK_EMPTY
        logger.info(f"Re-scored {article_id}: {status.value}")
        return article


def adhoc_article_id(now: Optional[datetime] = None) -> str:
    """'ad-hoc-' + base-36 millisecond timestamp."""
    now = now or datetime.now(timezone.utc)
    return f"ad-hoc-{to_base36(int(now.timestamp() * 1000))}"
