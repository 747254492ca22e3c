"""
GNews search client: turns a topic query into Article stubs.

Only query construction and response shaping live here. Enrichment of
truncated snippets is a separate, explicit pipeline phase (news.scraper).
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

import httpx

from ..config import Settings, get_settings
from ..errors import InvalidTopicError, NewsSearchError
from ..schemas import Article
from .text import detect_truncation

logger = logging.getLogger(__name__)

MIN_TOPIC_CHARS = 3
MIN_SNIPPET_CHARS = 50
MIN_TITLE_CHARS = 10
GNEWS_MAX_PAGE_SIZE = 100


def _parse_published(value: Optional[str]) -> datetime:
    """Parse GNews 'publishedAt' ('2025-01-31T12:00:00Z'); fall back to now."""
    if not value:
        return datetime.now(timezone.utc)
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return datetime.now(timezone.utc)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_articles(raw_articles: Sequence[Dict[str, Any]]) -> List[Article]:
    """Convert raw GNews items into Article stubs, skipping unusable ones."""
    articles: List[Article] = []
    for item in raw_articles:
        if not isinstance(item, dict):
            continue
        title = (item.get("title") or "").strip()
        snippet = (item.get("content") or "").strip()
        url = (item.get("url") or "").strip()

        if len(snippet) < MIN_SNIPPET_CHARS:
            logger.debug(f"Skipping article without sufficient content: {title[:60]}")
            continue
        if len(title) < MIN_TITLE_CHARS:
            logger.debug(f"Skipping article with insufficient title: {title!r}")
            continue
        if not url:
            continue

        description = (item.get("description") or "").strip()
        content, _ = detect_truncation(snippet, description)
        source = item.get("source") or {}

        articles.append(Article(
            headline=title,
            content=content,
            description=description,
            source=((source.get("name") if isinstance(source, dict) else None) or "Unknown").strip(),
            author=(item.get("author") or "Unknown").strip(),
            published_at=_parse_published(item.get("publishedAt")),
            url=url,
            image_url=item.get("image") or item.get("urlToImage") or "",
        ))
    return articles


class GNewsClient:
    """Topic search against the GNews v4 API."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings or get_settings()
        self._transport = transport

    async def search(
        self,
        topic: str,
        sources: Optional[Sequence[str]] = None,
        page_size: int = 15,
    ) -> List[Article]:
        """
        Search articles by topic, optionally restricted to source domains.

        Raises:
            InvalidTopicError: topic shorter than 3 characters
            NewsSearchError: missing key, non-2xx response, or malformed payload
        """
        query = (topic or "").strip()
        if len(query) < MIN_TOPIC_CHARS:
            raise InvalidTopicError("Topic must be at least 3 characters", topic=topic)
        if not self.settings.gnews_api_key:
            raise NewsSearchError("GNEWS_API_KEY environment variable is required")

        params: Dict[str, Any] = {
            "q": query,
            "token": self.settings.gnews_api_key,
            "max": min(page_size, GNEWS_MAX_PAGE_SIZE),
            "lang": self.settings.gnews_lang,
            "country": self.settings.gnews_country,
            "sortby": "publishedAt",
        }
        if sources:
            params["domains"] = ",".join(sources)

        url = f"{self.settings.gnews_base_url}/search"
        logger.info(f"Searching GNews: q={query!r}, sources={list(sources or [])}, max={params['max']}")

        try:
            async with httpx.AsyncClient(timeout=self.settings.gnews_timeout, transport=self._transport) as client:
                response = await client.get(url, params=params)
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            if status == 401:
                raise NewsSearchError("Invalid GNews API key") from e
            if status == 429:
                raise NewsSearchError("GNews API rate limit exceeded") from e
            logger.error(f"GNews API error: HTTP {status}")
            raise NewsSearchError("Failed to fetch articles from GNews API") from e
        except httpx.TimeoutException as e:
            raise NewsSearchError("GNews API request timeout") from e
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"GNews API error: {e}")
            raise NewsSearchError("Failed to fetch articles from GNews API") from e

        raw = data.get("articles") if isinstance(data, dict) else None
        if not isinstance(raw, list):
            logger.error(f"Unexpected GNews response: {str(data)[:200]}")
            raise NewsSearchError("Invalid API response format")

        articles = format_articles(raw)
        logger.info(f"GNews: {len(articles)} usable articles from {len(raw)} raw")
        return articles
