"""
Full-article enrichment: fetch the publisher page and extract its body text.

WHY SCRAPE FULL CONTENT:
  Search APIs only return a ~200 char snippet ending in "[+1234 chars]".
  Bias scoring on a snippet is mostly noise; the full body gives the scorer
  quotes, attributions and framing to work with.

APPROACH:
  - Only articles flagged by news.text.needs_enrichment are fetched
  - Async parallel fetch through the bounded executor (own concurrency knob)
  - Paragraph-level extraction with BeautifulSoup, scoped to <article> when present
  - A scrape only replaces the snippet when it is meaningfully longer (> 1.2x)
"""

import logging
from typing import List, Optional, Sequence
from urllib.parse import urlparse

import httpx
from bs4 import BeautifulSoup

from ..schemas import Article
from ..tools.concurrency import map_with_concurrency
from .text import needs_enrichment, normalize_whitespace

logger = logging.getLogger(__name__)

# Browser-like headers to avoid being blocked
_HEADERS = {
    "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
                  "(KHTML, like Gecko) Chrome/122.0.0.0 Safari/537.36",
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
}

# Shorter than this is not a reliable replacement for the snippet
MIN_EXTRACTED_CHARS = 300
# Caps downstream token cost; scoring trims further to 10k
MAX_EXTRACTED_CHARS = 18000
# Scraped text must beat the snippet by this factor to replace it
REPLACE_RATIO = 1.2

# Hard paywalls return a login wall, never the article body
_SKIP_DOMAINS = frozenset({
    "wsj.com",
    "ft.com",
    "bloomberg.com",
})


def extract_main_text(html_content: str) -> str:
    """
    Heuristically isolate readable article text from raw HTML.

    Scripts and styles are dropped, extraction is scoped to the first
    <article> element when one exists, and every non-empty <p> block is
    kept, one per line. Returns "" for anything under 300 characters or
    for HTML that cannot be parsed at all.
    """
    if not html_content or not isinstance(html_content, str):
        return ""
    try:
        soup = BeautifulSoup(html_content, "lxml")
        for tag in soup.find_all(["script", "style"]):
            tag.decompose()

        scope = soup.find("article") or soup
        paragraphs = []
        for p in scope.find_all("p"):
            text = " ".join(p.get_text(" ").split())
            if text:
                paragraphs.append(text)
    except Exception as e:
        logger.debug(f"HTML extraction failed: {e}")
        return ""

    joined = "\n".join(paragraphs)
    if len(joined) < MIN_EXTRACTED_CHARS:
        return ""
    return normalize_whitespace(joined)


def _domain(url: str) -> str:
    return urlparse(url).netloc.lower().replace("www.", "")


async def fetch_full_article(
    url: str,
    client: httpx.AsyncClient,
    timeout: float = 8.0,
) -> Optional[str]:
    """Fetch a page and extract its body. Any failure returns None."""
    if not url or url == "#":
        return None

    domain = _domain(url)
    if domain in _SKIP_DOMAINS:
        return None

    try:
        response = await client.get(url, headers=_HEADERS, follow_redirects=True, timeout=timeout)
        if response.status_code != 200:
            logger.debug(f"HTTP {response.status_code} for {domain}")
            return None

        # Redirects can land on a paywalled domain
        if _domain(str(response.url)) in _SKIP_DOMAINS:
            return None

        text = extract_main_text(response.text)
        return text[:MAX_EXTRACTED_CHARS] if text else None
    except Exception as e:
        logger.debug(f"Scrape failed for {domain}: {e}")
        return None


async def enrich_articles(
    articles: Sequence[Article],
    concurrency: int = 4,
    timeout: float = 8.0,
    client: Optional[httpx.AsyncClient] = None,
) -> int:
    """
    Replace truncated/short snippets with full page text.

    Awaits every fetch before returning, so callers can hand the batch to
    scoring knowing no enrichment is still in flight. Modifies articles
    in place (sets article.content). Returns the number enriched.

    Args:
        articles: Articles straight from the news search
        concurrency: Max parallel page fetches
        timeout: Per-fetch timeout in seconds
        client: Shared httpx client (one is created when omitted)
    """
    candidates: List[Article] = [a for a in articles if a.url and needs_enrichment(a.content)]
    if not candidates:
        logger.info("All articles already have full content, skipping scrape")
        return 0

    logger.info(f"Enriching {len(candidates)}/{len(articles)} articles with full page text...")

    async def _run(http: httpx.AsyncClient) -> List[Optional[str]]:
        async def _fetch_one(article: Article, idx: int) -> Optional[str]:
            return await fetch_full_article(article.url, http, timeout=timeout)

        return await map_with_concurrency(candidates, concurrency, _fetch_one, label="enrichment")

    if client is None:
        # Share a single client for connection pooling
        async with httpx.AsyncClient(follow_redirects=True, timeout=timeout) as http:
            scraped = await _run(http)
    else:
        scraped = await _run(client)

    enriched = 0
    for article, full in zip(candidates, scraped):
        if full and len(full) > len(article.content) * REPLACE_RATIO:
            logger.debug(f"Enriched {article.id}: {len(article.content)} -> {len(full)} chars")
            article.content = full
            enriched += 1

    logger.info(f"Enriched content: {enriched}/{len(candidates)} articles")
    return enriched
