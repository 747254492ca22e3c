"""
Layer 1: News ingestion and enrichment.

Modules:
- gnews (GNewsClient): topic search against the GNews API
- text: truncation detection and whitespace normalization
- scraper: full article text extraction (BeautifulSoup + lxml)
"""

from biaslens.news.gnews import GNewsClient, format_articles
from biaslens.news.scraper import enrich_articles, extract_main_text, fetch_full_article
from biaslens.news.text import detect_truncation, needs_enrichment

__all__ = [
    "GNewsClient", "format_articles",
    "enrich_articles", "extract_main_text", "fetch_full_article",
    "detect_truncation", "needs_enrichment",
]
