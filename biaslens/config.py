"""
Configuration management for the BiasLens narrative pipeline.
Scoring runs through Gemini (pydantic-ai); news search through GNews.
"""

import re
from functools import lru_cache
from typing import List, Optional

from pydantic_settings import BaseSettings
from pydantic import Field


DEFAULT_CORS_ORIGINS = (
    "http://localhost:3000",
    "http://localhost:5173",
    "http://127.0.0.1:3000",
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Scoring model (Gemini via pydantic-ai GoogleModel)
    google_ai_key: str = Field(default="", alias="GOOGLE_AI_KEY")
    scoring_model: str = Field(default="gemini-2.5-flash", alias="SCORING_MODEL")
    scoring_temperature: float = Field(default=0.1, alias="SCORING_TEMPERATURE")
    # Per-call bound; there is no batch-wide deadline
    scoring_timeout: float = Field(default=60.0, alias="SCORING_TIMEOUT")
    scoring_retries: int = Field(default=1, alias="SCORING_RETRIES")

    # News search (GNews)
    gnews_api_key: str = Field(default="", alias="GNEWS_API_KEY")
    gnews_base_url: str = Field(default="https://gnews.io/api/v4", alias="GNEWS_BASE_URL")
    gnews_lang: str = Field(default="en", alias="GNEWS_LANG")
    gnews_country: str = Field(default="us", alias="GNEWS_COUNTRY")
    gnews_timeout: float = Field(default=10.0, alias="GNEWS_TIMEOUT")
    fetch_page_size: int = Field(default=15, alias="FETCH_PAGE_SIZE")

    # ── Enrichment ──
    # Scrape full article pages for truncated/short snippets
    full_content_scrape: bool = Field(default=True, alias="FULL_CONTENT_SCRAPE")
    fetch_timeout: float = Field(default=8.0, alias="FETCH_TIMEOUT")

    # ── Fan-out ──
    # Separate knobs: page fetches are cheap, scoring calls are rate-limited
    enrich_concurrency: int = Field(default=4, alias="ENRICH_CONCURRENCY")
    scoring_concurrency: int = Field(default=3, alias="SCORING_CONCURRENCY")
    max_articles_per_batch: int = Field(default=10, alias="MAX_ARTICLES_PER_BATCH")

    # Database
    database_url: str = Field(
        default="sqlite:///./data/bias_news.db",
        alias="DATABASE_URL"
    )

    # API
    cors_origins: str = Field(
        default="",
        alias="CORS_ORIGINS",
    )
    mock_mode: bool = Field(default=False, alias="MOCK_MODE")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"

    def get_cors_origins(self) -> List[str]:
        """Default origins plus any from CORS_ORIGINS ('*' allows everything)."""
        configured = [o.strip() for o in self.cors_origins.split(",") if o.strip()]
        if "*" in configured:
            return ["*"]
        merged = list(DEFAULT_CORS_ORIGINS)
        for origin in configured:
            if not origin.startswith("*.") and origin not in merged:
                merged.append(origin)
        return merged

    def get_cors_origin_regex(self) -> Optional[str]:
        """Regex for '*.suffix' entries in CORS_ORIGINS, matching any subdomain."""
        suffixes = [o.strip()[1:] for o in self.cors_origins.split(",") if o.strip().startswith("*.")]
        if not suffixes:
            return None
        return ".*(" + "|".join(re.escape(s) for s in suffixes) + ")"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
