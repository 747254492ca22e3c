"""
News article data model.

This is the raw material of the pipeline: an article stub from the news
search API, enriched with full body text and, once scored, carrying its
bias profile.

Hierarchy: Article → (scored by BiasAgent) → (grouped into NarrativeCluster)
"""

import hashlib
from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, Field, model_validator

from .bias import BiasScores


def article_id_for_url(url: str) -> str:
    """Stable article id: same URL always yields the same id (idempotent upsert)."""
    return hashlib.md5(url.encode()).hexdigest()[:12]


class Article(BaseModel):
    """
    A news article with optional bias analysis.

    narrative_cluster is a non-owning back-reference; clusters are recomputed
    on every request and never stored as the source of truth.
    """
    id: str = ""

    # Core content
    headline: str
    content: str = ""
    description: str = ""

    # Source attribution
    source: str
    author: str = "Unknown"
    published_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    url: str = ""
    image_url: str = ""

    # Analysis
    bias_scores: Optional[BiasScores] = None
    narrative_cluster: Optional[str] = None
    primary_sources: List[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def _derive_id(self):
        if not self.id and self.url:
            self.id = article_id_for_url(self.url)
        return self

    @property
    def is_analyzed(self) -> bool:
        return self.bias_scores is not None

    @property
    def text_for_matching(self) -> str:
        """Lower-cased headline + body, used by topic and framing detection."""
        return f"{self.headline} {self.content}".lower()
