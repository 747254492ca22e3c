"""API response/request schemas -- shaped for the news dashboard frontend."""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from biaslens.schemas import Article, NarrativeCluster


# -- Articles --

class FetchRequest(BaseModel):
    topic: str
    sources: List[str] = Field(default_factory=list)


class FetchResponse(BaseModel):
    message: str
    articles: List[Article]
    enriched: int = 0
    status_counts: Dict[str, int] = Field(default_factory=dict)


class AnalyzeRequest(BaseModel):
    url: Optional[str] = None
    content: Optional[str] = None
    headline: Optional[str] = None
    source: Optional[str] = None


class ArticleListResponse(BaseModel):
    articles: List[Article]
    total: int


class StatusSummaryResponse(BaseModel):
    total: int
    by_status: Dict[str, int]


# -- Narratives --

class NarrativeListResponse(BaseModel):
    clusters: List[NarrativeCluster]
    total_articles: int
    timestamp: datetime
