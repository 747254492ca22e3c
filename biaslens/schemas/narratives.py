"""
Narrative cluster models.

Clusters are derived views: recomputed from the current scored article set
on every request. Nothing here is persisted.
"""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from .news import Article


class BiasDistribution(BaseModel):
    """Ideological lean tally over cluster members. Sums to member count."""
    left: int = 0
    center: int = 0
    right: int = 0

    @property
    def total(self) -> int:
        return self.left + self.center + self.right


class DimensionAverages(BaseModel):
    """Rounded mean score per bias dimension."""
    ideological_stance: int = 0
    factual_grounding: int = 0
    framing_choices: int = 0
    emotional_tone: int = 0
    source_transparency: int = 0


class TimeSpan(BaseModel):
    earliest: Optional[datetime] = None
    latest: Optional[datetime] = None


class NarrativeCluster(BaseModel):
    """Articles sharing a (topic, framing type) key, with aggregate bias stats."""
    id: str
    topic: str
    framing_type: str
    title: str
    articles: List[Article] = Field(default_factory=list)
    representative_article: Optional[Article] = None
    bias_distribution: BiasDistribution = Field(default_factory=BiasDistribution)
    avg_scores: DimensionAverages = Field(default_factory=DimensionAverages)
    common_phrases: Dict[str, int] = Field(default_factory=dict)
    source_count: Dict[str, int] = Field(default_factory=dict)
    time_span: TimeSpan = Field(default_factory=TimeSpan)

    @property
    def relevance(self) -> int:
        """Ranking score: members × distinct sources."""
        return len(self.articles) * len(self.source_count)


class SourceAnalysis(BaseModel):
    """How one outlet covers the narrative."""
    article_count: int = 0
    avg_bias_scores: DimensionAverages = Field(default_factory=DimensionAverages)
    distinctive_phrases: List[str] = Field(default_factory=list)


class BiasSnapshot(BaseModel):
    ideological: int
    emotional: int


class FramingTimelineEntry(BaseModel):
    timestamp: datetime
    source: str
    headline: str
    key_framing_shift: str
    bias_snapshot: Optional[BiasSnapshot] = None


class NarrativeClusterDetail(NarrativeCluster):
    """Cluster plus cross-source divergence and framing timeline."""
    source_analysis: Dict[str, SourceAnalysis] = Field(default_factory=dict)
    framing_evolution: List[FramingTimelineEntry] = Field(default_factory=list)
