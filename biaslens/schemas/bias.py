"""
Bias profile models attached to an article once scoring has run.

Hierarchy: ConfidenceInterval → BiasDimension → BiasScores
"""

from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, Field, computed_field, model_validator

from .base import AnalysisStatus


class ConfidenceInterval(BaseModel):
    """Display band around a dimension score. Heuristic, not statistical."""
    lower: int = Field(ge=0, le=100)
    upper: int = Field(ge=0, le=100)
    width: int = Field(ge=0, le=100)

    @model_validator(mode="after")
    def _check_width(self):
        if self.width != self.upper - self.lower:
            raise ValueError("width must equal upper - lower")
        return self


class BiasDimension(BaseModel):
    """One scored dimension of the bias profile."""
    score: int = Field(ge=0, le=100, default=50)
    label: str = "moderate"
    confidence: float = Field(ge=0.0, le=1.0, default=0.5)
    highlighted_phrases: List[str] = Field(default_factory=list, max_length=5)
    reasoning: str = ""
    confidence_interval: Optional[ConfidenceInterval] = None

    @model_validator(mode="after")
    def _score_inside_interval(self):
        ci = self.confidence_interval
        if ci is not None and not (ci.lower <= self.score <= ci.upper):
            raise ValueError("confidence interval must contain the score")
        return self


class BiasScores(BaseModel):
    """
    Five-dimension bias profile for one article.

    Always schema-complete: fallback outcomes carry neutral baseline
    dimensions instead of missing fields. Replaced in full on re-score.
    """
    ideological_stance: BiasDimension
    factual_grounding: BiasDimension
    framing_choices: BiasDimension
    emotional_tone: BiasDimension
    source_transparency: BiasDimension

    overall_bias_level: int = Field(ge=0, le=100, default=50)
    primary_sources: List[str] = Field(default_factory=list, max_length=15)
    analyzed_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    analysis_status: AnalysisStatus = AnalysisStatus.AI

    @computed_field
    @property
    def is_fallback(self) -> bool:
        return self.analysis_status != AnalysisStatus.AI

    def dimension(self, name: str) -> BiasDimension:
        return getattr(self, name)
