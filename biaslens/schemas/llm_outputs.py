"""
Inner Pydantic models for LLM structured output.

These models define ONLY what the scorer produces. They are deliberately
lenient (no numeric bounds, optional fields): out-of-range or missing values
must reach the repair step in BiasAgent, where they are clamped or defaulted,
instead of failing validation and burning a retry.

Convention: Suffix with "LLM" to distinguish from the full output schemas.
"""

from typing import List, Optional

from pydantic import BaseModel, Field

from .base import (
    STANCE_LABELS, FACTUAL_LABELS, FRAMING_LABELS, TONE_LABELS, TRANSPARENCY_LABELS,
)


def _label_hint(labels) -> str:
    return "One of: " + ", ".join(labels)


class BiasDimensionLLM(BaseModel):
    """One dimension as returned by the scorer."""
    score: Optional[float] = Field(default=None, description="Integer 0-100")
    label: Optional[str] = None
    confidence: Optional[float] = Field(default=None, description="0.0-1.0")
    highlighted_phrases: List[str] = Field(
        default_factory=list,
        description="Exact phrases quoted from the article (max 3)",
    )
    reasoning: Optional[str] = Field(default=None, description="One or two sentences")


def _dimension_field(labels, what: str):
    return Field(
        default=None,
        description=f"{what}. Label {_label_hint(labels)}",
    )


class BiasScoresLLM(BaseModel):
    """LLM output for a full five-dimension bias analysis of one article."""
    ideological_stance: Optional[BiasDimensionLLM] = _dimension_field(
        STANCE_LABELS, "Political lean: 0 = far left, 50 = center, 100 = far right")
    factual_grounding: Optional[BiasDimensionLLM] = _dimension_field(
        FACTUAL_LABELS, "How well claims are backed by verifiable facts (100 = fully)")
    framing_choices: Optional[BiasDimensionLLM] = _dimension_field(
        FRAMING_LABELS, "Balance of angle and omission (100 = objective)")
    emotional_tone: Optional[BiasDimensionLLM] = _dimension_field(
        TONE_LABELS, "Language intensity (0 = inflammatory, 100 = dispassionate)")
    source_transparency: Optional[BiasDimensionLLM] = _dimension_field(
        TRANSPARENCY_LABELS, "Attribution quality of quotes and data (100 = excellent)")
    overall_bias_level: Optional[float] = Field(default=None, description="Integer 0-100")
    primary_sources: List[str] = Field(
        default_factory=list,
        description="External URLs of primary sources cited by the article (max 15)",
    )
    analyzed_at: Optional[str] = Field(default=None, description="ISO-8601 timestamp")
