"""
Common enums and vocabularies used across the entire application.

These define the fixed label sets the scorer may emit per bias dimension,
the scoring outcome taxonomy, and the ideological lean buckets used when
tallying narrative clusters.
"""

from enum import Enum
from typing import Dict, Tuple


# ══════════════════════════════════════════════════════════════════════════════
# ENUMS - Classification Types
# ══════════════════════════════════════════════════════════════════════════════

class AnalysisStatus(str, Enum):
    """Outcome of a scoring attempt. Anything but AI is a fallback tier."""
    AI = "ai"
    FALLBACK_API = "fallback-api"          # scorer call failed (network/quota)
    FALLBACK_PARSE = "fallback-parse"      # scorer answered with unusable data
    FALLBACK_EMPTY = "fallback-empty"      # body too short, scorer never called


class BiasLean(str, Enum):
    """Bucket for the ideological stance score."""
    LEFT = "left"        # < 40
    CENTER = "center"    # 40-60
    RIGHT = "right"      # > 60


class FramingShift(str, Enum):
    """Timeline tag for an article inside a narrative."""
    NARRATIVE_PIVOT = "narrative-pivot"
    CONSISTENT_FRAMING = "consistent-framing"
    NO_ANALYSIS = "no-analysis"


class Dimension(str, Enum):
    """The five bias dimensions, in canonical order."""
    IDEOLOGICAL_STANCE = "ideological_stance"
    FACTUAL_GROUNDING = "factual_grounding"
    FRAMING_CHOICES = "framing_choices"
    EMOTIONAL_TONE = "emotional_tone"
    SOURCE_TRANSPARENCY = "source_transparency"


DIMENSIONS: Tuple[str, ...] = tuple(d.value for d in Dimension)


# ══════════════════════════════════════════════════════════════════════════════
# LABEL VOCABULARIES - per dimension
# ══════════════════════════════════════════════════════════════════════════════

STANCE_LABELS = ("far-left", "left", "center-left", "center", "center-right", "right", "far-right")
FACTUAL_LABELS = ("poor", "moderate", "good", "excellent")
FRAMING_LABELS = ("misleading", "biased", "balanced", "objective")
TONE_LABELS = ("inflammatory", "emotional", "neutral", "objective")
TRANSPARENCY_LABELS = ("vague", "limited", "clear", "excellent")

DIMENSION_LABELS: Dict[str, Tuple[str, ...]] = {
    Dimension.IDEOLOGICAL_STANCE.value: STANCE_LABELS,
    Dimension.FACTUAL_GROUNDING.value: FACTUAL_LABELS,
    Dimension.FRAMING_CHOICES.value: FRAMING_LABELS,
    Dimension.EMOTIONAL_TONE.value: TONE_LABELS,
    Dimension.SOURCE_TRANSPARENCY.value: TRANSPARENCY_LABELS,
}

# Label used when the scorer omits a label or returns one outside the vocabulary
NEUTRAL_LABELS: Dict[str, str] = {
    Dimension.IDEOLOGICAL_STANCE.value: "center",
    Dimension.FACTUAL_GROUNDING.value: "moderate",
    Dimension.FRAMING_CHOICES.value: "balanced",
    Dimension.EMOTIONAL_TONE.value: "neutral",
    Dimension.SOURCE_TRANSPARENCY.value: "limited",
}
