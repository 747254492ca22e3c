"""
Schemas package: all data models for the BiasLens pipeline.

Models are organized by domain in submodules:
  - base.py: Enums and per-dimension label vocabularies
  - bias.py: ConfidenceInterval, BiasDimension, BiasScores
  - news.py: Article
  - narratives.py: NarrativeCluster and its detail view
  - llm_outputs.py: Lenient scorer output shapes
"""

# base.py: enums and vocabularies
from biaslens.schemas.base import (
    AnalysisStatus, BiasLean, FramingShift, Dimension, DIMENSIONS,
    DIMENSION_LABELS, NEUTRAL_LABELS,
)

# bias.py: bias profile
from biaslens.schemas.bias import ConfidenceInterval, BiasDimension, BiasScores

# news.py: article model
from biaslens.schemas.news import Article, article_id_for_url

# narratives.py: cluster views
from biaslens.schemas.narratives import (
    BiasDistribution, DimensionAverages, TimeSpan, NarrativeCluster,
    SourceAnalysis, BiasSnapshot, FramingTimelineEntry, NarrativeClusterDetail,
)

# llm_outputs.py: scorer output
from biaslens.schemas.llm_outputs import BiasDimensionLLM, BiasScoresLLM

__all__ = [
    # base
    "AnalysisStatus", "BiasLean", "FramingShift", "Dimension", "DIMENSIONS",
    "DIMENSION_LABELS", "NEUTRAL_LABELS",
    # bias
    "ConfidenceInterval", "BiasDimension", "BiasScores",
    # news
    "Article", "article_id_for_url",
    # narratives
    "BiasDistribution", "DimensionAverages", "TimeSpan", "NarrativeCluster",
    "SourceAnalysis", "BiasSnapshot", "FramingTimelineEntry", "NarrativeClusterDetail",
    # llm outputs
    "BiasDimensionLLM", "BiasScoresLLM",
]
