# Scoring agent and ingestion pipeline exports
from .bias_agent import BiasAgent, apply_scores, fallback_scores, validate_bias_payload
from .orchestrator import IngestionResult, NarrativePipeline

__all__ = [
    "BiasAgent", "apply_scores", "fallback_scores", "validate_bias_payload",
    "IngestionResult", "NarrativePipeline",
]
