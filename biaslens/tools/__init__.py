# Tools module
from .concurrency import map_with_concurrency
from .json_repair import JSONRepairError, parse_json_object
from .llm_service import (
    LLMService, ScoringClient, ScoringOk, ScoringParseError, ScoringResult, ScoringTransportError,
)

__all__ = [
    # Fan-out
    "map_with_concurrency",
    # Scorer client
    "LLMService", "ScoringClient", "ScoringResult",
    "ScoringOk", "ScoringParseError", "ScoringTransportError",
    # JSON recovery
    "JSONRepairError", "parse_json_object",
]
