"""
Mock scorer responses for development without an API key.

Provides deterministic bias profiles based on prompt content hashing.
Designed to work with pydantic-ai's FunctionModel.
"""

import hashlib
import json
from datetime import datetime, timezone
from typing import Any, Dict

from pydantic_ai.messages import ModelResponse, TextPart

_STANCE_BY_SCORE = (
    (15, "far-left"), (30, "left"), (45, "center-left"), (55, "center"),
    (70, "center-right"), (85, "right"), (101, "far-right"),
)


def _stance_label(score: int) -> str:
    for upper, label in _STANCE_BY_SCORE:
        if score < upper:
            return label
    return "center"


def get_mock_bias_scores(prompt: str) -> Dict[str, Any]:
    """Deterministic BiasScoresLLM-shaped payload for a prompt.

    Same prompt → same scores, so clustering over mock data is reproducible.
    """
    digest = hashlib.md5(prompt.encode()).digest()
    stance = 20 + digest[0] % 61       # 20-80
    factual = 40 + digest[1] % 51      # 40-90
    framing = 35 + digest[2] % 51
    tone = 25 + digest[3] % 66         # spans the alarmist/neutral thresholds
    transparency = 30 + digest[4] % 61
    confidence = round(0.55 + (digest[5] % 40) / 100, 2)

    def dim(score: int, label: str, phrase: str, reasoning: str) -> Dict[str, Any]:
        return {
            "score": score,
            "label": label,
            "confidence": confidence,
            "highlighted_phrases": [phrase],
            "reasoning": reasoning,
        }

    return {
        "ideological_stance": dim(stance, _stance_label(stance), "critics argue" if digest[6] % 2 else "officials said",
                                  "Mock stance derived from prompt hash."),
        "factual_grounding": dim(factual, "good" if factual >= 65 else "moderate", "according to data",
                                 "Mock factual grounding."),
        "framing_choices": dim(framing, "balanced" if framing >= 60 else "biased", "framed as",
                               "Mock framing analysis."),
        "emotional_tone": dim(tone, "neutral" if tone >= 50 else "emotional", "sharply",
                              "Mock tone analysis."),
        "source_transparency": dim(transparency, "clear" if transparency >= 60 else "limited", "a spokesperson",
                                   "Mock transparency analysis."),
        "overall_bias_level": round(abs(stance - 50) + (100 - framing) / 2),
        "primary_sources": ["https://example.org/mock-source"],
        "analyzed_at": datetime.now(timezone.utc).isoformat(),
    }


def get_mock_response_for_function_model(messages: list[Any], info: Any) -> ModelResponse:
    """Adapter for pydantic-ai FunctionModel.

    FunctionModel passes ModelMessage objects. We pull out the user prompt
    text and answer with a JSON bias profile as a TextPart.
    """
    prompt = ""
    for msg in messages:
        for part in getattr(msg, 'parts', []):
            content = getattr(part, 'content', None)
            if isinstance(content, str) and "User" in type(part).__name__:
                prompt = content
    if not prompt and messages:
        prompt = str(messages[-1])

    return ModelResponse(parts=[TextPart(content=json.dumps(get_mock_bias_scores(prompt)))])
