"""
Bias Scoring Agent: five-dimension bias profile for one article.

Sends headline, source and body to the external scorer, then repairs
whatever comes back before it is trusted:
  - scores clamped to 0-100, confidences to 0-1
  - missing fields filled with neutral defaults ("Analysis incomplete")
  - cited source URLs sanitized (no loopback, no relative paths, no dupes)
  - a display confidence interval derived per dimension

Every path returns a schema-complete BiasScores. Failures are tagged, never
raised: fallback-empty (body too short, no call made), fallback-api (call
failed), fallback-parse (call returned unusable data).
"""

import ipaddress
import logging
import math
import re
import socket
import time
from datetime import datetime, timezone
from typing import Any, List, Optional
from urllib.parse import urlparse

from ..config import Settings, get_settings
from ..schemas import (
    AnalysisStatus, Article, BiasDimension, BiasScores, BiasScoresLLM,
    ConfidenceInterval, DIMENSION_LABELS, DIMENSIONS, NEUTRAL_LABELS,
)
from ..shared.helpers import js_round
from ..tools.llm_service import (
    LLMService, ScoringClient, ScoringOk, ScoringParseError, ScoringTransportError,
)

logger = logging.getLogger(__name__)

# Below this the article is not worth a scoring call
MIN_CONTENT_CHARS = 240
# Hard cap on body text sent to the scorer
MAX_CONTENT_CHARS = 10000
TRUNCATION_MARKER = "\n[TRUNCATED_FOR_ANALYSIS]"

MAX_PHRASES = 5
MAX_PRIMARY_SOURCES = 15
DEFAULT_SCORE = 50
DEFAULT_CONFIDENCE = 0.5
INCOMPLETE_REASONING = "Analysis incomplete"

# Confidence interval heuristic: 0 confidence → 40 points wide, floor of 4
CI_MAX_WIDTH = 40
CI_MIN_WIDTH = 4

SYSTEM_PROMPT = (
    "You are an expert media bias analyst. Analyze the full article content across "
    "5 bias dimensions and extract required fields succinctly. Provide precise phrases "
    "(max 3 per dimension) quoted verbatim from the article. List only external URLs "
    "of primary sources the article cites."
)

_BARE_DOMAIN = re.compile(r'^[a-z0-9.-]+\.[a-z]{2,}(/.*)?$', re.IGNORECASE)
_HAS_SCHEME = re.compile(r'^https?://', re.IGNORECASE)
_INTERNAL_MARKERS = ("localhost:", "/api/articles/")


# ══════════════════════════════════════════════════════════════════════════════
# VALIDATION / REPAIR
# ══════════════════════════════════════════════════════════════════════════════

def _as_number(value: Any) -> Optional[float]:
    if isinstance(value, bool) or value is None:
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return None if math.isnan(number) else number


def clamp_score(value: Any, default: int = DEFAULT_SCORE) -> int:
    number = _as_number(value)
    if number is None:
        return default
    return js_round(max(0.0, min(100.0, number)))


def clamp_confidence(value: Any, default: float = DEFAULT_CONFIDENCE) -> float:
    number = _as_number(value)
    if number is None:
        return default
    return max(0.0, min(1.0, number))


def _is_loopback_host(host: str) -> bool:
    host = host.rstrip(".")
    if host == "localhost" or host.endswith(".localhost"):
        return True
    try:
        ip = ipaddress.ip_address(host)
    except ValueError:
        # Shorthand and integer IPv4 spellings ("127.1", "2130706433")
        try:
            ip = ipaddress.IPv4Address(socket.inet_aton(host))
        except (OSError, ValueError):
            return False
    if isinstance(ip, ipaddress.IPv6Address) and ip.ipv4_mapped is not None:
        ip = ip.ipv4_mapped
    return ip.is_loopback or ip.is_unspecified


def sanitize_primary_sources(sources: Any) -> List[str]:
    """
    Keep only external http(s) URLs, normalized and deduplicated.

    Bare domains ("example.com/report") get an https:// prefix; query strings
    are stripped as basic tracking-parameter removal. Capped at 15.
    """
    if not isinstance(sources, list):
        return []

    seen = set()
    cleaned: List[str] = []
    for raw in sources:
        if not isinstance(raw, str):
            continue
        url = raw.strip()
        if not url:
            continue
        lower = url.lower()
        if any(marker in lower for marker in _INTERNAL_MARKERS) or url.startswith("/"):
            continue
        if not _HAS_SCHEME.match(url):
            if not _BARE_DOMAIN.match(url):
                continue
            url = "https://" + url

        try:
            parsed = urlparse(url)
            host = parsed.hostname
            parsed.port  # out-of-range ports raise ValueError
        except ValueError:
            continue
        if parsed.scheme.lower() not in ("http", "https") or not host:
            continue
        if _is_loopback_host(host):
            continue

        final_url = parsed._replace(
            scheme=parsed.scheme.lower(),
            netloc=parsed.netloc.lower(),
            path=parsed.path or "/",
            params="",
            query="",
            fragment="",
        ).geturl()
        if final_url not in seen:
            seen.add(final_url)
            cleaned.append(final_url)

    return cleaned[:MAX_PRIMARY_SOURCES]


def _repair_phrases(phrases: Any) -> List[str]:
    if not isinstance(phrases, list):
        return []
    kept = [p.strip() for p in phrases if isinstance(p, str) and p.strip()]
    return kept[:MAX_PHRASES]


def _repair_dimension(name: str, raw: Any) -> BiasDimension:
    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ValueError(f"{name} must be an object, got {type(raw).__name__}")

    label = raw.get("label")
    if not isinstance(label, str) or label.strip().lower() not in DIMENSION_LABELS[name]:
        label = NEUTRAL_LABELS[name]
    else:
        label = label.strip().lower()

    reasoning = raw.get("reasoning")
    if not isinstance(reasoning, str) or not reasoning.strip():
        reasoning = INCOMPLETE_REASONING

    return BiasDimension(
        score=clamp_score(raw.get("score")),
        label=label,
        confidence=clamp_confidence(raw.get("confidence")),
        highlighted_phrases=_repair_phrases(raw.get("highlighted_phrases")),
        reasoning=reasoning.strip(),
    )


def _parse_analyzed_at(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, str) and value.strip():
        try:
            parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
            return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
        except ValueError:
            pass
    return datetime.now(timezone.utc)


def validate_bias_payload(payload: Any) -> BiasScores:
    """
    Clamp, default and sanitize a raw scorer payload into BiasScores.

    Missing fields are repaired; a payload whose containers have the wrong
    type (not an object) is rejected with ValueError.
    """
    if not isinstance(payload, dict):
        raise ValueError(f"Scorer payload must be an object, got {type(payload).__name__}")

    dimensions = {name: _repair_dimension(name, payload.get(name)) for name in DIMENSIONS}
    return BiasScores(
        **dimensions,
        overall_bias_level=clamp_score(payload.get("overall_bias_level")),
        primary_sources=sanitize_primary_sources(payload.get("primary_sources")),
        analyzed_at=_parse_analyzed_at(payload.get("analyzed_at")),
        analysis_status=AnalysisStatus.AI,
    )


# ══════════════════════════════════════════════════════════════════════════════
# CONFIDENCE INTERVALS
# ══════════════════════════════════════════════════════════════════════════════

def build_confidence_interval(score: int, confidence: float) -> ConfidenceInterval:
    """Low confidence widens the band; full confidence narrows it to 4 points."""
    width = max(CI_MIN_WIDTH, js_round(CI_MAX_WIDTH * (1 - confidence)))
    half = js_round(width / 2)
    lower = max(0, score - half)
    upper = min(100, score + half)
    return ConfidenceInterval(lower=lower, upper=upper, width=upper - lower)


def attach_confidence_intervals(scores: BiasScores) -> BiasScores:
    for name in DIMENSIONS:
        dim = scores.dimension(name)
        dim.confidence_interval = build_confidence_interval(dim.score, dim.confidence)
    return scores


# ══════════════════════════════════════════════════════════════════════════════
# FALLBACK BASELINE
# ══════════════════════════════════════════════════════════════════════════════

_FALLBACK_STANCE_REASONING = {
    AnalysisStatus.FALLBACK_API: "Unable to perform AI analysis due to API limitations. Using neutral baseline scores.",
    AnalysisStatus.FALLBACK_PARSE: "AI response could not be parsed into a bias profile. Using neutral baseline scores.",
    AnalysisStatus.FALLBACK_EMPTY: "Content too short for reliable AI analysis",
}


def fallback_scores(status: AnalysisStatus) -> BiasScores:
    """Neutral, schema-complete baseline for any non-AI outcome."""
    def dim(name: str, score: int, phrase: str, reasoning: str) -> BiasDimension:
        return BiasDimension(
            score=score,
            label=NEUTRAL_LABELS[name],
            confidence=0.3,
            highlighted_phrases=[phrase],
            reasoning=reasoning,
        )

    scores = BiasScores(
        ideological_stance=dim("ideological_stance", 50, "AI analysis unavailable",
                               _FALLBACK_STANCE_REASONING[status]),
        factual_grounding=dim("factual_grounding", 60, "Source verification pending",
                              "Article appears to have standard news structure but source "
                              "verification requires AI analysis."),
        framing_choices=dim("framing_choices", 55, "Framing analysis pending",
                            "Standard news format detected but detailed framing analysis "
                            "requires AI processing."),
        emotional_tone=dim("emotional_tone", 65, "Tone analysis pending",
                           "Article appears to use standard news language but emotional "
                           "tone analysis requires AI."),
        source_transparency=dim("source_transparency", 55, "Transparency analysis pending",
                                "Standard attribution patterns detected but detailed "
                                "transparency analysis requires AI."),
        overall_bias_level=57,
        analysis_status=status,
    )
    return attach_confidence_intervals(scores)


# ══════════════════════════════════════════════════════════════════════════════
# AGENT
# ══════════════════════════════════════════════════════════════════════════════

class BiasAgent:
    """
    Scores articles through an injected ScoringClient (LLMService by default).

    Usage:
        agent = BiasAgent()
        scores = await agent.score(article)
        if scores.is_fallback:
            ...
    """

    def __init__(
        self,
        client: Optional[ScoringClient] = None,
        settings: Optional[Settings] = None,
        mock_mode: bool = False,
    ):
        self.settings = settings or get_settings()
        self.client = client or LLMService(settings=self.settings, mock_mode=mock_mode)

    @staticmethod
    def build_prompt(article: Article, content: str) -> str:
        return (
            f"Title: {article.headline}\n"
            f"Source: {article.source}\n"
            f"FULL_CONTENT_START\n{content}\nFULL_CONTENT_END"
        )

    async def score(self, article: Article) -> BiasScores:
        """
        Produce a bias profile for one article. Never raises for scorer failures.

        Raises:
            ValueError: article has no headline or no content
        """
        if not article.headline or not article.content:
            raise ValueError("Article must have headline and content")

        if len(article.content.strip()) < MIN_CONTENT_CHARS:
            logger.info(f"Skipping scorer for short article ({len(article.content.strip())} chars): "
                        f"{article.headline[:50]}")
            return fallback_scores(AnalysisStatus.FALLBACK_EMPTY)

        content = article.content
        if len(content) > MAX_CONTENT_CHARS:
            content = content[:MAX_CONTENT_CHARS] + TRUNCATION_MARKER

        prompt = self.build_prompt(article, content)
        logger.info(f"Analyzing article: \"{article.headline[:50]}...\"")
        start = time.time()
        result = await self.client.request_structured(prompt, SYSTEM_PROMPT, BiasScoresLLM)
        elapsed_ms = int((time.time() - start) * 1000)

        if isinstance(result, ScoringOk):
            try:
                scores = validate_bias_payload(result.payload)
            except ValueError as e:
                logger.error(f"Scorer payload failed validation after {elapsed_ms}ms: {e}")
                return fallback_scores(AnalysisStatus.FALLBACK_PARSE)
            logger.info(f"Analysis completed in {elapsed_ms}ms")
            return attach_confidence_intervals(scores)

        if isinstance(result, ScoringParseError):
            logger.error(f"Failed to parse structured scorer response: {result.reason}")
            return fallback_scores(AnalysisStatus.FALLBACK_PARSE)

        if isinstance(result, ScoringTransportError):
            logger.error(f"Bias analysis error, using fallback scores: {result.reason}")
        else:
            logger.error(f"Unexpected scorer result type: {type(result).__name__}")
        return fallback_scores(AnalysisStatus.FALLBACK_API)

    async def rescore(self, article: Article) -> Article:
        """Replace the article's bias profile in full (no merge)."""
        scores = await self.score(article)
        apply_scores(article, scores)
        return article


def apply_scores(article: Article, scores: BiasScores) -> None:
    """Attach scores and adopt the scorer's cited sources when it found any."""
    article.bias_scores = scores
    if scores.primary_sources:
        article.primary_sources = list(scores.primary_sources)
