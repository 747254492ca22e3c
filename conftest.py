"""
Shared fixtures: article/score builders, in-process fakes for the scorer
and the news search, and a throwaway SQLite database per test.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Sequence

import pytest

from biaslens.config import Settings
from biaslens.database import Database
from biaslens.schemas import AnalysisStatus, Article, BiasDimension, BiasScores, NEUTRAL_LABELS
from biaslens.tools.llm_service import ScoringOk

BASE_TIME = datetime(2025, 1, 15, 12, 0, tzinfo=timezone.utc)

LONG_BODY = (
    "Lawmakers met on Tuesday to debate the proposal in detail. "
    "Several committee members raised questions about enforcement, "
    "while others pointed to recent reports from independent analysts. "
) * 4


def build_scores(
    stance: int = 50,
    factual: int = 50,
    framing: int = 50,
    tone: int = 50,
    transparency: int = 50,
    phrases: Sequence[str] = (),
    status: AnalysisStatus = AnalysisStatus.AI,
) -> BiasScores:
    def dim(name: str, score: int, highlighted: Sequence[str] = ()) -> BiasDimension:
        return BiasDimension(
            score=score,
            label=NEUTRAL_LABELS[name],
            confidence=0.8,
            highlighted_phrases=list(highlighted),
            reasoning="fixture",
        )

    return BiasScores(
        ideological_stance=dim("ideological_stance", stance, phrases),
        factual_grounding=dim("factual_grounding", factual),
        framing_choices=dim("framing_choices", framing),
        emotional_tone=dim("emotional_tone", tone),
        source_transparency=dim("source_transparency", transparency),
        overall_bias_level=50,
        analysis_status=status,
    )


def build_article(
    headline: str,
    content: str = LONG_BODY,
    source: str = "Reuters",
    url: Optional[str] = None,
    hours: int = 0,
    scores: Optional[BiasScores] = None,
) -> Article:
    slug = "-".join(headline.lower().split())[:60]
    return Article(
        headline=headline,
        content=content,
        description=headline,
        source=source,
        url=url or f"https://{source.lower().replace(' ', '')}.example.com/{slug}",
        published_at=BASE_TIME + timedelta(hours=hours),
        bias_scores=scores,
    )


def scorer_payload(stance: int = 45, tone: int = 55, sources: Sequence[str] = ()) -> Dict[str, Any]:
    """A well-formed scorer reply."""
    def dim(score: int, label: str) -> Dict[str, Any]:
        return {
            "score": score,
            "label": label,
            "confidence": 0.8,
            "highlighted_phrases": ["officials said"],
            "reasoning": "Balanced attribution throughout.",
        }

    return {
        "ideological_stance": dim(stance, "center"),
        "factual_grounding": dim(70, "good"),
        "framing_choices": dim(60, "balanced"),
        "emotional_tone": dim(tone, "neutral"),
        "source_transparency": dim(65, "clear"),
        "overall_bias_level": 40,
        "primary_sources": list(sources),
        "analyzed_at": "2025-01-15T12:00:00Z",
    }


class FakeScoringClient:
    """ScoringClient that returns a canned result and records prompts."""

    def __init__(self, result=None):
        self.result = result if result is not None else ScoringOk(scorer_payload())
        self.prompts: List[str] = []

    async def request_structured(self, prompt, system_prompt, output_type):
        self.prompts.append(prompt)
        return self.result


class FakeNewsClient:
    """Stands in for GNewsClient; hands out fresh copies of its articles."""

    def __init__(self, articles: Sequence[Article] = ()):
        self.articles = list(articles)
        self.queries: List[str] = []

    async def search(self, topic, sources=None, page_size=15):
        self.queries.append(topic)
        return [a.model_copy(deep=True) for a in self.articles][:page_size]


@pytest.fixture
def make_scores():
    return build_scores


@pytest.fixture
def make_article():
    return build_article


@pytest.fixture
def make_payload():
    return scorer_payload


@pytest.fixture
def fake_scorer():
    return FakeScoringClient


@pytest.fixture
def fake_news():
    return FakeNewsClient


@pytest.fixture
def long_body():
    return LONG_BODY


@pytest.fixture
def settings(tmp_path):
    return Settings(
        _env_file=None,
        MOCK_MODE=True,
        GNEWS_API_KEY="test-key",
        GOOGLE_AI_KEY="",
        DATABASE_URL=f"sqlite:///{tmp_path / 'test.db'}",
        FULL_CONTENT_SCRAPE=False,
        CORS_ORIGINS="*",
    )


@pytest.fixture
def db(settings):
    database = Database(settings.database_url)
    database.create_tables()
    return database
