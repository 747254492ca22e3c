"""
Bias scoring adapter: repair/clamping, fallback tiers, source sanitization
and confidence intervals.
"""

import asyncio

import pytest

from biaslens.agents.bias_agent import (
    MIN_CONTENT_CHARS, TRUNCATION_MARKER, BiasAgent, build_confidence_interval,
    fallback_scores, sanitize_primary_sources, validate_bias_payload,
)
from biaslens.schemas import DIMENSIONS, AnalysisStatus
from biaslens.shared.helpers import js_round
from biaslens.tools.llm_service import ScoringOk, ScoringParseError, ScoringTransportError


def _score(agent, article):
    return asyncio.run(agent.score(article))


def _assert_intervals(scores):
    for name in DIMENSIONS:
        dim = scores.dimension(name)
        ci = dim.confidence_interval
        assert ci is not None, name
        assert ci.lower <= dim.score <= ci.upper
        assert ci.width == ci.upper - ci.lower
        assert 0 <= ci.lower and ci.upper <= 100


# ════════════════════════════════════════════════════════════════════
# Fallback tiers
# ════════════════════════════════════════════════════════════════════

def test_short_body_is_fallback_empty_without_scorer_call(fake_scorer, make_article, settings):
    client = fake_scorer()
    agent = BiasAgent(client=client, settings=settings)

    scores = _score(agent, make_article("Short update from the capitol", content="OK"))

    assert client.prompts == []
    assert scores.analysis_status == AnalysisStatus.FALLBACK_EMPTY
    assert scores.is_fallback is True
    assert scores.ideological_stance.reasoning == "Content too short for reliable AI analysis"
    assert [scores.dimension(n).score for n in DIMENSIONS] == [50, 60, 55, 65, 55]
    assert scores.overall_bias_level == 57
    _assert_intervals(scores)


def test_body_just_under_threshold_still_short_circuits(fake_scorer, make_article, settings):
    client = fake_scorer()
    agent = BiasAgent(client=client, settings=settings)
    body = "x" * (MIN_CONTENT_CHARS - 1)

    scores = _score(agent, make_article("Borderline length article", content=body))

    assert client.prompts == []
    assert scores.analysis_status == AnalysisStatus.FALLBACK_EMPTY


def test_missing_headline_or_content_raises(fake_scorer, make_article, settings):
    agent = BiasAgent(client=fake_scorer(), settings=settings)
    with pytest.raises(ValueError):
        _score(agent, make_article("", content="body"))
    with pytest.raises(ValueError):
        _score(agent, make_article("A real headline here", content=""))


def test_parse_error_maps_to_fallback_parse(fake_scorer, make_article, settings):
    agent = BiasAgent(client=fake_scorer(ScoringParseError("not json")), settings=settings)
    scores = _score(agent, make_article("Parliament passes new climate bill"))

    assert scores.analysis_status == AnalysisStatus.FALLBACK_PARSE
    assert scores.is_fallback
    _assert_intervals(scores)


def test_transport_error_maps_to_fallback_api(fake_scorer, make_article, settings):
    agent = BiasAgent(client=fake_scorer(ScoringTransportError("quota exceeded")), settings=settings)
    scores = _score(agent, make_article("Parliament passes new climate bill"))

    assert scores.analysis_status == AnalysisStatus.FALLBACK_API
    assert scores.is_fallback
    assert "API limitations" in scores.ideological_stance.reasoning
    _assert_intervals(scores)


def test_wrongly_shaped_payload_is_parse_failure(fake_scorer, make_article, make_payload, settings):
    payload = make_payload()
    payload["ideological_stance"] = "left-ish"
    agent = BiasAgent(client=fake_scorer(ScoringOk(payload)), settings=settings)

    scores = _score(agent, make_article("Parliament passes new climate bill"))

    assert scores.analysis_status == AnalysisStatus.FALLBACK_PARSE


def test_every_fallback_tier_is_schema_complete():
    for status in (AnalysisStatus.FALLBACK_API, AnalysisStatus.FALLBACK_PARSE, AnalysisStatus.FALLBACK_EMPTY):
        scores = fallback_scores(status)
        assert scores.is_fallback
        for name in DIMENSIONS:
            dim = scores.dimension(name)
            assert dim.reasoning
            assert dim.highlighted_phrases
            assert dim.confidence == 0.3


# ════════════════════════════════════════════════════════════════════
# Successful scoring + repair
# ════════════════════════════════════════════════════════════════════

def test_ok_payload_scores_as_ai(fake_scorer, make_article, make_payload, settings):
    client = fake_scorer(ScoringOk(make_payload(stance=35)))
    agent = BiasAgent(client=client, settings=settings)

    article = make_article("Parliament passes new climate bill", source="BBC")
    scores = _score(agent, article)

    assert scores.analysis_status == AnalysisStatus.AI
    assert scores.is_fallback is False
    assert scores.ideological_stance.score == 35
    assert len(client.prompts) == 1
    prompt = client.prompts[0]
    assert "Title: Parliament passes new climate bill" in prompt
    assert "Source: BBC" in prompt
    assert "FULL_CONTENT_START" in prompt and "FULL_CONTENT_END" in prompt
    _assert_intervals(scores)


def test_out_of_range_values_are_clamped():
    payload = {
        "ideological_stance": {"score": 150, "label": "center", "confidence": 1.7},
        "factual_grounding": {"score": -20, "label": "good", "confidence": -0.5},
        "framing_choices": {"score": "72", "label": "objective", "confidence": 0.4},
        "emotional_tone": {"score": 49.5, "label": "neutral", "confidence": 0.6},
        "source_transparency": {"score": 60, "label": "clear", "confidence": 0.6},
        "overall_bias_level": 240,
    }
    scores = validate_bias_payload(payload)

    assert scores.ideological_stance.score == 100
    assert scores.ideological_stance.confidence == 1.0
    assert scores.factual_grounding.score == 0
    assert scores.factual_grounding.confidence == 0.0
    assert scores.framing_choices.score == 72
    assert scores.emotional_tone.score == 50
    assert scores.overall_bias_level == 100


def test_missing_fields_get_neutral_defaults():
    payload = {
        "ideological_stance": {"score": 40, "label": "very-left", "confidence": 0.9,
                               "highlighted_phrases": ["a", "b", "c", "d", "e", "f", "g"],
                               "reasoning": "Leans left."},
        "emotional_tone": {"highlighted_phrases": "not a list"},
    }
    scores = validate_bias_payload(payload)

    stance = scores.ideological_stance
    assert stance.label == "center"
    assert stance.highlighted_phrases == ["a", "b", "c", "d", "e"]
    assert stance.reasoning == "Leans left."

    factual = scores.factual_grounding
    assert factual.score == 50
    assert factual.confidence == 0.5
    assert factual.label == "moderate"
    assert factual.reasoning == "Analysis incomplete"

    assert scores.emotional_tone.highlighted_phrases == []
    assert scores.emotional_tone.label == "neutral"
    assert scores.source_transparency.label == "limited"
    assert scores.overall_bias_level == 50
    assert scores.primary_sources == []


def test_zero_score_is_kept_not_defaulted():
    payload = {"ideological_stance": {"score": 0, "label": "far-left", "confidence": 0.9}}
    scores = validate_bias_payload(payload)
    assert scores.ideological_stance.score == 0
    assert scores.ideological_stance.label == "far-left"


def test_non_mapping_payload_is_rejected():
    with pytest.raises(ValueError):
        validate_bias_payload(["not", "an", "object"])


def test_long_body_is_truncated_in_prompt_only(fake_scorer, make_article, settings):
    client = fake_scorer()
    agent = BiasAgent(client=client, settings=settings)
    body = "word " * 4000
    article = make_article("A very long investigative feature", content=body)

    _score(agent, article)

    assert TRUNCATION_MARKER.strip() in client.prompts[0]
    assert article.content == body


def test_rescore_replaces_scores_and_copies_sources(fake_scorer, make_article, make_payload, make_scores, settings):
    payload = make_payload(sources=["https://www.epa.gov/report?utm_source=feed"])
    agent = BiasAgent(client=fake_scorer(ScoringOk(payload)), settings=settings)
    article = make_article("Parliament passes new climate bill",
                           scores=make_scores(status=AnalysisStatus.FALLBACK_API))

    asyncio.run(agent.rescore(article))

    assert article.bias_scores.analysis_status == AnalysisStatus.AI
    assert article.primary_sources == ["https://www.epa.gov/report"]


def test_mock_mode_scores_through_function_model(make_article, settings):
    agent = BiasAgent(settings=settings, mock_mode=True)
    article = make_article("Parliament passes new climate bill")

    first = _score(agent, article)
    second = _score(agent, article)

    assert first.analysis_status == AnalysisStatus.AI
    assert first.ideological_stance.score == second.ideological_stance.score
    _assert_intervals(first)


# ════════════════════════════════════════════════════════════════════
# Source sanitization
# ════════════════════════════════════════════════════════════════════

def test_sanitize_drops_internal_and_dedupes():
    sources = [
        "http://localhost:3000/api/articles/x",
        "example.com/report",
        "https://example.com/report?utm_source=x",
    ]
    assert sanitize_primary_sources(sources) == ["https://example.com/report"]


def test_sanitize_rejects_loopback_relative_and_other_schemes():
    sources = [
        "http://127.0.0.1/page",
        "http://[::1]/page",
        "http://0.0.0.0/page",
        "http://api.localhost/page",
        "http://localhost./page",
        "http://127.1/page",
        "http://2130706433/page",
        "http://[::ffff:127.0.0.1]/page",
        "https://example.com:99999/page",
        "/relative/path",
        "ftp://files.example.com/data.csv",
        "just some words",
        "",
        42,
        None,
        "https://Example.COM",
        "https://news.example.org/story#comments",
    ]
    assert sanitize_primary_sources(sources) == [
        "https://example.com/",
        "https://news.example.org/story",
    ]


def test_sanitize_caps_at_fifteen_and_handles_non_list():
    sources = [f"https://site{i}.example.com/a" for i in range(20)]
    assert len(sanitize_primary_sources(sources)) == 15
    assert sanitize_primary_sources("https://example.com") == []
    assert sanitize_primary_sources(None) == []


# ════════════════════════════════════════════════════════════════════
# Confidence intervals
# ════════════════════════════════════════════════════════════════════

def test_js_round_is_half_up():
    assert js_round(2.5) == 3
    assert js_round(0.5) == 1
    assert js_round(3.49) == 3
    assert round(2.5) == 2  # Python's banker's rounding differs


def test_interval_examples():
    ci = build_confidence_interval(50, 0.5)
    assert (ci.lower, ci.upper, ci.width) == (40, 60, 20)

    # Nominal width 5 -> half-width rounds up to 3
    ci = build_confidence_interval(50, 0.875)
    assert (ci.lower, ci.upper, ci.width) == (47, 53, 6)

    # Full confidence narrows to the 4-point floor, clamped at 100
    ci = build_confidence_interval(100, 1.0)
    assert (ci.lower, ci.upper, ci.width) == (98, 100, 2)

    # Zero confidence is the widest band, clamped at 0
    ci = build_confidence_interval(0, 0.0)
    assert (ci.lower, ci.upper, ci.width) == (0, 20, 20)


def test_interval_always_contains_score():
    for score in (0, 1, 17, 50, 83, 99, 100):
        for confidence in (0.0, 0.1, 0.33, 0.5, 0.77, 0.95, 1.0):
            ci = build_confidence_interval(score, confidence)
            assert ci.lower <= score <= ci.upper
            assert ci.width == ci.upper - ci.lower
