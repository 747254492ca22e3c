"""
Scorer client: JSON recovery and mapping of call outcomes onto tagged results.
"""

import asyncio

import pytest
from pydantic_ai.exceptions import UnexpectedModelBehavior

from biaslens.config import Settings
from biaslens.schemas import BiasScoresLLM
from biaslens.tools.json_repair import JSONRepairError, close_truncated_json, parse_json_object
from biaslens.tools.llm_service import (
    LLMService, ScoringOk, ScoringParseError, ScoringTransportError,
)


# ════════════════════════════════════════════════════════════════════
# JSON recovery
# ════════════════════════════════════════════════════════════════════

def test_parses_fenced_json():
    reply = '```json\n{"overall_bias_level": 42}\n```'
    assert parse_json_object(reply) == {"overall_bias_level": 42}


def test_parses_json_surrounded_by_prose():
    reply = 'Here is the analysis: {"a": {"b": [1, 2]}} Hope this helps!'
    assert parse_json_object(reply) == {"a": {"b": [1, 2]}}


def test_closes_truncated_json():
    reply = '{"ideological_stance": {"score": 40, "reasoning": "cut off he'
    parsed = parse_json_object(reply)
    assert parsed["ideological_stance"]["score"] == 40
    assert close_truncated_json('{"a": [1, 2') == '{"a": [1, 2]}'


def test_rejects_empty_and_non_object_replies():
    with pytest.raises(JSONRepairError):
        parse_json_object("")
    with pytest.raises(JSONRepairError):
        parse_json_object("[1, 2, 3]")
    with pytest.raises(JSONRepairError):
        parse_json_object("no json here at all")


# ════════════════════════════════════════════════════════════════════
# Outcome tagging
# ════════════════════════════════════════════════════════════════════

def _live_service(**overrides) -> LLMService:
    settings = Settings(_env_file=None, MOCK_MODE=False, GOOGLE_AI_KEY="test", **overrides)
    return LLMService(settings=settings)


def _request(service: LLMService):
    return asyncio.run(service.request_structured("prompt", "system", BiasScoresLLM))


def test_timeout_is_a_transport_error(monkeypatch):
    service = _live_service(SCORING_TIMEOUT=0.01)

    async def slow(*args, **kwargs):
        await asyncio.sleep(1)

    monkeypatch.setattr(service, "run_structured", slow)
    result = _request(service)
    assert isinstance(result, ScoringTransportError)
    assert "timed out" in result.reason


def test_network_failure_is_a_transport_error(monkeypatch):
    service = _live_service()

    async def boom(*args, **kwargs):
        raise ConnectionError("connection reset")

    monkeypatch.setattr(service, "run_structured", boom)
    result = _request(service)
    assert isinstance(result, ScoringTransportError)
    assert "connection reset" in result.reason


def test_rejected_structured_output_falls_through_to_raw_json(monkeypatch):
    service = _live_service()

    async def rejected(*args, **kwargs):
        raise UnexpectedModelBehavior("output validation failed")

    async def raw_json(prompt, system_prompt=""):
        return {"overall_bias_level": 33}

    monkeypatch.setattr(service, "run_structured", rejected)
    monkeypatch.setattr(service, "generate_json", raw_json)
    result = _request(service)
    assert result == ScoringOk({"overall_bias_level": 33})


def test_unrepairable_reply_is_a_parse_error(monkeypatch):
    service = _live_service()

    async def rejected(*args, **kwargs):
        raise UnexpectedModelBehavior("output validation failed")

    async def garbage(prompt, system_prompt=""):
        raise JSONRepairError("Failed to parse JSON")

    monkeypatch.setattr(service, "run_structured", rejected)
    monkeypatch.setattr(service, "generate_json", garbage)
    result = _request(service)
    assert isinstance(result, ScoringParseError)


def test_structured_output_is_dumped_to_payload(monkeypatch):
    service = _live_service()

    async def structured(*args, **kwargs):
        return BiasScoresLLM(overall_bias_level=12)

    monkeypatch.setattr(service, "run_structured", structured)
    result = _request(service)
    assert isinstance(result, ScoringOk)
    assert result.payload["overall_bias_level"] == 12


def test_raw_json_fallback_shares_the_call_deadline(monkeypatch):
    service = _live_service(SCORING_TIMEOUT=0.4)

    async def slow_rejection(*args, **kwargs):
        await asyncio.sleep(0.3)
        raise UnexpectedModelBehavior("output validation failed")

    async def hanging(prompt, system_prompt=""):
        await asyncio.sleep(5)

    monkeypatch.setattr(service, "run_structured", slow_rejection)
    monkeypatch.setattr(service, "generate_json", hanging)

    loop = asyncio.new_event_loop()
    try:
        started = loop.time()
        result = loop.run_until_complete(service.request_structured("prompt", "system", BiasScoresLLM))
        elapsed = loop.time() - started
    finally:
        loop.close()

    assert isinstance(result, ScoringTransportError)
    assert result.reason == "Scoring call timed out after 0.4s"
    # One bound for the whole call, not one per track
    assert elapsed < 0.6
