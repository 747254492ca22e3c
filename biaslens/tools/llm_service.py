"""
LLM Service: pydantic-ai backed client for the external bias scorer.

Two tracks, as with any schema-constrained call:
  Track A: typed structured output (the model is forced into the schema)
  Track B: raw text + JSON repair, used when Track A's output fails
           validation and always in mock mode

Callers never see exceptions from here. Every call resolves to a tagged
ScoringResult so the adapter can map it onto a fallback tier:
  ScoringOk(payload)         structured data came back
  ScoringParseError(reason)  the model answered, but not with usable data
  ScoringTransportError(...) the call itself failed (network, quota, timeout)
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Protocol, Type, TypeVar, Union

from pydantic import BaseModel
from pydantic_ai import Agent
from pydantic_ai.exceptions import UnexpectedModelBehavior
from pydantic_ai.settings import ModelSettings

from ..config import Settings, get_settings
from . import json_repair

logger = logging.getLogger(__name__)

T = TypeVar('T', bound=BaseModel)


@dataclass(frozen=True)
class ScoringOk:
    payload: Dict[str, Any]


@dataclass(frozen=True)
class ScoringParseError:
    reason: str


@dataclass(frozen=True)
class ScoringTransportError:
    reason: str


ScoringResult = Union[ScoringOk, ScoringParseError, ScoringTransportError]


class ScoringClient(Protocol):
    """Anything that can turn a prompt into a tagged scoring result."""

    async def request_structured(
        self, prompt: str, system_prompt: str, output_type: Type[BaseModel],
    ) -> ScoringResult:
        ...


class LLMService:
    """Scoring client backed by a pydantic-ai Agent over Gemini.

    Agents are cached by (output_type, system prompt, retries, mock) across
    instances; building the Google provider is not free.
    """

    _agent_cache: Dict[tuple, Agent] = {}

    def __init__(self, settings: Optional[Settings] = None, mock_mode: bool = False):
        self.settings = settings or get_settings()
        self.mock_mode = mock_mode or self.settings.mock_mode
        if self.mock_mode:
            logger.info("Scorer: MOCK mode (deterministic FunctionModel)")
        else:
            logger.info(f"Scorer: {self.settings.scoring_model}")

    def _build_model(self):
        if self.mock_mode:
            from pydantic_ai.models.function import FunctionModel
            from . import mock_responses
            return FunctionModel(mock_responses.get_mock_response_for_function_model)

        from pydantic_ai.models.google import GoogleModel
        from pydantic_ai.providers.google import GoogleProvider
        return GoogleModel(
            self.settings.scoring_model,
            provider=GoogleProvider(api_key=self.settings.google_ai_key or None),
        )

    def _get_or_create_agent(self, output_type: type, system_prompt: str, retries: int) -> Agent:
        key = (output_type, hash(system_prompt), retries, self.mock_mode, self.settings.scoring_model)
        if key not in self._agent_cache:
            self._agent_cache[key] = Agent(
                self._build_model(),
                output_type=output_type,
                system_prompt=system_prompt,
                retries=retries,
            )
        return self._agent_cache[key]

    # ── Track A: typed structured output ─────────────────────────────

    async def run_structured(
        self,
        prompt: str,
        system_prompt: str,
        output_type: Type[T],
    ) -> T:
        """Generate schema-constrained output validated by pydantic-ai."""
        agent = self._get_or_create_agent(output_type, system_prompt, self.settings.scoring_retries)
        result = await agent.run(
            prompt,
            model_settings=ModelSettings(temperature=self.settings.scoring_temperature),
        )
        return result.output

    # ── Track B: raw text → JSON repair ──────────────────────────────

    async def generate_json(self, prompt: str, system_prompt: str = "") -> Dict[str, Any]:
        """Ask for JSON as plain text and repair it. Raises JSONRepairError."""
        json_instruction = "\nYou must respond with valid JSON only. No markdown, no explanation."
        agent = self._get_or_create_agent(str, system_prompt + json_instruction, self.settings.scoring_retries)
        result = await agent.run(
            prompt,
            model_settings=ModelSettings(temperature=self.settings.scoring_temperature),
        )
        return json_repair.parse_json_object(result.output)

    # ── Tagged entry point used by BiasAgent ─────────────────────────

    async def request_structured(
        self,
        prompt: str,
        system_prompt: str,
        output_type: Type[BaseModel],
    ) -> ScoringResult:
        """Run the scorer under a timeout and classify the outcome."""
        timeout = self.settings.scoring_timeout
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout
        try:
            if self.mock_mode:
                payload = await asyncio.wait_for(self.generate_json(prompt, system_prompt), timeout)
                return ScoringOk(payload)
            try:
                output = await asyncio.wait_for(
                    self.run_structured(prompt, system_prompt, output_type), timeout,
                )
                return ScoringOk(output.model_dump())
            except UnexpectedModelBehavior as e:
                logger.warning(f"Structured output rejected, falling through to raw JSON: {e}")
            # Raw-JSON fallback shares the same deadline
            remaining = max(deadline - loop.time(), 0.0)
            payload = await asyncio.wait_for(self.generate_json(prompt, system_prompt), remaining)
            return ScoringOk(payload)
        except json_repair.JSONRepairError as e:
            return ScoringParseError(str(e))
        except UnexpectedModelBehavior as e:
            return ScoringParseError(str(e))
        except asyncio.TimeoutError:
            return ScoringTransportError(f"Scoring call timed out after {timeout:g}s")
        except Exception as e:
            return ScoringTransportError(f"{type(e).__name__}: {e}")

    @classmethod
    def clear_cache(cls):
        """Clear agent cache. Useful for testing or config changes."""
        cls._agent_cache.clear()
