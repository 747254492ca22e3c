"""
JSON recovery for scorer replies that arrive as free text.

Handles the usual LLM output damage:
- Markdown code fences around the payload
- Prose before/after the JSON object
- Truncated JSON (unclosed strings/brackets)
- Raw control characters inside strings
"""

import json
import logging
import re
from typing import Any, Dict

logger = logging.getLogger(__name__)

_FENCE_OPEN = re.compile(r'^```(?:json)?\s*', re.IGNORECASE)
_FENCE_CLOSE = re.compile(r'\s*```$')
_CONTROL_CHARS = re.compile(r'[\x00-\x1f\x7f]')


class JSONRepairError(ValueError):
    """Reply could not be turned into a JSON object."""


def parse_json_object(response: str) -> Dict[str, Any]:
    """Parse a JSON object out of an LLM reply or raise JSONRepairError."""
    if not isinstance(response, str) or not response.strip():
        raise JSONRepairError("Empty response")

    cleaned = response.strip()
    if cleaned.startswith("```"):
        cleaned = _FENCE_CLOSE.sub('', _FENCE_OPEN.sub('', cleaned)).strip()

    candidate = extract_json_object(cleaned)
    for attempt in (
        lambda: json.loads(candidate),
        # Ollama/Gemini sometimes put literal newlines inside string values
        lambda: json.loads(candidate, strict=False),
        lambda: json.loads(_CONTROL_CHARS.sub(' ', candidate)),
    ):
        try:
            parsed = attempt()
            break
        except json.JSONDecodeError:
            continue
    else:
        logger.debug(f"Unparseable JSON reply: {candidate[:300]}")
        raise JSONRepairError("Failed to parse JSON")

    if not isinstance(parsed, dict):
        raise JSONRepairError(f"Expected a JSON object, got {type(parsed).__name__}")
    return parsed


def extract_json_object(text: str) -> str:
    """Return the outermost {...} in text, closing it if the reply was cut off."""
    start = text.find('{')
    if start == -1:
        return text

    depth = 0
    in_string = False
    escaped = False
    for i in range(start, len(text)):
        ch = text[i]
        if escaped:
            escaped = False
        elif ch == '\\' and in_string:
            escaped = True
        elif ch == '"':
            in_string = not in_string
        elif not in_string:
            if ch == '{':
                depth += 1
            elif ch == '}':
                depth -= 1
                if depth == 0:
                    return text[start:i + 1]
    return close_truncated_json(text[start:])


def close_truncated_json(text: str) -> str:
    """Close an open string and any unbalanced brackets, innermost first."""
    stack = []
    in_string = False
    escaped = False
    for ch in text:
        if escaped:
            escaped = False
        elif ch == '\\' and in_string:
            escaped = True
        elif ch == '"':
            in_string = not in_string
        elif not in_string:
            if ch in '{[':
                stack.append(ch)
            elif ch in '}]' and stack:
                stack.pop()

    if in_string:
        text += '"'
    text = text.rstrip().rstrip(',')
    closers = {'{': '}', '[': ']'}
    return text + ''.join(closers[b] for b in reversed(stack))
