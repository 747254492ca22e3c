"""
Snippet truncation detection and whitespace cleanup.

News search APIs return body snippets cut at ~200 characters with a
"[+1234 chars]" marker or a trailing ellipsis. Anything flagged here, or
simply too short to score well, is queued for full-page enrichment.
"""

import re
from typing import Optional, Tuple

# Below this, a snippet is worth replacing with the scraped page body
MIN_USABLE_CHARS = 800
# Below this, the description is appended even without a truncation marker
SHORT_SNIPPET_CHARS = 400

_TRUNCATION_PATTERNS = (
    re.compile(r"\.\.\.$"),
    re.compile(r"…$"),
    re.compile(r"\[\+?\d+ chars?\]", re.IGNORECASE),
    re.compile(r"\[\d+ words?\]", re.IGNORECASE),
)
_CHAR_MARKER = re.compile(r"\s*\[\+?\d+ chars?\]", re.IGNORECASE)
_RUN_OF_SPACES = re.compile(r"[ \t\f\v]{2,}")
_RUN_OF_NEWLINES = re.compile(r"\n{3,}")


def has_truncation_marker(text: str) -> bool:
    """True if the text ends in an ellipsis or carries a char/word-count marker."""
    stripped = (text or "").strip()
    return any(p.search(stripped) for p in _TRUNCATION_PATTERNS)


def normalize_whitespace(text: str) -> str:
    """Collapse runs of spaces and blank lines; trim the ends."""
    text = _RUN_OF_SPACES.sub(" ", text or "")
    text = _RUN_OF_NEWLINES.sub("\n\n", text)
    return text.strip()


def detect_truncation(raw: str, description: Optional[str] = None) -> Tuple[str, bool]:
    """
    Clean a search-API snippet and decide whether it needs enrichment.

    Args:
        raw: Body snippet as returned by the search API
        description: Short description that accompanies the snippet

    Returns:
        (cleaned_text, is_likely_truncated)
    """
    text = (raw or "").strip()
    desc = (description or "").strip()

    marked = has_truncation_marker(text)
    if marked and desc and desc not in text:
        text += f"\n{desc}"
    if len(text) < SHORT_SNIPPET_CHARS and desc and desc not in text:
        text += f"\n{desc}"

    text = _CHAR_MARKER.sub("", text)
    cleaned = normalize_whitespace(text)
    return cleaned, marked or len(cleaned) < MIN_USABLE_CHARS


def needs_enrichment(text: str) -> bool:
    """Downstream predicate: truncated or shorter than the usable threshold."""
    return has_truncation_marker(text) or len((text or "").strip()) < MIN_USABLE_CHARS
