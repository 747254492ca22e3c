"""
Per-article narrative features: topic, framing type, cluster identity.

All functions are pure and deterministic; the same article always lands in
the same (topic, framing) bucket with the same cluster id.
"""

from typing import List

from ..schemas import Article, FramingShift
from ..shared.helpers import to_base36
from .vocabulary import DEFAULT_VOCABULARY, GENERAL_TOPIC, NarrativeVocabulary

FNV_OFFSET_BASIS = 2166136261
FNV_PRIME = 16777619


def extract_topics(text: str, vocabulary: NarrativeVocabulary = DEFAULT_VOCABULARY) -> List[str]:
    """All vocabulary topics found in text, in vocabulary order; ["general"] if none."""
    lowered = text.lower()
    found = [topic for topic in vocabulary.topics if topic in lowered]
    return found or [GENERAL_TOPIC]


def detect_framing_type(article: Article, vocabulary: NarrativeVocabulary = DEFAULT_VOCABULARY) -> str:
    text = article.text_for_matching
    scores = article.bias_scores
    stance = scores.ideological_stance.score if scores else None

    for rule in vocabulary.framing_rules:
        if rule.matches(text):
            return rule.resolve(stance)

    tone = scores.emotional_tone.score if scores else None
    if tone is not None and tone < vocabulary.alarmist_below:
        return vocabulary.alarmist_framing
    if tone is not None and tone > vocabulary.neutral_above:
        return vocabulary.neutral_framing
    return vocabulary.default_framing


def generate_cluster_id(cluster_key: str) -> str:
    """FNV-1a (32-bit) of the key's UTF-16 code units, base 36, first 8 chars."""
    hash_value = FNV_OFFSET_BASIS
    encoded = cluster_key.encode("utf-16-le")
    for i in range(0, len(encoded), 2):
        hash_value ^= encoded[i] | (encoded[i + 1] << 8)
        hash_value = (hash_value * FNV_PRIME) & 0xFFFFFFFF
    return to_base36(hash_value)[:8]


def cluster_key_for(topic: str, framing_type: str) -> str:
    return f"{topic}_{framing_type}"


def generate_cluster_title(topic: str, framing_type: str,
                           vocabulary: NarrativeVocabulary = DEFAULT_VOCABULARY) -> str:
    topic_title = vocabulary.topic_titles.get(topic, topic)
    framing_title = vocabulary.framing_titles.get(framing_type, framing_type)
    return f"{topic_title}: {framing_title}"


def detect_framing_shift(article: Article, vocabulary: NarrativeVocabulary = DEFAULT_VOCABULARY) -> FramingShift:
    """Tag an article as a pivot when its stance phrases carry contrastive markers."""
    if article.bias_scores is None:
        return FramingShift.NO_ANALYSIS

    phrases = article.bias_scores.ideological_stance.highlighted_phrases
    for phrase in phrases:
        lowered = phrase.lower()
        if any(indicator in lowered for indicator in vocabulary.shift_indicators):
            return FramingShift.NARRATIVE_PIVOT
    return FramingShift.CONSISTENT_FRAMING
