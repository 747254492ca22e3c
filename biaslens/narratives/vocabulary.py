"""
Keyword vocabulary for topic and framing detection.

Topic and framing extraction is a fixed keyword cascade, so the words and
the rule order live here as data. Extend a NarrativeVocabulary (or build a
new one) to change detection without touching the clustering code.

RULE ORDER MATTERS:
  framing_rules is a priority cascade, first match wins. An article that
  mentions both "budget" and "security" is economic, never security-focused.
"""

from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

GENERAL_TOPIC = "general"


@dataclass(frozen=True)
class FramingRule:
    """
    One step of the framing cascade.

    If any keyword is a substring of the article text, the rule fires.
    Rules with a stance_split pick `framing` when the ideological stance
    score is above the split, and `alternate` otherwise.
    """
    keywords: Tuple[str, ...]
    framing: str
    alternate: Optional[str] = None
    stance_split: Optional[int] = None

    def matches(self, text: str) -> bool:
        return any(keyword in text for keyword in self.keywords)

    def resolve(self, stance_score: Optional[int]) -> str:
        if self.stance_split is None or self.alternate is None:
            return self.framing
        if stance_score is not None and stance_score > self.stance_split:
            return self.framing
        return self.alternate


@dataclass(frozen=True)
class NarrativeVocabulary:
    # Vocabulary order decides the primary topic
    topics: Tuple[str, ...]
    framing_rules: Tuple[FramingRule, ...]
    # Tone fallback when no keyword rule fires
    alarmist_below: int = 40
    neutral_above: int = 70
    alarmist_framing: str = "alarmist"
    neutral_framing: str = "neutral-reporting"
    default_framing: str = "advocacy-oriented"
    topic_titles: Dict[str, str] = field(default_factory=dict)
    framing_titles: Dict[str, str] = field(default_factory=dict)
    shift_indicators: Tuple[str, ...] = ()


DEFAULT_VOCABULARY = NarrativeVocabulary(
    topics=(
        "immigration", "economy", "healthcare", "education", "climate",
        "politics", "election", "covid", "ukraine", "china", "technology",
        "biden", "trump", "congress", "supreme court", "ai", "crypto",
    ),
    framing_rules=(
        FramingRule(("cost", "economy", "budget"), "economic-concern",
                    alternate="economic-impact", stance_split=60),
        FramingRule(("security", "safety", "threat"), "security-focused"),
        FramingRule(("rights", "humanitarian", "justice"), "rights-based"),
        FramingRule(("policy", "legislation", "regulation"), "policy-focused"),
    ),
    topic_titles={
        "immigration": "Immigration Policy",
        "economy": "Economic Policy",
        "healthcare": "Healthcare Reform",
        "climate": "Climate Change",
        "technology": "Tech Regulation",
        "education": "Education Policy",
        GENERAL_TOPIC: "Breaking News",
    },
    framing_titles={
        "economic-concern": "Economic Impact Focus",
        "economic-impact": "Cost-Benefit Analysis",
        "security-focused": "Security Implications",
        "rights-based": "Human Rights Perspective",
        "policy-focused": "Policy Implementation",
        "alarmist": "Crisis Framing",
        "neutral-reporting": "Factual Reporting",
        "advocacy-oriented": "Opinion-Driven Coverage",
    },
    shift_indicators=(
        "however", "but", "despite", "although", "nevertheless",
        "on the other hand", "critics argue", "supporters claim",
    ),
)
