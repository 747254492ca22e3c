"""
Narrative clustering: (topic, framing) grouping over scored articles.

- vocabulary.py: keyword vocabulary and framing rule cascade (data)
- framing.py: per-article topic/framing detection and cluster ids
- clustering.py: two-pass clustering, detail view, framing timeline
"""

from biaslens.narratives.clustering import (
    add_framing_analysis,
    cluster_narratives,
    find_cluster,
    find_representative_article,
    generate_framing_timeline,
)
from biaslens.narratives.framing import (
    detect_framing_shift,
    detect_framing_type,
    extract_topics,
    generate_cluster_id,
    generate_cluster_title,
)
from biaslens.narratives.vocabulary import DEFAULT_VOCABULARY, FramingRule, NarrativeVocabulary

__all__ = [
    "add_framing_analysis", "cluster_narratives", "find_cluster",
    "find_representative_article", "generate_framing_timeline",
    "detect_framing_shift", "detect_framing_type", "extract_topics",
    "generate_cluster_id", "generate_cluster_title",
    "DEFAULT_VOCABULARY", "FramingRule", "NarrativeVocabulary",
]
