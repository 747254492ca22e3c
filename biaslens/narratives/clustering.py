"""
Narrative clustering engine.

Groups scored articles by a derived (topic, framing) key and reports how
each narrative is covered across outlets.

TWO PASSES:
  1. FOLD:     one pass over articles builds an accumulator per cluster key
               (members, lean tally, stance phrases, sources, time span)
  2. FINALIZE: averages, representative article, then filter/rank/truncate

Clusters are recomputed from the current article set on every call; nothing
is cached or persisted here. The same input always yields the same ids,
membership and order.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Sequence

from ..schemas import (
    Article, BiasDistribution, BiasLean, BiasSnapshot, DIMENSIONS,
    DimensionAverages, FramingTimelineEntry, NarrativeCluster,
    NarrativeClusterDetail, SourceAnalysis, TimeSpan,
)
from ..shared.helpers import rounded_mean
from .framing import (
    cluster_key_for, detect_framing_shift, detect_framing_type,
    extract_topics, generate_cluster_id, generate_cluster_title,
)
from .vocabulary import DEFAULT_VOCABULARY, NarrativeVocabulary

logger = logging.getLogger(__name__)

MAX_CLUSTERS = 8
MIN_CLUSTER_ARTICLES = 2
LEFT_BELOW = 40
RIGHT_ABOVE = 60


def classify_lean(stance_score: int) -> BiasLean:
    if stance_score < LEFT_BELOW:
        return BiasLean.LEFT
    if stance_score > RIGHT_ABOVE:
        return BiasLean.RIGHT
    return BiasLean.CENTER


@dataclass
class _ClusterAccumulator:
    key: str
    topic: str
    framing_type: str
    members: List[Article] = field(default_factory=list)
    lean: Dict[str, int] = field(default_factory=lambda: {"left": 0, "center": 0, "right": 0})
    phrases: Dict[str, int] = field(default_factory=dict)
    sources: Dict[str, int] = field(default_factory=dict)
    earliest: Optional[datetime] = None
    latest: Optional[datetime] = None

    def add(self, article: Article) -> None:
        scores = article.bias_scores
        self.members.append(article)
        self.lean[classify_lean(scores.ideological_stance.score).value] += 1
        for phrase in scores.ideological_stance.highlighted_phrases:
            self.phrases[phrase] = self.phrases.get(phrase, 0) + 1
        self.sources[article.source] = self.sources.get(article.source, 0) + 1
        published = article.published_at
        if self.earliest is None or published < self.earliest:
            self.earliest = published
        if self.latest is None or published > self.latest:
            self.latest = published


def average_scores(articles: Sequence[Article]) -> DimensionAverages:
    """Half-up rounded mean score per dimension over scored articles."""
    scored = [a for a in articles if a.bias_scores is not None]
    return DimensionAverages(**{
        name: rounded_mean(a.bias_scores.dimension(name).score for a in scored)
        for name in DIMENSIONS
    })


def find_representative_article(articles: Sequence[Article], averages: DimensionAverages) -> Optional[Article]:
    """
    Member closest to the cluster averages by summed squared deviation.

    Strict less-than keeps the first-encountered article on ties.
    """
    best: Optional[Article] = articles[0] if articles else None
    best_distance = float("inf")
    for article in articles:
        if article.bias_scores is None:
            continue
        distance = 0
        for name in DIMENSIONS:
            diff = article.bias_scores.dimension(name).score - getattr(averages, name)
            distance += diff * diff
        if distance < best_distance:
            best_distance = distance
            best = article
    return best


def _finalize(acc: _ClusterAccumulator, vocabulary: NarrativeVocabulary) -> NarrativeCluster:
    cluster_id = generate_cluster_id(acc.key)
    members = [a.model_copy(update={"narrative_cluster": cluster_id}) for a in acc.members]
    averages = average_scores(members)
    return NarrativeCluster(
        id=cluster_id,
        topic=acc.topic,
        framing_type=acc.framing_type,
        title=generate_cluster_title(acc.topic, acc.framing_type, vocabulary),
        articles=members,
        representative_article=find_representative_article(members, averages),
        bias_distribution=BiasDistribution(**acc.lean),
        avg_scores=averages,
        common_phrases=dict(acc.phrases),
        source_count=dict(acc.sources),
        time_span=TimeSpan(earliest=acc.earliest, latest=acc.latest),
    )


def cluster_narratives(
    articles: Sequence[Article],
    vocabulary: NarrativeVocabulary = DEFAULT_VOCABULARY,
    max_clusters: int = MAX_CLUSTERS,
    min_articles: int = MIN_CLUSTER_ARTICLES,
) -> List[NarrativeCluster]:
    """
    Group scored articles into ranked narrative clusters.

    Unscored articles are skipped. Clusters with fewer than min_articles
    members are dropped; the rest are ranked by members × distinct sources
    (stable sort, so first-seen order breaks ties) and cut to max_clusters.
    """
    accumulators: Dict[str, _ClusterAccumulator] = {}
    skipped = 0
    for article in articles:
        if article.bias_scores is None:
            skipped += 1
            continue
        topic = extract_topics(article.text_for_matching, vocabulary)[0]
        framing = detect_framing_type(article, vocabulary)
        key = cluster_key_for(topic, framing)
        if key not in accumulators:
            accumulators[key] = _ClusterAccumulator(key=key, topic=topic, framing_type=framing)
        accumulators[key].add(article)

    clusters = [_finalize(acc, vocabulary) for acc in accumulators.values()]
    published = [c for c in clusters if len(c.articles) >= min_articles]
    published.sort(key=lambda c: c.relevance, reverse=True)

    logger.info(
        f"Clustered {len(articles) - skipped} scored articles into {len(clusters)} buckets, "
        f"{len(published)} with >= {min_articles} members (skipped {skipped} unscored)"
    )
    return published[:max_clusters]


def find_cluster(articles: Sequence[Article], cluster_id: str,
                 vocabulary: NarrativeVocabulary = DEFAULT_VOCABULARY) -> Optional[NarrativeCluster]:
    for cluster in cluster_narratives(articles, vocabulary):
        if cluster.id == cluster_id:
            return cluster
    return None


# ══════════════════════════════════════════════════════════════════════════════
# DETAIL VIEW
# ══════════════════════════════════════════════════════════════════════════════

def analyze_sources(articles: Sequence[Article]) -> Dict[str, SourceAnalysis]:
    """Per-outlet article count, score averages and distinct stance phrases."""
    by_source: Dict[str, List[Article]] = {}
    for article in articles:
        if article.bias_scores is None:
            continue
        by_source.setdefault(article.source, []).append(article)

    analysis: Dict[str, SourceAnalysis] = {}
    for source, members in by_source.items():
        phrases: List[str] = []
        for article in members:
            for phrase in article.bias_scores.ideological_stance.highlighted_phrases:
                if phrase not in phrases:
                    phrases.append(phrase)
        analysis[source] = SourceAnalysis(
            article_count=len(members),
            avg_bias_scores=average_scores(members),
            distinctive_phrases=phrases,
        )
    return analysis


def generate_framing_timeline(articles: Sequence[Article],
                              vocabulary: NarrativeVocabulary = DEFAULT_VOCABULARY) -> List[FramingTimelineEntry]:
    """Chronological entries with a score snapshot and pivot/consistent tag."""
    timeline = []
    for article in sorted(articles, key=lambda a: a.published_at):
        scores = article.bias_scores
        timeline.append(FramingTimelineEntry(
            timestamp=article.published_at,
            source=article.source,
            headline=article.headline,
            key_framing_shift=detect_framing_shift(article, vocabulary).value,
            bias_snapshot=BiasSnapshot(
                ideological=scores.ideological_stance.score,
                emotional=scores.emotional_tone.score,
            ) if scores else None,
        ))
    return timeline


def add_framing_analysis(cluster: NarrativeCluster,
                         vocabulary: NarrativeVocabulary = DEFAULT_VOCABULARY) -> NarrativeClusterDetail:
    """Cluster detail view: cross-source divergence plus framing timeline."""
    return NarrativeClusterDetail(
        **cluster.model_dump(exclude={"articles", "representative_article"}),
        articles=cluster.articles,
        representative_article=cluster.representative_article,
        source_analysis=analyze_sources(cluster.articles),
        framing_evolution=generate_framing_timeline(cluster.articles, vocabulary),
    )
