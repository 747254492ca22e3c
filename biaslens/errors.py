"""
Batch-level errors surfaced to API clients.

Per-article scoring problems never raise; they become fallback tiers on the
article's BiasScores. Only request preconditions and upstream search
failures are reported through these.
"""

from typing import Any, Dict, Optional


class PipelineError(Exception):
    """Base class for user-visible pipeline failures."""
    status_code: int = 500

    def __init__(self, message: str, **context: Any):
        super().__init__(message)
        self.message = message
        self.context = context

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.message, **self.context}


class InvalidTopicError(PipelineError):
    status_code = 400


class NoArticlesFoundError(PipelineError):
    status_code = 404


class InsufficientContentError(PipelineError):
    status_code = 400


class ArticleNotFoundError(PipelineError):
    status_code = 404

    def __init__(self, article_id: Optional[str] = None):
        super().__init__("Article not found")
        self.article_id = article_id


class ClusterNotFoundError(PipelineError):
    status_code = 404

    def __init__(self, cluster_id: Optional[str] = None):
        super().__init__("Narrative cluster not found")
        self.cluster_id = cluster_id


class NewsSearchError(PipelineError):
    """News search API unreachable, rejected the request, or returned garbage."""
    status_code = 502
