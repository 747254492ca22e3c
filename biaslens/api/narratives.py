"""Narratives API router -- clusters recomputed from stored articles per request."""

from datetime import datetime, timezone

from fastapi import APIRouter

from biaslens.api.dependencies import DB
from biaslens.api.schemas import NarrativeListResponse
from biaslens.errors import ClusterNotFoundError
from biaslens.narratives import add_framing_analysis, cluster_narratives, find_cluster
from biaslens.schemas import NarrativeClusterDetail

router = APIRouter()


@router.get("", response_model=NarrativeListResponse)
async def list_narratives(db: DB):
    articles = db.load_recent()
    return NarrativeListResponse(
        clusters=cluster_narratives(articles),
        total_articles=len(articles),
        timestamp=datetime.now(timezone.utc),
    )


@router.get("/{cluster_id}", response_model=NarrativeClusterDetail)
async def get_narrative(cluster_id: str, db: DB):
    cluster = find_cluster(db.load_recent(), cluster_id)
    if cluster is None:
        raise ClusterNotFoundError(cluster_id)
    return add_framing_analysis(cluster)
