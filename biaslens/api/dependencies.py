"""FastAPI dependency injection -- Depends() patterns using app.state from lifespan."""

from typing import Annotated

from fastapi import Depends, Request

from biaslens.agents.orchestrator import NarrativePipeline
from biaslens.config import Settings
from biaslens.database import Database


def get_db(request: Request) -> Database:
    return request.app.state.db


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_pipeline(request: Request) -> NarrativePipeline:
    return request.app.state.pipeline


# Type aliases for cleaner route signatures
DB = Annotated[Database, Depends(get_db)]
AppSettings = Annotated[Settings, Depends(get_app_settings)]
Pipeline = Annotated[NarrativePipeline, Depends(get_pipeline)]
