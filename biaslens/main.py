"""
BiasLens narrative pipeline - Main Entry Point.
FastAPI server and CLI interface.
"""

import argparse
import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .agents.bias_agent import BiasAgent
from .agents.orchestrator import NarrativePipeline
from .api import articles, health, narratives
from .config import Settings, get_settings
from .database import Database, get_database
from .errors import PipelineError
from .narratives import cluster_narratives

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S"
)
logger = logging.getLogger(__name__)

# Suppress noisy loggers
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)


def create_app(
    settings: Optional[Settings] = None,
    db: Optional[Database] = None,
    pipeline: Optional[NarrativePipeline] = None,
) -> FastAPI:
    """Build the API. Collaborators default to the configured singletons."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app_settings = settings or get_settings()
        database = db or get_database()
        database.create_tables()
        app.state.settings = app_settings
        app.state.db = database
        app.state.pipeline = pipeline or NarrativePipeline(settings=app_settings, db=database)
        logger.info(
            f"BiasLens API ready | mock_mode={app_settings.mock_mode} | "
            f"gnews_key={'set' if app_settings.gnews_api_key else 'missing'}"
        )
        yield

    app = FastAPI(
        title="BiasLens",
        description="News bias scoring and narrative clustering across outlets",
        version="1.0.0",
        lifespan=lifespan,
    )

    cors_settings = settings or get_settings()
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_settings.get_cors_origins(),
        allow_origin_regex=cors_settings.get_cors_origin_regex(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(PipelineError)
    async def pipeline_error_handler(request: Request, exc: PipelineError):
        logger.warning(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
        return JSONResponse(status_code=500, content={"error": "Internal server error"})

    app.include_router(articles.router, prefix="/api/articles", tags=["articles"])
    app.include_router(narratives.router, prefix="/api/narratives", tags=["narratives"])
    app.include_router(health.router, prefix="/api/health", tags=["health"])
    return app


app = create_app()


# CLI Runner
async def cli_main():
    """Command-line interface: ingest a topic, or start the API server."""
    parser = argparse.ArgumentParser(description="BiasLens narrative pipeline")
    parser.add_argument("--topic", help="Ingest and score articles for this topic")
    parser.add_argument("--sources", default="", help="Comma-separated source domains")
    parser.add_argument("--mock", action="store_true", help="Deterministic mock scorer (no LLM calls)")
    parser.add_argument("--server", action="store_true", help="Start the FastAPI server")
    parser.add_argument("--port", type=int, default=8000, help="Server port (default: 8000)")
    args = parser.parse_args()

    if args.server:
        import uvicorn
        logger.info(f"Starting server on port {args.port}...")
        config = uvicorn.Config(app, host="0.0.0.0", port=args.port)
        await uvicorn.Server(config).serve()
        return

    if not args.topic:
        parser.error("either --topic or --server is required")

    settings = get_settings()
    pipeline = NarrativePipeline(
        settings=settings,
        bias_agent=BiasAgent(settings=settings, mock_mode=args.mock),
    )
    sources = [s.strip() for s in args.sources.split(",") if s.strip()]
    try:
        result = await pipeline.ingest_topic(args.topic, sources)
    except PipelineError as e:
        logger.error(f"Ingestion failed: {e.message}")
        raise SystemExit(1)

    print("\n" + "=" * 60)
    print(f"TOPIC: {result.topic}")
    print("=" * 60)
    print(f"Articles: {result.fetched} | Enriched: {result.enriched} | Scored: {result.scored}")
    print(f"Status: {result.status_counts}")
    for cluster in cluster_narratives(pipeline.db.load_recent()):
        dist = cluster.bias_distribution
        print(f"  [{cluster.id}] {cluster.title} - {len(cluster.articles)} articles "
              f"(L{dist.left}/C{dist.center}/R{dist.right})")
    print(f"Runtime: {result.run_time_seconds:.2f}s")
    print("=" * 60 + "\n")


def main():
    """Entry point for CLI."""
    asyncio.run(cli_main())


if __name__ == "__main__":
    main()
