"""
SQLite database: stores ingested articles and their bias profiles.

Tables:
  - articles: One row per canonical URL (id = md5(url)[:12]), upserted on
    every ingestion or re-score. Bias profile and primary sources are kept
    as JSON text.

Narrative clusters are never stored; they are recomputed from load_recent().
"""

import json
import logging
import os
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence

from sqlalchemy import create_engine, Column, String, Text, DateTime, func, or_
from sqlalchemy.orm import declarative_base, sessionmaker, Session

from .config import get_settings
from .schemas import Article, BiasScores

logger = logging.getLogger(__name__)

Base = declarative_base()

UNANALYZED_STATUS = "unanalyzed"


# ── Models ───────────────────────────────────────────────────────────────────

class ArticleModel(Base):
    """Article row. bias_scores is NULL until the article has been scored."""
    __tablename__ = "articles"

    id = Column(String(64), primary_key=True)
    headline = Column(Text, nullable=False)
    content = Column(Text, default="")
    description = Column(Text, default="")
    source = Column(String(300), nullable=False, index=True)
    author = Column(String(300), default="Unknown")
    published_at = Column(DateTime, index=True)
    url = Column(String(2000), index=True)
    image_url = Column(String(2000), default="")
    bias_scores = Column(Text)  # JSON object
    analysis_status = Column(String(30), default=UNANALYZED_STATUS, index=True)
    narrative_cluster = Column(String(50))
    primary_sources = Column(Text, default="[]")  # JSON array
    created_at = Column(DateTime, default=datetime.utcnow)


def _to_utc_naive(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def _row_to_article(row: ArticleModel) -> Article:
    published = row.published_at or row.created_at or datetime.utcnow()
    scores = BiasScores.model_validate_json(row.bias_scores) if row.bias_scores else None
    return Article(
        id=row.id,
        headline=row.headline,
        content=row.content or "",
        description=row.description or "",
        source=row.source,
        author=row.author or "Unknown",
        published_at=published.replace(tzinfo=timezone.utc),
        url=row.url or "",
        image_url=row.image_url or "",
        bias_scores=scores,
        narrative_cluster=row.narrative_cluster,
        primary_sources=json.loads(row.primary_sources) if row.primary_sources else [],
    )


def _article_to_row(article: Article) -> ArticleModel:
    scores = article.bias_scores
    return ArticleModel(
        id=article.id,
        headline=article.headline,
        content=article.content,
        description=article.description,
        source=article.source,
        author=article.author,
        published_at=_to_utc_naive(article.published_at),
        url=article.url,
        image_url=article.image_url,
        bias_scores=scores.model_dump_json() if scores else None,
        analysis_status=scores.analysis_status.value if scores else UNANALYZED_STATUS,
        narrative_cluster=article.narrative_cluster,
        primary_sources=json.dumps(article.primary_sources),
    )


def _ensure_sqlite_dir(url: str) -> None:
    """Create the parent directory of a file-backed SQLite database."""
    prefix = "sqlite:///"
    if not url.startswith(prefix) or url.endswith(":memory:"):
        return
    directory = os.path.dirname(url[len(prefix):])
    if directory:
        os.makedirs(directory, exist_ok=True)


# ── Database class ───────────────────────────────────────────────────────────

class Database:
    """Database manager: singleton via get_database(), or one per test."""

    def __init__(self, database_url: Optional[str] = None):
        settings = get_settings()
        url = database_url or settings.database_url
        if "aiosqlite" in url:
            url = url.replace("sqlite+aiosqlite", "sqlite")
        _ensure_sqlite_dir(url)

        self.engine = create_engine(url, echo=False)
        self.SessionLocal = sessionmaker(bind=self.engine)

    def create_tables(self):
        """Create all tables (safe to call multiple times)."""
        Base.metadata.create_all(self.engine)

    @contextmanager
    def get_session(self) -> Session:
        session = self.SessionLocal()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    # ── Articles ──────────────────────────────────────────────────────

    def save_articles(self, articles: Sequence[Article]) -> int:
        """Upsert articles by id. Re-saving an article replaces its row."""
        with self.get_session() as session:
            for article in articles:
                session.merge(_article_to_row(article))  # merge = upsert
        logger.debug(f"Saved {len(articles)} articles")
        return len(articles)

    def load_recent(self, limit: int = 100) -> List[Article]:
        """Most recently published articles, newest first."""
        with self.get_session() as session:
            rows = session.query(ArticleModel).order_by(
                ArticleModel.published_at.desc()
            ).limit(limit).all()
            return [_row_to_article(r) for r in rows]

    def get_by_id(self, article_id: str) -> Optional[Article]:
        with self.get_session() as session:
            row = session.get(ArticleModel, article_id)
            return _row_to_article(row) if row else None

    def search(
        self,
        topic: Optional[str] = None,
        source: Optional[str] = None,
        limit: int = 10,
    ) -> List[Article]:
        """Substring search on headline/content (topic) and source name."""
        with self.get_session() as session:
            query = session.query(ArticleModel)
            if topic:
                pattern = f"%{topic}%"
                query = query.filter(or_(
                    ArticleModel.headline.like(pattern),
                    ArticleModel.content.like(pattern),
                ))
            if source:
                query = query.filter(ArticleModel.source.like(f"%{source}%"))
            rows = query.order_by(ArticleModel.published_at.desc()).limit(limit).all()
            return [_row_to_article(r) for r in rows]

    def analysis_status_summary(self) -> Dict[str, int]:
        """Article count per analysis status (ai, fallback-*, unanalyzed)."""
        with self.get_session() as session:
            rows = session.query(
                ArticleModel.analysis_status, func.count(ArticleModel.id)
            ).group_by(ArticleModel.analysis_status).all()
            return {status or UNANALYZED_STATUS: count for status, count in rows}


# ── Singleton ────────────────────────────────────────────────────────────────

_db: Optional[Database] = None


def get_database() -> Database:
    """Get or create database instance."""
    global _db
    if _db is None:
        _db = Database()
        _db.create_tables()
    return _db
