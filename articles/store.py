"""
articles/store.py -- SQLAlchemy-backed persistence layer for articles.

Uses SQLAlchemy Core (not ORM) so the Article dataclass in articles/models.py
remains the authoritative domain representation. The store is a thin
pass-through: no caching, no custom indexing, no consistency logic beyond what
the database gives per statement.

Pattern: Repository + Data Mapper. ArticleStore is the repository;
_row_to_article is the mapper. Route handlers never touch SQL directly.

Security: all queries use bound parameters. No f-strings in SQL.

Ownership: update_article() and delete_article() take the caller's user id
and put it in the WHERE clause next to the article id. The route layer has
already checked existence and ownership (articles/permissions.py); the extra
predicate means a write can never land on someone else's article even if a
caller skips that check.

Usage:
    store = ArticleStore()
    article_id = store.create_article(Article(title="Hi", content="...", created_by=1))
    store.list_articles(tag="python", day=date(2024, 1, 1))
    store.update_article(article_id, owner_id=1, title="Hello")
    store.close()
"""

import json
from datetime import date, datetime, time, timedelta, timezone
from typing import Callable, Optional

from sqlalchemy import Column, Integer, MetaData, String, Table, Text, create_engine, event, text
from sqlalchemy.engine import Engine

from articles.models import Article
from core.config import get_settings

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

metadata = MetaData()

_articles = Table(
    "articles",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("title", String(255), nullable=False),
    Column("content", Text, nullable=False),
    Column("author", String(255), nullable=False, server_default="Anonymous"),
    Column("tags", Text),  # JSON array serialized as text
    Column("created_by", Integer, nullable=False, index=True),
    Column("created_at", String(32), nullable=False, index=True),
    Column("updated_at", String(32), nullable=False),
)

# Columns a caller may change through update_article(). created_by is
# deliberately absent: the creator reference is immutable.
_UPDATABLE_FIELDS: frozenset[str] = frozenset({"title", "content", "author", "tags"})


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _iso(dt: datetime) -> str:
    # Fixed-width timestamps so string comparison in SQL orders correctly.
    return dt.astimezone(timezone.utc).isoformat(timespec="microseconds")


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


def normalize_tags(values: Optional[list]) -> list[str]:
    """Strip, drop empties and deduplicate tags while preserving first-seen order."""
    seen: set[str] = set()
    result: list[str] = []
    for v in values or []:
        tag = str(v).strip()
        if tag and tag not in seen:
            seen.add(tag)
            result.append(tag)
    return result


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class ArticleStore:
    """Repository for Article entities.

    clock is injectable so tests can place articles on specific days.
    """

    def __init__(self, db_url: Optional[str] = None, clock: Optional[Callable[[], datetime]] = None) -> None:
        db_url = db_url or get_settings().database_url
        connect_args: dict = {}
        if db_url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        self.engine: Engine = create_engine(db_url, connect_args=connect_args)
        if db_url.startswith("sqlite"):
            event.listen(self.engine, "connect", _set_wal_mode)
        metadata.create_all(self.engine)
        self._clock = clock or _utcnow

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create_article(self, article: Article) -> int:
        """Insert a new article and return its ID. Timestamps come from the store clock."""
        now = _iso(self._clock())
        with self.engine.connect() as conn:
            result = conn.execute(
                _articles.insert().values(
                    title=article.title,
                    content=article.content,
                    author=article.author,
                    tags=json.dumps(normalize_tags(article.tags)),
                    created_by=article.created_by,
                    created_at=now,
                    updated_at=now,
                )
            )
            conn.commit()
            return result.inserted_primary_key[0]

    def update_article(self, article_id: int, owner_id: int, **fields) -> bool:
        """Update mutable fields on an article owned by owner_id.

        Accepted fields: title, content, author, tags. Unknown keys (including
        created_by) raise ValueError rather than being silently dropped.

        Returns True if a row was updated, False if no article with that id
        belongs to owner_id.
        """
        unknown = set(fields) - _UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update article fields: {sorted(unknown)!r}")
        values = dict(fields)
        if "tags" in values:
            values["tags"] = json.dumps(normalize_tags(values["tags"]))
        values["updated_at"] = _iso(self._clock())
        with self.engine.connect() as conn:
            result = conn.execute(
                _articles.update()
                .where((_articles.c.id == article_id) & (_articles.c.created_by == owner_id))
                .values(**values)
            )
            conn.commit()
        return result.rowcount > 0

    def delete_article(self, article_id: int, owner_id: int) -> bool:
        """Delete an article owned by owner_id. Returns False if not found or wrong owner."""
        with self.engine.connect() as conn:
            result = conn.execute(
                _articles.delete().where((_articles.c.id == article_id) & (_articles.c.created_by == owner_id))
            )
            conn.commit()
        return result.rowcount > 0

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_article(self, article_id: int) -> Optional[Article]:
        with self.engine.connect() as conn:
            row = conn.execute(_articles.select().where(_articles.c.id == article_id)).fetchone()
        return _row_to_article(row) if row is not None else None

    def list_articles(self, tag: Optional[str] = None, day: Optional[date] = None) -> list[Article]:
        """Return articles newest first, optionally filtered.

        tag -- keep only articles whose tag set contains this exact tag.
        day -- keep only articles created on this UTC calendar day.
        """
        query = _articles.select()
        if day is not None:
            start = datetime.combine(day, time.min, tzinfo=timezone.utc)
            query = query.where(
                (_articles.c.created_at >= _iso(start)) & (_articles.c.created_at < _iso(start + timedelta(days=1)))
            )
        query = query.order_by(_articles.c.created_at.desc(), _articles.c.id.desc())
        with self.engine.connect() as conn:
            rows = conn.execute(query).fetchall()
        articles = [_row_to_article(r) for r in rows]
        if tag is not None:
            # Tags are a JSON text column, so membership is checked after decoding.
            articles = [a for a in articles if tag in a.tags]
        return articles

    def count_articles(self) -> int:
        with self.engine.connect() as conn:
            result = conn.execute(text("SELECT COUNT(*) FROM articles")).scalar()
        return result or 0

    def ping(self) -> bool:
        with self.engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mapper (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_article(row) -> Article:
    return Article(
        id=row.id,
        title=row.title,
        content=row.content,
        author=row.author,
        tags=json.loads(row.tags) if row.tags else [],
        created_by=row.created_by,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )
