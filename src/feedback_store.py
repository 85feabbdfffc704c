"""Relational persistence for feedback records (SQLAlchemy Core).

The store owns two tables:

* ``feedback``: one row per submitted item, themes kept as JSON text.
* ``themes``: a best-effort running tally of theme names. It is never used
  for the dashboard, which recomputes theme frequency from ``feedback``.
"""
from __future__ import annotations

import datetime
import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy import (
    Column,
    DateTime,
    Float,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    create_engine,
    delete,
    func,
    insert,
    select,
    update,
)
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import StaticPool

from src.exceptions import FeedbackValidationError
from src.feedback_data import FeedbackRecord
from src.reporting.models import NULL_BUCKET

logger = logging.getLogger(__name__)

DEFAULT_AUTHOR = "Anonymous"

metadata = MetaData()

feedback_table = Table(
    "feedback",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("source", String(64), nullable=False),
    Column("source_id", String(255)),
    Column("author", String(255)),
    Column("content", Text, nullable=False),
    Column("sentiment", String(16)),
    Column("sentiment_score", Float),
    Column("urgency", String(16)),
    Column("themes", Text),
    Column("summary", Text),
    Column("analyzed_at", DateTime),
    Column("created_at", DateTime, nullable=False),
    Column("metadata", Text),
    Index("idx_feedback_source", "source"),
    Index("idx_feedback_sentiment", "sentiment"),
    Index("idx_feedback_urgency", "urgency"),
    Index("idx_feedback_created_at", "created_at"),
)

theme_tally_table = Table(
    "themes",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(255), unique=True, nullable=False),
    Column("count", Integer, nullable=False, default=1),
    Column("last_seen", DateTime, nullable=False),
    Index("idx_themes_count", "count"),
)

GROUPABLE_COLUMNS = ("source", "sentiment", "urgency")


@dataclass(frozen=True)
class FeedbackFilter:
    """Independent optional equality filters for listing feedback."""

    source: Optional[str] = None
    sentiment: Optional[str] = None
    urgency: Optional[str] = None

    def clauses(self) -> List[Any]:
        clauses = []
        for name in GROUPABLE_COLUMNS:
            value = getattr(self, name)
            if value:
                clauses.append(feedback_table.c[name] == value)
        return clauses


def _utcnow() -> datetime.datetime:
    # Stored naive: SQLite has no timezone support
    return datetime.datetime.now(datetime.timezone.utc).replace(tzinfo=None)


def _load_themes(raw: Optional[str]) -> List[str]:
    """Deserialize stored theme text; unreadable values become ``[]``."""
    if not raw:
        return []
    try:
        data = json.loads(raw)
    except (TypeError, ValueError):
        logger.debug("Unparseable themes value %r; treating as empty", raw)
        return []
    if not isinstance(data, list):
        return []
    return [str(item) for item in data]


def _row_to_record(row: Mapping[str, Any]) -> FeedbackRecord:
    return FeedbackRecord(
        id=row["id"],
        source=row["source"],
        source_id=row["source_id"],
        author=row["author"],
        content=row["content"],
        sentiment=row["sentiment"],
        sentiment_score=row["sentiment_score"],
        urgency=row["urgency"],
        themes=_load_themes(row["themes"]),
        summary=row["summary"],
        analyzed_at=row["analyzed_at"],
        created_at=row["created_at"],
        metadata=row["metadata"],
    )


def build_engine(url: str) -> Engine:
    """Create an engine appropriate for the database backend."""
    if url.startswith("sqlite"):
        kwargs: Dict[str, Any] = {"connect_args": {"check_same_thread": False}}
        if url in ("sqlite://", "sqlite:///:memory:"):
            # One shared connection, otherwise each checkout sees an empty DB
            kwargs["poolclass"] = StaticPool
        return create_engine(url, **kwargs)
    return create_engine(url, pool_pre_ping=True)


class FeedbackStore:
    """Append-mostly table of feedback records."""

    def __init__(self, engine: Engine):
        self._engine = engine

    @classmethod
    def from_url(cls, url: str) -> "FeedbackStore":
        return cls(build_engine(url))

    @property
    def engine(self) -> Engine:
        return self._engine

    def init_schema(self) -> None:
        """Create tables and indexes if they do not exist yet (idempotent)."""
        metadata.create_all(self._engine)
        logger.info("Feedback schema initialised")

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def insert(self, record: FeedbackRecord) -> int:
        """Persist *record* and return its generated id.

        ``created_at`` and ``analyzed_at`` are always assigned here; any
        value on *record* is ignored.

        Raises
        ------
        FeedbackValidationError
            If ``content`` or ``source`` is empty.
        """
        missing = [
            name
            for name in ("content", "source")
            if not (getattr(record, name) or "").strip()
        ]
        if missing:
            raise FeedbackValidationError(missing)

        now = _utcnow()
        with self._engine.begin() as conn:
            result = conn.execute(
                insert(feedback_table).values(
                    source=record.source,
                    source_id=record.source_id,
                    author=record.author or DEFAULT_AUTHOR,
                    content=record.content,
                    sentiment=record.sentiment,
                    sentiment_score=record.sentiment_score,
                    urgency=record.urgency,
                    themes=json.dumps(list(record.themes)),
                    summary=record.summary,
                    analyzed_at=now,
                    created_at=now,
                    metadata=record.metadata,
                )
            )
            new_id = int(result.inserted_primary_key[0])

        self._bump_theme_tally(record.themes, now)
        return new_id

    def _bump_theme_tally(self, themes: List[str], seen_at: datetime.datetime) -> None:
        """Update the theme tally; failures are logged and never propagate."""
        if not themes:
            return
        try:
            with self._engine.begin() as conn:
                for name in dict.fromkeys(themes):
                    self._upsert_theme(conn, name, seen_at)
        except SQLAlchemyError as exc:
            logger.warning("Theme tally update failed: %s", exc)

    @staticmethod
    def _upsert_theme(conn: Connection, name: str, seen_at: datetime.datetime) -> None:
        updated = conn.execute(
            update(theme_tally_table)
            .where(theme_tally_table.c.name == name)
            .values(count=theme_tally_table.c.count + 1, last_seen=seen_at)
        )
        if updated.rowcount == 0:
            conn.execute(
                insert(theme_tally_table).values(name=name, count=1, last_seen=seen_at)
            )

    def delete_all(self) -> None:
        """Remove every feedback record and the theme tally."""
        with self._engine.begin() as conn:
            conn.execute(delete(feedback_table))
            conn.execute(delete(theme_tally_table))

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def list(
        self,
        filters: Optional[FeedbackFilter] = None,
        *,
        limit: int = 50,
        offset: int = 0,
    ) -> List[FeedbackRecord]:
        """Return matching records, newest first."""
        stmt = select(feedback_table)
        for clause in (filters or FeedbackFilter()).clauses():
            stmt = stmt.where(clause)
        stmt = (
            stmt.order_by(feedback_table.c.created_at.desc(), feedback_table.c.id.desc())
            .limit(limit)
            .offset(offset)
        )
        with self._engine.connect() as conn:
            return [_row_to_record(row) for row in conn.execute(stmt).mappings()]

    def count(self, filters: Optional[FeedbackFilter] = None) -> int:
        """Return the number of records matching *filters*."""
        stmt = select(func.count()).select_from(feedback_table)
        for clause in (filters or FeedbackFilter()).clauses():
            stmt = stmt.where(clause)
        with self._engine.connect() as conn:
            return int(conn.execute(stmt).scalar_one())

    def count_by(self, dimension: str) -> Dict[str, int]:
        """Group-by count over ``source``, ``sentiment`` or ``urgency``."""
        if dimension not in GROUPABLE_COLUMNS:
            raise ValueError(f"Cannot group feedback by '{dimension}'")
        column = feedback_table.c[dimension]
        stmt = select(column, func.count()).group_by(column)
        with self._engine.connect() as conn:
            return {
                (NULL_BUCKET if value is None else value): int(count)
                for value, count in conn.execute(stmt)
            }

    def recent(self, n: int) -> List[FeedbackRecord]:
        """Return the *n* most recently created records."""
        return self.list(limit=n)

    def all_records(self) -> List[FeedbackRecord]:
        """Return every stored record in insertion order."""
        stmt = select(feedback_table).order_by(feedback_table.c.id)
        with self._engine.connect() as conn:
            return [_row_to_record(row) for row in conn.execute(stmt).mappings()]

    def theme_tally(self) -> Dict[str, int]:
        """Return the best-effort running theme counts, highest first."""
        stmt = select(theme_tally_table.c.name, theme_tally_table.c.count).order_by(
            theme_tally_table.c.count.desc(), theme_tally_table.c.id
        )
        with self._engine.connect() as conn:
            return {name: int(count) for name, count in conn.execute(stmt)}
