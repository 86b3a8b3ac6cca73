# =============================================================================
# lib/sync/local_store.py - Local Outbox Database
# =============================================================================
# SQLAlchemy-backed storage for changes captured while offline.
#
# Tables:
# - changes_outbox: one row per pending/synced change
# - schema_migrations: names of migrations already applied
#
# SQLite is the default (LOCAL_DATABASE_URL); any SQLAlchemy URL works.
#
# Usage:
#   store = get_local_store()
#   store.record(create_outbox_entry("jobs", "UPDATE", job_id, new_values={...}))
#   pending = store.get_pending(limit=100)
# =============================================================================

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Callable, Generator

from sqlalchemy import JSON, Engine, String, create_engine, func, select, delete, update, inspect
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column, sessionmaker

from app.config import settings
from lib.sync.outbox import ChangeOperation, OutboxEntry
from lib.utils import utc_now

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Declarative base for the local store."""

    pass


class OutboxRecord(Base):
    """ORM row for changes_outbox."""

    __tablename__ = "changes_outbox"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    table_name: Mapped[str] = mapped_column(String(64), nullable=False)
    operation: Mapped[str] = mapped_column(String(8), nullable=False)
    record_id: Mapped[str] = mapped_column(String(64), nullable=False)
    old_values: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    new_values: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    created_at: Mapped[datetime] = mapped_column(nullable=False, default=utc_now)
    synced_at: Mapped[datetime | None] = mapped_column(nullable=True, index=True)
    sync_attempts: Mapped[int] = mapped_column(nullable=False, default=0)
    error: Mapped[str | None] = mapped_column(nullable=True)

    def to_entry(self) -> OutboxEntry:
        return OutboxEntry(
            id=self.id,
            table_name=self.table_name,
            operation=ChangeOperation(self.operation),
            record_id=self.record_id,
            old_values=self.old_values,
            new_values=self.new_values,
            created_at=self.created_at,
            synced_at=self.synced_at,
            sync_attempts=self.sync_attempts,
            error=self.error,
        )


class SchemaMigration(Base):
    """ORM row for schema_migrations."""

    __tablename__ = "schema_migrations"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    applied_at: Mapped[datetime] = mapped_column(nullable=False, default=utc_now)


# =============================================================================
# Migrations
# =============================================================================

Migration = Callable[[Engine], None]


def _initial_schema(engine: Engine) -> None:
    OutboxRecord.__table__.create(bind=engine, checkfirst=True)


MIGRATIONS: list[tuple[str, Migration]] = [
    ("001_initial_schema", _initial_schema),
]


def add_migration(name: str, migration: Migration) -> None:
    """Register a migration to run after the built-in ones."""
    if any(existing == name for existing, _ in MIGRATIONS):
        raise ValueError(f"Migration already registered: {name}")
    MIGRATIONS.append((name, migration))


def run_migrations(engine: Engine) -> list[str]:
    """
    Apply every registered migration that has not run yet, in order.

    Returns:
        Names of the migrations applied by this call
    """
    SchemaMigration.__table__.create(bind=engine, checkfirst=True)

    with Session(engine) as session:
        applied = set(session.scalars(select(SchemaMigration.name)))

    newly_applied = []
    for name, migration in MIGRATIONS:
        if name in applied:
            continue
        logger.info(f"Applying local migration {name}")
        migration(engine)
        with Session(engine) as session:
            session.add(SchemaMigration(name=name))
            session.commit()
        newly_applied.append(name)

    return newly_applied


# =============================================================================
# Store
# =============================================================================

def _create_engine(url: str) -> Engine:
    """Create engine with check_same_thread=False so the poller thread can share it."""
    if url.startswith("sqlite"):
        return create_engine(url, echo=False, connect_args={"check_same_thread": False})
    return create_engine(url, echo=False)


class LocalOutboxStore:
    """
    CRUD over changes_outbox.

    Construct with an engine for tests (e.g. in-memory SQLite); otherwise
    use get_local_store().
    """

    def __init__(self, engine: Engine):
        self.engine = engine
        run_migrations(engine)
        self._session_factory = sessionmaker(bind=engine, autocommit=False, autoflush=False)

    @contextmanager
    def session(self) -> Generator[Session, None, None]:
        """Yield a session that commits on success and rolls back on error."""
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def record(self, entry: OutboxEntry) -> OutboxEntry:
        """Persist a newly captured change."""
        with self.session() as session:
            session.add(OutboxRecord(
                id=entry.id,
                table_name=entry.table_name,
                operation=entry.operation.value,
                record_id=entry.record_id,
                old_values=entry.old_values,
                new_values=entry.new_values,
                created_at=entry.created_at,
                synced_at=entry.synced_at,
                sync_attempts=entry.sync_attempts,
                error=entry.error,
            ))
        logger.debug(f"Recorded outbox change {entry.operation.value} {entry.table_name}/{entry.record_id}")
        return entry

    def get_pending(self, limit: int = 100) -> list[OutboxEntry]:
        """Unsynced changes, oldest first."""
        with self.session() as session:
            rows = session.scalars(
                select(OutboxRecord)
                .where(OutboxRecord.synced_at.is_(None))
                .order_by(OutboxRecord.created_at.asc())
                .limit(limit)
            ).all()
            return [row.to_entry() for row in rows]

    def get_retryable(self, max_attempts: int, limit: int = 100) -> list[OutboxEntry]:
        """Unsynced changes with fewer than max_attempts tries, least-tried first."""
        with self.session() as session:
            rows = session.scalars(
                select(OutboxRecord)
                .where(OutboxRecord.synced_at.is_(None))
                .where(OutboxRecord.sync_attempts < max_attempts)
                .order_by(OutboxRecord.sync_attempts.asc(), OutboxRecord.created_at.asc())
                .limit(limit)
            ).all()
            return [row.to_entry() for row in rows]

    def mark_synced(self, change_ids: list[str]) -> None:
        if not change_ids:
            return
        with self.session() as session:
            session.execute(
                update(OutboxRecord)
                .where(OutboxRecord.id.in_(change_ids))
                .values(synced_at=utc_now(), error=None)
            )

    def increment_attempts(self, change_ids: list[str], error: str | None = None) -> None:
        if not change_ids:
            return
        with self.session() as session:
            session.execute(
                update(OutboxRecord)
                .where(OutboxRecord.id.in_(change_ids))
                .values(sync_attempts=OutboxRecord.sync_attempts + 1, error=error)
            )

    def count_pending(self) -> int:
        with self.session() as session:
            return session.scalar(
                select(func.count()).select_from(OutboxRecord).where(OutboxRecord.synced_at.is_(None))
            ) or 0

    def count_failed(self) -> int:
        """Unsynced changes that have been tried at least once."""
        with self.session() as session:
            return session.scalar(
                select(func.count())
                .select_from(OutboxRecord)
                .where(OutboxRecord.synced_at.is_(None))
                .where(OutboxRecord.sync_attempts > 0)
            ) or 0

    def count_all(self) -> int:
        with self.session() as session:
            return session.scalar(select(func.count()).select_from(OutboxRecord)) or 0

    def last_synced_at(self) -> datetime | None:
        with self.session() as session:
            return session.scalar(select(func.max(OutboxRecord.synced_at)))

    def clear_synced(self) -> int:
        """Delete acknowledged changes. Returns the number removed."""
        with self.session() as session:
            result = session.execute(delete(OutboxRecord).where(OutboxRecord.synced_at.is_not(None)))
            removed = result.rowcount or 0
        logger.info(f"Cleared {removed} synced outbox changes")
        return removed

    def has_table(self, name: str) -> bool:
        return inspect(self.engine).has_table(name)


_init_lock = threading.Lock()
_store: LocalOutboxStore | None = None


def get_local_store() -> LocalOutboxStore:
    """Process-wide store bound to LOCAL_DATABASE_URL, created on first use."""
    global _store
    with _init_lock:
        if _store is None:
            _store = LocalOutboxStore(_create_engine(settings.LOCAL_DATABASE_URL))
        return _store
