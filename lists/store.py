"""
lists/store.py -- SQLAlchemy Core persistence layer for todo lists.

Uses SQLAlchemy Core (not ORM) so the TodoList dataclass in lists/models.py
remains the authoritative domain representation. Swapping SQLite for
PostgreSQL is a connection string change, not a rewrite.

Pattern: Repository + Data Mapper. ListStore is the repository;
_row_to_list is the mapper. Route handlers never touch SQL directly.

Security: all queries use bound parameters. No f-strings in SQL.

Usage:
    store = ListStore()                                # SQLite default
    store = ListStore("postgresql+psycopg://u:pw@host/db")
    todo = store.create_list("Groceries")
    store.update_list_by_id(todo.id, "Weekend groceries")
    store.delete_list_by_id(todo.id)
    store.close()
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path

from sqlalchemy import Column, Integer, MetaData, String, Table, Text, create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.pool import SingletonThreadPool

from lists.models import ListNotFoundError, TodoList

logger = logging.getLogger("htmxtodo.lists")

_DEFAULT_DB_URL = f"sqlite:///{Path(__file__).parent.parent / 'htmxtodo.db'}"

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

metadata = MetaData()

_lists = Table(
    "lists",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", Text, nullable=False),
    Column("created_at", String(32), nullable=False),
    Column("updated_at", String(32), nullable=False),
    # Never reuse ids: a stale card in another tab must not act on a newer list.
    sqlite_autoincrement=True,
)


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode for concurrent read safety.

    Set per-connection because SQLite PRAGMAs are not inherited by new
    connections from the pool.
    """
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class ListStore:
    """Repository for TodoList entities."""

    def __init__(self, db_url: str = _DEFAULT_DB_URL) -> None:
        connect_args: dict = {}
        if db_url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        engine_kwargs: dict = {"connect_args": connect_args}
        in_memory = ":memory:" in db_url or "mode=memory" in db_url
        if db_url.startswith("sqlite") and in_memory:
            # One connection per thread; the in-memory database lives as long
            # as a connection to it is open.
            engine_kwargs["poolclass"] = SingletonThreadPool
        self.engine: Engine = create_engine(db_url, **engine_kwargs)
        if db_url.startswith("sqlite") and not in_memory:
            event.listen(self.engine, "connect", _set_wal_mode)
        metadata.create_all(self.engine)

    def filter_lists(self) -> list[TodoList]:
        """Return every list ordered by name. Empty list when there are none."""
        with self.engine.connect() as conn:
            rows = conn.execute(_lists.select().order_by(_lists.c.name.asc(), _lists.c.id.asc())).fetchall()
        return [_row_to_list(r) for r in rows]

    def get_list_by_id(self, list_id: int) -> TodoList:
        """Look up a list by primary key. Raises ListNotFoundError if absent."""
        with self.engine.connect() as conn:
            row = conn.execute(_lists.select().where(_lists.c.id == list_id)).fetchone()
        if row is None:
            raise ListNotFoundError(list_id)
        return _row_to_list(row)

    def create_list(self, name: str) -> TodoList:
        """Insert a list and return it with its id and timestamps filled in."""
        now = _now_iso()
        with self.engine.begin() as conn:
            result = conn.execute(_lists.insert().values(name=name, created_at=now, updated_at=now))
            list_id = result.inserted_primary_key[0]
        return TodoList(id=list_id, name=name, created_at=now, updated_at=now)

    def update_list_by_id(self, list_id: int, name: str) -> TodoList:
        """Rename a list and bump updated_at. Raises ListNotFoundError if absent.

        The read-back happens inside the same transaction as the UPDATE so the
        returned record is exactly what was written.
        """
        with self.engine.begin() as conn:
            result = conn.execute(
                _lists.update().where(_lists.c.id == list_id).values(name=name, updated_at=_now_iso())
            )
            if result.rowcount == 0:
                raise ListNotFoundError(list_id)
            row = conn.execute(_lists.select().where(_lists.c.id == list_id)).fetchone()
        return _row_to_list(row)

    def delete_list_by_id(self, list_id: int) -> None:
        """Permanently delete a list. Raises ListNotFoundError if absent."""
        with self.engine.begin() as conn:
            result = conn.execute(_lists.delete().where(_lists.c.id == list_id))
        if result.rowcount == 0:
            raise ListNotFoundError(list_id)

    def ping(self) -> bool:
        """Return True if the database answers a trivial query."""
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except Exception:
            logger.warning("Database ping failed", exc_info=True)
            return False
        return True

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mapper
# ---------------------------------------------------------------------------


def _row_to_list(row) -> TodoList:
    return TodoList(
        id=row.id,
        name=row.name,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )
