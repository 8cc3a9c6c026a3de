"""SQLite backend."""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from todosql.errors import ConfigurationError, StorageError, StoreConnectionError
from todosql.models import Todo

logger = logging.getLogger("todosql.sqlite")

MEMORY = ":memory:"


def parse_sqlite_url(url: str) -> str:
    """Turn a sqlite URL into a filename for sqlite3.connect.

    sqlite:todos.db      -> todos.db
    sqlite://todos.db    -> todos.db
    sqlite:///tmp/t.db   -> /tmp/t.db
    sqlite::memory:      -> :memory:

    The scheme is matched case-insensitively, as in engine selection.
    """
    if not url.lower().startswith("sqlite:"):
        raise ConfigurationError(f"Not a sqlite URL: {url}")
    target = url[len("sqlite:") :]
    if target.startswith("//"):
        target = target[2:]
    # Query options are not supported
    target = target.split("?", 1)[0]
    if not target:
        raise ConfigurationError(f"Missing database path in URL: {url}")
    return target


class SqliteBackend:
    """Embedded file store. One connection, owned for the backend's lifetime."""

    name = "sqlite"

    # AUTOINCREMENT keeps ids from being handed out again after a clear
    SCHEMA = """
        CREATE TABLE IF NOT EXISTS todos (
            id INTEGER PRIMARY KEY AUTOINCREMENT NOT NULL,
            description TEXT NOT NULL,
            done BOOLEAN NOT NULL DEFAULT 0
        )
    """

    def __init__(self, db_path: Path | str, timeout: float = 5.0):
        self._path = str(db_path)
        self._timeout = timeout
        self._conn: sqlite3.Connection | None = self._open()

    @classmethod
    def from_url(cls, url: str) -> SqliteBackend:
        return cls(parse_sqlite_url(url))

    @property
    def url(self) -> str:
        return f"sqlite:{self._path}"

    @property
    def storage_path(self) -> Path | None:
        if self._path == MEMORY:
            return None
        return Path(self._path)

    def __repr__(self) -> str:
        return f"<SqliteBackend {self._path}>"

    def close(self) -> None:
        """Close the database connection."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None
            logger.debug("Closed %s", self._path)

    def create_table(self) -> None:
        with self._connect() as conn:
            conn.execute(self.SCHEMA)

    def add_todo(self, description: str) -> int:
        with self._connect() as conn:
            cursor = conn.execute(
                "INSERT INTO todos (description) VALUES (?)",
                (description,),
            )
            todo_id = cursor.lastrowid
        logger.debug("Inserted todo %s", todo_id)
        return todo_id

    def complete_todo(self, id: int) -> bool:
        with self._connect() as conn:
            cursor = conn.execute("UPDATE todos SET done = 1 WHERE id = ?", (id,))
            matched = cursor.rowcount > 0
        return matched

    def clear_todos(self) -> None:
        with self._connect() as conn:
            cursor = conn.execute("DELETE FROM todos")
        logger.debug("Deleted %d todos", cursor.rowcount)

    def list_todos(self) -> list[Todo]:
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT id, description, done FROM todos ORDER BY id"
            ).fetchall()
        return [self._row_to_todo(row) for row in rows]

    def _open(self) -> sqlite3.Connection:
        try:
            if self._path != MEMORY:
                Path(self._path).parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(self._path, timeout=self._timeout)
            conn.execute(f"PRAGMA busy_timeout = {int(self._timeout * 1000)}")
        except (sqlite3.Error, OSError) as e:
            raise StoreConnectionError(f"Cannot open SQLite database {self._path}: {e}") from e
        logger.debug("Opened %s", self._path)
        return conn

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        """Yield the connection; commit on success, roll back on failure."""
        if self._conn is None:
            raise StorageError(f"SQLite database is closed: {self._path}")
        try:
            yield self._conn
            self._conn.commit()
        except (sqlite3.Error, OverflowError) as e:
            self._conn.rollback()
            raise StorageError(f"SQLite statement failed: {e}") from e
        except Exception:
            self._conn.rollback()
            raise

    @staticmethod
    def _row_to_todo(row: tuple) -> Todo:
        id, description, done = row
        return Todo(id=id, description=description, done=bool(done))
