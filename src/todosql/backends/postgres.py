"""PostgreSQL backend."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager

import psycopg2
from psycopg2.pool import SimpleConnectionPool

from todosql.backends.utils import mask_url
from todosql.errors import StorageError, StoreConnectionError
from todosql.models import Todo

logger = logging.getLogger("todosql.postgres")


class PostgresBackend:
    """Networked store reached through a small connection pool."""

    name = "postgres"

    SCHEMA = """
        CREATE TABLE IF NOT EXISTS todos (
            id BIGSERIAL PRIMARY KEY,
            description TEXT NOT NULL,
            done BOOLEAN NOT NULL DEFAULT FALSE
        )
    """

    def __init__(self, dsn: str, minconn: int = 1, maxconn: int = 1):
        self._dsn = dsn
        try:
            self._pool: SimpleConnectionPool | None = SimpleConnectionPool(
                minconn, maxconn, dsn=dsn
            )
        except psycopg2.Error as e:
            raise StoreConnectionError(
                f"Cannot connect to PostgreSQL at {mask_url(dsn)}: {e}"
            ) from e
        logger.debug("Connected to %s", mask_url(dsn))

    @classmethod
    def from_url(cls, url: str) -> PostgresBackend:
        return cls(url)

    @property
    def url(self) -> str:
        return mask_url(self._dsn)

    def __repr__(self) -> str:
        return f"<PostgresBackend {self.url}>"

    def close(self) -> None:
        """Close every pooled connection."""
        if self._pool is not None:
            self._pool.closeall()
            self._pool = None
            logger.debug("Closed pool for %s", self.url)

    def create_table(self) -> None:
        with self._cursor() as cur:
            cur.execute(self.SCHEMA)

    def add_todo(self, description: str) -> int:
        with self._cursor() as cur:
            cur.execute(
                "INSERT INTO todos (description) VALUES (%s) RETURNING id",
                (description,),
            )
            (todo_id,) = cur.fetchone()
        logger.debug("Inserted todo %s", todo_id)
        return todo_id

    def complete_todo(self, id: int) -> bool:
        with self._cursor() as cur:
            cur.execute("UPDATE todos SET done = TRUE WHERE id = %s", (id,))
            matched = cur.rowcount > 0
        return matched

    def clear_todos(self) -> None:
        with self._cursor() as cur:
            cur.execute("DELETE FROM todos")
            logger.debug("Deleted %d todos", cur.rowcount)

    def list_todos(self) -> list[Todo]:
        with self._cursor() as cur:
            cur.execute("SELECT id, description, done FROM todos ORDER BY id")
            rows = cur.fetchall()
        return [
            Todo(id=id, description=description, done=bool(done))
            for id, description, done in rows
        ]

    @contextmanager
    def _cursor(self) -> Iterator:
        """Borrow a pooled connection and yield a cursor in its own transaction."""
        if self._pool is None:
            raise StorageError(f"PostgreSQL pool is closed: {self.url}")
        try:
            conn = self._pool.getconn()
        except psycopg2.Error as e:
            raise StorageError(f"No PostgreSQL connection available: {e}") from e
        try:
            with conn.cursor() as cur:
                yield cur
            conn.commit()
        except psycopg2.Error as e:
            self._rollback(conn)
            raise StorageError(f"PostgreSQL statement failed: {e}") from e
        except Exception:
            self._rollback(conn)
            raise
        finally:
            self._pool.putconn(conn)

    @staticmethod
    def _rollback(conn) -> None:
        try:
            conn.rollback()
        except psycopg2.Error as e:
            # Broken connections cannot roll back; the pool discards them on putconn
            logger.warning("Rollback failed: %s", e)
