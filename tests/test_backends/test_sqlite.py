"""Tests for SQLite backend."""

import sqlite3
from pathlib import Path

import pytest

from todosql.backends.sqlite import SqliteBackend, parse_sqlite_url
from todosql.errors import ConfigurationError, StorageError, StoreConnectionError


class TestParseSqliteUrl:
    @pytest.mark.parametrize(
        "url,expected",
        [
            ("sqlite:todos.db", "todos.db"),
            ("sqlite://todos.db", "todos.db"),
            ("sqlite:///tmp/todos.db", "/tmp/todos.db"),
            ("sqlite::memory:", ":memory:"),
            ("sqlite:todos.db?mode=rwc", "todos.db"),
            ("SQLITE:todos.db", "todos.db"),
            ("Sqlite:///tmp/todos.db", "/tmp/todos.db"),
        ],
    )
    def test_valid(self, url, expected):
        assert parse_sqlite_url(url) == expected

    def test_wrong_scheme(self):
        with pytest.raises(ConfigurationError):
            parse_sqlite_url("postgres://localhost/todos")

    @pytest.mark.parametrize("url", ["sqlite:", "sqlite://", "sqlite:?mode=ro"])
    def test_missing_path(self, url):
        with pytest.raises(ConfigurationError, match="Missing database path"):
            parse_sqlite_url(url)


class TestSqliteBackendOpen:
    def test_creates_db_and_parent_dirs(self, tmp_path: Path):
        db_file = tmp_path / "nested" / "dir" / "todos.db"
        backend = SqliteBackend(db_file)
        backend.create_table()

        assert db_file.exists()
        assert backend.storage_path == db_file
        backend.close()

    def test_from_url(self, tmp_path: Path):
        db_file = tmp_path / "todos.db"
        backend = SqliteBackend.from_url(f"sqlite://{db_file}")

        assert backend.storage_path == db_file
        assert backend.url == f"sqlite:{db_file}"
        backend.close()

    def test_in_memory(self):
        backend = SqliteBackend.from_url("sqlite::memory:")
        backend.create_table()
        backend.add_todo("ephemeral")

        assert backend.storage_path is None
        assert len(backend.list_todos()) == 1
        backend.close()

    def test_unreachable_path_raises_connection_error(self, tmp_path: Path):
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("")

        with pytest.raises(StoreConnectionError):
            SqliteBackend(blocker / "todos.db")


class TestSqliteBackendSchema:
    def test_table_layout(self, tmp_path: Path):
        db_file = tmp_path / "todos.db"
        backend = SqliteBackend(db_file)
        backend.create_table()
        backend.close()

        conn = sqlite3.connect(db_file)
        columns = {row[1]: row for row in conn.execute("PRAGMA table_info(todos)")}
        conn.close()

        assert set(columns) == {"id", "description", "done"}
        # row: (cid, name, type, notnull, default, pk)
        assert columns["id"][5] == 1
        assert columns["description"][3] == 1
        assert columns["done"][4] == "0"

    def test_persists_across_connections(self, tmp_path: Path):
        db_file = tmp_path / "todos.db"
        first = SqliteBackend(db_file)
        first.create_table()
        todo_id = first.add_todo("survives")
        first.close()

        second = SqliteBackend(db_file)
        second.create_table()

        assert [t.id for t in second.list_todos()] == [todo_id]
        second.close()


class TestSqliteBackendErrors:
    def test_missing_table_raises_storage_error(self, tmp_path: Path):
        backend = SqliteBackend(tmp_path / "todos.db")

        with pytest.raises(StorageError) as exc_info:
            backend.list_todos()

        assert isinstance(exc_info.value.__cause__, sqlite3.OperationalError)
        backend.close()

    def test_constraint_violation_raises_storage_error(self, tmp_path: Path):
        backend = SqliteBackend(tmp_path / "todos.db")
        backend.create_table()

        with pytest.raises(StorageError):
            backend.add_todo(None)

        # Failed insert was rolled back and the connection is still usable
        assert backend.list_todos() == []
        backend.add_todo("after failure")
        assert len(backend.list_todos()) == 1
        backend.close()

    def test_out_of_range_id_raises_storage_error(self, tmp_path: Path):
        backend = SqliteBackend(tmp_path / "todos.db")
        backend.create_table()

        with pytest.raises(StorageError):
            backend.complete_todo(2**70)
        backend.close()
