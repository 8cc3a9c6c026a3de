"""Pytest fixtures for todosql tests."""

import os
from pathlib import Path

import pytest

POSTGRES_TEST_URL_ENV = "TODOSQL_TEST_POSTGRES_URL"


@pytest.fixture(autouse=True)
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Point config at a temp dir and drop any store settings from the environment."""
    from todosql.config import clear_config_cache

    for key in ("TODOSQL_ENGINE", "TODOSQL_SQLITE_URL", "TODOSQL_POSTGRES_URL"):
        monkeypatch.delenv(key, raising=False)
    config_dir = tmp_path / "config"
    monkeypatch.setenv("TODOSQL_CONFIG_DIR", str(config_dir))
    clear_config_cache()

    yield config_dir

    clear_config_cache()


@pytest.fixture
def postgres_url() -> str:
    """URL of a scratch PostgreSQL database; skips when none is available."""
    url = os.environ.get(POSTGRES_TEST_URL_ENV)
    if not url:
        pytest.skip(f"{POSTGRES_TEST_URL_ENV} not set")
    return url


def drop_postgres_table(url: str) -> None:
    import psycopg2

    conn = psycopg2.connect(url)
    try:
        with conn.cursor() as cur:
            cur.execute("DROP TABLE IF EXISTS todos")
        conn.commit()
    finally:
        conn.close()


@pytest.fixture(params=["sqlite", "postgres"])
def backend(request, tmp_path: Path):
    """A freshly bootstrapped, empty store for each engine."""
    if request.param == "sqlite":
        from todosql.backends.sqlite import SqliteBackend

        db = SqliteBackend(tmp_path / "todos.db")
    else:
        from todosql.backends.postgres import PostgresBackend

        url = request.getfixturevalue("postgres_url")
        drop_postgres_table(url)
        db = PostgresBackend(url)

    db.create_table()
    yield db
    db.close()
