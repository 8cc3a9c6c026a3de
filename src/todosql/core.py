"""Core todo service and engine selection."""

from __future__ import annotations

import importlib
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from rich.console import Console

from todosql.backends.utils import mask_url
from todosql.commands import Add, Clear, Command, Done
from todosql.errors import ConfigurationError
from todosql.formatters import TxtFormatter

if TYPE_CHECKING:
    from todosql.backends.base import TodoBackend
    from todosql.config import Config
    from todosql.models import Todo

logger = logging.getLogger("todosql.core")

# Maps engine name -> backend class (or "module.path:ClassName" for lazy loading)
_backend_registry: dict[str, type | str] = {
    "sqlite": "todosql.backends.sqlite:SqliteBackend",
    "postgres": "todosql.backends.postgres:PostgresBackend",
}

# URL prefixes that select each engine
ENGINE_SCHEMES: dict[str, tuple[str, ...]] = {
    "sqlite": ("sqlite:",),
    "postgres": ("postgres://", "postgresql://"),
}


def _resolve_backend_class(backend_ref: str | type) -> type:
    """Resolve backend reference to actual class (lazy import)."""
    if isinstance(backend_ref, type):
        return backend_ref
    module_path, class_name = backend_ref.rsplit(":", 1)
    module = importlib.import_module(module_path)
    return getattr(module, class_name)


def engine_for_url(url: str) -> str | None:
    """Return the engine whose scheme the URL carries, or None."""
    lowered = url.strip().lower()
    for engine, prefixes in ENGINE_SCHEMES.items():
        if lowered.startswith(prefixes):
            return engine
    return None


@dataclass(frozen=True)
class StoreSelection:
    """The single store a run operates on."""

    engine: str
    url: str


def select_store(
    config: Config,
    engine: str | None = None,
    sqlite_url: str | None = None,
    postgres_url: str | None = None,
) -> StoreSelection:
    """Pick exactly one store from CLI values, falling back to config.

    An explicit engine must have a URL with its own scheme. Otherwise the
    first configured URL with a supported scheme wins (SQLite checked first).
    With nothing configured, SQLite in the config directory is used.
    """
    engine = (engine if engine is not None else config.engine or "").strip().lower()
    sqlite_url = (sqlite_url if sqlite_url is not None else config.sqlite_url or "").strip()
    postgres_url = (
        postgres_url if postgres_url is not None else config.postgres_url or ""
    ).strip()
    default_sqlite = f"sqlite:{config.default_sqlite_path}"

    if engine:
        if engine not in ENGINE_SCHEMES:
            available = ", ".join(ENGINE_SCHEMES)
            raise ConfigurationError(f"Unknown engine: {engine}. Available: {available}")
        url = sqlite_url if engine == "sqlite" else postgres_url
        if not url and engine == "sqlite":
            url = default_sqlite
        if not url:
            raise ConfigurationError(f"Engine '{engine}' selected but no {engine} URL configured")
        if engine_for_url(url) != engine:
            raise ConfigurationError(
                f"Unsupported store URL for engine '{engine}': {mask_url(url)}"
            )
        return StoreSelection(engine, url)

    configured = [url for url in (sqlite_url, postgres_url) if url]
    if not configured:
        return StoreSelection("sqlite", default_sqlite)

    matches = [StoreSelection(e, url) for url in configured if (e := engine_for_url(url))]
    if not matches:
        supported = ", ".join(p for prefixes in ENGINE_SCHEMES.values() for p in prefixes)
        raise ConfigurationError(
            f"Unsupported store: no configured URL starts with one of {supported}"
        )
    for ignored in matches[1:]:
        logger.warning(
            "Both stores configured; using %s and ignoring %s",
            mask_url(matches[0].url),
            mask_url(ignored.url),
        )
    return matches[0]


def open_backend(selection: StoreSelection) -> TodoBackend:
    """Connect to the selected store. Raises StoreConnectionError if unreachable."""
    cls = _resolve_backend_class(_backend_registry[selection.engine])
    logger.debug("Opening %s store %s", selection.engine, mask_url(selection.url))
    return cls.from_url(selection.url)


class TodoService:
    """Dispatcher - runs one command against a backend and prints the outcome.

    The backend's table must exist before handle() is called; the CLI runs
    bootstrap() once at startup.
    """

    def __init__(
        self,
        backend: TodoBackend,
        console: Console | None = None,
        formatter: TxtFormatter | None = None,
    ):
        self._backend = backend
        self._console = console or Console()
        self._formatter = formatter or TxtFormatter()

    def bootstrap(self) -> None:
        self._backend.create_table()

    def handle(self, command: Command) -> int | bool | list[Todo] | None:
        if command is None:
            return self.list()
        if isinstance(command, Add):
            return self.add(command.description)
        if isinstance(command, Done):
            return self.complete(command.id)
        if isinstance(command, Clear):
            return self.clear()
        raise TypeError(f"Unknown command: {command!r}")

    def add(self, description: str) -> int:
        self._print(f"Adding new todo with description '{description}'")
        todo_id = self._backend.add_todo(description)
        self._print(f"Added new todo with id {todo_id}")
        return todo_id

    def complete(self, id: int) -> bool:
        self._print(f"Marking todo {id} as done")
        found = self._backend.complete_todo(id)
        if found:
            self._print(f"Todo {id} is marked as done")
        else:
            self._print(f"Invalid id {id}")
        return found

    def clear(self) -> None:
        self._print("Clearing TODOs")
        self._backend.clear_todos()
        self._print("TODOs were cleared")

    def list(self) -> list[Todo]:
        self._print("Printing list of all todos")
        items = self._backend.list_todos()
        if items:
            self._print(self._formatter.format(items))
        return items

    def _print(self, text: str) -> None:
        # Written to the console file directly; rich would expand tabs and
        # drop control characters from stored descriptions
        file = self._console.file
        file.write(text + "\n")
        file.flush()
