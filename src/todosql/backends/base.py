"""Base backend protocol."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from todosql.models import Todo


@runtime_checkable
class TodoBackend(Protocol):
    """Protocol for todo storage engines.

    Both engines expose the same observable behaviour: ids come from the
    engine and are never reused, list order is ascending id, and every
    driver failure surfaces as StorageError.
    """

    @property
    def name(self) -> str:
        """Engine name: sqlite or postgres."""
        ...

    @property
    def url(self) -> str:
        """Connection URL, safe to print."""
        ...

    def create_table(self) -> None:
        """Create the todos table if it does not exist."""
        ...

    def add_todo(self, description: str) -> int:
        """Insert a pending todo and return its id."""
        ...

    def complete_todo(self, id: int) -> bool:
        """Mark todo as done. Returns False if no row has this id."""
        ...

    def clear_todos(self) -> None:
        """Delete every todo."""
        ...

    def list_todos(self) -> list[Todo]:
        """All todos ordered by id."""
        ...

    def close(self) -> None:
        """Release the connection. Safe to call twice."""
        ...
