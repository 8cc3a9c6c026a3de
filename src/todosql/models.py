"""Data models for todosql."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Todo:
    """Immutable todo row."""

    id: int
    description: str
    done: bool = False

    @property
    def marker(self) -> str:
        """Checkbox marker: 'x' when done, a blank otherwise."""
        return "x" if self.done else " "

