"""Parsed CLI commands handed to the dispatcher."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Add:
    description: str


@dataclass(frozen=True)
class Done:
    id: int


@dataclass(frozen=True)
class Clear:
    pass


# None means "no subcommand": list everything
Command = Add | Done | Clear | None
