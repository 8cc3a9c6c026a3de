"""Output formatters for the list command."""

from .txt import TxtFormatter

__all__ = [
    "TxtFormatter",
]
