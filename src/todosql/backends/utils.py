"""Shared utilities for todo backends."""

from urllib.parse import urlsplit, urlunsplit


def mask_url(url: str) -> str:
    """Hide the password of a database URL for display."""
    parts = urlsplit(url)
    if not parts.password:
        return url
    netloc = parts.netloc.replace(f":{parts.password}@", ":***@", 1)
    return urlunsplit(parts._replace(netloc=netloc))
