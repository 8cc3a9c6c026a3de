"""Error types raised by todosql."""


class TodoSqlError(Exception):
    """Base class for every error todosql reports to the operator."""


class ConfigurationError(TodoSqlError):
    """No usable store could be selected from configuration."""


class StoreConnectionError(TodoSqlError):
    """The store could not be reached when the backend was opened."""


class StorageError(TodoSqlError):
    """A statement failed against an open store."""
