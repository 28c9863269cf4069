"""Storage backends for artwall."""

from ..constants import DEFAULT_DATA_FILE, DEFAULT_DB_PATH, DEFAULT_STORAGE
from .base import StorageBackend
from .json_store import JSONStorage
from .sqlite_store import SQLiteStorage

__all__ = ["StorageBackend", "SQLiteStorage", "JSONStorage", "BACKENDS", "get_storage"]

BACKENDS = ("json", "sqlite")


def get_storage(backend: str = DEFAULT_STORAGE, **kwargs) -> StorageBackend:
    """Factory to get the right storage backend.

    Args:
        backend: One of 'json', 'sqlite'.
        **kwargs: Backend-specific config (``data_file`` or ``db_path``).

    Returns:
        StorageBackend instance.
    """
    if backend == "json":
        return JSONStorage(kwargs.get("data_file", DEFAULT_DATA_FILE))
    elif backend == "sqlite":
        return SQLiteStorage(kwargs.get("db_path", DEFAULT_DB_PATH))
    else:
        raise ValueError(f"Unknown storage backend: {backend}")
