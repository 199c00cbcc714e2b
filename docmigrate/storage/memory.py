"""In-memory key-value store for docmigrate."""

import asyncio

from docmigrate.storage.base import KeyValueStore


class InMemoryStore(KeyValueStore):
    """Key-value store that keeps all values in a process-local dict.

    Suitable for embedding in a single process, or for testing.
    """

    def __init__(self, initial: dict[str, str] | None = None):
        """Initialize the store.

        Args:
            initial: Optional initial key -> text mapping
        """
        self._data: dict[str, str] = dict(initial or {})
        self._lock = asyncio.Lock()

    async def get(self, key: str) -> str | None:
        async with self._lock:
            return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        if not isinstance(value, str):
            raise TypeError(f"Store values must be str, got {type(value).__name__}")
        async with self._lock:
            self._data[key] = value

    async def delete(self, key: str) -> bool:
        async with self._lock:
            if key in self._data:
                del self._data[key]
                return True
            return False

    def snapshot(self) -> dict[str, str]:
        """Return a copy of all stored values (for assertions)."""
        return dict(self._data)
