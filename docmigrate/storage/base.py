"""Base key-value store interface for docmigrate."""

import json
from abc import ABC, abstractmethod
from typing import Any


class KeyValueStore(ABC):
    """Abstract base class for the persisted store the engine writes to.

    Values are opaque serialized text. Implementations must not be
    silently lossy: a failed write raises ``StoreError``.
    """

    @abstractmethod
    async def get(self, key: str) -> str | None:
        """Get a value from the store.

        Args:
            key: The storage key

        Returns:
            The stored text or None if the key is absent
        """
        pass

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        """Store a value, replacing any previous value.

        Args:
            key: The storage key
            value: The serialized text to store
        """
        pass

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """Delete a value from the store.

        Args:
            key: The storage key

        Returns:
            True if the key existed and was deleted
        """
        pass

    async def get_json(self, key: str) -> Any | None:
        """Get and decode a JSON value.

        Raises:
            ValueError: If the stored text is not valid JSON
        """
        raw = await self.get(key)
        if raw is None:
            return None
        return json.loads(raw)

    async def set_json(self, key: str, value: Any) -> None:
        """Encode a value as JSON and store it."""
        await self.set(key, json.dumps(value))
