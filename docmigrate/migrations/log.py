"""Persisted, length-capped diagnostic log of migration activity."""

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List

from docmigrate.storage.base import KeyValueStore

logger = logging.getLogger(__name__)

LOG_LEVELS = ("info", "error")
MAX_LOG_ENTRIES = 100


@dataclass
class MigrationLogEntry:
    """One line of the migration log."""

    message: str
    level: str = "info"
    timestamp: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc)
    )

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "timestamp": self.timestamp.isoformat(),
            "message": self.message,
            "level": self.level,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "MigrationLogEntry":
        """Create from dictionary."""
        return cls(
            message=data["message"],
            level=data.get("level", "info"),
            timestamp=datetime.fromisoformat(data["timestamp"]),
        )

    def __str__(self) -> str:
        return f"[{self.timestamp.isoformat()}] {self.message}"


class MigrationLog:
    """Append-only log persisted under a single store key.

    The log keeps at most ``max_entries`` entries, dropping the oldest
    first. It exists for postmortem debugging; nothing reads it to make
    decisions.
    """

    def __init__(
        self,
        store: KeyValueStore,
        key: str,
        max_entries: int = MAX_LOG_ENTRIES,
    ):
        self.store = store
        self.key = key
        self.max_entries = max_entries

    async def _load(self) -> List[MigrationLogEntry]:
        raw = await self.store.get(self.key)
        if raw is None:
            return []

        try:
            data = json.loads(raw)
        except ValueError as e:
            logger.warning(f"Discarding unreadable migration log at {self.key}: {e}")
            return []
        if not isinstance(data, list):
            logger.warning(f"Discarding migration log at {self.key}: not a list")
            return []

        entries = []
        for item in data:
            if isinstance(item, str):
                # Older logs stored preformatted strings
                entries.append(MigrationLogEntry(message=item))
                continue
            try:
                entries.append(MigrationLogEntry.from_dict(item))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping malformed migration log entry: {e}")
        return entries

    async def _save(self, entries: List[MigrationLogEntry]) -> None:
        await self.store.set_json(self.key, [e.to_dict() for e in entries])

    async def append(self, message: str, level: str = "info") -> MigrationLogEntry:
        """Record a message.

        Args:
            message: The message to record
            level: "info" or "error"

        Returns:
            The appended entry

        Raises:
            ValueError: If level is not a known log level
        """
        if level not in LOG_LEVELS:
            raise ValueError(f"Unknown migration log level: {level!r}")

        entry = MigrationLogEntry(message=message, level=level)
        if level == "error":
            logger.error(f"[Migration] {entry}")
        else:
            logger.info(f"[Migration] {entry}")

        entries = await self._load()
        entries.append(entry)
        while len(entries) > self.max_entries:
            entries.pop(0)
        await self._save(entries)
        return entry

    async def read_all(self) -> List[MigrationLogEntry]:
        """All entries, oldest first."""
        return await self._load()

    async def clear(self) -> None:
        """Remove all entries."""
        await self._save([])
