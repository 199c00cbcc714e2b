"""Point-in-time snapshots of the versioned document."""

import copy
import json
import logging
import secrets
import string
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List

from docmigrate.migrations.base import VersionedDocument
from docmigrate.migrations.log import MigrationLog
from docmigrate.storage.base import KeyValueStore

logger = logging.getLogger(__name__)

MAX_BACKUPS = 3

_ID_ALPHABET = string.ascii_lowercase + string.digits


def generate_backup_id() -> str:
    """Return a unique id of the form ``backup_<epoch-ms>_<random>``."""
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(7))
    return f"backup_{int(time.time() * 1000)}_{suffix}"


@dataclass
class BackupRecord:
    """A stored snapshot and its metadata.

    Records are never modified after creation.
    """

    id: str
    version: str
    snapshot: VersionedDocument
    size_bytes: int = 0
    timestamp: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc)
    )

    def metadata(self) -> dict:
        """Record fields without the snapshot payload."""
        return {
            "id": self.id,
            "version": self.version,
            "timestamp": self.timestamp.isoformat(),
            "size_bytes": self.size_bytes,
        }

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {**self.metadata(), "snapshot": self.snapshot}

    @classmethod
    def from_dict(cls, data: dict) -> "BackupRecord":
        """Create from dictionary."""
        return cls(
            id=data["id"],
            version=data["version"],
            snapshot=data["snapshot"],
            size_bytes=data.get("size_bytes", 0),
            timestamp=datetime.fromisoformat(data["timestamp"]),
        )


class BackupStore:
    """Bounded set of document snapshots persisted under one store key.

    The whole set is read lazily on first use and rewritten after every
    change. At most ``max_backups`` records are kept; the oldest by
    timestamp is evicted first, earlier insertion losing ties.
    """

    def __init__(
        self,
        store: KeyValueStore,
        key: str,
        max_backups: int = MAX_BACKUPS,
        log: MigrationLog | None = None,
    ):
        """Initialize the backup store.

        Args:
            store: The key-value store backups are persisted to
            key: The store key holding the backup set
            max_backups: Number of backups to retain
            log: Migration log to record backup activity in
        """
        self.store = store
        self.key = key
        self.max_backups = max_backups
        self.log = log
        self._records: List[BackupRecord] = []
        self._loaded = False

    async def _ensure_loaded(self) -> None:
        """Load the persisted backup set once."""
        if self._loaded:
            return

        raw = await self.store.get(self.key)
        records = []
        if raw is not None:
            try:
                data = json.loads(raw)
                records = [BackupRecord.from_dict(item) for item in data]
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Failed to load backups from {self.key}: {e}")
                records = []

        self._records = records
        self._loaded = True

    async def _persist(self) -> None:
        await self.store.set_json(self.key, [r.to_dict() for r in self._records])

    def _prune(self) -> None:
        while len(self._records) > self.max_backups:
            # min() returns the first minimum, so earlier insertion wins ties
            oldest = min(
                range(len(self._records)),
                key=lambda i: self._records[i].timestamp,
            )
            evicted = self._records.pop(oldest)
            logger.debug(f"Evicted backup {evicted.id}")

    async def create(self, doc: VersionedDocument) -> str:
        """Snapshot a document.

        Args:
            doc: The document to back up

        Returns:
            The new backup id

        Raises:
            StoreError: If the backup set cannot be persisted
        """
        await self._ensure_loaded()

        serialized = json.dumps(doc)
        record = BackupRecord(
            id=generate_backup_id(),
            version=doc.get("version") or "0.0.0",
            snapshot=json.loads(serialized),
            size_bytes=len(serialized.encode("utf-8")),
        )

        previous = list(self._records)
        self._records.append(record)
        self._prune()
        try:
            await self._persist()
        except Exception:
            self._records = previous
            raise

        if self.log:
            await self.log.append(
                f"Backup created: {record.id} (version {record.version})"
            )
        return record.id

    async def restore(self, backup_id: str) -> VersionedDocument | None:
        """Return a fresh copy of a backup's snapshot.

        Returns:
            The snapshot, or None if no backup has this id
        """
        record = await self.get(backup_id)
        if record is None:
            logger.warning(f"Backup not found: {backup_id}")
            return None

        if self.log:
            await self.log.append(f"Restored from backup: {backup_id}")
        return copy.deepcopy(record.snapshot)

    async def get(self, backup_id: str) -> BackupRecord | None:
        """Look up a record by id."""
        await self._ensure_loaded()
        return next((r for r in self._records if r.id == backup_id), None)

    async def list(self) -> List[dict]:
        """Backup metadata, newest first."""
        await self._ensure_loaded()
        ordered = sorted(
            enumerate(self._records),
            key=lambda pair: (pair[1].timestamp, pair[0]),
            reverse=True,
        )
        return [record.metadata() for _, record in ordered]

    async def delete(self, backup_id: str) -> bool:
        """Remove a backup.

        Returns:
            True if a backup was removed
        """
        await self._ensure_loaded()
        remaining = [r for r in self._records if r.id != backup_id]
        if len(remaining) == len(self._records):
            return False

        previous = self._records
        self._records = remaining
        try:
            await self._persist()
        except Exception:
            self._records = previous
            raise
        return True
