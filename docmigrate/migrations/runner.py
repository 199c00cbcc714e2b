"""Migration runner for versioned documents."""

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, List

from docmigrate.migrations.base import VersionedDocument
from docmigrate.migrations.log import MigrationLog, MigrationLogEntry
from docmigrate.migrations.registry import MigrationRegistry
from docmigrate.migrations.version import compare_versions

if TYPE_CHECKING:
    from docmigrate.backups.store import BackupStore

logger = logging.getLogger(__name__)

UNVERSIONED = "0.0.0"


@dataclass(frozen=True)
class MigrationResult:
    """Outcome of one ``MigrationRunner.run`` call.

    On failure ``data`` is None: the caller restores ``backup_id`` rather
    than keeping a half-migrated document.
    """

    success: bool
    migrated_from: str
    migrated_to: str
    data: VersionedDocument | None = None
    error: str | None = None
    backup_id: str | None = None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        result = {
            "success": self.success,
            "migrated_from": self.migrated_from,
            "migrated_to": self.migrated_to,
        }
        if self.data is not None:
            result["data"] = self.data
        if self.error is not None:
            result["error"] = self.error
        if self.backup_id is not None:
            result["backup_id"] = self.backup_id
        return result


class MigrationRunner:
    """Brings a document up to the registry's current version.

    This runner:
    - Skips documents already at the current version without side effects
    - Backs up the document before changing anything
    - Applies pending steps one after another, each on the previous output
    - Stops at the first failing step and reports where it stopped

    There is no automatic rollback. A failed run hands back the backup id
    and the caller decides whether to retry or restore. Runs against the
    same store must not overlap.
    """

    def __init__(
        self,
        registry: MigrationRegistry,
        backups: "BackupStore",
        log: MigrationLog,
    ):
        """Initialize the migration runner.

        Args:
            registry: The ordered migration steps
            backups: Where pre-migration snapshots are stored
            log: The persisted migration log
        """
        self.registry = registry
        self.backups = backups
        self.log = log

    @property
    def current_version(self) -> str:
        return self.registry.current_version()

    def needs_migration(self, version: str | None) -> bool:
        """Check whether a document at ``version`` is behind the current version.

        A missing version always needs migration.
        """
        if not version:
            return True
        return compare_versions(version, self.current_version) < 0

    async def run(
        self,
        doc: VersionedDocument,
        declared_version: str | None,
    ) -> MigrationResult:
        """Migrate a document to the current version.

        Args:
            doc: The document as loaded by the host
            declared_version: The version the document claims to be at

        Returns:
            MigrationResult describing the outcome

        Raises:
            StoreError: If the backup or log cannot be persisted
        """
        start_version = declared_version or UNVERSIONED
        target_version = self.current_version

        if compare_versions(start_version, target_version) == 0:
            return MigrationResult(
                success=True,
                migrated_from=start_version,
                migrated_to=start_version,
                data=doc,
            )

        backup_id = await self.backups.create(doc)
        pending = self.registry.pending_from(start_version)

        if not pending:
            await self.log.append(
                f"No migrations between {start_version} and {target_version}; "
                f"stamping version {target_version}"
            )
            return MigrationResult(
                success=True,
                migrated_from=start_version,
                migrated_to=target_version,
                data={**doc, "version": target_version},
                backup_id=backup_id,
            )

        await self.log.append(
            f"Starting migration from {start_version} to {target_version}"
        )
        await self.log.append(
            "Migrations to run: "
            + " → ".join(step.target_version for step in pending)
        )

        current = doc
        last_successful = start_version

        for step in pending:
            await self.log.append(
                f"Running migration to {step.target_version}: {step.description}"
            )
            try:
                current = step.apply(current)
            except Exception as e:
                message = str(e) or e.__class__.__name__
                logger.exception(f"Migration to {step.target_version} failed")
                await self.log.append(
                    f"Migration failed at {last_successful}: {message}",
                    level="error",
                )
                return MigrationResult(
                    success=False,
                    migrated_from=start_version,
                    migrated_to=last_successful,
                    error=message,
                    backup_id=backup_id,
                )

            if current.get("version") != step.target_version:
                current["version"] = step.target_version

            last_successful = step.target_version
            await self.log.append(
                f"Migration to {step.target_version} completed successfully"
            )

        current["version"] = target_version
        await self.log.append(
            f"Migration complete: {start_version} → {target_version}"
        )

        return MigrationResult(
            success=True,
            migrated_from=start_version,
            migrated_to=target_version,
            data=current,
            backup_id=backup_id,
        )

    async def list_backups(self) -> List[dict]:
        """Backup metadata, newest first."""
        return await self.backups.list()

    async def restore_backup(self, backup_id: str) -> VersionedDocument | None:
        """Fresh copy of a backup's snapshot, or None if unknown."""
        return await self.backups.restore(backup_id)

    async def delete_backup(self, backup_id: str) -> bool:
        return await self.backups.delete(backup_id)

    async def read_log(self) -> List[MigrationLogEntry]:
        return await self.log.read_all()

    async def clear_log(self) -> None:
        await self.log.clear()
