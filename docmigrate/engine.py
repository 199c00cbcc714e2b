"""Wiring for the migration engine and the startup migration routine."""

import json
import logging

from docmigrate.backups.store import BackupStore
from docmigrate.core.exceptions import DocumentFormatError
from docmigrate.core.settings import DocMigrateSettings
from docmigrate.migrations.definitions import default_registry
from docmigrate.migrations.log import MigrationLog
from docmigrate.migrations.registry import MigrationRegistry
from docmigrate.migrations.runner import MigrationResult, MigrationRunner
from docmigrate.storage.base import KeyValueStore

logger = logging.getLogger(__name__)


def build_runner(
    store: KeyValueStore,
    settings: DocMigrateSettings | None = None,
    registry: MigrationRegistry | None = None,
) -> MigrationRunner:
    """Construct a runner with its log and backup store.

    Args:
        store: The key-value store backups and the log are persisted to
        settings: Keys and retention limits (defaults if omitted)
        registry: Migration steps (the application's registry if omitted)

    Returns:
        A ready MigrationRunner
    """
    settings = settings or DocMigrateSettings()
    if registry is None:
        registry = default_registry(baseline=settings.baseline_version)

    log = MigrationLog(
        store,
        settings.migration_log_key,
        max_entries=settings.max_log_entries,
    )
    backups = BackupStore(
        store,
        settings.backups_key,
        max_backups=settings.max_backups,
        log=log,
    )
    return MigrationRunner(registry, backups, log)


async def load_document(store: KeyValueStore, document_key: str) -> dict | None:
    """Read the live document.

    Returns:
        The document, or None if nothing is stored yet

    Raises:
        DocumentFormatError: If the stored value is not a JSON object
    """
    raw = await store.get(document_key)
    if raw is None:
        return None
    try:
        doc = json.loads(raw)
    except ValueError as e:
        raise DocumentFormatError(
            f"Document at '{document_key}' is not valid JSON: {e}",
            key=document_key,
        )
    if not isinstance(doc, dict):
        raise DocumentFormatError(
            f"Document at '{document_key}' is a {type(doc).__name__}, expected an object",
            key=document_key,
        )
    return doc


async def migrate_stored_document(
    store: KeyValueStore,
    runner: MigrationRunner,
    document_key: str,
) -> MigrationResult | None:
    """Migrate the live document in place.

    The live key is written only after the runner reports success, and
    only when the run changed something. A failed run leaves the key as
    it was; the result carries the backup id to restore from.

    Returns:
        The migration result, or None if no document is stored
    """
    doc = await load_document(store, document_key)
    if doc is None:
        logger.info(f"No document stored at {document_key}; nothing to migrate")
        return None

    result = await runner.run(doc, doc.get("version"))

    if not result.success:
        logger.error(
            f"Migration of {document_key} stopped at {result.migrated_to}: "
            f"{result.error} (backup {result.backup_id})"
        )
        return result

    if result.backup_id is not None:
        await store.set_json(document_key, result.data)
        logger.info(
            f"Migrated {document_key} from {result.migrated_from} "
            f"to {result.migrated_to}"
        )
    return result
