"""docmigrate: versioned migration and backup engine for a persisted JSON document."""

__version__ = "0.1.0"

# Core components
from docmigrate.core.client import S3ClientManager
from docmigrate.core.exceptions import (
    ConfigurationError,
    DocMigrateError,
    DocumentFormatError,
    MigrationConfigError,
    StoreConnectionError,
    StoreError,
)
from docmigrate.core.settings import DocMigrateSettings

# Storage components
from docmigrate.storage import InMemoryStore, KeyValueStore, S3KeyValueStore

# Migration components
from docmigrate.migrations import (
    AddField,
    ChangeFieldType,
    ConditionalTransform,
    MapItems,
    MergeFields,
    MigrationLog,
    MigrationLogEntry,
    MigrationOperation,
    MigrationRegistry,
    MigrationResult,
    MigrationRunner,
    MigrationStep,
    RemoveField,
    RenameField,
    SemanticVersion,
    SplitField,
    TransformField,
    VersionedDocument,
    compare_versions,
    parse_version,
)
from docmigrate.migrations.definitions import MIGRATIONS, default_registry

# Backup components
from docmigrate.backups import MAX_BACKUPS, BackupRecord, BackupStore

# Engine wiring
from docmigrate.engine import build_runner, load_document, migrate_stored_document

__all__ = [
    # Version
    "__version__",
    # Core
    "DocMigrateSettings",
    "S3ClientManager",
    "DocMigrateError",
    "StoreError",
    "StoreConnectionError",
    "MigrationConfigError",
    "DocumentFormatError",
    "ConfigurationError",
    # Storage
    "KeyValueStore",
    "InMemoryStore",
    "S3KeyValueStore",
    # Migrations
    "VersionedDocument",
    "SemanticVersion",
    "parse_version",
    "compare_versions",
    "MigrationOperation",
    "MigrationStep",
    "MigrationRegistry",
    "MigrationLog",
    "MigrationLogEntry",
    "MigrationResult",
    "MigrationRunner",
    "MIGRATIONS",
    "default_registry",
    "AddField",
    "RemoveField",
    "RenameField",
    "TransformField",
    "ChangeFieldType",
    "SplitField",
    "MergeFields",
    "ConditionalTransform",
    "MapItems",
    # Backups
    "MAX_BACKUPS",
    "BackupRecord",
    "BackupStore",
    # Engine
    "build_runner",
    "load_document",
    "migrate_stored_document",
]
