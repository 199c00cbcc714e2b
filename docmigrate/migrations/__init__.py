"""Migration system for docmigrate.

Documents are plain JSON objects stamped with a semantic ``version``.
Migration steps transform a document from one version to the next and
the runner applies every pending step in order.
"""

from docmigrate.migrations.base import (
    MigrationOperation,
    MigrationStep,
    VersionedDocument,
)
from docmigrate.migrations.log import MigrationLog, MigrationLogEntry
from docmigrate.migrations.operations import (
    AddField,
    ChangeFieldType,
    ConditionalTransform,
    MapItems,
    MergeFields,
    RemoveField,
    RenameField,
    SplitField,
    TransformField,
)
from docmigrate.migrations.registry import BASELINE_VERSION, MigrationRegistry
from docmigrate.migrations.runner import MigrationResult, MigrationRunner
from docmigrate.migrations.version import (
    SemanticVersion,
    compare_versions,
    parse_version,
)

__all__ = [
    "BASELINE_VERSION",
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
    "AddField",
    "RemoveField",
    "RenameField",
    "TransformField",
    "ChangeFieldType",
    "SplitField",
    "MergeFields",
    "ConditionalTransform",
    "MapItems",
]
