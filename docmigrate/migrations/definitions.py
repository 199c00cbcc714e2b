"""Registered migrations for the task-board data document.

Append new steps at the end, in ascending version order. Each step
transforms data from the previous version to its target version.
Guidelines:

* handle missing fields with defaults
* never drop user data without an explicit decision
* leave fields you do not know about untouched
"""

from docmigrate.migrations.base import MigrationStep
from docmigrate.migrations.operations import AddField, MapItems
from docmigrate.migrations.registry import BASELINE_VERSION, MigrationRegistry

# 1.0.0 is the baseline; documents without a version predate it.
# Projects get an explicit "icon": null rather than no key, so every stored
# project carries the field after 1.1.0.
MIGRATIONS = [
    MigrationStep(
        target_version="1.1.0",
        description="Add savedViews array and project icon field",
        operations=[
            AddField("savedViews", default_factory=list),
            MapItems("projects", [AddField("icon")], create_missing=True),
        ],
    ),
]


def default_registry(baseline: str = BASELINE_VERSION) -> MigrationRegistry:
    """Build the registry the application migrates its document with."""
    return MigrationRegistry(MIGRATIONS, baseline=baseline)
