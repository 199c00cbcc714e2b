"""Ordered catalog of migration steps."""

from typing import Iterable, List

from docmigrate.core.exceptions import MigrationConfigError
from docmigrate.migrations.base import MigrationStep
from docmigrate.migrations.version import compare_versions

BASELINE_VERSION = "1.0.0"


class MigrationRegistry:
    """Immutable, strictly ascending list of migration steps.

    The registry decides which version is current and which steps a
    document still needs. It performs no I/O and can be shared freely.
    """

    def __init__(
        self,
        steps: Iterable[MigrationStep] = (),
        baseline: str = BASELINE_VERSION,
    ):
        """Initialize the registry.

        Args:
            steps: Migration steps in ascending target-version order
            baseline: Version reported when no steps are registered

        Raises:
            MigrationConfigError: If target versions are not strictly ascending
        """
        self._steps = tuple(steps)
        self.baseline = baseline
        self._validate()

    def _validate(self) -> None:
        for previous, step in zip(self._steps, self._steps[1:]):
            order = compare_versions(step.target_version, previous.target_version)
            if order == 0:
                raise MigrationConfigError(
                    f"Duplicate migration target version {step.target_version}",
                    version=step.target_version,
                )
            if order < 0:
                raise MigrationConfigError(
                    f"Migration {step.target_version} is registered after "
                    f"{previous.target_version}",
                    version=step.target_version,
                )

    def current_version(self) -> str:
        """Latest known schema version."""
        if not self._steps:
            return self.baseline
        return self._steps[-1].target_version

    def pending_from(self, from_version: str | None) -> List[MigrationStep]:
        """Steps whose target is newer than ``from_version``, in registry order.

        A missing or unparsable version is treated as ``0.0.0``, so every
        step is pending.
        """
        return [
            step for step in self._steps
            if compare_versions(step.target_version, from_version) > 0
        ]
