"""Base classes for docmigrate migration steps."""

import copy
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, List

VersionedDocument = dict[str, Any]
"""A persisted application document: any JSON object with a ``version`` key."""


class MigrationOperation(ABC):
    """Base class for a single forward transformation of a document."""

    @abstractmethod
    def forward(self, data: dict) -> dict:
        """Apply the transformation.

        Args:
            data: The document (or nested mapping) to transform

        Returns:
            Transformed data
        """
        pass


@dataclass
class MigrationStep:
    """Transforms a document from the previous schema version to ``target_version``.

    A step is built from a list of operations, a ``transform`` callable, or
    both (operations run first). Steps must be pure: they receive a private
    deep copy of the document and return the next document.

    Attributes:
        target_version: The schema version the step produces (e.g., "1.1.0")
        description: Human-readable description of the change
        operations: Field operations applied in order
        transform: Optional callable applied after the operations
    """

    target_version: str
    description: str
    operations: List[MigrationOperation] = field(default_factory=list)
    transform: Callable[[VersionedDocument], VersionedDocument] | None = None

    def apply(self, data: VersionedDocument) -> VersionedDocument:
        """Run the step on a copy of ``data``.

        Args:
            data: The document as of the previous version

        Returns:
            The transformed document

        Raises:
            Exception: Whatever the operations or transform raise
        """
        result = copy.deepcopy(data)
        for op in self.operations:
            result = op.forward(result)
        if self.transform is not None:
            result = self.transform(result)
        if not isinstance(result, dict):
            raise TypeError(
                f"Migration to {self.target_version} returned "
                f"{type(result).__name__}, expected a mapping"
            )
        return result
