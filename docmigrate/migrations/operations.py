"""Built-in field operations for writing migration steps.

Operations only touch the fields they name; every other field of the
document passes through unchanged.
"""

from dataclasses import dataclass, field
from typing import Any, Callable

from docmigrate.migrations.base import MigrationOperation


@dataclass
class AddField(MigrationOperation):
    """Add a field with a default value when it is absent.

    Example:
        AddField("savedViews", default_factory=list)
    """

    field_name: str
    default: Any = None
    default_factory: Callable[[], Any] | None = None

    def forward(self, data: dict) -> dict:
        result = data.copy()
        if self.field_name not in result:
            if self.default_factory:
                result[self.field_name] = self.default_factory()
            else:
                result[self.field_name] = self.default
        return result


@dataclass
class RemoveField(MigrationOperation):
    """Drop a field if present.

    Example:
        RemoveField("legacyFilters")
    """

    field_name: str

    def forward(self, data: dict) -> dict:
        result = data.copy()
        result.pop(self.field_name, None)
        return result


@dataclass
class RenameField(MigrationOperation):
    """Move a value to a new field name.

    Example:
        RenameField("subtitle", "summary")
    """

    old_name: str
    new_name: str

    def forward(self, data: dict) -> dict:
        result = data.copy()
        if self.old_name in result:
            result[self.new_name] = result.pop(self.old_name)
        return result


@dataclass
class TransformField(MigrationOperation):
    """Replace a field's value with ``func(value)`` when the field is present.

    Example:
        TransformField("estimate", func=lambda minutes: minutes * 60)
    """

    field_name: str
    func: Callable[[Any], Any]

    def forward(self, data: dict) -> dict:
        result = data.copy()
        if self.field_name in result:
            result[self.field_name] = self.func(result[self.field_name])
        return result


@dataclass
class ChangeFieldType(MigrationOperation):
    """Convert a field's value to another type.

    Values that are None are left as None.

    Example:
        ChangeFieldType("priority", converter=int)
    """

    field_name: str
    converter: Callable[[Any], Any]

    def forward(self, data: dict) -> dict:
        result = data.copy()
        if result.get(self.field_name) is not None:
            result[self.field_name] = self.converter(result[self.field_name])
        return result


@dataclass
class SplitField(MigrationOperation):
    """Split one field into several.

    Example:
        SplitField(
            "dueRange",
            target_fields=["startDate", "dueDate"],
            splitter=lambda value: value.split("/", 1),
        )
    """

    source_field: str
    target_fields: list[str]
    splitter: Callable[[Any], list[Any]]

    def forward(self, data: dict) -> dict:
        result = data.copy()
        if self.source_field in result:
            values = self.splitter(result.pop(self.source_field))
            for name, value in zip(self.target_fields, values):
                result[name] = value
        return result


@dataclass
class MergeFields(MigrationOperation):
    """Combine several fields into one.

    Missing source fields are passed to ``merger`` as None.

    Example:
        MergeFields(["startDate", "dueDate"], "dueRange", merger="/".join)
    """

    source_fields: list[str]
    target_field: str
    merger: Callable[[list[Any]], Any]

    def forward(self, data: dict) -> dict:
        result = data.copy()
        values = [result.pop(name, None) for name in self.source_fields]
        result[self.target_field] = self.merger(values)
        return result


@dataclass
class ConditionalTransform(MigrationOperation):
    """Apply an operation only to documents matching a condition.

    Example:
        ConditionalTransform(
            condition=lambda doc: "archive" in doc,
            operation=RenameField("archive", "archivedTasks"),
        )
    """

    condition: Callable[[dict], bool]
    operation: MigrationOperation

    def forward(self, data: dict) -> dict:
        if self.condition(data):
            return self.operation.forward(data)
        return data.copy()


@dataclass
class MapItems(MigrationOperation):
    """Apply operations to every mapping inside a list field.

    Non-mapping items are kept as they are. A missing or None field
    becomes an empty list only when ``create_missing`` is set. Any other
    non-list value raises TypeError so the step fails instead of
    reshaping the field.

    Example:
        MapItems("projects", [AddField("icon")])
    """

    field_name: str
    operations: list[MigrationOperation] = field(default_factory=list)
    create_missing: bool = False

    def forward(self, data: dict) -> dict:
        result = data.copy()
        items = result.get(self.field_name)
        if items is None:
            if self.create_missing:
                result[self.field_name] = []
            return result
        if not isinstance(items, list):
            raise TypeError(
                f"{self.field_name} must be a list, got {type(items).__name__}"
            )

        mapped = []
        for item in items:
            if isinstance(item, dict):
                for op in self.operations:
                    item = op.forward(item)
            mapped.append(item)
        result[self.field_name] = mapped
        return result
