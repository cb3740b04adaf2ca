"""Column layouts describing how a text resource maps onto a batch schema."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType

from geosolar.core.exceptions.base import SchemaDefinitionError
from geosolar.core.models.schema import (
    BatchSchema,
    FieldDef,
    FieldRole,
    FieldType,
    FieldValue,
    SentinelRule,
)


class ColumnRole(str, Enum):
    """What a raw column contributes to an observation."""

    YEAR = "year"
    MONTH = "month"
    DAY = "day"
    DEFINITIVE_FLAG = "definitive_flag"
    FIELD = "field"


_DATE_ROLES = (ColumnRole.YEAR, ColumnRole.MONTH, ColumnRole.DAY)


@dataclass(frozen=True)
class ColumnSpec:
    """One raw column of a delimited text resource."""

    name: str
    type: FieldType
    role: ColumnRole = ColumnRole.FIELD
    field_role: FieldRole = FieldRole.VALUE
    redundant: bool = False


@dataclass(frozen=True)
class SourceLayout:
    """Ordered column declarations plus the rules for reading the text.

    ``delimiter`` of ``None`` means whitespace separated columns, which is how
    the fixed-width GFZ files are read.
    """

    name: str
    columns: tuple[ColumnSpec, ...]
    delimiter: str | None = None
    skip_rows: int = 0
    comment: str | None = None
    missing_markers: Mapping[str, tuple[FieldValue, ...]] = field(default_factory=dict)
    definitive_values: tuple[int, ...] = (1,)
    sentinel: SentinelRule | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "columns", tuple(self.columns))
        object.__setattr__(self, "missing_markers", MappingProxyType(dict(self.missing_markers)))
        if self.skip_rows < 0:
            raise SchemaDefinitionError(
                f"Layout '{self.name}' has a negative skip_rows",
                details={"layout": self.name, "skip_rows": self.skip_rows},
            )
        for role in _DATE_ROLES:
            count = sum(1 for column in self.columns if column.role is role)
            if count != 1:
                raise SchemaDefinitionError(
                    f"Layout '{self.name}' must declare exactly one {role.value} column, found {count}",
                    details={"layout": self.name, "role": role.value},
                )
        flags = [column for column in self.columns if column.role is ColumnRole.DEFINITIVE_FLAG]
        if len(flags) > 1:
            raise SchemaDefinitionError(
                f"Layout '{self.name}' declares more than one definitive flag column",
                details={"layout": self.name},
            )
        field_names = {column.name for column in self.field_columns}
        unknown = sorted(set(self.missing_markers) - field_names)
        if unknown:
            raise SchemaDefinitionError(
                f"Layout '{self.name}' declares missing markers for unknown fields: {', '.join(unknown)}",
                details={"layout": self.name, "fields": unknown},
            )
        # builds and validates the schema eagerly
        self.batch_schema()

    @property
    def field_columns(self) -> tuple[ColumnSpec, ...]:
        return tuple(column for column in self.columns if column.role is ColumnRole.FIELD)

    @property
    def definitive_column(self) -> ColumnSpec | None:
        for column in self.columns:
            if column.role is ColumnRole.DEFINITIVE_FLAG:
                return column
        return None

    def date_column(self, role: ColumnRole) -> ColumnSpec:
        for column in self.columns:
            if column.role is role:
                return column
        raise KeyError(role)

    def batch_schema(self) -> BatchSchema:
        """Derive the schema descriptor that accompanies batches read with this layout."""

        return BatchSchema(
            name=self.name,
            fields=tuple(
                FieldDef(
                    name=column.name,
                    type=column.type,
                    role=column.field_role,
                    redundant=column.redundant,
                )
                for column in self.field_columns
            ),
            sentinel=self.sentinel,
        )

    def with_redundant(self, *names: str, name: str | None = None) -> SourceLayout:
        """Return a copy of the layout with ``names`` declared redundant."""

        missing = sorted(set(names) - {column.name for column in self.field_columns})
        if missing:
            raise SchemaDefinitionError(
                f"Layout '{self.name}' has no field columns named: {', '.join(missing)}",
                details={"layout": self.name, "fields": missing},
            )
        columns = tuple(
            ColumnSpec(
                name=column.name,
                type=column.type,
                role=column.role,
                field_role=column.field_role,
                redundant=column.redundant or column.name in names,
            )
            for column in self.columns
        )
        return SourceLayout(
            name=name or self.name,
            columns=columns,
            delimiter=self.delimiter,
            skip_rows=self.skip_rows,
            comment=self.comment,
            missing_markers=dict(self.missing_markers),
            definitive_values=self.definitive_values,
            sentinel=self.sentinel,
        )


__all__ = ["ColumnRole", "ColumnSpec", "SourceLayout"]
