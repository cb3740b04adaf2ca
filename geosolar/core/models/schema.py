"""Typed field declarations describing the shape of a batch."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum

from geosolar.core.exceptions.base import SchemaDefinitionError


class FieldType(str, Enum):
    """Semantic type of a field."""

    INTEGER = "integer"
    FLOAT = "float"
    BOOLEAN = "boolean"


class FieldRole(str, Enum):
    """Whether a field is a measurement or auxiliary metadata."""

    VALUE = "value"
    QUALITY = "quality"


FieldValue = int | float | bool | None


@dataclass(frozen=True)
class FieldDef:
    """One typed field declaration."""

    name: str
    type: FieldType
    role: FieldRole = FieldRole.VALUE
    redundant: bool = False


@dataclass(frozen=True)
class SentinelRule:
    """Marks rows whose ``field`` equals ``value`` as "no observation" placeholders."""

    field: str
    value: FieldValue

    def matches(self, values: Mapping[str, FieldValue]) -> bool:
        return values.get(self.field) == self.value


@dataclass(frozen=True)
class BatchSchema:
    """Ordered, uniquely named field declarations shared by a batch."""

    name: str
    fields: tuple[FieldDef, ...]
    sentinel: SentinelRule | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "fields", tuple(self.fields))
        seen: set[str] = set()
        for field_def in self.fields:
            if field_def.name in seen:
                raise SchemaDefinitionError(
                    f"Schema '{self.name}' declares field '{field_def.name}' more than once",
                    details={"schema": self.name, "field": field_def.name},
                )
            seen.add(field_def.name)
        if self.sentinel is not None and self.sentinel.field not in seen:
            raise SchemaDefinitionError(
                f"Sentinel field '{self.sentinel.field}' is not declared by schema '{self.name}'",
                details={"schema": self.name, "field": self.sentinel.field},
            )

    @property
    def field_names(self) -> tuple[str, ...]:
        return tuple(field_def.name for field_def in self.fields)

    @property
    def output_fields(self) -> tuple[FieldDef, ...]:
        """Fields that may appear in a reconciled series."""
        return tuple(field_def for field_def in self.fields if not field_def.redundant)

    def field(self, name: str) -> FieldDef:
        for field_def in self.fields:
            if field_def.name == name:
                return field_def
        raise KeyError(name)

    def __contains__(self, name: object) -> bool:
        return name in self.field_names


__all__ = [
    "BatchSchema",
    "FieldDef",
    "FieldRole",
    "FieldType",
    "FieldValue",
    "SentinelRule",
]
