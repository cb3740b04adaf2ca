"""Observation, batch and series value types.

A :class:`Batch` is what a source reader produces for one fetch: records that
share one schema and one provenance tag. A :class:`Series` is what the
reconciler produces: records unique by date and strictly ascending. All three
types are immutable; the reconciler builds new objects instead of mutating
its inputs.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from geosolar.core.exceptions.base import SchemaDefinitionError, SeriesOrderError
from geosolar.core.models.schema import BatchSchema, FieldValue

if TYPE_CHECKING:
    import pandas as pd


class Provenance(str, Enum):
    """Which kind of source batch produced a record."""

    ARCHIVED = "archived"
    CURRENT_PERIOD = "current_period"
    YEARLY_FILE = "yearly_file"


class Definitiveness(str, Enum):
    """Definitiveness level a batch assigns to the records it wins."""

    DEFINITIVE = "definitive"
    PROVISIONAL = "provisional"
    AS_REPORTED = "as_reported"

    def resolve(self, reported: bool | None) -> bool | None:
        """Return the ``is_definitive`` flag for a record carrying ``reported``."""

        if self is Definitiveness.DEFINITIVE:
            return True
        if self is Definitiveness.PROVISIONAL:
            return False
        return reported


DEFAULT_DEFINITIVENESS: Mapping[Provenance, Definitiveness] = MappingProxyType(
    {
        Provenance.ARCHIVED: Definitiveness.DEFINITIVE,
        Provenance.CURRENT_PERIOD: Definitiveness.PROVISIONAL,
        Provenance.YEARLY_FILE: Definitiveness.AS_REPORTED,
    }
)


@dataclass(frozen=True)
class Observation:
    """One dated measurement.

    ``values`` maps field names to typed values; ``None`` means the field is
    explicitly missing, which is distinct from a zero reading.
    """

    date: date
    values: Mapping[str, FieldValue]
    is_definitive: bool | None = None
    provenance: Provenance | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "values", MappingProxyType(dict(self.values)))

    def __getitem__(self, name: str) -> FieldValue:
        return self.values[name]

    def get(self, name: str, default: FieldValue = None) -> FieldValue:
        return self.values.get(name, default)


@dataclass(frozen=True)
class Batch:
    """Records produced by a single fetch, sharing one schema and provenance."""

    schema: BatchSchema
    provenance: Provenance
    records: tuple[Observation, ...] = ()
    definitiveness: Definitiveness | None = None
    source: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "records", tuple(self.records))
        if self.definitiveness is None:
            object.__setattr__(self, "definitiveness", DEFAULT_DEFINITIVENESS[self.provenance])
        declared = set(self.schema.field_names)
        for index, record in enumerate(self.records):
            unknown = sorted(set(record.values) - declared)
            if unknown:
                raise SchemaDefinitionError(
                    f"Record {index} of batch '{self.schema.name}' carries undeclared fields: {', '.join(unknown)}",
                    details={"schema": self.schema.name, "index": index, "fields": unknown},
                )

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self) -> Iterator[Observation]:
        return iter(self.records)

    @property
    def is_empty(self) -> bool:
        return not self.records

    @property
    def date_range(self) -> tuple[date, date] | None:
        if not self.records:
            return None
        dates = [record.date for record in self.records]
        return min(dates), max(dates)

    def resolve_definitive(self, record: Observation) -> bool | None:
        """Return the ``is_definitive`` flag ``record`` carries once this batch wins its date."""
        level = self.definitiveness or DEFAULT_DEFINITIVENESS[self.provenance]
        return level.resolve(record.is_definitive)

    def to_rows(self) -> list[dict[str, Any]]:
        """Flatten records as read, redundant fields included."""
        return _rows(self.records, self.schema.field_names)


@dataclass(frozen=True)
class Series:
    """Reconciled records with unique, strictly ascending dates."""

    schema: BatchSchema
    records: tuple[Observation, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        records = tuple(self.records)
        object.__setattr__(self, "records", records)
        for previous, current in zip(records, records[1:]):
            if current.date <= previous.date:
                raise SeriesOrderError(
                    f"Series dates must be strictly ascending: {current.date} follows {previous.date}",
                    details={"previous": previous.date.isoformat(), "current": current.date.isoformat()},
                )

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self) -> Iterator[Observation]:
        return iter(self.records)

    @property
    def dates(self) -> tuple[date, ...]:
        return tuple(record.date for record in self.records)

    @property
    def date_range(self) -> tuple[date, date] | None:
        if not self.records:
            return None
        return self.records[0].date, self.records[-1].date

    def to_rows(self) -> list[dict[str, Any]]:
        """Flatten records into dictionaries in schema column order."""

        return _rows(self.records, self.schema.field_names)

    def to_frame(self) -> pd.DataFrame:
        """Return the series as a pandas DataFrame indexed by date."""

        import pandas as pd

        columns = ["date", *self.schema.field_names, "is_definitive", "provenance"]
        frame = pd.DataFrame.from_records(self.to_rows(), columns=columns)
        frame["date"] = pd.to_datetime(frame["date"])
        return frame.set_index("date")

    def to_batch(
        self,
        provenance: Provenance,
        definitiveness: Definitiveness = Definitiveness.AS_REPORTED,
        source: str | None = None,
    ) -> Batch:
        """Re-wrap the series as a batch so it can be reconciled again."""

        return Batch(
            schema=self.schema,
            provenance=provenance,
            records=_with_provenance(self.records, provenance),
            definitiveness=definitiveness,
            source=source,
        )


def _rows(records: Iterable[Observation], names: tuple[str, ...]) -> list[dict[str, Any]]:
    rows: list[dict[str, Any]] = []
    for record in records:
        row: dict[str, Any] = {"date": record.date}
        for name in names:
            row[name] = record.get(name)
        row["is_definitive"] = record.is_definitive
        row["provenance"] = record.provenance.value if record.provenance else None
        rows.append(row)
    return rows


def _with_provenance(records: Iterable[Observation], provenance: Provenance) -> tuple[Observation, ...]:
    return tuple(
        Observation(
            date=record.date,
            values=record.values,
            is_definitive=record.is_definitive,
            provenance=provenance,
        )
        for record in records
    )


__all__ = [
    "Batch",
    "DEFAULT_DEFINITIVENESS",
    "Definitiveness",
    "Observation",
    "Provenance",
    "Series",
]
