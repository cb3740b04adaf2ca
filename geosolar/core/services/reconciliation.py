"""Merge source batches into one deduplicated, date ordered series.

The reconciler is a pure function of its inputs. ``priority`` lists
provenance tags from lowest to highest authority; for a date supplied by
several batches the highest authority wins regardless of arrival order, and
among equals the first occurrence is kept.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import date
from types import MappingProxyType

from geosolar.core.exceptions.base import (
    EmptyMergeResultError,
    IncompatibleSchemaError,
    ReconciliationError,
    UnrankedProvenanceError,
)
from geosolar.core.exceptions.codes import ErrorCode
from geosolar.core.logging import get_logger
from geosolar.core.models.schema import BatchSchema, FieldDef, FieldValue
from geosolar.core.models.series import Batch, Observation, Provenance, Series

logger = get_logger(__name__)

DEFAULT_PRIORITY: tuple[Provenance, ...] = (
    Provenance.CURRENT_PERIOD,
    Provenance.YEARLY_FILE,
    Provenance.ARCHIVED,
)


@dataclass(frozen=True)
class DuplicateDateConflict:
    """Two records of equal authority disagreed about one date."""

    date: date
    provenance: Provenance
    kept: Mapping[str, FieldValue]
    discarded: Mapping[str, FieldValue]


@dataclass(frozen=True)
class ReconcileResult:
    """Merged series plus the diagnostics gathered while building it."""

    series: Series
    conflicts: tuple[DuplicateDateConflict, ...] = ()
    dropped_sentinels: int = 0
    skipped_empty: int = 0
    contributions: Mapping[Provenance, int] = field(default_factory=dict)


@dataclass
class _Winner:
    record: Observation
    batch: Batch
    rank: int


def merge_batches(
    batches: Iterable[Batch],
    priority: Sequence[Provenance | str] = DEFAULT_PRIORITY,
) -> Series:
    """Merge ``batches`` and return only the resulting series."""
    return reconcile(batches, priority).series


def reconcile(
    batches: Iterable[Batch],
    priority: Sequence[Provenance | str] = DEFAULT_PRIORITY,
) -> ReconcileResult:
    """Merge ``batches`` into a series, keeping the merge diagnostics.

    Args:
        batches: Batches in arrival order.
        priority: Provenance tags from lowest to highest authority.

    Returns:
        ReconcileResult whose series has unique, strictly ascending dates.

    Raises:
        EmptyMergeResultError: If no batch, or only empty batches, were given.
        UnrankedProvenanceError: If a non-empty batch's provenance is not ranked.
        IncompatibleSchemaError: If one field name carries two types.
    """
    supplied = list(batches)
    ranks = _rank_priority(priority)

    if not supplied:
        raise EmptyMergeResultError("No batches were supplied to merge", batch_count=0)
    usable = [batch for batch in supplied if not batch.is_empty]
    skipped = len(supplied) - len(usable)
    if not usable:
        raise EmptyMergeResultError(
            f"All {len(supplied)} supplied batches are empty",
            batch_count=len(supplied),
        )
    for batch in usable:
        if batch.provenance not in ranks:
            raise UnrankedProvenanceError(
                f"Batch '{batch.schema.name}' has provenance '{batch.provenance.value}' missing from the priority order",
                provenance=batch.provenance.value,
                details={"priority": [tag.value for tag in ranks]},
            )

    schema = unify_schemas([batch.schema for batch in usable])

    winners: dict[date, _Winner] = {}
    conflicts: list[DuplicateDateConflict] = []
    for batch in usable:
        rank = ranks[batch.provenance]
        for record in batch.records:
            current = winners.get(record.date)
            if current is None or rank > current.rank:
                winners[record.date] = _Winner(record=record, batch=batch, rank=rank)
            elif rank == current.rank and record.values != current.record.values:
                conflict = DuplicateDateConflict(
                    date=record.date,
                    provenance=batch.provenance,
                    kept=current.record.values,
                    discarded=record.values,
                )
                conflicts.append(conflict)
                logger.bind(source=batch.source, error_code=ErrorCode.DUPLICATE_DATE_CONFLICT.value).warning(
                    f"Conflicting {batch.provenance.value} records for {record.date.isoformat()}, keeping the first"
                )

    names = schema.field_names
    records: list[Observation] = []
    dropped = 0
    contributions: Counter[Provenance] = Counter()
    for day in sorted(winners):
        winner = winners[day]
        sentinel = winner.batch.schema.sentinel
        if sentinel is not None and sentinel.matches(winner.record.values):
            dropped += 1
            continue
        records.append(
            Observation(
                date=day,
                values={name: winner.record.get(name) for name in names},
                is_definitive=winner.batch.resolve_definitive(winner.record),
                provenance=winner.batch.provenance,
            )
        )
        contributions[winner.batch.provenance] += 1

    series = Series(schema=schema, records=tuple(records))
    logger.info(
        f"Reconciled {len(usable)} batches into {len(series)} records "
        f"({len(conflicts)} conflicts, {dropped} sentinel rows dropped, {skipped} empty batches skipped)"
    )
    return ReconcileResult(
        series=series,
        conflicts=tuple(conflicts),
        dropped_sentinels=dropped,
        skipped_empty=skipped,
        contributions=MappingProxyType(dict(contributions)),
    )


def unify_schemas(schemas: Sequence[BatchSchema]) -> BatchSchema:
    """Union the non-redundant fields of ``schemas`` in first appearance order.

    Raises:
        IncompatibleSchemaError: If a field name is declared with two types.
    """
    fields: dict[str, FieldDef] = {}
    names: list[str] = []
    for schema in schemas:
        if schema.name not in names:
            names.append(schema.name)
        for field_def in schema.output_fields:
            existing = fields.get(field_def.name)
            if existing is None:
                fields[field_def.name] = FieldDef(name=field_def.name, type=field_def.type, role=field_def.role)
            elif existing.type is not field_def.type:
                raise IncompatibleSchemaError(
                    f"Field '{field_def.name}' is declared as {existing.type.value} "
                    f"and {field_def.type.value} by schema '{schema.name}'",
                    field=field_def.name,
                    types=[existing.type.value, field_def.type.value],
                )
    return BatchSchema(name="+".join(names), fields=tuple(fields.values()))


def _rank_priority(priority: Sequence[Provenance | str]) -> dict[Provenance, int]:
    ranks: dict[Provenance, int] = {}
    for index, tag in enumerate(priority):
        try:
            provenance = Provenance(tag)
        except ValueError as exc:
            raise ReconciliationError(
                f"Unknown provenance tag '{tag}' in priority order",
                details={"tag": str(tag)},
            ) from exc
        if provenance in ranks:
            raise ReconciliationError(
                f"Provenance '{provenance.value}' appears more than once in the priority order",
                details={"tag": provenance.value},
            )
        ranks[provenance] = index
    return ranks


__all__ = [
    "DEFAULT_PRIORITY",
    "DuplicateDateConflict",
    "ReconcileResult",
    "merge_batches",
    "reconcile",
    "unify_schemas",
]
