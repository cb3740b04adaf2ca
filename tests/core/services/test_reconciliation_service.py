"""Tests for merging batches into a reconciled series."""

from __future__ import annotations

from datetime import date

import pytest

from geosolar.core.exceptions import (
    EmptyMergeResultError,
    IncompatibleSchemaError,
    ReconciliationError,
    UnrankedProvenanceError,
)
from geosolar.core.models import BatchSchema, Definitiveness, FieldDef, FieldType, Provenance, SentinelRule
from geosolar.core.services import DEFAULT_PRIORITY, merge_batches, reconcile, unify_schemas

ARCHIVED = Provenance.ARCHIVED
CURRENT = Provenance.CURRENT_PERIOD
YEARLY = Provenance.YEARLY_FILE


def _values(series, name: str = "value") -> dict[date, object]:
    return {record.date: record[name] for record in series}


def test_archived_wins_over_current_period(batch_factory) -> None:
    archived = batch_factory(ARCHIVED, [(date(2020, 1, 1), {"value": 12.3}, True)])
    current = batch_factory(
        CURRENT,
        [
            (date(2020, 1, 1), {"value": 15.0}, False),
            (date(2020, 2, 1), {"value": 9.1}, False),
        ],
    )

    series = merge_batches([archived, current], [CURRENT, ARCHIVED])

    assert [(record.date, record["value"], record.is_definitive) for record in series] == [
        (date(2020, 1, 1), 12.3, True),
        (date(2020, 2, 1), 9.1, False),
    ]
    assert [record.provenance for record in series] == [ARCHIVED, CURRENT]


def test_higher_authority_wins_regardless_of_arrival_order(batch_factory) -> None:
    high = batch_factory(ARCHIVED, [(date(2021, 5, 5), {"value": 10.0})])
    low = batch_factory(CURRENT, [(date(2021, 5, 5), {"value": 20.0})])

    assert _values(merge_batches([high, low], [CURRENT, ARCHIVED])) == {date(2021, 5, 5): 10.0}
    assert _values(merge_batches([low, high], [CURRENT, ARCHIVED])) == {date(2021, 5, 5): 10.0}
    assert _values(merge_batches([high, low], [ARCHIVED, CURRENT])) == {date(2021, 5, 5): 20.0}


def test_output_is_unique_and_strictly_ascending(batch_factory) -> None:
    first = batch_factory(
        YEARLY,
        [(date(2020, 1, 3), {"value": 3.0}), (date(2020, 1, 1), {"value": 1.0}), (date(2020, 1, 2), {"value": 2.0})],
    )
    second = batch_factory(CURRENT, [(date(2020, 1, 2), {"value": 9.0}), (date(2019, 12, 31), {"value": 0.5})])

    series = merge_batches([first, second])

    assert series.dates == (date(2019, 12, 31), date(2020, 1, 1), date(2020, 1, 2), date(2020, 1, 3))
    assert len(set(series.dates)) == len(series)
    assert _values(series)[date(2020, 1, 2)] == 2.0


def test_schema_union_pads_absent_fields(batch_factory) -> None:
    schema_ab = BatchSchema("ab", (FieldDef("a", FieldType.FLOAT), FieldDef("b", FieldType.INTEGER)))
    schema_ac = BatchSchema("ac", (FieldDef("a", FieldType.FLOAT), FieldDef("c", FieldType.BOOLEAN)))
    left = batch_factory(ARCHIVED, [(date(2020, 1, 1), {"a": 1.0, "b": 2})], schema=schema_ab)
    right = batch_factory(CURRENT, [(date(2020, 1, 2), {"a": 3.0, "c": True})], schema=schema_ac)

    series = merge_batches([left, right])

    assert series.schema.field_names == ("a", "b", "c")
    first, second = series.records
    assert dict(first.values) == {"a": 1.0, "b": 2, "c": None}
    assert dict(second.values) == {"a": 3.0, "b": None, "c": True}


def test_incompatible_field_types_abort_the_merge(batch_factory) -> None:
    float_schema = BatchSchema("f", (FieldDef("value", FieldType.FLOAT),))
    int_schema = BatchSchema("i", (FieldDef("value", FieldType.INTEGER),))
    left = batch_factory(ARCHIVED, [(date(2020, 1, 1), {"value": 1.0})], schema=float_schema)
    right = batch_factory(CURRENT, [(date(2020, 1, 2), {"value": 1})], schema=int_schema)

    with pytest.raises(IncompatibleSchemaError) as exc_info:
        merge_batches([left, right])

    assert exc_info.value.details["field"] == "value"


def test_redundant_fields_never_reach_the_series(batch_factory) -> None:
    schema = BatchSchema(
        "with_junk",
        (FieldDef("value", FieldType.FLOAT), FieldDef("redundant_col", FieldType.BOOLEAN, redundant=True)),
    )
    # a clashing type on a redundant field is not a conflict
    other = BatchSchema(
        "other",
        (FieldDef("value", FieldType.FLOAT), FieldDef("redundant_col", FieldType.INTEGER, redundant=True)),
    )
    batch = batch_factory(CURRENT, [(date(2020, 1, 1), {"value": 1.0, "redundant_col": True})], schema=schema)
    second = batch_factory(ARCHIVED, [(date(2020, 1, 2), {"value": 2.0, "redundant_col": 0})], schema=other)

    series = merge_batches([batch, second])

    assert series.schema.field_names == ("value",)
    assert all("redundant_col" not in record.values for record in series)


def test_merging_a_merge_result_is_idempotent(batch_factory) -> None:
    batch = batch_factory(
        YEARLY,
        [
            (date(2020, 1, 2), {"value": 2.0}, True),
            (date(2020, 1, 1), {"value": 1.0}, False),
            (date(2020, 1, 3), {"value": -1.0}, None),
        ],
    )

    once = merge_batches([batch])
    twice = merge_batches([once.to_batch(YEARLY)])

    assert twice == once


def test_empty_batches_are_no_op_contributions(batch_factory) -> None:
    batch = batch_factory(ARCHIVED, [(date(2020, 1, 1), {"value": 1.0})])
    empty = batch_factory(CURRENT, [])

    result = reconcile([batch, empty], [ARCHIVED])

    assert result.series == merge_batches([batch], [ARCHIVED])
    assert result.skipped_empty == 1


def test_merge_without_batches_fails() -> None:
    with pytest.raises(EmptyMergeResultError) as exc_info:
        merge_batches([])

    assert exc_info.value.error_code == "EMPTY_MERGE_RESULT"


def test_merge_of_only_empty_batches_fails(batch_factory) -> None:
    with pytest.raises(EmptyMergeResultError) as exc_info:
        merge_batches([batch_factory(ARCHIVED, []), batch_factory(CURRENT, [])])

    assert exc_info.value.details["batch_count"] == 2


def test_sentinel_rows_are_dropped_after_merge(batch_factory) -> None:
    archived = batch_factory(
        ARCHIVED,
        [(date(2020, 1, 1), {"value": -1.0}, True), (date(2020, 1, 2), {"value": 0.0}, True)],
    )
    current = batch_factory(CURRENT, [(date(2020, 1, 1), {"value": 7.0})])

    result = reconcile([archived, current])

    # the archived placeholder wins the date, then is dropped
    assert _values(result.series) == {date(2020, 1, 2): 0.0}
    assert result.dropped_sentinels == 1


def test_all_sentinel_batches_give_a_valid_empty_series(batch_factory) -> None:
    batch = batch_factory(ARCHIVED, [(date(2020, 1, 1), {"value": -1.0})])

    result = reconcile([batch])

    assert len(result.series) == 0
    assert result.series.date_range is None
    assert result.dropped_sentinels == 1


def test_sentinel_only_applies_to_the_declaring_schema(batch_factory) -> None:
    plain = BatchSchema("plain", (FieldDef("value", FieldType.FLOAT),))
    batch = batch_factory(ARCHIVED, [(date(2020, 1, 1), {"value": -1.0})], schema=plain)

    assert _values(merge_batches([batch])) == {date(2020, 1, 1): -1.0}


def test_definitiveness_follows_the_winning_batch(batch_factory) -> None:
    current = batch_factory(CURRENT, [(date(2020, 1, 1), {"value": 5.0}, True)])
    reported = batch_factory(
        YEARLY,
        [(date(2020, 1, 2), {"value": 6.0}, True), (date(2020, 1, 3), {"value": 7.0}, None)],
    )
    forced = batch_factory(
        ARCHIVED,
        [(date(2020, 1, 4), {"value": 8.0}, False)],
        definitiveness=Definitiveness.DEFINITIVE,
    )

    series = merge_batches([current, reported, forced])

    assert [record.is_definitive for record in series] == [False, True, None, True]


def test_same_authority_duplicates_keep_first_and_report(batch_factory) -> None:
    first = batch_factory(YEARLY, [(date(2020, 1, 1), {"value": 1.0}), (date(2020, 1, 2), {"value": 2.0})])
    second = batch_factory(YEARLY, [(date(2020, 1, 2), {"value": 20.0}), (date(2020, 1, 1), {"value": 1.0})])

    result = reconcile([first, second], [YEARLY])

    assert _values(result.series) == {date(2020, 1, 1): 1.0, date(2020, 1, 2): 2.0}
    assert len(result.conflicts) == 1
    conflict = result.conflicts[0]
    assert conflict.date == date(2020, 1, 2)
    assert conflict.provenance is YEARLY
    assert conflict.kept["value"] == 2.0
    assert conflict.discarded["value"] == 20.0


def test_unranked_provenance_is_rejected(batch_factory) -> None:
    batch = batch_factory(YEARLY, [(date(2020, 1, 1), {"value": 1.0})])

    with pytest.raises(UnrankedProvenanceError) as exc_info:
        merge_batches([batch], [ARCHIVED, CURRENT])

    assert exc_info.value.details["provenance"] == "yearly_file"


def test_priority_must_not_repeat_or_invent_tags(batch_factory) -> None:
    batch = batch_factory(ARCHIVED, [(date(2020, 1, 1), {"value": 1.0})])

    with pytest.raises(ReconciliationError):
        merge_batches([batch], [ARCHIVED, ARCHIVED])
    with pytest.raises(ReconciliationError):
        merge_batches([batch], ["archived", "bogus"])


def test_priority_accepts_tag_strings(batch_factory) -> None:
    archived = batch_factory(ARCHIVED, [(date(2020, 1, 1), {"value": 1.0})])
    current = batch_factory(CURRENT, [(date(2020, 1, 1), {"value": 2.0})])

    assert _values(merge_batches([archived, current], ["archived", "current_period"])) == {date(2020, 1, 1): 2.0}


def test_contributions_count_winning_records(batch_factory) -> None:
    archived = batch_factory(ARCHIVED, [(date(2020, 1, 1), {"value": 1.0})])
    current = batch_factory(CURRENT, [(date(2020, 1, 1), {"value": 2.0}), (date(2020, 1, 2), {"value": 3.0})])

    result = reconcile([archived, current], DEFAULT_PRIORITY)

    assert dict(result.contributions) == {ARCHIVED: 1, CURRENT: 1}


def test_inputs_are_left_untouched(batch_factory) -> None:
    batch = batch_factory(CURRENT, [(date(2020, 1, 1), {"value": 1.0}, True)])

    series = merge_batches([batch])

    assert batch.records[0].is_definitive is True
    assert series.records[0].is_definitive is False


def test_unify_schemas_keeps_first_appearance_order() -> None:
    schema = unify_schemas(
        [
            BatchSchema("x", (FieldDef("b", FieldType.FLOAT), FieldDef("a", FieldType.FLOAT))),
            BatchSchema(
                "y",
                (FieldDef("c", FieldType.INTEGER), FieldDef("a", FieldType.FLOAT)),
                sentinel=SentinelRule("c", -1),
            ),
        ]
    )

    assert schema.name == "x+y"
    assert schema.field_names == ("b", "a", "c")
    assert schema.sentinel is None
