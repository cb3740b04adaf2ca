"""Parse delimited or whitespace separated text into typed batches."""

from __future__ import annotations

import io
import math
import re
from datetime import date

import pandas as pd

from geosolar.core.exceptions.base import ParseError, SchemaMismatchError
from geosolar.core.models.schema import FieldType, FieldValue
from geosolar.core.models.series import Batch, Definitiveness, Observation, Provenance
from geosolar.core.sources.layout import ColumnRole, ColumnSpec, SourceLayout

_TRUE_TOKENS = frozenset({"1", "true", "t", "yes", "y"})
_FALSE_TOKENS = frozenset({"0", "false", "f", "no", "n"})
_SAW_FIELDS = re.compile(r"saw (\d+)")


def parse_batch(
    text: str,
    layout: SourceLayout,
    provenance: Provenance,
    *,
    definitiveness: Definitiveness | None = None,
    source: str | None = None,
) -> Batch:
    """Turn the raw text of one resource into a :class:`Batch`.

    Args:
        text: Raw resource contents.
        layout: Column layout of the resource.
        provenance: Provenance tag stamped on every record.
        definitiveness: Definitiveness level of the batch; defaults per provenance.
        source: Resource locator kept for diagnostics.

    Returns:
        Batch whose schema is ``layout.batch_schema()``. Blank input gives an
        empty batch.

    Raises:
        SchemaMismatchError: If the column count does not match the layout.
        ParseError: If a cell cannot be converted to its declared type.
    """
    source_name = source or layout.name
    frame = _read_frame(text, layout, source_name)
    schema = layout.batch_schema()
    if frame is None or frame.empty:
        return Batch(schema=schema, provenance=provenance, definitiveness=definitiveness, source=source)

    _check_column_count(frame, layout, source_name)

    year_index = _column_index(layout, layout.date_column(ColumnRole.YEAR))
    month_index = _column_index(layout, layout.date_column(ColumnRole.MONTH))
    day_index = _column_index(layout, layout.date_column(ColumnRole.DAY))
    flag_column = layout.definitive_column
    flag_index = _column_index(layout, flag_column) if flag_column is not None else None
    field_positions = [(_column_index(layout, column), column) for column in layout.field_columns]

    records: list[Observation] = []
    for row_number, row in enumerate(frame.itertuples(index=False, name=None), start=1):
        cells = list(row) + [None] * (len(layout.columns) - len(row))
        _check_row_width(cells, layout, row_number, source_name)
        observed_on = _build_date(cells, (year_index, month_index, day_index), layout, row_number, source_name)

        values: dict[str, FieldValue] = {}
        for position, column in field_positions:
            value = _convert(cells[position], column, row_number, source_name)
            if value is not None and value in layout.missing_markers.get(column.name, ()):
                value = None
            values[column.name] = value

        is_definitive: bool | None = None
        if flag_column is not None and flag_index is not None:
            flag_value = _convert(cells[flag_index], flag_column, row_number, source_name)
            if flag_value is not None:
                is_definitive = flag_value in layout.definitive_values

        records.append(
            Observation(
                date=observed_on,
                values=values,
                is_definitive=is_definitive,
                provenance=provenance,
            )
        )

    return Batch(
        schema=schema,
        provenance=provenance,
        records=tuple(records),
        definitiveness=definitiveness,
        source=source,
    )


def _read_frame(text: str, layout: SourceLayout, source_name: str) -> pd.DataFrame | None:
    if not text.strip():
        return None
    try:
        return pd.read_csv(
            io.StringIO(text),
            sep=layout.delimiter if layout.delimiter else r"\s+",
            header=None,
            dtype=str,
            skiprows=layout.skip_rows,
            comment=layout.comment,
            skip_blank_lines=True,
            keep_default_na=False,
            skipinitialspace=True,
            engine="python",
        )
    except pd.errors.EmptyDataError:
        return None
    except pd.errors.ParserError as exc:
        match = _SAW_FIELDS.search(str(exc))
        actual = int(match.group(1)) if match else 0
        raise SchemaMismatchError(
            f"Resource '{source_name}' has ragged rows: {exc}",
            source_name,
            expected_columns=len(layout.columns),
            actual_columns=actual,
        ) from exc


def _check_column_count(frame: pd.DataFrame, layout: SourceLayout, source_name: str) -> None:
    expected = len(layout.columns)
    actual = frame.shape[1]
    if actual == expected:
        return
    if actual < expected and all(column.redundant for column in layout.columns[actual:]):
        return
    raise SchemaMismatchError(
        f"Resource '{source_name}' has {actual} columns, layout '{layout.name}' declares {expected}",
        source_name,
        expected_columns=expected,
        actual_columns=actual,
    )


def _check_row_width(cells: list[object], layout: SourceLayout, row_number: int, source_name: str) -> None:
    # keep_default_na=False reads empty cells as "", so NaN only marks a short row
    width = next((index for index, cell in enumerate(cells) if _is_padding(cell)), len(cells))
    if width == len(layout.columns):
        return
    if all(column.redundant for column in layout.columns[width:]):
        return
    raise SchemaMismatchError(
        f"Row {row_number} of '{source_name}' has {width} columns, layout '{layout.name}' declares {len(layout.columns)}",
        source_name,
        expected_columns=len(layout.columns),
        actual_columns=width,
        line=row_number,
    )


def _is_padding(cell: object) -> bool:
    return cell is None or (not isinstance(cell, str) and bool(pd.isna(cell)))


def _column_index(layout: SourceLayout, column: ColumnSpec) -> int:
    return layout.columns.index(column)


def _build_date(
    cells: list[object],
    indexes: tuple[int, int, int],
    layout: SourceLayout,
    row_number: int,
    source_name: str,
) -> date:
    parts: list[int] = []
    for index in indexes:
        column = layout.columns[index]
        value = _convert(cells[index], column, row_number, source_name)
        if value is None:
            raise ParseError(
                f"Row {row_number} of '{source_name}' is missing its {column.name} value",
                source_name,
                line=row_number,
                column=column.name,
            )
        parts.append(int(value))
    year, month, day = parts
    try:
        return date(year, month, day)
    except ValueError as exc:
        raise ParseError(
            f"Row {row_number} of '{source_name}' has an invalid date {year}-{month}-{day}",
            source_name,
            line=row_number,
            column="date",
            raw_value=f"{year}-{month}-{day}",
        ) from exc


def _convert(raw: object, column: ColumnSpec, row_number: int, source_name: str) -> FieldValue:
    if raw is None or (isinstance(raw, float) and math.isnan(raw)):
        return None
    text = str(raw).strip()
    if not text:
        return None
    try:
        if column.type is FieldType.INTEGER:
            return _to_int(text)
        if column.type is FieldType.FLOAT:
            number = float(text)
            return None if math.isnan(number) else number
        return _to_bool(text)
    except ValueError as exc:
        raise ParseError(
            f"Row {row_number} of '{source_name}': cannot read {column.name}={text!r} as {column.type.value}",
            source_name,
            line=row_number,
            column=column.name,
            raw_value=text,
        ) from exc


def _to_int(text: str) -> int:
    try:
        return int(text)
    except ValueError:
        number = float(text)
        if not number.is_integer():
            raise
        return int(number)


def _to_bool(text: str) -> bool:
    lowered = text.lower()
    if lowered in _TRUE_TOKENS:
        return True
    if lowered in _FALSE_TOKENS:
        return False
    raise ValueError(f"not a boolean: {text}")


__all__ = ["parse_batch"]
