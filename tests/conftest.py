"""Pytest configuration for the geosolar test suite."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import date

import pytest

from geosolar.core.models import (
    Batch,
    BatchSchema,
    Definitiveness,
    FieldDef,
    FieldType,
    Observation,
    Provenance,
    SentinelRule,
)


def pytest_addoption(parser: pytest.Parser) -> None:
    """Register command-line options for controlling integration tests."""

    parser.addoption(
        "--geosolar-run-integration",
        action="store_true",
        default=False,
        help="Run geosolar integration tests that reach SILSO and GFZ.",
    )


def pytest_configure(config: pytest.Config) -> None:
    """Register the integration marker for geosolar tests."""

    config.addinivalue_line(
        "markers",
        "integration: marks geosolar tests requiring network access",
    )


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Skip integration tests unless explicitly requested."""

    if config.getoption("--geosolar-run-integration"):
        return

    skip_integration = pytest.mark.skip(reason="integration tests require --geosolar-run-integration")
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip_integration)


SUNSPOT_SCHEMA = BatchSchema(
    name="sunspots",
    fields=(FieldDef("value", FieldType.FLOAT),),
    sentinel=SentinelRule(field="value", value=-1.0),
)


def make_batch(
    provenance: Provenance,
    rows: Iterable[tuple[date, Mapping[str, object]] | tuple[date, Mapping[str, object], bool | None]],
    *,
    schema: BatchSchema = SUNSPOT_SCHEMA,
    definitiveness: Definitiveness | None = None,
) -> Batch:
    """Build a batch from ``(date, values[, is_definitive])`` tuples."""

    records = []
    for row in rows:
        day, values, *flag = row
        records.append(
            Observation(
                date=day,
                values=values,
                is_definitive=flag[0] if flag else None,
                provenance=provenance,
            )
        )
    return Batch(schema=schema, provenance=provenance, records=tuple(records), definitiveness=definitiveness)


@pytest.fixture()
def batch_factory():
    return make_batch


ARCHIVED_TEXT = (
    "2020;01;01;2020.001;  12.3;  1.5;  30;1\n"
    "2020;01;02;2020.004;  -1;   -1.0;   0;1\n"
    "2020;01;03;2020.007;   0;    0.0;  28;0\n"
)

CURRENT_TEXT = (
    "2020,01,01,2020.001, 15.0, 2.0, 20, 25\n"
    "2020,02,01,2020.086,  9.1, 1.1, 18, 22\n"
)

GFZ_TEXT = """\
# PURPOSE: This file distributes the geomagnetic planetary three-hour index Kp and associated geomagnetic indices.
# LICENSE: CC BY 4.0
#YYY MM DD  days  days_m  Bsr dB     Kp1    Kp2    Kp3    Kp4    Kp5    Kp6    Kp7    Kp8  ap1  ap2  ap3  ap4  ap5  ap6  ap7  ap8    Ap  SN F10.7obs F10.7adj D
2024 01 01 33237 33237.5 2597  1  1.333  0.667  1.000  1.333  2.000  1.667  1.000  0.333    5    3    4    5    7    6    4    2     5 134  158.0   153.0 0
2024 01 02 33238 33238.5 2597  2  2.333  2.000  1.333  1.000  0.667  1.000  1.333  2.000    9    7    5    4    3    4    5    7     6 101  146.6   141.8 0
2024 01 03 33239 33239.5 2597  3 -1.000 -1.000 -1.000 -1.000 -1.000 -1.000 -1.000 -1.000   -1   -1   -1   -1   -1   -1   -1   -1    -1  -1   -1.0    -1.0 0
"""


@pytest.fixture()
def archived_text() -> str:
    return ARCHIVED_TEXT


@pytest.fixture()
def current_text() -> str:
    return CURRENT_TEXT


@pytest.fixture()
def gfz_text() -> str:
    return GFZ_TEXT
