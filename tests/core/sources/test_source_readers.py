"""Tests for the SILSO and GFZ source readers."""

from __future__ import annotations

from datetime import UTC, date, datetime

import httpx
import pytest

from geosolar.core.config import SourceConfig
from geosolar.core.exceptions import InvalidRequestError, SchemaMismatchError, SourceUnavailableError
from geosolar.core.models import Definitiveness, Provenance
from geosolar.core.sources import (
    DAILY_LAYOUT,
    GEOMAGNETIC_ONLY_LAYOUT,
    FetchResult,
    GfzSource,
    RemoteTextTransport,
    SilsoSource,
)

CONFIG = SourceConfig(
    silso_archived_url="https://silso.test/archived.csv",
    silso_current_url="https://silso.test/current.csv",
    gfz_base_url="ftp://gfz.test/pub/Kp_ap_Ap_SN_F107",
)


class StubTransport(RemoteTextTransport):
    """Serves canned documents keyed by URL."""

    def __init__(self, documents: dict[str, str], listing: frozenset[str] = frozenset()) -> None:
        super().__init__(CONFIG)
        self.documents = documents
        self.listing = listing
        self.requested: list[str] = []

    def fetch_text(self, url: str, *, source_name: str | None = None) -> str:
        self.requested.append(url)
        if url not in self.documents:
            raise SourceUnavailableError(f"missing {url}", source_name or "stub", url=url, status_code=404)
        return self.documents[url]

    def list_directory(self, url: str, *, source_name: str | None = None) -> frozenset[str]:
        self.requested.append(url)
        return self.listing


def test_silso_archived_keeps_reported_definitiveness(archived_text: str) -> None:
    source = SilsoSource(StubTransport({CONFIG.silso_archived_url: archived_text}), CONFIG)

    batch = source.fetch_archived()

    assert batch.provenance is Provenance.ARCHIVED
    assert batch.definitiveness is Definitiveness.AS_REPORTED
    assert batch.source == CONFIG.silso_archived_url
    assert [record.is_definitive for record in batch] == [True, True, False]


def test_silso_current_month_is_provisional(current_text: str) -> None:
    source = SilsoSource(StubTransport({CONFIG.silso_current_url: current_text}), CONFIG)

    batch = source.fetch_current_month()

    assert batch.provenance is Provenance.CURRENT_PERIOD
    assert batch.definitiveness is Definitiveness.PROVISIONAL
    assert batch.date_range == (date(2020, 1, 1), date(2020, 2, 1))
    redundant = {field_def.name for field_def in batch.schema.fields if field_def.redundant}
    assert redundant == {"number_of_all_observations", "redundant_col"}


def test_silso_source_works_over_http(archived_text: str) -> None:
    client = httpx.Client(transport=httpx.MockTransport(lambda request: httpx.Response(200, text=archived_text)))
    source = SilsoSource(RemoteTextTransport(CONFIG, http_client=client), CONFIG)

    assert len(source.fetch_archived()) == 3


def test_silso_propagates_source_failures() -> None:
    source = SilsoSource(StubTransport({}), CONFIG)

    with pytest.raises(SourceUnavailableError):
        source.fetch_current_month()


def test_silso_propagates_schema_mismatch() -> None:
    source = SilsoSource(StubTransport({CONFIG.silso_archived_url: "2020;01;01;1.0\n"}), CONFIG)

    with pytest.raises(SchemaMismatchError):
        source.fetch_archived()


def test_gfz_layouts_differ_only_in_solar_columns() -> None:
    daily = {field_def.name for field_def in DAILY_LAYOUT.batch_schema().output_fields}
    geomagnetic = {field_def.name for field_def in GEOMAGNETIC_ONLY_LAYOUT.batch_schema().output_fields}

    assert daily - geomagnetic == {"SN", "F10.7obs", "F10.7adj"}
    assert {"Kp1", "ap8", "Ap"} <= geomagnetic


def test_gfz_lists_available_files() -> None:
    listing = frozenset({"Kp_ap_Ap_SN_F107_2023.txt", "Kp_ap_Ap_SN_F107_2024.txt"})
    transport = StubTransport({}, listing)
    source = GfzSource(transport, CONFIG)

    assert source.list_available_files() == listing
    assert transport.requested == ["ftp://gfz.test/pub/Kp_ap_Ap_SN_F107/"]


def test_gfz_fetch_year_parses_yearly_file(gfz_text: str) -> None:
    url = "ftp://gfz.test/pub/Kp_ap_Ap_SN_F107/Kp_ap_Ap_SN_F107_2024.txt"
    source = GfzSource(StubTransport({url: gfz_text}), CONFIG)

    batch = source.fetch_year(2024)

    assert GfzSource.yearly_file_name(2024) == "Kp_ap_Ap_SN_F107_2024.txt"
    assert batch.provenance is Provenance.YEARLY_FILE
    assert batch.definitiveness is Definitiveness.AS_REPORTED
    assert len(batch) == 3
    first = batch.records[0]
    assert first.date == date(2024, 1, 1)
    assert first["Kp1"] == 1.333
    assert first["ap5"] == 7
    assert first["Ap"] == 5
    assert first.is_definitive is False
    placeholder = batch.records[2]
    assert placeholder["Kp1"] is None
    assert placeholder["Ap"] == -1


def test_gfz_fetch_year_with_sunspots_keeps_solar_columns(gfz_text: str) -> None:
    url = "ftp://gfz.test/pub/Kp_ap_Ap_SN_F107/Kp_ap_Ap_SN_F107_2024.txt"
    source = GfzSource(StubTransport({url: gfz_text}), CONFIG)

    batch = source.fetch_year(2024, with_sunspots=True)

    assert not batch.schema.field("SN").redundant
    assert batch.records[0]["SN"] == 134
    assert batch.records[1]["F10.7adj"] == 141.8


@pytest.mark.parametrize("year", [1931, datetime.now(UTC).year + 1, "2024", True])
def test_gfz_fetch_year_validates_year(year: object) -> None:
    transport = StubTransport({})
    source = GfzSource(transport, CONFIG)

    with pytest.raises(InvalidRequestError):
        source.fetch_year(year)  # type: ignore[arg-type]
    assert transport.requested == []


def test_fetch_result_distinguishes_failure_from_empty() -> None:
    source = SilsoSource(StubTransport({CONFIG.silso_archived_url: ""}), CONFIG)

    empty = FetchResult.capture("archived", source.fetch_archived)
    failed = FetchResult.capture("current_month", source.fetch_current_month)

    assert empty.ok and empty.is_empty
    assert failed.failed and not failed.is_empty
    assert empty.unwrap().is_empty
    with pytest.raises(SourceUnavailableError):
        failed.unwrap()
    with pytest.raises(ValueError):
        FetchResult(source="neither")
