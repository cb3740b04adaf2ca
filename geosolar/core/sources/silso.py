"""SILSO daily sunspot number readers.

Two resources are published by the Royal Observatory of Belgium:

* the archived series, reprocessed and mostly definitive, ``;`` separated;
* the estimated international sunspot number for the running month, ``,``
  separated, with two trailing columns that carry nothing we keep.
"""

from __future__ import annotations

from geosolar.core.config.settings import SourceConfig
from geosolar.core.exceptions.base import GeoSolarError
from geosolar.core.logging import get_logger
from geosolar.core.models.schema import FieldRole, FieldType, SentinelRule
from geosolar.core.models.series import Batch, Definitiveness, Provenance
from geosolar.core.sources.layout import ColumnRole, ColumnSpec, SourceLayout
from geosolar.core.sources.parser import parse_batch
from geosolar.core.sources.transport import RemoteTextTransport

logger = get_logger(__name__)

SOURCE_NAME = "silso"

_NO_OBSERVATION = SentinelRule(field="sunspot_number", value=-1.0)
_MISSING_STD = {"sunspot_number_std": (-1.0,)}

_DATE_COLUMNS = (
    ColumnSpec("date_year", FieldType.INTEGER, role=ColumnRole.YEAR),
    ColumnSpec("date_month", FieldType.INTEGER, role=ColumnRole.MONTH),
    ColumnSpec("date_day", FieldType.INTEGER, role=ColumnRole.DAY),
)

_MEASUREMENT_COLUMNS = (
    ColumnSpec("date_yearfraction", FieldType.FLOAT, field_role=FieldRole.QUALITY),
    ColumnSpec("sunspot_number", FieldType.FLOAT),
    ColumnSpec("sunspot_number_std", FieldType.FLOAT, field_role=FieldRole.QUALITY),
    ColumnSpec("number_of_observations_used", FieldType.INTEGER, field_role=FieldRole.QUALITY),
)

ARCHIVED_LAYOUT = SourceLayout(
    name="silso_archived",
    columns=(
        *_DATE_COLUMNS,
        *_MEASUREMENT_COLUMNS,
        ColumnSpec("is_value_definitive", FieldType.INTEGER, role=ColumnRole.DEFINITIVE_FLAG),
    ),
    delimiter=";",
    missing_markers=_MISSING_STD,
    sentinel=_NO_OBSERVATION,
)

CURRENT_MONTH_LAYOUT = SourceLayout(
    name="silso_current_month",
    columns=(
        *_DATE_COLUMNS,
        *_MEASUREMENT_COLUMNS,
        ColumnSpec(
            "number_of_all_observations",
            FieldType.INTEGER,
            field_role=FieldRole.QUALITY,
            redundant=True,
        ),
        ColumnSpec("redundant_col", FieldType.BOOLEAN, field_role=FieldRole.QUALITY, redundant=True),
    ),
    delimiter=",",
    missing_markers=_MISSING_STD,
    sentinel=_NO_OBSERVATION,
)


class SilsoSource:
    """Fetches and parses the SILSO sunspot resources."""

    def __init__(self, transport: RemoteTextTransport | None = None, config: SourceConfig | None = None):
        self.config = config or (transport.config if transport is not None else SourceConfig())
        self.transport = transport or RemoteTextTransport(self.config)
        self._owns_transport = transport is None

    def close(self) -> None:
        """Close the transport if this source created it."""
        if self._owns_transport:
            self.transport.close()

    def fetch_archived(self) -> Batch:
        """Fetch the archived daily series.

        SILSO flags its own provisional rows, so the batch keeps the per-row
        definitiveness column.
        """
        return self._fetch(
            "archived",
            self.config.silso_archived_url,
            ARCHIVED_LAYOUT,
            Provenance.ARCHIVED,
            Definitiveness.AS_REPORTED,
        )

    def fetch_current_month(self) -> Batch:
        """Fetch the running month; every record is provisional."""
        return self._fetch(
            "current month",
            self.config.silso_current_url,
            CURRENT_MONTH_LAYOUT,
            Provenance.CURRENT_PERIOD,
            Definitiveness.PROVISIONAL,
        )

    def _fetch(
        self,
        label: str,
        url: str,
        layout: SourceLayout,
        provenance: Provenance,
        definitiveness: Definitiveness,
    ) -> Batch:
        bound = logger.bind(source=SOURCE_NAME, url=url)
        bound.info(f"Fetching the {label} SILSO sunspot data")
        try:
            text = self.transport.fetch_text(url, source_name=SOURCE_NAME)
            batch = parse_batch(
                text,
                layout,
                provenance,
                definitiveness=definitiveness,
                source=url,
            )
        except GeoSolarError as exc:
            bound.bind(error_code=exc.error_code).error(f"Failed to fetch the {label} SILSO sunspot data: {exc.message}")
            raise
        bound.info(f"Fetched {len(batch)} {label} SILSO records")
        return batch


__all__ = ["ARCHIVED_LAYOUT", "CURRENT_MONTH_LAYOUT", "SOURCE_NAME", "SilsoSource"]
