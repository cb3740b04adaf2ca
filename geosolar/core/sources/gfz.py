"""GFZ Potsdam geomagnetic index readers (Kp, ap, Ap with SN and F10.7).

Yearly files ``Kp_ap_Ap_SN_F107_<YEAR>.txt`` are whitespace separated with a
``#`` commented header. One row per UT day::

    YYYY MM DD days days_m Bsr dB Kp1 .. Kp8 ap1 .. ap8 Ap SN F10.7obs F10.7adj D
"""

from __future__ import annotations

from datetime import UTC, datetime

from geosolar.core.config.settings import SourceConfig
from geosolar.core.exceptions.base import GeoSolarError, InvalidRequestError
from geosolar.core.logging import get_logger
from geosolar.core.models.schema import FieldRole, FieldType, SentinelRule
from geosolar.core.models.series import Batch, Definitiveness, Provenance
from geosolar.core.sources.layout import ColumnRole, ColumnSpec, SourceLayout
from geosolar.core.sources.parser import parse_batch
from geosolar.core.sources.transport import RemoteTextTransport

logger = get_logger(__name__)

SOURCE_NAME = "gfz"
FIRST_YEAR = 1932
FILE_PREFIX = "Kp_ap_Ap_SN_F107_"

KP_COLUMNS = tuple(f"Kp{n}" for n in range(1, 9))
AP_COLUMNS = tuple(f"ap{n}" for n in range(1, 9))
SOLAR_COLUMNS = ("SN", "F10.7obs", "F10.7adj")

DAILY_LAYOUT = SourceLayout(
    name="gfz_kp_ap_ap_sn_f107",
    columns=(
        ColumnSpec("YYYY", FieldType.INTEGER, role=ColumnRole.YEAR),
        ColumnSpec("MM", FieldType.INTEGER, role=ColumnRole.MONTH),
        ColumnSpec("DD", FieldType.INTEGER, role=ColumnRole.DAY),
        ColumnSpec("days", FieldType.INTEGER, field_role=FieldRole.QUALITY),
        ColumnSpec("days_m", FieldType.FLOAT, field_role=FieldRole.QUALITY),
        ColumnSpec("Bsr", FieldType.INTEGER, field_role=FieldRole.QUALITY),
        ColumnSpec("dB", FieldType.INTEGER, field_role=FieldRole.QUALITY),
        *(ColumnSpec(name, FieldType.FLOAT) for name in KP_COLUMNS),
        *(ColumnSpec(name, FieldType.INTEGER) for name in AP_COLUMNS),
        ColumnSpec("Ap", FieldType.INTEGER),
        ColumnSpec("SN", FieldType.INTEGER),
        ColumnSpec("F10.7obs", FieldType.FLOAT),
        ColumnSpec("F10.7adj", FieldType.FLOAT),
        ColumnSpec("D", FieldType.INTEGER, role=ColumnRole.DEFINITIVE_FLAG),
    ),
    comment="#",
    # Ap keeps its -1 so the sentinel can see it
    missing_markers={name: (-1,) for name in (*KP_COLUMNS, *AP_COLUMNS, *SOLAR_COLUMNS)},
    definitive_values=(1, 2),
    sentinel=SentinelRule(field="Ap", value=-1),
)

GEOMAGNETIC_ONLY_LAYOUT = DAILY_LAYOUT.with_redundant(*SOLAR_COLUMNS, name="gfz_kp_ap_ap")


class GfzSource:
    """Lists and fetches the GFZ yearly index files."""

    def __init__(self, transport: RemoteTextTransport | None = None, config: SourceConfig | None = None):
        self.config = config or (transport.config if transport is not None else SourceConfig())
        self.transport = transport or RemoteTextTransport(self.config)
        self._owns_transport = transport is None

    def close(self) -> None:
        """Close the transport if this source created it."""
        if self._owns_transport:
            self.transport.close()

    def list_available_files(self) -> frozenset[str]:
        """Return the names of the files published in the GFZ directory."""
        url = self.config.gfz_base_url
        logger.bind(source=SOURCE_NAME, url=url).debug("Listing GFZ files")
        files = self.transport.list_directory(url, source_name=SOURCE_NAME)
        logger.bind(source=SOURCE_NAME).info(f"Found {len(files)} GFZ files")
        return files

    @staticmethod
    def yearly_file_name(year: int) -> str:
        return f"{FILE_PREFIX}{year}.txt"

    def yearly_file_url(self, year: int) -> str:
        return f"{self.config.gfz_base_url}{self.yearly_file_name(year)}"

    def fetch_year(self, year: int, with_sunspots: bool = False) -> Batch:
        """Fetch one yearly file.

        Args:
            year: Calendar year, from 1932 up to the current year.
            with_sunspots: Keep the SN and F10.7 columns in merged output.

        Raises:
            InvalidRequestError: If ``year`` is not a supported year.
        """
        validate_year(year)
        url = self.yearly_file_url(year)
        layout = DAILY_LAYOUT if with_sunspots else GEOMAGNETIC_ONLY_LAYOUT
        bound = logger.bind(source=SOURCE_NAME, url=url, year=year)
        bound.info(f"Fetching GFZ indices for {year}")
        try:
            text = self.transport.fetch_text(url, source_name=SOURCE_NAME)
            batch = parse_batch(
                text,
                layout,
                Provenance.YEARLY_FILE,
                definitiveness=Definitiveness.AS_REPORTED,
                source=url,
            )
        except GeoSolarError as exc:
            bound.bind(error_code=exc.error_code).error(f"Failed to fetch GFZ indices for {year}: {exc.message}")
            raise
        bound.info(f"Fetched {len(batch)} GFZ records for {year}")
        return batch


def validate_year(year: object) -> int:
    """Return ``year`` if it is an integer between 1932 and the current year."""
    if isinstance(year, bool) or not isinstance(year, int):
        raise InvalidRequestError(
            f"Year must be an integer, got {year!r}",
            details={"year": repr(year)},
        )
    last_year = datetime.now(UTC).year
    if not FIRST_YEAR <= year <= last_year:
        raise InvalidRequestError(
            f"Year must be between {FIRST_YEAR} and {last_year}, got {year}",
            details={"year": year, "first_year": FIRST_YEAR, "last_year": last_year},
        )
    return year


__all__ = [
    "DAILY_LAYOUT",
    "FIRST_YEAR",
    "GEOMAGNETIC_ONLY_LAYOUT",
    "GfzSource",
    "SOURCE_NAME",
    "validate_year",
]
