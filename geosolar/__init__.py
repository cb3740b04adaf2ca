"""geosolar - SILSO sunspot and GFZ geomagnetic index time series.

Fetches the published text resources, parses them into typed batches and
reconciles batches into one deduplicated, date ordered series.
"""

from collections.abc import Iterable

from geosolar.core.config.settings import GeoSolarConfig, SourceConfig, get_config
from geosolar.core.exceptions import (
    EmptyMergeResultError,
    GeoSolarError,
    IncompatibleSchemaError,
    ParseError,
    SchemaMismatchError,
    SourceUnavailableError,
)
from geosolar.core.models import Batch, BatchSchema, Definitiveness, Observation, Provenance, Series
from geosolar.core.services import (
    DEFAULT_PRIORITY,
    ReconcileResult,
    complete_sunspot_series,
    geomagnetic_series,
    merge_batches,
    reconcile,
)
from geosolar.core.sources import FetchResult, GfzSource, RemoteTextTransport, SilsoSource

__version__ = "0.1.0"


def _source_config(config: SourceConfig | None) -> SourceConfig:
    return config or get_config().sources


def archived_sunspots(config: SourceConfig | None = None) -> Batch:
    """Fetch the archived SILSO daily sunspot numbers."""
    source_config = _source_config(config)
    with RemoteTextTransport(source_config) as transport:
        return SilsoSource(transport, source_config).fetch_archived()


def current_month_sunspots(config: SourceConfig | None = None) -> Batch:
    """Fetch the provisional SILSO sunspot numbers for the running month."""
    source_config = _source_config(config)
    with RemoteTextTransport(source_config) as transport:
        return SilsoSource(transport, source_config).fetch_current_month()


def complete_sunspots(config: SourceConfig | None = None) -> Series:
    """Fetch both SILSO resources and return the merged series."""
    source_config = _source_config(config)
    with RemoteTextTransport(source_config) as transport:
        return complete_sunspot_series(SilsoSource(transport, source_config)).series


def geomagnetic_files(config: SourceConfig | None = None) -> frozenset[str]:
    """List the files published in the GFZ Kp/ap directory."""
    source_config = _source_config(config)
    with RemoteTextTransport(source_config) as transport:
        return GfzSource(transport, source_config).list_available_files()


def geomagnetic_indices(
    years: Iterable[int],
    *,
    with_sunspots: bool = False,
    config: SourceConfig | None = None,
) -> Series:
    """Fetch the GFZ yearly files for ``years`` and return the merged series."""
    source_config = _source_config(config)
    with RemoteTextTransport(source_config) as transport:
        source = GfzSource(transport, source_config)
        return geomagnetic_series(source, years, with_sunspots=with_sunspots).series


__all__ = [
    "Batch",
    "BatchSchema",
    "DEFAULT_PRIORITY",
    "Definitiveness",
    "EmptyMergeResultError",
    "FetchResult",
    "GeoSolarConfig",
    "GeoSolarError",
    "GfzSource",
    "IncompatibleSchemaError",
    "Observation",
    "ParseError",
    "Provenance",
    "ReconcileResult",
    "RemoteTextTransport",
    "SchemaMismatchError",
    "Series",
    "SilsoSource",
    "SourceConfig",
    "SourceUnavailableError",
    "__version__",
    "archived_sunspots",
    "complete_sunspots",
    "current_month_sunspots",
    "geomagnetic_files",
    "geomagnetic_indices",
    "merge_batches",
    "reconcile",
]
