"""Source readers: layouts, parsing, transport and the SILSO/GFZ fetchers."""

from geosolar.core.sources.gfz import DAILY_LAYOUT, GEOMAGNETIC_ONLY_LAYOUT, GfzSource
from geosolar.core.sources.layout import ColumnRole, ColumnSpec, SourceLayout
from geosolar.core.sources.parser import parse_batch
from geosolar.core.sources.results import FetchResult
from geosolar.core.sources.silso import ARCHIVED_LAYOUT, CURRENT_MONTH_LAYOUT, SilsoSource
from geosolar.core.sources.transport import RemoteTextTransport

__all__ = [
    "ARCHIVED_LAYOUT",
    "CURRENT_MONTH_LAYOUT",
    "ColumnRole",
    "ColumnSpec",
    "DAILY_LAYOUT",
    "FetchResult",
    "GEOMAGNETIC_ONLY_LAYOUT",
    "GfzSource",
    "RemoteTextTransport",
    "SilsoSource",
    "SourceLayout",
    "parse_batch",
]
