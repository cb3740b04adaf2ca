"""Exception handling module."""

from geosolar.core.exceptions.base import (
    ConfigurationError,
    EmptyMergeResultError,
    GeoSolarError,
    IncompatibleSchemaError,
    InvalidRequestError,
    ParseError,
    ReconciliationError,
    SchemaDefinitionError,
    SchemaMismatchError,
    SeriesOrderError,
    SourceError,
    SourceUnavailableError,
    UnrankedProvenanceError,
)
from geosolar.core.exceptions.codes import ErrorCode

__all__ = [
    "GeoSolarError",
    "ConfigurationError",
    "InvalidRequestError",
    "SchemaDefinitionError",
    "SourceError",
    "SourceUnavailableError",
    "SchemaMismatchError",
    "ParseError",
    "ReconciliationError",
    "IncompatibleSchemaError",
    "EmptyMergeResultError",
    "UnrankedProvenanceError",
    "SeriesOrderError",
    "ErrorCode",
]
