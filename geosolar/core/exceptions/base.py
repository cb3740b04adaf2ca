"""geosolar core exception classes."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from geosolar.core.exceptions.codes import ErrorCode


class GeoSolarError(Exception):
    """Base class for every geosolar failure."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode | str = ErrorCode.GENERAL_ERROR,
        details: dict[str, Any] | None = None,
    ):
        """Initialise the error.

        Args:
            message: Human readable message.
            error_code: Machine readable code.
            details: Extra structured context.
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code.value if isinstance(error_code, ErrorCode) else error_code
        self.details = details or {}

    def to_payload(self) -> dict[str, Any]:
        """Return a serialisable payload representing the error."""

        return {
            "code": self.error_code,
            "message": self.message,
            "details": dict(self.details),
        }


class ConfigurationError(GeoSolarError):
    """Invalid runtime configuration."""

    def __init__(self, message: str, setting: str | None = None, details: dict[str, Any] | None = None):
        super_details = details or {}
        if setting:
            super_details["setting"] = setting
        super().__init__(message, ErrorCode.CONFIGURATION_ERROR, super_details)
        self.setting = setting


class InvalidRequestError(GeoSolarError):
    """A caller asked for something the sources cannot provide."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message, ErrorCode.INVALID_REQUEST, details)


class SchemaDefinitionError(GeoSolarError):
    """A schema, layout or batch was declared inconsistently."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message, ErrorCode.SCHEMA_DEFINITION_ERROR, details)


class SourceError(GeoSolarError):
    """Failures raised by the source readers."""

    def __init__(
        self,
        message: str,
        source_name: str,
        error_code: ErrorCode | str = ErrorCode.SOURCE_ERROR,
        details: dict[str, Any] | None = None,
    ):
        super_details = details or {}
        super_details.setdefault("source", source_name)
        super().__init__(message, error_code, super_details)
        self.source_name = source_name


class SourceUnavailableError(SourceError):
    """The remote resource could not be reached or returned an error status."""

    def __init__(
        self,
        message: str,
        source_name: str,
        url: str | None = None,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ):
        super_details = details or {}
        if url is not None:
            super_details["url"] = url
        if status_code is not None:
            super_details["status_code"] = status_code
        super().__init__(message, source_name, ErrorCode.SOURCE_UNAVAILABLE, super_details)
        self.url = url
        self.status_code = status_code


class SchemaMismatchError(SourceError):
    """The row shape of a resource does not match its declared layout."""

    def __init__(
        self,
        message: str,
        source_name: str,
        expected_columns: int,
        actual_columns: int,
        details: dict[str, Any] | None = None,
        *,
        line: int | None = None,
    ):
        super_details = details or {}
        super_details["expected_columns"] = expected_columns
        super_details["actual_columns"] = actual_columns
        if line is not None:
            super_details["line"] = line
        super().__init__(message, source_name, ErrorCode.SCHEMA_MISMATCH, super_details)
        self.expected_columns = expected_columns
        self.actual_columns = actual_columns
        self.line = line


class ParseError(SourceError):
    """A cell could not be converted to its declared type."""

    def __init__(
        self,
        message: str,
        source_name: str,
        line: int | None = None,
        column: str | None = None,
        raw_value: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super_details = details or {}
        if line is not None:
            super_details["line"] = line
        if column is not None:
            super_details["column"] = column
        if raw_value is not None:
            super_details["raw_value"] = raw_value
        super().__init__(message, source_name, ErrorCode.PARSE_ERROR, super_details)
        self.line = line
        self.column = column
        self.raw_value = raw_value


class ReconciliationError(GeoSolarError):
    """Failures raised while merging batches into a series."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode | str = ErrorCode.RECONCILIATION_ERROR,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, error_code, details)


class IncompatibleSchemaError(ReconciliationError):
    """Two batches declare the same field name with different types."""

    def __init__(self, message: str, field: str, types: Sequence[str], details: dict[str, Any] | None = None):
        super_details = details or {}
        super_details["field"] = field
        super_details["types"] = list(types)
        super().__init__(message, ErrorCode.INCOMPATIBLE_SCHEMA, super_details)
        self.field = field
        self.types = tuple(types)


class EmptyMergeResultError(ReconciliationError):
    """No batch, or no non-empty batch, was supplied to the reconciler."""

    def __init__(self, message: str, batch_count: int = 0, details: dict[str, Any] | None = None):
        super_details = details or {}
        super_details["batch_count"] = batch_count
        super().__init__(message, ErrorCode.EMPTY_MERGE_RESULT, super_details)
        self.batch_count = batch_count


class UnrankedProvenanceError(ReconciliationError):
    """A batch provenance is missing from the authority ordering."""

    def __init__(self, message: str, provenance: str, details: dict[str, Any] | None = None):
        super_details = details or {}
        super_details["provenance"] = provenance
        super().__init__(message, ErrorCode.UNRANKED_PROVENANCE, super_details)
        self.provenance = provenance


class SeriesOrderError(ReconciliationError):
    """Series records are not unique and strictly ascending by date."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message, ErrorCode.SERIES_ORDER_ERROR, details)
