"""Standardised error codes shared by every geosolar error."""

from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    """Machine readable error codes carried by :class:`GeoSolarError`."""

    GENERAL_ERROR = "GENERAL_ERROR"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    INVALID_REQUEST = "INVALID_REQUEST"
    SCHEMA_DEFINITION_ERROR = "SCHEMA_DEFINITION_ERROR"

    # source reader
    SOURCE_ERROR = "SOURCE_ERROR"
    SOURCE_UNAVAILABLE = "SOURCE_UNAVAILABLE"
    SCHEMA_MISMATCH = "SCHEMA_MISMATCH"
    PARSE_ERROR = "PARSE_ERROR"

    # reconciler
    RECONCILIATION_ERROR = "RECONCILIATION_ERROR"
    INCOMPATIBLE_SCHEMA = "INCOMPATIBLE_SCHEMA"
    EMPTY_MERGE_RESULT = "EMPTY_MERGE_RESULT"
    UNRANKED_PROVENANCE = "UNRANKED_PROVENANCE"
    SERIES_ORDER_ERROR = "SERIES_ORDER_ERROR"
    DUPLICATE_DATE_CONFLICT = "DUPLICATE_DATE_CONFLICT"


__all__ = ["ErrorCode"]
