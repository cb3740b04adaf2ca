"""Data models module."""

from geosolar.core.models.schema import (
    BatchSchema,
    FieldDef,
    FieldRole,
    FieldType,
    FieldValue,
    SentinelRule,
)
from geosolar.core.models.series import (
    DEFAULT_DEFINITIVENESS,
    Batch,
    Definitiveness,
    Observation,
    Provenance,
    Series,
)

__all__ = [
    "Batch",
    "BatchSchema",
    "DEFAULT_DEFINITIVENESS",
    "Definitiveness",
    "FieldDef",
    "FieldRole",
    "FieldType",
    "FieldValue",
    "Observation",
    "Provenance",
    "SentinelRule",
    "Series",
]
