"""Reconciliation and composite series services."""

from geosolar.core.services.reconciliation import (
    DEFAULT_PRIORITY,
    DuplicateDateConflict,
    ReconcileResult,
    merge_batches,
    reconcile,
    unify_schemas,
)
from geosolar.core.services.series import complete_sunspot_series, geomagnetic_series, year_range

__all__ = [
    "DEFAULT_PRIORITY",
    "DuplicateDateConflict",
    "ReconcileResult",
    "complete_sunspot_series",
    "geomagnetic_series",
    "merge_batches",
    "reconcile",
    "unify_schemas",
    "year_range",
]
