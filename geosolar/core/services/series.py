"""Composite operations that fetch several batches and reconcile them."""

from __future__ import annotations

import contextvars
from collections.abc import Iterable, Sequence
from concurrent.futures import ThreadPoolExecutor

from geosolar.core.exceptions.base import InvalidRequestError
from geosolar.core.logging import get_logger, log_context
from geosolar.core.models.series import Provenance
from geosolar.core.services.reconciliation import DEFAULT_PRIORITY, ReconcileResult, reconcile
from geosolar.core.sources.gfz import GfzSource, validate_year
from geosolar.core.sources.results import FetchResult
from geosolar.core.sources.silso import SilsoSource

logger = get_logger(__name__)


def complete_sunspot_series(
    source: SilsoSource,
    *,
    priority: Sequence[Provenance | str] = DEFAULT_PRIORITY,
    concurrent: bool = True,
) -> ReconcileResult:
    """Fetch the archived and current month SILSO data and merge them.

    Both fetches must succeed; the merge never runs on a partial fetch.

    Raises:
        SourceError: The first collaborator failure, archived before current.
    """
    with log_context(operation="complete_sunspot_series"):
        if concurrent:
            workers = max(1, min(2, source.config.max_workers))
            with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="silso") as pool:
                # workers inherit the caller's log context
                archived_future = pool.submit(
                    contextvars.copy_context().run, FetchResult.capture, "archived", source.fetch_archived
                )
                current_future = pool.submit(
                    contextvars.copy_context().run, FetchResult.capture, "current_month", source.fetch_current_month
                )
                results = [archived_future.result(), current_future.result()]
        else:
            results = [
                FetchResult.capture("archived", source.fetch_archived),
                FetchResult.capture("current_month", source.fetch_current_month),
            ]

        failed = [result for result in results if result.failed]
        if failed:
            logger.error(
                "Cannot build the complete sunspot series, failed fetches: "
                + ", ".join(result.source for result in failed)
            )
        return reconcile([result.unwrap() for result in results], priority)


def geomagnetic_series(
    source: GfzSource,
    years: Iterable[int],
    *,
    with_sunspots: bool = False,
) -> ReconcileResult:
    """Fetch the GFZ yearly files for ``years`` and merge them into one series."""
    requested = sorted({validate_year(year) for year in years})
    if not requested:
        raise InvalidRequestError("At least one year is required")
    with log_context(operation="geomagnetic_series"):
        batches = [source.fetch_year(year, with_sunspots=with_sunspots) for year in requested]
        return reconcile(batches, (Provenance.YEARLY_FILE,))


def year_range(start: int, end: int) -> list[int]:
    """Return the inclusive list of years between ``start`` and ``end``."""
    validate_year(start)
    validate_year(end)
    if end < start:
        raise InvalidRequestError(
            f"End year {end} is before start year {start}",
            details={"start": start, "end": end},
        )
    return list(range(start, end + 1))


__all__ = ["complete_sunspot_series", "geomagnetic_series", "year_range"]
