"""Explicit success/failure wrapper for source fetches."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, cast

from geosolar.core.exceptions.base import GeoSolarError
from geosolar.core.models.series import Batch


@dataclass(frozen=True)
class FetchResult:
    """Outcome of one collaborator fetch.

    Exactly one of ``batch`` and ``error`` is set. A successful fetch with zero
    rows is ``ok`` and ``is_empty``, which is different from a failed fetch.
    """

    source: str
    batch: Batch | None = None
    error: GeoSolarError | None = None

    def __post_init__(self) -> None:
        if (self.batch is None) == (self.error is None):
            raise ValueError("FetchResult needs exactly one of batch or error")

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def failed(self) -> bool:
        return self.error is not None

    @property
    def is_empty(self) -> bool:
        return self.batch is not None and self.batch.is_empty

    def unwrap(self) -> Batch:
        """Return the batch or raise the captured error."""
        if self.error is not None:
            raise self.error
        return cast(Batch, self.batch)

    @classmethod
    def capture(cls, source: str, fn: Callable[..., Batch], *args: Any, **kwargs: Any) -> FetchResult:
        """Run ``fn`` and record either its batch or the geosolar error it raised."""
        try:
            return cls(source=source, batch=fn(*args, **kwargs))
        except GeoSolarError as exc:
            return cls(source=source, error=exc)


__all__ = ["FetchResult"]
