"""SILSO sunspot commands."""

from __future__ import annotations

from collections.abc import Callable

import typer

from geosolar.core.config import get_config
from geosolar.core.exceptions import GeoSolarError
from geosolar.core.models import Batch
from geosolar.core.services import complete_sunspot_series
from geosolar.core.sources import SilsoSource

from .utils import fail, prepare_output, tail_rows, validate_tail

sunspots_app = typer.Typer(help="SILSO daily sunspot numbers.")

TAIL_OPTION = typer.Option(None, "--tail", "-n", help="Only show the last N records.")


def register(app: typer.Typer) -> None:
    """Register the sunspot command group on the provided application."""

    app.add_typer(sunspots_app, name="sunspots", help="Fetch SILSO sunspot numbers")


def get_silso_source() -> SilsoSource:
    """Factory hook for obtaining a :class:`SilsoSource`."""

    return SilsoSource(config=get_config().sources)


@sunspots_app.command("archived")
def archived_command(ctx: typer.Context, tail: int | None = TAIL_OPTION) -> None:
    """Fetch the archived daily series as published."""

    _render_batch(ctx, tail, lambda source: source.fetch_archived(), "SILSO archived")


@sunspots_app.command("current")
def current_command(ctx: typer.Context, tail: int | None = TAIL_OPTION) -> None:
    """Fetch the provisional values for the running month."""

    _render_batch(ctx, tail, lambda source: source.fetch_current_month(), "SILSO current month")


@sunspots_app.command("complete")
def complete_command(
    ctx: typer.Context,
    tail: int | None = TAIL_OPTION,
    sequential: bool = typer.Option(False, "--sequential", help="Fetch the two resources one after the other."),
) -> None:
    """Fetch both resources and print the merged series."""

    validate_tail(tail)
    formatter, stream, stack, _ = prepare_output(ctx)
    source = get_silso_source()
    try:
        result = complete_sunspot_series(source, concurrent=not sequential)
    except GeoSolarError as error:
        stack.close()
        fail(error)
    finally:
        source.close()

    rows = tail_rows(result.series.to_rows(), tail)
    try:
        formatter.render(rows, stream=stream, title="SILSO complete series")
    finally:
        stack.close()


def _render_batch(
    ctx: typer.Context,
    tail: int | None,
    fetch: Callable[[SilsoSource], Batch],
    title: str,
) -> None:
    validate_tail(tail)
    formatter, stream, stack, _ = prepare_output(ctx)
    source = get_silso_source()
    try:
        batch = fetch(source)
    except GeoSolarError as error:
        stack.close()
        fail(error)
    finally:
        source.close()

    rows = tail_rows(batch.to_rows(), tail)
    try:
        formatter.render(rows, stream=stream, title=title)
    finally:
        stack.close()


__all__ = [
    "archived_command",
    "complete_command",
    "current_command",
    "get_silso_source",
    "register",
    "sunspots_app",
]
