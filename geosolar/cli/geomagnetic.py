"""GFZ geomagnetic index commands."""

from __future__ import annotations

import typer

from geosolar.core.config import get_config
from geosolar.core.exceptions import GeoSolarError
from geosolar.core.services import ReconcileResult, geomagnetic_series, year_range
from geosolar.core.sources import GfzSource

from .utils import fail, prepare_output, tail_rows, validate_tail

geomagnetic_app = typer.Typer(help="GFZ Kp, ap and Ap indices.")

TAIL_OPTION = typer.Option(None, "--tail", "-n", help="Only show the last N records.")
SUNSPOTS_OPTION = typer.Option(
    False,
    "--with-sunspots",
    help="Keep the SN and F10.7 columns published alongside the indices.",
)


def register(app: typer.Typer) -> None:
    """Register the geomagnetic command group on the provided application."""

    app.add_typer(geomagnetic_app, name="geomagnetic", help="Fetch GFZ geomagnetic indices")


def get_gfz_source() -> GfzSource:
    """Factory hook for obtaining a :class:`GfzSource`."""

    return GfzSource(config=get_config().sources)


@geomagnetic_app.command("files")
def files_command(
    ctx: typer.Context,
    pattern: str | None = typer.Option(None, "--pattern", help="Only list names containing this text."),
) -> None:
    """List the files published in the GFZ directory."""

    formatter, stream, stack, _ = prepare_output(ctx)
    source = get_gfz_source()
    try:
        files = source.list_available_files()
    except GeoSolarError as error:
        stack.close()
        fail(error)
    finally:
        source.close()

    names = sorted(name for name in files if pattern is None or pattern in name)
    try:
        formatter.render([{"file": name} for name in names], stream=stream, columns=["file"], title="GFZ files")
    finally:
        stack.close()


@geomagnetic_app.command("year")
def year_command(
    ctx: typer.Context,
    year: int = typer.Argument(..., help="Calendar year, 1932 or later."),
    with_sunspots: bool = SUNSPOTS_OPTION,
    tail: int | None = TAIL_OPTION,
) -> None:
    """Fetch one yearly file and print its reconciled records."""

    _render_years(ctx, [year], with_sunspots, tail)


@geomagnetic_app.command("range")
def range_command(
    ctx: typer.Context,
    start: int = typer.Argument(..., help="First year."),
    end: int = typer.Argument(..., help="Last year, inclusive."),
    with_sunspots: bool = SUNSPOTS_OPTION,
    tail: int | None = TAIL_OPTION,
) -> None:
    """Fetch consecutive yearly files and print the merged series."""

    try:
        years = year_range(start, end)
    except GeoSolarError as error:
        fail(error)
    _render_years(ctx, years, with_sunspots, tail)


def _render_years(ctx: typer.Context, years: list[int], with_sunspots: bool, tail: int | None) -> None:
    validate_tail(tail)
    formatter, stream, stack, _ = prepare_output(ctx)
    source = get_gfz_source()
    try:
        result: ReconcileResult = geomagnetic_series(source, years, with_sunspots=with_sunspots)
    except GeoSolarError as error:
        stack.close()
        fail(error)
    finally:
        source.close()

    rows = tail_rows(result.series.to_rows(), tail)
    title = f"GFZ indices {years[0]}" if len(years) == 1 else f"GFZ indices {years[0]}-{years[-1]}"
    try:
        formatter.render(rows, stream=stream, title=title)
    finally:
        stack.close()


__all__ = [
    "files_command",
    "geomagnetic_app",
    "get_gfz_source",
    "range_command",
    "register",
    "year_command",
]
