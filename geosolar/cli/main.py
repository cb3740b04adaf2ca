"""Main entry point for the geosolar command line interface."""

from __future__ import annotations

from pathlib import Path

import typer

from geosolar.core.config import get_config
from geosolar.core.exceptions import GeoSolarError
from geosolar.core.logging import configure_logging

from .formatters import create_formatter
from .geomagnetic import register as register_geomagnetic_commands
from .sunspots import register as register_sunspot_commands
from .utils import fail

_LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")


def create_app() -> typer.Typer:
    """Create a Typer application instance for geosolar."""

    app = typer.Typer(add_completion=False, help="Sunspot and geomagnetic index time series")

    @app.callback()
    def main(
        ctx: typer.Context,
        format: str = typer.Option(
            "table",
            "--format",
            "-f",
            help="Output format (table or jsonl).",
            show_default=True,
        ),
        output: Path | None = typer.Option(
            None,
            "--output",
            "-o",
            help="Write output to a file instead of stdout.",
        ),
        log_level: str | None = typer.Option(
            None,
            "--log-level",
            help="Logging level for the JSON log lines written to stderr; defaults to the configured level.",
        ),
        no_color: bool = typer.Option(
            False,
            "--no-color",
            help="Disable colorized output for table format.",
        ),
    ) -> None:
        ctx.ensure_object(dict)
        normalized_format = format.strip().lower()
        try:
            create_formatter(normalized_format, no_color=no_color)
        except ValueError as exc:
            raise typer.BadParameter(str(exc), param_hint="--format") from exc

        try:
            logging_config = get_config().logging
        except GeoSolarError as error:
            fail(error)
        level = (log_level or logging_config.level).strip().upper()
        if level not in _LOG_LEVELS:
            raise typer.BadParameter(
                f"Unsupported log level '{log_level}'. Available levels: {', '.join(_LOG_LEVELS)}.",
                param_hint="--log-level",
            )

        ctx.obj.update(
            {
                "format": normalized_format,
                "output_path": output,
                "log_level": level,
                "no_color": no_color,
            }
        )
        configure_logging(level, file_output=bool(logging_config.file), file_path=logging_config.file)

    register_sunspot_commands(app)
    register_geomagnetic_commands(app)
    return app


app = create_app()
