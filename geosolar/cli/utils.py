"""Utility helpers shared across CLI commands."""

from __future__ import annotations

import json
import sys
from collections.abc import Mapping, Sequence
from contextlib import ExitStack
from dataclasses import dataclass
from pathlib import Path
from typing import NoReturn, TextIO

import typer

from geosolar.core.exceptions import (
    ConfigurationError,
    GeoSolarError,
    InvalidRequestError,
    ReconciliationError,
    SourceError,
)

from .constants import RECONCILE_EXIT_CODE, SOURCE_EXIT_CODE, SYSTEM_EXIT_CODE, VALIDATION_EXIT_CODE
from .formatters import OutputFormatter, create_formatter


@dataclass(slots=True)
class CLIOptions:
    """Resolved options derived from the Typer context."""

    format: str = "table"
    output_path: Path | None = None
    no_color: bool = False


def get_cli_options(ctx: typer.Context) -> CLIOptions:
    """Extract :class:`CLIOptions` from the Typer context object."""

    ctx.ensure_object(dict)
    data = ctx.obj or {}
    return CLIOptions(
        format=str(data.get("format", "table")),
        output_path=data.get("output_path"),
        no_color=bool(data.get("no_color", False)),
    )


def prepare_output(ctx: typer.Context) -> tuple[OutputFormatter, TextIO, ExitStack, CLIOptions]:
    """Resolve formatter and writable stream for the current command."""

    options = get_cli_options(ctx)
    try:
        formatter = create_formatter(options.format, no_color=options.no_color)
    except ValueError as exc:  # pragma: no cover - validated at callback
        emit_error(str(exc), "INVALID_FORMAT")
        raise typer.Exit(code=VALIDATION_EXIT_CODE) from exc

    stack = ExitStack()
    stream: TextIO
    if options.output_path is not None:
        try:
            stream = stack.enter_context(open(options.output_path, "w", encoding="utf-8"))
        except OSError as exc:
            stack.close()
            emit_error(f"Unable to open '{options.output_path}': {exc}", "OUTPUT_WRITE_ERROR")
            raise typer.Exit(code=VALIDATION_EXIT_CODE) from exc
    else:
        stream = sys.stdout

    return formatter, stream, stack, options


def emit_error(message: str, code: str, *, details: Mapping[str, object] | None = None) -> None:
    """Print a structured error payload to stderr."""

    payload: dict[str, object] = {"code": code, "message": message}
    if details:
        payload["details"] = _sanitize_details(details)
    typer.echo(json.dumps(payload, ensure_ascii=False, default=str), err=True)


def exit_code_for(error: GeoSolarError) -> int:
    """Map a geosolar error onto the CLI exit code."""

    if isinstance(error, (InvalidRequestError, ConfigurationError)):
        return VALIDATION_EXIT_CODE
    if isinstance(error, SourceError):
        return SOURCE_EXIT_CODE
    if isinstance(error, ReconciliationError):
        return RECONCILE_EXIT_CODE
    return SYSTEM_EXIT_CODE


def fail(error: GeoSolarError) -> NoReturn:
    """Report ``error`` on stderr and exit with its code."""

    emit_error(error.message, error.error_code, details=error.details)
    raise typer.Exit(code=exit_code_for(error)) from error


def validate_tail(tail: int | None) -> None:
    """Reject a non-positive ``--tail`` value."""

    if tail is not None and tail <= 0:
        emit_error("--tail must be positive.", "INVALID_TAIL", details={"tail": tail})
        raise typer.Exit(code=VALIDATION_EXIT_CODE)


def tail_rows(rows: list[dict[str, object]], tail: int | None) -> list[dict[str, object]]:
    """Keep the last ``tail`` rows, or every row when ``tail`` is ``None``."""

    return rows if tail is None else rows[-tail:]


def _sanitize_details(details: Mapping[str, object]) -> Mapping[str, object]:
    sanitized: dict[str, object] = {}
    for key, value in details.items():
        if isinstance(value, (str, int, float, bool)) or value is None:
            sanitized[key] = value
        elif isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray)):
            sanitized[key] = [str(item) for item in value]
        else:
            sanitized[key] = str(value)
    return sanitized


__all__ = [
    "CLIOptions",
    "emit_error",
    "exit_code_for",
    "fail",
    "get_cli_options",
    "prepare_output",
    "tail_rows",
    "validate_tail",
]
