"""Command-line entry point: ``glueapi [global options] <command> ...``.

The root callback builds the :class:`~glueapi.output.LogSink` from the
global flags and records the profile selection for the sub-commands.
:func:`main`, the console script, turns typed errors into exit codes and
anything else into a crash log.
"""

from __future__ import annotations

import signal
import sys
import traceback
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

import typer

from glueapi import __version__
from glueapi.commands import CliOptions
from glueapi.commands.config import config_app
from glueapi.commands.records import (
    create_command,
    delete_command,
    get_command,
    list_command,
    update_command,
)
from glueapi.exceptions import GlueError
from glueapi.exit_codes import EXIT_CANCELLED, EXIT_GENERIC_FAILURE
from glueapi.output import LogSink, OutputFormat, error, set_output

app = typer.Typer(
    name="glueapi",
    help="Fetch and modify IT documentation records over the JSON:API.",
    no_args_is_help=True,
    add_completion=False,
)

for _name, _command in (
    ("list", list_command),
    ("get", get_command),
    ("create", create_command),
    ("update", update_command),
    ("delete", delete_command),
):
    app.command(_name)(_command)
app.add_typer(config_app, name="config", help="Profile management.")


def _show_version(value: bool) -> None:
    if value:
        typer.echo(f"glueapi {__version__}")
        raise typer.Exit()


def _record_format(json_output: bool, plain_output: bool) -> OutputFormat:
    """``--json`` and ``--plain`` win; otherwise the stored ``output.format``."""
    if json_output:
        return OutputFormat.JSON
    if plain_output:
        return OutputFormat.PLAIN
    from glueapi.config import load_global_config

    return OutputFormat(load_global_config().output.format)


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False, "--version", callback=_show_version, is_eager=True, help="Show version and exit."
    ),
    profile: Optional[str] = typer.Option(None, "--profile", "-p", help="Profile name to use."),
    base_url: Optional[str] = typer.Option(
        None, "--base-url", help="Override the profile's API root URL."
    ),
    json_output: bool = typer.Option(False, "--json", help="Print records as JSON."),
    plain_output: bool = typer.Option(False, "--plain", help="Print one record per line."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable color output."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only show warnings and errors."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug messages."),
    timestamps: bool = typer.Option(
        False, "--timestamps", help="Prefix diagnostics with a UTC timestamp."
    ),
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmations."),
    output_file: Optional[str] = typer.Option(
        None, "-o", "--output", help="Write records to this file as JSON."
    ),
) -> None:
    # The sink must exist before anything below can log.
    set_output(LogSink(no_color=no_color, quiet=quiet, verbose=verbose, timestamps=timestamps))
    try:
        record_format = _record_format(json_output, plain_output)
    except GlueError as exc:
        raise typer.Exit(code=exc.exit_code) from None
    set_output(
        LogSink(
            format=record_format,
            no_color=no_color,
            quiet=quiet,
            verbose=verbose,
            timestamps=timestamps,
            output_file=output_file,
        )
    )
    ctx.obj = CliOptions(profile=profile, base_url=base_url, force=force)


def _on_interrupt(signum: int, frame: Any) -> None:
    sys.stderr.write("\nCancelled.\n")
    sys.exit(EXIT_CANCELLED)


def _save_crash_log() -> Path:
    """Write the traceback being handled to ``<data dir>/logs`` and return its path."""
    from glueapi.config import get_data_dir

    logs = get_data_dir() / "logs"
    logs.mkdir(exist_ok=True)
    path = logs / f"crash-{datetime.now(timezone.utc):%Y%m%dT%H%M%SZ}.log"
    path.write_text(traceback.format_exc(), encoding="utf-8")
    return path


def main() -> None:
    """Console-script entry point.

    A :class:`~glueapi.exceptions.GlueError` has already been logged where it
    was raised, so it only sets the exit code here.
    """
    signal.signal(signal.SIGINT, _on_interrupt)
    try:
        app()
    except GlueError as exc:
        sys.exit(exc.exit_code)
    except Exception:
        error(f"Unexpected error. Debug log: {_save_crash_log()}")
        sys.exit(EXIT_GENERIC_FAILURE)
