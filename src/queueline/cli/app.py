"""
Root Typer application for the queueline CLI.

Worker harnesses call ``queueline ping --scheduled`` and
``queueline scheduled <name>`` periodically; ``queueline config`` inspects
configuration files.
"""

from __future__ import annotations

import typer
from typer import Typer

from queueline.cli.utils import console, fail_with, load_registry, output_data
from queueline.core.errors import QueuelineError
from queueline.core.logging import configure_logging
from queueline.execution.dispatch import Dispatcher, ping

app = Typer(
    name="queueline",
    help="queueline — dispatch background jobs to named queue backends.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# ── Version callback ─────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        from queueline import __version__

        typer.echo(f"queueline {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(  # noqa: UP007
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log at DEBUG level."),
) -> None:
    """queueline CLI — liveness checks, scheduled jobs, configurations."""
    configure_logging(level="DEBUG" if verbose else None)


@app.command("ping")
def ping_command(
    scheduled: bool = typer.Option(False, "--scheduled", help="Print the scheduled liveness line."),
) -> None:
    """Check that a worker is alive."""
    result = ping(scheduled=scheduled)
    if result is not None:
        typer.echo(result)


@app.command("scheduled")
def scheduled_command(
    name: str = typer.Argument(..., help="Configuration name"),
    config_file: str | None = typer.Option(None, "--config-file", "-c"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Process the scheduled jobs of a configuration."""
    registry = load_registry(config_file)
    try:
        result = Dispatcher(registry).scheduled(name)
    except QueuelineError as e:
        fail_with(e)
        return

    if result is None:
        console.print("[dim]Nothing to report.[/dim]")
        return
    output_data(result if isinstance(result, list | dict) else {"result": result}, as_json=json_out, title="Scheduled")


# ── Sub-command registration ─────────────────────────────────────────────

from queueline.cli.config import app as config_app  # noqa: E402

app.add_typer(config_app, name="config", help="Configuration inspection.")
