"""
CLI: ``queueline config`` — inspect named configurations.
"""

from __future__ import annotations

from typing import Any

import typer

from queueline.cli.utils import fail_with, load_registry, output_data
from queueline.core.errors import QueuelineError
from queueline.execution.registry import Configuration

app = typer.Typer(no_args_is_help=True)


def _describe(configuration: Configuration) -> dict[str, Any]:
    return {
        "name": configuration.name,
        "adapter": configuration.adapter,
        "servers": ", ".join(str(s) for s in configuration.servers),
        "filters": ", ".join(s if isinstance(s, str) else getattr(s, "__name__", repr(s)) for s in configuration.filters),
    }


@app.command("list")
def config_list(
    config_file: str | None = typer.Option(None, "--config-file", "-c"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """List configurations and whether each one is usable."""
    registry = load_registry(config_file)
    rows = []
    for name in registry.names():
        try:
            row = _describe(registry.get_config(name))
            row["status"] = "ok"
        except QueuelineError as e:
            row = {"name": name, "adapter": "", "servers": "", "filters": "", "status": type(e).__name__}
        rows.append(row)
    output_data(rows, as_json=json_out, title="Configurations")


@app.command("show")
def config_show(
    name: str = typer.Argument(..., help="Configuration name"),
    config_file: str | None = typer.Option(None, "--config-file", "-c"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Show one normalized configuration."""
    registry = load_registry(config_file)
    try:
        configuration = registry.get_config(name)
    except QueuelineError as e:
        fail_with(e)
        return
    data = _describe(configuration)
    data.update({key: value for key, value in configuration.options.items()})
    output_data(data, as_json=json_out, title=f"Configuration {name}")
