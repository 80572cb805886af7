"""
CLI layer for queueline.

Provides a Typer application for the harness around the dispatcher:
liveness pings, scheduled-job processing and configuration inspection.
All dispatch logic lives in ``queueline.execution``.

Entry point::

    queueline --help
"""

from queueline.cli.app import app

__all__ = ["app"]
