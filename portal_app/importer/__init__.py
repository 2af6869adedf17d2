"""
Spreadsheet and CSV import package.

Registers the importer CLI group according to the ``IMPORTER_ENABLED`` flag
and records the flag state on ``app.extensions['importer']``.
"""

from __future__ import annotations

from flask import Flask

from portal_app.utils.importer import is_importer_enabled

from .cli import get_disabled_importer_group, importer_cli
from .errors import ImporterError, ImportStorageError, UploadError
from .pipeline import PIPELINES, ImportSummary

IMPORTER_EXTENSION_KEY = "importer"

__all__ = [
    "init_importer",
    "IMPORTER_EXTENSION_KEY",
    "PIPELINES",
    "ImportSummary",
    "ImporterError",
    "ImportStorageError",
    "UploadError",
]


def _set_cli(app: Flask, enabled: bool) -> None:
    """Register the appropriate CLI group based on flag state."""
    # Avoid duplicate registrations when running tests
    command_name = importer_cli.name
    if command_name in app.cli.commands:
        app.cli.commands.pop(command_name)

    if enabled:
        app.cli.add_command(importer_cli)
    else:
        app.cli.add_command(get_disabled_importer_group())


def init_importer(app: Flask) -> None:
    """
    Register importer CLI commands and record importer state on the app.
    """
    enabled = is_importer_enabled(app)
    state = app.extensions.setdefault(IMPORTER_EXTENSION_KEY, {})
    state.update({"enabled": enabled, "pipelines": tuple(sorted(PIPELINES))})
    _set_cli(app, enabled=enabled)

    if enabled:
        app.logger.info("Importer enabled with pipelines: %s", ", ".join(sorted(PIPELINES)))
    else:
        app.logger.info("Importer disabled via IMPORTER_ENABLED flag; skipping registration.")
