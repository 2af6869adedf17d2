"""
CLI commands for running spreadsheet imports outside the admin API.
"""

from __future__ import annotations

import json
from pathlib import Path

import click
from flask import current_app
from flask.cli import with_appcontext

from portal_app.importer.audit import YEARLY_KINDS, get_last_upload_at
from portal_app.importer.errors import ImporterError
from portal_app.importer.pipeline import PIPELINES
from portal_app.importer.utils import UploadedFile
from portal_app.utils.importer import is_importer_enabled

MULTI_FILE_KINDS = frozenset({"eoy"})


@click.group(name="importer")
def importer_cli():
    """Spreadsheet import commands."""


def get_disabled_importer_group() -> click.Group:
    """
    Return a minimal command group that informs the operator the importer is disabled.
    """

    @click.group(name="importer", invoke_without_command=True)
    def disabled_group():
        raise click.ClickException("Importer commands are unavailable because IMPORTER_ENABLED=false.")

    return disabled_group


def _pipeline_kwargs(kind: str, chapter_type: str | None, year: int | None, region_sheet: str | None) -> dict:
    if kind == "history":
        return {"chapter_type": chapter_type}
    if kind == "eoy":
        return {"year": year, "region_sheet": region_sheet}
    return {}


@importer_cli.command("run")
@click.argument("kind", type=click.Choice(sorted(PIPELINES)))
@click.argument(
    "files",
    nargs=-1,
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option("--dry-run", is_flag=True, help="Validate and count rows without writing.")
@click.option(
    "--chapter-type",
    type=click.Choice(["collegiate", "alumni"], case_sensitive=False),
    help="Classification for chapters created by a history import.",
)
@click.option("--year", type=int, help="Snapshot year for end-of-year imports (defaults to the filename year).")
@click.option("--region-sheet", help="Override REGION_SHEET_NAME for end-of-year imports.")
@with_appcontext
def importer_run(kind, files, dry_run, chapter_type, year, region_sheet):
    """Run the KIND import pipeline against FILES and print its summary."""
    if not is_importer_enabled(current_app):
        raise click.ClickException("Importer is disabled; enable it via IMPORTER_ENABLED before running.")
    if len(files) > 1 and kind not in MULTI_FILE_KINDS:
        raise click.ClickException(f"The {kind} import accepts a single file.")

    uploads = [UploadedFile.from_path(path) for path in files]
    pipeline = PIPELINES[kind]
    target = uploads if kind in MULTI_FILE_KINDS else uploads[0]
    try:
        summary = pipeline(target, dry_run=dry_run, **_pipeline_kwargs(kind, chapter_type, year, region_sheet))
    except ImporterError as exc:
        raise click.ClickException(exc.message) from exc

    click.echo(json.dumps(summary.as_dict(), indent=2, sort_keys=True))


@importer_cli.command("last-upload")
@click.option(
    "--kind",
    "kinds",
    multiple=True,
    help="Upload kind to consider; repeatable. Defaults to the yearly history kinds.",
)
@with_appcontext
def importer_last_upload(kinds):
    """Print the timestamp of the most recent matching import."""
    last = get_last_upload_at(kinds or YEARLY_KINDS)
    click.echo(last.isoformat() if last else "never")
