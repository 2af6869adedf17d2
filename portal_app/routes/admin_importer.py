"""
Admin-facing importer routes: one multipart upload endpoint per data domain.
"""

from __future__ import annotations

from http import HTTPStatus

from flask import Blueprint, current_app, jsonify, request

from portal_app.importer.adapters import CSV_EXTENSIONS
from portal_app.importer.errors import ImportStorageError, MissingUploadError, UploadError
from portal_app.importer.pipeline import (
    import_alumni,
    import_chapters,
    import_end_of_year,
    import_history,
    import_pia,
    import_roster,
)
from portal_app.importer.pipeline.pia import FILE_FIELD_CANDIDATES
from portal_app.importer.utils import read_upload
from portal_app.utils.importer import is_importer_enabled

from .auth import admin_key_required

admin_importer_blueprint = Blueprint("admin_importer", __name__, url_prefix="/api/admin")

_TRUTHY = ("1", "true", "on", "yes")


def _dry_run_requested() -> bool:
    for source in (request.form, request.args):
        for name in ("dryRun", "dry_run"):
            value = source.get(name)
            if value is not None:
                return str(value).strip().lower() in _TRUTHY
    return False


@admin_importer_blueprint.before_request
def _ensure_importer_enabled():
    if not is_importer_enabled(current_app):
        return jsonify({"error": "Importer is disabled."}), HTTPStatus.NOT_FOUND
    return None


def _run(pipeline, *args, **kwargs):
    """Invoke ``pipeline`` and translate importer errors into JSON responses."""
    try:
        summary = pipeline(*args, dry_run=_dry_run_requested(), **kwargs)
    except UploadError as exc:
        return _upload_error(exc)
    except ImportStorageError as exc:
        return (
            jsonify({"error": "Import failed", "detail": exc.message}),
            HTTPStatus.INTERNAL_SERVER_ERROR,
        )
    return jsonify(summary.as_dict()), HTTPStatus.OK


def _upload_error(exc: UploadError):
    return jsonify({"error": exc.message}), exc.status_code


@admin_importer_blueprint.post("/chapters/import")
@admin_key_required
def import_chapters_upload():
    try:
        upload = read_upload(request.files.get("chaptersFile"), field_name="chaptersFile")
    except UploadError as exc:
        return _upload_error(exc)
    return _run(import_chapters, upload)


@admin_importer_blueprint.post("/eoy/import")
@admin_key_required
def import_eoy_upload():
    # eoyFile first, then any other attached workbooks in submission order.
    storages = list(request.files.getlist("eoyFile"))
    for field_name, storage in request.files.items(multi=True):
        if field_name != "eoyFile":
            storages.append(storage)
    storages = [storage for storage in storages if storage is not None and storage.filename]
    try:
        if not storages:
            raise MissingUploadError("Upload eoyFile")
        uploads = [read_upload(storage, field_name="eoyFile") for storage in storages]
    except UploadError as exc:
        return _upload_error(exc)
    return _run(import_end_of_year, uploads)


@admin_importer_blueprint.post("/history/import")
@admin_key_required
def import_history_upload():
    try:
        upload = read_upload(request.files.get("historyFile"), field_name="historyFile")
    except UploadError as exc:
        return _upload_error(exc)
    chapter_type = request.form.get("chapterType") or request.form.get("chapter_type")
    return _run(import_history, upload, chapter_type=chapter_type)


def _pia_file_storage():
    for name in FILE_FIELD_CANDIDATES:
        storage = request.files.get(name)
        if storage is not None and storage.filename:
            return storage
    for storage in request.files.values():
        if storage is not None and storage.filename:
            return storage
    return None


@admin_importer_blueprint.post("/pia/import")
@admin_key_required
def import_pia_upload():
    try:
        upload = read_upload(_pia_file_storage(), field_name=FILE_FIELD_CANDIDATES[0])
    except UploadError as exc:
        return _upload_error(exc)
    return _run(import_pia, upload)


@admin_importer_blueprint.post("/roster/import")
@admin_key_required
def import_roster_upload():
    try:
        upload = read_upload(request.files.get("rosterFile"), field_name="rosterFile")
    except UploadError as exc:
        return _upload_error(exc)
    return _run(import_roster, upload)


@admin_importer_blueprint.post("/alumni/import")
@admin_key_required
def import_alumni_upload():
    try:
        upload = read_upload(
            request.files.get("alumniFile"),
            field_name="alumniFile",
            allowed_extensions=CSV_EXTENSIONS,
        )
    except UploadError as exc:
        return _upload_error(exc)
    return _run(import_alumni, upload)
