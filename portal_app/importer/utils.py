"""
Importer-specific utilities for handling uploaded files.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

from flask import current_app
from werkzeug.datastructures import FileStorage
from werkzeug.utils import secure_filename

from .adapters import WORKBOOK_EXTENSIONS
from .errors import MissingUploadError, UploadError, UploadTooLargeError

DEFAULT_MAX_UPLOAD_MB = 25


@dataclass(frozen=True)
class UploadedFile:
    """Raw upload bytes plus the declared original filename."""

    filename: str
    data: bytes

    @classmethod
    def from_path(cls, path: str | Path) -> "UploadedFile":
        path = Path(path)
        return cls(filename=path.name, data=path.read_bytes())


def allowed_file(filename: str, allowed_extensions: Iterable[str] = WORKBOOK_EXTENSIONS) -> bool:
    """
    Validate the uploaded filename extension against the allowed set.
    """

    if not filename or "." not in filename:
        return False
    extension = filename.rsplit(".", 1)[1].lower()
    return extension in {ext.lower() for ext in allowed_extensions}


def _max_upload_bytes() -> int:
    try:
        megabytes = int(current_app.config.get("IMPORTER_MAX_UPLOAD_MB", DEFAULT_MAX_UPLOAD_MB))
    except (TypeError, ValueError):
        megabytes = DEFAULT_MAX_UPLOAD_MB
    return max(1, megabytes) * 1024 * 1024


def read_upload(
    file_storage: FileStorage | None,
    *,
    field_name: str,
    allowed_extensions: Iterable[str] = WORKBOOK_EXTENSIONS,
) -> UploadedFile:
    """
    Validate a multipart file field and return its bytes.

    Raises ``MissingUploadError`` when the field is absent or empty and
    ``UploadTooLargeError`` past ``IMPORTER_MAX_UPLOAD_MB``.
    """
    if file_storage is None or not file_storage.filename:
        raise MissingUploadError(f"No file uploaded (expected field '{field_name}').")
    allowed = tuple(allowed_extensions)
    if not allowed_file(file_storage.filename, allowed):
        raise UploadError(f"Unsupported file type; allowed: {', '.join(allowed)}.")

    max_bytes = _max_upload_bytes()
    data = file_storage.read(max_bytes + 1)
    if len(data) > max_bytes:
        raise UploadTooLargeError("Upload exceeds maximum size limit.")
    if not data:
        raise MissingUploadError(f"Uploaded file '{file_storage.filename}' is empty.")
    # The original name is kept for year extraction; secure_filename only guards the log line.
    current_app.logger.debug("Received upload %s (%d bytes)", secure_filename(file_storage.filename), len(data))
    return UploadedFile(filename=file_storage.filename, data=data)
