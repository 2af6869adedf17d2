"""Exception hierarchy shared by the import pipelines.

``UploadError`` subclasses describe a malformed upload and map to a client
error; ``ImportStorageError`` wraps a failed write and maps to a server error.
Normalizers never raise, so nothing here is used for per-cell problems.
"""

from __future__ import annotations

from http import HTTPStatus
from typing import Sequence


class ImporterError(Exception):
    """Base exception for importer failures."""

    status_code: int = HTTPStatus.INTERNAL_SERVER_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class UploadError(ImporterError):
    """Raised when an upload cannot be processed as submitted."""

    status_code = HTTPStatus.BAD_REQUEST


class MissingUploadError(UploadError):
    """Raised when the expected file field is absent or empty."""


class UploadTooLargeError(UploadError):
    """Raised when an upload exceeds ``IMPORTER_MAX_UPLOAD_MB``."""

    status_code = HTTPStatus.REQUEST_ENTITY_TOO_LARGE


class WorkbookReadError(UploadError):
    """Raised when the file cannot be parsed as a workbook or CSV."""


class ImportFormatError(UploadError):
    """Raised when the workbook layout does not match any accepted shape."""


class MissingColumnError(ImportFormatError):
    """Raised when required columns cannot be resolved from the header row."""

    def __init__(self, missing: Sequence[str], *, message: str | None = None) -> None:
        self.missing = tuple(missing)
        if message is None:
            message = f"Missing required column(s): {', '.join(self.missing)}."
        super().__init__(message)


class ImportStorageError(ImporterError):
    """Raised when the storage layer rejects an import transaction."""

    status_code = HTTPStatus.INTERNAL_SERVER_ERROR

    def __init__(self, message: str, *, kind: str | None = None) -> None:
        super().__init__(message)
        self.kind = kind
