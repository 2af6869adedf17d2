# conftest.py

import csv
import io
import os
import tempfile

import pytest
from openpyxl import Workbook

# Set testing environment BEFORE importing app so app.py picks TestingConfig
os.environ["FLASK_ENV"] = "testing"

from app import app as flask_app  # noqa: E402
from portal_app.importer.utils import UploadedFile  # noqa: E402
from portal_app.models import Chapter, ChapterType, db  # noqa: E402

TEST_ADMIN_KEY = "test-admin-key"


@pytest.fixture(scope="function")
def app():
    """Create and configure a test Flask application"""
    import uuid

    db_fd, temp_db = tempfile.mkstemp(suffix=f"_{uuid.uuid4().hex[:8]}.db")

    try:
        flask_app.config.update(
            {
                "TESTING": True,
                "SQLALCHEMY_DATABASE_URI": f"sqlite:///{temp_db}",
                "SECRET_KEY": "test-secret-key-for-testing-only",
                "ADMIN_KEY": TEST_ADMIN_KEY,
                "MONITORING_ENABLED": False,
                "ENABLE_FILE_LOGGING": False,
                "ENABLE_CONSOLE_LOGGING": False,
                "LOG_LEVEL": "DEBUG",
                "IMPORTER_ENABLED": True,
                "IMPORTER_MAX_UPLOAD_MB": 25,
                "REGION_SHEET_NAME": "Southeastern",
                "HISTORY_DEFAULT_CHAPTER_TYPE": "Alumni",
            }
        )

        # Re-initialize logging with updated config
        from portal_app.utils.logging_config import setup_logging

        setup_logging(flask_app)

        with flask_app.app_context():
            db.drop_all()
            db.create_all()
            yield flask_app
            db.session.remove()
            db.drop_all()
    finally:
        try:
            os.close(db_fd)
        except OSError:
            pass
        try:
            if os.path.exists(temp_db):
                os.unlink(temp_db)
        except OSError:
            pass


@pytest.fixture(autouse=True)
def app_context(app):
    """Automatically provide app context for all tests"""
    with app.app_context():
        yield


@pytest.fixture
def client(app):
    """Create a test client for the Flask application"""
    return app.test_client()


@pytest.fixture
def runner(app):
    """Create a test CLI runner for the Flask application"""
    return app.test_cli_runner()


@pytest.fixture
def admin_headers():
    """Headers carrying the shared admin key"""
    return {"X-Admin-Key": TEST_ADMIN_KEY}


def _xlsx_bytes(sheets):
    workbook = Workbook()
    workbook.remove(workbook.active)
    for title, rows in sheets.items():
        worksheet = workbook.create_sheet(title)
        for row in rows:
            worksheet.append(list(row))
    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


def _csv_bytes(rows, encoding="utf-8"):
    buffer = io.StringIO(newline="")
    writer = csv.writer(buffer)
    for row in rows:
        writer.writerow(row)
    return buffer.getvalue().encode(encoding)


@pytest.fixture
def make_xlsx():
    """Build an UploadedFile holding an xlsx workbook.

    Pass rows for a single ``Sheet1`` sheet, or ``sheets={"Name": rows}``.
    """

    def build(rows=None, *, filename="upload.xlsx", sheets=None):
        if sheets is None:
            sheets = {"Sheet1": rows or []}
        return UploadedFile(filename=filename, data=_xlsx_bytes(sheets))

    return build


@pytest.fixture
def make_csv():
    """Build an UploadedFile holding CSV text"""

    def build(rows, *, filename="upload.csv", encoding="utf-8"):
        return UploadedFile(filename=filename, data=_csv_bytes(rows, encoding=encoding))

    return build


@pytest.fixture
def xlsx_file(make_xlsx):
    """Return ``(BytesIO, filename)`` tuples for multipart test-client posts"""

    def build(rows=None, *, filename="upload.xlsx", sheets=None):
        upload = make_xlsx(rows, filename=filename, sheets=sheets)
        return io.BytesIO(upload.data), upload.filename

    return build


@pytest.fixture
def chapters(app):
    """Seed three chapters used across importer tests"""
    seeded = {
        "Alpha Beta": Chapter(name="Alpha Beta", type=ChapterType.COLLEGIATE, university="State University"),
        "Gamma Sigma": Chapter(name="Gamma Sigma", type=ChapterType.ALUMNI, city="Atlanta"),
        "Delta Kappa": Chapter(name="Delta Kappa", type=ChapterType.ALUMNI, city="Miami"),
    }
    db.session.add_all(seeded.values())
    db.session.commit()
    return {name: chapter.id for name, chapter in seeded.items()}


# Pytest configuration
def pytest_configure(config):
    """Configure pytest with custom markers and ensure testing environment"""
    os.environ["FLASK_ENV"] = "testing"

    config.addinivalue_line("markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')")
    config.addinivalue_line("markers", "integration: marks tests as integration tests")
    config.addinivalue_line("markers", "unit: marks tests as unit tests")


def pytest_collection_modifyitems(config, items):
    """Modify test collection to add markers"""
    for item in items:
        if "integration" in item.nodeid:
            item.add_marker(pytest.mark.slow)
            item.add_marker(pytest.mark.integration)
        else:
            item.add_marker(pytest.mark.unit)
