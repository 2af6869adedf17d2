import json
import logging
import sys

from portal_app.utils.logging_config import JSONFormatter, setup_logging


def test_json_formatter_carries_extra_fields():
    formatter = JSONFormatter(app_name="Chapter Portal", app_version="1.0.0")
    record = logging.LogRecord("portal", logging.INFO, __file__, 12, "Import %s", ("done",), None)
    record.import_kind = "roster"
    record.rows = 4

    payload = json.loads(formatter.format(record))

    assert payload["message"] == "Import done"
    assert payload["level"] == "INFO"
    assert payload["app"] == "Chapter Portal"
    assert payload["import_kind"] == "roster"
    assert payload["rows"] == 4
    assert "exception" not in payload


def test_json_formatter_includes_exception():
    formatter = JSONFormatter()
    try:
        raise ValueError("bad cell")
    except ValueError:
        record = logging.LogRecord("portal", logging.ERROR, __file__, 1, "failed", None, sys.exc_info())

    payload = json.loads(formatter.format(record))

    assert "ValueError: bad cell" in payload["exception"]
    assert "app" not in payload


def test_file_logging_writes_json_lines(app, tmp_path):
    app.config.update({"ENABLE_FILE_LOGGING": True, "LOG_DIR": str(tmp_path), "LOG_FORMAT": "json"})
    try:
        logger = setup_logging(app)
        logger.info("Import finished", extra={"import_kind": "pia"})
        for handler in logger.handlers:
            handler.flush()

        lines = (tmp_path / "portal.log").read_text(encoding="utf-8").splitlines()
        entry = json.loads(lines[-1])
        assert entry["message"] == "Import finished"
        assert entry["import_kind"] == "pia"
    finally:
        app.config.update({"ENABLE_FILE_LOGGING": False, "LOG_FORMAT": "text"})
        setup_logging(app)


def test_setup_logging_does_not_stack_handlers(app):
    setup_logging(app)
    before = len(app.logger.handlers)

    setup_logging(app)

    assert len(app.logger.handlers) == before
