"""Unit tests for logging configuration."""

import json
import logging

import pytest

from stocksmooth.utils.error_handling import EmptyRange, run_stage
from stocksmooth.utils.logging_config import JSONFormatter, get_logger, setup_logging


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yfinance_level = logging.getLogger("yfinance").level
    yield
    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)
    logging.getLogger("yfinance").setLevel(yfinance_level)


class TestJSONFormatter:
    """Tests for the JSON-lines formatter."""

    def test_props_are_merged(self):
        record = logging.LogRecord("stocksmooth", logging.ERROR, __file__, 10, "failed", None, None)
        record.props = {"stage": "loader", "error_kind": "EmptyRange"}
        payload = json.loads(JSONFormatter().format(record))
        assert payload["message"] == "failed"
        assert payload["level"] == "ERROR"
        assert payload["stage"] == "loader"

    def test_non_serializable_values_are_stringified(self):
        record = logging.LogRecord("stocksmooth", logging.INFO, __file__, 10, "x", None, None)
        record.props = {"path": object()}
        payload = json.loads(JSONFormatter().format(record))
        assert payload["path"].startswith("<object")


@pytest.mark.usefixtures("restore_root_logger")
class TestSetupLogging:
    """Tests for handler set-up."""

    def test_console_only(self, tmp_path):
        root = setup_logging("DEBUG", log_dir=None)
        assert len(root.handlers) == 1
        assert root.level == logging.DEBUG
        assert logging.getLogger("yfinance").level == logging.WARNING
        assert not any(tmp_path.iterdir())

    def test_stage_errors_reach_error_log(self, tmp_path):
        setup_logging("INFO", log_dir=str(tmp_path))
        with pytest.raises(EmptyRange):
            run_stage("loader", {"symbol": "AAPL"}, _raise_empty)
        for handler in logging.getLogger().handlers:
            handler.flush()

        lines = (tmp_path / "errors.jsonl").read_text().splitlines()
        assert len(lines) == 1
        entry = json.loads(lines[0])
        assert entry["stage"] == "loader"
        assert entry["params"] == {"symbol": "AAPL"}
        assert (tmp_path / "app.jsonl").read_text().count("\n") >= 2

    def test_get_logger(self):
        assert get_logger("stocksmooth.filters").name == "stocksmooth.filters"


def _raise_empty():
    raise EmptyRange("no trading days")
