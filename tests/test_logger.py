"""Tests for gateway logging setup."""

import json
import logging

import pytest

from gemini_mcp.logger import JsonLinesFormatter, configure_logging


@pytest.fixture(autouse=True)
def restore_package_logger():
    package_logger = logging.getLogger("gemini_mcp")
    saved = (list(package_logger.handlers), package_logger.level, package_logger.propagate)
    yield
    package_logger.handlers[:] = saved[0]
    package_logger.setLevel(saved[1])
    package_logger.propagate = saved[2]


class TestJsonLinesFormatter:
    def test_emits_core_fields_and_extras(self) -> None:
        record = logging.LogRecord(
            "gemini_mcp.gateway", logging.INFO, __file__, 1, "tool_call tool=%s", ("ping",), None
        )
        record.tool = "ping"

        entry = json.loads(JsonLinesFormatter().format(record))

        assert entry["level"] == "INFO"
        assert entry["logger"] == "gemini_mcp.gateway"
        assert entry["message"] == "tool_call tool=ping"
        assert entry["tool"] == "ping"
        assert "timestamp" in entry
        assert "args" not in entry


class TestConfigureLogging:
    def test_installs_single_stderr_handler(self, capsys: pytest.CaptureFixture[str]) -> None:
        configure_logging("INFO", json_format=True)
        configure_logging("DEBUG", json_format=True)

        package_logger = logging.getLogger("gemini_mcp")
        assert len(package_logger.handlers) == 1
        assert package_logger.level == logging.DEBUG

        logging.getLogger("gemini_mcp.cache").info("stored", extra={"chunks": 3})

        captured = capsys.readouterr()
        assert captured.out == ""
        assert json.loads(captured.err.strip().splitlines()[-1])["chunks"] == 3

    def test_unknown_level_is_rejected(self) -> None:
        with pytest.raises(ValueError):
            configure_logging("LOUD")
