"""Tests for structured logging configuration."""

import io
import json
import logging

import structlog

from bramble.core.logging import configure_logging


class TestConfigureLogging:
    def test_json_output(self) -> None:
        stream = io.StringIO()
        configure_logging(json_output=True, stream=stream)
        structlog.get_logger("bramble.test").info("property_passed", tests=100)

        record = json.loads(stream.getvalue().strip().splitlines()[-1])
        assert record["event"] == "property_passed"
        assert record["tests"] == 100
        assert record["level"] == "info"
        assert "_record" not in record
        assert "_from_structlog" not in record

    def test_console_output(self) -> None:
        stream = io.StringIO()
        configure_logging(stream=stream)
        structlog.get_logger("bramble.test").warning("property_failed", shrinks=4)

        output = stream.getvalue()
        assert "property_failed" in output
        assert "shrinks=4" in output

    def test_stdlib_records_use_same_format(self) -> None:
        stream = io.StringIO()
        configure_logging(json_output=True, stream=stream)
        logging.getLogger("host.suite").warning("plain stdlib message")

        record = json.loads(stream.getvalue().strip().splitlines()[-1])
        assert record["event"] == "plain stdlib message"

    def test_level_filters_debug(self) -> None:
        stream = io.StringIO()
        configure_logging(level="INFO", stream=stream)
        structlog.get_logger("bramble.test").debug("shrink_step")
        assert "shrink_step" not in stream.getvalue()

        configure_logging(level="DEBUG", stream=stream)
        structlog.get_logger("bramble.test").debug("shrink_step")
        assert "shrink_step" in stream.getvalue()

    def test_noisy_loggers_stay_quiet_at_debug(self) -> None:
        configure_logging(level="DEBUG", stream=io.StringIO())
        assert logging.getLogger("asyncio").level == logging.WARNING
