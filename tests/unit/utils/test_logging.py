"""Tests for logging utility."""

import logging
from io import StringIO


class TestLoggerConfiguration:
    """Test that logger configures correctly from settings."""

    def test_configure_logging_creates_logger(self):
        """configure_logging should return a configured logger."""
        from applytrack.utils.logging import configure_logging

        logger = configure_logging()
        assert isinstance(logger, logging.Logger)
        assert logger.name == "applytrack"

    def test_configure_logging_respects_level(self):
        """Logger should respect the configured log level."""
        from applytrack.utils.logging import configure_logging

        logger = configure_logging(level="DEBUG")
        assert logger.level == logging.DEBUG

        logger = configure_logging(level="WARNING")
        assert logger.level == logging.WARNING
        assert all(handler.level == logging.WARNING for handler in logger.handlers)

    def test_configure_logging_default_level_is_info(self):
        """Default log level should be INFO."""
        from applytrack.utils.logging import configure_logging

        logger = configure_logging()
        assert logger.level == logging.INFO

    def test_configure_logging_installs_one_handler(self):
        from applytrack.utils.logging import configure_logging

        configure_logging()
        logger = configure_logging()

        assert len(logger.handlers) == 1
        assert logger.propagate is False

    def test_reset_logging_restores_propagation(self):
        from applytrack.utils.logging import configure_logging, reset_logging

        configure_logging()
        reset_logging()

        logger = logging.getLogger("applytrack")
        assert logger.handlers == []
        assert logger.propagate is True


class TestLogOutput:
    """Test that log output format is correct."""

    def test_log_message_includes_level_and_name(self):
        """Log messages should include the level and the logger name."""
        from applytrack.utils.logging import configure_logging, get_logger

        logger = configure_logging(level="INFO")

        buffer = StringIO()
        handler = logging.StreamHandler(buffer)
        handler.setFormatter(logger.handlers[0].formatter)
        logger.addHandler(handler)

        get_logger("client.migration").info("Migrated 2 guest application(s)")

        output = buffer.getvalue()
        assert "INFO" in output
        assert "applytrack.client.migration" in output
        assert "Migrated 2 guest application(s)" in output


class TestGetLogger:
    """Test the get_logger convenience function."""

    def test_get_logger_returns_child_logger(self):
        """get_logger should return a child of the main logger."""
        from applytrack.utils.logging import configure_logging, get_logger

        configure_logging()

        logger = get_logger("my_module")
        assert logger.name == "applytrack.my_module"

    def test_get_logger_inherits_level(self):
        """Child logger should inherit parent's level."""
        from applytrack.utils.logging import configure_logging, get_logger

        configure_logging(level="DEBUG")

        logger = get_logger("test_module")
        assert logger.getEffectiveLevel() == logging.DEBUG


class TestStructuredEvents:
    """Test log_event and the JSON line formatter."""

    def test_log_event_message_is_json(self, caplog):
        import json

        from applytrack.utils.logging import get_logger, log_event

        with caplog.at_level(logging.INFO, logger="applytrack"):
            log_event(get_logger("api"), "request_complete", status_code=201, path="/x")

        [record] = caplog.records
        assert json.loads(record.getMessage()) == {
            "event": "request_complete",
            "status_code": 201,
            "path": "/x",
        }
        assert record.event_fields["status_code"] == 201

    def test_json_lines_merge_event_fields(self):
        import json

        from applytrack.utils.logging import configure_logging, get_logger, log_event

        logger = configure_logging(level="INFO", json_lines=True)
        buffer = StringIO()
        handler = logging.StreamHandler(buffer)
        handler.setFormatter(logger.handlers[0].formatter)
        logger.addHandler(handler)

        log_event(get_logger("api"), "request_complete", request_id="abc")
        get_logger("client").warning("plain %s", "text")

        first, second = (json.loads(line) for line in buffer.getvalue().splitlines())
        assert first["event"] == "request_complete"
        assert first["request_id"] == "abc"
        assert first["logger"] == "applytrack.api"
        assert "message" not in first
        assert second["message"] == "plain text"
        assert second["level"] == "WARNING"

    def test_json_lines_include_exception_text(self):
        import json

        from applytrack.utils.logging import configure_logging, get_logger

        logger = configure_logging(json_lines=True)
        buffer = StringIO()
        handler = logging.StreamHandler(buffer)
        handler.setFormatter(logger.handlers[0].formatter)
        logger.addHandler(handler)

        try:
            raise RuntimeError("boom")
        except RuntimeError:
            get_logger("api").exception("failed")

        entry = json.loads(buffer.getvalue())
        assert "RuntimeError: boom" in entry["exc_info"]
