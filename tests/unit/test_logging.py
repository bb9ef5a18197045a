import io
import logging
import sys
from unittest.mock import patch

from apicaller.logging import REDACTED, DefaultLogger, Logger, redact


class TestLogger:
    """Test the Logger class."""

    def test_logger_initialization(self):
        logger = Logger(name="test-logger")
        assert logger.logger.name == "test-logger"
        assert logger.logger.level == logging.INFO
        assert len(logger.logger.handlers) == 1

    def test_recreating_does_not_duplicate_handlers(self):
        Logger(name="test-logger")
        logger = Logger(name="test-logger")
        assert len(logger.logger.handlers) == 1

    def test_without_console(self):
        logger = Logger(name="test-quiet-logger", log_to_console=False)
        assert logger.logger.handlers == []

    def test_set_level(self):
        logger = Logger(name="test-logger")
        logger.set_level(logging.WARNING)
        assert logger.logger.level == logging.WARNING

    def test_log_methods(self):
        logger = Logger(name="test-logger", level=logging.DEBUG)

        with patch.object(logger.logger, "log") as mock_log:
            logger.debug("Debug message")
            mock_log.assert_called_with(logging.DEBUG, "Debug message")

            logger.info("Info message")
            mock_log.assert_called_with(logging.INFO, "Info message")

            logger.warning("Warning message")
            mock_log.assert_called_with(logging.WARNING, "Warning message")

            logger.error("Error message")
            mock_log.assert_called_with(logging.ERROR, "Error message")

    def test_log_with_context(self):
        logger = Logger(name="test-logger")

        with patch.object(logger.logger, "log") as mock_log:
            logger.warning("Request failed", url="https://api.example.com/x", status=503)
            mock_log.assert_called_with(
                logging.WARNING, "Request failed - url=https://api.example.com/x status=503"
            )

    def test_disabled_levels_are_skipped(self):
        logger = Logger(name="test-logger", level=logging.WARNING)

        with patch.object(logger.logger, "log") as mock_log:
            logger.debug("Not shown", params={"a": 1})
            logger.info("Not shown either")

        mock_log.assert_not_called()

    def test_credentials_in_context_are_redacted(self):
        logger = Logger(name="test-logger")

        with patch.object(logger.logger, "log") as mock_log:
            logger.info("Calling GET", params={"q": "python", "api_key": "s3cret", "Token": "t"})

        message = mock_log.call_args.args[1]
        assert "s3cret" not in message
        assert "q': 'python" in message
        assert f"'api_key': '{REDACTED}'" in message
        assert f"'Token': '{REDACTED}'" in message

    def test_sensitive_context_keyword_is_masked(self):
        logger = Logger(name="test-logger")

        with patch.object(logger.logger, "log") as mock_log:
            logger.info("Configured", token="abc", status=200)

        mock_log.assert_called_with(logging.INFO, f"Configured - token={REDACTED} status=200")

    def test_redaction_can_be_disabled(self):
        logger = Logger(name="test-logger", redact_pattern=None)

        with patch.object(logger.logger, "log") as mock_log:
            logger.info("Configured", token="abc")

        mock_log.assert_called_with(logging.INFO, "Configured - token=abc")

    def test_log_file(self, tmp_path):
        log_file = tmp_path / "apicaller.log"
        logger = Logger(name="test-file-logger", log_to_console=False, log_file=str(log_file))

        logger.info("Written to file")
        for handler in logger.logger.handlers:
            handler.flush()

        assert "Written to file" in log_file.read_text()


class TestDefaultLogger:
    """Test the DefaultLogger class."""

    def test_default_logger_initialization(self):
        logger = DefaultLogger()
        assert logger.logger.name == "apicaller"
        assert logger.logger.level == logging.INFO
        assert len(logger.logger.handlers) > 0

    def test_default_logger_output(self):
        captured_output = io.StringIO()
        sys.stdout = captured_output
        try:
            logger = DefaultLogger(level=logging.DEBUG)
            logger.debug("Test debug message")
            logger.info("Test info message")
        finally:
            sys.stdout = sys.__stdout__

        output = captured_output.getvalue()
        assert "[DEBUG]" in output
        assert "[INFO]" in output
        assert "[apicaller]" in output
        assert "Test debug message" in output
        assert "Test info message" in output


class TestRedact:
    def test_nested_values(self):
        value = {
            "auth": {"user": "ann", "password": "pw"},
            "items": [{"secret": "x", "id": 1}],
            "page": 2,
        }

        assert redact(value) == {
            "auth": REDACTED,
            "items": [{"secret": REDACTED, "id": 1}],
            "page": 2,
        }

    def test_input_is_not_modified(self):
        value = {"api_key": "k"}
        redact(value)
        assert value == {"api_key": "k"}

    def test_scalars_pass_through(self):
        assert redact("plain") == "plain"
        assert redact(None) is None
