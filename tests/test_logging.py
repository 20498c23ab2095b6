"""Tests for logging configuration"""
import json
import logging
import pytest
import structlog

from config import Config
from logging_config import (
    setup_structured_logging,
    get_logger,
    log_detection_result,
    log_error
)


def read_records(log_file):
    for handler in logging.getLogger().handlers:
        handler.flush()
    return [json.loads(line) for line in log_file.read_text().splitlines() if line.strip()]


class TestLoggingConfig:
    """Test logging configuration and structured logging"""

    def teardown_method(self):
        root = logging.getLogger()
        for handler in list(root.handlers):
            root.removeHandler(handler)
            handler.close()
        structlog.reset_defaults()

    def test_setup_structured_logging(self, tmp_path):
        """Test structured logging setup"""
        log_file = tmp_path / "logs" / "test.log"
        config = Config(log_file=log_file, log_level="DEBUG")

        setup_structured_logging(config)

        assert log_file.parent.exists()
        assert logging.getLogger("test").isEnabledFor(logging.DEBUG)
        assert any(isinstance(h, logging.FileHandler) for h in logging.getLogger().handlers)

    def test_http_client_loggers_quietened(self):
        """Test httpx and httpcore only log warnings and above"""
        setup_structured_logging(Config(log_level="DEBUG"))

        assert logging.getLogger("httpx").level == logging.WARNING
        assert logging.getLogger("httpcore").level == logging.WARNING

    def test_json_output(self, tmp_path):
        """Test JSON rendering writes one object per event"""
        log_file = tmp_path / "test.log"
        setup_structured_logging(Config(log_file=log_file, logger_style="json"))

        get_logger("test").info("Test message", request_id="123")

        records = read_records(log_file)
        assert records[-1]["event"] == "Test message"
        assert records[-1]["request_id"] == "123"
        assert records[-1]["level"] == "info"
        assert records[-1]["logger"] == "test"

    def test_console_output(self, tmp_path):
        """Test console rendering is not JSON"""
        log_file = tmp_path / "test.log"
        setup_structured_logging(Config(log_file=log_file, logger_style="console"))

        get_logger("test").info("Console message")
        for handler in logging.getLogger().handlers:
            handler.flush()

        content = log_file.read_text()
        assert "Console message" in content
        with pytest.raises(json.JSONDecodeError):
            json.loads(content.splitlines()[-1])

    def test_level_filtering(self, tmp_path):
        """Test events below the configured level are dropped"""
        log_file = tmp_path / "test.log"
        setup_structured_logging(Config(log_file=log_file, log_level="WARNING"))

        logger = get_logger("test")
        logger.info("Dropped")
        logger.warning("Kept")

        assert [r["event"] for r in read_records(log_file)] == ["Kept"]

    def test_log_detection_result(self, tmp_path):
        """Test structured detection logging"""
        log_file = tmp_path / "test.log"
        setup_structured_logging(Config(log_file=log_file))

        log_detection_result(get_logger("test"), "aws", "ec2", True)

        record = read_records(log_file)[-1]
        assert record["provider"] == "aws"
        assert record["environment"] == "ec2"
        assert record["detected"] is True
        assert record["event_type"] == "env_detection"

    def test_log_error(self, tmp_path):
        """Test structured error logging"""
        log_file = tmp_path / "test.log"
        setup_structured_logging(Config(log_file=log_file))
        logger = get_logger("test")

        try:
            raise ValueError("Test error")
        except ValueError as e:
            log_error(logger, e, {"collector": "os_metrics"})

        record = read_records(log_file)[-1]
        assert record["level"] == "error"
        assert record["error"] == "Test error"
        assert record["error_type"] == "ValueError"
        assert record["context"] == {"collector": "os_metrics"}
        assert "ValueError" in record["exception"]

    def test_log_error_without_context(self, tmp_path):
        """Test error logging without context"""
        log_file = tmp_path / "test.log"
        setup_structured_logging(Config(log_file=log_file))

        try:
            raise RuntimeError("boom")
        except RuntimeError as e:
            log_error(get_logger("test"), e)

        assert read_records(log_file)[-1]["context"] == {}

    def test_logger_context_binding(self, tmp_path):
        """Test logger context binding"""
        log_file = tmp_path / "test.log"
        setup_structured_logging(Config(log_file=log_file))

        bound_logger = get_logger("test").bind(provider="gcp")
        bound_logger.bind(collector="environment_metrics").info("Bound message")

        record = read_records(log_file)[-1]
        assert record["provider"] == "gcp"
        assert record["collector"] == "environment_metrics"
