"""Unit tests for structured logging."""
# ruff: noqa: ARG002  # Fixtures used for setup side effects

import json
import logging
from io import StringIO
from unittest.mock import MagicMock, patch

import pytest
import structlog

from sanctionwatch.core.logging import (
    LogContext,
    add_environment_info,
    get_logger,
    log_exception,
    setup_logging,
)


class TestAddEnvironmentInfo:
    """Tests for add_environment_info processor."""

    def test_adds_environment(self):
        """Test environment is added to event dict."""
        mock_settings = MagicMock()
        mock_settings.environment = "production"

        with patch("sanctionwatch.core.logging.get_settings", return_value=mock_settings):
            event_dict = {}
            result = add_environment_info(None, "info", event_dict)

            assert result["environment"] == "production"

    def test_keeps_existing_keys(self, patch_settings):
        """Test other event keys are left alone."""
        result = add_environment_info(None, "info", {"event": "sanctions_document_loaded"})

        assert result == {"event": "sanctions_document_loaded", "environment": "test"}


class TestSetupLogging:
    """Tests for setup_logging function."""

    def test_setup_logging_default(self, patch_settings):
        """Test logging setup with default settings."""
        setup_logging()

        logger = get_logger("test")
        assert logger is not None
        assert logging.getLogger().level == logging.DEBUG

    def test_setup_logging_json_format(self, patch_settings):
        """Test logging setup with JSON format."""
        setup_logging(json_format=True)

        handler = logging.getLogger().handlers[0]
        assert isinstance(handler.formatter, structlog.stdlib.ProcessorFormatter)

    def test_setup_logging_custom_level(self, patch_settings):
        """Test logging setup with custom log level."""
        setup_logging(log_level="WARNING")

        assert logging.getLogger().level == logging.WARNING

    def test_single_root_handler(self, patch_settings):
        """Test repeated setup does not stack handlers."""
        setup_logging()
        setup_logging()

        assert len(logging.getLogger().handlers) == 1


class TestGetLogger:
    """Tests for get_logger function."""

    def test_get_logger_with_name(self):
        """Test getting logger with specific name."""
        logger = get_logger("sanctionwatch.sanctions.store")
        assert logger is not None

    def test_get_logger_without_name(self):
        """Test getting logger without name."""
        logger = get_logger()
        assert logger is not None


class TestLogContext:
    """Tests for LogContext context manager."""

    def test_binds_and_unbinds_context(self):
        """Test context is bound inside the block and removed after."""
        structlog.contextvars.clear_contextvars()

        with LogContext(operation="refresh", list_id="OFAC-SDN"):
            ctx = structlog.contextvars.get_contextvars()
            assert ctx["operation"] == "refresh"
            assert ctx["list_id"] == "OFAC-SDN"

        ctx = structlog.contextvars.get_contextvars()
        assert "operation" not in ctx
        assert "list_id" not in ctx

    def test_unbinds_on_exception(self):
        """Test context is removed even when the block raises."""
        structlog.contextvars.clear_contextvars()

        with pytest.raises(RuntimeError):
            with LogContext(operation="refresh"):
                raise RuntimeError("boom")

        assert "operation" not in structlog.contextvars.get_contextvars()


class TestLogHelpers:
    """Tests for logging helper functions."""

    def test_log_exception(self):
        """Test logging exception."""
        mock_logger = MagicMock()
        exc = ValueError("Test error")
        log_exception(mock_logger, exc, context="testing")

        mock_logger.exception.assert_called_once()
        args, kwargs = mock_logger.exception.call_args
        assert args[0] == "exception_occurred"
        assert kwargs["error_type"] == "ValueError"
        assert kwargs["error_message"] == "Test error"
        assert kwargs["context"] == "testing"


class TestLoggingIntegration:
    """Integration tests for logging."""

    def test_stdlib_records_render_as_json(self, patch_settings):
        """Test standard library records go through the JSON renderer."""
        setup_logging(json_format=True, add_timestamp=False)

        output = StringIO()
        root = logging.getLogger()
        root.handlers[0].setStream(output)

        logging.getLogger("sanctionwatch.test").warning("document %s", "stale")

        data = json.loads(output.getvalue().strip())
        assert data["event"] == "document stale"
        assert data["level"] == "warning"
        assert data["logger"] == "sanctionwatch.test"
        assert data["environment"] == "test"
