"""
Unit tests for the error hierarchy, ErrorHandler and LoggingManager.
"""

import logging
from unittest.mock import Mock

import pytest

from voxfoyer.core.error_handler import (
    ClassificationError,
    ConfigurationError,
    EmptyActionTextError,
    EmptyTranscriptError,
    ErrorHandler,
    ErrorSeverity,
    ExtractionError,
    VoxFoyerError,
)
from voxfoyer.core.logging_manager import LoggingManager


class TestErrorHierarchy:
    """Test suite for the exception classes"""

    @pytest.mark.unit
    def test_extraction_errors(self):
        """Hard extraction failures share a base class and carry French messages"""
        for error in (EmptyTranscriptError(), EmptyActionTextError()):
            assert isinstance(error, ExtractionError)
            assert isinstance(error, VoxFoyerError)
            assert error.severity == ErrorSeverity.MEDIUM
            assert error.message

    @pytest.mark.unit
    def test_classification_error_defaults_to_high(self):
        assert ClassificationError("indisponible").severity == ErrorSeverity.HIGH


class TestErrorHandler:
    """Test suite for ErrorHandler"""

    @pytest.fixture
    def logger(self):
        return Mock(spec=logging.Logger)

    @pytest.fixture
    def handler(self, logger):
        return ErrorHandler(logger)

    @pytest.mark.unit
    @pytest.mark.parametrize("error,method", [
        (VoxFoyerError("low", ErrorSeverity.LOW), "info"),
        (EmptyTranscriptError(), "warning"),
        (ClassificationError("down"), "error"),
        (ConfigurationError("broken", ErrorSeverity.CRITICAL), "critical"),
        (ConnectionError("refused"), "error"),
        (RuntimeError("boom"), "warning"),
    ])
    def test_logs_at_severity_level(self, handler, logger, error, method):
        """Each severity logs through the matching level"""
        handler.handle_error(error)

        getattr(logger, method).assert_called_once()

    @pytest.mark.unit
    def test_context_is_prefixed(self, handler):
        message = handler.handle_error(EmptyTranscriptError(), "Analyse vocale")

        assert message == "Analyse vocale: Le texte transcrit est vide"

    @pytest.mark.unit
    def test_callbacks_follow_inheritance(self, handler):
        """Callbacks registered for a base class see subclasses"""
        extraction_callback = Mock()
        config_callback = Mock()
        handler.register_error_callback(ExtractionError, extraction_callback)
        handler.register_error_callback(ConfigurationError, config_callback)

        error = EmptyActionTextError()
        handler.handle_error(error)

        extraction_callback.assert_called_once_with(error)
        config_callback.assert_not_called()


class TestLoggingManager:
    """Test suite for LoggingManager"""

    @pytest.mark.unit
    def test_singleton(self):
        assert LoggingManager() is LoggingManager()

    @pytest.mark.unit
    def test_get_logger_is_cached(self):
        first = LoggingManager.get_logger("voxfoyer.tests")
        second = LoggingManager.get_logger("voxfoyer.tests")

        assert first is second
        assert first.name == "voxfoyer.tests"

    @pytest.mark.unit
    def test_set_log_level(self):
        manager = LoggingManager()
        manager.set_log_level("error")

        assert manager.handlers["console"].level == logging.ERROR
        manager.set_log_level("WARNING")

    @pytest.mark.unit
    def test_invalid_log_level(self):
        with pytest.raises(ValueError):
            LoggingManager().set_log_level("LOUD")
