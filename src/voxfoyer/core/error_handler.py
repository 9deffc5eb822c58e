"""Error Handling for VoxFoyer

Exception hierarchy and centralized error logging for the vocal command engine.
"""

import logging
from enum import Enum
from typing import Callable, Dict, Optional, Type


class ErrorSeverity(Enum):
    """Error severity levels."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class VoxFoyerError(Exception):
    """Base exception class for VoxFoyer."""

    def __init__(self, message: str, severity: ErrorSeverity = ErrorSeverity.MEDIUM):
        self.message = message
        self.severity = severity
        super().__init__(self.message)


class ConfigurationError(VoxFoyerError):
    """Error raised when configuration is invalid."""
    pass


class ExtractionError(VoxFoyerError):
    """Error raised when a transcript cannot produce a usable task."""
    pass


class EmptyTranscriptError(ExtractionError):
    """Error raised when the transcript is empty or whitespace only."""

    def __init__(self, message: str = "Le texte transcrit est vide"):
        super().__init__(message, ErrorSeverity.MEDIUM)


class EmptyActionTextError(ExtractionError):
    """Error raised when no action text could be derived for the task."""

    def __init__(self, message: str = "Aucune action n'a pu être extraite du texte"):
        super().__init__(message, ErrorSeverity.MEDIUM)


class ClassificationError(VoxFoyerError):
    """Error raised when the classification collaborator fails."""

    def __init__(self, message: str, severity: ErrorSeverity = ErrorSeverity.HIGH):
        super().__init__(message, severity)


class ErrorHandler:
    """Central error handler: severity-aware logging plus typed callbacks."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        """Initialize error handler.

        Args:
            logger: Logger to report through (defaults to this module's logger)
        """
        self.logger = logger or logging.getLogger(__name__)
        self.error_callbacks: Dict[Type[Exception], Callable[[Exception], None]] = {}

    def register_error_callback(self, exception_type: Type[Exception],
                                callback: Callable[[Exception], None]):
        """Register a callback for specific exception types.

        Args:
            exception_type: The exception type to handle
            callback: Function to call when this exception occurs
        """
        self.error_callbacks[exception_type] = callback

    def handle_error(self, error: Exception, context: Optional[str] = None) -> str:
        """Log an error at the level matching its severity and run callbacks.

        Args:
            error: The exception that occurred
            context: Additional context about where the error occurred

        Returns:
            The formatted, human-readable error message
        """
        severity = self.get_error_severity(error)
        error_message = self._format_error_message(error, context)

        self._log_error(error_message, severity)

        for exception_type, callback in self.error_callbacks.items():
            if isinstance(error, exception_type):
                callback(error)

        return error_message

    def get_error_severity(self, error: Exception) -> ErrorSeverity:
        """Determine error severity based on exception type.

        Args:
            error: The exception to analyze

        Returns:
            Appropriate severity level
        """
        if isinstance(error, VoxFoyerError):
            return error.severity

        severity_map = {
            ValueError: ErrorSeverity.MEDIUM,
            ConnectionError: ErrorSeverity.HIGH,
            TimeoutError: ErrorSeverity.MEDIUM,
            MemoryError: ErrorSeverity.CRITICAL,
        }

        return severity_map.get(type(error), ErrorSeverity.MEDIUM)

    def _format_error_message(self, error: Exception, context: Optional[str] = None) -> str:
        message = str(error)
        if context:
            message = f"{context}: {message}"
        return message

    def _log_error(self, message: str, severity: ErrorSeverity):
        log_methods = {
            ErrorSeverity.LOW: self.logger.info,
            ErrorSeverity.MEDIUM: self.logger.warning,
            ErrorSeverity.HIGH: self.logger.error,
            ErrorSeverity.CRITICAL: self.logger.critical,
        }

        log_methods[severity](message)
