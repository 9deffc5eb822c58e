"""Core modules for VoxFoyer.

Configuration, logging and error handling shared by every component.
"""

from .config_manager import AppConfig, ConfigManager
from .error_handler import (
    ClassificationError,
    ConfigurationError,
    EmptyActionTextError,
    EmptyTranscriptError,
    ErrorHandler,
    ErrorSeverity,
    ExtractionError,
    VoxFoyerError,
)
from .logging_manager import LoggingManager

__all__ = [
    "AppConfig",
    "ConfigManager",
    "VoxFoyerError",
    "ConfigurationError",
    "ExtractionError",
    "EmptyTranscriptError",
    "EmptyActionTextError",
    "ClassificationError",
    "ErrorHandler",
    "ErrorSeverity",
    "LoggingManager",
]
