"""Centralized Logging Management for VoxFoyer

Handles log configuration, formatting, and output management.
"""

import logging
import logging.handlers
import sys
from datetime import datetime
from pathlib import Path
from typing import Dict, Optional


class ColoredFormatter(logging.Formatter):
    """Custom formatter that adds colors to console output."""

    # ANSI color codes
    COLORS = {
        'DEBUG': '\033[36m',      # Cyan
        'INFO': '\033[32m',       # Green
        'WARNING': '\033[33m',    # Yellow
        'ERROR': '\033[31m',      # Red
        'CRITICAL': '\033[35m',   # Magenta
        'RESET': '\033[0m'        # Reset
    }

    def format(self, record):
        """Format log record with colors for console output."""
        log_message = super().format(record)
        return f"{self.COLORS.get(record.levelname, '')}{log_message}{self.COLORS['RESET']}"


class LoggingManager:
    """Centralized logging configuration and management."""

    _instance: Optional['LoggingManager'] = None
    _initialized: bool = False

    LOGGER_NAMESPACE = "voxfoyer"

    def __new__(cls) -> 'LoggingManager':
        """Singleton pattern implementation."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        """Initialize logging manager (only once)."""
        if self._initialized:
            return

        self.log_dir: Optional[Path] = None
        self.loggers: Dict[str, logging.Logger] = {}
        self.handlers: Dict[str, logging.Handler] = {}
        self._setup_package_logger()
        self._initialized = True

    def _setup_package_logger(self):
        """Configure the package logger with a console handler."""
        package_logger = logging.getLogger(self.LOGGER_NAMESPACE)
        package_logger.setLevel(logging.DEBUG)

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(logging.WARNING)
        console_formatter = ColoredFormatter(
            '%(asctime)s | %(name)s | %(levelname)s | %(message)s',
            datefmt='%H:%M:%S'
        )
        console_handler.setFormatter(console_formatter)
        package_logger.addHandler(console_handler)
        self.handlers['console'] = console_handler

    def configure(self, level: str = "WARNING", log_dir: Optional[str] = None,
                  log_to_console: bool = True):
        """Apply logging settings, typically from ``LoggingConfig``.

        Args:
            level: Console log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            log_dir: Directory for rotating log files; no file output when None
            log_to_console: Whether the console handler stays attached
        """
        self.set_log_level(level)

        package_logger = logging.getLogger(self.LOGGER_NAMESPACE)
        console_handler = self.handlers['console']
        if log_to_console and console_handler not in package_logger.handlers:
            package_logger.addHandler(console_handler)
        elif not log_to_console and console_handler in package_logger.handlers:
            package_logger.removeHandler(console_handler)

        if log_dir:
            self._setup_file_handlers(Path(log_dir))

    def _setup_file_handlers(self, log_dir: Path):
        """Attach rotating file handlers under ``log_dir``."""
        if 'file' in self.handlers:
            return

        self.log_dir = log_dir
        self.log_dir.mkdir(parents=True, exist_ok=True)
        package_logger = logging.getLogger(self.LOGGER_NAMESPACE)

        file_formatter = logging.Formatter(
            '%(asctime)s | %(name)s | %(levelname)s | %(funcName)s:%(lineno)d | %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

        # File handler for all logs
        log_file = self.log_dir / f"voxfoyer_{datetime.now().strftime('%Y%m%d')}.log"
        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=10 * 1024 * 1024,  # 10MB
            backupCount=5
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(file_formatter)
        package_logger.addHandler(file_handler)
        self.handlers['file'] = file_handler

        # Error file handler for errors only
        error_file = self.log_dir / f"voxfoyer_errors_{datetime.now().strftime('%Y%m%d')}.log"
        error_handler = logging.handlers.RotatingFileHandler(
            error_file,
            maxBytes=5 * 1024 * 1024,  # 5MB
            backupCount=10
        )
        error_handler.setLevel(logging.ERROR)
        error_handler.setFormatter(file_formatter)
        package_logger.addHandler(error_handler)
        self.handlers['error_file'] = error_handler

    @classmethod
    def get_logger(cls, name: str) -> logging.Logger:
        """Class method to get logger instance.

        Args:
            name: Logger name (typically __name__ of the module)

        Returns:
            Configured logger
        """
        manager = cls()
        return manager._get_logger_instance(name)

    def _get_logger_instance(self, name: str) -> logging.Logger:
        """Internal method to get logger instance."""
        if name in self.loggers:
            return self.loggers[name]

        logger = logging.getLogger(name)
        self.loggers[name] = logger
        return logger

    def set_log_level(self, level: str):
        """Set the logging level of the console handler.

        Args:
            level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        """
        numeric_level = getattr(logging, level.upper(), None)
        if not isinstance(numeric_level, int):
            raise ValueError(f'Invalid log level: {level}')

        self.handlers['console'].setLevel(numeric_level)
