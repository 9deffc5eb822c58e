"""Configuration Management for VoxFoyer

Handles loading and validation of the engine configuration. Supports a
hierarchical YAML layout with environment-variable overrides.
"""

import os
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from .error_handler import ConfigurationError
from .logging_manager import LoggingManager


class ClassifierConfig(BaseModel):
    """Configuration for the classification collaborator."""
    provider: str = Field(default="keyword", pattern="^(keyword|ollama)$")
    model: str = Field(default="qwen2.5:7b")
    base_url: str = Field(default="http://localhost:11434")
    timeout: int = Field(default=30, ge=1, le=300)
    temperature: float = Field(default=0.1, ge=0.0, le=2.0)

    @field_validator('model')
    @classmethod
    def validate_model(cls, v):
        """Validate model name format"""
        if not v or len(v) < 3:
            raise ValueError("Model name must be at least 3 characters")
        return v

    @field_validator('base_url')
    @classmethod
    def validate_base_url(cls, v):
        """Strip the trailing slash so endpoint paths can be appended"""
        if not v.startswith(("http://", "https://")):
            raise ValueError("Base URL must start with http:// or https://")
        return v.rstrip('/')


class TemporalConfig(BaseModel):
    """Configuration for temporal expression resolution."""
    default_offset_days: int = Field(default=3, ge=0, le=60)
    week_end_day: str = Field(
        default="dimanche",
        pattern="^(lundi|mardi|mercredi|jeudi|vendredi|samedi|dimanche)$"
    )
    morning_hour: int = Field(default=9, ge=0, le=23)
    afternoon_hour: int = Field(default=14, ge=0, le=23)
    evening_hour: int = Field(default=20, ge=0, le=23)


class ConfidenceConfig(BaseModel):
    """Configuration for confidence thresholds and penalties."""
    very_confident_threshold: float = Field(default=0.9, ge=0.0, le=1.0)
    confident_threshold: float = Field(default=0.7, ge=0.0, le=1.0)
    moderate_threshold: float = Field(default=0.5, ge=0.0, le=1.0)
    default_penalty: float = Field(default=0.2, gt=0.0, le=1.0)

    @model_validator(mode='after')
    def validate_threshold_order(self):
        """Thresholds must be strictly decreasing"""
        if not (self.very_confident_threshold > self.confident_threshold > self.moderate_threshold):
            raise ValueError(
                "Thresholds must satisfy very_confident > confident > moderate"
            )
        return self


class LoggingConfig(BaseModel):
    """Configuration for logging."""
    level: str = Field(default="WARNING", pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")
    log_dir: Optional[str] = Field(default=None)
    log_to_console: bool = Field(default=True)

    @field_validator('level', mode='before')
    @classmethod
    def normalize_level(cls, v):
        if isinstance(v, str):
            return v.upper()
        return v


class AppConfig(BaseModel):
    """Main engine configuration."""
    app_name: str = Field(default="VoxFoyer")
    environment: str = Field(default="development", pattern="^(development|staging|production|test)$")
    locale: str = Field(default="fr", pattern="^fr$")

    # Component configurations
    classifier: ClassifierConfig = Field(default_factory=ClassifierConfig)
    temporal: TemporalConfig = Field(default_factory=TemporalConfig)
    confidence: ConfidenceConfig = Field(default_factory=ConfidenceConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = {"validate_assignment": True}


class ConfigManager:
    """Manages configuration loading and validation."""

    ENV_PREFIX = "VOXFOYER_"

    def __init__(self, config_path: Optional[Path] = None, environment: Optional[str] = None):
        """Initialize configuration manager.

        Args:
            config_path: Optional directory holding the YAML configuration files
            environment: Environment name (development, staging, production, test)
        """
        self.config_base_path = Path(config_path) if config_path else self._get_default_config_path()
        self.environment = environment or os.getenv('VOXFOYER_ENV', 'development')
        self._config: Optional[AppConfig] = None
        self._lock = threading.Lock()
        self.logger = LoggingManager.get_logger(__name__)

        # Configuration file paths
        self.config_files = self._get_config_files()

    def _get_default_config_path(self) -> Path:
        """Get the default configuration directory."""
        config_locations = [
            Path("config"),
            Path.home() / ".voxfoyer",
        ]

        for location in config_locations:
            if location.exists() and location.is_dir():
                return location

        return Path("config")

    def _get_config_files(self) -> Dict[str, Path]:
        """Get configuration file paths for hierarchical loading."""
        base_dir = self.config_base_path

        return {
            'default': base_dir / 'default_config.yaml',
            'environment': base_dir / f'{self.environment}.yaml',
            'user': base_dir / 'user_preferences.yaml',
            'local': base_dir / 'local.yaml'
        }

    def load_config(self) -> AppConfig:
        """Load and validate configuration with hierarchical overrides.

        Returns:
            Validated engine configuration

        Raises:
            ConfigurationError: If a file cannot be parsed or validation fails
        """
        with self._lock:
            if self._config:
                return self._config

            config_data: Dict[str, Any] = {'environment': self.environment}

            for config_type, config_file in self.config_files.items():
                if config_file.exists():
                    self.logger.info(f"Loading {config_type} config from {config_file}")
                    file_data = self._load_yaml_file(config_file)
                    self._deep_merge(config_data, file_data)

            env_overrides = self._get_env_overrides()
            if env_overrides:
                self.logger.info(f"Applying environment overrides: {list(env_overrides.keys())}")
                self._deep_merge(config_data, env_overrides)

            try:
                self._config = AppConfig(**config_data)
            except ValidationError as e:
                self.logger.error(f"Configuration validation failed: {e}")
                raise ConfigurationError(f"Invalid configuration: {e}")

            return self._config

    def reload_config(self) -> AppConfig:
        """Drop the cached configuration and load it again."""
        with self._lock:
            self._config = None
        return self.load_config()

    def _load_yaml_file(self, file_path: Path) -> Dict[str, Any]:
        """Load YAML configuration file.

        Returns:
            Configuration dictionary
        """
        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            self.logger.error(f"Failed to parse YAML file {file_path}: {e}")
            raise ConfigurationError(f"Invalid YAML in {file_path}: {e}")

        if not isinstance(data, dict):
            raise ConfigurationError(f"Top level of {file_path} must be a mapping")
        return data

    def _get_env_overrides(self) -> Dict[str, Any]:
        """Get configuration overrides from environment variables.

        Environment variables follow pattern: VOXFOYER_<SECTION>_<KEY>
        Example: VOXFOYER_CLASSIFIER_BASE_URL -> classifier.base_url
        """
        overrides: Dict[str, Any] = {}

        for key, value in os.environ.items():
            if not key.startswith(self.ENV_PREFIX) or key == 'VOXFOYER_ENV':
                continue

            parts = key[len(self.ENV_PREFIX):].lower().split('_', 1)
            if len(parts) != 2 or parts[0] not in AppConfig.model_fields:
                continue

            section, field_name = parts
            overrides.setdefault(section, {})[field_name] = self._convert_env_value(value)

        return overrides

    def _convert_env_value(self, value: str) -> Union[str, int, float, bool, List[str]]:
        """Convert environment variable string to appropriate type."""
        if value.lower() in ('true', 'false'):
            return value.lower() == 'true'

        try:
            if '.' in value:
                return float(value)
            return int(value)
        except ValueError:
            pass

        if ',' in value:
            return [v.strip() for v in value.split(',')]

        return value

    def _deep_merge(self, base_dict: Dict[str, Any], update_dict: Dict[str, Any]):
        """Recursively merge nested dictionaries."""
        for key, value in update_dict.items():
            if isinstance(value, dict) and key in base_dict and isinstance(base_dict[key], dict):
                self._deep_merge(base_dict[key], value)
            else:
                base_dict[key] = value

    def validate_config(self, config_data: Dict[str, Any]) -> List[str]:
        """Validate configuration data without applying it.

        Args:
            config_data: Configuration data to validate

        Returns:
            List of validation errors (empty if valid)
        """
        errors = []

        try:
            AppConfig(**config_data)
        except ValidationError as e:
            for error in e.errors():
                field_path = '.'.join(str(loc) for loc in error['loc'])
                errors.append(f"{field_path}: {error['msg']}")

        return errors
