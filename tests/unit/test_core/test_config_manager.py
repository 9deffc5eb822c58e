"""
Unit tests for ConfigManager and the configuration models.
"""

import pytest
import yaml

from voxfoyer.core.config_manager import AppConfig, ConfigManager, ConfidenceConfig, TemporalConfig
from voxfoyer.core.error_handler import ConfigurationError
from tests.fixtures.sample_data import SAMPLE_CONFIGURATIONS


class TestConfigModels:
    """Test suite for the pydantic configuration models"""

    @pytest.mark.unit
    def test_defaults(self):
        """Defaults match the documented engine behavior"""
        config = AppConfig()

        assert config.locale == "fr"
        assert config.classifier.provider == "keyword"
        assert config.temporal.default_offset_days == 3
        assert config.temporal.week_end_day == "dimanche"
        assert config.confidence.default_penalty == 0.2
        assert config.logging.level == "WARNING"

    @pytest.mark.unit
    def test_threshold_order_is_validated(self):
        """Thresholds must decrease from very confident to moderate"""
        with pytest.raises(ValueError):
            ConfidenceConfig(very_confident_threshold=0.6, confident_threshold=0.7)

    @pytest.mark.unit
    def test_week_end_day_must_be_french(self):
        with pytest.raises(ValueError):
            TemporalConfig(week_end_day="sunday")

    @pytest.mark.unit
    def test_only_french_locale(self):
        with pytest.raises(ValueError):
            AppConfig(locale="en")

    @pytest.mark.unit
    def test_log_level_is_uppercased(self):
        assert AppConfig(logging={"level": "debug"}).logging.level == "DEBUG"


class TestConfigManager:
    """Test suite for hierarchical configuration loading"""

    @pytest.mark.unit
    def test_load_default_file(self, temp_config_dir, clean_env):
        """Values come from default_config.yaml"""
        manager = ConfigManager(config_path=temp_config_dir, environment="test")

        config = manager.load_config()

        assert config.app_name == "VoxFoyer-Test"
        assert config.environment == "test"
        assert config.classifier.timeout == 5
        assert config.logging.level == "DEBUG"

    @pytest.mark.unit
    def test_environment_file_overrides_default(self, temp_config_dir, clean_env):
        """<environment>.yaml is merged over the defaults"""
        with open(temp_config_dir / "test.yaml", "w", encoding="utf-8") as f:
            yaml.safe_dump(SAMPLE_CONFIGURATIONS["test_overrides"], f)

        config = ConfigManager(config_path=temp_config_dir, environment="test").load_config()

        assert config.temporal.week_end_day == "vendredi"
        assert config.temporal.default_offset_days == 3
        assert config.confidence.default_penalty == 0.3

    @pytest.mark.unit
    def test_local_file_has_last_word(self, temp_config_dir, clean_env):
        """local.yaml overrides user preferences"""
        with open(temp_config_dir / "user_preferences.yaml", "w", encoding="utf-8") as f:
            yaml.safe_dump({"classifier": {"timeout": 10}}, f)
        with open(temp_config_dir / "local.yaml", "w", encoding="utf-8") as f:
            yaml.safe_dump({"classifier": {"timeout": 20}}, f)

        config = ConfigManager(config_path=temp_config_dir, environment="test").load_config()

        assert config.classifier.timeout == 20

    @pytest.mark.unit
    def test_environment_variable_overrides(self, temp_config_dir, clean_env):
        """VOXFOYER_<SECTION>_<KEY> variables override files"""
        clean_env.setenv("VOXFOYER_CLASSIFIER_BASE_URL", "http://ollama:11434")
        clean_env.setenv("VOXFOYER_CLASSIFIER_PROVIDER", "ollama")
        clean_env.setenv("VOXFOYER_TEMPORAL_DEFAULT_OFFSET_DAYS", "5")
        clean_env.setenv("VOXFOYER_LOGGING_LOG_TO_CONSOLE", "true")

        config = ConfigManager(config_path=temp_config_dir, environment="test").load_config()

        assert config.classifier.base_url == "http://ollama:11434"
        assert config.classifier.provider == "ollama"
        assert config.temporal.default_offset_days == 5
        assert config.logging.log_to_console is True

    @pytest.mark.unit
    def test_unknown_section_variables_are_ignored(self, temp_config_dir, clean_env):
        clean_env.setenv("VOXFOYER_UNKNOWN_KEY", "value")

        config = ConfigManager(config_path=temp_config_dir, environment="test").load_config()

        assert not hasattr(config, "unknown")

    @pytest.mark.unit
    def test_invalid_values_raise_configuration_error(self, temp_config_dir, clean_env):
        """Validation failures surface as ConfigurationError"""
        clean_env.setenv("VOXFOYER_CONFIDENCE_DEFAULT_PENALTY", "1.5")

        with pytest.raises(ConfigurationError):
            ConfigManager(config_path=temp_config_dir, environment="test").load_config()

    @pytest.mark.unit
    def test_invalid_yaml_raises_configuration_error(self, temp_config_dir, clean_env):
        with open(temp_config_dir / "local.yaml", "w", encoding="utf-8") as f:
            f.write("classifier: [unclosed")

        with pytest.raises(ConfigurationError):
            ConfigManager(config_path=temp_config_dir, environment="test").load_config()

    @pytest.mark.unit
    def test_missing_directory_uses_defaults(self, tmp_path, clean_env):
        """No files at all still yields a valid configuration"""
        config = ConfigManager(config_path=tmp_path / "absent", environment="test").load_config()

        assert config == AppConfig(environment="test")

    @pytest.mark.unit
    def test_config_is_cached_until_reload(self, temp_config_dir, clean_env):
        manager = ConfigManager(config_path=temp_config_dir, environment="test")
        first = manager.load_config()

        with open(temp_config_dir / "local.yaml", "w", encoding="utf-8") as f:
            yaml.safe_dump({"classifier": {"timeout": 42}}, f)

        assert manager.load_config() is first
        assert manager.reload_config().classifier.timeout == 42

    @pytest.mark.unit
    def test_validate_config_lists_errors(self, temp_config_dir):
        manager = ConfigManager(config_path=temp_config_dir, environment="test")

        errors = manager.validate_config({"classifier": {"timeout": 0}})

        assert len(errors) == 1
        assert errors[0].startswith("classifier.timeout")
        assert manager.validate_config({}) == []

    @pytest.mark.unit
    @pytest.mark.parametrize("raw,expected", [
        ("true", True),
        ("False", False),
        ("12", 12),
        ("0.25", 0.25),
        ("a, b", ["a", "b"]),
        ("dimanche", "dimanche"),
    ])
    def test_convert_env_value(self, temp_config_dir, raw, expected):
        manager = ConfigManager(config_path=temp_config_dir, environment="test")

        assert manager._convert_env_value(raw) == expected
