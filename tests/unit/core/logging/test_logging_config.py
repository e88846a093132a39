"""
Tests for logging configuration.

Tests LoggingConfig, LogLevel, and LogFormat.
"""

import pytest

from fetch_client.core.logging.config import LoggingConfig, LogLevel, LogFormat


class TestLoggingEnums:
    """Tests for LogLevel and LogFormat enums."""

    def test_log_level_is_string(self):
        """LogLevel inherits from str."""
        assert isinstance(LogLevel.INFO, str)
        assert LogLevel.WARNING.value == "WARNING"

    def test_log_format_values(self):
        assert [f.value for f in LogFormat] == ["json", "text", "colored"]


class TestLoggingConfig:
    """Tests for LoggingConfig dataclass."""

    def test_default_config(self):
        """Default LoggingConfig has expected values."""
        config = LoggingConfig()

        assert config.level == LogLevel.INFO
        assert config.format == LogFormat.TEXT
        assert config.enable_console is True
        assert config.enable_file is False
        assert config.enable_correlation_id is True
        assert config.logger_name == "fetch_client"

    def test_create_from_strings(self):
        """create() accepts case-insensitive strings."""
        config = LoggingConfig.create(level="debug", format="JSON")

        assert config.level is LogLevel.DEBUG
        assert config.format is LogFormat.JSON

    def test_create_invalid_level(self):
        with pytest.raises(ValueError):
            LoggingConfig.create(level="VERBOSE")

    def test_file_requires_path(self):
        with pytest.raises(ValueError, match="file_path is required"):
            LoggingConfig(enable_file=True)

    @pytest.mark.parametrize("kwargs", [{"max_bytes": 0}, {"backup_count": -1}])
    def test_invalid_rotation(self, kwargs):
        with pytest.raises(ValueError):
            LoggingConfig(**kwargs)

    def test_frozen(self):
        config = LoggingConfig()
        with pytest.raises(AttributeError):
            config.level = LogLevel.DEBUG

    def test_file_path_enables_file(self, tmp_path):
        """A file_path passed to create() turns the file handler on."""
        config = LoggingConfig.create(file_path=str(tmp_path / "fetch.log"))

        assert config.enable_file is True

    def test_explicit_enable_file_false_wins(self, tmp_path):
        config = LoggingConfig.create(file_path=str(tmp_path / "fetch.log"), enable_file=False)

        assert config.enable_file is False

    def test_constructor_coerces_strings(self):
        config = LoggingConfig(level="warning", format="Colored")

        assert config.level is LogLevel.WARNING
        assert config.format is LogFormat.COLORED

    def test_invalid_format_lists_allowed(self):
        with pytest.raises(ValueError, match="Allowed: json, text, colored"):
            LoggingConfig.create(format="xml")

    def test_extra_fields_frozen(self):
        fields = {"service": "billing"}
        config = LoggingConfig.create(extra_fields=fields)
        fields["service"] = "changed"

        assert config.extra_fields["service"] == "billing"
        with pytest.raises(TypeError):
            config.extra_fields["env"] = "prod"

    def test_create_passes_other_fields(self):
        config = LoggingConfig.create(mask_sensitive=False, logger_name="billing.http", backup_count=0)

        assert config.mask_sensitive is False
        assert config.logger_name == "billing.http"
        assert config.backup_count == 0
