"""
Unit tests for Configuration module.

This module contains unit tests for the configuration settings, validators,
computed properties and the logging setup driven by them.
"""

import json
import logging

import pytest
from pydantic import ValidationError

from app.core.config import (
    ConfigValidator,
    EnvironmentEnum,
    LogFormatEnum,
    Settings,
    get_config_summary,
)
from app.core.logging_config import JsonFormatter, configure_logging


class TestSettings:
    """Test cases for Settings configuration."""

    def test_default_settings(self):
        """Test default configuration values."""
        test_settings = Settings(_env_file=None, environment="development", auth_jwt_secret=None)

        assert test_settings.app_name == "Planora API"
        assert test_settings.api_prefix == "/api"
        assert test_settings.auth_jwt_algorithm == "HS256"
        assert test_settings.auth_jwt_audience == "authenticated"
        assert test_settings.default_page_size == 20
        assert test_settings.max_page_size == 100
        assert test_settings.websocket_heartbeat_interval == 30
        assert test_settings.has_token_verification is False

    def test_environment_shortcuts(self):
        """Test environment validation with various inputs."""
        assert Settings(_env_file=None, environment="prod").environment == EnvironmentEnum.production
        assert Settings(_env_file=None, environment="dev").environment == EnvironmentEnum.development
        assert Settings(_env_file=None, environment="TEST").is_testing is True

    def test_allowed_origins_list(self):
        test_settings = Settings(
            _env_file=None, allowed_origins="https://a.example, https://b.example,"
        )

        assert test_settings.allowed_origins_list == ["https://a.example", "https://b.example"]

    def test_max_page_size_limit(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, max_page_size=1000)

    def test_default_page_size_capped_by_max(self):
        test_settings = Settings(_env_file=None, default_page_size=80, max_page_size=50)

        assert test_settings.default_page_size == 50


class TestConfigValidator:
    """Test cases for the configuration summary helpers."""

    def test_feature_status_keys(self):
        status = ConfigValidator.get_feature_status()

        assert set(status) == {"token_verification", "realtime", "environment"}

    def test_config_summary(self):
        summary = get_config_summary()

        assert summary["app_name"]
        assert "features" in summary
        assert "auth_configured" in summary

    def test_required_settings_present(self):
        ConfigValidator.validate_required_settings()

    def test_production_requires_jwt_secret(self, monkeypatch):
        from app.core import config

        monkeypatch.setattr(config.settings, "environment", EnvironmentEnum.production)
        monkeypatch.setattr(config.settings, "auth_jwt_secret", None)

        with pytest.raises(ValueError, match="AUTH_JWT_SECRET"):
            ConfigValidator.validate_required_settings()


class TestLoggingConfig:
    """Test cases for configure_logging."""

    def test_configure_logging_does_not_stack_handlers(self):
        config = Settings(_env_file=None, log_format="simple", log_level="DEBUG")
        root = logging.getLogger()
        previous_level = root.level

        configure_logging(config)
        configure_logging(config)

        ours = [h for h in root.handlers if getattr(h, "_planora", False)]
        assert len(ours) == 1
        assert root.level == logging.DEBUG
        assert config.log_format == LogFormatEnum.simple

        root.removeHandler(ours[0])
        root.setLevel(previous_level)

    def test_json_formatter(self):
        record = logging.LogRecord(
            "planora.test", logging.INFO, __file__, 1, "hello %s", ("x",), None
        )

        entry = json.loads(JsonFormatter().format(record))

        assert entry["message"] == "hello x"
        assert entry["level"] == "INFO"
        assert entry["logger"] == "planora.test"
