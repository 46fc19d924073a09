"""
Unit Tests - Configuration
"""
import io
import json
import logging

import pytest
import structlog

from salesdash.config import Settings, get_settings
from salesdash.config import logging as logging_config
from salesdash.config.settings import AggregationSettings, DashboardSettings, MonitoringSettings


class TestSettings:
    """Tests for application settings"""

    def test_test_settings(self, test_settings):
        """Test settings built for the test suite"""
        assert test_settings.app_env == "testing"
        assert test_settings.debug is True
        assert test_settings.effective_log_level == "DEBUG"

    def test_defaults(self):
        """Test default aggregation and dashboard policies"""
        settings = get_settings()

        assert settings.aggregation.leap_day_policy == "fold"
        assert settings.aggregation.calendar_exclude_negative_revenue is True
        assert settings.aggregation.flow_namespace_nodes is True
        assert settings.geography.country_aliases["England"] == "United Kingdom"
        assert settings.data.invoice_date_format == "%Y-%m-%d %H:%M"

    def test_invalid_environment(self):
        """Test an unknown environment is rejected"""
        with pytest.raises(ValueError):
            Settings(APP_ENV="moon")

    def test_env_overrides(self, monkeypatch):
        """Test environment variables override defaults"""
        monkeypatch.setenv("AGG_LEAP_DAY_POLICY", "DROP")
        monkeypatch.setenv("DASHBOARD_DEFAULT_YEAR", "2023")

        assert AggregationSettings().leap_day_policy == "drop"
        assert DashboardSettings().default_year == 2023

    def test_settings_cached(self):
        """Test get_settings returns one instance"""
        assert get_settings() is get_settings()

    def test_log_level_without_debug(self):
        """Test LOG_LEVEL applies when debug is off"""
        settings = Settings(monitoring=MonitoringSettings(LOG_LEVEL="warning"))

        assert settings.effective_log_level == "WARNING"


@pytest.fixture
def restore_root_logger():
    """Put the root logger back after a test reconfigures it"""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers = handlers
    root.setLevel(level)
    structlog.reset_defaults()


class TestLogging:
    """Tests for configure_logging"""

    def test_json_lines(self, monkeypatch, restore_root_logger):
        """Test JSON format renders one object per event"""
        settings = Settings(monitoring=MonitoringSettings(LOG_FORMAT="json"))
        monkeypatch.setattr(logging_config, "get_settings", lambda: settings)
        stream = io.StringIO()

        logging_config.configure_logging("INFO", stream=stream)
        logging_config.get_logger("salesdash.test").info("Loaded", rows=3)

        line = json.loads(stream.getvalue().strip().splitlines()[-1])
        assert line["event"] == "Loaded"
        assert line["rows"] == 3
        assert line["level"] == "info"

    def test_level_filters_events(self, restore_root_logger):
        """Test events below the configured level are not written"""
        stream = io.StringIO()

        logging_config.configure_logging("WARNING", stream=stream)
        logging_config.get_logger("salesdash.test").info("Hidden")

        assert "Hidden" not in stream.getvalue()

    def test_debug_forces_debug_level(self, monkeypatch, restore_root_logger):
        """Test DEBUG=true lowers the level to DEBUG"""
        settings = Settings(DEBUG=True)
        monkeypatch.setattr(logging_config, "get_settings", lambda: settings)

        logging_config.configure_logging(stream=io.StringIO())

        assert logging.getLogger().level == logging.DEBUG
