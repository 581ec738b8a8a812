"""
Unit Tests for Centralized Logging.

Tests the logging configuration and source handling.
"""

import logging
from unittest.mock import MagicMock, patch

import pytest

from taskboard.backend.core import logging as logging_module
from taskboard.backend.core.logging import (
    VALID_SOURCES,
    _resolve_log_path,
    get_logger,
    log_with_source,
    setup_logging,
)


@pytest.fixture
def mock_logging_config():
    """Logging configuration as loaded from logging.yaml."""
    return {
        "level": "INFO",
        "format": "json",
        "handlers": {
            "console": {"enabled": True},
            "file": {
                "enabled": True,
                "path": "logs/taskboard.jsonl",
                "max_bytes": 10485760,
                "backup_count": 5,
            },
        },
    }


class TestValidSources:
    """Tests for VALID_SOURCES constant."""

    def test_valid_sources_contains_expected_values(self):
        assert VALID_SOURCES == frozenset({"web", "cli", "api", "internal", "unknown"})


class TestLoggingConfigLoading:
    """Tests for logging configuration loading from YAML."""

    def test_config_is_loaded_once(self, mock_logging_config):
        """Should cache the configuration after first load."""
        logging_module._logging_config = None

        with patch("taskboard.backend.core.logging.load_yaml_config", return_value=mock_logging_config) as mock_load:
            first = logging_module._load_logging_config()
            second = logging_module._load_logging_config()

            assert first is second
            mock_load.assert_called_once_with("logging.yaml")

        logging_module._logging_config = None


class TestSetupLogging:
    """Tests for setup_logging function."""

    def test_uses_config_defaults(self, mock_logging_config):
        """Should use values from logging.yaml when not overridden."""
        with patch("taskboard.backend.core.logging._load_logging_config", return_value=mock_logging_config):
            setup_logging(enable_file_logging=False)

            assert logging.getLogger().level == logging.INFO

    def test_override_takes_precedence(self, mock_logging_config):
        """Explicit parameters should override config values."""
        with patch("taskboard.backend.core.logging._load_logging_config", return_value=mock_logging_config):
            setup_logging(level="DEBUG", format_type="console", enable_file_logging=False)

            root_logger = logging.getLogger()
            assert root_logger.level == logging.DEBUG
            assert "StreamHandler" in [type(h).__name__ for h in root_logger.handlers]

    def test_file_logging_adds_rotating_handler(self, tmp_path, mock_logging_config):
        """Should create a single RotatingFileHandler for the JSONL file."""
        log_file = tmp_path / "logs" / "taskboard.jsonl"

        with patch("taskboard.backend.core.logging._load_logging_config", return_value=mock_logging_config), \
             patch("taskboard.backend.core.logging._resolve_log_path", return_value=log_file):
            setup_logging(level="INFO", enable_file_logging=True)

            handler_types = [type(h).__name__ for h in logging.getLogger().handlers]
            assert handler_types.count("RotatingFileHandler") == 1
            assert log_file.parent.is_dir()

        for handler in logging.getLogger().handlers[:]:
            handler.close()
            logging.getLogger().removeHandler(handler)


class TestLogWithSource:
    """Tests for log_with_source helper function."""

    def test_adds_source_field(self):
        """Should add source field to log call."""
        logger = get_logger("test")
        mock_info = MagicMock()

        with patch.object(logger, "info", mock_info):
            log_with_source(logger, "cli", "info", "Reconciliation finished", created=3)

            mock_info.assert_called_once_with("Reconciliation finished", source="cli", created=3)

    def test_raises_on_invalid_level(self):
        """Should raise AttributeError for invalid log levels."""
        with pytest.raises(AttributeError):
            log_with_source(get_logger("test"), "web", "nonexistent_level", "Test")


class TestResolveLogPath:
    """Tests for _resolve_log_path function."""

    def test_relative_to_project_root(self, tmp_path):
        with patch("taskboard.backend.core.logging.find_project_root", return_value=tmp_path):
            assert _resolve_log_path("logs/taskboard.jsonl") == tmp_path / "logs" / "taskboard.jsonl"
