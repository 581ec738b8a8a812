"""
Unit Tests for run.py Entry Script.

Tests individual actions with mocked dependencies.
"""

from unittest.mock import AsyncMock, patch

import pytest
from click.testing import CliRunner

from run import main, validate_project_root


@pytest.fixture
def runner():
    """Create Click test runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def quiet_logging():
    """Keep setup_logging from touching real handlers."""
    with patch("run.setup_logging") as mock_setup:
        yield mock_setup


class TestValidateProjectRoot:
    """Tests for validate_project_root function."""

    def test_succeeds_when_marker_exists(self, tmp_path):
        """Should return path when .project_root exists."""
        # Arrange
        (tmp_path / ".project_root").touch()

        # Act & Assert
        with patch("run.PROJECT_ROOT", tmp_path):
            assert validate_project_root() == tmp_path

    def test_exits_when_marker_missing(self, tmp_path):
        """Should exit with error when .project_root is missing."""
        with patch("run.PROJECT_ROOT", tmp_path):
            with pytest.raises(SystemExit) as exc_info:
                validate_project_root()
            assert exc_info.value.code == 1


class TestMainCLI:
    """Tests for main CLI entry point."""

    def test_help_displays_usage(self, runner):
        """Should display help text with --help."""
        result = runner.invoke(main, ["--help"])

        assert result.exit_code == 0
        assert "Taskboard Entry Point" in result.output
        assert "--action" in result.output
        assert "--owner" in result.output

    def test_info_action_displays_app_info(self, runner):
        """Should display application info with --action info."""
        result = runner.invoke(main, ["--action", "info"])

        assert result.exit_code == 0
        assert "Taskboard Backend" in result.output
        assert "Available Actions:" in result.output

    def test_debug_flag_sets_debug_logging(self, runner, quiet_logging):
        """Should configure DEBUG level logging with --debug."""
        runner.invoke(main, ["--action", "info", "--debug"])

        quiet_logging.assert_called_once_with(level="DEBUG", format_type="console")

    def test_verbose_flag_sets_info_logging(self, runner, quiet_logging):
        """Should configure INFO level logging with --verbose."""
        runner.invoke(main, ["--action", "info", "-v"])

        quiet_logging.assert_called_once_with(level="INFO", format_type="console")

    def test_config_action_displays_configuration(self, runner):
        """Should display YAML configuration with --action config."""
        result = runner.invoke(main, ["--action", "config"])

        assert result.exit_code == 0
        assert "Application Settings" in result.output
        assert "Lifecycle Settings" in result.output
        assert "group_delete_policy" in result.output

    def test_invalid_action_rejected(self, runner):
        """Should reject unknown actions."""
        result = runner.invoke(main, ["--action", "health"])

        assert result.exit_code != 0


class TestReconcileAction:
    """Tests for --action reconcile."""

    def test_requires_owner(self, runner):
        """Should exit with usage error when --owner is missing."""
        result = runner.invoke(main, ["--action", "reconcile"])

        assert result.exit_code == 2

    def test_reports_archived_count(self, runner):
        """Should report how many notes were archived."""
        with patch("run._archive_missing", new_callable=AsyncMock, return_value=3) as mock_archive:
            result = runner.invoke(main, ["--action", "reconcile", "--owner", "user-alice"])

        assert result.exit_code == 0
        assert "Archived 3 note(s) for user-alice." in result.output
        mock_archive.assert_awaited_once_with("user-alice")

    def test_failure_exits_with_error(self, runner):
        """Should exit non-zero when reconciliation fails."""
        with patch("run._archive_missing", new_callable=AsyncMock, side_effect=RuntimeError("db down")):
            result = runner.invoke(main, ["--action", "reconcile", "--owner", "user-alice"])

        assert result.exit_code == 1
        assert "db down" in result.output


class TestInitDbAction:
    """Tests for --action init-db."""

    def test_creates_schema(self, runner):
        """Should report success after creating tables."""
        with patch("run._init_db", new_callable=AsyncMock) as mock_init:
            result = runner.invoke(main, ["--action", "init-db"])

        assert result.exit_code == 0
        assert "Database schema is up to date." in result.output
        mock_init.assert_awaited_once()


class TestServerAction:
    """Tests for --action server."""

    def test_runs_uvicorn_with_overrides(self, runner):
        """Should start uvicorn on the requested host and port."""
        with patch("run.subprocess.run") as mock_run:
            result = runner.invoke(main, ["--action", "server", "--host", "0.0.0.0", "--port", "9000", "--reload"])

        assert result.exit_code == 0
        cmd = mock_run.call_args[0][0]
        assert "taskboard.backend.main:app" in cmd
        assert cmd[cmd.index("--host") + 1] == "0.0.0.0"
        assert cmd[cmd.index("--port") + 1] == "9000"
        assert "--reload" in cmd
