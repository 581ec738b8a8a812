"""
Unit Test Fixtures.

Fixtures for unit tests - all external dependencies are mocked.
Unit tests should be fast and isolated, never touching real databases.
"""

from datetime import datetime
from unittest.mock import AsyncMock, MagicMock

import pytest


# =============================================================================
# Database Mock Fixtures
# =============================================================================


@pytest.fixture
def mock_db_session() -> MagicMock:
    """
    Mock database session for unit tests.

    begin_nested() returns an async context manager, like AsyncSession.

    Usage:
        def test_repository(mock_db_session):
            repo = NoteRepository(mock_db_session)
    """
    session = MagicMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.flush = AsyncMock()
    session.refresh = AsyncMock()
    session.execute = AsyncMock()
    session.add = MagicMock()
    session.begin_nested = MagicMock(return_value=AsyncMock())
    session.expire_all = MagicMock()
    return session


@pytest.fixture
def mock_db_result() -> MagicMock:
    """
    Mock database query result.

    Usage:
        def test_query(mock_db_session, mock_db_result):
            mock_db_result.scalar_one_or_none.return_value = note
            mock_db_session.execute.return_value = mock_db_result
    """
    result = MagicMock()
    result.scalar_one_or_none = MagicMock(return_value=None)
    result.scalars = MagicMock()
    result.scalars.return_value.all = MagicMock(return_value=[])
    result.scalars.return_value.first = MagicMock(return_value=None)
    return result


# =============================================================================
# Model Fixtures
# =============================================================================


def make_note(**overrides) -> MagicMock:
    """Build a note-shaped mock with sensible defaults."""
    note = MagicMock()
    note.id = "a" * 32
    note.user_id = "user-alice"
    note.group_id = None
    note.title = "Buy milk"
    note.description = None
    note.status = "todo"
    note.priority = "medium"
    note.created_at = datetime(2024, 1, 1, 9, 0, 0)
    note.updated_at = datetime(2024, 1, 1, 9, 0, 0)
    note.completed_at = None
    for key, value in overrides.items():
        setattr(note, key, value)
    return note


@pytest.fixture
def note_factory():
    """Provide the note mock builder."""
    return make_note


# =============================================================================
# Settings Mock Fixtures
# =============================================================================


@pytest.fixture
def mock_app_config() -> MagicMock:
    """
    Mock YAML application configuration.

    Usage:
        def test_with_config(mock_app_config):
            with patch("module.get_app_config", return_value=mock_app_config):
                ...
    """
    config = MagicMock()
    config.features.api_detailed_errors = True
    config.features.api_request_logging = True
    config.features.archive_on_complete = True
    config.lifecycle.default_group_color = "#3498db"
    config.lifecycle.group_delete_policy = "reassign"
    config.lifecycle.daily_stats_default_days = 30
    config.lifecycle.daily_stats_max_days = 365
    config.application.pagination.default_limit = 10
    config.application.pagination.max_limit = 100
    return config


# =============================================================================
# Logging Mock Fixtures
# =============================================================================


@pytest.fixture
def mock_logger() -> MagicMock:
    """
    Mock logger for testing logging calls.

    Usage:
        def test_logging(mock_logger):
            service._logger = mock_logger
            ...
            mock_logger.warning.assert_called_once()
    """
    logger = MagicMock()
    logger.debug = MagicMock()
    logger.info = MagicMock()
    logger.warning = MagicMock()
    logger.error = MagicMock()
    logger.exception = MagicMock()
    return logger
