"""Shared test fixtures for the notification preference tests.

This module provides common fixtures used across all test modules:
- Database isolation with temporary files
- Standard test user data
- Catalog, records and digest schedule

Usage:
    def test_something(temp_db):
        # temp_db is automatically cleaned up after the test
        ...
"""

import logging
import os
import tempfile
from collections.abc import Generator
from datetime import datetime
from pathlib import Path
from unittest.mock import patch

import pytest
import structlog

from cassius_notify import get_connection
from cassius_notify.config_models import DigestScheduleConfig
from cassius_notify.models import Category, PreferenceRecord
from cassius_notify.preferences.catalog import NotificationCatalog, default_catalog


# ─────────────────────────────────────────────────────────────────────────────
# Database Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def temp_db() -> Generator[Path, None, None]:
    """Create a temporary database file for testing.

    The database file is automatically deleted after the test completes.

    Yields:
        Path to the temporary database file
    """
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = Path(f.name)

    yield db_path

    # Cleanup
    if db_path.exists():
        os.unlink(db_path)


@pytest.fixture
def store_db(temp_db: Path) -> Generator[Path, None, None]:
    """Point the preference store at the temporary database."""
    with patch("cassius_notify.DB_PATH", temp_db):
        get_connection().close()  # create the schema up front
        yield temp_db


# ─────────────────────────────────────────────────────────────────────────────
# User Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def mock_user_id() -> str:
    """Standard test user ID."""
    return "test_user_123"


@pytest.fixture
def other_user_id() -> str:
    """Second user, for isolation checks."""
    return "test_user_456"


# ─────────────────────────────────────────────────────────────────────────────
# Catalog & Record Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def catalog() -> NotificationCatalog:
    """Built-in clinic catalog."""
    return default_catalog()


@pytest.fixture
def alerts_record() -> PreferenceRecord:
    """Default record for ALERTS_REMINDERS."""
    return PreferenceRecord.default(Category.ALERTS_REMINDERS)


@pytest.fixture
def imports_record() -> PreferenceRecord:
    """Default record for IMPORTS."""
    return PreferenceRecord.default(Category.IMPORTS)


# ─────────────────────────────────────────────────────────────────────────────
# Digest Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def schedule() -> DigestScheduleConfig:
    """Default digest schedule (19h daily, Friday 19h weekly, Europe/Paris)."""
    return DigestScheduleConfig()


@pytest.fixture
def monday_noon() -> datetime:
    """Monday 2026-10-19 12:00, naive (schedule timezone)."""
    return datetime(2026, 10, 19, 12, 0)


# ─────────────────────────────────────────────────────────────────────────────
# Logging Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture(autouse=True)
def restore_logging() -> Generator[None, None, None]:
    """Undo setup_logging(): its handler is bound to the test's captured stderr."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    structlog.contextvars.clear_contextvars()
