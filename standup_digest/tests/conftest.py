# conftest.py
"""Pytest configuration and shared fixtures."""

import os
import tempfile
from pathlib import Path

# Settings are read at import time; point them at a throwaway database first
_TEST_DB_PATH = Path(tempfile.gettempdir()) / f"standup_digest_test_{os.getpid()}.db"
os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = f"sqlite:///{_TEST_DB_PATH}"
os.environ.pop("GROQ_API_KEY", None)
os.environ.pop("API_KEY", None)

from datetime import datetime  # noqa: E402
from unittest.mock import AsyncMock  # noqa: E402

import pytest  # noqa: E402

from standup_digest.data import InMemoryStandupRepository  # noqa: E402
from standup_digest.data.models import DatabaseManager  # noqa: E402

from .helpers import make_calendar, make_record  # noqa: E402


@pytest.fixture
def calendar():
    """Friday 2024-06-07, 10:00 local time"""
    return make_calendar(datetime(2024, 6, 7, 10, 0))


@pytest.fixture
def sample_records():
    """A week of updates from two people, one day empty"""
    return [
        make_record("Alice", "2024-06-03", yesterday="Shipped X", today="Start Y", blockers="None"),
        make_record("Bob", "2024-06-03", hour=10, yesterday="Reviewed PRs", today="Fix login bug",
                    blockers="Waiting on API keys", role="Marketing"),
        make_record("Alice", "2024-06-04", yesterday="Started Y", today="Finish Y", blockers="<p>None</p>"),
        make_record("Bob", "2024-06-05", yesterday="Fixed login bug", today="Write docs", blockers=""),
    ]


@pytest.fixture
def memory_repository(calendar):
    return InMemoryStandupRepository(calendar=calendar)


@pytest.fixture
def no_sleep():
    """Stand-in for asyncio.sleep that records requested delays"""
    return AsyncMock(return_value=None)


@pytest.fixture
def mock_llm():
    """LLM whose complete() is an AsyncMock; set side_effect/return_value per test"""
    llm = AsyncMock()
    llm.complete.return_value = "{}"
    return llm


@pytest.fixture
def temp_db():
    """Create a temporary test database for each test."""
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as tmp_file:
        temp_db_path = tmp_file.name

    db_manager = DatabaseManager(f"sqlite:///{temp_db_path}")
    db_manager.create_tables()
    try:
        yield db_manager
    finally:
        db_manager.engine.dispose()
        Path(temp_db_path).unlink(missing_ok=True)


def pytest_sessionfinish(session, exitstatus):
    _TEST_DB_PATH.unlink(missing_ok=True)


# Pytest configuration
def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "slow: mark test as slow running")
    config.addinivalue_line("markers", "integration: mark test as integration test")
    config.addinivalue_line("markers", "unit: mark test as unit test")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        if "test_web" in item.nodeid or "test_sqlalchemy" in item.nodeid:
            item.add_marker(pytest.mark.integration)
        else:
            item.add_marker(pytest.mark.unit)
