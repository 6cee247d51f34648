"""
Pytest configuration and fixtures for all tests.

This file is automatically loaded by pytest and provides common fixtures
and configuration for all test modules.
"""

import sys
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

import pytest

from erbify.core.converter import FileConverter
from erbify.core.models import ProgressCounters
from erbify.core.progress import ProgressReporter
from erbify.core.retry_manager import RetryConfig, RetryingConverter
from erbify.utils.unified_logger import UnifiedLogger


@pytest.fixture
def log_entries():
    """Structured log entries captured during a test."""
    return []


@pytest.fixture
def reporter(log_entries):
    """Reporter writing to an in-memory list instead of the console."""
    logger = UnifiedLogger(console_output=False, enable_colors=False,
                           storage_callback=log_entries.append)
    return ProgressReporter(logger)


@pytest.fixture
def client():
    """Stand-in for TranslationClient; configure ``translate`` per test."""
    mock = MagicMock()
    mock.translate = AsyncMock(return_value="<p><%= title %></p>")
    return mock


@pytest.fixture
def counters():
    return ProgressCounters()


@pytest.fixture
def converter(client, counters, reporter):
    return FileConverter(client, counters=counters, reporter=reporter)


@pytest.fixture
def retrying(converter):
    return RetryingConverter(converter, RetryConfig(max_attempts=4, delay=0, retry_all_failures=False))


@pytest.fixture
def make_template(tmp_path):
    """Create a template file under tmp_path and return its path."""
    def _make(name: str, content: str = "%p= title\n") -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path
    return _make
