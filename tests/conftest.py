"""
Pytest configuration and shared fixtures for bookmark importer tests.

This module provides common fixtures, mocks, and test utilities that are
shared across multiple test modules.
"""

import os
import shutil
import tempfile
from pathlib import Path
from typing import Generator

import pytest

from bookmark_importer.core.data_models import ImportSource
from bookmark_importer.core.events import EventDispatcher
from bookmark_importer.core.listeners import RecordsImportStat
from bookmark_importer.core.storage import (
    InMemoryBookmarkStore,
    InMemoryFileStorage,
    InMemoryImportHistoryStore,
    InMemoryImportStatRepository,
)
from tests.fixtures.mock_utilities import FixedSettings, RecordingListener
from tests.fixtures.test_data import SAMPLE_BOOKMARKS, build_export

# ============================================================================
# Pytest Configuration
# ============================================================================

IMPORTER_ENV_VARS = [
    "BOOKMARK_IMPORTER_MAX_BOOKMARK_TAGS",
    "BOOKMARK_IMPORTER_MAX_TAG_LENGTH",
    "BOOKMARK_IMPORTER_IMPORT_HISTORY_BATCH_SIZE",
    "BOOKMARK_IMPORTER_LOG_LEVEL",
]


@pytest.fixture(autouse=True)
def clean_importer_env(monkeypatch):
    """Keep environment overrides from leaking into configuration tests."""
    for var in IMPORTER_ENV_VARS:
        monkeypatch.delenv(var, raising=False)


# ============================================================================
# Temporary Directory Fixtures
# ============================================================================


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    temp_path = Path(tempfile.mkdtemp(prefix="bookmark_import_test_"))
    try:
        yield temp_path
    finally:
        if temp_path.exists():
            shutil.rmtree(temp_path)


# ============================================================================
# Collaborator Fixtures
# ============================================================================


@pytest.fixture
def settings() -> FixedSettings:
    """Settings with the default tag limits."""
    return FixedSettings()


@pytest.fixture
def file_storage() -> InMemoryFileStorage:
    return InMemoryFileStorage()


@pytest.fixture
def stat_repository() -> InMemoryImportStatRepository:
    return InMemoryImportStatRepository()


@pytest.fixture
def history_store() -> InMemoryImportHistoryStore:
    return InMemoryImportHistoryStore()


@pytest.fixture
def bookmark_store() -> InMemoryBookmarkStore:
    return InMemoryBookmarkStore()


@pytest.fixture
def recorder() -> RecordingListener:
    """Listener recording every event it receives."""
    return RecordingListener()


@pytest.fixture
def dispatcher(recorder: RecordingListener) -> EventDispatcher:
    """Dispatcher with a fresh stat recorder followed by the recording listener."""
    return EventDispatcher(RecordsImportStat(), [recorder])


@pytest.fixture
def sample_chrome_export() -> bytes:
    """Chrome export with three valid bookmarks."""
    return build_export(ImportSource.CHROME, SAMPLE_BOOKMARKS)
