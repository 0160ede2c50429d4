"""
Configuration for the Bookmark Importer.
"""

from .pydantic_config import (
    IMPORT_HISTORY_BATCH_SIZE,
    MAX_BOOKMARK_TAGS,
    MAX_TAG_LENGTH,
    ConfigurationManager,
    ImporterConfig,
    SettingsProvider,
)

__all__ = [
    "IMPORT_HISTORY_BATCH_SIZE",
    "MAX_BOOKMARK_TAGS",
    "MAX_TAG_LENGTH",
    "ConfigurationManager",
    "ImporterConfig",
    "SettingsProvider",
]
