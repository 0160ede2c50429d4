"""
Utility modules for the Bookmark Importer.
"""

from .error_handler import (
    BookmarkImporterError,
    ConfigurationError,
    ImportFileNotFoundError,
    SourceParseError,
)
from .logging_setup import setup_logging

__all__ = [
    "BookmarkImporterError",
    "ConfigurationError",
    "ImportFileNotFoundError",
    "SourceParseError",
    "setup_logging",
]
