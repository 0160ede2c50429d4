"""
Error hierarchy for the bookmark import pipeline.

Policy decisions (failed or skipped bookmarks) are never raised; they are
returned as data. The exceptions below cover configuration problems, missing
import files and unrecoverable runtime faults.
"""

from typing import Optional


# ============================================================================
# Unified Exception Hierarchy for Bookmark Importer
# ============================================================================
# All custom exceptions for the bookmark importer are defined here.
# Import these exceptions from bookmark_importer.utils.error_handler
# ============================================================================


class BookmarkImporterError(Exception):
    """Base exception for all bookmark importer errors."""

    pass


# ============================================================================
# Configuration Errors
# ============================================================================


class ConfigurationError(BookmarkImporterError):
    """Configuration-related errors."""

    pass


# ============================================================================
# Import Errors
# ============================================================================


class ImportFileNotFoundError(BookmarkImporterError, FileNotFoundError):
    """Raised when the export file of an import does not exist."""

    def __init__(self, owner_id: str, file_id: str, message: Optional[str] = None):
        self.owner_id = owner_id
        self.file_id = file_id
        super().__init__(
            message or f"Import file '{file_id}' not found for owner '{owner_id}'"
        )


class SourceParseError(BookmarkImporterError):
    """Raised when an export file cannot be decoded before parsing."""

    pass
