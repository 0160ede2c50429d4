"""
Data models for the Bookmark Importer.

This module defines the records, statuses and results that flow through the
import pipeline, from the candidates found in an export file to the final
outcome of an import.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from .import_options import ImportOptions
from .tag_set import TagSet


class ImportSource(str, Enum):
    """Export formats the importer understands."""

    CHROME = "chrome"
    FIREFOX = "firefox"
    SAFARI = "safari"
    POCKET = "pocket"
    INSTAPAPER = "instapaper"

    @classmethod
    def from_request(cls, name: str) -> "ImportSource":
        """
        Resolve a source from the name used by import requests.

        Args:
            name: Request name such as ``chromeExportFile`` or an enum value

        Returns:
            Matching ImportSource

        Raises:
            ValueError: If the name is unknown
        """
        aliases = {
            "chromeexportfile": cls.CHROME,
            "firefoxfile": cls.FIREFOX,
            "safariexportfile": cls.SAFARI,
            "pocketexportfile": cls.POCKET,
            "instapaperfile": cls.INSTAPAPER,
        }

        key = (name or "").strip().lower()
        if key in aliases:
            return aliases[key]

        try:
            return cls(key)
        except ValueError:
            raise ValueError(f"Unknown import source: {name}")

    @property
    def is_browser_export(self) -> bool:
        return self in (ImportSource.CHROME, ImportSource.FIREFOX, ImportSource.SAFARI)


class SkipReason(str, Enum):
    """Why a single bookmark was left out of an import."""

    INVALID_TAG = "invalid_tag"
    TAG_MERGE_OVERFLOW = "tag_merge_overflow"
    TAGS_TOO_LARGE = "tags_too_large"


class OutcomeStatus(str, Enum):
    """Final status of an import."""

    SUCCESS = "success"
    FAILED_INVALID_URL = "failed_invalid_url"
    FAILED_INVALID_TAG = "failed_invalid_tag"
    FAILED_MERGE_OVERFLOW = "failed_merge_overflow"
    FAILED_TOO_MANY_TAGS = "failed_too_many_tags"
    FAILED_SYSTEM_ERROR = "failed_system_error"

    @property
    def failed(self) -> bool:
        return self is not OutcomeStatus.SUCCESS

    @property
    def category(self) -> str:
        return "failed" if self.failed else "success"

    @property
    def reason(self) -> str:
        """Short word form of a failed status."""
        if not self.failed:
            raise ValueError("only a failed outcome can have a reason")
        return _FAILED_STATUS_WORDS[self]

    @property
    def notification_message(self) -> str:
        if not self.failed:
            raise ValueError("only a failed outcome can have a reason")
        return _FAILED_STATUS_MESSAGES[self]


_FAILED_STATUS_WORDS = {
    OutcomeStatus.FAILED_INVALID_URL: "FailedDueToInvalidUrl",
    OutcomeStatus.FAILED_INVALID_TAG: "FailedDueToInvalidTag",
    OutcomeStatus.FAILED_MERGE_OVERFLOW: "FailedDueToTagsMergeConflict",
    OutcomeStatus.FAILED_TOO_MANY_TAGS: "FailedDueToTooManyTags",
    OutcomeStatus.FAILED_SYSTEM_ERROR: "FailedDueToSystemError",
}

_FAILED_STATUS_MESSAGES = {
    OutcomeStatus.FAILED_INVALID_URL: (
        "Import could not be completed because an invalid bookmark was found."
    ),
    OutcomeStatus.FAILED_INVALID_TAG: (
        "Import could not be completed because an invalid tag was found."
    ),
    OutcomeStatus.FAILED_MERGE_OVERFLOW: (
        "Import could not be completed because tags could not be merged."
    ),
    OutcomeStatus.FAILED_TOO_MANY_TAGS: (
        "Import could not be completed because a bookmark with too many tags "
        "was encountered."
    ),
    OutcomeStatus.FAILED_SYSTEM_ERROR: (
        "Import could not be completed due to a system error."
    ),
}


class FailReason(str, Enum):
    """Why a bookmark fails an import."""

    INVALID_URL = "invalid_url"
    INVALID_TAG = "invalid_tag"
    MERGE_OVERFLOW = "merge_overflow"
    TOO_MANY_TAGS = "too_many_tags"

    @property
    def outcome_status(self) -> OutcomeStatus:
        return {
            FailReason.INVALID_URL: OutcomeStatus.FAILED_INVALID_URL,
            FailReason.INVALID_TAG: OutcomeStatus.FAILED_INVALID_TAG,
            FailReason.MERGE_OVERFLOW: OutcomeStatus.FAILED_MERGE_OVERFLOW,
            FailReason.TOO_MANY_TAGS: OutcomeStatus.FAILED_TOO_MANY_TAGS,
        }[self]


class BookmarkImportStatus(int, Enum):
    """
    Status recorded for each bookmark of an import.

    Each category follows its own numeric range so that a range query
    (e.g. 101 to 199) selects every status of that category.
    """

    SUCCESS = 1

    # failed
    FAILED_DUE_TO_INVALID_TAG = 101
    FAILED_DUE_TO_MERGE_TAGS_EXCEEDED = 102
    FAILED_DUE_TO_SYSTEM_ERROR = 103
    FAILED_DUE_TO_INVALID_URL = 104
    FAILED_DUE_TO_TOO_MANY_TAGS = 105

    # skipped
    SKIPPED_DUE_TO_INVALID_TAG = 201
    SKIPPED_DUE_TO_MERGE_TAGS_EXCEEDED = 202
    SKIPPED_DUE_TO_TOO_MANY_TAGS = 203

    @classmethod
    def from_skip_reason(cls, reason: SkipReason) -> "BookmarkImportStatus":
        return {
            SkipReason.INVALID_TAG: cls.SKIPPED_DUE_TO_INVALID_TAG,
            SkipReason.TAG_MERGE_OVERFLOW: cls.SKIPPED_DUE_TO_MERGE_TAGS_EXCEEDED,
            SkipReason.TAGS_TOO_LARGE: cls.SKIPPED_DUE_TO_TOO_MANY_TAGS,
        }[reason]

    @classmethod
    def from_fail_reason(cls, reason: FailReason) -> "BookmarkImportStatus":
        return {
            FailReason.INVALID_URL: cls.FAILED_DUE_TO_INVALID_URL,
            FailReason.INVALID_TAG: cls.FAILED_DUE_TO_INVALID_TAG,
            FailReason.MERGE_OVERFLOW: cls.FAILED_DUE_TO_MERGE_TAGS_EXCEEDED,
            FailReason.TOO_MANY_TAGS: cls.FAILED_DUE_TO_TOO_MANY_TAGS,
        }[reason]

    @property
    def category(self) -> str:
        if self is BookmarkImportStatus.SUCCESS:
            return "success"
        if 101 <= self.value <= 199:
            return "failed"
        return "skipped"


@dataclass(frozen=True)
class Candidate:
    """A bookmark found in an export file, not yet classified."""

    url: str
    tags: TagSet
    line_number: int


@dataclass(frozen=True)
class ImportRequestData:
    """Everything the importer needs to run one import."""

    import_id: str
    user_id: str
    source: ImportSource
    options: ImportOptions = field(default_factory=ImportOptions)


@dataclass
class ImportStats:
    """Counters of an import run."""

    total_imported: int = 0
    total_skipped: int = 0
    total_found: int = 0
    total_unprocessed: int = 0
    total_failed: int = 0
    skipped_by_reason: Dict[str, int] = field(default_factory=dict)
    failed_by_reason: Dict[str, int] = field(default_factory=dict)

    @property
    def total(self) -> int:
        return (
            self.total_imported
            + self.total_skipped
            + self.total_failed
            + self.total_unprocessed
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "total_imported": self.total_imported,
            "total_skipped": self.total_skipped,
            "total_found": self.total_found,
            "total_unprocessed": self.total_unprocessed,
            "total_failed": self.total_failed,
            "skipped_by_reason": dict(self.skipped_by_reason),
            "failed_by_reason": dict(self.failed_by_reason),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ImportStats":
        """Create from dictionary."""
        return cls(
            total_imported=data.get("total_imported", 0),
            total_skipped=data.get("total_skipped", 0),
            total_found=data.get("total_found", 0),
            total_unprocessed=data.get("total_unprocessed", 0),
            total_failed=data.get("total_failed", 0),
            skipped_by_reason=dict(data.get("skipped_by_reason", {})),
            failed_by_reason=dict(data.get("failed_by_reason", {})),
        )


@dataclass(frozen=True)
class ImportOutcome:
    """Final result of one import run."""

    status: OutcomeStatus
    stats: ImportStats

    @classmethod
    def success(cls, stats: ImportStats) -> "ImportOutcome":
        return cls(OutcomeStatus.SUCCESS, stats)

    @classmethod
    def failed(cls, status: OutcomeStatus, stats: ImportStats) -> "ImportOutcome":
        """
        Build a failed outcome.

        Raises:
            ValueError: If ``status`` is SUCCESS
        """
        if not status.failed:
            raise ValueError("A failed outcome cannot have a successful status")
        return cls(status, stats)

    @property
    def succeeded(self) -> bool:
        return not self.status.failed


@dataclass(frozen=True)
class ImportedBookmark:
    """A bookmark ready to be handed to the bookmark store."""

    url: str
    user_id: str
    tags: List[str]
    source: ImportSource
    imported_at: datetime
    import_id: Optional[str] = None
