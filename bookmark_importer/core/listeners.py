"""
Import lifecycle listeners.

Each listener implements only the lifecycle events it cares about; the
EventDispatcher works out which events to deliver from the methods a
listener defines.
"""

import logging
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from .data_models import (
    BookmarkImportStatus,
    Candidate,
    FailReason,
    ImportedBookmark,
    ImportOutcome,
    ImportRequestData,
    ImportStats,
    OutcomeStatus,
    SkipReason,
)
from .storage import BookmarkStore, ImportHistoryStore, ImportStatRepository
from .tag_set import resolve_tags

# Number of history rows buffered before they are written
DEFAULT_HISTORY_BATCH_SIZE = 200


class RecordsImportStat:
    """
    Counts every lifecycle event of an import.

    A snapshot is written to the optional repository after each event so the
    progress of a running import can be read from elsewhere.
    """

    def __init__(self, repository: Optional[ImportStatRepository] = None):
        self.repository = repository
        self.import_id: Optional[str] = None
        self._counts: Counter = Counter()
        self._skipped_by_reason: Counter = Counter()
        self._failed_by_reason: Counter = Counter()

    def imports_started(self, request: ImportRequestData) -> None:
        self.import_id = request.import_id
        self._save()

    def import_started(self, candidate: Candidate) -> None:
        self._counts["found"] += 1
        self._save()

    def bookmark_imported(self, candidate: Candidate) -> None:
        self._counts["imported"] += 1
        self._save()

    def bookmark_skipped(self, candidate: Candidate, reason: SkipReason) -> None:
        self._counts["skipped"] += 1
        self._skipped_by_reason[reason.value] += 1
        self._save()

    def import_failed(self, candidate: Candidate, reason: FailReason) -> None:
        self._counts["failed"] += 1
        self._failed_by_reason[reason.value] += 1
        self._save()

    def bookmark_not_processed(self, candidate: Candidate) -> None:
        self._counts["unprocessed"] += 1
        self._save()

    def get_report(self) -> ImportStats:
        return ImportStats(
            total_imported=self._counts["imported"],
            total_skipped=self._counts["skipped"],
            total_found=self._counts["found"],
            total_unprocessed=self._counts["unprocessed"],
            total_failed=self._counts["failed"],
            skipped_by_reason=dict(self._skipped_by_reason),
            failed_by_reason=dict(self._failed_by_reason),
        )

    def _save(self) -> None:
        if self.repository is None or self.import_id is None:
            return
        self.repository.put(self.import_id, self.get_report())


class StoresImportHistory:
    """
    Records one history row per processed bookmark.

    A row is opened when a bookmark starts, gets its status from the
    classification event that follows, and is written in batches. Bookmarks
    that are not processed leave no row.
    """

    def __init__(
        self,
        request: ImportRequestData,
        store: ImportHistoryStore,
        max_tags_cap: int,
        batch_size: int = DEFAULT_HISTORY_BATCH_SIZE,
    ):
        self.request = request
        self.store = store
        self.max_tags_cap = max_tags_cap
        self.batch_size = batch_size
        self._pending: List[Dict[str, Any]] = []
        self._current: Dict[str, Any] = {}

    def import_started(self, candidate: Candidate) -> None:
        self._persist()

        if self._current:
            self._pending.append(self._current)

        resolved = resolve_tags(candidate.tags, self.request.options, self.max_tags_cap)

        self._current = {
            "import_id": self.request.import_id,
            "url": candidate.url,
            "document_line_number": candidate.line_number,
            "tags": {
                "invalid": candidate.tags.invalid(),
                "resolved": resolved.all(),
                "found": candidate.tags.count(),
            },
        }

    def bookmark_imported(self, candidate: Candidate) -> None:
        self._current["status"] = BookmarkImportStatus.SUCCESS.value

    def bookmark_skipped(self, candidate: Candidate, reason: SkipReason) -> None:
        self._current["status"] = BookmarkImportStatus.from_skip_reason(reason).value

    def import_failed(self, candidate: Candidate, reason: FailReason) -> None:
        self._current["status"] = BookmarkImportStatus.from_fail_reason(reason).value

    def bookmark_not_processed(self, candidate: Candidate) -> None:
        self._current = {}

    def imports_ended(self, outcome: ImportOutcome) -> None:
        if self._current:
            self._pending.append(self._current)
            self._current = {}

        self._persist(force=True)

    def _persist(self, force: bool = False) -> None:
        if not self._pending:
            return

        if len(self._pending) >= self.batch_size or force:
            self.store.insert(self._pending)
            self._pending = []


class TransferImportsToBookmarkStore:
    """
    Hands imported bookmarks to the bookmark store.

    Bookmarks are collected as they are imported and only transferred once
    the import ends successfully, so a failed import stores nothing.
    """

    def __init__(
        self,
        request: ImportRequestData,
        store: BookmarkStore,
        max_tags_cap: int,
    ):
        self.request = request
        self.store = store
        self.max_tags_cap = max_tags_cap
        self.logger = logging.getLogger(__name__)
        self._imported: List[Candidate] = []

    def bookmark_imported(self, candidate: Candidate) -> None:
        self._imported.append(candidate)

    def imports_ended(self, outcome: ImportOutcome) -> None:
        candidates, self._imported = self._imported, []

        if outcome.status.failed or outcome.stats.total_imported == 0:
            return

        imported_at = datetime.now(timezone.utc)
        for candidate in candidates:
            self.store.save(
                ImportedBookmark(
                    url=candidate.url,
                    user_id=self.request.user_id,
                    tags=resolve_tags(
                        candidate.tags, self.request.options, self.max_tags_cap
                    ).all(),
                    source=self.request.source,
                    imported_at=imported_at,
                    import_id=self.request.import_id,
                )
            )

        self.logger.info(
            f"Transferred {len(candidates)} bookmarks from import "
            f"{self.request.import_id} to the bookmark store"
        )


class ImportLoggingListener:
    """Writes import lifecycle events to the log."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)

    def imports_started(self, request: ImportRequestData) -> None:
        self.logger.info(
            f"Import {request.import_id} started "
            f"(user={request.user_id}, source={request.source.value})"
        )

    def import_started(self, candidate: Candidate) -> None:
        self.logger.debug(f"Line {candidate.line_number}: {candidate.url}")

    def bookmark_imported(self, candidate: Candidate) -> None:
        self.logger.debug(f"Line {candidate.line_number}: imported")

    def bookmark_skipped(self, candidate: Candidate, reason: SkipReason) -> None:
        self.logger.info(f"Line {candidate.line_number}: skipped ({reason.value})")

    def import_failed(self, candidate: Candidate, reason: FailReason) -> None:
        self.logger.warning(
            f"Line {candidate.line_number}: {candidate.url!r} failed ({reason.value})"
        )

    def bookmark_not_processed(self, candidate: Candidate) -> None:
        self.logger.debug(f"Line {candidate.line_number}: not processed")

    def imports_ended(self, outcome: ImportOutcome) -> None:
        stats = outcome.stats
        log = self.logger.warning if outcome.status.failed else self.logger.info
        log(
            f"Import ended with {outcome.status.value}: "
            f"{stats.total_found} found, {stats.total_imported} imported, "
            f"{stats.total_skipped} skipped, {stats.total_failed} failed, "
            f"{stats.total_unprocessed} not processed"
        )


@dataclass
class ImportProgress:
    """Status of one import as seen by ImportStatusTracker."""

    running: bool = True
    status: Optional[OutcomeStatus] = None
    stats: Optional[ImportStats] = None
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    ended_at: Optional[datetime] = None


class ImportStatusTracker:
    """Tracks which imports are running and how finished imports ended."""

    def __init__(self):
        self._imports: Dict[str, ImportProgress] = {}
        self._current_import_id: Optional[str] = None

    def imports_started(self, request: ImportRequestData) -> None:
        self._current_import_id = request.import_id
        self._imports[request.import_id] = ImportProgress()

    def imports_ended(self, outcome: ImportOutcome) -> None:
        if self._current_import_id is None:
            return

        progress = self._imports[self._current_import_id]
        progress.running = False
        progress.status = outcome.status
        progress.stats = outcome.stats
        progress.ended_at = datetime.now(timezone.utc)
        self._current_import_id = None

    def progress(self, import_id: str) -> Optional[ImportProgress]:
        return self._imports.get(import_id)
