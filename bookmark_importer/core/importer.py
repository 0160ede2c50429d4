"""
Bookmark import engine.

The Importer reads an export file, runs every candidate bookmark through the
import policy and reports what happened through the event dispatcher. One
Importer and one EventDispatcher are built per import run.
"""

import logging
from enum import Enum
from typing import Iterable, Optional

from ..config.pydantic_config import (
    IMPORT_HISTORY_BATCH_SIZE,
    MAX_BOOKMARK_TAGS,
    MAX_TAG_LENGTH,
    ConfigurationManager,
    SettingsProvider,
)
from ..utils.error_handler import ImportFileNotFoundError
from .data_models import (
    Candidate,
    FailReason,
    ImportOutcome,
    ImportRequestData,
    ImportStats,
    OutcomeStatus,
)
from .events import EventDispatcher
from .html_export_parser import HtmlExportParser
from .import_policy import ImportPolicy
from .listeners import (
    ImportLoggingListener,
    RecordsImportStat,
    StoresImportHistory,
    TransferImportsToBookmarkStore,
)
from .storage import (
    BookmarkStore,
    FileStorage,
    ImportHistoryStore,
    ImportStatRepository,
)


class ImportState(Enum):
    """States of an import run."""

    RUNNING = "running"
    HALTED = "halted"
    DONE = "done"


class ImportRun:
    """
    State of a single import run.

    A run starts RUNNING, moves to HALTED on the first failure of an import
    that stops on failure, and ends DONE once every candidate has been seen.
    The fail reason that halted the run is latched and decides the outcome.
    """

    def __init__(self):
        self.state = ImportState.RUNNING
        self.fail_reason: Optional[FailReason] = None

    @property
    def halted(self) -> bool:
        return self.state is ImportState.HALTED

    def halt(self, reason: FailReason) -> None:
        if self.state is not ImportState.RUNNING:
            raise RuntimeError(f"Cannot halt a run that is {self.state.value}")
        self.state = ImportState.HALTED
        self.fail_reason = reason

    def finish(self) -> None:
        self.state = ImportState.DONE

    def build_outcome(self, stats: ImportStats) -> ImportOutcome:
        if self.state is not ImportState.DONE:
            raise RuntimeError("Outcome requested before the run finished")
        if self.fail_reason is None:
            return ImportOutcome.success(stats)
        return ImportOutcome.failed(self.fail_reason.outcome_status, stats)


class Importer:
    """
    Runs bookmark imports.

    Example:
        >>> importer = Importer(storage, dispatcher=EventDispatcher())
        >>> outcome = importer.import_bookmarks(request)
        >>> outcome.status
        <OutcomeStatus.SUCCESS: 'success'>
    """

    def __init__(
        self,
        storage: FileStorage,
        parser: Optional[HtmlExportParser] = None,
        dispatcher: Optional[EventDispatcher] = None,
        settings: Optional[SettingsProvider] = None,
    ):
        """
        Initialize the importer.

        Args:
            storage: Storage holding the export files, keyed by user and import id
            parser: Export parser (built from settings when omitted)
            dispatcher: Event dispatcher for this run
            settings: Provider of MAX_BOOKMARK_TAGS and MAX_TAG_LENGTH
        """
        self.storage = storage
        self.settings = settings if settings is not None else ConfigurationManager()
        self.parser = parser or HtmlExportParser(
            max_tag_length=self.settings.get_int(MAX_TAG_LENGTH)
        )
        self.dispatcher = dispatcher if dispatcher is not None else EventDispatcher()
        self.logger = logging.getLogger(__name__)

    def import_bookmarks(self, request: ImportRequestData) -> ImportOutcome:
        """
        Import the bookmarks of an uploaded export file.

        Every candidate produces import_started followed by exactly one of
        bookmark_imported, bookmark_skipped, import_failed or
        bookmark_not_processed. imports_ended is emitted once, also when an
        unexpected error ends the run.

        Args:
            request: The import to run

        Returns:
            Outcome of the import

        Raises:
            ImportFileNotFoundError: If the export file does not exist; no
                event is emitted in that case
        """
        if not self.storage.exists(request.user_id, request.import_id):
            self.logger.error(
                f"Import file {request.import_id} of user {request.user_id} not found"
            )
            raise ImportFileNotFoundError(request.user_id, request.import_id)

        run = ImportRun()

        try:
            self.dispatcher.imports_started(request)

            max_tags_cap = self.settings.get_int(MAX_BOOKMARK_TAGS)
            policy = ImportPolicy(max_tags_cap)

            self.logger.info(
                f"Starting import {request.import_id} "
                f"({request.source.value}, max {max_tags_cap} tags per bookmark)"
            )

            raw = self.storage.read(request.user_id, request.import_id)

            for candidate in self.parser.parse(raw, request.source):
                self._process(candidate, request, policy, run)

            run.finish()
            outcome = run.build_outcome(self.dispatcher.get_report())

        except Exception as e:
            self.logger.error(f"Import {request.import_id} aborted: {e}")
            outcome = ImportOutcome.failed(
                OutcomeStatus.FAILED_SYSTEM_ERROR, self.dispatcher.get_report()
            )
            self.dispatcher.imports_ended(outcome)
            raise

        self.dispatcher.imports_ended(outcome)

        stats = outcome.stats
        self.logger.info(
            f"Import {request.import_id} finished with {outcome.status.value}: "
            f"{stats.total_imported}/{stats.total_found} imported"
        )

        return outcome

    def _process(
        self,
        candidate: Candidate,
        request: ImportRequestData,
        policy: ImportPolicy,
        run: ImportRun,
    ) -> None:
        """Classify one candidate and emit its events."""
        self.dispatcher.import_started(candidate)

        if run.halted:
            self.dispatcher.bookmark_not_processed(candidate)
            return

        options = request.options

        fail_reason = policy.classify_for_failure(candidate, options)
        if fail_reason is not None:
            self.dispatcher.import_failed(candidate, fail_reason)
            if policy.should_halt_processing(options):
                run.halt(fail_reason)
                self.logger.warning(
                    f"Import {request.import_id} halted at line "
                    f"{candidate.line_number}: {fail_reason.value}"
                )
            return

        skip_reason = policy.classify_for_skip(candidate, options)
        if skip_reason is not None:
            self.dispatcher.bookmark_skipped(candidate, skip_reason)
            return

        self.dispatcher.bookmark_imported(candidate)


def create_dispatcher(
    request: ImportRequestData,
    settings: SettingsProvider,
    stat_repository: Optional[ImportStatRepository] = None,
    history_store: Optional[ImportHistoryStore] = None,
    bookmark_store: Optional[BookmarkStore] = None,
    listeners: Iterable[object] = (),
    log_events: bool = True,
) -> EventDispatcher:
    """
    Build the dispatcher of one import run with the standard listeners.

    Args:
        request: The import the dispatcher serves
        settings: Provider of MAX_BOOKMARK_TAGS and IMPORT_HISTORY_BATCH_SIZE
        stat_repository: Where running statistics are written
        history_store: Where per-bookmark history rows are written
        bookmark_store: Where imported bookmarks are handed over
        listeners: Additional listeners, notified last
        log_events: Add an ImportLoggingListener

    Returns:
        EventDispatcher with RecordsImportStat first
    """
    max_tags_cap = settings.get_int(MAX_BOOKMARK_TAGS)

    dispatcher = EventDispatcher(RecordsImportStat(stat_repository))

    if history_store is not None:
        dispatcher.add_listener(
            StoresImportHistory(
                request,
                history_store,
                max_tags_cap,
                batch_size=settings.get_int(IMPORT_HISTORY_BATCH_SIZE),
            )
        )

    if bookmark_store is not None:
        dispatcher.add_listener(
            TransferImportsToBookmarkStore(request, bookmark_store, max_tags_cap)
        )

    if log_events:
        dispatcher.add_listener(ImportLoggingListener())

    for listener in listeners:
        dispatcher.add_listener(listener)

    return dispatcher
