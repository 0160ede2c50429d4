"""
Import lifecycle events.

Listeners opt into lifecycle events by implementing any subset of the
capability protocols below. The EventDispatcher indexes each listener by the
capabilities it implements when the listener is added, then fans every event
out to the subscribers of that event only, in insertion order.
"""

import logging
from collections import defaultdict
from enum import Enum
from typing import Dict, Iterable, List, Optional, Protocol, runtime_checkable

from ..utils.error_handler import ConfigurationError
from .data_models import (
    Candidate,
    FailReason,
    ImportOutcome,
    ImportRequestData,
    ImportStats,
    SkipReason,
)
from .listeners import RecordsImportStat


class ImportEvent(str, Enum):
    """Lifecycle events of an import run."""

    IMPORTS_STARTED = "imports_started"
    IMPORT_STARTED = "import_started"
    BOOKMARK_IMPORTED = "bookmark_imported"
    BOOKMARK_SKIPPED = "bookmark_skipped"
    IMPORT_FAILED = "import_failed"
    BOOKMARK_NOT_PROCESSED = "bookmark_not_processed"
    IMPORTS_ENDED = "imports_ended"


@runtime_checkable
class ImportsStartedListener(Protocol):
    def imports_started(self, request: ImportRequestData) -> None: ...


@runtime_checkable
class ImportStartedListener(Protocol):
    def import_started(self, candidate: Candidate) -> None: ...


@runtime_checkable
class BookmarkImportedListener(Protocol):
    def bookmark_imported(self, candidate: Candidate) -> None: ...


@runtime_checkable
class BookmarkSkippedListener(Protocol):
    def bookmark_skipped(self, candidate: Candidate, reason: SkipReason) -> None: ...


@runtime_checkable
class ImportFailedListener(Protocol):
    def import_failed(self, candidate: Candidate, reason: FailReason) -> None: ...


@runtime_checkable
class BookmarkNotProcessedListener(Protocol):
    def bookmark_not_processed(self, candidate: Candidate) -> None: ...


@runtime_checkable
class ImportsEndedListener(Protocol):
    def imports_ended(self, outcome: ImportOutcome) -> None: ...


@runtime_checkable
class Reportable(Protocol):
    def get_report(self) -> ImportStats: ...


CAPABILITIES = {
    ImportEvent.IMPORTS_STARTED: ImportsStartedListener,
    ImportEvent.IMPORT_STARTED: ImportStartedListener,
    ImportEvent.BOOKMARK_IMPORTED: BookmarkImportedListener,
    ImportEvent.BOOKMARK_SKIPPED: BookmarkSkippedListener,
    ImportEvent.IMPORT_FAILED: ImportFailedListener,
    ImportEvent.BOOKMARK_NOT_PROCESSED: BookmarkNotProcessedListener,
    ImportEvent.IMPORTS_ENDED: ImportsEndedListener,
}


class EventDispatcher:
    """
    Synchronous dispatcher of import lifecycle events.

    The stat recorder always sits first and is the single source of truth
    for the counts returned by get_report(). Listener exceptions are not
    caught: a listener is expected not to raise.
    """

    def __init__(
        self,
        stat_recorder: Optional[Reportable] = None,
        listeners: Iterable[object] = (),
    ):
        """
        Initialize the dispatcher.

        Args:
            stat_recorder: Reportable listener (defaults to RecordsImportStat)
            listeners: Additional listeners, notified in the given order

        Raises:
            ConfigurationError: If the stat recorder cannot report
        """
        stat_recorder = stat_recorder if stat_recorder is not None else RecordsImportStat()
        if not isinstance(stat_recorder, Reportable):
            raise ConfigurationError(
                f"{type(stat_recorder).__name__} does not implement get_report()"
            )

        self.logger = logging.getLogger(__name__)
        self._stat_recorder = stat_recorder
        self._listeners: List[object] = []
        self._subscribers: Dict[ImportEvent, List[object]] = defaultdict(list)

        self.add_listener(stat_recorder)
        for listener in listeners:
            self.add_listener(listener)

    @property
    def listeners(self) -> List[object]:
        return list(self._listeners)

    @property
    def stat_recorder(self) -> Reportable:
        return self._stat_recorder

    def add_listener(self, listener: object) -> None:
        """
        Register a listener under every capability it implements.

        Args:
            listener: Object implementing one or more capability protocols
        """
        self._listeners.append(listener)

        events = []
        for event, capability in CAPABILITIES.items():
            if isinstance(listener, capability):
                self._subscribers[event].append(listener)
                events.append(event.value)

        if not events:
            self.logger.warning(
                f"Listener {type(listener).__name__} implements no import events"
            )
        else:
            self.logger.debug(
                f"Registered {type(listener).__name__} for {', '.join(events)}"
            )

    def subscribers(self, event: ImportEvent) -> List[object]:
        return list(self._subscribers.get(event, []))

    def imports_started(self, request: ImportRequestData) -> None:
        for listener in self._subscribers[ImportEvent.IMPORTS_STARTED]:
            listener.imports_started(request)

    def import_started(self, candidate: Candidate) -> None:
        for listener in self._subscribers[ImportEvent.IMPORT_STARTED]:
            listener.import_started(candidate)

    def bookmark_imported(self, candidate: Candidate) -> None:
        for listener in self._subscribers[ImportEvent.BOOKMARK_IMPORTED]:
            listener.bookmark_imported(candidate)

    def bookmark_skipped(self, candidate: Candidate, reason: SkipReason) -> None:
        for listener in self._subscribers[ImportEvent.BOOKMARK_SKIPPED]:
            listener.bookmark_skipped(candidate, reason)

    def import_failed(self, candidate: Candidate, reason: FailReason) -> None:
        for listener in self._subscribers[ImportEvent.IMPORT_FAILED]:
            listener.import_failed(candidate, reason)

    def bookmark_not_processed(self, candidate: Candidate) -> None:
        for listener in self._subscribers[ImportEvent.BOOKMARK_NOT_PROCESSED]:
            listener.bookmark_not_processed(candidate)

    def imports_ended(self, outcome: ImportOutcome) -> None:
        for listener in self._subscribers[ImportEvent.IMPORTS_ENDED]:
            listener.imports_ended(outcome)

    def get_report(self) -> ImportStats:
        """Counts recorded so far by the stat recorder."""
        return self._stat_recorder.get_report()
