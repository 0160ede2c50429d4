"""
Tests for the import event dispatcher.
"""

import logging

import pytest

from bookmark_importer.core.data_models import (
    FailReason,
    ImportOutcome,
    ImportStats,
    SkipReason,
)
from bookmark_importer.core.events import (
    CAPABILITIES,
    BookmarkImportedListener,
    EventDispatcher,
    ImportEvent,
    ImportsEndedListener,
    Reportable,
)
from bookmark_importer.core.listeners import RecordsImportStat
from bookmark_importer.utils.error_handler import ConfigurationError
from tests.fixtures.mock_utilities import RecordingListener, make_candidate, make_request


class ImportedOnly:
    def __init__(self, name="imported", order=None):
        self.name = name
        self.order = order if order is not None else []
        self.seen = []

    def bookmark_imported(self, candidate):
        self.order.append(self.name)
        self.seen.append(candidate)


class BrokenListener:
    def bookmark_imported(self, candidate):
        raise RuntimeError("listener broke")


class FixedReport:
    def __init__(self, stats):
        self.stats = stats

    def get_report(self):
        return self.stats


class TestCapabilities:
    """Test cases for the capability protocols."""

    def test_every_event_has_a_capability(self):
        assert set(CAPABILITIES) == set(ImportEvent)

    def test_partial_listener(self):
        listener = ImportedOnly()

        assert isinstance(listener, BookmarkImportedListener)
        assert not isinstance(listener, ImportsEndedListener)

    def test_stat_recorder_is_reportable(self):
        assert isinstance(RecordsImportStat(), Reportable)


class TestEventDispatcher:
    """Test cases for EventDispatcher."""

    def setup_method(self):
        self.candidate = make_candidate()

    def test_default_stat_recorder(self):
        dispatcher = EventDispatcher()

        assert isinstance(dispatcher.stat_recorder, RecordsImportStat)
        assert dispatcher.listeners == [dispatcher.stat_recorder]

    def test_stat_recorder_must_be_reportable(self):
        with pytest.raises(ConfigurationError):
            EventDispatcher(stat_recorder=ImportedOnly())

    def test_listeners_indexed_by_capability(self):
        partial = ImportedOnly()
        recorder = RecordingListener()
        dispatcher = EventDispatcher(listeners=[partial, recorder])

        assert dispatcher.subscribers(ImportEvent.BOOKMARK_IMPORTED) == [
            dispatcher.stat_recorder,
            partial,
            recorder,
        ]
        assert dispatcher.subscribers(ImportEvent.IMPORTS_ENDED) == [recorder]

    def test_event_reaches_only_subscribers(self):
        partial = ImportedOnly()
        dispatcher = EventDispatcher(listeners=[partial])

        dispatcher.import_started(self.candidate)
        dispatcher.bookmark_skipped(self.candidate, SkipReason.INVALID_TAG)
        dispatcher.bookmark_imported(self.candidate)

        assert partial.seen == [self.candidate]

    def test_insertion_order(self):
        order = []
        dispatcher = EventDispatcher(listeners=[ImportedOnly("first", order)])
        dispatcher.add_listener(ImportedOnly("second", order))

        dispatcher.bookmark_imported(self.candidate)

        assert order == ["first", "second"]

    def test_every_event_forwarded_with_arguments(self):
        recorder = RecordingListener()
        dispatcher = EventDispatcher(listeners=[recorder])
        request = make_request()
        outcome = ImportOutcome.success(ImportStats())

        dispatcher.imports_started(request)
        dispatcher.import_started(self.candidate)
        dispatcher.bookmark_imported(self.candidate)
        dispatcher.bookmark_skipped(self.candidate, SkipReason.TAGS_TOO_LARGE)
        dispatcher.import_failed(self.candidate, FailReason.INVALID_URL)
        dispatcher.bookmark_not_processed(self.candidate)
        dispatcher.imports_ended(outcome)

        assert recorder.calls == [
            ("imports_started", (request,)),
            ("import_started", (self.candidate,)),
            ("bookmark_imported", (self.candidate,)),
            ("bookmark_skipped", (self.candidate, SkipReason.TAGS_TOO_LARGE)),
            ("import_failed", (self.candidate, FailReason.INVALID_URL)),
            ("bookmark_not_processed", (self.candidate,)),
            ("imports_ended", (outcome,)),
        ]

    def test_get_report_comes_from_stat_recorder(self):
        dispatcher = EventDispatcher()

        dispatcher.import_started(self.candidate)
        dispatcher.bookmark_imported(self.candidate)

        report = dispatcher.get_report()
        assert report.total_found == 1
        assert report.total_imported == 1

    def test_custom_stat_recorder(self):
        stats = ImportStats(total_found=7)
        dispatcher = EventDispatcher(stat_recorder=FixedReport(stats))

        assert dispatcher.get_report() is stats

    def test_listener_errors_propagate(self):
        dispatcher = EventDispatcher(listeners=[BrokenListener()])

        with pytest.raises(RuntimeError, match="listener broke"):
            dispatcher.bookmark_imported(self.candidate)

    def test_listener_without_events_is_logged(self, caplog):
        with caplog.at_level(logging.WARNING, logger="bookmark_importer.core.events"):
            EventDispatcher(listeners=[object()])

        assert "implements no import events" in caplog.text
