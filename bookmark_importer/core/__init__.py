"""
Core bookmark import modules.

This package contains the import pipeline: the tag set value type, the HTML
export parser, the import policy, the lifecycle event dispatcher with its
listeners, and the import engine driving them.
"""

from .data_models import (
    BookmarkImportStatus,
    Candidate,
    FailReason,
    ImportedBookmark,
    ImportOutcome,
    ImportRequestData,
    ImportSource,
    ImportStats,
    OutcomeStatus,
    SkipReason,
)
from .events import EventDispatcher, ImportEvent
from .html_export_parser import HtmlExportParser
from .import_options import ImportChoices, ImportOptions
from .import_policy import ImportPolicy
from .importer import Importer, ImportRun, ImportState, create_dispatcher
from .tag_set import MergeStrategy, TagSet, resolve_tags

__all__ = [
    'BookmarkImportStatus',
    'Candidate',
    'EventDispatcher',
    'FailReason',
    'HtmlExportParser',
    'ImportChoices',
    'ImportEvent',
    'ImportOptions',
    'ImportOutcome',
    'ImportPolicy',
    'ImportRequestData',
    'ImportRun',
    'ImportSource',
    'ImportState',
    'ImportStats',
    'ImportedBookmark',
    'Importer',
    'MergeStrategy',
    'OutcomeStatus',
    'SkipReason',
    'TagSet',
    'create_dispatcher',
    'resolve_tags',
]
