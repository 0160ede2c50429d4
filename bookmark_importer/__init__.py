"""
Bookmark Importer

Imports bookmarks from browser (Chrome, Firefox, Safari) and read-later
service (Pocket, Instapaper) HTML exports, applying the user's tag policy to
every bookmark and reporting the import lifecycle to listeners.
"""

__version__ = "1.0.0"

from .core.data_models import (
    ImportOutcome,
    ImportRequestData,
    ImportSource,
    ImportStats,
    OutcomeStatus,
)
from .core.events import EventDispatcher
from .core.import_options import ImportChoices, ImportOptions
from .core.importer import Importer, create_dispatcher
from .utils.error_handler import (
    BookmarkImporterError,
    ConfigurationError,
    ImportFileNotFoundError,
)

__all__ = [
    "BookmarkImporterError",
    "ConfigurationError",
    "EventDispatcher",
    "ImportChoices",
    "ImportFileNotFoundError",
    "ImportOptions",
    "ImportOutcome",
    "ImportRequestData",
    "ImportSource",
    "ImportStats",
    "Importer",
    "OutcomeStatus",
    "create_dispatcher",
]
