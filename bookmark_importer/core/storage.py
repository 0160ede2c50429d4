"""
Storage collaborators of the import pipeline.

This module defines the protocols the importer and its listeners talk to
(export file storage, import statistics, import history and the bookmark
store) together with simple local and in-memory implementations.
"""

import logging
from abc import abstractmethod
from collections import defaultdict
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, Union, runtime_checkable

from ..utils.error_handler import ImportFileNotFoundError
from .data_models import ImportedBookmark, ImportStats


@runtime_checkable
class FileStorage(Protocol):
    """
    Protocol for export file storage.

    Files are addressed by the id of their owner and the id of the file
    (the import id).
    """

    @abstractmethod
    def exists(self, owner_id: str, file_id: str) -> bool:
        """
        Check whether a file exists.

        Returns:
            True if the file exists; never raises for a missing file
        """
        ...

    @abstractmethod
    def read(self, owner_id: str, file_id: str) -> bytes:
        """
        Read the contents of a file.

        Raises:
            ImportFileNotFoundError: If the file does not exist
        """
        ...


class LocalFileStorage:
    """File storage backed by a directory per owner."""

    def __init__(self, base_dir: Union[str, Path]):
        self.base_dir = Path(base_dir)
        self.logger = logging.getLogger(__name__)

    def _path(self, owner_id: str, file_id: str) -> Path:
        # Ids become path components; reject anything that could escape base_dir
        for part in (owner_id, file_id):
            part = str(part)
            if not part or part in (".", "..") or "/" in part or "\\" in part:
                raise ValueError(f"Invalid storage id: {part!r}")
        return self.base_dir / str(owner_id) / str(file_id)

    def exists(self, owner_id: str, file_id: str) -> bool:
        try:
            return self._path(owner_id, file_id).is_file()
        except ValueError:
            return False

    def read(self, owner_id: str, file_id: str) -> bytes:
        if not self.exists(owner_id, file_id):
            raise ImportFileNotFoundError(owner_id, file_id)
        return self._path(owner_id, file_id).read_bytes()

    def put(self, owner_id: str, file_id: str, content: bytes) -> Path:
        path = self._path(owner_id, file_id)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
        self.logger.debug(f"Stored import file {path} ({len(content)} bytes)")
        return path


class InMemoryFileStorage:
    """File storage held in a dictionary."""

    def __init__(self):
        self._files: Dict[tuple, bytes] = {}

    def exists(self, owner_id: str, file_id: str) -> bool:
        return (owner_id, file_id) in self._files

    def read(self, owner_id: str, file_id: str) -> bytes:
        try:
            return self._files[(owner_id, file_id)]
        except KeyError:
            raise ImportFileNotFoundError(owner_id, file_id) from None

    def put(self, owner_id: str, file_id: str, content: Union[bytes, str]) -> None:
        if isinstance(content, str):
            content = content.encode("utf-8")
        self._files[(owner_id, file_id)] = content


@runtime_checkable
class ImportStatRepository(Protocol):
    """Protocol for storing running import statistics."""

    @abstractmethod
    def put(self, import_id: str, stats: ImportStats) -> None: ...

    @abstractmethod
    def get(self, import_id: str) -> Optional[ImportStats]: ...


class InMemoryImportStatRepository:
    def __init__(self):
        self._stats: Dict[str, ImportStats] = {}

    def put(self, import_id: str, stats: ImportStats) -> None:
        self._stats[import_id] = stats

    def get(self, import_id: str) -> Optional[ImportStats]:
        return self._stats.get(import_id)


@runtime_checkable
class ImportHistoryStore(Protocol):
    """Protocol for storing the per-bookmark history of imports."""

    @abstractmethod
    def insert(self, rows: List[Dict[str, Any]]) -> None:
        """Insert a batch of history rows."""
        ...

    @abstractmethod
    def rows_for(self, import_id: str) -> List[Dict[str, Any]]:
        """All history rows of an import, in insertion order."""
        ...


class InMemoryImportHistoryStore:
    def __init__(self):
        self._rows: Dict[str, List[Dict[str, Any]]] = defaultdict(list)
        self.insert_calls = 0

    def insert(self, rows: List[Dict[str, Any]]) -> None:
        self.insert_calls += 1
        for row in rows:
            self._rows[row["import_id"]].append(dict(row))

    def rows_for(self, import_id: str) -> List[Dict[str, Any]]:
        return [dict(row) for row in self._rows.get(import_id, [])]


@runtime_checkable
class BookmarkStore(Protocol):
    """Protocol for the durable store imported bookmarks are handed to."""

    @abstractmethod
    def save(self, bookmark: ImportedBookmark) -> None: ...


class InMemoryBookmarkStore:
    def __init__(self):
        self.bookmarks: List[ImportedBookmark] = []

    def save(self, bookmark: ImportedBookmark) -> None:
        self.bookmarks.append(bookmark)

    def for_user(self, user_id: str) -> List[ImportedBookmark]:
        return [b for b in self.bookmarks if b.user_id == user_id]
