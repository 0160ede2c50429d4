"""
HTML bookmark export parser module.

This module turns the raw bytes of a browser or read-later service export
into a lazy stream of candidate bookmarks. Browser exports (Chrome, Firefox,
Safari) use the Netscape bookmark file format where every bookmark is an
anchor directly inside a <DT>; service exports (Pocket, Instapaper) list
bookmarks as anchors directly inside <LI> elements.
"""

import logging
import re
import warnings
from typing import Iterator, Optional, Union

import chardet
from bs4 import BeautifulSoup

from ..utils.error_handler import SourceParseError
from .data_models import Candidate, ImportSource
from .tag_set import DEFAULT_MAX_TAG_LENGTH, TagSet

BROWSER_EXPORT_SELECTOR = "dt > a"
SERVICE_EXPORT_SELECTOR = "li > a"

# html.parser never closes <DT> or <LI> implicitly, so unclosed items nest
# inside one another. Closing the previous item keeps the tree flat.
LIST_ITEM_START = re.compile(r"<(dt|li)\b", re.IGNORECASE)


class HtmlExportParser:
    """
    Parser for HTML bookmark exports.

    The stream returned by parse() is single pass: once consumed, parse the
    bytes again to traverse the bookmarks a second time.
    """

    # Encoding detection settings
    ENCODING_SAMPLE_SIZE = 65536
    MIN_ENCODING_CONFIDENCE = 0.7
    DEFAULT_ENCODING = "utf-8"

    def __init__(self, max_tag_length: int = DEFAULT_MAX_TAG_LENGTH):
        """
        Initialize the export parser.

        Args:
            max_tag_length: Tag length limit applied to the parsed tag sets
        """
        self.max_tag_length = max_tag_length
        self.logger = logging.getLogger(__name__)

    @staticmethod
    def selector_for(source: ImportSource) -> str:
        """CSS selector locating bookmark anchors for an export format."""
        if source.is_browser_export:
            return BROWSER_EXPORT_SELECTOR
        return SERVICE_EXPORT_SELECTOR

    def parse(
        self, raw: Union[bytes, bytearray, str], source: ImportSource
    ) -> Iterator[Candidate]:
        """
        Lazily yield the candidate bookmarks of an export file.

        Args:
            raw: Export file contents
            source: Export format of the file

        Yields:
            Candidate objects in document order

        Raises:
            SourceParseError: If ``raw`` is not bytes or text
        """
        if not isinstance(raw, (bytes, bytearray, str)):
            raise SourceParseError(
                f"Export content must be bytes or str, got {type(raw).__name__}"
            )

        return self._iter_candidates(raw, source)

    def _iter_candidates(
        self, raw: Union[bytes, bytearray, str], source: ImportSource
    ) -> Iterator[Candidate]:
        soup = self._parse_markup(raw)
        if soup is None:
            return

        for a_tag in soup.css.iselect(self.selector_for(source)):
            yield Candidate(
                url=(a_tag.get("href") or "").strip(),
                tags=TagSet.from_string(a_tag.get("tags"), self.max_tag_length),
                line_number=a_tag.sourceline or 0,
            )

    def _parse_markup(
        self, raw: Union[bytes, bytearray, str]
    ) -> Optional[BeautifulSoup]:
        """
        Parse markup, returning None when the document cannot be parsed.

        Export files from third-party tools are frequently non-conformant,
        so parser diagnostics are silenced rather than surfaced.
        """
        html_content = raw if isinstance(raw, str) else self._decode(bytes(raw))

        if not html_content.strip():
            return None

        html_content = LIST_ITEM_START.sub(r"</\1><\1", html_content)

        try:
            with warnings.catch_warnings():
                warnings.simplefilter("ignore")
                return BeautifulSoup(html_content, "html.parser")
        except Exception as e:
            self.logger.debug(f"Discarding unparsable export markup: {e}")
            return None

    def _decode(self, raw: bytes) -> str:
        """
        Decode export bytes using chardet for encoding detection.

        Args:
            raw: Raw file contents

        Returns:
            Decoded text (undecodable bytes are replaced)
        """
        encoding = self.DEFAULT_ENCODING

        if raw:
            result = chardet.detect(raw[: self.ENCODING_SAMPLE_SIZE])
            detected = result.get("encoding")
            confidence = result.get("confidence") or 0.0

            # ascii is a subset of utf-8; later bytes may still be utf-8
            if detected and detected.lower() == "ascii":
                encoding = self.DEFAULT_ENCODING
            elif detected and confidence >= self.MIN_ENCODING_CONFIDENCE:
                encoding = detected
            else:
                self.logger.debug(
                    f"Low encoding confidence ({confidence:.2f}), using {encoding}"
                )

        try:
            return raw.decode(encoding, errors="replace")
        except LookupError:
            return raw.decode(self.DEFAULT_ENCODING, errors="replace")
