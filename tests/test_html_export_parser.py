"""
Tests for the HTML bookmark export parser.
"""

import types
from unittest.mock import patch

import pytest

from bookmark_importer.core.data_models import ImportSource
from bookmark_importer.core.html_export_parser import (
    BROWSER_EXPORT_SELECTOR,
    SERVICE_EXPORT_SELECTOR,
    HtmlExportParser,
)
from bookmark_importer.utils.error_handler import SourceParseError
from tests.fixtures.test_data import (
    FIRST_BROWSER_BOOKMARK_LINE,
    FIRST_SERVICE_BOOKMARK_LINE,
    SAMPLE_BOOKMARKS,
    build_export,
)


class TestHtmlExportParser:
    """Test cases for HtmlExportParser."""

    def setup_method(self):
        """Set up test fixtures."""
        self.parser = HtmlExportParser()

    def test_init(self):
        """Test parser initialization."""
        assert self.parser.max_tag_length == 22
        assert hasattr(self.parser, "logger")

    @pytest.mark.parametrize(
        "source, selector",
        [
            (ImportSource.CHROME, BROWSER_EXPORT_SELECTOR),
            (ImportSource.FIREFOX, BROWSER_EXPORT_SELECTOR),
            (ImportSource.SAFARI, BROWSER_EXPORT_SELECTOR),
            (ImportSource.POCKET, SERVICE_EXPORT_SELECTOR),
            (ImportSource.INSTAPAPER, SERVICE_EXPORT_SELECTOR),
        ],
    )
    def test_selector_for(self, source, selector):
        assert HtmlExportParser.selector_for(source) == selector

    @pytest.mark.parametrize("source", list(ImportSource))
    def test_parse_every_source(self, source):
        """Each export format yields its bookmarks in document order."""
        raw = build_export(source, SAMPLE_BOOKMARKS)

        candidates = list(self.parser.parse(raw, source))

        assert [c.url for c in candidates] == [url for url, _ in SAMPLE_BOOKMARKS]
        assert candidates[0].tags.all() == ["python", "documentation"]
        assert candidates[2].tags.count() == 0

    def test_line_numbers_browser_export(self):
        raw = build_export(ImportSource.FIREFOX, SAMPLE_BOOKMARKS)

        lines = [c.line_number for c in self.parser.parse(raw, ImportSource.FIREFOX)]

        assert lines == [
            FIRST_BROWSER_BOOKMARK_LINE,
            FIRST_BROWSER_BOOKMARK_LINE + 1,
            FIRST_BROWSER_BOOKMARK_LINE + 2,
        ]

    def test_line_numbers_service_export(self):
        raw = build_export(ImportSource.POCKET, SAMPLE_BOOKMARKS)

        lines = [c.line_number for c in self.parser.parse(raw, ImportSource.POCKET)]

        assert lines[0] == FIRST_SERVICE_BOOKMARK_LINE
        assert lines == sorted(lines)

    def test_browser_selector_ignores_list_anchors(self):
        """A Pocket file read as a Chrome export has no bookmarks."""
        raw = build_export(ImportSource.POCKET, SAMPLE_BOOKMARKS)

        assert list(self.parser.parse(raw, ImportSource.CHROME)) == []

    def test_service_selector_ignores_dt_anchors(self):
        raw = build_export(ImportSource.CHROME, SAMPLE_BOOKMARKS)

        assert list(self.parser.parse(raw, ImportSource.INSTAPAPER)) == []

    def test_folder_headings_are_not_bookmarks(self):
        raw = b"""<!DOCTYPE NETSCAPE-Bookmark-file-1>
<DL><p>
    <DT><H3>Folder <A HREF="https://inside-heading.example.com/">x</A></H3>
    <DL><p>
        <DT><A HREF="https://example.com/">Example</A>
    </DL><p>
</DL><p>
"""
        candidates = list(self.parser.parse(raw, ImportSource.CHROME))

        assert [c.url for c in candidates] == ["https://example.com/"]
        assert candidates[0].line_number == 5

    @pytest.mark.parametrize("source", [ImportSource.CHROME, ImportSource.POCKET])
    def test_unclosed_items_do_not_nest(self, source):
        """Anchor depth stays the same however many bookmarks precede it."""
        bookmarks = [(f"https://example.com/{i}", "a,b") for i in range(500)]
        raw = build_export(source, bookmarks)
        if source.is_browser_export:
            assert b"</DT>" not in raw

        soup = self.parser._parse_markup(raw)
        depths = {
            len(list(a_tag.parents))
            for a_tag in soup.select(HtmlExportParser.selector_for(source))
        }

        assert len(depths) == 1

    def test_nested_service_lists(self):
        raw = b"""<ul>
<li><a href="https://one.example.com/">One</a>
<ul>
<li><a href="https://two.example.com/">Two</a>
</ul>
<li><a href="https://three.example.com/">Three</a>
</ul>
"""
        candidates = list(self.parser.parse(raw, ImportSource.POCKET))

        assert [c.url for c in candidates] == [
            "https://one.example.com/",
            "https://two.example.com/",
            "https://three.example.com/",
        ]
        assert [c.line_number for c in candidates] == [2, 4, 6]

    def test_sample_chrome_export(self, sample_chrome_export):
        candidates = list(self.parser.parse(sample_chrome_export, ImportSource.CHROME))

        assert [c.url for c in candidates] == [url for url, _ in SAMPLE_BOOKMARKS]
        assert [c.tags.all() for c in candidates] == [
            ["python", "documentation"],
            ["python", "http"],
            [],
        ]

    def test_parse_is_lazy(self):
        raw = build_export(ImportSource.CHROME, SAMPLE_BOOKMARKS)

        stream = self.parser.parse(raw, ImportSource.CHROME)

        assert isinstance(stream, types.GeneratorType)
        first = next(stream)
        assert first.url == SAMPLE_BOOKMARKS[0][0]

    def test_stream_is_single_pass(self):
        raw = build_export(ImportSource.CHROME, SAMPLE_BOOKMARKS)

        stream = self.parser.parse(raw, ImportSource.CHROME)

        assert len(list(stream)) == 3
        assert list(stream) == []

    def test_missing_href_yields_empty_url(self):
        raw = b"<DL><p>\n<DT><A>No link</A>\n</DL>"

        candidates = list(self.parser.parse(raw, ImportSource.SAFARI))

        assert candidates[0].url == ""

    def test_tags_respect_max_tag_length(self):
        parser = HtmlExportParser(max_tag_length=5)
        raw = build_export(ImportSource.CHROME, [("https://a.example.com/", "short,toolong")])

        candidate = next(parser.parse(raw, ImportSource.CHROME))

        assert candidate.tags.invalid() == ["toolong"]

    @pytest.mark.parametrize("raw", [b"", b"   \n\t  ", ""])
    def test_empty_content_yields_nothing(self, raw):
        assert list(self.parser.parse(raw, ImportSource.CHROME)) == []

    def test_garbage_yields_nothing(self):
        raw = b"\x00\xff\xfe<<<<not html at all>>>>\x00"

        assert list(self.parser.parse(raw, ImportSource.CHROME)) == []

    def test_unparsable_markup_yields_nothing(self):
        raw = build_export(ImportSource.CHROME, SAMPLE_BOOKMARKS)

        with patch(
            "bookmark_importer.core.html_export_parser.BeautifulSoup",
            side_effect=ValueError("broken"),
        ):
            assert list(self.parser.parse(raw, ImportSource.CHROME)) == []

    def test_accepts_text(self):
        raw = build_export(ImportSource.POCKET, SAMPLE_BOOKMARKS).decode("utf-8")

        assert len(list(self.parser.parse(raw, ImportSource.POCKET))) == 3

    def test_rejects_non_text_input(self):
        with pytest.raises(SourceParseError):
            self.parser.parse(12345, ImportSource.CHROME)

    def test_decodes_non_utf8_export(self):
        html = (
            '<DL><p>\n<DT><A HREF="https://example.com/café" TAGS="café">'
            "Café résumé naïve façade à la carte</A>\n"
            "</DL>"
        )
        raw = html.encode("latin-1")

        with patch(
            "bookmark_importer.core.html_export_parser.chardet.detect",
            return_value={"encoding": "ISO-8859-1", "confidence": 0.9},
        ):
            candidate = next(self.parser.parse(raw, ImportSource.CHROME))

        assert candidate.url == "https://example.com/café"
        assert candidate.tags.all() == ["café"]

    def test_low_confidence_falls_back_to_utf8(self):
        raw = build_export(ImportSource.CHROME, SAMPLE_BOOKMARKS)

        with patch(
            "bookmark_importer.core.html_export_parser.chardet.detect",
            return_value={"encoding": "Windows-1252", "confidence": 0.2},
        ):
            assert len(list(self.parser.parse(raw, ImportSource.CHROME))) == 3

    def test_unknown_encoding_falls_back_to_utf8(self):
        raw = build_export(ImportSource.CHROME, SAMPLE_BOOKMARKS)

        with patch(
            "bookmark_importer.core.html_export_parser.chardet.detect",
            return_value={"encoding": "no-such-codec", "confidence": 0.99},
        ):
            assert len(list(self.parser.parse(raw, ImportSource.CHROME))) == 3
