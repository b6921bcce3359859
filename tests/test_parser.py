"""Tests for the book source parser."""

from pathlib import Path
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import ebooklib
import pytest

from microread.errors import UnsupportedFormatError
from microread.ingestion.parser import SUPPORTED_FORMATS, BookParser


@pytest.fixture
def parser() -> BookParser:
    return BookParser()


def _epub_item(name: str, html: str, item_type: int = ebooklib.ITEM_DOCUMENT) -> MagicMock:
    item = MagicMock()
    item.get_type.return_value = item_type
    item.get_name.return_value = name
    item.get_content.return_value = html.encode("utf-8")
    return item


def _mock_epub() -> MagicMock:
    items = {
        "ch1": _epub_item("Text/ch1.xhtml", "<html><body><p>First chapter text.</p></body></html>"),
        "cover": _epub_item("Images/cover.jpg", "", ebooklib.ITEM_IMAGE),
        "ch2": _epub_item("Text/ch2.xhtml", "<html><body><p>Second chapter.</p></body></html>"),
        "ch3": _epub_item(
            "Text/ch3.xhtml", "<html><body><h1>Epilogue</h1><p>The end.</p></body></html>"
        ),
        "ch4": _epub_item("Text/ch4.xhtml", "<html><body><p>No title here.</p></body></html>"),
    }
    metadata = {
        "title": [("My Book", {})],
        "creator": [("Jane Doe", {})],
    }

    book = MagicMock()
    book.get_metadata.side_effect = lambda namespace, name: metadata.get(name, [])
    book.toc = [
        SimpleNamespace(href="ch1.xhtml#start", title="Chapter One"),
        (
            SimpleNamespace(href="Text/part.xhtml", title="Part Two"),
            [SimpleNamespace(href="Text/ch2.xhtml", title="Chapter Two")],
        ),
    ]
    book.spine = [
        ("ch1", "yes"),
        ("cover", "no"),
        ("missing", "yes"),
        ("ch2", "yes"),
        ("ch3", "yes"),
        ("ch4", "yes"),
    ]
    book.get_item_with_id.side_effect = items.get
    return book


class TestBookParserEpub:
    """Tests for EPUB parsing (mocked ebooklib)."""

    @pytest.fixture
    def epub_path(self, tmp_path: Path) -> Path:
        path = tmp_path / "book.epub"
        path.write_bytes(b"")
        return path

    def test_reads_metadata(self, parser: BookParser, epub_path: Path) -> None:
        with patch("microread.ingestion.parser.epub.read_epub", return_value=_mock_epub()):
            result = parser.parse(epub_path)
        assert result.title == "My Book"
        assert result.author == "Jane Doe"
        assert result.file_format == "epub"
        assert result.source_path == str(epub_path)

    def test_chapters_follow_spine_order(self, parser: BookParser, epub_path: Path) -> None:
        with patch("microread.ingestion.parser.epub.read_epub", return_value=_mock_epub()):
            result = parser.parse(epub_path)
        assert len(result.chapters) == 4
        assert "First chapter text." in result.chapters[0].html
        assert "Second chapter." in result.chapters[1].html

    def test_chapter_titles_resolved(self, parser: BookParser, epub_path: Path) -> None:
        with patch("microread.ingestion.parser.epub.read_epub", return_value=_mock_epub()):
            result = parser.parse(epub_path)
        titles = [c.title for c in result.chapters]
        # TOC (by file name or full href), then first heading, then spine id
        assert titles == ["Chapter One", "Chapter Two", "Epilogue", "ch4"]

    def test_missing_metadata_defaults(self, parser: BookParser, epub_path: Path) -> None:
        book = _mock_epub()
        book.get_metadata.side_effect = lambda namespace, name: []
        with patch("microread.ingestion.parser.epub.read_epub", return_value=book):
            result = parser.parse(epub_path)
        assert result.title == "Untitled"
        assert result.author == "Unknown Author"

    def test_read_errors_propagate(self, parser: BookParser, epub_path: Path) -> None:
        with patch(
            "microread.ingestion.parser.epub.read_epub", side_effect=OSError("corrupt zip")
        ):
            with pytest.raises(OSError):
                parser.parse(epub_path)


class TestBookParserTxt:
    """Tests for plain text file parsing."""

    def test_parse_utf8_file(self, parser: BookParser, tmp_path: Path) -> None:
        f = tmp_path / "notes.txt"
        f.write_text("First paragraph.\n\nSecond paragraph.", encoding="utf-8")

        result = parser.parse(f)
        assert result.file_format == "txt"
        assert result.title == "notes"
        assert len(result.chapters) == 1
        assert result.chapters[0].title == "notes"
        assert "Second paragraph." in result.chapters[0].html

    def test_parse_utf16_file(self, parser: BookParser, tmp_path: Path) -> None:
        f = tmp_path / "wide.txt"
        f.write_bytes("Hello wide world".encode("utf-16"))

        result = parser.parse(f)
        assert "Hello wide world" in result.chapters[0].html

    def test_parse_empty_file(self, parser: BookParser, tmp_path: Path) -> None:
        f = tmp_path / "empty.txt"
        f.write_text("", encoding="utf-8")

        result = parser.parse(f)
        assert result.chapters == []


class TestBookParserHtml:
    def test_title_from_title_element(self, parser: BookParser, tmp_path: Path) -> None:
        f = tmp_path / "story.html"
        f.write_text(
            "<html><head><title>My Story</title></head><body><p>Once.</p></body></html>",
            encoding="utf-8",
        )

        result = parser.parse(f)
        assert result.title == "My Story"
        assert result.file_format == "html"
        assert result.chapters[0].title == "My Story"
        assert "<p>Once.</p>" in result.chapters[0].html

    def test_title_falls_back_to_filename(self, parser: BookParser, tmp_path: Path) -> None:
        f = tmp_path / "untitled.htm"
        f.write_text("<p>Body only.</p>", encoding="utf-8")

        result = parser.parse(f)
        assert result.title == "untitled"


class TestBookParserErrors:
    def test_missing_file(self, parser: BookParser, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            parser.parse(tmp_path / "nope.epub")

    def test_unsupported_format(self, parser: BookParser, tmp_path: Path) -> None:
        f = tmp_path / "scan.pdf"
        f.write_bytes(b"%PDF-1.4")
        with pytest.raises(UnsupportedFormatError):
            parser.parse(f)

    def test_unsupported_format_is_value_error(self, parser: BookParser, tmp_path: Path) -> None:
        f = tmp_path / "doc.docx"
        f.write_bytes(b"")
        with pytest.raises(ValueError):
            parser.parse(f)

    def test_supported_formats(self) -> None:
        assert SUPPORTED_FORMATS[".epub"] == "epub"
        assert SUPPORTED_FORMATS[".htm"] == "html"
        assert SUPPORTED_FORMATS[".md"] == "txt"
