"""Book source parser supporting EPUB, HTML, and plain text formats."""

import logging
from pathlib import Path

import chardet
import ebooklib
from bs4 import BeautifulSoup
from ebooklib import epub

from microread.errors import UnsupportedFormatError
from microread.models.parsed import Chapter, ParsedBook

logger = logging.getLogger(__name__)

# Supported file extensions mapped to format identifiers
SUPPORTED_FORMATS: dict[str, str] = {
    ".epub": "epub",
    ".html": "html",
    ".htm": "html",
    ".xhtml": "html",
    ".txt": "txt",
    ".md": "txt",
}


class BookParser:
    """Parses book files into chapters of markup.

    EPUB files yield one chapter per spine document, titled from the table
    of contents. HTML and plain text files yield a single chapter.
    """

    def parse(self, file_path: str | Path) -> ParsedBook:
        """Parse a book file into a ParsedBook structure.

        Args:
            file_path: Path to the book file.

        Returns:
            A ParsedBook with metadata and chapters in reading order.

        Raises:
            FileNotFoundError: If file_path does not exist.
            UnsupportedFormatError: If the file format is not supported.
        """
        path = Path(file_path)
        if not path.exists():
            raise FileNotFoundError(f"File not found: {path}")

        file_format = self._detect_format(path)

        dispatch = {
            "epub": self._parse_epub,
            "html": self._parse_html,
            "txt": self._parse_txt,
        }
        return dispatch[file_format](path)

    def _detect_format(self, file_path: Path) -> str:
        """Determine file format from extension.

        Raises:
            UnsupportedFormatError: If extension is not supported.
        """
        ext = file_path.suffix.lower()
        if ext not in SUPPORTED_FORMATS:
            raise UnsupportedFormatError(
                f"Unsupported file format: '{ext}'. "
                f"Supported: {', '.join(SUPPORTED_FORMATS.keys())}"
            )
        return SUPPORTED_FORMATS[ext]

    def _parse_epub(self, file_path: Path) -> ParsedBook:
        """Extract metadata and spine-ordered chapters from an EPUB file.

        Args:
            file_path: Path to the EPUB file.

        Returns:
            ParsedBook with one chapter per spine document.
        """
        book = epub.read_epub(str(file_path), options={"ignore_ncx": True})

        title = self._first_metadata(book, "title") or "Untitled"
        author = self._first_metadata(book, "creator") or "Unknown Author"
        toc_titles = self._toc_titles(book.toc)

        chapters: list[Chapter] = []
        for item_id, _linear in book.spine:
            item = book.get_item_with_id(item_id)
            if item is None or item.get_type() != ebooklib.ITEM_DOCUMENT:
                logger.warning("Skipping non-document spine item %s in %s", item_id, file_path)
                continue

            html = item.get_content().decode("utf-8", errors="replace")
            href = (item.get_name() or "").split("#")[0]
            chapter_title = (
                toc_titles.get(href)
                or toc_titles.get(href.split("/")[-1])
                or self._first_heading(html)
                or item_id
            )
            chapters.append(Chapter(title=chapter_title, html=html))

        return ParsedBook(
            title=title,
            author=author,
            chapters=chapters,
            source_path=str(file_path),
            file_format="epub",
        )

    def _parse_html(self, file_path: Path) -> ParsedBook:
        """Read an HTML file as a single chapter titled from its <title>."""
        html = self._read_text(file_path)
        soup = BeautifulSoup(html, "lxml")
        title = soup.title.get_text(strip=True) if soup.title else ""
        title = title or self._first_heading(html) or file_path.stem

        return ParsedBook(
            title=title,
            chapters=[Chapter(title=title, html=html)] if html.strip() else [],
            source_path=str(file_path),
            file_format="html",
        )

    def _parse_txt(self, file_path: Path) -> ParsedBook:
        """Read a plain text file as a single chapter.

        Paragraphs are separated by blank lines, which the chunker's
        fallback paragraph splitting picks up.
        """
        text = self._read_text(file_path)
        return ParsedBook(
            title=file_path.stem,
            chapters=[Chapter(title=file_path.stem, html=text)] if text.strip() else [],
            source_path=str(file_path),
            file_format="txt",
        )

    def _read_text(self, file_path: Path) -> str:
        """Read a text file with encoding detection.

        Tries UTF-8 first, then uses chardet for fallback detection.

        Args:
            file_path: Path to the text file.

        Returns:
            The file content as a string.
        """
        try:
            return file_path.read_text(encoding="utf-8")
        except UnicodeDecodeError:
            pass

        raw_bytes = file_path.read_bytes()
        detected = chardet.detect(raw_bytes)
        encoding = detected.get("encoding") or "utf-8"
        confidence = detected.get("confidence", 0)

        if confidence < 0.7:
            logger.warning(
                "Low confidence encoding detection for %s: %s (%.0f%%)",
                file_path,
                encoding,
                confidence * 100,
            )

        try:
            return raw_bytes.decode(encoding)
        except (UnicodeDecodeError, LookupError):
            logger.error("Failed to decode file: %s", file_path)
            return raw_bytes.decode("utf-8", errors="replace")

    def _first_metadata(self, book: epub.EpubBook, name: str) -> str:
        values = book.get_metadata("DC", name)
        if not values:
            return ""
        return (values[0][0] or "").strip()

    def _toc_titles(self, toc: list, titles: dict[str, str] | None = None) -> dict[str, str]:
        """Map TOC hrefs (fragment stripped) to their titles.

        Nested sections arrive as ``(Section, children)`` tuples. The first
        title seen for an href wins.
        """
        if titles is None:
            titles = {}
        for entry in toc:
            if isinstance(entry, tuple):
                section, children = entry
                self._add_toc_title(titles, section)
                self._toc_titles(children, titles)
            else:
                self._add_toc_title(titles, entry)
        return titles

    def _add_toc_title(self, titles: dict[str, str], entry: object) -> None:
        href = getattr(entry, "href", None)
        title = getattr(entry, "title", None)
        if href and title:
            href_base = href.split("#")[0]
            titles.setdefault(href_base, title)
            titles.setdefault(href_base.split("/")[-1], title)

    def _first_heading(self, html: str) -> str:
        heading = BeautifulSoup(html, "lxml").find(["h1", "h2"])
        return heading.get_text(strip=True) if heading else ""
