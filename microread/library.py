"""Library service: ingesting books and presenting reading progress."""

import logging
import math
import shutil
import sqlite3
from datetime import datetime, timedelta
from pathlib import Path
from uuid import uuid4

from microread.config import AppConfig
from microread.errors import InvalidStatusTransitionError
from microread.ingestion.chunker import BookChunker
from microread.ingestion.parser import BookParser
from microread.models.book import Book, BookStatus
from microread.models.chunk import Chunk
from microread.models.results import BookOverview, BookStats, BookSummary
from microread.reading.chapter_runs import build_chapter_runs, summarize_chapter_runs
from microread.storage.database import transaction
from microread.storage.repository import Repository

logger = logging.getLogger(__name__)

# Ordering of books in the library list
STATUS_ORDER: dict[str, int] = {
    "active": 0,
    "queued": 1,
    "completed": 2,
    "paused": 3,
}


class Library:
    """Adds books to the library and reports on their progress.

    Args:
        conn: An open connection from ``get_connection``.
        config: Application configuration (chunk policy and storage paths).
        parser: Chapter source for uploaded files.
    """

    def __init__(
        self,
        conn: sqlite3.Connection,
        config: AppConfig,
        parser: BookParser | None = None,
    ) -> None:
        self._conn = conn
        self._repo = Repository(conn)
        self._config = config
        self._parser = parser or BookParser()
        self._chunker = BookChunker(config.chunking)

    def ingest_book(
        self,
        source_path: str | Path,
        chunk_size_words: int | None = None,
        status: BookStatus = "queued",
    ) -> Book:
        """Store a source document, chunk it, and add the book.

        Once parsed, the source is copied into the library directory so it
        can be re-read for later rebuilds.

        Args:
            source_path: Path to an EPUB, HTML, or text file.
            chunk_size_words: Target words per chunk. Defaults to the
                configured default.
            status: "active" to start reading now; anything else queues it.

        Returns:
            The stored book.

        Raises:
            FileNotFoundError: If the source does not exist.
            InvalidChunkSizeError: If the chunk size is outside the bounds.
            UnsupportedFormatError: If the source format is not supported.
        """
        chunking = self._config.chunking
        chunk_size = chunking.validate_chunk_size(
            chunking.default_chunk_size if chunk_size_words is None else chunk_size_words
        )

        source = Path(source_path)
        if not source.exists():
            raise FileNotFoundError(f"File not found: {source}")

        parsed = self._parser.parse(source)
        contents = self._chunker.chunk(parsed.chapters, chunk_size)

        book_id = str(uuid4())
        library_dir = Path(self._config.storage.library_dir)
        library_dir.mkdir(parents=True, exist_ok=True)
        stored_path = library_dir / f"{book_id}{source.suffix.lower()}"
        shutil.copyfile(source, stored_path)

        try:
            book = Book(
                id=book_id,
                title=parsed.title,
                author=parsed.author,
                source_path=str(stored_path),
                chunk_size_words=chunk_size,
                status="active" if status == "active" else "queued",
                total_chunks=len(contents),
            )
            chunks = [
                Chunk.from_content(content, book_id, i) for i, content in enumerate(contents)
            ]
            with transaction(self._conn):
                self._repo.insert_book(book)
                self._repo.insert_chunks(chunks)
        except Exception:
            stored_path.unlink(missing_ok=True)
            raise

        logger.info("Ingested '%s' as %s with %d chunks", book.title, book_id, len(chunks))
        return book

    def list_books(self) -> list[BookSummary]:
        """All books with their progress, active ones first."""
        summaries = [
            BookSummary(
                book=book,
                progress=(
                    round(book.current_chunk_index / book.total_chunks * 100)
                    if book.total_chunks > 0
                    else 0
                ),
                chunks_read=book.current_chunk_index,
            )
            for book in self._repo.list_books()
        ]
        summaries.sort(key=lambda s: STATUS_ORDER.get(s.book.status, 99))
        return summaries

    def get_book_overview(self, book_id: str) -> BookOverview:
        """A book with its chapters, per-chapter read status, and stats.

        Raises:
            BookNotFoundError: If the book does not exist.
        """
        book = self._repo.require_book(book_id)
        chunks = self._repo.list_chunks(book_id)
        pointer = book.current_chunk_index

        chapters = summarize_chapter_runs(build_chapter_runs(chunks), pointer)

        now = datetime.now()
        end = book.completed_at or now
        days_active = max(1, math.ceil((end - book.added_at) / timedelta(days=1)))
        remaining = max(0, book.total_chunks - pointer)

        stats = BookStats(
            chunks_read=pointer,
            words_read=sum(chunk.word_count for chunk in chunks if chunk.index < pointer),
            days_active=days_active,
            estimated_completion=now + timedelta(days=remaining),
        )
        return BookOverview(book=book, chapters=chapters, stats=stats)

    def set_status(self, book_id: str, status: BookStatus) -> Book:
        """Pause, resume, or queue a book.

        Completion is only reached by reading, and a completed book is
        reopened with a restart, so neither transition is allowed here.

        Raises:
            BookNotFoundError: If the book does not exist.
            InvalidStatusTransitionError: If the transition is not allowed.
        """
        with transaction(self._conn):
            book = self._repo.require_book(book_id)
            if status == "completed":
                raise InvalidStatusTransitionError(
                    "A book is completed by reading its last chunk"
                )
            if book.is_completed:
                raise InvalidStatusTransitionError(
                    "Restart a completed book to read it again"
                )
            book = book.model_copy(update={"status": status})
            self._repo.update_book_state(book)
        return book

    def delete_book(self, book_id: str) -> None:
        """Remove a book, its chunks, its reading log, and its stored source.

        Raises:
            BookNotFoundError: If the book does not exist.
        """
        with transaction(self._conn):
            book = self._repo.require_book(book_id)
            self._repo.delete_book(book_id)
        Path(book.source_path).unlink(missing_ok=True)
        logger.info("Deleted book %s", book_id)
