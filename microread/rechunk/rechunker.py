"""Full rebuild of a book's chunk set at a new chunk size."""

import logging
import sqlite3
from collections.abc import Sequence
from datetime import datetime

from microread.errors import SourceUnavailableError
from microread.ingestion.chunker import BookChunker
from microread.ingestion.parser import BookParser
from microread.models.book import Book
from microread.models.chunk import Chunk
from microread.models.parsed import Chapter
from microread.models.reading_log import ReadingLogEntry
from microread.models.results import RechunkResult
from microread.rechunk.remap import build_ranges, map_chunk_ids, map_progress, words_before_index
from microread.storage.database import transaction
from microread.storage.repository import Repository

logger = logging.getLogger(__name__)


def remap_book_state(
    book: Book,
    old_chunks: Sequence[Chunk],
    old_entries: Sequence[ReadingLogEntry],
    new_chunks: Sequence[Chunk],
    chunk_size: int,
    now: datetime,
) -> tuple[Book, list[ReadingLogEntry]]:
    """Carry a book's progress and read history over to a new chunk set.

    The pointer is translated through the number of words already read;
    each log entry moves to the new chunk that overlaps its old chunk most.
    Entries whose chunk cannot be mapped are dropped.

    Args:
        book: Book state before the rebuild.
        old_chunks: Currently stored chunks.
        old_entries: Currently stored reading log entries.
        new_chunks: Replacement chunks, indexed ``0..n-1``.
        chunk_size: The target size the new chunks were built with.
        now: Completion timestamp, used if the book becomes completed.

    Returns:
        The updated book and the remapped log entries (same ids and
        timestamps, new chunk ids).
    """
    old_ranges = build_ranges(old_chunks)
    new_ranges = build_ranges(new_chunks)

    words_read = words_before_index(old_ranges, book.current_chunk_index)
    total_chunks = len(new_chunks)
    current_index = min(map_progress(new_ranges, words_read), total_chunks)
    chunk_id_map = map_chunk_ids(old_ranges, new_ranges)

    entries = [
        entry.model_copy(update={"chunk_id": chunk_id_map[entry.chunk_id]})
        for entry in old_entries
        if entry.chunk_id in chunk_id_map
    ]

    is_completed = total_chunks > 0 and current_index >= total_chunks
    if is_completed:
        status = "completed"
    elif book.is_completed:
        status = "active"
    else:
        status = book.status

    updated = book.model_copy(
        update={
            "chunk_size_words": chunk_size,
            "total_chunks": total_chunks,
            "current_chunk_index": current_index,
            "status": status,
            "completed_at": (book.completed_at or now) if is_completed else None,
        }
    )
    return updated, entries


class Rechunker:
    """Replaces a book's chunks, progress, and read history in one transaction.

    Source parsing and chunking happen before the transaction opens; the
    stored state is read, remapped, and replaced while holding the database
    write lock.

    Args:
        conn: An open connection from ``get_connection``.
        chunker: Chunker carrying the size policy.
        parser: Chapter source used to re-acquire book content.
    """

    def __init__(
        self,
        conn: sqlite3.Connection,
        chunker: BookChunker,
        parser: BookParser | None = None,
    ) -> None:
        self._conn = conn
        self._repo = Repository(conn)
        self._chunker = chunker
        self._parser = parser or BookParser()

    def rechunk(self, book_id: str, chunk_size: int) -> RechunkResult:
        """Rebuild a book's chunk set at ``chunk_size`` words per chunk.

        Args:
            book_id: The book to rebuild.
            chunk_size: New target words per chunk.

        Returns:
            The new chunk count and remapped progress pointer.

        Raises:
            InvalidChunkSizeError: If chunk_size is outside the policy bounds.
            BookNotFoundError: If the book does not exist.
            SourceUnavailableError: If the book's content cannot be re-read.
        """
        self._chunker.config.validate_chunk_size(chunk_size)

        book = self._repo.require_book(book_id)
        chapters = self._load_chapters(book)
        contents = self._chunker.chunk(chapters, chunk_size)
        if not contents:
            raise SourceUnavailableError(book_id, "source produced no readable content")
        new_chunks = [Chunk.from_content(content, book_id, i) for i, content in enumerate(contents)]

        with transaction(self._conn):
            book = self._repo.require_book(book_id)
            old_chunks = self._repo.list_chunks(book_id)
            old_entries = self._repo.list_log_entries(book_id)

            updated, entries = remap_book_state(
                book, old_chunks, old_entries, new_chunks, chunk_size, datetime.now()
            )

            self._repo.delete_log_entries(book_id)
            self._repo.delete_chunks(book_id)
            self._repo.insert_chunks(new_chunks)
            self._repo.insert_log_entries(entries)
            self._repo.update_book_state(updated)

        logger.info(
            "Rechunked book %s at %d words: %d -> %d chunks, pointer %d -> %d",
            book_id,
            chunk_size,
            len(old_chunks),
            updated.total_chunks,
            book.current_chunk_index,
            updated.current_chunk_index,
        )
        return RechunkResult(
            total_chunks=updated.total_chunks,
            current_chunk_index=updated.current_chunk_index,
        )

    def _load_chapters(self, book: Book) -> list[Chapter]:
        try:
            parsed = self._parser.parse(book.source_path)
        except Exception as exc:
            logger.exception("Failed to re-acquire source for book %s", book.id)
            raise SourceUnavailableError(book.id, str(exc)) from exc

        if not parsed.chapters:
            raise SourceUnavailableError(book.id, "source has no chapters")
        return parsed.chapters
