"""Read/unread state machine over a book's progress pointer."""

import logging
import sqlite3
from datetime import datetime

from microread.models.book import Book
from microread.models.chunk import Chunk
from microread.models.reading_log import ReadingLogEntry, ReadVia
from microread.models.results import MarkReadResult
from microread.storage.database import transaction
from microread.storage.repository import Repository

logger = logging.getLogger(__name__)


def apply_read(book: Book, index: int, now: datetime) -> Book:
    """Advance the pointer past a chunk read at or beyond the frontier.

    Reading chunk ``index >= current_chunk_index`` moves the pointer to
    ``index + 1``, so skipped chunks count as read by position. Reading an
    earlier chunk leaves the pointer alone. Reaching ``total_chunks``
    completes the book.

    Args:
        book: Current book state.
        index: Index of the chunk that was read.
        now: Completion timestamp, used if the book completes.

    Returns:
        The new book state (``book`` itself when nothing changes).
    """
    if index < book.current_chunk_index:
        return book

    new_index = min(index + 1, book.total_chunks)
    update: dict = {"current_chunk_index": new_index}
    if new_index >= book.total_chunks:
        update["status"] = "completed"
        update["completed_at"] = now
    return book.model_copy(update=update)


def apply_unread(book: Book, index: int) -> Book:
    """Retreat the pointer to a chunk marked unread.

    Unreading a chunk below the pointer moves the pointer back to exactly
    that chunk, discarding any skip-ahead gained past it. A completed book
    reverts to active.
    """
    if index < book.current_chunk_index:
        update: dict = {"current_chunk_index": index}
        if book.is_completed:
            update["status"] = "active"
            update["completed_at"] = None
        return book.model_copy(update=update)

    if book.is_completed:
        return book.model_copy(
            update={
                "current_chunk_index": min(index, book.total_chunks),
                "status": "active",
                "completed_at": None,
            }
        )

    return book


def apply_restart(book: Book) -> Book:
    """Reset a book for a full re-read."""
    return book.model_copy(
        update={"current_chunk_index": 0, "status": "active", "completed_at": None}
    )


class ProgressTracker:
    """Applies read, unread, and restart transitions to stored books.

    Each call runs in its own write transaction, so a transition never
    interleaves with a concurrent rechunk of the same database.

    Args:
        conn: An open connection from ``get_connection``.
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn
        self._repo = Repository(conn)

    def mark_read(self, chunk_id: str, read_via: ReadVia = "web_app") -> MarkReadResult:
        """Mark a chunk read by id.

        Raises:
            ChunkNotFoundError: If the chunk does not exist.
        """
        with transaction(self._conn):
            chunk = self._repo.require_chunk(chunk_id)
            return self._mark_read(chunk, read_via)

    def mark_read_at(
        self, book_id: str, index: int, read_via: ReadVia = "web_app"
    ) -> MarkReadResult:
        """Mark the chunk at ``index`` of a book read.

        Raises:
            ChunkNotFoundError: If the book has no chunk at that index.
        """
        with transaction(self._conn):
            chunk = self._repo.require_chunk_at(book_id, index)
            return self._mark_read(chunk, read_via)

    def mark_unread(self, chunk_id: str) -> Book:
        """Mark a chunk unread by id, removing its read history.

        Raises:
            ChunkNotFoundError: If the chunk does not exist.
        """
        with transaction(self._conn):
            chunk = self._repo.require_chunk(chunk_id)
            return self._mark_unread(chunk)

    def mark_unread_at(self, book_id: str, index: int) -> Book:
        """Mark the chunk at ``index`` of a book unread.

        Raises:
            ChunkNotFoundError: If the book has no chunk at that index.
        """
        with transaction(self._conn):
            chunk = self._repo.require_chunk_at(book_id, index)
            return self._mark_unread(chunk)

    def restart(self, book_id: str) -> Book:
        """Move a book back to its first chunk. Read history is kept.

        Raises:
            BookNotFoundError: If the book does not exist.
        """
        with transaction(self._conn):
            book = apply_restart(self._repo.require_book(book_id))
            self._repo.update_book_state(book)
        logger.info("Restarted book %s", book_id)
        return book

    def _mark_read(self, chunk: Chunk, read_via: ReadVia) -> MarkReadResult:
        now = datetime.now()
        self._repo.insert_log_entries(
            [ReadingLogEntry(chunk_id=chunk.id, book_id=chunk.book_id, read_at=now, read_via=read_via)]
        )

        book = self._repo.require_book(chunk.book_id)
        updated = apply_read(book, chunk.index, now)
        if updated is not book:
            self._repo.update_book_state(updated)
        if updated.is_completed and not book.is_completed:
            logger.info("Book %s completed", book.id)

        next_chunk = self._repo.get_chunk_at(chunk.book_id, chunk.index + 1)
        return MarkReadResult(
            current_chunk_index=updated.current_chunk_index,
            completed=updated.is_completed,
            next_chunk_id=next_chunk.id if next_chunk else None,
        )

    def _mark_unread(self, chunk: Chunk) -> Book:
        self._repo.delete_log_entries_for_chunk(chunk.id, chunk.book_id)

        book = self._repo.require_book(chunk.book_id)
        updated = apply_unread(book, chunk.index)
        if updated is not book:
            self._repo.update_book_state(updated)
        return updated
