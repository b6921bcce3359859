"""Typed access to books, chunks, and reading log rows.

Rows are converted to and from the pydantic records here; nothing above
this module sees a ``sqlite3.Row``.
"""

import sqlite3
from collections.abc import Iterable
from datetime import datetime

from microread.errors import BookNotFoundError, ChunkNotFoundError
from microread.models.book import Book
from microread.models.chunk import Chunk
from microread.models.reading_log import ReadingLogEntry


def _to_timestamp(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def _from_timestamp(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


def book_from_row(row: sqlite3.Row) -> Book:
    return Book(
        id=row["id"],
        title=row["title"],
        author=row["author"],
        cover_image=row["cover_image"],
        source_path=row["source_path"],
        chunk_size_words=row["chunk_size_words"],
        status=row["status"],
        total_chunks=row["total_chunks"],
        current_chunk_index=row["current_chunk_index"],
        added_at=_from_timestamp(row["added_at"]),
        completed_at=_from_timestamp(row["completed_at"]),
    )


def chunk_from_row(row: sqlite3.Row) -> Chunk:
    return Chunk(
        id=row["id"],
        book_id=row["book_id"],
        index=row["chunk_index"],
        chapter_title=row["chapter_title"],
        content_html=row["content_html"],
        content_text=row["content_text"],
        word_count=row["word_count"],
        ai_recap=row["ai_recap"],
    )


def log_entry_from_row(row: sqlite3.Row) -> ReadingLogEntry:
    return ReadingLogEntry(
        id=row["id"],
        chunk_id=row["chunk_id"],
        book_id=row["book_id"],
        sent_at=_from_timestamp(row["sent_at"]),
        read_at=_from_timestamp(row["read_at"]),
        read_via=row["read_via"],
    )


class Repository:
    """Reads and writes library rows over one SQLite connection.

    Methods do not commit; callers wrap writes in
    :func:`microread.storage.database.transaction`.

    Args:
        conn: An open connection from ``get_connection``.
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    # ── Books ────────────────────────────────────────────────────────────

    def get_book(self, book_id: str) -> Book | None:
        row = self._conn.execute("SELECT * FROM books WHERE id = ?", (book_id,)).fetchone()
        return book_from_row(row) if row else None

    def require_book(self, book_id: str) -> Book:
        """Fetch a book or raise BookNotFoundError."""
        book = self.get_book(book_id)
        if book is None:
            raise BookNotFoundError(book_id)
        return book

    def list_books(self) -> list[Book]:
        rows = self._conn.execute("SELECT * FROM books ORDER BY added_at, id").fetchall()
        return [book_from_row(row) for row in rows]

    def insert_book(self, book: Book) -> None:
        self._conn.execute(
            """
            INSERT INTO books (
                id, title, author, cover_image, source_path, chunk_size_words,
                status, total_chunks, current_chunk_index, added_at, completed_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                book.id,
                book.title,
                book.author,
                book.cover_image,
                book.source_path,
                book.chunk_size_words,
                book.status,
                book.total_chunks,
                book.current_chunk_index,
                _to_timestamp(book.added_at),
                _to_timestamp(book.completed_at),
            ),
        )

    def update_book_state(self, book: Book) -> None:
        """Persist the mutable reading state of a book."""
        self._conn.execute(
            """
            UPDATE books
            SET chunk_size_words = ?, status = ?, total_chunks = ?,
                current_chunk_index = ?, completed_at = ?
            WHERE id = ?
            """,
            (
                book.chunk_size_words,
                book.status,
                book.total_chunks,
                book.current_chunk_index,
                _to_timestamp(book.completed_at),
                book.id,
            ),
        )

    def delete_book(self, book_id: str) -> None:
        """Delete a book; chunks and log entries cascade."""
        self._conn.execute("DELETE FROM books WHERE id = ?", (book_id,))

    # ── Chunks ───────────────────────────────────────────────────────────

    def get_chunk(self, chunk_id: str) -> Chunk | None:
        row = self._conn.execute("SELECT * FROM chunks WHERE id = ?", (chunk_id,)).fetchone()
        return chunk_from_row(row) if row else None

    def require_chunk(self, chunk_id: str) -> Chunk:
        """Fetch a chunk by id or raise ChunkNotFoundError."""
        chunk = self.get_chunk(chunk_id)
        if chunk is None:
            raise ChunkNotFoundError(chunk_id)
        return chunk

    def get_chunk_at(self, book_id: str, index: int) -> Chunk | None:
        row = self._conn.execute(
            "SELECT * FROM chunks WHERE book_id = ? AND chunk_index = ?",
            (book_id, index),
        ).fetchone()
        return chunk_from_row(row) if row else None

    def require_chunk_at(self, book_id: str, index: int) -> Chunk:
        """Fetch a chunk by position or raise ChunkNotFoundError."""
        chunk = self.get_chunk_at(book_id, index)
        if chunk is None:
            raise ChunkNotFoundError(f"{book_id}#{index}")
        return chunk

    def list_chunks(self, book_id: str) -> list[Chunk]:
        """All chunks of a book in reading order."""
        rows = self._conn.execute(
            "SELECT * FROM chunks WHERE book_id = ? ORDER BY chunk_index",
            (book_id,),
        ).fetchall()
        return [chunk_from_row(row) for row in rows]

    def insert_chunks(self, chunks: Iterable[Chunk]) -> None:
        self._conn.executemany(
            """
            INSERT INTO chunks (
                id, book_id, chunk_index, chapter_title, content_html,
                content_text, word_count, ai_recap
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            [
                (
                    chunk.id,
                    chunk.book_id,
                    chunk.index,
                    chunk.chapter_title,
                    chunk.content_html,
                    chunk.content_text,
                    chunk.word_count,
                    chunk.ai_recap,
                )
                for chunk in chunks
            ],
        )

    def delete_chunks(self, book_id: str) -> None:
        self._conn.execute("DELETE FROM chunks WHERE book_id = ?", (book_id,))

    # ── Reading log ──────────────────────────────────────────────────────

    def list_log_entries(self, book_id: str) -> list[ReadingLogEntry]:
        rows = self._conn.execute(
            "SELECT * FROM reading_log WHERE book_id = ? ORDER BY read_at, id",
            (book_id,),
        ).fetchall()
        return [log_entry_from_row(row) for row in rows]

    def list_log_entries_for_chunk(self, chunk_id: str) -> list[ReadingLogEntry]:
        rows = self._conn.execute(
            "SELECT * FROM reading_log WHERE chunk_id = ? ORDER BY read_at, id",
            (chunk_id,),
        ).fetchall()
        return [log_entry_from_row(row) for row in rows]

    def insert_log_entries(self, entries: Iterable[ReadingLogEntry]) -> None:
        self._conn.executemany(
            """
            INSERT INTO reading_log (id, chunk_id, book_id, sent_at, read_at, read_via)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            [
                (
                    entry.id,
                    entry.chunk_id,
                    entry.book_id,
                    _to_timestamp(entry.sent_at),
                    _to_timestamp(entry.read_at),
                    entry.read_via,
                )
                for entry in entries
            ],
        )

    def delete_log_entries(self, book_id: str) -> None:
        self._conn.execute("DELETE FROM reading_log WHERE book_id = ?", (book_id,))

    def delete_log_entries_for_chunk(self, chunk_id: str, book_id: str) -> None:
        self._conn.execute(
            "DELETE FROM reading_log WHERE chunk_id = ? AND book_id = ?",
            (chunk_id, book_id),
        )
