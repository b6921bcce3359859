"""SQLite database initialization, connection, and transaction management."""

import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

SCHEMA = """
CREATE TABLE IF NOT EXISTS books (
    id TEXT PRIMARY KEY,
    title TEXT NOT NULL,
    author TEXT NOT NULL DEFAULT '',
    cover_image TEXT,
    source_path TEXT NOT NULL,
    chunk_size_words INTEGER NOT NULL DEFAULT 1000,
    status TEXT NOT NULL DEFAULT 'queued'
        CHECK (status IN ('active', 'paused', 'queued', 'completed')),
    total_chunks INTEGER NOT NULL DEFAULT 0,
    current_chunk_index INTEGER NOT NULL DEFAULT 0,
    added_at TEXT NOT NULL,
    completed_at TEXT
);

CREATE TABLE IF NOT EXISTS chunks (
    id TEXT PRIMARY KEY,
    book_id TEXT NOT NULL REFERENCES books(id) ON DELETE CASCADE,
    chunk_index INTEGER NOT NULL,
    chapter_title TEXT,
    content_html TEXT NOT NULL,
    content_text TEXT NOT NULL,
    word_count INTEGER NOT NULL,
    ai_recap TEXT
);

CREATE UNIQUE INDEX IF NOT EXISTS idx_chunks_book_index
    ON chunks(book_id, chunk_index);

CREATE TABLE IF NOT EXISTS reading_log (
    id TEXT PRIMARY KEY,
    chunk_id TEXT NOT NULL REFERENCES chunks(id) ON DELETE CASCADE,
    book_id TEXT NOT NULL REFERENCES books(id) ON DELETE CASCADE,
    sent_at TEXT,
    read_at TEXT,
    read_via TEXT
        CHECK (read_via IS NULL OR read_via IN ('email_link', 'web_app', 'manual_trigger'))
);

CREATE INDEX IF NOT EXISTS idx_reading_log_book ON reading_log(book_id);
CREATE INDEX IF NOT EXISTS idx_reading_log_chunk ON reading_log(chunk_id);
"""


def get_connection(db_path: str | Path) -> sqlite3.Connection:
    """Create a connection to the SQLite database.

    Args:
        db_path: Path to the SQLite database file.

    Returns:
        A sqlite3 Connection with row_factory set to Row.
    """
    conn = sqlite3.connect(str(db_path))
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode=WAL")
    conn.execute("PRAGMA foreign_keys=ON")
    return conn


def initialize_database(db_path: str | Path) -> None:
    """Create the database schema if it doesn't exist.

    Args:
        db_path: Path to the SQLite database file.
    """
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    conn = get_connection(db_path)
    try:
        conn.executescript(SCHEMA)
        conn.commit()
    finally:
        conn.close()


@contextmanager
def transaction(conn: sqlite3.Connection) -> Iterator[sqlite3.Connection]:
    """Run a block inside a write transaction.

    ``BEGIN IMMEDIATE`` takes the database write lock before the block reads
    anything, so a read-modify-write inside the block cannot interleave with
    another writer. Commits on success. Rolls back on any exception, including
    a failed commit, so the connection never stays inside the transaction.
    """
    conn.execute("BEGIN IMMEDIATE")
    try:
        yield conn
        conn.commit()
    except BaseException:
        conn.rollback()
        raise
