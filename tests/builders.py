"""Builders for books, chunks, and chapter sources used across the tests."""

import sqlite3
from collections.abc import Sequence
from pathlib import Path

from microread.ingestion.chunker import chunk_book
from microread.models import Book, Chapter, Chunk, ParsedBook
from microread.storage.database import transaction
from microread.storage.repository import Repository


def paragraph(words: int, word: str = "word") -> str:
    return "<p>" + " ".join([word] * words) + "</p>"


def chapter(title: str, paragraphs: int, words_each: int) -> Chapter:
    """A chapter of ``paragraphs`` <p> elements with ``words_each`` words each."""
    return Chapter(title=title, html="\n".join(paragraph(words_each) for _ in range(paragraphs)))


def make_chunk(
    index: int,
    words: int = 100,
    title: str | None = "Chapter 1",
    book_id: str = "book-1",
    chunk_id: str | None = None,
) -> Chunk:
    text = " ".join(["word"] * words)
    chunk = Chunk(
        book_id=book_id,
        index=index,
        chapter_title=title,
        content_html=f"<p>{text}</p>",
        content_text=text,
        word_count=words,
    )
    if chunk_id is not None:
        chunk = chunk.model_copy(update={"id": chunk_id})
    return chunk


def seed_book(
    conn: sqlite3.Connection,
    word_counts: Sequence[int],
    titles: Sequence[str | None] | None = None,
    indices: Sequence[int] | None = None,
    total_chunks: int | None = None,
    current_chunk_index: int = 0,
    status: str = "active",
    chunk_size_words: int = 1000,
    title: str = "Seeded Book",
) -> tuple[Book, list[Chunk]]:
    """Insert a book with hand-shaped chunks, including inconsistent ones."""
    book = Book(
        title=title,
        source_path="/library/seeded.epub",
        chunk_size_words=chunk_size_words,
        status=status,
        total_chunks=len(word_counts) if total_chunks is None else total_chunks,
        current_chunk_index=current_chunk_index,
    )
    titles = titles or ["Chapter 1"] * len(word_counts)
    indices = indices or list(range(len(word_counts)))
    chunks = [
        make_chunk(index, words, chunk_title, book.id)
        for index, words, chunk_title in zip(indices, word_counts, titles)
    ]
    with transaction(conn):
        repo = Repository(conn)
        repo.insert_book(book)
        repo.insert_chunks(chunks)
    return book, chunks


def store_book(
    conn: sqlite3.Connection,
    chapters: Sequence[Chapter],
    chunk_size: int,
    current_chunk_index: int = 0,
    status: str = "active",
) -> tuple[Book, list[Chunk]]:
    """Insert a book chunked from ``chapters`` the way ingest does."""
    contents = chunk_book(chapters, chunk_size)
    book = Book(
        title="Stored Book",
        source_path="/library/stored.epub",
        chunk_size_words=chunk_size,
        status=status,
        total_chunks=len(contents),
        current_chunk_index=current_chunk_index,
    )
    chunks = [Chunk.from_content(content, book.id, i) for i, content in enumerate(contents)]
    with transaction(conn):
        repo = Repository(conn)
        repo.insert_book(book)
        repo.insert_chunks(chunks)
    return book, chunks


class FakeParser:
    """Chapter source that returns fixed chapters regardless of path."""

    def __init__(self, chapters: Sequence[Chapter], title: str = "Fake Book") -> None:
        self.chapters = list(chapters)
        self.title = title
        self.calls: list[str] = []

    def parse(self, file_path: str | Path) -> ParsedBook:
        self.calls.append(str(file_path))
        return ParsedBook(
            title=self.title,
            author="Fake Author",
            chapters=self.chapters,
            source_path=str(file_path),
            file_format="epub",
        )


class FailingParser:
    """Chapter source whose content can no longer be read."""

    def parse(self, file_path: str | Path) -> ParsedBook:
        raise OSError(f"cannot open {file_path}")
