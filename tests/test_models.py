"""Tests for data models."""

from datetime import datetime

import pytest
from pydantic import ValidationError

from microread.models import (
    UNTITLED_CHAPTER,
    Book,
    Chunk,
    ChunkContent,
    ReadingLogEntry,
    RepairReport,
)


class TestBook:
    def test_create_book(self) -> None:
        book = Book(
            title="Middlemarch",
            author="George Eliot",
            source_path="/data/books/middlemarch.epub",
        )
        assert book.title == "Middlemarch"
        assert book.status == "queued"
        assert book.total_chunks == 0
        assert book.current_chunk_index == 0
        assert book.chunk_size_words == 1000
        assert book.id  # UUID auto-generated

    def test_book_defaults(self) -> None:
        book = Book(title="Test", source_path="/test.txt")
        assert book.author == ""
        assert isinstance(book.added_at, datetime)
        assert book.completed_at is None
        assert book.is_completed is False

    def test_rejects_unknown_status(self) -> None:
        with pytest.raises(ValidationError):
            Book(title="Test", source_path="/test.txt", status="archived")

    def test_book_serialization(self) -> None:
        book = Book(title="Test Book", source_path="/test.epub", status="completed")
        data = book.model_dump()
        assert data["title"] == "Test Book"
        restored = Book(**data)
        assert restored == book
        assert restored.is_completed


class TestChunk:
    def test_from_content(self) -> None:
        content = ChunkContent(
            chapter_title="Prelude",
            content_html="<p>Who that cares much to know</p>",
            content_text="Who that cares much to know",
            word_count=6,
        )
        chunk = Chunk.from_content(content, "book-123", 4)
        assert chunk.book_id == "book-123"
        assert chunk.index == 4
        assert chunk.chapter_title == "Prelude"
        assert chunk.word_count == 6
        assert chunk.ai_recap is None
        assert chunk.id  # UUID auto-generated

    def test_from_content_assigns_fresh_ids(self) -> None:
        content = ChunkContent(
            chapter_title="A", content_html="<p>x</p>", content_text="x", word_count=1
        )
        assert Chunk.from_content(content, "b", 0).id != Chunk.from_content(content, "b", 0).id

    def test_chapter_label_sentinel(self) -> None:
        chunk = Chunk(book_id="b1", index=0, content_html="", content_text="")
        assert chunk.chapter_title is None
        assert chunk.chapter_label == UNTITLED_CHAPTER


class TestReadingLogEntry:
    def test_defaults(self) -> None:
        entry = ReadingLogEntry(chunk_id="c1", book_id="b1")
        assert entry.sent_at is None
        assert entry.read_at is None
        assert entry.read_via is None

    def test_rejects_unknown_channel(self) -> None:
        with pytest.raises(ValidationError):
            ReadingLogEntry(chunk_id="c1", book_id="b1", read_via="carrier_pigeon")


class TestRepairReport:
    def test_counts(self) -> None:
        report = RepairReport(dry_run=True, checked=3)
        assert report.flagged_count == 0
        assert report.repaired_count == 0
        assert report.failed == {}
