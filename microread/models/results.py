"""Result models returned by progress, rechunk, and integrity operations."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from microread.models.book import Book

IntegrityIssue = Literal[
    "count_mismatch",
    "index_gap",
    "title_non_contiguous",
    "mixed_regime_near_progress",
]


class ChapterRun(BaseModel):
    """A maximal contiguous span of chunks sharing one chapter label."""

    title: str
    chunk_ids: list[str] = Field(default_factory=list)
    chunk_indices: list[int] = Field(default_factory=list)


class ChapterSummary(ChapterRun):
    """A chapter run annotated with how much of it has been read."""

    status: Literal["read", "partial", "unread"] = "unread"
    read_count: int = 0
    total_count: int = 0


class MarkReadResult(BaseModel):
    """Outcome of marking a chunk read."""

    current_chunk_index: int
    completed: bool = False
    next_chunk_id: str | None = None


class RechunkResult(BaseModel):
    """Outcome of replacing a book's chunk set."""

    total_chunks: int
    current_chunk_index: int
    rechunk_mode: Literal["full_rebuild"] = "full_rebuild"
    progress_remapped: bool = True
    read_log_remapped: bool = True


class IntegrityReport(BaseModel):
    """Integrity findings for one book. An empty issue list means healthy."""

    book_id: str
    title: str
    chunk_size_words: int
    issues: list[IntegrityIssue] = Field(default_factory=list)


class RepairedBook(BaseModel):
    """A book that was rebuilt by the repair flow."""

    book_id: str
    title: str
    total_chunks: int
    current_chunk_index: int


class RepairReport(BaseModel):
    """Summary of an integrity scan and, unless dry run, the repairs made."""

    dry_run: bool
    checked: int
    flagged: list[IntegrityReport] = Field(default_factory=list)
    repaired: list[RepairedBook] = Field(default_factory=list)
    failed: dict[str, str] = Field(default_factory=dict)  # book id -> error message

    @property
    def flagged_count(self) -> int:
        return len(self.flagged)

    @property
    def repaired_count(self) -> int:
        return len(self.repaired)


class BookSummary(BaseModel):
    """A book with its reading progress, as shown in the library list."""

    book: Book
    progress: int = 0  # percent, rounded
    chunks_read: int = 0


class BookStats(BaseModel):
    """Reading statistics for one book."""

    chunks_read: int = 0
    words_read: int = 0
    days_active: int = 1
    estimated_completion: datetime


class BookOverview(BaseModel):
    """A book with its chapter runs and reading statistics."""

    book: Book
    chapters: list[ChapterSummary] = Field(default_factory=list)
    stats: BookStats
