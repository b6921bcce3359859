"""Data models for the Microread application."""

from microread.models.book import Book, BookStatus
from microread.models.chunk import UNTITLED_CHAPTER, Chunk, ChunkContent
from microread.models.parsed import Chapter, ParsedBook
from microread.models.reading_log import ReadingLogEntry, ReadVia
from microread.models.results import (
    BookOverview,
    BookStats,
    BookSummary,
    ChapterRun,
    ChapterSummary,
    IntegrityIssue,
    IntegrityReport,
    MarkReadResult,
    RechunkResult,
    RepairedBook,
    RepairReport,
)

__all__ = [
    "Book",
    "BookOverview",
    "BookStats",
    "BookStatus",
    "BookSummary",
    "Chapter",
    "ChapterRun",
    "ChapterSummary",
    "Chunk",
    "ChunkContent",
    "IntegrityIssue",
    "IntegrityReport",
    "MarkReadResult",
    "ParsedBook",
    "ReadVia",
    "ReadingLogEntry",
    "RechunkResult",
    "RepairReport",
    "RepairedBook",
    "UNTITLED_CHAPTER",
]
