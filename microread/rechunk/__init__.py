"""Rechunking: offset remapping, full rebuilds, and integrity checks."""

from microread.rechunk.integrity import analyze_integrity, find_issues, repair_books
from microread.rechunk.rechunker import Rechunker, remap_book_state
from microread.rechunk.remap import (
    ChunkRange,
    build_ranges,
    map_chunk_ids,
    map_progress,
    words_before_index,
)

__all__ = [
    "ChunkRange",
    "Rechunker",
    "analyze_integrity",
    "build_ranges",
    "find_issues",
    "map_chunk_ids",
    "map_progress",
    "remap_book_state",
    "repair_books",
    "words_before_index",
]
