"""Read-only integrity checks over stored chunk sets, and the repair flow.

The checks catch chunk sets that drifted from what the rest of the package
assumes: stale totals, index holes, chapters split by a rebuild from a
different chunking algorithm, and chunk sizes changed without remapping.
"""

import logging
import sqlite3
from collections.abc import Sequence

from microread.config import IntegrityConfig
from microread.errors import MicroreadError
from microread.models.book import Book
from microread.models.chunk import Chunk
from microread.models.results import IntegrityIssue, IntegrityReport, RepairedBook, RepairReport
from microread.rechunk.rechunker import Rechunker
from microread.storage.repository import Repository

logger = logging.getLogger(__name__)


def has_index_gaps(chunks: Sequence[Chunk]) -> bool:
    """True when sorted indices are not exactly ``0..n-1``."""
    indices = sorted(chunk.index for chunk in chunks)
    return any(index != position for position, index in enumerate(indices))


def has_non_contiguous_titles(
    chunks: Sequence[Chunk], current_chunk_index: int, lookahead: int
) -> bool:
    """True when a chapter label reappears after a different label.

    Only chunks up to ``lookahead`` indices past the pointer are checked;
    far-off unread tails often hold samples or previews that reuse titles.
    """
    seen: set[str] = set()
    previous: str | None = None

    for chunk in sorted(chunks, key=lambda c: c.index):
        if chunk.index > current_chunk_index + lookahead:
            break
        title = chunk.chapter_label
        if title == previous:
            continue
        if title in seen:
            return True
        seen.add(title)
        previous = title

    return False


def has_mixed_regime(
    chunks: Sequence[Chunk], current_chunk_index: int, config: IntegrityConfig
) -> bool:
    """True when chunk sizes just before and after the pointer disagree.

    A ratio of average word counts at or above ``regime_ratio`` suggests the
    chunk size changed without a full rebuild.
    """
    if len(chunks) < config.regime_min_chunks:
        return False

    window = config.regime_window
    lower = max(0, current_chunk_index - window)
    before = [c.word_count for c in chunks if lower <= c.index < current_chunk_index]
    after = [
        c.word_count
        for c in chunks
        if current_chunk_index < c.index <= current_chunk_index + window
    ]

    if len(before) < config.regime_min_samples or len(after) < config.regime_min_samples:
        return False

    avg_before = sum(before) / len(before)
    avg_after = sum(after) / len(after)
    ratio = max(avg_before, avg_after) / max(1, min(avg_before, avg_after))
    return ratio >= config.regime_ratio


def find_issues(
    book: Book, chunks: Sequence[Chunk], config: IntegrityConfig
) -> list[IntegrityIssue]:
    """Run every check against a book and its stored chunks."""
    issues: list[IntegrityIssue] = []

    if len(chunks) != book.total_chunks:
        issues.append("count_mismatch")
    if has_index_gaps(chunks):
        issues.append("index_gap")
    if has_non_contiguous_titles(chunks, book.current_chunk_index, config.lookahead):
        issues.append("title_non_contiguous")
    if has_mixed_regime(chunks, book.current_chunk_index, config):
        issues.append("mixed_regime_near_progress")

    return issues


def analyze_integrity(
    conn: sqlite3.Connection, book_id: str, config: IntegrityConfig | None = None
) -> IntegrityReport:
    """Inspect one book's stored chunk set. Nothing is modified.

    Raises:
        BookNotFoundError: If the book does not exist.
    """
    repo = Repository(conn)
    book = repo.require_book(book_id)
    chunks = repo.list_chunks(book_id)

    return IntegrityReport(
        book_id=book.id,
        title=book.title,
        chunk_size_words=book.chunk_size_words,
        issues=find_issues(book, chunks, config or IntegrityConfig()),
    )


def repair_books(
    conn: sqlite3.Connection,
    rechunker: Rechunker,
    book_id: str | None = None,
    dry_run: bool = True,
    limit: int | None = None,
    config: IntegrityConfig | None = None,
) -> RepairReport:
    """Find books with integrity issues and rebuild them at their current size.

    Args:
        conn: An open connection.
        rechunker: Used to rebuild flagged books.
        book_id: Check only this book. Defaults to every book.
        dry_run: Only report flagged books.
        limit: Check at most this many books (ignored unless positive).
        config: Integrity thresholds.

    Returns:
        The number of books checked, the flagged reports, and the repairs.
        Books whose rebuild fails are listed in ``failed``.

    Raises:
        BookNotFoundError: If ``book_id`` is given and does not exist.
    """
    repo = Repository(conn)
    if book_id is not None:
        candidates = [repo.require_book(book_id)]
    else:
        candidates = repo.list_books()
    if limit is not None and limit > 0:
        candidates = candidates[:limit]

    reports = [analyze_integrity(conn, book.id, config) for book in candidates]
    flagged = [report for report in reports if report.issues]
    for report in flagged:
        logger.warning("Book %s has integrity issues: %s", report.book_id, ", ".join(report.issues))

    result = RepairReport(dry_run=dry_run, checked=len(candidates), flagged=flagged)
    if dry_run:
        return result

    for report in flagged:
        try:
            rechunked = rechunker.rechunk(report.book_id, report.chunk_size_words)
        except MicroreadError as exc:
            logger.error("Repair failed for book %s: %s", report.book_id, exc)
            result.failed[report.book_id] = str(exc)
            continue
        result.repaired.append(
            RepairedBook(
                book_id=report.book_id,
                title=report.title,
                total_chunks=rechunked.total_chunks,
                current_chunk_index=rechunked.current_chunk_index,
            )
        )

    logger.info(
        "Repair checked %d books, flagged %d, repaired %d",
        result.checked,
        result.flagged_count,
        result.repaired_count,
    )
    return result
