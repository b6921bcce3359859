"""Word-offset geometry for translating positions between chunk sequences.

Chunk ids and indices change on every rebuild, but the cumulative word
offset of any point in the book does not. Old positions are translated to
new ones by comparing the ``[start, end)`` word ranges each chunk occupies.
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from microread.models.chunk import Chunk


@dataclass(frozen=True)
class ChunkRange:
    """The half-open span of book words a chunk covers."""

    id: str
    index: int
    word_count: int
    start: int
    end: int

    def overlap(self, other: "ChunkRange") -> int:
        """Number of words shared with another range."""
        return max(0, min(self.end, other.end) - max(self.start, other.start))


def build_ranges(chunks: Iterable[Chunk]) -> list[ChunkRange]:
    """Lay chunks end to end by index and record each one's word span.

    Negative word counts are treated as zero.
    """
    ranges: list[ChunkRange] = []
    cursor = 0
    for chunk in sorted(chunks, key=lambda c: c.index):
        start = cursor
        cursor = start + max(0, chunk.word_count)
        ranges.append(
            ChunkRange(
                id=chunk.id,
                index=chunk.index,
                word_count=chunk.word_count,
                start=start,
                end=cursor,
            )
        )
    return ranges


def words_before_index(ranges: Sequence[ChunkRange], current_chunk_index: int) -> int:
    """Total words in chunks below the progress pointer."""
    words = 0
    for chunk_range in ranges:
        if chunk_range.index >= current_chunk_index:
            break
        words += chunk_range.word_count
    return words


def map_progress(ranges: Sequence[ChunkRange], words_read: int) -> int:
    """Find the progress pointer that covers ``words_read`` words.

    The pointer advances past every range that ends at or before
    ``words_read`` and stops at the first range that is not fully
    consumed.

    Returns:
        A pointer in ``[0, len(ranges)]``.
    """
    if not ranges:
        return 0

    index = 0
    for chunk_range in ranges:
        if chunk_range.end > words_read:
            break
        index = chunk_range.index + 1
    return min(max(index, 0), len(ranges))


def find_range_for_offset(ranges: Sequence[ChunkRange], offset: float) -> ChunkRange:
    """Return the range containing a word offset, or the last range past the end.

    Raises:
        ValueError: If ``ranges`` is empty.
    """
    if not ranges:
        raise ValueError("Cannot map an offset without ranges")

    for chunk_range in ranges:
        if offset < chunk_range.end:
            return chunk_range
    return ranges[-1]


def map_chunk_ids(
    old_ranges: Sequence[ChunkRange], new_ranges: Sequence[ChunkRange]
) -> dict[str, str]:
    """Assign every old chunk id to the new chunk it overlaps most.

    Ties go to the earliest new chunk. An old chunk that overlaps nothing
    (an empty chunk, or one past the end of a shorter new sequence) maps to
    the new chunk containing its midpoint.

    Returns:
        Mapping of old chunk id to new chunk id; empty when there are no
        new chunks.
    """
    mapped: dict[str, str] = {}
    if not new_ranges:
        return mapped

    for old_range in old_ranges:
        best: ChunkRange | None = None
        best_overlap = -1
        for new_range in new_ranges:
            score = old_range.overlap(new_range)
            if score > best_overlap:
                best_overlap = score
                best = new_range

        if best is not None and best_overlap > 0:
            mapped[old_range.id] = best.id
            continue

        midpoint = old_range.start + old_range.word_count / 2
        mapped[old_range.id] = find_range_for_offset(new_ranges, midpoint).id

    return mapped
