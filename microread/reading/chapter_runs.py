"""Chapter grouping derived from an ordered chunk list."""

from collections.abc import Iterable

from microread.models.chunk import Chunk
from microread.models.results import ChapterRun, ChapterSummary


def build_chapter_runs(chunks: Iterable[Chunk]) -> list[ChapterRun]:
    """Group index-ordered chunks into runs of equal chapter labels.

    Only adjacent chunks are grouped: a label that reappears after a
    different one starts a new run.

    Args:
        chunks: Chunks ordered by index.

    Returns:
        Chapter runs in reading order.
    """
    runs: list[ChapterRun] = []

    for chunk in chunks:
        title = chunk.chapter_label
        if runs and runs[-1].title == title:
            runs[-1].chunk_ids.append(chunk.id)
            runs[-1].chunk_indices.append(chunk.index)
            continue

        runs.append(ChapterRun(title=title, chunk_ids=[chunk.id], chunk_indices=[chunk.index]))

    return runs


def summarize_chapter_runs(
    runs: Iterable[ChapterRun], current_chunk_index: int
) -> list[ChapterSummary]:
    """Annotate chapter runs with read progress.

    A chunk counts as read when its index is below the progress pointer.
    """
    summaries: list[ChapterSummary] = []
    for run in runs:
        read_count = sum(1 for index in run.chunk_indices if index < current_chunk_index)
        total_count = len(run.chunk_indices)
        if total_count and read_count == total_count:
            status = "read"
        elif read_count > 0:
            status = "partial"
        else:
            status = "unread"
        summaries.append(
            ChapterSummary(
                **run.model_dump(),
                status=status,
                read_count=read_count,
                total_count=total_count,
            )
        )
    return summaries
