"""Reading progress and chapter views."""

from microread.reading.chapter_runs import build_chapter_runs, summarize_chapter_runs
from microread.reading.progress import (
    ProgressTracker,
    apply_read,
    apply_restart,
    apply_unread,
)

__all__ = [
    "ProgressTracker",
    "apply_read",
    "apply_restart",
    "apply_unread",
    "build_chapter_runs",
    "summarize_chapter_runs",
]
