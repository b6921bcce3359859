"""Exception hierarchy for chunking, progress tracking, and rechunking.

Callers can catch :class:`MicroreadError` for any failure raised by this
package, or the builtin bases (``ValueError``, ``LookupError``) the concrete
classes also derive from.
"""

__all__ = [
    "MicroreadError",
    "InvalidChunkSizeError",
    "InvalidStatusTransitionError",
    "BookNotFoundError",
    "ChunkNotFoundError",
    "SourceUnavailableError",
    "UnsupportedFormatError",
]


class MicroreadError(Exception):
    """Base exception for Microread failures."""


class InvalidChunkSizeError(MicroreadError, ValueError):
    """Raised when a target chunk size is outside the allowed bounds."""


class InvalidStatusTransitionError(MicroreadError, ValueError):
    """Raised when a book cannot move to the requested status."""


class BookNotFoundError(MicroreadError, LookupError):
    """Raised when a book id does not resolve."""

    def __init__(self, book_id: str) -> None:
        super().__init__(f"Book not found: {book_id}")
        self.book_id = book_id


class ChunkNotFoundError(MicroreadError, LookupError):
    """Raised when a chunk id (or book/index pair) does not resolve."""

    def __init__(self, chunk_ref: str) -> None:
        super().__init__(f"Chunk not found: {chunk_ref}")
        self.chunk_ref = chunk_ref


class SourceUnavailableError(MicroreadError):
    """Raised when a book's source content cannot be re-acquired."""

    def __init__(self, book_id: str, reason: str) -> None:
        super().__init__(f"Source unavailable for book {book_id}: {reason}")
        self.book_id = book_id


class UnsupportedFormatError(MicroreadError, ValueError):
    """Raised when a source document has an unsupported file extension."""
