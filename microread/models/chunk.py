"""Chunk data models."""

from uuid import uuid4

from pydantic import BaseModel, Field

UNTITLED_CHAPTER = "Untitled"


class ChunkContent(BaseModel):
    """A chunk produced by the chunking engine, before it is persisted."""

    chapter_title: str
    content_html: str
    content_text: str
    word_count: int


class Chunk(BaseModel):
    """A persisted chunk of a book, addressed by its zero-based index."""

    id: str = Field(default_factory=lambda: str(uuid4()))
    book_id: str
    index: int
    chapter_title: str | None = None
    content_html: str
    content_text: str
    word_count: int = 0
    ai_recap: str | None = None

    @property
    def chapter_label(self) -> str:
        """The chapter title, or the sentinel label when it is missing."""
        return self.chapter_title if self.chapter_title is not None else UNTITLED_CHAPTER

    @classmethod
    def from_content(cls, content: ChunkContent, book_id: str, index: int) -> "Chunk":
        """Assign a fresh id and position to a chunk produced by the engine."""
        return cls(
            book_id=book_id,
            index=index,
            chapter_title=content.chapter_title,
            content_html=content.content_html,
            content_text=content.content_text,
            word_count=content.word_count,
        )
