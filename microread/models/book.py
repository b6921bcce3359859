"""Book data model."""

from datetime import datetime
from typing import Literal
from uuid import uuid4

from pydantic import BaseModel, Field

BookStatus = Literal["active", "paused", "queued", "completed"]


class Book(BaseModel):
    """A book being read chunk by chunk.

    ``current_chunk_index`` is the progress pointer: the index of the next
    chunk not yet considered read. It stays within ``[0, total_chunks]``.
    """

    id: str = Field(default_factory=lambda: str(uuid4()))
    title: str
    author: str = ""
    cover_image: str | None = None
    source_path: str
    chunk_size_words: int = 1000
    status: BookStatus = "queued"
    total_chunks: int = 0
    current_chunk_index: int = 0
    added_at: datetime = Field(default_factory=datetime.now)
    completed_at: datetime | None = None

    @property
    def is_completed(self) -> bool:
        return self.status == "completed"
