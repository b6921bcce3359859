"""Reading log data model."""

from datetime import datetime
from typing import Literal
from uuid import uuid4

from pydantic import BaseModel, Field

ReadVia = Literal["email_link", "web_app", "manual_trigger"]


class ReadingLogEntry(BaseModel):
    """One delivery or read event for a chunk.

    ``book_id`` duplicates the chunk's book so entries can be cleared per
    book without a join.
    """

    id: str = Field(default_factory=lambda: str(uuid4()))
    chunk_id: str
    book_id: str
    sent_at: datetime | None = None
    read_at: datetime | None = None
    read_via: ReadVia | None = None
