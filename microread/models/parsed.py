"""Parsed book data models produced by the chapter source."""

from pydantic import BaseModel, Field


class Chapter(BaseModel):
    """One chapter of source content, in reading order."""

    title: str
    html: str


class ParsedBook(BaseModel):
    """The result of parsing a source document.

    Chapters keep their markup so the chunker can split on paragraph
    elements and preserve inline formatting.
    """

    title: str
    author: str = ""
    chapters: list[Chapter] = Field(default_factory=list)
    source_path: str
    file_format: str  # "epub", "html", "txt"
