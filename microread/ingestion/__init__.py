"""Book ingestion: parsing, paragraph extraction, and chunking."""

from microread.ingestion.chunker import BookChunker, chunk_book
from microread.ingestion.markup import count_words, extract_paragraphs, strip_markup
from microread.ingestion.parser import BookParser

__all__ = [
    "BookChunker",
    "BookParser",
    "chunk_book",
    "count_words",
    "extract_paragraphs",
    "strip_markup",
]
