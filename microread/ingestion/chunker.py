"""Paragraph-preserving chunker that packs chapters into word-bounded chunks."""

import logging
from collections.abc import Sequence

from microread.config import ChunkingConfig
from microread.errors import InvalidChunkSizeError
from microread.ingestion.markup import count_words, extract_paragraphs, strip_markup
from microread.models.chunk import ChunkContent
from microread.models.parsed import Chapter

logger = logging.getLogger(__name__)

DEFAULT_MAX_RATIO = 1.2
DEFAULT_FLUSH_RATIO = 0.6


def join_paragraphs(paragraphs: Sequence[str], chapter_title: str) -> ChunkContent:
    """Build a chunk from whole paragraph units.

    Args:
        paragraphs: Paragraph markup strings, in reading order.
        chapter_title: Title of the chapter active when the chunk closed.

    Returns:
        ChunkContent with markup, plain text, and word count derived from
        the joined markup.
    """
    content_html = "\n".join(paragraphs)
    return ChunkContent(
        chapter_title=chapter_title,
        content_html=content_html,
        content_text=strip_markup(content_html),
        word_count=count_words(content_html),
    )


def chunk_book(
    chapters: Sequence[Chapter],
    target_words: int,
    max_ratio: float = DEFAULT_MAX_RATIO,
    flush_ratio: float = DEFAULT_FLUSH_RATIO,
) -> list[ChunkContent]:
    """Split a book's chapters into chunks of roughly ``target_words`` words.

    Rules:
    - Paragraphs are never split.
    - If adding a paragraph would push the buffer past ``max_ratio`` of the
      target and the buffer already has words, the buffer is flushed first.
    - At the end of a chapter the buffer is flushed once it holds at least
      ``flush_ratio`` of the target; otherwise it carries into the next
      chapter.
    - Whatever remains after the last chapter becomes the final chunk.

    Args:
        chapters: Chapters in reading order.
        target_words: Target words per chunk. Must be positive.
        max_ratio: Upper bound multiplier on the target.
        flush_ratio: Chapter-end flush threshold multiplier.

    Returns:
        Chunks in reading order.

    Raises:
        InvalidChunkSizeError: If target_words is not positive.
    """
    if target_words <= 0:
        raise InvalidChunkSizeError(f"target_words must be positive, got {target_words}")

    chunks: list[ChunkContent] = []
    buffer: list[str] = []
    buffer_words = 0
    chapter_title = ""

    for chapter in chapters:
        chapter_title = chapter.title

        for paragraph in extract_paragraphs(chapter.html):
            words = count_words(paragraph)

            if buffer_words + words > target_words * max_ratio and buffer_words > 0:
                chunks.append(join_paragraphs(buffer, chapter_title))
                buffer = [paragraph]
                buffer_words = words
            else:
                buffer.append(paragraph)
                buffer_words += words

        # Chapter ends are preferred chunk boundaries
        if buffer_words >= target_words * flush_ratio:
            chunks.append(join_paragraphs(buffer, chapter_title))
            buffer = []
            buffer_words = 0

    if buffer:
        chunks.append(join_paragraphs(buffer, chapter_title))

    return chunks


class BookChunker:
    """Chunks chapters using the ratios from a ChunkingConfig.

    Args:
        config: ChunkingConfig with default size, bounds, and ratios.
    """

    def __init__(self, config: ChunkingConfig) -> None:
        self._config = config

    @property
    def config(self) -> ChunkingConfig:
        return self._config

    def chunk(
        self, chapters: Sequence[Chapter], target_words: int | None = None
    ) -> list[ChunkContent]:
        """Split chapters into chunks.

        Args:
            chapters: Chapters in reading order.
            target_words: Target words per chunk. Defaults to the configured
                default chunk size.

        Returns:
            Chunks in reading order.
        """
        target = self._config.default_chunk_size if target_words is None else target_words
        chunks = chunk_book(
            chapters,
            target,
            max_ratio=self._config.max_ratio,
            flush_ratio=self._config.flush_ratio,
        )
        logger.debug(
            "Chunked %d chapters into %d chunks (target %d words)",
            len(chapters),
            len(chunks),
            target,
        )
        return chunks
