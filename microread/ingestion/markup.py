"""Paragraph extraction and canonical word counting for chapter markup.

Every word count compared anywhere in the package (chunk packing, progress
statistics, offset remapping, integrity checks) goes through
:func:`count_words`, so counts stay comparable across components.
"""

import re
import warnings

from bs4 import BeautifulSoup, MarkupResemblesLocatorWarning

# Closed <p>...</p> spans, matched lazily; bare <p> openers alone do not count
PARAGRAPH = re.compile(r"<p[\s>][\s\S]*?</p>", re.IGNORECASE)
BLANK_LINE = re.compile(r"\n\s*\n")
BLOCK_ELEMENT_START = re.compile(r"^<(?:p|div|blockquote|h[1-6])[\s>]", re.IGNORECASE)


def strip_markup(markup: str) -> str:
    """Remove all tags from a markup string and return its plain text.

    Args:
        markup: HTML/XHTML fragment or plain text.

    Returns:
        The text content with leading and trailing whitespace trimmed.
    """
    if not markup or not markup.strip():
        return ""
    # Short plain-text paragraphs can look like file names to BeautifulSoup
    with warnings.catch_warnings():
        warnings.simplefilter("ignore", MarkupResemblesLocatorWarning)
        soup = BeautifulSoup(markup, "lxml")
    return soup.get_text().strip()


def count_words(markup: str) -> int:
    """Count whitespace-separated words in a markup string after stripping tags.

    Args:
        markup: HTML/XHTML fragment or plain text.

    Returns:
        Number of words.
    """
    return len(strip_markup(markup).split())


def extract_paragraphs(markup: str) -> list[str]:
    """Split one chapter's markup into paragraph units.

    Uses closed ``<p>...</p>`` spans when the chapter has any, keeping each
    span exactly as it appears in the source. Otherwise splits on blank
    lines and wraps each block in ``<p>`` unless it already starts with a
    block-level element. Units without words are dropped.

    Args:
        markup: The chapter markup.

    Returns:
        Ordered paragraph markup strings, each with at least one word.
    """
    if not markup or not markup.strip():
        return []

    spans = PARAGRAPH.findall(markup)
    if spans:
        units = (span.strip() for span in spans)
        return [unit for unit in units if count_words(unit) > 0]

    paragraphs: list[str] = []
    for block in BLANK_LINE.split(markup):
        block = block.strip()
        if count_words(block) == 0:
            continue
        if BLOCK_ELEMENT_START.match(block):
            paragraphs.append(block)
        else:
            paragraphs.append(f"<p>{block}</p>")
    return paragraphs
