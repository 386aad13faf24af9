"""Outline, table of contents, excerpt and reading statistics for a Document."""

from __future__ import annotations

import math
import re
from collections.abc import Iterator
from dataclasses import dataclass, field

from ..errors import ValidationError
from .attributes import HeadingAttributes, ListAttributes, ListItem, TableAttributes, ToggleAttributes
from .inline import plain_text
from .models import Block, BlockType, Document
from .summarizer import summarize
from .tree import iter_blocks

WORDS_PER_MINUTE = 200
EXCERPT_LENGTH = 200

# Blocks whose content is prose; code, math, raw html and media are not counted
PROSE_TYPES = frozenset({
    BlockType.PARAGRAPH,
    BlockType.HEADING,
    BlockType.QUOTE,
    BlockType.CALLOUT,
})


@dataclass(frozen=True)
class OutlineEntry:
    """One heading in a table of contents.

    ``children`` holds the deeper headings under it in the tree form
    returned by toc_tree(); it stays empty in the flat list.
    """

    block_id: str
    level: int
    title: str
    anchor: str
    children: list[OutlineEntry] = field(default_factory=list)


@dataclass(frozen=True)
class OutlineItem:
    """One block in the navigation outline."""

    block_id: str
    type: str
    depth: int
    summary: str


def slugify(text: str) -> str:
    """Convert text to a URL-safe slug."""
    slug = text.lower().strip()
    slug = re.sub(r"[^\w\s-]", "", slug)
    slug = re.sub(r"[\s_-]+", "-", slug).strip("-")
    return slug[:50]  # Limit length


def _unique(base: str, used: set[str]) -> str:
    anchor = base
    suffix = 2
    while anchor in used:
        anchor = f"{base}-{suffix}"
        suffix += 1
    used.add(anchor)
    return anchor


def table_of_contents(document: Document, max_level: int = 3) -> list[OutlineEntry]:
    """List the document's headings down to max_level.

    Titles are the heading text with inline markup removed. Anchors are
    slugs, unique within the document: a repeated title gets ``-2``,
    ``-3``... Anchors are assigned over all headings, so an anchor does not
    change with max_level.

    Raises:
        ValidationError: If max_level is not between 1 and 6.
    """
    if isinstance(max_level, bool) or not isinstance(max_level, int) or not 1 <= max_level <= 6:
        raise ValidationError(
            "max_level must be between 1 and 6",
            field="max_level",
            value=max_level,
        )

    entries = []
    used: set[str] = set()
    for block, _ in iter_blocks(document):
        if block.type is not BlockType.HEADING:
            continue
        title = plain_text(block.content)
        if not title:
            continue
        level = min(max(block.attributes_as(HeadingAttributes).level, 1), 6)
        anchor = _unique(slugify(title) or "section", used)
        if level <= max_level:
            entries.append(OutlineEntry(block.id, level, title, anchor))
    return entries


def toc_tree(document: Document, max_level: int = 3) -> list[OutlineEntry]:
    """Nest the table of contents by heading level.

    Each heading becomes a child of the closest earlier heading with a lower
    level; a heading with no such parent is a root. Skipped levels are fine:
    an H4 right after an H2 is the H2's child.
    """
    roots: list[OutlineEntry] = []
    stack: list[OutlineEntry] = []
    for entry in table_of_contents(document, max_level):
        while stack and stack[-1].level >= entry.level:
            stack.pop()
        (stack[-1].children if stack else roots).append(entry)
        stack.append(entry)
    return roots


def outline(document: Document) -> list[OutlineItem]:
    """Summarize every block for the navigation panel, depth-first."""
    return [
        OutlineItem(block.id, block.type_value, depth, summarize(block))
        for block, depth in iter_blocks(document)
    ]


# =============================================================================
# Reading Statistics
# =============================================================================


def _item_texts(items: list[ListItem]) -> Iterator[str]:
    for item in items:
        yield item.content
        yield from _item_texts(item.children)


def _block_texts(block: Block) -> Iterator[str]:
    if block.type in PROSE_TYPES:
        yield block.content
    elif block.type is BlockType.LIST:
        attrs = block.attributes_as(ListAttributes)
        yield from _item_texts(attrs.items) if attrs.items else [block.content]
    elif block.type is BlockType.TOGGLE:
        yield block.attributes_as(ToggleAttributes).summary
    elif block.type is BlockType.TABLE:
        attrs = block.attributes_as(TableAttributes)
        yield from attrs.header
        for row in attrs.rows:
            yield from row


def word_count(document: Document) -> int:
    """Count the words of visible prose, ignoring markup."""
    count = 0
    for block, _ in iter_blocks(document):
        for text in _block_texts(block):
            count += sum(len(plain_text(line).split()) for line in text.split("\n"))
    return count


def reading_time(document: Document, words_per_minute: int = WORDS_PER_MINUTE) -> int:
    """Estimated reading time in whole minutes, rounded up."""
    if words_per_minute <= 0:
        raise ValidationError(
            "words_per_minute must be positive",
            field="words_per_minute",
            value=words_per_minute,
        )
    return math.ceil(word_count(document) / words_per_minute)


# =============================================================================
# Excerpt
# =============================================================================

_INLINE_CODE_RE = re.compile(r"`[^`]*`")
_IMAGE_RE = re.compile(r"!\[[^\]]*\]\([^)]*\)")
_LINK_RE = re.compile(r"\[[^\]]*\]\([^)]*\)")
_FORMATTING_RE = re.compile(r"[#*_~`]")


def _excerpt_text(text: str) -> str:
    text = _INLINE_CODE_RE.sub("", text)
    text = _IMAGE_RE.sub("", text)
    text = _LINK_RE.sub("", text)
    return _FORMATTING_RE.sub("", text)


def excerpt(document: Document, max_length: int = EXCERPT_LENGTH) -> str:
    """Preview text for article listings.

    Takes the prose of the document in order, drops code, images and links,
    strips emphasis markers and collapses whitespace. Longer text is cut at
    the last space within max_length and gets a trailing "...".

    Raises:
        ValidationError: If max_length is not a positive integer.
    """
    if isinstance(max_length, bool) or not isinstance(max_length, int) or max_length <= 0:
        raise ValidationError(
            "max_length must be a positive integer",
            field="max_length",
            value=max_length,
        )

    parts = [
        _excerpt_text(text)
        for block, _ in iter_blocks(document)
        for text in _block_texts(block)
    ]
    text = " ".join(" ".join(parts).split())
    if len(text) <= max_length:
        return text

    truncated = text[:max_length]
    last_space = truncated.rfind(" ")
    if last_space > 0:
        truncated = truncated[:last_space]
    return truncated + "..."
