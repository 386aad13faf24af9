"""One-line block previews for outlines, navigation and search results.

Every block type has exactly one rule in ``_SUMMARIZERS``. Summaries are
whitespace-normalized and bounded by the display limits in settings; a
missing or wrong-typed attribute yields an empty string, never an error.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from ..settings import settings
from .attributes import (
    BookmarkAttributes,
    CalloutAttributes,
    FileAttributes,
    HeadingAttributes,
    ImageAttributes,
    ListAttributes,
    MediaAttributes,
    ToggleAttributes,
)
from .models import Block, BlockType

_WHITESPACE_RE = re.compile(r"\s+")
_HEADING_MARKER_RE = re.compile(r"^#{1,6}\s+")

ELLIPSIS = "..."


def normalize_whitespace(text: Any) -> str:
    """Collapse whitespace runs to single spaces and trim."""
    if not isinstance(text, str):
        return ""
    return _WHITESPACE_RE.sub(" ", text).strip()


def truncate(text: Any, limit: int) -> str:
    """Normalize ``text`` and shorten it to at most ``limit`` characters.

    Text over the limit is cut to ``limit - 3`` characters, trailing
    whitespace from the cut is dropped and "..." is appended.
    """
    normalized = normalize_whitespace(text)
    if len(normalized) <= limit:
        return normalized
    return normalized[: max(limit - len(ELLIPSIS), 0)].rstrip() + ELLIPSIS


def _first(candidates: Iterable[Any], limit: int) -> str:
    """Truncated form of the first candidate with visible text."""
    for candidate in candidates:
        summary = truncate(candidate, limit)
        if summary:
            return summary
    return ""


# =============================================================================
# Per-Type Rules
# =============================================================================


def _summarize_content(block: Block) -> str:
    return truncate(block.content, settings.summary_limit)


def _summarize_heading(block: Block) -> str:
    attrs = block.attributes_as(HeadingAttributes)
    level = min(max(attrs.level, 1), 6)
    text = block.content.lstrip() if isinstance(block.content, str) else ""
    # Editor-typed headings keep their "## " marker in the content
    text = truncate(_HEADING_MARKER_RE.sub("", text), settings.heading_summary_limit)
    prefix = "#" * level
    return f"{prefix} {text}"


def _summarize_list(block: Block) -> str:
    attrs = block.attributes_as(ListAttributes)
    first_item = attrs.items[0].content if attrs.items else ""
    return _first((first_item, block.content), settings.summary_limit)


def _summarize_image(block: Block) -> str:
    attrs = block.attributes_as(ImageAttributes)
    return _first((attrs.alt, block.content, attrs.src), settings.media_summary_limit)


def _media_candidates(block: Block, title: str, url: str, href: str, src: str) -> tuple[str, ...]:
    return (title, block.content, url, href, src)


def _summarize_media(block: Block) -> str:
    attrs = block.attributes_as(MediaAttributes)
    return _first(
        _media_candidates(block, attrs.title, attrs.url, "", attrs.src),
        settings.media_summary_limit,
    )


def _summarize_bookmark(block: Block) -> str:
    attrs = block.attributes_as(BookmarkAttributes)
    return _first(
        _media_candidates(block, attrs.title, attrs.url, attrs.href, ""),
        settings.media_summary_limit,
    )


def _summarize_file(block: Block) -> str:
    attrs = block.attributes_as(FileAttributes)
    return _first(
        (attrs.filename, *_media_candidates(block, attrs.title, attrs.url, attrs.href, attrs.src)),
        settings.media_summary_limit,
    )


def _summarize_callout(block: Block) -> str:
    text = _summarize_content(block)
    if text:
        return text
    tone = normalize_whitespace(block.attributes_as(CalloutAttributes).tone)
    return f"Callout ({tone})" if tone else "Callout"


def _summarize_toggle(block: Block) -> str:
    attrs = block.attributes_as(ToggleAttributes)
    return _first((attrs.summary, block.content), settings.summary_limit)


_SUMMARIZERS: dict[BlockType, Callable[[Block], str]] = {
    BlockType.PARAGRAPH: _summarize_content,
    BlockType.HEADING: _summarize_heading,
    BlockType.LIST: _summarize_list,
    BlockType.QUOTE: _summarize_content,
    BlockType.CALLOUT: _summarize_callout,
    BlockType.DIVIDER: _summarize_content,
    BlockType.SPACER: _summarize_content,
    BlockType.TOGGLE: _summarize_toggle,
    BlockType.TABLE_OF_CONTENTS: _summarize_content,
    BlockType.IMAGE: _summarize_image,
    BlockType.VIDEO: _summarize_media,
    BlockType.AUDIO: _summarize_media,
    BlockType.FILE: _summarize_file,
    BlockType.GALLERY: _summarize_content,
    BlockType.BOOKMARK: _summarize_bookmark,
    BlockType.HTML: _summarize_content,
    BlockType.CODE: _summarize_content,
    BlockType.MATH: _summarize_content,
    BlockType.TABLE: _summarize_content,
    BlockType.BOARD: _summarize_content,
    BlockType.CALENDAR: _summarize_content,
}


def summarize(block: Block | Mapping[str, Any]) -> str:
    """Get the single-line preview for a block.

    Accepts a Block or a raw block mapping. Blocks of an unregistered type
    are summarized by their content.
    """
    if isinstance(block, Mapping):
        block = Block.from_dict(block)
    rule = _summarize_content
    if isinstance(block.type, BlockType):
        rule = _SUMMARIZERS[block.type]
    return rule(block)


def summarize_all(blocks: Iterable[Block]) -> list[str]:
    """Summaries for a block sequence, in order."""
    return [summarize(block) for block in blocks]
