"""Render blocks to Markdown.

This module converts a Document back to Markdown text for storage. Output
parses back to the same blocks. Block types that have no markdown syntax of
their own are written in a portable form (a link, an image line, raw text)
and come back as those simpler blocks.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable

from ..errors import ValidationError
from ..settings import settings
from .attributes import (
    BookmarkAttributes,
    CalloutAttributes,
    CodeAttributes,
    FileAttributes,
    GalleryAttributes,
    HeadingAttributes,
    ImageAttributes,
    ListAttributes,
    ListItem,
    ListKind,
    MediaAttributes,
    TableAttributes,
    ToggleAttributes,
)
from .inline import format_image, format_link
from .models import Block, BlockType, Document
from .scanner import RULE_RE

TONE_RE = re.compile(r"^[A-Za-z][\w-]*$")
_UNESCAPED_PIPE_RE = re.compile(r"(?<!\\)\|")

# Longest ordinal a list marker may carry
MAX_ORDINAL = 999_999_999

# Continuation lines of a list item sit this far past the item's marker
CONTINUATION_INDENT = 4

DEFAULT_TONE = "note"


def serialize(document: Document | Iterable[Block]) -> str:
    """Render a document to Markdown.

    Args:
        document: A Document or a sequence of root blocks.

    Returns:
        Markdown text: blocks separated by one blank line, ending with a
        single newline. An empty document gives an empty string.

    Raises:
        ValidationError: If document is not a Document or block sequence.
    """
    if isinstance(document, Document):
        blocks = document.blocks
    elif isinstance(document, (list, tuple)):
        blocks = list(document)
    else:
        raise ValidationError(
            "document must be a Document or a list of blocks",
            field="document",
            value=document,
            constraint="Document",
        )
    markdown = _render_blocks(blocks)
    return f"{markdown}\n" if markdown else ""


def _render_blocks(blocks: Iterable[Block]) -> str:
    parts = []
    for block in blocks:
        rendered = _render_block(block)
        if rendered.strip():
            parts.append(rendered)
        # Only toggles have a markdown form for nesting; other children follow the block
        if block.children and block.type is not BlockType.TOGGLE:
            nested = _render_blocks(block.children)
            if nested:
                parts.append(nested)
    return "\n\n".join(parts)


def _render_block(block: Block) -> str:
    """Render a single block to Markdown."""
    renderer = _render_text
    if isinstance(block.type, BlockType):
        renderer = _RENDERERS[block.type]
    return renderer(block)


# =============================================================================
# Text Blocks
# =============================================================================


def _render_text(block: Block) -> str:
    """Paragraphs and raw blocks: the content as written."""
    return block.content if isinstance(block.content, str) else ""


def _render_heading(block: Block) -> str:
    level = min(max(block.attributes_as(HeadingAttributes).level, 1), 6)
    text = block.content.replace("\n", " ").strip()
    prefix = "#" * level
    return f"{prefix} {text}" if text else prefix


def _quote_lines(lines: Iterable[str]) -> str:
    return "\n".join(f"> {line}" if line else ">" for line in lines)


def _render_quote(block: Block) -> str:
    return _quote_lines(block.content.split("\n"))


def _render_callout(block: Block) -> str:
    """Render a callout as a ``> [!TONE]`` quote."""
    tone = block.attributes_as(CalloutAttributes).tone.strip()
    if not TONE_RE.match(tone):
        tone = DEFAULT_TONE
    lines = [f"[!{tone.upper()}]"]
    if block.content:
        lines.extend(block.content.split("\n"))
    return _quote_lines(lines)


def _render_divider(block: Block) -> str:
    return "---"


def _render_spacer(block: Block) -> str:
    return ""


def _render_table_of_contents(block: Block) -> str:
    return "[TOC]"


# =============================================================================
# Lists
# =============================================================================


def _render_list(block: Block) -> str:
    attrs = block.attributes_as(ListAttributes)
    # Editor-created list blocks hold their single item in the block content
    items = attrs.items or [ListItem(content=block.content, checked=attrs.checked)]
    lines: list[str] = []
    _render_items(items, attrs, 0, lines)
    return "\n".join(lines)


def _render_items(items: list[ListItem], attrs: ListAttributes, depth: int, lines: list[str]) -> None:
    indent = " " * (depth * settings.list_indent)
    start = attrs.start if depth == 0 else 1

    for number, item in enumerate(items, start=start):
        marker = f"{min(number, MAX_ORDINAL)}." if attrs.kind is ListKind.ORDERED else "-"
        checked = item.checked
        if checked is None and depth == 0 and attrs.kind is ListKind.TODO:
            checked = False
        if checked is not None:
            marker += " [x]" if checked else " [ ]"

        first, *rest = item.content.split("\n")
        line = f"{indent}{marker} {first}" if first else f"{indent}{marker}"
        if RULE_RE.match(line):
            # "- --" would read as a thematic break
            line = line.replace("-", "*", 1)
        lines.append(line)

        continuation = " " * (len(indent) + CONTINUATION_INDENT)
        lines.extend(continuation + extra.strip() for extra in rest if extra.strip())
        _render_items(item.children, attrs, depth + 1, lines)


# =============================================================================
# Code
# =============================================================================


def _fence_for(content: str, char: str) -> str:
    longest = max((len(run) for run in re.findall(re.escape(char) + "+", content)), default=0)
    return char * max(3, longest + 1)


def _render_code(block: Block) -> str:
    attrs = block.attributes_as(CodeAttributes)
    meta = attrs.extra.get("meta")
    info = " ".join(part for part in (attrs.language, meta if isinstance(meta, str) else "") if part)
    # Backtick fences cannot carry backticks in their info string
    fence = _fence_for(block.content, "~" if "`" in info else "`")
    if block.content:
        return f"{fence}{info}\n{block.content}\n{fence}"
    return f"{fence}{info}\n{fence}"


def _render_math(block: Block) -> str:
    if block.content:
        return f"$$\n{block.content}\n$$"
    return "$$\n$$"


# =============================================================================
# Tables
# =============================================================================


def _escape_cell(cell: str) -> str:
    return _UNESCAPED_PIPE_RE.sub(r"\\|", cell.replace("\n", "<br>")).strip()


def _table_row(cells: Iterable[str]) -> str:
    return "| " + " | ".join(_escape_cell(cell) for cell in cells) + " |"


def _delimiter(align: str | None) -> str:
    return {"left": ":---", "center": ":---:", "right": "---:"}.get(align or "", "---")


def _render_table(block: Block) -> str:
    attrs = block.attributes_as(TableAttributes)
    width = len(attrs.header) or max((len(row) for row in attrs.rows), default=0)
    if width == 0:
        return _render_text(block)

    header = attrs.header or [""] * width
    align = [attrs.align[i] if i < len(attrs.align) else None for i in range(width)]
    lines = [_table_row(header), "| " + " | ".join(_delimiter(a) for a in align) + " |"]
    for row in attrs.rows:
        lines.append(_table_row(list(row) + [""] * (width - len(row))))
    return "\n".join(lines)


# =============================================================================
# Toggles
# =============================================================================


def _render_toggle(block: Block) -> str:
    """Render ``<details>`` with the summary line and the nested blocks."""
    attrs = block.attributes_as(ToggleAttributes)
    lines = ["<details open>" if attrs.open else "<details>"]
    summary = " ".join(attrs.summary.split())
    if summary:
        lines.append(f"<summary>{summary}</summary>")

    parts = [block.content, _render_blocks(block.children)]
    body = "\n\n".join(part for part in parts if part.strip())
    if body:
        lines.extend(["", body, ""])
    lines.append("</details>")
    return "\n".join(lines)


# =============================================================================
# Media
# =============================================================================


def _with_caption(line: str, block: Block) -> str:
    if block.content.strip():
        return f"{line}\n\n{block.content}"
    return line


def _link_or_text(label: str, url: str, block: Block) -> str:
    if not url:
        return _render_text(block)
    return format_link(label.strip() or url, url)


def _render_image(block: Block) -> str:
    attrs = block.attributes_as(ImageAttributes)
    return _with_caption(format_image(attrs.src, attrs.alt, attrs.title), block)


def _render_media(block: Block) -> str:
    attrs = block.attributes_as(MediaAttributes)
    return _link_or_text(attrs.title or block.content, attrs.src or attrs.url, block)


def _render_file(block: Block) -> str:
    attrs = block.attributes_as(FileAttributes)
    label = attrs.label or attrs.filename or attrs.title or block.content
    return _link_or_text(label, attrs.href or attrs.src or attrs.url, block)


def _render_bookmark(block: Block) -> str:
    attrs = block.attributes_as(BookmarkAttributes)
    return _link_or_text(attrs.title or block.content, attrs.url or attrs.href, block)


def _render_gallery(block: Block) -> str:
    attrs = block.attributes_as(GalleryAttributes)
    lines = [format_image(image.src, image.alt) for image in attrs.images if image.src]
    if block.content.strip():
        lines.append(block.content)
    return "\n\n".join(lines)


_RENDERERS: dict[BlockType, Callable[[Block], str]] = {
    BlockType.PARAGRAPH: _render_text,
    BlockType.HEADING: _render_heading,
    BlockType.LIST: _render_list,
    BlockType.QUOTE: _render_quote,
    BlockType.CALLOUT: _render_callout,
    BlockType.DIVIDER: _render_divider,
    BlockType.SPACER: _render_spacer,
    BlockType.TOGGLE: _render_toggle,
    BlockType.TABLE_OF_CONTENTS: _render_table_of_contents,
    BlockType.IMAGE: _render_image,
    BlockType.VIDEO: _render_media,
    BlockType.AUDIO: _render_media,
    BlockType.FILE: _render_file,
    BlockType.GALLERY: _render_gallery,
    BlockType.BOOKMARK: _render_bookmark,
    BlockType.HTML: _render_text,
    BlockType.CODE: _render_code,
    BlockType.MATH: _render_math,
    BlockType.TABLE: _render_table,
    BlockType.BOARD: _render_text,
    BlockType.CALENDAR: _render_text,
}
