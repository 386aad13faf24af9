"""Parse Markdown into blocks.

The scanner groups the lines of a document into spans; this module folds
each span into Block objects. A span that matches no construct becomes a
paragraph holding its source lines unchanged, so parsing never loses text.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from typing import Any

from ..errors import ConversionError, ValidationError
from .attributes import (
    CalloutAttributes,
    CodeAttributes,
    HeadingAttributes,
    ImageAttributes,
    ListAttributes,
    ListItem,
    ListKind,
    TableAttributes,
    TableOfContentsAttributes,
    ToggleAttributes,
)
from .factory import IdFactory, new_block_id
from .inline import parse_image
from .models import Block, BlockType, Document
from .scanner import (
    FENCE_RE,
    HEADING_RE,
    LIST_ITEM_RE,
    TOGGLE_OPEN_RE,
    Span,
    SpanKind,
    scan,
    split_table_row,
)
from .validator import validate, validate_document

logger = logging.getLogger(__name__)

QUOTE_PREFIX_RE = re.compile(r"^ {0,3}> ?")
CALLOUT_MARKER_RE = re.compile(r"^\[!([A-Za-z][\w-]*)\][ \t]*(.*)$")
CHECKBOX_RE = re.compile(r"^\[([ xX])\](?:[ \t]+(.*))?$")
SUMMARY_RE = re.compile(r"^\s*<summary>(.*)</summary>\s*$", re.IGNORECASE)
TOC_RE = re.compile(r"^\s*\[TOC\]\s*$", re.IGNORECASE)
HTML_BLOCK_RE = re.compile(
    r"^ {0,3}<(?:!--|/?(?:address|article|aside|audio|blockquote|center|dd|div|dl|dt"
    r"|fieldset|figcaption|figure|footer|form|h[1-6]|header|hr|iframe|li|main|nav"
    r"|ol|p|picture|pre|script|section|style|svg|table|tbody|td|tfoot|th|thead|tr"
    r"|ul|video)\b)",
    re.IGNORECASE,
)

# Indentation that nests a list item under the previous one
NEST_INDENT = 2


def parse(markdown: str | bytes, *, id_factory: IdFactory | None = None) -> Document:
    """Parse Markdown text into a Document.

    Args:
        markdown: The Markdown text to parse (bytes are decoded as UTF-8).
        id_factory: Callable returning a new block id for each block.
            Defaults to new_block_id().

    Returns:
        Document with the parsed root blocks in source order.

    Raises:
        ValidationError: If markdown is not text.
        ConversionError: If markdown bytes are not valid UTF-8.
    """
    text = _coerce_text(markdown)
    # Ids must be unique across the tree, whatever the id factory returns
    report = validate_document(Document(blocks=_parse_blocks(text, id_factory or new_block_id)))
    if report.dropped:
        logger.warning("Dropped %d parsed blocks with a repeated id", report.dropped_count)
    blocks = report.blocks
    logger.debug("Parsed %d root blocks from %d lines", len(blocks), text.count("\n") + 1)
    return Document(blocks=blocks)


def _coerce_text(markdown: Any) -> str:
    if isinstance(markdown, bytes):
        try:
            markdown = markdown.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise ConversionError(
                f"Markdown is not valid UTF-8: {e.reason}",
                direction="parse",
            ) from e
    if not isinstance(markdown, str):
        raise ValidationError(
            "markdown must be a string",
            field="markdown",
            value=markdown,
            constraint="str",
        )
    return markdown.replace("\r\n", "\n").replace("\r", "\n")


def _parse_blocks(text: str, make_id: IdFactory) -> list[Block]:
    blocks: list[Block] = []
    for span in scan(text):
        blocks.extend(_FOLDERS[span.kind](span, make_id))
    return validate(blocks)


# =============================================================================
# Span Folders
# =============================================================================


def _fold_text(span: Span, make_id: IdFactory) -> list[Block]:
    """Convert a plain text span.

    A lone ``[TOC]`` or image line gets its own block type, a span opening
    with a block-level HTML tag becomes an html block; anything else is a
    paragraph with the lines exactly as written.
    """
    if len(span.lines) == 1:
        line = span.lines[0]
        if TOC_RE.match(line):
            return [
                Block(
                    id=make_id(),
                    type=BlockType.TABLE_OF_CONTENTS,
                    attributes=TableOfContentsAttributes(),
                )
            ]
        image = parse_image(line)
        if image is not None:
            return [
                Block(
                    id=make_id(),
                    type=BlockType.IMAGE,
                    attributes=ImageAttributes(src=image.src, alt=image.alt, title=image.title),
                )
            ]

    if HTML_BLOCK_RE.match(span.lines[0]):
        return [Block(id=make_id(), type=BlockType.HTML, content=span.text)]
    return [Block(id=make_id(), type=BlockType.PARAGRAPH, content=span.text)]


def _fold_heading(span: Span, make_id: IdFactory) -> list[Block]:
    match = HEADING_RE.match(span.lines[0])
    assert match is not None
    return [
        Block(
            id=make_id(),
            type=BlockType.HEADING,
            content=match.group(2) or "",
            attributes=HeadingAttributes(level=len(match.group(1))),
        )
    ]


def _fold_rule(span: Span, make_id: IdFactory) -> list[Block]:
    return [Block(id=make_id(), type=BlockType.DIVIDER)]


def _fold_quote(span: Span, make_id: IdFactory) -> list[Block]:
    """Convert a block quote, or a callout when it opens with ``[!TONE]``."""
    lines = [QUOTE_PREFIX_RE.sub("", line, count=1) for line in span.lines]
    marker = CALLOUT_MARKER_RE.match(lines[0])
    if marker is None:
        return [Block(id=make_id(), type=BlockType.QUOTE, content="\n".join(lines))]

    body = lines[1:]
    if marker.group(2):
        body.insert(0, marker.group(2))
    return [
        Block(
            id=make_id(),
            type=BlockType.CALLOUT,
            content="\n".join(body),
            attributes=CalloutAttributes(tone=marker.group(1).lower()),
        )
    ]


def _fence_body(span: Span) -> list[str]:
    """Lines between the fences, dedented by the opening fence's indent."""
    opener = span.lines[0]
    indent = len(opener) - len(opener.lstrip(" "))
    body = span.lines[1:-1] if span.closed else span.lines[1:]
    return [_dedent(line, indent) for line in body]


def _dedent(line: str, width: int) -> str:
    stripped = line.lstrip(" ")
    removed = min(len(line) - len(stripped), width)
    return line[removed:]


def _fold_fence(span: Span, make_id: IdFactory) -> list[Block]:
    match = FENCE_RE.match(span.lines[0])
    assert match is not None
    info = match.group(2).split(None, 1)
    attrs = CodeAttributes(language=info[0] if info else "")
    if len(info) > 1:
        attrs.extra["meta"] = info[1].strip()
    if not span.closed:
        logger.debug("Unclosed code fence at line %d runs to end of input", span.start_line)
    return [
        Block(
            id=make_id(),
            type=BlockType.CODE,
            content="\n".join(_fence_body(span)),
            attributes=attrs,
        )
    ]


def _fold_math(span: Span, make_id: IdFactory) -> list[Block]:
    return [Block(id=make_id(), type=BlockType.MATH, content="\n".join(_fence_body(span)))]


def _item_kind(marker: str, checked: bool | None) -> ListKind:
    if checked is not None:
        return ListKind.TODO
    if marker[0].isdigit():
        return ListKind.ORDERED
    return ListKind.UNORDERED


def _fold_list(span: Span, make_id: IdFactory) -> list[Block]:
    """Convert a run of list lines.

    Items indented at least two columns past the previous item nest under
    it. Non-item lines continue the most recent item. A change of marker
    kind among top-level items starts a new list block.
    """
    blocks: list[Block] = []
    current: ListAttributes | None = None
    stack: list[tuple[int, ListItem]] = []
    last_item: ListItem | None = None

    for raw in span.lines:
        line = raw.expandtabs(4)
        match = LIST_ITEM_RE.match(line)
        if match is None:
            if last_item is not None:
                last_item.content += "\n" + line.strip()
            continue

        indent = len(match.group(1))
        marker = match.group(2)
        text = match.group(3) or ""
        checked = None
        checkbox = CHECKBOX_RE.match(text)
        if checkbox:
            checked = checkbox.group(1) != " "
            text = checkbox.group(2) or ""
        item = ListItem(content=text, checked=checked)

        while stack and indent < stack[-1][0] + NEST_INDENT:
            stack.pop()
        if stack:
            stack[-1][1].children.append(item)
        else:
            kind = _item_kind(marker, checked)
            if current is None or current.kind is not kind:
                start = int(marker[:-1]) if kind is ListKind.ORDERED else 1
                current = ListAttributes(kind=kind, start=start)
                blocks.append(Block(id=make_id(), type=BlockType.LIST, attributes=current))
            current.items.append(item)

        stack.append((indent, item))
        last_item = item

    return blocks


def _alignment(cell: str) -> str | None:
    if cell.startswith(":") and cell.endswith(":"):
        return "center"
    if cell.startswith(":"):
        return "left"
    if cell.endswith(":"):
        return "right"
    return None


def _fold_table(span: Span, make_id: IdFactory) -> list[Block]:
    header = split_table_row(span.lines[0])
    align = [_alignment(cell) for cell in split_table_row(span.lines[1])]
    rows = []
    for line in span.lines[2:]:
        cells = split_table_row(line)
        # Short rows are padded; extra cells are kept
        cells.extend([""] * (len(header) - len(cells)))
        rows.append(cells)
    return [
        Block(
            id=make_id(),
            type=BlockType.TABLE,
            attributes=TableAttributes(header=header, rows=rows, align=align),
        )
    ]


def _fold_toggle(span: Span, make_id: IdFactory) -> list[Block]:
    """Convert ``<details>`` ... ``</details>``; the inner markdown becomes children."""
    opener = TOGGLE_OPEN_RE.match(span.lines[0])
    assert opener is not None
    block_id = make_id()
    inner = span.lines[1:-1] if span.closed else span.lines[1:]

    summary = ""
    for index, line in enumerate(inner):
        if not line.strip():
            continue
        match = SUMMARY_RE.match(line)
        if match:
            summary = match.group(1).strip()
            inner = inner[index + 1 :]
        break

    return [
        Block(
            id=block_id,
            type=BlockType.TOGGLE,
            attributes=ToggleAttributes(summary=summary, open=opener.group(1) is not None),
            children=_parse_blocks("\n".join(inner), make_id),
        )
    ]


_FOLDERS: dict[SpanKind, Callable[[Span, IdFactory], list[Block]]] = {
    SpanKind.TEXT: _fold_text,
    SpanKind.HEADING: _fold_heading,
    SpanKind.RULE: _fold_rule,
    SpanKind.QUOTE: _fold_quote,
    SpanKind.FENCE: _fold_fence,
    SpanKind.MATH: _fold_math,
    SpanKind.LIST: _fold_list,
    SpanKind.TABLE: _fold_table,
    SpanKind.TOGGLE: _fold_toggle,
}
