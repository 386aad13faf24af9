"""Block construction helpers for the editor.

New blocks get a registry-checked type, default attributes for that type and
a fresh id. normalize_block_content() applies the editor's markdown
shortcuts: typing "## " into a paragraph turns it into a heading, and so on.
"""

from __future__ import annotations

import copy
import itertools
import re
from collections.abc import Callable
from typing import Any
from uuid import uuid4

from ..errors import ValidationError
from ..settings import settings
from .attributes import (
    BlockAttributes,
    CalloutAttributes,
    HeadingAttributes,
    ListAttributes,
    ListItem,
    ListKind,
)
from .models import Block, BlockType, attributes_class
from .registry import REGISTRY

IdFactory = Callable[[], str]


def new_block_id(prefix: str | None = None) -> str:
    """Generate a new unique block ID with prefix."""
    return f"{prefix or settings.block_id_prefix}-{uuid4().hex[:12]}"


def sequential_id_factory(prefix: str | None = None) -> IdFactory:
    """Id factory producing ``<prefix>-1``, ``<prefix>-2``...

    Useful where the same markdown must always produce the same ids.
    """
    counter = itertools.count(1)
    base = prefix or settings.block_id_prefix
    return lambda: f"{base}-{next(counter)}"


def create_block(
    block_type: BlockType | str,
    content: str = "",
    *,
    block_id: str | None = None,
    children: list[Block] | None = None,
    **attributes: Any,
) -> Block:
    """Create a new block of a registered type.

    Args:
        block_type: Block type (enum member or wire value such as "heading").
        content: Inline markdown content.
        block_id: Explicit id; generated when omitted.
        children: Nested blocks (toggles).
        **attributes: Type-specific attributes using their wire names.

    Returns:
        The new Block.

    Raises:
        UnknownBlockTypeError: If the type is not registered.
    """
    definition = REGISTRY.require(block_type)
    return Block(
        id=block_id or new_block_id(),
        type=definition.type,
        content=content,
        attributes=attributes_class(definition.type).from_mapping(attributes),
        children=list(children or []),
    )


def convert_block(block: Block, new_type: BlockType | str) -> Block:
    """Change a block's type, keeping its id, content and children.

    The attributes are reset to the defaults of the new type.

    Raises:
        UnknownBlockTypeError: If the new type is not registered.
    """
    definition = REGISTRY.require(new_type)
    return Block(
        id=block.id,
        type=definition.type,
        content=block.content,
        attributes=attributes_class(definition.type)(),
        children=list(block.children),
    )


def duplicate_block(block: Block, id_factory: IdFactory | None = None) -> Block:
    """Deep copy a block, giving it and all its descendants fresh ids."""
    make_id = id_factory or new_block_id
    clone = copy.deepcopy(block)
    stack = [clone]
    while stack:
        current = stack.pop()
        current.id = make_id()
        if isinstance(current.attributes, ListAttributes):
            _refresh_item_ids(current.attributes.items, make_id)
        stack.extend(current.children)
    return clone


def _refresh_item_ids(items: list[ListItem], make_id: IdFactory) -> None:
    # Items without an id stay without one
    for item in items:
        if item.id:
            item.id = make_id()
        _refresh_item_ids(item.children, make_id)


# =============================================================================
# Markdown Shortcuts
# =============================================================================

SHORTCUT_HEADING_RE = re.compile(r"^(#{1,6})\s+(?=\S)")
SHORTCUT_TODO_RE = re.compile(r"^\[([ xX])\]\s+(.*)$", re.DOTALL)
SHORTCUT_BULLET_RE = re.compile(r"^[-*+]\s+(.*)$", re.DOTALL)
SHORTCUT_ORDERED_RE = re.compile(r"^(\d{1,9})\.\s+(.*)$", re.DOTALL)
SHORTCUT_DIVIDER_RE = re.compile(r"^---+$")
SHORTCUT_CALLOUT_RE = re.compile(
    r"^>\s*\[!(NOTE|WARNING|CALLOUT|TIP|CAUTION|IMPORTANT)\][ \t]*\n?(.*)$",
    re.IGNORECASE | re.DOTALL,
)
SHORTCUT_QUOTE_RE = re.compile(r"^>\s+(.*)$", re.DOTALL)
HEADING_MARKER_RE = re.compile(r"^\s*(#{1,6})\s+")


def _retyped(
    block: Block,
    block_type: BlockType,
    content: str,
    attributes: BlockAttributes | None = None,
) -> Block:
    return Block(
        id=block.id,
        type=block_type,
        content=content,
        attributes=attributes if attributes is not None else attributes_class(block_type)(),
        children=list(block.children),
    )


def normalize_block_content(block: Block, content: str) -> Block:
    """Apply edited text to a block, converting it when it uses a shortcut.

    ``content`` is the raw text from the editor. Paragraphs convert on a
    leading marker:

    - ``# `` to ``###### `` -> heading of that level
    - ``[ ] `` / ``[x] `` -> todo list
    - ``- ``, ``* ``, ``+ `` -> bulleted list
    - ``1. `` -> numbered list starting at that number
    - ``---`` -> divider
    - ``> [!NOTE]`` (or WARNING, TIP, CAUTION, IMPORTANT, CALLOUT) -> callout
    - ``> `` -> quote

    A heading keeps its type while its text starts with ``#`` markers (the
    level follows them) and reverts to a paragraph otherwise. Other block
    types only take the new content. Non-breaking spaces count as spaces.
    The block keeps its id and children; the input block is not modified.

    Raises:
        ValidationError: If content is not a string.
    """
    if not isinstance(content, str):
        raise ValidationError("content must be a string", field="content", value=content, constraint="str")
    text = content.replace("\u00a0", " ")

    if block.type is BlockType.PARAGRAPH:
        return _transform_paragraph(block, text)

    if block.type is BlockType.HEADING:
        marker = HEADING_MARKER_RE.match(text)
        if marker:
            return _retyped(
                block,
                BlockType.HEADING,
                text[marker.end() :],
                HeadingAttributes(level=len(marker.group(1))),
            )
        return _retyped(block, BlockType.PARAGRAPH, text)

    clone = copy.deepcopy(block)
    clone.content = text
    return clone


def _transform_paragraph(block: Block, content: str) -> Block:
    trimmed = content.lstrip()
    if not trimmed:
        return _retyped(block, BlockType.PARAGRAPH, "")

    match = SHORTCUT_HEADING_RE.match(trimmed)
    if match:
        return _retyped(
            block,
            BlockType.HEADING,
            trimmed[match.end() :],
            HeadingAttributes(level=len(match.group(1))),
        )

    match = SHORTCUT_TODO_RE.match(trimmed)
    if match:
        attrs = ListAttributes(kind=ListKind.TODO, checked=match.group(1) != " ")
        return _retyped(block, BlockType.LIST, match.group(2), attrs)

    match = SHORTCUT_BULLET_RE.match(trimmed)
    if match:
        return _retyped(block, BlockType.LIST, match.group(1), ListAttributes(kind=ListKind.UNORDERED))

    match = SHORTCUT_ORDERED_RE.match(trimmed)
    if match:
        start = int(match.group(1)) or 1
        attrs = ListAttributes(kind=ListKind.ORDERED, start=start)
        return _retyped(block, BlockType.LIST, match.group(2), attrs)

    if SHORTCUT_DIVIDER_RE.match(trimmed):
        return _retyped(block, BlockType.DIVIDER, "")

    match = SHORTCUT_CALLOUT_RE.match(content)
    if match:
        attrs = CalloutAttributes(tone=match.group(1).lower())
        return _retyped(block, BlockType.CALLOUT, match.group(2), attrs)

    match = SHORTCUT_QUOTE_RE.match(trimmed)
    if match:
        return _retyped(block, BlockType.QUOTE, match.group(1))

    return _retyped(block, BlockType.PARAGRAPH, content)
