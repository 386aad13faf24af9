"""Data models for the block-based content system.

This module defines the block tree used by the page/article editor: the
closed set of block types, the Block node and the Document that holds the
root blocks of one page.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .attributes import (
    A,
    AttributeValue,
    BlockAttributes,
    BookmarkAttributes,
    CalloutAttributes,
    CodeAttributes,
    FileAttributes,
    GalleryAttributes,
    HeadingAttributes,
    ImageAttributes,
    ListAttributes,
    MediaAttributes,
    SpacerAttributes,
    TableAttributes,
    TableOfContentsAttributes,
    ToggleAttributes,
)


class BlockType(str, Enum):
    """Supported block types.

    Values match the editor's JSON so stored documents load unchanged.
    """

    # Basic
    PARAGRAPH = "paragraph"
    HEADING = "heading"
    LIST = "list"
    QUOTE = "quote"
    CALLOUT = "callout"

    # Layout
    DIVIDER = "divider"
    SPACER = "spacer"
    TOGGLE = "toggle"
    TABLE_OF_CONTENTS = "tableOfContents"

    # Media
    IMAGE = "image"
    VIDEO = "video"
    AUDIO = "audio"
    FILE = "file"
    GALLERY = "gallery"

    # Embed
    BOOKMARK = "bookmark"
    HTML = "html"

    # Advanced
    CODE = "code"
    MATH = "math"

    # Database
    TABLE = "table"
    BOARD = "board"
    CALENDAR = "calendar"


# Block types that support nesting children
NESTABLE_TYPES = frozenset({
    BlockType.TOGGLE,
})


# Attribute structure for each block type; types not listed use BlockAttributes
ATTRIBUTE_TYPES: dict[BlockType, type[BlockAttributes]] = {
    BlockType.HEADING: HeadingAttributes,
    BlockType.LIST: ListAttributes,
    BlockType.CALLOUT: CalloutAttributes,
    BlockType.SPACER: SpacerAttributes,
    BlockType.TOGGLE: ToggleAttributes,
    BlockType.TABLE_OF_CONTENTS: TableOfContentsAttributes,
    BlockType.IMAGE: ImageAttributes,
    BlockType.VIDEO: MediaAttributes,
    BlockType.AUDIO: MediaAttributes,
    BlockType.FILE: FileAttributes,
    BlockType.GALLERY: GalleryAttributes,
    BlockType.BOOKMARK: BookmarkAttributes,
    BlockType.CODE: CodeAttributes,
    BlockType.TABLE: TableAttributes,
}


def coerce_block_type(value: Any) -> BlockType | str:
    """Return the BlockType for a known tag, or the raw value unchanged."""
    if isinstance(value, BlockType):
        return value
    try:
        return BlockType(value)
    except ValueError:
        return value


def attributes_class(block_type: BlockType | str) -> type[BlockAttributes]:
    """Get the attribute structure for a block type."""
    if isinstance(block_type, BlockType):
        return ATTRIBUTE_TYPES.get(block_type, BlockAttributes)
    return BlockAttributes


@dataclass
class Block:
    """A content block in the page editor.

    Blocks form a tree: toggles hold nested blocks in ``children``. The
    inline text of a block is kept as markdown in ``content``; type-specific
    data lives in ``attributes``.

    ``type`` is a BlockType for every registered tag. Blocks loaded from
    untrusted data may carry an unknown raw string until the validator
    removes them.
    """

    id: str
    type: BlockType | str
    content: str = ""
    attributes: BlockAttributes = field(default_factory=BlockAttributes)
    children: list[Block] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.type = coerce_block_type(self.type)
        if isinstance(self.attributes, Mapping):
            self.attributes = attributes_class(self.type).from_mapping(self.attributes)

    @property
    def type_value(self) -> str:
        """The wire value of the block type."""
        return self.type.value if isinstance(self.type, BlockType) else str(self.type)

    def attributes_as(self, cls: type[A]) -> A:
        """Get the attributes as ``cls``, converting if they were built for another type."""
        if isinstance(self.attributes, cls):
            return self.attributes
        return cls.from_mapping(self.attributes.to_mapping())

    def to_dict(self, include_children: bool = True) -> dict[str, AttributeValue]:
        """Convert to dictionary for JSON serialization."""
        result: dict[str, AttributeValue] = {
            "id": self.id,
            "type": self.type_value,
            "content": self.content,
            "attributes": self.attributes.to_mapping(),
        }
        if include_children and self.children:
            result["children"] = [child.to_dict() for child in self.children]
        return result

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Block:
        """Create from dictionary.

        Never raises for malformed content: a missing id becomes an empty
        string and an unknown type stays a raw string, so the validator can
        decide what to keep.
        """
        block_id = data.get("id")
        content = data.get("content")
        raw_children = data.get("children")
        block_type = coerce_block_type(data.get("type", ""))
        return cls(
            id=block_id if isinstance(block_id, str) else "",
            type=block_type,
            content=content if isinstance(content, str) else "",
            attributes=attributes_class(block_type).from_mapping(data.get("attributes")),
            children=[
                cls.from_dict(child)
                for child in (raw_children if isinstance(raw_children, list) else [])
                if isinstance(child, Mapping)
            ],
        )

    def is_nestable(self) -> bool:
        """Check if this block type supports children."""
        return self.type in NESTABLE_TYPES

    def has_children(self) -> bool:
        """Check if this block has any nested blocks."""
        return len(self.children) > 0


@dataclass
class Document:
    """Ordered root blocks of one page or article."""

    blocks: list[Block] = field(default_factory=list)

    def __iter__(self) -> Iterator[Block]:
        return iter(self.blocks)

    def __len__(self) -> int:
        return len(self.blocks)

    def __getitem__(self, index: int) -> Block:
        return self.blocks[index]

    def block_ids(self) -> list[str]:
        """All block ids, depth-first."""
        ids: list[str] = []
        stack = list(reversed(self.blocks))
        while stack:
            block = stack.pop()
            ids.append(block.id)
            stack.extend(reversed(block.children))
        return ids

    def to_list(self) -> list[dict[str, AttributeValue]]:
        """Convert to a JSON-compatible list of block dicts."""
        return [block.to_dict() for block in self.blocks]

    @classmethod
    def from_list(cls, data: Any) -> Document:
        """Create from a list of block dicts; non-dict entries are skipped."""
        if not isinstance(data, list):
            return cls()
        return cls(blocks=[Block.from_dict(item) for item in data if isinstance(item, Mapping)])
