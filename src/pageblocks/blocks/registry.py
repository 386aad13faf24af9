"""Block type registry.

The registry is the single source of truth for which block variants exist
and how the insertion menu describes them. It is built once at import and
never mutated, so it can be shared freely between threads.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from ..errors import UnknownBlockTypeError
from .models import BlockType


class BlockGroup(str, Enum):
    """Sections of the block insertion menu."""

    BASIC = "basic"
    MEDIA = "media"
    ADVANCED = "advanced"
    DATABASE = "database"
    EMBED = "embed"
    LAYOUT = "layout"


@dataclass(frozen=True)
class BlockDefinition:
    """Editing metadata for one block type."""

    type: BlockType
    label: str
    description: str
    icon: str
    group: BlockGroup
    keywords: tuple[str, ...] = ()
    shortcut: str | None = None

    def matches(self, term: str) -> bool:
        """Case-insensitive substring match on label, description and keywords."""
        needle = term.casefold()
        if needle in self.label.casefold() or needle in self.description.casefold():
            return True
        return any(needle in keyword.casefold() for keyword in self.keywords)


DEFAULT_DEFINITIONS: tuple[BlockDefinition, ...] = (
    # Basic
    BlockDefinition(
        BlockType.PARAGRAPH, "Text", "Plain paragraph text", "notes", BlockGroup.BASIC,
        ("paragraph", "text", "plain"),
    ),
    BlockDefinition(
        BlockType.HEADING, "Heading", "Section heading, levels 1 to 6", "title", BlockGroup.BASIC,
        ("heading", "title", "h1", "h2", "h3", "section"), "#",
    ),
    BlockDefinition(
        BlockType.LIST, "List", "Bulleted, numbered or to-do list", "format_list_bulleted",
        BlockGroup.BASIC, ("list", "bullet", "numbered", "todo", "checkbox", "task"), "-",
    ),
    BlockDefinition(
        BlockType.QUOTE, "Quote", "Quoted passage", "format_quote", BlockGroup.BASIC,
        ("quote", "blockquote", "citation"), ">",
    ),
    BlockDefinition(
        BlockType.CALLOUT, "Callout", "Highlighted note, tip or warning", "lightbulb",
        BlockGroup.BASIC, ("callout", "note", "tip", "warning", "alert", "info"), "> [!NOTE]",
    ),
    # Layout
    BlockDefinition(
        BlockType.DIVIDER, "Divider", "Horizontal rule between sections", "horizontal_rule",
        BlockGroup.LAYOUT, ("divider", "separator", "hr", "rule", "line"), "---",
    ),
    BlockDefinition(
        BlockType.SPACER, "Spacer", "Vertical whitespace", "height", BlockGroup.LAYOUT,
        ("spacer", "space", "gap", "margin"),
    ),
    BlockDefinition(
        BlockType.TOGGLE, "Toggle", "Collapsible section with nested blocks", "expand_more",
        BlockGroup.LAYOUT, ("toggle", "collapse", "details", "accordion", "fold"), "<details>",
    ),
    BlockDefinition(
        BlockType.TABLE_OF_CONTENTS, "Table of contents", "Outline of the page headings", "toc",
        BlockGroup.LAYOUT, ("toc", "contents", "outline", "index"), "[TOC]",
    ),
    # Media
    BlockDefinition(
        BlockType.IMAGE, "Image", "Picture with alt text and caption", "image", BlockGroup.MEDIA,
        ("image", "picture", "photo", "img"), "![]()",
    ),
    BlockDefinition(
        BlockType.VIDEO, "Video", "Embedded video file or stream", "movie", BlockGroup.MEDIA,
        ("video", "movie", "clip", "youtube", "vimeo"),
    ),
    BlockDefinition(
        BlockType.AUDIO, "Audio", "Embedded audio player", "audiotrack", BlockGroup.MEDIA,
        ("audio", "sound", "music", "podcast"),
    ),
    BlockDefinition(
        BlockType.FILE, "File", "Downloadable attachment", "attach_file", BlockGroup.MEDIA,
        ("file", "attachment", "download", "pdf"),
    ),
    BlockDefinition(
        BlockType.GALLERY, "Gallery", "Grid of images", "photo_library", BlockGroup.MEDIA,
        ("gallery", "grid", "images", "photos"),
    ),
    # Embed
    BlockDefinition(
        BlockType.BOOKMARK, "Web bookmark", "Link preview card", "bookmark", BlockGroup.EMBED,
        ("bookmark", "link", "url", "embed", "preview"),
    ),
    BlockDefinition(
        BlockType.HTML, "Custom HTML", "Raw markup inserted as-is", "code_blocks", BlockGroup.EMBED,
        ("html", "markup", "embed", "iframe", "custom"),
    ),
    # Advanced
    BlockDefinition(
        BlockType.CODE, "Code", "Code snippet with syntax language", "code", BlockGroup.ADVANCED,
        ("code", "snippet", "program", "syntax"), "```",
    ),
    BlockDefinition(
        BlockType.MATH, "Math", "TeX formula block", "functions", BlockGroup.ADVANCED,
        ("math", "equation", "formula", "latex", "tex"), "$$",
    ),
    # Database
    BlockDefinition(
        BlockType.TABLE, "Table", "Rows and columns of text", "table_chart", BlockGroup.DATABASE,
        ("table", "grid", "rows", "columns", "spreadsheet"), "|",
    ),
    BlockDefinition(
        BlockType.BOARD, "Board", "Kanban board of cards", "view_kanban", BlockGroup.DATABASE,
        ("board", "kanban", "cards", "columns"),
    ),
    BlockDefinition(
        BlockType.CALENDAR, "Calendar", "Entries laid out by date", "calendar_month",
        BlockGroup.DATABASE, ("calendar", "date", "schedule", "events"),
    ),
)


class BlockRegistry:
    """Read-only catalog of block definitions.

    Lookups never raise; unknown input yields None or an empty list.
    """

    def __init__(self, definitions: Iterable[BlockDefinition]) -> None:
        self._definitions: tuple[BlockDefinition, ...] = tuple(definitions)
        self._by_type: dict[str, BlockDefinition] = {
            definition.type.value: definition for definition in self._definitions
        }

    def __contains__(self, block_type: object) -> bool:
        return self.find(block_type) is not None

    def __len__(self) -> int:
        return len(self._definitions)

    def definitions(self, group: BlockGroup | str | None = None) -> list[BlockDefinition]:
        """List definitions in menu order, optionally limited to one group."""
        if group is None:
            return list(self._definitions)
        group_value = group.value if isinstance(group, BlockGroup) else group
        return [d for d in self._definitions if d.group.value == group_value]

    def find(self, block_type: Any) -> BlockDefinition | None:
        """Get the definition for a block type (enum or wire value)."""
        key = block_type.value if isinstance(block_type, BlockType) else block_type
        if not isinstance(key, str):
            return None
        return self._by_type.get(key)

    def require(self, block_type: Any) -> BlockDefinition:
        """Get the definition for a block type.

        Raises:
            UnknownBlockTypeError: If the type is not registered.
        """
        definition = self.find(block_type)
        if definition is None:
            raise UnknownBlockTypeError(block_type)
        return definition

    def search(self, keyword: str | None) -> list[BlockDefinition]:
        """Find definitions whose label, description or keywords contain ``keyword``."""
        if not isinstance(keyword, str) or not keyword.strip():
            return self.definitions()
        term = keyword.strip()
        return [d for d in self._definitions if d.matches(term)]


# Process-wide registry, built once at import
REGISTRY = BlockRegistry(DEFAULT_DEFINITIONS)


def definitions(group: BlockGroup | str | None = None) -> list[BlockDefinition]:
    """List registered block definitions (see BlockRegistry.definitions)."""
    return REGISTRY.definitions(group)


def find(block_type: Any) -> BlockDefinition | None:
    """Look up a block definition (see BlockRegistry.find)."""
    return REGISTRY.find(block_type)


def search(keyword: str | None) -> list[BlockDefinition]:
    """Search block definitions (see BlockRegistry.search)."""
    return REGISTRY.search(keyword)
