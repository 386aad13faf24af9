"""Typed per-variant block attributes.

Each block type carries its own attribute dataclass. At the JSON boundary an
attribute structure is read from and written to a plain mapping whose values
are limited to AttributeValue. Reading never raises: a value of the wrong
shape falls back to the field default, and keys the structure does not know
are kept in ``extra`` so they survive a load/dump cycle.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, TypeVar, Union

# Closed value union used only at the serialization boundary
AttributeValue = Union[
    str, int, float, bool, None, list["AttributeValue"], dict[str, "AttributeValue"]
]

A = TypeVar("A", bound="BlockAttributes")


# =============================================================================
# Coercion Helpers
# =============================================================================


def _as_str(value: Any, default: str = "") -> str:
    return value if isinstance(value, str) else default


def _as_int(value: Any, default: int) -> int:
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return default
    return default


def _as_optional_int(value: Any) -> int | None:
    if value is None:
        return None
    result = _as_int(value, -1)
    return result if result >= 0 else None


def _as_bool(value: Any, default: bool = False) -> bool:
    return value if isinstance(value, bool) else default


def _as_optional_bool(value: Any) -> bool | None:
    return value if isinstance(value, bool) else None


def _as_str_list(value: Any) -> list[str]:
    if not isinstance(value, (list, tuple)):
        return []
    return [item if isinstance(item, str) else str(item) for item in value if item is not None]


def _clean_extra(data: Mapping[Any, Any], known: frozenset[str]) -> dict[str, AttributeValue]:
    return {k: v for k, v in data.items() if isinstance(k, str) and k not in known}


# =============================================================================
# Base
# =============================================================================


@dataclass
class BlockAttributes:
    """Attributes shared by every variant: only the passthrough bag.

    Paragraph, quote, divider, html, math, board and calendar blocks use this
    class directly.
    """

    extra: dict[str, AttributeValue] = field(default_factory=dict)

    KEYS: ClassVar[frozenset[str]] = frozenset()

    @classmethod
    def from_mapping(cls: type[A], data: Any) -> A:
        """Build from a loosely-typed mapping; never raises."""
        if not isinstance(data, Mapping):
            data = {}
        values = cls._load(data)
        return cls(extra=_clean_extra(data, cls.KEYS), **values)

    @classmethod
    def _load(cls, data: Mapping[str, Any]) -> dict[str, Any]:
        return {}

    def _dump(self) -> dict[str, AttributeValue]:
        return {}

    def to_mapping(self) -> dict[str, AttributeValue]:
        """Convert to a JSON-compatible mapping."""
        result: dict[str, AttributeValue] = dict(self.extra)
        result.update(self._dump())
        return result


# =============================================================================
# Text Variants
# =============================================================================


@dataclass
class HeadingAttributes(BlockAttributes):
    level: int = 2

    KEYS: ClassVar[frozenset[str]] = frozenset({"level"})

    @classmethod
    def _load(cls, data: Mapping[str, Any]) -> dict[str, Any]:
        return {"level": _as_int(data.get("level"), 2)}

    def _dump(self) -> dict[str, AttributeValue]:
        return {"level": self.level}


class ListKind(str, Enum):
    """Marker style of a list block."""

    UNORDERED = "unordered"
    ORDERED = "ordered"
    TODO = "todo"


@dataclass
class ListItem:
    """One entry of a list block.

    ``checked`` is None for plain items and a bool for todo items.
    """

    content: str = ""
    checked: bool | None = None
    children: list[ListItem] = field(default_factory=list)
    id: str | None = None

    def to_dict(self) -> dict[str, AttributeValue]:
        """Convert to dictionary for JSON serialization."""
        result: dict[str, AttributeValue] = {"content": self.content}
        if self.id:
            result["id"] = self.id
        if self.checked is not None:
            result["checked"] = self.checked
        if self.children:
            result["children"] = [child.to_dict() for child in self.children]
        return result

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ListItem:
        """Create from dictionary."""
        return cls(
            content=_as_str(data.get("content")),
            checked=_as_optional_bool(data.get("checked")),
            children=_load_list_items(data.get("children")),
            id=data.get("id") if isinstance(data.get("id"), str) else None,
        )


def _load_list_items(value: Any) -> list[ListItem]:
    """Read list items, skipping entries that are not item objects."""
    if not isinstance(value, (list, tuple)):
        return []
    return [
        ListItem.from_dict(item)
        for item in value
        if isinstance(item, Mapping) and "content" in item
    ]


@dataclass
class ListAttributes(BlockAttributes):
    """List block attributes.

    ``checked`` applies to a single-line list block created in the editor,
    where the item text lives in the block content and ``items`` is empty.
    """

    kind: ListKind = ListKind.UNORDERED
    items: list[ListItem] = field(default_factory=list)
    start: int = 1
    checked: bool | None = None

    KEYS: ClassVar[frozenset[str]] = frozenset({"kind", "items", "start", "order", "ordered", "checked"})

    @classmethod
    def _load(cls, data: Mapping[str, Any]) -> dict[str, Any]:
        raw_kind = data.get("kind")
        if raw_kind in {kind.value for kind in ListKind}:
            kind = ListKind(raw_kind)
        elif data.get("ordered") is True:
            kind = ListKind.ORDERED
        elif "checked" in data:
            kind = ListKind.TODO
        else:
            kind = ListKind.UNORDERED
        start = _as_int(data.get("start", data.get("order")), 1)
        return {
            "kind": kind,
            "items": _load_list_items(data.get("items")),
            "start": start if start >= 0 else 1,
            "checked": _as_optional_bool(data.get("checked")),
        }

    def _dump(self) -> dict[str, AttributeValue]:
        result: dict[str, AttributeValue] = {
            "kind": self.kind.value,
            "ordered": self.kind is ListKind.ORDERED,
            "items": [item.to_dict() for item in self.items],
        }
        if self.kind is ListKind.ORDERED:
            result["start"] = self.start
        if self.checked is not None:
            result["checked"] = self.checked
        return result


@dataclass
class CalloutAttributes(BlockAttributes):
    tone: str = ""
    icon: str = ""

    KEYS: ClassVar[frozenset[str]] = frozenset({"tone", "type", "icon"})

    @classmethod
    def _load(cls, data: Mapping[str, Any]) -> dict[str, Any]:
        # "type" is the older name for the tone
        tone = _as_str(data.get("tone")) or _as_str(data.get("type"))
        return {"tone": tone, "icon": _as_str(data.get("icon"))}

    def _dump(self) -> dict[str, AttributeValue]:
        result: dict[str, AttributeValue] = {}
        if self.tone:
            result["tone"] = self.tone
        if self.icon:
            result["icon"] = self.icon
        return result


@dataclass
class CodeAttributes(BlockAttributes):
    language: str = ""

    KEYS: ClassVar[frozenset[str]] = frozenset({"language"})

    @classmethod
    def _load(cls, data: Mapping[str, Any]) -> dict[str, Any]:
        return {"language": _as_str(data.get("language")).strip()}

    def _dump(self) -> dict[str, AttributeValue]:
        return {"language": self.language} if self.language else {}


@dataclass
class ToggleAttributes(BlockAttributes):
    summary: str = ""
    open: bool = False

    KEYS: ClassVar[frozenset[str]] = frozenset({"summary", "open"})

    @classmethod
    def _load(cls, data: Mapping[str, Any]) -> dict[str, Any]:
        return {"summary": _as_str(data.get("summary")), "open": _as_bool(data.get("open"))}

    def _dump(self) -> dict[str, AttributeValue]:
        result: dict[str, AttributeValue] = {"summary": self.summary}
        if self.open:
            result["open"] = True
        return result


# =============================================================================
# Layout Variants
# =============================================================================


@dataclass
class SpacerAttributes(BlockAttributes):
    height: int = 32

    KEYS: ClassVar[frozenset[str]] = frozenset({"height"})

    @classmethod
    def _load(cls, data: Mapping[str, Any]) -> dict[str, Any]:
        return {"height": _as_int(data.get("height"), 32)}

    def _dump(self) -> dict[str, AttributeValue]:
        return {"height": self.height}


@dataclass
class TableOfContentsAttributes(BlockAttributes):
    max_level: int = 3

    KEYS: ClassVar[frozenset[str]] = frozenset({"maxLevel"})

    @classmethod
    def _load(cls, data: Mapping[str, Any]) -> dict[str, Any]:
        return {"max_level": _as_int(data.get("maxLevel"), 3)}

    def _dump(self) -> dict[str, AttributeValue]:
        return {"maxLevel": self.max_level}


# =============================================================================
# Media Variants
# =============================================================================


@dataclass
class ImageAttributes(BlockAttributes):
    src: str = ""
    alt: str = ""
    title: str = ""
    width: int | None = None
    height: int | None = None

    KEYS: ClassVar[frozenset[str]] = frozenset({"src", "alt", "title", "width", "height"})

    @classmethod
    def _load(cls, data: Mapping[str, Any]) -> dict[str, Any]:
        return {
            "src": _as_str(data.get("src")),
            "alt": _as_str(data.get("alt")),
            "title": _as_str(data.get("title")),
            "width": _as_optional_int(data.get("width")),
            "height": _as_optional_int(data.get("height")),
        }

    def _dump(self) -> dict[str, AttributeValue]:
        result: dict[str, AttributeValue] = {"src": self.src, "alt": self.alt}
        if self.title:
            result["title"] = self.title
        if self.width is not None:
            result["width"] = self.width
        if self.height is not None:
            result["height"] = self.height
        return result


def _dump_present(fields: Mapping[str, str]) -> dict[str, AttributeValue]:
    return {key: value for key, value in fields.items() if value}


@dataclass
class MediaAttributes(BlockAttributes):
    """Video and audio blocks."""

    src: str = ""
    url: str = ""
    title: str = ""
    poster: str = ""

    KEYS: ClassVar[frozenset[str]] = frozenset({"src", "url", "title", "poster"})

    @classmethod
    def _load(cls, data: Mapping[str, Any]) -> dict[str, Any]:
        return {key: _as_str(data.get(key)) for key in ("src", "url", "title", "poster")}

    def _dump(self) -> dict[str, AttributeValue]:
        return _dump_present(
            {"src": self.src, "url": self.url, "title": self.title, "poster": self.poster}
        )


@dataclass
class FileAttributes(BlockAttributes):
    href: str = ""
    src: str = ""
    url: str = ""
    filename: str = ""
    title: str = ""
    label: str = ""
    size: int | None = None

    KEYS: ClassVar[frozenset[str]] = frozenset(
        {"href", "src", "url", "filename", "title", "label", "size"}
    )

    @classmethod
    def _load(cls, data: Mapping[str, Any]) -> dict[str, Any]:
        values: dict[str, Any] = {
            key: _as_str(data.get(key))
            for key in ("href", "src", "url", "filename", "title", "label")
        }
        values["size"] = _as_optional_int(data.get("size"))
        return values

    def _dump(self) -> dict[str, AttributeValue]:
        result = _dump_present(
            {
                "href": self.href,
                "src": self.src,
                "url": self.url,
                "filename": self.filename,
                "title": self.title,
                "label": self.label,
            }
        )
        if self.size is not None:
            result["size"] = self.size
        return result


@dataclass
class BookmarkAttributes(BlockAttributes):
    url: str = ""
    href: str = ""
    title: str = ""
    description: str = ""

    KEYS: ClassVar[frozenset[str]] = frozenset({"url", "href", "title", "description"})

    @classmethod
    def _load(cls, data: Mapping[str, Any]) -> dict[str, Any]:
        return {key: _as_str(data.get(key)) for key in ("url", "href", "title", "description")}

    def _dump(self) -> dict[str, AttributeValue]:
        return _dump_present(
            {
                "url": self.url,
                "href": self.href,
                "title": self.title,
                "description": self.description,
            }
        )


@dataclass
class GalleryImage:
    src: str = ""
    alt: str = ""

    def to_dict(self) -> dict[str, AttributeValue]:
        return {"src": self.src, "alt": self.alt}


@dataclass
class GalleryAttributes(BlockAttributes):
    columns: int = 3
    max_rows: int = 0  # 0 means no limit
    images: list[GalleryImage] = field(default_factory=list)

    KEYS: ClassVar[frozenset[str]] = frozenset({"columns", "maxRows", "images"})

    @classmethod
    def _load(cls, data: Mapping[str, Any]) -> dict[str, Any]:
        raw_images = data.get("images")
        images = []
        if isinstance(raw_images, (list, tuple)):
            images = [
                GalleryImage(src=_as_str(item.get("src")), alt=_as_str(item.get("alt")))
                for item in raw_images
                if isinstance(item, Mapping)
            ]
        return {
            "columns": _as_int(data.get("columns"), 3),
            "max_rows": _as_int(data.get("maxRows"), 0),
            "images": images,
        }

    def _dump(self) -> dict[str, AttributeValue]:
        return {
            "columns": self.columns,
            "maxRows": self.max_rows,
            "images": [image.to_dict() for image in self.images],
        }


# =============================================================================
# Database Variants
# =============================================================================


@dataclass
class TableAttributes(BlockAttributes):
    """Pipe table: one header row, alignment per column, body rows."""

    header: list[str] = field(default_factory=list)
    rows: list[list[str]] = field(default_factory=list)
    align: list[str | None] = field(default_factory=list)

    KEYS: ClassVar[frozenset[str]] = frozenset({"header", "rows", "align"})

    @classmethod
    def _load(cls, data: Mapping[str, Any]) -> dict[str, Any]:
        raw_rows = data.get("rows")
        rows = []
        if isinstance(raw_rows, (list, tuple)):
            rows = [_as_str_list(row) for row in raw_rows if isinstance(row, (list, tuple))]
        raw_align = data.get("align")
        align: list[str | None] = []
        if isinstance(raw_align, (list, tuple)):
            align = [a if a in ("left", "center", "right") else None for a in raw_align]
        return {"header": _as_str_list(data.get("header")), "rows": rows, "align": align}

    def _dump(self) -> dict[str, AttributeValue]:
        return {
            "header": list(self.header),
            "rows": [list(row) for row in self.rows],
            "align": list(self.align),
        }
