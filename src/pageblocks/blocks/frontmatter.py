"""Article frontmatter.

Articles are stored as markdown with an optional YAML header:

    ---
    title: Building a block editor
    tags: python, markdown
    draft: false
    ---

    # Building a block editor

The header is read with ``yaml.safe_load``. Malformed frontmatter is left in
the body as ordinary text (and logged) unless strict frontmatter is enabled
in settings, in which case FrontmatterError is raised.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any

import yaml

from ..errors import FrontmatterError, ValidationError
from ..settings import settings
from .factory import IdFactory
from .markdown_parser import parse
from .markdown_renderer import serialize
from .models import Document

logger = logging.getLogger(__name__)

FRONTMATTER_RE = re.compile(r"\A---[ \t]*\n(?:(.*?)\n)?---[ \t]*(?:\n|\Z)", re.DOTALL)

# Keys whose values are flags, possibly written as strings
BOOLEAN_KEYS = frozenset({"draft", "featured"})

# Keys a published article must fill in
REQUIRED_KEYS = ("title", "description")


@dataclass
class Article:
    """A page or article: frontmatter metadata plus the block document."""

    metadata: dict[str, Any] = field(default_factory=dict)
    document: Document = field(default_factory=Document)

    @property
    def title(self) -> str:
        title = self.metadata.get("title")
        return title if isinstance(title, str) else ""

    @property
    def tags(self) -> list[str]:
        return list(self.metadata.get("tags") or [])

    @property
    def draft(self) -> bool:
        return self.metadata.get("draft") is True


def split_frontmatter(text: str) -> tuple[dict[str, Any], str]:
    """Split a document into frontmatter metadata and the markdown body.

    CRLF and CR line endings are normalized to LF first.

    Returns:
        (metadata, body). Without frontmatter the metadata is empty and the
        body is the whole text.

    Raises:
        ValidationError: If text is not a string.
        FrontmatterError: If the frontmatter is malformed and strict
            frontmatter is enabled.
    """
    if not isinstance(text, str):
        raise ValidationError("text must be a string", field="text", value=text, constraint="str")
    text = text.replace("\r\n", "\n").replace("\r", "\n")

    match = FRONTMATTER_RE.match(text)
    if not match:
        return {}, text

    raw = match.group(1) or ""
    try:
        data = yaml.safe_load(raw) if raw.strip() else {}
    except yaml.YAMLError as e:
        return _malformed(text, f"Frontmatter is not valid YAML: {e}", "yaml_error")

    if data is None:
        data = {}
    if not isinstance(data, Mapping):
        return _malformed(
            text,
            f"Frontmatter must be a mapping, got {type(data).__name__}",
            "not_a_mapping",
        )
    return _normalize(data), text[match.end() :]


def _malformed(text: str, message: str, reason: str) -> tuple[dict[str, Any], str]:
    if settings.strict_frontmatter:
        raise FrontmatterError(message, reason=reason)
    logger.warning("Keeping malformed frontmatter as body text: %s", message)
    return {}, text


def _normalize(data: Mapping[Any, Any]) -> dict[str, Any]:
    """Normalize tags to a list of strings and flags to booleans."""
    metadata: dict[str, Any] = {}
    for key, value in data.items():
        key = str(key)
        if key == "tags":
            value = _normalize_tags(value)
        elif key in BOOLEAN_KEYS and isinstance(value, str):
            value = value.strip().lower() == "true"
        metadata[key] = value
    return metadata


def _normalize_tags(tags: Any) -> list[str]:
    if isinstance(tags, str):
        return [tag.strip() for tag in tags.split(",") if tag.strip()]
    if isinstance(tags, (list, tuple)):
        return [str(tag).strip() for tag in tags if tag is not None and str(tag).strip()]
    return [str(tags)] if tags else []


def join_frontmatter(metadata: Mapping[str, Any], body: str) -> str:
    """Prefix a markdown body with YAML frontmatter.

    Empty metadata writes the body alone.
    """
    if not metadata:
        return body
    header = yaml.safe_dump(
        dict(metadata),
        sort_keys=False,
        allow_unicode=True,
        default_flow_style=False,
    )
    if not body:
        return f"---\n{header}---\n"
    return f"---\n{header}---\n\n{body}"


def parse_article(text: str, *, id_factory: IdFactory | None = None) -> Article:
    """Parse an article's frontmatter and body."""
    metadata, body = split_frontmatter(text)
    return Article(metadata=metadata, document=parse(body, id_factory=id_factory))


def serialize_article(metadata: Mapping[str, Any], document: Document) -> str:
    """Render an article back to frontmatter plus markdown."""
    return join_frontmatter(metadata, serialize(document))


def validate_metadata(metadata: Mapping[str, Any]) -> tuple[bool, list[str]]:
    """Check article metadata before publishing.

    Title and description are required, a date must parse as an ISO date,
    and tags, when given, must be a non-empty list.

    Returns:
        (valid, errors) with one readable message per problem.

    Raises:
        ValidationError: If metadata is not a mapping.
    """
    if not isinstance(metadata, Mapping):
        raise ValidationError(
            "metadata must be a mapping",
            field="metadata",
            value=metadata,
            constraint="mapping",
        )

    errors: list[str] = []
    for key in REQUIRED_KEYS:
        value = metadata.get(key)
        if not isinstance(value, str) or not value.strip():
            errors.append(f"{key.capitalize()} is required")

    if metadata.get("date") is not None and not _is_date(metadata["date"]):
        errors.append("Invalid date format")

    tags = metadata.get("tags")
    if tags is not None and (not isinstance(tags, list) or not tags):
        errors.append("Tags should be a non-empty list")

    return not errors, errors


def _is_date(value: Any) -> bool:
    # YAML already turns unquoted ISO dates into date objects
    if isinstance(value, (date, datetime)):
        return True
    if not isinstance(value, str):
        return False
    try:
        datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        return False
    return True
