"""Inline markdown helpers built on mistletoe span tokens.

Block structure is found by the line scanner; these helpers look inside a
single line: recognizing a standalone image and reducing inline markup to
plain text for outlines.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

from mistletoe import Document as MarkdownDocument
from mistletoe.block_token import Heading, Paragraph
from mistletoe.span_token import Image, RawText

# Characters that would change meaning inside a link label or image alt
_LABEL_ESCAPE_RE = re.compile(r"([\\\[\]*_`])")
_TITLE_ESCAPE_RE = re.compile(r'([\\"])')
_DESTINATION_UNSAFE_RE = re.compile(r"[\s()<>]")


@dataclass(frozen=True)
class InlineImage:
    """An image found on its own line."""

    src: str
    alt: str
    title: str = ""


def _extract_text(token: Any) -> str:
    """Extract plain text from a token."""
    if isinstance(token, RawText):
        return token.content
    elif hasattr(token, "children") and token.children is not None:
        return "".join(_extract_text(child) for child in token.children)
    return ""


def parse_image(line: str) -> InlineImage | None:
    """Parse a line that consists of exactly one image, ``![alt](src "title")``.

    Returns None when the line holds anything else.
    """
    text = line.strip()
    if not text.startswith("!["):
        return None

    blocks = list(MarkdownDocument(text).children)
    if len(blocks) != 1 or not isinstance(blocks[0], Paragraph):
        return None

    spans = list(blocks[0].children)
    if len(spans) != 1 or not isinstance(spans[0], Image):
        return None

    image = spans[0]
    return InlineImage(
        src=image.src or "",
        alt=_extract_text(image),
        title=getattr(image, "title", "") or "",
    )


def plain_text(markdown: str) -> str:
    """Reduce one line of inline markdown to its visible text.

    ``"Install **now** via [pip](https://pypi.org)"`` becomes
    ``"Install now via pip"``.
    """
    line = " ".join(markdown.split()) if isinstance(markdown, str) else ""
    if not line:
        return ""
    # Parse as a heading so the text is only ever read as inline content
    blocks = list(MarkdownDocument(f"# {line}").children)
    if not blocks or not isinstance(blocks[0], Heading):
        return line
    return _extract_text(blocks[0]).strip()


# =============================================================================
# Formatting
# =============================================================================


def escape_label(text: str) -> str:
    """Escape text for use inside ``[...]`` or ``![...]``."""
    return _LABEL_ESCAPE_RE.sub(r"\\\1", " ".join(text.split()))


def format_destination(url: str) -> str:
    """Format a link destination so it parses back to the same URL."""
    if not _DESTINATION_UNSAFE_RE.search(url):
        return url
    if "<" not in url and ">" not in url and "\n" not in url:
        return f"<{url}>"
    return re.sub(r"([()<>\\])", r"\\\1", re.sub(r"\s", "%20", url))


def format_image(src: str, alt: str = "", title: str = "") -> str:
    """Render ``![alt](src "title")``."""
    escaped_title = _TITLE_ESCAPE_RE.sub(r"\\\1", " ".join(title.split()))
    title_part = f' "{escaped_title}"' if escaped_title else ""
    return f"![{escape_label(alt)}]({format_destination(src)}{title_part})"


def format_link(label: str, url: str) -> str:
    """Render ``[label](url)``."""
    return f"[{escape_label(label)}]({format_destination(url)})"
