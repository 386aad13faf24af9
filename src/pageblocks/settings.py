"""Library settings.

Defaults match the editor's display limits. Each value can be overridden via
an environment variable; numeric limits have hard minimums so a bad override
cannot make summaries unreadable.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from .errors import ConfigurationError


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    val = raw.strip().lower()
    if val in {"1", "true", "yes", "y", "on"}:
        return True
    if val in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _env_int(name: str, default: int, min_val: int | None = None) -> int:
    """Get integer from environment with optional minimum enforcement."""
    raw = os.environ.get(name)
    try:
        val = int(raw) if raw is not None else default
    except ValueError:
        val = default
    if min_val is not None and val < min_val:
        return min_val
    return val


@dataclass(frozen=True)
class Settings:
    """Static settings for block conversion and summaries."""

    # Summary display limits (characters, after whitespace normalization)
    summary_limit: int = _env_int("PAGEBLOCKS_SUMMARY_LIMIT", 120, min_val=10)
    heading_summary_limit: int = _env_int("PAGEBLOCKS_HEADING_SUMMARY_LIMIT", 80, min_val=10)
    media_summary_limit: int = _env_int("PAGEBLOCKS_MEDIA_SUMMARY_LIMIT", 100, min_val=10)

    # Generated block ids look like "<prefix>-<12 hex chars>"
    block_id_prefix: str = os.environ.get("PAGEBLOCKS_BLOCK_ID_PREFIX", "block")

    # Spaces per nesting level when serializing lists
    list_indent: int = _env_int("PAGEBLOCKS_LIST_INDENT", 2, min_val=2)

    # Raise FrontmatterError instead of keeping malformed frontmatter as body text
    strict_frontmatter: bool = _env_bool("PAGEBLOCKS_STRICT_FRONTMATTER", False)

    def __post_init__(self) -> None:
        prefix = self.block_id_prefix
        if not prefix or any(char.isspace() for char in prefix):
            raise ConfigurationError(
                f"Invalid block id prefix: {prefix!r}",
                setting="PAGEBLOCKS_BLOCK_ID_PREFIX",
                expected="non-empty string without whitespace",
                suggestion='Unset the variable to use the default "block"',
            )


settings = Settings()
