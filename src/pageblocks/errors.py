"""pageblocks error hierarchy.

Malformed *content* never raises: the validator drops bad blocks and the
converter demotes unknown markdown to paragraphs. The errors below are for
programmer misuse at the library seams:

- PageBlocksError: Base exception for all library errors
- ValidationError: Bad arguments (wrong input type, impossible tree move)
- UnknownBlockTypeError: Strict registry lookup for a type that does not exist
- BlockNotFoundError: Tree operation on an id that is not in the document
- ConversionError: Markdown conversion could not proceed
- FrontmatterError: Frontmatter is malformed and strict mode is on
- ConfigurationError: Invalid settings

Usage:
    from pageblocks.errors import UnknownBlockTypeError

    definition = REGISTRY.find(block_type)
    if definition is None:
        raise UnknownBlockTypeError(block_type)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger(__name__)


# =============================================================================
# Error Base Classes
# =============================================================================


class PageBlocksError(Exception):
    """Base exception for all pageblocks errors.

    Attributes:
        message: Human-readable error description
        recoverable: Whether the caller can retry with corrected input
        context: Additional context for debugging
    """

    def __init__(
        self,
        message: str,
        *,
        recoverable: bool = False,
        context: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.recoverable = recoverable
        self.context = context or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert to structured dictionary for API responses."""
        return {
            "type": _error_type_name(self),
            "message": self.message,
            "recoverable": self.recoverable,
            **{k: v for k, v in self.context.items() if v is not None},
        }


# =============================================================================
# Validation Errors
# =============================================================================


class ValidationError(PageBlocksError):
    """Argument validation failed.

    Example:
        raise ValidationError("markdown must be a string", field="markdown")
    """

    def __init__(
        self,
        message: str,
        *,
        field: str | None = None,
        value: Any = None,
        constraint: str | None = None,
        **kwargs: Any,
    ) -> None:
        context = kwargs.pop("context", {})
        if field:
            context["field"] = field
        if constraint:
            context["constraint"] = constraint
        if value is not None:
            context["value"] = _truncate(repr(value), 100)
        super().__init__(message, recoverable=False, context=context)
        self.field = field
        self.constraint = constraint


class UnknownBlockTypeError(ValidationError):
    """Block type is not present in the registry."""

    def __init__(self, block_type: Any, message: str | None = None) -> None:
        super().__init__(
            message or f"Unknown block type: {block_type!r}",
            field="type",
            value=block_type,
            constraint="registered_type",
        )
        self.block_type = block_type


# =============================================================================
# Document Errors
# =============================================================================


class BlockNotFoundError(PageBlocksError):
    """Block id does not exist in the document."""

    def __init__(self, block_id: str, message: str | None = None) -> None:
        super().__init__(
            message or f"Block not found: {block_id}",
            recoverable=False,
            context={"resource_type": "block", "resource_id": block_id},
        )
        self.block_id = block_id


class ConversionError(PageBlocksError):
    """Markdown conversion failed."""

    def __init__(
        self,
        message: str,
        *,
        direction: str | None = None,
        line: int | None = None,
        **kwargs: Any,
    ) -> None:
        context = kwargs.pop("context", {})
        if direction:
            context["direction"] = direction
        if line is not None:
            context["line"] = line
        super().__init__(message, recoverable=False, context=context)


class FrontmatterError(ConversionError):
    """Article frontmatter could not be read."""

    def __init__(self, message: str, *, reason: str | None = None) -> None:
        super().__init__(message, direction="parse", context={"reason": reason})


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(PageBlocksError):
    """Configuration or setup issue."""

    def __init__(
        self,
        message: str,
        *,
        setting: str | None = None,
        expected: str | None = None,
        suggestion: str | None = None,
    ) -> None:
        super().__init__(
            message,
            recoverable=False,
            context={
                "setting": setting,
                "expected": expected,
                "suggestion": suggestion,
            },
        )


# =============================================================================
# Helpers
# =============================================================================


def _error_type_name(exc: BaseException) -> str:
    return type(exc).__name__.lower().replace("error", "")


def _truncate(value: str | None, max_len: int) -> str | None:
    """Truncate a string value for safe logging."""
    if value is None:
        return None
    if len(value) <= max_len:
        return value
    return value[:max_len] + "..."


# =============================================================================
# Error Response Helpers
# =============================================================================


@dataclass
class ErrorResponse:
    """Structured error response for API layers that call into the library."""

    error_type: str
    message: str
    recoverable: bool = False
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result = {
            "error": {
                "type": self.error_type,
                "message": self.message,
                "recoverable": self.recoverable,
            }
        }
        if self.details:
            result["error"]["details"] = self.details
        return result


def error_response(exc: Exception) -> ErrorResponse:
    """Convert an exception to a structured error response."""
    if isinstance(exc, PageBlocksError):
        return ErrorResponse(
            error_type=_error_type_name(exc),
            message=exc.message,
            recoverable=exc.recoverable,
            details=exc.context,
        )

    logger.debug("Unstructured exception converted to error response: %r", exc)
    return ErrorResponse(
        error_type="internal",
        message=str(exc) if str(exc) else "An unexpected error occurred",
        recoverable=False,
    )
