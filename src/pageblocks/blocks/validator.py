"""Block validation.

Filters candidate blocks down to the ones downstream code can rely on: a
registered type and a non-empty id. Rejection is silent filtering, never an
error, so a hand-edited or partly corrupted document still loads. The
report variant tells the caller what was dropped and why.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from typing import Any, TypeVar

from .models import Block, Document
from .registry import REGISTRY, BlockRegistry

logger = logging.getLogger(__name__)

C = TypeVar("C")

UNKNOWN_TYPE = "unknown_type"
MISSING_ID = "missing_id"
DUPLICATE_ID = "duplicate_id"


@dataclass(frozen=True)
class DroppedBlock:
    """A candidate removed by validation."""

    index: int
    id: str | None
    type: str | None
    reason: str


@dataclass
class ValidationReport:
    """Kept candidates plus a record of every dropped one."""

    blocks: list[Any] = field(default_factory=list)
    dropped: list[DroppedBlock] = field(default_factory=list)

    @property
    def dropped_count(self) -> int:
        return len(self.dropped)

    def to_dict(self) -> dict[str, Any]:
        """Diagnostic summary for the calling UI layer."""
        return {
            "kept": len(self.blocks),
            "dropped": [
                {"index": d.index, "id": d.id, "type": d.type, "reason": d.reason}
                for d in self.dropped
            ],
        }


def _field(candidate: Any, name: str) -> Any:
    if isinstance(candidate, Mapping):
        return candidate.get(name)
    return getattr(candidate, name, None)


def _type_key(candidate: Any) -> str | None:
    block_type = _field(candidate, "type")
    value = getattr(block_type, "value", block_type)
    return value if isinstance(value, str) else None


def _rejection(candidate: Any, registry: BlockRegistry) -> str | None:
    """Reason a candidate fails validation, or None if it passes."""
    if registry.find(_type_key(candidate)) is None:
        return UNKNOWN_TYPE
    block_id = _field(candidate, "id")
    if not isinstance(block_id, str) or not block_id:
        return MISSING_ID
    return None


def validate_with_report(
    candidates: Iterable[C] | None,
    registry: BlockRegistry = REGISTRY,
) -> ValidationReport:
    """Validate candidates and report what was dropped.

    Candidates may be Block objects or raw block mappings; kept candidates
    are returned as the same objects, in their original order.
    """
    report = ValidationReport()
    if candidates is None:
        return report

    for index, candidate in enumerate(candidates):
        reason = _rejection(candidate, registry)
        if reason is None:
            report.blocks.append(candidate)
            continue
        block_id = _field(candidate, "id")
        dropped = DroppedBlock(
            index=index,
            id=block_id if isinstance(block_id, str) else None,
            type=_type_key(candidate),
            reason=reason,
        )
        report.dropped.append(dropped)
        logger.debug("Dropped block at index %d (%s): id=%r type=%r", index, reason, dropped.id, dropped.type)

    return report


def validate(candidates: Iterable[C] | None, registry: BlockRegistry = REGISTRY) -> list[C]:
    """Keep only candidates with a registered type and a non-empty id."""
    return validate_with_report(candidates, registry).blocks


def validate_document(document: Document, registry: BlockRegistry = REGISTRY) -> ValidationReport:
    """Validate a whole block tree.

    Applies the block rules at every level and also drops any block whose id
    repeats one seen earlier in the document (depth-first order). The
    returned report's ``blocks`` are the surviving root blocks; the input
    document is not modified.
    """
    report = ValidationReport()
    seen: set[str] = set()
    report.blocks = _validate_level(document.blocks, registry, seen, report)
    return report


def _validate_level(
    blocks: list[Block],
    registry: BlockRegistry,
    seen: set[str],
    report: ValidationReport,
) -> list[Block]:
    level = validate_with_report(blocks, registry)
    report.dropped.extend(level.dropped)

    kept: list[Block] = []
    for index, block in enumerate(level.blocks):
        if block.id in seen:
            report.dropped.append(DroppedBlock(index, block.id, block.type_value, DUPLICATE_ID))
            logger.debug("Dropped block with duplicate id %r", block.id)
            continue
        seen.add(block.id)
        if block.children:
            children = _validate_level(block.children, registry, seen, report)
            if len(children) != len(block.children):
                block = replace(block, children=children)
        kept.append(block)
    return kept
