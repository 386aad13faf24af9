"""Tree operations for block hierarchy.

This module provides operations on the block tree of one Document:
- Walking blocks depth-first with their nesting depth
- Getting ancestors, descendants and siblings
- Inserting, removing and moving blocks

Edits mutate the Document in place. The editor owns a document for the
duration of an edit session, so there is no locking here.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator

from ..errors import BlockNotFoundError, ValidationError
from .models import Block, Document

logger = logging.getLogger(__name__)

POSITIONS = ("before", "after", "inside")


# =============================================================================
# Traversal
# =============================================================================


def iter_blocks(document: Document) -> Iterator[tuple[Block, int]]:
    """Yield every block with its depth (0 for root blocks), depth-first."""
    stack = [(block, 0) for block in reversed(document.blocks)]
    while stack:
        block, depth = stack.pop()
        yield block, depth
        stack.extend((child, depth + 1) for child in reversed(block.children))


def flatten_tree(document: Document) -> list[Block]:
    """Flatten the block tree to a depth-first list."""
    return [block for block, _ in iter_blocks(document)]


def find_block(document: Document, block_id: str) -> Block | None:
    """Get a block anywhere in the tree, or None if it is not there."""
    for block, _ in iter_blocks(document):
        if block.id == block_id:
            return block
    return None


def _locate(document: Document, block_id: str) -> tuple[list[Block], int, list[Block]]:
    """Find a block's sibling list, its index there and its ancestors.

    Ancestors run from the immediate parent to the root.

    Raises:
        BlockNotFoundError: If the id is not in the document.
    """
    path: list[Block] = []

    def search(siblings: list[Block]) -> tuple[list[Block], int] | None:
        for index, block in enumerate(siblings):
            if block.id == block_id:
                return siblings, index
            path.append(block)
            found = search(block.children)
            if found is not None:
                return found
            path.pop()
        return None

    found = search(document.blocks)
    if found is None:
        raise BlockNotFoundError(block_id)
    siblings, index = found
    return siblings, index, list(reversed(path))


# =============================================================================
# Ancestor/Descendant Operations
# =============================================================================


def get_ancestors(document: Document, block_id: str) -> list[Block]:
    """Get all ancestors of a block, from immediate parent to root.

    Raises:
        BlockNotFoundError: If the block is not in the document.
    """
    return _locate(document, block_id)[2]


def get_descendants(document: Document, block_id: str) -> list[Block]:
    """Get all descendants of a block (depth-first).

    Raises:
        BlockNotFoundError: If the block is not in the document.
    """
    siblings, index, _ = _locate(document, block_id)
    return flatten_tree(Document(blocks=list(siblings[index].children)))


def get_siblings(document: Document, block_id: str, include_self: bool = False) -> list[Block]:
    """Get siblings of a block (blocks with the same parent), in order.

    Raises:
        BlockNotFoundError: If the block is not in the document.
    """
    siblings, index, _ = _locate(document, block_id)
    if include_self:
        return list(siblings)
    return siblings[:index] + siblings[index + 1 :]


def get_block_depth(document: Document, block_id: str) -> int:
    """Get the nesting depth of a block (0 for root blocks)."""
    return len(get_ancestors(document, block_id))


# =============================================================================
# Edits
# =============================================================================


def insert_block(
    document: Document,
    block: Block,
    *,
    after: str | None = None,
    parent_id: str | None = None,
) -> Block:
    """Insert a new block into the tree.

    Args:
        document: The document to edit.
        block: The block to insert; it and its children must have ids not
            already in the document.
        after: Insert right after this sibling.
        parent_id: Append as the last child of this (nestable) block.
            With neither option the block is appended at root level.

    Returns:
        The inserted block.

    Raises:
        BlockNotFoundError: If after or parent_id is not in the document.
        ValidationError: If an id collides or the parent cannot nest.
    """
    if after is not None and parent_id is not None:
        raise ValidationError("Pass either after or parent_id, not both", field="after")

    existing = set(document.block_ids())
    clashes = [bid for bid in Document(blocks=[block]).block_ids() if bid in existing]
    if clashes:
        raise ValidationError(
            f"Block id already in document: {clashes[0]}",
            field="id",
            value=clashes[0],
            constraint="unique",
        )

    if after is not None:
        siblings, index, _ = _locate(document, after)
        siblings.insert(index + 1, block)
    elif parent_id is not None:
        _nest(document, block, parent_id)
    else:
        document.blocks.append(block)
    return block


def _nest(document: Document, block: Block, parent_id: str) -> None:
    siblings, index, _ = _locate(document, parent_id)
    parent = siblings[index]
    if not parent.is_nestable():
        raise ValidationError(
            f"Parent block type '{parent.type_value}' does not support children",
            field="parent_id",
            value=parent_id,
            constraint="nestable",
        )
    parent.children.append(block)


def remove_block(document: Document, block_id: str) -> Block:
    """Remove a block and its subtree from the document.

    Returns:
        The removed block, children included.

    Raises:
        BlockNotFoundError: If the block is not in the document.
    """
    siblings, index, _ = _locate(document, block_id)
    return siblings.pop(index)


def move_block(
    document: Document,
    block_id: str,
    target_id: str,
    position: str = "after",
) -> Block:
    """Move a block next to, or into, a target block.

    Args:
        document: The document to edit.
        block_id: The block to move.
        target_id: The reference block.
        position: "before" or "after" the target, or "inside" to append
            to a nestable target's children.

    Returns:
        The moved block.

    Raises:
        BlockNotFoundError: If either block is not in the document.
        ValidationError: If position is invalid or the move would put a
            block inside itself or its own descendants.
    """
    if position not in POSITIONS:
        raise ValidationError(
            "position must be 'before', 'after' or 'inside'",
            field="position",
            value=position,
        )
    if block_id == target_id:
        raise ValidationError("Cannot move block relative to itself", field="target_id")

    # Validate: can't move block into itself or its descendants
    if any(a.id == block_id for a in get_ancestors(document, target_id)):
        raise ValidationError("Cannot move block into its own descendant", field="target_id")

    siblings, index, _ = _locate(document, block_id)
    if position == "inside":
        target = find_block(document, target_id)
        assert target is not None
        if not target.is_nestable():
            raise ValidationError(
                f"Parent block type '{target.type_value}' does not support children",
                field="target_id",
                value=target_id,
                constraint="nestable",
            )

    block = siblings.pop(index)
    if position == "inside":
        _nest(document, block, target_id)
    else:
        target_siblings, target_index, _ = _locate(document, target_id)
        target_siblings.insert(target_index + (1 if position == "after" else 0), block)

    logger.debug("Moved block %s %s %s", block_id, position, target_id)
    return block
