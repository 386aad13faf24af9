"""Tests for tree.py - Tree operations for block hierarchy.

Tests:
- Ancestor/descendant traversal
- Move operations
- Insert and remove
- Tree utilities
"""

from __future__ import annotations

import pytest

from pageblocks.blocks.models import Block, BlockType, Document
from pageblocks.blocks.tree import (
    find_block,
    flatten_tree,
    get_ancestors,
    get_block_depth,
    get_descendants,
    get_siblings,
    insert_block,
    iter_blocks,
    move_block,
    remove_block,
)
from pageblocks.errors import BlockNotFoundError, ValidationError


# =============================================================================
# Fixtures
# =============================================================================


def _paragraph(block_id: str) -> Block:
    return Block(id=block_id, type=BlockType.PARAGRAPH, content=block_id)


def _toggle(block_id: str, *children: Block) -> Block:
    return Block(id=block_id, type=BlockType.TOGGLE, children=list(children))


@pytest.fixture
def document() -> Document:
    """Tree used by most tests.

    intro
    outer
      inner
        deep
      note
    outro
    """
    return Document(
        blocks=[
            _paragraph("intro"),
            _toggle("outer", _toggle("inner", _paragraph("deep")), _paragraph("note")),
            _paragraph("outro"),
        ]
    )


def _ids(blocks: list[Block]) -> list[str]:
    return [b.id for b in blocks]


# =============================================================================
# Ancestor/Descendant Tests
# =============================================================================


class TestAncestorDescendant:
    """Test ancestor and descendant traversal."""

    def test_get_ancestors_root_block(self, document: Document) -> None:
        """Root block has no ancestors."""
        assert get_ancestors(document, "intro") == []

    def test_get_ancestors_nested_block(self, document: Document) -> None:
        """Nested block returns correct ancestors."""
        ancestors = get_ancestors(document, "deep")

        assert _ids(ancestors) == ["inner", "outer"]  # Immediate parent first

    def test_get_descendants_no_children(self, document: Document) -> None:
        """Block with no children returns empty list."""
        assert get_descendants(document, "intro") == []

    def test_get_descendants_nested(self, document: Document) -> None:
        """Descendants returns all nested blocks depth-first."""
        assert _ids(get_descendants(document, "outer")) == ["inner", "deep", "note"]

    def test_get_siblings(self, document: Document) -> None:
        assert _ids(get_siblings(document, "inner")) == ["note"]
        assert _ids(get_siblings(document, "inner", include_self=True)) == ["inner", "note"]
        assert _ids(get_siblings(document, "outer")) == ["intro", "outro"]

    def test_get_block_depth(self, document: Document) -> None:
        assert get_block_depth(document, "intro") == 0
        assert get_block_depth(document, "inner") == 1
        assert get_block_depth(document, "deep") == 2

    def test_unknown_block_raises(self, document: Document) -> None:
        with pytest.raises(BlockNotFoundError) as exc_info:
            get_ancestors(document, "missing")
        assert exc_info.value.block_id == "missing"


# =============================================================================
# Tree Utility Tests
# =============================================================================


class TestTreeUtilities:
    """Test walking the tree."""

    def test_iter_blocks_depths(self, document: Document) -> None:
        walked = [(b.id, depth) for b, depth in iter_blocks(document)]

        assert walked == [
            ("intro", 0),
            ("outer", 0),
            ("inner", 1),
            ("deep", 2),
            ("note", 1),
            ("outro", 0),
        ]

    def test_flatten_tree(self, document: Document) -> None:
        assert _ids(flatten_tree(document)) == document.block_ids()

    def test_find_block(self, document: Document) -> None:
        assert find_block(document, "deep").content == "deep"
        assert find_block(document, "missing") is None

    def test_empty_document(self) -> None:
        assert flatten_tree(Document()) == []


# =============================================================================
# Insert / Remove Tests
# =============================================================================


class TestInsertRemove:
    """Test structural edits."""

    def test_insert_at_root_end(self, document: Document) -> None:
        insert_block(document, _paragraph("new"))

        assert _ids(document.blocks)[-1] == "new"

    def test_insert_after_sibling(self, document: Document) -> None:
        insert_block(document, _paragraph("new"), after="inner")

        assert _ids(document[1].children) == ["inner", "new", "note"]

    def test_insert_into_parent(self, document: Document) -> None:
        insert_block(document, _paragraph("new"), parent_id="inner")

        assert _ids(get_ancestors(document, "new")) == ["inner", "outer"]

    def test_insert_into_non_nestable_parent_raises(self, document: Document) -> None:
        with pytest.raises(ValidationError) as exc_info:
            insert_block(document, _paragraph("new"), parent_id="intro")
        assert exc_info.value.constraint == "nestable"

    def test_insert_duplicate_id_raises(self, document: Document) -> None:
        """Ids in the inserted subtree must be new to the document."""
        with pytest.raises(ValidationError):
            insert_block(document, _toggle("fresh", _paragraph("deep")))

    def test_insert_with_both_positions_raises(self, document: Document) -> None:
        with pytest.raises(ValidationError):
            insert_block(document, _paragraph("new"), after="intro", parent_id="outer")

    def test_insert_after_missing_raises(self, document: Document) -> None:
        with pytest.raises(BlockNotFoundError):
            insert_block(document, _paragraph("new"), after="missing")

    def test_remove_block_takes_subtree(self, document: Document) -> None:
        removed = remove_block(document, "inner")

        assert removed.id == "inner"
        assert _ids(removed.children) == ["deep"]
        assert find_block(document, "deep") is None
        assert _ids(document[1].children) == ["note"]

    def test_remove_missing_raises(self, document: Document) -> None:
        with pytest.raises(BlockNotFoundError):
            remove_block(document, "missing")


# =============================================================================
# Move Operation Tests
# =============================================================================


class TestMoveOperations:
    """Test block move operations."""

    def test_move_after_target(self, document: Document) -> None:
        move_block(document, "intro", "outro")

        assert _ids(document.blocks) == ["outer", "outro", "intro"]

    def test_move_before_target(self, document: Document) -> None:
        move_block(document, "outro", "intro", position="before")

        assert _ids(document.blocks) == ["outro", "intro", "outer"]

    def test_move_out_of_parent(self, document: Document) -> None:
        """Moving next to a root block lifts a nested block to root."""
        move_block(document, "deep", "intro")

        assert _ids(document.blocks) == ["intro", "deep", "outer", "outro"]
        assert document[2].children[0].children == []

    def test_move_inside_toggle(self, document: Document) -> None:
        move_block(document, "outro", "inner", position="inside")

        assert _ids(find_block(document, "inner").children) == ["deep", "outro"]
        assert get_block_depth(document, "outro") == 2

    def test_move_inside_non_nestable_raises(self, document: Document) -> None:
        with pytest.raises(ValidationError):
            move_block(document, "outro", "intro", position="inside")
        # Nothing moved
        assert _ids(document.blocks) == ["intro", "outer", "outro"]

    def test_cannot_move_into_descendant(self, document: Document) -> None:
        """A block cannot be moved under its own subtree."""
        with pytest.raises(ValidationError):
            move_block(document, "outer", "deep")
        with pytest.raises(ValidationError):
            move_block(document, "outer", "inner", position="inside")

    def test_cannot_move_relative_to_self(self, document: Document) -> None:
        with pytest.raises(ValidationError):
            move_block(document, "intro", "intro")

    def test_invalid_position_raises(self, document: Document) -> None:
        with pytest.raises(ValidationError) as exc_info:
            move_block(document, "intro", "outro", position="below")
        assert exc_info.value.field == "position"

    def test_move_missing_block_raises(self, document: Document) -> None:
        with pytest.raises(BlockNotFoundError):
            move_block(document, "missing", "intro")
        with pytest.raises(BlockNotFoundError):
            move_block(document, "intro", "missing")

    def test_move_keeps_block_count(self, document: Document) -> None:
        before = sorted(document.block_ids())
        move_block(document, "note", "intro", position="before")
        assert sorted(document.block_ids()) == before
