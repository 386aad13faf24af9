"""Tests for block validation."""

from __future__ import annotations

from pageblocks.blocks.models import Block, BlockType, Document
from pageblocks.blocks.validator import (
    DUPLICATE_ID,
    MISSING_ID,
    UNKNOWN_TYPE,
    validate,
    validate_document,
    validate_with_report,
)


# =============================================================================
# validate
# =============================================================================


class TestValidate:
    def test_keeps_only_sound_blocks(self) -> None:
        """Blocks with an empty id or unknown type are dropped."""
        candidates = [
            {"id": "1", "type": "paragraph", "content": "kept"},
            {"id": "", "type": "paragraph", "content": "no id"},
            {"id": "2", "type": "bogus", "content": "unknown"},
        ]

        result = validate(candidates)

        assert result == [candidates[0]]

    def test_returns_same_objects_in_order(self) -> None:
        first = Block(id="a", type=BlockType.HEADING, content="A")
        second = Block(id="b", type=BlockType.PARAGRAPH, content="B")

        result = validate([first, Block(id="", type=BlockType.PARAGRAPH), second])

        assert result[0] is first
        assert result[1] is second

    def test_membership_rule(self) -> None:
        """A block passes exactly when its type is registered and id non-empty."""
        cases = [
            ({"id": "x", "type": "code"}, True),
            ({"id": "x", "type": "tableOfContents"}, True),
            ({"id": "x", "type": "Code"}, False),
            ({"id": "x", "type": None}, False),
            ({"id": "x"}, False),
            ({"id": None, "type": "code"}, False),
            ({"id": 7, "type": "code"}, False),
            ({"type": "code"}, False),
        ]
        for candidate, expected in cases:
            assert (validate([candidate]) == [candidate]) is expected, candidate

    def test_unknown_raw_type_on_block(self) -> None:
        """Blocks loaded with an unknown type string are dropped."""
        block = Block.from_dict({"id": "1", "type": "bogus"})
        assert validate([block]) == []

    def test_none_and_empty_input(self) -> None:
        assert validate(None) == []
        assert validate([]) == []

    def test_never_raises_on_odd_candidates(self) -> None:
        """Non-block candidates are silently dropped."""
        assert validate(["paragraph", 3, None, object()]) == []


# =============================================================================
# validate_with_report
# =============================================================================


class TestValidationReport:
    def test_report_lists_drop_reasons(self) -> None:
        report = validate_with_report(
            [
                {"id": "1", "type": "paragraph"},
                {"id": "", "type": "paragraph"},
                {"id": "2", "type": "bogus"},
            ]
        )

        assert len(report.blocks) == 1
        assert report.dropped_count == 2
        assert [(d.index, d.reason) for d in report.dropped] == [(1, MISSING_ID), (2, UNKNOWN_TYPE)]
        assert report.dropped[1].type == "bogus"

    def test_unknown_type_takes_precedence(self) -> None:
        report = validate_with_report([{"id": "", "type": "bogus"}])
        assert report.dropped[0].reason == UNKNOWN_TYPE

    def test_to_dict(self) -> None:
        report = validate_with_report([{"id": "", "type": "quote"}])
        assert report.to_dict() == {
            "kept": 0,
            "dropped": [{"index": 0, "id": "", "type": "quote", "reason": MISSING_ID}],
        }


# =============================================================================
# validate_document
# =============================================================================


class TestValidateDocument:
    def test_drops_invalid_children(self) -> None:
        """Rules apply at every nesting level."""
        toggle = Block(
            id="t",
            type=BlockType.TOGGLE,
            children=[
                Block(id="c1", type=BlockType.PARAGRAPH, content="ok"),
                Block.from_dict({"id": "c2", "type": "bogus"}),
            ],
        )
        document = Document(blocks=[toggle])

        report = validate_document(document)

        assert [b.id for b in report.blocks] == ["t"]
        assert [c.id for c in report.blocks[0].children] == ["c1"]
        # The input document is untouched
        assert len(toggle.children) == 2

    def test_drops_duplicate_ids(self) -> None:
        """A repeated id keeps only the first occurrence."""
        document = Document(
            blocks=[
                Block(id="a", type=BlockType.PARAGRAPH, content="first"),
                Block(
                    id="t",
                    type=BlockType.TOGGLE,
                    children=[Block(id="a", type=BlockType.PARAGRAPH, content="dup")],
                ),
                Block(id="a", type=BlockType.PARAGRAPH, content="dup again"),
            ]
        )

        report = validate_document(document)

        assert [b.id for b in report.blocks] == ["a", "t"]
        assert report.blocks[1].children == []
        assert [d.reason for d in report.dropped] == [DUPLICATE_ID, DUPLICATE_ID]

    def test_valid_document_unchanged(self) -> None:
        blocks = [Block(id="a", type=BlockType.PARAGRAPH), Block(id="b", type=BlockType.DIVIDER)]
        report = validate_document(Document(blocks=blocks))
        assert report.blocks == blocks
        assert report.dropped == []
