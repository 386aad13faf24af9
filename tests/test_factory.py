"""Tests for block construction helpers."""

from __future__ import annotations

import re

import pytest

from pageblocks.blocks.attributes import (
    BlockAttributes,
    CalloutAttributes,
    HeadingAttributes,
    ListAttributes,
    ListItem,
    ListKind,
)
from pageblocks.blocks.factory import (
    convert_block,
    create_block,
    duplicate_block,
    new_block_id,
    normalize_block_content,
    sequential_id_factory,
)
from pageblocks.blocks.models import Block, BlockType
from pageblocks.errors import UnknownBlockTypeError, ValidationError


class TestIds:
    def test_new_block_id_format(self) -> None:
        assert re.fullmatch(r"block-[0-9a-f]{12}", new_block_id())

    def test_new_block_id_prefix(self) -> None:
        assert new_block_id("heading").startswith("heading-")

    def test_new_block_ids_unique(self) -> None:
        assert len({new_block_id() for _ in range(200)}) == 200

    def test_sequential_factory(self) -> None:
        make_id = sequential_id_factory("p")
        assert [make_id(), make_id(), make_id()] == ["p-1", "p-2", "p-3"]

    def test_sequential_factories_are_independent(self) -> None:
        first = sequential_id_factory("x")
        second = sequential_id_factory("x")
        first()
        assert second() == "x-1"


class TestCreateBlock:
    def test_create_with_attributes(self) -> None:
        block = create_block("heading", "Hello", level=3)

        assert block.type is BlockType.HEADING
        assert block.content == "Hello"
        assert block.attributes_as(HeadingAttributes).level == 3
        assert block.id.startswith("block-")

    def test_create_with_defaults(self) -> None:
        """Omitted attributes take the type's defaults."""
        block = create_block(BlockType.LIST)

        attrs = block.attributes_as(ListAttributes)
        assert attrs.kind is ListKind.UNORDERED
        assert attrs.items == []

    def test_create_with_explicit_id(self) -> None:
        assert create_block("paragraph", block_id="p1").id == "p1"

    def test_create_toggle_with_children(self) -> None:
        child = create_block("paragraph", "inside")
        toggle = create_block("toggle", summary="More", children=[child])

        assert toggle.children == [child]

    def test_unknown_type_raises(self) -> None:
        with pytest.raises(UnknownBlockTypeError):
            create_block("bogus")

    def test_unknown_attribute_kept_in_extra(self) -> None:
        block = create_block("paragraph", "x", color="red")
        assert block.attributes.extra == {"color": "red"}


class TestConvertBlock:
    def test_convert_keeps_id_and_content(self) -> None:
        block = create_block("heading", "Title", block_id="h1", level=1)

        converted = convert_block(block, "paragraph")

        assert converted.id == "h1"
        assert converted.type is BlockType.PARAGRAPH
        assert converted.content == "Title"
        assert type(converted.attributes) is BlockAttributes

    def test_convert_resets_attributes(self) -> None:
        block = create_block("heading", "Title", level=1)
        converted = convert_block(block, BlockType.HEADING)
        assert converted.attributes_as(HeadingAttributes).level == 2

    def test_convert_to_unknown_type_raises(self) -> None:
        with pytest.raises(UnknownBlockTypeError):
            convert_block(create_block("paragraph"), "bogus")


class TestDuplicateBlock:
    def test_duplicate_gives_fresh_ids(self) -> None:
        original = Block(
            id="t",
            type=BlockType.TOGGLE,
            children=[
                Block(id="a", type=BlockType.PARAGRAPH, content="A"),
                Block(id="b", type=BlockType.PARAGRAPH, content="B"),
            ],
        )

        clone = duplicate_block(original, sequential_id_factory("d"))

        clone_ids = [clone.id] + [c.id for c in clone.children]
        assert sorted(clone_ids) == ["d-1", "d-2", "d-3"]
        assert clone.id == "d-1"
        assert [c.content for c in clone.children] == ["A", "B"]

    def test_duplicate_leaves_original_untouched(self) -> None:
        original = Block(
            id="t",
            type=BlockType.TOGGLE,
            children=[Block(id="a", type=BlockType.PARAGRAPH)],
        )

        clone = duplicate_block(original)
        clone.children[0].content = "changed"

        assert original.id == "t"
        assert original.children[0].id == "a"
        assert original.children[0].content == ""

    def test_duplicate_gives_list_items_fresh_ids(self) -> None:
        attrs = ListAttributes(
            items=[
                ListItem(content="a", id="i1", children=[ListItem(content="b", id="i2")]),
                ListItem(content="c"),
            ]
        )
        original = Block(id="l", type=BlockType.LIST, attributes=attrs)

        clone = duplicate_block(original, sequential_id_factory("d"))

        items = clone.attributes_as(ListAttributes).items
        assert clone.id == "d-1"
        assert [items[0].id, items[0].children[0].id] == ["d-2", "d-3"]
        assert items[1].id is None
        assert [item.id for item in attrs.items] == ["i1", None]


# =============================================================================
# Markdown Shortcut Tests
# =============================================================================


def _paragraph(content: str = "") -> Block:
    return Block(id="p1", type=BlockType.PARAGRAPH, content=content)


class TestNormalizeBlockContent:
    """Test the editor's markdown shortcuts."""

    def test_heading_shortcut(self) -> None:
        block = normalize_block_content(_paragraph(), "### Setup")

        assert block.type is BlockType.HEADING
        assert block.content == "Setup"
        assert block.attributes_as(HeadingAttributes).level == 3
        assert block.id == "p1"

    def test_bullet_shortcut(self) -> None:
        block = normalize_block_content(_paragraph(), "- milk")

        assert block.type is BlockType.LIST
        assert block.content == "milk"
        assert block.attributes_as(ListAttributes).kind is ListKind.UNORDERED

    @pytest.mark.parametrize("marker", ["*", "+"])
    def test_other_bullet_markers(self, marker: str) -> None:
        assert normalize_block_content(_paragraph(), f"{marker} milk").type is BlockType.LIST

    def test_ordered_shortcut(self) -> None:
        block = normalize_block_content(_paragraph(), "3. third")

        attrs = block.attributes_as(ListAttributes)
        assert block.type is BlockType.LIST
        assert block.content == "third"
        assert attrs.kind is ListKind.ORDERED
        assert attrs.start == 3

    def test_ordered_shortcut_zero_starts_at_one(self) -> None:
        block = normalize_block_content(_paragraph(), "0. first")
        assert block.attributes_as(ListAttributes).start == 1

    @pytest.mark.parametrize(("marker", "checked"), [("[ ]", False), ("[x]", True), ("[X]", True)])
    def test_todo_shortcut(self, marker: str, checked: bool) -> None:
        block = normalize_block_content(_paragraph(), f"{marker} buy milk")

        attrs = block.attributes_as(ListAttributes)
        assert block.type is BlockType.LIST
        assert block.content == "buy milk"
        assert attrs.kind is ListKind.TODO
        assert attrs.checked is checked

    def test_divider_shortcut(self) -> None:
        block = normalize_block_content(_paragraph(), "-----")

        assert block.type is BlockType.DIVIDER
        assert block.content == ""

    def test_callout_shortcut(self) -> None:
        block = normalize_block_content(_paragraph(), "> [!warning] Mind the gap")

        assert block.type is BlockType.CALLOUT
        assert block.content == "Mind the gap"
        assert block.attributes_as(CalloutAttributes).tone == "warning"

    def test_quote_shortcut(self) -> None:
        block = normalize_block_content(_paragraph(), "> To be or not to be")

        assert block.type is BlockType.QUOTE
        assert block.content == "To be or not to be"

    def test_plain_text_stays_paragraph(self) -> None:
        block = normalize_block_content(_paragraph(), "#hashtag and -dash")

        assert block.type is BlockType.PARAGRAPH
        assert block.content == "#hashtag and -dash"

    def test_marker_needs_text_after_it(self) -> None:
        assert normalize_block_content(_paragraph(), "## ").type is BlockType.PARAGRAPH

    def test_blank_content(self) -> None:
        block = normalize_block_content(_paragraph("old"), "   ")

        assert block.type is BlockType.PARAGRAPH
        assert block.content == ""

    def test_non_breaking_space_counts(self) -> None:
        block = normalize_block_content(_paragraph(), "##\u00a0Title")

        assert block.type is BlockType.HEADING
        assert block.content == "Title"

    def test_heading_marker_changes_level(self) -> None:
        heading = Block(id="h", type=BlockType.HEADING, content="Title", attributes={"level": 2})

        block = normalize_block_content(heading, "#### Title")

        assert block.type is BlockType.HEADING
        assert block.attributes_as(HeadingAttributes).level == 4

    def test_heading_without_marker_reverts(self) -> None:
        heading = Block(id="h", type=BlockType.HEADING, content="Title", attributes={"level": 2})

        block = normalize_block_content(heading, "Title")

        assert block.type is BlockType.PARAGRAPH
        assert block.content == "Title"
        assert type(block.attributes) is BlockAttributes

    def test_other_types_only_take_content(self) -> None:
        code = create_block("code", "x = 1", block_id="c", language="python")

        block = normalize_block_content(code, "- not a list")

        assert block.type is BlockType.CODE
        assert block.content == "- not a list"
        assert block.attributes.to_mapping() == code.attributes.to_mapping()
        assert code.content == "x = 1"

    def test_input_block_not_modified(self) -> None:
        paragraph = _paragraph("old")
        normalize_block_content(paragraph, "# New")
        assert paragraph.type is BlockType.PARAGRAPH
        assert paragraph.content == "old"

    def test_non_text_raises(self) -> None:
        with pytest.raises(ValidationError):
            normalize_block_content(_paragraph(), None)  # type: ignore[arg-type]
