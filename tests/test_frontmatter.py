"""Tests for article frontmatter."""

from __future__ import annotations

import logging

import pytest

from pageblocks.blocks.frontmatter import (
    join_frontmatter,
    parse_article,
    serialize_article,
    split_frontmatter,
    validate_metadata,
)
from pageblocks.blocks.models import BlockType
from pageblocks.errors import FrontmatterError, ValidationError
from pageblocks.settings import Settings

ARTICLE = """---
title: Building a block editor
tags: python, markdown
draft: "false"
---

# Building a block editor

Intro text.
"""


@pytest.fixture
def strict(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("pageblocks.blocks.frontmatter.settings", Settings(strict_frontmatter=True))


class TestSplitFrontmatter:
    def test_split(self) -> None:
        metadata, body = split_frontmatter(ARTICLE)

        assert metadata == {
            "title": "Building a block editor",
            "tags": ["python", "markdown"],
            "draft": False,
        }
        assert body == "\n# Building a block editor\n\nIntro text.\n"

    def test_no_frontmatter(self) -> None:
        text = "# Just markdown\n"
        assert split_frontmatter(text) == ({}, text)

    def test_rule_later_in_document_is_not_frontmatter(self) -> None:
        text = "Intro\n---\nmore\n"
        assert split_frontmatter(text) == ({}, text)

    def test_empty_frontmatter(self) -> None:
        assert split_frontmatter("---\n---\nBody") == ({}, "Body")

    def test_tag_list_and_flags(self) -> None:
        metadata, _ = split_frontmatter("---\ntags: [a, ' b ', 3]\nfeatured: TRUE\n---\n")
        assert metadata == {"tags": ["a", "b", "3"], "featured": True}

    def test_yaml_booleans_untouched(self) -> None:
        metadata, _ = split_frontmatter("---\ndraft: true\n---\n")
        assert metadata["draft"] is True

    def test_malformed_yaml_kept_as_body(self, caplog: pytest.LogCaptureFixture) -> None:
        """Lenient mode keeps the text and logs a warning."""
        text = "---\ntitle: [unclosed\n---\nBody\n"

        with caplog.at_level(logging.WARNING, logger="pageblocks.blocks.frontmatter"):
            metadata, body = split_frontmatter(text)

        assert metadata == {}
        assert body == text
        assert "malformed frontmatter" in caplog.text

    def test_non_mapping_kept_as_body(self) -> None:
        text = "---\n- just\n- a list\n---\nBody\n"
        assert split_frontmatter(text) == ({}, text)

    def test_malformed_yaml_strict(self, strict: None) -> None:
        with pytest.raises(FrontmatterError) as exc_info:
            split_frontmatter("---\ntitle: [unclosed\n---\n")
        assert exc_info.value.to_dict()["reason"] == "yaml_error"

    def test_non_mapping_strict(self, strict: None) -> None:
        with pytest.raises(FrontmatterError) as exc_info:
            split_frontmatter("---\njust a string\n---\n")
        assert exc_info.value.to_dict()["reason"] == "not_a_mapping"

    def test_crlf_line_endings(self) -> None:
        metadata, body = split_frontmatter("---\r\ntitle: Hello\r\n---\r\n\r\nBody\r\n")

        assert metadata == {"title": "Hello"}
        assert body == "\nBody\n"

    def test_non_text_raises(self) -> None:
        with pytest.raises(ValidationError):
            split_frontmatter(None)  # type: ignore[arg-type]


class TestJoinFrontmatter:
    def test_join(self) -> None:
        text = join_frontmatter({"title": "Hello", "tags": ["a", "b"]}, "Body\n")
        assert text == "---\ntitle: Hello\ntags:\n- a\n- b\n---\n\nBody\n"

    def test_empty_metadata_is_body_only(self) -> None:
        assert join_frontmatter({}, "Body\n") == "Body\n"

    def test_join_then_split(self) -> None:
        metadata = {"title": "Café: notes", "draft": True, "tags": ["x"]}
        assert split_frontmatter(join_frontmatter(metadata, "Body\n")) == (metadata, "\nBody\n")


class TestArticle:
    def test_parse_article(self, id_factory) -> None:
        article = parse_article(ARTICLE, id_factory=id_factory)

        assert article.title == "Building a block editor"
        assert article.tags == ["python", "markdown"]
        assert article.draft is False
        assert [b.type for b in article.document] == [BlockType.HEADING, BlockType.PARAGRAPH]

    def test_article_without_frontmatter(self) -> None:
        article = parse_article("Text only")
        assert article.metadata == {}
        assert article.title == ""
        assert article.tags == []

    def test_serialize_article_is_stable(self) -> None:
        article = parse_article(ARTICLE)
        once = serialize_article(article.metadata, article.document)

        again = parse_article(once)
        assert serialize_article(again.metadata, again.document) == once
        assert once.startswith("---\ntitle: Building a block editor\n")

    def test_windows_line_endings_keep_metadata(self) -> None:
        article = parse_article("---\r\ntitle: Hello\r\n---\r\n\r\nBody\r\n")

        assert article.metadata == {"title": "Hello"}
        assert [b.content for b in article.document] == ["Body"]
        assert serialize_article(article.metadata, article.document) == "---\ntitle: Hello\n---\n\nBody\n"


class TestValidateMetadata:
    def test_complete_metadata(self) -> None:
        metadata = {
            "title": "Hello",
            "description": "A first post",
            "date": "2024-03-01",
            "tags": ["python"],
        }
        assert validate_metadata(metadata) == (True, [])

    def test_missing_title_and_description(self) -> None:
        valid, errors = validate_metadata({"title": "  "})

        assert valid is False
        assert errors == ["Title is required", "Description is required"]

    @pytest.mark.parametrize("value", ["2024-03-01T10:00:00Z", "2024-03-01 10:00"])
    def test_iso_date_strings(self, value: str) -> None:
        assert validate_metadata({"title": "t", "description": "d", "date": value})[0]

    def test_yaml_date_object(self) -> None:
        metadata, _ = split_frontmatter("---\ntitle: t\ndescription: d\ndate: 2024-03-01\n---\n")
        assert validate_metadata(metadata) == (True, [])

    @pytest.mark.parametrize("value", ["yesterday", "2024-13-45", 20240301])
    def test_invalid_date(self, value) -> None:
        valid, errors = validate_metadata({"title": "t", "description": "d", "date": value})

        assert valid is False
        assert errors == ["Invalid date format"]

    @pytest.mark.parametrize("tags", [[], "python"])
    def test_tags_must_be_non_empty_list(self, tags) -> None:
        _, errors = validate_metadata({"title": "t", "description": "d", "tags": tags})
        assert errors == ["Tags should be a non-empty list"]

    def test_parsed_tags_validate(self) -> None:
        metadata, _ = split_frontmatter(ARTICLE)
        assert "Tags should be a non-empty list" not in validate_metadata(metadata)[1]

    def test_non_mapping_raises(self) -> None:
        with pytest.raises(ValidationError):
            validate_metadata(["title"])  # type: ignore[arg-type]
