"""Block-based content model for pages and articles.

This package turns portable markdown into a typed block tree for the
editor, and back again.

Key components:
- models / attributes: Block, Document, BlockType and per-type attributes
- registry: Block type catalog for the insertion menu
- validator: Drops blocks with an unknown type or no id
- summarizer: One-line block previews
- scanner: Line scanner grouping markdown into spans
- markdown_parser: Markdown -> Blocks conversion
- markdown_renderer: Blocks -> Markdown export
- factory: Creating, converting and duplicating blocks; editor shortcuts
- tree: Tree operations (move, insert, ancestors)
- frontmatter: Article YAML frontmatter and metadata checks
- outline: Table of contents, outline, excerpt and reading time
"""

from .attributes import ListItem, ListKind
from .factory import (
    convert_block,
    create_block,
    duplicate_block,
    new_block_id,
    normalize_block_content,
    sequential_id_factory,
)
from .frontmatter import (
    Article,
    join_frontmatter,
    parse_article,
    serialize_article,
    split_frontmatter,
    validate_metadata,
)
from .markdown_parser import parse
from .markdown_renderer import serialize
from .models import Block, BlockType, Document
from .outline import (
    OutlineEntry,
    OutlineItem,
    excerpt,
    outline,
    reading_time,
    table_of_contents,
    toc_tree,
    word_count,
)
from .registry import REGISTRY, BlockDefinition, BlockGroup, definitions, find, search
from .summarizer import summarize, truncate
from .tree import (
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
from .validator import ValidationReport, validate, validate_document, validate_with_report

__all__ = [
    "Article",
    "Block",
    "BlockDefinition",
    "BlockGroup",
    "BlockType",
    "Document",
    "ListItem",
    "ListKind",
    "OutlineEntry",
    "OutlineItem",
    "REGISTRY",
    "ValidationReport",
    "convert_block",
    "create_block",
    "definitions",
    "duplicate_block",
    "excerpt",
    "find",
    "find_block",
    "flatten_tree",
    "get_ancestors",
    "get_block_depth",
    "get_descendants",
    "get_siblings",
    "insert_block",
    "iter_blocks",
    "join_frontmatter",
    "move_block",
    "new_block_id",
    "normalize_block_content",
    "outline",
    "parse",
    "parse_article",
    "reading_time",
    "remove_block",
    "search",
    "sequential_id_factory",
    "serialize",
    "serialize_article",
    "split_frontmatter",
    "summarize",
    "table_of_contents",
    "toc_tree",
    "truncate",
    "validate",
    "validate_document",
    "validate_metadata",
    "validate_with_report",
    "word_count",
]
