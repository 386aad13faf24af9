from __future__ import annotations

from collections.abc import Callable

import pytest


@pytest.fixture
def id_factory() -> Callable[[], str]:
    """Deterministic block ids: b-1, b-2, ..."""
    from pageblocks.blocks.factory import sequential_id_factory

    return sequential_id_factory("b")


@pytest.fixture
def roundtrip() -> Callable[[str], str]:
    """serialize(parse(markdown)) with deterministic ids."""
    from pageblocks.blocks.factory import sequential_id_factory
    from pageblocks.blocks.markdown_parser import parse
    from pageblocks.blocks.markdown_renderer import serialize

    def run(markdown: str) -> str:
        return serialize(parse(markdown, id_factory=sequential_id_factory("rt")))

    return run
