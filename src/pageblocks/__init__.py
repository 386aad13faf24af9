"""pageblocks - structured block content for a markdown-backed personal site.

The block model, registry, validator, summarizer and markdown converter live
in ``pageblocks.blocks``.
"""

__version__ = "0.1.0"
