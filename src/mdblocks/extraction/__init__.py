"""Document-to-block extraction engine.

- :func:`extract_blocks` — Markdown text to typed blocks.
- :func:`extract_blocks_from_tree` — same, for an already parsed tree.

The individual passes (tagged regions, generic tables, heuristic detection)
and their helpers live in the submodules.
"""

from __future__ import annotations

from .front_matter import FrontMatter, split_front_matter
from .pipeline import extract_blocks, extract_blocks_from_tree
from .tokenizers import split_chords, split_degrees, split_score

__all__ = [
    "FrontMatter",
    "extract_blocks",
    "extract_blocks_from_tree",
    "split_chords",
    "split_degrees",
    "split_front_matter",
    "split_score",
]
