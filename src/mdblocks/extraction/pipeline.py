"""
Extraction pipeline: Markdown (or a generic tree) to an ordered block list.

Flow
----
1. **Tagged pass**   — fenced ``prog`` / ``deg`` / ``score`` / ``table`` regions.
2. **Table pass**    — generic GFM tables (only when ``table`` is requested).
3. **Heuristic pass** — untagged prose lines that look like progressions
   (only when auto-detection is enabled).

Each pass receives the next free occurrence index and returns the index after
its last block, so indices run ``1..N`` in emission order with tagged and
table blocks ahead of detected ones. Every call starts again at 1 and keeps
all working state local.
"""

from __future__ import annotations

from collections.abc import Iterable

from mdblocks.core.contracts.block import Block, BlockType
from mdblocks.core.settings import get_logger, load_settings
from mdblocks.parsing.markdown import parse_markdown
from mdblocks.parsing.tree import Node

from .heuristics import detect_progressions
from .tables import classify_tables
from .tagged import classify_tagged

log = get_logger(__name__)


def _resolve_types(types: Iterable[BlockType | str] | None) -> frozenset[BlockType]:
    if types is None:
        return frozenset(BlockType)
    return frozenset(BlockType(t) for t in types)


def extract_blocks_from_tree(
    tree: Node,
    *,
    file_path: str = "",
    types: Iterable[BlockType | str] | None = None,
    auto_detect: bool | None = None,
) -> list[Block]:
    """Run all three passes over an already parsed document tree.

    Parameters
    ----------
    tree:
        Root of the generic document tree.
    file_path:
        Path recorded in each block's :class:`SourceLocation`.
    types:
        Block types to extract (``None`` means all four). Strings are
        accepted and converted; an unknown string raises ``ValueError``.
    auto_detect:
        Enable the heuristic pass. ``None`` falls back to
        ``settings.auto_detect``.
    """
    wanted = _resolve_types(types)
    if auto_detect is None:
        auto_detect = load_settings().auto_detect

    blocks: list[Block] = []
    tagged, counter = classify_tagged(tree, file_path=file_path, types=wanted, start=1)
    blocks.extend(tagged)

    tables, counter = classify_tables(tree, file_path=file_path, types=wanted, start=counter)
    blocks.extend(tables)

    detected: list[Block] = []
    if auto_detect:
        detected, counter = detect_progressions(
            tree, file_path=file_path, types=wanted, start=counter
        )
        blocks.extend(detected)

    log.debug(
        "extract %s: %d tagged, %d tables, %d detected",
        file_path or "<text>",
        len(tagged),
        len(tables),
        len(detected),
    )
    return blocks


def extract_blocks(
    markdown: str,
    file_path: str = "",
    types: Iterable[BlockType | str] | None = None,
    auto_detect: bool | None = None,
) -> list[Block]:
    """Parse ``markdown`` and extract its blocks.

    Examples
    --------
    >>> blocks = extract_blocks("```prog\\nDm7 → G7\\n```\\n")
    >>> blocks[0].chords
    ['Dm7', 'G7']
    """
    return extract_blocks_from_tree(
        parse_markdown(markdown),
        file_path=file_path,
        types=types,
        auto_detect=auto_detect,
    )


__all__ = ["extract_blocks", "extract_blocks_from_tree"]
