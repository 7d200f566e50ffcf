"""
Tagged-block classifier.

Fenced code blocks whose info string is one of the :class:`BlockType` wire
tags are turned into typed blocks::

    ```prog
    title: II-V-I
    key: C
    ---
    Dm7 → G7 → Cmaj7
    ```

Every tagged region first goes through the header/body splitter; the body is
then handed to the tokenizer matching the tag. A ``table`` region holds
ordinary Markdown table syntax, so its body is run through the extraction
pipeline again, restricted to tables.

Fences with any other info string are ignored.
"""

from __future__ import annotations

from collections.abc import Collection

from mdblocks.core.contracts.block import (
    Block,
    BlockType,
    ChordProgressionBlock,
    DegreeProgressionBlock,
    ScoreBlock,
    SourceLocation,
    TableBlock,
)
from mdblocks.parsing.tree import Node, walk

from .front_matter import FrontMatter, split_front_matter
from .tables import source_of
from .tokenizers import split_chords, split_degrees, split_score


def tag_of(node: Node) -> BlockType | None:
    """Return the block type a ``code`` node is tagged with, if recognised."""
    if node.type != "code" or not node.lang:
        return None
    try:
        return BlockType(node.lang)
    except ValueError:
        return None


def _fenced_table(meta: FrontMatter, index: int, source: SourceLocation | None) -> TableBlock:
    # Local import: the pipeline module imports this one.
    from .pipeline import extract_blocks

    inner = extract_blocks(meta.body, types=(BlockType.TABLE,), auto_detect=False)
    tables = [b for b in inner if isinstance(b, TableBlock)]
    if not tables:
        return TableBlock(index=index, title=meta.title, caption=meta.title, source=source)

    first = tables[0]
    caption = meta.title or first.caption
    return TableBlock(
        index=index,
        title=caption,
        caption=caption,
        headers=first.headers,
        rows=first.rows,
        source=source,
    )


def code_to_block(node: Node, tag: BlockType, index: int, *, file_path: str = "") -> Block:
    """Classify one tagged ``code`` node as the block type named by ``tag``."""
    meta = split_front_matter(node.value or "")
    source = source_of(node, file_path)

    match tag:
        case BlockType.TABLE:
            return _fenced_table(meta, index, source)
        case BlockType.CHORD_PROGRESSION:
            return ChordProgressionBlock(
                index=index,
                title=meta.title,
                key=meta.key,
                chords=split_chords(meta.body),
                note=meta.note,
                source=source,
            )
        case BlockType.DEGREE_PROGRESSION:
            return DegreeProgressionBlock(
                index=index,
                title=meta.title,
                key=meta.key,
                degrees=split_degrees(meta.body),
                note=meta.note,
                source=source,
            )
        case BlockType.SCORE:
            chords, bass = split_score(meta.body)
            return ScoreBlock(
                index=index,
                title=meta.title,
                key=meta.key,
                chords=chords,
                bass=bass,
                note=meta.note,
                source=source,
            )
    raise ValueError(f"Unhandled block type: {tag!r}")


def classify_tagged(
    tree: Node,
    *,
    file_path: str = "",
    types: Collection[BlockType] = tuple(BlockType),
    start: int = 1,
) -> tuple[list[Block], int]:
    """Emit one block per recognised tagged region, in document order.

    Returns the blocks and the next free occurrence index.
    """
    blocks: list[Block] = []
    counter = start
    for node, _, _ in walk(tree):
        tag = tag_of(node)
        if tag is None or tag not in types:
            continue
        blocks.append(code_to_block(node, tag, counter, file_path=file_path))
        counter += 1
    return blocks, counter


__all__ = ["classify_tagged", "code_to_block", "tag_of"]
