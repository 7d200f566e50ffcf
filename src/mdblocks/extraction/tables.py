"""Table classifier: generic ``table`` nodes to :class:`TableBlock`."""

from __future__ import annotations

from collections.abc import Collection

from mdblocks.core.contracts.block import BlockType, SourceLocation, TableBlock
from mdblocks.parsing.tree import Node, extract_text, walk


def source_of(node: Node, file_path: str) -> SourceLocation | None:
    """Build a :class:`SourceLocation` from a node's position, if it has one."""
    if node.position is None:
        return None
    return SourceLocation(
        file=file_path,
        start_line=node.position.start.line,
        end_line=node.position.end.line,
    )


def preceding_heading(parent: Node | None, index: int | None) -> str | None:
    """Return the text of the sibling right before ``index`` iff it is a heading."""
    if parent is None or index is None or index <= 0:
        return None
    previous = parent.children[index - 1]
    if previous.type != "heading":
        return None
    return extract_text(previous) or None


def table_to_block(
    node: Node,
    index: int,
    *,
    caption: str | None = None,
    file_path: str = "",
) -> TableBlock:
    """Convert one ``table`` node: first row is the header, the rest are data.

    A table without rows yields empty ``headers`` and ``rows``.
    """
    rows = [[extract_text(cell) for cell in row.children] for row in node.children]
    headers, data = (rows[0], rows[1:]) if rows else ([], [])
    return TableBlock(
        index=index,
        title=caption,
        caption=caption,
        headers=headers,
        rows=data,
        source=source_of(node, file_path),
    )


def classify_tables(
    tree: Node,
    *,
    file_path: str = "",
    types: Collection[BlockType] = tuple(BlockType),
    start: int = 1,
) -> tuple[list[TableBlock], int]:
    """Emit one block per ``table`` node in document order.

    Returns the blocks and the next free occurrence index.
    """
    if BlockType.TABLE not in types:
        return [], start

    blocks: list[TableBlock] = []
    counter = start
    for node, index, parent in walk(tree):
        if node.type != "table":
            continue
        caption = preceding_heading(parent, index)
        blocks.append(table_to_block(node, counter, caption=caption, file_path=file_path))
        counter += 1
    return blocks, counter


__all__ = ["classify_tables", "preceding_heading", "source_of", "table_to_block"]
