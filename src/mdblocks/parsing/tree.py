"""
Generic document tree.

The extraction engine does not look at Markdown syntax directly. It walks a
small, parser-independent tree whose node types follow the mdast vocabulary
(``root``, ``heading``, ``paragraph``, ``text``, ``strong``, ``code``,
``table``, ``tableRow``, ``tableCell``, ...). Any parser can feed the engine
as long as it produces these nodes; :mod:`mdblocks.parsing.markdown` is the
adapter for ``markdown-it-py``.

Design Notes
------------
- **Immutability**: nodes are frozen dataclasses with tuple children, so a
  tree can be shared between passes without defensive copies.
- **Positions**: only block-level nodes carry a :class:`Position`; lines are
  1-indexed and the end line is inclusive.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class Point:
    """A single location in the source text."""

    line: int
    column: int | None = None
    offset: int | None = None


@dataclass(frozen=True, slots=True)
class Position:
    """Start/end span of a node in the source text."""

    start: Point
    end: Point


@dataclass(frozen=True, slots=True)
class Node:
    """
    One node of the generic document tree.

    Attributes
    ----------
    type : str
        mdast-style node type, e.g. ``"paragraph"`` or ``"tableCell"``.
    children : tuple[Node, ...]
        Child nodes in document order (empty for leaves).
    value : str | None
        Literal text for leaves such as ``text``, ``inlineCode`` and ``code``.
    lang : str | None
        Info-string tag of a fenced ``code`` node (e.g. ``"prog"``).
    depth : int | None
        Heading level (1-6) for ``heading`` nodes.
    position : Position | None
        Source span, when the parser reported one.
    """

    type: str
    children: tuple[Node, ...] = field(default_factory=tuple)
    value: str | None = None
    lang: str | None = None
    depth: int | None = None
    position: Position | None = None


def extract_text(node: Node) -> str:
    """Flatten ``node`` into its plain-text content.

    A non-empty literal ``value`` wins; otherwise the children's text is
    concatenated; a node with neither yields ``""``.

    Examples
    --------
    >>> extract_text(Node("strong", (Node("text", value="II-V-I"),)))
    'II-V-I'
    """
    if node.value:
        return node.value
    if node.children:
        return "".join(extract_text(child) for child in node.children)
    return ""


def walk(
    node: Node, index: int | None = None, parent: Node | None = None
) -> Iterator[tuple[Node, int | None, Node | None]]:
    """Yield ``(node, index_in_parent, parent)`` for the subtree in pre-order."""
    yield node, index, parent
    for i, child in enumerate(node.children):
        yield from walk(child, i, node)


__all__ = ["Node", "Point", "Position", "extract_text", "walk"]
