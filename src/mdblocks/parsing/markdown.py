"""
Markdown parser adapter.

Turns raw Markdown into the generic :class:`~mdblocks.parsing.tree.Node`
tree using ``markdown-it-py`` (CommonMark plus GFM tables and
strikethrough). The adapter is the only place that knows about markdown-it
tokens; everything downstream speaks mdast-style node types.

Mapping
-------
=====================  ===========================================
markdown-it            generic tree
=====================  ===========================================
heading (h1..h6)       ``heading`` with ``depth``
paragraph              ``paragraph``
fence / code_block     ``code`` (``lang`` = first info word)
table / tr / th, td    ``table`` / ``tableRow`` / ``tableCell``
bullet/ordered list    ``list`` / ``listItem``
text + softbreak       one ``text`` node joined with ``"\\n"``
strong / em / s        ``strong`` / ``emphasis`` / ``delete``
=====================  ===========================================

Link reference definitions (``[a]: http://x``) emit no markdown-it token.
Non-blank source lines between two sibling blocks are therefore kept as
placeholder ``definition`` nodes, so sibling order matches the document.

Positions come from markdown-it line maps, which are 0-indexed and
end-exclusive; they are converted to 1-indexed inclusive lines.
"""

from __future__ import annotations

import re

from markdown_it import MarkdownIt
from markdown_it.tree import SyntaxTreeNode

from .tree import Node, Point, Position

_BLOCK_TYPES: dict[str, str] = {
    "paragraph": "paragraph",
    "blockquote": "blockquote",
    "bullet_list": "list",
    "ordered_list": "list",
    "list_item": "listItem",
    "hr": "thematicBreak",
}

_INLINE_TYPES: dict[str, str] = {
    "strong": "strong",
    "em": "emphasis",
    "s": "delete",
    "link": "link",
}


_GAP_MARKERS = " \t>"
_LINE_BREAK = re.compile(r"\r\n|\r|\n")


def _make_parser() -> MarkdownIt:
    return MarkdownIt("commonmark").enable(["table", "strikethrough"])


def _position(node: SyntaxTreeNode) -> Position | None:
    line_map = node.map
    if not line_map:
        return None
    start, end = line_map
    return Position(start=Point(line=start + 1), end=Point(line=max(end, start + 1)))


def _convert_inline(children: list[SyntaxTreeNode]) -> tuple[Node, ...]:
    out: list[Node] = []
    pending: list[str] = []

    def flush() -> None:
        if pending:
            out.append(Node("text", value="".join(pending)))
            pending.clear()

    for child in children:
        kind = child.type
        if kind in ("text", "text_special"):
            pending.append(child.content)
            continue
        if kind == "softbreak":
            pending.append("\n")
            continue
        flush()
        if kind == "hardbreak":
            out.append(Node("break"))
        elif kind == "code_inline":
            out.append(Node("inlineCode", value=child.content))
        elif kind == "html_inline":
            out.append(Node("html", value=child.content))
        elif kind == "image":
            out.append(Node("image"))
        elif kind in _INLINE_TYPES:
            out.append(Node(_INLINE_TYPES[kind], children=_convert_inline(child.children)))
    flush()
    return tuple(out)


def _inline_children(node: SyntaxTreeNode) -> tuple[Node, ...]:
    """Return the converted inline content of a heading/paragraph/cell."""
    inline = [c for c in node.children if c.type == "inline"]
    if not inline:
        return ()
    return _convert_inline(inline[0].children)


def _convert_table(node: SyntaxTreeNode) -> Node:
    rows: list[Node] = []
    for section in node.children:  # thead / tbody
        for tr in section.children:
            cells = tuple(
                Node("tableCell", children=_inline_children(cell), position=_position(cell))
                for cell in tr.children
            )
            rows.append(Node("tableRow", children=cells, position=_position(tr)))
    return Node("table", children=tuple(rows), position=_position(node))


def _definitions_between(lines: list[str], start: int, end: int) -> list[Node]:
    """Placeholder ``definition`` nodes for the non-blank lines in ``lines[start:end]``.

    Each line opening with ``[`` starts a new definition; any other non-blank
    line continues the previous one (a title on its own line).
    """
    runs: list[list[int]] = []
    for i in range(start, min(end, len(lines))):
        body = lines[i].strip(_GAP_MARKERS)
        if not body:
            continue
        if runs and runs[-1][1] == i - 1 and not body.startswith("["):
            runs[-1][1] = i
        else:
            runs.append([i, i])
    return [
        Node("definition", position=Position(start=Point(line=a + 1), end=Point(line=b + 1)))
        for a, b in runs
    ]


def _convert_children(
    nodes: list[SyntaxTreeNode],
    lines: list[str] | None = None,
    start: int = 0,
    end: int = 0,
) -> tuple[Node, ...]:
    """Convert sibling blocks; with ``lines``, also fill source gaps with definitions."""
    out: list[Node] = []
    cursor = start
    for child in nodes:
        if lines is not None and child.map:
            out.extend(_definitions_between(lines, cursor, child.map[0]))
            cursor = child.map[1]
        converted = _convert_block(child, lines)
        if converted is not None:
            out.append(converted)
    if lines is not None:
        out.extend(_definitions_between(lines, cursor, end))
    return tuple(out)


def _convert_block(node: SyntaxTreeNode, lines: list[str] | None = None) -> Node | None:
    kind = node.type
    if kind == "heading":
        return Node(
            "heading",
            children=_inline_children(node),
            depth=int(node.tag[1:]),
            position=_position(node),
        )
    if kind == "paragraph":
        return Node("paragraph", children=_inline_children(node), position=_position(node))
    if kind in ("fence", "code_block"):
        content = node.content
        if content.endswith("\n"):
            content = content[:-1]
        info = node.info.strip() if kind == "fence" else ""
        lang = info.split()[0] if info else None
        return Node("code", value=content, lang=lang, position=_position(node))
    if kind == "table":
        return _convert_table(node)
    if kind == "html_block":
        return Node("html", value=node.content, position=_position(node))
    if kind == "blockquote" and lines is not None and node.map:
        children = _convert_children(node.children, lines, node.map[0], node.map[1])
        return Node("blockquote", children=children, position=_position(node))
    if kind in _BLOCK_TYPES:
        # List items are not gap-scanned: an empty item's marker line has no token.
        children = _convert_children(node.children)
        return Node(_BLOCK_TYPES[kind], children=children, position=_position(node))
    return None


def parse_markdown(text: str) -> Node:
    """Parse ``text`` into a ``root`` node of the generic document tree.

    Parameters
    ----------
    text:
        Raw Markdown source. ``\\r\\n`` line endings are normalized by the
        parser.

    Returns
    -------
    Node
        The ``root`` node; its children are the top-level blocks.
    """
    tokens = _make_parser().parse(text or "")
    root = SyntaxTreeNode(tokens)
    lines = _LINE_BREAK.split(text or "")
    children = _convert_children(root.children, lines, 0, len(lines))
    line_count = max(1, len((text or "").splitlines()))
    return Node(
        "root",
        children=children,
        position=Position(start=Point(line=1), end=Point(line=line_count)),
    )


__all__ = ["parse_markdown"]
