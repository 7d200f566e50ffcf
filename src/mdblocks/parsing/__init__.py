"""Generic document tree and the Markdown parser adapter that produces it."""

from __future__ import annotations

from .markdown import parse_markdown
from .tree import Node, Point, Position, extract_text, walk

__all__ = ["Node", "Point", "Position", "extract_text", "parse_markdown", "walk"]
