"""Pydantic contracts shared across mdblocks: blocks, manifests, render options."""

from __future__ import annotations

from .block import (
    Block,
    BlockType,
    ChordProgressionBlock,
    DegreeProgressionBlock,
    ScoreBlock,
    SourceLocation,
    TableBlock,
)
from .manifest import Manifest, ManifestItem
from .render import RenderOptions

__all__ = [
    "Block",
    "BlockType",
    "ChordProgressionBlock",
    "DegreeProgressionBlock",
    "Manifest",
    "ManifestItem",
    "RenderOptions",
    "ScoreBlock",
    "SourceLocation",
    "TableBlock",
]
