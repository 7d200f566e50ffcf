"""
Block Contract

These Pydantic models define the typed units produced by the extraction
engine. Each block is one self-contained piece of a Markdown document that an
external renderer can turn into an image on its own:

- :class:`TableBlock`               — a GFM table or a ``table`` fenced block.
- :class:`ChordProgressionBlock`    — ``Dm7 → G7 → Cmaj7``.
- :class:`DegreeProgressionBlock`   — ``3m - 4 - 5 - 6m`` (or solfège notes).
- :class:`ScoreBlock`               — labelled ``chords:`` / ``bass:`` lines.

Blocks are frozen value objects: they are created once by an extraction or a
manifest decode pass and never mutated by consumers.

Wire tags
---------
The :class:`BlockType` values (``table``, ``prog``, ``deg``, ``score``) are
used verbatim as fence language tags, manifest ``type`` values and output
file-name prefixes.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


class BlockType(StrEnum):
    """Closed set of block kinds recognised by the engine."""

    TABLE = "table"
    CHORD_PROGRESSION = "prog"
    DEGREE_PROGRESSION = "deg"
    SCORE = "score"


class SourceLocation(BaseModel):
    """Where a block came from: file path plus 1-indexed inclusive line range."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    file: str = Field(..., description="Path of the source document ('' if unknown).")
    start_line: int = Field(..., ge=1, alias="startLine")
    end_line: int = Field(..., ge=1, alias="endLine")


class _BlockBase(BaseModel):
    """Fields shared by every block variant."""

    model_config = ConfigDict(frozen=True)

    index: int = Field(..., ge=1, description="1-based occurrence order within one pass.")
    title: str | None = Field(default=None, description="Human-readable title, if any.")
    source: SourceLocation | None = Field(
        default=None, description="Position in the source document, when known."
    )


def _reject_empty(values: list[str] | None) -> list[str] | None:
    if values is not None and any(not v for v in values):
        raise ValueError("sequence entries must be non-empty strings")
    return values


class TableBlock(_BlockBase):
    """Tabular data; ``caption`` defaults to the preceding heading."""

    type: Literal[BlockType.TABLE] = BlockType.TABLE
    caption: str | None = None
    headers: list[str] = Field(default_factory=list)
    rows: list[list[str]] = Field(default_factory=list)


class ChordProgressionBlock(_BlockBase):
    """An ordered chord progression, e.g. ``["Dm7", "G7", "Cmaj7"]``."""

    type: Literal[BlockType.CHORD_PROGRESSION] = BlockType.CHORD_PROGRESSION
    key: str | None = None
    chords: list[str] = Field(default_factory=list)
    note: str | None = None

    @field_validator("chords")
    @classmethod
    def _chords_non_empty(cls, v: list[str]) -> list[str]:
        return _reject_empty(v) or []


class DegreeProgressionBlock(_BlockBase):
    """An ordered scale-degree progression, e.g. ``["3m", "4", "5", "6m"]``."""

    type: Literal[BlockType.DEGREE_PROGRESSION] = BlockType.DEGREE_PROGRESSION
    key: str | None = None
    degrees: list[str] = Field(default_factory=list)
    note: str | None = None

    @field_validator("degrees")
    @classmethod
    def _degrees_non_empty(cls, v: list[str]) -> list[str]:
        return _reject_empty(v) or []


class ScoreBlock(_BlockBase):
    """A score fragment; ``chords`` and ``bass`` are independently optional."""

    type: Literal[BlockType.SCORE] = BlockType.SCORE
    key: str | None = None
    chords: list[str] | None = None
    bass: list[str] | None = None
    note: str | None = None


Block = TableBlock | ChordProgressionBlock | DegreeProgressionBlock | ScoreBlock
"""Union of all block variants; consumers dispatch with ``match``."""


__all__ = [
    "Block",
    "BlockType",
    "ChordProgressionBlock",
    "DegreeProgressionBlock",
    "ScoreBlock",
    "SourceLocation",
    "TableBlock",
]
