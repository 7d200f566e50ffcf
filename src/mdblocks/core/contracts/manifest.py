"""Manifest contracts: the persisted description of one extraction pass.

A manifest lists every block of a pass in emission order, flattened into a
type-tagged :class:`ManifestItem` together with the file name its rendered
image was written to. It carries enough data to rebuild each block without
re-reading the source document.

JSON shape
----------
Keys are camelCase on the wire (``generatedAt``, ``startLine``) and absent
optionals are omitted::

    {
      "input": "notes/harmony.md",
      "generatedAt": "2025-01-01T00:00:00Z",
      "items": [
        {"index": 1, "type": "prog", "title": "II-V-I", "output": "prog-01-II-V-I.png",
         "chords": ["Dm7", "G7", "Cmaj7"]}
      ]
    }
"""

from __future__ import annotations

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field

from .block import BlockType, SourceLocation


class ManifestItem(BaseModel):
    """Flattened superset of all block variant fields plus the output name."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    index: int = Field(..., ge=1)
    type: BlockType
    title: str | None = None
    key: str | None = None
    note: str | None = None
    output: str = Field(..., description="File name assigned when the block was rendered.")
    source: SourceLocation | None = None

    # Type-specific payloads; which ones are meaningful depends on `type`.
    chords: list[str] | None = None
    degrees: list[str] | None = None
    bass: list[str] | None = None
    headers: list[str] | None = None
    rows: list[list[str]] | None = None


class Manifest(BaseModel):
    """Ordered record of one extraction pass."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    input: str = Field(..., description="Path of the source document.")
    generated_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        alias="generatedAt",
        description="UTC timestamp captured when the manifest was built.",
    )
    items: list[ManifestItem] = Field(default_factory=list)


__all__ = ["Manifest", "ManifestItem"]
