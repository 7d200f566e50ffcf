"""
Manifest codec: blocks to a persisted manifest and back.

Encoding flattens each block into a :class:`ManifestItem` next to the file
name its rendered image received. Decoding reverses the flattening so outputs
can be regenerated without the original document.

Round-trip law
--------------
For every block ``b`` produced by extraction::

    manifest_item_to_block(block_to_manifest_item(b, name)) == b

Decoding is strict: an item with an unknown ``type`` (or any other schema
violation) raises :class:`ManifestError` for the whole manifest instead of
dropping the item.

File names
----------
:func:`block_filename` suggests ``{type}-{index:02d}-{title}.png``, e.g.
``prog-01-II-V-I.png``; the title part is omitted when the block has none.
"""

from __future__ import annotations

import json
import re
from collections.abc import Sequence
from datetime import UTC, datetime
from pathlib import Path

from pydantic import ValidationError

from mdblocks.core.contracts.block import (
    Block,
    BlockType,
    ChordProgressionBlock,
    DegreeProgressionBlock,
    ScoreBlock,
    TableBlock,
)
from mdblocks.core.contracts.manifest import Manifest, ManifestItem

_FORBIDDEN = re.compile(r'[/\\?%*:|"<>]')
_WHITESPACE = re.compile(r"\s+")
MAX_TITLE_LENGTH = 50


class ManifestError(ValueError):
    """Raised when a persisted manifest cannot be decoded."""


# --------------------------------------------------------------------------- #
# File names
# --------------------------------------------------------------------------- #


def sanitize_filename(name: str) -> str:
    """Make ``name`` safe for use inside a file name.

    Forbidden characters are removed, whitespace runs become a single hyphen
    and the result is cut to 50 characters.

    >>> sanitize_filename("判断軸/危険?")
    '判断軸危険'
    >>> sanitize_filename("II  V I")
    'II-V-I'
    """
    cleaned = _FORBIDDEN.sub("", name)
    cleaned = _WHITESPACE.sub("-", cleaned)
    return cleaned[:MAX_TITLE_LENGTH].strip()


def _display_title(block: Block) -> str | None:
    if block.title:
        return block.title
    if isinstance(block, TableBlock) and block.caption:
        return block.caption
    return None


def block_filename(block: Block, extension: str = ".png") -> str:
    """Suggest a deterministic output file name for ``block``."""
    stem = f"{block.type.value}-{block.index:02d}"
    title = sanitize_filename(_display_title(block) or "")
    if title:
        stem = f"{stem}-{title}"
    return f"{stem}{extension}"


# --------------------------------------------------------------------------- #
# Encode
# --------------------------------------------------------------------------- #


def block_to_manifest_item(block: Block, output: str) -> ManifestItem:
    """Flatten ``block`` into a :class:`ManifestItem` tagged with ``output``."""
    fields: dict[str, object] = {
        "index": block.index,
        "type": block.type,
        "title": _display_title(block),
        "output": output,
        "source": block.source,
    }
    match block:
        case TableBlock():
            fields.update(headers=block.headers, rows=block.rows)
        case ChordProgressionBlock():
            fields.update(key=block.key, note=block.note, chords=block.chords)
        case DegreeProgressionBlock():
            fields.update(key=block.key, note=block.note, degrees=block.degrees)
        case ScoreBlock():
            fields.update(key=block.key, note=block.note, chords=block.chords, bass=block.bass)
    for name in ("title", "key", "note"):
        if not fields.get(name):
            fields[name] = None
    return ManifestItem.model_validate(fields)


def build_manifest(
    input_path: str | Path,
    blocks: Sequence[Block],
    outputs: Sequence[str],
) -> Manifest:
    """Encode one extraction pass; ``outputs[i]`` is the file name of ``blocks[i]``.

    Raises
    ------
    ValueError
        If ``blocks`` and ``outputs`` differ in length.
    """
    if len(blocks) != len(outputs):
        raise ValueError(
            f"Expected one output name per block, got {len(outputs)} for {len(blocks)} blocks"
        )
    items = [block_to_manifest_item(b, name) for b, name in zip(blocks, outputs, strict=True)]
    return Manifest(input=str(input_path), generated_at=datetime.now(UTC), items=items)


def manifest_to_json(manifest: Manifest) -> str:
    """Serialize ``manifest`` with camelCase keys, omitting absent optionals."""
    payload = manifest.model_dump(mode="json", by_alias=True, exclude_none=True)
    return json.dumps(payload, ensure_ascii=False, indent=2)


# --------------------------------------------------------------------------- #
# Decode
# --------------------------------------------------------------------------- #


def manifest_item_to_block(item: ManifestItem) -> Block:
    """Rebuild the block described by ``item``.

    Missing ``headers``/``rows``/``chords``/``degrees`` become empty lists;
    a score's ``chords`` and ``bass`` stay ``None`` when absent.
    """
    match item.type:
        case BlockType.TABLE:
            return TableBlock(
                index=item.index,
                title=item.title,
                caption=item.title,
                headers=item.headers or [],
                rows=item.rows or [],
                source=item.source,
            )
        case BlockType.CHORD_PROGRESSION:
            return ChordProgressionBlock(
                index=item.index,
                title=item.title,
                key=item.key,
                chords=item.chords or [],
                note=item.note,
                source=item.source,
            )
        case BlockType.DEGREE_PROGRESSION:
            return DegreeProgressionBlock(
                index=item.index,
                title=item.title,
                key=item.key,
                degrees=item.degrees or [],
                note=item.note,
                source=item.source,
            )
        case BlockType.SCORE:
            return ScoreBlock(
                index=item.index,
                title=item.title,
                key=item.key,
                chords=item.chords,
                bass=item.bass,
                note=item.note,
                source=item.source,
            )
    raise ManifestError(f"Unsupported block type: {item.type!r}")


def decode_manifest(manifest: Manifest) -> list[Block]:
    """Rebuild every block of ``manifest`` in order."""
    try:
        return [manifest_item_to_block(item) for item in manifest.items]
    except ValidationError as exc:
        raise ManifestError(f"Invalid manifest item: {exc}") from exc


def load_manifest(source: str | Path | dict[str, object]) -> Manifest:
    """Load a manifest from a file, JSON text or a parsed dict.

    A :class:`Path` is read from disk. A ``str`` is always parsed as JSON
    text, never as a file name; wrap file names in :class:`Path`.

    Raises
    ------
    ManifestError
        If the document is not valid JSON or does not match the manifest
        schema (including an unknown item ``type``).
    FileNotFoundError
        If ``source`` is a :class:`Path` that does not exist.
    """
    try:
        if isinstance(source, dict):
            return Manifest.model_validate(source)
        if isinstance(source, Path):
            return Manifest.model_validate_json(source.read_text(encoding="utf-8"))
        return Manifest.model_validate_json(source)
    except ValidationError as exc:
        raise ManifestError(f"Invalid manifest: {exc}") from exc


__all__ = [
    "ManifestError",
    "block_filename",
    "block_to_manifest_item",
    "build_manifest",
    "decode_manifest",
    "load_manifest",
    "manifest_item_to_block",
    "manifest_to_json",
    "sanitize_filename",
]
