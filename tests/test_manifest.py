"""Tests for the manifest codec and file-name suggestions."""

from __future__ import annotations

import json
from datetime import UTC, datetime
from pathlib import Path

import pytest

from mdblocks.core.contracts.block import (
    ChordProgressionBlock,
    DegreeProgressionBlock,
    ScoreBlock,
    SourceLocation,
    TableBlock,
)
from mdblocks.core.contracts.manifest import ManifestItem
from mdblocks.extraction import extract_blocks
from mdblocks.manifest import (
    ManifestError,
    block_filename,
    block_to_manifest_item,
    build_manifest,
    decode_manifest,
    load_manifest,
    manifest_item_to_block,
    manifest_to_json,
    sanitize_filename,
)

FORBIDDEN = set('/\\?%*:|"<>')


# --------------------------------------------------------------------------- #
# Round trip
# --------------------------------------------------------------------------- #


def test_round_trip_for_every_extracted_block(sample_doc: str) -> None:
    """Decoding an encoded block gives back an equal block."""
    blocks = extract_blocks(sample_doc, "notes.md", auto_detect=True)

    for block in blocks:
        item = block_to_manifest_item(block, "out.png")
        assert manifest_item_to_block(item) == block


def test_round_trip_through_json(sample_doc: str) -> None:
    """Blocks survive serialization to JSON and back."""
    blocks = extract_blocks(sample_doc, "notes.md", auto_detect=True)
    manifest = build_manifest("notes.md", blocks, [block_filename(b) for b in blocks])

    decoded = decode_manifest(load_manifest(manifest_to_json(manifest)))

    assert decoded == blocks


def test_build_manifest_records_input_outputs_and_time() -> None:
    """The manifest keeps the input path, output names and a UTC timestamp."""
    before = datetime.now(UTC)
    block = DegreeProgressionBlock(index=1, degrees=["1", "5"])

    manifest = build_manifest("a.md", [block], ["deg-01.png"])

    assert manifest.input == "a.md"
    assert manifest.generated_at >= before
    assert [i.output for i in manifest.items] == ["deg-01.png"]


def test_build_manifest_requires_matching_lengths() -> None:
    """Each block needs exactly one output name."""
    with pytest.raises(ValueError):
        build_manifest("a.md", [DegreeProgressionBlock(index=1, degrees=["1"])], [])


# --------------------------------------------------------------------------- #
# Encode details
# --------------------------------------------------------------------------- #


def test_table_item_uses_caption_as_title() -> None:
    """An untitled table falls back to its caption in the manifest."""
    block = TableBlock(index=2, caption="Modes", headers=["A"], rows=[["1"]])

    item = block_to_manifest_item(block, "table-02-Modes.png")

    assert item.title == "Modes"
    assert item.headers == ["A"]
    assert item.rows == [["1"]]
    assert item.chords is None


def test_json_uses_camel_case_and_omits_absent_fields() -> None:
    """Serialized keys are camelCase and `None` fields are left out."""
    block = ScoreBlock(
        index=1,
        chords=["C", "G"],
        source=SourceLocation(file="a.md", start_line=3, end_line=6),
    )
    manifest = build_manifest("a.md", [block], ["score-01.png"])

    payload = json.loads(manifest_to_json(manifest))

    assert set(payload) == {"input", "generatedAt", "items"}
    [item] = payload["items"]
    assert item == {
        "index": 1,
        "type": "score",
        "output": "score-01.png",
        "source": {"file": "a.md", "startLine": 3, "endLine": 6},
        "chords": ["C", "G"],
    }


# --------------------------------------------------------------------------- #
# Decode details
# --------------------------------------------------------------------------- #


def test_missing_sequences_default_per_type() -> None:
    """Absent lists become `[]`, except score chords and bass stay `None`."""
    prog = manifest_item_to_block(ManifestItem(index=1, type="prog", output="p.png"))
    table = manifest_item_to_block(ManifestItem(index=2, type="table", output="t.png"))
    score = manifest_item_to_block(ManifestItem(index=3, type="score", output="s.png"))

    assert isinstance(prog, ChordProgressionBlock) and prog.chords == []
    assert isinstance(table, TableBlock) and (table.headers, table.rows) == ([], [])
    assert isinstance(score, ScoreBlock) and score.chords is None and score.bass is None


def test_source_passes_through_unchanged() -> None:
    """Source locations are copied as-is in both directions."""
    payload = {
        "input": "a.md",
        "generatedAt": "2025-01-01T00:00:00Z",
        "items": [
            {
                "index": 1,
                "type": "deg",
                "output": "deg-01.png",
                "degrees": ["1", "4"],
                "source": {"file": "elsewhere.md", "startLine": 10, "endLine": 12},
            }
        ],
    }

    [block] = decode_manifest(load_manifest(payload))

    assert block.source == SourceLocation(file="elsewhere.md", start_line=10, end_line=12)


def test_unknown_type_fails_decode() -> None:
    """An unknown item type fails the whole manifest."""
    text = json.dumps(
        {
            "input": "a.md",
            "generatedAt": "2025-01-01T00:00:00Z",
            "items": [
                {"index": 1, "type": "prog", "output": "ok.png", "chords": ["C"]},
                {"index": 2, "type": "unknown", "output": "bad.png"},
            ],
        }
    )

    with pytest.raises(ManifestError):
        load_manifest(text)


def test_invalid_json_fails_decode() -> None:
    """Malformed JSON is reported as a manifest error."""
    with pytest.raises(ManifestError):
        load_manifest("{not json")


def test_empty_chord_entry_fails_decode() -> None:
    """An empty chord string is rejected while decoding."""
    manifest = load_manifest(
        {"input": "a.md", "items": [{"index": 1, "type": "prog", "output": "p.png", "chords": [""]}]}
    )

    with pytest.raises(ManifestError):
        decode_manifest(manifest)


# --------------------------------------------------------------------------- #
# File names
# --------------------------------------------------------------------------- #


def test_block_filename_with_and_without_title() -> None:
    """The title part is omitted when the block has none."""
    assert block_filename(ChordProgressionBlock(index=1, title="II-V-I", chords=["C"])) == (
        "prog-01-II-V-I.png"
    )
    assert block_filename(DegreeProgressionBlock(index=12, degrees=["1"])) == "deg-12.png"
    assert block_filename(TableBlock(index=3, caption="Scale list")) == "table-03-Scale-list.png"


def test_filename_sanitization_removes_forbidden_characters() -> None:
    """Forbidden path characters are removed from titles."""
    name = block_filename(TableBlock(index=1, title="判断軸/危険?"))
    stem = name.removesuffix(".png")

    assert name == "table-01-判断軸危険.png"
    assert not FORBIDDEN & set(stem)


def test_sanitize_truncates_to_fifty_characters() -> None:
    """Sanitized titles are cut to 50 characters."""
    cleaned = sanitize_filename("x " * 60 + 'a<b>"c"')

    assert len(cleaned) <= 50
    assert not FORBIDDEN & set(cleaned)
    assert "--" not in sanitize_filename("a \t\n b")


def test_load_manifest_reads_paths_but_parses_strings_as_json(tmp_path: Path) -> None:
    """A `Path` is read from disk; a `str` is JSON text even when it names a file."""
    text = json.dumps(
        {"input": "a.md", "generatedAt": "2025-01-01T00:00:00Z", "items": []}
    )
    path = tmp_path / "manifest.json"
    path.write_text(text, encoding="utf-8")

    assert load_manifest(path).input == "a.md"
    assert load_manifest(text).input == "a.md"
    with pytest.raises(ManifestError):
        load_manifest(str(path))
