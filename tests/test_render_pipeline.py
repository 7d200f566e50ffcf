"""
Tests for the render pipeline use case and the filesystem writer.

The renderer port is replaced with an in-memory fake that records the blocks
it receives and returns a tiny fake PNG payload, so no browser or image
library is needed.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from mdblocks.core.contracts.block import Block
from mdblocks.core.contracts.render import RenderOptions
from mdblocks.manifest import ManifestError
from mdblocks.pipelines import (
    MANIFEST_NAME,
    BlockRenderPipeline,
    FileImageWriter,
    output_folder_name,
)


class FakeRenderer:
    """Renderer port double that records calls."""

    def __init__(self) -> None:
        self.calls: list[tuple[Block, RenderOptions]] = []
        self.closed = False

    def render(self, block: Block, options: RenderOptions) -> bytes:
        self.calls.append((block, options))
        return f"PNG {block.type.value} {block.index}".encode()

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def doc_path(tmp_path: Path, sample_doc: str) -> Path:
    path = tmp_path / "harmony.md"
    path.write_text(sample_doc, encoding="utf-8")
    return path


def test_output_folder_name_strips_markdown_suffix() -> None:
    """Only `.md` and `.markdown` suffixes are removed."""
    assert output_folder_name("/notes/article.md") == "article"
    assert output_folder_name("README.MARKDOWN") == "README"
    assert output_folder_name("notes.txt") == "notes.txt"


def test_file_writer_creates_parents_and_removes(tmp_path: Path) -> None:
    """Writing creates parent folders; removing twice is harmless."""
    writer = FileImageWriter()
    target = tmp_path / "a" / "b" / "x.png"

    writer.write(b"data", target)
    assert target.read_bytes() == b"data"

    writer.remove(target)
    writer.remove(target)
    assert not target.exists()


def test_run_renders_every_block_and_writes_manifest(doc_path: Path, tmp_path: Path) -> None:
    """
    Render the sample document end to end.

    Steps
    -----
    1. Every block reaches the renderer with the same options.
    2. Images land under `<out>/<stem>/` with deterministic names.
    3. `manifest.json` lists the outputs in block order.
    """
    renderer = FakeRenderer()
    options = RenderOptions(width=800)
    pipeline = BlockRenderPipeline(renderer, FileImageWriter())

    result = pipeline.run(doc_path, tmp_path / "out", options, auto_detect=True)

    assert result["output_dir"] == tmp_path / "out" / "harmony"
    assert result["files"] == [
        "prog-01-II-V-I.png",
        "deg-02-Royal-road.png",
        "score-03.png",
        "table-04-Modes.png",
        "prog-05-Turnaround.png",
    ]
    assert all(opts is options for _, opts in renderer.calls)
    assert (result["output_dir"] / "score-03.png").read_bytes() == b"PNG score 3"

    assert result["manifest_path"] == result["output_dir"] / MANIFEST_NAME
    manifest = json.loads(result["manifest_path"].read_text(encoding="utf-8"))
    assert manifest["input"] == str(doc_path)
    assert [i["output"] for i in manifest["items"]] == result["files"]
    assert renderer.closed


def test_run_without_blocks_writes_nothing(tmp_path: Path) -> None:
    """No blocks means no images and no manifest."""
    empty = tmp_path / "empty.md"
    empty.write_text("Just prose.\n", encoding="utf-8")
    renderer = FakeRenderer()

    result = BlockRenderPipeline(renderer, FileImageWriter()).run(
        empty, tmp_path / "out", RenderOptions()
    )

    assert result["files"] == []
    assert result["manifest_path"] is None
    assert renderer.calls == []
    assert not (tmp_path / "out" / "empty" / MANIFEST_NAME).exists()


def test_run_missing_input_raises(tmp_path: Path) -> None:
    """A missing input file propagates `FileNotFoundError`; the renderer is still closed."""
    renderer = FakeRenderer()
    pipeline = BlockRenderPipeline(renderer, FileImageWriter())

    with pytest.raises(FileNotFoundError):
        pipeline.run(tmp_path / "ghost.md", tmp_path / "out", RenderOptions())

    assert renderer.closed


def test_regenerate_from_edited_manifest(doc_path: Path, tmp_path: Path) -> None:
    """Editing a title in the manifest renames the regenerated output."""
    pipeline = BlockRenderPipeline(FakeRenderer(), FileImageWriter())
    first = pipeline.run(doc_path, tmp_path / "out", RenderOptions(), auto_detect=True)
    manifest_path = first["manifest_path"]
    assert manifest_path is not None

    # Rename the score block by editing its manifest title.
    payload = json.loads(manifest_path.read_text(encoding="utf-8"))
    payload["items"][2]["title"] = "Pop loop"
    manifest_path.write_text(json.dumps(payload), encoding="utf-8")

    doc_path.unlink()
    renderer = FakeRenderer()
    second = BlockRenderPipeline(renderer, FileImageWriter()).run_from_manifest(
        manifest_path, RenderOptions()
    )

    out_dir = first["output_dir"]
    assert second["files"][2] == "score-03-Pop-loop.png"
    assert not (out_dir / "score-03.png").exists()
    assert (out_dir / "score-03-Pop-loop.png").exists()
    assert len(renderer.calls) == 5

    updated = json.loads(manifest_path.read_text(encoding="utf-8"))
    assert updated["items"][2]["output"] == "score-03-Pop-loop.png"
    assert updated["items"][2]["title"] == "Pop loop"


def test_regenerate_fails_fast_on_unknown_type(tmp_path: Path) -> None:
    """A bad manifest leaves existing outputs untouched."""
    manifest_path = tmp_path / MANIFEST_NAME
    manifest_path.write_text(
        json.dumps(
            {
                "input": "a.md",
                "generatedAt": "2025-01-01T00:00:00Z",
                "items": [{"index": 1, "type": "unknown", "output": "keep.png"}],
            }
        ),
        encoding="utf-8",
    )
    (tmp_path / "keep.png").write_bytes(b"old")
    renderer = FakeRenderer()

    with pytest.raises(ManifestError):
        BlockRenderPipeline(renderer, FileImageWriter()).run_from_manifest(
            manifest_path, RenderOptions()
        )

    assert (tmp_path / "keep.png").read_bytes() == b"old"
    assert renderer.calls == []
    assert renderer.closed


def test_regenerate_refuses_outputs_outside_manifest_folder(tmp_path: Path) -> None:
    """An `output` that climbs out of the manifest folder aborts before any removal."""
    folder = tmp_path / "out" / "doc"
    folder.mkdir(parents=True)
    victim = tmp_path / "victim.txt"
    victim.write_text("keep", encoding="utf-8")
    (folder / "prog-01.png").write_bytes(b"old")
    manifest_path = folder / MANIFEST_NAME
    manifest_path.write_text(
        json.dumps(
            {
                "input": "doc.md",
                "generatedAt": "2025-01-01T00:00:00Z",
                "items": [
                    {"index": 1, "type": "prog", "chords": ["C", "G"], "output": "prog-01.png"},
                    {"index": 2, "type": "prog", "chords": ["F"], "output": "../../victim.txt"},
                ],
            }
        ),
        encoding="utf-8",
    )
    renderer = FakeRenderer()

    with pytest.raises(ManifestError, match="escapes"):
        BlockRenderPipeline(renderer, FileImageWriter()).run_from_manifest(
            manifest_path, RenderOptions()
        )

    assert victim.read_text(encoding="utf-8") == "keep"
    assert (folder / "prog-01.png").read_bytes() == b"old"
    assert renderer.calls == []
    assert renderer.closed
