"""
Render pipeline: from a Markdown file (or a manifest) to image files.

Flow Overview
-------------
1. **Extract** — read the document and run the extraction engine.
2. **Render**  — hand each block plus :class:`RenderOptions` to a
   :class:`BlockRenderer`, which returns an opaque image buffer.
3. **Write**   — store each buffer under :func:`block_filename` inside
   ``<out_dir>/<document stem>/`` and write ``manifest.json`` next to them.

Regeneration (:meth:`BlockRenderPipeline.run_from_manifest`) skips step 1:
it decodes the blocks from a previous manifest, removes the files that
manifest lists, renders again and rewrites the manifest with the new output
names and timestamp. Editing a title in ``manifest.json`` and regenerating is
the supported way to rename outputs.

Design Principles
-----------------
- **Ports, not implementations**: rendering and storage are collaborators
  behind small protocols; the pipeline never draws pixels.
- **Deterministic names**: output names are derived from block type, index
  and title only.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from pathlib import Path
from typing import Protocol, TypedDict

from mdblocks.core.contracts.block import Block, BlockType
from mdblocks.core.contracts.manifest import Manifest
from mdblocks.core.contracts.render import RenderOptions
from mdblocks.core.settings import get_logger
from mdblocks.extraction.pipeline import extract_blocks
from mdblocks.manifest import (
    ManifestError,
    block_filename,
    build_manifest,
    decode_manifest,
    load_manifest,
    manifest_to_json,
)

log = get_logger(__name__)

MANIFEST_NAME = "manifest.json"
_MARKDOWN_SUFFIX = re.compile(r"\.(md|markdown)$", flags=re.IGNORECASE)


# --------------------------------------------------------------------------- #
# Ports
# --------------------------------------------------------------------------- #


class BlockRenderer(Protocol):
    """Turns one block into an image buffer."""

    def render(self, block: Block, options: RenderOptions) -> bytes: ...

    def close(self) -> None:
        """Release renderer resources; called when a pipeline run ends."""
        ...


class ImageWriter(Protocol):
    """Stores image buffers; :class:`~mdblocks.pipelines.storage.FileImageWriter` on disk."""

    def ensure_dir(self, path: Path) -> None: ...

    def write(self, data: bytes, path: Path) -> Path: ...

    def remove(self, path: Path) -> None: ...


class RenderResult(TypedDict):
    """Outcome of one pipeline run.

    Attributes
    ----------
    output_dir:
        Directory the images (and the manifest) were written to.
    files:
        Output file names in block order.
    manifest_path:
        Path of the written manifest, or ``None`` when nothing was rendered.
    """

    output_dir: Path
    files: list[str]
    manifest_path: Path | None


def output_folder_name(input_path: str | Path) -> str:
    """Return the per-document folder name: the file name without ``.md``.

    >>> output_folder_name("/notes/article.md")
    'article'
    """
    return _MARKDOWN_SUFFIX.sub("", Path(input_path).name)


def _contained_output(folder: Path, output: str) -> Path:
    """Resolve a manifest ``output`` name, refusing paths outside ``folder``."""
    root = folder.resolve()
    candidate = (folder / output).resolve()
    if candidate == root or not candidate.is_relative_to(root):
        raise ManifestError(f"Output path escapes the manifest folder: {output!r}")
    return candidate


# --------------------------------------------------------------------------- #
# Use case
# --------------------------------------------------------------------------- #


class BlockRenderPipeline:
    """Extract blocks, render them through a port and persist the results."""

    def __init__(self, renderer: BlockRenderer, writer: ImageWriter) -> None:
        self.renderer = renderer
        self.writer = writer

    def _render_all(
        self, blocks: Iterable[Block], out_dir: Path, options: RenderOptions, verb: str
    ) -> list[str]:
        files: list[str] = []
        for block in blocks:
            filename = block_filename(block)
            data = self.renderer.render(block, options)
            self.writer.write(data, out_dir / filename)
            files.append(filename)
            log.info("%s: %s", verb, filename)
        return files

    def run(
        self,
        input_path: str | Path,
        out_dir: str | Path,
        options: RenderOptions,
        *,
        types: Iterable[BlockType | str] | None = None,
        auto_detect: bool | None = None,
    ) -> RenderResult:
        """Extract blocks from ``input_path`` and render each one.

        The renderer is closed when the run finishes, successfully or not.

        Raises
        ------
        FileNotFoundError
            If ``input_path`` does not exist.
        """
        try:
            source = Path(input_path)
            target = Path(out_dir) / output_folder_name(source)
            self.writer.ensure_dir(target)

            markdown = source.read_text(encoding="utf-8")
            blocks = extract_blocks(markdown, str(source), types=types, auto_detect=auto_detect)
            if not blocks:
                log.info("No blocks found in %s", source)
                return {"output_dir": target, "files": [], "manifest_path": None}

            files = self._render_all(blocks, target, options, "Generated")

            manifest = build_manifest(source, blocks, files)
            manifest_path = target / MANIFEST_NAME
            self.writer.write(manifest_to_json(manifest).encode("utf-8"), manifest_path)
            log.info("Generated: %s", MANIFEST_NAME)

            return {"output_dir": target, "files": files, "manifest_path": manifest_path}
        finally:
            self.renderer.close()

    def run_from_manifest(self, manifest_path: str | Path, options: RenderOptions) -> RenderResult:
        """Re-render every block described by an existing manifest.

        Every listed ``output`` must name a file inside the manifest's folder.
        The renderer is closed when the run finishes.

        Raises
        ------
        ManifestError
            If the manifest cannot be decoded or an ``output`` escapes the
            folder; nothing is removed or written.
        """
        try:
            return self._regenerate(Path(manifest_path), options)
        finally:
            self.renderer.close()

    def _regenerate(self, path: Path, options: RenderOptions) -> RenderResult:
        manifest = load_manifest(path)
        blocks = decode_manifest(manifest)

        target = path.parent
        stale = [_contained_output(target, item.output) for item in manifest.items]

        self.writer.ensure_dir(target)
        for old in stale:
            self.writer.remove(old)

        files = self._render_all(blocks, target, options, "Regenerated")

        updated = Manifest(
            input=manifest.input,
            items=[
                item.model_copy(update={"output": name})
                for item, name in zip(manifest.items, files, strict=True)
            ],
        )
        self.writer.write(manifest_to_json(updated).encode("utf-8"), path)
        log.info("Updated: %s", path.name)

        return {"output_dir": target, "files": files, "manifest_path": path}


__all__ = [
    "MANIFEST_NAME",
    "BlockRenderPipeline",
    "BlockRenderer",
    "ImageWriter",
    "RenderResult",
    "output_folder_name",
]
