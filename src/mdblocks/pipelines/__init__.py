"""Pipeline entry points for mdblocks.

Currently exposed:

- :class:`BlockRenderPipeline` — extract, render through a port, write
  images plus ``manifest.json``; or regenerate from a manifest.
- :class:`FileImageWriter` — filesystem implementation of the writer port.
"""

from __future__ import annotations

from .render_blocks import (
    MANIFEST_NAME,
    BlockRenderer,
    BlockRenderPipeline,
    ImageWriter,
    RenderResult,
    output_folder_name,
)
from .storage import FileImageWriter

__all__ = [
    "MANIFEST_NAME",
    "BlockRenderPipeline",
    "BlockRenderer",
    "FileImageWriter",
    "ImageWriter",
    "RenderResult",
    "output_folder_name",
]
