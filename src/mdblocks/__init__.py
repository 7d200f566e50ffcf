"""mdblocks: extract typed content blocks (tables, progressions, scores) from Markdown.

The public entry points live in :mod:`mdblocks.extraction` (document to
blocks) and :mod:`mdblocks.manifest` (blocks to a persisted manifest and back).
"""

from __future__ import annotations

__all__ = ["__version__"]
__version__ = "0.1.0"
