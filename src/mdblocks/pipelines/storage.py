"""Disk-backed writer for rendered block images.

This module adapts the storage port of the render pipeline to the local
filesystem.

- Parent directories are created on demand.
- Files are written in binary mode and overwritten if present.
- Removing a file that does not exist is not an error.

Usage
-----
>>> writer = FileImageWriter()
>>> writer.write(png_bytes, Path("out/article/prog-01.png"))
"""

from __future__ import annotations

from pathlib import Path


class FileImageWriter:
    """Persist rendered images to the local filesystem."""

    def ensure_dir(self, path: Path) -> None:
        """Create ``path`` (and parents) if it does not exist yet."""
        path.mkdir(parents=True, exist_ok=True)

    def write(self, data: bytes, path: Path) -> Path:
        """Write ``data`` to ``path`` and return the path."""
        self.ensure_dir(path.parent)
        path.write_bytes(data)
        return path

    def remove(self, path: Path) -> None:
        """Delete ``path`` if it exists."""
        path.unlink(missing_ok=True)


__all__ = ["FileImageWriter"]
