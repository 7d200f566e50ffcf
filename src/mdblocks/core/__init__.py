"""Core package initializer for mdblocks.

Holds the settings loader and the pydantic contracts shared by the
extraction engine, the manifest codec and the CLI:
    from mdblocks.core.settings import settings, load_settings, Settings, get_logger
"""

from __future__ import annotations

__all__ = ["__doc__"]
