"""Centralized application configuration using Pydantic Settings (v2).

This module exposes a single, cached `settings` instance that reads from:
- Real environment variables (highest precedence)
- `.env` files at the repository root: .env, .env.local, .env.dev/.env.test/.env.prod

Besides the environment/log-level pair, the settings carry the extraction
defaults (heuristic auto-detection) and the default render options handed to
an external block renderer.
"""

from __future__ import annotations

import logging
import os
from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from mdblocks.core.contracts.render import RenderOptions

EnvName = Literal["dev", "test", "prod"]
LogLevelName = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class Settings(BaseSettings):
    """Typed application configuration loaded from env and `.env` files.

    Attributes
    ----------
    environment : EnvName
        Runtime environment flag; maps from `MDBLOCKS_ENV`.
    log_level : LogLevelName
        Global log level string; maps from `LOG_LEVEL`.
    auto_detect : bool
        Whether untagged prose is scanned for progressions; maps from
        `MDBLOCKS_AUTO_DETECT`.
    out_dir : str
        Default output directory for rendered blocks; maps from `MDBLOCKS_OUT_DIR`.
    render_width, render_scale, render_color
        Defaults for :class:`RenderOptions`; map from `MDBLOCKS_RENDER_*`.
    """

    environment: EnvName = Field(default="dev", alias="MDBLOCKS_ENV")
    log_level: LogLevelName = Field(default="INFO", alias="LOG_LEVEL")
    auto_detect: bool = Field(default=True, alias="MDBLOCKS_AUTO_DETECT")
    out_dir: str = Field(default="./out", alias="MDBLOCKS_OUT_DIR")

    render_width: int = Field(default=1200, gt=0, alias="MDBLOCKS_RENDER_WIDTH")
    render_scale: float = Field(default=2, gt=0, alias="MDBLOCKS_RENDER_SCALE")
    render_color: str = Field(default="#E91E63", alias="MDBLOCKS_RENDER_COLOR")

    model_config = SettingsConfigDict(
        env_file=(".env", ".env.local", ".env.dev", ".env.test", ".env.prod"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def is_dev(self) -> bool:
        """Return True if running in the development environment."""
        return self.environment == "dev"

    @property
    def is_test(self) -> bool:
        """Return True if running in the test environment."""
        return self.environment == "test"

    @property
    def is_prod(self) -> bool:
        """Return True if running in the production environment."""
        return self.environment == "prod"

    def log_level_numeric(self) -> int:
        """Return the numeric logging level corresponding to `self.log_level`."""
        return getattr(logging, self.log_level, logging.INFO)

    def render_options(self) -> RenderOptions:
        """Build the default :class:`RenderOptions` from the render fields."""
        return RenderOptions(
            width=self.render_width,
            scale=self.render_scale,
            color=self.render_color,
        )


@lru_cache(maxsize=1)
def load_settings() -> Settings:
    """Create and cache a `Settings` instance.

    We keep this behind an LRU cache so tests can force a rebuild via
    `load_settings.cache_clear()` after mutating `os.environ`.
    """
    os.environ.setdefault("MDBLOCKS_ENV", "dev")
    return Settings()


# Export a ready-to-use singleton (import-time read of env / .env files).
settings: Settings = load_settings()


def get_logger(name: str = "mdblocks") -> logging.Logger:
    """Return a process-global logger configured to the current log level."""
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(
            logging.Formatter("%(asctime)s | %(levelname)s | %(name)s | %(message)s")
        )
        logger.addHandler(handler)
    logger.setLevel(load_settings().log_level_numeric())
    logger.propagate = False
    return logger
