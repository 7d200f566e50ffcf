"""RenderOptions: the small options record handed to an external block renderer."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class RenderOptions(BaseModel):
    """Display width, pixel scale and accent color for one render call."""

    model_config = ConfigDict(frozen=True)

    width: int = Field(default=1200, gt=0, description="Image width in CSS pixels.")
    scale: float = Field(default=2, gt=0, description="Device pixel scale factor.")
    color: str = Field(
        default="#E91E63",
        pattern=r"^#[0-9A-Fa-f]{3}(?:[0-9A-Fa-f]{3})?$",
        description="Accent color as a hex string.",
    )


__all__ = ["RenderOptions"]
