"""Image-space value types and display parameters."""
from __future__ import annotations

from dataclasses import dataclass
import math
from typing import Dict

from ..errors import InvalidDisplayParameters


@dataclass(slots=True, frozen=True)
class DisplayParams:
    """How a fixed-resolution photograph is placed inside the viewport.

    CSS-style semantics: ``scale`` is the background size in percent of the
    viewport, ``offset_x``/``offset_y`` the background position in percent
    (50 = centred) and ``rotation`` a rotation about the photograph centre in
    degrees. Carries no 3D meaning.
    """

    scale: float = 50.0
    rotation: float = 0.0
    offset_x: float = 50.0
    offset_y: float = 50.0

    def __post_init__(self) -> None:
        if not math.isfinite(self.scale) or self.scale <= 0.0:
            raise InvalidDisplayParameters(f"Display scale must be a positive percentage, got {self.scale!r}")
        for name in ("rotation", "offset_x", "offset_y"):
            if not math.isfinite(getattr(self, name)):
                raise InvalidDisplayParameters(f"Display {name} must be finite")

    def to_dict(self) -> Dict[str, float]:
        return {
            "backgroundScale": self.scale,
            "backgroundRotation": self.rotation,
            "backgroundOffsetX": self.offset_x,
            "backgroundOffsetY": self.offset_y,
        }


@dataclass(slots=True, frozen=True)
class NormalizedImagePoint:
    """Position within the original photograph; (0, 0) is the top-left corner."""

    normalized_x: float
    normalized_y: float

    def is_within_image(self) -> bool:
        return 0.0 <= self.normalized_x <= 1.0 and 0.0 <= self.normalized_y <= 1.0

    def to_dict(self) -> Dict[str, float]:
        return {"normalizedX": self.normalized_x, "normalizedY": self.normalized_y}


@dataclass(slots=True, frozen=True)
class CanvasPixelPoint:
    """Device-pixel position within the current render viewport."""

    px: float
    py: float
