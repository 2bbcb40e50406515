"""Mapping between viewport pixels and photograph-normalized coordinates.

The photograph is drawn like a CSS background: sized to ``scale`` percent of
the viewport, positioned at ``offset`` percent, and rotated about its centre.
Canvas -> image removes the placement first and then un-rotates; image ->
canvas rotates first and then places. The two paths are exact inverses only
with that ordering.
"""
from __future__ import annotations

import math
from typing import Tuple

from ..models.display import CanvasPixelPoint, DisplayParams, NormalizedImagePoint

# Rotations at or below this many degrees are ignored on both paths.
ROTATION_EPSILON_DEG = 0.1


def _rotate_about_center(x: float, y: float, degrees: float) -> Tuple[float, float]:
    rad = math.radians(degrees)
    cos_r, sin_r = math.cos(rad), math.sin(rad)
    dx, dy = x - 0.5, y - 0.5
    return cos_r * dx - sin_r * dy + 0.5, sin_r * dx + cos_r * dy + 0.5


def canvas_to_normalized(
    pixel: CanvasPixelPoint,
    canvas_width: float,
    canvas_height: float,
    display: DisplayParams,
) -> NormalizedImagePoint:
    """Viewport pixel to photograph-normalized coordinates (unclamped)."""
    percent_x = pixel.px / canvas_width * 100.0
    percent_y = pixel.py / canvas_height * 100.0

    scale = display.scale / 100.0
    nx = (percent_x - display.offset_x) / (scale * 100.0) + 0.5
    ny = (percent_y - display.offset_y) / (scale * 100.0) + 0.5

    if abs(display.rotation) > ROTATION_EPSILON_DEG:
        nx, ny = _rotate_about_center(nx, ny, -display.rotation)
    return NormalizedImagePoint(nx, ny)


def normalized_to_canvas(
    point: NormalizedImagePoint,
    canvas_width: float,
    canvas_height: float,
    display: DisplayParams,
) -> CanvasPixelPoint:
    """Photograph-normalized coordinates to viewport pixels."""
    nx, ny = point.normalized_x, point.normalized_y
    if abs(display.rotation) > ROTATION_EPSILON_DEG:
        nx, ny = _rotate_about_center(nx, ny, display.rotation)

    scale = display.scale / 100.0
    percent_x = (nx - 0.5) * scale * 100.0 + display.offset_x
    percent_y = (ny - 0.5) * scale * 100.0 + display.offset_y
    return CanvasPixelPoint(
        px=percent_x / 100.0 * canvas_width,
        py=percent_y / 100.0 * canvas_height,
    )
