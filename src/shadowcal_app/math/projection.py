"""Pinhole projection between room space and the viewport.

The engine works in normalized device coordinates (NDC): the viewport spans
``[-1, 1]`` on both axes with +Y up. Conversions to viewport pixels or to
normalized image coordinates happen in the thin helpers at the bottom of this
module so that ``forward_project`` and ``pixel_to_ray`` share one canonical
output.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Tuple, Union

import numpy as np

from ..models.camera_pose import CameraPose
from ..models.display import CanvasPixelPoint, NormalizedImagePoint
from ..models.room import RoomDimensions, WallName, WorldPoint3D, wall_corners
from .rotation import inverse_rotate, rotate


class Miss(Enum):
    """Expected, non-fatal geometric outcomes."""

    OCCLUDED = "occluded"  # point behind the camera plane
    NO_HIT = "no_hit"  # ray missed every wall


OCCLUDED = Miss.OCCLUDED
NO_HIT = Miss.NO_HIT


@dataclass(slots=True, frozen=True)
class ScreenPoint:
    """Normalized device coordinates; (0, 0) is the viewport centre."""

    x: float
    y: float


@dataclass(slots=True, frozen=True)
class Ray:
    """Half-line starting at ``origin`` along the unit vector ``direction``."""

    origin: WorldPoint3D
    direction: WorldPoint3D

    def point_at(self, t: float) -> WorldPoint3D:
        return WorldPoint3D.from_array(self.origin.as_array() + t * self.direction.as_array())


def world_to_camera(point: WorldPoint3D, camera: CameraPose) -> np.ndarray:
    """Camera-space coordinates of ``point``; z grows away from the camera."""
    relative = point.as_array() - camera.position.as_array()
    return rotate(relative, camera.rotation)


def forward_project(point: WorldPoint3D, camera: CameraPose) -> Union[ScreenPoint, Miss]:
    """Project a room point into NDC, or return ``OCCLUDED`` when it is behind the camera."""
    rel = world_to_camera(point, camera)
    if rel[2] <= 0.0:
        return OCCLUDED

    k = camera.focal_factor
    x = (rel[0] / rel[2]) * k / camera.aspect_ratio
    y = (rel[1] / rel[2]) * k
    return ScreenPoint(float(x), float(y))


def pixel_to_ray(screen: ScreenPoint, camera: CameraPose) -> Ray:
    """Ray from the camera centre through an NDC position."""
    k = camera.focal_factor
    direction_cam = np.array(
        [screen.x * camera.aspect_ratio / k, screen.y / k, 1.0],
        dtype=np.float64,
    )
    direction = inverse_rotate(direction_cam, camera.rotation)
    direction /= np.linalg.norm(direction)
    return Ray(origin=camera.position, direction=WorldPoint3D.from_array(direction))


# ----------------------------------------------------------------------
# Boundary conversions


def ndc_to_pixel(screen: ScreenPoint, width: float, height: float) -> CanvasPixelPoint:
    """NDC to viewport pixels (origin top-left, y down)."""
    return CanvasPixelPoint(
        px=(screen.x + 1.0) / 2.0 * width,
        py=(1.0 - screen.y) / 2.0 * height,
    )


def pixel_to_ndc(pixel: CanvasPixelPoint, width: float, height: float) -> ScreenPoint:
    return ScreenPoint(
        x=pixel.px / width * 2.0 - 1.0,
        y=1.0 - pixel.py / height * 2.0,
    )


def ndc_to_normalized(screen: ScreenPoint) -> NormalizedImagePoint:
    """NDC to ``[0, 1]`` image coordinates (origin top-left, y down)."""
    return NormalizedImagePoint((screen.x + 1.0) / 2.0, (1.0 - screen.y) / 2.0)


def normalized_to_ndc(point: NormalizedImagePoint) -> ScreenPoint:
    return ScreenPoint(point.normalized_x * 2.0 - 1.0, 1.0 - point.normalized_y * 2.0)


def project_to_canvas(
    point: WorldPoint3D,
    camera: CameraPose,
    width: float,
    height: float,
) -> Union[CanvasPixelPoint, Miss]:
    """Project a room point straight to viewport pixels."""
    screen = forward_project(point, camera)
    if screen is OCCLUDED:
        return OCCLUDED
    return ndc_to_pixel(screen, width, height)


def canvas_ray(pixel: CanvasPixelPoint, camera: CameraPose, width: float, height: float) -> Ray:
    """Ray through a viewport pixel."""
    return pixel_to_ray(pixel_to_ndc(pixel, width, height), camera)


# ----------------------------------------------------------------------
# Overlay geometry


def project_room_edges(
    room: RoomDimensions,
    camera: CameraPose,
    width: float,
    height: float,
) -> List[Tuple[CanvasPixelPoint, CanvasPixelPoint]]:
    """Wireframe segments for the room; edges touching an occluded corner are dropped."""
    segments: List[Tuple[CanvasPixelPoint, CanvasPixelPoint]] = []
    for start, end in room.edges():
        a = project_to_canvas(start, camera, width, height)
        b = project_to_canvas(end, camera, width, height)
        if a is OCCLUDED or b is OCCLUDED:
            continue
        segments.append((a, b))
    return segments


def project_wall_outline(
    wall: WallName,
    room: RoomDimensions,
    camera: CameraPose,
    width: float,
    height: float,
) -> Union[Tuple[CanvasPixelPoint, ...], Miss]:
    """Projected wall polygon, or ``OCCLUDED`` if any corner is behind the camera."""
    projected = []
    for corner in wall_corners(wall, room):
        pixel = project_to_canvas(corner, camera, width, height)
        if pixel is OCCLUDED:
            return OCCLUDED
        projected.append(pixel)
    return tuple(projected)
