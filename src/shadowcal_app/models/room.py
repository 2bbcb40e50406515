"""Room coordinate system and wall planes.

World space is measured in meters with the origin at the floor/front/left
corner of the room:

- +X: right (0 -> width)
- +Y: up (0 -> height)
- +Z: into the room, towards the back wall (0 -> depth)
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import math
from typing import Dict, Iterable, Tuple

import numpy as np

from ..errors import InvalidRoomDimensions


class WallName(str, Enum):
    """Names of the six bounding planes of the room."""

    FRONT = "front"
    BACK = "back"
    LEFT = "left"
    RIGHT = "right"
    FLOOR = "floor"
    CEILING = "ceiling"


# Coordinate model variant: every bounding plane.
ROOM_WALLS: Tuple[WallName, ...] = tuple(WallName)

# Annotation variant: shadows are never marked on the ceiling.
ANNOTATION_WALLS: Tuple[WallName, ...] = (
    WallName.FRONT,
    WallName.BACK,
    WallName.LEFT,
    WallName.RIGHT,
    WallName.FLOOR,
)


@dataclass(slots=True, frozen=True)
class WorldPoint3D:
    """A point (or direction) in room space, in meters."""

    x: float
    y: float
    z: float

    def as_array(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z], dtype=np.float64)

    @classmethod
    def from_array(cls, values: Iterable[float]) -> "WorldPoint3D":
        x, y, z = (float(v) for v in np.asarray(values, dtype=np.float64).reshape(3))
        return cls(x, y, z)

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y, "z": self.z}


@dataclass(slots=True, frozen=True)
class RoomDimensions:
    """Axis-aligned room box in meters."""

    width: float
    height: float
    depth: float

    def __post_init__(self) -> None:
        for name in ("width", "height", "depth"):
            value = getattr(self, name)
            if not math.isfinite(value) or value <= 0.0:
                raise InvalidRoomDimensions(f"Room {name} must be a positive number, got {value!r}")

    def to_dict(self) -> Dict[str, float]:
        return {"width": self.width, "depth": self.depth, "height": self.height}

    @property
    def center(self) -> WorldPoint3D:
        return WorldPoint3D(self.width / 2.0, self.height / 2.0, self.depth / 2.0)

    def contains(self, point: WorldPoint3D, tolerance: float = 0.01) -> bool:
        """Return True if ``point`` lies inside the room, allowing ``tolerance`` overshoot."""
        return (
            -tolerance <= point.x <= self.width + tolerance
            and -tolerance <= point.y <= self.height + tolerance
            and -tolerance <= point.z <= self.depth + tolerance
        )

    def corners(self) -> Tuple[WorldPoint3D, ...]:
        """Eight room corners: floor ring first, then ceiling ring."""
        w, h, d = self.width, self.height, self.depth
        return (
            WorldPoint3D(0.0, 0.0, 0.0),
            WorldPoint3D(w, 0.0, 0.0),
            WorldPoint3D(w, 0.0, d),
            WorldPoint3D(0.0, 0.0, d),
            WorldPoint3D(0.0, h, 0.0),
            WorldPoint3D(w, h, 0.0),
            WorldPoint3D(w, h, d),
            WorldPoint3D(0.0, h, d),
        )

    def edges(self) -> Tuple[Tuple[WorldPoint3D, WorldPoint3D], ...]:
        """Twelve room edges as pairs of corners."""
        corners = self.corners()
        index_pairs = (
            (0, 1), (1, 2), (2, 3), (3, 0),  # floor
            (4, 5), (5, 6), (6, 7), (7, 4),  # ceiling
            (0, 4), (1, 5), (2, 6), (3, 7),  # verticals
        )
        return tuple((corners[a], corners[b]) for a, b in index_pairs)


@dataclass(slots=True, frozen=True)
class WallPlane:
    """Plane ``normal . P + d = 0`` with ``normal`` pointing into the room."""

    wall: WallName
    normal: WorldPoint3D
    d: float

    @property
    def point(self) -> WorldPoint3D:
        """A point lying on the plane."""
        return WorldPoint3D.from_array(-self.d * self.normal.as_array())

    def signed_distance(self, point: WorldPoint3D) -> float:
        """Distance from the plane, positive on the room side."""
        return float(np.dot(self.normal.as_array(), point.as_array()) + self.d)


def wall_plane(wall: WallName, room: RoomDimensions) -> WallPlane:
    """Return the plane equation of ``wall`` for the given room."""
    wall = WallName(wall)
    if wall is WallName.FRONT:
        return WallPlane(wall, WorldPoint3D(0.0, 0.0, 1.0), 0.0)
    if wall is WallName.BACK:
        return WallPlane(wall, WorldPoint3D(0.0, 0.0, -1.0), room.depth)
    if wall is WallName.LEFT:
        return WallPlane(wall, WorldPoint3D(1.0, 0.0, 0.0), 0.0)
    if wall is WallName.RIGHT:
        return WallPlane(wall, WorldPoint3D(-1.0, 0.0, 0.0), room.width)
    if wall is WallName.FLOOR:
        return WallPlane(wall, WorldPoint3D(0.0, 1.0, 0.0), 0.0)
    return WallPlane(wall, WorldPoint3D(0.0, -1.0, 0.0), room.height)


def wall_planes(room: RoomDimensions, walls: Iterable[WallName] = ROOM_WALLS) -> Tuple[WallPlane, ...]:
    return tuple(wall_plane(wall, room) for wall in walls)


def wall_center(wall: WallName, room: RoomDimensions) -> WorldPoint3D:
    """Geometric centre of the wall rectangle."""
    center = room.center
    wall = WallName(wall)
    if wall is WallName.FRONT:
        return WorldPoint3D(center.x, center.y, 0.0)
    if wall is WallName.BACK:
        return WorldPoint3D(center.x, center.y, room.depth)
    if wall is WallName.LEFT:
        return WorldPoint3D(0.0, center.y, center.z)
    if wall is WallName.RIGHT:
        return WorldPoint3D(room.width, center.y, center.z)
    if wall is WallName.FLOOR:
        return WorldPoint3D(center.x, 0.0, center.z)
    return WorldPoint3D(center.x, room.height, center.z)


def wall_corners(wall: WallName, room: RoomDimensions) -> Tuple[WorldPoint3D, ...]:
    """Four corners of a wall in drawing order."""
    c = room.corners()
    indices = {
        WallName.FRONT: (0, 1, 5, 4),
        WallName.BACK: (3, 2, 6, 7),
        WallName.LEFT: (0, 3, 7, 4),
        WallName.RIGHT: (1, 2, 6, 5),
        WallName.FLOOR: (0, 1, 2, 3),
        WallName.CEILING: (4, 5, 6, 7),
    }[WallName(wall)]
    return tuple(c[i] for i in indices)
