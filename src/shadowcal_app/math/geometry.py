"""Ray/wall intersection for classifying clicks on the room."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Tuple, Union

import numpy as np
from loguru import logger

from ..models.camera_pose import CameraPose
from ..models.display import CanvasPixelPoint, DisplayParams, NormalizedImagePoint
from ..models.room import (
    ROOM_WALLS,
    RoomDimensions,
    WallName,
    WallPlane,
    WorldPoint3D,
    wall_planes,
)
from .display import normalized_to_canvas
from .projection import NO_HIT, Miss, Ray, canvas_ray


@dataclass(slots=True, frozen=True)
class IntersectionTolerances:
    """Numerical tolerances used by :func:`resolve_wall_hit`.

    Attributes
    ----------
    parallel_epsilon:
        Minimum ``|direction . normal|`` before a plane is treated as parallel.
    behind_epsilon:
        Intersections with ``t`` at or below this are behind the ray origin.
    bounds_epsilon:
        Slack in meters admitted around each wall rectangle (near-edge clicks).
    tie_epsilon:
        Candidates whose distances differ by less than this are ties, broken
        by wall name in lexical order.
    """

    parallel_epsilon: float = 1e-4
    behind_epsilon: float = 1e-9
    bounds_epsilon: float = 0.1
    tie_epsilon: float = 1e-9


DEFAULT_TOLERANCES = IntersectionTolerances()


@dataclass(slots=True, frozen=True)
class WallHit:
    """First wall surface struck by a ray."""

    wall: WallName
    point: WorldPoint3D
    distance: float  # ray parameter t, meters for a unit direction


def intersect_ray_with_plane(
    ray: Ray,
    plane: WallPlane,
    *,
    parallel_epsilon: float = DEFAULT_TOLERANCES.parallel_epsilon,
) -> Optional[float]:
    """Return the ray parameter ``t`` where ``ray`` meets ``plane``.

    Returns ``None`` when the ray is parallel to the plane. Negative values
    are returned as-is; callers decide what lies behind the origin.
    """
    normal = plane.normal.as_array()
    denom = float(np.dot(ray.direction.as_array(), normal))
    if abs(denom) < parallel_epsilon:
        return None
    to_plane = plane.point.as_array() - ray.origin.as_array()
    return float(np.dot(to_plane, normal)) / denom


def is_point_on_wall(
    point: WorldPoint3D,
    wall: WallName,
    room: RoomDimensions,
    tolerance: float = DEFAULT_TOLERANCES.bounds_epsilon,
) -> bool:
    """Check that ``point`` lies on ``wall`` within its rectangular bounds."""
    wall = WallName(wall)
    x_in = -tolerance <= point.x <= room.width + tolerance
    y_in = -tolerance <= point.y <= room.height + tolerance
    z_in = -tolerance <= point.z <= room.depth + tolerance

    if wall is WallName.FRONT:
        return abs(point.z) < tolerance and x_in and y_in
    if wall is WallName.BACK:
        return abs(point.z - room.depth) < tolerance and x_in and y_in
    if wall is WallName.LEFT:
        return abs(point.x) < tolerance and y_in and z_in
    if wall is WallName.RIGHT:
        return abs(point.x - room.width) < tolerance and y_in and z_in
    if wall is WallName.FLOOR:
        return abs(point.y) < tolerance and x_in and z_in
    return abs(point.y - room.height) < tolerance and x_in and z_in


def resolve_wall_hit(
    ray: Ray,
    room: RoomDimensions,
    *,
    walls: Iterable[WallName] = ROOM_WALLS,
    tolerances: IntersectionTolerances = DEFAULT_TOLERANCES,
) -> Union[WallHit, Miss]:
    """Find the closest wall in ``walls`` that ``ray`` strikes inside its bounds.

    Args:
        ray: Ray in room space; ``direction`` should be unit length.
        room: Room whose bounding planes are tested.
        walls: Wall set to consider. Call sites choose between the full
            :data:`ROOM_WALLS` and the ceiling-less annotation set.
        tolerances: Parallel, behind-origin, bounds, and tie tolerances.

    Returns:
        The :class:`WallHit` with the smallest ``t``, or ``NO_HIT``.
    """
    candidates: list[WallHit] = []
    for plane in wall_planes(room, walls):
        t = intersect_ray_with_plane(ray, plane, parallel_epsilon=tolerances.parallel_epsilon)
        if t is None or t <= tolerances.behind_epsilon:
            continue
        point = ray.point_at(t)
        if is_point_on_wall(point, plane.wall, room, tolerances.bounds_epsilon):
            candidates.append(WallHit(wall=plane.wall, point=point, distance=t))

    if not candidates:
        logger.debug("Ray from {} along {} missed every wall", ray.origin, ray.direction)
        return NO_HIT

    nearest = min(hit.distance for hit in candidates)
    tied = [hit for hit in candidates if hit.distance - nearest <= tolerances.tie_epsilon]
    return min(tied, key=lambda hit: hit.wall.value)


def resolve_canvas_click(
    pixel: CanvasPixelPoint,
    camera: CameraPose,
    room: RoomDimensions,
    width: float,
    height: float,
    *,
    walls: Iterable[WallName] = ROOM_WALLS,
    tolerances: IntersectionTolerances = DEFAULT_TOLERANCES,
) -> Union[WallHit, Miss]:
    """Cast a ray through a viewport pixel and resolve the wall it lands on."""
    ray = canvas_ray(pixel, camera, width, height)
    return resolve_wall_hit(ray, room, walls=walls, tolerances=tolerances)


def resolve_image_point(
    point: NormalizedImagePoint,
    camera: CameraPose,
    room: RoomDimensions,
    display: DisplayParams,
    viewport: Tuple[float, float],
    *,
    walls: Iterable[WallName] = ROOM_WALLS,
    tolerances: IntersectionTolerances = DEFAULT_TOLERANCES,
) -> Union[WallHit, Miss]:
    """Resolve a persisted image point by placing it on a ``viewport`` sized canvas.

    Used to rebuild ``world3D`` for stored shadow points; the display
    parameters are percentages, so only the viewport's aspect ratio matters.
    """
    width, height = viewport
    pixel = normalized_to_canvas(point, width, height, display)
    return resolve_canvas_click(
        pixel,
        camera.for_viewport(width, height),
        room,
        width,
        height,
        walls=walls,
        tolerances=tolerances,
    )
