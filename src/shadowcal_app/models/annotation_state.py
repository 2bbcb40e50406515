"""Object/shadow marking workflow for one screenshot."""
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Dict, Iterable, Optional, Tuple, Union
import uuid

from loguru import logger

from ..errors import AnnotationError
from ..math.display import canvas_to_normalized
from ..math.geometry import DEFAULT_TOLERANCES, IntersectionTolerances, resolve_image_point
from ..math.projection import NO_HIT, Miss
from ..viewer.projection_cache import ProjectionCache
from .calibration_state import CalibrationData
from .camera_pose import CameraPose
from .display import CanvasPixelPoint, DisplayParams, NormalizedImagePoint
from .room import ANNOTATION_WALLS, RoomDimensions, WallName
from .selection import REQUIRED_PAIRS, ScreenshotShadows, ShadowObject, ShadowPoint, ShadowPointPair

# A screenshot is done once this many objects have all their pairs.
MIN_COMPLETE_OBJECTS = 2


@dataclass(slots=True, frozen=True)
class PendingObjectPoint:
    """Object tip waiting for its shadow click."""

    position: NormalizedImagePoint
    pixel: CanvasPixelPoint


ClickResult = Union[PendingObjectPoint, ShadowPointPair, Miss]


class AnnotationState:
    """Marks objects and their shadows on a single calibrated screenshot.

    Clicks alternate: the first records the object tip, the second casts a ray
    through the shadow tip and keeps the pair only if the ray lands on a wall.
    Only normalized image coordinates are stored; canvas positions come from
    the :class:`ProjectionCache`.
    """

    def __init__(
        self,
        screenshot_id: str,
        image_size: Tuple[int, int],
        camera: CameraPose,
        room: RoomDimensions,
        display: Optional[DisplayParams] = None,
        *,
        walls: Iterable[WallName] = ANNOTATION_WALLS,
        tolerances: IntersectionTolerances = DEFAULT_TOLERANCES,
        objects: Iterable[ShadowObject] = (),
    ) -> None:
        self.screenshot_id = screenshot_id
        self.image_size = (int(image_size[0]), int(image_size[1]))
        self.camera = camera
        self.room = room
        self.display = display or DisplayParams()
        self.walls = tuple(WallName(wall) for wall in walls)
        self.tolerances = tolerances
        self._objects: list[ShadowObject] = list(objects)
        self.current_object_index: Optional[int] = None
        self.pending: Optional[PendingObjectPoint] = None
        self.cache = ProjectionCache()

    # ------------------------------------------------------------------
    @property
    def objects(self) -> Tuple[ShadowObject, ...]:
        return tuple(self._objects)

    @property
    def current_object(self) -> Optional[ShadowObject]:
        if self.current_object_index is None:
            return None
        return self._objects[self.current_object_index]

    @property
    def complete_objects(self) -> Tuple[ShadowObject, ...]:
        return tuple(obj for obj in self._objects if obj.is_complete)

    @property
    def can_proceed(self) -> bool:
        return len(self.complete_objects) >= MIN_COMPLETE_OBJECTS

    @property
    def waiting_for_shadow_point(self) -> bool:
        return self.pending is not None

    # ------------------------------------------------------------------
    def add_object(self, name: Optional[str] = None) -> ShadowObject:
        obj = ShadowObject(
            id=f"obj_{uuid.uuid4().hex[:12]}",
            name=name or f"Object {len(self._objects) + 1}",
        )
        self._objects.append(obj)
        self.current_object_index = len(self._objects) - 1
        self.pending = None
        logger.info("Added {} to screenshot {}", obj.name, self.screenshot_id)
        return obj

    def select_object(self, index: int) -> ShadowObject:
        self._check_object_index(index)
        self.current_object_index = index
        self.pending = None
        return self._objects[index]

    def delete_object(self, index: int) -> ShadowObject:
        self._check_object_index(index)
        removed = self._objects.pop(index)
        if self.current_object_index is not None:
            if self.current_object_index == index:
                self.current_object_index = None
                self.pending = None
            elif self.current_object_index > index:
                self.current_object_index -= 1
        self.cache.invalidate()
        logger.info("Deleted {} from screenshot {}", removed.name, self.screenshot_id)
        return removed

    def delete_pair(self, object_index: int, pair_index: int) -> ShadowPointPair:
        self._check_object_index(object_index)
        obj = self._objects[object_index]
        self._objects[object_index] = obj.without_pair(pair_index)
        removed = obj.pairs[pair_index]
        self.cache.invalidate()
        logger.info("Deleted point pair {} of {}", pair_index + 1, obj.name)
        return removed

    def cancel_pending(self) -> None:
        self.pending = None

    # ------------------------------------------------------------------
    def set_display(self, display: DisplayParams) -> None:
        """Swap display parameters; cached canvas positions are recomputed on next use."""
        self.display = display
        self.cache.invalidate()

    def click(self, pixel: CanvasPixelPoint, canvas_width: float, canvas_height: float) -> ClickResult:
        """Handle a click on the canvas.

        Returns the :class:`PendingObjectPoint` for an object click, the new
        :class:`ShadowPointPair` for a shadow click that hit a wall, or
        ``NO_HIT`` when the shadow ray missed every wall (the object point stays
        pending so the operator can click again).
        """
        obj = self.current_object
        if obj is None:
            raise AnnotationError("Add or select an object before marking points")
        if obj.is_complete:
            raise AnnotationError(f"{obj.name} already has all of its point pairs")

        position = canvas_to_normalized(pixel, canvas_width, canvas_height, self.display)
        if not position.is_within_image():
            logger.warning(
                "Click at ({:.1f}, {:.1f}) is outside the screenshot: ({:.3f}, {:.3f})",
                pixel.px,
                pixel.py,
                position.normalized_x,
                position.normalized_y,
            )

        if self.pending is None:
            self.pending = PendingObjectPoint(position=position, pixel=pixel)
            return self.pending

        # Cast through the photograph-sized canvas, as reproject_screenshot does.
        hit = resolve_image_point(
            position,
            self.camera,
            self.room,
            self.display,
            self.image_size,
            walls=self.walls,
            tolerances=self.tolerances,
        )
        if hit is NO_HIT:
            logger.info("Shadow click on {} did not land on a wall", self.screenshot_id)
            return NO_HIT

        pair = ShadowPointPair(
            object_point=self.pending.position,
            shadow_point=ShadowPoint(position=position, wall=hit.wall, world3d=hit.point),
        )
        updated = obj.with_pair(pair)
        self._objects[self.current_object_index] = updated
        self.pending = None
        logger.info(
            "Point pair {}/{} marked for {} on {}",
            len(updated.pairs),
            REQUIRED_PAIRS,
            updated.name,
            hit.wall.value,
        )
        if updated.is_complete:
            logger.info("{} complete", updated.name)
            self.current_object_index = None
        return pair

    def canvas_positions(self, canvas_width: float, canvas_height: float) -> Dict[str, CanvasPixelPoint]:
        """Canvas pixel of every marked point, keyed ``"<object id>/<pair>/<object|shadow>"``."""
        positions: Dict[str, CanvasPixelPoint] = {}
        for obj in self._objects:
            for index, pair in enumerate(obj.pairs):
                for kind, point in (("object", pair.object_point), ("shadow", pair.shadow_point.position)):
                    point_id = f"{obj.id}/{index}/{kind}"
                    positions[point_id] = self.cache.canvas_position(
                        point_id, point, canvas_width, canvas_height, self.display
                    )
        return positions

    def to_screenshot_shadows(self, timestamp: Optional[str] = None) -> ScreenshotShadows:
        width, height = self.image_size
        return ScreenshotShadows(
            screenshot_id=self.screenshot_id,
            width=width,
            height=height,
            objects=self.objects,
            timestamp=timestamp,
        )

    # ------------------------------------------------------------------
    def _check_object_index(self, index: int) -> None:
        if not 0 <= index < len(self._objects):
            raise AnnotationError(f"Object {index} does not exist on screenshot {self.screenshot_id}")


def reproject_screenshot(
    shots: ScreenshotShadows,
    calibration: CalibrationData,
    tolerances: IntersectionTolerances = DEFAULT_TOLERANCES,
) -> ScreenshotShadows:
    """Rebuild ``world3D`` of every shadow point from the calibration.

    Each point is resolved against the wall it was stored with only; points
    that no longer land on that wall lose their ``world3D``.
    """
    step = calibration.step_for(shots.screenshot_id)
    camera = calibration.camera_pose(shots.screenshot_id)
    objects = []
    for obj in shots.objects:
        pairs = []
        for pair in obj.pairs:
            shadow = pair.shadow_point
            hit = resolve_image_point(
                shadow.position,
                camera,
                calibration.room,
                step.display,
                (shots.width, shots.height),
                walls=(shadow.wall,),
                tolerances=tolerances,
            )
            if hit is NO_HIT:
                logger.warning(
                    "Shadow point of {} on {} no longer lands on the {} wall",
                    obj.name,
                    shots.screenshot_id,
                    WallName(shadow.wall).value,
                )
                world = None
            else:
                world = hit.point
            pairs.append(replace(pair, shadow_point=replace(shadow, world3d=world)))
        objects.append(replace(obj, pairs=tuple(pairs)))
    return replace(shots, objects=tuple(objects))
