"""Calibration editing state for a session of screenshots."""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Iterable, Optional, Tuple

from loguru import logger

from ..errors import CalibrationStateError
from .camera_pose import CameraPose, EulerRotation
from .display import DisplayParams
from .room import RoomDimensions, WorldPoint3D

# Calibration is usable once this many screenshots are completed.
MIN_COMPLETED_STEPS = 2

DEFAULT_DISPLAY_ZOOM = 50.0


@dataclass(slots=True, frozen=True)
class CalibrationStep:
    """Per-screenshot calibration snapshot."""

    screenshot_id: str
    rotation: EulerRotation = field(default_factory=EulerRotation)
    display: DisplayParams = field(default_factory=DisplayParams)
    completed: bool = False


@dataclass(slots=True, frozen=True)
class CalibrationData:
    """Immutable calibration of a session: shared camera plus per-screenshot steps."""

    room: RoomDimensions
    camera_position: WorldPoint3D
    fov_y: float
    steps: Tuple[CalibrationStep, ...] = ()
    global_display_zoom: float = DEFAULT_DISPLAY_ZOOM

    @property
    def completed_steps(self) -> Tuple[CalibrationStep, ...]:
        return tuple(step for step in self.steps if step.completed)

    @property
    def is_usable(self) -> bool:
        return len(self.completed_steps) >= MIN_COMPLETED_STEPS

    def step_for(self, screenshot_id: str) -> CalibrationStep:
        for step in self.steps:
            if step.screenshot_id == screenshot_id:
                return step
        raise CalibrationStateError(f"No calibration step for screenshot {screenshot_id!r}")

    def camera_pose(self, screenshot_id: str, aspect_ratio: float = 1.0) -> CameraPose:
        """Camera for one screenshot: shared position and FOV, per-screenshot rotation."""
        pose = CameraPose(position=self.camera_position, fov_y=self.fov_y, aspect_ratio=aspect_ratio)
        return pose.with_rotation(self.step_for(screenshot_id).rotation)


def default_calibration(screenshot_ids: Iterable[str] = ()) -> CalibrationData:
    """Starting calibration for a new session."""
    zoom = DEFAULT_DISPLAY_ZOOM
    return CalibrationData(
        room=RoomDimensions(width=5.0, height=3.0, depth=5.0),
        camera_position=WorldPoint3D(2.5, 1.5, 0.5),
        fov_y=60.0,
        steps=tuple(
            CalibrationStep(screenshot_id=sid, display=DisplayParams(scale=zoom)) for sid in screenshot_ids
        ),
        global_display_zoom=zoom,
    )


class CalibrationState:
    """Holds the calibration being edited, one screenshot at a time.

    The current step's rotation and display parameters live in an editing
    slot. Values are frozen dataclasses, copied into the slot when a step is
    opened and copied back when it is left or committed, so edits to one
    screenshot can never reach another.
    """

    def __init__(self, data: CalibrationData) -> None:
        self.room = data.room
        self.camera_position = data.camera_position
        self.fov_y = data.fov_y
        self.global_display_zoom = data.global_display_zoom
        self._steps: list[CalibrationStep] = list(data.steps)
        self.current_index: Optional[int] = None
        self.editing_rotation = EulerRotation()
        self.editing_display = DisplayParams(scale=self.global_display_zoom)
        if self._steps:
            self._load_step(0)

    @classmethod
    def new(cls, screenshot_ids: Iterable[str]) -> "CalibrationState":
        return cls(default_calibration(screenshot_ids))

    # ------------------------------------------------------------------
    @property
    def steps(self) -> Tuple[CalibrationStep, ...]:
        return tuple(self._steps)

    @property
    def current_step(self) -> Optional[CalibrationStep]:
        if self.current_index is None:
            return None
        return self._steps[self.current_index]

    @property
    def completed_count(self) -> int:
        return sum(1 for step in self._steps if step.completed)

    @property
    def progress_percentage(self) -> float:
        if not self._steps:
            return 0.0
        return self.completed_count / len(self._steps) * 100.0

    @property
    def is_usable(self) -> bool:
        return self.completed_count >= MIN_COMPLETED_STEPS

    # ------------------------------------------------------------------
    def go_to_step(self, index: int) -> CalibrationStep:
        """Store the editing slot into the current step and open step ``index``."""
        if not 0 <= index < len(self._steps):
            raise CalibrationStateError(f"Calibration step {index} does not exist")
        self._store_slot(completed=None)
        self._load_step(index)
        return self._steps[index]

    def commit_current_step(self) -> CalibrationStep:
        """Write the editing slot into the current step and mark it completed."""
        if self.current_index is None:
            raise CalibrationStateError("No calibration step is open")
        step = self._store_slot(completed=True)
        logger.info(
            "Calibration step {} committed ({}/{} completed)",
            step.screenshot_id,
            self.completed_count,
            len(self._steps),
        )
        return step

    def set_rotation(self, rotation: EulerRotation) -> None:
        self.editing_rotation = rotation

    def set_display(self, display: DisplayParams) -> None:
        self.editing_display = display

    def set_room(self, room: RoomDimensions) -> None:
        self.room = room

    def set_camera_position(self, position: WorldPoint3D) -> None:
        self.camera_position = position

    def set_fov(self, fov_y: float) -> None:
        # Validate through CameraPose before accepting.
        CameraPose(position=self.camera_position, fov_y=fov_y)
        self.fov_y = fov_y

    def set_global_display_zoom(self, zoom: float) -> None:
        """Apply one display zoom to every screenshot and to the editing slot."""
        self.editing_display = replace(self.editing_display, scale=zoom)
        self._steps = [replace(step, display=replace(step.display, scale=zoom)) for step in self._steps]
        self.global_display_zoom = zoom

    # ------------------------------------------------------------------
    def editing_camera_pose(self, aspect_ratio: float = 1.0) -> CameraPose:
        """Camera built from the editing slot, for live previews."""
        return CameraPose(
            position=self.camera_position,
            rotation=self.editing_rotation,
            fov_y=self.fov_y,
            aspect_ratio=aspect_ratio,
        )

    def camera_pose(self, screenshot_id: str, aspect_ratio: float = 1.0) -> CameraPose:
        return self.snapshot().camera_pose(screenshot_id, aspect_ratio)

    def snapshot(self) -> CalibrationData:
        """Immutable copy of the committed calibration (the editing slot is not included)."""
        return CalibrationData(
            room=self.room,
            camera_position=self.camera_position,
            fov_y=self.fov_y,
            steps=tuple(self._steps),
            global_display_zoom=self.global_display_zoom,
        )

    # ------------------------------------------------------------------
    def _load_step(self, index: int) -> None:
        step = self._steps[index]
        self.current_index = index
        self.editing_rotation = step.rotation
        self.editing_display = step.display

    def _store_slot(self, completed: Optional[bool]) -> CalibrationStep:
        if self.current_index is None:
            raise CalibrationStateError("No calibration step is open")
        step = self._steps[self.current_index]
        updated = replace(
            step,
            rotation=self.editing_rotation,
            display=self.editing_display,
            completed=step.completed if completed is None else completed,
        )
        self._steps[self.current_index] = updated
        return updated
