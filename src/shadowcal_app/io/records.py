"""Versioned JSON schemas for persisted calibration and shadow records.

Records are validated at the boundary: unknown keys are rejected and every
field without a documented default is required. A payload without a
``version`` key is read as the current schema version.
"""
from __future__ import annotations

import json
from typing import Annotated, Any, List, Literal, Optional, Tuple, Union

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from ..errors import RecordValidationError
from ..models.calibration_state import DEFAULT_DISPLAY_ZOOM, CalibrationData, CalibrationStep
from ..models.camera_pose import EulerRotation
from ..models.display import DisplayParams, NormalizedImagePoint
from ..models.room import RoomDimensions, WallName, WorldPoint3D
from ..models.selection import REQUIRED_PAIRS, ScreenshotShadows, ShadowObject, ShadowPoint, ShadowPointPair

SCHEMA_VERSION = "3.0"
LEGACY_SHADOW_VERSION = "2.0"

WallLiteral = Literal["front", "back", "left", "right", "floor", "ceiling"]


class _Record(BaseModel):
    model_config = ConfigDict(extra="forbid")


# ----------------------------------------------------------------------
# Shared pieces


class Point3DRecord(_Record):
    x: float
    y: float
    z: float


class RotationRecord(_Record):
    x: float  # pitch
    y: float  # yaw
    z: float  # roll


class RoomRecord(_Record):
    width: float = Field(gt=0)
    depth: float = Field(gt=0)
    height: float = Field(gt=0)


class NormalizedPointRecord(_Record):
    normalizedX: float
    normalizedY: float


class DimensionsRecord(_Record):
    width: int = Field(gt=0)
    height: int = Field(gt=0)


# ----------------------------------------------------------------------
# Calibration


class CameraRecord(_Record):
    position: Point3DRecord
    fovY: float = Field(gt=0, lt=180)


class DisplayRecord(_Record):
    backgroundScale: float = Field(gt=0)
    backgroundRotation: float
    backgroundOffsetX: float
    backgroundOffsetY: float


class ScreenshotCalibrationRecord(_Record):
    screenshotId: str
    cameraRotation: RotationRecord
    display: DisplayRecord
    completed: bool


class CalibrationRecord(_Record):
    version: Literal["3.0"]
    room: RoomRecord
    camera: CameraRecord
    globalDisplayZoom: Optional[float] = Field(default=None, gt=0)  # UI only
    screenshots: List[ScreenshotCalibrationRecord]


# ----------------------------------------------------------------------
# Shadows


class ShadowPointRecord(NormalizedPointRecord):
    wall: WallLiteral
    world3D: Optional[Point3DRecord] = None


class ShadowPairRecord(_Record):
    objectPoint: NormalizedPointRecord
    shadowPoint: ShadowPointRecord


class ShadowObjectRecord(_Record):
    id: str
    name: str
    pairs: List[ShadowPairRecord] = Field(max_length=REQUIRED_PAIRS)


class ScreenshotShadowsRecord(_Record):
    screenshotId: str
    screenshotDimensions: DimensionsRecord
    timestamp: Optional[str] = None
    objects: List[ShadowObjectRecord]


class ShadowRecord(_Record):
    version: Literal["3.0"]
    screenshots: List[ScreenshotShadowsRecord]


class LegacyScreenshotShadowsRecord(_Record):
    screenshotId: str
    timestamp: str
    screenshotDimensions: Optional[DimensionsRecord] = None
    objects: List[ShadowObjectRecord]


class LegacyShadowRecord(_Record):
    """Shadow export written before screenshot dimensions became mandatory."""

    version: Literal["2.0"]
    calibrationVersion: Optional[str] = None
    screenshots: List[LegacyScreenshotShadowsRecord]


AnyShadowRecord = Annotated[Union[ShadowRecord, LegacyShadowRecord], Field(discriminator="version")]
_SHADOW_ADAPTER: TypeAdapter = TypeAdapter(AnyShadowRecord)


# ----------------------------------------------------------------------
# Parsing


def _load_json(text: str, kind: str) -> Any:
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise RecordValidationError(f"{kind} record is not valid JSON: {exc}") from exc


def _with_version(payload: Any) -> Any:
    if isinstance(payload, dict) and "version" not in payload:
        return {**payload, "version": SCHEMA_VERSION}
    return payload


def validate_calibration(payload: Any) -> CalibrationRecord:
    try:
        return CalibrationRecord.model_validate(_with_version(payload))
    except ValidationError as exc:
        raise RecordValidationError(f"Invalid calibration record: {exc}") from exc


def validate_shadows(payload: Any) -> Union[ShadowRecord, LegacyShadowRecord]:
    try:
        return _SHADOW_ADAPTER.validate_python(_with_version(payload))
    except ValidationError as exc:
        raise RecordValidationError(f"Invalid shadow record: {exc}") from exc


def parse_calibration_json(text: str) -> CalibrationRecord:
    return validate_calibration(_load_json(text, "Calibration"))


def parse_shadow_json(text: str) -> Union[ShadowRecord, LegacyShadowRecord]:
    return validate_shadows(_load_json(text, "Shadow"))


def dump_record_json(record: BaseModel) -> str:
    return record.model_dump_json(indent=2, exclude_none=True)


# ----------------------------------------------------------------------
# Record <-> domain conversion


def calibration_from_record(record: CalibrationRecord) -> CalibrationData:
    room = record.room
    position = record.camera.position
    return CalibrationData(
        room=RoomDimensions(width=room.width, height=room.height, depth=room.depth),
        camera_position=WorldPoint3D(position.x, position.y, position.z),
        fov_y=record.camera.fovY,
        steps=tuple(
            CalibrationStep(
                screenshot_id=shot.screenshotId,
                rotation=EulerRotation(shot.cameraRotation.x, shot.cameraRotation.y, shot.cameraRotation.z),
                display=DisplayParams(
                    scale=shot.display.backgroundScale,
                    rotation=shot.display.backgroundRotation,
                    offset_x=shot.display.backgroundOffsetX,
                    offset_y=shot.display.backgroundOffsetY,
                ),
                completed=shot.completed,
            )
            for shot in record.screenshots
        ),
        global_display_zoom=record.globalDisplayZoom or DEFAULT_DISPLAY_ZOOM,
    )


def calibration_to_record(data: CalibrationData) -> CalibrationRecord:
    return CalibrationRecord(
        version=SCHEMA_VERSION,
        room=RoomRecord(**data.room.to_dict()),
        camera=CameraRecord(position=Point3DRecord(**data.camera_position.to_dict()), fovY=data.fov_y),
        globalDisplayZoom=data.global_display_zoom,
        screenshots=[
            ScreenshotCalibrationRecord(
                screenshotId=step.screenshot_id,
                cameraRotation=RotationRecord(**step.rotation.to_dict()),
                display=DisplayRecord(**step.display.to_dict()),
                completed=step.completed,
            )
            for step in data.steps
        ],
    )


def _object_from_record(record: ShadowObjectRecord) -> ShadowObject:
    pairs = []
    for pair in record.pairs:
        shadow = pair.shadowPoint
        world = shadow.world3D
        pairs.append(
            ShadowPointPair(
                object_point=NormalizedImagePoint(pair.objectPoint.normalizedX, pair.objectPoint.normalizedY),
                shadow_point=ShadowPoint(
                    position=NormalizedImagePoint(shadow.normalizedX, shadow.normalizedY),
                    wall=WallName(shadow.wall),
                    world3d=WorldPoint3D(world.x, world.y, world.z) if world is not None else None,
                ),
            )
        )
    return ShadowObject(id=record.id, name=record.name, pairs=tuple(pairs))


def shadows_from_record(
    record: Union[ShadowRecord, LegacyShadowRecord],
    default_dimensions: Optional[Tuple[int, int]] = None,
) -> Tuple[ScreenshotShadows, ...]:
    """Convert a shadow record to domain objects.

    Legacy records may lack screenshot dimensions; ``default_dimensions``
    supplies them, otherwise such a record is rejected.
    """
    screenshots = []
    for shot in record.screenshots:
        dims = shot.screenshotDimensions
        if dims is not None:
            width, height = dims.width, dims.height
        elif default_dimensions is not None:
            width, height = default_dimensions
        else:
            raise RecordValidationError(f"Screenshot {shot.screenshotId} has no screenshotDimensions")
        screenshots.append(
            ScreenshotShadows(
                screenshot_id=shot.screenshotId,
                width=width,
                height=height,
                objects=tuple(_object_from_record(obj) for obj in shot.objects),
                timestamp=shot.timestamp,
            )
        )
    if isinstance(record, LegacyShadowRecord):
        logger.info("Upgraded shadow record from version {} to {}", LEGACY_SHADOW_VERSION, SCHEMA_VERSION)
    return tuple(screenshots)


def shadows_to_record(screenshots: Tuple[ScreenshotShadows, ...]) -> ShadowRecord:
    return ShadowRecord.model_validate(
        {
            "version": SCHEMA_VERSION,
            "screenshots": [
                {
                    "screenshotId": shot.screenshot_id,
                    "screenshotDimensions": {"width": shot.width, "height": shot.height},
                    "timestamp": shot.timestamp,
                    "objects": [obj.serialize() for obj in shot.objects],
                }
                for shot in screenshots
            ],
        }
    )
