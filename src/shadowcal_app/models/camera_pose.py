"""Camera pose domain models."""
from __future__ import annotations

from dataclasses import dataclass, field, replace
import math
from typing import ClassVar, Dict

from ..errors import InvalidCameraParameters
from .room import WorldPoint3D


@dataclass(slots=True, frozen=True)
class EulerRotation:
    """Camera orientation in degrees, always composed in YXZ order."""

    ORDER: ClassVar[str] = "YXZ"

    x: float = 0.0  # pitch
    y: float = 0.0  # yaw
    z: float = 0.0  # roll

    @property
    def order(self) -> str:
        return self.ORDER

    @property
    def pitch(self) -> float:
        return self.x

    @property
    def yaw(self) -> float:
        return self.y

    @property
    def roll(self) -> float:
        return self.z

    def to_dict(self) -> Dict[str, float]:
        """Return a serialisable mapping."""
        return {"x": self.x, "y": self.y, "z": self.z}


@dataclass(slots=True, frozen=True)
class CameraPose:
    """Pinhole camera placed in the room.

    Position and field of view are shared by all screenshots of a session;
    the rotation is specific to one screenshot.
    """

    position: WorldPoint3D
    rotation: EulerRotation = field(default_factory=EulerRotation)
    fov_y: float = 60.0  # degrees, vertical
    aspect_ratio: float = 1.0  # width / height

    def __post_init__(self) -> None:
        if not math.isfinite(self.fov_y) or not 0.0 < self.fov_y < 180.0:
            raise InvalidCameraParameters(
                f"Vertical field of view must be within (0, 180) degrees, got {self.fov_y!r}"
            )
        if not math.isfinite(self.aspect_ratio) or self.aspect_ratio <= 0.0:
            raise InvalidCameraParameters(f"Aspect ratio must be positive, got {self.aspect_ratio!r}")

    @property
    def fov_y_rad(self) -> float:
        """Vertical field of view in radians."""
        return math.radians(self.fov_y)

    @property
    def focal_factor(self) -> float:
        """Scale that maps the vertical half-FOV angle to the viewport edge."""
        return 1.0 / math.tan(self.fov_y_rad / 2.0)

    def with_rotation(self, rotation: EulerRotation) -> "CameraPose":
        return replace(self, rotation=rotation)

    def for_viewport(self, width: float, height: float) -> "CameraPose":
        """Copy of this pose whose aspect ratio matches a ``width`` x ``height`` viewport."""
        if width <= 0 or height <= 0:
            raise InvalidCameraParameters(f"Viewport must have a positive size, got {width}x{height}")
        return replace(self, aspect_ratio=float(width) / float(height))

    def to_dict(self) -> Dict[str, object]:
        return {
            "position": self.position.to_dict(),
            "rotation": self.rotation.to_dict(),
            "fovY": self.fov_y,
            "aspectRatio": self.aspect_ratio,
        }
