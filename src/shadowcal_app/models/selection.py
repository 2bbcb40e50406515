"""Dataclasses for storing marked object/shadow point pairs."""
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional, Tuple

from ..errors import AnnotationError
from .display import NormalizedImagePoint
from .room import WallName, WorldPoint3D

# Three pairs define a plane and a light direction downstream.
REQUIRED_PAIRS = 3


@dataclass(slots=True, frozen=True)
class ShadowPoint:
    """Shadow tip on the photograph together with the wall it lands on."""

    position: NormalizedImagePoint
    wall: WallName
    world3d: Optional[WorldPoint3D] = None  # debug only, never authoritative

    def serialize(self) -> dict:
        payload = {**self.position.to_dict(), "wall": WallName(self.wall).value}
        if self.world3d is not None:
            payload["world3D"] = self.world3d.to_dict()
        return payload


@dataclass(slots=True, frozen=True)
class ShadowPointPair:
    """One object tip and the shadow it casts."""

    object_point: NormalizedImagePoint
    shadow_point: ShadowPoint

    def serialize(self) -> dict:
        return {
            "objectPoint": self.object_point.to_dict(),
            "shadowPoint": self.shadow_point.serialize(),
        }


@dataclass(slots=True, frozen=True)
class ShadowObject:
    """A marked object and its point pairs."""

    id: str
    name: str
    pairs: Tuple[ShadowPointPair, ...] = ()

    @property
    def is_complete(self) -> bool:
        return len(self.pairs) == REQUIRED_PAIRS

    def with_pair(self, pair: ShadowPointPair) -> "ShadowObject":
        if len(self.pairs) >= REQUIRED_PAIRS:
            raise AnnotationError(f"{self.name} already has {REQUIRED_PAIRS} point pairs")
        return replace(self, pairs=self.pairs + (pair,))

    def without_pair(self, index: int) -> "ShadowObject":
        if not 0 <= index < len(self.pairs):
            raise IndexError(f"{self.name} has no point pair {index}")
        return replace(self, pairs=self.pairs[:index] + self.pairs[index + 1:])

    def serialize(self) -> dict:
        """Serialize record for export."""
        return {
            "id": self.id,
            "name": self.name,
            "pairs": [pair.serialize() for pair in self.pairs],
        }


@dataclass(slots=True, frozen=True)
class ScreenshotShadows:
    """Everything marked on one screenshot."""

    screenshot_id: str
    width: int  # original photograph pixels
    height: int
    objects: Tuple[ShadowObject, ...] = ()
    timestamp: Optional[str] = None  # e.g. "t0+30", relative capture time

    @property
    def complete_objects(self) -> Tuple[ShadowObject, ...]:
        return tuple(obj for obj in self.objects if obj.is_complete)

    @property
    def pair_count(self) -> int:
        return sum(len(obj.pairs) for obj in self.objects)
