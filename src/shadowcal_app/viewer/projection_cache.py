"""Per-frame cache of canvas positions for persisted image points."""
from __future__ import annotations

from typing import Dict, Optional, Tuple

from loguru import logger

from ..math.display import normalized_to_canvas
from ..models.display import CanvasPixelPoint, DisplayParams, NormalizedImagePoint

FrameKey = Tuple[float, float, DisplayParams]


class ProjectionCache:
    """Canvas pixel positions of the current frame, keyed by point id.

    A frame is one viewport size with one set of display parameters. Entries
    are derived data only and never serialised. Asking for a different frame
    drops every entry of the previous one, so the cache holds at most one
    position per point and a stale pixel position is never returned.
    """

    def __init__(self) -> None:
        self._frame: Optional[FrameKey] = None
        self._entries: Dict[str, CanvasPixelPoint] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def canvas_position(
        self,
        point_id: str,
        point: NormalizedImagePoint,
        canvas_width: float,
        canvas_height: float,
        display: DisplayParams,
    ) -> CanvasPixelPoint:
        frame = (float(canvas_width), float(canvas_height), display)
        if frame != self._frame:
            self.invalidate()
            self._frame = frame
        cached = self._entries.get(point_id)
        if cached is None:
            cached = normalized_to_canvas(point, canvas_width, canvas_height, display)
            self._entries[point_id] = cached
        return cached

    def invalidate(self) -> None:
        if self._entries:
            logger.debug("Dropping {} cached canvas positions", len(self._entries))
        self._entries.clear()
        self._frame = None
