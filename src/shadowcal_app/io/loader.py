"""File loading and saving utilities."""
from __future__ import annotations

from pathlib import Path
from typing import Tuple, Union

import cv2
from loguru import logger
from pydantic import BaseModel

from ..errors import RecordValidationError
from .records import (
    CalibrationRecord,
    LegacyShadowRecord,
    ShadowRecord,
    dump_record_json,
    parse_calibration_json,
    parse_shadow_json,
)


def load_screenshot_dimensions(path: Path) -> Tuple[int, int]:
    """Return ``(width, height)`` of a screenshot in original pixels."""
    image = cv2.imread(str(path), cv2.IMREAD_UNCHANGED)
    if image is None:
        raise FileNotFoundError(f"Unable to read screenshot image: {path}")
    height, width = image.shape[:2]
    logger.debug("Loaded screenshot {} with size {}x{}", path, width, height)
    return int(width), int(height)


def _read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise RecordValidationError(f"{path} is not UTF-8 text") from exc


def load_calibration(path: Path) -> CalibrationRecord:
    """Load and validate a calibration record."""
    record = parse_calibration_json(_read_text(path))
    logger.info("Loaded calibration {} with {} screenshots", path, len(record.screenshots))
    return record


def load_shadows(path: Path) -> Union[ShadowRecord, LegacyShadowRecord]:
    """Load and validate a shadow record (current or legacy version)."""
    record = parse_shadow_json(_read_text(path))
    logger.info("Loaded shadow record {} (version {})", path, record.version)
    return record


def save_record(path: Path, record: BaseModel) -> None:
    """Write a validated record as indented JSON."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(dump_record_json(record) + "\n", encoding="utf-8")
    logger.info("Saved {} to {}", type(record).__name__, path)
