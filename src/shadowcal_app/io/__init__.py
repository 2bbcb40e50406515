"""Input/output helpers for calibration records, shadow records, and screenshots."""

from .loader import load_calibration, load_screenshot_dimensions, load_shadows, save_record
from .records import SCHEMA_VERSION, CalibrationRecord, LegacyShadowRecord, ShadowRecord

__all__ = [
    "SCHEMA_VERSION",
    "CalibrationRecord",
    "LegacyShadowRecord",
    "ShadowRecord",
    "load_calibration",
    "load_screenshot_dimensions",
    "load_shadows",
    "save_record",
]
