from __future__ import annotations

import json
from pathlib import Path

import cv2
import numpy as np
import pytest

from shadowcal_app.errors import RecordValidationError
from shadowcal_app.io.loader import load_calibration, load_screenshot_dimensions, load_shadows, save_record
from shadowcal_app.io.records import calibration_to_record
from shadowcal_app.models.calibration_state import default_calibration


def _write_screenshot(path: Path, width: int = 320, height: int = 180) -> None:
    image = np.zeros((height, width, 3), dtype=np.uint8)
    image[:, :, 2] = 200
    ok = cv2.imwrite(str(path), image)
    if not ok:
        raise RuntimeError(f"Failed to create test screenshot at {path}")


def test_load_screenshot_dimensions(tmp_path: Path):
    path = tmp_path / "shot.png"
    _write_screenshot(path)
    assert load_screenshot_dimensions(path) == (320, 180)


def test_load_screenshot_dimensions_missing_file(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        load_screenshot_dimensions(tmp_path / "missing.png")


def test_save_and_load_calibration(tmp_path: Path):
    record = calibration_to_record(default_calibration(["a", "b"]))
    path = tmp_path / "nested" / "calibration.json"
    save_record(path, record)

    assert json.loads(path.read_text(encoding="utf-8"))["version"] == "3.0"
    assert load_calibration(path) == record


def test_load_shadows_rejects_non_utf8(tmp_path: Path):
    path = tmp_path / "shadows.json"
    path.write_bytes(b"\xff\xfe\x00garbage")
    with pytest.raises(RecordValidationError):
        load_shadows(path)


def test_load_shadows_accepts_missing_version(tmp_path: Path):
    path = tmp_path / "shadows.json"
    path.write_text(json.dumps({"screenshots": []}), encoding="utf-8")
    assert load_shadows(path).version == "3.0"
