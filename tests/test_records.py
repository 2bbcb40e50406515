import json

import pytest

from shadowcal_app.errors import RecordValidationError
from shadowcal_app.io.records import (
    SCHEMA_VERSION,
    LegacyShadowRecord,
    ShadowRecord,
    calibration_from_record,
    calibration_to_record,
    dump_record_json,
    parse_calibration_json,
    parse_shadow_json,
    shadows_from_record,
    shadows_to_record,
)
from shadowcal_app.models.camera_pose import EulerRotation
from shadowcal_app.models.room import WallName, WorldPoint3D


def calibration_payload(**overrides) -> dict:
    payload = {
        "room": {"width": 4, "depth": 5, "height": 2.5},
        "camera": {"position": {"x": 2, "y": 1.5, "z": 3}, "fovY": 60},
        "globalDisplayZoom": 65,
        "screenshots": [
            {
                "screenshotId": "s1",
                "cameraRotation": {"x": -4, "y": 180, "z": 0},
                "display": {
                    "backgroundScale": 65,
                    "backgroundRotation": 1.5,
                    "backgroundOffsetX": 48,
                    "backgroundOffsetY": 52,
                },
                "completed": True,
            }
        ],
    }
    payload.update(overrides)
    return payload


def shadow_payload() -> dict:
    return {
        "version": "3.0",
        "screenshots": [
            {
                "screenshotId": "s1",
                "screenshotDimensions": {"width": 1920, "height": 1080},
                "objects": [
                    {
                        "id": "obj_1",
                        "name": "Lamp",
                        "pairs": [
                            {
                                "objectPoint": {"normalizedX": 0.4, "normalizedY": 0.3},
                                "shadowPoint": {
                                    "normalizedX": 0.45,
                                    "normalizedY": 0.8,
                                    "wall": "floor",
                                    "world3D": {"x": 1.0, "y": 0.0, "z": 2.0},
                                },
                            }
                        ],
                    }
                ],
            }
        ],
    }


def test_missing_version_reads_as_current():
    record = parse_calibration_json(json.dumps(calibration_payload()))
    assert record.version == SCHEMA_VERSION

    data = calibration_from_record(record)
    assert data.room.height == 2.5
    assert data.camera_position == WorldPoint3D(2.0, 1.5, 3.0)
    assert data.steps[0].rotation == EulerRotation(x=-4.0, y=180.0)
    assert data.steps[0].display.offset_y == 52.0
    assert data.global_display_zoom == 65.0


def test_calibration_record_round_trip():
    record = parse_calibration_json(json.dumps(calibration_payload(version="3.0")))
    again = calibration_to_record(calibration_from_record(record))
    assert again.model_dump() == record.model_dump()
    assert json.loads(dump_record_json(again))["screenshots"][0]["completed"] is True


def test_missing_global_zoom_falls_back_to_default():
    payload = calibration_payload()
    del payload["globalDisplayZoom"]
    data = calibration_from_record(parse_calibration_json(json.dumps(payload)))
    assert data.global_display_zoom == 50.0


@pytest.mark.parametrize(
    "payload",
    [
        calibration_payload(version="2.0"),
        calibration_payload(room={"width": 0, "depth": 5, "height": 2.5}),
        calibration_payload(camera={"position": {"x": 0, "y": 0, "z": 0}, "fovY": 180}),
        calibration_payload(extra=True),
        {"room": {"width": 4, "depth": 5, "height": 2.5}},
    ],
)
def test_invalid_calibration_records_are_rejected(payload):
    with pytest.raises(RecordValidationError):
        parse_calibration_json(json.dumps(payload))


def test_malformed_json_is_rejected():
    with pytest.raises(RecordValidationError):
        parse_calibration_json("{not json")


def test_shadow_record_parses_current_version():
    record = parse_shadow_json(json.dumps(shadow_payload()))
    assert isinstance(record, ShadowRecord)

    (shots,) = shadows_from_record(record)
    assert (shots.width, shots.height) == (1920, 1080)
    shadow = shots.objects[0].pairs[0].shadow_point
    assert shadow.wall is WallName.FLOOR
    assert shadow.world3d == WorldPoint3D(1.0, 0.0, 2.0)


def test_shadow_record_survives_export():
    record = parse_shadow_json(json.dumps(shadow_payload()))
    exported = json.loads(dump_record_json(shadows_to_record(shadows_from_record(record))))
    assert exported == shadow_payload()


def test_unknown_wall_and_extra_pairs_are_rejected():
    payload = shadow_payload()
    payload["screenshots"][0]["objects"][0]["pairs"][0]["shadowPoint"]["wall"] = "window"
    with pytest.raises(RecordValidationError):
        parse_shadow_json(json.dumps(payload))

    payload = shadow_payload()
    pairs = payload["screenshots"][0]["objects"][0]["pairs"]
    pairs.extend(pairs * 3)
    with pytest.raises(RecordValidationError):
        parse_shadow_json(json.dumps(payload))


def test_legacy_shadow_record_is_upgraded():
    payload = shadow_payload()
    payload["version"] = "2.0"
    payload["calibrationVersion"] = "2.0"
    shot = payload["screenshots"][0]
    del shot["screenshotDimensions"]
    shot["timestamp"] = "t0+30"

    record = parse_shadow_json(json.dumps(payload))
    assert isinstance(record, LegacyShadowRecord)
    with pytest.raises(RecordValidationError):
        shadows_from_record(record)

    (shots,) = shadows_from_record(record, default_dimensions=(1280, 720))
    assert (shots.width, shots.height) == (1280, 720)
    assert shots.timestamp == "t0+30"
    assert shadows_to_record((shots,)).version == SCHEMA_VERSION


def test_unknown_shadow_version_is_rejected():
    payload = shadow_payload()
    payload["version"] = "1.0"
    with pytest.raises(RecordValidationError):
        parse_shadow_json(json.dumps(payload))
