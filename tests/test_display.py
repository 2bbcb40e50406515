import math

import numpy as np
import pytest

from shadowcal_app.errors import InvalidDisplayParameters
from shadowcal_app.math.display import canvas_to_normalized, normalized_to_canvas
from shadowcal_app.models.display import CanvasPixelPoint, DisplayParams, NormalizedImagePoint


def test_canvas_centre_maps_to_image_centre():
    point = canvas_to_normalized(CanvasPixelPoint(400.0, 300.0), 800, 600, DisplayParams(50.0, 0.0, 50.0, 50.0))
    assert math.isclose(point.normalized_x, 0.5)
    assert math.isclose(point.normalized_y, 0.5)


def test_points_outside_image_are_not_clamped():
    point = canvas_to_normalized(CanvasPixelPoint(0.0, 0.0), 800, 600, DisplayParams())
    assert math.isclose(point.normalized_x, -0.5)
    assert math.isclose(point.normalized_y, -0.5)
    assert not point.is_within_image()

    pixel = normalized_to_canvas(NormalizedImagePoint(1.5, -0.5), 800, 600, DisplayParams())
    assert math.isclose(pixel.px, 800.0)
    assert math.isclose(pixel.py, 0.0)


def test_rotation_is_applied_about_image_centre():
    display = DisplayParams(rotation=180.0)
    pixel = normalized_to_canvas(NormalizedImagePoint(0.25, 0.25), 800, 600, display)
    assert math.isclose(pixel.px, 500.0)
    assert math.isclose(pixel.py, 375.0)

    centre = normalized_to_canvas(NormalizedImagePoint(0.5, 0.5), 800, 600, DisplayParams(rotation=37.0))
    assert math.isclose(centre.px, 400.0)
    assert math.isclose(centre.py, 300.0)


def test_tiny_rotation_is_ignored():
    pixel = CanvasPixelPoint(123.0, 456.0)
    plain = canvas_to_normalized(pixel, 800, 600, DisplayParams(rotation=0.0))
    tiny = canvas_to_normalized(pixel, 800, 600, DisplayParams(rotation=0.05))
    assert plain == tiny


def test_canvas_to_normalized_round_trip():
    rng = np.random.default_rng(3)
    for _ in range(500):
        display = DisplayParams(
            scale=float(rng.uniform(1.0, 500.0)),
            rotation=float(rng.uniform(-180.0, 180.0)),
            offset_x=float(rng.uniform(0.0, 100.0)),
            offset_y=float(rng.uniform(0.0, 100.0)),
        )
        width, height = rng.uniform(200.0, 3000.0, size=2)
        pixel = CanvasPixelPoint(*rng.uniform(-100.0, 3100.0, size=2))
        back = normalized_to_canvas(canvas_to_normalized(pixel, width, height, display), width, height, display)
        assert math.isclose(back.px, pixel.px, abs_tol=1e-6)
        assert math.isclose(back.py, pixel.py, abs_tol=1e-6)

        point = NormalizedImagePoint(*rng.uniform(-0.5, 1.5, size=2))
        again = canvas_to_normalized(normalized_to_canvas(point, width, height, display), width, height, display)
        assert math.isclose(again.normalized_x, point.normalized_x, abs_tol=1e-6)
        assert math.isclose(again.normalized_y, point.normalized_y, abs_tol=1e-6)


@pytest.mark.parametrize("scale", [0.0, -5.0, math.inf, math.nan])
def test_display_rejects_bad_scale(scale):
    with pytest.raises(InvalidDisplayParameters):
        DisplayParams(scale=scale)


def test_display_rejects_non_finite_offsets():
    with pytest.raises(InvalidDisplayParameters):
        DisplayParams(offset_x=math.nan)


def test_display_serializes_background_keys():
    assert DisplayParams().to_dict() == {
        "backgroundScale": 50.0,
        "backgroundRotation": 0.0,
        "backgroundOffsetX": 50.0,
        "backgroundOffsetY": 50.0,
    }
