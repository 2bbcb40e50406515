import math

import numpy as np
import pytest

from shadowcal_app.errors import InvalidCameraParameters
from shadowcal_app.math.projection import (
    NO_HIT,
    OCCLUDED,
    ScreenPoint,
    canvas_ray,
    forward_project,
    ndc_to_normalized,
    ndc_to_pixel,
    normalized_to_ndc,
    pixel_to_ndc,
    pixel_to_ray,
    project_room_edges,
    project_to_canvas,
    project_wall_outline,
)
from shadowcal_app.models.camera_pose import CameraPose, EulerRotation
from shadowcal_app.models.display import CanvasPixelPoint, NormalizedImagePoint
from shadowcal_app.models.room import RoomDimensions, WallName, WorldPoint3D

ROOM = RoomDimensions(width=4.0, height=3.0, depth=5.0)


def test_camera_rejects_invalid_fov_and_aspect():
    origin = WorldPoint3D(0.0, 0.0, 0.0)
    for fov in (0.0, 180.0, -10.0, math.inf):
        with pytest.raises(InvalidCameraParameters):
            CameraPose(position=origin, fov_y=fov)
    with pytest.raises(InvalidCameraParameters):
        CameraPose(position=origin, aspect_ratio=0.0)


def test_focal_factor_matches_half_fov():
    camera = CameraPose(position=WorldPoint3D(0.0, 0.0, 0.0), fov_y=90.0)
    assert math.isclose(camera.focal_factor, 1.0)


def test_point_on_optical_axis_projects_to_centre():
    camera = CameraPose(position=WorldPoint3D(2.0, 1.5, 0.5))
    screen = forward_project(WorldPoint3D(2.0, 1.5, 5.0), camera)
    assert math.isclose(screen.x, 0.0, abs_tol=1e-12)
    assert math.isclose(screen.y, 0.0, abs_tol=1e-12)


def test_point_at_fov_edge_reaches_viewport_edge():
    camera = CameraPose(position=WorldPoint3D(0.0, 0.0, 0.0), fov_y=60.0, aspect_ratio=2.0)
    up = math.tan(math.radians(30.0))
    screen = forward_project(WorldPoint3D(0.0, up, 1.0), camera)
    assert math.isclose(screen.y, 1.0, rel_tol=1e-12)
    # Horizontal extent is divided by the aspect ratio.
    screen = forward_project(WorldPoint3D(up, 0.0, 1.0), camera)
    assert math.isclose(screen.x, 0.5, rel_tol=1e-12)


def test_points_behind_or_on_camera_plane_are_occluded():
    camera = CameraPose(position=WorldPoint3D(0.0, 0.0, 0.0))
    assert forward_project(WorldPoint3D(0.0, 0.0, -1.0), camera) is OCCLUDED
    assert forward_project(WorldPoint3D(1.0, 1.0, 0.0), camera) is OCCLUDED
    assert project_to_canvas(WorldPoint3D(0.0, 0.0, -1.0), camera, 800, 600) is OCCLUDED
    assert OCCLUDED is not NO_HIT


def test_forward_project_inverts_pixel_to_ray():
    rng = np.random.default_rng(42)
    for _ in range(200):
        angles = rng.uniform(-180.0, 180.0, size=3)
        camera = CameraPose(
            position=WorldPoint3D(*rng.uniform(0.0, 4.0, size=3)),
            rotation=EulerRotation(x=angles[0], y=angles[1], z=angles[2]),
            fov_y=float(rng.uniform(20.0, 120.0)),
            aspect_ratio=float(rng.uniform(0.5, 2.5)),
        )
        screen = ScreenPoint(*rng.uniform(-1.0, 1.0, size=2))
        ray = pixel_to_ray(screen, camera)
        assert math.isclose(np.linalg.norm(ray.direction.as_array()), 1.0, rel_tol=1e-12)

        projected = forward_project(ray.point_at(float(rng.uniform(0.1, 20.0))), camera)
        assert projected is not OCCLUDED
        assert math.isclose(projected.x, screen.x, abs_tol=1e-9)
        assert math.isclose(projected.y, screen.y, abs_tol=1e-9)


def test_ndc_pixel_conversions():
    pixel = ndc_to_pixel(ScreenPoint(0.0, 0.0), 800, 600)
    assert (pixel.px, pixel.py) == (400.0, 300.0)
    top_left = ndc_to_pixel(ScreenPoint(-1.0, 1.0), 800, 600)
    assert (top_left.px, top_left.py) == (0.0, 0.0)

    screen = pixel_to_ndc(CanvasPixelPoint(200.0, 450.0), 800, 600)
    assert math.isclose(screen.x, -0.5)
    assert math.isclose(screen.y, -0.5)

    normalized = ndc_to_normalized(ScreenPoint(-0.5, -0.5))
    assert math.isclose(normalized.normalized_x, 0.25)
    assert math.isclose(normalized.normalized_y, 0.75)
    back = normalized_to_ndc(NormalizedImagePoint(0.25, 0.75))
    assert math.isclose(back.x, -0.5)
    assert math.isclose(back.y, -0.5)


def test_canvas_ray_through_projected_corner_hits_that_corner():
    camera = CameraPose(
        position=WorldPoint3D(2.0, 1.5, 0.5),
        rotation=EulerRotation(x=-10.0, y=15.0),
        aspect_ratio=800 / 600,
    )
    corner = WorldPoint3D(0.0, 0.0, 5.0)
    pixel = project_to_canvas(corner, camera, 800, 600)
    ray = canvas_ray(pixel, camera, 800, 600)
    to_corner = corner.as_array() - ray.origin.as_array()
    np.testing.assert_allclose(ray.direction.as_array(), to_corner / np.linalg.norm(to_corner), atol=1e-9)


def test_room_edges_drop_segments_behind_camera():
    camera = CameraPose(position=WorldPoint3D(2.0, 1.5, 0.5), aspect_ratio=800 / 600)
    # Front wall corners lie behind the camera; only the four back edges survive.
    assert len(project_room_edges(ROOM, camera, 800, 600)) == 4

    centred = CameraPose(position=WorldPoint3D(2.0, 1.5, -10.0), aspect_ratio=800 / 600)
    assert len(project_room_edges(ROOM, centred, 800, 600)) == 12


def test_wall_outline_is_occluded_when_any_corner_is_behind():
    camera = CameraPose(position=WorldPoint3D(2.0, 1.5, 0.5), aspect_ratio=800 / 600)
    assert project_wall_outline(WallName.FRONT, ROOM, camera, 800, 600) is OCCLUDED
    assert project_wall_outline(WallName.FLOOR, ROOM, camera, 800, 600) is OCCLUDED

    outline = project_wall_outline(WallName.BACK, ROOM, camera, 800, 600)
    assert len(outline) == 4
    xs = [pixel.px for pixel in outline]
    ys = [pixel.py for pixel in outline]
    # The back wall is centred horizontally and sits symmetric about the camera height.
    assert math.isclose(min(xs) + max(xs), 800.0)
    assert math.isclose(min(ys) + max(ys), 600.0)
