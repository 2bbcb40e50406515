"""YXZ Euler rotation shared by every projection in the package.

The camera frame is:

- +X: right on screen
- +Y: up on screen
- +Z: forward, away from the camera

``rotate`` maps a camera-relative world vector into this frame by applying
yaw about Y, then pitch about X, then roll about Z. ``inverse_rotate`` undoes
the three steps in reverse order.
"""
from __future__ import annotations

import math
from typing import Iterable

import numpy as np

from ..models.camera_pose import EulerRotation


def _yaw_matrix(angle_rad: float) -> np.ndarray:
    c, s = math.cos(angle_rad), math.sin(angle_rad)
    return np.array([[c, 0.0, s], [0.0, 1.0, 0.0], [-s, 0.0, c]], dtype=np.float64)


def _pitch_matrix(angle_rad: float) -> np.ndarray:
    c, s = math.cos(angle_rad), math.sin(angle_rad)
    return np.array([[1.0, 0.0, 0.0], [0.0, c, -s], [0.0, s, c]], dtype=np.float64)


def _roll_matrix(angle_rad: float) -> np.ndarray:
    c, s = math.cos(angle_rad), math.sin(angle_rad)
    return np.array([[c, -s, 0.0], [s, c, 0.0], [0.0, 0.0, 1.0]], dtype=np.float64)


def rotation_matrix(rotation: EulerRotation) -> np.ndarray:
    """Return the 3x3 world-to-camera matrix ``Rz(roll) @ Rx(pitch) @ Ry(yaw)``."""
    yaw = _yaw_matrix(math.radians(rotation.yaw))
    pitch = _pitch_matrix(math.radians(rotation.pitch))
    roll = _roll_matrix(math.radians(rotation.roll))
    return roll @ pitch @ yaw


def rotate(vector: Iterable[float], rotation: EulerRotation) -> np.ndarray:
    """Rotate ``vector`` from room axes into camera axes."""
    v = np.asarray(vector, dtype=np.float64).reshape(3)
    return rotation_matrix(rotation) @ v


def inverse_rotate(vector: Iterable[float], rotation: EulerRotation) -> np.ndarray:
    """Rotate ``vector`` from camera axes back into room axes.

    The matrix is orthonormal, so the transpose applies roll, pitch and yaw
    with negated angles in reverse order.
    """
    v = np.asarray(vector, dtype=np.float64).reshape(3)
    return rotation_matrix(rotation).T @ v
