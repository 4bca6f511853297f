# Copyright 2024 Gergely Bencsik
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#     http://www.apache.org/licenses/LICENSE-2.0
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

import numpy as np
from ncgears.defs import *
from scipy.spatial.transform import Rotation as scp_Rotation


def make_angle_positive(angle: float) -> float:
    if angle < 0:
        angle += TWO_PI * np.ceil(-angle / TWO_PI)
    return float(angle)


def normalize_angle(angle: float) -> float:
    """
    Map an angle into [0, 2*pi).

    The angle is first shifted by whole turns into the positive range, then the
    remainder is taken. Plain modulo of a tiny negative value rounds to 2*pi,
    shifting first avoids that.
    """
    return make_angle_positive(angle) % TWO_PI


def angle_difference(angle1: float, angle2: float) -> float:
    """Unsigned shortest angular distance between two angles, in [0, pi]."""
    raw_difference = normalize_angle(angle2 - angle1)
    if raw_difference > PI:
        return TWO_PI - raw_difference
    return raw_difference


def to_degrees(angle: float) -> float:
    return angle * RAD2DEG


def to_vector(point) -> np.ndarray:
    """Convert a 2D or 3D point-like into a 3D row vector (z=0 for 2D input)."""
    point = np.asarray(point, dtype=float)
    if point.shape == (2,):
        return np.append(point, 0.0)
    if point.shape != (VSHAPE,):
        raise ValueError(f"Expected a 2D or 3D point, got shape {point.shape}")
    return point


def normalize_vector(v):
    return v / np.linalg.norm(v)


def rotate_vector(v, angle):
    rot1 = scp_Rotation.from_rotvec(OUT * angle)
    return rot1.apply(v)


def polar_to_xyz(angle, radius) -> np.ndarray:
    """
    Convert polar coordinates in the X-Y plane to 3D points.

    Works both on scalars (returns shape (3,)) and arrays (returns shape (n,3)).
    """
    angle = np.asarray(angle, dtype=float)
    radius = np.asarray(radius, dtype=float)
    points = np.stack(
        [radius * np.cos(angle), radius * np.sin(angle), np.zeros_like(angle * radius)],
        axis=-1,
    )
    return points
