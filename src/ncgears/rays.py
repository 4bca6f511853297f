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

import dataclasses
from typing import List, Sequence
import numpy as np
from ncgears.defs import *
from ncgears.function_generators import *


@dataclasses.dataclass
class Ray:
    """A point of a pitch curve in polar form, relative to its own gear center.

    Attributes
    ----------
    angle : float
        Polar angle in radians. Gears keep it normalized into [0, 2*pi).
    radius : float
        Distance from the gear center, positive.
    """

    angle: float = 0.0
    radius: float = 1.0

    def normalized(self) -> "Ray":
        return Ray(angle=normalize_angle(self.angle), radius=self.radius)

    @property
    def point(self) -> np.ndarray:
        return polar_to_xyz(self.angle, self.radius)


@dataclasses.dataclass
class Segment:
    """Consecutive pair of rays within one period of a pitch curve.

    Attributes
    ----------
    ray_from : Ray
        Starting ray of the segment.
    ray_to : Ray
        End ray of the segment. For the last segment of a period this is the
        first ray of the period advanced by one period angle.
    delta_angle : float
        Angle subtended by the segment, in [0, pi].
    delta_distance : float
        Chord length between the two ray end points.
    """

    ray_from: Ray
    ray_to: Ray
    delta_angle: float
    delta_distance: float

    @classmethod
    def from_rays(cls, ray_from: Ray, ray_to: Ray) -> "Segment":
        return cls(
            ray_from=ray_from,
            ray_to=ray_to,
            delta_angle=compute_delta_angle(ray_from, ray_to),
            delta_distance=compute_distance(ray_from, ray_to),
        )


def compute_delta_angle(ray1: Ray, ray2: Ray) -> float:
    return angle_difference(ray1.angle, ray2.angle)


def compute_distance_squared(ray1: Ray, ray2: Ray) -> float:
    delta_angle = compute_delta_angle(ray1, ray2)
    return (
        ray1.radius**2
        + ray2.radius**2
        - 2 * ray1.radius * ray2.radius * np.cos(delta_angle)
    )


def compute_distance(ray1: Ray, ray2: Ray) -> float:
    """Chord length between two rays by the law of cosines."""
    # rounding can push the square slightly below 0 for coincident rays
    return float(np.sqrt(max(compute_distance_squared(ray1, ray2), 0.0)))


def compute_normal(ray1: Ray, ray2: Ray) -> np.ndarray:
    """
    Unit normal of the chord between two rays, pointing away from the origin.

    Parameters
    ----------
    ray1, ray2 : Ray
        End points of the chord.

    Returns
    -------
    np.ndarray
        3D unit vector in the X-Y plane.

    Raises
    ------
    ValueError
        If the two rays point to the same location.
    """
    p1 = ray1.point
    p2 = ray2.point
    direction = p2 - p1
    length = np.linalg.norm(direction)
    if length == 0:
        raise ValueError("Cannot compute the normal of a zero-length segment")
    normal = np.array([direction[1], -direction[0], 0.0]) / length
    if np.dot(normal, (p1 + p2) / 2) < 0:
        normal = -normal
    return normal


def build_period_segments(
    period_rays: Sequence[Ray], period_angle: float, orientation: int = 1
) -> List[Segment]:
    """
    Build the segments tiling one period.

    The rays are taken in the given order. The last segment closes the period by
    connecting the last ray to the first ray advanced by one period angle in the
    direction of `orientation`.
    """
    segments = []
    n = len(period_rays)
    for k in range(n):
        ray_from = period_rays[k]
        if k + 1 < n:
            ray_to = period_rays[k + 1]
        else:
            ray_to = Ray(
                angle=normalize_angle(
                    period_rays[0].angle + orientation * period_angle
                ),
                radius=period_rays[0].radius,
            )
        segments.append(Segment.from_rays(ray_from, ray_to))
    return segments
