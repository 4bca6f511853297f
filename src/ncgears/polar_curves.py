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
from typing import List, Optional, Union
import numpy as np
from scipy.interpolate import CubicSpline
from ncgears.defs import *
from ncgears.function_generators import *
from ncgears.rays import Ray

# Shape generators only need to return one period of rays, sorted by increasing
# angle in [0, period_angle), and the number of periods of a full turn.


@dataclasses.dataclass
class PolarCurve:
    """Periodic pitch curve in polar form.

    Attributes
    ----------
    period_rays : List[Ray]
        Rays of one period, ordered by increasing angle within [0, period_angle).
    periods_count : int
        Number of periods tiling a full revolution.
    """

    period_rays: List[Ray]
    periods_count: int = 1

    def __post_init__(self):
        if self.periods_count < 1:
            raise ValueError(
                f"A curve needs at least 1 period, got {self.periods_count}"
            )
        if len(self.period_rays) == 0:
            raise ValueError("A curve needs at least 1 ray")
        if any(ray.radius <= 0 for ray in self.period_rays):
            raise ValueError("Ray radius must be positive")
        self.periods_count = int(self.periods_count)

    @classmethod
    def from_arrays(cls, angles, radii, periods_count: int = 1) -> "PolarCurve":
        rays = [Ray(angle=float(a), radius=float(r)) for a, r in zip(angles, radii)]
        return cls(period_rays=rays, periods_count=periods_count)

    @property
    def period_angle(self) -> float:
        return TWO_PI / self.periods_count

    def tile(self) -> List[Ray]:
        """Replicate the period rays over the full revolution."""
        return [
            Ray(
                angle=normalize_angle(k * self.period_angle + ray.angle),
                radius=ray.radius,
            )
            for k in range(self.periods_count)
            for ray in self.period_rays
        ]

    def radii(self) -> np.ndarray:
        return np.array([ray.radius for ray in self.period_rays])


def _period_angles(periods_count: int, steps: int) -> np.ndarray:
    if steps < 1:
        raise ValueError(f"Need at least 1 step per period, got {steps}")
    return np.linspace(0, TWO_PI / periods_count, steps, endpoint=False)


def polygon_radius(angles, radius: float, sides: int, shift=ORIGIN) -> np.ndarray:
    """
    Polar radius of a regular polygon seen from the origin.

    The polygon has circumradius `radius` and a vertex on the positive X axis
    before being translated by `shift`. The origin must stay inside the polygon.
    """
    normal_angles = PI / sides + TWO_PI * np.arange(sides) / sides
    normals = np.stack([np.cos(normal_angles), np.sin(normal_angles)], axis=-1)
    support = radius * np.cos(PI / sides) + normals @ to_vector(shift)[:2]
    directions = np.stack([np.cos(angles), np.sin(angles)], axis=-1)
    dots = directions @ normals.transpose()
    distances = np.where(dots > 0, support / np.where(dots > 0, dots, 1), np.inf)
    return distances.min(axis=1)


def build_ellipse(a: float, b: float, steps: int = 30) -> PolarCurve:
    """Ellipse centered on the rotation axis, semi-axes a (along X) and b."""
    if a <= 0 or b <= 0:
        raise ValueError("Ellipse semi-axes must be positive")
    angles = _period_angles(2, steps)
    radii = a * b / np.sqrt((b * np.cos(angles)) ** 2 + (a * np.sin(angles)) ** 2)
    return PolarCurve.from_arrays(angles, radii, periods_count=2)


def build_circle(radius: float) -> PolarCurve:
    if radius <= 0:
        raise ValueError("Circle radius must be positive")
    periods_count = 60
    rays_count = 2 * periods_count
    angles = TWO_PI * np.arange(2) / rays_count
    return PolarCurve.from_arrays(angles, np.full(2, radius), periods_count)


def build_polygon(radius: float, sides: int, steps: int = 40) -> PolarCurve:
    """Regular polygon with circumradius `radius`, one period per side."""
    if radius <= 0:
        raise ValueError("Polygon radius must be positive")
    if sides < 3:
        raise ValueError(f"A polygon needs at least 3 sides, got {sides}")
    angles = _period_angles(sides, steps)
    radii = polygon_radius(angles, radius, sides)
    return PolarCurve.from_arrays(angles, radii, periods_count=sides)


def build_off_circle(radius: float, offset: float, steps: int = 120) -> PolarCurve:
    """Circle rotating around an axis shifted by `offset` from its center."""
    if radius <= 0:
        raise ValueError("Circle radius must be positive")
    if not 0 <= offset < radius:
        raise ValueError("Offset must be in [0, radius)")
    angles = _period_angles(1, steps)
    radii = offset * np.cos(angles) + np.sqrt(
        radius**2 - (offset * np.sin(angles)) ** 2
    )
    return PolarCurve.from_arrays(angles, radii, periods_count=1)


def build_off_polygon(
    radius: float, sides: int, offset_ratio: float = 0.6, steps: int = 240
) -> PolarCurve:
    """
    Regular polygon rotating around an off-center axis.

    The polygon is shifted along X by `offset_ratio` times its inradius, so the
    ratio has to stay below 1 to keep the axis inside the polygon.
    """
    if radius <= 0:
        raise ValueError("Polygon radius must be positive")
    if sides < 3:
        raise ValueError(f"A polygon needs at least 3 sides, got {sides}")
    if not 0 <= offset_ratio < 1:
        raise ValueError("Offset ratio must be in [0, 1)")
    inradius = radius * np.cos(PI / sides)
    angles = _period_angles(1, steps)
    radii = polygon_radius(angles, radius, sides, shift=RIGHT * offset_ratio * inradius)
    return PolarCurve.from_arrays(angles, radii, periods_count=1)


def build_heart(scale: float, steps: int = 200) -> PolarCurve:
    if scale <= 0:
        raise ValueError("Heart scale must be positive")
    angles = _period_angles(1, steps)
    sin = np.sin(angles)
    radii = scale * (
        2.2 - 2 * sin + sin * np.sqrt(np.abs(np.cos(angles))) / (sin + 1.4)
    )
    return PolarCurve.from_arrays(angles, radii, periods_count=1)


def build_random(
    size: float,
    control_points: int = 8,
    steps: int = 180,
    seed: Optional[Union[int, np.random.Generator]] = None,
) -> PolarCurve:
    """
    Smooth random pitch curve.

    A periodic cubic spline runs through `control_points` random radii evenly
    spread around the circle.

    Parameters
    ----------
    size : float
        Largest control radius.
    control_points : int
        Number of random radii, at least 3.
    steps : int
        Number of rays of the resulting curve.
    seed : int or np.random.Generator, optional
        Seed or generator for reproducible shapes.
    """
    if size <= 0:
        raise ValueError("Size must be positive")
    if control_points < 3:
        raise ValueError("Need at least 3 control points")
    rng = np.random.default_rng(seed)
    control_radii = rng.uniform(0.6 * size, size, control_points)
    control_radii = np.append(control_radii, control_radii[0])
    control_angles = np.linspace(0, TWO_PI, control_points + 1)
    spline = CubicSpline(control_angles, control_radii, bc_type="periodic")
    angles = _period_angles(1, steps)
    radii = np.clip(spline(angles), 0.3 * size, None)
    return PolarCurve.from_arrays(angles, radii, periods_count=1)
