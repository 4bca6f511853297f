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

from enum import Enum
import numpy as np
from ncgears.defs import *
from ncgears.function_generators import polar_to_xyz
from ncgears.rays import Ray, compute_normal


class SurfaceType(Enum):
    """Display modes of a gear outline."""

    SMOOTH = "smooth"
    TEETH_SMALL = "teeth-small"
    TEETH_MEDIUM = "teeth-medium"
    TEETH_LARGE = "teeth-large"


# nominal tooth pitch, measured along the pitch curve
TOOTH_PITCH = {
    SurfaceType.TEETH_SMALL: 0.01,
    SurfaceType.TEETH_MEDIUM: 0.02,
    SurfaceType.TEETH_LARGE: 0.035,
}
TOOTH_HEIGHT_RATIO = 0.35
# points per tooth pitch
TOOTH_RESOLUTION = 12


def generate_smooth_outline(gear: "Gear") -> np.ndarray:
    angles = np.array([ray.angle for ray in gear.rays])
    radii = np.array([ray.radius for ray in gear.rays])
    return polar_to_xyz(angles, radii)


def teeth_count_per_period(period_surface: float, tooth_pitch: float) -> int:
    return max(1, int(round(period_surface / tooth_pitch)))


def generate_teeth_outline(gear: "Gear", tooth_pitch: float) -> np.ndarray:
    """
    Approximate teeth along the pitch curve of a gear.

    The pitch curve chords are offset along their outward normal by a clipped sine
    of the arc length. Each period holds a whole number of teeth and the offset
    sign follows the gear orientation, so two meshing gears (same period surface,
    opposite orientation) put a tooth of one in a gap of the other.

    Parameters
    ----------
    gear : Gear
        Gear to generate the outline for.
    tooth_pitch : float
        Nominal arc length of one tooth, adjusted to fit the period.

    Returns
    -------
    np.ndarray
        Gear-local outline points, shape (n,3).
    """
    teeth_count = teeth_count_per_period(gear.period_surface, tooth_pitch)
    pitch = gear.period_surface / teeth_count
    height = TOOTH_HEIGHT_RATIO * pitch

    points = []
    for k in range(gear.periods_count):
        offset_angle = gear.orientation * k * gear.period_angle
        surface = 0.0
        for segment in gear.period_segments:
            if segment.delta_distance == 0:
                continue
            ray_from = Ray(
                segment.ray_from.angle + offset_angle, segment.ray_from.radius
            )
            ray_to = Ray(segment.ray_to.angle + offset_angle, segment.ray_to.radius)
            normal = compute_normal(ray_from, ray_to)
            n_sub = max(
                2, int(np.ceil(segment.delta_distance / pitch * TOOTH_RESOLUTION))
            )
            t = np.linspace(0, 1, n_sub, endpoint=False)
            base = ray_from.point + t[:, np.newaxis] * (ray_to.point - ray_from.point)
            wave = np.clip(
                1.6 * np.sin(TWO_PI * (surface + t * segment.delta_distance) / pitch),
                -1,
                1,
            )
            points.append(
                base + (gear.orientation * height * wave)[:, np.newaxis] * normal
            )
            surface += segment.delta_distance
    return np.concatenate(points, axis=0)


def generate_outline(gear: "Gear", surface_type: SurfaceType) -> np.ndarray:
    if surface_type == SurfaceType.SMOOTH:
        return generate_smooth_outline(gear)
    if surface_type in TOOTH_PITCH:
        return generate_teeth_outline(gear, TOOTH_PITCH[surface_type])
    raise ValueError(f"Unknown surface type: {surface_type}")
