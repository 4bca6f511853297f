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

import logging
import warnings
import weakref
from typing import Dict, List, Optional, Sequence
import numpy as np
from ncgears.defs import *
from ncgears.function_generators import *
from ncgears.rays import Ray, Segment, build_period_segments
from ncgears.polar_curves import PolarCurve
from ncgears.gearmath import (
    CompanionPeriodData,
    get_next_fitting_distance,
    try_build_companion_period,
)
from ncgears.gearteeth import SurfaceType, generate_outline


class Gear:
    """
    A gear with a non-circular pitch curve, rotating around a fixed center.

    The pitch curve is stored as one period of rays, repeated `periods_count`
    times around the center. A root gear is rotated directly by `rotate()`.
    A driven gear has a parent (driver) and derives its rotation from it in
    `update()` by matching the arc length rolled at the contact point.

    Parameters
    ----------
    center : array-like
        Rotation center, 2D or 3D point in the X-Y plane.
    period_rays : Sequence[Ray]
        Rays of one period. Root gears list them by increasing angle, driven
        gears in the sense given by `orientation`.
    periods_count : int
        Number of periods in a full turn.
    orientation : int
        +1 or -1. The sense in which the period rays follow each other.
        Meshing gears have opposite orientation.
    parent : Gear, optional
        Driver gear. Only a weak reference is kept.
    construction : CompanionPeriodData, optional
        Result of the distance search that produced this gear.

    Notes
    -----
    Everything except `rotation` is fixed at construction. The arc length along
    the pitch curve (called surface here) is measured with chords between rays,
    starting at the first period ray and walking the period segments.
    """

    def __init__(
        self,
        center,
        period_rays: Sequence[Ray],
        periods_count: int,
        orientation: int = 1,
        parent: Optional["Gear"] = None,
        construction: Optional[CompanionPeriodData] = None,
    ):
        if len(period_rays) == 0:
            raise ValueError("A gear needs at least 1 ray")
        if periods_count < 1:
            raise ValueError(f"A gear needs at least 1 period, got {periods_count}")

        self._center = to_vector(center).copy()
        self._center.flags.writeable = False
        self.period_rays: List[Ray] = [ray.normalized() for ray in period_rays]
        self.periods_count = int(periods_count)
        self.orientation = 1 if orientation > 0 else -1
        self.period_angle = TWO_PI / self.periods_count

        self.period_segments: List[Segment] = build_period_segments(
            self.period_rays, self.period_angle, self.orientation
        )
        self._delta_angles = np.array([seg.delta_angle for seg in self.period_segments])
        self._delta_distances = np.array(
            [seg.delta_distance for seg in self.period_segments]
        )
        self._cumulated_angles = np.cumsum(self._delta_angles)
        self._cumulated_surfaces = np.cumsum(self._delta_distances)
        self.period_surface = float(self._cumulated_surfaces[-1])
        if not self.period_surface > 0:
            raise ValueError("Pitch curve has zero length")
        if abs(self._cumulated_angles[-1] - self.period_angle) > DELTA:
            raise ValueError(
                "Period rays do not tile the period: "
                f"segments cover {self._cumulated_angles[-1]} "
                f"instead of {self.period_angle}"
            )

        radii = np.array([ray.radius for ray in self.period_rays])
        self.min_radius = float(radii.min())
        self.max_radius = float(radii.max())

        self.rays: List[Ray] = [
            Ray(
                angle=normalize_angle(
                    ray.angle + self.orientation * k * self.period_angle
                ),
                radius=ray.radius,
            )
            for k in range(self.periods_count)
            for ray in self.period_rays
        ]

        self.rotation = 0.0
        self.construction = construction
        self._outline_cache: Dict[SurfaceType, np.ndarray] = {}

        if parent is None:
            self._parent_ref = None
            self._bearing = 0.0
            self.center_distance = 0.0
        else:
            self._parent_ref = weakref.ref(parent)
            delta = self._center - parent.center
            # centers never move, the line of centers is fixed
            self._bearing = float(np.arctan2(delta[1], delta[0]))
            self.center_distance = float(np.linalg.norm(delta))

    @classmethod
    def create(cls, center, polar_curve: PolarCurve) -> "Gear":
        """Build a root gear from a pitch curve."""
        return cls(center, polar_curve.period_rays, polar_curve.periods_count)

    @classmethod
    def slave_gear(
        cls, ideal_center, master: "Gear", margin: float = MESH_MARGIN
    ) -> Optional["Gear"]:
        """
        Build the gear meshing with `master`, as close as possible to a location.

        The new gear is placed on the line from the master center towards
        `ideal_center`, at the center distance where its pitch curve closes
        after an integer number of periods. The distance is never below the
        master's outer radius plus `margin`.

        Returns
        -------
        Gear or None
            None when no meshing gear can be built for this location.
        """
        ideal_center = to_vector(ideal_center)
        direction = ideal_center - master.center
        length = np.linalg.norm(direction)
        # 'not >' keeps NaN input out as well
        if not length > DELTA:
            logging.debug(f"No gear direction from {master.center} to {ideal_center}")
            return None

        ideal_distance = max(master.max_radius + margin, length)
        try:
            adjusted_distance = get_next_fitting_distance(ideal_distance, master)
            period = try_build_companion_period(adjusted_distance, master)
            new_gear = cls(
                center=master.center + normalize_vector(direction) * adjusted_distance,
                period_rays=period.period_rays,
                periods_count=period.target_period,
                orientation=-master.orientation,
                parent=master,
                construction=period,
            )
        except ValueError as err:
            logging.debug(f"No meshing gear near {ideal_center}: {err}")
            return None

        if period.error > FIT_ERROR_WARNING:
            warnings.warn(
                f"Driven gear period does not close, residual error {period.error}",
                RuntimeWarning,
                stacklevel=2,
            )
        return new_gear

    @property
    def center(self) -> np.ndarray:
        return self._center

    @property
    def parent(self) -> Optional["Gear"]:
        if self._parent_ref is None:
            return None
        return self._parent_ref()

    @property
    def is_root(self) -> bool:
        return self._parent_ref is None

    @property
    def fit_error(self) -> float:
        """Residual period closure error of the construction, 0 for root gears."""
        if self.construction is None:
            return 0.0
        return self.construction.error

    @property
    def bearing(self) -> float:
        """Direction of the line from the parent center to this gear's center."""
        return self._bearing

    def rotate(self, delta: float):
        """Advance the rotation of a root gear."""
        if not self.is_root:
            raise RuntimeError("Cannot rotate child gear.")
        self.rotation = normalize_angle(self.rotation + delta)

    def update(self):
        """Set the rotation of a driven gear from the current parent rotation."""
        if self.is_root:
            return
        parent = self.parent
        if parent is None:
            raise RuntimeError("Parent gear no longer exists.")
        surface = parent.get_current_rotated_surface(self._bearing)
        self.rotate_from_surface(surface, self._bearing + PI)

    def _walk_angle(self, local_angle: float) -> float:
        """Angle swept from the first period ray to `local_angle`, in [0, 2*pi)."""
        return normalize_angle(
            self.orientation * (local_angle - self.period_rays[0].angle)
        )

    @staticmethod
    def _find_segment(cumulated: np.ndarray, value: float) -> int:
        idx = int(np.searchsorted(cumulated, value))
        if idx == len(cumulated):
            if value - cumulated[-1] > DELTA:
                raise RuntimeError(
                    f"Segment walk exhausted at {cumulated[-1]}, target {value}"
                )
            idx -= 1
        return idx

    def _locate(self, local_angle: float):
        """Whole periods, segment index and fraction of a gear-local angle."""
        walk_angle = self._walk_angle(local_angle)
        n_periods = np.floor(walk_angle / self.period_angle)
        remaining = walk_angle - n_periods * self.period_angle
        idx = self._find_segment(self._cumulated_angles, remaining)
        previous_angle = self._cumulated_angles[idx] - self._delta_angles[idx]
        fraction = 0.0
        if self._delta_angles[idx] > 0:
            fraction = (remaining - previous_angle) / self._delta_angles[idx]
        return n_periods, idx, float(np.clip(fraction, 0, 1))

    def radius_at(self, local_angle: float) -> float:
        """Pitch curve radius at a gear-local angle, linear between rays."""
        _, idx, fraction = self._locate(local_angle)
        segment = self.period_segments[idx]
        return segment.ray_from.radius + fraction * (
            segment.ray_to.radius - segment.ray_from.radius
        )

    def surface_at_angle(self, local_angle: float) -> float:
        """Arc length from the first period ray to a gear-local angle."""
        n_periods, idx, fraction = self._locate(local_angle)
        previous_surface = self._cumulated_surfaces[idx] - self._delta_distances[idx]
        return float(
            n_periods * self.period_surface
            + previous_surface
            + fraction * self._delta_distances[idx]
        )

    def angle_at_surface(self, surface: float) -> float:
        """Gear-local angle reached after rolling `surface` from the first ray."""
        n_periods = np.floor(surface / self.period_surface)
        remaining = surface - n_periods * self.period_surface
        idx = self._find_segment(self._cumulated_surfaces, remaining)
        previous_surface = self._cumulated_surfaces[idx] - self._delta_distances[idx]
        walk_angle = n_periods * self.period_angle + (
            self._cumulated_angles[idx] - self._delta_angles[idx]
        )
        if self._delta_distances[idx] > 0:
            fraction = (remaining - previous_surface) / self._delta_distances[idx]
            walk_angle += np.clip(fraction, 0, 1) * self._delta_angles[idx]
        return normalize_angle(
            self.period_rays[0].angle + self.orientation * walk_angle
        )

    def get_current_rotated_surface(self, bearing: float = 0.0) -> float:
        """
        Odometer reading at the current rotation.

        Parameters
        ----------
        bearing : float
            World direction (from this gear's center) of the contact point.

        Returns
        -------
        float
            Arc length from the first period ray to the pitch curve point that
            currently faces `bearing`.
        """
        return self.surface_at_angle(normalize_angle(bearing - self.rotation))

    def rotate_from_surface(self, surface: float, bearing: float = 0.0) -> float:
        """
        Set the rotation so that the point at arc length `surface` faces `bearing`.

        Inverse of `get_current_rotated_surface`. Returns the new rotation.
        """
        contact_angle = self.angle_at_surface(surface)
        self.rotation = normalize_angle(bearing - contact_angle)
        return self.rotation

    def outline(self, surface_type: SurfaceType = SurfaceType.SMOOTH) -> np.ndarray:
        """Gear-local outline points, computed once per surface type."""
        if surface_type not in self._outline_cache:
            self._outline_cache[surface_type] = generate_outline(self, surface_type)
        return self._outline_cache[surface_type]

    def outline_points(
        self, surface_type: SurfaceType = SurfaceType.SMOOTH
    ) -> np.ndarray:
        """Outline points in world coordinates at the current rotation."""
        return rotate_vector(self.outline(surface_type), self.rotation) + self._center

    def __repr__(self):
        kind = "root" if self.is_root else "driven"
        return (
            f"Gear({kind}, center={self._center[:2]}, "
            f"periods={self.periods_count}, "
            f"rotation={to_degrees(self.rotation):.2f} deg)"
        )
