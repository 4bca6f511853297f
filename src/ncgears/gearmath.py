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
import logging
from typing import List
import numpy as np
from ncgears.defs import *
from ncgears.function_generators import normalize_angle
from ncgears.rays import Ray


@dataclasses.dataclass
class CompanionPeriodData:
    """Result of one attempt to build the period of a driven gear.

    Attributes
    ----------
    distance : float
        Center distance the attempt was made at.
    period_rays : List[Ray]
        Rays of one period of the driven pitch curve, in the order of the
        driver's period segments.
    period : float
        Number of driven periods needed for a full turn, generally fractional.
    target_period : int
        Period count rounded up, the number of periods the driven gear gets.
    error : float
        target_period - period, in [0, 1). Zero means the period closes exactly.
    """

    distance: float
    period_rays: List[Ray]
    period: float
    target_period: int
    error: float


def try_build_companion_period(distance: float, master: "Gear") -> CompanionPeriodData:
    """
    Build one period of the gear meshing with `master` at a center distance.

    Every driver segment is mapped to a driven segment of the same chord length,
    the driven radii being the center distance minus the driver radii (rolling
    contact on the line of centers). The subtended driven angle follows from the
    law of cosines.

    Raises
    ------
    ValueError
        If the geometry is degenerate at this distance: non-positive driven
        radius, or no triangle with the required sides.
    """
    period_rays = []
    angle = 0.0
    for segment in master.period_segments:
        r1 = distance - segment.ray_from.radius
        r2 = distance - segment.ray_to.radius
        # written as 'not >' so that NaN distances end up here too
        if not (r1 > 0 and r2 > 0):
            raise ValueError(
                f"Distance {distance} does not clear the driver radius"
            )
        period_rays.append(Ray(angle=angle, radius=r1))

        cos_angle = (r1**2 + r2**2 - segment.delta_distance**2) / (2 * r1 * r2)
        if not -1 <= cos_angle <= 1:
            raise ValueError(f"Degenerate companion segment at distance {distance}")
        angle += np.arccos(cos_angle)

    if not angle > 0:
        raise ValueError(f"Companion period has no angular extent at {distance}")

    # the driven curve runs in the opposite sense of the driver
    for ray in period_rays:
        if master.orientation > 0:
            ray.angle = normalize_angle(PI - ray.angle)
        else:
            ray.angle = normalize_angle(ray.angle)

    period = TWO_PI / angle
    target_period = int(np.ceil(period))
    return CompanionPeriodData(
        distance=distance,
        period_rays=period_rays,
        period=period,
        target_period=target_period,
        error=target_period - period,
    )


def find_fitting_period(
    ideal_distance: float,
    master: "Gear",
    max_tries: int = MAX_SEARCH_TRIES,
    step: float = SEARCH_STEP,
) -> CompanionPeriodData:
    """
    Search the center distance where the driven period closes a full turn.

    Starting at `ideal_distance`, the distance is increased by `step` until an
    attempt lands beyond the current period plateau (period count went up, or
    the error got worse), then the bracket is bisected. The lowest bracket is
    returned even if its error is not zero when the tries run out or the
    bisection reaches floating point resolution.

    Parameters
    ----------
    ideal_distance : float
        Starting (and minimum) center distance.
    master : Gear
        The driver gear.
    max_tries : int
        Maximum number of companion period evaluations.
    step : float
        Distance increment used while no upper bound is known.

    Returns
    -------
    CompanionPeriodData
        The best attempt found. Its `error` is the residual of the search.
    """
    initial_try = try_build_companion_period(ideal_distance, master)
    too_low = initial_try
    too_high = None

    tries_count = 1
    while too_low.error > 0 and tries_count < max_tries:
        if too_high is not None:
            current_distance = 0.5 * (too_low.distance + too_high.distance)
        else:
            current_distance = too_low.distance + step
        if current_distance == too_low.distance or (
            too_high is not None and current_distance == too_high.distance
        ):
            # floating point resolution reached
            break

        current_try = try_build_companion_period(current_distance, master)
        if (
            current_try.target_period > too_low.target_period
            or current_try.error > too_low.error
        ):
            too_high = current_try
        else:
            too_low = current_try
        tries_count += 1

    logging.debug(
        f"Final error {too_low.error} obtained in {tries_count} tries. "
        f"Final periodicity {too_low.target_period}, "
        f"initial was {initial_try.target_period}."
    )
    return too_low


def get_next_fitting_distance(
    ideal_distance: float,
    master: "Gear",
    max_tries: int = MAX_SEARCH_TRIES,
    step: float = SEARCH_STEP,
) -> float:
    """Center distance closest above `ideal_distance` with a closing period."""
    return find_fitting_period(ideal_distance, master, max_tries, step).distance
