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
import time
from enum import Enum
from typing import List, Optional
import numpy as np
from ncgears.defs import *
from ncgears.function_generators import to_vector
import ncgears.polar_curves as pc
from ncgears.ncgears_core import Gear
from ncgears.gearteeth import SurfaceType


class GearShape(Enum):
    ELLIPSE = "ellipse"
    HEART = "heart"
    TRIANGLE = "triangle"
    SQUARE = "square"
    PENTAGON = "pentagon"
    RANDOM = "random"
    CIRCLE = "circle"
    OFF_CIRCLE = "off-circle"
    OFF_TRIANGLE = "off-triangle"
    OFF_SQUARE = "off-square"
    OFF_PENTAGON = "off-pentagon"


class TeethSize(Enum):
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"


class DisplayStyle(Enum):
    FLAT = "flat"
    OUTLINE = "outline"


OFF_CENTER_SHAPES = {
    GearShape.CIRCLE: GearShape.OFF_CIRCLE,
    GearShape.TRIANGLE: GearShape.OFF_TRIANGLE,
    GearShape.SQUARE: GearShape.OFF_SQUARE,
    GearShape.PENTAGON: GearShape.OFF_PENTAGON,
}

TEETH_SURFACES = {
    TeethSize.SMALL: SurfaceType.TEETH_SMALL,
    TeethSize.MEDIUM: SurfaceType.TEETH_MEDIUM,
    TeethSize.LARGE: SurfaceType.TEETH_LARGE,
}


@dataclasses.dataclass
class SimulationParam:
    """User settings of a running simulation, passed to every scene step.

    Attributes
    ----------
    rotation_speed : float
        Speed factor of the main gear. One unit turns it by 5 rad per second.
    gear_shape : GearShape
        Shape of the main gear.
    shift_center : bool
        Use the off-center variant of the shape, where one exists.
    show_teeth : bool
        Display teeth instead of the smooth pitch curve.
    teeth_size : TeethSize
        Teeth size used when `show_teeth` is set.
    show_rays : bool
        Display one ray per period from each gear center.
    display_style : DisplayStyle
        Filled gears without contour, or translucent gears with a contour.
    """

    rotation_speed: float = 0.5
    gear_shape: GearShape = GearShape.ELLIPSE
    shift_center: bool = False
    show_teeth: bool = False
    teeth_size: TeethSize = TeethSize.MEDIUM
    show_rays: bool = True
    display_style: DisplayStyle = DisplayStyle.FLAT

    @property
    def effective_shape(self) -> GearShape:
        if self.shift_center:
            return OFF_CENTER_SHAPES.get(self.gear_shape, self.gear_shape)
        return self.gear_shape

    @property
    def surface_type(self) -> SurfaceType:
        if self.show_teeth:
            return TEETH_SURFACES[self.teeth_size]
        return SurfaceType.SMOOTH

    def rotation_step(self, dt: float) -> float:
        """Main gear rotation for a time step of `dt` seconds."""
        return 5 * dt * self.rotation_speed

    @classmethod
    def random(cls, rng=None, **kwargs) -> "SimulationParam":
        """Settings with a random main gear shape and center shift."""
        rng = np.random.default_rng(rng)
        shapes = list(GearShape)
        gear_shape = shapes[rng.integers(len(shapes))]
        return cls(
            gear_shape=gear_shape, shift_center=bool(rng.random() > 0.5), **kwargs
        )


def build_shape_curve(shape: GearShape, size: float = 0.1, rng=None) -> pc.PolarCurve:
    """Pitch curve of a main gear shape, randomized where the shape allows."""
    rng = np.random.default_rng(rng)
    if shape == GearShape.ELLIPSE:
        return pc.build_ellipse(size, rng.uniform(0.2, 0.6) * size)
    elif shape == GearShape.HEART:
        return pc.build_heart(0.17 * size)
    elif shape == GearShape.OFF_CIRCLE:
        return pc.build_off_circle(size, rng.uniform(0.3, 0.9) * size)
    elif shape == GearShape.TRIANGLE:
        return pc.build_polygon(size, 3)
    elif shape == GearShape.SQUARE:
        return pc.build_polygon(size, 4)
    elif shape == GearShape.PENTAGON:
        return pc.build_polygon(size, 5)
    elif shape == GearShape.OFF_TRIANGLE:
        return pc.build_off_polygon(size, 3, 0.6)
    elif shape == GearShape.OFF_SQUARE:
        return pc.build_off_polygon(size, 4, 0.6)
    elif shape == GearShape.OFF_PENTAGON:
        return pc.build_off_polygon(size, 5, 0.6)
    elif shape == GearShape.CIRCLE:
        return pc.build_circle(size)
    elif shape == GearShape.RANDOM:
        return pc.build_random(size, seed=rng)
    raise ValueError(f"Unknown gear shape: {shape}")


class Scene:
    """
    A main (root) gear and the driven gears attached to it.

    Driven gears are kept in creation order, so every gear comes after its
    driver and one pass of `update()` settles the whole train.
    """

    def __init__(self, main_gear: Gear):
        self.main_gear = main_gear
        self.secondary_gears: List[Gear] = []
        # gear following the pointer, not part of the scene until released
        self.mobile_gear: Optional[Gear] = None

    @property
    def all_gears(self) -> List[Gear]:
        return [self.main_gear, *self.secondary_gears]

    @property
    def display_gears(self) -> List[Gear]:
        if self.mobile_gear is None:
            return self.all_gears
        return [*self.all_gears, self.mobile_gear]

    def update(self, dt: float, param: SimulationParam):
        self.main_gear.rotate(param.rotation_step(dt))
        for gear in self.secondary_gears:
            gear.update()
        if self.mobile_gear is not None:
            self.mobile_gear.update()

    def find_closest_gear(self, center) -> Gear:
        """Gear whose outer radius is closest to `center`."""
        center = to_vector(center)
        return min(
            self.all_gears,
            key=lambda gear: np.linalg.norm(center - gear.center) - gear.max_radius,
        )

    def try_build_gear(self, center) -> Optional[Gear]:
        """
        Build a gear meshing with the closest gear, near `center`.

        Returns None when no meshing gear exists there, or when its bounding
        circle overlaps any gear other than its driver.
        """
        center = to_vector(center)
        closest_gear = self.find_closest_gear(center)
        new_gear = Gear.slave_gear(center, closest_gear)
        if new_gear is None:
            return None

        for existing_gear in self.all_gears:
            if existing_gear is not closest_gear:
                margin = (
                    np.linalg.norm(new_gear.center - existing_gear.center)
                    - new_gear.max_radius
                    - existing_gear.max_radius
                )
                if margin <= 0:
                    logging.debug(f"Gear at {new_gear.center} overlaps {existing_gear}")
                    return None
        return new_gear

    def move_pointer(self, center) -> bool:
        """Rebuild the mobile gear at the pointer, return whether it could be placed."""
        self.mobile_gear = self.try_build_gear(center)
        if self.mobile_gear is not None:
            self.mobile_gear.update()
        return self.mobile_gear is not None

    def release_pointer(self) -> Optional[Gear]:
        """Add the mobile gear to the scene."""
        gear = self.mobile_gear
        if gear is not None:
            self.secondary_gears.append(gear)
            self.mobile_gear = None
        return gear

    def add_gear(self, center) -> Optional[Gear]:
        gear = self.try_build_gear(center)
        if gear is not None:
            gear.update()
            self.secondary_gears.append(gear)
        return gear


class RandomScene(Scene):
    """Scene populated with driven gears at random locations."""

    @classmethod
    def create(
        cls,
        param: SimulationParam,
        width: float = 2.0,
        height: float = 2.0,
        attempts: int = 300,
        scenes_count: int = 6,
        size: float = 0.1,
        rng=None,
    ) -> "RandomScene":
        """
        Build several random scenes and keep the one with the most gears.

        Parameters
        ----------
        param : SimulationParam
            Settings, the main gear shape is taken from here.
        width, height : float
            Size of the area around the origin where gears are placed.
        attempts : int
            Number of random locations tried per scene.
        scenes_count : int
            Number of scenes built.
        size : float
            Size of the main gear.
        rng : int or np.random.Generator, optional
            Seed or generator.
        """
        rng = np.random.default_rng(rng)
        start = time.time()
        best_scene = None
        for _ in range(max(1, scenes_count)):
            scene = cls(param, width, height, attempts, size, rng)
            if best_scene is None or len(scene.secondary_gears) > len(
                best_scene.secondary_gears
            ):
                best_scene = scene
        logging.info(
            f"Random scene with {len(best_scene.secondary_gears)} gears "
            f"built in {time.time()-start:.5f} seconds"
        )
        return best_scene

    def __init__(
        self,
        param: SimulationParam,
        width: float,
        height: float,
        attempts: int,
        size: float,
        rng: np.random.Generator,
    ):
        curve = build_shape_curve(param.effective_shape, size, rng)
        super().__init__(Gear.create(ORIGIN, curve))

        for _ in range(attempts):
            center = np.array(
                [
                    rng.uniform(-0.5 * width, 0.5 * width),
                    rng.uniform(-0.5 * height, 0.5 * height),
                    0.0,
                ]
            )
            is_inside_gear = any(
                np.linalg.norm(center - gear.center) < gear.min_radius
                for gear in self.all_gears
            )
            if is_inside_gear:
                continue

            new_gear = self.try_build_gear(center)
            if (
                new_gear is not None
                and new_gear.min_radius > 1.2 * CENTER_RADIUS
                and new_gear.max_radius < MAX_GEAR_RADIUS
            ):
                new_gear.update()
                self.secondary_gears.append(new_gear)
