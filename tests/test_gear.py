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

import gc
import matplotlib.pyplot as plt
import numpy as np
import pytest as pytest
import shapely as shp
from shapely.affinity import translate
from ncgears.defs import *
from ncgears.function_generators import *
from ncgears.rays import Ray
from ncgears.polar_curves import *
from ncgears.gearmath import *
from ncgears.ncgears_core import Gear
import ncgears.ncgears_core as ncgears_core


@pytest.fixture
def driver():
    return Gear.create(ORIGIN, build_ellipse(0.2, 0.1))


def contact_radius_sum(master: Gear, slave: Gear) -> float:
    bearing = slave.bearing
    return master.radius_at(
        normalize_angle(bearing - master.rotation)
    ) + slave.radius_at(normalize_angle(bearing + PI - slave.rotation))


def test_create_root(driver):
    assert driver.is_root
    assert driver.parent is None
    assert driver.periods_count == 2
    assert driver.period_angle == pytest.approx(PI)
    assert driver.min_radius == pytest.approx(0.1)
    assert driver.max_radius == pytest.approx(0.2)
    assert driver.fit_error == 0
    assert len(driver.rays) == 60
    # half perimeter of the ellipse, chords are slightly shorter than the arc
    assert driver.period_surface == pytest.approx(0.4844, rel=1e-2)
    assert driver.period_surface < 0.4845


def test_center_is_read_only(driver):
    assert driver.center == pytest.approx(ORIGIN)
    with pytest.raises(ValueError):
        driver.center[0] = 1.0


def test_slave_on_axis(driver):
    slave = Gear.slave_gear((0.4, 0), driver)
    assert slave is not None
    assert slave.parent is driver
    assert not slave.is_root
    assert slave.orientation == -1
    assert slave.center[1] == pytest.approx(0, abs=1e-12)
    assert slave.center[0] >= 0.2 + MESH_MARGIN
    assert slave.center_distance == pytest.approx(slave.construction.distance)
    assert slave.bearing == pytest.approx(0)
    assert slave.periods_count >= 1
    assert slave.periods_count == slave.construction.target_period
    assert slave.fit_error == pytest.approx(0, abs=1e-6)
    assert slave.period_surface == pytest.approx(driver.period_surface, rel=1e-9)
    assert slave.min_radius == pytest.approx(
        slave.center_distance - driver.max_radius
    )
    assert slave.max_radius == pytest.approx(
        slave.center_distance - driver.min_radius
    )


def test_slave_keeps_direction(driver):
    slave = Gear.slave_gear((0.25, 0.35), driver)
    assert slave is not None
    assert slave.bearing == pytest.approx(np.arctan2(0.35, 0.25))
    # far requests keep their distance
    far = Gear.slave_gear((0, -2.0), driver)
    assert far.center_distance >= 2.0
    assert far.center[0] == pytest.approx(0, abs=1e-12)


@pytest.mark.parametrize("center", [(0, 0), (1e-9, 0), (np.nan, 0)])
def test_slave_without_direction(driver, center):
    assert Gear.slave_gear(center, driver) is None


def test_driven_gear_cannot_rotate(driver):
    slave = Gear.slave_gear((0.4, 0), driver)
    with pytest.raises(RuntimeError):
        slave.rotate(0.1)


def test_root_rotation(driver):
    driver.update()
    assert driver.rotation == 0
    driver.rotate(7.0)
    assert driver.rotation == pytest.approx(7.0 - TWO_PI)
    driver.rotate(-1.0)
    assert driver.rotation == pytest.approx(6.0)


@pytest.mark.parametrize("rotation", np.linspace(0, TWO_PI, 13) + 0.123)
@pytest.mark.parametrize("target", [(0.4, 0), (0.25, 0.35), (-0.1, -0.5)])
def test_contact_invariant(driver, rotation, target):
    slave = Gear.slave_gear(target, driver)
    driver.rotate(rotation)
    driver_rotation = driver.rotation
    slave.update()
    assert driver.rotation == driver_rotation
    assert contact_radius_sum(driver, slave) == pytest.approx(
        slave.center_distance, rel=1e-6
    )


@pytest.mark.parametrize("rotation", np.linspace(0, TWO_PI, 7) + 0.05)
def test_contact_invariant_chain(driver, rotation):
    slave = Gear.slave_gear((0.4, 0), driver)
    grand_slave = Gear.slave_gear(slave.center + np.array([0, -0.6, 0]), slave)
    assert grand_slave is not None
    assert grand_slave.orientation == 1
    driver.rotate(rotation)
    slave.update()
    grand_slave.update()
    assert contact_radius_sum(driver, slave) == pytest.approx(
        slave.center_distance, rel=1e-6
    )
    assert contact_radius_sum(slave, grand_slave) == pytest.approx(
        grand_slave.center_distance, rel=1e-6
    )


ASYMMETRIC_CURVES = {
    "heart": lambda: build_heart(0.017),
    "off_triangle": lambda: build_off_polygon(0.1, 3, 0.6),
    "off_circle": lambda: build_off_circle(0.1, 0.05),
    "random": lambda: build_random(0.1, seed=3),
    "square": lambda: build_polygon(0.1, 4),
}


def build_train(curve_name, target):
    """Driver, driven gear towards target and a further gear beyond it."""
    driver = Gear.create(ORIGIN, ASYMMETRIC_CURVES[curve_name]())
    slave = Gear.slave_gear(target, driver)
    grand_slave = Gear.slave_gear(slave.center * 1.8, slave)
    return driver, slave, grand_slave


@pytest.mark.parametrize("target", [(0.3, 0.1), (-0.2, -0.3), (0.05, 0.4)])
@pytest.mark.parametrize("curve_name", ASYMMETRIC_CURVES.keys())
def test_contact_invariant_asymmetric(curve_name, target):
    driver, slave, grand_slave = build_train(curve_name, target)
    assert slave is not None
    assert grand_slave is not None
    assert slave.fit_error == pytest.approx(0, abs=1e-9)
    for rotation in np.linspace(0, TWO_PI, 41):
        driver.rotation = normalize_angle(rotation)
        slave.update()
        grand_slave.update()
        assert contact_radius_sum(driver, slave) == pytest.approx(
            slave.center_distance, rel=1e-6
        )
        assert contact_radius_sum(slave, grand_slave) == pytest.approx(
            grand_slave.center_distance, rel=1e-6
        )


@pytest.mark.parametrize("target", [(0.3, 0.1), (-0.2, -0.3)])
@pytest.mark.parametrize("curve_name", ASYMMETRIC_CURVES.keys())
def test_surface_round_trip_asymmetric(curve_name, target):
    for gear in build_train(curve_name, target):
        for rotation in np.linspace(0, TWO_PI, 17, endpoint=False):
            gear.rotation = rotation
            for bearing in (0.0, 1.3, 4.0):
                surface = gear.get_current_rotated_surface(bearing)
                new_rotation = gear.rotate_from_surface(surface, bearing)
                assert angle_difference(rotation, new_rotation) == pytest.approx(
                    0, abs=1e-9
                )


@pytest.mark.parametrize("theta", [0.3, 1.0, 2.5, 5.0])
def test_circle_drives_circle(theta):
    driver = Gear.create(ORIGIN, build_circle(0.1))
    slave = Gear.slave_gear((0.35, 0), driver)
    assert slave is not None
    driver.rotate(theta)
    slave.update()
    ratio = driver.periods_count / slave.periods_count
    assert ratio == pytest.approx(0.1 / (slave.center_distance - 0.1), rel=1e-3)
    # circular gears look the same after a period, compare within one
    difference = normalize_angle(slave.rotation + theta * ratio) % slave.period_angle
    assert min(difference, slave.period_angle - difference) == pytest.approx(
        0, abs=1e-6
    )


@pytest.mark.parametrize("rotation", np.linspace(0, TWO_PI, 11, endpoint=False))
def test_surface_round_trip(driver, rotation):
    slave = Gear.slave_gear((0.4, 0), driver)
    for gear in (driver, slave):
        gear.rotation = rotation
        surface = gear.get_current_rotated_surface(0.3)
        assert 0 <= surface <= gear.periods_count * gear.period_surface + DELTA
        new_rotation = gear.rotate_from_surface(surface, 0.3)
        assert angle_difference(rotation, new_rotation) == pytest.approx(0, abs=1e-9)


def test_surface_at_first_ray(driver):
    assert driver.surface_at_angle(0) == 0
    assert driver.surface_at_angle(PI) == pytest.approx(driver.period_surface)
    assert driver.angle_at_surface(0) == 0
    assert driver.radius_at(PI / 2) == pytest.approx(0.1)
    assert driver.radius_at(PI) == pytest.approx(0.2)


def test_orphan_gear():
    driver = Gear.create(ORIGIN, build_heart(0.02))
    slave = Gear.slave_gear((0.2, 0.0), driver)
    assert slave is not None
    del driver
    gc.collect()
    assert slave.parent is None
    with pytest.raises(RuntimeError):
        slave.update()


def test_exhausted_segment_walk():
    cumulated = np.array([0.5, 1.0, 1.5])
    assert Gear._find_segment(cumulated, 0.7) == 1
    # rounding past the end stays on the last segment
    assert Gear._find_segment(cumulated, 1.5 + 0.1 * DELTA) == 2
    with pytest.raises(RuntimeError):
        Gear._find_segment(cumulated, 1.5 + 10 * DELTA)


def test_exhausted_surface_walk(driver):
    driver._cumulated_surfaces = driver._cumulated_surfaces * 0.5
    with pytest.raises(RuntimeError):
        driver.angle_at_surface(0.9 * driver.period_surface)


def test_rays_must_tile_period():
    with pytest.raises(ValueError):
        Gear(ORIGIN, [Ray(0, 1), Ray(3, 1), Ray(1, 1)], 1)
    with pytest.raises(ValueError):
        Gear(ORIGIN, [], 1)
    with pytest.raises(ValueError):
        Gear(ORIGIN, [Ray(0, 1)], 0)


def test_companion_period(driver):
    data = try_build_companion_period(0.4, driver)
    assert len(data.period_rays) == len(driver.period_segments)
    assert data.period_rays[0].angle == pytest.approx(PI)
    assert data.period_rays[0].radius == pytest.approx(0.2)
    assert data.target_period == np.ceil(data.period)
    assert 0 <= data.error < 1


@pytest.mark.parametrize("distance", [0.15, 0.2, np.nan])
def test_companion_period_too_close(driver, distance):
    with pytest.raises(ValueError):
        try_build_companion_period(distance, driver)


def test_find_fitting_period(driver):
    result = find_fitting_period(0.4, driver)
    assert result.distance >= 0.4
    assert result.error == pytest.approx(0, abs=1e-6)
    assert result.target_period >= try_build_companion_period(0.4, driver).target_period
    assert get_next_fitting_distance(0.4, driver) == result.distance

    # no search with a single try
    first = find_fitting_period(0.4, driver, max_tries=1)
    assert first.distance == 0.4


def test_fit_error_warning(driver, monkeypatch):
    fitted = get_next_fitting_distance(0.4, driver)
    monkeypatch.setattr(
        ncgears_core,
        "get_next_fitting_distance",
        lambda ideal_distance, master: fitted - 0.0005,
    )
    with pytest.warns(RuntimeWarning):
        slave = Gear.slave_gear((0.4, 0), driver)
    assert slave.fit_error > FIT_ERROR_WARNING


def test_meshing_no_overlap(driver, enable_plotting=False):
    slave = Gear.slave_gear((0.4, 0), driver)
    for rotation in np.linspace(0, PI, 5):
        driver.rotation = rotation
        slave.update()

        driver_poly = shp.Polygon(driver.outline_points()[:, :2])
        slave_poly = shp.Polygon(slave.outline_points()[:, :2])
        assert driver_poly.is_valid
        assert slave_poly.is_valid
        threshold = 1e-3 * driver_poly.area
        assert driver_poly.intersection(slave_poly).area < threshold
        # pushed closer the pitch curves do cut into each other
        pushed = translate(slave_poly, xoff=-0.02)
        assert driver_poly.intersection(pushed).area > threshold

        if enable_plotting:
            fig, ax = plt.subplots()
            ax.plot(*driver_poly.exterior.xy)
            ax.plot(*slave_poly.exterior.xy)
            ax.axis("equal")
            plt.show()
