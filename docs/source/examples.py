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

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt
from ncgears import *
from ncgears.ncgears_matplotlib import plot_gears


def write_svg(gears, surface_type=SurfaceType.SMOOTH, show_rays=False):
    """Save an image of the gears as SVG"""
    global example_counter
    try:
        example_counter += 1
    except NameError:
        example_counter = 1

    fig, ax = plt.subplots(figsize=(5, 5))
    plot_gears(ax, gears, surface_type, show_rays)
    ax.set_axis_off()
    fig.savefig(f"assets/general_ex{example_counter}.svg")
    plt.close(fig)


##########################################
# 1. Elliptic Gear Pair
# [Ex. 1]

gear1 = Gear.create(ORIGIN, build_ellipse(0.2, 0.1))
gear2 = Gear.slave_gear(RIGHT * 0.4, gear1)
gear1.rotate(0.5)
gear2.update()

# [Ex. 1]
write_svg([gear1, gear2], show_rays=True)


##########################################
# 2. Teeth Along the Pitch Curve
# [Ex. 2]

gear1 = Gear.create(ORIGIN, build_polygon(0.15, 3))
gear2 = Gear.slave_gear(RIGHT * 0.3, gear1)
gear2.update()

# [Ex. 2]
write_svg([gear1, gear2], SurfaceType.TEETH_MEDIUM)


##########################################
# 3. Gear Train
# Every gear drives the next one, rotations are propagated in order.
# [Ex. 3]

gear1 = Gear.create(ORIGIN, build_heart(0.03))
gear2 = Gear.slave_gear(RIGHT * 0.3, gear1)
gear3 = Gear.slave_gear(gear2.center + UP * 0.3, gear2)
gear1.rotate(1.0)
gear2.update()
gear3.update()

# [Ex. 3]
write_svg([gear1, gear2, gear3], SurfaceType.TEETH_SMALL)


##########################################
# 4. Random Scene
# [Ex. 4]

param = SimulationParam(gear_shape=GearShape.OFF_SQUARE)
scene = RandomScene.create(param, rng=42)

# [Ex. 4]
write_svg(scene.all_gears, show_rays=True)
