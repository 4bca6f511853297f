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
import matplotlib.pyplot as plt
from ncgears import *
from ncgears.ncgears_matplotlib import plot_gears

# Every main gear shape with one driven gear on each side.

shapes = list(GearShape)
columns = 4
rows = int(np.ceil(len(shapes) / columns))
fig, axes = plt.subplots(rows, columns, figsize=(4 * columns, 4 * rows))

rng = np.random.default_rng(0)
for ax, shape in zip(axes.flat, shapes):
    main_gear = Gear.create(ORIGIN, build_shape_curve(shape, 0.1, rng))
    gears = [main_gear]
    for target in (LEFT, RIGHT, UP):
        gear = Gear.slave_gear(target * 0.25, main_gear)
        if gear is not None:
            gears.append(gear)

    main_gear.rotate(0.4)
    for gear in gears:
        gear.update()

    plot_gears(ax, gears, SurfaceType.TEETH_MEDIUM, show_rays=True)
    ax.set_title(
        f"{shape.value}: " + ", ".join(str(gear.periods_count) for gear in gears)
    )
    ax.set_xlim(-0.7, 0.7)
    ax.set_ylim(-0.7, 0.7)

for ax in axes.flat[len(shapes) :]:
    ax.set_axis_off()

plt.show()
