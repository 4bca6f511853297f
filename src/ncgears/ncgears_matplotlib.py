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

from typing import Iterable, List
import numpy as np
import matplotlib.pyplot as plt
from matplotlib.animation import FuncAnimation
from matplotlib.colors import to_rgba
from matplotlib.patches import Circle
from ncgears.defs import *
from ncgears.ncgears_core import Gear
from ncgears.gearteeth import SurfaceType
from ncgears.scene import DisplayStyle, Scene, SimulationParam

GEAR_COLOR = "red"
MAIN_GEAR_COLOR = "#FF6A00"

# fill opacity, contour line width (points), axis color
DISPLAY_STYLES = {
    DisplayStyle.FLAT: (0.7, 0.0, "#333333"),
    DisplayStyle.OUTLINE: (0.4, 1.0, "green"),
}


def plot_gears(
    ax,
    gears: Iterable[Gear],
    surface_type: SurfaceType = SurfaceType.SMOOTH,
    show_rays: bool = False,
    display_style: DisplayStyle = DisplayStyle.FLAT,
) -> List:
    """
    Draw gears on a matplotlib axes.

    Root gears are drawn in the main color. Returns the created artists.
    """
    fill_alpha, line_width, axis_color = DISPLAY_STYLES[display_style]
    artists = []
    for gear in gears:
        points = gear.outline_points(surface_type)
        color = MAIN_GEAR_COLOR if gear.is_root else GEAR_COLOR
        artists.extend(
            ax.fill(
                points[:, 0],
                points[:, 1],
                facecolor=to_rgba(color, fill_alpha),
                edgecolor=color,
                linewidth=line_width,
            )
        )
        if show_rays:
            # one ray per period, shows the rotation of circular gears too
            first_ray = gear.period_rays[0]
            length = min(first_ray.radius, 0.05)
            angles = (
                first_ray.angle
                + gear.orientation * np.arange(gear.periods_count) * gear.period_angle
                + gear.rotation
            )
            for angle in angles:
                (line,) = ax.plot(
                    [gear.center[0], gear.center[0] + length * np.cos(angle)],
                    [gear.center[1], gear.center[1] + length * np.sin(angle)],
                    color=axis_color,
                )
                artists.append(line)
        artists.append(
            ax.add_patch(Circle(gear.center[:2], CENTER_RADIUS, color=axis_color))
        )
    ax.set_aspect("equal")
    return artists


def animate_scene(
    scene: Scene,
    param: SimulationParam,
    frames: int = 200,
    interval: int = 20,
    ax=None,
) -> FuncAnimation:
    """
    Animate a scene with matplotlib.

    Each frame advances the scene by `interval` milliseconds. Axes limits set
    before the call are kept, otherwise the view fits the initial scene.
    Keep a reference to the returned animation while it is shown.
    """
    if ax is None:
        fig, ax = plt.subplots()
    else:
        fig = ax.figure
    dt = interval / 1000

    if ax.get_autoscale_on():
        plot_gears(ax, scene.display_gears, param.surface_type)
        ax.autoscale_view()
    xlim = ax.get_xlim()
    ylim = ax.get_ylim()

    def update_frame(frame):
        scene.update(dt, param)
        ax.clear()
        artists = plot_gears(
            ax,
            scene.display_gears,
            param.surface_type,
            param.show_rays,
            param.display_style,
        )
        # clear() resets the view
        ax.set_xlim(xlim)
        ax.set_ylim(ylim)
        return artists

    return FuncAnimation(fig, update_frame, frames=frames, interval=interval)
