import ncgears as ncg
from ncgears.ncgears_matplotlib import animate_scene
import matplotlib.pyplot as plt
import numpy as np

param = ncg.SimulationParam(
    gear_shape=ncg.GearShape.HEART,
    show_teeth=True,
    teeth_size=ncg.TeethSize.SMALL,
    display_style=ncg.DisplayStyle.OUTLINE,
)

main_gear = ncg.Gear.create(ncg.ORIGIN, ncg.build_shape_curve(param.gear_shape))
scene = ncg.Scene(main_gear)

# a ring of gears driven by the heart, and a second layer on every other one
for angle in np.linspace(0, 2 * np.pi, 5, endpoint=False):
    gear = scene.add_gear(0.2 * np.array([np.cos(angle), np.sin(angle)]))
    if gear is not None and angle < np.pi:
        scene.add_gear(gear.center * 1.8)

fig, ax = plt.subplots(figsize=(8, 8))
ax.set_xlim(-1, 1)
ax.set_ylim(-1, 1)
animation = animate_scene(scene, param, frames=400, ax=ax)
plt.show()
