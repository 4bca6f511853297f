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

RAD2DEG = 180 / np.pi
PI = np.pi
TWO_PI = 2 * np.pi

# numerical 'small step', also used as tolerance for angle and surface walks
DELTA = 1e-6

# Dimension and shape conventions
# Gears live in the X-Y plane, but positions are kept as 3D row vectors, shape(3),
# so that scipy rotations and stacking of point arrays work without reshaping.
# Arrays of points: index comes first, e.g. 100 outline points: shape (100,3)
VSHAPE = 3

ORIGIN = np.array((0.0, 0.0, 0.0))
"""The center of the coordinate system."""
UP = np.array((0.0, 1.0, 0.0))
"""One unit step in the positive Y direction."""
RIGHT = np.array((1.0, 0.0, 0.0))
"""One unit step in the positive X direction."""
LEFT = np.array((-1.0, 0.0, 0.0))
"""One unit step in the negative X direction."""
OUT = np.array((0.0, 0.0, 1.0))
"""One unit step in the positive Z direction, the rotation axis of every gear."""

# Meshing
MESH_MARGIN = 0.01
"""Minimum clearance added to the driver's outer radius when placing a gear."""
MAX_SEARCH_TRIES = 200
SEARCH_STEP = 0.5
"""Distance increment used while no upper bound is known in the distance search."""
FIT_ERROR_WARNING = 1e-3
"""Residual period error above which a driven gear construction warns."""

# Scene layout
CENTER_RADIUS = 0.015
MAX_GEAR_RADIUS = 0.3
