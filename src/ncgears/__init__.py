from importlib.metadata import version, PackageNotFoundError
from ncgears.defs import *
from ncgears.function_generators import *
from ncgears.rays import *
from ncgears.polar_curves import *
from ncgears.gearmath import *
from ncgears.gearteeth import *
from ncgears.ncgears_core import *
from ncgears.scene import *


try:
    __version__ = version("ncgears")
except PackageNotFoundError:
    __version__ = "unknown version"
