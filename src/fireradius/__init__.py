import os
import sys

# A PROJ_LIB left behind by a PostGIS install on Windows points pyproj at an
# incompatible proj.db
if sys.platform == "win32" and "PROJ_LIB" in os.environ:
    proj_lib = os.environ["PROJ_LIB"]
    if "PostgreSQL" in proj_lib and "proj" in proj_lib.lower():
        del os.environ["PROJ_LIB"]

from .config import FireRadiusConfig
from .core import FireRadius, RunSummary
from .__about__ import __version__
