"""
plantgeom: triangular meshes and parametric shapes for plant scene construction.
"""

from .exceptions import PlantGeomError, GeometryParameterError, MeshFormatError
from .logging_config import setup_logging
from .geometry import *  # noqa: F401,F403
from .geometry import __all__ as _geometry_all
from .io import MeshFormat, load_mesh, save_mesh, SceneLoader

__version__ = "0.1.0"

__all__ = [
    "PlantGeomError",
    "GeometryParameterError",
    "MeshFormatError",
    "setup_logging",
    *_geometry_all,
    "MeshFormat",
    "load_mesh",
    "save_mesh",
    "SceneLoader",
]
