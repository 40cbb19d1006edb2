"""IO utilities: mesh file formats and scene description loader."""

from .mesh_io import MeshFormat, load_mesh, save_mesh
from .scene_loader import SceneLoader

__all__ = [
    "MeshFormat",
    "load_mesh",
    "save_mesh",
    "SceneLoader",
]
