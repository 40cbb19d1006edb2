"""Vectors, meshes, shape generators, transforms, bounding boxes and scenes."""

from .precision import resolve_dtype
from .vec import Vec, O, X, Y, Z
from .mesh import Mesh, merge_meshes
from .primitives import (
    triangle,
    rectangle,
    trapezoid,
    ellipse,
    hollow_cylinder,
    solid_cylinder,
    hollow_frustum,
    solid_frustum,
    hollow_cone,
    solid_cone,
    solid_cube,
    hollow_cube,
)
from .transforms import (
    scale,
    translate,
    rotatex,
    rotatey,
    rotatez,
    rotate,
    rotation_matrix_x,
    rotation_matrix_y,
    rotation_matrix_z,
)
from .bbox import BBox
from .scene import Scene, merge_scenes

__all__ = [
    "resolve_dtype",
    "Vec",
    "O",
    "X",
    "Y",
    "Z",
    "Mesh",
    "merge_meshes",
    "triangle",
    "rectangle",
    "trapezoid",
    "ellipse",
    "hollow_cylinder",
    "solid_cylinder",
    "hollow_frustum",
    "solid_frustum",
    "hollow_cone",
    "solid_cone",
    "solid_cube",
    "hollow_cube",
    "scale",
    "translate",
    "rotatex",
    "rotatey",
    "rotatez",
    "rotate",
    "rotation_matrix_x",
    "rotation_matrix_y",
    "rotation_matrix_z",
    "BBox",
    "Scene",
    "merge_scenes",
]
