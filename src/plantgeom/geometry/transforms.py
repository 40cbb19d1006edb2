"""
In-place affine transforms of a Mesh.

All operations mutate the vertex buffer of the mesh they receive and return
None. Cached normals are invalidated. Transforming a merged mesh affects every
constituent equally since a Mesh keeps no sub-mesh boundaries.
"""

from __future__ import annotations
import numpy as np
from numpy.typing import NDArray

from ..exceptions import GeometryParameterError
from .mesh import Mesh
from .precision import tolerance
from .vec import Vec, as_array


def rotation_matrix_x(angle_rad: float) -> NDArray[np.float64]:
    """
    3D rotation matrix about the x-axis.

    Args:
        angle_rad: Rotation angle in radians (positive = CCW when viewed from +x)

    Returns:
        3x3 rotation matrix
    """
    c = np.cos(angle_rad)
    s = np.sin(angle_rad)
    return np.array([
        [1.0, 0.0, 0.0],
        [0.0, c, -s],
        [0.0, s, c]
    ], dtype=np.float64)


def rotation_matrix_y(angle_rad: float) -> NDArray[np.float64]:
    """3D rotation matrix about the y-axis (positive = CCW when viewed from +y)."""
    c = np.cos(angle_rad)
    s = np.sin(angle_rad)
    return np.array([
        [c, 0.0, s],
        [0.0, 1.0, 0.0],
        [-s, 0.0, c]
    ], dtype=np.float64)


def rotation_matrix_z(angle_rad: float) -> NDArray[np.float64]:
    """3D rotation matrix about the z-axis (positive = CCW when viewed from +z)."""
    c = np.cos(angle_rad)
    s = np.sin(angle_rad)
    return np.array([
        [c, -s, 0.0],
        [s, c, 0.0],
        [0.0, 0.0, 1.0]
    ], dtype=np.float64)


def scale(mesh: Mesh, vec) -> None:
    """
    Scale a mesh along the three axes.

    Args:
        mesh: Mesh to modify
        vec: Scale factors (Vec or array-like of 3)
    """
    vertices = mesh.vertices
    vertices *= as_array(vec, mesh.dtype)
    mesh.invalidate_normals()


def translate(mesh: Mesh, vec) -> None:
    """Translate a mesh by `vec`."""
    vertices = mesh.vertices
    vertices += as_array(vec, mesh.dtype)
    mesh.invalidate_normals()


def rotatex(mesh: Mesh, angle_rad: float) -> None:
    """Rotate a mesh around the x axis by `angle_rad` radians."""
    _apply_matrix(mesh, rotation_matrix_x(angle_rad))


def rotatey(mesh: Mesh, angle_rad: float) -> None:
    """Rotate a mesh around the y axis by `angle_rad` radians."""
    _apply_matrix(mesh, rotation_matrix_y(angle_rad))


def rotatez(mesh: Mesh, angle_rad: float) -> None:
    """Rotate a mesh around the z axis by `angle_rad` radians."""
    _apply_matrix(mesh, rotation_matrix_z(angle_rad))


def rotate(mesh: Mesh, *, x, y, z) -> None:
    """
    Rotate a mesh into the coordinate system given by `x`, `y` and `z`.

    The vectors become the columns of the rotation matrix, so the old unit
    axes map onto them. They must form a right-handed orthonormal basis.

    Args:
        mesh: Mesh to modify
        x, y, z: New axes (Vec or array-like of 3)

    Raises:
        GeometryParameterError: If the basis is not orthonormal or is left-handed
    """
    matrix = np.column_stack([as_array(v, np.float64) for v in (x, y, z)])

    tol = max(tolerance(mesh.dtype), _precision_of(x, y, z))
    if not np.allclose(matrix.T @ matrix, np.eye(3), atol=tol):
        raise GeometryParameterError(
            "Rotation basis must consist of mutually orthogonal unit vectors"
        )
    if np.linalg.det(matrix) <= 0:
        raise GeometryParameterError("Rotation basis must be right-handed")

    _apply_matrix(mesh, matrix)


def _precision_of(*vectors) -> float:
    # Single precision input vectors cannot be orthonormal to double tolerance
    for v in vectors:
        if isinstance(v, Vec) and v.dtype == np.float32:
            return tolerance(v.dtype)
        if isinstance(v, np.ndarray) and v.dtype == np.float32:
            return tolerance(v.dtype)
    return 0.0


def _apply_matrix(mesh: Mesh, matrix: NDArray) -> None:
    vertices = mesh.vertices
    vertices[:] = vertices @ matrix.T.astype(mesh.dtype)
    mesh.invalidate_normals()
