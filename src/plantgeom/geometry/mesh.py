"""
Dense triangular mesh.

Triangles are stored unindexed: every triangle contributes three independent
rows to the vertex buffer, so meshes concatenate trivially and each triangle
can carry its own flat-shading attributes.
"""

from __future__ import annotations
from typing import Any, Iterable, List, Optional
import numpy as np
from numpy.typing import NDArray

from ..exceptions import GeometryParameterError
from .precision import resolve_dtype, SUPPORTED_DTYPES
from .vec import as_array


class Mesh:
    """
    Appendable buffer of triangles sharing one floating-point precision.

    Attributes:
        dtype: Component type of every coordinate (float32 or float64)
        vertices: Vertex coordinates (3 * ntriangles, 3), append order
        normals: Per-triangle unit normals (ntriangles, 3), lazily computed
    """

    def __init__(self, precision: Any = None):
        """
        Create an empty mesh.

        Args:
            precision: Coordinate precision, double by default (see resolve_dtype)
        """
        self.dtype = resolve_dtype(precision)
        self._buffer = np.empty((0, 3), dtype=self.dtype)
        self._size = 0
        self._normals: Optional[NDArray] = None

    @classmethod
    def sized(cls, ntriangles: int, nvertices: Optional[int] = None,
              precision: Any = None) -> Mesh:
        """
        Create an empty mesh with room for `ntriangles` triangles.

        The behaviour is identical to an empty mesh; pre-allocation only
        avoids repeated growth when appending many primitives.

        Args:
            ntriangles: Expected number of triangles
            nvertices: Expected number of vertices (default 3 * ntriangles)
            precision: Coordinate precision
        """
        if ntriangles < 0:
            raise GeometryParameterError(f"ntriangles must be >= 0, got {ntriangles}")
        if nvertices is None:
            nvertices = 3 * ntriangles
        if nvertices < 0:
            raise GeometryParameterError(f"nvertices must be >= 0, got {nvertices}")

        mesh = cls(precision)
        mesh.reserve(nvertices)
        return mesh

    @classmethod
    def from_vertices(cls, vertices, precision: Any = None, normals=None) -> Mesh:
        """
        Build a mesh from an array of vertices.

        Args:
            vertices: Array-like (3k, 3) or (k, 3, 3)
            precision: Target precision; inferred from float arrays if None
            normals: Optional per-triangle normals (k, 3)

        Returns:
            New mesh owning a copy of the data
        """
        arr = np.asarray(vertices)
        if precision is None and arr.dtype in SUPPORTED_DTYPES:
            precision = arr.dtype
        dtype = resolve_dtype(precision)

        arr = _as_vertex_rows(arr)
        mesh = cls(dtype)
        mesh._buffer = np.array(arr, dtype=dtype)
        mesh._size = arr.shape[0]
        if normals is not None:
            mesh.set_normals(normals)
        return mesh

    @property
    def vertices(self) -> NDArray:
        """View of the vertex coordinates (nvertices, 3)."""
        return self._buffer[:self._size]

    @property
    def ntriangles(self) -> int:
        """Number of triangles."""
        return self._size // 3

    @property
    def nvertices(self) -> int:
        """Number of vertices (always 3 * ntriangles)."""
        return self._size

    @property
    def capacity(self) -> int:
        """Number of vertices that fit before the buffer grows."""
        return self._buffer.shape[0]

    def reserve(self, nvertices: int) -> None:
        """Grow the buffer to hold at least `nvertices` vertices."""
        if nvertices <= self.capacity:
            return
        buffer = np.empty((nvertices, 3), dtype=self.dtype)
        buffer[:self._size] = self._buffer[:self._size]
        self._buffer = buffer

    def append_triangle(self, v0, v1, v2) -> None:
        """Append one triangle given its three vertices (Vec or array-like)."""
        triangle = np.stack([as_array(v, self.dtype) for v in (v0, v1, v2)])
        self.append_triangles(triangle)

    def append_triangles(self, triangles, normals=None) -> None:
        """
        Append a block of triangles.

        Args:
            triangles: Array-like (3k, 3) or (k, 3, 3)
            normals: Normals for the new triangles; kept only when this mesh
                already holds normals for its existing triangles
        """
        rows = _as_vertex_rows(np.asarray(triangles))
        count = rows.shape[0]
        if count == 0:
            return

        new_normals = None
        if normals is not None and self._normals is not None:
            new_normals = _check_normals(normals, count // 3, self.dtype)

        required = self._size + count
        if required > self.capacity:
            self.reserve(max(required, 2 * self.capacity))
        self._buffer[self._size:required] = rows
        self._size = required

        if new_normals is not None:
            self._normals = np.vstack([self._normals, new_normals])
        else:
            self._normals = None

    def append(self, other: Mesh) -> None:
        """
        Append all triangles of another mesh (converted to this precision).

        Args:
            other: Mesh to concatenate after the existing triangles
        """
        other_normals = other.normals if self._normals is not None else None
        self.append_triangles(other.vertices.astype(self.dtype, copy=False), other_normals)

    def areas(self) -> NDArray:
        """Area of every triangle (ntriangles,)."""
        v0, v1, v2 = self._corners()
        return 0.5 * np.linalg.norm(np.cross(v1 - v0, v2 - v0), axis=1)

    def area(self) -> float:
        """Total surface area (sum of triangle areas)."""
        return float(np.sum(self.areas(), dtype=np.float64))

    @property
    def normals(self) -> NDArray:
        """
        Per-triangle unit normals (ntriangles, 3).

        Follows the right-hand rule of vertex order. Degenerate triangles get
        a zero normal. Computed on first access and cached until the mesh is
        modified.
        """
        if self._normals is None:
            v0, v1, v2 = self._corners()
            cross = np.cross(v1 - v0, v2 - v0)
            magnitude = np.linalg.norm(cross, axis=1)[:, None]
            self._normals = np.divide(
                cross, magnitude,
                out=np.zeros_like(cross),
                where=magnitude > 0
            )
        return self._normals

    def set_normals(self, normals) -> None:
        """Supply per-triangle normals (ntriangles, 3)."""
        self._normals = _check_normals(normals, self.ntriangles, self.dtype)

    def invalidate_normals(self) -> None:
        """Drop cached normals; they are recomputed on next access."""
        self._normals = None

    def triangle(self, index: int) -> NDArray:
        """
        Vertices of one triangle.

        Args:
            index: Triangle index (negative values count from the end)

        Returns:
            Copy of the (3, 3) vertex block
        """
        n = self.ntriangles
        if index < 0:
            index += n
        if index < 0 or index >= n:
            raise IndexError(f"Triangle index out of range [0, {n - 1}]")
        return self._buffer[3 * index:3 * index + 3].copy()

    def copy(self) -> Mesh:
        """Deep copy."""
        result = Mesh.from_vertices(self.vertices, precision=self.dtype)
        if self._normals is not None:
            result._normals = self._normals.copy()
        return result

    def _corners(self):
        tris = self.vertices.reshape(-1, 3, 3)
        return tris[:, 0], tris[:, 1], tris[:, 2]

    def __repr__(self) -> str:
        return f"Mesh(ntriangles={self.ntriangles}, precision={self.dtype.name})"


def merge_meshes(meshes: Iterable[Mesh]) -> Mesh:
    """
    Concatenate meshes into a new one.

    The result uses the precision of the first mesh; inputs are not modified.

    Args:
        meshes: Meshes in the order their triangles should appear

    Returns:
        Merged mesh (empty double-precision mesh for no input)
    """
    meshes: List[Mesh] = list(meshes)
    if not meshes:
        return Mesh()

    total = sum(m.nvertices for m in meshes)
    result = Mesh.sized(total // 3, total, precision=meshes[0].dtype)
    for mesh in meshes:
        result.append(mesh)
    return result


def _as_vertex_rows(arr: NDArray) -> NDArray:
    if arr.ndim == 3 and arr.shape[1:] == (3, 3):
        arr = arr.reshape(-1, 3)
    elif arr.size == 0:
        return np.empty((0, 3), dtype=arr.dtype if arr.dtype.kind == "f" else np.float64)
    if arr.ndim != 2 or arr.shape[1] != 3:
        raise GeometryParameterError(
            f"vertices must have shape (3k, 3) or (k, 3, 3), got {arr.shape}"
        )
    if arr.shape[0] % 3 != 0:
        raise GeometryParameterError(
            f"number of vertices must be a multiple of 3, got {arr.shape[0]}"
        )
    return arr


def _check_normals(normals, ntriangles: int, dtype: np.dtype) -> NDArray:
    arr = np.array(normals, dtype=dtype)
    if arr.shape != (ntriangles, 3):
        raise GeometryParameterError(
            f"normals must have shape ({ntriangles}, 3), got {arr.shape}"
        )
    return arr
