"""
Axis-aligned bounding boxes.
"""

from __future__ import annotations
from dataclasses import dataclass
import numpy as np

from ..exceptions import GeometryParameterError
from .mesh import Mesh
from .vec import Vec


@dataclass(frozen=True)
class BBox:
    """
    Axis-aligned box given by its minimum and maximum corners.

    A box built from a mesh is a snapshot: it is not updated when the mesh
    is transformed afterwards.

    Attributes:
        pmin: Corner with the smallest coordinates
        pmax: Corner with the largest coordinates
    """

    pmin: Vec
    pmax: Vec

    def __post_init__(self):
        """Check corner ordering (corners are never reordered)."""
        lo = self.pmin.to_array()
        hi = self.pmax.to_array()
        if np.any(lo > hi):
            raise GeometryParameterError(
                f"pmin must be <= pmax component-wise, got pmin={self.pmin}, pmax={self.pmax}"
            )

    @classmethod
    def from_mesh(cls, mesh: Mesh) -> BBox:
        """
        Build a tight bounding box around a mesh.

        Args:
            mesh: Non-empty mesh

        Raises:
            GeometryParameterError: If the mesh has no triangles
        """
        if mesh.ntriangles == 0:
            raise GeometryParameterError("Cannot build a bounding box around an empty mesh")
        vertices = mesh.vertices
        return cls(
            pmin=Vec.from_array(vertices.min(axis=0)),
            pmax=Vec.from_array(vertices.max(axis=0))
        )

    @property
    def center(self) -> Vec:
        """Centre of the box."""
        return (self.pmin + self.pmax) * 0.5

    @property
    def size(self) -> Vec:
        """Extent of the box along each axis."""
        return self.pmax - self.pmin

    def contains(self, point) -> bool:
        """Check whether a point lies inside the box (boundary included)."""
        p = np.asarray(list(point), dtype=np.float64)
        return bool(np.all(p >= self.pmin.to_array()) and np.all(p <= self.pmax.to_array()))

    def __repr__(self) -> str:
        return f"BBox(pmin={self.pmin}, pmax={self.pmax})"
