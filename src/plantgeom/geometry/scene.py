"""
Scene: one merged mesh plus per-triangle colors and material ids.

Colors and materials are opaque to this module; it only keeps them aligned
with the triangles of the mesh.
"""

from __future__ import annotations
import logging
from typing import Any, Iterable, List, Optional, Sequence, Tuple
import numpy as np
from numpy.typing import NDArray

from ..exceptions import GeometryParameterError
from .mesh import Mesh, merge_meshes

logger = logging.getLogger(__name__)


class Scene:
    """
    Triangular mesh with aligned per-triangle colors and material ids.

    Attributes:
        mesh: Merged triangular mesh (used for ray tracing & rendering)
        colors: One color per triangle, or empty
        material_ids: One index into `materials` per triangle, or empty
        materials: Material table
    """

    def __init__(self,
                 mesh: Optional[Mesh] = None,
                 colors: Optional[Sequence[Any]] = None,
                 material_ids: Optional[Sequence[int]] = None,
                 materials: Optional[Sequence[Any]] = None):
        """
        Create a scene, taking ownership of `mesh`.

        Args:
            mesh: Triangular mesh (empty double-precision mesh by default)
            colors: Per-triangle colors (empty for none)
            material_ids: Per-triangle indices into `materials` (empty for none)
            materials: Material table
        """
        mesh = mesh if mesh is not None else Mesh()
        colors = list(colors) if colors is not None else []
        material_ids = _as_ids(material_ids)
        materials = list(materials) if materials is not None else []

        _validate(mesh.ntriangles, colors, material_ids, len(materials))

        self._mesh = mesh
        self._colors: List[Any] = colors
        self._material_ids: NDArray[np.int64] = material_ids
        self._materials: List[Any] = materials

    @property
    def mesh(self) -> Mesh:
        """The triangular mesh stored inside the scene."""
        return self._mesh

    @property
    def colors(self) -> Tuple[Any, ...]:
        """Per-triangle colors (used for rendering)."""
        return tuple(self._colors)

    @property
    def material_ids(self) -> NDArray[np.int64]:
        """Per-triangle material indices (read-only view)."""
        view = self._material_ids.view()
        view.flags.writeable = False
        return view

    @property
    def materials(self) -> Tuple[Any, ...]:
        """Material table (used for ray tracing)."""
        return tuple(self._materials)

    @property
    def ntriangles(self) -> int:
        """Number of triangles in the scene."""
        return self._mesh.ntriangles

    def add(self, mesh: Mesh,
            color: Any = None,
            colors: Optional[Sequence[Any]] = None,
            material: Any = None,
            materials: Optional[Sequence[Any]] = None) -> None:
        """
        Append a mesh with optional colors and materials.

        Args:
            mesh: Mesh to append (copied into the scene mesh)
            color: One color shared by all new triangles
            colors: One color per new triangle
            material: One material shared by all new triangles
            materials: One material per new triangle

        Raises:
            GeometryParameterError: If the result would break alignment; the
                scene is left unchanged
        """
        if color is not None and colors is not None:
            raise GeometryParameterError("Pass either color or colors, not both")
        if material is not None and materials is not None:
            raise GeometryParameterError("Pass either material or materials, not both")

        nt = mesh.ntriangles

        new_colors: List[Any] = []
        if color is not None:
            new_colors = [color] * nt
        elif colors is not None:
            new_colors = list(colors)
            if len(new_colors) != nt:
                raise GeometryParameterError(
                    f"colors length ({len(new_colors)}) must match number of triangles ({nt})"
                )

        new_materials: List[Any] = []
        new_ids = np.empty(0, dtype=np.int64)
        offset = len(self._materials)
        if material is not None:
            new_materials = [material]
            new_ids = np.full(nt, offset, dtype=np.int64)
        elif materials is not None:
            new_materials = list(materials)
            if len(new_materials) != nt:
                raise GeometryParameterError(
                    f"materials length ({len(new_materials)}) must match number of triangles ({nt})"
                )
            new_ids = np.arange(offset, offset + nt, dtype=np.int64)

        _check_run("colors", self.ntriangles, len(self._colors), nt, len(new_colors))
        _check_run("material ids", self.ntriangles, len(self._material_ids), nt, len(new_ids))

        if self._mesh.ntriangles == 0 and self._mesh.dtype != mesh.dtype:
            # Adopt the precision of the first real content
            self._mesh = Mesh.sized(nt, precision=mesh.dtype)
        self._mesh.append(mesh)
        self._colors.extend(new_colors)
        self._material_ids = np.concatenate([self._material_ids, new_ids])
        self._materials.extend(new_materials)

    @classmethod
    def merge(cls, scenes: Iterable[Scene]) -> Scene:
        """Merge multiple scenes into a new one (see merge_scenes)."""
        return merge_scenes(scenes)

    def __repr__(self) -> str:
        return (
            f"Scene(ntriangles={self.ntriangles}, "
            f"colors={len(self._colors)}, "
            f"materials={len(self._materials)})"
        )


def merge_scenes(scenes: Iterable[Scene]) -> Scene:
    """
    Merge scenes in order into a new scene.

    Meshes, color runs and material-id runs are concatenated. Material tables
    are concatenated too, and the ids contributed by each scene are offset by
    the total size of the tables before it. Inputs are not modified.

    Args:
        scenes: Scenes to merge

    Returns:
        Merged scene
    """
    scenes = list(scenes)
    if not scenes:
        return Scene()

    populated = [s for s in scenes if s.ntriangles > 0]
    for label, lengths in (
        ("colors", [len(s._colors) for s in populated]),
        ("material ids", [len(s._material_ids) for s in populated]),
    ):
        if any(lengths) and not all(lengths):
            raise GeometryParameterError(
                f"Cannot merge scenes with and without {label}"
            )

    mesh = merge_meshes(s.mesh for s in scenes)

    colors: List[Any] = []
    id_runs: List[NDArray[np.int64]] = []
    materials: List[Any] = []
    offset = 0
    for scene in scenes:
        colors.extend(scene._colors)
        id_runs.append(scene._material_ids + offset)
        materials.extend(scene._materials)
        offset += len(scene._materials)

    logger.debug(
        "Merged %d scenes into %d triangles and %d materials",
        len(scenes), mesh.ntriangles, len(materials)
    )
    return Scene(
        mesh=mesh,
        colors=colors,
        material_ids=np.concatenate(id_runs),
        materials=materials
    )


def _as_ids(material_ids) -> NDArray[np.int64]:
    if material_ids is None:
        return np.empty(0, dtype=np.int64)
    ids = np.asarray(material_ids)
    if ids.size == 0:
        return np.empty(0, dtype=np.int64)
    if ids.ndim != 1 or ids.dtype.kind not in "iu":
        raise GeometryParameterError(
            f"material_ids must be a 1D sequence of integers, got {ids.dtype} {ids.shape}"
        )
    return ids.astype(np.int64)


def _validate(ntriangles: int, colors: List[Any], material_ids: NDArray,
              nmaterials: int) -> None:
    if colors and len(colors) != ntriangles:
        raise GeometryParameterError(
            f"colors length ({len(colors)}) must match number of triangles ({ntriangles})"
        )
    if material_ids.size and material_ids.size != ntriangles:
        raise GeometryParameterError(
            f"material_ids length ({material_ids.size}) must match "
            f"number of triangles ({ntriangles})"
        )
    if material_ids.size and (material_ids.min() < 0 or material_ids.max() >= nmaterials):
        raise GeometryParameterError(
            f"material_ids must index into a table of {nmaterials} materials"
        )


def _check_run(label: str, existing_triangles: int, existing: int,
               added_triangles: int, added: int) -> None:
    """Check that appending a run keeps `label` aligned with the triangles."""
    if added_triangles == 0:
        return
    has_existing = existing > 0
    if existing_triangles == 0:
        return
    if has_existing and added == 0:
        raise GeometryParameterError(f"Scene has {label}; the added mesh needs them too")
    if not has_existing and added > 0:
        raise GeometryParameterError(
            f"Scene has triangles without {label}; cannot add {label} for new triangles only"
        )
