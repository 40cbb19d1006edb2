"""
Mesh file readers and writers.

Writers: STL (binary/ASCII), PLY (binary/ASCII) and OBJ.
Readers: STL, PLY, OBJ and Gmsh MSH through meshio, selected by file
extension.

Triangles are written independently (no vertex welding), mirroring the
unindexed layout of Mesh. Faces with more than three vertices found in input
files are fan triangulated from their first vertex.
"""

from __future__ import annotations
import logging
import struct
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple
import meshio
import numpy as np
from numpy.typing import NDArray

from ..exceptions import MeshFormatError
from ..geometry.mesh import Mesh
from ..geometry.precision import resolve_dtype

logger = logging.getLogger(__name__)


class MeshFormat(str, Enum):
    """Formats supported by save_mesh."""
    STL_BINARY = "stl_binary"
    STL_ASCII = "stl_ascii"
    PLY_BINARY = "ply_binary"
    PLY_ASCII = "ply_ascii"
    OBJ = "obj"


STL_HEADER_SIZE = 80

# Normal, three vertices (float32) and the attribute byte count: 50 bytes
STL_RECORD = np.dtype([
    ("normal", "<f4", (3,)),
    ("vertices", "<f4", (3, 3)),
    ("attribute", "<u2"),
])

PLY_FACE_RECORD = np.dtype([
    ("count", "u1"),
    ("indices", "<i4", (3,)),
])

# File extension -> meshio reader
_READERS = {
    ".stl": "stl",
    ".ply": "ply",
    ".obj": "obj",
    ".msh": "gmsh",
}

# meshio cell type -> corner nodes kept (None keeps every node of a polygon).
# Higher order cells list their corner nodes first.
_SURFACE_CELLS: Dict[str, Optional[int]] = {
    "triangle": 3,
    "triangle6": 3,
    "triangle7": 3,
    "quad": 4,
    "quad8": 4,
    "quad9": 4,
    "polygon": None,
}


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def save_mesh(mesh: Mesh, filename: str | Path,
              fileformat: MeshFormat | str = MeshFormat.STL_BINARY) -> Path:
    """
    Save a mesh into an external file.

    Args:
        mesh: Mesh to store
        filename: Destination path (parent directories are created)
        fileformat: One of MeshFormat (or its name/value as a string)

    Returns:
        Path of the written file
    """
    fmt = _resolve_format(fileformat)
    filepath = Path(filename)
    filepath.parent.mkdir(parents=True, exist_ok=True)

    _WRITERS[fmt](mesh, filepath)

    logger.info("Saved %d triangles to %s (%s)", mesh.ntriangles, filepath, fmt.name)
    return filepath


def load_mesh(filename: str | Path, precision: Any = None) -> Mesh:
    """
    Import a mesh from a file given by filename.

    Supported extensions: .stl (binary or ASCII), .ply (ASCII or binary),
    .obj and .msh (Gmsh 2.2, 4.0 and 4.1). Triangles, quadrangles and
    polygons are kept; points, lines and volume cells are skipped.
    Coordinates are converted to the requested precision.

    Args:
        filename: Path to the mesh file
        precision: Coordinate precision of the result (double by default)

    Returns:
        New mesh

    Raises:
        FileNotFoundError: If the file does not exist
        MeshFormatError: For unsupported extensions or corrupt content
    """
    filepath = Path(filename)
    dtype = resolve_dtype(precision)

    if not filepath.exists():
        raise FileNotFoundError(f"Mesh file not found: {filepath}")

    suffix = filepath.suffix.lower()
    file_format = _READERS.get(suffix)
    if file_format is None:
        raise MeshFormatError(
            f"Unsupported file extension '{suffix}'. "
            f"Supported: {', '.join(sorted(_READERS))}"
        )

    if file_format == "stl" and _stl_triangle_count(filepath) == 0:
        mesh = Mesh(dtype)
    else:
        try:
            data = meshio.read(filepath, file_format=file_format)
        except (meshio.ReadError, ValueError, IndexError, KeyError, EOFError) as exc:
            raise MeshFormatError(f"Could not parse {filepath}: {exc}") from exc
        mesh = Mesh.from_vertices(_surface_vertices(data), precision=dtype)

    logger.info("Loaded %d triangles from %s", mesh.ntriangles, filepath)
    return mesh


def _resolve_format(fileformat: MeshFormat | str) -> MeshFormat:
    if isinstance(fileformat, MeshFormat):
        return fileformat
    key = str(fileformat).strip()
    if key.upper() in MeshFormat.__members__:
        return MeshFormat[key.upper()]
    try:
        return MeshFormat(key.lower())
    except ValueError as exc:
        raise MeshFormatError(
            f"Unknown mesh format '{fileformat}'. "
            f"Expected one of {list(MeshFormat.__members__)}"
        ) from exc


# ---------------------------------------------------------------------------
# Writers
# ---------------------------------------------------------------------------

def _number_format(dtype: np.dtype) -> str:
    """Enough significant digits for a lossless text round trip."""
    return "%.9g" if dtype == np.float32 else "%.17g"


def _format_rows(rows: NDArray, fmt: str, prefix: str = "") -> List[str]:
    line = prefix + " ".join([fmt] * rows.shape[1])
    return [line % tuple(row) for row in rows.tolist()]


def _write_stl_binary(mesh: Mesh, filepath: Path) -> None:
    """Write triangles to binary STL file."""
    records = np.zeros(mesh.ntriangles, dtype=STL_RECORD)
    records["normal"] = mesh.normals
    records["vertices"] = mesh.vertices.reshape(-1, 3, 3)

    with open(filepath, "wb") as f:
        header = b"Binary STL written by plantgeom"
        f.write(header[:STL_HEADER_SIZE].ljust(STL_HEADER_SIZE, b"\0"))
        f.write(struct.pack("<I", mesh.ntriangles))
        f.write(records.tobytes())


def _write_stl_ascii(mesh: Mesh, filepath: Path) -> None:
    """Write triangles to ASCII STL file."""
    fmt = _number_format(mesh.dtype)
    normals = _format_rows(mesh.normals, fmt, "  facet normal ")
    vertices = _format_rows(mesh.vertices, fmt, "      vertex ")

    with open(filepath, "w") as f:
        f.write("solid plantgeom\n")
        for i, normal in enumerate(normals):
            f.write(normal + "\n")
            f.write("    outer loop\n")
            for line in vertices[3 * i:3 * i + 3]:
                f.write(line + "\n")
            f.write("    endloop\n")
            f.write("  endfacet\n")
        f.write("endsolid plantgeom\n")


def _ply_header(mesh: Mesh, fmt: str) -> str:
    scalar = "float" if mesh.dtype == np.float32 else "double"
    lines = [
        "ply",
        f"format {fmt} 1.0",
        "comment written by plantgeom",
        f"element vertex {mesh.nvertices}",
        f"property {scalar} x",
        f"property {scalar} y",
        f"property {scalar} z",
        f"element face {mesh.ntriangles}",
        "property list uchar int vertex_indices",
        "end_header",
    ]
    return "\n".join(lines) + "\n"


def _triangle_indices(mesh: Mesh) -> NDArray[np.int64]:
    return np.arange(mesh.nvertices, dtype=np.int64).reshape(-1, 3)


def _write_ply_ascii(mesh: Mesh, filepath: Path) -> None:
    fmt = _number_format(mesh.dtype)
    with open(filepath, "w") as f:
        f.write(_ply_header(mesh, "ascii"))
        for line in _format_rows(mesh.vertices, fmt):
            f.write(line + "\n")
        for i, j, k in _triangle_indices(mesh).tolist():
            f.write(f"3 {i} {j} {k}\n")


def _write_ply_binary(mesh: Mesh, filepath: Path) -> None:
    scalar = "<f4" if mesh.dtype == np.float32 else "<f8"
    faces = np.zeros(mesh.ntriangles, dtype=PLY_FACE_RECORD)
    faces["count"] = 3
    faces["indices"] = _triangle_indices(mesh)

    with open(filepath, "wb") as f:
        f.write(_ply_header(mesh, "binary_little_endian").encode("ascii"))
        f.write(mesh.vertices.astype(scalar).tobytes())
        f.write(faces.tobytes())


def _write_obj(mesh: Mesh, filepath: Path) -> None:
    fmt = _number_format(mesh.dtype)
    with open(filepath, "w") as f:
        f.write("# written by plantgeom\n")
        for line in _format_rows(mesh.vertices, fmt, "v "):
            f.write(line + "\n")
        for i, j, k in (_triangle_indices(mesh) + 1).tolist():
            f.write(f"f {i} {j} {k}\n")


_WRITERS: Dict[MeshFormat, Callable[[Mesh, Path], None]] = {
    MeshFormat.STL_BINARY: _write_stl_binary,
    MeshFormat.STL_ASCII: _write_stl_ascii,
    MeshFormat.PLY_BINARY: _write_ply_binary,
    MeshFormat.PLY_ASCII: _write_ply_ascii,
    MeshFormat.OBJ: _write_obj,
}


# ---------------------------------------------------------------------------
# Shared reader helpers
# ---------------------------------------------------------------------------

def _fan_triangulate(faces: Sequence[Sequence[int]]) -> NDArray[np.int64]:
    """
    Split polygons into triangles sharing their first vertex.

    Args:
        faces: Vertex index lists, each with at least 3 entries

    Returns:
        Triangle indices (T, 3)
    """
    triangles: List[Tuple[int, int, int]] = []
    for face in faces:
        face = [int(i) for i in face]
        if len(face) < 3:
            raise MeshFormatError(f"Face with fewer than 3 vertices: {face}")
        first = face[0]
        for i in range(1, len(face) - 1):
            triangles.append((first, face[i], face[i + 1]))
    return np.array(triangles, dtype=np.int64).reshape(-1, 3)


def _gather(points: NDArray, triangles: NDArray[np.int64]) -> NDArray:
    """Expand indexed triangles into unindexed vertex rows (3T, 3)."""
    if triangles.size and (triangles.min() < 0 or triangles.max() >= len(points)):
        raise MeshFormatError(
            f"Face references vertex outside [0, {len(points) - 1}]"
        )
    return np.asarray(points)[triangles.reshape(-1)]


def _stl_triangle_count(filepath: Path) -> Optional[int]:
    """
    Triangle count of a binary STL file, None for ASCII STL.

    Binary files are recognised by their exact size (some exporters start
    binary headers with "solid" too).

    Raises:
        MeshFormatError: If a binary file is truncated or padded
    """
    size = filepath.stat().st_size
    with open(filepath, "rb") as f:
        head = f.read(STL_HEADER_SIZE + 4)

    if len(head) == STL_HEADER_SIZE + 4:
        (count,) = struct.unpack_from("<I", head, STL_HEADER_SIZE)
        if size == STL_HEADER_SIZE + 4 + STL_RECORD.itemsize * count:
            return count
    if head.lstrip()[:5].lower() == b"solid":
        return None
    raise MeshFormatError(f"Truncated or corrupt binary STL ({size} bytes)")


def _surface_vertices(data: meshio.Mesh) -> NDArray:
    """Unindexed triangle vertices (3T, 3) from the surface cells of a meshio mesh."""
    points = np.asarray(data.points, dtype=np.float64)
    if points.ndim != 2 or points.shape[1] not in (2, 3):
        raise MeshFormatError(f"Expected 2D or 3D points, got shape {points.shape}")
    if points.shape[1] == 2:
        points = np.column_stack([points, np.zeros(len(points))])

    faces: List[Sequence[int]] = []
    for block in data.cells:
        if block.type not in _SURFACE_CELLS:
            logger.debug("Skipping %d '%s' cells", len(block.data), block.type)
            continue
        corners = _SURFACE_CELLS[block.type]
        for cell in block.data:
            faces.append(cell[:corners] if corners else cell)

    return _gather(points, _fan_triangulate(faces))
