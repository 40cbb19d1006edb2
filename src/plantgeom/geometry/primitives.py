"""
Parametric shape generators.

Every generator returns a fresh Mesh in the standard location and orientation:

- `length` runs along +Z starting at z = 0
- `width` spans the Y axis, centred on y = 0
- `height` spans the X axis, centred on x = 0

Flat shapes (triangle, rectangle, trapezoid, ellipse) lie in the plane x = 0
and face +X. Closed shapes have outward normals by the right-hand rule of
vertex order. Use the functions in `transforms` to place them afterwards.

For curved shapes `n` is the total number of triangles in the result.
"""

from __future__ import annotations
from typing import Any
import numpy as np
from numpy.typing import NDArray

from ..exceptions import GeometryParameterError
from .mesh import Mesh
from .precision import resolve_dtype


def triangle(length: float = 1.0, width: float = 1.0, precision: Any = None) -> Mesh:
    """
    Create a triangle with base `width` on z = 0 and apex at (0, 0, length).

    Examples:
        >>> triangle(length=1.0, width=1.0).area()
        0.5
    """
    _check_positive(length=length, width=width)
    verts = np.array([
        [0.0, -width / 2, 0.0],
        [0.0, width / 2, 0.0],
        [0.0, 0.0, length],
    ])
    return Mesh.from_vertices(verts, precision=resolve_dtype(precision))


def rectangle(length: float = 1.0, width: float = 1.0, precision: Any = None) -> Mesh:
    """Create a rectangle of two triangles."""
    _check_positive(length=length, width=width)
    face = _face([0.0, -width / 2, 0.0], [0.0, width, 0.0], [0.0, 0.0, length])
    return Mesh.from_vertices(face, precision=resolve_dtype(precision))


def trapezoid(length: float = 1.0, width: float = 1.0, ratio: float = 1.0,
              precision: Any = None) -> Mesh:
    """
    Create a trapezoid of two triangles.

    Args:
        length: Distance between the parallel sides
        width: Width of the base (z = 0)
        ratio: Width of the top side relative to the base
        precision: Coordinate precision
    """
    _check_positive(length=length, width=width, ratio=ratio)
    a = [0.0, -width / 2, 0.0]
    b = [0.0, width / 2, 0.0]
    c = [0.0, ratio * width / 2, length]
    d = [0.0, -ratio * width / 2, length]
    verts = np.array([a, b, c, a, c, d])
    return Mesh.from_vertices(verts, precision=resolve_dtype(precision))


def ellipse(length: float = 1.0, width: float = 1.0, n: int = 20,
            precision: Any = None) -> Mesh:
    """
    Create an ellipse discretized into `n` triangles fanned from its centre.

    The centre is (0, 0, length/2) and the outline vertices sit at angles
    2*pi*k/n with radii length/2 (along Z) and width/2 (along Y).

    Args:
        length: Diameter along Z
        width: Diameter along Y
        n: Number of triangles (even, >= 4)
        precision: Coordinate precision
    """
    _check_positive(length=length, width=width)
    _check_n(n, multiple=2, minimum=4, shape="ellipse")

    theta = _angles(n)
    outline = np.column_stack([
        np.zeros(n),
        (width / 2) * np.cos(theta),
        length / 2 + (length / 2) * np.sin(theta),
    ])
    centre = np.array([0.0, 0.0, length / 2])
    return Mesh.from_vertices(_fan(centre, outline), precision=resolve_dtype(precision))


def hollow_cylinder(length: float = 1.0, width: float = 1.0, height: float = 1.0,
                    n: int = 40, precision: Any = None) -> Mesh:
    """Create an open-ended cylinder of `n` side triangles (n even, >= 6)."""
    _check_positive(length=length, width=width, height=height)
    _check_n(n, multiple=2, minimum=6, shape="hollow cylinder")
    return _tube(length, width, height, 1.0, n // 2, False, precision)


def solid_cylinder(length: float = 1.0, width: float = 1.0, height: float = 1.0,
                   n: int = 80, precision: Any = None) -> Mesh:
    """
    Create a closed cylinder of about `n` triangles (n even, >= 12).

    Half of the triangles form the side and a quarter each form the two caps,
    which share one ring of n // 4 segments. When n is not a multiple of 4 the
    result has 4 * (n // 4) triangles, i.e. n rounded down to a multiple of 4.
    """
    _check_positive(length=length, width=width, height=height)
    _check_n(n, multiple=2, minimum=12, shape="solid cylinder")
    return _tube(length, width, height, 1.0, n // 4, True, precision)


def hollow_frustum(length: float = 1.0, width: float = 1.0, height: float = 1.0,
                   ratio: float = 1.0, n: int = 40, precision: Any = None) -> Mesh:
    """
    Create an open-ended frustum of `n` side triangles (n even, >= 6).

    The top ring is the base ring scaled by `ratio`.
    """
    _check_positive(length=length, width=width, height=height, ratio=ratio)
    _check_n(n, multiple=2, minimum=6, shape="hollow frustum")
    return _tube(length, width, height, ratio, n // 2, False, precision)


def solid_frustum(length: float = 1.0, width: float = 1.0, height: float = 1.0,
                  ratio: float = 1.0, n: int = 40, precision: Any = None) -> Mesh:
    """
    Create a closed frustum of about `n` triangles (n even, >= 12).

    Triangles are split between side and caps as in solid_cylinder, so the
    count is rounded down to a multiple of 4.
    """
    _check_positive(length=length, width=width, height=height, ratio=ratio)
    _check_n(n, multiple=2, minimum=12, shape="solid frustum")
    return _tube(length, width, height, ratio, n // 4, True, precision)


def hollow_cone(length: float = 1.0, width: float = 1.0, height: float = 1.0,
                n: int = 20, precision: Any = None) -> Mesh:
    """Create a cone without base, apex at (0, 0, length), of `n` triangles (even, >= 4)."""
    _check_positive(length=length, width=width, height=height)
    _check_n(n, multiple=2, minimum=4, shape="hollow cone")
    return _cone(length, width, height, n, False, precision)


def solid_cone(length: float = 1.0, width: float = 1.0, height: float = 1.0,
               n: int = 40, precision: Any = None) -> Mesh:
    """Create a cone closed by its base, of `n` triangles (even, >= 6)."""
    _check_positive(length=length, width=width, height=height)
    _check_n(n, multiple=2, minimum=6, shape="solid cone")
    return _cone(length, width, height, n // 2, True, precision)


def solid_cube(length: float = 1.0, width: float = 1.0, height: float = 1.0,
               precision: Any = None) -> Mesh:
    """Create a closed box of 12 triangles."""
    _check_positive(length=length, width=width, height=height)
    return _box(length, width, height, True, precision)


def hollow_cube(length: float = 1.0, width: float = 1.0, height: float = 1.0,
                precision: Any = None) -> Mesh:
    """Create a box open at the top and bottom (no faces normal to Z), 8 triangles."""
    _check_positive(length=length, width=width, height=height)
    return _box(length, width, height, False, precision)


def _tube(length: float, width: float, height: float, ratio: float,
          segments: int, caps: bool, precision: Any) -> Mesh:
    """Cylinder or frustum with `segments` ring segments and optional caps."""
    bottom = _ring(height / 2, width / 2, 0.0, segments)
    top = _ring(ratio * height / 2, ratio * width / 2, length, segments)

    blocks = [_side(bottom, top)]
    if caps:
        blocks.append(_fan(np.zeros(3), bottom, reverse=True))
        blocks.append(_fan(np.array([0.0, 0.0, length]), top))
    return Mesh.from_vertices(np.concatenate(blocks), precision=resolve_dtype(precision))


def _cone(length: float, width: float, height: float, segments: int,
          cap: bool, precision: Any) -> Mesh:
    base = _ring(height / 2, width / 2, 0.0, segments)
    apex = np.broadcast_to([0.0, 0.0, length], base.shape)

    blocks = [np.stack([base, np.roll(base, -1, axis=0), apex], axis=1)]
    if cap:
        blocks.append(_fan(np.zeros(3), base, reverse=True))
    return Mesh.from_vertices(np.concatenate(blocks), precision=resolve_dtype(precision))


def _box(length: float, width: float, height: float, closed: bool,
         precision: Any) -> Mesh:
    hx, hy = height / 2, width / 2
    ex = [height, 0.0, 0.0]
    ey = [0.0, width, 0.0]
    ez = [0.0, 0.0, length]

    # (origin, u, v) with u x v pointing outwards
    faces = [
        ([-hx, -hy, 0.0], ex, ez),      # -Y
        ([hx, -hy, 0.0], ey, ez),       # +X
        ([-hx, hy, 0.0], ez, ex),       # +Y
        ([-hx, -hy, 0.0], ez, ey),      # -X
    ]
    if closed:
        faces.append(([-hx, -hy, 0.0], ey, ex))       # bottom
        faces.append(([-hx, -hy, length], ex, ey))    # top

    blocks = [_face(*face) for face in faces]
    return Mesh.from_vertices(np.concatenate(blocks), precision=resolve_dtype(precision))


def _face(origin, u, v) -> NDArray:
    """Parallelogram origin, origin+u, origin+u+v, origin+v as two triangles."""
    a = np.asarray(origin, dtype=np.float64)
    b = a + u
    c = b + v
    d = a + np.asarray(v, dtype=np.float64)
    return np.array([[a, b, c], [a, c, d]])


def _angles(n: int) -> NDArray:
    return 2 * np.pi * np.arange(n) / n


def _ring(rx: float, ry: float, z: float, segments: int) -> NDArray:
    """Closed elliptical outline in the plane at height z, counter-clockwise from +Z."""
    theta = _angles(segments)
    return np.column_stack([
        rx * np.cos(theta),
        ry * np.sin(theta),
        np.full(segments, z),
    ])


def _side(bottom: NDArray, top: NDArray) -> NDArray:
    """Quads between two rings, each split into two triangles."""
    b0, b1 = bottom, np.roll(bottom, -1, axis=0)
    t0, t1 = top, np.roll(top, -1, axis=0)
    lower = np.stack([b0, b1, t1], axis=1)
    upper = np.stack([b0, t1, t0], axis=1)
    return np.stack([lower, upper], axis=1).reshape(-1, 3, 3)


def _fan(centre: NDArray, outline: NDArray, reverse: bool = False) -> NDArray:
    """Triangles from `centre` to consecutive outline points."""
    c = np.broadcast_to(centre, outline.shape)
    p0, p1 = outline, np.roll(outline, -1, axis=0)
    if reverse:
        p0, p1 = p1, p0
    return np.stack([c, p0, p1], axis=1)


def _check_positive(**values: float) -> None:
    for name, value in values.items():
        try:
            positive = value > 0
        except TypeError as exc:
            raise GeometryParameterError(
                f"{name} must be a number, got {value!r}"
            ) from exc
        if not positive:
            raise GeometryParameterError(f"{name} must be positive, got {value}")


def _check_n(n: int, multiple: int, minimum: int, shape: str) -> None:
    if isinstance(n, bool) or not isinstance(n, (int, np.integer)):
        raise GeometryParameterError(f"n must be an integer, got {n!r}")
    if n % multiple != 0:
        kind = "even" if multiple == 2 else f"a multiple of {multiple}"
        raise GeometryParameterError(f"{shape}: n must be {kind}, got {n}")
    if n < minimum:
        raise GeometryParameterError(f"{shape}: n must be >= {minimum}, got {n}")
