"""
3D vectors and points.

A Vec carries its floating-point precision so that meshes built from it stay
in single or double precision end to end.
"""

from __future__ import annotations
from dataclasses import dataclass
from numbers import Real
from typing import Any, Iterator
import numpy as np
from numpy.typing import NDArray

from ..exceptions import GeometryParameterError
from .precision import resolve_dtype


@dataclass(frozen=True)
class Vec:
    """3D vector or point with coordinates x, y and z."""
    x: float
    y: float
    z: float
    dtype: Any = None

    def __post_init__(self):
        dtype = resolve_dtype(self.dtype)
        object.__setattr__(self, "dtype", dtype)
        object.__setattr__(self, "x", dtype.type(self.x))
        object.__setattr__(self, "y", dtype.type(self.y))
        object.__setattr__(self, "z", dtype.type(self.z))

    def to_array(self) -> NDArray:
        """Convert to NumPy array (3,) in this vector's precision."""
        return np.array([self.x, self.y, self.z], dtype=self.dtype)

    @classmethod
    def from_array(cls, arr, precision: Any = None) -> Vec:
        """
        Create from an array-like of three components.

        Args:
            arr: Array-like of shape (3,)
            precision: Target precision; inferred from float arrays if None
        """
        arr = np.asarray(arr)
        if arr.shape != (3,):
            raise GeometryParameterError(f"Expected array of shape (3,), got {arr.shape}")
        if precision is None and arr.dtype in (np.float32, np.float64):
            precision = arr.dtype
        return cls(arr[0], arr[1], arr[2], dtype=precision)

    def _wrap(self, arr: NDArray, other: Any = None) -> Vec:
        dtype = self.dtype
        if isinstance(other, Vec):
            dtype = np.result_type(self.dtype, other.dtype)
        return Vec(arr[0], arr[1], arr[2], dtype=dtype)

    def norm(self) -> float:
        """Euclidean length."""
        return float(np.linalg.norm(self.to_array()))

    def normalize(self) -> Vec:
        """Return unit vector in same direction."""
        mag = self.norm()
        if mag == 0.0:
            raise GeometryParameterError("Cannot normalize zero vector")
        return self._wrap(self.to_array() / self.dtype.type(mag))

    def dot(self, other: Vec) -> float:
        """Dot product."""
        return float(np.dot(self.to_array(), other.to_array()))

    def cross(self, other: Vec) -> Vec:
        """Cross product."""
        return self._wrap(np.cross(self.to_array(), other.to_array()), other)

    def __add__(self, other: Vec) -> Vec:
        if not isinstance(other, Vec):
            return NotImplemented
        return self._wrap(self.to_array() + other.to_array(), other)

    def __sub__(self, other: Vec) -> Vec:
        if not isinstance(other, Vec):
            return NotImplemented
        return self._wrap(self.to_array() - other.to_array(), other)

    def __mul__(self, scalar: float) -> Vec:
        if not isinstance(scalar, (Real, np.floating, np.integer)):
            return NotImplemented
        return self._wrap(self.to_array() * self.dtype.type(scalar))

    def __rmul__(self, scalar: float) -> Vec:
        return self.__mul__(scalar)

    def __truediv__(self, scalar: float) -> Vec:
        if not isinstance(scalar, (Real, np.floating, np.integer)):
            return NotImplemented
        if scalar == 0:
            raise ZeroDivisionError("Vec division by zero")
        return self._wrap(self.to_array() / self.dtype.type(scalar))

    def __neg__(self) -> Vec:
        return self._wrap(-self.to_array())

    def __iter__(self) -> Iterator:
        return iter((self.x, self.y, self.z))

    def __getitem__(self, index: int):
        return (self.x, self.y, self.z)[index]

    def __len__(self) -> int:
        return 3

    def __repr__(self) -> str:
        return f"Vec({self.x:.6f}, {self.y:.6f}, {self.z:.6f}, {self.dtype.name})"


def _axis(index: int, scale: Any, precision: Any) -> Vec:
    # X(np.float32) selects the precision of a unit vector
    if isinstance(scale, (type, np.dtype, str)):
        precision, scale = scale, 1.0
    if precision is None and isinstance(scale, np.floating):
        precision = scale.dtype
    components = [0.0, 0.0, 0.0]
    components[index] = scale
    return Vec(*components, dtype=precision)


def O(precision: Any = None) -> Vec:
    """Origin of the coordinate system, O() or O(np.float32)."""
    return Vec(0.0, 0.0, 0.0, dtype=precision)


def X(scale: Any = 1.0, precision: Any = None) -> Vec:
    """Vector along the X axis with length `scale` (unit by default)."""
    return _axis(0, scale, precision)


def Y(scale: Any = 1.0, precision: Any = None) -> Vec:
    """Vector along the Y axis with length `scale` (unit by default)."""
    return _axis(1, scale, precision)


def Z(scale: Any = 1.0, precision: Any = None) -> Vec:
    """Vector along the Z axis with length `scale` (unit by default)."""
    return _axis(2, scale, precision)


def as_array(value, dtype: np.dtype) -> NDArray:
    """Coerce a Vec or array-like of three components to a (3,) array."""
    if isinstance(value, Vec):
        arr = value.to_array()
    else:
        arr = np.asarray(value)
    if arr.shape != (3,):
        raise GeometryParameterError(f"Expected 3 components, got shape {arr.shape}")
    return arr.astype(dtype, copy=False)
