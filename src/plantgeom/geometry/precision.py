"""
Floating-point precision selector shared by every entry point.
"""

from __future__ import annotations
from typing import Any
import numpy as np

from ..exceptions import GeometryParameterError


_ALIASES = {
    "single": np.float32,
    "float32": np.float32,
    "f4": np.float32,
    "double": np.float64,
    "float64": np.float64,
    "f8": np.float64,
}

SUPPORTED_DTYPES = (np.dtype(np.float32), np.dtype(np.float64))


def resolve_dtype(precision: Any = None) -> np.dtype:
    """
    Map a precision selector to a numpy float dtype.

    Args:
        precision: None (double), np.float32, np.float64, a numpy dtype,
            or one of "single", "double", "float32", "float64"

    Returns:
        np.dtype('float32') or np.dtype('float64')
    """
    if precision is None:
        return np.dtype(np.float64)

    if isinstance(precision, str):
        key = precision.strip().lower()
        if key not in _ALIASES:
            raise GeometryParameterError(
                f"Unknown precision '{precision}'. "
                f"Expected one of {sorted(_ALIASES)}"
            )
        return np.dtype(_ALIASES[key])

    try:
        dtype = np.dtype(precision)
    except TypeError as exc:
        raise GeometryParameterError(f"Invalid precision {precision!r}") from exc

    if dtype not in SUPPORTED_DTYPES:
        raise GeometryParameterError(
            f"Precision must be single (float32) or double (float64), got {dtype}"
        )
    return dtype


def tolerance(dtype: np.dtype) -> float:
    """Absolute tolerance used for geometric precondition checks."""
    return 1e-5 if np.dtype(dtype) == np.float32 else 1e-10
