"""
Exception hierarchy for plantgeom.

Both concrete errors derive from ValueError so callers catching the built-in
keep working.
"""


class PlantGeomError(Exception):
    """Base class for all plantgeom errors."""


class GeometryParameterError(PlantGeomError, ValueError):
    """Invalid geometric parameter (dimension, tessellation count, alignment, basis)."""


class MeshFormatError(PlantGeomError, ValueError):
    """Unsupported, truncated or unparseable mesh file."""
