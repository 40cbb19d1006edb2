"""Configuration schemas for scene descriptions."""

from .schemas import (
    ShapeType,
    SHAPE_PARAMETERS,
    TransformConfig,
    ObjectConfig,
    OutputConfig,
    SceneConfig,
)

__all__ = [
    "ShapeType",
    "SHAPE_PARAMETERS",
    "TransformConfig",
    "ObjectConfig",
    "OutputConfig",
    "SceneConfig",
]
