"""
Pydantic schemas for scene description files.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from typing import Any, Dict, List, Literal, Optional, Tuple
from enum import Enum


class ShapeType(str, Enum):
    """Shape generators available to scene descriptions."""
    TRIANGLE = "triangle"
    RECTANGLE = "rectangle"
    TRAPEZOID = "trapezoid"
    ELLIPSE = "ellipse"
    HOLLOW_CYLINDER = "hollow_cylinder"
    SOLID_CYLINDER = "solid_cylinder"
    HOLLOW_FRUSTUM = "hollow_frustum"
    SOLID_FRUSTUM = "solid_frustum"
    HOLLOW_CONE = "hollow_cone"
    SOLID_CONE = "solid_cone"
    SOLID_CUBE = "solid_cube"
    HOLLOW_CUBE = "hollow_cube"


# Keyword arguments accepted by each generator
SHAPE_PARAMETERS: Dict[ShapeType, Tuple[str, ...]] = {
    ShapeType.TRIANGLE: ("length", "width"),
    ShapeType.RECTANGLE: ("length", "width"),
    ShapeType.TRAPEZOID: ("length", "width", "ratio"),
    ShapeType.ELLIPSE: ("length", "width", "n"),
    ShapeType.HOLLOW_CYLINDER: ("length", "width", "height", "n"),
    ShapeType.SOLID_CYLINDER: ("length", "width", "height", "n"),
    ShapeType.HOLLOW_FRUSTUM: ("length", "width", "height", "ratio", "n"),
    ShapeType.SOLID_FRUSTUM: ("length", "width", "height", "ratio", "n"),
    ShapeType.HOLLOW_CONE: ("length", "width", "height", "n"),
    ShapeType.SOLID_CONE: ("length", "width", "height", "n"),
    ShapeType.SOLID_CUBE: ("length", "width", "height"),
    ShapeType.HOLLOW_CUBE: ("length", "width", "height"),
}

MeshFormatName = Literal["STL_BINARY", "STL_ASCII", "PLY_BINARY", "PLY_ASCII", "OBJ"]


class TransformConfig(BaseModel):
    """Placement applied after generation: scale, rotate (x, y, z), translate."""
    model_config = ConfigDict(extra="forbid")

    scale: Tuple[float, float, float] = Field(
        default=(1.0, 1.0, 1.0),
        description="Scale factors along x, y, z"
    )
    rotation_deg: Tuple[float, float, float] = Field(
        default=(0.0, 0.0, 0.0),
        description="Rotation angles about x, y, z in degrees, applied in that order"
    )
    translation: Tuple[float, float, float] = Field(
        default=(0.0, 0.0, 0.0),
        description="Translation vector (x, y, z)"
    )


class ObjectConfig(BaseModel):
    """One mesh of the scene: a generated shape or a mesh file."""
    model_config = ConfigDict(extra="forbid")

    name: str = Field(..., description="Unique object identifier")
    shape: Optional[ShapeType] = Field(default=None, description="Shape generator")
    mesh_file: Optional[str] = Field(default=None, description="Path to STL/PLY/OBJ/MSH file")

    length: Optional[float] = Field(default=None, gt=0)
    width: Optional[float] = Field(default=None, gt=0)
    height: Optional[float] = Field(default=None, gt=0)
    ratio: Optional[float] = Field(default=None, gt=0)
    n: Optional[int] = Field(default=None, gt=0, description="Number of triangles")

    transform: TransformConfig = Field(
        default_factory=TransformConfig,
        description="Placement transform"
    )
    color: Optional[Any] = Field(default=None, description="Color shared by all triangles")
    material: Optional[Dict[str, Any]] = Field(
        default=None,
        description="Material shared by all triangles"
    )

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        """Check name is not blank."""
        if not v or not v.strip():
            raise ValueError("Object name cannot be empty")
        return v.strip()

    @model_validator(mode="after")
    def check_source(self):
        """Exactly one of shape/mesh_file, and only parameters the shape accepts."""
        if (self.shape is None) == (self.mesh_file is None):
            raise ValueError(f"Object '{self.name}' needs exactly one of 'shape' or 'mesh_file'")

        given = [p for p in ("length", "width", "height", "ratio", "n")
                 if getattr(self, p) is not None]
        allowed = SHAPE_PARAMETERS[self.shape] if self.shape is not None else ()
        unexpected = [p for p in given if p not in allowed]
        if unexpected:
            source = self.shape.value if self.shape is not None else "mesh_file"
            raise ValueError(
                f"Object '{self.name}': {source} does not accept {unexpected}"
            )
        return self

    def shape_parameters(self) -> Dict[str, Any]:
        """Keyword arguments for the shape generator (unset ones use its defaults)."""
        if self.shape is None:
            return {}
        return {
            p: getattr(self, p)
            for p in SHAPE_PARAMETERS[self.shape]
            if getattr(self, p) is not None
        }


class OutputConfig(BaseModel):
    """Where to save the merged scene mesh."""
    model_config = ConfigDict(extra="forbid")

    filename: str = Field(..., description="Output mesh path")
    format: MeshFormatName = Field(default="STL_BINARY", description="Mesh file format")

    @field_validator('format', mode="before")
    @classmethod
    def normalize_format(cls, v):
        """Accept lower case format names."""
        return v.upper() if isinstance(v, str) else v


class SceneConfig(BaseModel):
    """Top-level scene description."""
    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    name: str = Field(..., description="Scene name")
    description: str = Field(default="", description="Scene description")
    precision: Literal["single", "double"] = Field(
        default="double",
        description="Floating-point precision of all meshes"
    )
    objects: List[ObjectConfig] = Field(
        ...,
        min_length=1,
        description="Objects merged into the scene, in order"
    )
    output: Optional[OutputConfig] = Field(default=None, description="Export settings")

    @field_validator('objects')
    @classmethod
    def check_unique_names(cls, v):
        """Ensure object names are unique."""
        names = [obj.name for obj in v]
        if len(names) != len(set(names)):
            duplicates = [name for name in names if names.count(name) > 1]
            raise ValueError(f"Duplicate object names: {set(duplicates)}")
        return v
