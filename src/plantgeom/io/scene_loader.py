"""
YAML scene description loader with validation.
"""

from __future__ import annotations
import logging
from pathlib import Path
from typing import Any, Callable, Dict, Optional
import numpy as np
import yaml

from ..config.schemas import SceneConfig, ObjectConfig, ShapeType
from ..geometry import primitives
from ..geometry.mesh import Mesh
from ..geometry.scene import Scene
from ..geometry.transforms import scale, rotatex, rotatey, rotatez, translate
from .mesh_io import MeshFormat, load_mesh, save_mesh

logger = logging.getLogger(__name__)


GENERATORS: Dict[ShapeType, Callable[..., Mesh]] = {
    ShapeType.TRIANGLE: primitives.triangle,
    ShapeType.RECTANGLE: primitives.rectangle,
    ShapeType.TRAPEZOID: primitives.trapezoid,
    ShapeType.ELLIPSE: primitives.ellipse,
    ShapeType.HOLLOW_CYLINDER: primitives.hollow_cylinder,
    ShapeType.SOLID_CYLINDER: primitives.solid_cylinder,
    ShapeType.HOLLOW_FRUSTUM: primitives.hollow_frustum,
    ShapeType.SOLID_FRUSTUM: primitives.solid_frustum,
    ShapeType.HOLLOW_CONE: primitives.hollow_cone,
    ShapeType.SOLID_CONE: primitives.solid_cone,
    ShapeType.SOLID_CUBE: primitives.solid_cube,
    ShapeType.HOLLOW_CUBE: primitives.hollow_cube,
}

# Material given to objects without one when other objects declare materials
DEFAULT_MATERIAL: Dict[str, Any] = {}


class SceneLoader:
    """Load and validate scenes from YAML description files."""

    @staticmethod
    def load(filepath: str | Path) -> tuple[Scene, SceneConfig]:
        """
        Load a scene description and build the Scene.

        Args:
            filepath: Path to YAML scene file

        Returns:
            Tuple of (Scene object, validated config)
        """
        filepath = Path(filepath)

        if not filepath.exists():
            raise FileNotFoundError(f"Scene file not found: {filepath}")

        config = SceneLoader._read_config(filepath)
        scene = SceneLoader.build(config, base_path=filepath.parent)

        logger.info(
            "Loaded scene '%s': %d objects, %d triangles",
            config.name, len(config.objects), scene.ntriangles
        )
        return scene, config

    @staticmethod
    def validate(filepath: str | Path) -> bool:
        """
        Validate a scene file without building meshes.

        Returns:
            True if valid, raises ValidationError otherwise
        """
        SceneLoader._read_config(Path(filepath))
        return True

    @staticmethod
    def build(config: SceneConfig, base_path: str | Path = ".") -> Scene:
        """
        Build a Scene from a validated config.

        Objects are added in order; each one is generated (or loaded), then
        scaled, rotated about x, y and z, and translated.

        When any object declares a color, objects without one get None for
        each of their triangles. When any object declares a material, objects
        without one get their own empty material mapping.

        Args:
            config: Validated scene config
            base_path: Base directory for resolving relative mesh paths

        Returns:
            Scene object
        """
        base_path = Path(base_path)
        scene = Scene(mesh=Mesh(config.precision))

        colored = any(obj.color is not None for obj in config.objects)
        with_materials = any(obj.material is not None for obj in config.objects)

        for obj in config.objects:
            mesh = SceneLoader._object_mesh(obj, config.precision, base_path)
            SceneLoader._place(mesh, obj)

            colors = None
            if colored:
                color = tuple(obj.color) if isinstance(obj.color, list) else obj.color
                colors = [color] * mesh.ntriangles

            material = obj.material
            if with_materials and material is None:
                material = dict(DEFAULT_MATERIAL)

            scene.add(mesh, colors=colors, material=material)
            logger.debug("Added '%s' (%d triangles)", obj.name, mesh.ntriangles)

        return scene

    @staticmethod
    def export(scene: Scene, config: SceneConfig,
               base_path: str | Path = ".") -> Optional[Path]:
        """
        Save the scene mesh as requested by the `output` section.

        Returns:
            Path of the written file, or None when the config has no output
        """
        if config.output is None:
            return None
        target = Path(base_path) / config.output.filename
        return save_mesh(scene.mesh, target, MeshFormat[config.output.format])

    @staticmethod
    def _read_config(filepath: Path) -> SceneConfig:
        with open(filepath, 'r') as f:
            raw_config = yaml.safe_load(f)
        if not isinstance(raw_config, dict):
            raise ValueError(f"Scene file {filepath} must contain a mapping")
        return SceneConfig(**raw_config)

    @staticmethod
    def _object_mesh(obj: ObjectConfig, precision: str, base_path: Path) -> Mesh:
        if obj.mesh_file is not None:
            return load_mesh(base_path / obj.mesh_file, precision=precision)
        generator = GENERATORS[obj.shape]
        return generator(**obj.shape_parameters(), precision=precision)

    @staticmethod
    def _place(mesh: Mesh, obj: ObjectConfig) -> None:
        trans = obj.transform

        if trans.scale != (1.0, 1.0, 1.0):
            scale(mesh, trans.scale)

        rx, ry, rz = (np.deg2rad(angle) for angle in trans.rotation_deg)
        if rx:
            rotatex(mesh, rx)
        if ry:
            rotatey(mesh, ry)
        if rz:
            rotatez(mesh, rz)

        if trans.translation != (0.0, 0.0, 0.0):
            translate(mesh, trans.translation)
