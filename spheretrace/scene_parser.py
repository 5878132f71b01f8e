"""
Scene description parser.

Reads JSON or YAML scene files into a Scene, Camera and RenderConfig. All
validation happens here, before any rendering starts.

Example scene file:
```yaml
width: 800
height: 600
samples_per_pixel: 64
max_depth: 50
sky:
  texture: data/stars.jpg
  intensity: 0.7

camera:
  look_from: [13, 2, 3]
  look_at: [0, 0, 0]
  vup: [0, 1, 0]
  vfov: 20
  aspect: 1.3333

objects:
  - center: [0, -1000, 0]
    radius: 1000
    material:
      Lambertian:
        albedo: [0.5, 0.5, 0.5]

  - center: {x: 0, y: 1, z: 0}
    radius: 1
    material:
      type: dielectric
      refractive_index: 1.5

  - center: [0, 1, -3]
    radius: 1
    material:
      type: texture
      albedo: [1, 1, 1]
      texture: data/earth.jpg
      h_offset: 0.25
```
"""

from __future__ import annotations
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

import yaml

from .vec3 import Vec3, Color
from .camera import Camera
from .config import RenderConfig
from .environment import Environment, GradientEnvironment, SolidColorEnvironment, TextureEnvironment
from .materials import Material, Lambertian, Metal, Dielectric, Texture, DiffuseLight
from .shapes import Scene, Sphere
from .textures import TexturePixels

logger = logging.getLogger(__name__)

CAMERA_KEYS = ('look_from', 'look_at', 'vup', 'vfov', 'aspect')


class SceneParseError(Exception):
    """Error during scene parsing."""
    pass


class SceneParser:
    """Parser for scene description files."""

    def __init__(self, base_dir: Optional[Union[str, Path]] = None):
        """Create a parser.

        Args:
            base_dir: Directory that relative texture paths are resolved against
        """
        self.base_dir = Path(base_dir) if base_dir is not None else Path('.')
        self._textures: Dict[Path, TexturePixels] = {}

    def parse_file(self, filepath: Union[str, Path]) -> Tuple[Scene, Camera, RenderConfig]:
        """Parse a scene file.

        Args:
            filepath: Path to the scene file (YAML or JSON)

        Returns:
            Tuple of (scene, camera, config)
        """
        path = Path(filepath)
        if not path.exists():
            raise SceneParseError(f"Scene file not found: {filepath}")

        content = path.read_text()
        try:
            if path.suffix == '.json':
                data = json.loads(content)
            else:
                # YAML is a superset of JSON
                data = yaml.safe_load(content)
        except (json.JSONDecodeError, yaml.YAMLError) as exc:
            raise SceneParseError(f"Cannot read scene file {filepath}: {exc}") from exc

        self.base_dir = path.parent
        return self.parse_dict(data)

    def parse_dict(self, data: Dict[str, Any]) -> Tuple[Scene, Camera, RenderConfig]:
        """Parse a scene from a dictionary.

        Args:
            data: Scene description dictionary

        Returns:
            Tuple of (scene, camera, config)
        """
        if not isinstance(data, dict):
            raise SceneParseError(f"Scene must be a mapping, got {type(data).__name__}")

        for key in ('width', 'height', 'samples_per_pixel', 'max_depth', 'camera'):
            if key not in data:
                raise SceneParseError(f"Missing required key: {key}")

        try:
            config = RenderConfig(
                width=int(data['width']),
                height=int(data['height']),
                samples_per_pixel=int(data['samples_per_pixel']),
                max_depth=int(data['max_depth']),
                sky=self._parse_sky(data.get('sky')),
                seed=int(data.get('seed', 0))
            )
        except (TypeError, ValueError) as exc:
            raise SceneParseError(f"Invalid render settings: {exc}") from exc

        camera = self._parse_camera(data['camera'])
        scene = Scene(self._parse_object(obj, i) for i, obj in enumerate(data.get('objects') or []))
        logger.info("Loaded scene: %d objects, %d lights", len(scene), len(scene.lights()))
        return scene, camera, config

    def _parse_vec3(self, data: Any) -> Vec3:
        """Parse a Vec3 from a list or an x/y/z mapping."""
        try:
            if isinstance(data, (list, tuple)):
                if len(data) != 3:
                    raise SceneParseError(f"Vec3 must have 3 components, got {len(data)}")
                return Vec3(float(data[0]), float(data[1]), float(data[2]))
            elif isinstance(data, dict):
                return Vec3(float(data['x']), float(data['y']), float(data['z']))
        except (KeyError, TypeError, ValueError) as exc:
            raise SceneParseError(f"Cannot parse Vec3 from: {data}") from exc
        raise SceneParseError(f"Cannot parse Vec3 from: {data}")

    def _parse_color(self, data: Any) -> Color:
        """Parse a Color from a list, an r/g/b mapping or a hex string."""
        if isinstance(data, dict) and 'r' in data:
            try:
                return Color(float(data['r']), float(data['g']), float(data['b']))
            except (KeyError, TypeError, ValueError) as exc:
                raise SceneParseError(f"Cannot parse Color from: {data}") from exc
        if isinstance(data, str):
            hex_color = data[1:] if data.startswith('#') else ''
            if len(hex_color) == 6:
                try:
                    r = int(hex_color[0:2], 16) / 255.0
                    g = int(hex_color[2:4], 16) / 255.0
                    b = int(hex_color[4:6], 16) / 255.0
                except ValueError as exc:
                    raise SceneParseError(f"Cannot parse color from string: {data}") from exc
                return Color(r, g, b)
            raise SceneParseError(f"Cannot parse color from string: {data}")
        return self._parse_vec3(data)

    def _load_texture(self, reference: Any) -> TexturePixels:
        if not isinstance(reference, str) or not reference:
            raise SceneParseError(f"Invalid texture path: {reference!r}")
        path = Path(reference)
        if not path.is_absolute():
            path = self.base_dir / path
        if path not in self._textures:
            try:
                self._textures[path] = TexturePixels.load(path)
            except (OSError, ValueError) as exc:
                raise SceneParseError(f"Cannot load texture {reference}: {exc}") from exc
        return self._textures[path]

    def _parse_sky(self, sky_data: Any) -> Environment:
        """Parse the sky.

        No sky at all renders black; an empty mapping or an empty texture name
        selects the white to light blue gradient.
        """
        if sky_data is None:
            return SolidColorEnvironment(Color(0, 0, 0))
        if not sky_data:
            return GradientEnvironment()
        if not isinstance(sky_data, dict):
            raise SceneParseError(f"Invalid sky: {sky_data}")
        if 'color' in sky_data:
            return SolidColorEnvironment(self._parse_color(sky_data['color']))
        if sky_data.get('texture'):
            intensity = float(sky_data.get('intensity', 1.0))
            return TextureEnvironment(self._load_texture(sky_data['texture']), intensity)
        return GradientEnvironment()

    def _parse_material(self, mat_data: Any) -> Material:
        """Parse a material.

        Accepts either ``{"type": "metal", ...}`` or the externally tagged
        form ``{"Metal": {...}}``.
        """
        if not isinstance(mat_data, dict):
            raise SceneParseError(f"Invalid material: {mat_data}")

        if 'type' in mat_data:
            mat_type = str(mat_data['type'])
            params = mat_data
        elif len(mat_data) == 1:
            mat_type, params = next(iter(mat_data.items()))
            params = params or {}
        else:
            raise SceneParseError(f"Cannot determine material type of: {mat_data}")

        mat_type = mat_type.lower()

        try:
            if mat_type == 'lambertian':
                return Lambertian(self._parse_color(params['albedo']))

            elif mat_type == 'metal':
                return Metal(self._parse_color(params['albedo']), float(params.get('fuzz', 0.0)))

            elif mat_type in ('dielectric', 'glass'):
                for key in ('refractive_index', 'index_of_refraction', 'ior'):
                    if key in params:
                        return Dielectric(float(params[key]))
                return Dielectric()

            elif mat_type == 'texture':
                albedo = self._parse_color(params.get('albedo', [1, 1, 1]))
                reference = params.get('texture', params.get('pixels'))
                h_offset = float(params.get('h_offset', 0.0))
                return Texture(albedo, self._load_texture(reference), h_offset)

            elif mat_type in ('light', 'diffuse_light', 'diffuselight'):
                return DiffuseLight(self._parse_color(params.get('emit', [1, 1, 1])))

        except KeyError as exc:
            raise SceneParseError(f"Material {mat_type} is missing {exc}") from exc
        except (TypeError, ValueError) as exc:
            raise SceneParseError(f"Invalid {mat_type} material: {exc}") from exc

        raise SceneParseError(f"Unknown material type: {mat_type}")

    def _parse_object(self, obj_data: Any, index: int) -> Sphere:
        """Parse one sphere."""
        if not isinstance(obj_data, dict):
            raise SceneParseError(f"Object {index} must be a mapping")
        obj_type = str(obj_data.get('type', 'sphere')).lower()
        if obj_type != 'sphere':
            raise SceneParseError(f"Unknown object type: {obj_type}")

        for key in ('center', 'radius', 'material'):
            if key not in obj_data:
                raise SceneParseError(f"Object {index} is missing {key}")

        center = self._parse_vec3(obj_data['center'])
        try:
            radius = float(obj_data['radius'])
        except (TypeError, ValueError) as exc:
            raise SceneParseError(f"Object {index} has invalid radius: {obj_data['radius']}") from exc
        if radius <= 0:
            logger.warning("Object %d has non-positive radius %g and will never be hit", index, radius)

        return Sphere(center, radius, self._parse_material(obj_data['material']))

    def _parse_camera(self, camera_data: Any) -> Camera:
        """Parse camera section; every field is required."""
        if not isinstance(camera_data, dict):
            raise SceneParseError(f"Invalid camera: {camera_data}")
        missing = [key for key in CAMERA_KEYS if key not in camera_data]
        if missing:
            raise SceneParseError(f"Camera is missing: {', '.join(missing)}")

        try:
            vfov = float(camera_data['vfov'])
            aspect = float(camera_data['aspect'])
        except (TypeError, ValueError) as exc:
            raise SceneParseError(f"Invalid camera: {exc}") from exc
        if not 0 < vfov < 180:
            raise SceneParseError(f"Camera vfov must be in (0, 180), got {vfov}")
        if aspect <= 0:
            raise SceneParseError(f"Camera aspect must be positive, got {aspect}")

        return Camera(
            look_from=self._parse_vec3(camera_data['look_from']),
            look_at=self._parse_vec3(camera_data['look_at']),
            vup=self._parse_vec3(camera_data['vup']),
            vfov=vfov,
            aspect_ratio=aspect
        )


def load_scene(filepath: Union[str, Path]) -> Tuple[Scene, Camera, RenderConfig]:
    """Convenience function to load a scene file.

    Args:
        filepath: Path to the scene file

    Returns:
        Tuple of (scene, camera, config)
    """
    parser = SceneParser()
    return parser.parse_file(filepath)


def parse_scene(
    data: Dict[str, Any],
    base_dir: Optional[Union[str, Path]] = None
) -> Tuple[Scene, Camera, RenderConfig]:
    """Convenience function to parse a scene from a dictionary.

    Args:
        data: Scene description dictionary
        base_dir: Directory for relative texture paths

    Returns:
        Tuple of (scene, camera, config)
    """
    parser = SceneParser(base_dir)
    return parser.parse_dict(data)
