"""
spheretrace - A Python Path Tracer

A sphere-only Monte Carlo path tracer with:
- Lambertian, metal, glass, textured and emissive materials
- Solid, gradient and equirectangular texture skies
- Multi-threaded rendering with dynamically balanced row chunks
- Deterministic per-pixel sampling (identical images for any thread count)
- JSON/YAML scene files and frame sequences
"""

__version__ = "0.1.0"

from .vec3 import Vec3, Point3, Color
from .ray import Ray
from .shapes import Hittable, HitRecord, Sphere, Scene, spherical_uv
from .textures import TexturePixels
from .materials import (
    Material, Lambertian, Metal, Dielectric, Texture, DiffuseLight,
    Scattered, Emitted, Absorbed, ScatterResult
)
from .environment import (
    Environment, SolidColorEnvironment, GradientEnvironment, TextureEnvironment
)
from .camera import Camera
from .config import RenderConfig
from .integrator import trace, sample_pixel, render_rows, to_rgb8
from .framebuffer import FrameBuffer, FrameBufferError
from .scheduler import (
    Chunk, ChunkQueue, ChunkScheduler, ChunkTiming, RenderStats, RenderError,
    partition_rows, plan_chunk_count, render
)
from .renderer import Renderer, get_platform_info
from .scene_parser import SceneParser, SceneParseError, load_scene, parse_scene
from .animation import frame_paths, orbit_camera, render_animation
