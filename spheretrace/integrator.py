"""
Path tracing integrator.

Implements:
- Depth-bounded recursive path tracing (no Russian roulette)
- Supersampled antialiasing with per-pixel random generators
- Gamma 2 correction and 8-bit quantization
"""

from __future__ import annotations
import numpy as np

from .vec3 import Color
from .ray import Ray
from .camera import Camera
from .config import RenderConfig
from .environment import Environment
from .materials import Scattered, Emitted
from .shapes import Hittable

# Ignore hits this close to the ray origin to avoid shadow acne
T_MIN = 0.001

BLACK = Color(0.0, 0.0, 0.0)


def trace(ray: Ray, scene: Hittable, sky: Environment, depth: int, rng: np.random.Generator) -> Color:
    """Compute the radiance arriving along a ray.

    Args:
        ray: The ray to trace
        scene: The scene to trace against
        sky: Environment seen by rays that miss every object
        depth: Remaining path segments; 0 contributes black
        rng: Random generator owned by the current pixel

    Returns:
        The computed color for this ray
    """
    if depth <= 0:
        return BLACK

    hit = scene.hit(ray, T_MIN, float('inf'))
    if hit is None:
        return sky.sample(ray.direction)

    result = hit.material.scatter(ray, hit, rng)
    if isinstance(result, Scattered):
        return result.attenuation * trace(result.ray, scene, sky, depth - 1, rng)
    if isinstance(result, Emitted):
        return result.color
    return BLACK


def pixel_rng(seed: int, x: int, y: int) -> np.random.Generator:
    """Random generator for one pixel, independent of how the image is split."""
    return np.random.default_rng([seed, y, x])


def sample_pixel(x: int, y: int, scene: Hittable, camera: Camera, config: RenderConfig) -> np.ndarray:
    """Average linear radiance of one pixel.

    Row 0 is the top of the image. Each sample jitters its position inside
    the pixel footprint.

    Returns:
        Array of 3 floats
    """
    rng = pixel_rng(config.seed, x, y)
    total = np.zeros(3, dtype=np.float64)

    for _ in range(config.samples_per_pixel):
        jitter = rng.random(2)
        s = (x + jitter[0]) / config.width
        t = 1.0 - (y + jitter[1]) / config.height
        color = trace(camera.get_ray(s, t), scene, config.sky, config.max_depth, rng)
        total += color.to_array()

    average = total / config.samples_per_pixel
    if not np.all(np.isfinite(average)):
        raise FloatingPointError(f"Non-finite radiance {average} at pixel ({x}, {y})")
    return average


def to_rgb8(linear: np.ndarray) -> np.ndarray:
    """Gamma-correct (gamma 2), clamp to [0, 1] and quantize to uint8."""
    corrected = np.sqrt(np.clip(linear, 0.0, None))
    return (np.clip(corrected, 0.0, 1.0) * 255).astype(np.uint8)


def render_rows(
    scene: Hittable,
    camera: Camera,
    config: RenderConfig,
    row_start: int,
    row_end: int
) -> np.ndarray:
    """Render image rows [row_start, row_end).

    Returns:
        uint8 array of shape (row_end - row_start, width, 3)
    """
    linear = np.zeros((row_end - row_start, config.width, 3), dtype=np.float64)

    for j, y in enumerate(range(row_start, row_end)):
        for x in range(config.width):
            linear[j, x] = sample_pixel(x, y, scene, camera, config)

    return to_rgb8(linear)
