"""
Frame sequences.

An animation is the same scene rendered once per frame with a phase that
runs from 0 towards 1: textured spheres spin by the phase (in turns) and the
camera can optionally circle its starting position.
"""

from __future__ import annotations
import logging
import math
from pathlib import Path
from typing import Callable, List, Optional, Union

from .camera import Camera
from .renderer import Renderer
from .shapes import Scene

logger = logging.getLogger(__name__)


def frame_paths(output: Union[str, Path], count: int) -> List[Path]:
    """Numbered output paths: ``out.png`` becomes ``out_000.png``, ``out_001.png``..."""
    output = Path(output)
    suffix = output.suffix or '.png'
    return [output.with_name(f"{output.stem}_{i:03d}{suffix}") for i in range(count)]


def orbit_camera(camera: Camera, phase: float, radius: float) -> Camera:
    """Move the eye around a circle in the camera's image plane.

    The circle is centered on the starting eye position; ``phase`` is in
    turns. The camera keeps looking at the same point.
    """
    angle = 2.0 * math.pi * phase
    offset = camera.u * (radius * math.cos(angle)) + camera.v * (radius * math.sin(angle))
    return Camera(
        look_from=camera.look_from + offset,
        look_at=camera.look_at,
        vup=camera.vup,
        vfov=camera.vfov,
        aspect_ratio=camera.aspect_ratio
    )


def render_animation(
    renderer: Renderer,
    scene: Scene,
    camera: Camera,
    output: Union[str, Path],
    frames: int,
    orbit_radius: float = 0.0,
    on_frame: Optional[Callable[[int, Path], None]] = None
) -> List[Path]:
    """Render and save ``frames`` images.

    Args:
        renderer: Renderer holding the configuration and worker pool
        scene: Scene at phase 0
        camera: Camera at phase 0
        output: Base output path; frame numbers are appended to the stem
        frames: Number of frames
        orbit_radius: Radius of the camera circle (0 keeps the camera still)
        on_frame: Called with (frame index, path) after each frame is saved

    Returns:
        The paths written
    """
    if frames <= 0:
        raise ValueError(f"frames must be positive, got {frames}")

    paths = frame_paths(output, frames)
    for i, path in enumerate(paths):
        phase = i / frames
        frame_camera = orbit_camera(camera, phase, orbit_radius) if orbit_radius else camera
        frame = renderer.render(scene.spun(phase), frame_camera)
        renderer.save_image(frame, path)
        logger.info("Frame %d/%d saved to %s", i + 1, frames, path)
        if on_frame:
            on_frame(i, path)
    return paths
