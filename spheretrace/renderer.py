"""
Renderer module - the entry point drivers use.

Bundles a render configuration with a worker pool size and exposes:
- Multi-threaded chunked rendering
- Progress reporting
- Image output
"""

from __future__ import annotations
import os
import platform
from pathlib import Path
from typing import Callable, Optional, Union

from .camera import Camera
from .config import RenderConfig
from .framebuffer import FrameBuffer
from .scheduler import ChunkScheduler, RenderStats, DEFAULT_CHUNK_ROWS
from .shapes import Hittable


class Renderer:
    """Path tracing renderer with multi-threading support."""

    def __init__(
        self,
        config: Optional[RenderConfig] = None,
        num_workers: int = 0,
        num_chunks: Optional[int] = None,
        chunk_rows: int = DEFAULT_CHUNK_ROWS
    ):
        """Create a renderer with the given configuration.

        Args:
            config: Render configuration (uses defaults if None)
            num_workers: Worker threads (0 = auto-detect)
            num_chunks: Exact chunk count, or None to derive it from chunk_rows
            chunk_rows: Target rows per chunk
        """
        self.config = config if config else RenderConfig()
        self._scheduler = ChunkScheduler(num_workers, num_chunks, chunk_rows)

    @property
    def num_workers(self) -> int:
        return self._scheduler.num_workers

    @property
    def last_stats(self) -> Optional[RenderStats]:
        """Timings of the most recent successful render."""
        return self._scheduler.last_stats

    def set_progress_callback(self, callback: Callable[[float], None]) -> None:
        """Set a callback function for progress updates.

        Args:
            callback: Function that takes progress as float (0.0 to 1.0)
        """
        self._scheduler.progress_callback = callback

    def render(self, scene: Hittable, camera: Camera) -> FrameBuffer:
        """Render the scene and return the finished 8-bit frame.

        Args:
            scene: The scene to render (any Hittable)
            camera: The camera to render from

        Returns:
            FrameBuffer of shape (height, width, 3)
        """
        return self._scheduler.render(scene, camera, self.config)

    def save_image(self, frame: FrameBuffer, filename: Union[str, Path]) -> None:
        """Save image to file.

        Args:
            frame: A rendered frame
            filename: Output filename (extension determines format)
        """
        frame.save(filename)


def get_platform_info() -> dict:
    """Get information about the current platform.

    Returns:
        Dictionary with platform details
    """
    info = {
        'system': platform.system(),
        'machine': platform.machine(),
        'processor': platform.processor(),
        'python_version': platform.python_version(),
        'cpu_count': os.cpu_count(),
        'is_arm': platform.machine().lower() in ('arm64', 'aarch64'),
        'is_x86': platform.machine().lower() in ('x86_64', 'amd64', 'x86'),
    }
    return info
