"""
Decoded texture images.

Textures are loaded fully into memory before a render starts and are only
read afterwards, so one buffer can be shared by every worker thread.
Sampling never fails: u wraps around, v is clamped, coordinates that are
not finite fall back to 0, and non-finite texels are replaced on load.
"""

from __future__ import annotations
from pathlib import Path
from typing import Optional, Union
import math

import numpy as np
from PIL import Image

from .vec3 import Color


class TexturePixels:
    """An RGB pixel buffer with values in [0, 1], row 0 at the top."""

    __slots__ = ('_data', 'source')

    def __init__(self, data: np.ndarray, source: Optional[str] = None):
        """Wrap a decoded image.

        Args:
            data: Array of shape (height, width, 3); uint8 arrays are scaled
                to [0, 1], float arrays are used as is, except that
                NaN becomes 0, +inf 1 and -inf 0
            source: Path the pixels were loaded from, if any
        """
        data = np.asarray(data)
        if data.ndim != 3 or data.shape[2] != 3 or data.shape[0] == 0 or data.shape[1] == 0:
            raise ValueError(f"Texture data must have shape (height, width, 3), got {data.shape}")
        if data.dtype == np.uint8:
            data = data.astype(np.float64) / 255.0
        else:
            data = data.astype(np.float64)
        data = np.nan_to_num(data, nan=0.0, posinf=1.0, neginf=0.0)
        data.flags.writeable = False
        self._data = data
        self.source = source

    @classmethod
    def load(cls, filename: Union[str, Path]) -> TexturePixels:
        """Load a texture from an image file.

        Args:
            filename: Path to any image format Pillow can decode

        Returns:
            The decoded pixels
        """
        path = Path(filename)
        if not path.exists():
            raise FileNotFoundError(f"Texture file not found: {filename}")

        with Image.open(path) as img:
            pixels = np.array(img.convert('RGB'), dtype=np.uint8)
        return cls(pixels, source=str(filename))

    @property
    def width(self) -> int:
        return int(self._data.shape[1])

    @property
    def height(self) -> int:
        return int(self._data.shape[0])

    @property
    def data(self) -> np.ndarray:
        """Read-only view of the pixel array."""
        return self._data

    def sample(self, u: float, v: float) -> Color:
        """Nearest-neighbour lookup.

        Args:
            u: Horizontal coordinate, wrapped into [0, 1)
            v: Vertical coordinate, clamped to [0, 1] (1 is the top row)

        Returns:
            Color at this location
        """
        if not math.isfinite(u):
            u = 0.0
        if not math.isfinite(v):
            v = 0.0

        u = u % 1.0
        v = max(0.0, min(1.0, v))

        # Flip v to match image coordinates (image y=0 is top)
        i = min(int(u * self.width), self.width - 1)
        j = min(int((1.0 - v) * self.height), self.height - 1)

        return Color.from_array(self._data[j, i])

    def __repr__(self) -> str:
        return f"TexturePixels({self.width}x{self.height}, source={self.source!r})"
