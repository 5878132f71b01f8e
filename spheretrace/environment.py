"""
Skies: the radiance seen by rays that leave the scene.

- Solid color backgrounds
- Vertical gradient sky (the default white-to-light-blue sky)
- Equirectangular texture skies
"""

from __future__ import annotations
from abc import ABC, abstractmethod

from .vec3 import Vec3, Color
from .shapes import spherical_uv
from .textures import TexturePixels


class Environment(ABC):
    """Radiance as a function of direction only."""

    @abstractmethod
    def sample(self, direction: Vec3) -> Color:
        """Radiance arriving from ``direction`` (any non-zero length)."""


class SolidColorEnvironment(Environment):
    """The same color in every direction."""

    def __init__(self, color: Color = Color(0, 0, 0)):
        self.color = color

    def sample(self, direction: Vec3) -> Color:
        return self.color

    def __repr__(self) -> str:
        return f"SolidColorEnvironment({self.color})"


class GradientEnvironment(Environment):
    """Blend between two colors by the height of the direction."""

    def __init__(
        self,
        horizon_color: Color = Color(1, 1, 1),
        zenith_color: Color = Color(0.5, 0.7, 1.0)
    ):
        """
        Args:
            horizon_color: Seen looking straight down
            zenith_color: Seen looking straight up
        """
        self.horizon_color = horizon_color
        self.zenith_color = zenith_color

    def sample(self, direction: Vec3) -> Color:
        # Y-up: blend over the full [-1, 1] range of the unit direction
        t = 0.5 * (direction.normalize().y + 1.0)
        return self.horizon_color.lerp(self.zenith_color, max(0.0, min(1.0, t)))

    def __repr__(self) -> str:
        return f"GradientEnvironment({self.horizon_color} -> {self.zenith_color})"


class TextureEnvironment(Environment):
    """Equirectangular image surrounding the scene.

    Directions map to texture coordinates exactly like points on a sphere,
    so a texture that looks right on a globe looks right as a sky.
    """

    def __init__(self, pixels: TexturePixels, intensity: float = 1.0):
        """
        Args:
            pixels: Decoded equirectangular image
            intensity: Multiplier applied to every texel
        """
        self.pixels = pixels
        self.intensity = intensity

    def sample(self, direction: Vec3) -> Color:
        u, v = spherical_uv(direction.normalize())
        return self.pixels.sample(u, v) * self.intensity

    def __repr__(self) -> str:
        return f"TextureEnvironment({self.pixels!r}, intensity={self.intensity})"
