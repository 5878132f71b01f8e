"""Render configuration."""

from __future__ import annotations
from dataclasses import dataclass, field, replace

from .environment import Environment, GradientEnvironment


@dataclass(frozen=True)
class RenderConfig:
    """Everything that determines the pixels of a render.

    Worker count and chunking are deliberately absent: they change how long a
    render takes, never what it produces.
    """
    width: int = 800
    height: int = 600
    samples_per_pixel: int = 16
    max_depth: int = 50
    sky: Environment = field(default_factory=GradientEnvironment)
    seed: int = 0

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Image size must be positive, got {self.width}x{self.height}")
        if self.samples_per_pixel <= 0:
            raise ValueError(f"samples_per_pixel must be positive, got {self.samples_per_pixel}")
        if self.max_depth < 0:
            raise ValueError(f"max_depth must not be negative, got {self.max_depth}")
        if self.seed < 0:
            raise ValueError(f"seed must not be negative, got {self.seed}")

    @property
    def aspect_ratio(self) -> float:
        return self.width / self.height

    def with_overrides(self, **changes) -> RenderConfig:
        """Return a copy with the given fields replaced (None values are ignored)."""
        return replace(self, **{k: v for k, v in changes.items() if v is not None})
