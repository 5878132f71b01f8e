"""Rays: P(t) = origin + t * direction."""

from __future__ import annotations
from .vec3 import Vec3, Point3


class Ray:
    """A half-line. Rays are never mutated; each bounce creates a new one."""

    __slots__ = ('origin', 'direction')

    def __init__(self, origin: Point3, direction: Vec3):
        """
        Args:
            origin: Start point
            direction: Direction, not necessarily unit length
        """
        self.origin = origin
        self.direction = direction

    def at(self, t: float) -> Point3:
        """Point at parameter ``t`` (in units of the direction's length)."""
        return self.origin + self.direction * t

    def __repr__(self) -> str:
        return f"Ray(origin={self.origin}, direction={self.direction})"
