"""
Pinhole camera.

Maps normalized image coordinates (s, t) to primary rays through a view
plane one unit in front of the eye. There is no lens: every ray starts at
the eye point.
"""

from __future__ import annotations
import math
from .vec3 import Vec3, Point3
from .ray import Ray


class Camera:
    """A look-at camera with a vertical field of view."""

    def __init__(
        self,
        look_from: Point3,
        look_at: Point3,
        vup: Vec3,
        vfov: float,
        aspect_ratio: float
    ):
        """Build the camera frame and view plane.

        Args:
            look_from: Eye position
            look_at: Point at the center of the image
            vup: Approximate up direction; must not be parallel to the view axis
            vfov: Vertical field of view, degrees
            aspect_ratio: Image width divided by height
        """
        half_height = math.tan(math.radians(vfov) / 2)
        plane_height = 2.0 * half_height
        plane_width = aspect_ratio * plane_height

        self.look_from = look_from
        self.look_at = look_at
        self.vup = vup
        self.vfov = vfov
        self.aspect_ratio = aspect_ratio

        # Right-handed frame; the camera looks along -w
        self.w = (look_from - look_at).normalize()
        self.u = vup.cross(self.w).normalize()
        self.v = self.w.cross(self.u)

        self.origin = look_from
        self.horizontal = self.u * plane_width
        self.vertical = self.v * plane_height
        self.lower_left_corner = self.origin - self.horizontal / 2 - self.vertical / 2 - self.w

    def get_ray(self, s: float, t: float) -> Ray:
        """Primary ray through image position (s, t).

        (0, 0) is the bottom-left corner of the image and (1, 1) the top-right.
        The direction is not normalized: ``origin + direction`` lies on the
        view plane.
        """
        target = self.lower_left_corner + self.horizontal * s + self.vertical * t
        return Ray(self.origin, target - self.origin)

    def __repr__(self) -> str:
        return f"Camera(look_from={self.look_from}, look_at={self.look_at}, vfov={self.vfov})"
