"""
Spheres and scenes.

A scene is an ordered list of spheres tested one by one for every ray; there
is no acceleration structure.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterable, Iterator, List, Optional, Tuple, TYPE_CHECKING
import math

from .vec3 import Vec3, Point3
from .ray import Ray

if TYPE_CHECKING:
    from .materials import Material


def spherical_uv(unit: Vec3) -> Tuple[float, float]:
    """Equirectangular (u, v) of a unit direction.

    u runs once around the Y axis starting from -X; v runs from the south
    pole (0) to the north pole (1).
    """
    theta = math.acos(max(-1.0, min(1.0, -unit.y)))
    phi = math.atan2(-unit.z, unit.x) + math.pi
    return phi / (2 * math.pi), theta / math.pi


@dataclass
class HitRecord:
    """Where and how a ray met a surface.

    ``normal`` always points out of the object; ``front_face`` tells whether
    the ray came from outside.
    """
    point: Point3
    normal: Vec3
    t: float
    front_face: bool
    material: Material
    u: float = 0.0
    v: float = 0.0

    @property
    def face_normal(self) -> Vec3:
        """The normal flipped to point against the incoming ray."""
        return self.normal if self.front_face else -self.normal


class Hittable(ABC):
    """Anything a ray can intersect."""

    @abstractmethod
    def hit(self, ray: Ray, t_min: float, t_max: float) -> Optional[HitRecord]:
        """Nearest intersection with ``t_min <= t < t_max``, or None.

        ``t_min`` keeps a ray from re-hitting the surface it just left.
        """


class Sphere(Hittable):
    """A sphere with a single material."""

    def __init__(self, center: Point3, radius: float, material: Material):
        """
        Args:
            center: Sphere center
            radius: Sphere radius; non-positive radii never hit
            material: Surface material, shared by reference
        """
        self.center = center
        self.radius = radius
        self.material = material

    def hit(self, ray: Ray, t_min: float, t_max: float) -> Optional[HitRecord]:
        """Solve |O + tD - C|² = r² for t, using the half-b form of the quadratic."""
        if not self.radius > 0:
            return None

        oc = ray.origin - self.center
        a = ray.direction.length_squared()
        if a == 0:
            return None
        half_b = oc.dot(ray.direction)
        c = oc.length_squared() - self.radius * self.radius

        discriminant = half_b * half_b - a * c
        if discriminant < 0:
            return None
        sqrtd = math.sqrt(discriminant)

        # Near root first, far root when the near one is out of range
        for root in ((-half_b - sqrtd) / a, (-half_b + sqrtd) / a):
            if t_min <= root < t_max:
                break
        else:
            return None

        point = ray.at(root)
        outward_normal = (point - self.center) / self.radius
        u, v = spherical_uv(outward_normal)

        return HitRecord(
            point=point,
            normal=outward_normal,
            t=root,
            front_face=ray.direction.dot(outward_normal) < 0,
            material=self.material,
            u=u,
            v=v
        )

    def with_material(self, material: Material) -> Sphere:
        """Return a copy of this sphere using a different material."""
        return Sphere(self.center, self.radius, material)

    def __repr__(self) -> str:
        return f"Sphere(center={self.center}, radius={self.radius})"


class Scene(Hittable):
    """An ordered, immutable collection of hittable objects."""

    def __init__(self, objects: Optional[Iterable[Hittable]] = None):
        self.objects: Tuple[Hittable, ...] = tuple(objects) if objects is not None else ()

    def hit(self, ray: Ray, t_min: float, t_max: float) -> Optional[HitRecord]:
        """Find the closest intersection among all objects.

        The closest t found so far becomes the exclusive upper bound for the
        remaining objects, so ties keep the earlier hit.
        """
        closest_hit: Optional[HitRecord] = None
        closest_t = t_max

        for obj in self.objects:
            hit_record = obj.hit(ray, t_min, closest_t)
            if hit_record is not None:
                closest_hit = hit_record
                closest_t = hit_record.t

        return closest_hit

    def lights(self) -> List[Hittable]:
        """Return the objects whose material emits light."""
        from .materials import DiffuseLight
        return [
            obj for obj in self.objects
            if isinstance(getattr(obj, 'material', None), DiffuseLight)
        ]

    def spun(self, offset: float) -> Scene:
        """Return a scene whose texture materials are rotated by ``offset`` turns."""
        from .materials import Texture
        objects = []
        for obj in self.objects:
            material = getattr(obj, 'material', None)
            if isinstance(obj, Sphere) and isinstance(material, Texture):
                obj = obj.with_material(material.rotated(material.h_offset + offset))
            objects.append(obj)
        return Scene(objects)

    def __len__(self) -> int:
        return len(self.objects)

    def __iter__(self) -> Iterator[Hittable]:
        return iter(self.objects)

    def __repr__(self) -> str:
        return f"Scene({len(self.objects)} objects)"
