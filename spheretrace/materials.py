"""
Materials and their scattering behavior.

Implements:
- Lambertian diffuse
- Metal (specular reflection with fuzz)
- Dielectric (glass, water - with refraction)
- Texture (image-mapped diffuse)
- DiffuseLight (constant emission)

Every material answers one question through `scatter`: given an incoming ray
and a hit, does the path continue (`Scattered`), end at a light
(`Emitted`), or end in darkness (`Absorbed`)?
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Union
import math

import numpy as np

from .vec3 import Vec3, Color
from .ray import Ray
from .shapes import HitRecord
from .textures import TexturePixels


@dataclass(frozen=True)
class Scattered:
    """The path continues along `ray`, weighted by `attenuation`."""
    ray: Ray
    attenuation: Color


@dataclass(frozen=True)
class Emitted:
    """The path ends at a light source of the given color."""
    color: Color


@dataclass(frozen=True)
class Absorbed:
    """The path ends without contributing light."""


ABSORBED = Absorbed()

ScatterResult = Union[Scattered, Emitted, Absorbed]


def _diffuse_direction(hit: HitRecord, rng: np.random.Generator) -> Vec3:
    normal = hit.face_normal
    scatter_direction = normal + Vec3.random_unit_vector(rng)

    # Catch degenerate scatter direction
    if scatter_direction.near_zero():
        scatter_direction = normal
    return scatter_direction


class Material(ABC):
    """Abstract base class for materials.

    Materials are read-only once constructed and may be shared between
    threads.
    """

    @abstractmethod
    def scatter(self, ray_in: Ray, hit: HitRecord, rng: np.random.Generator) -> ScatterResult:
        """Decide what happens to a ray that struck this material.

        Args:
            ray_in: The incoming ray
            hit: Intersection details (point, outward normal, uv)
            rng: Random generator owned by the current pixel

        Returns:
            Scattered, Emitted or Absorbed
        """
        pass


class Lambertian(Material):
    """Diffuse material with Lambertian (ideal matte) scattering."""

    def __init__(self, albedo: Color):
        """Create a Lambertian material.

        Args:
            albedo: The base color (RGB, each component 0-1)
        """
        self.albedo = albedo

    def scatter(self, ray_in: Ray, hit: HitRecord, rng: np.random.Generator) -> ScatterResult:
        scattered = Ray(hit.point, _diffuse_direction(hit, rng))
        return Scattered(ray=scattered, attenuation=self.albedo)

    def __repr__(self) -> str:
        return f"Lambertian(albedo={self.albedo})"


class Metal(Material):
    """Metallic material with specular reflection."""

    def __init__(self, albedo: Color, fuzz: float = 0.0):
        """Create a metal material.

        Args:
            albedo: The reflection color
            fuzz: Radius of the random perturbation (0 = mirror, 1 = very rough)
        """
        self.albedo = albedo
        self.fuzz = max(0.0, min(fuzz, 1.0))

    def scatter(self, ray_in: Ray, hit: HitRecord, rng: np.random.Generator) -> ScatterResult:
        normal = hit.face_normal
        reflected = ray_in.direction.normalize().reflect(normal)

        if self.fuzz > 0:
            reflected = reflected + Vec3.random_in_unit_sphere(rng) * self.fuzz

        # Only scatter if reflection is in the correct hemisphere
        if reflected.dot(normal) <= 0:
            return ABSORBED
        return Scattered(ray=Ray(hit.point, reflected), attenuation=self.albedo)

    def __repr__(self) -> str:
        return f"Metal(albedo={self.albedo}, fuzz={self.fuzz})"


class Dielectric(Material):
    """Dielectric (glass-like) material with refraction."""

    WHITE = Color(1.0, 1.0, 1.0)

    def __init__(self, refractive_index: float = 1.5):
        """Create a dielectric material.

        Args:
            refractive_index: Index of refraction (1.0 = air, 1.5 = glass, 2.4 = diamond)
        """
        self.refractive_index = refractive_index

    def scatter(self, ray_in: Ray, hit: HitRecord, rng: np.random.Generator) -> ScatterResult:
        unit_direction = ray_in.direction.normalize()

        # Entering when travelling against the outward normal
        if unit_direction.dot(hit.normal) < 0:
            normal = hit.normal
            refraction_ratio = 1.0 / self.refractive_index
        else:
            normal = -hit.normal
            refraction_ratio = self.refractive_index

        cos_theta = min(-unit_direction.dot(normal), 1.0)
        sin_theta = math.sqrt(max(0.0, 1.0 - cos_theta * cos_theta))

        cannot_refract = refraction_ratio * sin_theta > 1.0

        # Use Schlick's approximation for reflectance
        if cannot_refract or self._reflectance(cos_theta, refraction_ratio) > rng.random():
            direction = unit_direction.reflect(normal)
        else:
            direction = unit_direction.refract(normal, refraction_ratio)

        return Scattered(ray=Ray(hit.point, direction), attenuation=self.WHITE)

    @staticmethod
    def _reflectance(cosine: float, ref_idx: float) -> float:
        """Schlick's approximation for reflectance."""
        r0 = (1 - ref_idx) / (1 + ref_idx)
        r0 = r0 * r0
        return r0 + (1 - r0) * pow(1 - cosine, 5)

    def __repr__(self) -> str:
        return f"Dielectric(refractive_index={self.refractive_index})"


class Texture(Material):
    """Diffuse material whose albedo comes from an image."""

    def __init__(self, albedo: Color, pixels: TexturePixels, h_offset: float = 0.0):
        """Create a textured Lambertian material.

        Args:
            albedo: Tint multiplied into every texel
            pixels: Decoded texture image
            h_offset: Longitudinal rotation in turns (1.0 = a full revolution)
        """
        self.albedo = albedo
        self.pixels = pixels
        self.h_offset = h_offset

    @property
    def width(self) -> int:
        return self.pixels.width

    @property
    def height(self) -> int:
        return self.pixels.height

    def albedo_at(self, u: float, v: float) -> Color:
        """Tinted texel at the given texture coordinates."""
        return self.pixels.sample(u + self.h_offset, v) * self.albedo

    def rotated(self, h_offset: float) -> Texture:
        """Return the same texture with a different horizontal offset."""
        return Texture(self.albedo, self.pixels, h_offset)

    def scatter(self, ray_in: Ray, hit: HitRecord, rng: np.random.Generator) -> ScatterResult:
        scattered = Ray(hit.point, _diffuse_direction(hit, rng))
        return Scattered(ray=scattered, attenuation=self.albedo_at(hit.u, hit.v))

    def __repr__(self) -> str:
        return f"Texture(albedo={self.albedo}, pixels={self.pixels!r}, h_offset={self.h_offset})"


class DiffuseLight(Material):
    """Light-emitting material."""

    def __init__(self, emit: Color = Color(1.0, 1.0, 1.0)):
        """Create an emissive material.

        Args:
            emit: The emitted radiance
        """
        self.emit = emit

    def scatter(self, ray_in: Ray, hit: HitRecord, rng: np.random.Generator) -> ScatterResult:
        return Emitted(self.emit)

    def __repr__(self) -> str:
        return f"DiffuseLight(emit={self.emit})"
