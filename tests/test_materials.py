"""Tests for material system."""

import pytest
import numpy as np

from spheretrace.vec3 import Vec3, Point3, Color
from spheretrace.ray import Ray
from spheretrace.shapes import HitRecord
from spheretrace.textures import TexturePixels
from spheretrace.materials import (
    Lambertian, Metal, Dielectric, Texture, DiffuseLight,
    Scattered, Emitted, Absorbed, ABSORBED
)


def make_hit(ray, point=Point3(0, 0, 0), normal=Vec3(0, 1, 0), u=0.0, v=0.0):
    """A hit whose front_face is derived from the ray, as Sphere.hit does."""
    return HitRecord(
        point=point,
        normal=normal,
        t=1.0,
        front_face=ray.direction.dot(normal) < 0,
        material=Lambertian(Color(0.5, 0.5, 0.5)),
        u=u,
        v=v
    )


def rngs(count=200):
    return (np.random.default_rng([7, i]) for i in range(count))


class TestLambertian:
    """Test Lambertian diffuse material."""

    def test_always_scatters_from_hit_point(self):
        mat = Lambertian(Color(0.5, 0.5, 0.5))
        ray_in = Ray(Point3(0, 5, 0), Vec3(0, -1, 0))
        hit = make_hit(ray_in, point=Point3(1, 0, 2))

        for rng in rngs():
            result = mat.scatter(ray_in, hit, rng)
            assert isinstance(result, Scattered)
            assert result.ray.origin == Point3(1, 0, 2)
            assert result.ray.direction.dot(hit.normal) >= 0
            assert not result.ray.direction.near_zero()

    def test_back_face_scatters_inward(self):
        mat = Lambertian(Color(0.5, 0.5, 0.5))
        ray_in = Ray(Point3(0, -5, 0), Vec3(0, 1, 0))
        hit = make_hit(ray_in)
        assert hit.front_face is False

        for rng in rngs(50):
            result = mat.scatter(ray_in, hit, rng)
            assert result.ray.direction.dot(hit.normal) <= 0

    def test_attenuation_is_albedo(self):
        albedo = Color(0.8, 0.2, 0.3)
        ray_in = Ray(Point3(0, 5, 0), Vec3(0, -1, 0))
        result = Lambertian(albedo).scatter(ray_in, make_hit(ray_in), np.random.default_rng(0))
        assert result.attenuation == albedo

    def test_never_produces_nan(self):
        mat = Lambertian(Color(0.5, 0.5, 0.5))
        for rng in rngs(100):
            direction = Vec3.random_unit_vector(rng)
            ray_in = Ray(Point3(0, 0, 0) - direction, direction)
            normal = Vec3.random_unit_vector(rng)
            result = mat.scatter(ray_in, make_hit(ray_in, normal=normal), rng)
            assert isinstance(result, Scattered)
            assert result.ray.direction.is_finite()
            assert not result.ray.direction.near_zero()


class TestMetal:
    """Test Metal material."""

    def test_mirror_reflection(self):
        mat = Metal(Color(0.9, 0.9, 0.9), fuzz=0.0)
        ray_in = Ray(Point3(-1, 1, 0), Vec3(1, -1, 0))
        result = mat.scatter(ray_in, make_hit(ray_in), np.random.default_rng(0))

        assert isinstance(result, Scattered)
        assert result.ray.direction == Vec3(1, 1, 0).normalize()
        assert result.attenuation == Color(0.9, 0.9, 0.9)

    def test_fuzz_is_clamped(self):
        assert Metal(Color(1, 1, 1), fuzz=5.0).fuzz == 1.0
        assert Metal(Color(1, 1, 1), fuzz=-1.0).fuzz == 0.0

    def test_tangent_ray_is_absorbed(self):
        mat = Metal(Color(1, 1, 1))
        ray_in = Ray(Point3(-1, 0, 0), Vec3(1, 0, 0))
        assert mat.scatter(ray_in, make_hit(ray_in), np.random.default_rng(0)) is ABSORBED

    def test_fuzzy_grazing_reflection_sometimes_absorbed(self):
        mat = Metal(Color(1, 1, 1), fuzz=1.0)
        ray_in = Ray(Point3(-1, 0.01, 0), Vec3(1, -0.01, 0))
        hit = make_hit(ray_in)

        results = [mat.scatter(ray_in, hit, rng) for rng in rngs()]
        assert any(isinstance(r, Absorbed) for r in results)
        assert any(isinstance(r, Scattered) for r in results)
        for r in results:
            if isinstance(r, Scattered):
                assert r.ray.direction.dot(hit.normal) > 0

    @pytest.mark.parametrize("fuzz", [0.0, 0.5, 1.0])
    def test_never_produces_nan(self, fuzz):
        mat = Metal(Color(0.9, 0.9, 0.9), fuzz=fuzz)
        for rng in rngs(100):
            direction = Vec3.random_unit_vector(rng)
            ray_in = Ray(Point3(0, 0, 0) - direction, direction)
            normal = Vec3.random_unit_vector(rng)
            result = mat.scatter(ray_in, make_hit(ray_in, normal=normal), rng)
            assert isinstance(result, (Scattered, Absorbed))
            if isinstance(result, Scattered):
                assert result.ray.direction.is_finite()
                assert not result.ray.direction.near_zero()


class TestDielectric:
    """Test Dielectric material."""

    def test_attenuation_is_white(self):
        mat = Dielectric(1.5)
        ray_in = Ray(Point3(0, 5, 0), Vec3(0, -1, 0))
        hit = make_hit(ray_in)
        for rng in rngs(20):
            assert mat.scatter(ray_in, hit, rng).attenuation == Color(1, 1, 1)

    def test_normal_incidence_mostly_transmits(self):
        mat = Dielectric(1.5)
        ray_in = Ray(Point3(0, 5, 0), Vec3(0, -1, 0))
        hit = make_hit(ray_in)

        directions = [mat.scatter(ray_in, hit, rng).ray.direction for rng in rngs()]
        transmitted = [d for d in directions if d.y < 0]
        # Schlick reflectance at normal incidence is 4%
        assert len(transmitted) > 150
        for d in transmitted:
            assert d == Vec3(0, -1, 0)

    def test_total_internal_reflection(self):
        mat = Dielectric(1.5)
        # Inside the glass, travelling steeply against the surface
        ray_in = Ray(Point3(-1, -0.2, 0), Vec3(1, 0.2, 0))
        hit = make_hit(ray_in)
        assert hit.front_face is False

        for rng in rngs(50):
            result = mat.scatter(ray_in, hit, rng)
            assert result.ray.direction.y < 0

    def test_exiting_bends_away_from_normal(self):
        mat = Dielectric(1.5)
        ray_in = Ray(Point3(-0.2, -1, 0), Vec3(0.2, 1, 0))
        hit = make_hit(ray_in)

        outgoing = [mat.scatter(ray_in, hit, rng).ray.direction for rng in rngs()]
        refracted = [d for d in outgoing if d.y > 0]
        assert refracted
        incoming_slope = 0.2
        for d in refracted:
            assert d.x / d.y > incoming_slope

    def test_never_produces_nan(self):
        mat = Dielectric(1.5)
        for rng in rngs(100):
            direction = Vec3.random_unit_vector(rng)
            ray_in = Ray(Point3(0, 0, 0) - direction, direction)
            normal = Vec3.random_unit_vector(rng)
            result = mat.scatter(ray_in, make_hit(ray_in, normal=normal), rng)
            assert result.ray.direction.is_finite()
            assert not result.ray.direction.near_zero()

    def test_default_index(self):
        assert Dielectric().refractive_index == 1.5


class TestTexture:
    """Test image-mapped diffuse material."""

    @pytest.fixture
    def pixels(self):
        data = np.zeros((1, 4, 3), dtype=np.uint8)
        data[0, 0] = (255, 0, 0)
        data[0, 1] = (0, 255, 0)
        data[0, 2] = (0, 0, 255)
        data[0, 3] = (255, 255, 255)
        return TexturePixels(data)

    def test_attenuation_from_texel(self, pixels):
        mat = Texture(Color(0.5, 0.5, 0.5), pixels)
        ray_in = Ray(Point3(0, 5, 0), Vec3(0, -1, 0))
        hit = make_hit(ray_in, u=0.3, v=0.5)

        result = mat.scatter(ray_in, hit, np.random.default_rng(0))
        assert isinstance(result, Scattered)
        assert result.attenuation == Color(0, 0.5, 0)

    def test_h_offset_rotates(self, pixels):
        mat = Texture(Color(1, 1, 1), pixels, h_offset=0.25)
        assert mat.albedo_at(0.3, 0.5) == Color(0, 0, 1)
        assert mat.albedo_at(0.8, 0.5) == Color(1, 0, 0)

    def test_rotated_shares_pixels(self, pixels):
        mat = Texture(Color(1, 1, 1), pixels)
        turned = mat.rotated(0.5)
        assert turned.h_offset == 0.5
        assert turned.pixels is pixels
        assert mat.h_offset == 0.0

    def test_dimensions(self, pixels):
        mat = Texture(Color(1, 1, 1), pixels)
        assert (mat.width, mat.height) == (4, 1)


class TestDiffuseLight:
    """Test emissive material."""

    def test_emits(self):
        mat = DiffuseLight(Color(4, 4, 4))
        ray_in = Ray(Point3(0, 5, 0), Vec3(0, -1, 0))
        result = mat.scatter(ray_in, make_hit(ray_in), np.random.default_rng(0))
        assert result == Emitted(Color(4, 4, 4))

    def test_default_white(self):
        assert DiffuseLight().emit == Color(1, 1, 1)
