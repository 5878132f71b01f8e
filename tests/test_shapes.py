"""Tests for spheres and scenes."""

import pytest
import math
from spheretrace.vec3 import Vec3, Point3, Color
from spheretrace.ray import Ray
from spheretrace.shapes import Sphere, Scene, HitRecord, spherical_uv
from spheretrace.materials import Lambertian, Metal, DiffuseLight

INF = float('inf')
GRAY = Lambertian(Color(0.5, 0.5, 0.5))


class TestSphereHit:
    """Test ray-sphere intersection."""

    def test_nearest_root(self):
        sphere = Sphere(Point3(0, 0, 0), 1.0, GRAY)
        hit = sphere.hit(Ray(Point3(0, 0, 5), Vec3(0, 0, -1)), 0.001, INF)

        assert hit is not None
        assert hit.t == pytest.approx(4.0)
        assert hit.point == Point3(0, 0, 1)

    def test_unnormalized_direction(self):
        sphere = Sphere(Point3(0, 0, 0), 1.0, GRAY)
        hit = sphere.hit(Ray(Point3(0, 0, 5), Vec3(0, 0, -2)), 0.001, INF)
        assert hit.t == pytest.approx(2.0)

    def test_outward_normal_is_unit(self):
        sphere = Sphere(Point3(1, 2, 3), 2.5, GRAY)
        ray = Ray(Point3(10, 2.5, 3.3), Vec3(-1, 0, 0))
        hit = sphere.hit(ray, 0.001, INF)

        assert hit is not None
        assert hit.normal.length() == pytest.approx(1.0)
        assert hit.normal == (hit.point - sphere.center) / sphere.radius

    def test_front_face_from_outside(self):
        sphere = Sphere(Point3(0, 0, 0), 1.0, GRAY)
        hit = sphere.hit(Ray(Point3(0, 0, 5), Vec3(0, 0, -1)), 0.001, INF)
        assert hit.front_face is True
        assert hit.face_normal == hit.normal

    def test_far_root_from_inside(self):
        sphere = Sphere(Point3(0, 0, 0), 1.0, GRAY)
        hit = sphere.hit(Ray(Point3(0, 0, 0), Vec3(0, 0, 1)), 0.001, INF)

        assert hit is not None
        assert hit.t == pytest.approx(1.0)
        assert hit.front_face is False
        # Stored normal stays outward; face_normal opposes the ray
        assert hit.normal == Vec3(0, 0, 1)
        assert hit.face_normal == Vec3(0, 0, -1)

    def test_miss(self):
        sphere = Sphere(Point3(0, 0, 0), 1.0, GRAY)
        assert sphere.hit(Ray(Point3(0, 3, 5), Vec3(0, 0, -1)), 0.001, INF) is None

    def test_behind_origin(self):
        sphere = Sphere(Point3(0, 0, -5), 1.0, GRAY)
        assert sphere.hit(Ray(Point3(0, 0, 0), Vec3(0, 0, 1)), 0.001, INF) is None

    def test_t_max_is_exclusive(self):
        sphere = Sphere(Point3(0, 0, 0), 1.0, GRAY)
        ray = Ray(Point3(0, 0, 5), Vec3(0, 0, -1))
        assert sphere.hit(ray, 0.001, 4.0) is None
        assert sphere.hit(ray, 0.001, 4.0 + 1e-9) is not None

    def test_t_min_is_inclusive(self):
        sphere = Sphere(Point3(0, 0, 0), 1.0, GRAY)
        hit = sphere.hit(Ray(Point3(0, 0, 5), Vec3(0, 0, -1)), 4.0, INF)
        assert hit.t == pytest.approx(4.0)

    def test_t_min_skips_to_far_root(self):
        sphere = Sphere(Point3(0, 0, 0), 1.0, GRAY)
        hit = sphere.hit(Ray(Point3(0, 0, 5), Vec3(0, 0, -1)), 4.5, INF)
        assert hit.t == pytest.approx(6.0)

    def test_surface_origin_ignores_self(self):
        sphere = Sphere(Point3(0, 0, 0), 1.0, GRAY)
        ray = Ray(Point3(0, 0, 1), Vec3(0, 0, 1))
        assert sphere.hit(ray, 0.001, INF) is None

    def test_grazing_ray_hits_once(self):
        sphere = Sphere(Point3(0, 0, 0), 1.0, GRAY)
        hit = sphere.hit(Ray(Point3(1, 0, 5), Vec3(0, 0, -1)), 0.001, INF)
        assert hit is not None
        assert hit.t == pytest.approx(5.0)

    @pytest.mark.parametrize("radius", [0.0, -1.0])
    def test_non_positive_radius_never_hits(self, radius):
        sphere = Sphere(Point3(0, 0, 0), radius, GRAY)
        assert sphere.hit(Ray(Point3(0, 0, 5), Vec3(0, 0, -1)), 0.001, INF) is None

    def test_zero_direction_never_hits(self):
        sphere = Sphere(Point3(0, 0, 0), 1.0, GRAY)
        assert sphere.hit(Ray(Point3(0, 0, 0), Vec3(0, 0, 0)), 0.001, INF) is None

    def test_carries_material(self):
        material = Lambertian(Color(1, 0, 0))
        sphere = Sphere(Point3(0, 0, 0), 1.0, material)
        hit = sphere.hit(Ray(Point3(0, 0, 5), Vec3(0, 0, -1)), 0.001, INF)
        assert hit.material is material

    def test_material_is_required(self):
        with pytest.raises(TypeError):
            Sphere(Point3(0, 0, 0), 1.0)
        with pytest.raises(TypeError):
            HitRecord(point=Point3(0, 0, 0), normal=Vec3(0, 1, 0), t=1.0, front_face=True)

    def test_uv_in_range(self):
        sphere = Sphere(Point3(0, 0, 0), 1.0, GRAY)
        hit = sphere.hit(Ray(Point3(0.3, 0.2, 5), Vec3(0, 0, -1)), 0.001, INF)
        assert 0 <= hit.u <= 1
        assert 0 <= hit.v <= 1

    def test_with_material(self):
        sphere = Sphere(Point3(1, 2, 3), 4.0, Lambertian(Color(1, 1, 1)))
        metal = Metal(Color(1, 1, 1))
        copy = sphere.with_material(metal)
        assert copy.material is metal
        assert copy.center == sphere.center
        assert copy.radius == sphere.radius
        assert isinstance(sphere.material, Lambertian)


class TestSphericalUV:
    """Test direction to texture coordinate mapping."""

    def test_poles(self):
        assert spherical_uv(Vec3(0, 1, 0))[1] == pytest.approx(1.0)
        assert spherical_uv(Vec3(0, -1, 0))[1] == pytest.approx(0.0)

    def test_equator(self):
        u, v = spherical_uv(Vec3(1, 0, 0))
        assert u == pytest.approx(0.5)
        assert v == pytest.approx(0.5)

    def test_u_around_y_axis(self):
        assert spherical_uv(Vec3(0, 0, 1))[0] == pytest.approx(0.25)
        assert spherical_uv(Vec3(0, 0, -1))[0] == pytest.approx(0.75)

    def test_clamps_rounding_error(self):
        u, v = spherical_uv(Vec3(0, 1.0000000001, 0))
        assert v == pytest.approx(1.0)


class TestScene:
    """Test the flat object list."""

    def test_empty_scene_misses(self):
        scene = Scene()
        assert len(scene) == 0
        assert scene.hit(Ray(Point3(0, 0, 0), Vec3(0, 0, -1)), 0.001, INF) is None

    def test_nearest_object_wins(self):
        near = Sphere(Point3(0, 0, -3), 1.0, GRAY)
        far = Sphere(Point3(0, 0, -10), 1.0, GRAY)
        ray = Ray(Point3(0, 0, 0), Vec3(0, 0, -1))

        for order in ([far, near], [near, far]):
            hit = Scene(order).hit(ray, 0.001, INF)
            assert hit.t == pytest.approx(2.0)

    def test_tie_keeps_first_object(self):
        first = Lambertian(Color(1, 0, 0))
        second = Lambertian(Color(0, 1, 0))
        scene = Scene([
            Sphere(Point3(0, 0, -3), 1.0, first),
            Sphere(Point3(0, 0, -3), 1.0, second),
        ])
        hit = scene.hit(Ray(Point3(0, 0, 0), Vec3(0, 0, -1)), 0.001, INF)
        assert hit.material is first

    def test_respects_t_max(self):
        scene = Scene([Sphere(Point3(0, 0, -3), 1.0, GRAY)])
        assert scene.hit(Ray(Point3(0, 0, 0), Vec3(0, 0, -1)), 0.001, 1.5) is None

    def test_objects_are_immutable(self):
        objects = [Sphere(Point3(0, 0, 0), 1.0, GRAY)]
        scene = Scene(objects)
        objects.append(Sphere(Point3(5, 0, 0), 1.0, GRAY))
        assert len(scene) == 1
        assert isinstance(scene.objects, tuple)

    def test_iterates_in_order(self):
        a = Sphere(Point3(0, 0, 0), 1.0, GRAY)
        b = Sphere(Point3(3, 0, 0), 1.0, GRAY)
        assert list(Scene([a, b])) == [a, b]

    def test_lights(self):
        lamp = Sphere(Point3(0, 5, 0), 1.0, DiffuseLight(Color(4, 4, 4)))
        scene = Scene([Sphere(Point3(0, 0, 0), 1.0, Lambertian(Color(1, 1, 1))), lamp])
        assert scene.lights() == [lamp]
