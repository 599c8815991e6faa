"""Unit tests for the sphere primitive.

Tests cover:
- Hit distance and normal from outside and inside
- Negative radii (inward normals)
- Admissible interval bounds
- Scene-construction validation
"""

import math

import pytest
import taichi as ti


def _hit(origin, direction, center, radius, min_length=1e-4, max_length=1e9):
    """Run hit_sphere in a kernel and return (hit, t, point, normal)."""
    from pathtracer.core.ray import Ray, vec3
    from pathtracer.geometry.sphere import Sphere, hit_sphere

    hit = ti.field(dtype=ti.i32, shape=())
    t = ti.field(dtype=ti.f32, shape=())
    point = ti.Vector.field(3, dtype=ti.f32, shape=())
    normal = ti.Vector.field(3, dtype=ti.f32, shape=())

    @ti.kernel
    def test_kernel(o: vec3, d: vec3, c: vec3, r: ti.f32, lo: ti.f32, hi: ti.f32):
        ray = Ray(origin=o, direction=d, time=0.0)
        rec = hit_sphere(ray, Sphere(center=c, radius=r), lo, hi)
        hit[None] = rec.hit
        t[None] = rec.t
        point[None] = rec.point
        normal[None] = rec.normal

    test_kernel(vec3(*origin), vec3(*direction), vec3(*center), radius, min_length, max_length)
    return int(hit[None]), float(t[None]), point[None], normal[None]


class TestHitSphere:
    """Tests for ray-sphere intersection."""

    def test_hit_from_outside(self):
        """Test the hit distance is |origin - center| - radius head-on."""
        hit, t, point, normal = _hit((0, 0, 0), (0, 1, 0), (0, 10, 0), 2.0)
        assert hit == 1
        assert abs(t - 8.0) < 1e-5
        assert abs(point[1] - 8.0) < 1e-5
        assert abs(normal[1] + 1.0) < 1e-5

    def test_normal_is_unit_and_radial(self):
        hit, _, point, normal = _hit((0.5, 0, 0.3), (0, 1, 0), (0, 5, 0), 1.0)
        assert hit == 1
        length = math.sqrt(sum(normal[i] ** 2 for i in range(3)))
        assert abs(length - 1.0) < 1e-5
        expected = [point[0] - 0.0, point[1] - 5.0, point[2] - 0.0]
        for i in range(3):
            assert abs(normal[i] - expected[i]) < 1e-5

    def test_miss(self):
        hit, _, _, _ = _hit((0, 0, 0), (0, 1, 0), (3, 10, 0), 1.0)
        assert hit == 0

    def test_sphere_behind_ray(self):
        hit, _, _, _ = _hit((0, 0, 0), (0, 1, 0), (0, -10, 0), 1.0)
        assert hit == 0

    def test_hit_from_inside_uses_far_root(self):
        """Test a ray starting inside hits the far wall with an outward normal."""
        hit, t, _, normal = _hit((0, 0, 0), (0, 0, 1), (0, 0, 0), 1.0)
        assert hit == 1
        assert abs(t - 1.0) < 1e-5
        assert abs(normal[2] - 1.0) < 1e-5

    def test_negative_radius_flips_normal(self):
        hit, t, _, normal = _hit((0, 0, 0), (0, 1, 0), (0, 10, 0), -2.0)
        assert hit == 1
        assert abs(t - 8.0) < 1e-5
        # Inward normal points along the ray
        assert abs(normal[1] - 1.0) < 1e-5

    def test_max_length_excludes_far_hit(self):
        hit, _, _, _ = _hit((0, 0, 0), (0, 1, 0), (0, 10, 0), 2.0, max_length=5.0)
        assert hit == 0

    def test_max_length_is_exclusive(self):
        hit, _, _, _ = _hit((0, 0, 0), (0, 1, 0), (0, 10, 0), 2.0, max_length=8.0)
        # The far root (12) is also out of range
        assert hit == 0

    def test_min_length_skips_near_root(self):
        """Test a hit closer than min_length falls through to the far root."""
        hit, t, _, _ = _hit((0, 0, 0), (0, 1, 0), (0, 10, 0), 2.0, min_length=9.0)
        assert hit == 1
        assert abs(t - 12.0) < 1e-5

    def test_tangent_ray(self):
        hit, t, _, _ = _hit((1, 0, 0), (0, 1, 0), (0, 5, 0), 1.0)
        assert hit == 1
        assert abs(t - 5.0) < 1e-3


class TestValidateSphere:
    """Tests for validate_sphere."""

    def test_valid(self):
        from pathtracer.geometry.sphere import validate_sphere

        validate_sphere((0.0, 0.0, 0.0), 1.0)
        validate_sphere((0.0, 0.0, 0.0), -0.5)

    def test_zero_radius(self):
        from pathtracer.geometry.sphere import validate_sphere

        with pytest.raises(ValueError, match="non-zero"):
            validate_sphere((0.0, 0.0, 0.0), 0.0)

    def test_non_finite_values(self):
        from pathtracer.geometry.sphere import validate_sphere

        with pytest.raises(ValueError):
            validate_sphere((0.0, float("nan"), 0.0), 1.0)
        with pytest.raises(ValueError):
            validate_sphere((0.0, 0.0, 0.0), float("inf"))
