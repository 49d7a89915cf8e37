"""Unit tests for sphere intersection.

Tests cover:
- Ray hitting sphere from outside (near root)
- Ray missing sphere
- Ray starting inside sphere (far root)
- Unnormalized ray directions
- t_min / t_max window handling
"""

import pytest
import taichi as ti


def _hit(origin, direction, center, radius, t_min=1e-5, t_max=1e9):
    """Run hit_sphere in a kernel and read the record back."""
    from skytrace.geometry.sphere import Sphere, hit_sphere, vec3

    hit = ti.field(dtype=ti.i32, shape=())
    t_val = ti.field(dtype=ti.f32, shape=())
    normal = ti.field(dtype=ti.math.vec3, shape=())
    at = ti.field(dtype=ti.math.vec3, shape=())

    @ti.kernel
    def test_kernel(o: vec3, d: vec3, c: vec3, r: ti.f32, lo: ti.f32, hi: ti.f32):
        record = hit_sphere(o, d, Sphere(center=c, radius=r), lo, hi)
        hit[None] = record.hit
        t_val[None] = record.t
        normal[None] = record.normal
        at[None] = record.at

    test_kernel(vec3(*origin), vec3(*direction), vec3(*center), radius, t_min, t_max)
    n = normal[None]
    p = at[None]
    return hit[None], t_val[None], (n[0], n[1], n[2]), (p[0], p[1], p[2])


class TestSphereBasics:
    """Tests for Sphere dataclass and basic operations."""

    def test_make_sphere(self):
        """Test make_sphere convenience function."""
        from skytrace.geometry.sphere import make_sphere, vec3

        center_result = ti.field(dtype=ti.math.vec3, shape=())
        radius_result = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            sphere = make_sphere(vec3(1.0, 2.0, 3.0), 0.5)
            center_result[None] = sphere.center
            radius_result[None] = sphere.radius

        test_kernel()
        c = center_result[None]
        assert (c[0], c[1], c[2]) == pytest.approx((1.0, 2.0, 3.0))
        assert radius_result[None] == pytest.approx(0.5)

    def test_make_miss(self):
        """Test make_miss produces a record with hit == 0."""
        from skytrace.geometry.sphere import make_miss

        hit = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            hit[None] = make_miss().hit

        test_kernel()
        assert hit[None] == 0


class TestSphereIntersection:
    """Tests for ray-sphere intersection."""

    def test_hit_from_outside_near_side(self):
        """Test a ray aimed at the center hits at distance - radius."""
        hit, t, normal, at = _hit((0, 0, 0), (0, 0, 1), (0, 0, 5), 1.0)
        assert hit == 1
        assert t == pytest.approx(4.0, abs=1e-5)
        assert at == pytest.approx((0.0, 0.0, 4.0), abs=1e-5)
        assert normal == pytest.approx((0.0, 0.0, -1.0), abs=1e-5)

    def test_miss(self):
        """Test a ray whose perpendicular offset exceeds the radius misses."""
        hit, _, _, _ = _hit((0, 2.5, 0), (0, 0, 1), (0, 0, 5), 1.0)
        assert hit == 0

    def test_sphere_behind_ray(self):
        """Test a sphere behind the origin is not hit."""
        hit, _, _, _ = _hit((0, 0, 0), (0, 0, -1), (0, 0, 5), 1.0)
        assert hit == 0

    def test_inside_returns_far_root(self):
        """Test a ray starting inside the sphere hits the far side."""
        hit, t, normal, at = _hit((0, 0, 5), (1, 0, 0), (0, 0, 5), 2.0)
        assert hit == 1
        assert t == pytest.approx(2.0, abs=1e-5)
        assert at == pytest.approx((2.0, 0.0, 5.0), abs=1e-5)
        # Outward normal even though the ray leaves from inside
        assert normal == pytest.approx((1.0, 0.0, 0.0), abs=1e-5)

    def test_unnormalized_direction(self):
        """Test t is measured in units of the given direction."""
        hit, t, _, at = _hit((0, 0, 0), (0, 0, 2), (0, 0, 5), 1.0)
        assert hit == 1
        assert t == pytest.approx(2.0, abs=1e-5)
        assert at == pytest.approx((0.0, 0.0, 4.0), abs=1e-5)

    def test_normal_is_unit_length(self):
        """Test the reported normal has unit length for an oblique hit."""
        hit, _, normal, _ = _hit((0, 0, 0), (0.1, 0.2, 1.0), (0, 0, 5), 1.5)
        assert hit == 1
        assert sum(c * c for c in normal) == pytest.approx(1.0, abs=1e-5)

    def test_t_max_excludes_hit(self):
        """Test hits beyond t_max are rejected."""
        hit, _, _, _ = _hit((0, 0, 0), (0, 0, 1), (0, 0, 5), 1.0, t_max=3.0)
        assert hit == 0

    def test_t_min_skips_near_root(self):
        """Test a near root below t_min falls through to the far root."""
        hit, t, _, _ = _hit((0, 0, 0), (0, 0, 1), (0, 0, 5), 1.0, t_min=4.5)
        assert hit == 1
        assert t == pytest.approx(6.0, abs=1e-5)

    def test_bounds_are_exclusive(self):
        """Test a hit exactly at t_max is rejected."""
        hit, _, _, _ = _hit((0, 0, 0), (0, 0, 1), (0, 0, 5), 1.0, t_max=4.0)
        assert hit == 0
