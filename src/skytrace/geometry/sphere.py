"""Sphere primitive with ray-sphere intersection.

This module provides the Sphere dataclass, the HitInfo record shared by every
surface type, and the sphere intersection function.

The intersection solves the quadratic in half-b form, which keeps the
arithmetic small and does not require a normalized ray direction.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from skytrace.geometry.sphere import Sphere, HitInfo, hit_sphere
    >>> sphere = Sphere(center=ti.math.vec3(0, 0, 3), radius=1.0)
    >>> # Use hit_sphere within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from skytrace.core.ray import dot

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class Sphere:
    """A sphere defined by center point and radius.

    Attributes:
        center: The center point of the sphere (vec3).
        radius: The radius of the sphere (positive float).
    """

    center: vec3
    radius: ti.f32


@ti.dataclass
class HitInfo:
    """Record of a ray-surface intersection.

    Attributes:
        hit: Whether the ray intersected the surface (1 if hit, 0 if miss).
        t: The parameter value along the ray where intersection occurred.
            Lies strictly inside the queried (t_min, t_max) window.
            Only valid if hit == 1.
        normal: The outward surface normal at the intersection (unit length).
            Only valid if hit == 1.
        at: The world-space point where the ray met the surface.
            Only valid if hit == 1.
    """

    hit: ti.i32
    t: ti.f32
    normal: vec3
    at: vec3


@ti.func
def make_miss() -> HitInfo:
    """Create a HitInfo indicating no intersection."""
    return HitInfo(hit=0, t=0.0, normal=vec3(0.0, 0.0, 0.0), at=vec3(0.0, 0.0, 0.0))


@ti.func
def hit_sphere(
    ray_origin: vec3,
    ray_direction: vec3,
    sphere: Sphere,
    t_min: ti.f32,
    t_max: ti.f32,
) -> HitInfo:
    """Test for ray-sphere intersection.

    The ray-sphere intersection is found by solving:
        |ray_origin + t * ray_direction - center|^2 = radius^2

    Expanding and rearranging gives the quadratic equation:
        a*t^2 + 2*half_b*t + c = 0

    where:
        a = dot(direction, direction)
        half_b = dot(oc, direction)
        c = dot(oc, oc) - radius^2
        oc = origin - center

    The smaller root is tried first; if it falls outside (t_min, t_max)
    the larger root is tried, so a ray starting inside the sphere reports
    the far intersection.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray (need not be normalized).
        sphere: The sphere to test intersection against.
        t_min: Exclusive lower bound on t (avoids self-intersection).
        t_max: Exclusive upper bound on t.

    Returns:
        A HitInfo describing the nearest intersection. Check the hit field
        to determine if intersection occurred.
    """
    oc = ray_origin - sphere.center

    a = dot(ray_direction, ray_direction)
    half_b = dot(oc, ray_direction)
    c = dot(oc, oc) - sphere.radius * sphere.radius

    discriminant = half_b * half_b - a * c

    result = make_miss()

    if discriminant >= 0.0:
        sqrt_d = ti.sqrt(discriminant)

        t = (-half_b - sqrt_d) / a
        valid = (t > t_min) and (t < t_max)

        if not valid:
            t = (-half_b + sqrt_d) / a
            valid = (t > t_min) and (t < t_max)

        if valid:
            at = ray_origin + t * ray_direction
            # Dividing by the radius gives unit length exactly on the surface
            normal = (at - sphere.center) / sphere.radius
            result = HitInfo(hit=1, t=t, normal=normal, at=at)

    return result


@ti.func
def make_sphere(center: vec3, radius: ti.f32) -> Sphere:
    """Create a sphere from center and radius.

    This is a convenience function for creating spheres within Taichi kernels.
    """
    return Sphere(center=center, radius=radius)
