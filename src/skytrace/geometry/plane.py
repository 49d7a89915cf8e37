"""Infinite plane primitive with ray-plane intersection.

A plane is stored as a point on the plane and its normal. The normal is
expected to be unit length; the scene normalizes plane normals when planes
are added, so values coming from scene files need not be normalized.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from skytrace.geometry.plane import Plane, hit_plane
    >>> ground = Plane(point=ti.math.vec3(0, -1, 0), normal=ti.math.vec3(0, 1, 0))
    >>> # Use hit_plane within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from skytrace.core.ray import dot
from skytrace.geometry.sphere import HitInfo, make_miss

vec3 = tm.vec3


@ti.dataclass
class Plane:
    """An infinite plane through a point.

    Attributes:
        point: Any point on the plane (vec3).
        normal: The plane normal (vec3, unit length). Its direction is the
            outward side reported in hit records.
    """

    point: vec3
    normal: vec3


@ti.func
def hit_plane(
    ray_origin: vec3,
    ray_direction: vec3,
    plane: Plane,
    t_min: ti.f32,
    t_max: ti.f32,
) -> HitInfo:
    """Test for ray-plane intersection.

    Solves dot(normal, origin + t * direction - point) = 0 for t.

    A ray exactly parallel to the plane (dot(normal, direction) == 0) never
    hits. The comparison is exact, so rays that are only nearly parallel
    produce very large t values that the t_max bound usually rejects.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray (need not be normalized).
        plane: The plane to test intersection against.
        t_min: Exclusive lower bound on t.
        t_max: Exclusive upper bound on t.

    Returns:
        A HitInfo with the plane normal as stored. Check the hit field to
        determine if intersection occurred.
    """
    result = make_miss()

    d = dot(plane.normal, ray_direction)
    if d != 0.0:
        t = dot(plane.normal, plane.point - ray_origin) / d
        if t > t_min and t < t_max:
            result = HitInfo(
                hit=1,
                t=t,
                normal=plane.normal,
                at=ray_origin + t * ray_direction,
            )

    return result


@ti.func
def make_plane(point: vec3, normal: vec3) -> Plane:
    """Create a plane from a point and a unit normal."""
    return Plane(point=point, normal=normal)
