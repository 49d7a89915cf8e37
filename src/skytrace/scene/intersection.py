"""Scene-level surface storage and nearest-hit queries.

This module stores every surface of the scene in Taichi fields and provides
the aggregate intersection query that returns the closest hit along a ray.

Surfaces form a closed tagged variant: each entry of the surface table holds
a kind tag (sphere or plane) and a slot into the storage for that kind.
Surfaces are visited in the order they were added.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from skytrace.scene.intersection import (
    ...     add_sphere, add_plane, intersect_scene, clear_scene
    ... )
    >>> clear_scene()
    >>> add_sphere((0, 0, 3), 1.0)
    >>> add_plane((0, -1, 0), (0, 1, 0))
    >>> # Use intersect_scene within a Taichi kernel
"""

import math
from dataclasses import dataclass
from enum import IntEnum

import taichi as ti
import taichi.math as tm

from skytrace.geometry.plane import Plane, hit_plane
from skytrace.geometry.sphere import HitInfo, Sphere, hit_sphere, make_miss

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


class SurfaceKind(IntEnum):
    """Tag identifying which storage a surface table entry points into."""

    SPHERE = 0
    PLANE = 1


# Maximum number of primitives supported in the scene
MAX_SPHERES = 1024
MAX_PLANES = 1024
MAX_SURFACES = MAX_SPHERES + MAX_PLANES

# Sphere storage: Structure of Arrays layout for GPU efficiency
sphere_centers = ti.Vector.field(3, dtype=ti.f32, shape=MAX_SPHERES)
sphere_radii = ti.field(dtype=ti.f32, shape=MAX_SPHERES)
num_spheres = ti.field(dtype=ti.i32, shape=())

# Plane storage
plane_points = ti.Vector.field(3, dtype=ti.f32, shape=MAX_PLANES)
plane_normals = ti.Vector.field(3, dtype=ti.f32, shape=MAX_PLANES)
num_planes = ti.field(dtype=ti.i32, shape=())

# Surface table in insertion order: (kind, slot) pairs
surface_kinds = ti.field(dtype=ti.i32, shape=MAX_SURFACES)
surface_slots = ti.field(dtype=ti.i32, shape=MAX_SURFACES)
num_surfaces = ti.field(dtype=ti.i32, shape=())


def clear_scene() -> None:
    """Clear all surfaces from the scene.

    Resets the counters to zero. The actual field data is not cleared but
    will be overwritten when new surfaces are added.
    """
    num_spheres[None] = 0
    num_planes[None] = 0
    num_surfaces[None] = 0


def _append_surface(kind: SurfaceKind, slot: int) -> int:
    idx = num_surfaces[None]
    surface_kinds[idx] = int(kind)
    surface_slots[idx] = slot
    num_surfaces[None] = idx + 1
    return idx


def add_sphere(center: tuple[float, float, float], radius: float) -> int:
    """Add a sphere to the scene.

    Args:
        center: The center point of the sphere.
        radius: The radius of the sphere (should be positive).

    Returns:
        The index of the added sphere in the sphere storage.

    Raises:
        RuntimeError: If the maximum number of spheres is exceeded.
    """
    idx = num_spheres[None]
    if idx >= MAX_SPHERES:
        raise RuntimeError(f"Maximum number of spheres ({MAX_SPHERES}) exceeded")
    sphere_centers[idx] = [float(c) for c in center]
    sphere_radii[idx] = radius
    num_spheres[None] = idx + 1
    _append_surface(SurfaceKind.SPHERE, idx)
    return idx


def add_plane(point: tuple[float, float, float], normal: tuple[float, float, float]) -> int:
    """Add a plane to the scene.

    Args:
        point: Any point on the plane.
        normal: The plane normal. Stored as given; callers should pass a
            unit vector.

    Returns:
        The index of the added plane in the plane storage.

    Raises:
        RuntimeError: If the maximum number of planes is exceeded.
    """
    idx = num_planes[None]
    if idx >= MAX_PLANES:
        raise RuntimeError(f"Maximum number of planes ({MAX_PLANES}) exceeded")
    plane_points[idx] = [float(c) for c in point]
    plane_normals[idx] = [float(c) for c in normal]
    num_planes[None] = idx + 1
    _append_surface(SurfaceKind.PLANE, idx)
    return idx


def get_sphere_count() -> int:
    """Get the number of spheres in the scene."""
    return int(num_spheres[None])


def get_plane_count() -> int:
    """Get the number of planes in the scene."""
    return int(num_planes[None])


def get_surface_count() -> int:
    """Get the total number of surfaces in the scene."""
    return int(num_surfaces[None])


@ti.func
def _hit_surface(
    index: ti.i32,
    ray_origin: vec3,
    ray_direction: vec3,
    t_min: ti.f32,
    t_max: ti.f32,
) -> HitInfo:
    """Dispatch an intersection test on one surface table entry."""
    kind = surface_kinds[index]
    slot = surface_slots[index]

    rec = make_miss()
    if kind == int(SurfaceKind.SPHERE):
        sphere = Sphere(center=sphere_centers[slot], radius=sphere_radii[slot])
        rec = hit_sphere(ray_origin, ray_direction, sphere, t_min, t_max)
    elif kind == int(SurfaceKind.PLANE):
        plane = Plane(point=plane_points[slot], normal=plane_normals[slot])
        rec = hit_plane(ray_origin, ray_direction, plane, t_min, t_max)
    return rec


@ti.func
def intersect_scene(
    ray_origin: vec3,
    ray_direction: vec3,
    t_min: ti.f32,
    t_max: ti.f32,
) -> HitInfo:
    """Test ray against all surfaces in the scene.

    Iterates through the surface table, querying each surface with the
    upper bound shrunk to the closest hit found so far. The result is the
    globally nearest hit regardless of the order surfaces were added in.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray.
        t_min: Exclusive lower bound on t.
        t_max: Exclusive upper bound on t.

    Returns:
        A HitInfo for the closest intersection, or a miss record if no
        intersection was found.
    """
    closest_t = t_max
    result = make_miss()

    for i in range(num_surfaces[None]):
        rec = _hit_surface(i, ray_origin, ray_direction, t_min, closest_t)
        if rec.hit == 1:
            closest_t = rec.t
            result = rec

    return result


# =============================================================================
# Python-side Queries
# =============================================================================


@dataclass(frozen=True)
class HitResult:
    """Python-side copy of a HitInfo for a successful intersection.

    Attributes:
        t: The parameter value along the ray.
        normal: The outward unit normal at the hit.
        at: The hit point.
    """

    t: float
    normal: tuple[float, float, float]
    at: tuple[float, float, float]


# Result slots for query_scene()
_query_hit = ti.field(dtype=ti.i32, shape=())
_query_t = ti.field(dtype=ti.f32, shape=())
_query_normal = ti.Vector.field(3, dtype=ti.f32, shape=())
_query_at = ti.Vector.field(3, dtype=ti.f32, shape=())


@ti.kernel
def _query_scene_kernel(ray_origin: vec3, ray_direction: vec3, t_min: ti.f32, t_max: ti.f32):
    # One-iteration outer loop keeps the surface loop serial
    for _ in range(1):
        rec = intersect_scene(ray_origin, ray_direction, t_min, t_max)
        _query_hit[None] = rec.hit
        _query_t[None] = rec.t
        _query_normal[None] = rec.normal
        _query_at[None] = rec.at


def query_scene(
    ray_origin: tuple[float, float, float],
    ray_direction: tuple[float, float, float],
    t_min: float,
    t_max: float = math.inf,
) -> HitResult | None:
    """Find the nearest hit along a ray from Python.

    Runs intersect_scene() in a single-task kernel. Intended for tests and
    inspection; rendering calls intersect_scene() inside its own kernels.

    Returns:
        The nearest hit, or None if the ray hits nothing in (t_min, t_max).
    """
    _query_scene_kernel(vec3(*ray_origin), vec3(*ray_direction), t_min, t_max)
    if _query_hit[None] == 0:
        return None
    normal = _query_normal[None]
    at = _query_at[None]
    return HitResult(
        t=float(_query_t[None]),
        normal=(float(normal[0]), float(normal[1]), float(normal[2])),
        at=(float(at[0]), float(at[1]), float(at[2])),
    )
