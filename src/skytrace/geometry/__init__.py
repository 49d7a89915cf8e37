"""Geometry module for surface primitives.

This module provides the surface primitives and their intersection routines:

Components:
    sphere: Sphere primitive, the shared HitInfo record, ray-sphere intersection
    plane: Infinite plane primitive with ray-plane intersection

All intersection routines are implemented as Taichi functions (@ti.func)
and share one contract:

    info = hit_<kind>(ray_origin, ray_direction, surface, t_min, t_max)

The returned HitInfo has hit == 1 only for an intersection strictly inside
(t_min, t_max). The functions are pure: no randomness, no field writes.
"""

from .plane import Plane, hit_plane, make_plane
from .sphere import HitInfo, Sphere, hit_sphere, make_miss, make_sphere

__all__ = [
    "HitInfo",
    "make_miss",
    "Sphere",
    "hit_sphere",
    "make_sphere",
    "Plane",
    "hit_plane",
    "make_plane",
]
