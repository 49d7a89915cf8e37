"""Core rendering module.

This module contains the fundamental building blocks for ray tracing:

Components:
    ray: Ray data structure, vector utilities and random sampling
    color: Color constants, blending and the sky gradient
    integrator: Diffuse bounce integrator, render target and pixel output
    progressive: Batched progressive rendering with progress callbacks

All compute-intensive operations use Taichi kernels for GPU acceleration.
"""

from .color import BLACK, LIGHT_BLUE, WHITE, blend, color3, sky_color
from .ray import (
    Ray,
    cross,
    dot,
    length,
    length_squared,
    make_ray,
    normalize,
    random_in_unit_ball,
    random_on_hemisphere,
    random_unit_vector,
    ray_at,
    vec3,
)

# Note: integrator and progressive are NOT imported here to avoid circular imports.
# Import directly from skytrace.core.integrator or skytrace.core.progressive when needed.

__all__ = [
    "Ray",
    "ray_at",
    "make_ray",
    "vec3",
    "length",
    "length_squared",
    "normalize",
    "dot",
    "cross",
    "random_in_unit_ball",
    "random_unit_vector",
    "random_on_hemisphere",
    "color3",
    "BLACK",
    "WHITE",
    "LIGHT_BLUE",
    "blend",
    "sky_color",
]
