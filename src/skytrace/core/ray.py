"""Ray data structure and vector utilities for GPU-accelerated ray tracing.

This module provides the fundamental Ray dataclass and vector utility functions
for Monte Carlo ray tracing. All operations are designed to work within Taichi
kernels for GPU acceleration.

Vectors are ``taichi.math.vec3`` values, which already provide component-wise
addition, subtraction, scaling, division and negation. The functions below
add the geometric operations and the random sampling used by the integrator.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> origin = ti.math.vec3(0.0, 0.0, 0.0)
    >>> direction = ti.math.vec3(0.0, 0.0, 1.0)
    >>> ray = Ray(origin=origin, direction=direction)
    >>> point = ray_at(ray, 5.0)  # Point 5 units along the ray
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Upper bound on rejection sampling attempts. The acceptance rate of the unit
# ball inside the [-1, 1]^3 cube is pi/6, so 64 rejections in a row happen
# with probability below 1e-20.
MAX_REJECTION_ATTEMPTS = 64


@ti.dataclass
class Ray:
    """A ray with an origin point and direction vector.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The direction vector of the ray (vec3). Not necessarily
            unit length; intersection routines divide by its squared length
            where needed.
    """

    origin: vec3
    direction: vec3


@ti.func
def ray_at(ray: Ray, t: ti.f32) -> vec3:
    """Compute the point along the ray at parameter t.

    Args:
        ray: The ray to evaluate.
        t: The parameter value. Positive values are in front of the origin.

    Returns:
        The point ray.origin + t * ray.direction.
    """
    return ray.origin + t * ray.direction


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    """Create a ray from origin and direction."""
    return Ray(origin=origin, direction=direction)


# =============================================================================
# Vector Utility Functions
# =============================================================================


@ti.func
def dot(a: vec3, b: vec3) -> ti.f32:
    """Compute the dot product of two vectors."""
    return tm.dot(a, b)


@ti.func
def cross(a: vec3, b: vec3) -> vec3:
    """Compute the cross product of two vectors.

    Args:
        a: First vector.
        b: Second vector.

    Returns:
        The cross product a x b. Anti-commutative: cross(a, b) == -cross(b, a).
    """
    return tm.cross(a, b)


@ti.func
def length_squared(v: vec3) -> ti.f32:
    """Compute the squared length of a vector.

    Cheaper than length() when only comparing magnitudes.
    """
    return tm.dot(v, v)


@ti.func
def length(v: vec3) -> ti.f32:
    """Compute the length (magnitude) of a vector."""
    return tm.length(v)


@ti.func
def normalize(v: vec3) -> vec3:
    """Scale a vector to unit length.

    Args:
        v: The input vector. Must be nonzero: a zero vector divides by zero
            and produces NaN components.

    Returns:
        A unit vector in the same direction as v.
    """
    return tm.normalize(v)


# =============================================================================
# Random Sampling Utilities for Monte Carlo
# =============================================================================


@ti.func
def random_in_unit_ball() -> vec3:
    """Generate a random point inside the unit ball.

    Uses rejection sampling: points are drawn uniformly from the cube
    [-1, 1]^3 until one lands strictly inside the unit ball.

    Returns:
        A random point with squared length < 1.
    """
    p = vec3(0.0, 0.0, 0.0)
    found = False
    for _ in range(MAX_REJECTION_ATTEMPTS):
        if not found:
            candidate = vec3(
                ti.random(ti.f32) * 2.0 - 1.0,
                ti.random(ti.f32) * 2.0 - 1.0,
                ti.random(ti.f32) * 2.0 - 1.0,
            )
            if length_squared(candidate) < 1.0:
                p = candidate
                found = True
    return p


@ti.func
def random_unit_vector() -> vec3:
    """Generate a random unit vector uniformly distributed on the sphere.

    This is the normalized version of random_in_unit_ball(). Ball points
    extremely close to the origin are redrawn so normalization never divides
    by zero.
    """
    p = random_in_unit_ball()
    for _ in range(MAX_REJECTION_ATTEMPTS):
        if length_squared(p) < 1e-12:
            p = random_in_unit_ball()
    return normalize(p)


@ti.func
def random_on_hemisphere(normal: vec3) -> vec3:
    """Generate a random unit vector in the hemisphere around a normal.

    A uniform unit vector is drawn and negated if it points into the
    surface, so the result always satisfies dot(result, normal) >= 0.

    Args:
        normal: The surface normal defining the hemisphere orientation.

    Returns:
        A random unit vector in the hemisphere around the normal.
    """
    on_sphere = random_unit_vector()
    result = on_sphere
    if dot(on_sphere, normal) < 0.0:
        result = -on_sphere
    return result
