"""Diffuse path tracing integrator with sky lighting.

This module implements the shading function and the rendering kernels.
Every surface is an ideal diffuse reflector and the only light comes from
the sky gradient seen by rays that escape the scene.

Shading a ray:
    - With no bounce budget left the ray contributes black.
    - A ray that hits a surface continues in a random direction from the
      hemisphere around the surface normal, and whatever it gathers is
      attenuated by the cosine between that direction and the normal.
    - A ray that escapes returns the sky color for its direction.

Taichi functions cannot recurse, so the bounces run as a loop that carries
the product of cosine factors (the throughput) instead of the call stack.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from skytrace.core.integrator import render_image, setup_render_target, get_pixels
    >>> from skytrace.scene.parser import load_scene
    >>>
    >>> scene = load_scene(open("scene.txt"), aspect_ratio=640 / 360)
    >>> setup_render_target(640, 360)
    >>> render_image(num_samples=30, max_depth=2)
    >>> pixels = get_pixels()  # (360, 640, 3) uint8
"""

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from skytrace.camera.pinhole import get_ray_jittered
from skytrace.core.color import BLACK, sky_color
from skytrace.core.ray import dot, random_on_hemisphere
from skytrace.scene.intersection import intersect_scene

# Type alias for 3D vectors
vec3 = tm.vec3

# =============================================================================
# Rendering Constants
# =============================================================================

# Default number of bounces per path
DEFAULT_MAX_DEPTH = 2

# Lower bound on hit distance; keeps bounce rays from re-hitting their origin
EPSILON = 1e-5

# t_min and t_max for ray intersection
T_MIN = EPSILON
T_MAX = tm.inf

# =============================================================================
# Render Target (Image Buffer)
# =============================================================================

# Maximum supported image dimensions (preallocated to avoid kernel recompilation)
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048

# Image dimensions (actual active size)
_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())

# Color accumulation buffer indexed [row, column], row 0 at the top
_color_buffer = ti.Vector.field(3, dtype=ti.f32, shape=(MAX_IMAGE_HEIGHT, MAX_IMAGE_WIDTH))

# Sample count per pixel
_sample_count = ti.field(dtype=ti.i32, shape=(MAX_IMAGE_HEIGHT, MAX_IMAGE_WIDTH))

# Flag to track if render target is initialized
_render_target_initialized = ti.field(dtype=ti.i32, shape=())


def setup_render_target(width: int, height: int) -> None:
    """Initialize the render target buffers.

    Sets the active image dimensions and clears the buffers.
    The buffers are preallocated to MAX_IMAGE_HEIGHT x MAX_IMAGE_WIDTH
    to avoid Taichi kernel recompilation issues.

    Args:
        width: Image width in pixels (max MAX_IMAGE_WIDTH).
        height: Image height in pixels (max MAX_IMAGE_HEIGHT).

    Raises:
        ValueError: If dimensions are not positive or exceed the maximum
            supported size.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Image dimensions must be positive, got {width}x{height}")
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )

    _image_width[None] = width
    _image_height[None] = height
    _render_target_initialized[None] = 1

    clear_render_target()


def clear_render_target() -> None:
    """Clear the render target buffers to zero."""
    _color_buffer.fill(0.0)
    _sample_count.fill(0)


def get_image_dimensions() -> tuple[int, int]:
    """Get the current render target dimensions.

    Returns:
        Tuple of (width, height).
    """
    return int(_image_width[None]), int(_image_height[None])


def _check_render_target_initialized() -> None:
    """Check if render target is initialized and raise if not."""
    if _render_target_initialized[None] == 0:
        raise RuntimeError("Render target not set up. Call setup_render_target() first.")


def get_image() -> "ti.MatrixField":
    """Get the color buffer.

    Note: This returns the full preallocated buffer. Use get_image_dimensions()
    to determine the active region.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()
    return _color_buffer


# =============================================================================
# Shading
# =============================================================================


@ti.func
def ray_color(origin: vec3, direction: vec3, depth: ti.i32) -> vec3:
    """Estimate the light arriving along a ray.

    Equivalent to the recursive definition

        ray_color(ray, 0) = black
        ray_color(ray, d) = dot(n, b) * ray_color(bounce_ray, d - 1)   on a hit
                          = sky_color(ray.direction)                   on a miss

    where b is a random unit direction in the hemisphere around the hit
    normal n and bounce_ray starts at the hit point.

    Args:
        origin: Ray origin.
        direction: Ray direction (need not be normalized).
        depth: Remaining bounce budget.

    Returns:
        The estimated radiance (RGB).
    """
    color = BLACK
    throughput = 1.0
    ray_origin = origin
    ray_direction = direction
    active = 1

    for _ in range(depth):
        if active == 1:
            hit_info = intersect_scene(ray_origin, ray_direction, T_MIN, T_MAX)
            if hit_info.hit == 1:
                bounce = random_on_hemisphere(hit_info.normal)
                throughput *= dot(hit_info.normal, bounce)
                ray_origin = hit_info.at
                ray_direction = bounce
            else:
                color = throughput * sky_color(ray_direction)
                active = 0

    # Paths still bouncing when the budget runs out contribute black
    return color


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _render_one_spp(width: ti.i32, height: ti.i32, max_depth: ti.i32):
    """Render one sample per pixel and accumulate.

    Each pixel only touches its own buffer slot, so the outer loop is free
    to run in parallel.
    """
    for y, x in ti.ndrange(height, width):
        ray = get_ray_jittered(x, y, width, height)
        color = ray_color(ray.origin, ray.direction, max_depth)

        _sample_count[y, x] += 1
        n = _sample_count[y, x]

        # Running average: avg_n = avg_{n-1} + (x_n - avg_{n-1}) / n
        _color_buffer[y, x] += (color - _color_buffer[y, x]) / ti.cast(n, ti.f32)


# Result slot for the single-sample kernels below
_single_result = ti.Vector.field(3, dtype=ti.f32, shape=())


@ti.kernel
def _render_single_pixel(
    pixel_x: ti.i32, pixel_y: ti.i32, width: ti.i32, height: ti.i32, max_depth: ti.i32
):
    """Render a single sample for a specific pixel without accumulating."""
    # One-iteration outer loop keeps the bounce loop serial
    for _ in range(1):
        ray = get_ray_jittered(pixel_x, pixel_y, width, height)
        _single_result[None] = ray_color(ray.origin, ray.direction, max_depth)


@ti.kernel
def _trace_single_ray(origin: vec3, direction: vec3, max_depth: ti.i32):
    for _ in range(1):
        _single_result[None] = ray_color(origin, direction, max_depth)


# =============================================================================
# Public Rendering API
# =============================================================================


def trace_ray(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> tuple[float, float, float]:
    """Shade one ray against the current scene.

    Python-callable wrapper around ray_color(), mainly for testing.

    Args:
        origin: Ray origin.
        direction: Ray direction.
        max_depth: Bounce budget.

    Returns:
        Tuple of (R, G, B) color values.
    """
    _trace_single_ray(vec3(*origin), vec3(*direction), max_depth)
    color = _single_result[None]
    return (float(color[0]), float(color[1]), float(color[2]))


def render_sample(
    pixel_x: int, pixel_y: int, max_depth: int = DEFAULT_MAX_DEPTH
) -> tuple[float, float, float]:
    """Render a single jittered sample for a specific pixel.

    Args:
        pixel_x: Pixel column (0 = left).
        pixel_y: Pixel row (0 = top).
        max_depth: Bounce budget.

    Returns:
        Tuple of (R, G, B) color values.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    _render_single_pixel(pixel_x, pixel_y, width, height, max_depth)
    color = _single_result[None]

    return (float(color[0]), float(color[1]), float(color[2]))


def render_image(num_samples: int = 1, max_depth: int = DEFAULT_MAX_DEPTH) -> None:
    """Render the image with the specified number of samples per pixel.

    Progressively accumulates samples into the color buffer. Can be called
    multiple times to add more samples for convergence.

    Args:
        num_samples: Number of samples to render per pixel.
        max_depth: Bounce budget for every path.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()

    for _ in range(num_samples):
        _render_one_spp(width, height, max_depth)


def get_total_samples() -> int:
    """Get the number of samples accumulated per pixel.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    return int(_sample_count[0, 0])


def get_linear_image_numpy() -> npt.NDArray[np.float32]:
    """Get the averaged linear colors of the active region.

    Returns:
        NumPy array of shape (height, width, 3), top row first, unclamped.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    full_image = _color_buffer.to_numpy()
    return full_image[:height, :width, :].astype(np.float32)


def quantize(image: npt.NDArray[np.floating]) -> npt.NDArray[np.uint8]:
    """Gamma-correct and quantize linear colors to 8 bits per channel.

    Applies a square-root gamma and truncates 255 * sqrt(c) toward zero,
    with channels clamped to [0, 1] first.

    Args:
        image: Linear color array of any shape.

    Returns:
        uint8 array of the same shape.
    """
    clamped = np.clip(np.nan_to_num(image, nan=0.0), 0.0, 1.0)
    return (255.0 * np.sqrt(clamped)).astype(np.uint8)


def get_pixels() -> npt.NDArray[np.uint8]:
    """Get the final pixel buffer.

    Returns:
        C-contiguous uint8 array of shape (height, width, 3), row-major with
        the top row first. tobytes() gives packed RGB with no padding.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    return np.ascontiguousarray(quantize(get_linear_image_numpy()))
