"""Pinhole camera model for perspective projection ray generation.

This module implements a pinhole camera that generates primary rays for rendering.
The camera supports:
- Look-at positioning (eye, look_at, up)
- Vertical field of view specification
- Arbitrary aspect ratios
- An optional focal length setting the distance to the image plane

The camera stores three viewport vectors relative to the eye:
- horizontal: spans the full image width, pointing right
- vertical: spans the full image height, pointing up
- upper_left: offset from the eye to the upper-left corner of the viewport

Image coordinates (u, v) run from the left edge (u = 0) to the right edge
(u = 1) and from the top row (v = 0) to the bottom row (v = 1), matching the
row order of the output pixel buffer.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from skytrace.camera.pinhole import PinholeCamera, setup_camera, get_ray
    >>>
    >>> # Camera at the origin looking down +z
    >>> camera = PinholeCamera(
    ...     eye=(0.0, 0.0, 0.0),
    ...     look_at=(0.0, 0.0, 3.0),
    ...     up=(0.0, 1.0, 0.0),
    ...     fov=30.0,
    ...     aspect_ratio=16.0 / 9.0,
    ... )
    >>> setup_camera(camera)
    >>>
    >>> @ti.kernel
    ... def render():
    ...     ray = get_ray(0.5, 0.5)  # Ray through image center
"""

import math
from dataclasses import dataclass

import numpy as np
import numpy.typing as npt
import taichi as ti
from loguru import logger

from skytrace.core.ray import Ray, make_ray

# Default vertical field of view in degrees
DEFAULT_FOV = 30.0

# =============================================================================
# Camera Data Structures
# =============================================================================


@dataclass(frozen=True)
class PinholeCamera:
    """View description for a pinhole (perspective) camera.

    Attributes:
        eye: Camera position in world space (x, y, z).
        look_at: Point the camera is looking at in world space (x, y, z).
        up: Up direction hint (typically (0, 1, 0)). Only its component
            perpendicular to the view direction is used.
        fov: Vertical field of view in degrees.
        aspect_ratio: Width divided by height of the output image.
        focal_length: Distance from the eye to the image plane. When None,
            the image plane passes through look_at.
    """

    eye: tuple[float, float, float]
    look_at: tuple[float, float, float]
    up: tuple[float, float, float] = (0.0, 1.0, 0.0)
    fov: float = DEFAULT_FOV
    aspect_ratio: float = 1.0
    focal_length: float | None = None

    def build(self) -> "Camera":
        """Compute the viewport vectors for this view.

        Raises:
            ValueError: If the view is degenerate (eye equal to look_at, up
                parallel to the view direction, non-positive aspect ratio or
                focal length).
        """
        return Camera.from_view(self)


@dataclass(frozen=True, eq=False)
class Camera:
    """Precomputed viewport geometry of a pinhole camera.

    Attributes:
        eye: Ray origin for every primary ray.
        horizontal: Vector spanning the viewport from left to right.
        vertical: Vector spanning the viewport from bottom to top.
        upper_left: Offset from the eye to the upper-left viewport corner.
    """

    eye: npt.NDArray[np.float64]
    horizontal: npt.NDArray[np.float64]
    vertical: npt.NDArray[np.float64]
    upper_left: npt.NDArray[np.float64]

    @classmethod
    def from_view(cls, view: PinholeCamera) -> "Camera":
        """Build the viewport vectors from a view description.

        The forward vector runs from the eye to look_at, rescaled to the
        focal length when one is given; its length is the distance to the
        image plane. The viewport height at that distance follows from the
        field of view, and the width from the aspect ratio.

        Args:
            view: The camera view description.

        Returns:
            The camera geometry.

        Raises:
            ValueError: If the view is degenerate.
        """
        if view.aspect_ratio <= 0.0:
            raise ValueError(f"Aspect ratio must be positive, got {view.aspect_ratio}")
        if view.focal_length is not None and view.focal_length <= 0.0:
            raise ValueError(f"Focal length must be positive, got {view.focal_length}")

        eye = np.array(view.eye, dtype=np.float64)
        look_at = np.array(view.look_at, dtype=np.float64)
        up = np.array(view.up, dtype=np.float64)

        forward = look_at - eye
        distance = np.linalg.norm(forward)
        if distance == 0.0:
            raise ValueError("Camera eye and look_at must be different points")
        if view.focal_length is not None:
            forward = forward / distance * view.focal_length

        theta = math.radians(view.fov)
        viewport_height = abs(math.tan(theta / 2.0)) * np.linalg.norm(forward) * 2.0
        viewport_width = viewport_height * view.aspect_ratio

        # Remove the part of up along the view direction
        vertical = up - np.dot(up, forward) / np.dot(forward, forward) * forward
        vertical_norm = np.linalg.norm(vertical)
        if vertical_norm == 0.0:
            raise ValueError("Camera up vector must not be parallel to the view direction")
        vertical = vertical / vertical_norm * viewport_height

        # Negated so that increasing u moves right in the image
        horizontal = -np.cross(vertical, forward)
        horizontal = horizontal / np.linalg.norm(horizontal) * viewport_width

        upper_left = forward - 0.5 * vertical - 0.5 * horizontal

        return cls(eye=eye, horizontal=horizontal, vertical=vertical, upper_left=upper_left)

    def ray_direction(self, u: float, v: float) -> npt.NDArray[np.float64]:
        """Compute the (unnormalized) ray direction for image coordinates.

        Python-side counterpart of get_ray(), useful for inspection.
        """
        return self.upper_left + u * self.horizontal + (1.0 - v) * self.vertical


def default_camera(
    aspect_ratio: float,
    fov: float | None = None,
    focal_length: float | None = None,
) -> PinholeCamera:
    """View used when a scene does not define its own camera.

    The eye sits at the origin looking down +z toward (0, 0, 3) with +y up.

    Args:
        aspect_ratio: Width divided by height of the output image.
        fov: Vertical field of view in degrees. Defaults to DEFAULT_FOV.
        focal_length: Optional distance to the image plane.
    """
    return PinholeCamera(
        eye=(0.0, 0.0, 0.0),
        look_at=(0.0, 0.0, 3.0),
        up=(0.0, 1.0, 0.0),
        fov=DEFAULT_FOV if fov is None else fov,
        aspect_ratio=aspect_ratio,
        focal_length=focal_length,
    )


# =============================================================================
# Taichi Fields for Camera State (GPU-accessible)
# =============================================================================

_camera_eye = ti.Vector.field(3, dtype=ti.f32, shape=())
_viewport_horizontal = ti.Vector.field(3, dtype=ti.f32, shape=())
_viewport_vertical = ti.Vector.field(3, dtype=ti.f32, shape=())
_upper_left = ti.Vector.field(3, dtype=ti.f32, shape=())


# =============================================================================
# Camera Setup (Python-side, called once per camera configuration)
# =============================================================================


def setup_camera(camera: Camera | PinholeCamera) -> Camera:
    """Upload camera geometry to the Taichi fields used by get_ray().

    Args:
        camera: Either precomputed camera geometry or a view description,
            which is built first.

    Returns:
        The camera geometry that was uploaded.

    Raises:
        ValueError: If a view description is degenerate.
    """
    if isinstance(camera, PinholeCamera):
        camera = camera.build()

    _camera_eye[None] = camera.eye.tolist()
    _viewport_horizontal[None] = camera.horizontal.tolist()
    _viewport_vertical[None] = camera.vertical.tolist()
    _upper_left[None] = camera.upper_left.tolist()

    logger.debug(
        "Camera eye={} horizontal={} vertical={} upper_left={}",
        camera.eye.tolist(),
        camera.horizontal.tolist(),
        camera.vertical.tolist(),
        camera.upper_left.tolist(),
    )
    return camera


# =============================================================================
# Ray Generation (Taichi-compatible, GPU-callable)
# =============================================================================


@ti.func
def get_ray(u: ti.f32, v: ti.f32) -> Ray:
    """Generate a ray through image coordinates (u, v).

    - u = 0: left edge of image, u = 1: right edge
    - v = 0: top edge of image, v = 1: bottom edge

    The direction is left unnormalized; its length grows toward the
    viewport corners.

    Args:
        u: Horizontal coordinate in [0, 1] (left to right).
        v: Vertical coordinate in [0, 1] (top to bottom).

    Returns:
        A Ray with origin at the eye through the given viewport point.
    """
    direction = (
        _upper_left[None] + u * _viewport_horizontal[None] + (1.0 - v) * _viewport_vertical[None]
    )
    return make_ray(_camera_eye[None], direction)


@ti.func
def get_ray_jittered(pixel_x: ti.i32, pixel_y: ti.i32, width: ti.i32, height: ti.i32) -> Ray:
    """Generate a ray through a random point inside a pixel.

    Adds a uniform [0, 1) offset to both pixel coordinates before converting
    to image coordinates, so averaged samples anti-alias edges.

    Args:
        pixel_x: Pixel column (0 = left).
        pixel_y: Pixel row (0 = top).
        width: Image width in pixels.
        height: Image height in pixels.
    """
    u = (ti.cast(pixel_x, ti.f32) + ti.random(ti.f32)) / ti.cast(width, ti.f32)
    v = (ti.cast(pixel_y, ti.f32) + ti.random(ti.f32)) / ti.cast(height, ti.f32)
    return get_ray(u, v)


# =============================================================================
# Utility Functions
# =============================================================================


def get_camera_info() -> dict[str, tuple[float, float, float]]:
    """Get current camera state for debugging.

    Returns:
        Dictionary with eye, horizontal, vertical and upper_left as read back
        from the Taichi fields.
    """
    fields = {
        "eye": _camera_eye,
        "horizontal": _viewport_horizontal,
        "vertical": _viewport_vertical,
        "upper_left": _upper_left,
    }
    info = {}
    for name, f in fields.items():
        value = f[None]
        info[name] = (float(value[0]), float(value[1]), float(value[2]))
    return info
