"""RGB color constants and blending.

Colors share the ``vec3`` representation with geometric vectors, so the usual
arithmetic (sum, scale, per-channel product, division) applies directly.
Channels are unbounded while samples accumulate and are only clamped when the
image is quantized for output.
"""

import taichi as ti
import taichi.math as tm

from skytrace.core.ray import normalize

# Type alias for RGB colors
color3 = tm.vec3

BLACK = color3(0.0, 0.0, 0.0)
WHITE = color3(1.0, 1.0, 1.0)

# Sky tint toward the zenith
LIGHT_BLUE = color3(0.25, 0.5, 1.0)


@ti.func
def blend(c1: color3, c2: color3, factor: ti.f32) -> color3:
    """Linearly interpolate between two colors.

    Args:
        c1: Color returned when factor is 1.
        c2: Color returned when factor is 0.
        factor: Interpolation weight, usually in [0, 1].

    Returns:
        c1 * factor + c2 * (1 - factor).
    """
    return c1 * factor + c2 * (1.0 - factor)


@ti.func
def sky_color(direction: tm.vec3) -> color3:
    """Background color for a ray that escapes the scene.

    A vertical gradient from white straight down to light blue straight up,
    driven by the y component of the unit direction.
    """
    unit_direction = normalize(direction)
    t = 0.5 * (unit_direction.y + 1.0)
    return blend(LIGHT_BLUE, WHITE, t)
