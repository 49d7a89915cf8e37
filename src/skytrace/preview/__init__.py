"""Preview module for rendered output.

Components:
    export: PNG export of the quantized pixel buffer

Example:
    >>> from skytrace.preview import save_png
    >>> from skytrace.core.progressive import ProgressiveRenderer
    >>>
    >>> renderer = ProgressiveRenderer(640, 360)
    >>> renderer.render(30)
    >>> save_png(renderer, "output.png")
"""

from skytrace.preview.export import (
    compute_rmse,
    pixels_to_image,
    save_png,
    save_png_from_pixels,
    write_png,
)

__all__ = [
    "pixels_to_image",
    "save_png",
    "save_png_from_pixels",
    "write_png",
    "compute_rmse",
]
