"""Image export utilities for rendered images.

This module turns the quantized pixel buffer produced by the integrator into
PNG images. The buffer is already gamma-corrected, so export only validates
it and hands it to Pillow.

Supported formats:
    - PNG (8-bit RGB via Pillow)

Example:
    >>> from skytrace.preview.export import save_png
    >>> from skytrace.core.progressive import ProgressiveRenderer
    >>>
    >>> renderer = ProgressiveRenderer(640, 360)
    >>> renderer.render(30)
    >>> save_png(renderer, "output.png")
"""

from __future__ import annotations

from typing import TYPE_CHECKING, BinaryIO

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

if TYPE_CHECKING:
    from skytrace.core.progressive import ProgressiveRenderer


def pixels_to_image(pixels: npt.NDArray[np.uint8]) -> PILImage.Image:
    """Wrap a pixel buffer in a Pillow RGB image.

    Args:
        pixels: uint8 array of shape (height, width, 3), top row first.

    Returns:
        The Pillow image.

    Raises:
        ValueError: If the array has the wrong shape or dtype.
    """
    if pixels.ndim != 3 or pixels.shape[2] != 3:
        raise ValueError(f"Expected pixel buffer of shape (H, W, 3), got {pixels.shape}")
    if pixels.dtype != np.uint8:
        raise ValueError(f"Expected uint8 pixel buffer, got {pixels.dtype}")
    return PILImage.fromarray(np.ascontiguousarray(pixels))


def save_png(renderer: ProgressiveRenderer, filepath: str) -> None:
    """Save the renderer's current image as a PNG file.

    Args:
        renderer: The ProgressiveRenderer instance to save.
        filepath: Output file path (should end in .png).
    """
    save_png_from_pixels(renderer.get_pixels(), filepath)


def save_png_from_pixels(pixels: npt.NDArray[np.uint8], filepath: str) -> None:
    """Save a pixel buffer as a PNG file."""
    pixels_to_image(pixels).save(filepath, format="PNG")


def write_png(pixels: npt.NDArray[np.uint8], stream: BinaryIO) -> None:
    """Encode a pixel buffer as PNG into a binary stream.

    Args:
        pixels: uint8 array of shape (height, width, 3).
        stream: Writable binary stream, e.g. sys.stdout.buffer.
    """
    pixels_to_image(pixels).save(stream, format="PNG")
    stream.flush()


def compute_rmse(
    image_a: npt.NDArray[np.generic],
    image_b: npt.NDArray[np.generic],
) -> float:
    """Compute root mean squared error between two images.

    Args:
        image_a: First image array.
        image_b: Second image array (must have same shape as image_a).

    Returns:
        RMSE value (lower is more similar).

    Raises:
        ValueError: If image shapes don't match.
    """
    if image_a.shape != image_b.shape:
        raise ValueError(f"Image shapes must match: {image_a.shape} vs {image_b.shape}")

    diff = image_a.astype(np.float64) - image_b.astype(np.float64)
    return float(np.sqrt(np.mean(diff**2)))
