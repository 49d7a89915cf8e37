"""Progressive renderer for iterative sample accumulation.

This module provides a convenient wrapper around the core integrator that supports:
- Progressive rendering that refines over time
- Batch rendering (multiple SPP in one call)
- Progress callbacks for UI updates
- Easy reset and re-render functionality

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from skytrace.core.progressive import ProgressiveRenderer
    >>> from skytrace.scene.parser import load_scene_file
    >>>
    >>> scene = load_scene_file("scene.txt", aspect_ratio=1.0)
    >>> renderer = ProgressiveRenderer(256, 256, max_depth=2)
    >>> renderer.render(30)  # Render 30 SPP
    >>> pixels = renderer.get_pixels()
"""

from collections.abc import Callable, Generator
from typing import Any

import numpy as np
import numpy.typing as npt

from skytrace.core.integrator import (
    DEFAULT_MAX_DEPTH,
    clear_render_target,
    get_image,
    get_linear_image_numpy,
    get_pixels,
    get_total_samples,
    render_image,
    setup_render_target,
)

# Type alias for progress callback
# Callback receives (current_samples, total_target_samples)
ProgressCallback = Callable[[int, int], None]


class ProgressiveRenderer:
    """A progressive renderer that accumulates samples over time.

    The renderer maintains its own state for width/height/depth and delegates
    to the global integrator buffers (which are Taichi fields).

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        max_depth: Bounce budget for every path.
    """

    def __init__(self, width: int, height: int, max_depth: int = DEFAULT_MAX_DEPTH) -> None:
        """Initialize the progressive renderer.

        Args:
            width: Image width in pixels (max 2048).
            height: Image height in pixels (max 2048).
            max_depth: Bounce budget for every path (must be positive).

        Raises:
            ValueError: If dimensions are invalid or max_depth is not positive.
        """
        if max_depth <= 0:
            raise ValueError(f"max_depth must be positive, got {max_depth}")
        self._width = width
        self._height = height
        self.max_depth = max_depth
        setup_render_target(width, height)

    @property
    def width(self) -> int:
        """Get the image width."""
        return self._width

    @property
    def height(self) -> int:
        """Get the image height."""
        return self._height

    @property
    def sample_count(self) -> int:
        """Get the current number of accumulated samples per pixel."""
        return get_total_samples()

    def reset(self) -> None:
        """Reset the accumulator for a new render.

        Clears the color buffer and sample count, allowing a fresh render
        without changing the image dimensions.
        """
        clear_render_target()

    def resize(self, width: int, height: int) -> None:
        """Resize the render target and reset accumulator.

        Raises:
            ValueError: If dimensions exceed maximum supported size.
        """
        self._width = width
        self._height = height
        setup_render_target(width, height)

    def render(
        self,
        num_samples: int = 1,
        batch_size: int = 1,
        callback: ProgressCallback | None = None,
    ) -> None:
        """Render samples progressively with optional progress callback.

        Accumulates the specified number of samples into the existing buffer.
        Can be called multiple times to continue refining the image.

        Args:
            num_samples: Total number of samples to add.
            batch_size: Number of samples to render before each callback.
            callback: Optional callback function called after each batch.
                Receives (current_total_samples, target_total_samples).
        """
        for current, target in self.render_progressive(num_samples, batch_size):
            if callback is not None:
                callback(current, target)

    def render_progressive(
        self,
        num_samples: int = 1,
        batch_size: int = 1,
    ) -> Generator[tuple[int, int], None, None]:
        """Render samples progressively, yielding progress after each batch.

        Args:
            num_samples: Total number of samples to add.
            batch_size: Number of samples to render before each yield.

        Yields:
            Tuple of (current_total_samples, target_total_samples).
        """
        if num_samples <= 0:
            return

        start_samples = self.sample_count
        target_samples = start_samples + num_samples

        remaining = num_samples
        while remaining > 0:
            batch = min(max(batch_size, 1), remaining)
            render_image(batch, self.max_depth)
            remaining -= batch
            yield (self.sample_count, target_samples)

    def get_image(self) -> Any:
        """Get the raw Taichi color buffer field.

        Note: This returns the full preallocated buffer. Use width/height
        properties to determine the active region.
        """
        return get_image()

    def get_image_numpy(self) -> npt.NDArray[np.float32]:
        """Get the averaged linear colors, shape (height, width, 3)."""
        return get_linear_image_numpy()

    def get_pixels(self) -> npt.NDArray[np.uint8]:
        """Get the gamma-corrected 8-bit pixel buffer, shape (height, width, 3)."""
        return get_pixels()

    def save_image(self, filepath: str) -> None:
        """Save the rendered image as a PNG file."""
        from skytrace.preview.export import save_png_from_pixels

        save_png_from_pixels(self.get_pixels(), filepath)

    def __repr__(self) -> str:
        """Return a string representation of the renderer state."""
        return (
            f"ProgressiveRenderer(width={self.width}, height={self.height}, "
            f"max_depth={self.max_depth}, samples={self.sample_count})"
        )
