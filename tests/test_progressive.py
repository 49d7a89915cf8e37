"""Tests for the progressive renderer.

This module tests the ProgressiveRenderer class including:
- Initialization and setup
- Progressive sample accumulation
- Batch rendering
- Progress callbacks and generators
- Reset functionality
- Image output

Note: Imports are done inside test methods to avoid Taichi initialization issues.
The conftest.py fixture initializes Taichi before tests run.
"""

import numpy as np
import pytest


class TestProgressiveRendererInit:
    """Test ProgressiveRenderer initialization."""

    def test_init_creates_render_target(self):
        """Test that initialization creates a render target with correct dimensions."""
        from skytrace.core.integrator import get_image_dimensions
        from skytrace.core.progressive import ProgressiveRenderer

        renderer = ProgressiveRenderer(128, 96)

        assert renderer.width == 128
        assert renderer.height == 96
        assert renderer.sample_count == 0
        assert get_image_dimensions() == (128, 96)

    def test_default_depth(self):
        """Test the default bounce budget."""
        from skytrace.core.progressive import ProgressiveRenderer

        assert ProgressiveRenderer(8, 8).max_depth == 2

    def test_invalid_depth(self):
        """Test a non-positive bounce budget is rejected."""
        from skytrace.core.progressive import ProgressiveRenderer

        with pytest.raises(ValueError, match="max_depth"):
            ProgressiveRenderer(8, 8, max_depth=0)

    def test_invalid_dimensions(self):
        """Test oversized images are rejected."""
        from skytrace.core.progressive import ProgressiveRenderer

        with pytest.raises(ValueError):
            ProgressiveRenderer(4096, 16)

    def test_repr(self):
        """Test the string representation lists the renderer state."""
        from skytrace.core.progressive import ProgressiveRenderer

        renderer = ProgressiveRenderer(16, 8, max_depth=3)
        assert repr(renderer) == "ProgressiveRenderer(width=16, height=8, max_depth=3, samples=0)"


class TestProgressiveRendering:
    """Test sample accumulation."""

    def test_render_accumulates(self, setup_default_camera):
        """Test that render calls add up."""
        from skytrace.core.progressive import ProgressiveRenderer

        renderer = ProgressiveRenderer(8, 8)
        renderer.render(2)
        renderer.render(3)
        assert renderer.sample_count == 5

    def test_callback_reports_batches(self, setup_default_camera):
        """Test the callback is called once per batch with running totals."""
        from skytrace.core.progressive import ProgressiveRenderer

        renderer = ProgressiveRenderer(8, 8)
        progress = []
        renderer.render(num_samples=5, batch_size=2, callback=lambda c, t: progress.append((c, t)))

        assert progress == [(2, 5), (4, 5), (5, 5)]

    def test_generator_yields_progress(self, setup_default_camera):
        """Test render_progressive continues from the current sample count."""
        from skytrace.core.progressive import ProgressiveRenderer

        renderer = ProgressiveRenderer(8, 8)
        renderer.render(1)

        assert list(renderer.render_progressive(num_samples=3)) == [(2, 4), (3, 4), (4, 4)]

    def test_zero_samples_renders_nothing(self, setup_default_camera):
        """Test that requesting no samples leaves the buffer alone."""
        from skytrace.core.progressive import ProgressiveRenderer

        renderer = ProgressiveRenderer(8, 8)
        assert list(renderer.render_progressive(num_samples=0)) == []
        assert renderer.sample_count == 0

    def test_reset(self, setup_default_camera):
        """Test reset clears accumulated samples."""
        from skytrace.core.progressive import ProgressiveRenderer

        renderer = ProgressiveRenderer(8, 8)
        renderer.render(2)
        renderer.reset()
        assert renderer.sample_count == 0
        assert np.allclose(renderer.get_image_numpy(), 0.0)

    def test_resize(self, setup_default_camera):
        """Test resize changes the output shape and resets samples."""
        from skytrace.core.progressive import ProgressiveRenderer

        renderer = ProgressiveRenderer(8, 8)
        renderer.render(1)
        renderer.resize(12, 4)

        assert renderer.sample_count == 0
        renderer.render(1)
        assert renderer.get_pixels().shape == (4, 12, 3)


class TestProgressiveOutput:
    """Test image output."""

    def test_get_pixels(self, setup_default_camera):
        """Test the quantized pixels match the linear image."""
        from skytrace.core.integrator import quantize
        from skytrace.core.progressive import ProgressiveRenderer

        renderer = ProgressiveRenderer(10, 6)
        renderer.render(2)

        pixels = renderer.get_pixels()
        assert pixels.shape == (6, 10, 3)
        assert pixels.dtype == np.uint8
        np.testing.assert_array_equal(pixels, quantize(renderer.get_image_numpy()))

    def test_save_image(self, setup_default_camera, tmp_path):
        """Test save_image writes a PNG of the right size."""
        from PIL import Image as PILImage

        from skytrace.core.progressive import ProgressiveRenderer

        renderer = ProgressiveRenderer(10, 6)
        renderer.render(1)
        path = tmp_path / "out.png"
        renderer.save_image(str(path))

        with PILImage.open(path) as img:
            assert img.size == (10, 6)
            assert img.mode == "RGB"
