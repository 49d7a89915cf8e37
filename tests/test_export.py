"""Tests for PNG export.

These tests only use NumPy arrays, so no Taichi fields are involved.
"""

import io

import numpy as np
import pytest
from PIL import Image as PILImage


def _gradient(height=4, width=6):
    """A small image whose pixels are all different."""
    pixels = np.zeros((height, width, 3), dtype=np.uint8)
    pixels[:, :, 0] = np.arange(width, dtype=np.uint8) * 20
    pixels[:, :, 1] = np.arange(height, dtype=np.uint8)[:, None] * 60
    pixels[:, :, 2] = 200
    return pixels


class TestPixelsToImage:
    """Test conversion of pixel buffers to Pillow images."""

    def test_size_and_mode(self):
        """Test width and height come from the buffer's columns and rows."""
        from skytrace.preview.export import pixels_to_image

        img = pixels_to_image(_gradient(4, 6))
        assert img.size == (6, 4)
        assert img.mode == "RGB"

    def test_top_row_first(self):
        """Test row 0 of the buffer is the top row of the image."""
        from skytrace.preview.export import pixels_to_image

        pixels = _gradient()
        img = pixels_to_image(pixels)
        assert img.getpixel((0, 0)) == tuple(int(c) for c in pixels[0, 0])
        assert img.getpixel((5, 3)) == tuple(int(c) for c in pixels[3, 5])

    def test_wrong_shape(self):
        """Test buffers without three channels are rejected."""
        from skytrace.preview.export import pixels_to_image

        with pytest.raises(ValueError, match="shape"):
            pixels_to_image(np.zeros((4, 4), dtype=np.uint8))
        with pytest.raises(ValueError, match="shape"):
            pixels_to_image(np.zeros((4, 4, 4), dtype=np.uint8))

    def test_wrong_dtype(self):
        """Test float buffers are rejected."""
        from skytrace.preview.export import pixels_to_image

        with pytest.raises(ValueError, match="uint8"):
            pixels_to_image(np.zeros((4, 4, 3), dtype=np.float32))


class TestPngOutput:
    """Test PNG writing."""

    def test_write_png_to_stream(self):
        """Test the encoded stream decodes to the same pixels."""
        from skytrace.preview.export import write_png

        pixels = _gradient()
        stream = io.BytesIO()
        write_png(pixels, stream)

        assert stream.getvalue().startswith(b"\x89PNG\r\n\x1a\n")
        stream.seek(0)
        with PILImage.open(stream) as img:
            np.testing.assert_array_equal(np.asarray(img), pixels)

    def test_save_png_from_pixels(self, tmp_path):
        """Test saving to a file path."""
        from skytrace.preview.export import save_png_from_pixels

        pixels = _gradient()
        path = tmp_path / "image.png"
        save_png_from_pixels(pixels, str(path))

        with PILImage.open(path) as img:
            assert img.format == "PNG"
            np.testing.assert_array_equal(np.asarray(img), pixels)

    def test_non_contiguous_buffer(self):
        """Test a strided view is encoded correctly."""
        from skytrace.preview.export import write_png

        pixels = _gradient(4, 12)[:, ::2, :]
        stream = io.BytesIO()
        write_png(pixels, stream)

        stream.seek(0)
        with PILImage.open(stream) as img:
            np.testing.assert_array_equal(np.asarray(img), pixels)


class TestComputeRmse:
    """Test RMSE computation."""

    def test_identical_images(self):
        """Test identical images have zero error."""
        from skytrace.preview.export import compute_rmse

        pixels = _gradient()
        assert compute_rmse(pixels, pixels) == 0.0

    def test_known_difference(self):
        """Test a constant offset gives that offset as error."""
        from skytrace.preview.export import compute_rmse

        a = np.zeros((4, 4, 3), dtype=np.uint8)
        b = np.full((4, 4, 3), 3, dtype=np.uint8)
        assert compute_rmse(a, b) == pytest.approx(3.0)

    def test_shape_mismatch(self):
        """Test mismatched shapes are rejected."""
        from skytrace.preview.export import compute_rmse

        with pytest.raises(ValueError, match="shapes must match"):
            compute_rmse(np.zeros((2, 2, 3)), np.zeros((3, 2, 3)))
