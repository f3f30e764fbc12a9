"""Tests for image export, framebuffer access and preview display.

Tests cover:
- 8-bit quantization with clamping and round-half-up
- Binary PPM header and pixel bytes
- PNG output through Pillow
- Framebuffer indexing
- Matplotlib preview (non-interactive backend)
"""

from __future__ import annotations

import numpy as np
import pytest


def _framebuffer(pixels):
    from src.whitted.core.framebuffer import Framebuffer

    return Framebuffer.from_array(np.asarray(pixels, dtype=np.float32))


class TestImageToUint8:
    """Tests for float to byte conversion."""

    def test_clamp_and_round(self):
        """Test clamping to [0, 1] and rounding half up."""
        from src.whitted.preview.export import image_to_uint8

        image = np.array([[[-0.5, 0.0, 0.5], [1.0, 1.5, 0.25]]], dtype=np.float32)
        result = image_to_uint8(image)

        assert result.dtype == np.uint8
        np.testing.assert_array_equal(result, [[[0, 0, 128], [255, 255, 64]]])


class TestSavePpm:
    """Tests for the binary PPM writer."""

    def test_header_and_bytes(self, tmp_path):
        """Test the exact file contents of a 2x1 image."""
        from src.whitted.preview.export import save_ppm

        framebuffer = _framebuffer([[[1.0, 0.0, 0.5], [0.2, 2.0, -1.0]]])
        path = tmp_path / "out.ppm"
        save_ppm(framebuffer, path)

        data = path.read_bytes()
        header = b"P6\n2 1\n255\n"
        assert data.startswith(header)
        assert data[len(header) :] == bytes([255, 0, 128, 51, 255, 0])

    def test_rows_written_top_first(self, tmp_path):
        """Test that row 0 is written first."""
        from src.whitted.preview.export import save_ppm

        framebuffer = _framebuffer([[[1.0, 1.0, 1.0]], [[0.0, 0.0, 0.0]]])
        path = tmp_path / "column.ppm"
        save_ppm(framebuffer, path)

        data = path.read_bytes()
        assert data == b"P6\n1 2\n255\n" + bytes([255, 255, 255, 0, 0, 0])

    def test_unwritable_path_raises(self, tmp_path):
        """Test that I/O failures propagate."""
        from src.whitted.preview.export import save_ppm

        with pytest.raises(OSError):
            save_ppm(_framebuffer(np.zeros((1, 1, 3))), tmp_path / "missing" / "out.ppm")


class TestSavePng:
    """Tests for the PNG writer."""

    def test_png_round_trip(self, tmp_path):
        """Test that PNG pixels match the quantized framebuffer."""
        from PIL import Image

        from src.whitted.preview.export import image_to_uint8, save_png

        pixels = np.random.default_rng(3).random((4, 5, 3)).astype(np.float32)
        path = tmp_path / "out.png"
        save_png(_framebuffer(pixels), path)

        with Image.open(path) as image:
            assert image.size == (5, 4)
            np.testing.assert_array_equal(np.asarray(image), image_to_uint8(pixels))

    def test_save_image_picks_format(self, tmp_path):
        """Test that save_image chooses the format from the suffix."""
        from src.whitted.preview.export import save_image

        framebuffer = _framebuffer(np.zeros((2, 2, 3)))
        save_image(framebuffer, tmp_path / "a.png")
        save_image(framebuffer, tmp_path / "b.ppm")

        assert (tmp_path / "a.png").read_bytes()[:4] == b"\x89PNG"
        assert (tmp_path / "b.ppm").read_bytes()[:3] == b"P6\n"


class TestFramebuffer:
    """Tests for framebuffer indexing."""

    def test_get_and_set(self):
        """Test reading and writing a pixel by (row, column)."""
        from src.whitted.core.framebuffer import Framebuffer

        framebuffer = Framebuffer(3, 2)
        framebuffer[1, 2] = (0.1, 0.2, 0.3)

        assert framebuffer.dimensions == (3, 2)
        assert framebuffer[1, 2] == pytest.approx((0.1, 0.2, 0.3))
        assert framebuffer[0, 0] == (0.0, 0.0, 0.0)

    def test_out_of_range_raises(self):
        """Test that invalid indices raise IndexError."""
        from src.whitted.core.framebuffer import Framebuffer

        framebuffer = Framebuffer(3, 2)
        with pytest.raises(IndexError):
            framebuffer[2, 0]
        with pytest.raises(IndexError):
            framebuffer[0, 3] = (1.0, 1.0, 1.0)

    def test_invalid_dimensions(self):
        """Test that empty framebuffers are rejected."""
        from src.whitted.core.framebuffer import Framebuffer

        with pytest.raises(ValueError):
            Framebuffer(0, 4)


class TestShowPreview:
    """Tests for the Matplotlib preview."""

    def test_show_preview_with_edges(self, monkeypatch):
        """Test that the preview draws image and edge panels."""
        import matplotlib

        matplotlib.use("Agg")
        import matplotlib.pyplot as plt

        from src.whitted.preview.display import show_preview

        monkeypatch.setattr(plt, "show", lambda **kwargs: None)

        framebuffer = _framebuffer(np.random.default_rng(0).random((4, 6, 3)))
        show_preview(framebuffer, edge_mask=np.zeros((4, 6), dtype=bool))

        figure = plt.gcf()
        assert len(figure.axes) == 2
        assert figure.axes[1].get_title() == "Edge pixels (0)"
        plt.close("all")
