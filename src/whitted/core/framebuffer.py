"""Framebuffer: the row-major color grid a render produces.

The framebuffer is a NumPy array of shape (height, width, 3), dtype float32,
indexed by (row, column) with row 0 at the top of the image. Kernels write
into it directly through Taichi ndarray arguments; each worker of the primary
pass owns a disjoint range of pixels.

Color values are linear and not clamped; the image writers clamp to [0, 1].
"""

from __future__ import annotations

import numpy as np
import numpy.typing as npt


class Framebuffer:
    """Dense row-major grid of RGB colors with fixed dimensions.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        pixels: The underlying (height, width, 3) float32 array.
        edge_mask: (height, width) bool array of the pixels an adaptive render
            supersampled, or None if no edge detection ran.
    """

    def __init__(self, width: int, height: int) -> None:
        """Allocate a black framebuffer.

        Raises:
            ValueError: If either dimension is not positive.
        """
        if width <= 0 or height <= 0:
            raise ValueError(f"Framebuffer dimensions must be positive, got {width}x{height}")
        self._width = width
        self._height = height
        self.pixels: npt.NDArray[np.float32] = np.zeros((height, width, 3), dtype=np.float32)
        self.edge_mask: npt.NDArray[np.bool_] | None = None

    @classmethod
    def from_array(cls, pixels: npt.NDArray[np.floating]) -> Framebuffer:
        """Wrap a copy of an existing (height, width, 3) array."""
        if pixels.ndim != 3 or pixels.shape[2] != 3:
            raise ValueError(f"Expected an array of shape (H, W, 3), got {pixels.shape}")
        framebuffer = cls(pixels.shape[1], pixels.shape[0])
        framebuffer.pixels[...] = pixels
        return framebuffer

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def dimensions(self) -> tuple[int, int]:
        """(width, height) of the image."""
        return self._width, self._height

    def _check_index(self, index: tuple[int, int]) -> tuple[int, int]:
        row, column = index
        if not 0 <= row < self._height:
            raise IndexError(f"Framebuffer row {row} out of range [0, {self._height})")
        if not 0 <= column < self._width:
            raise IndexError(f"Framebuffer column {column} out of range [0, {self._width})")
        return row, column

    def __getitem__(self, index: tuple[int, int]) -> tuple[float, float, float]:
        row, column = self._check_index(index)
        r, g, b = self.pixels[row, column]
        return (float(r), float(g), float(b))

    def __setitem__(self, index: tuple[int, int], color: tuple[float, float, float]) -> None:
        row, column = self._check_index(index)
        self.pixels[row, column] = color

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Framebuffer):
            return NotImplemented
        return self.dimensions == other.dimensions and bool(np.array_equal(self.pixels, other.pixels))

    def __repr__(self) -> str:
        return f"Framebuffer(width={self._width}, height={self._height})"
