"""Image export utilities for rendered framebuffers.

Colors are clamped to [0, 1] and quantized to 8 bits per channel with
round-half-up: byte = floor(clamp(v, 0, 1) * 255 + 0.5).

Supported formats:
    - PPM (binary P6: "P6\\n<width> <height>\\n255\\n" followed by RGB bytes,
      top row first)
    - PNG (8-bit RGB)

Both are written with Pillow.

Example:
    >>> from src.whitted.preview.export import save_ppm
    >>> framebuffer = render(scene, camera)
    >>> save_ppm(framebuffer, "output.ppm")
"""

from __future__ import annotations

import os
from typing import TYPE_CHECKING, Union

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

if TYPE_CHECKING:
    from src.whitted.core.framebuffer import Framebuffer

PathLike = Union[str, "os.PathLike[str]"]


def image_to_uint8(image: npt.ArrayLike) -> npt.NDArray[np.uint8]:
    """Convert a linear float image to 8-bit.

    Args:
        image: Array of shape (H, W, 3).

    Returns:
        uint8 array of shape (H, W, 3).
    """
    clamped = np.clip(np.asarray(image, dtype=np.float64), 0.0, 1.0)
    return np.floor(clamped * 255.0 + 0.5).astype(np.uint8)


def _to_pil(framebuffer: Framebuffer) -> PILImage.Image:
    return PILImage.fromarray(image_to_uint8(framebuffer.pixels), mode="RGB")


def save_ppm(framebuffer: Framebuffer, filepath: PathLike) -> None:
    """Save the framebuffer as a binary PPM (P6) file.

    Args:
        framebuffer: The rendered image.
        filepath: Output file path.

    Raises:
        OSError: If the file cannot be written.
    """
    _to_pil(framebuffer).save(filepath, format="PPM")


def save_png(framebuffer: Framebuffer, filepath: PathLike) -> None:
    """Save the framebuffer as an 8-bit RGB PNG file.

    Raises:
        OSError: If the file cannot be written.
    """
    _to_pil(framebuffer).save(filepath, format="PNG")


def save_image(framebuffer: Framebuffer, filepath: PathLike) -> None:
    """Save the framebuffer, choosing PNG or PPM from the file extension.

    Files ending in .png are written as PNG; everything else as PPM.
    """
    if os.fspath(filepath).lower().endswith(".png"):
        save_png(framebuffer, filepath)
    else:
        save_ppm(framebuffer, filepath)
