"""Preview and export module for rendered images.

Components:
    display: Matplotlib preview window
    export: PPM and PNG writers (Pillow)
"""

from .display import show_preview
from .export import image_to_uint8, save_image, save_png, save_ppm

__all__ = [
    "show_preview",
    "image_to_uint8",
    "save_image",
    "save_png",
    "save_ppm",
]
