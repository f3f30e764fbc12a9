"""Matplotlib-based preview display for rendered images.

Example:
    >>> from src.whitted.preview.display import show_preview
    >>> framebuffer = render(scene, camera)
    >>> show_preview(framebuffer, edge_mask=detect_edges(framebuffer.pixels))
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

import numpy as np
import numpy.typing as npt

if TYPE_CHECKING:
    from src.whitted.core.framebuffer import Framebuffer


def show_preview(
    framebuffer: Framebuffer,
    *,
    edge_mask: Optional[npt.NDArray[np.bool_]] = None,
    title: str | None = None,
    figsize: tuple[float, float] = (8, 6),
    block: bool = True,
) -> None:
    """Display a rendered framebuffer as a Matplotlib figure.

    Args:
        framebuffer: The rendered image.
        edge_mask: Optional (H, W) boolean mask shown next to the image, e.g.
            the pixels the pipeline supersampled.
        title: Custom title (default shows the image size).
        figsize: Figure size in inches (width, height) per panel.
        block: Whether to block execution until the figure is closed.
    """
    import matplotlib.pyplot as plt

    display_image = np.clip(framebuffer.pixels, 0.0, 1.0)

    panels = 1 if edge_mask is None else 2
    fig, axes = plt.subplots(1, panels, figsize=(figsize[0] * panels, figsize[1]))
    axes = np.atleast_1d(axes)

    axes[0].imshow(display_image)
    axes[0].axis("off")
    if title is None:
        title = f"Render Preview - {framebuffer.width}x{framebuffer.height}"
    axes[0].set_title(title)

    if edge_mask is not None:
        axes[1].imshow(edge_mask, cmap="gray")
        axes[1].axis("off")
        axes[1].set_title(f"Edge pixels ({int(np.count_nonzero(edge_mask))})")

    plt.tight_layout()
    plt.show(block=block)
