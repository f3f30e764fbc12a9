"""Adaptive render pipeline.

A render runs in three phases, each a separate Taichi kernel launch (a kernel
returning is the barrier between phases):

    1. Primary pass: one ray per pixel, traced in parallel. The pixel index
       space is cut into num_workers contiguous chunks; the outermost kernel
       loop runs over chunks, so Taichi spreads them over its CPU threads.
       Each chunk owns its pixels and its own trace stack lane. Colors are
       clamped to 1.0 per channel.
    2. Edge detection: a Sobel operator per color channel over interior
       pixels. A pixel whose summed gradient magnitude exceeds the threshold
       is an edge pixel.
    3. Supersampling: each edge pixel is re-traced with a grid of sub-pixel
       rays and replaced by their average.

The result is independent of the number of workers.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.whitted.core.pipeline import RenderConfig, render
    >>> framebuffer = render(scene, camera, RenderConfig(num_workers=8))
"""

import logging
import os
import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from src.whitted.camera.pinhole import Camera, primary_ray, setup_camera, sub_ray
from src.whitted.core.framebuffer import Framebuffer
from src.whitted.core.integrator import MAX_LANES, trace

if TYPE_CHECKING:
    from src.whitted.scene.scene import Scene

logger = logging.getLogger(__name__)

# Type alias for 3D vectors
vec3 = tm.vec3

# Summed per-channel gradient magnitude above which a pixel is an edge
DEFAULT_EDGE_THRESHOLD = 0.5


def _default_workers() -> int:
    return min(os.cpu_count() or 1, MAX_LANES)


@dataclass
class RenderConfig:
    """Configuration for a render.

    Attributes:
        num_workers: Number of chunks the primary pass is split into.
            At most MAX_LANES. Defaults to the CPU count, but the number of
            threads that run the chunks is fixed separately by
            ti.init(cpu_max_num_threads=...).
        edge_threshold: Edge detection threshold on the summed channel
            gradient magnitude.
        supersample_grid: Sub-ray grid (rows, columns) for edge pixels.
        adaptive: Run edge detection and supersampling after the primary pass.
    """

    num_workers: int = field(default_factory=_default_workers)
    edge_threshold: float = DEFAULT_EDGE_THRESHOLD
    supersample_grid: tuple[int, int] = (3, 3)
    adaptive: bool = True

    def __post_init__(self) -> None:
        if not 1 <= self.num_workers <= MAX_LANES:
            raise ValueError(f"num_workers must be in [1, {MAX_LANES}], got {self.num_workers}")
        rows, columns = self.supersample_grid
        if rows < 2 or columns < 2:
            raise ValueError(f"supersample_grid must be at least 2x2, got {rows}x{columns}")


def chunk_bounds(total: int, num_chunks: int) -> list[tuple[int, int]]:
    """Split [0, total) into num_chunks contiguous half-open ranges.

    Every chunk has total // num_chunks items; the last one also takes the
    remainder.

    Raises:
        ValueError: If num_chunks is not positive or total is negative.
    """
    if num_chunks <= 0:
        raise ValueError(f"num_chunks must be positive, got {num_chunks}")
    if total < 0:
        raise ValueError(f"total must be non-negative, got {total}")

    size = total // num_chunks
    bounds = [(i * size, (i + 1) * size) for i in range(num_chunks)]
    start, _ = bounds[-1]
    bounds[-1] = (start, total)
    return bounds


# =============================================================================
# Kernels
# =============================================================================


@ti.kernel
def _primary_pass(
    pixels: ti.types.ndarray(dtype=ti.f32, ndim=3),
    chunks: ti.types.ndarray(dtype=ti.i32, ndim=2),
):
    """Trace one clamped primary ray per pixel, one chunk per loop iteration.

    chunks holds one [start, end) range of row-major pixel indices per row.
    """
    width = pixels.shape[1]

    for chunk in range(chunks.shape[0]):
        for index in range(chunks[chunk, 0], chunks[chunk, 1]):
            row = index // width
            column = index % width
            ray = primary_ray(row, column)
            color = ti.min(trace(ray.origin, ray.direction, 0, chunk).color, 1.0)
            for c in ti.static(range(3)):
                pixels[row, column, c] = color[c]


@ti.kernel
def _sobel_edges(
    pixels: ti.types.ndarray(dtype=ti.f32, ndim=3),
    threshold: ti.f32,
    edges: ti.types.ndarray(dtype=ti.i32, ndim=2),
):
    """Mark interior pixels whose Sobel gradient exceeds the threshold."""
    height = pixels.shape[0]
    width = pixels.shape[1]

    for row, column in ti.ndrange(height, width):
        edges[row, column] = 0

    for row, column in ti.ndrange((1, height - 1), (1, width - 1)):
        total = 0.0
        for c in ti.static(range(3)):
            # p1 p2 p3 / p4 p5 p6 / p7 p8 p9, row-major around the pixel
            p1 = pixels[row - 1, column - 1, c]
            p2 = pixels[row - 1, column, c]
            p3 = pixels[row - 1, column + 1, c]
            p4 = pixels[row, column - 1, c]
            p6 = pixels[row, column + 1, c]
            p7 = pixels[row + 1, column - 1, c]
            p8 = pixels[row + 1, column, c]
            p9 = pixels[row + 1, column + 1, c]
            gx = (p3 + 2.0 * p6 + p9) - (p1 + 2.0 * p4 + p7)
            gy = (p1 + 2.0 * p2 + p3) - (p7 + 2.0 * p8 + p9)
            total += ti.sqrt(gx * gx + gy * gy)
        if total > threshold:
            edges[row, column] = 1


@ti.kernel
def _supersample(
    pixels: ti.types.ndarray(dtype=ti.f32, ndim=3),
    edge_pixels: ti.types.ndarray(dtype=ti.i32, ndim=2),
    rows: ti.i32,
    columns: ti.i32,
):
    """Replace each listed pixel with the average of its sub-ray grid."""
    ti.loop_config(serialize=True)
    for k in range(edge_pixels.shape[0]):
        row = edge_pixels[k, 0]
        column = edge_pixels[k, 1]
        total = vec3(0.0, 0.0, 0.0)
        for i in range(rows):
            for j in range(columns):
                ray = sub_ray(row, column, i, j, rows, columns)
                total += trace(ray.origin, ray.direction, 0, 0).color
        average = total / ti.cast(rows * columns, ti.f32)
        for c in ti.static(range(3)):
            pixels[row, column, c] = average[c]


# =============================================================================
# Host API
# =============================================================================


def detect_edges(
    pixels: npt.ArrayLike, threshold: float = DEFAULT_EDGE_THRESHOLD
) -> npt.NDArray[np.bool_]:
    """Sobel edge mask of an image.

    Args:
        pixels: Image of shape (height, width, 3).
        threshold: Edge threshold on the summed channel gradient magnitude.

    Returns:
        Boolean mask of shape (height, width). Border pixels are never edges.
    """
    image = np.ascontiguousarray(pixels, dtype=np.float32)
    if image.ndim != 3 or image.shape[2] != 3:
        raise ValueError(f"Expected an image of shape (height, width, 3), got {image.shape}")

    edges = np.zeros(image.shape[:2], dtype=np.int32)
    if image.shape[0] >= 3 and image.shape[1] >= 3:
        _sobel_edges(image, threshold, edges)
    return edges.astype(bool)


def render(scene: "Scene", camera: Camera, config: RenderConfig | None = None) -> Framebuffer:
    """Render a scene through a camera.

    Args:
        scene: The scene to render. Uploaded before tracing.
        camera: The camera; its width and height set the image size.
        config: Render configuration. Defaults to RenderConfig().

    Returns:
        The rendered Framebuffer. For adaptive renders its edge_mask holds
        the pixels the primary pass marked for supersampling.
    """
    if config is None:
        config = RenderConfig()

    width, height = camera.width, camera.height
    framebuffer = Framebuffer(width, height)
    # Taichi writes the ndarray in place
    pixels = framebuffer.pixels

    scene.upload()
    setup_camera(camera)

    num_chunks = min(config.num_workers, width * height)
    chunks = np.array(chunk_bounds(width * height, num_chunks), dtype=np.int32)

    start = time.perf_counter()
    _primary_pass(pixels, chunks)
    ti.sync()
    logger.info(
        "Primary pass: %dx%d pixels in %d chunks, %.3fs",
        width,
        height,
        num_chunks,
        time.perf_counter() - start,
    )

    if not config.adaptive:
        return framebuffer

    start = time.perf_counter()
    edges = detect_edges(pixels, config.edge_threshold)
    framebuffer.edge_mask = edges
    edge_pixels = np.ascontiguousarray(np.argwhere(edges), dtype=np.int32)
    logger.info(
        "Edge detection: %d edge pixels, %.3fs", len(edge_pixels), time.perf_counter() - start
    )

    if len(edge_pixels) > 0:
        start = time.perf_counter()
        rows, columns = config.supersample_grid
        _supersample(pixels, edge_pixels, rows, columns)
        ti.sync()
        logger.info(
            "Supersampling: %d pixels with %dx%d rays, %.3fs",
            len(edge_pixels),
            rows,
            columns,
            time.perf_counter() - start,
        )

    return framebuffer
