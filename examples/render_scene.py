#!/usr/bin/env python3
"""Render one of the built-in example scenes.

Renders the scene with the parallel primary pass followed by edge-adaptive
supersampling and writes the image as PPM (or PNG when the output path ends
in .png).

Usage:
    python -m examples.render_scene [options]

Options:
    --example N         Example scene to render: 1, 2 or 3 (default: 1)
    --width WIDTH       Image width in pixels (default: scene's native width)
    --height HEIGHT     Image height in pixels (default: scene's native height)
    --output OUTPUT     Output file path (default: render.ppm)
    --workers N         Number of primary pass workers (default: CPU count)
    --threshold T       Edge detection threshold (default: 0.5)
    --no-adaptive       Skip edge detection and supersampling
    --arch {cpu,gpu}    Taichi backend (default: cpu)
    --quiet             Suppress progress output
    --show              Show the result in a Matplotlib window

Example:
    python -m examples.render_scene --example 3 --output room.png
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
import time
from pathlib import Path

import taichi as ti


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render one of the built-in example scenes.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--example",
        type=int,
        choices=[1, 2, 3],
        default=1,
        help="Example scene to render (default: 1)",
    )
    parser.add_argument(
        "--width",
        type=int,
        default=None,
        help="Image width in pixels (default: scene's native width)",
    )
    parser.add_argument(
        "--height",
        type=int,
        default=None,
        help="Image height in pixels (default: scene's native height)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="render.ppm",
        help="Output file path, .ppm or .png (default: render.ppm)",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Number of primary pass workers (default: CPU count)",
    )
    parser.add_argument(
        "--threshold",
        type=float,
        default=0.5,
        help="Edge detection threshold (default: 0.5)",
    )
    parser.add_argument(
        "--no-adaptive",
        action="store_true",
        help="Skip edge detection and supersampling",
    )
    parser.add_argument(
        "--arch",
        choices=["cpu", "gpu"],
        default="cpu",
        help="Taichi backend (default: cpu)",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    parser.add_argument(
        "--show",
        action="store_true",
        help="Show the result in a Matplotlib window",
    )
    args = parser.parse_args()
    if args.workers is not None and args.workers < 1:
        parser.error("--workers must be at least 1")
    return args


def render_example(
    example: int = 1,
    width: int | None = None,
    height: int | None = None,
    output_path: str = "render.ppm",
    workers: int | None = None,
    threshold: float = 0.5,
    adaptive: bool = True,
    quiet: bool = False,
    show: bool = False,
) -> Path:
    """Render an example scene and save it to a file.

    Args:
        example: Example scene number.
        width: Image width override.
        height: Image height override.
        output_path: Output file path (PPM, or PNG for a .png suffix).
        workers: Number of primary pass workers.
        threshold: Edge detection threshold.
        adaptive: Run edge detection and supersampling.
        quiet: If True, suppress progress output.
        show: Show the result in a Matplotlib window.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports to allow Taichi initialization first
    from src.whitted.core.pipeline import RenderConfig, render
    from src.whitted.preview.export import save_image
    from src.whitted.scene.presets import build_example

    scene, camera = build_example(example, width, height)
    if not quiet:
        print(
            f"Rendering example {example} ({camera.width}x{camera.height}, "
            f"{len(scene)} objects, {len(scene.lights)} lights)..."
        )

    if workers is None:
        config = RenderConfig(edge_threshold=threshold, adaptive=adaptive)
    else:
        config = RenderConfig(num_workers=workers, edge_threshold=threshold, adaptive=adaptive)

    start_time = time.time()
    framebuffer = render(scene, camera, config)
    total_time = time.time() - start_time

    output_file = Path(output_path)
    save_image(framebuffer, output_file)

    if not quiet:
        print(f"Saved to: {output_file.absolute()}")
        print(f"Total time: {total_time:.2f}s")

    if show:
        from src.whitted.preview.display import show_preview

        show_preview(framebuffer, edge_mask=framebuffer.edge_mask)

    return output_file


def main() -> int:
    """Main entry point."""
    args = parse_args()

    logging.basicConfig(
        level=logging.WARNING if args.quiet else logging.INFO,
        format="%(asctime)s %(name)s %(levelname)s: %(message)s",
    )

    # Initialize Taichi before any scene fields are created
    if args.arch == "gpu":
        ti.init(arch=ti.gpu)
    else:
        threads = args.workers if args.workers is not None else os.cpu_count()
        ti.init(arch=ti.cpu, cpu_max_num_threads=threads)
    if not args.quiet:
        print(f"Using {args.arch.upper()} backend")

    try:
        render_example(
            example=args.example,
            width=args.width,
            height=args.height,
            output_path=args.output,
            workers=args.workers,
            threshold=args.threshold,
            adaptive=not args.no_adaptive,
            quiet=args.quiet,
            show=args.show,
        )
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
