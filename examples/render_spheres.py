#!/usr/bin/env python3
"""Render a scene built in Python instead of read from a file.

This script builds a small scene through the Scene API, sets up the camera
and renders it with progressive refinement, printing progress as it goes.

Usage:
    python examples/render_spheres.py [options]

Options:
    --width WIDTH       Image width in pixels (default: 640)
    --height HEIGHT     Image height in pixels (default: 360)
    --samples SAMPLES   Number of samples per pixel (default: 64)
    --bounces BOUNCES   Bounce budget per path (default: 4)
    --output OUTPUT     Output file path (default: spheres.png)
    --batch-size SIZE   Samples per progress update (default: 8)
    --quiet             Suppress progress output

Example:
    python examples/render_spheres.py --width 320 --height 180 --samples 16
"""

import argparse
import sys
import time
from pathlib import Path

from loguru import logger

from skytrace.config import init_backend


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render a row of spheres on a ground plane.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--width", type=int, default=640, help="Image width (default: 640)")
    parser.add_argument("--height", type=int, default=360, help="Image height (default: 360)")
    parser.add_argument("--samples", type=int, default=64, help="Samples per pixel (default: 64)")
    parser.add_argument("--bounces", type=int, default=4, help="Bounce budget (default: 4)")
    parser.add_argument("--output", type=str, default="spheres.png", help="Output PNG path")
    parser.add_argument("--batch-size", type=int, default=8, help="Samples per progress update")
    parser.add_argument("--quiet", action="store_true", help="Suppress progress output")
    return parser.parse_args()


def render_spheres(
    width: int = 640,
    height: int = 360,
    num_samples: int = 64,
    max_depth: int = 4,
    output_path: str = "spheres.png",
    batch_size: int = 8,
    quiet: bool = False,
) -> Path:
    """Build the scene, render it and save the image.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports to allow Taichi initialization first
    from skytrace.camera.pinhole import PinholeCamera
    from skytrace.core.progressive import ProgressiveRenderer
    from skytrace.scene.manager import Scene

    scene = Scene()
    for i in range(5):
        x = (i - 2) * 1.1
        scene.add_sphere((x, 0.5, 0.0), 0.5)
    scene.add_plane((0.0, 0.0, 0.0), (0.0, 1.0, 0.0))
    scene.set_camera(
        PinholeCamera(
            eye=(0.0, 2.0, -6.0),
            look_at=(0.0, 0.5, 0.0),
            fov=40.0,
            aspect_ratio=width / height,
        )
    )
    logger.info("Built {}", scene)

    renderer = ProgressiveRenderer(width, height, max_depth=max_depth)
    start_time = time.time()

    def progress_callback(current: int, target: int) -> None:
        if not quiet:
            elapsed = time.time() - start_time
            samples_per_sec = current / elapsed if elapsed > 0 else 0
            print(
                f"\r  Progress: {current}/{target} samples "
                f"({current / target * 100:.1f}%) - {samples_per_sec:.1f} spp/s",
                end="",
                flush=True,
            )

    renderer.render(num_samples=num_samples, batch_size=batch_size, callback=progress_callback)
    if not quiet:
        print()

    output_file = Path(output_path)
    renderer.save_image(str(output_file))
    logger.info("Saved to {} in {:.2f}s", output_file.absolute(), time.time() - start_time)
    return output_file


def main() -> int:
    """Main entry point."""
    args = parse_args()
    init_backend("cpu", seed=0)

    try:
        render_spheres(
            width=args.width,
            height=args.height,
            num_samples=args.samples,
            max_depth=args.bounces,
            output_path=args.output,
            batch_size=args.batch_size,
            quiet=args.quiet,
        )
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
