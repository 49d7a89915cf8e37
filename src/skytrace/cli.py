"""Command-line entry point.

Renders a scene description to a PNG image.

Usage:
    skytrace [options] [FILE] > image.png
    skytrace [options] -o image.png [FILE]

The scene is read from FILE, or from standard input when FILE is omitted.
The image is written to the -o path, or to standard output, which must then
be redirected to a file or pipe.

Options:
    -g, --geometry W H      Output size in pixels (default: 640 360)
    -s, --samples N         Samples per pixel (default: 30)
    -b, --bounces N         Maximum bounces per ray (default: 2)
    -f, --fov ANGLE         Vertical field of view in degrees
    -l, --focal-length LEN  Focal length
    -a, --aperture RADIUS   Aperture for depth of field (default: 0.0, unused)
    --seed N                Random seed (default: 0)
    --arch ARCH             Taichi backend: cpu or gpu (default: cpu)
    -o, --output PATH       Output file instead of standard output
    --batch-size N          Samples per progress update (default: 1)
    -q, --quiet             Suppress progress output
    -v, --verbose           Log debug information

Example:
    skytrace -g 320 180 -s 16 scenes/spheres.txt -o spheres.png
"""

import argparse
import sys
import time
from collections.abc import Sequence

from loguru import logger

from skytrace.config import RenderSettings, init_backend


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    defaults = RenderSettings()
    parser = argparse.ArgumentParser(
        prog="skytrace",
        description="Render a sphere and plane scene with sky lighting to PNG.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "-g",
        "--geometry",
        type=int,
        nargs=2,
        metavar=("WIDTH", "HEIGHT"),
        default=[defaults.width, defaults.height],
        help=f"the size of the output image (default: {defaults.width} {defaults.height})",
    )
    parser.add_argument(
        "-s",
        "--samples",
        type=int,
        default=defaults.samples,
        help=f"the number of samples per pixel (default: {defaults.samples})",
    )
    parser.add_argument(
        "-b",
        "--bounces",
        type=int,
        default=defaults.bounces,
        help=f"the max number of bounces per ray (default: {defaults.bounces})",
    )
    parser.add_argument(
        "-f",
        "--fov",
        type=float,
        metavar="ANGLE",
        help="vertical field of view in degrees",
    )
    parser.add_argument(
        "-l",
        "--focal-length",
        type=float,
        metavar="LENGTH",
        help="focal length",
    )
    parser.add_argument(
        "-a",
        "--aperture",
        type=float,
        metavar="RADIUS",
        default=defaults.aperture,
        help="aperture for depth of field (accepted but not simulated)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=defaults.seed,
        help=f"random seed (default: {defaults.seed})",
    )
    parser.add_argument(
        "--arch",
        choices=["cpu", "gpu"],
        default=defaults.arch,
        help=f"Taichi backend (default: {defaults.arch})",
    )
    parser.add_argument(
        "-o",
        "--output",
        type=str,
        help="output PNG path (default: standard output)",
    )
    parser.add_argument(
        "--batch-size",
        type=int,
        default=defaults.batch_size,
        help=f"samples per progress update (default: {defaults.batch_size})",
    )
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="suppress progress output",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="log debug information",
    )
    parser.add_argument(
        "file",
        nargs="?",
        help="scene description (default: standard input)",
    )
    return parser


def settings_from_args(args: argparse.Namespace) -> RenderSettings:
    """Collect render settings from parsed arguments."""
    return RenderSettings(
        width=args.geometry[0],
        height=args.geometry[1],
        samples=args.samples,
        bounces=args.bounces,
        fov=args.fov,
        focal_length=args.focal_length,
        aperture=args.aperture,
        seed=args.seed,
        arch=args.arch,
        batch_size=args.batch_size,
    )


def configure_logging(quiet: bool, verbose: bool) -> None:
    """Send log records to stderr at a level matching the flags."""
    level = "DEBUG" if verbose else "WARNING" if quiet else "INFO"
    logger.remove()
    logger.add(sys.stderr, level=level, format="{level}: {message}")


def render(settings: RenderSettings, scene_file: str | None, output: str | None, quiet: bool):
    """Load the scene, render it and write the PNG.

    Raises:
        SceneParseError: If the scene description is malformed.
        OSError: If reading the scene or writing the image fails.
        ValueError: If the camera or settings are degenerate.
    """
    # Lazy imports: modules declaring Taichi fields need an initialized runtime
    from skytrace.core.progressive import ProgressiveRenderer
    from skytrace.preview.export import save_png_from_pixels, write_png
    from skytrace.scene.parser import load_scene, load_scene_file

    if scene_file is None:
        scene = load_scene(
            sys.stdin,
            settings.aspect_ratio,
            focal_length=settings.focal_length,
            fov=settings.fov,
        )
    else:
        scene = load_scene_file(
            scene_file,
            settings.aspect_ratio,
            focal_length=settings.focal_length,
            fov=settings.fov,
        )
    logger.info("Loaded {}", scene)

    renderer = ProgressiveRenderer(settings.width, settings.height, max_depth=settings.bounces)
    logger.info(
        "Rendering {}x{} with {} samples per pixel and {} bounces",
        settings.width,
        settings.height,
        settings.samples,
        settings.bounces,
    )

    start_time = time.time()

    def progress_callback(current: int, target: int) -> None:
        elapsed = time.time() - start_time
        samples_per_sec = current / elapsed if elapsed > 0 else 0
        print(
            f"\r  Progress: {current}/{target} samples ({current / target * 100:.1f}%) "
            f"- {samples_per_sec:.1f} spp/s",
            end="",
            file=sys.stderr,
            flush=True,
        )

    renderer.render(
        num_samples=settings.samples,
        batch_size=settings.batch_size,
        callback=None if quiet else progress_callback,
    )
    if not quiet:
        print(file=sys.stderr)

    pixels = renderer.get_pixels()
    if output is None:
        write_png(pixels, sys.stdout.buffer)
    else:
        save_png_from_pixels(pixels, output)

    logger.info("Finished in {:.2f}s", time.time() - start_time)


def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)
    configure_logging(args.quiet, args.verbose)

    settings = settings_from_args(args)
    try:
        settings.validate()
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.output is None and sys.stdout.isatty():
        print("Error: Please redirect stdout to a file or pipe", file=sys.stderr)
        return 1

    init_backend(settings.arch, settings.seed)

    try:
        render(settings, args.file, args.output, args.quiet)
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
