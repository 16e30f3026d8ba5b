# main.py
"""Render one of the demo scenes to an image file.

Usage:
    python -m pathtracer SCENE [options]

Example:
    python -m pathtracer cornell_box --quality preview --seed 7 -o out/cornell.png
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from tqdm import tqdm

from pathtracer import config
from pathtracer.logging_config import setup_logging
from pathtracer.renderer.edge_detect import outline
from pathtracer.renderer.raytracer import Renderer
from pathtracer.renderer.tone_mapping import save_image
from pathtracer.scenes import SCENES, build_scene

logger = logging.getLogger(__name__)


def positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {value}")
    return number


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="pathtracer",
        description="Render a demo scene with the Monte-Carlo path tracer.",
    )
    parser.add_argument("scene", choices=sorted(SCENES), help="Scene to render")
    parser.add_argument(
        "-o", "--output",
        type=Path,
        default=None,
        help="Output image path (default: OUTPUT_DIR/<scene>.png)",
    )
    parser.add_argument("--width", type=positive_int, help="Image width in pixels")
    parser.add_argument("--samples", type=positive_int, help="Samples per pixel")
    parser.add_argument("--depth", type=positive_int, help="Maximum ray bounces")
    parser.add_argument(
        "--quality",
        choices=sorted(config.QUALITY_LEVELS),
        help="Quality preset; explicit --width/--samples/--depth take precedence",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=config.RENDER_SEED,
        help="Seed for a reproducible render (default: RENDER_SEED or random)",
    )
    parser.add_argument(
        "--workers",
        type=positive_int,
        default=config.RENDER_WORKERS,
        help=f"Render worker processes (default: {config.RENDER_WORKERS})",
    )
    parser.add_argument(
        "--log-level",
        default=config.LOG_LEVEL,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        type=str.upper,
        help=f"Logging level (default: {config.LOG_LEVEL})",
    )
    parser.add_argument(
        "--edges",
        action="store_true",
        help="Outline Sobel edges in black (crops a one-pixel border)",
    )
    parser.add_argument("--quiet", action="store_true", help="Hide the progress bar")
    return parser.parse_args(argv)


def apply_overrides(image_settings, args: argparse.Namespace) -> None:
    """Quality preset first, then explicit flags."""
    if args.quality is not None:
        preset = config.QUALITY_LEVELS[args.quality]
        image_settings.samples_per_pixel = preset["samples"]
        image_settings.max_depth = preset["depth"]
        image_settings.image_width = preset["width"]
    if args.width is not None:
        image_settings.image_width = args.width
    if args.samples is not None:
        image_settings.samples_per_pixel = args.samples
    if args.depth is not None:
        image_settings.max_depth = args.depth


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    setup_logging(level=args.log_level)

    try:
        scene = build_scene(args.scene, seed=args.seed)
    except FileNotFoundError as e:
        logger.error("Cannot build scene %r: %s", args.scene, e)
        return 1
    apply_overrides(scene.image_settings, args)
    logger.debug("Image settings: %s", scene.image_settings)
    camera = scene.camera()

    output = args.output or config.OUTPUT_DIR / f"{args.scene}.png"

    with tqdm(total=camera.image_height, unit="row", desc=args.scene,
              disable=args.quiet) as bar:
        renderer = Renderer(
            camera,
            scene.world,
            scene.lights,
            workers=args.workers,
            seed=args.seed,
            progress=lambda done, total: bar.update(1),
        )
        pixels = renderer.render()

    if args.edges:
        pixels = outline(pixels)

    save_image(pixels, output, scene.image_settings.quality)
    return 0


if __name__ == "__main__":
    sys.exit(main())
