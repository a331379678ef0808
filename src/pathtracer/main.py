# main.py
"""
Command-line entry point.

Usage examples:
  pathtracer --scene simple --quality preview > simple.ppm
  pathtracer --scene random --quality final --width 1200 --aspect-ratio 3/2 --output out/final.png
  PATHTRACER_SAMPLES_PER_PIXEL=50 pathtracer --backend numba --output out/numba.ppm
"""
import argparse
import logging
import sys

import numpy as np

from pathtracer.config import BACKENDS, DEFAULT_QUALITY, LOG_LEVELS, QUALITY_LEVELS, RenderSettings
from pathtracer.logging_config import setup_logging
from pathtracer.renderer.image_output import save_image, write_ppm
from pathtracer.renderer.raytracer import Renderer
from pathtracer.scenes import SCENES, build_camera, build_scene

logger = logging.getLogger("pathtracer.main")


def parse_aspect_ratio(text: str) -> float:
    """Accepts either a ratio such as 16/9 or a plain number."""
    try:
        if "/" in text:
            num, den = text.split("/", 1)
            value = float(num) / float(den)
        else:
            value = float(text)
    except (ValueError, ZeroDivisionError):
        raise argparse.ArgumentTypeError(f"invalid aspect ratio {text!r}") from None
    if value <= 0:
        raise argparse.ArgumentTypeError(f"aspect ratio must be positive, got {text!r}")
    return value


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="pathtracer",
        description="Render a sphere scene with a Monte-Carlo path tracer and write it as PPM.",
    )
    p.add_argument("--scene", choices=sorted(SCENES), default="simple")
    p.add_argument("--quality", choices=list(QUALITY_LEVELS), default=DEFAULT_QUALITY)
    p.add_argument("--width", type=int, default=None, help="image width in pixels")
    p.add_argument("--aspect-ratio", type=parse_aspect_ratio, default=None,
                   help="width/height, e.g. 16/9 or 1.5")
    p.add_argument("--samples", type=int, default=None, help="samples per pixel")
    p.add_argument("--max-depth", type=int, default=None, help="maximum bounces per path")
    p.add_argument("--seed", type=int, default=None)
    p.add_argument("--workers", type=int, default=None, help="render processes (default: CPU count)")
    p.add_argument("--backend", choices=BACKENDS, default=None)
    p.add_argument("--no-jitter", action="store_true", help="sample pixel corners instead of jittering")
    p.add_argument("--output", "-o", default=None,
                   help="output file; .ppm is written as text, other extensions via Pillow (default: stdout)")
    p.add_argument("--no-progress", action="store_true", help="hide the progress bar")
    p.add_argument("--log-level", type=str.upper, choices=LOG_LEVELS, default=None,
                   help="default: $PATHTRACER_LOG_LEVEL, then INFO")
    return p


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        setup_logging(args.log_level)
        settings = RenderSettings.from_quality(
            args.quality,
            image_width=args.width,
            aspect_ratio=args.aspect_ratio,
            samples_per_pixel=args.samples,
            max_depth=args.max_depth,
            seed=args.seed,
            workers=args.workers,
            backend=args.backend,
            jitter=False if args.no_jitter else None,
        )
    except ValueError as e:
        parser.error(str(e))

    logger.info("Settings: %r", settings)

    try:
        world = build_scene(args.scene, np.random.default_rng(settings.seed))
        camera = build_camera(args.scene, settings.aspect_ratio)
        renderer = Renderer.from_settings(settings, progress=not args.no_progress)
        image = renderer.render(camera, world)

        if args.output is None:
            write_ppm(sys.stdout, image)
            sys.stdout.flush()
        else:
            save_image(args.output, image)
    except Exception:
        logger.exception("Render failed")
        raise

    return 0


if __name__ == "__main__":
    sys.exit(main())
