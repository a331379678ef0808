# renderer/image_output.py
import logging
import math
from pathlib import Path
from typing import TextIO, Tuple

import numpy as np
from PIL import Image

from pathtracer.core.vector import Color

logger = logging.getLogger(__name__)


def clamp(x: float, low: float, high: float) -> float:
    return max(low, min(high, x))


def to_rgb8(color_sum: Color, samples_per_pixel: int) -> Tuple[int, int, int]:
    """
    Averages an accumulated pixel color, applies gamma 2 (square root) and
    quantizes each channel to an integer in [0, 255].
    """
    scale = 1.0 / samples_per_pixel
    r = math.sqrt(scale * color_sum.x)
    g = math.sqrt(scale * color_sum.y)
    b = math.sqrt(scale * color_sum.z)
    return (
        int(256 * clamp(r, 0.0, 0.999)),
        int(256 * clamp(g, 0.0, 0.999)),
        int(256 * clamp(b, 0.0, 0.999)),
    )


def write_ppm(stream: TextIO, pixels: np.ndarray) -> None:
    """
    Writes an (height, width, 3) uint8 image as ASCII PPM (P3).
    Row 0 of the array is the top scanline.
    """
    height, width, _ = pixels.shape
    stream.write("P3\n")
    stream.write(f"{width} {height}\n")
    stream.write("255\n")
    for row in pixels.tolist():
        for r, g, b in row:
            stream.write(f"{r} {g} {b}\n")


def save_image(path, pixels: np.ndarray) -> Path:
    """
    Saves the image to path. `.ppm` files are written as ASCII P3; any other
    extension is handed to Pillow, which picks the format from it.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    if path.suffix.lower() == ".ppm":
        with open(path, "w", encoding="ascii") as f:
            write_ppm(f, pixels)
    else:
        Image.fromarray(np.ascontiguousarray(pixels, dtype=np.uint8)).save(path)
    logger.info("Wrote %dx%d image to %s", pixels.shape[1], pixels.shape[0], path)
    return path
