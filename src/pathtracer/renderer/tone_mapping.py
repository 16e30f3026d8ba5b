# renderer/tone_mapping.py
import logging
import math
from pathlib import Path
from typing import Tuple, Union

import numpy as np
from PIL import Image

from pathtracer.core.interval import Interval
from pathtracer.core.vector import Color

logger = logging.getLogger(__name__)

INTENSITY = Interval(0.000, 0.999)


def linear_to_gamma(linear_component: float) -> float:
    """Gamma 2 transform; non-positive and NaN components map to 0."""
    if linear_component > 0:
        return math.sqrt(linear_component)
    return 0.0


def write_color(pixel_color: Color) -> Tuple[int, int, int]:
    """Translate a linear color to [0,255] byte values."""
    r = linear_to_gamma(pixel_color.x)
    g = linear_to_gamma(pixel_color.y)
    b = linear_to_gamma(pixel_color.z)
    return (
        int(256 * INTENSITY.clamp(r)),
        int(256 * INTENSITY.clamp(g)),
        int(256 * INTENSITY.clamp(b)),
    )


def tone_map(linear: np.ndarray) -> np.ndarray:
    """
    Vectorized form of `write_color` over an (height, width, 3) image of
    linear radiance. Returns a uint8 array of the same shape.
    """
    linear = np.nan_to_num(np.asarray(linear, dtype=np.float64), nan=0.0, posinf=1.0, neginf=0.0)
    gamma = np.sqrt(np.maximum(linear, 0.0))
    mapped = np.clip(gamma, INTENSITY.min, INTENSITY.max) * 256
    return mapped.astype(np.uint8)


def save_image(pixels: np.ndarray, path: Union[str, Path], quality: int = 95) -> Path:
    """Write an 8-bit RGB image; the format follows the file extension."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    img = Image.fromarray(np.ascontiguousarray(pixels, dtype=np.uint8))
    if path.suffix.lower() in (".jpg", ".jpeg"):
        img.save(path, quality=quality)
    else:
        img.save(path)
    logger.info("Image saved to %s", path)
    return path
