# materials/texture_loader.py
import logging
import os
from typing import Iterable, Optional, Tuple

import numpy as np
from PIL import Image, UnidentifiedImageError

from pathtracer import config

logger = logging.getLogger(__name__)

# Served for every pixel when the image could not be loaded
MAGENTA = (255, 0, 255)


class ImageData:
    """
    Decoded 8-bit RGB raster used by ImageTexture.

    The file is looked up as given, then inside each of `search_dirs`
    (defaults to the IMAGE_DIR setting). A missing or unreadable file is not
    an error: a warning is logged and the image reports zero size and
    serves magenta.
    """
    def __init__(self, filename: str, search_dirs: Optional[Iterable[str]] = None):
        self.filename = filename
        self.data: Optional[np.ndarray] = None
        self.width = 0
        self.height = 0

        if search_dirs is None:
            search_dirs = [config.IMAGE_DIR]
        candidates = [filename] + [os.path.join(d, filename) for d in search_dirs]
        for candidate in candidates:
            if self._load(candidate):
                logger.debug("Loaded image %s (%dx%d)", candidate, self.width, self.height)
                return

        logger.warning("Could not load image file %r; using magenta fallback", filename)

    def _load(self, path: str) -> bool:
        if not os.path.isfile(path):
            return False
        try:
            with Image.open(path) as img:
                # Convert to RGB if necessary
                if img.mode != "RGB":
                    img = img.convert("RGB")
                self.data = np.asarray(img, dtype=np.uint8)
        except (OSError, UnidentifiedImageError) as e:
            logger.warning("Error decoding image %s: %s", path, e)
            return False
        self.height, self.width = self.data.shape[:2]
        return True

    def pixel_data(self, x: int, y: int) -> Tuple[int, int, int]:
        """RGB bytes of pixel (x, y); coordinates are clamped to the image."""
        if self.data is None:
            return MAGENTA
        x = _clamp(x, 0, self.width)
        y = _clamp(y, 0, self.height)
        r, g, b = self.data[y, x]
        return int(r), int(g), int(b)


def _clamp(x: int, low: int, high: int) -> int:
    # Return the value clamped to the range [low, high)
    if x < low:
        return low
    if x < high:
        return x
    return high - 1
