# renderer/edge_detect.py
import logging

import numpy as np

logger = logging.getLogger(__name__)

# Sobel kernels, indexed [row][column]
SOBEL_X = np.array([[-1, 0, 1],
                    [-2, 0, 2],
                    [-1, 0, 1]], dtype=np.int32)
SOBEL_Y = np.array([[-1, -2, -1],
                    [0, 0, 0],
                    [1, 2, 1]], dtype=np.int32)

# ITU-R BT.601 luma weights
LUMA = np.array([0.299, 0.587, 0.114])


def _edge_mask(pixels: np.ndarray, threshold: int) -> np.ndarray:
    """Boolean (h-2, w-2) mask, True where the Sobel magnitude exceeds `threshold`."""
    if pixels.ndim != 3 or pixels.shape[2] < 3:
        raise ValueError(f"expected an (h, w, 3) RGB image, got shape {pixels.shape}")
    height, width = pixels.shape[:2]
    if height < 3 or width < 3:
        raise ValueError(f"edge detection needs at least a 3x3 image, got {width}x{height}")

    # Integer luma, truncated like an 8-bit grayscale conversion
    gray = (pixels[..., :3].astype(np.float64) @ LUMA).astype(np.uint8).astype(np.int32)

    fx = np.zeros((height - 2, width - 2), dtype=np.int32)
    fy = np.zeros_like(fx)
    for dy in range(3):
        for dx in range(3):
            window = gray[dy:dy + height - 2, dx:dx + width - 2]
            fx += SOBEL_X[dy, dx] * window
            fy += SOBEL_Y[dy, dx] * window
    return np.abs(fx) + np.abs(fy) > threshold


def edge_detection(pixels: np.ndarray, threshold: int = 100) -> np.ndarray:
    """
    Sobel edge map of an 8-bit RGB image.

    The result drops the one-pixel border, so it has shape (h-2, w-2, 3):
    black on edges, white elsewhere.
    """
    mask = _edge_mask(pixels, threshold)
    result = np.full(mask.shape + (3,), 255, dtype=np.uint8)
    result[mask] = 0
    return result


def outline(pixels: np.ndarray, threshold: int = 100) -> np.ndarray:
    """
    Paint the Sobel edges of an 8-bit RGB image black.

    Like edge_detection the one-pixel border is dropped; every other pixel
    keeps its color unless it lies on an edge.
    """
    mask = _edge_mask(pixels, threshold)
    result = np.array(pixels[1:-1, 1:-1, :3], dtype=np.uint8)
    result[mask] = 0
    logger.debug("Outlined %d of %d pixels", int(mask.sum()), mask.size)
    return result
