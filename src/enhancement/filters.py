"""
Per-pixel enhancement operations.

Every operation works in place on the color channels of an RGBA uint8
working buffer and leaves alpha untouched. Results are rounded half-to-even
and clamped to [0, 255] after each operation, the same as storing into an
8-bit clamped pixel buffer.
"""

import logging
from typing import Callable, Dict

import numpy as np

logger = logging.getLogger(__name__)

# ITU-R BT.601 luma weights
LUMA_WEIGHTS = (0.299, 0.587, 0.114)

SHARPEN_KERNEL = np.array([[0, -1, 0], [-1, 5, -1], [0, -1, 0]], dtype=np.int32)


def _check_buffer(pixels: np.ndarray) -> None:
    if pixels.ndim != 3 or pixels.shape[2] != 4 or pixels.dtype != np.uint8:
        raise ValueError(
            f"Expected RGBA uint8 buffer with shape (H, W, 4), "
            f"got {pixels.shape} {pixels.dtype}"
        )


def _store(pixels: np.ndarray, values: np.ndarray) -> np.ndarray:
    """Write float results back into the color channels with 8-bit semantics."""
    pixels[..., :3] = np.clip(np.rint(values), 0, 255).astype(np.uint8)
    return pixels


def compute_luma(pixels: np.ndarray) -> np.ndarray:
    """Luma of every pixel as float64 (H, W), not rounded."""
    rgb = pixels[..., :3].astype(np.float64)
    r_w, g_w, b_w = LUMA_WEIGHTS
    return r_w * rgb[..., 0] + g_w * rgb[..., 1] + b_w * rgb[..., 2]


def apply_grayscale(pixels: np.ndarray) -> np.ndarray:
    """Set R = G = B = luma."""
    _check_buffer(pixels)
    luma = compute_luma(pixels)
    return _store(pixels, np.repeat(luma[..., np.newaxis], 3, axis=2))


def contrast_factor(contrast: float) -> float:
    """
    Contrast multiplier for a contrast level.

    factor = 259 * (100c + 255) / (255 * (259 - 100c))

    Example:
        >>> round(contrast_factor(1.5), 3)
        3.774
    """
    level = contrast * 100
    if level >= 259:
        raise ValueError(f"Contrast level must be below 2.59, got {contrast}")
    return (259 * (level + 255)) / (255 * (259 - level))


def apply_contrast(pixels: np.ndarray, contrast: float) -> np.ndarray:
    """Stretch every channel around mid-gray: v' = factor * (v - 128) + 128."""
    _check_buffer(pixels)
    factor = contrast_factor(contrast)
    rgb = pixels[..., :3].astype(np.float64)
    return _store(pixels, factor * (rgb - 128) + 128)


def apply_brightness(pixels: np.ndarray, delta: float) -> np.ndarray:
    """Shift every channel: v' = v + delta."""
    _check_buffer(pixels)
    rgb = pixels[..., :3].astype(np.float64)
    return _store(pixels, rgb + delta)


def apply_threshold(pixels: np.ndarray, threshold: float = 128) -> np.ndarray:
    """Hard black and white: 255 where luma > threshold, else 0. No dithering."""
    _check_buffer(pixels)
    luma = compute_luma(pixels)
    bw = np.where(luma > threshold, 255, 0).astype(np.uint8)
    pixels[..., :3] = bw[..., np.newaxis]
    return pixels


def apply_sharpen(pixels: np.ndarray) -> np.ndarray:
    """
    Convolve the color channels with the 3x3 sharpen kernel.

    Only interior pixels are written; the 1px border keeps its values.
    The convolution reads the unmodified input for every output pixel.
    """
    _check_buffer(pixels)
    height, width = pixels.shape[:2]
    if height < 3 or width < 3:
        logger.debug(f"Raster {width}x{height} has no interior, sharpen skipped")
        return pixels

    src = pixels[..., :3].astype(np.int32)
    sharpened = (
        SHARPEN_KERNEL[1, 1] * src[1:-1, 1:-1]
        + SHARPEN_KERNEL[0, 1] * src[:-2, 1:-1]
        + SHARPEN_KERNEL[2, 1] * src[2:, 1:-1]
        + SHARPEN_KERNEL[1, 0] * src[1:-1, :-2]
        + SHARPEN_KERNEL[1, 2] * src[1:-1, 2:]
    )
    pixels[1:-1, 1:-1, :3] = np.clip(sharpened, 0, 255).astype(np.uint8)
    return pixels


OPERATIONS: Dict[str, Callable[..., np.ndarray]] = {
    "grayscale": apply_grayscale,
    "contrast": apply_contrast,
    "brightness": apply_brightness,
    "threshold": apply_threshold,
    "sharpen": apply_sharpen,
}
