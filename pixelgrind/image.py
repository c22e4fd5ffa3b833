"""
Raster helpers shared by the detector and the evaluation pipeline.

An image is a ``(height, width, 4)`` uint8 numpy array in RGBA order,
row-major and contiguous, so ``image.ravel()`` is the raw byte buffer with
4 bytes per pixel.
"""

from typing import Tuple

import numpy as np


Pixel = Tuple[int, int, int, int]


class DimensionMismatchError(ValueError):
    """Raised when a reference image does not match the test image size."""


def as_rgba(array: np.ndarray) -> np.ndarray:
    """
    Normalise an array into a contiguous RGBA uint8 image.

    Grey ``(H, W)`` and RGB ``(H, W, 3)`` arrays are expanded with an opaque
    alpha channel; RGBA arrays are passed through.

    Raises:
        ValueError: If the array is not a 2-D raster or has an unsupported
            number of channels or dtype.
    """
    array = np.asarray(array)
    if array.dtype != np.uint8:
        raise ValueError(f"Expected uint8 pixel data, got {array.dtype}")

    if array.ndim == 2:
        array = np.stack([array, array, array], axis=2)

    if array.ndim != 3:
        raise ValueError(f"Expected a 2-D raster, got array of shape {array.shape}")

    channels = array.shape[2]
    if channels == 3:
        alpha = np.full(array.shape[:2] + (1,), 255, dtype=np.uint8)
        array = np.concatenate([array, alpha], axis=2)
    elif channels != 4:
        raise ValueError(f"Unsupported channel count: {channels}")

    return np.ascontiguousarray(array)


def check_same_size(image: np.ndarray, reference: np.ndarray):
    """Raise ``DimensionMismatchError`` unless both rasters have equal width and height."""
    if image.shape[:2] != reference.shape[:2]:
        h1, w1 = image.shape[:2]
        h2, w2 = reference.shape[:2]
        raise DimensionMismatchError(
            f"Images must have the same width and height: {w1}x{h1} vs {w2}x{h2}"
        )


def get_pixel(image: np.ndarray, x: int, y: int) -> Pixel:
    """Return the pixel at ``(x, y)`` as an ``(R, G, B, A)`` tuple."""
    r, g, b, a = image[y, x]
    return int(r), int(g), int(b), int(a)


def rgb_matches(image: np.ndarray, reference: np.ndarray, x: int, y: int) -> bool:
    """Whether the two images hold the same RGB value at ``(x, y)``. Alpha is ignored."""
    check_same_size(image, reference)
    return bool(np.array_equal(image[y, x, :3], reference[y, x, :3]))
