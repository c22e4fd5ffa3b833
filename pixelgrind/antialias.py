"""
Pixelgrind Anti-Aliasing Classifier.

Based on "Anti-aliased Pixel and Intensity Slope Detector" by
V. Vysniauskas (2009): a pixel is anti-aliased when it has both a darker and
a brighter neighbour and its color lies between theirs, channel by channel.

Usage:
    from pixelgrind.antialias import is_antialiased, classify

    is_antialiased(image, 10, 4)   # single pixel
    mask = classify(image)         # whole image, boolean (H, W)
"""

import numpy as np

from .neighborhood import scan_neighborhood, scan_rows


def _between(value, a, b):
    return (value >= np.minimum(a, b)) & (value <= np.maximum(a, b))


def is_antialiased(image: np.ndarray, x: int, y: int) -> bool:
    """
    Check whether the pixel at ``(x, y)`` is likely part of anti-aliasing.

    Args:
        image: RGBA image of shape ``(height, width, 4)``
        x: Column of the pixel
        y: Row of the pixel

    Returns:
        True if the pixel is an intermediate color between its most
        contrasting neighbours.
    """
    hood = scan_neighborhood(image, x, y)
    if hood.rejected:
        return False

    # Needs both a darker and a brighter neighbour
    if hood.min_delta == 0 or hood.max_delta == 0:
        return False

    center = image[y, x, :3].astype(np.int64)
    low = image[hood.min_pos[1], hood.min_pos[0], :3].astype(np.int64)
    high = image[hood.max_pos[1], hood.max_pos[0], :3].astype(np.int64)

    return bool(np.all(_between(center, low, high)))


def classify_rows(image: np.ndarray, y0: int, y1: int) -> np.ndarray:
    """Anti-aliasing mask for rows ``y0:y1``, shape ``(y1 - y0, width)``."""
    maps = scan_rows(image, y0, y1)

    candidate = ~maps.rejected & (maps.min_delta != 0) & (maps.max_delta != 0)

    center = image[y0:y1, :, :3].astype(np.int64)
    low = image[maps.min_y, maps.min_x, :3].astype(np.int64)
    high = image[maps.max_y, maps.max_x, :3].astype(np.int64)

    intermediate = np.all(_between(center, low, high), axis=2)
    return candidate & intermediate


def classify(image: np.ndarray) -> np.ndarray:
    """Anti-aliasing mask for the whole image, shape ``(height, width)``."""
    mask = classify_rows(image, 0, image.shape[0])
    mask.flags.writeable = False
    return mask
