"""
Pixelgrind Color Metric.

Perceptual color difference in YIQ space, after "Measuring perceived color
difference using YIQ NTSC transmission color space in mobile applications"
by Y. Kotsarenko and F. Ramos.

Two entry points compute the same number:

1. ``color_delta`` works on flat RGBA byte buffers addressed by byte offset
2. ``color_delta_map`` works on whole numpy arrays of pixels at once

Both use the same float64 operation order so their results are identical.
"""

from typing import Sequence, Tuple, Union

import numpy as np


# YIQ weights
Y_WEIGHTS = (0.29889531, 0.58662247, 0.11448223)
I_WEIGHTS = (0.59597799, -0.27417610, -0.32180189)
Q_WEIGHTS = (0.21147017, -0.52261711, 0.31114694)

# Squared-difference weights for Y, I and Q
DELTA_WEIGHTS = (0.5053, 0.299, 0.1957)

# Background used when blending translucent pixels
BACKGROUND_BASE = 48
BACKGROUND_SPAN = 159
GOLDEN_RATIO = 1.618033988749895
GOLDEN_RATIO_SQUARED = 2.618033988749895

Buffer = Union[np.ndarray, bytes, bytearray, Sequence[int]]


def background_color(k: int) -> Tuple[int, int, int]:
    """
    Background color used to blend translucent pixels at byte offset ``k``.

    Neighbouring offsets get different backgrounds so that patterned
    transparency does not compare equal against a single fixed color.
    """
    rb = BACKGROUND_BASE + BACKGROUND_SPAN * (k % 2)
    gb = BACKGROUND_BASE + BACKGROUND_SPAN * (int(k / GOLDEN_RATIO) % 2)
    bb = BACKGROUND_BASE + BACKGROUND_SPAN * (int(k / GOLDEN_RATIO_SQUARED) % 2)
    return rb, gb, bb


def _yiq_delta(dr, dg, db, y_only):
    y = dr * Y_WEIGHTS[0] + dg * Y_WEIGHTS[1] + db * Y_WEIGHTS[2]
    if y_only:
        return y

    i = dr * I_WEIGHTS[0] + dg * I_WEIGHTS[1] + db * I_WEIGHTS[2]
    q = dr * Q_WEIGHTS[0] + dg * Q_WEIGHTS[1] + db * Q_WEIGHTS[2]
    delta = DELTA_WEIGHTS[0] * y * y + DELTA_WEIGHTS[1] * i * i + DELTA_WEIGHTS[2] * q * q
    return y, delta


def color_delta(img1: Buffer, img2: Buffer, k: int, m: int, y_only: bool = False) -> float:
    """
    Perceptual difference between two pixels of flat RGBA buffers.

    Args:
        img1: Flat RGBA buffer holding the first pixel
        img2: Flat RGBA buffer holding the second pixel
        k: Byte offset of the first pixel in ``img1``
        m: Byte offset of the second pixel in ``img2``
        y_only: Return the signed brightness difference only

    Returns:
        Signed difference. With ``y_only`` this is the luma of
        ``first - second`` (negative when the second pixel is brighter).
        Otherwise the weighted YIQ distance, negated when the second pixel
        is darker than the first.
    """
    r1, g1, b1, a1 = (int(v) for v in img1[k:k + 4])
    r2, g2, b2, a2 = (int(v) for v in img2[m:m + 4])

    dr = r1 - r2
    dg = g1 - g2
    db = b1 - b2
    da = a1 - a2

    if not dr and not dg and not db and not da:
        return 0

    if a1 < 255 or a2 < 255:
        rb, gb, bb = background_color(k)
        dr = (r1 * a1 - r2 * a2 - rb * da) / 255
        dg = (g1 * a1 - g2 * a2 - gb * da) / 255
        db = (b1 * a1 - b2 * a2 - bb * da) / 255

    if y_only:
        return _yiq_delta(dr, dg, db, True)

    y, delta = _yiq_delta(dr, dg, db, False)
    return -delta if y > 0 else delta


def pixel_delta(p1: Sequence[int], p2: Sequence[int], offset: int = 0, y_only: bool = False) -> float:
    """Color delta between two ``(R, G, B, A)`` tuples, the first at byte ``offset``."""
    # The background for translucent pixels depends on the first pixel's offset
    buf1 = np.zeros(offset + 4, dtype=np.uint8)
    buf1[offset:offset + 4] = p1
    buf2 = np.asarray(p2, dtype=np.uint8)
    return color_delta(buf1, buf2, offset, 0, y_only)


def color_delta_map(
    a: np.ndarray,
    b: np.ndarray,
    offsets: np.ndarray,
    y_only: bool = False,
) -> np.ndarray:
    """
    Vectorised ``color_delta`` over arrays of pixels.

    Args:
        a: First pixels, shape ``(..., 4)``
        b: Second pixels, same shape as ``a``
        offsets: Byte offsets of the first pixels, shape ``a.shape[:-1]``
        y_only: Return the signed brightness difference only

    Returns:
        float64 array of shape ``a.shape[:-1]``
    """
    a = a.astype(np.int64)
    b = b.astype(np.int64)
    offsets = np.asarray(offsets, dtype=np.int64)

    r1, g1, b1, a1 = a[..., 0], a[..., 1], a[..., 2], a[..., 3]
    r2, g2, b2, a2 = b[..., 0], b[..., 1], b[..., 2], b[..., 3]

    dr = (r1 - r2).astype(np.float64)
    dg = (g1 - g2).astype(np.float64)
    db = (b1 - b2).astype(np.float64)
    da = a1 - a2

    identical = (dr == 0) & (dg == 0) & (db == 0) & (da == 0)

    translucent = (a1 < 255) | (a2 < 255)
    if np.any(translucent):
        rb = BACKGROUND_BASE + BACKGROUND_SPAN * (offsets % 2)
        gb = BACKGROUND_BASE + BACKGROUND_SPAN * ((offsets / GOLDEN_RATIO).astype(np.int64) % 2)
        bb = BACKGROUND_BASE + BACKGROUND_SPAN * ((offsets / GOLDEN_RATIO_SQUARED).astype(np.int64) % 2)
        dr = np.where(translucent, (r1 * a1 - r2 * a2 - rb * da) / 255, dr)
        dg = np.where(translucent, (g1 * a1 - g2 * a2 - gb * da) / 255, dg)
        db = np.where(translucent, (b1 * a1 - b2 * a2 - bb * da) / 255, db)

    if y_only:
        result = _yiq_delta(dr, dg, db, True)
    else:
        y, delta = _yiq_delta(dr, dg, db, False)
        result = np.where(y > 0, -delta, delta)

    return np.where(identical, 0.0, result)
