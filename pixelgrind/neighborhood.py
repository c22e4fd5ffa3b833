"""
Neighbourhood analysis for the anti-aliasing detector.

For a pixel, walk its 8 neighbours (fewer at the border) and record:

- how many of them have the same brightness as the centre
- the neighbour with the most negative brightness delta
- the neighbour with the most positive brightness delta

Deltas are ``centre - neighbour`` luma, so a negative delta means the
neighbour is brighter. Pixels on the image border start with one implicit
equal sibling to make up for the missing neighbours, and a pixel with more
than two equal siblings is rejected outright: it sits in a flat region.
"""

import logging
from dataclasses import dataclass
from typing import Tuple

import numpy as np

from .color import color_delta, color_delta_map

logger = logging.getLogger(__name__)

# More equal siblings than this means a flat region
MAX_EQUAL_SIBLINGS = 2

# Scan order: x outer, y inner, centre skipped
NEIGHBOR_OFFSETS = tuple(
    (dx, dy) for dx in (-1, 0, 1) for dy in (-1, 0, 1) if (dx, dy) != (0, 0)
)


@dataclass(frozen=True)
class Neighborhood:
    """Result of scanning one pixel's neighbours."""
    siblings: int
    rejected: bool
    min_delta: float = 0.0
    min_pos: Tuple[int, int] = (0, 0)
    max_delta: float = 0.0
    max_pos: Tuple[int, int] = (0, 0)


@dataclass(frozen=True)
class NeighborhoodMaps:
    """Per-pixel neighbourhood results for a band of rows."""
    siblings: np.ndarray
    rejected: np.ndarray
    min_delta: np.ndarray
    min_x: np.ndarray
    min_y: np.ndarray
    max_delta: np.ndarray
    max_x: np.ndarray
    max_y: np.ndarray


def _bounds(x: int, y: int, width: int, height: int):
    return max(x - 1, 0), max(y - 1, 0), min(x + 1, width - 1), min(y + 1, height - 1)


def scan_neighborhood(image: np.ndarray, x: int, y: int) -> Neighborhood:
    """
    Scan the neighbours of ``(x, y)`` using brightness-only deltas.

    Ties on the extreme deltas keep the first neighbour encountered. The scan
    stops as soon as a third equal sibling is seen.
    """
    height, width = image.shape[:2]
    buf = image.ravel()
    x0, y0, x2, y2 = _bounds(x, y, width, height)
    pos = (y * width + x) * 4

    siblings = 1 if x in (x0, x2) or y in (y0, y2) else 0
    min_delta = max_delta = 0
    min_pos = max_pos = (0, 0)

    for nx in range(x0, x2 + 1):
        for ny in range(y0, y2 + 1):
            if nx == x and ny == y:
                continue

            delta = color_delta(buf, buf, pos, (ny * width + nx) * 4, True)

            if delta == 0:
                siblings += 1
                if siblings > MAX_EQUAL_SIBLINGS:
                    return Neighborhood(siblings=siblings, rejected=True)
            elif delta < min_delta:
                min_delta = delta
                min_pos = (nx, ny)
            elif delta > max_delta:
                max_delta = delta
                max_pos = (nx, ny)

    return Neighborhood(
        siblings=siblings,
        rejected=False,
        min_delta=min_delta,
        min_pos=min_pos,
        max_delta=max_delta,
        max_pos=max_pos,
    )


def edge_mask(height: int, width: int, y0: int = 0, y1: int = None) -> np.ndarray:
    """Boolean mask of border pixels for rows ``y0:y1``."""
    if y1 is None:
        y1 = height
    ys = np.arange(y0, y1)[:, None]
    xs = np.arange(width)[None, :]
    return (xs == 0) | (xs == width - 1) | (ys == 0) | (ys == height - 1)


def _empty_maps(shape):
    zeros = np.zeros(shape, dtype=np.int64)
    return NeighborhoodMaps(
        siblings=zeros,
        rejected=np.zeros(shape, dtype=bool),
        min_delta=np.zeros(shape, dtype=np.float64),
        min_x=zeros,
        min_y=zeros,
        max_delta=np.zeros(shape, dtype=np.float64),
        max_x=zeros,
        max_y=zeros,
    )


def scan_rows(image: np.ndarray, y0: int, y1: int) -> NeighborhoodMaps:
    """
    Vectorised ``scan_neighborhood`` for every pixel in rows ``y0:y1``.

    Only the band and the rows directly above and below it are read, so
    bands can be processed independently and give the same answer as a
    whole-image scan.
    """
    height, width = image.shape[:2]
    y1 = max(y0, y1)
    ys = np.arange(y0, y1)[:, None]
    xs = np.arange(width)[None, :]
    shape = (y1 - y0, width)

    if width == 0 or y1 == y0:
        return _empty_maps(shape)

    band = image[y0:y1]
    offsets = np.broadcast_to((ys * width + xs) * 4, shape)

    # Band plus one row of context; edge padding only where the image ends
    lo, hi = max(y0 - 1, 0), min(y1 + 1, height)
    pad_rows = (1 if lo == y0 else 0, 1 if hi == y1 else 0)
    padded = np.pad(image[lo:hi], (pad_rows, (1, 1), (0, 0)), mode="edge")

    siblings = edge_mask(height, width, y0, y1).astype(np.int64)
    rejected = np.zeros(shape, dtype=bool)
    min_delta = np.zeros(shape, dtype=np.float64)
    max_delta = np.zeros(shape, dtype=np.float64)
    min_x = np.zeros(shape, dtype=np.int64)
    min_y = np.zeros(shape, dtype=np.int64)
    max_x = np.zeros(shape, dtype=np.int64)
    max_y = np.zeros(shape, dtype=np.int64)

    for dx, dy in NEIGHBOR_OFFSETS:
        nx = xs + dx
        ny = ys + dy
        valid = (nx >= 0) & (nx < width) & (ny >= 0) & (ny < height)

        neighbor = padded[1 + dy:1 + dy + shape[0], 1 + dx:width + 1 + dx]
        delta = color_delta_map(band, neighbor, offsets, y_only=True)

        active = valid & ~rejected
        equal = active & (delta == 0)
        siblings += equal
        rejected |= siblings > MAX_EQUAL_SIBLINGS

        darker = active & ~equal & (delta < min_delta)
        brighter = active & ~equal & ~darker & (delta > max_delta)

        min_delta = np.where(darker, delta, min_delta)
        min_x = np.where(darker, nx, min_x)
        min_y = np.where(darker, ny, min_y)
        max_delta = np.where(brighter, delta, max_delta)
        max_x = np.where(brighter, nx, max_x)
        max_y = np.where(brighter, ny, max_y)

    logger.debug("Scanned rows %d-%d (%d rejected)", y0, y1, int(rejected.sum()))

    return NeighborhoodMaps(
        siblings=siblings,
        rejected=rejected,
        min_delta=min_delta,
        min_x=min_x,
        min_y=min_y,
        max_delta=max_delta,
        max_x=max_x,
        max_y=max_y,
    )


def has_many_siblings(image: np.ndarray, x: int, y: int) -> bool:
    """Whether ``(x, y)`` has 3 or more neighbours with exactly the same RGBA value."""
    height, width = image.shape[:2]
    x0, y0, x2, y2 = _bounds(x, y, width, height)
    value = image[y, x]

    siblings = 1 if x in (x0, x2) or y in (y0, y2) else 0
    for nx in range(x0, x2 + 1):
        for ny in range(y0, y2 + 1):
            if nx == x and ny == y:
                continue
            siblings += int(np.array_equal(value, image[ny, nx]))
            if siblings > MAX_EQUAL_SIBLINGS:
                return True
    return False
