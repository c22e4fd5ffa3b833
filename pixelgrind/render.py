"""
Diagnostic rasters for the anti-aliasing detector.

- output: white canvas with detected pixels highlighted
- overlay: source image with detected pixels tinted
- differential: false positives and false negatives against ground truth
- ground truth: pixels that really are anti-aliased
"""

from typing import Tuple

import numpy as np


AA_COLOR = (245, 93, 230)
FALSE_POSITIVE_COLOR = (255, 0, 0)
FALSE_NEGATIVE_COLOR = (0, 0, 255)

OVERLAY_ALPHA = 130
OUTPUT_ALPHA = 255


def _paint(canvas: np.ndarray, mask: np.ndarray, color: Tuple[int, int, int], alpha: int = 255):
    canvas[mask] = (*color, alpha)
    return canvas


def blank_canvas(height: int, width: int, fill: int = 0) -> np.ndarray:
    """RGBA canvas with every channel set to ``fill`` (0 is fully transparent)."""
    return np.full((height, width, 4), fill, dtype=np.uint8)


def render_output(mask: np.ndarray) -> np.ndarray:
    """White image with anti-aliased pixels in ``AA_COLOR``."""
    canvas = blank_canvas(*mask.shape, fill=255)
    return _paint(canvas, mask, AA_COLOR, OUTPUT_ALPHA)


def render_overlay(image: np.ndarray, mask: np.ndarray) -> np.ndarray:
    """
    Copy of ``image`` with anti-aliased pixels blended towards ``AA_COLOR``.

    Blended pixels become opaque; channel values are truncated, not rounded.
    """
    overlay = image.copy()
    level = OVERLAY_ALPHA / 255.0
    src = image[mask, :3].astype(np.float64)
    blended = src * (1.0 - level) + level * np.asarray(AA_COLOR, dtype=np.float64)
    overlay[mask, :3] = blended.astype(np.uint8)
    overlay[mask, 3] = 255
    return overlay


def render_differential(mask: np.ndarray, truth: np.ndarray) -> np.ndarray:
    """Transparent image marking false positives and false negatives."""
    canvas = blank_canvas(*mask.shape)
    _paint(canvas, mask & ~truth, FALSE_POSITIVE_COLOR)
    _paint(canvas, ~mask & truth, FALSE_NEGATIVE_COLOR)
    return canvas


def render_ground_truth(truth: np.ndarray) -> np.ndarray:
    """Transparent image with ground-truth anti-aliased pixels in ``AA_COLOR``."""
    canvas = blank_canvas(*truth.shape)
    return _paint(canvas, truth, AA_COLOR)
