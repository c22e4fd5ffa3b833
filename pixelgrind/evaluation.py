"""
Pixelgrind Evaluation Pipeline.

Runs the anti-aliasing classifier over a whole image and, when a reference
rendering without anti-aliasing is supplied, scores it:

1. Ground truth: pixels whose RGB differs from the reference
2. Confusion counts, accumulated per row band and summed at the end
3. Precision, recall and F1 (NaN when undefined)
4. Diagnostic rasters (output, overlay, differential, ground truth)

Usage:
    from pixelgrind.evaluation import evaluate

    result = evaluate(image, reference)
    print(result.counts.precision, result.counts.recall)
"""

import concurrent.futures
import logging
import math
import os
import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

import numpy as np

from .antialias import classify_rows
from .image import as_rgba, check_same_size
from .render import render_differential, render_ground_truth, render_output, render_overlay

logger = logging.getLogger(__name__)

# Rows per work unit
DEFAULT_BAND_HEIGHT = 64


def _ratio(numerator: int, denominator: int) -> float:
    if denominator == 0:
        return float("nan")
    return numerator / denominator


@dataclass(frozen=True)
class ConfusionCounts:
    """Confusion-matrix tallies for one run (or one band of a run)."""
    true_positives: int = 0
    false_positives: int = 0
    false_negatives: int = 0
    detected: int = 0
    expected: int = 0

    @classmethod
    def from_masks(cls, classified: np.ndarray, truth: Optional[np.ndarray] = None) -> "ConfusionCounts":
        """Count detections, and agreement with ``truth`` when given."""
        detected = int(np.count_nonzero(classified))
        if truth is None:
            return cls(detected=detected)

        return cls(
            true_positives=int(np.count_nonzero(classified & truth)),
            false_positives=int(np.count_nonzero(classified & ~truth)),
            false_negatives=int(np.count_nonzero(~classified & truth)),
            detected=detected,
            expected=int(np.count_nonzero(truth)),
        )

    def __add__(self, other: "ConfusionCounts") -> "ConfusionCounts":
        if not isinstance(other, ConfusionCounts):
            return NotImplemented
        return ConfusionCounts(
            true_positives=self.true_positives + other.true_positives,
            false_positives=self.false_positives + other.false_positives,
            false_negatives=self.false_negatives + other.false_negatives,
            detected=self.detected + other.detected,
            expected=self.expected + other.expected,
        )

    @property
    def precision(self) -> float:
        return _ratio(self.true_positives, self.true_positives + self.false_positives)

    @property
    def recall(self) -> float:
        return _ratio(self.true_positives, self.true_positives + self.false_negatives)

    @property
    def f1(self) -> float:
        precision, recall = self.precision, self.recall
        if math.isnan(precision) or math.isnan(recall) or precision + recall == 0:
            return float("nan")
        return 2 * precision * recall / (precision + recall)

    def to_dict(self) -> Dict[str, Optional[float]]:
        """Counts and metrics as plain values; undefined metrics become None."""
        metrics = {
            "precision": self.precision,
            "recall": self.recall,
            "f1": self.f1,
        }
        return {
            "true_positives": self.true_positives,
            "false_positives": self.false_positives,
            "false_negatives": self.false_negatives,
            "detected": self.detected,
            "expected": self.expected,
            **{k: (None if math.isnan(v) else v) for k, v in metrics.items()},
        }


def format_metric(value: float, digits: int = 4) -> str:
    """Render a metric for display, ``"undefined"`` when it is NaN."""
    if value is None or math.isnan(value):
        return "undefined"
    return f"{value:.{digits}f}"


@dataclass
class EvaluationResult:
    """Everything produced by one ``evaluate`` run."""
    classification: np.ndarray
    counts: ConfusionCounts
    rasters: Dict[str, np.ndarray] = field(default_factory=dict)
    ground_truth: Optional[np.ndarray] = None
    elapsed: float = 0.0

    @property
    def has_reference(self) -> bool:
        return self.ground_truth is not None


def ground_truth(image: np.ndarray, reference: np.ndarray) -> np.ndarray:
    """
    Ground-truth anti-aliasing mask: pixels whose RGB differs from ``reference``.

    Alpha is not compared. This is the whole-image form of
    ``pixelgrind.image.rgb_matches``: ``truth[y, x]`` is
    ``not rgb_matches(image, reference, x, y)``.

    Raises:
        DimensionMismatchError: If the images differ in width or height.
    """
    check_same_size(image, reference)
    truth = np.any(image[..., :3] != reference[..., :3], axis=2)
    truth.flags.writeable = False
    return truth


def split_bands(height: int, band_height: int = DEFAULT_BAND_HEIGHT) -> List[Tuple[int, int]]:
    """Split ``height`` rows into ``(y0, y1)`` bands."""
    band_height = max(1, band_height)
    return [(y0, min(y0 + band_height, height)) for y0 in range(0, height, band_height)]


def _evaluate_band(image, truth, y0, y1):
    mask = classify_rows(image, y0, y1)
    band_truth = None if truth is None else truth[y0:y1]
    return y0, y1, mask, ConfusionCounts.from_masks(mask, band_truth)


def evaluate(
    image: np.ndarray,
    reference: Optional[np.ndarray] = None,
    workers: Optional[int] = None,
    band_height: int = DEFAULT_BAND_HEIGHT,
) -> EvaluationResult:
    """
    Classify every pixel of ``image`` and score against ``reference``.

    Args:
        image: Test image (grey, RGB or RGBA uint8)
        reference: Same image rendered without anti-aliasing (optional)
        workers: Thread count; defaults to the CPU count, 1 disables threading
        band_height: Rows per work unit

    Returns:
        EvaluationResult with the classification mask, counts, diagnostic
        rasters and elapsed seconds.

    Raises:
        DimensionMismatchError: If ``reference`` has a different size.
    """
    image = as_rgba(image)
    truth = None
    if reference is not None:
        reference = as_rgba(reference)
        truth = ground_truth(image, reference)

    height, width = image.shape[:2]
    bands = split_bands(height, band_height)
    if workers is None:
        workers = min(len(bands), os.cpu_count() or 1)
    workers = max(1, workers)

    logger.debug("Evaluating %dx%d image in %d bands with %d workers", width, height, len(bands), workers)

    start = time.perf_counter()
    classification = np.zeros((height, width), dtype=bool)
    partials = []

    if workers == 1 or len(bands) <= 1:
        results = [_evaluate_band(image, truth, y0, y1) for y0, y1 in bands]
    else:
        with concurrent.futures.ThreadPoolExecutor(max_workers=workers) as executor:
            futures = [executor.submit(_evaluate_band, image, truth, y0, y1) for y0, y1 in bands]
            results = [future.result() for future in concurrent.futures.as_completed(futures)]

    for y0, y1, mask, counts in results:
        classification[y0:y1] = mask
        partials.append(counts)

    counts = sum(partials, ConfusionCounts())
    classification.flags.writeable = False

    rasters = {
        "output": render_output(classification),
        "overlay": render_overlay(image, classification),
    }
    if truth is not None:
        rasters["differential"] = render_differential(classification, truth)
        rasters["ground_truth"] = render_ground_truth(truth)

    elapsed = time.perf_counter() - start
    logger.info("Detected %d anti-aliased pixels in %.3fs", counts.detected, elapsed)

    return EvaluationResult(
        classification=classification,
        counts=counts,
        rasters=rasters,
        ground_truth=truth,
        elapsed=elapsed,
    )
