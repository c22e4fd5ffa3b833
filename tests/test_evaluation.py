"""
Tests for the evaluation pipeline.
"""

import math

import numpy as np
import pytest

from pixelgrind.evaluation import (
    ConfusionCounts,
    evaluate,
    format_metric,
    ground_truth,
    split_bands,
)
from pixelgrind.image import DimensionMismatchError, rgb_matches


def grey(values):
    values = np.asarray(values, dtype=np.uint8)
    img = np.stack([values, values, values, np.full_like(values, 255)], axis=2)
    return np.ascontiguousarray(img)


@pytest.fixture
def cross_image():
    return grey([
        [255, 0, 255],
        [0, 128, 0],
        [255, 0, 255],
    ])


@pytest.fixture
def noisy_pair():
    """A random few-level image and a reference differing on some pixels."""
    rng = np.random.default_rng(5)
    levels = np.array([0, 64, 128, 192, 255], dtype=np.uint8)
    image = grey(levels[rng.integers(0, len(levels), size=(40, 33))])
    reference = image.copy()
    flip = rng.random((40, 33)) < 0.2
    reference[flip, :3] = 255 - reference[flip, :3]
    return image, reference


class TestConfusionCounts:
    """Tests for counts and derived metrics."""

    def test_metrics(self):
        counts = ConfusionCounts(true_positives=8, false_positives=2, false_negatives=0, detected=10, expected=8)
        assert counts.precision == pytest.approx(0.8)
        assert counts.recall == pytest.approx(1.0)
        assert counts.f1 == pytest.approx(0.8889, abs=1e-4)

    def test_undefined_metrics_are_nan(self):
        counts = ConfusionCounts()
        assert math.isnan(counts.precision)
        assert math.isnan(counts.recall)
        assert math.isnan(counts.f1)

    def test_zero_precision_and_recall(self):
        counts = ConfusionCounts(false_positives=3, false_negatives=2, detected=3, expected=2)
        assert counts.precision == 0
        assert counts.recall == 0
        assert math.isnan(counts.f1)

    def test_addition(self):
        a = ConfusionCounts(1, 2, 3, 4, 5)
        b = ConfusionCounts(10, 20, 30, 40, 50)
        assert a + b == ConfusionCounts(11, 22, 33, 44, 55)
        assert sum([a, b], ConfusionCounts()) == a + b

    def test_from_masks(self):
        classified = np.array([[True, True, False, False]])
        truth = np.array([[True, False, True, False]])
        counts = ConfusionCounts.from_masks(classified, truth)
        assert counts == ConfusionCounts(
            true_positives=1, false_positives=1, false_negatives=1, detected=2, expected=2,
        )

    def test_from_masks_without_truth(self):
        counts = ConfusionCounts.from_masks(np.array([[True, False, True]]))
        assert counts.detected == 2
        assert counts.expected == 0

    def test_to_dict_replaces_nan(self):
        data = ConfusionCounts(detected=4).to_dict()
        assert data["detected"] == 4
        assert data["precision"] is None
        assert data["f1"] is None


class TestFormatMetric:
    def test_number(self):
        assert format_metric(0.88888) == "0.8889"

    def test_nan(self):
        assert format_metric(float("nan")) == "undefined"


class TestGroundTruth:
    """Tests for ground-truth derivation."""

    def test_identical_images(self, cross_image):
        assert not ground_truth(cross_image, cross_image.copy()).any()

    def test_alpha_ignored(self, cross_image):
        reference = cross_image.copy()
        reference[..., 3] = 10
        assert not ground_truth(cross_image, reference).any()

    def test_rgb_difference(self, cross_image):
        reference = cross_image.copy()
        reference[1, 1, 2] = 0
        truth = ground_truth(cross_image, reference)
        assert truth[1, 1]
        assert truth.sum() == 1

    def test_agrees_with_pixel_match(self, noisy_pair):
        image, reference = noisy_pair
        truth = ground_truth(image, reference)
        for y, x in [(0, 0), (5, 7), (39, 32), (20, 11)]:
            assert truth[y, x] == (not rgb_matches(image, reference, x, y))

    def test_dimension_mismatch(self, cross_image):
        with pytest.raises(DimensionMismatchError):
            ground_truth(cross_image, grey(np.zeros((3, 4))))


class TestSplitBands:
    def test_covers_all_rows(self):
        assert split_bands(10, 4) == [(0, 4), (4, 8), (8, 10)]

    def test_empty(self):
        assert split_bands(0, 4) == []


class TestEvaluate:
    """Tests for the full pipeline."""

    def test_without_reference(self, cross_image):
        result = evaluate(cross_image)
        assert result.counts.detected == 1
        assert result.counts.expected == 0
        assert not result.has_reference
        assert set(result.rasters) == {"output", "overlay"}
        assert result.elapsed >= 0

    def test_with_reference(self, cross_image):
        reference = cross_image.copy()
        reference[1, 1, :3] = 0
        result = evaluate(cross_image, reference)

        counts = result.counts
        assert (counts.true_positives, counts.false_positives, counts.false_negatives) == (1, 0, 0)
        assert counts.precision == 1.0
        assert counts.recall == 1.0
        assert counts.f1 == 1.0
        assert set(result.rasters) == {"output", "overlay", "differential", "ground_truth"}

    def test_identical_reference(self, noisy_pair):
        image, _ = noisy_pair
        result = evaluate(image, image.copy())
        assert result.counts.expected == 0
        assert result.counts.true_positives == 0
        assert math.isnan(result.counts.recall)

    def test_count_invariants(self, noisy_pair):
        image, reference = noisy_pair
        counts = evaluate(image, reference).counts
        assert counts.true_positives + counts.false_negatives == counts.expected
        assert counts.true_positives + counts.false_positives == counts.detected

    def test_workers_agree(self, noisy_pair):
        image, reference = noisy_pair
        serial = evaluate(image, reference, workers=1)
        threaded = evaluate(image, reference, workers=4, band_height=5)
        np.testing.assert_array_equal(serial.classification, threaded.classification)
        assert serial.counts == threaded.counts
        for name in serial.rasters:
            np.testing.assert_array_equal(serial.rasters[name], threaded.rasters[name])

    def test_dimension_mismatch(self, cross_image):
        with pytest.raises(DimensionMismatchError):
            evaluate(cross_image, grey(np.zeros((4, 3))))

    def test_accepts_rgb(self, cross_image):
        result = evaluate(cross_image[..., :3].copy())
        assert result.counts.detected == 1

    def test_zero_width_image(self):
        result = evaluate(np.zeros((3, 0, 4), dtype=np.uint8))
        assert result.classification.shape == (3, 0)
        assert result.counts.detected == 0
        assert result.rasters["overlay"].shape == (3, 0, 4)

    def test_classification_read_only(self, cross_image):
        result = evaluate(cross_image)
        assert not result.classification.flags.writeable
