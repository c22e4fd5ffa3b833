"""
Tests for the diagnostic rasters.
"""

import numpy as np
import pytest

from pixelgrind.render import (
    AA_COLOR,
    FALSE_NEGATIVE_COLOR,
    FALSE_POSITIVE_COLOR,
    render_differential,
    render_ground_truth,
    render_output,
    render_overlay,
)


@pytest.fixture
def mask():
    return np.array([[True, False], [False, True]])


@pytest.fixture
def truth():
    return np.array([[True, True], [False, False]])


class TestRenderOutput:
    def test_white_with_highlights(self, mask):
        out = render_output(mask)
        assert out.shape == (2, 2, 4)
        assert tuple(out[0, 0]) == (*AA_COLOR, 255)
        assert tuple(out[0, 1]) == (255, 255, 255, 255)


class TestRenderOverlay:
    def test_blends_detected_pixels(self, mask):
        image = np.full((2, 2, 4), 100, dtype=np.uint8)
        image[..., 3] = 60
        overlay = render_overlay(image, mask)

        # 100 * 125/255 + 130/255 * channel, truncated
        assert tuple(overlay[0, 0]) == (173, 96, 166, 255)
        assert tuple(overlay[1, 1]) == (173, 96, 166, 255)

    def test_other_pixels_unchanged(self, mask):
        image = np.arange(16, dtype=np.uint8).reshape(2, 2, 4)
        overlay = render_overlay(image, mask)
        np.testing.assert_array_equal(overlay[0, 1], image[0, 1])
        np.testing.assert_array_equal(overlay[1, 0], image[1, 0])

    def test_source_untouched(self, mask):
        image = np.full((2, 2, 4), 100, dtype=np.uint8)
        render_overlay(image, mask)
        assert (image == 100).all()


class TestRenderDifferential:
    def test_marks_errors(self, mask, truth):
        diff = render_differential(mask, truth)
        assert tuple(diff[0, 0]) == (0, 0, 0, 0)                      # true positive
        assert tuple(diff[0, 1]) == (*FALSE_NEGATIVE_COLOR, 255)
        assert tuple(diff[1, 0]) == (0, 0, 0, 0)                      # true negative
        assert tuple(diff[1, 1]) == (*FALSE_POSITIVE_COLOR, 255)


class TestRenderGroundTruth:
    def test_marks_truth(self, truth):
        gt = render_ground_truth(truth)
        assert tuple(gt[0, 0]) == (*AA_COLOR, 255)
        assert tuple(gt[0, 1]) == (*AA_COLOR, 255)
        assert tuple(gt[1, 0]) == (0, 0, 0, 0)
