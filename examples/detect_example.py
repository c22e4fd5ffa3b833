#!/usr/bin/env python3
"""
Example: Detect anti-aliased pixels and score the detection.

Builds an anti-aliased disc and its aliased counterpart in memory, runs the
evaluation pipeline and writes the diagnostic images next to this file.
"""

import sys
from pathlib import Path

import numpy as np

from pixelgrind import evaluate, format_metric
from pixelgrind.codec import save_image


def make_disc(size=96, radius=30.0, samples=1):
    """White disc on black; ``samples`` > 1 supersamples each pixel."""
    offsets = (np.arange(samples) + 0.5) / samples
    ys, xs = np.mgrid[0:size, 0:size]
    coverage = np.zeros((size, size))
    for oy in offsets:
        for ox in offsets:
            dist = np.hypot(xs + ox - size / 2, ys + oy - size / 2)
            coverage += dist <= radius
    coverage /= samples * samples

    grey = (coverage * 255).astype(np.uint8)
    alpha = np.full_like(grey, 255)
    return np.stack([grey, grey, grey, alpha], axis=2)


def main():
    """Run the detection example."""
    image = make_disc(samples=4)
    reference = make_disc(samples=1)

    result = evaluate(image, reference)
    counts = result.counts

    print(f"Detected {counts.detected} anti-aliased pixels.")
    print(f"Expected {counts.expected} anti-aliased pixels.")
    print(f"Precision: {format_metric(counts.precision)}")
    print(f"Recall:    {format_metric(counts.recall)}")
    print(f"F1:        {format_metric(counts.f1)}")

    out_dir = Path(__file__).parent / "out"
    for name, raster in result.rasters.items():
        print(f"  {name}: {save_image(raster, out_dir / f'{name}.png')}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
