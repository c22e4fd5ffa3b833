"""
Pixelgrind - Anti-Aliased Pixel Detection

Pixelgrind finds the pixels of a raster image that were produced by
anti-aliasing and measures the detection against a rendering of the same
image without anti-aliasing.
"""

from .color import color_delta, color_delta_map, pixel_delta
from .neighborhood import Neighborhood, scan_neighborhood, scan_rows, has_many_siblings
from .antialias import is_antialiased, classify, classify_rows
from .evaluation import (
    ConfusionCounts,
    EvaluationResult,
    evaluate,
    ground_truth,
    format_metric,
)
from .image import DimensionMismatchError, as_rgba

__version__ = "0.1.0"
__author__ = "Pixelgrind Contributors"

__all__ = [
    # Color metric
    'color_delta',
    'color_delta_map',
    'pixel_delta',
    # Neighbourhood
    'Neighborhood',
    'scan_neighborhood',
    'scan_rows',
    'has_many_siblings',
    # Classifier
    'is_antialiased',
    'classify',
    'classify_rows',
    # Evaluation
    'ConfusionCounts',
    'EvaluationResult',
    'evaluate',
    'ground_truth',
    'format_metric',
    # Rasters
    'DimensionMismatchError',
    'as_rgba',
]
