"""
Image file I/O for Pixelgrind.

Pixel data must survive a round trip exactly, so rasters are written as
PNG only.
"""

import json
import logging
import math
from pathlib import Path
from typing import Any, Dict, Optional, Union

import numpy as np
from PIL import Image

from .image import as_rgba

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

LOSSLESS_SUFFIXES = {'.png'}


def load_image(path: PathLike) -> np.ndarray:
    """Load an image file as an RGBA uint8 array of shape ``(H, W, 4)``."""
    with Image.open(path) as img:
        arr = np.array(img.convert('RGBA'))
    logger.debug("Loaded %s (%dx%d)", path, arr.shape[1], arr.shape[0])
    return as_rgba(arr)


def ensure_parent(path: PathLike) -> Path:
    """Create the parent directory of ``path`` if needed."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    return path


def check_lossless(path: PathLike) -> Path:
    """Raise ``ValueError`` unless ``path`` names a lossless image format."""
    path = Path(path)
    if path.suffix.lower() not in LOSSLESS_SUFFIXES:
        raise ValueError(f"Output must be a lossless PNG file: {path}")
    return path


def save_image(image: np.ndarray, path: PathLike) -> Path:
    """
    Save an RGBA array as PNG, creating missing directories.

    Raises:
        ValueError: If ``path`` does not name a lossless format.
    """
    path = check_lossless(path)
    ensure_parent(path)
    Image.fromarray(as_rgba(image)).save(path)
    logger.debug("Wrote %s", path)
    return path


def _clean(value):
    # JSON has no NaN
    if isinstance(value, float) and math.isnan(value):
        return None
    return value


def save_result(
    path: PathLike,
    counts: Dict[str, Any],
    image_path: Optional[PathLike] = None,
    reference_path: Optional[PathLike] = None,
    elapsed: Optional[float] = None,
    outputs: Optional[Dict[str, PathLike]] = None,
) -> Path:
    """Write a JSON summary of a detection run."""
    path = ensure_parent(path)
    payload = {
        "image": str(image_path) if image_path else None,
        "reference": str(reference_path) if reference_path else None,
        "elapsed": elapsed,
        "counts": {k: _clean(v) for k, v in counts.items()},
        "outputs": {k: str(v) for k, v in (outputs or {}).items()},
    }
    with open(path, 'w') as f:
        json.dump(payload, f, indent=2)
    return path
