"""
Domain service: visual feature extraction from a decoded soil/crop image.

Turns a pixel grid into four scalar features consumed by the soil/crop
classifier: mean brightness and the coverage of vegetation, bare soil and
dark soil. Thresholds follow the OpenCV 8-bit HSV scale.
"""
from typing import Sequence, Union
import logging
import cv2
import numpy as np

from irrigation_advisor.domain.exceptions import InvalidFeatureData
from irrigation_advisor.domain.models import ImageFeatures

logger = logging.getLogger(__name__)

# Vegetation band
GREEN_LOWER = np.array([40, 40, 40], dtype=np.uint8)
GREEN_UPPER = np.array([80, 255, 255], dtype=np.uint8)

# Bare soil / brown band
BROWN_LOWER = np.array([10, 30, 20], dtype=np.uint8)
BROWN_UPPER = np.array([25, 255, 200], dtype=np.uint8)

# Dark soil: any hue and saturation, low value
DARK_LOWER = np.array([0, 0, 0], dtype=np.uint8)
DARK_UPPER = np.array([179, 255, 80], dtype=np.uint8)

PixelGrid = Union[np.ndarray, Sequence[Sequence[Sequence[int]]]]


def _as_rgb_array(pixels: PixelGrid) -> np.ndarray:
    """Validate a pixel grid and return it as a contiguous (H, W, 3) uint8 array."""
    try:
        rgb = np.asarray(pixels)
    except ValueError as e:
        raise InvalidFeatureData(f"Pixel grid is malformed: {e}") from e

    if rgb.size == 0:
        raise InvalidFeatureData("Pixel grid is empty")
    if rgb.ndim != 3 or rgb.shape[-1] not in (3, 4):
        raise InvalidFeatureData(
            f"Expected an H x W x 3 pixel grid, got shape {rgb.shape}"
        )
    if not np.issubdtype(rgb.dtype, np.number):
        raise InvalidFeatureData(f"Pixel values must be numeric, got {rgb.dtype}")

    # Drop alpha
    rgb = rgb[..., :3]

    if rgb.min() < 0 or rgb.max() > 255:
        raise InvalidFeatureData("Pixel values must lie in 0-255")

    return np.ascontiguousarray(rgb, dtype=np.uint8)


def extract_features(pixels: PixelGrid) -> ImageFeatures:
    """
    Extract brightness and colour coverage features from an RGB image.

    Args:
        pixels: Decoded RGB image, shape (H, W, 3), values 0-255

    Returns:
        ImageFeatures for the image

    Raises:
        InvalidFeatureData: If the grid is empty or malformed
    """
    rgb = _as_rgb_array(pixels)
    hsv = cv2.cvtColor(rgb, cv2.COLOR_RGB2HSV)
    total = rgb.shape[0] * rgb.shape[1]

    green = cv2.countNonZero(cv2.inRange(hsv, GREEN_LOWER, GREEN_UPPER))
    brown = cv2.countNonZero(cv2.inRange(hsv, BROWN_LOWER, BROWN_UPPER))
    dark = cv2.countNonZero(cv2.inRange(hsv, DARK_LOWER, DARK_UPPER))

    features = ImageFeatures(
        avg_brightness=float(hsv[..., 2].mean()),
        green_pct=green / total * 100.0,
        brown_pct=brown / total * 100.0,
        dark_soil_pct=dark / total * 100.0,
    )

    logger.debug(
        f"Extracted features from {total} pixels: "
        f"brightness={features.avg_brightness:.1f}, green={features.green_pct:.1f}%, "
        f"brown={features.brown_pct:.1f}%, dark={features.dark_soil_pct:.1f}%"
    )
    return features
