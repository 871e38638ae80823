"""
Infrastructure layer: image decoding and resizing with OpenCV.
"""
import logging
import cv2
import numpy as np

from irrigation_advisor.config import settings
from irrigation_advisor.domain.exceptions import InvalidFeatureData

logger = logging.getLogger(__name__)


def resize_max_dimension(img: np.ndarray, max_dim: int) -> np.ndarray:
    """Resize so the longest side is at most max_dim, preserving aspect ratio."""
    h, w = img.shape[:2]
    if max(h, w) <= max_dim:
        return img
    scale = max_dim / max(h, w)
    new_w = max(1, int(round(w * scale)))
    new_h = max(1, int(round(h * scale)))
    return cv2.resize(img, (new_w, new_h), interpolation=cv2.INTER_AREA)


def decode_image(data: bytes, max_dim: int = None) -> np.ndarray:
    """
    Decode JPEG/PNG bytes into a resized RGB array.

    Args:
        data: Encoded image bytes
        max_dim: Longest side after resizing; settings.image_max_dimension by default

    Returns:
        uint8 array of shape (H, W, 3) in RGB order

    Raises:
        InvalidFeatureData: If the bytes are empty or not a decodable image
    """
    if not data:
        raise InvalidFeatureData("Image is empty")

    buffer = np.frombuffer(data, dtype=np.uint8)
    bgr = cv2.imdecode(buffer, cv2.IMREAD_COLOR)
    if bgr is None:
        raise InvalidFeatureData("Image could not be decoded")

    resized = resize_max_dimension(bgr, max_dim or settings.image_max_dimension)
    logger.debug(f"Decoded image {bgr.shape[1]}x{bgr.shape[0]} -> {resized.shape[1]}x{resized.shape[0]}")

    return cv2.cvtColor(resized, cv2.COLOR_BGR2RGB)
