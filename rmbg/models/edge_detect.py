"""
Gradient edge map using Canny hysteresis
"""

import cv2
import numpy as np
import logging

logger = logging.getLogger(__name__)

# Sobel aperture used by the gradient operator
APERTURE = 3


def to_gray(img_bgr: np.ndarray) -> np.ndarray:
    return cv2.cvtColor(img_bgr, cv2.COLOR_BGR2GRAY) if img_bgr.ndim == 3 else img_bgr


def detect_edges(img_bgr: np.ndarray, low: float, high: float) -> np.ndarray:
    """
    Compute a binary edge map of a color image

    The image is converted to luminance and passed through the Canny
    operator with a 3x3 aperture.  Gradients above ``high`` seed edges,
    gradients below ``low`` are suppressed and anything in between is
    kept only when connected to a seed.

    Args:
        img_bgr: Input BGR image (H, W, 3), uint8
        low: Lower hysteresis threshold
        high: Upper hysteresis threshold

    Returns:
        Edge map (H, W), uint8 with values 0 or 255
    """
    if img_bgr is None or img_bgr.size == 0:
        raise ValueError("Input must be a non-empty image")
    if low > high:
        low, high = high, low

    gray = to_gray(img_bgr)
    edges = cv2.Canny(gray, float(low), float(high), apertureSize=APERTURE)

    logger.debug(f"Edge pixels: {int(np.count_nonzero(edges))} "
                 f"({np.count_nonzero(edges) / edges.size:.2%})")
    return edges
