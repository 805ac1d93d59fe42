"""
Output writers for saving transparent images
"""

import os
import cv2
import numpy as np
import logging
from pathlib import Path
from typing import Union

from PIL import Image

logger = logging.getLogger(__name__)


def save_rgba(path: Union[str, Path], bgra: np.ndarray) -> None:
    """
    Save a BGRA image as an RGBA PNG

    Args:
        path: Output file path
        bgra: BGRA image array (H, W, 4)

    Raises:
        OSError: If the file cannot be written.  Nothing is left at
            ``path`` in that case.
    """
    if bgra.ndim != 3 or bgra.shape[2] != 4:
        raise ValueError(f"Expected HxWx4 image, got shape {bgra.shape}")

    rgba = cv2.cvtColor(bgra, cv2.COLOR_BGRA2RGBA)

    try:
        Image.fromarray(rgba).save(path, format="PNG")
    except (OSError, ValueError):
        if os.path.isfile(path):
            os.remove(path)
        raise

    logger.debug(f"Saved image: {path}")
