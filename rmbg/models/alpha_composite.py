"""
Merge a color image with a binary mask into a BGRA image
"""

import numpy as np


def apply_mask(img_bgr: np.ndarray, mask: np.ndarray) -> np.ndarray:
    """
    Attach a mask as the transparency channel of an image

    Color channels are copied unchanged; alpha is the mask value
    itself, so 0 is fully transparent and 255 fully opaque.

    Args:
        img_bgr: Source BGR image (H, W, 3), uint8
        mask: Single-channel mask (H, W), uint8

    Returns:
        BGRA image (H, W, 4), uint8
    """
    if img_bgr.ndim != 3 or img_bgr.shape[2] != 3:
        raise ValueError(f"Expected HxWx3 image, got shape {img_bgr.shape}")
    if mask.ndim != 2 or mask.shape != img_bgr.shape[:2]:
        raise ValueError(f"Mask shape {mask.shape} does not match image {img_bgr.shape[:2]}")

    bgra = np.empty(img_bgr.shape[:2] + (4,), dtype=np.uint8)
    bgra[:, :, :3] = img_bgr
    bgra[:, :, 3] = mask
    return bgra
