"""
Models package containing core image processing algorithms
"""

from .edge_detect import detect_edges
from .contour_mask import build_mask, find_contours
from .alpha_composite import apply_mask

__all__ = [
    'detect_edges',
    'build_mask',
    'find_contours',
    'apply_mask'
]
