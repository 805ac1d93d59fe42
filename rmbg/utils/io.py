"""
Image I/O and path utilities
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Iterable, List, Optional, Union

import cv2
import numpy as np
from PIL import Image, ImageOps

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

TIMESTAMP_FORMAT = "%Y.%m.%d-%H.%M.%S"


def resolve_input_files(tokens: Optional[Iterable[PathLike]]) -> List[Path]:
    """
    Turn raw path arguments into a de-duplicated list of existing files

    Args:
        tokens: Paths as given by the user

    Returns:
        Existing regular files, first occurrence order, one entry per
        canonical path
    """
    files: List[Path] = []
    seen = set()

    for token in tokens or []:
        path = Path(token)
        if not path.is_file():
            logger.debug(f"Skipping missing or non-file input: {token}")
            continue

        canonical = path.resolve()
        if canonical in seen:
            logger.debug(f"Skipping duplicate input: {token}")
            continue

        seen.add(canonical)
        files.append(path)

    return files


def read_image(image_path: PathLike) -> Optional[np.ndarray]:
    """
    Read an image as 3-channel BGR

    Args:
        image_path: Path to image file

    Returns:
        BGR image array or None if the file cannot be decoded
    """
    try:
        with Image.open(image_path) as pil_img:
            # Decode every byte now; truncated data raises here
            pil_img.load()
            pil_img = ImageOps.exif_transpose(pil_img)
            rgb = np.asarray(pil_img.convert('RGB'))
    except (OSError, SyntaxError, ValueError, Image.DecompressionBombError) as e:
        logger.debug(f"Failed to decode {image_path}: {e}")
        return None

    img_bgr = cv2.cvtColor(rgb, cv2.COLOR_RGB2BGR)

    logger.debug(f"Loaded image: {image_path}, shape: {img_bgr.shape}")
    return img_bgr


def validate_image(img: Optional[np.ndarray]) -> bool:
    """
    Validate image array

    Args:
        img: Image array to validate

    Returns:
        True if img is a non-empty 3-channel uint8 image
    """
    if img is None:
        return False

    if img.size == 0:
        logger.warning("Image has zero size")
        return False

    if img.ndim != 3 or img.shape[2] != 3 or img.dtype != np.uint8:
        logger.warning(f"Invalid image shape: {img.shape}, dtype: {img.dtype}")
        return False

    return True


def format_timestamp(now: datetime) -> str:
    """``2026.10.18-14.03.07.042``: local time with milliseconds."""
    return f"{now.strftime(TIMESTAMP_FORMAT)}.{now.microsecond // 1000:03d}"


def output_path_for(input_path: PathLike, now: Optional[datetime] = None) -> Path:
    """
    Generate the output path next to the input file

    The output keeps the full input name and appends a timestamp, so
    ``cat.jpg`` becomes ``cat.jpg-2026.10.18-14.03.07.042.png``.

    Args:
        input_path: Input file path
        now: Timestamp to embed (defaults to the current local time)

    Returns:
        Output file path
    """
    if now is None:
        now = datetime.now()
    return Path(f"{input_path}-{format_timestamp(now)}.png")
