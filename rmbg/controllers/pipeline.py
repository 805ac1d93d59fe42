"""
Main processing pipeline controller
"""

import os
import time
import logging
import traceback
from dataclasses import dataclass
from enum import Enum
from functools import partial
from pathlib import Path
from typing import List, Optional, Sequence, Union

from rmbg.utils.io import read_image, validate_image, output_path_for
from rmbg.models.edge_detect import detect_edges
from rmbg.models.contour_mask import build_mask
from rmbg.models.alpha_composite import apply_mask
from rmbg.views.writers import save_rgba
from rmbg.controllers.partition import partition, DEFAULT_SPLIT_THRESHOLD

logger = logging.getLogger(__name__)


class ProcessStatus(Enum):
    OK = "ok"
    UNREADABLE = "unreadable-input"
    UNWRITABLE = "unwritable-output"


@dataclass(frozen=True)
class ProcessResult:
    """Outcome of running the pipeline on one file."""
    source: Path
    status: ProcessStatus
    output: Optional[Path] = None
    reason: str = ""
    elapsed: float = 0.0

    @property
    def ok(self) -> bool:
        return self.status is ProcessStatus.OK


def run_one(path: Union[str, Path], low: float, high: float) -> ProcessResult:
    """
    Remove the background of a single image

    Reads the image, builds its contour mask, and writes
    ``<path>-<timestamp>.png`` with the mask as transparency.  Decode and
    write failures are reported in the result rather than raised.

    Args:
        path: Path to input image
        low: Lower Canny threshold
        high: Upper Canny threshold

    Returns:
        ProcessResult describing the outcome
    """
    start_time = time.time()
    path = Path(path)

    img_bgr = read_image(path)
    if not validate_image(img_bgr):
        return ProcessResult(path, ProcessStatus.UNREADABLE,
                             reason="cannot decode image",
                             elapsed=time.time() - start_time)

    edges = detect_edges(img_bgr, low, high)
    mask = build_mask(edges)
    bgra = apply_mask(img_bgr, mask)

    out_path = output_path_for(path)
    try:
        save_rgba(out_path, bgra)
    except (OSError, ValueError) as e:
        logger.debug(traceback.format_exc())
        return ProcessResult(path, ProcessStatus.UNWRITABLE,
                             reason=f"cannot write {out_path}: {e}",
                             elapsed=time.time() - start_time)

    return ProcessResult(path, ProcessStatus.OK, output=out_path,
                         elapsed=time.time() - start_time)


def _run_and_log(path: Path, low: float, high: float) -> ProcessResult:
    result = run_one(path, low, high)
    filename = os.path.basename(path)

    if result.ok:
        logger.info(f"Saved {result.output} ({result.elapsed:.2f}s)")
    else:
        logger.error(f"Skipped {filename}: {result.status.value}, {result.reason}")

    return result


def remove_backgrounds(files: Sequence[Union[str, Path]],
                       low: float,
                       high: float,
                       split_threshold: int = DEFAULT_SPLIT_THRESHOLD,
                       max_workers: Optional[int] = None) -> None:
    """
    Process a batch of images, blocking until every file is done

    Failed files are logged and skipped; they never stop the rest of
    the batch.

    Args:
        files: Resolved, de-duplicated input files
        low: Lower Canny threshold
        high: Upper Canny threshold
        split_threshold: Largest range processed without splitting
        max_workers: Concurrent leaf limit (default: CPU count)
    """
    start_time = time.time()
    results = run_batch(files, low, high, split_threshold, max_workers)
    wall_time = time.time() - start_time

    successful = sum(1 for r in results if r.ok)
    skipped = len(results) - successful
    total_time = sum(r.elapsed for r in results)

    logger.info("=" * 60)
    logger.info("Batch Processing Summary")
    logger.info("=" * 60)
    logger.info(f"Total images: {len(results)}")
    logger.info(f"Successful: {successful}")
    logger.info(f"Skipped: {skipped}")
    logger.info(f"Wall time: {wall_time:.2f} seconds")
    if results:
        logger.info(f"Average time: {total_time / len(results):.2f} seconds/image")
    logger.info("=" * 60)


def run_batch(files: Sequence[Union[str, Path]],
              low: float,
              high: float,
              split_threshold: int = DEFAULT_SPLIT_THRESHOLD,
              max_workers: Optional[int] = None) -> List[ProcessResult]:
    """
    Run the pipeline over all files with the fork-join partitioner

    Returns:
        One ProcessResult per input, in input order
    """
    paths = [Path(f) for f in files]
    logger.info(f"Processing {len(paths)} images with thresholds "
                f"low={low}, high={high}, split threshold={split_threshold}")

    return partition(paths, partial(_run_and_log, low=low, high=high),
                     split_threshold=split_threshold, max_workers=max_workers)
