"""
Fork-join batch partitioner
"""

import os
import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Callable, List, Optional, Sequence, TypeVar

from rmbg.utils.config import DEFAULT_SPLIT_THRESHOLD

logger = logging.getLogger(__name__)

T = TypeVar('T')
R = TypeVar('R')


def partition(items: Sequence[T],
              process: Callable[[T], R],
              split_threshold: int = DEFAULT_SPLIT_THRESHOLD,
              max_workers: Optional[int] = None) -> List[R]:
    """
    Apply ``process`` to every item with recursive fork-join parallelism

    The index range [0, len(items)) is bisected at its midpoint until a
    range holds at most ``split_threshold`` items; such a leaf range is
    processed sequentially.  The bisection runs on the calling thread and
    forks every leaf onto one pool of ``max_workers`` threads; the call
    returns only after all leaves have been joined.  The number of live
    threads is bounded by the pool size, whatever the number of items.

    Args:
        items: Items to process; read-only for the whole run
        process: Called once per item, from an arbitrary worker thread
        split_threshold: Largest range processed without splitting
        max_workers: Concurrent leaf limit (default: CPU count)

    Returns:
        ``process`` results in the order of ``items``

    Raises:
        ValueError: If ``split_threshold`` or ``max_workers`` is < 1
        Exception: The first error ``process`` raised, in item order,
            once every leaf has been joined
    """
    if split_threshold < 1:
        raise ValueError(f"split_threshold must be >= 1, got {split_threshold}")
    if max_workers is None:
        max_workers = os.cpu_count() or 1
    if max_workers < 1:
        raise ValueError(f"max_workers must be >= 1, got {max_workers}")

    results: List[Optional[R]] = [None] * len(items)

    def run_leaf(start: int, end: int) -> None:
        logger.debug(f"Processing range [{start}, {end}) on {threading.current_thread().name}")
        for i in range(start, end):
            results[i] = process(items[i])

    def fork(pool: ThreadPoolExecutor, start: int, end: int) -> List[Future]:
        if end - start > split_threshold:
            mid = (start + end) // 2
            return fork(pool, start, mid) + fork(pool, mid, end)
        if end == start:
            return []
        return [pool.submit(run_leaf, start, end)]

    with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="rmbg") as pool:
        leaves = fork(pool, 0, len(items))
        wait(leaves)

    # Every leaf has finished; report the first failure in index order
    for leaf in leaves:
        leaf.result()

    return results  # type: ignore[return-value]
