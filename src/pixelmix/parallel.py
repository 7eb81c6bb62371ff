"""
Data-parallel fan-out over contiguous index bands.

Every band is handed to exactly one worker, so a worker that only writes the
output cells of its own band never races another one.
"""

import concurrent.futures
import logging
import os
from typing import Callable, List, Optional, Tuple, TypeVar

logger = logging.getLogger(__name__)

R = TypeVar("R")

Band = Tuple[int, int]


def default_workers() -> int:
    return os.cpu_count() or 1


def split_bands(length: int, count: int) -> List[Band]:
    """Split ``[0, length)`` into at most ``count`` contiguous bands."""
    if length <= 0:
        return []
    count = max(1, min(count, length))
    size, extra = divmod(length, count)
    bands = []
    start = 0
    for index in range(count):
        stop = start + size + (1 if index < extra else 0)
        bands.append((start, stop))
        start = stop
    return bands


def map_bands(
    fn: Callable[[int, int], R], length: int, workers: Optional[int] = None
) -> List[R]:
    """
    Call ``fn(start, stop)`` for each band of ``[0, length)``.

    :param fn: band function; must not write outside its band.
    :param length: number of rows, columns or pixels to cover.
    :param workers: thread count, default CPU count. ``1`` runs inline.
    :return: band results in band order.
    """
    workers = workers or default_workers()
    bands = split_bands(length, workers)
    if workers == 1 or len(bands) <= 1:
        return [fn(start, stop) for start, stop in bands]

    logger.debug("Mapping %d bands over %d workers" % (len(bands), workers))
    with concurrent.futures.ThreadPoolExecutor(max_workers=workers) as executor:
        futures = [executor.submit(fn, start, stop) for start, stop in bands]
        return [future.result() for future in futures]
