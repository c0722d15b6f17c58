"""
Order-preserving evaluation of per-observation functions.

Every observation of a formula call is independent, so a long batch can be
split into contiguous chunks and evaluated on a thread pool.  Results are
reassembled in the original order; with one worker (the default) the
function is simply mapped over the observations.

Usage:
    from pyegfr.parallel import map_observations

    coeffs = map_observations(creatinine_coefficient, ages, sexes, workers=4)
"""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Any, Callable, List, Optional, Sequence

from .config import resolve_defaults

logger = logging.getLogger(__name__)


def _run_chunk(func: Callable[..., Any], columns: Sequence[Sequence[Any]],
               start: int, stop: int) -> List[Any]:
    return [func(*row) for row in zip(*(col[start:stop] for col in columns))]


def map_observations(
    func: Callable[..., Any],
    *columns: Sequence[Any],
    workers: Optional[int] = None,
    chunk_size: Optional[int] = None,
) -> List[Any]:
    """
    Apply ``func`` to each observation of the zipped columns.

    Args:
        func: Pure function taking one value from each column
        *columns: Equal-length sequences, one per argument of ``func``
        workers: Thread count (``PYEGFR_WORKERS`` / 1 when omitted)
        chunk_size: Observations per task (``PYEGFR_CHUNK_SIZE`` when omitted)

    Returns:
        List of results in observation order
    """
    if not columns:
        return []

    n = len(columns[0])
    settings = resolve_defaults().as_map_kwargs()
    workers = workers or settings["workers"]
    chunk_size = chunk_size or settings["chunk_size"]

    if workers <= 1 or n <= chunk_size:
        return _run_chunk(func, columns, 0, n)

    bounds = [(start, min(start + chunk_size, n)) for start in range(0, n, chunk_size)]
    logger.debug("Evaluating %d observations in %d chunks on %d workers",
                 n, len(bounds), workers)

    parts: List[Optional[List[Any]]] = [None] * len(bounds)
    with ThreadPoolExecutor(max_workers=workers) as executor:
        future_map = {
            executor.submit(_run_chunk, func, columns, start, stop): idx
            for idx, (start, stop) in enumerate(bounds)
        }
        for future in as_completed(future_map):
            parts[future_map[future]] = future.result()

    results: List[Any] = []
    for part in parts:
        results.extend(part)
    return results
