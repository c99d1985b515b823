"""
Batch helpers on top of :class:`JobPool`.

For callers that want every result at once rather than a stream:
    - Progress reporting through a callback and periodic log lines
    - Timing and throughput statistics
    - A synchronous wrapper for non-async code

Failures are not collected per item: the first job error or stuck scheduler
ends the batch and propagates to the caller.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Iterable, List, Optional

from ..types import IndexedResult
from .runner import CandidatePredicate, JobFn, JobPool

logger = logging.getLogger(__name__)


@dataclass
class BatchResult:
    """Aggregated result from running a whole batch.

    Attributes:
        results: Individual results in completion order
        total_time_ms: Total wall-clock time
        throughput_rps: Jobs completed per second
    """

    results: List[IndexedResult]
    total_time_ms: float
    throughput_rps: float

    @property
    def completed_count(self) -> int:
        return len(self.results)

    def in_input_order(self) -> List[Any]:
        """Result values ordered by the index of their input."""
        return [item.result for item in sorted(self.results, key=lambda r: r.index)]


async def run_batch(
    job: JobFn,
    inputs: Iterable[Any],
    max_at_once: int = 10,
    is_candidate_acceptable: Optional[CandidatePredicate] = None,
    progress_callback: Optional[Callable[[int, int], None]] = None,
    progress_interval: int = 10,
) -> BatchResult:
    """
    Run a job over all inputs and collect every result.

    Args:
        job: Async function called as ``job(input, index)``
        inputs: Inputs to process
        max_at_once: Maximum concurrent jobs
        is_candidate_acceptable: Optional admission predicate
        progress_callback: Optional callback(done, total) after each result
        progress_interval: Log progress every N results (0 disables)

    Returns:
        BatchResult with all results and statistics

    Raises:
        JobError: If any job fails
        StuckSchedulerError: If the predicate leaves inputs unprocessable
    """
    pool = JobPool(job, max_at_once, inputs, is_candidate_acceptable)
    total = pool.total

    start_time = time.time()
    logger.info("Starting batch: %d inputs, %d concurrent", total, max_at_once)

    results: List[IndexedResult] = []
    async for item in pool:
        results.append(item)
        done = len(results)
        if progress_interval and done % progress_interval == 0:
            logger.info(
                "Progress: %d/%d (%.1f%%)",
                done,
                total,
                100 * done / total,
            )
        if progress_callback:
            progress_callback(done, total)

    total_time_ms = (time.time() - start_time) * 1000
    throughput_rps = len(results) / (total_time_ms / 1000) if total_time_ms > 0 else 0.0

    logger.info(
        "Batch complete: %d jobs, %.1fs total, %.2f RPS",
        len(results),
        total_time_ms / 1000,
        throughput_rps,
    )

    return BatchResult(
        results=results,
        total_time_ms=total_time_ms,
        throughput_rps=throughput_rps,
    )


def run_batch_sync(
    job: JobFn,
    inputs: Iterable[Any],
    max_at_once: int = 10,
    is_candidate_acceptable: Optional[CandidatePredicate] = None,
) -> BatchResult:
    """
    Synchronous wrapper for batch processing.

    Example:
        >>> from jobpool.parallel import run_batch_sync
        >>> batch = run_batch_sync(fetch, urls, max_at_once=10)
    """
    return asyncio.run(
        run_batch(
            job,
            inputs,
            max_at_once=max_at_once,
            is_candidate_acceptable=is_candidate_acceptable,
        )
    )
