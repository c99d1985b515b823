"""
Bounded concurrent job execution.

Key Components:
    - JobPool: Async iterator running at most N jobs at once, yielding
      results in completion order
    - ResultFunnel: Single-consumer handoff between completions and pulls
    - run_batch: Collects a whole pool's results with progress reporting

Example:
    >>> from jobpool.parallel import run_jobs
    >>> async for item in run_jobs(download, 4, urls):
    ...     print(item.index, item.result)
"""

from .runner import JobPool, run_jobs
from .funnel import END, ResultFunnel
from .batch import BatchResult, run_batch, run_batch_sync

__all__ = [
    "JobPool",
    "run_jobs",
    "ResultFunnel",
    "END",
    "BatchResult",
    "run_batch",
    "run_batch_sync",
]
