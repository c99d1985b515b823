"""Bounded-concurrency async job runner with completion-order results."""

from .errors import ConcurrentPullError, JobError, JobPoolError, StuckSchedulerError
from .parallel import BatchResult, JobPool, run_batch, run_batch_sync, run_jobs
from .types import IndexedResult, JobState

__all__ = [
    "JobPool",
    "run_jobs",
    "run_batch",
    "run_batch_sync",
    "BatchResult",
    "IndexedResult",
    "JobState",
    "JobPoolError",
    "JobError",
    "StuckSchedulerError",
    "ConcurrentPullError",
]
