"""Exceptions raised by job pools."""

from __future__ import annotations

from typing import Iterable


class JobPoolError(RuntimeError):
    """Base class for errors surfaced through a job pool's result stream."""


class JobError(JobPoolError):
    """
    A job raised instead of returning a result.

    The original exception is available as ``cause`` and is chained as
    ``__cause__`` so tracebacks show where the job actually failed.
    """

    def __init__(self, index: int, cause: BaseException) -> None:
        super().__init__(f"Job for input {index} failed: {cause!r}")
        self.index = index
        self.cause = cause
        self.__cause__ = cause


class StuckSchedulerError(JobPoolError):
    """
    Inputs remain but nothing is running and the admission predicate rejects
    every one of them, so no further progress is possible.
    """

    def __init__(self, indices: Iterable[int], has_predicate: bool = True) -> None:
        self.indices = tuple(indices)
        count = len(self.indices)
        plural = "" if count == 1 else "s"
        message = f"The job pool is stuck. {count} input{plural} will never be processed!"
        if has_predicate:
            message += "\nMake sure your is_candidate_acceptable predicate is correct!"
        message += (
            f"\nInput{plural} that will not be processed: "
            + ", ".join(str(i) for i in self.indices)
        )
        super().__init__(message)


class ConcurrentPullError(JobPoolError):
    """A second pull was issued while another one was still waiting."""
