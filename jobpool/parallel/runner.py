"""
Bounded Job Runner.

Runs an async job for each input with at most ``max_at_once`` jobs in flight
and exposes the outcomes as an async iterator, in completion order.

Architecture:
    - Admission: scans pending inputs in input order, optionally vetoed by a
      caller predicate that sees the currently running indices
    - Launch: one ``asyncio.Task`` per admitted input; completion re-runs
      admission before the result is handed downstream
    - Delivery: a :class:`ResultFunnel` buffers results the consumer has not
      pulled yet
    - Deadlock detection: pending inputs with nothing running end the stream
      with :class:`StuckSchedulerError`

All bookkeeping runs on the event loop between job suspension points, so no
locks are needed. There is no cancellation: once launched, a job always runs
to completion, even after the stream has terminated.
"""

from __future__ import annotations

import asyncio
import functools
import logging
from typing import (
    AbstractSet,
    Any,
    Awaitable,
    Callable,
    Generic,
    Iterable,
    List,
    Optional,
    Set,
    Tuple,
    TypeVar,
)

from ..errors import JobError, StuckSchedulerError
from ..types import IndexedResult, JobState
from .funnel import END, ResultFunnel

logger = logging.getLogger(__name__)

InputT = TypeVar("InputT")
ResultT = TypeVar("ResultT")

JobFn = Callable[[InputT, int], Awaitable[ResultT]]
CandidatePredicate = Callable[[int, AbstractSet[int]], bool]


class JobPool(Generic[InputT, ResultT]):
    """
    Async iterator over the results of running ``job`` on every input.

    Example:
        >>> async def double(value, index):
        ...     await asyncio.sleep(value / 100)
        ...     return value * 2
        >>> async for item in JobPool(double, 2, [10, 20, 30]):
        ...     print(item.index, item.result)

    Admission predicate:
        ``is_candidate_acceptable(index, running)`` is asked before each
        launch. Returning False leaves the input pending; it is asked again
        on every later admission pass, since the answer may depend on which
        inputs are running.

    Thread Safety:
        Not thread-safe. Create and consume the pool on a single event loop,
        and pull one result at a time.
    """

    def __init__(
        self,
        job: JobFn,
        max_at_once: int,
        inputs: Iterable[InputT],
        is_candidate_acceptable: Optional[CandidatePredicate] = None,
    ) -> None:
        """
        Create the pool and, when an event loop is running, start admitting.

        Args:
            job: Async function called as ``job(input, index)``
            max_at_once: Maximum number of jobs running at the same time
            inputs: Inputs to process; identified by position from here on
            is_candidate_acceptable: Optional ``(index, running) -> bool``
                veto over starting a specific input

        Raises:
            TypeError: If job is not callable
            ValueError: If max_at_once is less than 1
        """
        if not callable(job):
            raise TypeError(f"job must be callable, got {type(job).__name__}")
        if max_at_once < 1:
            raise ValueError(f"max_at_once must be at least 1, got {max_at_once}")

        self._job = job
        self._max_at_once = max_at_once
        self._inputs: List[InputT] = list(inputs)
        self._is_candidate_acceptable = is_candidate_acceptable

        self._states: List[JobState] = [JobState.PENDING] * len(self._inputs)
        self._pending: List[int] = list(range(len(self._inputs)))
        self._running: Set[int] = set()
        self._completed = 0

        self._funnel: ResultFunnel[IndexedResult[ResultT]] = ResultFunnel()
        # Keeps in-flight tasks referenced until they finish
        self._tasks: Set[asyncio.Task] = set()
        self._started = False

        logger.info(
            "JobPool created: %d inputs, max_at_once=%d, predicate=%s",
            len(self._inputs),
            max_at_once,
            "yes" if is_candidate_acceptable else "no",
        )

        if not self._inputs:
            self._started = True
            self._funnel.close()
            return

        try:
            asyncio.get_running_loop()
        except RuntimeError:
            # Started by the first pull instead
            return
        self._start()

    @property
    def total(self) -> int:
        """Number of inputs."""
        return len(self._inputs)

    @property
    def completed_count(self) -> int:
        """Number of jobs that finished successfully."""
        return self._completed

    @property
    def running(self) -> frozenset:
        """Indices of jobs currently in flight."""
        return frozenset(self._running)

    @property
    def pending(self) -> Tuple[int, ...]:
        """Indices not yet started, in input order."""
        return tuple(self._pending)

    @property
    def finished(self) -> bool:
        """Whether the consumer has received the end of stream or an error."""
        return self._funnel.exhausted

    def state_of(self, index: int) -> JobState:
        """Lifecycle state of the input at ``index``."""
        return self._states[index]

    def __aiter__(self) -> "JobPool[InputT, ResultT]":
        return self

    async def __anext__(self) -> IndexedResult[ResultT]:
        if not self._started:
            self._start()
        item = await self._funnel.get()
        if item is END:
            raise StopAsyncIteration
        return item

    def _start(self) -> None:
        self._started = True
        stuck = self._fill_slots()
        if stuck:
            self._report_stuck(stuck)

    def _fill_slots(self) -> Tuple[int, ...]:
        """
        Launch acceptable pending inputs until every slot is taken.

        Returns:
            The pending indices if nothing is running afterwards (the pool
            is stuck), otherwise an empty tuple
        """
        if self._funnel.sealed:
            return ()

        position = 0
        while position < len(self._pending) and len(self._running) < self._max_at_once:
            index = self._pending[position]
            try:
                acceptable = self._accepts(index)
            except Exception as exc:
                logger.error("Admission predicate raised for input %d: %s", index, exc)
                self._funnel.fail(exc)
                return ()
            if not acceptable:
                position += 1
                continue
            del self._pending[position]
            self._launch(index)
            # Launching changed the running set, so earlier rejections may no longer hold
            position = 0

        if self._pending and not self._running:
            return tuple(self._pending)
        return ()

    def _accepts(self, index: int) -> bool:
        if self._is_candidate_acceptable is None:
            return True
        return bool(self._is_candidate_acceptable(index, frozenset(self._running)))

    def _launch(self, index: int) -> None:
        self._states[index] = JobState.RUNNING
        self._running.add(index)
        task = asyncio.ensure_future(self._invoke(index))
        self._tasks.add(task)
        task.add_done_callback(functools.partial(self._on_job_done, index))
        logger.debug(
            "Launched job %d (%d running, %d pending)",
            index,
            len(self._running),
            len(self._pending),
        )

    async def _invoke(self, index: int) -> Any:
        return await self._job(self._inputs[index], index)

    def _on_job_done(self, index: int, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        self._running.discard(index)

        if task.cancelled():
            error: Optional[BaseException] = asyncio.CancelledError()
        else:
            error = task.exception()

        if error is None:
            self._states[index] = JobState.COMPLETED
            self._completed += 1
        else:
            self._states[index] = JobState.FAILED

        if self._funnel.sealed:
            logger.debug(
                "Discarding outcome of job %d (%s): stream already terminated",
                index,
                self._states[index].value,
            )
            return

        if error is not None:
            logger.warning("Job %d failed: %s", index, error)
            self._funnel.fail(JobError(index, error))
            return

        stuck = self._fill_slots()
        self._funnel.put(IndexedResult(index, task.result()))

        if self._completed == len(self._inputs):
            logger.info("JobPool finished: %d jobs completed", self._completed)
            self._funnel.close()
        elif stuck:
            self._report_stuck(stuck)

    def _report_stuck(self, indices: Tuple[int, ...]) -> None:
        error = StuckSchedulerError(
            indices, has_predicate=self._is_candidate_acceptable is not None
        )
        logger.error("%s", error)
        self._funnel.fail(error)


def run_jobs(
    job: JobFn,
    max_at_once: int,
    inputs: Iterable[InputT],
    is_candidate_acceptable: Optional[CandidatePredicate] = None,
) -> JobPool[InputT, ResultT]:
    """
    Run ``job`` for each input, at most ``max_at_once`` at a time.

    Args:
        job: Async function called as ``job(input, index)``
        max_at_once: Concurrency cap
        inputs: Inputs to process
        is_candidate_acceptable: Optional ``(index, running) -> bool`` veto

    Returns:
        A :class:`JobPool` yielding :class:`IndexedResult` in completion order

    Example:
        >>> async for item in run_jobs(fetch, 5, urls):
        ...     print(urls[item.index], item.result)
    """
    return JobPool(job, max_at_once, inputs, is_candidate_acceptable)
