"""
Result Funnel for job pools.

Bridges job completions (producer side, arbitrary order and timing) with a
consumer that pulls one result at a time.

Architecture:
    - An unbounded buffer for when the producer is ahead of the consumer
    - A single pending-pull slot (an ``asyncio.Future``) for when the
      consumer is ahead of the producer
    - A terminal entry (error or end-of-stream) seals the funnel; nothing
      put afterwards is delivered

There is no backpressure: the buffer grows for as long as the consumer
does not pull.
"""

from __future__ import annotations

import asyncio
from collections import deque
from typing import Any, Deque, Generic, Optional, Tuple, TypeVar

from ..errors import ConcurrentPullError

T = TypeVar("T")

END: Any = object()
"""Sentinel returned by :meth:`ResultFunnel.get` once the stream is over."""

_VALUE = "value"
_ERROR = "error"
_END = "end"

_Entry = Tuple[str, Any]


class ResultFunnel(Generic[T]):
    """
    Single-consumer handoff between job completions and result pulls.

    Example:
        >>> funnel = ResultFunnel()
        >>> funnel.put(1)
        True
        >>> funnel.close()
        True
        >>> await funnel.get()
        1
        >>> await funnel.get() is END
        True
    """

    def __init__(self) -> None:
        self._buffer: Deque[_Entry] = deque()
        self._waiter: Optional[asyncio.Future] = None
        # True once fail() or close() was called
        self._sealed = False
        # True once the terminal entry has been handed to the consumer
        self._exhausted = False

    @property
    def sealed(self) -> bool:
        """Whether the producer side has been terminated."""
        return self._sealed

    @property
    def exhausted(self) -> bool:
        """Whether the consumer has already received the terminal entry."""
        return self._exhausted

    @property
    def buffered(self) -> int:
        """Number of entries waiting to be pulled."""
        return len(self._buffer)

    def put(self, value: T) -> bool:
        """Deliver a result. Returns False if the funnel was already sealed."""
        if self._sealed:
            return False
        self._deliver((_VALUE, value))
        return True

    def fail(self, exc: BaseException) -> bool:
        """Deliver a terminal error and seal the funnel."""
        if self._sealed:
            return False
        self._sealed = True
        self._deliver((_ERROR, exc))
        return True

    def close(self) -> bool:
        """Signal normal end of stream and seal the funnel."""
        if self._sealed:
            return False
        self._sealed = True
        self._deliver((_END, None))
        return True

    async def get(self) -> T:
        """
        Pull the oldest undelivered entry, waiting if there is none yet.

        Returns:
            The next value, or :data:`END` once the stream has finished

        Raises:
            ConcurrentPullError: If another ``get()`` is already waiting
            BaseException: Whatever was passed to :meth:`fail`, exactly once
        """
        if self._waiter is not None:
            raise ConcurrentPullError(
                "A pull is already pending on this stream; "
                "results must be consumed one at a time"
            )
        if self._buffer:
            return self._unwrap(self._buffer.popleft())
        if self._exhausted:
            return END

        waiter = asyncio.get_running_loop().create_future()
        self._waiter = waiter
        try:
            entry = await waiter
        except asyncio.CancelledError:
            # The entry may have been handed over right before cancellation
            if waiter.done() and not waiter.cancelled():
                self._buffer.appendleft(waiter.result())
            raise
        finally:
            if self._waiter is waiter:
                self._waiter = None
        return self._unwrap(entry)

    def _deliver(self, entry: _Entry) -> None:
        waiter = self._waiter
        if waiter is not None and not waiter.done():
            waiter.set_result(entry)
        else:
            self._buffer.append(entry)

    def _unwrap(self, entry: _Entry) -> T:
        kind, payload = entry
        if kind == _VALUE:
            return payload
        self._exhausted = True
        self._buffer.clear()
        if kind == _ERROR:
            raise payload
        return END
